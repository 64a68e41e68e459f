from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, AliasChoices, field_validator

from barulogix.schemas.common import Pagination


class PackageIn(BaseModel):
    # sin tipar: los errores por paquete se reportan en el resultado, no como 400
    tracking: Any = None
    value: Any = None


class DeliveryImportIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    conductor: str
    type: str
    delivery_date: str = Field(validation_alias=AliasChoices("deliveryDate", "delivery_date"))
    packages: list[PackageIn]


class ImportResult(BaseModel):
    created: int
    duplicates: int
    errors: int
    duplicate_trackings: list[str] = Field(default_factory=list)
    error_messages: list[str] = Field(default_factory=list)


class StatusUpdateIn(BaseModel):
    trackings: list[str]
    status: int
    conductor: str | None = None


class UpdatedOut(BaseModel):
    updated: int


class DeletedOut(BaseModel):
    deleted: int


class DeliveryOut(BaseModel):
    id: int
    tracking: str
    conductor_id: int
    conductor: str
    type: str
    status: int
    delivery_date: datetime
    value: float
    notes: str | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_validator("conductor", mode="before")
    @classmethod
    def _conductor_name(cls, v):
        return getattr(v, "name", v)


class DeliveryPage(BaseModel):
    items: list[DeliveryOut]
    pagination: Pagination
