from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, AliasChoices


class ConductorCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(max_length=120)
    phone: str | None = Field(default=None, max_length=40)
    email: str | None = Field(default=None, max_length=254)
    vehicle_type: str | None = Field(default=None, max_length=40, validation_alias=AliasChoices("vehicle_type", "vehicleType"))
    license_plate: str | None = Field(default=None, max_length=20, validation_alias=AliasChoices("license_plate", "licensePlate"))


class ConductorUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str | None = Field(default=None, max_length=120)
    phone: str | None = Field(default=None, max_length=40)
    email: str | None = Field(default=None, max_length=254)
    vehicle_type: str | None = Field(default=None, max_length=40, validation_alias=AliasChoices("vehicle_type", "vehicleType"))
    license_plate: str | None = Field(default=None, max_length=20, validation_alias=AliasChoices("license_plate", "licensePlate"))


class ConductorOut(BaseModel):
    id: int
    name: str
    phone: str | None = None
    email: str | None = None
    vehicle_type: str | None = None
    license_plate: str | None = None
    is_active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class DeactivateOut(BaseModel):
    id: int
    deleted_deliveries: int
