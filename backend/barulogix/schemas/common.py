from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class Envelope(BaseModel, Generic[T]):
    success: bool = True
    data: T
    message: str | None = None


def ok(data, message: str | None = None) -> dict:
    return {"success": True, "data": data, "message": message}


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int
