from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class RegisterIn(BaseModel):
    name: str = Field(max_length=120)
    email: str = Field(max_length=254)
    password: str = Field(max_length=128)
    company: str | None = Field(default=None, max_length=160)
    phone: str | None = Field(default=None, max_length=40)


class LoginIn(BaseModel):
    email: str
    password: str


class UserOut(BaseModel):
    id: int
    email: str
    name: str
    role: str
    company: str | None = None
    phone: str | None = None
    plan: str
    subscription_status: str
    subscription_expiry: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class LoginOut(BaseModel):
    user: UserOut
    token: str
    token_type: str = "bearer"
