from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, AliasChoices


class BootstrapIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    admin_key: str = Field(validation_alias=AliasChoices("adminKey", "admin_key"))


class PaymentIn(BaseModel):
    amount: Decimal = Field(ge=0)
    currency: Literal["COP", "USD"] = "COP"
    payment_method: Literal["PSE", "PayPal", "Nequi", "Card", "Manual"] = "Manual"
    transaction_id: str | None = Field(default=None, max_length=100)


class SubscriptionUpdateIn(BaseModel):
    status: Literal["pending", "trial", "active", "inactive"]
    months: int = Field(default=1, ge=1, le=36)
    plan: Literal["free", "pro", "enterprise"] | None = None
    payment: PaymentIn | None = None
