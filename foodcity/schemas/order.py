from typing import Optional
import uuid

import bleach
from pydantic import BaseModel, Field, field_validator

from foodcity.models.order import OrderPaymentMethod


class OrderCreate(BaseModel):
    address_id: int = Field(..., gt=0)
    payment_method: OrderPaymentMethod = OrderPaymentMethod.ONLINE
    coupon_code: Optional[str] = Field(None, max_length=50)
    customer_notes: Optional[str] = None
    idempotency_key: Optional[str] = Field(None, min_length=36, max_length=64)

    @field_validator("customer_notes")
    @classmethod
    def validate_notes(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        sanitized = bleach.clean(value, tags=[], attributes={}, strip=True).strip()
        if len(sanitized) > 500:
            raise ValueError("Notes too long (max 500 chars)")
        return sanitized

    @field_validator("idempotency_key")
    @classmethod
    def validate_idempotency_key(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        parsed = uuid.UUID(value)
        return str(parsed)


class OrderCancel(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)
