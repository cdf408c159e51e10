from pydantic import BaseModel, Field
from typing import Optional

from foodcity.cart.models import Customization


class CartItemCreate(BaseModel):
    product_id: int = Field(..., gt=0)
    quantity: int = Field(default=1, ge=1, le=50)
    customization: Optional[Customization] = None


class CartSummaryRequest(BaseModel):
    coupon_code: Optional[str] = Field(None, max_length=50)


class CartItemRef(BaseModel):
    cart_item_id: str = Field(..., min_length=1, max_length=120)


class CartQuantityUpdate(CartItemRef):
    quantity: int = Field(..., ge=0, le=50)
