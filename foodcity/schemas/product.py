from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from datetime import datetime

from foodcity.cart.models import Customization
from foodcity.models.product import FoodCategory


class ProductBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1)
    price: Optional[float] = Field(None, ge=0)
    discounted_price: Optional[float] = Field(None, ge=0)
    category: FoodCategory
    image_url: Optional[str] = None
    is_available: bool = True
    is_best_seller: bool = False
    is_veg: bool = True
    spicy_level: int = Field(default=0, ge=0, le=3)
    prep_time: str = "30 min"
    is_customizable: bool = False
    customizable_options: List[Customization] = Field(default_factory=list)


class ProductCreate(ProductBase):
    slug: Optional[str] = None

    @field_validator("discounted_price")
    @classmethod
    def validate_discounted_price(cls, value, info):
        price = info.data.get("price")
        if value is not None and price is not None and value > price:
            raise ValueError("Discounted price cannot exceed price")
        return value


class ProductUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    discounted_price: Optional[float] = Field(None, ge=0)
    category: Optional[FoodCategory] = None
    image_url: Optional[str] = None
    is_available: Optional[bool] = None
    is_best_seller: Optional[bool] = None
    is_veg: Optional[bool] = None
    spicy_level: Optional[int] = Field(None, ge=0, le=3)
    prep_time: Optional[str] = None
    is_customizable: Optional[bool] = None
    customizable_options: Optional[List[Customization]] = None


class ProductResponse(ProductBase):
    id: int
    slug: str
    rating: float
    rating_count: int
    discount_percentage: int
    created_at: datetime

    class Config:
        from_attributes = True
