from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

from foodcity.cart.models import Customization


class AddonBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1)
    price: float = Field(..., ge=0)
    image_url: Optional[str] = None
    is_veg: bool = False
    is_available: bool = True
    is_customizable: bool = False
    customizable_options: List[Customization] = Field(default_factory=list)


class AddonCreate(AddonBase):
    pass


class AddonUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    image_url: Optional[str] = None
    is_veg: Optional[bool] = None
    is_available: Optional[bool] = None
    is_customizable: Optional[bool] = None
    customizable_options: Optional[List[Customization]] = None


class AddonResponse(AddonBase):
    id: int
    rating: Optional[float] = None
    rating_count: Optional[int] = None
    created_at: datetime

    class Config:
        from_attributes = True
