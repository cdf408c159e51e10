from pydantic import BaseModel, Field, field_validator
from typing import Literal, Optional
import re


class AddressBase(BaseModel):
    full_name: str = Field(..., min_length=1, max_length=100)
    phone: str
    address_line1: str = Field(..., min_length=1, max_length=200)
    address_line2: Optional[str] = Field(None, max_length=200)
    landmark: Optional[str] = Field(None, max_length=200)
    city: str = Field(..., min_length=1, max_length=100)
    state: str = Field(..., min_length=1, max_length=100)
    pincode: str
    address_type: Literal["home", "work", "other"] = "home"
    is_default: bool = False

    @field_validator('pincode')
    @classmethod
    def validate_pincode(cls, v):
        if not re.match(r'^\d{6}$', v):
            raise ValueError('Pincode must be 6 digits')
        return v

    @field_validator('phone')
    @classmethod
    def validate_phone(cls, v):
        if not re.match(r'^[6-9]\d{9}$', v):
            raise ValueError('Phone must be a valid Indian mobile number')
        return v


class AddressCreate(AddressBase):
    pass


class AddressResponse(AddressBase):
    id: int
    user_id: int

    class Config:
        from_attributes = True
