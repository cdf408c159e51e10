from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional
from datetime import datetime
import re

TEN_DIGITS = re.compile(r"^\d{10}$")


def _check_number(v: Optional[str]) -> Optional[str]:
    if v is not None and not TEN_DIGITS.match(v):
        raise ValueError(f"{v} is not a valid phone number")
    return v


class EmployeeBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    phone: str
    whatsapp: str
    address: str = Field(..., min_length=1)
    avatar_url: Optional[str] = Field(None, max_length=500)

    @field_validator("name", "address")
    @classmethod
    def strip_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Field cannot be blank")
        return v

    @field_validator("phone", "whatsapp")
    @classmethod
    def validate_number(cls, v):
        return _check_number(v.strip())


class EmployeeCreate(EmployeeBase):
    pass


class EmployeeUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    whatsapp: Optional[str] = None
    address: Optional[str] = Field(None, min_length=1)
    avatar_url: Optional[str] = Field(None, max_length=500)

    @field_validator("phone", "whatsapp")
    @classmethod
    def validate_number(cls, v):
        return _check_number(v.strip() if v else v)


class EmployeeResponse(EmployeeBase):
    id: int
    created_at: datetime

    class Config:
        from_attributes = True
