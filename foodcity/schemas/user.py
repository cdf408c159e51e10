import re
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from foodcity.models.user import UserRole

INDIAN_MOBILE = re.compile(r"^[6-9]\d{9}$")


class UserCreate(BaseModel):
    email: EmailStr
    full_name: str = Field(..., min_length=2, max_length=100)
    phone: Optional[str] = None
    password: str = Field(..., min_length=8)

    @field_validator("password")
    @classmethod
    def password_mixes_letters_and_digits(cls, v: str) -> str:
        if not any(ch.isalpha() for ch in v) or not any(ch.isdigit() for ch in v):
            raise ValueError("Password must contain letters and digits")
        return v

    @field_validator("phone")
    @classmethod
    def phone_is_indian_mobile(cls, v: Optional[str]) -> Optional[str]:
        if v and not INDIAN_MOBILE.match(v):
            raise ValueError("Phone must be a valid Indian mobile number")
        return v


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class UserResponse(BaseModel):
    id: int
    email: EmailStr
    full_name: str
    phone: Optional[str] = None
    role: UserRole
    is_active: bool
    is_blocked: bool = False
    created_at: datetime

    class Config:
        from_attributes = True
