from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import datetime


class CompanySettingsUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, pattern=r"^[6-9]\d{9}$")
    address: Optional[str] = None
    logo_url: Optional[str] = Field(None, max_length=500)


class CompanySettingsResponse(BaseModel):
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    logo_url: Optional[str] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
