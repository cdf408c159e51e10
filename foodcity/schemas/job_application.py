from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional
from datetime import datetime

from foodcity.models.job_application import ApplicationStatus, ExperienceRange, JobPosition, NoticePeriod


class JobApplicationCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    phone: str = Field(..., pattern=r"^[6-9]\d{9}$")
    position: JobPosition
    experience: ExperienceRange
    qualification: str = Field(..., min_length=1, max_length=200)
    current_location: str = Field(..., min_length=1, max_length=100)
    expected_salary: str = Field(..., min_length=1, max_length=50)
    notice_period: NoticePeriod
    resume_url: str = Field(..., min_length=1, max_length=500)
    cover_letter: Optional[str] = Field(None, max_length=1000)

    @field_validator("resume_url")
    @classmethod
    def resume_must_be_link(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("Resume must be a link to an uploaded file")
        return v


class JobApplicationStatusUpdate(BaseModel):
    status: ApplicationStatus
    notes: Optional[str] = Field(None, max_length=500)


class JobApplicationResponse(BaseModel):
    id: int
    name: str
    email: str
    phone: str
    position: JobPosition
    experience: ExperienceRange
    qualification: str
    current_location: str
    expected_salary: str
    notice_period: NoticePeriod
    resume_url: str
    cover_letter: Optional[str] = None
    status: ApplicationStatus
    notes: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    reviewed_by: Optional[int] = None
    applied_at: datetime

    class Config:
        from_attributes = True
