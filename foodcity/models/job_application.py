from sqlalchemy import Column, Integer, String, DateTime, Enum, ForeignKey, Text, Index
from datetime import datetime
import enum
from foodcity.db.base_class import Base


class JobPosition(str, enum.Enum):
    CHEF = "Chef"
    HELPER = "Semi Comi (Helper)"
    HOUSE_KEEPING = "House Keeping"
    MANAGER = "Manager"
    SALES_PERSON = "Sales Person"
    MARKETING_EXECUTIVE = "Marketing Executive"


class ExperienceRange(str, enum.Enum):
    UNDER_ONE = "0-1 years"
    ONE_TO_THREE = "1-3 years"
    THREE_TO_FIVE = "3-5 years"
    FIVE_TO_TEN = "5-10 years"
    OVER_TEN = "10+ years"


class NoticePeriod(str, enum.Enum):
    IMMEDIATE = "Immediate"
    FIFTEEN_DAYS = "15 days"
    ONE_MONTH = "1 month"
    TWO_MONTHS = "2 months"
    THREE_MONTHS = "3 months"
    LONGER = "More than 3 months"


class ApplicationStatus(str, enum.Enum):
    APPLIED = "Applied"
    UNDER_REVIEW = "Under Review"
    SHORTLISTED = "Shortlisted"
    REJECTED = "Rejected"
    SELECTED = "Selected"


# An applicant may hold only one of these per position at a time.
OPEN_APPLICATION_STATUSES = (
    ApplicationStatus.APPLIED,
    ApplicationStatus.UNDER_REVIEW,
    ApplicationStatus.SHORTLISTED,
)


class JobApplication(Base):
    __tablename__ = "job_applications"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False, index=True)
    phone = Column(String(15), nullable=False)

    position = Column(Enum(JobPosition), nullable=False, index=True)
    experience = Column(Enum(ExperienceRange), nullable=False)
    qualification = Column(String(200), nullable=False)
    current_location = Column(String(100), nullable=False)
    expected_salary = Column(String(50), nullable=False)
    notice_period = Column(Enum(NoticePeriod), nullable=False)
    resume_url = Column(String(500), nullable=False)
    cover_letter = Column(Text, nullable=True)

    status = Column(Enum(ApplicationStatus), default=ApplicationStatus.APPLIED, nullable=False, index=True)
    notes = Column(Text, nullable=True)
    reviewed_at = Column(DateTime, nullable=True)
    reviewed_by = Column(Integer, ForeignKey("users.id"), nullable=True)

    applied_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


Index("ix_job_applications_applied_at", JobApplication.applied_at.desc())
