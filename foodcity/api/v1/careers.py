from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from foodcity.core.rate_limiter import limiter
from foodcity.db.session import get_db
from foodcity.models.job_application import ExperienceRange, JobPosition, NoticePeriod
from foodcity.schemas.job_application import JobApplicationCreate
from foodcity.services.job_application_service import JobApplicationService
from foodcity.utils.response import success

router = APIRouter()


@router.get("/positions")
def get_open_positions():
    """Form choices for the careers page"""
    return success(
        data={
            "positions": [position.value for position in JobPosition],
            "experience": [option.value for option in ExperienceRange],
            "notice_periods": [option.value for option in NoticePeriod],
        }
    )


@router.post("/applications", status_code=status.HTTP_201_CREATED)
@limiter.limit("5/minute")
def submit_job_application(
    request: Request,
    application_data: JobApplicationCreate,
    db: Session = Depends(get_db),
):
    """Apply for a position. No account needed."""
    application = JobApplicationService.submit(db, application_data)
    return success(
        data={
            "id": application.id,
            "position": application.position,
            "status": application.status,
        },
        message="Application submitted successfully",
    )
