from datetime import datetime
from typing import List, Optional, Tuple

import structlog
from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from foodcity.core.exceptions import JobApplicationNotFound
from foodcity.models.job_application import (
    OPEN_APPLICATION_STATUSES,
    ApplicationStatus,
    JobApplication,
    JobPosition,
)
from foodcity.schemas.job_application import JobApplicationCreate, JobApplicationStatusUpdate

logger = structlog.get_logger()


class JobApplicationService:

    @staticmethod
    def submit(db: Session, application_in: JobApplicationCreate) -> JobApplication:
        email = application_in.email.lower()
        open_application = db.query(JobApplication.id).filter(
            JobApplication.email == email,
            JobApplication.position == application_in.position,
            JobApplication.status.in_(OPEN_APPLICATION_STATUSES),
        ).first()
        if open_application:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="You have already applied for this position. Please wait for our response.",
            )

        application = JobApplication(
            **application_in.model_dump(exclude={"email"}),
            email=email,
            status=ApplicationStatus.APPLIED,
        )
        db.add(application)
        db.commit()
        db.refresh(application)

        logger.info("job_application_submitted", application_id=application.id, position=application.position.value)
        return application

    @staticmethod
    def list(
        db: Session,
        position: Optional[JobPosition] = None,
        application_status: Optional[ApplicationStatus] = None,
        skip: int = 0,
        limit: int = 20,
    ) -> Tuple[List[JobApplication], int]:
        query = db.query(JobApplication)
        if position:
            query = query.filter(JobApplication.position == position)
        if application_status:
            query = query.filter(JobApplication.status == application_status)

        total = query.count()
        applications = (
            query.order_by(JobApplication.applied_at.desc(), JobApplication.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )
        return applications, total

    @staticmethod
    def get(db: Session, application_id: int) -> JobApplication:
        application = db.query(JobApplication).filter(JobApplication.id == application_id).first()
        if not application:
            raise JobApplicationNotFound()
        return application

    @staticmethod
    def update_status(
        db: Session,
        application_id: int,
        status_update: JobApplicationStatusUpdate,
        reviewer_id: int,
    ) -> JobApplication:
        application = JobApplicationService.get(db, application_id)
        old_status = application.status

        application.status = status_update.status
        if status_update.notes is not None:
            application.notes = status_update.notes
        application.reviewed_at = datetime.utcnow()
        application.reviewed_by = reviewer_id
        db.commit()
        db.refresh(application)

        logger.info(
            "job_application_status_changed",
            application_id=application.id,
            old_status=old_status.value,
            new_status=application.status.value,
            reviewer_id=reviewer_id,
        )
        return application

    @staticmethod
    def delete(db: Session, application_id: int) -> None:
        application = JobApplicationService.get(db, application_id)
        db.delete(application)
        db.commit()
