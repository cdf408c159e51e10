import structlog
from sqlalchemy.orm import Session

from foodcity.models.company import CompanySettings
from foodcity.schemas.company import CompanySettingsUpdate

logger = structlog.get_logger()


def get_company_settings(db: Session) -> CompanySettings:
    """The restaurant profile, created with defaults on first access."""
    settings_row = db.query(CompanySettings).order_by(CompanySettings.id.asc()).first()
    if settings_row is None:
        settings_row = CompanySettings()
        db.add(settings_row)
        db.commit()
        db.refresh(settings_row)
    return settings_row


def update_company_settings(db: Session, settings_in: CompanySettingsUpdate, admin_id: int) -> CompanySettings:
    settings_row = get_company_settings(db)
    changes = settings_in.model_dump(exclude_unset=True)
    for key, value in changes.items():
        setattr(settings_row, key, value)
    db.commit()
    db.refresh(settings_row)

    logger.info("company_settings_updated", fields=sorted(changes), admin_user_id=admin_id)
    return settings_row
