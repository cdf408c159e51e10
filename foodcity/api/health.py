from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlalchemy.orm import Session

from foodcity.core.celery_app import celery_app
from foodcity.core.config import settings
from foodcity.db.session import engine, get_db
from foodcity.models.addon import AddOn
from foodcity.models.product import FoodCategory, Product

API_VERSION = "1.0.0"

router = APIRouter()


@router.get("/health")
def health_check():
    return {
        "status": "healthy",
        "environment": settings.ENVIRONMENT,
        "version": API_VERSION,
    }


@router.get("/health/database")
def database_health_check():
    try:
        with engine.connect() as connection:
            connection.exec_driver_sql("SELECT 1")
    except Exception as exc:
        return {"status": "unhealthy", "reason": f"Database connectivity check failed: {exc}"}

    pool = engine.pool
    return {
        "status": "healthy",
        "pool": {
            "pool_class": pool.__class__.__name__,
            "checked_out": pool.checkedout() if hasattr(pool, "checkedout") else None,
        },
    }


@router.get("/health/email")
def email_health_check():
    try:
        with celery_app.connection_or_acquire() as connection:
            connection.ensure_connection(max_retries=1)
    except Exception as exc:
        return {"status": "unhealthy", "reason": f"Broker connection failed: {exc}"}

    try:
        active_workers = celery_app.control.inspect(timeout=1.0).ping() or {}
    except Exception as exc:
        return {"status": "unhealthy", "reason": f"Celery worker check failed: {exc}"}

    if not active_workers:
        return {"status": "unhealthy", "reason": "No active Celery workers"}
    return {"status": "healthy", "workers": len(active_workers)}


@router.get("/health/menu")
def menu_health_check(db: Session = Depends(get_db)):
    """Every menu category needs at least one orderable dish."""
    counts = dict(
        db.query(Product.category, func.count(Product.id))
        .filter(Product.is_available == True)
        .group_by(Product.category)
        .all()
    )
    categories = {category.value: int(counts.get(category, 0)) for category in FoodCategory}
    empty = [name for name, count in categories.items() if count == 0]
    addon_count = db.query(func.count(AddOn.id)).filter(AddOn.is_available == True).scalar()

    return {
        "status": "healthy" if not empty else "unhealthy",
        "categories": categories,
        "empty_categories": empty,
        "available_addons": addon_count,
    }


@router.get(f"{settings.API_V1_STR}/version")
def get_version():
    return {"version": API_VERSION}
