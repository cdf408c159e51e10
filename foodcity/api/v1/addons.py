from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
from foodcity.db.session import get_db
from foodcity.models.addon import AddOn
from foodcity.schemas.addon import AddonResponse
from foodcity.utils.response import success
from foodcity.core.rate_limiter import limiter

router = APIRouter()


@router.get("", response_model=dict)
@router.get("/", response_model=dict)
@limiter.limit("100/minute")
def get_addons(request: Request, db: Session = Depends(get_db)):
    """Available add-ons, cheapest first"""
    addons = (
        db.query(AddOn)
        .filter(AddOn.is_available == True)
        .order_by(AddOn.price.asc(), AddOn.id.asc())
        .all()
    )
    return success(
        data=[AddonResponse.model_validate(addon).model_dump() for addon in addons],
        message="Add-ons retrieved",
    )
