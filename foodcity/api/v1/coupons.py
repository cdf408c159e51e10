from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from foodcity.api.deps import get_current_active_user, require_admin
from foodcity.core.rate_limiter import limiter
from foodcity.db.session import get_db
from foodcity.models.user import User
from foodcity.schemas.coupon import ApplyCouponRequest, ApplyCouponResponse, CouponCreate, CouponUpdate
from foodcity.services.coupon_service import CouponService
from foodcity.utils.response import success

router = APIRouter()


@router.post("/apply", response_model=dict)
@limiter.limit("20/minute")
def apply_coupon(
    request: Request,
    apply_request: ApplyCouponRequest,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    """Price a coupon against cart lines. Usage is only counted when an order is placed."""
    quote = CouponService.quote(db, apply_request.coupon_code, apply_request.cart_items)
    data = ApplyCouponResponse(
        coupon_id=quote.coupon_id,
        coupon_code=quote.coupon_code,
        discount_amount=quote.discount_amount,
    )
    return success(data=data.model_dump(), message="Coupon applied successfully")


# Back-office management, admin only.

@router.post("/", response_model=dict, status_code=status.HTTP_201_CREATED)
def create_coupon(
    coupon_in: CouponCreate,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    coupon = CouponService.create_coupon(db, coupon_in)
    return success(data=coupon.model_dump(), message="Coupon created successfully")


@router.get("/", response_model=dict)
def list_coupons(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=100),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    coupons = CouponService.list_coupons(db, skip, limit)
    return success(data=[coupon.model_dump() for coupon in coupons], message="Coupons retrieved successfully")


@router.get("/{coupon_id}", response_model=dict)
def get_coupon(coupon_id: int, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    coupon = CouponService.get_coupon(db, coupon_id)
    return success(data=coupon.model_dump(), message="Coupon retrieved successfully")


@router.put("/{coupon_id}", response_model=dict)
def update_coupon(
    coupon_id: int,
    coupon_in: CouponUpdate,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    coupon = CouponService.update_coupon(db, coupon_id, coupon_in)
    return success(data=coupon.model_dump(), message="Coupon updated successfully")


@router.delete("/{coupon_id}", response_model=dict)
def delete_coupon(coupon_id: int, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    CouponService.delete_coupon(db, coupon_id)
    return success(message="Coupon deleted successfully")
