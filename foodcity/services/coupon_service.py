from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Mapping

import structlog
from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from foodcity.core.exceptions import CouponNotFound
from foodcity.models.coupon import Coupon, DiscountType
from foodcity.schemas.coupon import CouponCreate, CouponUpdate, CouponResponse

logger = structlog.get_logger()


@dataclass(frozen=True)
class CouponQuote:
    coupon_id: int
    coupon_code: str
    discount_amount: float


def _item_field(item, name):
    if isinstance(item, Mapping):
        return item[name]
    return getattr(item, name)


def eligible_items(coupon: Coupon, cart_items: Iterable) -> list:
    """Cart lines the coupon applies to.

    An empty ``applicable_product_ids`` list makes the coupon apply to every
    product line.
    """
    applicable_ids = set(coupon.applicable_product_ids or [])
    return [
        item for item in cart_items
        if not applicable_ids or _item_field(item, "id") in applicable_ids
    ]


def calculate_discount(coupon: Coupon, cart_items: Iterable) -> float:
    """Discount for the eligible lines. Returns 0.0 when none are eligible."""
    eligible = eligible_items(coupon, cart_items)
    if not eligible:
        return 0.0

    eligible_total = sum(
        _item_field(item, "price") * _item_field(item, "quantity") for item in eligible
    )
    if coupon.discount_type == DiscountType.PERCENTAGE:
        return eligible_total * coupon.discount_value / 100

    fixed_total = sum(coupon.discount_value * _item_field(item, "quantity") for item in eligible)
    return min(fixed_total, eligible_total)


class CouponService:

    @staticmethod
    def _validate_percentage(discount_type: DiscountType, discount_value: float) -> None:
        if discount_type == DiscountType.PERCENTAGE and discount_value > 100:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Percentage discount cannot exceed 100%"
            )

    @staticmethod
    def create_coupon(db: Session, coupon_data: CouponCreate) -> CouponResponse:
        """Create a new coupon (admin only)."""
        existing = db.query(Coupon).filter(Coupon.code == coupon_data.code).first()
        if existing:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Coupon code already exists"
            )

        CouponService._validate_percentage(coupon_data.discount_type, coupon_data.discount_value)

        coupon = Coupon(**coupon_data.model_dump())
        db.add(coupon)
        db.commit()
        db.refresh(coupon)

        logger.info("coupon_created", coupon_id=coupon.id, code=coupon.code)
        return CouponResponse.model_validate(coupon)

    @staticmethod
    def update_coupon(db: Session, coupon_id: int, coupon_data: CouponUpdate) -> CouponResponse:
        """Update a coupon (admin only)."""
        coupon = db.query(Coupon).filter(Coupon.id == coupon_id).first()
        if not coupon:
            raise CouponNotFound()

        for key, value in coupon_data.model_dump(exclude_unset=True).items():
            setattr(coupon, key, value)

        try:
            CouponService._validate_percentage(coupon.discount_type, coupon.discount_value)
        except HTTPException:
            db.rollback()
            raise

        db.commit()
        db.refresh(coupon)

        return CouponResponse.model_validate(coupon)

    @staticmethod
    def delete_coupon(db: Session, coupon_id: int) -> None:
        """Delete a coupon (admin only)."""
        coupon = db.query(Coupon).filter(Coupon.id == coupon_id).first()
        if not coupon:
            raise CouponNotFound()

        db.delete(coupon)
        db.commit()
        logger.info("coupon_deleted", coupon_id=coupon_id)

    @staticmethod
    def get_coupon(db: Session, coupon_id: int) -> CouponResponse:
        coupon = db.query(Coupon).filter(Coupon.id == coupon_id).first()
        if not coupon:
            raise CouponNotFound()
        return CouponResponse.model_validate(coupon)

    @staticmethod
    def list_coupons(db: Session, skip: int = 0, limit: int = 100) -> List[CouponResponse]:
        coupons = db.query(Coupon).order_by(Coupon.created_at.desc()).offset(skip).limit(limit).all()
        return [CouponResponse.model_validate(coupon) for coupon in coupons]

    @staticmethod
    def _reject(code: str, reason: str):
        logger.info("coupon_rejected", coupon_code=code, reason=reason)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=reason)

    @staticmethod
    def check_coupon(coupon: Coupon, code: str, now: datetime = None) -> None:
        """Raise a 400 naming the first rule the coupon fails."""
        now = now or datetime.utcnow()
        if not coupon or not coupon.is_active:
            CouponService._reject(code, "Invalid or expired coupon")
        if coupon.end_date and coupon.end_date < now:
            CouponService._reject(code, "Coupon has expired")
        if coupon.start_date and coupon.start_date > now:
            CouponService._reject(code, "Coupon is not active yet")
        if coupon.usage_limit is not None and coupon.used_count >= coupon.usage_limit:
            CouponService._reject(code, "Coupon usage limit exceeded")

    @staticmethod
    def quote(db: Session, coupon_code: str, cart_items: Iterable) -> CouponQuote:
        """Validate a code against cart lines and price the discount.

        Usage is not consumed here; see :meth:`consume`.
        """
        code = (coupon_code or "").strip().upper()
        cart_items = list(cart_items)
        coupon = db.query(Coupon).filter(Coupon.code == code).first()
        CouponService.check_coupon(coupon, code)

        eligible = eligible_items(coupon, cart_items)
        if not eligible:
            CouponService._reject(code, "Coupon is not applicable to items in your cart")

        discount_amount = calculate_discount(coupon, eligible)
        logger.info("coupon_quoted", coupon_code=code, discount_amount=discount_amount)
        return CouponQuote(
            coupon_id=coupon.id,
            coupon_code=coupon.code,
            discount_amount=discount_amount,
        )

    @staticmethod
    def consume(db: Session, coupon_id: int) -> Coupon:
        """Count one use of the coupon. The caller owns the transaction."""
        coupon = (
            db.query(Coupon)
            .filter(Coupon.id == coupon_id)
            .with_for_update()
            .first()
        )
        if not coupon:
            raise CouponNotFound()
        if coupon.usage_limit is not None and coupon.used_count >= coupon.usage_limit:
            CouponService._reject(coupon.code, "Coupon usage limit exceeded")
        coupon.used_count += 1
        return coupon
