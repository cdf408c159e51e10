import random
import string
from typing import List, Optional, Tuple

import structlog
from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from foodcity.core.config import settings
from foodcity.core.exceptions import EmptyCart, OrderNotFound
from foodcity.models.address import Address
from foodcity.models.cart import CartSnapshot
from foodcity.models.order import (
    Order,
    OrderAddon,
    OrderItem,
    OrderPaymentMethod,
    OrderPaymentStatus,
    OrderStatus,
)
from foodcity.models.order_status_history import OrderStatusHistory
from foodcity.models.user import User
from foodcity.schemas.order import OrderCreate
from foodcity.schemas.order_tracking import OrderStatusUpdate, OrderTrackingResponse, OrderStatusHistoryResponse
from foodcity.services.cart_service import CartService
from foodcity.services.coupon_service import CouponService
from foodcity.services.payment_service import create_cod_payment, queue_order_confirmation

logger = structlog.get_logger()

CANCELLABLE_STATUSES = {OrderStatus.PENDING, OrderStatus.CONFIRMED}
TERMINAL_STATUSES = {OrderStatus.DELIVERED, OrderStatus.CANCELLED}


def generate_order_number(db: Session) -> str:
    """Generate a unique order number with bounded retries."""
    max_attempts = 10

    for _ in range(max_attempts):
        digits = "".join(random.choices(string.digits, k=8))
        order_number = f"{settings.ORDER_NUMBER_PREFIX}{digits}"

        existing = db.query(Order).filter(Order.order_number == order_number).first()
        if not existing:
            return order_number

    raise ValueError("Failed to generate unique order number")


def serialize_order(order: Order) -> dict:
    return {
        "id": order.id,
        "order_number": order.order_number,
        "status": order.status.value,
        "payment_status": order.payment_status.value,
        "payment_method": order.payment_method.value,
        "customer_name": order.customer_name,
        "customer_email": order.customer_email,
        "customer_phone": order.customer_phone,
        "customer_address": order.customer_address,
        "customer_pincode": order.customer_pincode,
        "items": [
            {
                "id": item.id,
                "product_id": item.product_id,
                "title": item.title,
                "slug": item.slug,
                "image_url": item.image_url,
                "customization": item.selected_customization,
                "quantity": item.quantity,
                "price": item.price,
            }
            for item in order.items
        ],
        "addons": [
            {
                "id": addon.id,
                "addon_id": addon.addon_id,
                "name": addon.name,
                "image": addon.image,
                "customization": addon.selected_customization,
                "quantity": addon.quantity,
                "price": addon.price,
            }
            for addon in order.addons
        ],
        "total_items": order.total_items,
        "subtotal": order.subtotal,
        "tax": order.tax,
        "delivery_charge": order.delivery_charge,
        "online_discount": order.online_discount,
        "discount": order.discount,
        "coupon_code": order.coupon_code,
        "total_amount": order.total_amount,
        "customer_notes": order.customer_notes,
        "cancellation_reason": order.cancellation_reason,
        "created_at": order.created_at,
        "updated_at": order.updated_at,
    }


def _record_status(db: Session, order: Order, old_status: Optional[OrderStatus], notes: str = None, changed_by: int = None):
    db.add(
        OrderStatusHistory(
            order_id=order.id,
            old_status=old_status.value if old_status else None,
            new_status=order.status.value,
            changed_by=changed_by,
            notes=notes,
        )
    )


def create_order(
    db: Session,
    user: User,
    cart: CartService,
    order_data: OrderCreate,
) -> Tuple[Order, bool]:
    """Turn the user's carts into an order.

    Returns ``(order, created)``; ``created`` is False when an earlier order
    with the same idempotency key is replayed.
    """
    try:
        if order_data.idempotency_key:
            existing_order = (
                db.query(Order)
                .filter(
                    Order.user_id == user.id,
                    Order.idempotency_key == order_data.idempotency_key,
                )
                .first()
            )
            if existing_order:
                logger.info("order_replayed", order_id=existing_order.id, user_id=user.id)
                return existing_order, False

        if cart.is_empty:
            raise EmptyCart()

        address = db.query(Address).filter(
            Address.id == order_data.address_id,
            Address.user_id == user.id
        ).first()
        if not address:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Address not found"
            )

        quote = None
        if order_data.coupon_code:
            quote = CouponService.quote(db, order_data.coupon_code, cart.coupon_cart_items())

        is_online = order_data.payment_method == OrderPaymentMethod.ONLINE
        online_discount = settings.ONLINE_PAYMENT_DISCOUNT if is_online else 0.0
        summary = cart.summary(
            coupon_discount=quote.discount_amount if quote else 0.0,
            base_discount=online_discount,
        )
        payload = cart.format_for_order()

        try:
            order_number = generate_order_number(db)
        except ValueError as exc:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to generate order number",
            ) from exc

        order = Order(
            order_number=order_number,
            user_id=user.id,
            idempotency_key=order_data.idempotency_key,
            customer_name=address.full_name,
            customer_email=user.email,
            customer_phone=address.phone,
            customer_address=address.as_single_line(),
            customer_pincode=address.pincode,
            subtotal=round(summary.subtotal, 2),
            tax=round(summary.tax, 2),
            delivery_charge=round(summary.delivery_fee, 2),
            online_discount=round(online_discount, 2),
            discount=round(summary.discount, 2),
            coupon_code=quote.coupon_code if quote else None,
            total_amount=round(max(summary.grand_total, 0.0), 2),
            status=OrderStatus.PENDING if is_online else OrderStatus.CONFIRMED,
            payment_status=OrderPaymentStatus.PENDING,
            payment_method=order_data.payment_method,
            customer_notes=order_data.customer_notes,
        )
        db.add(order)
        db.flush()

        for item in payload["items"]:
            db.add(
                OrderItem(
                    order_id=order.id,
                    product_id=item["product_id"],
                    title=item["title"],
                    slug=item["slug"],
                    image_url=item["image_url"],
                    selected_customization=item["customization"],
                    quantity=item["quantity"],
                    price=item["price"],
                )
            )
        for addon in payload["addons"]:
            db.add(
                OrderAddon(
                    order_id=order.id,
                    addon_id=addon["addon_id"],
                    name=addon["name"],
                    image=addon["image"],
                    selected_customization=addon["customization"],
                    quantity=addon["quantity"],
                    price=addon["price"],
                )
            )

        _record_status(db, order, None, notes="Order placed")

        if quote:
            CouponService.consume(db, quote.coupon_id)

        if not is_online:
            create_cod_payment(order, db)

        db.query(CartSnapshot).filter(CartSnapshot.user_id == user.id).delete()
        db.commit()
        db.refresh(order)
    except HTTPException:
        db.rollback()
        raise
    except Exception:
        db.rollback()
        logger.exception("order_create_failed", user_id=user.id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create order",
        )

    logger.info(
        "order_created",
        order_id=order.id,
        order_number=order.order_number,
        user_id=user.id,
        payment_method=order.payment_method.value,
        total_amount=order.total_amount,
        coupon_code=order.coupon_code,
    )

    if not is_online:
        queue_order_confirmation(order)

    return order, True


def list_user_orders(db: Session, user_id: int) -> List[Order]:
    return (
        db.query(Order)
        .filter(Order.user_id == user_id)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .all()
    )


def get_user_order(db: Session, user_id: int, order_number: str) -> Order:
    order = db.query(Order).filter(
        Order.order_number == order_number,
        Order.user_id == user_id
    ).first()
    if not order:
        raise OrderNotFound()
    return order


def cancel_order(db: Session, user_id: int, order_number: str, reason: Optional[str] = None) -> Order:
    order = get_user_order(db, user_id, order_number)

    if order.status not in CANCELLABLE_STATUSES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Order cannot be cancelled at this stage"
        )

    previous_status = order.status
    order.status = OrderStatus.CANCELLED
    order.cancellation_reason = reason
    _record_status(db, order, previous_status, notes=reason or "Cancelled by customer")
    db.commit()
    db.refresh(order)

    logger.info(
        "order_cancelled",
        order_id=order.id,
        user_id=user_id,
        previous_status=previous_status.value,
    )
    return order


def list_orders(
    db: Session,
    status_filter: Optional[OrderStatus] = None,
    skip: int = 0,
    limit: int = 20,
) -> Tuple[List[Order], int]:
    query = db.query(Order)
    if status_filter:
        query = query.filter(Order.status == status_filter)
    total = query.count()
    orders = query.order_by(Order.created_at.desc(), Order.id.desc()).offset(skip).limit(limit).all()
    return orders, total


class OrderTrackingService:

    @staticmethod
    def update_order_status(
        db: Session,
        order_id: int,
        status_update: OrderStatusUpdate,
        changed_by: Optional[int] = None
    ) -> Order:
        """Update order status with history tracking. Admin only."""
        order = db.query(Order).filter(Order.id == order_id).first()
        if not order:
            raise OrderNotFound()

        if order.status in TERMINAL_STATUSES and order.status != status_update.status:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Order is already {order.status.value}"
            )

        old_status = order.status
        order.status = status_update.status
        _record_status(db, order, old_status, notes=status_update.notes, changed_by=changed_by)
        db.commit()
        db.refresh(order)

        logger.info(
            "order_status_updated",
            order_id=order.id,
            old_status=old_status.value,
            new_status=order.status.value,
            changed_by=changed_by,
        )
        return order

    @staticmethod
    def get_order_tracking(db: Session, order_number: str, user_id: int) -> OrderTrackingResponse:
        """Status history of one of the user's orders."""
        order = get_user_order(db, user_id, order_number)
        return OrderTrackingResponse(
            order_id=order.id,
            order_number=order.order_number,
            current_status=order.status.value,
            status_history=[
                OrderStatusHistoryResponse.model_validate(entry) for entry in order.status_history
            ],
        )
