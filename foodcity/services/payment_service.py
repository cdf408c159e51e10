import hashlib
import hmac
import json
from datetime import datetime

import razorpay
import structlog
from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from foodcity.core.config import settings
from foodcity.core.exceptions import OrderNotFound
from foodcity.models.order import Order, OrderPaymentMethod, OrderPaymentStatus, OrderStatus
from foodcity.models.order_status_history import OrderStatusHistory
from foodcity.models.payment import Payment, PaymentMethod, PaymentStatus
from foodcity.schemas.payment import PaymentVerify

razorpay_client = razorpay.Client(auth=(settings.RAZORPAY_KEY_ID, settings.RAZORPAY_KEY_SECRET))
logger = structlog.get_logger()


def to_paise(amount: float) -> int:
    return int(round(amount * 100))


def create_payment_order(db: Session, user_id: int, order_number: str) -> dict:
    """Open a Razorpay order for an unpaid online order."""
    order = db.query(Order).filter(
        Order.order_number == order_number,
        Order.user_id == user_id,
    ).first()
    if not order:
        raise OrderNotFound()

    if order.payment_method != OrderPaymentMethod.ONLINE:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Order is not payable online")
    if order.payment_status == OrderPaymentStatus.PAID:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Order is already paid")
    if order.status == OrderStatus.CANCELLED:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Order has been cancelled")

    amount_paise = to_paise(order.total_amount)

    try:
        razorpay_order = razorpay_client.order.create(
            {
                "amount": amount_paise,
                "currency": settings.CURRENCY,
                "receipt": order.order_number,
                "notes": {
                    "order_id": order.id,
                    "customer_email": order.customer_email or "",
                },
            }
        )
    except Exception:
        logger.exception("razorpay_order_create_failed", order_id=order.id)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Payment gateway unavailable",
        )

    try:
        payment = db.query(Payment).filter(Payment.order_id == order.id).first()
        if not payment:
            payment = Payment(
                order_id=order.id,
                payment_method=PaymentMethod.RAZORPAY,
                amount=order.total_amount,
                currency=settings.CURRENCY,
            )
            db.add(payment)
        payment.payment_status = PaymentStatus.PENDING
        payment.razorpay_order_id = razorpay_order["id"]
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info(
        "payment_order_created",
        order_id=order.id,
        razorpay_order_id=razorpay_order["id"],
        amount=amount_paise,
    )
    return {
        "razorpay_order_id": razorpay_order["id"],
        "razorpay_key_id": settings.RAZORPAY_KEY_ID,
        "amount": amount_paise,
        "currency": settings.CURRENCY,
        "order_number": order.order_number,
    }


def create_cod_payment(order: Order, db: Session) -> Payment:
    """Attach a pending cash-on-delivery payment. The caller commits."""
    payment = db.query(Payment).filter(Payment.order_id == order.id).first()
    if payment:
        return payment
    payment = Payment(
        order_id=order.id,
        payment_method=PaymentMethod.COD,
        payment_status=PaymentStatus.PENDING,
        amount=order.total_amount,
        currency=settings.CURRENCY,
    )
    db.add(payment)
    return payment


def _sign(secret: str, message: bytes) -> str:
    return hmac.new(secret.encode(), message, hashlib.sha256).hexdigest()


def verify_payment_signature(
    razorpay_order_id: str,
    razorpay_payment_id: str,
    razorpay_signature: str,
) -> bool:
    """Verify Razorpay payment signature."""
    message = f"{razorpay_order_id}|{razorpay_payment_id}".encode()
    generated_signature = _sign(settings.RAZORPAY_KEY_SECRET, message)
    return hmac.compare_digest(generated_signature, razorpay_signature or "")


def verify_webhook_signature(body: bytes, signature: str) -> bool:
    generated_signature = _sign(settings.RAZORPAY_WEBHOOK_SECRET, body)
    return hmac.compare_digest(generated_signature, signature or "")


def _mark_paid(db: Session, payment: Payment, razorpay_payment_id: str, razorpay_signature: str = None) -> Order:
    order = payment.order
    payment.razorpay_payment_id = razorpay_payment_id
    if razorpay_signature:
        payment.razorpay_signature = razorpay_signature
    payment.payment_status = PaymentStatus.SUCCESS
    payment.paid_at = datetime.utcnow()

    order.payment_status = OrderPaymentStatus.PAID
    if order.status == OrderStatus.PENDING:
        order.status = OrderStatus.CONFIRMED
        db.add(
            OrderStatusHistory(
                order_id=order.id,
                old_status=OrderStatus.PENDING.value,
                new_status=OrderStatus.CONFIRMED.value,
                notes="Payment received",
            )
        )
    return order


def _mark_failed(payment: Payment) -> None:
    payment.payment_status = PaymentStatus.FAILED
    payment.order.payment_status = OrderPaymentStatus.FAILED


def queue_order_confirmation(order: Order) -> None:
    from foodcity.tasks.email_tasks import send_order_confirmation

    try:
        send_order_confirmation.delay(order.id)
    except Exception:
        logger.exception("order_confirmation_queue_failed", order_id=order.id)


def verify_payment(db: Session, user_id: int, data: PaymentVerify) -> dict:
    """Confirm a checkout payment reported by the client."""
    payment = (
        db.query(Payment)
        .join(Order, Payment.order_id == Order.id)
        .filter(
            Payment.razorpay_order_id == data.razorpay_order_id,
            Order.user_id == user_id,
        )
        .first()
    )
    if not payment:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Payment record not found")

    order = payment.order
    if payment.is_successful:
        return {
            "success": True,
            "order_number": order.order_number,
            "payment_status": order.payment_status.value,
        }

    if not verify_payment_signature(
        data.razorpay_order_id, data.razorpay_payment_id, data.razorpay_signature
    ):
        logger.warning(
            "payment_signature_mismatch",
            order_id=order.id,
            razorpay_order_id=data.razorpay_order_id,
        )
        _mark_failed(payment)
        db.commit()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid payment signature")

    try:
        order = _mark_paid(db, payment, data.razorpay_payment_id, data.razorpay_signature)
        db.commit()
        db.refresh(order)
    except Exception:
        db.rollback()
        logger.exception("payment_verify_failed", order_id=order.id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to record payment",
        )

    logger.info("payment_verified", order_id=order.id, razorpay_payment_id=data.razorpay_payment_id)
    queue_order_confirmation(order)
    return {
        "success": True,
        "order_number": order.order_number,
        "payment_status": order.payment_status.value,
    }


def handle_webhook(db: Session, body: bytes, signature: str) -> dict:
    """Apply ``payment.captured`` / ``payment.failed`` events from Razorpay."""
    if not verify_webhook_signature(body, signature):
        logger.warning("webhook_signature_mismatch")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid webhook signature")

    try:
        event = json.loads(body)
        entity = event["payload"]["payment"]["entity"]
        event_type = event["event"]
    except (ValueError, KeyError, TypeError):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Malformed webhook payload")

    if event_type not in ("payment.captured", "payment.failed"):
        logger.info("webhook_ignored", event_type=event_type)
        return {"event": event_type, "handled": False}

    payment = db.query(Payment).filter(Payment.razorpay_order_id == entity.get("order_id")).first()
    if not payment:
        logger.warning("webhook_payment_not_found", razorpay_order_id=entity.get("order_id"))
        return {"event": event_type, "handled": False}

    if payment.is_successful:
        return {"event": event_type, "handled": True}

    paid = event_type == "payment.captured"
    try:
        payment.gateway_response = json.dumps(entity)
        if paid:
            order = _mark_paid(db, payment, entity.get("id"))
        else:
            _mark_failed(payment)
            order = payment.order
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("webhook_processed", event_type=event_type, order_id=order.id)
    if paid:
        queue_order_confirmation(order)
    return {"event": event_type, "handled": True}
