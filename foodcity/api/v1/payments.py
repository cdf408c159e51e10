from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from foodcity.api.deps import get_current_active_user
from foodcity.core.rate_limiter import limiter
from foodcity.db.session import get_db
from foodcity.models.user import User
from foodcity.schemas.payment import PaymentOrderCreate, PaymentVerify
from foodcity.services import payment_service
from foodcity.utils.response import success

router = APIRouter()


@router.post("/create-order", response_model=dict)
@limiter.limit("10/minute")
def create_payment_order(
    request: Request,
    payment_request: PaymentOrderCreate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    """Open a Razorpay order for an online-payment order"""
    data = payment_service.create_payment_order(db, current_user.id, payment_request.order_number)
    return success(data=data, message="Payment order created")


@router.post("/verify", response_model=dict)
@limiter.limit("10/minute")
def verify_payment(
    request: Request,
    payment_data: PaymentVerify,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    """Check the checkout signature and confirm the order"""
    data = payment_service.verify_payment(db, current_user.id, payment_data)
    return success(data=data, message="Payment verified successfully")


@router.post("/webhook", response_model=dict)
async def razorpay_webhook(request: Request, db: Session = Depends(get_db)):
    """Razorpay server-to-server events"""
    body = await request.body()
    signature = request.headers.get("X-Razorpay-Signature", "")
    data = payment_service.handle_webhook(db, body, signature)
    return success(data=data, message="Webhook processed")
