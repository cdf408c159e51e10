from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from foodcity.api.deps import get_cart_service, get_current_active_user
from foodcity.core.rate_limiter import limiter
from foodcity.db.session import get_db
from foodcity.models.order import OrderPaymentMethod
from foodcity.models.user import User
from foodcity.schemas.order import OrderCancel, OrderCreate
from foodcity.services import order_service
from foodcity.services.cart_service import CartService
from foodcity.services.order_service import OrderTrackingService, serialize_order
from foodcity.utils.response import success

router = APIRouter()


@router.post(
    "/",
    response_model=dict,
    status_code=status.HTTP_201_CREATED,
    summary="Place order",
    description="""
Creates an order from the authenticated user's product and add-on carts.

Process:
1. Replays an earlier order sent with the same idempotency key
2. Validates the cart is not empty and the address belongs to the user
3. Re-validates the coupon against the current cart
4. Computes subtotal, tax, delivery fee and discount
5. Persists the order with its items and add-ons, counts the coupon use, clears both carts
6. Cash on delivery orders are confirmed immediately; online orders wait for payment
""",
    responses={
        200: {"description": "Order replayed for a repeated idempotency key"},
        201: {"description": "Order created successfully"},
        400: {"description": "Cart empty or coupon rejected"},
        401: {"description": "Authentication required"},
        404: {"description": "Address not found"},
    },
)
@limiter.limit("10/minute")
def create_order(
    request: Request,
    order_data: OrderCreate,
    current_user: User = Depends(get_current_active_user),
    cart: CartService = Depends(get_cart_service),
    db: Session = Depends(get_db)
):
    """Create order from cart"""
    order, created = order_service.create_order(db, current_user, cart, order_data)

    data = serialize_order(order)
    if not created:
        return JSONResponse(
            status_code=status.HTTP_200_OK,
            content=success(data=data, message="Order already exists"),
        )

    if order.payment_method == OrderPaymentMethod.COD:
        return success(data=data, message="Order placed successfully. Pay on delivery.")
    return success(data=data, message="Order created successfully. Complete payment to confirm.")


@router.get("/", response_model=dict)
@limiter.limit("30/minute")
def get_user_orders(
    request: Request,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Get user's order history"""
    orders = order_service.list_user_orders(db, current_user.id)
    return success(data=[serialize_order(order) for order in orders], message="Orders retrieved")


@router.get("/{order_number}", response_model=dict)
@limiter.limit("30/minute")
def get_order_detail(
    request: Request,
    order_number: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Get order details"""
    order = order_service.get_user_order(db, current_user.id, order_number)
    return success(data=serialize_order(order), message="Order detail retrieved")


@router.get("/{order_number}/tracking", response_model=dict)
@limiter.limit("30/minute")
def get_order_tracking(
    request: Request,
    order_number: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Status history of an order"""
    tracking = OrderTrackingService.get_order_tracking(db, order_number, current_user.id)
    return success(data=tracking.model_dump(), message="Order tracking retrieved")


@router.put("/{order_number}/cancel", response_model=dict)
@limiter.limit("10/minute")
def cancel_order(
    request: Request,
    order_number: str,
    cancel_request: OrderCancel = None,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Cancel a pending or confirmed order"""
    reason = cancel_request.reason if cancel_request else None
    order = order_service.cancel_order(db, current_user.id, order_number, reason)
    return success(data=serialize_order(order), message="Order cancelled successfully")
