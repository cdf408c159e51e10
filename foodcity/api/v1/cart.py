import enum

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from foodcity.api.deps import get_cart_service
from foodcity.cart import CartKind, CartResult
from foodcity.core.exceptions import EmptyCart
from foodcity.core.rate_limiter import limiter
from foodcity.db.session import get_db
from foodcity.schemas.cart import CartItemCreate, CartItemRef, CartQuantityUpdate, CartSummaryRequest
from foodcity.services.cart_service import CartService
from foodcity.services.coupon_service import CouponService
from foodcity.utils.response import success

router = APIRouter()


class CartSection(str, enum.Enum):
    ITEMS = "items"
    ADDONS = "addons"

    @property
    def kind(self) -> CartKind:
        return CartKind.ADDON if self is CartSection.ADDONS else CartKind.PRODUCT


def _cart_payload(cart: CartService, result: CartResult = None) -> dict:
    data = {"cart": cart.summary().as_dict()}
    if result is not None:
        data["item"] = result.item.model_dump(mode="json") if result.item else None
    return data


@router.get("", response_model=dict)
@router.get("/", response_model=dict)
def get_cart(cart: CartService = Depends(get_cart_service)):
    """Both carts merged into one summary"""
    return success(data=_cart_payload(cart), message="Cart retrieved")


@router.post("/summary", response_model=dict)
@limiter.limit("30/minute")
def get_cart_summary(
    request: Request,
    summary_request: CartSummaryRequest,
    cart: CartService = Depends(get_cart_service),
    db: Session = Depends(get_db),
):
    """Checkout summary with an optional coupon folded into the discount."""
    coupon = None
    coupon_discount = 0.0
    if summary_request.coupon_code:
        if cart.is_empty:
            raise EmptyCart()
        quote = CouponService.quote(db, summary_request.coupon_code, cart.coupon_cart_items())
        coupon_discount = quote.discount_amount
        coupon = {
            "coupon_id": quote.coupon_id,
            "coupon_code": quote.coupon_code,
            "discount_amount": quote.discount_amount,
        }

    data = cart.summary(coupon_discount=coupon_discount).as_dict()
    data["coupon"] = coupon
    return success(data=data, message="Cart summary calculated")


@router.delete("", response_model=dict)
@router.delete("/", response_model=dict)
def clear_cart(cart: CartService = Depends(get_cart_service)):
    """Empty both carts"""
    cart.clear_all()
    return success(data=_cart_payload(cart), message="Cart cleared")


@router.post("/{section}", response_model=dict, status_code=status.HTTP_201_CREATED)
@limiter.limit("60/minute")
def add_to_cart(
    request: Request,
    section: CartSection,
    cart_item: CartItemCreate,
    cart: CartService = Depends(get_cart_service),
):
    """Add a product or add-on; adding an existing line bumps its quantity"""
    result = cart.add(section.kind, cart_item.product_id, cart_item.quantity, cart_item.customization)
    return success(data=_cart_payload(cart, result), message="Item added to cart")


@router.post("/{section}/increment", response_model=dict)
def increment_item(
    section: CartSection,
    ref: CartItemRef,
    cart: CartService = Depends(get_cart_service),
):
    result = cart.increment(section.kind, ref.cart_item_id)
    return success(data=_cart_payload(cart, result), message="Cart updated")


@router.post("/{section}/decrement", response_model=dict)
def decrement_item(
    section: CartSection,
    ref: CartItemRef,
    cart: CartService = Depends(get_cart_service),
):
    """Drop one unit; the last unit removes the line"""
    result = cart.decrement(section.kind, ref.cart_item_id)
    return success(data=_cart_payload(cart, result), message="Cart updated")


@router.put("/{section}/quantity", response_model=dict)
def update_quantity(
    section: CartSection,
    update: CartQuantityUpdate,
    cart: CartService = Depends(get_cart_service),
):
    """Set an absolute quantity; zero removes the line"""
    result = cart.update_quantity(section.kind, update.cart_item_id, update.quantity)
    return success(data=_cart_payload(cart, result), message="Cart updated")


@router.delete("/{section}", response_model=dict)
def clear_section(section: CartSection, cart: CartService = Depends(get_cart_service)):
    cart.clear(section.kind)
    return success(data=_cart_payload(cart), message="Cart cleared")


@router.delete("/{section}/{cart_item_id:path}", response_model=dict)
def remove_item(
    section: CartSection,
    cart_item_id: str,
    cart: CartService = Depends(get_cart_service),
):
    cart.remove(section.kind, cart_item_id)
    return success(data=_cart_payload(cart), message="Item removed from cart")
