"""Checkout totals computed from product and add-on cart snapshots.

Everything here is a pure function of its inputs: the same snapshots and
discounts always produce the same summary. Amounts are plain floats and are
only rounded for display.
"""
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Tuple

from foodcity.cart.models import LineItem

DEFAULT_TAX_RATE = 0.10
DEFAULT_DELIVERY_FEE = 40.0


def lines_total(lines: Iterable[LineItem]) -> float:
    return sum((line.line_total for line in lines), 0.0)


def lines_quantity(lines: Iterable[LineItem]) -> int:
    return sum(line.quantity for line in lines)


def lines_savings(lines: Iterable[LineItem]) -> float:
    return sum((line.savings for line in lines), 0.0)


def delivery_fee_for(
    subtotal: float,
    delivery_fee: float = DEFAULT_DELIVERY_FEE,
    free_delivery_threshold: Optional[float] = None,
) -> float:
    if subtotal <= 0:
        return 0.0
    if free_delivery_threshold is not None and subtotal >= free_delivery_threshold:
        return 0.0
    return delivery_fee


@dataclass(frozen=True)
class CartSummary:
    product_total: float
    addon_total: float
    subtotal: float
    discount: float
    coupon_discount: float
    tax: float
    delivery_fee: float
    grand_total: float
    product_count: int
    addon_count: int
    total_items: int
    total_unique_items: int
    savings: float
    is_empty: bool
    products: Tuple[LineItem, ...] = field(default_factory=tuple)
    addons: Tuple[LineItem, ...] = field(default_factory=tuple)

    def as_dict(self) -> dict:
        return {
            "products": [line.model_dump(mode="json") for line in self.products],
            "addons": [line.model_dump(mode="json") for line in self.addons],
            "product_count": self.product_count,
            "addon_count": self.addon_count,
            "product_total": self.product_total,
            "addon_total": self.addon_total,
            "total_items": self.total_items,
            "total_unique_items": self.total_unique_items,
            "subtotal": self.subtotal,
            "discount": self.discount,
            "coupon_discount": self.coupon_discount,
            "savings": self.savings,
            "tax": self.tax,
            "delivery_fee": self.delivery_fee,
            "grand_total": self.grand_total,
            "is_empty": self.is_empty,
        }


def summarize_cart(
    products: Sequence[LineItem],
    addons: Sequence[LineItem],
    *,
    base_discount: float = 0.0,
    coupon_discount: float = 0.0,
    tax_rate: float = DEFAULT_TAX_RATE,
    delivery_fee: float = DEFAULT_DELIVERY_FEE,
    free_delivery_threshold: Optional[float] = None,
) -> CartSummary:
    """Merge both cart snapshots into one checkout summary."""
    products = tuple(products)
    addons = tuple(addons)

    product_total = lines_total(products)
    addon_total = lines_total(addons)
    subtotal = product_total + addon_total

    product_count = lines_quantity(products)
    addon_count = lines_quantity(addons)
    total_items = product_count + addon_count

    tax = subtotal * tax_rate
    fee = delivery_fee_for(subtotal, delivery_fee, free_delivery_threshold)
    discount = base_discount + coupon_discount

    return CartSummary(
        product_total=product_total,
        addon_total=addon_total,
        subtotal=subtotal,
        discount=discount,
        coupon_discount=coupon_discount,
        tax=tax,
        delivery_fee=fee,
        grand_total=subtotal + tax + fee - discount,
        product_count=product_count,
        addon_count=addon_count,
        total_items=total_items,
        total_unique_items=len(products) + len(addons),
        savings=lines_savings(products),
        is_empty=total_items == 0,
        products=products,
        addons=addons,
    )


def _customization_dict(line: LineItem) -> Optional[dict]:
    if line.selected_customization is None:
        return None
    return line.selected_customization.model_dump()


def format_for_order(products: Sequence[LineItem], addons: Sequence[LineItem]) -> dict:
    """Denormalize cart lines into the ``items`` / ``addons`` order payload."""
    items: List[dict] = [
        {
            "product_id": line.product_id,
            "title": line.title,
            "slug": line.slug,
            "price": line.unit_price,
            "quantity": line.quantity,
            "image_url": line.image_url,
            "customization": _customization_dict(line),
        }
        for line in products
    ]
    addon_rows: List[dict] = [
        {
            "addon_id": line.product_id,
            "name": line.title,
            "price": line.unit_price,
            "quantity": line.quantity,
            "image": line.image_url,
            "customization": _customization_dict(line),
        }
        for line in addons
    ]
    return {"items": items, "addons": addon_rows}
