from dataclasses import dataclass
from typing import Optional
import enum

from foodcity.cart.models import LineItem


class CartError(str, enum.Enum):
    INVALID_QUANTITY = "invalid_quantity"
    INVALID_PRODUCT = "invalid_product"
    ITEM_NOT_FOUND = "item_not_found"
    STORAGE_FAILURE = "storage_failure"


@dataclass(frozen=True)
class CartResult:
    """Outcome of a cart mutation. Failed mutations leave the cart untouched."""

    ok: bool
    item: Optional[LineItem] = None
    error: Optional[CartError] = None
    message: Optional[str] = None

    @classmethod
    def success(cls, item: Optional[LineItem] = None) -> "CartResult":
        return cls(ok=True, item=item)

    @classmethod
    def failure(cls, error: CartError, message: str) -> "CartResult":
        return cls(ok=False, error=error, message=message)
