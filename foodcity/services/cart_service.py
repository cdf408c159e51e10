from typing import List, Optional

import structlog
from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from foodcity.cart import (
    CartError,
    CartKind,
    CartResult,
    CartStorage,
    CatalogEntry,
    Customization,
    LineItemStore,
    SqlCartStorage,
    format_for_order,
    summarize_cart,
)
from foodcity.cart.summary import CartSummary
from foodcity.core.config import settings
from foodcity.core.exceptions import AddonNotFound, APIError, CartItemNotFound, ProductNotFound
from foodcity.models.addon import AddOn
from foodcity.models.product import Product

logger = structlog.get_logger()


class CartService:
    """Per-request view over a user's product and add-on carts."""

    def __init__(self, db: Session, user_id: int, storage: Optional[CartStorage] = None):
        self.db = db
        self.user_id = user_id
        storage = storage if storage is not None else SqlCartStorage(db, user_id)
        self.products = LineItemStore(CartKind.PRODUCT, storage)
        self.addons = LineItemStore(CartKind.ADDON, storage)

    def store(self, kind: CartKind) -> LineItemStore:
        return self.addons if kind is CartKind.ADDON else self.products

    def _catalog_entry(self, kind: CartKind, item_id: int) -> CatalogEntry:
        if kind is CartKind.ADDON:
            record = (
                self.db.query(AddOn)
                .filter(AddOn.id == item_id, AddOn.is_available == True)
                .first()
            )
            if not record:
                raise AddonNotFound()
        else:
            record = (
                self.db.query(Product)
                .filter(Product.id == item_id, Product.is_available == True)
                .first()
            )
            if not record:
                raise ProductNotFound()
        return CatalogEntry.model_validate(record)

    @staticmethod
    def _resolve_customization(
        entry: CatalogEntry,
        customization: Optional[Customization],
    ) -> Optional[Customization]:
        if customization is None:
            return None
        for option in entry.customizable_options:
            if option.option == customization.option:
                # Catalog price wins over whatever the client sent.
                return option
        raise APIError(
            status.HTTP_400_BAD_REQUEST,
            "Invalid customization option",
            [{"field": "customization.option", "allowed": [option.option for option in entry.customizable_options]}],
        )

    def _raise_for(self, result: CartResult, kind: CartKind) -> None:
        if result.ok:
            return
        logger.warning(
            "cart_mutation_failed",
            user_id=self.user_id,
            kind=kind.value,
            error=result.error.value,
        )
        if result.error is CartError.ITEM_NOT_FOUND:
            raise CartItemNotFound()
        if result.error is CartError.STORAGE_FAILURE:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=result.message,
            )
        raise APIError(status.HTTP_400_BAD_REQUEST, result.message, [{"code": result.error.value, "kind": kind.value}])

    def add(
        self,
        kind: CartKind,
        item_id: int,
        quantity: int = 1,
        customization: Optional[Customization] = None,
    ) -> CartResult:
        entry = self._catalog_entry(kind, item_id)
        chosen = self._resolve_customization(entry, customization)
        result = self.store(kind).add(entry, quantity, chosen)
        self._raise_for(result, kind)
        return result

    def increment(self, kind: CartKind, cart_item_id: str) -> CartResult:
        result = self.store(kind).increment(cart_item_id)
        self._raise_for(result, kind)
        return result

    def decrement(self, kind: CartKind, cart_item_id: str) -> CartResult:
        result = self.store(kind).decrement(cart_item_id)
        self._raise_for(result, kind)
        return result

    def update_quantity(self, kind: CartKind, cart_item_id: str, quantity: int) -> CartResult:
        result = self.store(kind).update_quantity(cart_item_id, quantity)
        self._raise_for(result, kind)
        return result

    def remove(self, kind: CartKind, cart_item_id: str) -> CartResult:
        result = self.store(kind).remove(cart_item_id)
        self._raise_for(result, kind)
        return result

    def clear(self, kind: CartKind) -> CartResult:
        result = self.store(kind).clear()
        self._raise_for(result, kind)
        return result

    def clear_all(self) -> None:
        self.clear(CartKind.PRODUCT)
        self.clear(CartKind.ADDON)

    @property
    def is_empty(self) -> bool:
        return self.products.total_items() == 0 and self.addons.total_items() == 0

    def summary(self, coupon_discount: float = 0.0, base_discount: float = 0.0) -> CartSummary:
        return summarize_cart(
            self.products.snapshot(),
            self.addons.snapshot(),
            base_discount=base_discount,
            coupon_discount=coupon_discount,
            tax_rate=settings.TAX_RATE,
            delivery_fee=settings.DELIVERY_FEE,
            free_delivery_threshold=settings.FREE_DELIVERY_THRESHOLD,
        )

    def coupon_cart_items(self) -> List[dict]:
        """Product lines in the shape coupon evaluation expects."""
        return [
            {"id": line.product_id, "price": line.unit_price, "quantity": line.quantity}
            for line in self.products.snapshot()
        ]

    def format_for_order(self) -> dict:
        return format_for_order(self.products.snapshot(), self.addons.snapshot())
