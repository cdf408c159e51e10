from collections import OrderedDict
from typing import Dict, List, Optional, Tuple

import structlog
from pydantic import ValidationError

from foodcity.cart.errors import CartError, CartResult
from foodcity.cart.models import CartKind, CatalogEntry, Customization, LineItem, make_cart_item_id
from foodcity.cart.storage import CartStorage, InMemoryCartStorage
from foodcity.cart.summary import (
    DEFAULT_DELIVERY_FEE,
    DEFAULT_TAX_RATE,
    delivery_fee_for,
    lines_quantity,
    lines_savings,
    lines_total,
)

logger = structlog.get_logger()


class LineItemStore:
    """Ordered collection of cart lines for one cart kind.

    Lines are keyed by ``cart_item_id`` and keep insertion order. Every
    mutation is written to storage before the in-memory state changes, so a
    failed write leaves both untouched.
    """

    def __init__(
        self,
        kind: CartKind,
        storage: Optional[CartStorage] = None,
        storage_key: Optional[str] = None,
    ):
        self.kind = kind
        self.storage = storage if storage is not None else InMemoryCartStorage()
        self.storage_key = storage_key or kind.storage_key
        self._lines: "OrderedDict[str, LineItem]" = self._load()

    def _load(self) -> "OrderedDict[str, LineItem]":
        lines: "OrderedDict[str, LineItem]" = OrderedDict()
        for raw in self.storage.load(self.storage_key):
            try:
                line = LineItem.model_validate(raw)
            except ValidationError as exc:
                logger.warning(
                    "cart_entry_discarded",
                    storage_key=self.storage_key,
                    errors=exc.error_count(),
                )
                continue
            if line.kind is not self.kind:
                logger.warning(
                    "cart_entry_discarded",
                    storage_key=self.storage_key,
                    cart_item_id=line.cart_item_id,
                    reason="kind_mismatch",
                )
                continue
            lines[line.cart_item_id] = line
        return lines

    def _commit(self, lines: "OrderedDict[str, LineItem]") -> bool:
        payload = [line.model_dump(mode="json") for line in lines.values()]
        try:
            self.storage.save(self.storage_key, payload)
        except Exception:
            logger.exception("cart_persist_failed", storage_key=self.storage_key)
            return False
        self._lines = lines
        return True

    def _storage_failure(self) -> CartResult:
        return CartResult.failure(CartError.STORAGE_FAILURE, "Could not save cart")

    # Mutations

    def add(
        self,
        entry: CatalogEntry,
        quantity: int = 1,
        customization: Optional[Customization] = None,
    ) -> CartResult:
        if quantity < 1:
            return CartResult.failure(CartError.INVALID_QUANTITY, "Quantity must be at least 1")
        if entry is None or entry.id is None:
            return CartResult.failure(CartError.INVALID_PRODUCT, "Invalid product")

        cart_item_id = make_cart_item_id(self.kind, entry.id, customization)
        lines = OrderedDict(self._lines)
        existing = lines.get(cart_item_id)
        if existing is not None:
            line = existing.with_quantity(existing.quantity + quantity)
        else:
            line = LineItem.build(self.kind, entry, quantity, customization)
        lines[cart_item_id] = line

        if not self._commit(lines):
            return self._storage_failure()

        logger.info(
            "cart_item_added",
            kind=self.kind.value,
            cart_item_id=cart_item_id,
            quantity=line.quantity,
        )
        return CartResult.success(line)

    def increment(self, cart_item_id: str) -> CartResult:
        existing = self._lines.get(cart_item_id)
        if existing is None:
            return CartResult.failure(CartError.ITEM_NOT_FOUND, "Cart item not found")
        return self._set_quantity(existing, existing.quantity + 1)

    def decrement(self, cart_item_id: str) -> CartResult:
        existing = self._lines.get(cart_item_id)
        if existing is None:
            return CartResult.failure(CartError.ITEM_NOT_FOUND, "Cart item not found")
        if existing.quantity <= 1:
            return self.remove(cart_item_id)
        return self._set_quantity(existing, existing.quantity - 1)

    def update_quantity(self, cart_item_id: str, quantity: int) -> CartResult:
        existing = self._lines.get(cart_item_id)
        if existing is None:
            return CartResult.failure(CartError.ITEM_NOT_FOUND, "Cart item not found")
        if quantity <= 0:
            return self.remove(cart_item_id)
        return self._set_quantity(existing, quantity)

    def _set_quantity(self, existing: LineItem, quantity: int) -> CartResult:
        line = existing.with_quantity(quantity)
        lines = OrderedDict(self._lines)
        lines[line.cart_item_id] = line
        if not self._commit(lines):
            return self._storage_failure()
        logger.info(
            "cart_item_quantity_updated",
            kind=self.kind.value,
            cart_item_id=line.cart_item_id,
            quantity=quantity,
        )
        return CartResult.success(line)

    def remove(self, cart_item_id: str) -> CartResult:
        if cart_item_id not in self._lines:
            return CartResult.success()
        lines = OrderedDict(self._lines)
        removed = lines.pop(cart_item_id)
        if not self._commit(lines):
            return self._storage_failure()
        logger.info("cart_item_removed", kind=self.kind.value, cart_item_id=cart_item_id)
        return CartResult.success(removed)

    def clear(self) -> CartResult:
        if not self._commit(OrderedDict()):
            return self._storage_failure()
        logger.info("cart_cleared", kind=self.kind.value)
        return CartResult.success()

    # Queries

    def is_in_cart(self, product_id: int, customization: Optional[Customization] = None) -> bool:
        return make_cart_item_id(self.kind, product_id, customization) in self._lines

    def get_item(self, cart_item_id: str) -> Optional[LineItem]:
        return self._lines.get(cart_item_id)

    def items(self) -> List[LineItem]:
        return list(self._lines.values())

    def snapshot(self) -> Tuple[LineItem, ...]:
        return tuple(self._lines.values())

    def total_price(self) -> float:
        return lines_total(self._lines.values())

    def subtotal(self) -> float:
        return self.total_price()

    def total_items(self) -> int:
        return lines_quantity(self._lines.values())

    def total_unique_items(self) -> int:
        return len(self._lines)

    def tax(self, rate: float = DEFAULT_TAX_RATE) -> float:
        return self.subtotal() * rate

    def total_with_tax_and_delivery(
        self,
        tax_rate: float = DEFAULT_TAX_RATE,
        delivery_fee: float = DEFAULT_DELIVERY_FEE,
        free_delivery_threshold: Optional[float] = None,
    ) -> float:
        subtotal = self.subtotal()
        return (
            subtotal
            + subtotal * tax_rate
            + delivery_fee_for(subtotal, delivery_fee, free_delivery_threshold)
        )

    def savings(self) -> float:
        return lines_savings(self._lines.values())

    def quantities(self) -> Dict[str, int]:
        return {key: line.quantity for key, line in self._lines.items()}

    def __len__(self) -> int:
        return len(self._lines)
