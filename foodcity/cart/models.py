from datetime import datetime
from typing import List, Optional
import enum

from pydantic import BaseModel, ConfigDict, Field


class CartKind(str, enum.Enum):
    PRODUCT = "product"
    ADDON = "addon"

    @property
    def id_prefix(self) -> str:
        return "addon-" if self is CartKind.ADDON else ""

    @property
    def storage_key(self) -> str:
        return "addon-cart-storage" if self is CartKind.ADDON else "cart-storage"


class Customization(BaseModel):
    model_config = ConfigDict(frozen=True)

    option: str = Field(..., min_length=1, max_length=50)
    price: float = Field(default=0.0, ge=0)


class CatalogEntry(BaseModel):
    """Catalog fields copied into a cart line at add time."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    slug: Optional[str] = None
    image_url: Optional[str] = None
    price: Optional[float] = None
    discounted_price: Optional[float] = None
    customizable_options: List[Customization] = Field(default_factory=list)


def make_cart_item_id(kind: CartKind, product_id: int, customization: Optional[Customization] = None) -> str:
    suffix = f"-custom-{customization.option}" if customization else ""
    return f"{kind.id_prefix}{product_id}{suffix}"


def resolve_effective_price(entry: CatalogEntry, customization: Optional[Customization] = None) -> float:
    # discounted_price > price > chosen customization > first option > 0
    if entry.discounted_price:
        return entry.discounted_price
    if entry.price:
        return entry.price
    if customization is not None:
        return customization.price
    if entry.customizable_options:
        return entry.customizable_options[0].price
    return 0.0


class LineItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    cart_item_id: str
    kind: CartKind
    product_id: int
    title: str
    slug: Optional[str] = None
    image_url: Optional[str] = None

    price: Optional[float] = None
    discounted_price: Optional[float] = None
    effective_price: float = Field(..., ge=0)
    selected_customization: Optional[Customization] = None

    quantity: int = Field(..., ge=1)
    unit_price: float = Field(..., ge=0)
    added_at: datetime = Field(default_factory=datetime.utcnow)

    @classmethod
    def build(
        cls,
        kind: CartKind,
        entry: CatalogEntry,
        quantity: int,
        customization: Optional[Customization] = None,
    ) -> "LineItem":
        effective_price = resolve_effective_price(entry, customization)
        # A selected customization replaces the base price.
        unit_price = customization.price if customization is not None else effective_price
        return cls(
            cart_item_id=make_cart_item_id(kind, entry.id, customization),
            kind=kind,
            product_id=entry.id,
            title=entry.title,
            slug=entry.slug,
            image_url=entry.image_url,
            price=entry.price,
            discounted_price=entry.discounted_price,
            effective_price=effective_price,
            selected_customization=customization,
            quantity=quantity,
            unit_price=unit_price,
        )

    @property
    def line_total(self) -> float:
        return self.unit_price * self.quantity

    @property
    def savings(self) -> float:
        if self.selected_customization is not None:
            return 0.0
        if self.discounted_price and self.price and self.price > self.discounted_price:
            return (self.price - self.discounted_price) * self.quantity
        return 0.0

    def with_quantity(self, quantity: int) -> "LineItem":
        return self.model_copy(update={"quantity": quantity})
