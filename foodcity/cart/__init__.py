from foodcity.cart.errors import CartError, CartResult
from foodcity.cart.models import CartKind, CatalogEntry, Customization, LineItem
from foodcity.cart.storage import CartStorage, InMemoryCartStorage, SqlCartStorage
from foodcity.cart.store import LineItemStore
from foodcity.cart.summary import CartSummary, format_for_order, summarize_cart
