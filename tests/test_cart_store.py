import random

import pytest

from foodcity.cart import (
    CartError,
    CartKind,
    CatalogEntry,
    Customization,
    InMemoryCartStorage,
    LineItemStore,
)


class FailingStorage(InMemoryCartStorage):
    def __init__(self):
        super().__init__()
        self.fail = False

    def save(self, key, items):
        if self.fail:
            raise OSError("disk full")
        super().save(key, items)


def _entry(product_id=1, price=100.0, discounted_price=None, options=None):
    return CatalogEntry(
        id=product_id,
        title=f"Dish {product_id}",
        slug=f"dish-{product_id}",
        price=price,
        discounted_price=discounted_price,
        customizable_options=options or [],
    )


LARGE = Customization(option="Large", price=150.0)


def test_worked_example_totals():
    store = LineItemStore(CartKind.PRODUCT)
    entry = _entry(options=[{"option": "Large", "price": 150.0}])

    store.add(entry, 2)
    store.add(entry, 1, LARGE)

    assert [line.cart_item_id for line in store.items()] == ["1", "1-custom-Large"]
    assert store.subtotal() == pytest.approx(350.0)
    assert store.total_items() == 3
    assert store.total_unique_items() == 2

    store.decrement("1")
    assert store.get_item("1").quantity == 1
    assert store.subtotal() == pytest.approx(250.0)
    assert store.tax() == pytest.approx(25.0)
    assert store.total_with_tax_and_delivery() == pytest.approx(315.0)


def test_adding_same_line_merges_quantity():
    store = LineItemStore(CartKind.PRODUCT)
    entry = _entry()

    store.add(entry, 2)
    result = store.add(entry, 3)

    assert result.ok
    assert result.item.quantity == 5
    assert len(store) == 1


def test_customized_line_is_separate_and_uses_option_price():
    store = LineItemStore(CartKind.PRODUCT)
    entry = _entry(discounted_price=90.0)

    store.add(entry, 1)
    result = store.add(entry, 1, LARGE)

    assert result.item.cart_item_id == "1-custom-Large"
    assert result.item.unit_price == 150.0
    assert store.get_item("1").unit_price == 90.0
    assert store.is_in_cart(1)
    assert store.is_in_cart(1, LARGE)
    assert not store.is_in_cart(2)


def test_price_falls_back_to_first_option_when_uncustomized():
    store = LineItemStore(CartKind.PRODUCT)
    entry = _entry(price=None, options=[{"option": "Half", "price": 80.0}, {"option": "Full", "price": 140.0}])

    result = store.add(entry, 1)

    assert result.item.effective_price == 80.0
    assert result.item.unit_price == 80.0


def test_addon_ids_are_prefixed():
    store = LineItemStore(CartKind.ADDON)

    result = store.add(_entry(product_id=7, price=30.0))

    assert result.item.cart_item_id == "addon-7"
    assert store.storage_key == "addon-cart-storage"


@pytest.mark.parametrize("quantity", [0, -2])
def test_add_rejects_non_positive_quantity(quantity):
    store = LineItemStore(CartKind.PRODUCT)

    result = store.add(_entry(), quantity)

    assert not result.ok
    assert result.error is CartError.INVALID_QUANTITY
    assert len(store) == 0


def test_add_rejects_missing_product():
    store = LineItemStore(CartKind.PRODUCT)

    result = store.add(None)

    assert result.error is CartError.INVALID_PRODUCT


def test_decrement_last_unit_removes_line():
    store = LineItemStore(CartKind.PRODUCT)
    store.add(_entry(), 1)

    result = store.decrement("1")

    assert result.ok
    assert store.get_item("1") is None
    assert store.total_items() == 0


def test_update_quantity_zero_removes_and_unknown_id_fails():
    store = LineItemStore(CartKind.PRODUCT)
    store.add(_entry(), 2)

    assert store.update_quantity("1", 4).item.quantity == 4
    assert store.update_quantity("1", 0).ok
    assert len(store) == 0

    missing = store.update_quantity("99", 2)
    assert missing.error is CartError.ITEM_NOT_FOUND


def test_increment_unknown_item_fails():
    store = LineItemStore(CartKind.PRODUCT)

    result = store.increment("nope")

    assert result.error is CartError.ITEM_NOT_FOUND


def test_remove_absent_item_is_a_no_op():
    store = LineItemStore(CartKind.PRODUCT)
    store.add(_entry(), 1)

    result = store.remove("42")

    assert result.ok
    assert store.total_items() == 1


def test_clear_empties_store_and_storage():
    storage = InMemoryCartStorage()
    store = LineItemStore(CartKind.PRODUCT, storage)
    store.add(_entry(), 2)

    store.clear()

    assert len(store) == 0
    assert storage.load("cart-storage") == []


def test_snapshot_is_immutable_view():
    store = LineItemStore(CartKind.PRODUCT)
    store.add(_entry(), 1)

    snapshot = store.snapshot()
    store.add(_entry(product_id=2), 1)

    assert len(snapshot) == 1
    assert isinstance(snapshot, tuple)


def test_state_survives_reload_from_storage():
    storage = InMemoryCartStorage()
    store = LineItemStore(CartKind.PRODUCT, storage)
    store.add(_entry(), 2)
    store.add(_entry(), 1, LARGE)

    reloaded = LineItemStore(CartKind.PRODUCT, storage)

    assert reloaded.quantities() == {"1": 2, "1-custom-Large": 1}
    assert reloaded.get_item("1-custom-Large").selected_customization == LARGE


def test_failed_save_leaves_cart_unchanged():
    storage = FailingStorage()
    store = LineItemStore(CartKind.PRODUCT, storage)
    store.add(_entry(), 2)

    storage.fail = True
    results = [
        store.add(_entry(product_id=2), 1),
        store.increment("1"),
        store.decrement("1"),
        store.remove("1"),
        store.clear(),
    ]

    assert all(result.error is CartError.STORAGE_FAILURE for result in results)
    assert store.quantities() == {"1": 2}
    assert storage.load("cart-storage")[0]["quantity"] == 2


def test_malformed_entries_are_discarded_on_load():
    storage = InMemoryCartStorage()
    store = LineItemStore(CartKind.PRODUCT, storage)
    store.add(_entry(), 1)
    good = storage.load("cart-storage")[0]

    storage.save(
        "cart-storage",
        [
            good,
            {"cart_item_id": "bad", "quantity": "many"},
            dict(good, cart_item_id="2", product_id=2, quantity=0),
            dict(good, cart_item_id="addon-3", kind="addon"),
        ],
    )
    reloaded = LineItemStore(CartKind.PRODUCT, storage)

    assert reloaded.quantities() == {"1": 1}


def test_savings_counts_discount_on_uncustomized_lines():
    store = LineItemStore(CartKind.PRODUCT)
    entry = _entry(price=120.0, discounted_price=100.0, options=[{"option": "Large", "price": 150.0}])

    store.add(entry, 2)
    store.add(entry, 1, LARGE)

    assert store.savings() == pytest.approx(40.0)


def test_delivery_is_free_above_threshold():
    store = LineItemStore(CartKind.PRODUCT)
    store.add(_entry(price=500.0), 1)

    total = store.total_with_tax_and_delivery(tax_rate=0.05, delivery_fee=40.0, free_delivery_threshold=499.0)

    assert total == pytest.approx(525.0)


@pytest.mark.parametrize("seed", range(20))
def test_quantities_stay_positive_under_any_mutation_sequence(seed):
    rng = random.Random(seed)
    storage = InMemoryCartStorage()
    store = LineItemStore(CartKind.ADDON if seed % 2 else CartKind.PRODUCT, storage)
    entries = [_entry(1, options=[{"option": "Large", "price": 150.0}]), _entry(2)]
    ids = [f"{store.kind.id_prefix}1", f"{store.kind.id_prefix}1-custom-Large", f"{store.kind.id_prefix}2"]

    for _ in range(60):
        op = rng.choice(["add", "add_custom", "increment", "decrement", "update", "remove"])
        if op == "add":
            store.add(rng.choice(entries), rng.randint(-1, 3))
        elif op == "add_custom":
            store.add(entries[0], rng.randint(1, 2), LARGE)
        elif op == "increment":
            store.increment(rng.choice(ids))
        elif op == "decrement":
            store.decrement(rng.choice(ids))
        elif op == "update":
            store.update_quantity(rng.choice(ids), rng.randint(-2, 4))
        else:
            store.remove(rng.choice(ids))

        quantities = store.quantities()
        if quantities:
            assert min(quantities.values()) >= 1
        assert all(item["quantity"] >= 1 for item in storage.load(store.kind.storage_key))
        assert store.total_items() == sum(quantities.values())
