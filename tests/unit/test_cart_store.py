"""Unit tests for the cart store and its snapshot adapters."""

import json
from decimal import Decimal

import pytest
from services.store_service.services.cart_store import (
    CART_STORAGE_KEY,
    CartStore,
    FileCartStorage,
    InMemoryCartStorage,
)

LIPSTICK = {"id": "P1", "name": "Velvet Matte Lipstick", "price": 100, "discount": 0.1}
BLUSH = {"id": "P2", "name": "Cheek Tint", "price": 40, "discount": 0}


def _stored(storage) -> list:
    return json.loads(storage.get(CART_STORAGE_KEY))


# ---------------------------------------------------------------------------
# add / merge
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_add_same_variant_twice_increments_quantity():
    cart = CartStore(InMemoryCartStorage())

    cart.add_item(LIPSTICK, color="Red", shade="Rose")
    cart.add_item(LIPSTICK, quantity=2, color="Red", shade="Rose")

    assert len(cart) == 1
    assert cart.items[0].quantity == 3


@pytest.mark.unit
def test_different_shade_is_a_separate_line():
    cart = CartStore(InMemoryCartStorage())

    cart.add_item(LIPSTICK, shade="Rose")
    cart.add_item(LIPSTICK, shade="Nude")

    assert len(cart) == 2


@pytest.mark.unit
def test_every_mutation_persists_snapshot():
    storage = InMemoryCartStorage()
    cart = CartStore(storage)

    cart.add_item(LIPSTICK, shade="Rose")
    snapshot = _stored(storage)
    assert snapshot == [
        {
            "id": "P1",
            "name": "Velvet Matte Lipstick",
            "price": 100,
            "discount": 0.1,
            "image_urls": [],
            "quantity": 1,
            "selectedColor": None,
            "selectedShade": "Rose",
        }
    ]

    cart.update_quantity("P1", 4, shade="Rose")
    assert _stored(storage)[0]["quantity"] == 4

    cart.clear()
    assert _stored(storage) == []


# ---------------------------------------------------------------------------
# remove / update
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_remove_only_targets_matching_variant():
    cart = CartStore(InMemoryCartStorage())
    cart.add_item(LIPSTICK, shade="Rose")
    cart.add_item(LIPSTICK, shade="Nude")

    assert cart.remove_item("P1", shade="Nude") is True

    assert [item.shade for item in cart.items] == ["Rose"]
    assert cart.remove_item("P1") is False  # plain variant not in cart


@pytest.mark.unit
@pytest.mark.parametrize("quantity", [0, -1])
def test_update_quantity_below_one_is_noop(quantity):
    cart = CartStore(InMemoryCartStorage())
    cart.add_item(BLUSH, quantity=3)

    cart.update_quantity("P2", quantity)

    assert cart.items[0].quantity == 3


# ---------------------------------------------------------------------------
# total
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_total_applies_fractional_discount():
    cart = CartStore(InMemoryCartStorage())
    cart.add_item(LIPSTICK, quantity=2)
    cart.add_item(BLUSH)

    assert cart.total() == Decimal("220")


@pytest.mark.unit
def test_total_treats_non_numeric_fields_as_zero():
    snapshot = [
        {"id": "P1", "name": "A", "price": "abc", "discount": 0, "quantity": 1},
        {"id": "P2", "name": "B", "price": 10, "discount": None, "quantity": 2},
        {"id": "P3", "name": "C", "price": 10, "discount": 0, "quantity": "two"},
    ]
    storage = InMemoryCartStorage({CART_STORAGE_KEY: json.dumps(snapshot)})

    cart = CartStore(storage)

    assert len(cart) == 3
    assert cart.total() == Decimal("20")


@pytest.mark.unit
def test_empty_cart_total_is_zero():
    assert CartStore(InMemoryCartStorage()).total() == 0


# ---------------------------------------------------------------------------
# load
# ---------------------------------------------------------------------------


@pytest.mark.unit
@pytest.mark.parametrize("raw", ["{not json", '{"id": "P1"}', '[{"name": "no id"}]'])
def test_corrupt_snapshot_is_discarded(raw):
    cart = CartStore(InMemoryCartStorage({CART_STORAGE_KEY: raw}))

    assert len(cart) == 0


@pytest.mark.unit
def test_file_storage_survives_a_new_store(tmp_path):
    cart = CartStore(FileCartStorage(tmp_path))
    cart.add_item(LIPSTICK, quantity=2, shade="Rose")

    reloaded = CartStore(FileCartStorage(tmp_path))

    assert (tmp_path / "cart.json").exists()
    assert len(reloaded) == 1
    assert reloaded.items[0].key == ("P1", None, "Rose")
    assert reloaded.total() == Decimal("180")


@pytest.mark.unit
def test_order_lines_carry_variant_and_price():
    cart = CartStore(InMemoryCartStorage())
    cart.add_item({**LIPSTICK, "image": "https://cdn.example.com/p1.jpg"}, quantity=2, shade="Rose")

    (line,) = cart.order_lines()

    assert line.id == "P1"
    assert line.quantity == 2
    assert line.selected_shade == "Rose"
    assert line.price == Decimal("100")
    assert line.discount == Decimal("0.1")
    assert line.image_url == "https://cdn.example.com/p1.jpg"
