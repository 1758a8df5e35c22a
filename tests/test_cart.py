from __future__ import annotations

import random
from decimal import Decimal

from conftest import menu_item

from tableorder.cart import CartStore
from tableorder.persistence import CART_KEY

ITEMS = [menu_item("chai", "30"), menu_item("maggi", "60.50"), menu_item("burger", "120"), menu_item("water", "20")]


def assert_cart_invariants(cart: CartStore) -> None:
    ids = [line.item_id for line in cart.lines]
    assert len(ids) == len(set(ids))
    assert all(line.quantity >= 1 for line in cart.lines)
    assert cart.total() == sum((line.price * line.quantity for line in cart.lines), Decimal("0"))


def test_add_merges_same_item(cart):
    cart.add(ITEMS[0])
    cart.add(ITEMS[0])
    cart.add(ITEMS[1])

    assert [(line.item_id, line.quantity) for line in cart.lines] == [("chai", 2), ("maggi", 1)]
    assert cart.item_count() == 3
    assert cart.total() == Decimal("120.50")


def test_random_operations_keep_invariants(store):
    rng = random.Random(20240611)
    for _ in range(25):
        store.delete(CART_KEY)
        cart = CartStore(store)
        for _ in range(60):
            item = rng.choice(ITEMS)
            op = rng.choice(("add", "set", "inc", "remove"))
            if op == "add":
                cart.add(item)
            elif op == "set":
                cart.set_quantity(item.item_id, rng.randint(-2, 5))
            elif op == "inc":
                cart.increment(item.item_id, rng.choice((-1, 1)))
            else:
                cart.remove(item.item_id)
            assert_cart_invariants(cart)

        reloaded = CartStore(store)
        reloaded.restore()
        assert [(line.item_id, line.quantity) for line in reloaded.lines] == [
            (line.item_id, line.quantity) for line in cart.lines
        ]


def test_set_quantity_to_zero_removes_line(cart):
    cart.add(ITEMS[0])
    cart.set_quantity("chai", 0)

    assert cart.is_empty()
    assert cart.get("chai") is None


def test_remove_missing_item_is_noop(cart):
    cart.add(ITEMS[0])
    cart.remove("nope")
    cart.remove("nope")

    assert cart.item_count() == 1


def test_restore_loads_persisted_lines(store, cart):
    cart.add(ITEMS[2])
    cart.add(ITEMS[2])

    fresh = CartStore(store)
    assert fresh.restore() is True
    assert fresh.get("burger").quantity == 2
    assert fresh.get("burger").price == Decimal("120")


def test_clear_then_fresh_load_does_not_resurrect(store, cart):
    cart.add(ITEMS[0])
    cart.add(ITEMS[1])
    cart.clear()

    fresh = CartStore(store)
    assert fresh.restore() is False
    assert fresh.is_empty()
    assert store.get_raw(CART_KEY) is None


def test_restore_runs_once(store, cart):
    cart.add(ITEMS[0])
    fresh = CartStore(store)
    fresh.restore()
    fresh.clear()

    assert fresh.restore() is False
    assert fresh.is_empty()


def test_corrupt_snapshot_gives_empty_cart(store):
    store.set_raw(CART_KEY, "{not json")
    cart = CartStore(store)

    assert cart.restore() is False
    assert cart.is_empty()
    assert cart.total() == Decimal("0")


def test_snapshot_of_wrong_shape_gives_empty_cart(store):
    store.set_json(CART_KEY, {"id": "chai"})
    cart = CartStore(store)
    cart.restore()

    assert cart.is_empty()


def test_restore_drops_bad_lines_and_merges_duplicates(store):
    store.set_json(
        CART_KEY,
        [
            {"id": "chai", "name": "Chai", "price": "30", "quantity": 1},
            {"id": "chai", "name": "Chai", "price": "30", "quantity": 2},
            {"id": "ghost", "name": "Ghost", "price": "oops", "quantity": 1},
            {"id": "zero", "name": "Zero", "price": "5", "quantity": 0},
            {"name": "no id"},
            "garbage",
        ],
    )
    cart = CartStore(store)
    cart.restore()

    assert [(line.item_id, line.quantity) for line in cart.lines] == [("chai", 3)]
