from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

import pytest
from conftest import order_payload

from tableorder.models import Order, OrderItemRef, OrderStatus, parse_timestamp, payload_version, to_decimal


def test_status_aliases():
    assert OrderStatus.parse("ready") is OrderStatus.DONE
    assert OrderStatus.parse("Cancelled") is OrderStatus.CANCELED
    with pytest.raises(ValueError):
        OrderStatus.parse("lost")


@pytest.mark.parametrize(
    "current,target,allowed",
    [
        (OrderStatus.PENDING, OrderStatus.PREPARING, True),
        (OrderStatus.PENDING, OrderStatus.DONE, True),
        (OrderStatus.PREPARING, OrderStatus.PREPARING, True),
        (OrderStatus.PREPARING, OrderStatus.PENDING, False),
        (OrderStatus.DONE, OrderStatus.PREPARING, False),
        (OrderStatus.CANCELED, OrderStatus.DONE, False),
    ],
)
def test_transitions(current, target, allowed):
    assert current.can_become(target) is allowed


def test_order_from_api_with_populated_and_bare_items():
    order = Order.from_api(
        order_payload(
            items=[{"_id": "chai", "name": "Chai", "price": 30}, "maggi"],
            quantities=[1, 2],
            total=150,
            createdAt="2024-06-01T10:00:00.000Z",
        )
    )

    assert [item.label for item in order.items] == ["Chai", "maggi"]
    assert order.lines()[1] == (OrderItemRef("maggi"), 2)
    assert order.total == Decimal("150")
    assert order.created_at == datetime(2024, 6, 1, 10, 0, tzinfo=timezone.utc)


def test_order_accepts_id_and_table_identifier():
    order = Order.from_api({"id": "x1", "tableIdentifier": "R2", "items": [], "quantities": [], "total": 0})

    assert order.order_id == "x1"
    assert order.table_id == "R2"
    assert order.status is OrderStatus.PENDING


def test_mismatched_items_and_quantities_rejected():
    with pytest.raises(ValueError):
        Order.from_api(order_payload(quantities=[1, 2]))


def test_order_round_trips_through_snapshot():
    order = Order.from_api(order_payload(status="preparing", estimatedTime=12, timeSetAt="2024-06-01T10:00:00Z", seq=4))

    assert Order.from_api(order.to_api()) == order


def test_version_prefers_seq():
    assert payload_version({"seq": 7, "updatedAt": "2024-06-01T10:00:00Z"}) == 7.0
    assert payload_version({"updatedAt": 1717236000000}) == 1717236000.0
    assert payload_version({}) is None


def test_parse_timestamp_forms():
    expected = datetime(2024, 6, 1, 10, 0, tzinfo=timezone.utc)
    assert parse_timestamp("2024-06-01T10:00:00Z") == expected
    assert parse_timestamp("2024-06-01T12:00:00+02:00") == expected
    assert parse_timestamp(1717236000000) == expected
    assert parse_timestamp(None) is None


def test_to_decimal_rejects_non_numbers():
    assert to_decimal(12.5) == Decimal("12.5")
    for bad in ("abc", None, True, "NaN"):
        with pytest.raises(ValueError):
            to_decimal(bad)
