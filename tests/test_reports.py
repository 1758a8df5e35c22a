from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

from conftest import order_payload

from tableorder.models import Order
from tableorder.reports import daily_income, month_total, shift_month


def _order(order_id, status, created_at, total):
    return Order.from_api(order_payload(order_id, status=status, createdAt=created_at, total=total))


def test_daily_income_counts_only_done_orders_in_month():
    orders = [
        _order("a", "done", "2024-02-03T09:00:00Z", 100),
        _order("b", "ready", "2024-02-03T21:00:00Z", "50.50"),
        _order("c", "canceled", "2024-02-03T10:00:00Z", 999),
        _order("d", "done", "2024-03-01T00:00:00Z", 70),
        _order("e", "done", None, 10),
    ]

    rows = daily_income(orders, 2024, 2, tz=timezone.utc)

    assert len(rows) == 29
    assert rows[2].day == date(2024, 2, 3)
    assert rows[2].income == Decimal("150.50")
    assert month_total(rows) == Decimal("150.50")


def test_shift_month_wraps_years():
    assert shift_month(2024, 12, 1) == (2025, 1)
    assert shift_month(2024, 1, -1) == (2023, 12)
    assert shift_month(2024, 6, 0) == (2024, 6)


def test_orders_are_grouped_by_the_cafe_local_day():
    ist = timezone(timedelta(hours=5, minutes=30))
    orders = [_order("late", "done", "2024-02-29T19:00:00Z", 80)]

    february = daily_income(orders, 2024, 2, tz=ist)
    march = daily_income(orders, 2024, 3, tz=ist)

    assert month_total(february) == Decimal("0")
    assert march[0].day == date(2024, 3, 1)
    assert march[0].income == Decimal("80")


def test_default_grouping_uses_local_time():
    created = "2024-06-15T23:30:00Z"
    local_day = datetime(2024, 6, 15, 23, 30, tzinfo=timezone.utc).astimezone().date()

    rows = daily_income([_order("x", "done", created, 40)], local_day.year, local_day.month)

    assert next(row for row in rows if row.day == local_day).income == Decimal("40")
