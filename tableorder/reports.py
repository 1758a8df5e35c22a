"""Income report over completed orders."""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, datetime, tzinfo
from decimal import Decimal
from typing import Iterable

from tableorder.models import Order, OrderStatus


@dataclass(frozen=True)
class DailyIncome:
    day: date
    income: Decimal


def daily_income(orders: Iterable[Order], year: int, month: int, tz: tzinfo | None = None) -> list[DailyIncome]:
    """
    Per-day income of done orders created in the given month, one row per calendar day.

    Days are counted in `tz`, or in the device's local zone (with its DST rules) when omitted.
    """
    _, days_in_month = calendar.monthrange(year, month)
    totals = {date(year, month, day): Decimal("0") for day in range(1, days_in_month + 1)}
    for order in orders:
        if order.status is not OrderStatus.DONE or order.created_at is None:
            continue
        created = order.created_at.astimezone(tz).date()
        if created in totals:
            totals[created] += order.total
    return [DailyIncome(day, income) for day, income in totals.items()]


def month_total(rows: Iterable[DailyIncome]) -> Decimal:
    return sum((row.income for row in rows), Decimal("0"))


def shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def current_month(now: datetime | None = None) -> tuple[int, int]:
    now = now or datetime.now().astimezone()
    return now.year, now.month