"""Remaining-time projection for orders being prepared."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timezone

from tableorder.models import Order, OrderStatus


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Projection:
    """Derived countdown state; never stored, always recomputed from the order."""

    remaining_seconds: float
    progress: float

    @property
    def remaining_minutes(self) -> int:
        return math.ceil(self.remaining_seconds / 60)

    @property
    def percent(self) -> float:
        return self.progress * 100


def needs_tick(order: Order | None) -> bool:
    """Whether a view showing `order` should keep its countdown timer running."""
    return order is not None and order.status is OrderStatus.PREPARING


def project(order: Order, now: datetime | None = None) -> Projection | None:
    """
    Project remaining preparation time for `order` at `now`.

    Returns None unless the order is preparing with a positive estimate and a
    start time. `remaining = max(0, estimate - elapsed)` and
    `progress = min(elapsed / estimate, 1)`.
    """
    if order.status is not OrderStatus.PREPARING:
        return None
    if not order.estimated_minutes or order.estimated_minutes <= 0 or order.time_set_at is None:
        return None

    now = now or utc_now()
    total_seconds = order.estimated_minutes * 60
    elapsed = max(0.0, (now - order.time_set_at).total_seconds())
    return Projection(
        remaining_seconds=max(0.0, total_seconds - elapsed),
        progress=min(elapsed / total_seconds, 1.0),
    )
