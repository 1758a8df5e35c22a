from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from conftest import order_payload

from tableorder.models import Order
from tableorder.timing import needs_tick, project

T0 = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def preparing(minutes=10, time_set_at=T0, status="preparing") -> Order:
    return Order.from_api(
        order_payload(status=status, estimatedTime=minutes, timeSetAt=time_set_at.isoformat() if time_set_at else None)
    )


def test_halfway_through_estimate():
    projection = project(preparing(), T0 + timedelta(minutes=5))

    assert projection.remaining_seconds == pytest.approx(300)
    assert projection.progress == pytest.approx(0.5)
    assert projection.remaining_minutes == 5


def test_past_estimate_clamps():
    projection = project(preparing(), T0 + timedelta(minutes=11))

    assert projection.remaining_seconds == 0
    assert projection.progress == 1.0


def test_clock_before_start_clamps_elapsed():
    projection = project(preparing(), T0 - timedelta(minutes=1))

    assert projection.remaining_seconds == pytest.approx(600)
    assert projection.progress == 0


def test_remaining_never_increases_and_progress_never_decreases():
    order = preparing(minutes=7)
    previous = None
    for second in range(0, 9 * 60, 13):
        current = project(order, T0 + timedelta(seconds=second))
        if previous is not None:
            assert current.remaining_seconds <= previous.remaining_seconds
            assert current.progress >= previous.progress
        assert 0 <= current.progress <= 1
        previous = current


@pytest.mark.parametrize(
    "order",
    [
        preparing(status="pending"),
        preparing(status="done"),
        preparing(minutes=0),
        preparing(time_set_at=None),
    ],
)
def test_no_projection_outside_preparing_with_estimate(order):
    assert project(order, T0) is None


def test_needs_tick_only_while_preparing():
    assert needs_tick(preparing())
    assert not needs_tick(preparing(status="done"))
    assert not needs_tick(None)
