from __future__ import annotations

import pytest
from conftest import order_payload

from tableorder.errors import ApiError
from tableorder.events import ORDER_DELETED, ORDER_UPDATE
from tableorder.models import Order, OrderStatus
from tableorder.persistence import order_key
from tableorder.tracking import FetchResult, OrderTracker, TrackingState


@pytest.fixture
def tracker(api, store, hub):
    api.orders["abc123"] = order_payload()
    changes = []
    tracker = OrderTracker("abc123", api, store, hub, on_change=lambda: changes.append(tracker.state))
    tracker.changes = changes
    tracker.start()
    yield tracker
    tracker.stop()


def test_load_shows_order_and_stores_snapshot(tracker, store):
    tracker.load()

    assert tracker.state is TrackingState.LIVE
    assert tracker.order.status is OrderStatus.PENDING
    assert store.get_json(order_key("abc123"))["tableNumber"] == "H3"


def test_push_update_changes_status(tracker, hub):
    tracker.load()
    hub.emit(ORDER_UPDATE, order_payload(status="preparing", estimatedTime=10, timeSetAt="2024-06-01T10:00:00Z"))

    assert tracker.order.status is OrderStatus.PREPARING
    assert tracker.notice == "Status → Preparing"
    assert tracker.needs_tick
    assert tracker.changes == [TrackingState.LIVE]


def test_updates_for_other_orders_are_ignored(tracker, hub):
    tracker.load()
    hub.emit(ORDER_UPDATE, order_payload("other", status="done"))

    assert tracker.order.status is OrderStatus.PENDING
    assert tracker.changes == []


def test_stale_update_is_discarded(tracker, hub):
    hub.emit(ORDER_UPDATE, order_payload(status="preparing", seq=5))
    hub.emit(ORDER_UPDATE, order_payload(status="pending", seq=3))

    assert tracker.order.status is OrderStatus.PREPARING
    assert tracker.order.seq == 5


def test_backward_transition_is_discarded(tracker, hub):
    hub.emit(ORDER_UPDATE, order_payload(status="done"))
    hub.emit(ORDER_UPDATE, order_payload(status="preparing"))

    assert tracker.order.status is OrderStatus.DONE


def test_delete_is_terminal(tracker, hub, store, api):
    tracker.load()
    hub.emit(ORDER_DELETED, {"id": "abc123"})

    assert tracker.state is TrackingState.DELETED
    assert tracker.order is None
    assert tracker.notice == "Order cancelled by staff"
    assert store.get_json(order_key("abc123")) is None

    hub.emit(ORDER_UPDATE, order_payload(status="preparing"))
    tracker.resolve(FetchResult(order=Order.from_api(order_payload())))
    assert tracker.state is TrackingState.DELETED
    assert tracker.order is None


def test_fetch_failure_falls_back_to_snapshot(tracker, api):
    tracker.load()
    api.fail_with = ApiError(0)

    tracker.load()

    assert tracker.state is TrackingState.CACHED
    assert tracker.order.order_id == "abc123"
    assert tracker.notice == "Order restored from cache"


def test_not_found_without_snapshot(api, store, hub):
    tracker = OrderTracker("missing", api, store, hub)
    tracker.start()
    tracker.load()

    assert tracker.state is TrackingState.NOT_FOUND
    assert tracker.error == "Order not found"


def test_server_error_without_snapshot(api, store, hub):
    api.fail_with = ApiError(500)
    tracker = OrderTracker("abc123", api, store, hub)
    tracker.start()
    tracker.load()

    assert tracker.state is TrackingState.FAILED
    assert tracker.error == "Server error"


def test_unversioned_fetch_does_not_override_push(tracker, hub):
    hub.emit(ORDER_UPDATE, order_payload(status="preparing"))
    result = FetchResult(order=Order.from_api(order_payload(status="pending")))

    tracker.resolve(result)

    assert tracker.order.status is OrderStatus.PREPARING


def test_stopped_tracker_ignores_results_and_events(tracker, hub):
    result = tracker.fetch()
    tracker.stop()

    tracker.resolve(result)
    hub.emit(ORDER_UPDATE, order_payload(status="done"))

    assert tracker.order is None
    assert hub.subscriber_count(ORDER_UPDATE) == 0


def test_malformed_push_is_dropped(tracker, hub):
    tracker.load()
    hub.emit(ORDER_UPDATE, order_payload(quantities=[1, 2, 3]))

    assert tracker.order.status is OrderStatus.PENDING
