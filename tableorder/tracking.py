"""Order tracking: one order's status, reconciled from fetches and push events."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Callable

from tableorder.api import CafeApiClient
from tableorder.constant import STATUS_LABELS
from tableorder.errors import ApiError, NotFoundError
from tableorder.events import ORDER_DELETED, ORDER_UPDATE, EventHub, Resequencer, event_order_id, event_version
from tableorder.models import Order
from tableorder.persistence import SnapshotStore, order_key
from tableorder.timing import Projection, needs_tick, project

logger = logging.getLogger(__name__)


class TrackingState(str, Enum):
    LOADING = "loading"
    LIVE = "live"
    CACHED = "cached"
    NOT_FOUND = "not_found"
    FAILED = "failed"
    DELETED = "deleted"


@dataclass(frozen=True)
class FetchResult:
    order: Order | None = None
    error: ApiError | None = None


class OrderTracker:
    """Keeps one order in sync with the server while its status view is open."""

    def __init__(
        self,
        order_id: str,
        api: CafeApiClient,
        store: SnapshotStore,
        hub: EventHub,
        on_change: Callable[[], None] | None = None,
    ) -> None:
        self.order_id = order_id
        self._api = api
        self._store = store
        self._hub = hub
        self._on_change = on_change
        self._sequencer = Resequencer()
        self._unsubscribers: list[Callable[[], None]] = []
        self._closed = False
        self.order: Order | None = None
        self.state = TrackingState.LOADING
        self.error: str | None = None
        self.notice: str | None = None

    @property
    def needs_tick(self) -> bool:
        return needs_tick(self.order)

    def projection(self, now: datetime | None = None) -> Projection | None:
        if self.order is None:
            return None
        return project(self.order, now)

    def start(self, initial: Order | None = None) -> None:
        """Subscribe to push events; `initial` seeds the view with a known order."""
        self._closed = False
        self._unsubscribers = [
            self._hub.on(ORDER_UPDATE, self._on_update),
            self._hub.on(ORDER_DELETED, self._on_delete),
        ]
        if initial is not None and initial.order_id == self.order_id:
            self._accept(initial)

    def stop(self) -> None:
        """Unsubscribe; responses arriving afterwards are not applied."""
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []
        self._closed = True

    def fetch(self) -> FetchResult:
        try:
            return FetchResult(order=self._api.get_order(self.order_id))
        except ApiError as exc:
            return FetchResult(error=exc)

    def resolve(self, result: FetchResult) -> None:
        if self._closed:
            logger.debug("Dropping fetch result for closed tracker %s", self.order_id)
            return
        if self.state is TrackingState.DELETED:
            return

        if result.order is not None:
            # A pushed update already applied wins over an unversioned fetch.
            if self.state is TrackingState.LIVE and result.order.version is None:
                return
            self._accept(result.order)
            return

        self._fall_back(result.error)

    def load(self) -> None:
        self.resolve(self.fetch())

    def _fall_back(self, error: ApiError | None) -> None:
        cached = self._store.get_json(order_key(self.order_id))
        if isinstance(cached, dict):
            try:
                order = Order.from_api(cached)
            except (ValueError, TypeError) as exc:
                logger.warning("Ignoring unreadable order snapshot %s: %s", self.order_id, exc)
            else:
                self.order = order
                self.state = TrackingState.CACHED
                self.notice = "Order restored from cache"
                self._sequencer.observe(order.order_id, order.version)
                return

        if isinstance(error, NotFoundError):
            self.state = TrackingState.NOT_FOUND
            self.error = error.describe("Order not found")
        else:
            self.state = TrackingState.FAILED
            self.error = error.describe("Server error") if error else "Server error"

    def _accept(self, order: Order) -> bool:
        if order.order_id != self.order_id:
            return False
        if not self._sequencer.admit_update(order.order_id, order.version):
            return False
        previous = self.order
        if previous is not None and not previous.status.can_become(order.status):
            logger.info(
                "Ignoring transition %s -> %s for order %s",
                previous.status.value,
                order.status.value,
                order.order_id,
            )
            return False

        self.order = order
        self.state = TrackingState.LIVE
        self.error = None
        self._store.set_json(order_key(order.order_id), order.to_api())
        if previous is not None and previous.status is not order.status:
            self.notice = f"Status → {STATUS_LABELS[order.status.value]}"
        return True

    def _changed(self) -> None:
        if self._on_change is not None:
            self._on_change()

    def _on_update(self, payload: Any) -> None:
        if self._closed or event_order_id(payload) != self.order_id:
            return
        try:
            order = Order.from_api(payload)
        except (ValueError, TypeError) as exc:
            logger.info("Dropping malformed update for order %s: %s", self.order_id, exc)
            return
        if self._accept(order):
            self._changed()

    def _on_delete(self, payload: Any) -> None:
        if self._closed or event_order_id(payload) != self.order_id:
            return
        version = event_version(payload)
        if not self._sequencer.admit_delete(self.order_id, version):
            return
        self.order = None
        self.state = TrackingState.DELETED
        self.notice = "Order cancelled by staff"
        self._store.delete(order_key(self.order_id))
        self._changed()
