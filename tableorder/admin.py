"""Staff side: login, the live order list and menu item management."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Callable

from tableorder.api import CafeApiClient
from tableorder.errors import (
    ApiError,
    AuthenticationError,
    AuthenticationRequired,
    InvalidTimeError,
    NotFoundError,
    TransitionError,
    ValidationError,
)
from tableorder.events import NEW_ORDER, ORDER_DELETED, ORDER_UPDATE, EventHub, Resequencer, event_order_id, event_version
from tableorder.models import ItemDraft, MenuItem, Order, OrderStatus, to_decimal
from tableorder.persistence import TOKEN_KEY, SnapshotStore
from tableorder.timing import Projection, needs_tick, project

logger = logging.getLogger(__name__)

STAFF_STATUS_TARGETS = frozenset({OrderStatus.DONE, OrderStatus.CANCELED})


def parse_minutes(raw: Any) -> float:
    """Validate a staff-entered preparation time; must be a positive number."""
    if isinstance(raw, bool) or raw is None:
        raise InvalidTimeError(raw)
    try:
        minutes = float(str(raw).strip())
    except ValueError:
        raise InvalidTimeError(raw) from None
    if not math.isfinite(minutes) or minutes <= 0:
        raise InvalidTimeError(raw)
    return minutes


def validate_item(draft: ItemDraft) -> dict[str, str]:
    """Form fields for a menu item write, or ValidationError."""
    name = draft.name.strip()
    if not name:
        raise ValidationError("Item name is required")
    try:
        price = to_decimal(draft.price)
    except ValueError:
        raise ValidationError("Enter a valid price") from None
    if price <= 0:
        raise ValidationError("Enter a valid price")
    if draft.image_path and not Path(draft.image_path).is_file():
        raise ValidationError(f"Image not found: {draft.image_path}")
    return {
        "name": name,
        "description": draft.description.strip(),
        "price": str(price),
        "category": draft.category.strip(),
    }


class AdminAuth:
    """Stored admin credential token; acquisition is delegated to the API."""

    def __init__(self, api: CafeApiClient, store: SnapshotStore) -> None:
        self._api = api
        self._store = store

    @property
    def token(self) -> str | None:
        stored = self._store.get_json(TOKEN_KEY)
        return stored if isinstance(stored, str) and stored else None

    def require_token(self) -> str:
        token = self.token
        if token is None:
            raise AuthenticationRequired()
        return token

    def login(self, email: str, password: str) -> str:
        token = self._api.admin_login(email.strip(), password)
        self._store.set_json(TOKEN_KEY, token)
        logger.info("Admin logged in")
        return token

    def logout(self) -> None:
        self._store.delete(TOKEN_KEY)
        logger.info("Admin token cleared")


@dataclass(frozen=True)
class OrdersFetch:
    orders: list[Order] = field(default_factory=list)
    error: ApiError | None = None


class AdminLiveView:
    """
    Live list of active orders for staff.

    The list changes only through the initial fetch and push events. Commands
    are direct authenticated writes; their effect shows up when the server
    pushes the corresponding event.
    """

    def __init__(
        self,
        auth: AdminAuth,
        api: CafeApiClient,
        hub: EventHub,
        on_change: Callable[[], None] | None = None,
    ) -> None:
        self._auth = auth
        self._api = api
        self._hub = hub
        self._on_change = on_change
        self.token = auth.require_token()
        self._sequencer = Resequencer()
        self._unsubscribers: list[Callable[[], None]] = []
        self._closed = False
        # Ids admitted by push since the current fetch began.
        self._pushed_since_fetch: set[str] = set()
        self.orders: list[Order] = []
        self.loaded = False
        self.auth_failed = False
        self.error: str | None = None

    def start(self) -> None:
        self._closed = False
        self._unsubscribers = [
            self._hub.on(NEW_ORDER, self._on_new),
            self._hub.on(ORDER_UPDATE, self._on_update),
            self._hub.on(ORDER_DELETED, self._on_delete),
        ]

    def stop(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []
        self._closed = True

    def fetch(self) -> OrdersFetch:
        self._pushed_since_fetch = set()
        try:
            return OrdersFetch(orders=self._api.admin_orders(self.token))
        except ApiError as exc:
            return OrdersFetch(error=exc)

    def resolve(self, result: OrdersFetch) -> None:
        if self._closed:
            return
        if result.error is not None:
            if isinstance(result.error, AuthenticationError):
                self._auth.logout()
                self.auth_failed = True
            self.error = result.error.describe("Failed to load orders")
            return

        # The server list wins, except for entries pushed while the fetch was in flight.
        pushed = self._pushed_since_fetch
        server_ids = {order.order_id for order in result.orders}
        current = {order.order_id: order for order in self.orders}
        arrived = [order for order in self.orders if order.order_id in pushed and order.order_id not in server_ids]
        merged: list[Order] = []
        for order in result.orders:
            if self._sequencer.is_deleted(order.order_id):
                continue
            newer = current.get(order.order_id) if order.order_id in pushed else None
            if newer is not None and not self._sequencer.admit_update(order.order_id, order.version):
                merged.append(newer)
                continue
            self._sequencer.observe(order.order_id, order.version)
            merged.append(order)
        self.orders = arrived + merged
        self._pushed_since_fetch = set()
        self.loaded = True
        self.error = None

    def load(self) -> None:
        self.resolve(self.fetch())

    def find(self, order_id: str) -> Order | None:
        return next((order for order in self.orders if order.order_id == order_id), None)

    @property
    def needs_tick(self) -> bool:
        return any(needs_tick(order) for order in self.orders)

    def projections(self, now: datetime | None = None) -> dict[str, Projection | None]:
        """Countdown for every visible order, computed against one instant."""
        return {order.order_id: project(order, now) for order in self.orders}

    def _changed(self) -> None:
        if self._on_change is not None:
            self._on_change()

    def _parse(self, payload: Any) -> Order | None:
        try:
            return Order.from_api(payload)
        except (ValueError, TypeError) as exc:
            logger.info("Dropping malformed order event: %s", exc)
            return None

    def _on_new(self, payload: Any) -> None:
        order = self._parse(payload)
        if order is None or not self._sequencer.admit_update(order.order_id, order.version):
            return
        self.orders = [order] + [kept for kept in self.orders if kept.order_id != order.order_id]
        self._pushed_since_fetch.add(order.order_id)
        self._changed()

    def _on_update(self, payload: Any) -> None:
        order = self._parse(payload)
        if order is None:
            return
        for idx, existing in enumerate(self.orders):
            if existing.order_id != order.order_id:
                continue
            if not self._sequencer.admit_update(order.order_id, order.version):
                return
            if not existing.status.can_become(order.status):
                logger.info(
                    "Ignoring transition %s -> %s for order %s",
                    existing.status.value,
                    order.status.value,
                    order.order_id,
                )
                return
            self.orders = self.orders[:idx] + [order] + self.orders[idx + 1 :]
            self._pushed_since_fetch.add(order.order_id)
            self._changed()
            return

    def _on_delete(self, payload: Any) -> None:
        order_id = event_order_id(payload)
        if order_id is None or not self._sequencer.admit_delete(order_id, event_version(payload)):
            return
        remaining = [order for order in self.orders if order.order_id != order_id]
        if len(remaining) != len(self.orders):
            self.orders = remaining
            self._changed()

    def _open_order(self, order_id: str) -> Order:
        order = self.find(order_id)
        if order is None:
            raise NotFoundError(404, "Order not found")
        if order.status.is_terminal:
            raise TransitionError(f"Order is already {order.status.value}")
        return order

    def _write(self, send: Callable[..., None], *args: Any) -> None:
        try:
            send(self.token, *args)
        except AuthenticationError:
            self._auth.logout()
            self.auth_failed = True
            raise

    def set_estimated_time(self, order_id: str, raw_minutes: Any) -> float:
        minutes = parse_minutes(raw_minutes)
        self._open_order(order_id)
        self._write(self._api.set_order_time, order_id, minutes)
        logger.info("Set %s min on order %s", minutes, order_id)
        return minutes

    def set_status(self, order_id: str, status: OrderStatus | str) -> OrderStatus:
        target = status if isinstance(status, OrderStatus) else OrderStatus.parse(status)
        if target not in STAFF_STATUS_TARGETS:
            raise TransitionError(f"Staff cannot set status {target.value}")
        self._open_order(order_id)
        self._write(self._api.set_order_status, order_id, target)
        logger.info("Requested status %s on order %s", target.value, order_id)
        return target

    def delete_order(self, order_id: str, confirmed: bool = False) -> bool:
        """Dispatch a deletion only after the user confirmed it."""
        if not confirmed:
            return False
        self._write(self._api.delete_order, order_id)
        logger.info("Requested deletion of order %s", order_id)
        return True


class MenuManager:
    """Menu item create/update/delete for staff; the menu is refetched after writes."""

    def __init__(self, auth: AdminAuth, api: CafeApiClient) -> None:
        self._auth = auth
        self._api = api
        self.items: list[MenuItem] = []

    def refresh(self) -> list[MenuItem]:
        self.items = self._api.get_menu()
        return self.items

    def save(self, draft: ItemDraft, item_id: str | None = None) -> None:
        fields = validate_item(draft)
        token = self._auth.require_token()
        try:
            self._api.save_item(token, fields, draft.image_path or None, item_id=item_id)
        except AuthenticationError:
            self._auth.logout()
            raise
        logger.info("Saved menu item %s", item_id or fields["name"])
        self.refresh()

    def delete(self, item_id: str, confirmed: bool = False) -> bool:
        if not confirmed:
            return False
        token = self._auth.require_token()
        try:
            self._api.delete_item(token, item_id)
        except AuthenticationError:
            self._auth.logout()
            raise
        logger.info("Deleted menu item %s", item_id)
        self.refresh()
        return True
