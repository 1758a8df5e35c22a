"""Push channel: event hub, per-order resequencing and the socket.io transport."""

from __future__ import annotations

import logging
from functools import partial
from typing import Any, Callable

import socketio
from socketio.exceptions import ConnectionError as PushConnectionError

from tableorder.config import PUSH_RECONNECT_ATTEMPTS
from tableorder.models import payload_version

logger = logging.getLogger(__name__)

NEW_ORDER = "newOrder"
ORDER_UPDATE = "orderUpdate"
ORDER_DELETED = "orderDeleted"
EVENT_NAMES = (NEW_ORDER, ORDER_UPDATE, ORDER_DELETED)

Handler = Callable[[Any], None]


def event_order_id(payload: Any) -> str | None:
    """Identity carried by an order payload (`_id`) or a deletion payload (`id`)."""
    if isinstance(payload, dict):
        value = payload.get("_id") or payload.get("id")
        return str(value) if value else None
    if isinstance(payload, str):
        return payload or None
    return None


def event_version(payload: Any) -> float | None:
    if not isinstance(payload, dict):
        return None
    try:
        return payload_version(payload)
    except (ValueError, TypeError):
        return None


class EventHub:
    """Dispatches named push events to subscribed views."""

    def __init__(self) -> None:
        self._handlers: dict[str, list[Handler]] = {}

    def on(self, name: str, handler: Handler) -> Callable[[], None]:
        """Subscribe `handler`; returns a callable that unsubscribes it."""
        self._handlers.setdefault(name, []).append(handler)
        return partial(self.off, name, handler)

    def off(self, name: str, handler: Handler) -> None:
        handlers = self._handlers.get(name, [])
        if handler in handlers:
            handlers.remove(handler)

    def subscriber_count(self, name: str) -> int:
        return len(self._handlers.get(name, []))

    def emit(self, name: str, payload: Any) -> None:
        for handler in list(self._handlers.get(name, [])):
            try:
                handler(payload)
            except Exception:
                logger.exception("Handler for %s failed", name)


class Resequencer:
    """
    Tracks the last applied version per order identity.

    Versions come from the event payload (`seq`, else `updatedAt`). An event
    older than the last applied one is discarded; an identity seen deleted
    never admits another update. Events without a version are admitted.
    """

    def __init__(self) -> None:
        self._last: dict[str, float] = {}
        self._deleted: set[str] = set()

    def is_deleted(self, order_id: str) -> bool:
        return order_id in self._deleted

    def _is_stale(self, order_id: str, version: float | None) -> bool:
        if version is None:
            return False
        last = self._last.get(order_id)
        return last is not None and version < last

    def observe(self, order_id: str, version: float | None) -> None:
        if version is None:
            return
        last = self._last.get(order_id)
        if last is None or version > last:
            self._last[order_id] = version

    def admit_update(self, order_id: str, version: float | None) -> bool:
        if order_id in self._deleted:
            logger.info("Discarding update for deleted order %s", order_id)
            return False
        if self._is_stale(order_id, version):
            logger.info("Discarding stale update for order %s (version %s)", order_id, version)
            return False
        self.observe(order_id, version)
        return True

    def admit_delete(self, order_id: str, version: float | None) -> bool:
        if self._is_stale(order_id, version):
            logger.info("Discarding stale delete for order %s (version %s)", order_id, version)
            return False
        self._deleted.add(order_id)
        self.observe(order_id, version)
        return True


class SocketIOChannel:
    """Forwards socket.io events into an EventHub through `dispatch`."""

    def __init__(
        self,
        hub: EventHub,
        url: str,
        dispatch: Callable[..., Any] | None = None,
        client: socketio.Client | None = None,
    ) -> None:
        self.hub = hub
        self.url = url
        self._dispatch = dispatch or (lambda fn, *args: fn(*args))
        self._client = client or socketio.Client(reconnection_attempts=PUSH_RECONNECT_ATTEMPTS)
        for name in EVENT_NAMES:
            self._client.on(name, partial(self._forward, name))

    @property
    def connected(self) -> bool:
        return bool(self._client.connected)

    def _forward(self, name: str, payload: Any = None) -> None:
        logger.debug("push_event name=%s", name)
        self._dispatch(self.hub.emit, name, payload)

    def connect(self) -> bool:
        try:
            self._client.connect(self.url)
        except PushConnectionError as exc:
            logger.warning("Push channel unavailable at %s: %s", self.url, exc)
            return False
        logger.info("Push channel connected to %s", self.url)
        return True

    def disconnect(self) -> None:
        if self._client.connected:
            self._client.disconnect()
