"""Cart store for one table session, mirrored to the durable snapshot."""

from __future__ import annotations

import logging
from decimal import Decimal

from tableorder.models import CartLine, MenuItem
from tableorder.persistence import CART_KEY, SnapshotStore

logger = logging.getLogger(__name__)


class CartStore:
    """In-progress order lines; the source of truth until an order is submitted."""

    def __init__(self, store: SnapshotStore) -> None:
        # Snapshot key is shared by every table on this device.
        self._store = store
        self._lines: list[CartLine] = []
        self._restored = False

    @property
    def lines(self) -> list[CartLine]:
        return list(self._lines)

    def is_empty(self) -> bool:
        return not self._lines

    def item_count(self) -> int:
        """Total number of units, as shown on the cart badge."""
        return sum(line.quantity for line in self._lines)

    def total(self) -> Decimal:
        return sum((line.line_total for line in self._lines), Decimal("0"))

    def get(self, item_id: str) -> CartLine | None:
        for line in self._lines:
            if line.item_id == item_id:
                return line
        return None

    def restore(self) -> bool:
        """Load the durable snapshot once per session, only into an empty cart."""
        if self._restored:
            return False
        self._restored = True
        if self._lines:
            return False

        payload = self._store.get_json(CART_KEY)
        if payload is None:
            return False
        if not isinstance(payload, list):
            logger.warning("Cart snapshot is not a list; starting empty")
            return False

        restored: list[CartLine] = []
        for entry in payload:
            try:
                line = CartLine.from_snapshot(entry)
            except ValueError as exc:
                logger.warning("Dropping unreadable cart line: %s", exc)
                continue
            if line.quantity <= 0:
                continue
            existing = next((kept for kept in restored if kept.item_id == line.item_id), None)
            if existing is not None:
                existing.quantity += line.quantity
                continue
            restored.append(line)

        self._lines = restored
        logger.debug("cart_restored lines=%d", len(restored))
        return bool(restored)

    def add(self, item: MenuItem) -> CartLine:
        line = self.get(item.item_id)
        if line is not None:
            line.quantity += 1
        else:
            line = CartLine.from_menu_item(item)
            self._lines.append(line)
        self._persist()
        return line

    def set_quantity(self, item_id: str, quantity: int) -> None:
        if quantity <= 0:
            self.remove(item_id)
            return
        line = self.get(item_id)
        if line is None:
            return
        line.quantity = quantity
        self._persist()

    def increment(self, item_id: str, delta: int) -> None:
        line = self.get(item_id)
        if line is None:
            return
        self.set_quantity(item_id, line.quantity + delta)

    def remove(self, item_id: str) -> None:
        remaining = [line for line in self._lines if line.item_id != item_id]
        if len(remaining) == len(self._lines):
            return
        self._lines = remaining
        self._persist()

    def clear(self) -> None:
        self._lines = []
        self._store.delete(CART_KEY)

    def _persist(self) -> None:
        if not self._lines:
            self._store.delete(CART_KEY)
            return
        self._store.set_json(CART_KEY, [line.to_snapshot() for line in self._lines])
