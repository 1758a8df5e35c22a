"""Domain models for tableorder."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any

from tableorder.constant import STATUS_ALIASES


def to_decimal(value: Any) -> Decimal:
    """Convert a JSON price or total into a Decimal."""
    if isinstance(value, bool) or value is None:
        raise ValueError(f"Not a price: {value!r}")
    try:
        result = Decimal(str(value).strip())
    except InvalidOperation as exc:
        raise ValueError(f"Not a price: {value!r}") from exc
    if not result.is_finite():
        raise ValueError(f"Not a price: {value!r}")
    return result


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO-8601 string or epoch milliseconds into an aware UTC datetime."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def format_timestamp(value: datetime) -> str:
    """Format an aware datetime the way the API emits it."""
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def payload_version(payload: dict[str, Any]) -> float | None:
    """Version of a pushed payload: `seq` when present, else `updatedAt`."""
    seq = payload.get("seq")
    if seq is not None:
        return float(seq)
    updated_at = parse_timestamp(payload.get("updatedAt"))
    if updated_at is None:
        return None
    return updated_at.timestamp()


class OrderStatus(str, Enum):
    """Closed set of order statuses; transitions are decided by the server."""

    PENDING = "pending"
    PREPARING = "preparing"
    DONE = "done"
    CANCELED = "canceled"

    @classmethod
    def parse(cls, value: Any) -> OrderStatus:
        text = str(value).strip().lower()
        return cls(STATUS_ALIASES.get(text, text))

    @property
    def is_terminal(self) -> bool:
        return self in (OrderStatus.DONE, OrderStatus.CANCELED)

    def can_become(self, target: OrderStatus) -> bool:
        """Whether an update moving from this status to `target` is accepted."""
        return target is self or target in _ALLOWED_TRANSITIONS[self]


_ALLOWED_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.PREPARING, OrderStatus.DONE, OrderStatus.CANCELED}),
    OrderStatus.PREPARING: frozenset({OrderStatus.DONE, OrderStatus.CANCELED}),
    OrderStatus.DONE: frozenset(),
    OrderStatus.CANCELED: frozenset(),
}


@dataclass(frozen=True)
class MenuItem:
    """A dish or drink served by the café."""

    item_id: str
    name: str
    price: Decimal
    category: str = ""
    description: str = ""
    image: str | None = None

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> MenuItem:
        item_id = payload.get("_id") or payload.get("id")
        if not item_id:
            raise ValueError("Menu item without id")
        return cls(
            item_id=str(item_id),
            name=str(payload.get("name", "")),
            price=to_decimal(payload.get("price", 0)),
            category=str(payload.get("category") or ""),
            description=str(payload.get("description") or ""),
            image=payload.get("image") or None,
        )


@dataclass
class CartLine:
    """One cart entry; at most one per item id, quantity always >= 1."""

    item_id: str
    name: str
    price: Decimal
    quantity: int = 1
    category: str = ""
    image: str | None = None

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity

    @classmethod
    def from_menu_item(cls, item: MenuItem) -> CartLine:
        return cls(item_id=item.item_id, name=item.name, price=item.price, category=item.category, image=item.image)

    def to_snapshot(self) -> dict[str, Any]:
        return {
            "id": self.item_id,
            "name": self.name,
            "price": str(self.price),
            "quantity": self.quantity,
            "category": self.category,
            "image": self.image,
        }

    @classmethod
    def from_snapshot(cls, payload: dict[str, Any]) -> CartLine:
        if not isinstance(payload, dict) or not payload.get("id"):
            raise ValueError(f"Invalid cart line: {payload!r}")
        quantity = payload.get("quantity", 1)
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            raise ValueError(f"Invalid cart quantity: {quantity!r}")
        return cls(
            item_id=str(payload["id"]),
            name=str(payload.get("name", "")),
            price=to_decimal(payload.get("price", 0)),
            quantity=quantity,
            category=str(payload.get("category") or ""),
            image=payload.get("image") or None,
        )


@dataclass(frozen=True)
class OrderItemRef:
    """Reference to a menu item inside an order, optionally populated by the server."""

    item_id: str
    name: str | None = None
    price: Decimal | None = None

    @property
    def label(self) -> str:
        return self.name or self.item_id

    @classmethod
    def from_api(cls, value: Any) -> OrderItemRef:
        if isinstance(value, dict):
            item_id = value.get("_id") or value.get("id")
            if not item_id:
                raise ValueError("Order item without id")
            price = value.get("price")
            return cls(
                item_id=str(item_id),
                name=value.get("name"),
                price=to_decimal(price) if price is not None else None,
            )
        if isinstance(value, (str, int)) and not isinstance(value, bool):
            return cls(item_id=str(value))
        raise ValueError(f"Invalid order item: {value!r}")

    def to_api(self) -> str | dict[str, Any]:
        if self.name is None and self.price is None:
            return self.item_id
        payload: dict[str, Any] = {"_id": self.item_id, "name": self.name}
        if self.price is not None:
            payload["price"] = float(self.price)
        return payload


@dataclass(frozen=True)
class Order:
    """Canonical order as returned or pushed by the server."""

    order_id: str
    table_id: str
    items: tuple[OrderItemRef, ...]
    quantities: tuple[int, ...]
    total: Decimal
    status: OrderStatus
    estimated_minutes: float | None = None
    time_set_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    seq: int | None = None

    def __post_init__(self) -> None:
        if len(self.items) != len(self.quantities):
            raise ValueError("Order items and quantities differ in length")

    @property
    def version(self) -> float | None:
        if self.seq is not None:
            return float(self.seq)
        if self.updated_at is not None:
            return self.updated_at.timestamp()
        return None

    def lines(self) -> list[tuple[OrderItemRef, int]]:
        return list(zip(self.items, self.quantities))

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> Order:
        if not isinstance(payload, dict):
            raise ValueError(f"Invalid order payload: {payload!r}")
        order_id = payload.get("_id") or payload.get("id")
        if not order_id:
            raise ValueError("Order without id")
        estimated = payload.get("estimatedTime")
        seq = payload.get("seq")
        return cls(
            order_id=str(order_id),
            table_id=str(payload.get("tableNumber") or payload.get("tableIdentifier") or ""),
            items=tuple(OrderItemRef.from_api(item) for item in payload.get("items") or []),
            quantities=tuple(int(q) for q in payload.get("quantities") or []),
            total=to_decimal(payload.get("total", 0)),
            status=OrderStatus.parse(payload.get("status", OrderStatus.PENDING.value)),
            estimated_minutes=float(estimated) if estimated not in (None, "") else None,
            time_set_at=parse_timestamp(payload.get("timeSetAt")),
            created_at=parse_timestamp(payload.get("createdAt")),
            updated_at=parse_timestamp(payload.get("updatedAt")),
            seq=int(seq) if seq is not None else None,
        )

    def to_api(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "_id": self.order_id,
            "tableNumber": self.table_id,
            "items": [item.to_api() for item in self.items],
            "quantities": list(self.quantities),
            "total": float(self.total),
            "status": self.status.value,
        }
        if self.estimated_minutes is not None:
            payload["estimatedTime"] = self.estimated_minutes
        for key, value in (
            ("timeSetAt", self.time_set_at),
            ("createdAt", self.created_at),
            ("updatedAt", self.updated_at),
        ):
            if value is not None:
                payload[key] = format_timestamp(value)
        if self.seq is not None:
            payload["seq"] = self.seq
        return payload


@dataclass
class ItemDraft:
    """Staff-entered menu item fields before they are sent to the API."""

    name: str
    price: str
    category: str = ""
    description: str = ""
    image_path: str | None = None
