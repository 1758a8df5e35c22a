from __future__ import annotations

from decimal import Decimal
from typing import Any

import pytest

from tableorder.admin import AdminAuth
from tableorder.cart import CartStore
from tableorder.errors import ApiError, NotFoundError
from tableorder.events import EventHub
from tableorder.models import MenuItem, Order
from tableorder.persistence import TOKEN_KEY, SnapshotStore
from tableorder.session import TableSession


def order_payload(order_id: str = "abc123", **overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "_id": order_id,
        "tableNumber": "H3",
        "items": [{"_id": "chai", "name": "Masala Chai", "price": 30}],
        "quantities": [2],
        "total": 60,
        "status": "pending",
    }
    payload.update(overrides)
    return payload


def menu_item(item_id: str, price: str = "10", name: str | None = None, category: str = "chai") -> MenuItem:
    return MenuItem(item_id=item_id, name=name or item_id.title(), price=Decimal(price), category=category)


class FakeApi:
    """In-memory stand-in for CafeApiClient that records every call."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self.orders: dict[str, dict[str, Any]] = {}
        self.menu: list[MenuItem] = []
        self.categories: list[Any] = []
        self.admin_list: list[Order] = []
        self.created_id = "abc123"
        self.fail_with: ApiError | None = None

    def _record(self, name: str, *args: Any) -> None:
        self.calls.append((name, args))
        if self.fail_with is not None:
            raise self.fail_with

    def call_names(self) -> list[str]:
        return [name for name, _ in self.calls]

    def get_menu(self) -> list[MenuItem]:
        self._record("get_menu")
        return list(self.menu)

    def get_categories(self) -> list[Any]:
        self._record("get_categories")
        return list(self.categories)

    def create_order(self, draft: dict[str, Any]) -> Order:
        self._record("create_order", draft)
        payload = dict(draft, _id=self.created_id)
        self.orders[self.created_id] = payload
        return Order.from_api(payload)

    def get_order(self, order_id: str) -> Order:
        self._record("get_order", order_id)
        if order_id not in self.orders:
            raise NotFoundError(404, "Order not found")
        return Order.from_api(self.orders[order_id])

    def list_table_orders(self, table_id: str) -> list[Order]:
        self._record("list_table_orders", table_id)
        return [Order.from_api(p) for p in self.orders.values() if p.get("tableNumber") == table_id]

    def admin_login(self, email: str, password: str) -> str:
        self._record("admin_login", email, password)
        return "tok-123"

    def admin_orders(self, token: str) -> list[Order]:
        self._record("admin_orders", token)
        return list(self.admin_list)

    def save_item(self, token: str, fields: dict[str, str], image_path: str | None = None, item_id: str | None = None) -> None:
        self._record("save_item", token, fields, image_path, item_id)

    def delete_item(self, token: str, item_id: str) -> None:
        self._record("delete_item", token, item_id)

    def set_order_time(self, token: str, order_id: str, minutes: float) -> None:
        self._record("set_order_time", token, order_id, minutes)

    def set_order_status(self, token: str, order_id: str, status: Any) -> None:
        self._record("set_order_status", token, order_id, status)

    def delete_order(self, token: str, order_id: str) -> None:
        self._record("delete_order", token, order_id)


@pytest.fixture
def store(tmp_path) -> SnapshotStore:
    snapshot_store = SnapshotStore(tmp_path / "state.db")
    snapshot_store.bootstrap_schema()
    return snapshot_store


@pytest.fixture
def api() -> FakeApi:
    return FakeApi()


@pytest.fixture
def hub() -> EventHub:
    return EventHub()


@pytest.fixture
def cart(store) -> CartStore:
    return CartStore(store)


@pytest.fixture
def session(store) -> TableSession:
    table_session = TableSession(store)
    table_session.resolve("H3")
    return table_session


@pytest.fixture
def auth(api, store) -> AdminAuth:
    store.set_json(TOKEN_KEY, "tok-123")
    return AdminAuth(api, store)
