"""Services constructed once per app session and handed to every screen."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from tableorder.admin import AdminAuth
from tableorder.api import CafeApiClient
from tableorder.cart import CartStore
from tableorder.config import API_BASE_URL, STATE_DB_PATH
from tableorder.events import EventHub
from tableorder.menu import MenuCatalog
from tableorder.ordering import OrderSubmission
from tableorder.persistence import SnapshotStore
from tableorder.session import TableSession


@dataclass
class CafeServices:
    store: SnapshotStore
    api: CafeApiClient
    hub: EventHub
    cart: CartStore
    session: TableSession
    submission: OrderSubmission
    catalog: MenuCatalog
    auth: AdminAuth


def build_services(db_path: str | Path = STATE_DB_PATH, api_base_url: str = API_BASE_URL) -> CafeServices:
    store = SnapshotStore(db_path)
    store.bootstrap_schema()
    api = CafeApiClient(api_base_url)
    cart = CartStore(store)
    session = TableSession(store)
    return CafeServices(
        store=store,
        api=api,
        hub=EventHub(),
        cart=cart,
        session=session,
        submission=OrderSubmission(cart, session, api),
        catalog=MenuCatalog(api),
        auth=AdminAuth(api, store),
    )
