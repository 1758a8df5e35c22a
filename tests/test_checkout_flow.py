from __future__ import annotations

import asyncio
import threading

import pytest
from conftest import FakeApi, menu_item

from tableorder.admin import AdminAuth
from tableorder.cafe_app import TableOrderApp
from tableorder.cart import CartStore
from tableorder.cart_screen import CartScreen
from tableorder.errors import ApiError
from tableorder.events import EventHub
from tableorder.menu import MenuCatalog
from tableorder.ordering import OrderSubmission
from tableorder.services import CafeServices
from tableorder.session import TableSession
from tableorder.status_screen import StatusScreen


class SlowKitchenApi(FakeApi):
    """Holds order creation until the test releases it."""

    def __init__(self) -> None:
        super().__init__()
        self.release = threading.Event()
        self.reject: ApiError | None = None

    def create_order(self, draft):
        self.release.wait(5)
        if self.reject is not None:
            self.calls.append(("create_order", (draft,)))
            raise self.reject
        return super().create_order(draft)


@pytest.fixture
def kitchen() -> SlowKitchenApi:
    return SlowKitchenApi()


@pytest.fixture
def services(store, kitchen) -> CafeServices:
    cart = CartStore(store)
    session = TableSession(store)
    cart.add(menu_item("chai", "30"))
    return CafeServices(
        store=store,
        api=kitchen,
        hub=EventHub(),
        cart=cart,
        session=session,
        submission=OrderSubmission(cart, session, kitchen),
        catalog=MenuCatalog(kitchen),
        auth=AdminAuth(kitchen, store),
    )


def run_checkout(services: CafeServices, kitchen: SlowKitchenApi, keys_while_sending: list[str]):
    """Open the cart, place the order, press keys while it is in flight, then let the kitchen answer."""

    async def scenario():
        app = TableOrderApp(services, url_table="H3", push_url=None)
        async with app.run_test() as pilot:
            await pilot.press("c")
            await pilot.press("ctrl+s")
            for key in keys_while_sending:
                await pilot.press(key)
            screen_while_sending = app.screen
            kitchen.release.set()
            await app.workers.wait_for_complete()
            await pilot.pause()
            await app.workers.wait_for_complete()
            await pilot.pause()
            return screen_while_sending, app.screen

    return asyncio.run(scenario())


def test_escape_while_placing_keeps_cart_open_and_finishes(services, kitchen):
    during, after = run_checkout(services, kitchen, ["escape", "escape"])

    assert isinstance(during, CartScreen)
    assert isinstance(after, StatusScreen)
    assert after.tracker.order.order_id == "abc123"
    assert services.cart.is_empty()
    assert services.submission.in_flight is False
    assert kitchen.call_names().count("create_order") == 1


def test_failed_placement_releases_submission(services, kitchen):
    kitchen.reject = ApiError(500, "Kitchen closed")

    during, after = run_checkout(services, kitchen, ["escape"])

    assert isinstance(after, CartScreen)
    assert after.error == "Kitchen closed"
    assert services.submission.in_flight is False
    assert services.cart.item_count() == 1

    services.submission.begin()
    assert services.submission.in_flight is True
