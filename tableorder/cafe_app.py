"""Main Textual app class."""

from __future__ import annotations

import logging

from textual import work
from textual.app import App

from tableorder.admin_screen import AdminScreen
from tableorder.cart_screen import CartScreen
from tableorder.config import PUSH_URL
from tableorder.errors import ApiError, AuthenticationRequired
from tableorder.events import SocketIOChannel
from tableorder.login_modal import LoginModal
from tableorder.menu_screen import MenuScreen
from tableorder.models import Order
from tableorder.services import CafeServices
from tableorder.status_screen import StatusScreen

logger = logging.getLogger(__name__)


class TableOrderApp(App):
    """Table ordering for customers and the live order board for staff."""

    TITLE = "Café Orders"

    CSS = """
    Screen {
        layout: vertical;
    }

    .pane {
        border: round $primary;
        padding: 1;
    }

    .side-pane {
        border: round $secondary;
        padding: 1;
    }

    .pane-title {
        text-style: bold;
        margin-bottom: 1;
    }

    .inline-error {
        color: #ffb3b3;
    }
    """

    BINDINGS = [
        ("ctrl+q", "quit", "Quit"),
    ]

    def __init__(
        self,
        services: CafeServices,
        url_table: str | None = None,
        order_id: str | None = None,
        admin: bool = False,
        push_url: str | None = PUSH_URL,
    ) -> None:
        super().__init__()
        self.services = services
        self.url_table = url_table
        self.start_order_id = order_id
        self.start_admin = admin
        self.channel = SocketIOChannel(services.hub, push_url, dispatch=self.call_from_thread) if push_url else None

    def on_mount(self) -> None:
        table_id = self.services.session.resolve(self.url_table)
        restored = self.services.cart.restore()
        logger.info("app_start table=%s cart_restored=%s admin=%s", table_id, restored, self.start_admin)
        if self.channel is not None:
            self._connect_push()

        self.push_screen(MenuScreen(self.services))
        if self.start_admin:
            self.open_admin()
        elif self.start_order_id:
            self.open_tracking(self.start_order_id)

    def on_unmount(self) -> None:
        if self.channel is not None:
            self.channel.disconnect()

    @work(thread=True, exclusive=True, group="push")
    def _connect_push(self) -> None:
        assert self.channel is not None
        if not self.channel.connect():
            self.call_from_thread(self.notify, "Live updates unavailable", severity="warning")

    def place_order(self, draft: dict) -> None:
        """Send a begun submission; runs on the app so leaving the cart cannot cancel it."""
        self._send_order(draft)

    @work(thread=True, exclusive=True, group="submit")
    def _send_order(self, draft: dict) -> None:
        try:
            order = self.services.submission.send(draft)
        except ApiError as exc:
            self.call_from_thread(self._order_failed, exc)
            return
        self.call_from_thread(self._order_placed, order)

    def _order_placed(self, order: Order) -> None:
        self.services.submission.complete(order)
        if isinstance(self.screen, CartScreen):
            self.pop_screen()
        self.open_tracking(order.order_id, initial=order)

    def _order_failed(self, exc: ApiError) -> None:
        error = self.services.submission.fail(exc)
        if isinstance(self.screen, CartScreen):
            self.screen.show_error(str(error))
        else:
            self.notify(str(error), severity="error")

    def open_tracking(self, order_id: str, initial: Order | None = None) -> None:
        self.push_screen(StatusScreen(self.services, order_id, initial=initial))

    def open_admin(self) -> None:
        """Open the staff board, asking for a login first when there is no token."""
        try:
            screen = AdminScreen(self.services)
        except AuthenticationRequired:
            self.push_screen(LoginModal(self.services.auth), self._after_login)
            return
        self.push_screen(screen)

    def _after_login(self, logged_in: bool | None) -> None:
        if logged_in:
            self.open_admin()
