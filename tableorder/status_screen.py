"""Order status screen with a live countdown while the order is prepared."""

from __future__ import annotations

from rich.text import Text
from textual import work
from textual.app import ComposeResult
from textual.containers import Vertical
from textual.css.query import NoMatches
from textual.screen import Screen
from textual.timer import Timer
from textual.widgets import Footer, Header, Static

from tableorder.config import PROGRESS_TICK_SECONDS
from tableorder.models import Order
from tableorder.rendering import format_order_summary
from tableorder.services import CafeServices
from tableorder.tracking import FetchResult, OrderTracker, TrackingState


class StatusScreen(Screen):
    """Tracks one order until the customer leaves the screen."""

    BINDINGS = [
        ("r", "reload", "Refresh"),
        ("escape", "back", "Menu"),
    ]

    def __init__(self, services: CafeServices, order_id: str, initial: Order | None = None) -> None:
        super().__init__()
        self.initial = initial
        self.tracker = OrderTracker(order_id, services.api, services.store, services.hub, on_change=self._tracker_changed)
        self._timer: Timer | None = None

    def compose(self) -> ComposeResult:
        yield Header()
        with Vertical(classes="pane"):
            yield Static("Order Status", classes="pane-title")
            yield Static(id="order-card")
        yield Footer()

    def on_mount(self) -> None:
        self.tracker.start(self.initial)
        self._refresh_card()
        self._fetch()

    def on_unmount(self) -> None:
        self.tracker.stop()
        self._stop_timer()

    def action_reload(self) -> None:
        if self.tracker.state is not TrackingState.DELETED:
            self._fetch()

    def action_back(self) -> None:
        self.app.pop_screen()

    @work(thread=True, exclusive=True, group="order")
    def _fetch(self) -> None:
        result = self.tracker.fetch()
        self.app.call_from_thread(self._fetched, result)

    def _fetched(self, result: FetchResult) -> None:
        self.tracker.resolve(result)
        self._tracker_changed()

    def _tracker_changed(self) -> None:
        notice = self.tracker.notice
        if notice:
            severity = "error" if self.tracker.state is TrackingState.DELETED else "information"
            self.notify(notice, severity=severity)
            self.tracker.notice = None
        self._refresh_card()

    def _sync_timer(self) -> None:
        if self.tracker.needs_tick:
            if self._timer is None:
                self._timer = self.set_interval(PROGRESS_TICK_SECONDS, self._refresh_card)
        else:
            self._stop_timer()

    def _stop_timer(self) -> None:
        if self._timer is not None:
            self._timer.stop()
            self._timer = None

    def _refresh_card(self) -> None:
        self._sync_timer()
        try:
            card = self.query_one("#order-card", Static)
        except NoMatches:
            return
        tracker = self.tracker
        if tracker.state is TrackingState.DELETED:
            card.update(Text("This order was cancelled by staff.", style="#ffb3b3"))
            return
        if tracker.order is None:
            if tracker.state in (TrackingState.NOT_FOUND, TrackingState.FAILED):
                card.update(Text(f"Order Not Found\n{tracker.error}", style="#ffb3b3"))
            else:
                card.update("Loading...")
            return

        text = format_order_summary(tracker.order, tracker.projection())
        if tracker.state is TrackingState.CACHED:
            text.append("\n(offline copy)", style="dim")
        card.update(text)
