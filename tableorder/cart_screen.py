"""Cart review and order placement screen."""

from __future__ import annotations

from rich.text import Text
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.css.query import NoMatches
from textual.screen import Screen
from textual.widgets import Footer, Header, Static

from tableorder.errors import ValidationError
from tableorder.rendering import format_cart_line, format_price, window_bounds
from tableorder.services import CafeServices


class CartScreen(Screen):
    """Adjust quantities and place the order for this table."""

    BINDINGS = [
        ("up", "move(-1)", "Up"),
        ("down", "move(1)", "Down"),
        ("plus,right", "change_quantity(1)", "+1"),
        ("minus,left", "change_quantity(-1)", "-1"),
        ("d", "remove_selected", "Remove"),
        ("x", "clear_cart", "Clear"),
        Binding("ctrl+s", "place_order", "Place order", priority=True),
        ("escape", "back", "Menu"),
    ]

    def __init__(self, services: CafeServices) -> None:
        super().__init__()
        self.services = services
        self.selected_index = 0
        self.error = ""

    def compose(self) -> ComposeResult:
        yield Header()
        with Vertical(classes="pane"):
            yield Static(id="cart-title", classes="pane-title")
            yield Static(id="cart-error", classes="inline-error")
            yield Static(id="cart-lines")
            yield Static(id="cart-total")
        yield Footer()

    def on_mount(self) -> None:
        if self.services.session.table_id is None:
            self.error = "No table number detected. Scan the QR code on your table."
        self._refresh_all()

    @property
    def _placing(self) -> bool:
        return self.services.submission.in_flight

    def _selected_item_id(self) -> str | None:
        lines = self.services.cart.lines
        if not lines:
            return None
        return lines[min(self.selected_index, len(lines) - 1)].item_id

    def action_move(self, delta: int) -> None:
        lines = self.services.cart.lines
        if not lines:
            return
        self.selected_index = (self.selected_index + delta) % len(lines)
        self._refresh_lines()

    def action_change_quantity(self, delta: int) -> None:
        item_id = self._selected_item_id()
        if self._placing or item_id is None:
            return
        self.services.cart.increment(item_id, delta)
        self._refresh_all()

    def action_remove_selected(self) -> None:
        item_id = self._selected_item_id()
        if self._placing or item_id is None:
            return
        self.services.cart.remove(item_id)
        self.notify("Item removed")
        self._refresh_all()

    def action_clear_cart(self) -> None:
        if self._placing:
            return
        self.services.cart.clear()
        self.selected_index = 0
        self.notify("Cart cleared!")
        self._refresh_all()

    def action_back(self) -> None:
        if self._placing:
            self.notify("Placing your order, please wait")
            return
        self.app.pop_screen()

    def action_place_order(self) -> None:
        try:
            draft = self.services.submission.begin()
        except ValidationError as exc:
            self.notify(str(exc), severity="error")
            return
        self.error = ""
        self._refresh_all()
        self.app.place_order(draft)

    def show_error(self, message: str) -> None:
        self.error = message
        self._refresh_all()

    def _refresh_all(self) -> None:
        self._refresh_header()
        self._refresh_lines()

    def _refresh_header(self) -> None:
        try:
            title = self.query_one("#cart-title", Static)
            error = self.query_one("#cart-error", Static)
            total = self.query_one("#cart-total", Static)
        except NoMatches:
            return
        table_id = self.services.session.table_id
        title.update(f"Your Cart · Table #{table_id}" if table_id else "Your Cart")
        error.update(self.error)
        cart = self.services.cart
        summary = Text()
        summary.append(f"\n{cart.item_count()} item(s)  ")
        summary.append(f"Total {format_price(cart.total())}", style="bold")
        if self._placing:
            summary.append("\nPlacing order...", style="dim")
        total.update(summary)

    def _refresh_lines(self) -> None:
        try:
            widget = self.query_one("#cart-lines", Static)
        except NoMatches:
            return
        lines = self.services.cart.lines
        if not lines:
            widget.update("Your cart is empty. Press Esc to add items.")
            return
        if self.selected_index >= len(lines):
            self.selected_index = len(lines) - 1

        rows = widget.size.height if widget.size.height > 0 else 8
        start, end = window_bounds(len(lines), rows, self.selected_index)
        text = Text()
        for idx in range(start, end):
            if idx > start:
                text.append("\n")
            text.append("➤ " if idx == self.selected_index else "  ")
            text.append_text(format_cart_line(lines[idx]))
        widget.update(text)
