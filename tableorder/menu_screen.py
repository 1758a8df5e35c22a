"""Customer menu screen and the past-orders modal."""

from __future__ import annotations

from rich.text import Text
from textual import work
from textual.app import ComposeResult
from textual.containers import Container, Horizontal, Vertical
from textual.css.query import NoMatches
from textual.screen import ModalScreen, Screen
from textual.widgets import Footer, Header, Static

from tableorder.cart_screen import CartScreen
from tableorder.errors import ApiError, MissingTableError
from tableorder.menu import MenuFetch, add_to_cart
from tableorder.models import Order
from tableorder.rendering import format_menu_item, format_order_summary, window_bounds
from tableorder.services import CafeServices


class HistoryModal(ModalScreen[None]):
    """Past orders placed from this table."""

    BINDINGS = [
        ("escape", "close", "Close"),
        ("q", "close", "Close"),
    ]

    CSS = """
    HistoryModal {
        align: center middle;
        background: $background 60%;
    }

    #history-dialog {
        width: 64;
        height: auto;
        max-height: 90%;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #history-title {
        text-style: bold;
        margin-bottom: 1;
    }
    """

    def __init__(self, table_id: str, orders: list[Order]) -> None:
        super().__init__()
        self.table_id = table_id
        self.orders = orders

    def compose(self) -> ComposeResult:
        with Container(id="history-dialog"):
            yield Static(f"Past orders for table #{self.table_id}", id="history-title")
            yield Static(id="history-body")

    def on_mount(self) -> None:
        body = Text()
        if not self.orders:
            body.append("No orders yet.", style="dim")
        for idx, order in enumerate(self.orders):
            if idx > 0:
                body.append("\n\n")
            body.append_text(format_order_summary(order))
        self.query_one("#history-body", Static).update(body)

    def action_close(self) -> None:
        self.dismiss()


class MenuScreen(Screen):
    """Browse the menu by category and add items to the cart."""

    BINDINGS = [
        ("left", "cycle_category(-1)", "Prev category"),
        ("right", "cycle_category(1)", "Next category"),
        ("up", "move(-1)", "Up"),
        ("down", "move(1)", "Down"),
        ("enter", "add_selected", "Add to cart"),
        ("c", "open_cart", "Cart"),
        ("h", "history", "Past orders"),
        ("r", "reload", "Reload"),
        ("a", "admin", "Staff"),
    ]

    def __init__(self, services: CafeServices) -> None:
        super().__init__()
        self.services = services
        self.category_index = 0
        self.selected_index = 0

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal():
            with Vertical(classes="pane"):
                yield Static(id="categories", classes="pane-title")
                yield Static("Loading menu...", id="menu-items")
            with Vertical(classes="side-pane"):
                yield Static(id="table-badge", classes="pane-title")
                yield Static(id="cart-badge")
        yield Footer()

    def on_mount(self) -> None:
        self._refresh_all()
        self._load_menu()

    def on_screen_resume(self) -> None:
        self._refresh_all()

    @work(thread=True, exclusive=True, group="menu")
    def _load_menu(self) -> None:
        result = self.services.catalog.fetch()
        self.app.call_from_thread(self._menu_loaded, result)

    def _menu_loaded(self, result: MenuFetch) -> None:
        catalog = self.services.catalog
        catalog.resolve(result)
        if catalog.error:
            self.notify(catalog.error, severity="error")
        self.category_index = min(self.category_index, len(catalog.categories) - 1)
        self._refresh_all()

    def _current_category_id(self) -> str:
        return self.services.catalog.categories[self.category_index].category_id

    def _visible_items(self):
        return self.services.catalog.visible_items(self._current_category_id())

    def action_cycle_category(self, delta: int) -> None:
        categories = self.services.catalog.categories
        self.category_index = (self.category_index + delta) % len(categories)
        self.selected_index = 0
        self._refresh_all()

    def action_move(self, delta: int) -> None:
        items = self._visible_items()
        if not items:
            return
        self.selected_index = (self.selected_index + delta) % len(items)
        self._refresh_items()

    def action_add_selected(self) -> None:
        items = self._visible_items()
        if not items:
            return
        item = items[min(self.selected_index, len(items) - 1)]
        try:
            add_to_cart(item, self.services.cart, self.services.session)
        except MissingTableError:
            self.notify("Enter your table number first!", severity="error")
            return
        self.notify(f"{item.name} added!")
        self._refresh_all()

    def action_open_cart(self) -> None:
        self.app.push_screen(CartScreen(self.services))

    def action_reload(self) -> None:
        self._load_menu()

    def action_admin(self) -> None:
        self.app.open_admin()

    def action_history(self) -> None:
        table_id = self.services.session.table_id
        if not table_id:
            self.notify("No table number detected", severity="error")
            return
        self._load_history(table_id)

    @work(thread=True, exclusive=True, group="history")
    def _load_history(self, table_id: str) -> None:
        try:
            orders = self.services.api.list_table_orders(table_id)
        except ApiError as exc:
            self.app.call_from_thread(self.notify, exc.describe("Failed to load past orders"), severity="error")
            return
        self.app.call_from_thread(self.app.push_screen, HistoryModal(table_id, orders))

    def _refresh_all(self) -> None:
        self._refresh_categories()
        self._refresh_items()
        self._refresh_cart_badge()

    def _refresh_categories(self) -> None:
        try:
            widget = self.query_one("#categories", Static)
        except NoMatches:
            return
        categories = self.services.catalog.categories
        start, end = window_bounds(len(categories), 7, self.category_index)
        text = Text()
        if start > 0:
            text.append("‹ ", style="dim")
        for idx in range(start, end):
            style = "bold reverse" if idx == self.category_index else "dim"
            text.append(f" {categories[idx].name} ", style=style)
        if end < len(categories):
            text.append(" ›", style="dim")
        widget.update(text)

    def _refresh_items(self) -> None:
        try:
            widget = self.query_one("#menu-items", Static)
        except NoMatches:
            return
        items = self._visible_items()
        if not items:
            widget.update("No items in this category" if self.services.catalog.items else "Loading menu...")
            return
        if self.selected_index >= len(items):
            self.selected_index = 0

        rows = max(1, widget.size.height // 2) if widget.size.height > 0 else 8
        start, end = window_bounds(len(items), rows, self.selected_index)
        cart = self.services.cart
        text = Text()
        if start > 0:
            text.append("⋮\n", style="dim")
        for idx in range(start, end):
            if idx > start:
                text.append("\n")
            pointer = "➤ " if idx == self.selected_index else "  "
            line = cart.get(items[idx].item_id)
            text.append(pointer)
            text.append_text(format_menu_item(items[idx], line.quantity if line else 0))
        if end < len(items):
            text.append("\n⋮", style="dim")
        widget.update(text)

    def _refresh_cart_badge(self) -> None:
        try:
            table_widget = self.query_one("#table-badge", Static)
            cart_widget = self.query_one("#cart-badge", Static)
        except NoMatches:
            return
        table_id = self.services.session.table_id
        if table_id:
            table_widget.update(f"Table #{table_id}")
        else:
            table_widget.update(Text("No table number detected. Scan the QR code on your table.", style="#ffb3b3"))
        cart_widget.update(f"Cart: {self.services.cart.item_count()} item(s)\nPress C to review")
