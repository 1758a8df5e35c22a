"""Staff board: live orders, order commands and menu item management."""

from __future__ import annotations

import logging

from rich.text import Text
from textual import work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.css.query import NoMatches
from textual.screen import Screen
from textual.timer import Timer
from textual.widgets import Footer, Header, Static

from tableorder.admin import AdminLiveView, MenuManager, OrdersFetch
from tableorder.config import PROGRESS_TICK_SECONDS, QR_OUTPUT_DIR
from tableorder.confirm_modal import ConfirmModal
from tableorder.errors import ApiError, AuthenticationError, ValidationError
from tableorder.item_form_modal import ItemFormModal
from tableorder.minutes_modal import MinutesModal
from tableorder.models import ItemDraft, MenuItem, OrderStatus
from tableorder.printer import check_printer_dependencies, print_order_ticket, print_table_card
from tableorder.qr import save_all_table_qr
from tableorder.rendering import format_menu_item, format_order_summary, window_bounds
from tableorder.report_modal import ReportModal
from tableorder.services import CafeServices

logger = logging.getLogger(__name__)

_VISIBLE_ORDERS = 6
_VISIBLE_ITEMS = 14


class AdminScreen(Screen):
    """Active orders for staff, kept live by push events."""

    BINDINGS = [
        ("up", "move(-1)", "Up"),
        ("down", "move(1)", "Down"),
        ("t", "set_time", "Set time"),
        ("f", "set_status('done')", "Done"),
        ("x", "set_status('canceled')", "Cancel"),
        ("d", "delete_order", "Delete"),
        ("p", "print_ticket", "Print"),
        ("c", "print_card", "Table card"),
        ("m", "report", "Income"),
        ("i", "menu_items", "Menu items"),
        ("g", "save_qr", "Table QR"),
        ("r", "reload", "Reload"),
        ("l", "logout", "Logout"),
        ("escape", "back", "Back"),
    ]

    def __init__(self, services: CafeServices) -> None:
        super().__init__()
        self.services = services
        self.view = AdminLiveView(services.auth, services.api, services.hub, on_change=self._refresh_orders)
        self.menu = MenuManager(services.auth, services.api)
        self.selected_index = 0
        self._timer: Timer | None = None

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal():
            with Vertical(classes="pane"):
                yield Static("Live Orders", classes="pane-title")
                yield Static("Loading orders...", id="admin-orders")
            with Vertical(classes="side-pane"):
                yield Static("Selected", classes="pane-title")
                yield Static(id="admin-detail")
        yield Footer()

    def on_mount(self) -> None:
        self.view.start()
        self._fetch()

    def on_unmount(self) -> None:
        self.view.stop()
        self._stop_timer()

    @work(thread=True, exclusive=True, group="admin-orders")
    def _fetch(self) -> None:
        result = self.view.fetch()
        self.app.call_from_thread(self._fetched, result)

    def _fetched(self, result: OrdersFetch) -> None:
        self.view.resolve(result)
        if self.view.auth_failed:
            self._session_expired()
            return
        if self.view.error:
            self.notify(self.view.error, severity="error")
        self._refresh_orders()

    def _session_expired(self) -> None:
        self.notify("Session expired, please log in again", severity="warning")
        self.app.pop_screen()
        self.app.open_admin()

    def _selected_order(self):
        orders = self.view.orders
        if not orders:
            return None
        self.selected_index = min(self.selected_index, len(orders) - 1)
        return orders[self.selected_index]

    def action_move(self, delta: int) -> None:
        if not self.view.orders:
            return
        self.selected_index = (self.selected_index + delta) % len(self.view.orders)
        self._refresh_orders()

    def action_reload(self) -> None:
        self._fetch()

    def action_back(self) -> None:
        self.app.pop_screen()

    def action_logout(self) -> None:
        self.services.auth.logout()
        self.notify("Logged out")
        self.app.pop_screen()

    def action_set_time(self) -> None:
        order = self._selected_order()
        if order is None:
            return
        order_id = order.order_id
        self.app.push_screen(
            MinutesModal(order.table_id or "?"),
            lambda raw: self._run_command("set_time", order_id, raw) if raw is not None else None,
        )

    def action_set_status(self, status: str) -> None:
        order = self._selected_order()
        if order is None:
            return
        self._run_command("set_status", order.order_id, status)

    def action_delete_order(self) -> None:
        order = self._selected_order()
        if order is None:
            return
        order_id = order.order_id
        self.app.push_screen(
            ConfirmModal(f"Delete order for table #{order.table_id or '?'}?"),
            lambda confirmed: self._run_command("delete", order_id, bool(confirmed)),
        )

    @work(thread=True, group="admin-commands")
    def _run_command(self, command: str, order_id: str, argument: object) -> None:
        view = self.view
        try:
            if command == "set_time":
                minutes = view.set_estimated_time(order_id, argument)
                message = f"Estimated time set to {minutes:g} min"
            elif command == "set_status":
                status = view.set_status(order_id, str(argument))
                message = f"Order marked {status.value}"
            else:
                if not view.delete_order(order_id, confirmed=bool(argument)):
                    return
                message = "Order deleted"
        except AuthenticationError:
            self.app.call_from_thread(self._session_expired)
            return
        except (ValidationError, ApiError) as exc:
            text = exc.describe("Request failed") if isinstance(exc, ApiError) else str(exc)
            self.app.call_from_thread(self.notify, text, severity="error")
            return
        self.app.call_from_thread(self.notify, message)

    def action_print_ticket(self) -> None:
        order = self._selected_order()
        if order is None:
            return
        ok, reason = check_printer_dependencies()
        if not ok:
            self.notify(reason, severity="error")
            return
        self._print(order)

    @work(thread=True, exclusive=True, group="printer")
    def _print(self, order) -> None:
        try:
            print_order_ticket(order)
        except Exception as exc:
            logger.exception("Ticket print failed for order %s", order.order_id)
            self.app.call_from_thread(self.notify, f"Print failed: {exc}", severity="error")
            return
        self.app.call_from_thread(self.notify, "Ticket printed")

    def action_print_card(self) -> None:
        order = self._selected_order()
        if order is None or not order.table_id:
            return
        ok, reason = check_printer_dependencies()
        if not ok:
            self.notify(reason, severity="error")
            return
        self._print_card(order.table_id)

    @work(thread=True, exclusive=True, group="printer")
    def _print_card(self, table_id: str) -> None:
        try:
            print_table_card(table_id)
        except Exception as exc:
            logger.exception("Table card print failed for %s", table_id)
            self.app.call_from_thread(self.notify, f"Print failed: {exc}", severity="error")
            return
        self.app.call_from_thread(self.notify, f"Table card printed for #{table_id}")

    def action_report(self) -> None:
        self.app.push_screen(ReportModal(list(self.view.orders)))

    def action_menu_items(self) -> None:
        self.app.push_screen(ItemsScreen(self.menu))

    def action_save_qr(self) -> None:
        self._save_qr()

    @work(thread=True, exclusive=True, group="qr")
    def _save_qr(self) -> None:
        try:
            paths = save_all_table_qr(QR_OUTPUT_DIR)
        except OSError as exc:
            self.app.call_from_thread(self.notify, f"Could not write QR codes: {exc}", severity="error")
            return
        self.app.call_from_thread(self.notify, f"Saved {len(paths)} table QR codes to {QR_OUTPUT_DIR}")

    def _sync_timer(self) -> None:
        if self.view.needs_tick:
            if self._timer is None:
                self._timer = self.set_interval(PROGRESS_TICK_SECONDS, self._refresh_orders)
        else:
            self._stop_timer()

    def _stop_timer(self) -> None:
        if self._timer is not None:
            self._timer.stop()
            self._timer = None

    def _refresh_orders(self) -> None:
        self._sync_timer()
        try:
            listing = self.query_one("#admin-orders", Static)
            detail = self.query_one("#admin-detail", Static)
        except NoMatches:
            return

        orders = self.view.orders
        if not orders:
            listing.update(Text("No active orders." if self.view.loaded else "Loading orders...", style="dim"))
            detail.update("")
            return

        selected = self._selected_order()
        projections = self.view.projections()
        start, end = window_bounds(len(orders), _VISIBLE_ORDERS, self.selected_index)
        text = Text()
        for idx in range(start, end):
            order = orders[idx]
            if idx > start:
                text.append("\n\n")
            summary = format_order_summary(order, projections.get(order.order_id))
            if idx == self.selected_index:
                summary.stylize("reverse", 0, len(summary.plain.split("\n", 1)[0]))
            text.append_text(summary)
        if end < len(orders):
            text.append(f"\n\n… {len(orders) - end} more", style="dim")
        listing.update(text)

        detail_text = Text()
        detail_text.append(f"Order {selected.order_id}\n", style="bold")
        detail_text.append(f"Table #{selected.table_id or '?'}\n")
        if selected.status in (OrderStatus.PENDING, OrderStatus.PREPARING):
            detail_text.append("t time · f done · x cancel · d delete", style="dim")
        else:
            detail_text.append("d delete", style="dim")
        detail.update(detail_text)


class ItemsScreen(Screen):
    """Create, edit and delete menu items."""

    BINDINGS = [
        ("up", "move(-1)", "Up"),
        ("down", "move(1)", "Down"),
        ("n", "new_item", "New"),
        ("e", "edit_item", "Edit"),
        ("d", "delete_item", "Delete"),
        ("r", "reload", "Reload"),
        ("escape", "back", "Back"),
    ]

    def __init__(self, menu: MenuManager) -> None:
        super().__init__()
        self.menu = menu
        self.selected_index = 0

    def compose(self) -> ComposeResult:
        yield Header()
        with Vertical(classes="pane"):
            yield Static("Menu Items", classes="pane-title")
            yield Static("Loading menu...", id="items-list")
        yield Footer()

    def on_mount(self) -> None:
        self._reload()

    def action_reload(self) -> None:
        self._reload()

    def action_back(self) -> None:
        self.app.pop_screen()

    def action_move(self, delta: int) -> None:
        if not self.menu.items:
            return
        self.selected_index = (self.selected_index + delta) % len(self.menu.items)
        self._refresh_items()

    def _selected_item(self) -> MenuItem | None:
        items = self.menu.items
        if not items:
            return None
        self.selected_index = min(self.selected_index, len(items) - 1)
        return items[self.selected_index]

    def action_new_item(self) -> None:
        self.app.push_screen(ItemFormModal(), lambda draft: self._save(draft, None) if draft else None)

    def action_edit_item(self) -> None:
        item = self._selected_item()
        if item is None:
            return
        item_id = item.item_id
        self.app.push_screen(ItemFormModal(item), lambda draft: self._save(draft, item_id) if draft else None)

    def action_delete_item(self) -> None:
        item = self._selected_item()
        if item is None:
            return
        item_id = item.item_id
        self.app.push_screen(
            ConfirmModal(f"Delete {item.name}?"),
            lambda confirmed: self._delete(item_id) if confirmed else None,
        )

    @work(thread=True, exclusive=True, group="items")
    def _reload(self) -> None:
        try:
            self.menu.refresh()
        except ApiError as exc:
            self.app.call_from_thread(self.notify, exc.describe("Failed to load menu"), severity="error")
        self.app.call_from_thread(self._refresh_items)

    @work(thread=True, exclusive=True, group="items")
    def _save(self, draft: ItemDraft, item_id: str | None) -> None:
        try:
            self.menu.save(draft, item_id=item_id)
        except ValidationError as exc:
            self.app.call_from_thread(self.notify, str(exc), severity="error")
            return
        except ApiError as exc:
            self.app.call_from_thread(self.notify, exc.describe("Failed to save item"), severity="error")
            return
        self.app.call_from_thread(self.notify, "Item saved")
        self.app.call_from_thread(self._refresh_items)

    @work(thread=True, exclusive=True, group="items")
    def _delete(self, item_id: str) -> None:
        try:
            self.menu.delete(item_id, confirmed=True)
        except ApiError as exc:
            self.app.call_from_thread(self.notify, exc.describe("Failed to delete item"), severity="error")
            return
        self.app.call_from_thread(self.notify, "Item deleted")
        self.app.call_from_thread(self._refresh_items)

    def _refresh_items(self) -> None:
        try:
            widget = self.query_one("#items-list", Static)
        except NoMatches:
            return
        items = self.menu.items
        if not items:
            widget.update(Text("No menu items.", style="dim"))
            return
        self._selected_item()
        start, end = window_bounds(len(items), _VISIBLE_ITEMS, self.selected_index)
        text = Text()
        for idx in range(start, end):
            line = format_menu_item(items[idx])
            if idx == self.selected_index:
                line.stylize("reverse")
            if idx > start:
                text.append("\n")
            text.append_text(line)
        widget.update(text)
