"""Monthly income report modal."""

from __future__ import annotations

import calendar

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Container
from textual.screen import ModalScreen
from textual.widgets import Static

from tableorder.models import Order
from tableorder.reports import current_month, daily_income, month_total, shift_month
from tableorder.rendering import format_price


class ReportModal(ModalScreen[None]):
    """Per-day income of completed orders, one month at a time."""

    BINDINGS = [
        ("left_square_bracket", "shift(-1)", "Prev month"),
        ("right_square_bracket", "shift(1)", "Next month"),
        ("escape", "close", "Close"),
        ("q", "close", "Close"),
    ]

    CSS = """
    ReportModal {
        align: center middle;
        background: $background 60%;
    }

    #report-dialog {
        width: 48;
        height: auto;
        max-height: 90%;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #report-title {
        text-style: bold;
        margin-bottom: 1;
    }

    #report-help {
        color: #dddddd;
        margin-top: 1;
    }
    """

    def __init__(self, orders: list[Order]) -> None:
        super().__init__()
        self.orders = orders
        self.year, self.month = current_month()

    def compose(self) -> ComposeResult:
        with Container(id="report-dialog"):
            yield Static(id="report-title")
            yield Static(id="report-body")
            yield Static("[ / ] change month. Esc close.", id="report-help")

    def on_mount(self) -> None:
        self._refresh_content()

    def action_shift(self, delta: int) -> None:
        self.year, self.month = shift_month(self.year, self.month, delta)
        self._refresh_content()

    def action_close(self) -> None:
        self.dismiss()

    def _refresh_content(self) -> None:
        rows = daily_income(self.orders, self.year, self.month)
        self.query_one("#report-title", Static).update(
            f"Income · {calendar.month_name[self.month]} {self.year}"
        )
        body = Text()
        for row in rows:
            if not row.income:
                continue
            body.append(f"{row.day.isoformat()}  ")
            body.append(format_price(row.income), style="bold")
            body.append("\n")
        if not body.plain:
            body.append("No completed orders this month.\n", style="dim")
        body.append(f"Total  {format_price(month_total(rows))}", style="bold green")
        self.query_one("#report-body", Static).update(body)
