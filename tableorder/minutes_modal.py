"""Preparation time entry modal screen."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.containers import Container
from textual.events import Key
from textual.screen import ModalScreen
from textual.widgets import Static

from tableorder.admin import parse_minutes
from tableorder.errors import InvalidTimeError


class MinutesModal(ModalScreen[str | None]):
    """Prompt for an estimated preparation time in minutes."""

    CSS = """
    MinutesModal {
        align: center middle;
        background: $background 60%;
    }

    #minutes-dialog {
        width: 56;
        height: auto;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #minutes-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #minutes-value {
        border: heavy $secondary;
        padding: 0 1;
        color: white;
        margin-bottom: 1;
    }

    #minutes-error {
        color: #ffb3b3;
        margin-bottom: 1;
    }

    #minutes-help {
        color: #dddddd;
    }
    """

    def __init__(self, table_id: str) -> None:
        super().__init__()
        self.table_id = table_id
        self.value = ""
        self.error = ""

    def compose(self) -> ComposeResult:
        with Container(id="minutes-dialog"):
            yield Static(f"Estimated time · Table #{self.table_id}", id="minutes-title")
            yield Static(id="minutes-value")
            yield Static(id="minutes-error")
            yield Static("Minutes. Enter confirm. Backspace delete. Esc/q cancel.", id="minutes-help")

    def on_mount(self) -> None:
        self._refresh_content()

    def on_key(self, event: Key) -> None:
        if event.key in {"escape", "q", "ctrl+c"}:
            self.dismiss(None)
            event.stop()
            return

        if event.key == "enter":
            self._confirm()
            event.stop()
            return

        if event.key == "backspace":
            if self.value:
                self.value = self.value[:-1]
                self.error = ""
                self._refresh_content()
            event.stop()
            return

        if event.is_printable and event.character and (event.character.isdigit() or event.character == "."):
            if len(self.value) < 5:
                self.value += event.character
            self.error = ""
            self._refresh_content()
            event.stop()

    def _confirm(self) -> None:
        try:
            parse_minutes(self.value)
        except InvalidTimeError as exc:
            self.error = str(exc)
            self._refresh_content()
            return
        self.dismiss(self.value)

    def _refresh_content(self) -> None:
        self.query_one("#minutes-value", Static).update(f"{self.value or ''} min")
        self.query_one("#minutes-error", Static).update(self.error or "")
