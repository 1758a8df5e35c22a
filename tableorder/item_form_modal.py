"""Menu item create/edit form."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.containers import Container
from textual.screen import ModalScreen
from textual.widgets import Input, Static

from tableorder.admin import validate_item
from tableorder.errors import ValidationError
from tableorder.models import ItemDraft, MenuItem

_FIELDS = (
    ("name", "Name"),
    ("price", "Price"),
    ("category", "Category id"),
    ("description", "Description"),
    ("image_path", "Image file (optional)"),
)


class ItemFormModal(ModalScreen[ItemDraft | None]):
    """Edit a menu item draft; dismisses with the draft or None on cancel."""

    BINDINGS = [
        ("escape", "cancel", "Cancel"),
        ("ctrl+s", "save", "Save"),
    ]

    CSS = """
    ItemFormModal {
        align: center middle;
        background: $background 60%;
    }

    #item-dialog {
        width: 64;
        height: auto;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #item-title {
        text-style: bold;
        margin-bottom: 1;
    }

    #item-error {
        color: #ffb3b3;
        margin-top: 1;
    }

    #item-help {
        color: #dddddd;
    }
    """

    def __init__(self, item: MenuItem | None = None) -> None:
        super().__init__()
        self.item = item

    def compose(self) -> ComposeResult:
        title = f"Edit {self.item.name}" if self.item else "New menu item"
        prefill = self._prefill()
        with Container(id="item-dialog"):
            yield Static(title, id="item-title")
            for key, label in _FIELDS:
                yield Input(value=prefill.get(key, ""), placeholder=label, id=f"item-{key.replace('_', '-')}")
            yield Static(id="item-error")
            yield Static("Ctrl+S save. Esc cancel.", id="item-help")

    def _prefill(self) -> dict[str, str]:
        if self.item is None:
            return {}
        return {
            "name": self.item.name,
            "price": str(self.item.price),
            "category": self.item.category or "",
            "description": self.item.description or "",
        }

    def _value(self, key: str) -> str:
        return self.query_one(f"#item-{key.replace('_', '-')}", Input).value

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        self.action_save()

    def action_save(self) -> None:
        draft = ItemDraft(**{key: self._value(key) for key, _ in _FIELDS})
        try:
            validate_item(draft)
        except ValidationError as exc:
            self.query_one("#item-error", Static).update(str(exc))
            return
        self.dismiss(draft)

    def action_cancel(self) -> None:
        self.dismiss(None)
