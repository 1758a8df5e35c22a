"""Staff login modal screen."""

from __future__ import annotations

from textual import work
from textual.app import ComposeResult
from textual.containers import Container
from textual.screen import ModalScreen
from textual.widgets import Input, Static

from tableorder.admin import AdminAuth
from tableorder.errors import ApiError


class LoginModal(ModalScreen[bool]):
    """Collect staff credentials; dismisses with True once a token is stored."""

    BINDINGS = [
        ("escape", "cancel", "Cancel"),
    ]

    CSS = """
    LoginModal {
        align: center middle;
        background: $background 60%;
    }

    #login-dialog {
        width: 56;
        height: auto;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #login-title {
        text-style: bold;
        margin-bottom: 1;
    }

    #login-error {
        color: #ffb3b3;
        margin-top: 1;
    }

    #login-help {
        color: #dddddd;
    }
    """

    def __init__(self, auth: AdminAuth) -> None:
        super().__init__()
        self.auth = auth
        self.busy = False

    def compose(self) -> ComposeResult:
        with Container(id="login-dialog"):
            yield Static("Admin Login", id="login-title")
            yield Input(placeholder="Email", id="login-email")
            yield Input(placeholder="Password", password=True, id="login-password")
            yield Static(id="login-error")
            yield Static("Enter submit. Esc cancel.", id="login-help")

    def on_mount(self) -> None:
        self.query_one("#login-email", Input).focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        if event.input.id == "login-email":
            self.query_one("#login-password", Input).focus()
            return
        email = self.query_one("#login-email", Input).value
        password = self.query_one("#login-password", Input).value
        if not email.strip() or not password:
            self._show_error("Email and password are required")
            return
        if self.busy:
            return
        self.busy = True
        self._show_error("")
        self._login(email, password)

    def action_cancel(self) -> None:
        self.dismiss(False)

    @work(thread=True, exclusive=True, group="login")
    def _login(self, email: str, password: str) -> None:
        try:
            self.auth.login(email, password)
        except ApiError as exc:
            self.app.call_from_thread(self._failed, exc.describe("Login failed"))
            return
        self.app.call_from_thread(self.dismiss, True)

    def _failed(self, message: str) -> None:
        self.busy = False
        self._show_error(message)

    def _show_error(self, message: str) -> None:
        self.query_one("#login-error", Static).update(message)
