"""Error taxonomy shared by the services and the screens."""

from __future__ import annotations


class TableOrderError(Exception):
    """Base class for every error shown to a customer or staff member."""


class ValidationError(TableOrderError):
    """Rejected locally, before any network call."""


class EmptyCartError(ValidationError):
    def __init__(self) -> None:
        super().__init__("Cart is empty")


class MissingTableError(ValidationError):
    def __init__(self) -> None:
        super().__init__("No table number detected. Scan the QR code on your table.")


class InvalidTimeError(ValidationError):
    def __init__(self, value: object) -> None:
        super().__init__("Enter valid minutes")
        self.value = value


class SubmissionInProgressError(ValidationError):
    def __init__(self) -> None:
        super().__init__("Order is already being placed")


class TransitionError(ValidationError):
    """A status command that the order's current status does not allow."""


class ApiError(TableOrderError):
    """A failed request: an error response, or status 0 when no usable response arrived."""

    def __init__(self, status: int, server_message: str | None = None) -> None:
        self.status = status
        self.server_message = server_message
        super().__init__(server_message or f"Request failed ({status or 'network error'})")

    def describe(self, fallback: str) -> str:
        """Server-provided message when there is one, else `fallback`."""
        return self.server_message or fallback


class NotFoundError(ApiError):
    """The order or item no longer exists on the server."""


class AuthenticationError(ApiError):
    """The admin token was missing, expired or rejected."""


class MalformedResponseError(ApiError):
    """The server answered, but the body was not the expected JSON shape."""

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(0, "Unexpected response from server")
        self.detail = detail


class AuthenticationRequired(TableOrderError):
    def __init__(self) -> None:
        super().__init__("Admin login required")


class OrderSubmissionError(TableOrderError):
    """Placing an order failed; the cart is left untouched."""
