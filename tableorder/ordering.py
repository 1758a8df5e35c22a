"""Order submission: turns the cart into a server-side order."""

from __future__ import annotations

import logging
from typing import Any

from tableorder.api import CafeApiClient
from tableorder.cart import CartStore
from tableorder.errors import ApiError, EmptyCartError, OrderSubmissionError, SubmissionInProgressError
from tableorder.models import Order, OrderStatus
from tableorder.session import TableSession

logger = logging.getLogger(__name__)

SUBMIT_FAILED_MESSAGE = "Failed to place order"


class OrderSubmission:
    """
    At most one outstanding creation request at a time, no automatic retry.

    `submit()` runs the whole flow synchronously. Screens split it so only
    `send()` runs off the UI thread: `begin()` -> `send()` -> `complete()` or
    `fail()`.
    """

    def __init__(self, cart: CartStore, session: TableSession, api: CafeApiClient) -> None:
        self._cart = cart
        self._session = session
        self._api = api
        self.in_flight = False

    def build_draft(self) -> dict[str, Any]:
        table_id = self._session.require()
        if self._cart.is_empty():
            raise EmptyCartError()
        lines = self._cart.lines
        return {
            "items": [line.item_id for line in lines],
            "quantities": [line.quantity for line in lines],
            "total": float(self._cart.total()),
            "tableNumber": table_id,
            "status": OrderStatus.PENDING.value,
        }

    def begin(self) -> dict[str, Any]:
        if self.in_flight:
            raise SubmissionInProgressError()
        draft = self.build_draft()
        self.in_flight = True
        logger.debug("submit_begin table=%s lines=%d", draft["tableNumber"], len(draft["items"]))
        return draft

    def send(self, draft: dict[str, Any]) -> Order:
        return self._api.create_order(draft)

    def complete(self, order: Order) -> Order:
        self.in_flight = False
        self._cart.clear()
        logger.info("Order %s placed for table %s", order.order_id, order.table_id)
        return order

    def fail(self, exc: ApiError) -> OrderSubmissionError:
        self.in_flight = False
        message = exc.describe(SUBMIT_FAILED_MESSAGE)
        logger.warning("Order submission failed: %s", message)
        return OrderSubmissionError(message)

    def submit(self) -> Order:
        draft = self.begin()
        try:
            order = self.send(draft)
        except ApiError as exc:
            raise self.fail(exc) from exc
        return self.complete(order)
