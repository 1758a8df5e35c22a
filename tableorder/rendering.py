"""Rendering helpers shared by the screens."""

from __future__ import annotations

from decimal import Decimal

from rich.text import Text

from tableorder.constant import CURRENCY_SYMBOL, STATUS_LABELS
from tableorder.models import CartLine, MenuItem, Order, OrderStatus
from tableorder.timing import Projection

_PROGRESS_FILLED = "█"
_PROGRESS_EMPTY = "░"


def status_style(status: OrderStatus) -> str:
    """Return a consistent badge style for an order status."""
    if status is OrderStatus.PREPARING:
        return "bold #0b1f0f on #e0b341"
    if status is OrderStatus.DONE:
        return "bold #0b1f0f on #5fbf72"
    if status is OrderStatus.CANCELED:
        return "bold #ffffff on #b23a48"
    return "bold #ffffff on #2f6db5"


def status_badge(status: OrderStatus) -> Text:
    return Text(f" {STATUS_LABELS[status.value]} ", style=status_style(status))


def format_price(amount: Decimal) -> str:
    return f"{CURRENCY_SYMBOL}{amount:.2f}"


def progress_bar(projection: Projection | None, width: int = 24) -> Text:
    """Render `[████░░░░] 7 min left`, or an empty Text without a projection."""
    text = Text()
    if projection is None:
        return text
    filled = round(projection.progress * width)
    text.append(_PROGRESS_FILLED * filled, style="#e0b341")
    text.append(_PROGRESS_EMPTY * (width - filled), style="dim")
    text.append(f" {projection.remaining_minutes} min left")
    return text


def format_menu_item(item: MenuItem, in_cart: int = 0) -> Text:
    text = Text()
    text.append(item.name, style="bold")
    text.append(f"  {format_price(item.price)}")
    if in_cart:
        text.append(f"  ×{in_cart}", style="#5fbf72")
    if item.description:
        text.append(f"\n    {item.description}", style="dim")
    return text


def format_cart_line(line: CartLine) -> Text:
    text = Text()
    text.append(line.name, style="bold")
    text.append(f"  {format_price(line.price)} × {line.quantity} = {format_price(line.line_total)}")
    return text


def format_order_summary(order: Order, projection: Projection | None = None) -> Text:
    """Order card: table, status badge, countdown, item lines and total."""
    text = Text()
    text.append(f"Table #{order.table_id}  ", style="bold")
    text.append_text(status_badge(order.status))
    if projection is not None:
        text.append("\n")
        text.append_text(progress_bar(projection))
    elif order.estimated_minutes:
        text.append(f"\nEst. {order.estimated_minutes:g} min", style="dim")
    for item, quantity in order.lines():
        text.append(f"\n  {item.label}  × {quantity}")
    text.append(f"\n{format_price(order.total)}", style="bold")
    return text


def window_bounds(total: int, rows: int, selected: int | None) -> tuple[int, int]:
    """Visible slice of a list of `total` rows that keeps `selected` centred."""
    if total <= 0:
        return (0, 0)

    rows = max(1, rows)
    if total <= rows:
        return (0, total)

    if selected is None:
        start = 0
    else:
        half = rows // 2
        start = selected - half
        start = max(0, start)
        start = min(start, total - rows)

    return (start, start + rows)
