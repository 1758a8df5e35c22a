"""Thermal printer output: kitchen tickets and table QR cards."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from tableorder.config import (
    PRINTER_FONT_PATH,
    PRINTER_FONT_SIZE,
    PRINTER_LEFT_INDENT_PX,
    PRINTER_QR_SIZE_PX,
    PRINTER_USB_PRODUCT_ID,
    PRINTER_USB_VENDOR_ID,
    PRINTER_WIDTH_PX,
)
from tableorder.constant import CURRENCY_SYMBOL
from tableorder.models import Order
from tableorder.qr import make_table_qr

logger = logging.getLogger(__name__)

_FONT_OVERRIDE_ENV = "TABLEORDER_PRINTER_FONT_PATH"
_SYSTEM_FONTS = (
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/TTF/DejaVuSans.ttf",
    "/usr/share/fonts/liberation/LiberationSans-Regular.ttf",
    "/usr/share/fonts/noto/NotoSans-Regular.ttf",
)
_TITLE_SIZE_BONUS = 12
# Bottom padding leaves room for descenders on thermal paper.
_BODY_PADDING = (6, 14)
_TITLE_PADDING = (4, 12)
_FEED_PX = 60


def ticket_lines(order: Order) -> list[str]:
    """Text lines of a kitchen ticket, header excluded."""
    lines = [f"{quantity}x {item.label}" for item, quantity in order.lines()]
    lines.append(f"Total {CURRENCY_SYMBOL}{order.total:.2f}")
    return lines


def font_candidates() -> list[str]:
    """Font files to try: the env override, the configured path, then common system fonts."""
    override = os.environ.get(_FONT_OVERRIDE_ENV, "").strip()
    ordered = [override, PRINTER_FONT_PATH, *_SYSTEM_FONTS]
    return list(dict.fromkeys(path for path in ordered if path))


def resolve_printer_font_path() -> str:
    candidates = font_candidates()
    found = next((path for path in candidates if Path(path).is_file()), None)
    if found is None:
        raise RuntimeError(f"No printer font found (set {_FONT_OVERRIDE_ENV}); looked in {', '.join(candidates)}")
    return found


def check_printer_dependencies() -> tuple[bool, str]:
    """Whether escpos, Pillow and a usable font are all present."""
    try:
        from escpos.printer import Usb  # noqa: F401
        from PIL import ImageFont

        ImageFont.truetype(resolve_printer_font_path(), PRINTER_FONT_SIZE)
    except Exception as exc:
        return (False, f"Printer unavailable: {exc}")
    return (True, "Printer ready")


def _truncate(text: str, font, max_width_px: int) -> str:
    if font.getlength(text) <= max_width_px:
        return text
    for cut in range(len(text) - 1, 0, -1):
        candidate = text[:cut].rstrip() + "..."
        if font.getlength(candidate) <= max_width_px:
            return candidate
    return "..."


def _text_strip(text: str, font, align: str = "left", padding: tuple[int, int] = _BODY_PADDING):
    """One full-width 1-bit image holding a single line of text."""
    from PIL import Image, ImageDraw

    usable_px = PRINTER_WIDTH_PX - 2 * PRINTER_LEFT_INDENT_PX
    fitted = _truncate(text, font, usable_px)
    left, top, right, bottom = font.getbbox(fitted)
    pad_top, pad_bottom = padding
    strip = Image.new("1", (PRINTER_WIDTH_PX, bottom - top + pad_top + pad_bottom), color=1)

    width = right - left
    if align == "right":
        x = PRINTER_WIDTH_PX - PRINTER_LEFT_INDENT_PX - width
    elif align == "center":
        x = (PRINTER_WIDTH_PX - width) // 2
    else:
        x = PRINTER_LEFT_INDENT_PX
    ImageDraw.Draw(strip).text((x - left, pad_top - top), fitted, font=font, fill=0)
    return strip


def _blank(height_px: int):
    from PIL import Image

    return Image.new("1", (PRINTER_WIDTH_PX, max(1, height_px)), color=1)


def _connect():
    """USB printer plus body and title fonts."""
    try:
        from escpos.printer import Usb
        from PIL import ImageFont
    except ImportError as exc:
        raise RuntimeError(f"Printer dependencies unavailable: {exc}") from exc

    font_path = resolve_printer_font_path()
    body = ImageFont.truetype(font_path, PRINTER_FONT_SIZE)
    title = ImageFont.truetype(font_path, PRINTER_FONT_SIZE + _TITLE_SIZE_BONUS)
    return Usb(PRINTER_USB_VENDOR_ID, PRINTER_USB_PRODUCT_ID), body, title


def print_order_ticket(order: Order) -> None:
    """Print a kitchen ticket for one order and cut it."""
    printer, body, title = _connect()
    printer.image(_text_strip(f"Table {order.table_id or '?'}", title, align="right", padding=_TITLE_PADDING))
    for line in ticket_lines(order):
        printer.image(_text_strip(line, body))
    printer.image(_blank(_FEED_PX))
    printer.cut()
    logger.info("Printed ticket for order %s", order.order_id)


def print_table_card(table_id: str) -> None:
    """Print a table card with the QR code for the table's menu link."""
    printer, _, title = _connect()
    code = make_table_qr(table_id).convert("1").resize((PRINTER_QR_SIZE_PX, PRINTER_QR_SIZE_PX))
    printer.image(_text_strip(f"Table {table_id}", title, align="center", padding=_TITLE_PADDING))
    printer.image(code, center=True)
    printer.image(_text_strip("Scan to order", title, align="center", padding=_TITLE_PADDING))
    printer.image(_blank(_FEED_PX))
    printer.cut()
    logger.info("Printed table card for %s", table_id)
