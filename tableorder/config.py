"""Runtime configuration defaults for the API, local state and printing."""

from __future__ import annotations

import os
from urllib.parse import urlsplit

API_BASE_URL = os.environ.get("TABLEORDER_API_URL", "https://cafe-application-be-1.onrender.com/api").rstrip("/")


def _origin(url: str) -> str:
    parts = urlsplit(url)
    return f"{parts.scheme}://{parts.netloc}"


PUSH_URL = os.environ.get("TABLEORDER_PUSH_URL", _origin(API_BASE_URL))
PUSH_RECONNECT_ATTEMPTS = 5

# Customer-facing link encoded into every table QR code.
MENU_BASE_URL = os.environ.get("TABLEORDER_MENU_URL", "https://cafe-application-fe.vercel.app/menu")

STATE_DB_PATH = os.environ.get("TABLEORDER_STATE_DB", "data/tableorder.db")
DEBUG_LOG_PATH = os.environ.get("TABLEORDER_DEBUG_LOG", "/tmp/tableorder-debug.log")
QR_OUTPUT_DIR = os.environ.get("TABLEORDER_QR_DIR", "data/qr")

HTTP_TIMEOUT_SECONDS = 20
PROGRESS_TICK_SECONDS = 1.0

PRINTER_USB_VENDOR_ID = 0x28E9
PRINTER_USB_PRODUCT_ID = 0x0289
PRINTER_WIDTH_PX = 384
PRINTER_FONT_SIZE = 40
PRINTER_FONT_PATH = "/System/Library/Fonts/SFNS.ttf"
PRINTER_LEFT_INDENT_PX = 16
PRINTER_QR_SIZE_PX = 320
