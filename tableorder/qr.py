"""Per-table QR codes pointing customers at the menu."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable
from urllib.parse import urlencode

import qrcode

from tableorder.config import MENU_BASE_URL, QR_OUTPUT_DIR
from tableorder.data import ALL_TABLE_IDS

logger = logging.getLogger(__name__)


def table_menu_url(table_id: str, base_url: str = MENU_BASE_URL) -> str:
    return f"{base_url}?{urlencode({'table': table_id})}"


def make_table_qr(table_id: str, base_url: str = MENU_BASE_URL):
    """Build the QR image (Pillow-backed) for one table."""
    qr = qrcode.QRCode(error_correction=qrcode.constants.ERROR_CORRECT_L, box_size=8, border=4)
    qr.add_data(table_menu_url(table_id, base_url))
    qr.make(fit=True)
    return qr.make_image(fill_color="black", back_color="white")


def save_table_qr(table_id: str, out_dir: str | Path = QR_OUTPUT_DIR, base_url: str = MENU_BASE_URL) -> Path:
    target_dir = Path(out_dir)
    target_dir.mkdir(parents=True, exist_ok=True)
    path = target_dir / f"table-{table_id}-qr.png"
    make_table_qr(table_id, base_url).save(path)
    return path


def save_all_table_qr(
    out_dir: str | Path = QR_OUTPUT_DIR,
    table_ids: Iterable[str] = ALL_TABLE_IDS,
    base_url: str = MENU_BASE_URL,
) -> list[Path]:
    paths = [save_table_qr(table_id, out_dir, base_url) for table_id in table_ids]
    logger.info("Wrote %d table QR codes to %s", len(paths), out_dir)
    return paths
