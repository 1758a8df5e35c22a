"""Table session: which physical table this device is ordering for."""

from __future__ import annotations

import logging
from urllib.parse import parse_qs, urlsplit

from tableorder.errors import MissingTableError
from tableorder.persistence import TABLE_KEY, SnapshotStore

logger = logging.getLogger(__name__)


def table_from_url(url: str) -> str | None:
    """Return the `table` query parameter of a scanned menu link."""
    values = parse_qs(urlsplit(url).query).get("table")
    if not values:
        return None
    table_id = values[0].strip()
    return table_id or None


def order_id_from_url(url: str) -> str | None:
    """Return the order identity of an `/order/status/<id>` link."""
    segments = [segment for segment in urlsplit(url).path.split("/") if segment]
    for idx in range(len(segments) - 2):
        if segments[idx] == "order" and segments[idx + 1] == "status":
            return segments[idx + 2]
    return None


class TableSession:
    """Sticky table identifier: the URL wins, else the stored value."""

    def __init__(self, store: SnapshotStore) -> None:
        self._store = store
        self._table_id: str | None = None

    @property
    def table_id(self) -> str | None:
        return self._table_id

    def resolve(self, url_table: str | None = None) -> str | None:
        if url_table:
            self._table_id = url_table
            self._store.set_json(TABLE_KEY, url_table)
            logger.debug("table_from_url table=%s", url_table)
            return self._table_id
        if self._table_id:
            return self._table_id

        stored = self._store.get_json(TABLE_KEY)
        if isinstance(stored, (str, int)) and not isinstance(stored, bool) and str(stored).strip():
            self._table_id = str(stored).strip()
        return self._table_id

    def require(self) -> str:
        """Known table id, or MissingTableError."""
        if not self._table_id:
            raise MissingTableError()
        return self._table_id
