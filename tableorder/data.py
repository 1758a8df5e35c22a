"""Static category and table data."""

from __future__ import annotations

from dataclasses import dataclass

from tableorder.constant import STATIC_CATEGORIES, TABLE_AREAS

ALL_CATEGORY_ID = "all"


@dataclass(frozen=True)
class Category:
    """A menu category shown as a filter tab."""

    category_id: str
    name: str


DEFAULT_CATEGORIES: list[Category] = [Category(entry["id"], entry["name"]) for entry in STATIC_CATEGORIES]


def table_ids_by_area() -> dict[str, list[str]]:
    """Expand the configured seating areas into table ids (R1..R6, H1..H12, ...)."""
    return {
        area: [f"{spec['prefix']}{number}" for number in range(1, int(spec["count"]) + 1)]
        for area, spec in TABLE_AREAS.items()
    }


ALL_TABLE_IDS: list[str] = [table_id for ids in table_ids_by_area().values() for table_id in ids]
