"""Customer menu: items, category tabs and add-to-cart."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from tableorder.api import CafeApiClient
from tableorder.cart import CartStore
from tableorder.data import ALL_CATEGORY_ID, DEFAULT_CATEGORIES, Category
from tableorder.errors import ApiError
from tableorder.models import CartLine, MenuItem
from tableorder.session import TableSession

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MenuFetch:
    items: list[MenuItem] = field(default_factory=list)
    categories: list[Category] | None = None
    error: ApiError | None = None


def with_all_category(categories: list[Category]) -> list[Category]:
    if any(category.category_id == ALL_CATEGORY_ID for category in categories):
        return categories
    return [Category(ALL_CATEGORY_ID, "All")] + categories


def filter_items(items: list[MenuItem], category_id: str) -> list[MenuItem]:
    if category_id == ALL_CATEGORY_ID:
        return list(items)
    return [item for item in items if item.category == category_id]


def add_to_cart(item: MenuItem, cart: CartStore, session: TableSession) -> CartLine:
    """Add one unit of `item`; a table must be known first."""
    session.require()
    return cart.add(item)


class MenuCatalog:
    """Menu items and the category list, falling back to the static categories."""

    def __init__(self, api: CafeApiClient) -> None:
        self._api = api
        self.items: list[MenuItem] = []
        self.categories: list[Category] = list(DEFAULT_CATEGORIES)
        self.error: str | None = None

    def fetch(self) -> MenuFetch:
        try:
            items = self._api.get_menu()
        except ApiError as exc:
            return MenuFetch(error=exc)
        try:
            categories: list[Category] | None = self._api.get_categories()
        except ApiError as exc:
            logger.info("Using static categories: %s", exc)
            categories = None
        return MenuFetch(items=items, categories=categories or None)

    def resolve(self, result: MenuFetch) -> None:
        if result.error is not None:
            self.error = result.error.describe("Failed to load menu")
            return
        self.items = result.items
        if result.categories:
            self.categories = with_all_category(result.categories)
        self.error = None

    def load(self) -> None:
        self.resolve(self.fetch())

    def visible_items(self, category_id: str) -> list[MenuItem]:
        return filter_items(self.items, category_id)
