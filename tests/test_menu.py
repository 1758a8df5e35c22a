from __future__ import annotations

import pytest
from conftest import menu_item

from tableorder.data import ALL_CATEGORY_ID, DEFAULT_CATEGORIES, Category
from tableorder.errors import ApiError, MissingTableError
from tableorder.menu import MenuCatalog, add_to_cart, filter_items, with_all_category
from tableorder.session import TableSession

ITEMS = [menu_item("chai", category="chai"), menu_item("veg-burger", category="burger")]


def test_static_categories_start_with_all():
    assert DEFAULT_CATEGORIES[0].category_id == ALL_CATEGORY_ID
    assert "Dips" in [category.name for category in DEFAULT_CATEGORIES]


def test_filter_items():
    assert filter_items(ITEMS, ALL_CATEGORY_ID) == ITEMS
    assert [item.item_id for item in filter_items(ITEMS, "burger")] == ["veg-burger"]
    assert filter_items(ITEMS, "pizza") == []


def test_with_all_category_adds_once():
    categories = with_all_category([Category("chai", "Chai")])

    assert [category.category_id for category in categories] == ["all", "chai"]
    assert with_all_category(categories) == categories


def test_catalog_uses_served_categories(api):
    api.menu = ITEMS
    api.categories = [Category("chai", "Chai")]
    catalog = MenuCatalog(api)

    catalog.load()

    assert catalog.items == ITEMS
    assert [category.name for category in catalog.categories] == ["All", "Chai"]
    assert [item.item_id for item in catalog.visible_items("chai")] == ["chai"]


def test_catalog_falls_back_to_static_categories(api):
    api.menu = ITEMS
    catalog = MenuCatalog(api)

    catalog.load()

    assert catalog.categories == DEFAULT_CATEGORIES
    assert catalog.error is None


def test_catalog_reports_menu_failure(api):
    api.fail_with = ApiError(503)
    catalog = MenuCatalog(api)

    catalog.load()

    assert catalog.items == []
    assert catalog.error == "Failed to load menu"


def test_add_to_cart_needs_table(store, cart, session):
    with pytest.raises(MissingTableError):
        add_to_cart(ITEMS[0], cart, TableSession(store))
    assert cart.is_empty()

    add_to_cart(ITEMS[0], cart, session)
    add_to_cart(ITEMS[0], cart, session)
    assert cart.item_count() == 2
