"""Editable static menu categories, table layout and status labels."""

from __future__ import annotations

# Shown when the API does not serve /categories.
STATIC_CATEGORIES: list[dict[str, str]] = [
    {"id": "all", "name": "All"},
    {"id": "chai", "name": "Chai"},
    {"id": "cold-coffee", "name": "Cold Coffee"},
    {"id": "hot-coffee", "name": "Hot Coffee"},
    {"id": "maggi", "name": "Maggi"},
    {"id": "burger", "name": "Burger"},
    {"id": "pizza", "name": "Pizza"},
    {"id": "chinese", "name": "Chinese"},
    {"id": "sandwich", "name": "Sandwich"},
    {"id": "snacks", "name": "Snacks"},
    {"id": "wraps", "name": "Wraps"},
    {"id": "pasta", "name": "Pasta"},
    {"id": "cold-drinks", "name": "Cold Drinks"},
    {"id": "mocktails", "name": "Mocktails"},
    {"id": "juices", "name": "Juices"},
    {"id": "shakes", "name": "Shakes"},
    {"id": "desserts", "name": "Desserts"},
    {"id": "cakes", "name": "Cakes"},
    {"id": "water", "name": "Water"},
    {"id": "cigarettes", "name": "Cigarettes"},
    {"id": "disposables", "name": "Disposables"},
    {"id": "dips", "name": "Dips"},
]

# Table id prefix and count per seating area.
TABLE_AREAS: dict[str, dict[str, str | int]] = {
    "roof": {"prefix": "R", "count": 6},
    "hall": {"prefix": "H", "count": 12},
    "open": {"prefix": "O", "count": 6},
}

STATUS_LABELS: dict[str, str] = {
    "pending": "Pending",
    "preparing": "Preparing",
    "done": "Done",
    "canceled": "Canceled",
}

STATUS_ALIASES: dict[str, str] = {
    "ready": "done",
    "cancelled": "canceled",
}

CURRENCY_SYMBOL = "₹"
