"""Tests for category index helpers."""

from __future__ import annotations

from core.categories import CATEGORY_ALL, compute_categories, resolve_category_filter
from models.quote_model import Quote, default_quotes


def test_compute_categories_sorts_and_deduplicates() -> None:
    quotes = [
        Quote(id=1, text="one", category="B"),
        Quote(id=2, text="two", category="A"),
        Quote(id=3, text="three", category="A"),
    ]

    assert compute_categories(quotes) == ["A", "B"]


def test_default_collection_has_four_categories() -> None:
    assert compute_categories(default_quotes()) == [
        "Education",
        "Motivation",
        "Philosophy",
        "Programming",
    ]


def test_compute_categories_empty() -> None:
    assert compute_categories([]) == []


def test_resolve_category_filter_keeps_known_value() -> None:
    assert resolve_category_filter("B", ["A", "B"]) == "B"


def test_resolve_category_filter_resets_stale_or_empty_values() -> None:
    assert resolve_category_filter("Gone", ["A"]) == CATEGORY_ALL
    assert resolve_category_filter(None, ["A"]) == CATEGORY_ALL
    assert resolve_category_filter("", ["A"]) == CATEGORY_ALL
    assert resolve_category_filter(CATEGORY_ALL, []) == CATEGORY_ALL
