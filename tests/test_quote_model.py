"""Tests for the Quote dataclass and id helpers."""

from __future__ import annotations

import pytest

from models.quote_model import (
    DEFAULT_QUOTES,
    Quote,
    default_quotes,
    generate_quote_id,
    now_ms,
)


def test_quote_trims_fields() -> None:
    quote = Quote(id=1, text="  Stay hungry.  ", category=" Motivation ")

    assert quote.text == "Stay hungry."
    assert quote.category == "Motivation"
    assert quote.pair() == ("Stay hungry.", "Motivation")


@pytest.mark.parametrize(("text", "category"), [("", "Life"), ("Words", "   ")])
def test_quote_rejects_empty_fields(text: str, category: str) -> None:
    with pytest.raises(ValueError):
        Quote(id=1, text=text, category=category)


def test_to_record_uses_camel_case_timestamp() -> None:
    quote = Quote(id=7, text="Hi", category="Greeting", updated_at=123)

    assert quote.to_record() == {
        "id": 7,
        "text": "Hi",
        "category": "Greeting",
        "updatedAt": 123,
    }


def test_from_record_accepts_string_ids_and_snake_case_timestamp() -> None:
    quote = Quote.from_record({"id": "42", "text": "Hi", "category": "X", "updated_at": 9})

    assert quote.id == 42
    assert quote.updated_at == 9


def test_from_record_uses_default_id_when_missing() -> None:
    quote = Quote.from_record({"text": "Hi", "category": "X"}, default_id=99)

    assert quote.id == 99
    assert quote.updated_at == 0


def test_from_record_without_id_or_default_raises() -> None:
    with pytest.raises(ValueError, match="id"):
        Quote.from_record({"id": True, "text": "Hi", "category": "X"})


def test_copy_is_detached() -> None:
    original = Quote(id=1, text="A", category="B")
    clone = original.copy()
    clone.text = "changed"

    assert original.text == "A"


def test_generate_quote_id_is_strictly_increasing() -> None:
    first = generate_quote_id()
    second = generate_quote_id()
    floored = generate_quote_id(second + 1_000_000_000)

    assert second > first
    assert floored > second + 1_000_000_000
    assert first >= now_ms() - 60_000


def test_default_quotes_are_fresh_copies() -> None:
    quotes = default_quotes()
    quotes[0].text = "mutated"

    assert DEFAULT_QUOTES[0].text != "mutated"
    assert len({quote.category for quote in default_quotes()}) == 4
