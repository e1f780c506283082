"""Quote data model definitions.

Updates:
  v0.3.0 - 2026-09-28 - Accept snake_case ``updated_at`` alongside ``updatedAt`` records.
  v0.2.0 - 2026-09-21 - Add millisecond clock and monotonic id generator for local quotes.
  v0.1.0 - 2026-09-14 - Initial Quote schema with record serialisation helpers.
"""
from __future__ import annotations

import time
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

_last_generated_id = 0


def now_ms() -> int:
    """Return the current wall-clock time in integer milliseconds."""
    return time.time_ns() // 1_000_000


def generate_quote_id(floor: int = 0) -> int:
    """Return a timestamp-like id strictly above every id handed out so far.

    *floor* lets callers push the sequence past ids already present in a store.
    """
    global _last_generated_id
    candidate = max(now_ms(), _last_generated_id + 1, floor + 1)
    _last_generated_id = candidate
    return candidate


def clean_text(value: Any) -> str:
    """Return *value* trimmed when it is a string, otherwise an empty string."""
    if not isinstance(value, str):
        return ""
    return value.strip()


def _coerce_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


@dataclass(slots=True)
class Quote:
    """Single quote record held by the store."""
    id: int
    text: str
    category: str
    updated_at: int = 0

    def __post_init__(self) -> None:
        """Trim text fields and reject empty values."""
        self.text = clean_text(self.text)
        self.category = clean_text(self.category)
        if not self.text:
            raise ValueError("quote text cannot be empty")
        if not self.category:
            raise ValueError("quote category cannot be empty")

    def copy(self) -> Quote:
        """Return a detached copy of the quote."""
        return Quote(
            id=self.id,
            text=self.text,
            category=self.category,
            updated_at=self.updated_at,
        )

    def pair(self) -> tuple[str, str]:
        """Return the ``(text, category)`` identity used for duplicate detection."""
        return self.text, self.category

    def to_record(self) -> dict[str, Any]:
        """Return the JSON-friendly record used for storage and file exchange."""
        return {
            "id": self.id,
            "text": self.text,
            "category": self.category,
            "updatedAt": self.updated_at,
        }

    @classmethod
    def from_record(cls, data: Mapping[str, Any], *, default_id: int | None = None) -> Quote:
        """Hydrate a Quote from a record mapping.

        Raises ``ValueError`` when the record lacks usable ``text``/``category`` or an
        id cannot be resolved.
        """
        quote_id = _coerce_int(data.get("id"))
        if quote_id is None:
            if default_id is None:
                raise ValueError("quote record is missing a valid id")
            quote_id = default_id
        raw_updated = data.get("updatedAt", data.get("updated_at"))
        updated_at = _coerce_int(raw_updated)
        return cls(
            id=quote_id,
            text=clean_text(data.get("text")),
            category=clean_text(data.get("category")),
            updated_at=updated_at if updated_at is not None else 0,
        )


DEFAULT_QUOTES: tuple[Quote, ...] = (
    Quote(
        id=1_700_000_000_001,
        text="The best way to predict the future is to create it.",
        category="Motivation",
    ),
    Quote(
        id=1_700_000_000_002,
        text="Learning never exhausts the mind.",
        category="Education",
    ),
    Quote(
        id=1_700_000_000_003,
        text="Simplicity is the ultimate sophistication.",
        category="Philosophy",
    ),
    Quote(
        id=1_700_000_000_004,
        text="Code is like humor. When you have to explain it, it’s bad.",
        category="Programming",
    ),
)


def default_quotes() -> list[Quote]:
    """Return fresh copies of the built-in quote collection."""
    return [quote.copy() for quote in DEFAULT_QUOTES]


__all__ = [
    "DEFAULT_QUOTES",
    "Quote",
    "clean_text",
    "default_quotes",
    "generate_quote_id",
    "now_ms",
]
