"""In-memory quote collection owned by the Quote Manager.

The store is the single source of truth for quotes. It never touches storage or
the network; the manager facade flushes and re-indexes after each mutation.

Updates:
  v0.2.1 - 2026-10-04 - Keep generated ids above every id already in the store.
  v0.2.0 - 2026-09-27 - Add upsert ``replace`` used by the sync merge step.
  v0.1.0 - 2026-09-15 - Initial store with validation, filtering and random picks.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Iterable, Iterator, Mapping
from typing import Any, cast

from models.quote_model import Quote, clean_text, default_quotes, generate_quote_id, now_ms

from .categories import CATEGORY_ALL
from .exceptions import ValidationError

logger = logging.getLogger("quote_manager.store")


def parse_quote_records(payload: object) -> list[Quote]:
    """Return valid quotes from *payload*, dropping malformed entries.

    Entries without an id receive a freshly generated one. When several entries
    share an id the first one wins.
    """
    if not isinstance(payload, list):
        return []
    quotes: list[Quote] = []
    seen_ids: set[int] = set()
    for index, raw_entry in enumerate(cast("list[object]", payload)):
        if not isinstance(raw_entry, Mapping):
            logger.warning("Dropping persisted quote %d: not an object", index)
            continue
        entry = cast("Mapping[str, Any]", raw_entry)
        try:
            quote = Quote.from_record(entry, default_id=generate_quote_id())
        except ValueError as exc:
            logger.warning("Dropping persisted quote %d: %s", index, exc)
            continue
        if quote.id in seen_ids:
            logger.warning("Dropping persisted quote %d: duplicate id %s", index, quote.id)
            continue
        seen_ids.add(quote.id)
        quotes.append(quote)
    return quotes


class QuoteStore:
    """Ordered collection of quotes with validated mutation helpers."""

    def __init__(self, quotes: Iterable[Quote] | None = None) -> None:
        self._quotes: list[Quote] = list(quotes or [])

    def initialize(self, persisted: object | None = None) -> list[Quote]:
        """Load *persisted* records, falling back to the built-in defaults.

        Never raises: a non-list payload, or one without a single valid quote,
        seeds the store with a copy of the default collection.
        """
        quotes = parse_quote_records(persisted) if persisted is not None else []
        if not quotes:
            if persisted is not None:
                logger.warning("Persisted quotes unusable; restoring default collection")
            quotes = default_quotes()
        self._quotes = quotes
        return self._quotes

    def _next_id(self) -> int:
        highest = max((quote.id for quote in self._quotes), default=0)
        return generate_quote_id(highest)

    def add(self, text: str, category: str) -> Quote:
        """Validate and append a new quote, returning it."""
        cleaned_text = clean_text(text)
        cleaned_category = clean_text(category)
        if not cleaned_text or not cleaned_category:
            raise ValidationError("Please fill in both the quote text and the category.")
        quote = Quote(
            id=self._next_id(),
            text=cleaned_text,
            category=cleaned_category,
            updated_at=now_ms(),
        )
        self._quotes.append(quote)
        logger.debug("Added quote %s in category %s", quote.id, quote.category)
        return quote

    def extend(self, quotes: Iterable[Quote]) -> int:
        """Append already-validated quotes, assigning fresh ids; return the count."""
        count = 0
        for quote in quotes:
            quote.id = self._next_id()
            self._quotes.append(quote)
            count += 1
        return count

    def replace(self, quote_id: int, quote: Quote) -> bool:
        """Overwrite the quote with *quote_id* in place or append *quote*.

        Returns ``True`` when an existing record was overwritten.
        """
        for index, existing in enumerate(self._quotes):
            if existing.id == quote_id:
                self._quotes[index] = quote
                return True
        self._quotes.append(quote)
        return False

    def get(self, quote_id: int) -> Quote | None:
        """Return the quote with *quote_id* if present."""
        for quote in self._quotes:
            if quote.id == quote_id:
                return quote
        return None

    def contains_pair(self, text: str, category: str) -> bool:
        """Return ``True`` when a quote with the same text and category exists."""
        target = (clean_text(text), clean_text(category))
        return any(quote.pair() == target for quote in self._quotes)

    def all(self) -> list[Quote]:
        """Return the live collection."""
        return self._quotes

    def by_category(self, name: str | None) -> list[Quote]:
        """Return quotes whose category equals *name*; ``"all"`` returns everything."""
        if not name or name == CATEGORY_ALL:
            return list(self._quotes)
        return [quote for quote in self._quotes if quote.category == name]

    def random_quote(self, category: str | None = None) -> Quote | None:
        """Return a random quote from the filtered collection, if any."""
        candidates = self.by_category(category)
        if not candidates:
            return None
        return random.choice(candidates)

    def __iter__(self) -> Iterator[Quote]:
        return iter(list(self._quotes))

    def __len__(self) -> int:
        return len(self._quotes)


__all__ = ["QuoteStore", "parse_quote_records"]
