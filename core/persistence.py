"""Persistence adapter mapping quote state onto durable and session storage.

The durable tier keeps the serialised collection and the selected category
filter; the ephemeral tier keeps a snapshot of the last viewed quote for the
current session. Reads never raise: missing or malformed values yield ``None``.
Writes never raise either: a storage failure is logged, surfaced as a warning
notification and reported back as ``False``.

Updates:
  v0.2.1 - 2026-10-20 - Treat pathologically nested stored values as malformed.
  v0.2.0 - 2026-10-01 - Surface failed writes as warning notifications.
  v0.1.1 - 2026-09-24 - Version storage keys so format changes bump the key name.
  v0.1.0 - 2026-09-16 - Initial adapter over pluggable key-value stores.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, cast

from models.quote_model import Quote

from .exceptions import StorageUnavailableError
from .notifications import NotificationLevel

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .notifications import NotificationCenter
    from .storage import KeyValueStore

logger = logging.getLogger("quote_manager.persistence")

QUOTES_KEY = "quotes_v2"
CATEGORY_FILTER_KEY = "selected_category_v1"
LAST_VIEWED_KEY = "last_viewed_quote_v1"


class QuotePersistence:
    """Load and save quote state through durable and ephemeral key-value stores."""

    def __init__(
        self,
        durable: KeyValueStore,
        ephemeral: KeyValueStore,
        *,
        notification_center: NotificationCenter | None = None,
    ) -> None:
        self._durable = durable
        self._ephemeral = ephemeral
        self._notifications = notification_center

    # ------------------------------------------------------------------
    # Low-level helpers
    # ------------------------------------------------------------------

    def _read(self, store: KeyValueStore, key: str) -> str | None:
        try:
            return store.get(key)
        except StorageUnavailableError as exc:
            logger.warning("Storage read failed for %s: %s", key, exc)
            return None

    def _write(self, store: KeyValueStore, key: str, value: str) -> bool:
        try:
            store.set(key, value)
        except StorageUnavailableError as exc:
            logger.warning("Storage write failed for %s: %s", key, exc)
            if self._notifications is not None:
                self._notifications.notify(
                    "Storage unavailable",
                    f"Changes could not be saved ({key}): {exc}",
                    level=NotificationLevel.WARNING,
                    metadata={"key": key},
                )
            return False
        return True

    @staticmethod
    def _decode(raw: str | None, key: str) -> object | None:
        if raw is None or not raw.strip():
            return None
        try:
            return json.loads(raw)
        except (json.JSONDecodeError, RecursionError):
            logger.warning("Stored value for %s is not valid JSON; ignoring it", key)
            return None

    # ------------------------------------------------------------------
    # Durable tier
    # ------------------------------------------------------------------

    def save_quotes(self, quotes: Sequence[Quote]) -> bool:
        """Overwrite the persisted collection with *quotes*."""
        payload = json.dumps([quote.to_record() for quote in quotes], ensure_ascii=False)
        return self._write(self._durable, QUOTES_KEY, payload)

    def load_quotes(self) -> list[Any] | None:
        """Return the persisted array of quote records, or ``None``."""
        parsed = self._decode(self._read(self._durable, QUOTES_KEY), QUOTES_KEY)
        if parsed is None:
            return None
        if not isinstance(parsed, list):
            logger.warning("Persisted quotes are not an array; ignoring them")
            return None
        return cast("list[Any]", parsed)

    def save_category_filter(self, category: str) -> bool:
        """Persist the selected category filter."""
        return self._write(self._durable, CATEGORY_FILTER_KEY, json.dumps(category))

    def load_category_filter(self) -> str | None:
        """Return the persisted category filter, if any."""
        parsed = self._decode(
            self._read(self._durable, CATEGORY_FILTER_KEY),
            CATEGORY_FILTER_KEY,
        )
        if isinstance(parsed, str) and parsed.strip():
            return parsed.strip()
        return None

    # ------------------------------------------------------------------
    # Ephemeral tier
    # ------------------------------------------------------------------

    def save_last_viewed(self, quote: Quote) -> bool:
        """Store a snapshot of *quote* for the current session."""
        payload = json.dumps(quote.to_record(), ensure_ascii=False)
        return self._write(self._ephemeral, LAST_VIEWED_KEY, payload)

    def load_last_viewed(self) -> Quote | None:
        """Return the last viewed quote snapshot, or ``None`` when unavailable."""
        parsed = self._decode(self._read(self._ephemeral, LAST_VIEWED_KEY), LAST_VIEWED_KEY)
        if not isinstance(parsed, Mapping):
            return None
        record = cast("Mapping[str, Any]", parsed)
        try:
            return Quote.from_record(record, default_id=0)
        except ValueError:
            logger.debug("Discarding malformed last viewed quote snapshot")
            return None

    def clear_session(self) -> None:
        """Forget every session-scoped value."""
        try:
            self._ephemeral.clear()
        except StorageUnavailableError as exc:
            logger.warning("Unable to clear session storage: %s", exc)


__all__ = ["CATEGORY_FILTER_KEY", "LAST_VIEWED_KEY", "QUOTES_KEY", "QuotePersistence"]
