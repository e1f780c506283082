"""Quote Manager facade orchestrating store, persistence, index and sync.

The manager owns the only :class:`~core.quote_store.QuoteStore` instance and is
the single place where mutations are followed by a persistence flush and a
category index recomputation.

Updates:
  v0.3.1 - 2026-10-20 - Write back repaired collections so generated ids stay stable.
  v0.3.0 - 2026-10-09 - Restore the session's last viewed quote before picking a new one.
  v0.2.1 - 2026-10-06 - Track import/export through the notification centre.
  v0.2.0 - 2026-09-30 - Wire the sync engine commit and fire-and-forget pushes.
  v0.1.0 - 2026-09-18 - Initial facade over store, persistence and categories.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .categories import CATEGORY_ALL, compute_categories, resolve_category_filter
from .codec import (
    QuoteImportResult,
    default_export_filename,
    export_quotes,
    export_quotes_to_path,
    import_quotes,
)
from .exceptions import QuoteManagerError
from .notifications import NotificationCenter, NotificationLevel
from .quote_store import QuoteStore
from .sync import (
    DEFAULT_FETCH_LIMIT,
    DEFAULT_REMOTE_CATEGORY,
    DEFAULT_SYNC_INTERVAL_SECONDS,
    PushOutcome,
    SyncEngine,
    SyncOutcome,
    SyncStatusUpdate,
)

if TYPE_CHECKING:
    import asyncio
    from collections.abc import Callable
    from pathlib import Path

    from models.quote_model import Quote

    from .persistence import QuotePersistence
    from .remote import RemoteQuoteSource

logger = logging.getLogger("quote_manager.manager")


class QuoteManager:
    """High-level API used by the CLI and tests."""

    def __init__(
        self,
        persistence: QuotePersistence,
        *,
        remote: RemoteQuoteSource | None = None,
        notification_center: NotificationCenter | None = None,
        status_sink: Callable[[SyncStatusUpdate], None] | None = None,
        fetch_limit: int = DEFAULT_FETCH_LIMIT,
        remote_category: str = DEFAULT_REMOTE_CATEGORY,
        sync_interval_seconds: float = DEFAULT_SYNC_INTERVAL_SECONDS,
    ) -> None:
        self._persistence = persistence
        self._notifications = notification_center or NotificationCenter()
        self._store = QuoteStore()
        self._categories: list[str] = []
        self._category_filter: str = CATEGORY_ALL
        self._sync: SyncEngine | None = None
        if remote is not None:
            self._sync = SyncEngine(
                self._store,
                remote,
                commit=self._commit,
                status_sink=status_sink,
                notification_center=self._notifications,
                fetch_limit=fetch_limit,
                remote_category=remote_category,
                interval_seconds=sync_interval_seconds,
            )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(self) -> list[Quote]:
        """Load the persisted collection and filter; seed defaults when needed."""
        persisted = self._persistence.load_quotes()
        quotes = self._store.initialize(persisted)
        # write repaired loads back so generated ids survive a restart
        if persisted is None or persisted != [quote.to_record() for quote in quotes]:
            self._persistence.save_quotes(quotes)
        self._reindex()
        self._category_filter = self._persistence.load_category_filter() or CATEGORY_ALL
        logger.info(
            "Quote collection ready",
            extra={"quotes": len(quotes), "categories": len(self._categories)},
        )
        return quotes

    def close(self) -> None:
        """End the browsing session, dropping session-scoped state."""
        self._persistence.clear_session()

    def _reindex(self) -> None:
        self._categories = compute_categories(self._store.all())

    def _commit(self) -> None:
        self._persistence.save_quotes(self._store.all())
        self._reindex()

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------

    @property
    def store(self) -> QuoteStore:
        """Return the underlying quote store."""
        return self._store

    @property
    def notifications(self) -> NotificationCenter:
        """Return the notification centre used for outcomes."""
        return self._notifications

    @property
    def sync_engine(self) -> SyncEngine | None:
        """Return the sync engine when a remote source is configured."""
        return self._sync

    @property
    def categories(self) -> list[str]:
        """Return the cached category index."""
        return list(self._categories)

    @property
    def category_filter(self) -> str:
        """Return the active filter, falling back to ``"all"`` when it went stale."""
        resolved = resolve_category_filter(self._category_filter, self._categories)
        if resolved != self._category_filter:
            logger.debug("Category filter %r no longer exists; using all", self._category_filter)
            self._category_filter = resolved
        return resolved

    def all_quotes(self) -> list[Quote]:
        """Return every quote in display order."""
        return list(self._store.all())

    def quotes_in_category(self, category: str | None = None) -> list[Quote]:
        """Return quotes for *category*, or for the active filter when omitted."""
        return self._store.by_category(category if category is not None else self.category_filter)

    # ------------------------------------------------------------------
    # Browsing
    # ------------------------------------------------------------------

    def select_category(self, category: str | None) -> str:
        """Set and persist the category filter, returning the resolved value."""
        resolved = resolve_category_filter(category, self._categories)
        self._category_filter = resolved
        self._persistence.save_category_filter(resolved)
        return resolved

    def show_random_quote(self, category: str | None = None) -> Quote | None:
        """Pick a random quote from the filter and remember it for the session."""
        quote = self._store.random_quote(
            category if category is not None else self.category_filter
        )
        if quote is None:
            return None
        self._persistence.save_last_viewed(quote.copy())
        return quote

    def last_viewed_quote(self) -> Quote | None:
        """Return the session's last viewed quote snapshot, if any."""
        return self._persistence.load_last_viewed()

    def current_quote(self, category: str | None = None) -> Quote | None:
        """Return the last viewed quote, or pick a new random one."""
        return self.last_viewed_quote() or self.show_random_quote(category)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add_quote(self, text: str, category: str, *, push: bool = True) -> Quote:
        """Add a quote, persist it and schedule a best-effort remote push.

        Raises :class:`~core.exceptions.ValidationError` for empty fields.
        """
        quote = self._store.add(text, category)
        self._commit()
        self._notifications.notify(
            "Add quote",
            "New quote added successfully!",
            level=NotificationLevel.SUCCESS,
            metadata={"quote_id": quote.id, "category": quote.category},
        )
        if push:
            self._schedule_push(quote)
        return quote

    def _schedule_push(self, quote: Quote) -> asyncio.Task[PushOutcome] | None:
        if self._sync is None:
            return None
        try:
            return self._sync.push(quote)
        except RuntimeError:
            logger.info("No running event loop; quote %s kept local only", quote.id)
            return None

    def import_json(self, payload: bytes | str) -> QuoteImportResult:
        """Import quotes from a JSON array payload.

        Raises :class:`~core.exceptions.FormatError` when the payload is not an
        array; the collection is left unchanged in that case.
        """
        with self._notifications.track_task(
            title="Import quotes",
            start_message="Importing quotes...",
            success_message=(
                "Import complete. {added} new quote(s) added, {skipped} skipped, "
                "{duplicates} duplicate(s) ignored."
            ),
            failure_message="Failed to import quotes",
        ) as report:
            result = import_quotes(self._store, payload)
            report.update(result.summary())
        if result.added:
            self._commit()
        return result

    def export_json(self) -> bytes:
        """Return the JSON export of the collection."""
        return export_quotes(self._store.all())

    def export_to_path(self, path: Path) -> Path:
        """Write the JSON export to *path*; a directory gets a timestamped filename."""
        target = path / default_export_filename() if path.is_dir() else path
        with self._notifications.track_task(
            title="Export quotes",
            start_message="Exporting quotes...",
            success_message="Exported {count} quote(s).",
            failure_message="Failed to export quotes",
        ) as report:
            resolved = export_quotes_to_path(self._store.all(), target)
            report["count"] = len(self._store)
        return resolved

    # ------------------------------------------------------------------
    # Sync
    # ------------------------------------------------------------------

    def _require_sync(self) -> SyncEngine:
        if self._sync is None:
            raise QuoteManagerError("Remote sync is not configured.")
        return self._sync

    async def sync_now(self) -> SyncOutcome | None:
        """Run one reconciliation cycle immediately."""
        return await self._require_sync().run_cycle()

    def start_sync(self, interval_seconds: float | None = None) -> asyncio.Task[None]:
        """Start periodic reconciliation on the running loop."""
        return self._require_sync().start(interval_seconds)

    async def stop_sync(self) -> None:
        """Stop periodic reconciliation if running."""
        if self._sync is not None:
            await self._sync.stop()

    async def drain_pushes(self) -> list[PushOutcome]:
        """Wait for outstanding pushes scheduled by :meth:`add_quote`."""
        if self._sync is None:
            return []
        return await self._sync.drain_pushes()


__all__ = ["QuoteManager"]
