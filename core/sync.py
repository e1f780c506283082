"""Periodic reconciliation between the local quote store and a remote source.

One cycle fetches a bounded batch of remote records, normalises them into
quotes and merges them into the store with a "remote always wins" rule: a
remote quote whose id matches a local quote overwrites it unconditionally and
counts as a resolved conflict; any other remote quote is appended. The commit
callback (persist + re-index) runs once, after every merge in the cycle.

Local additions are pushed separately as fire-and-forget tasks whose outcome is
published to the notification centre and returned from the task.

Updates:
  v0.3.1 - 2026-10-20 - Keep the scheduler alive after unexpected cycle errors.
  v0.3.0 - 2026-10-08 - Skip timer ticks while a previous cycle is still in flight.
  v0.2.1 - 2026-10-06 - Publish push outcomes to the notification centre.
  v0.2.0 - 2026-09-30 - Add cancellable periodic scheduler.
  v0.1.0 - 2026-09-23 - Initial fetch/normalise/merge/commit cycle.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from models.quote_model import Quote, clean_text, now_ms

from .exceptions import TransportError
from .notifications import NotificationLevel

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from .notifications import NotificationCenter
    from .quote_store import QuoteStore
    from .remote import RemoteQuoteSource

logger = logging.getLogger("quote_manager.sync")

DEFAULT_FETCH_LIMIT = 5
DEFAULT_SYNC_INTERVAL_SECONDS = 30.0
DEFAULT_REMOTE_CATEGORY = "Server"


class SyncStatus(str, Enum):
    """Outward sync state reported to the status sink."""

    IDLE = "idle"
    SYNCING = "syncing"
    SYNCED = "synced"
    SYNC_FAILED = "sync_failed"


@dataclass(frozen=True, slots=True)
class SyncStatusUpdate:
    """Status sink payload; ``conflicts`` is meaningful for ``SYNCED`` only."""

    status: SyncStatus
    conflicts: int = 0
    error: str | None = None

    def describe(self) -> str:
        """Return a human-readable status line."""
        if self.status is SyncStatus.SYNCING:
            return "Syncing with server..."
        if self.status is SyncStatus.SYNC_FAILED:
            return f"Sync failed: {self.error}" if self.error else "Sync failed."
        if self.status is SyncStatus.SYNCED:
            if self.conflicts:
                return (
                    f"Synced with server. {self.conflicts} conflict(s) resolved "
                    "(server version kept)."
                )
            return "Synced with server. No conflicts."
        return "Idle."


@dataclass(frozen=True, slots=True)
class SyncOutcome:
    """Counters describing a completed reconciliation cycle."""

    fetched: int
    appended: int
    conflicts: int


@dataclass(frozen=True, slots=True)
class PushOutcome:
    """Result of a best-effort push of a local quote."""

    quote_id: int
    success: bool
    error: str | None = None


def normalise_remote_record(
    record: Mapping[str, Any],
    *,
    default_category: str,
    timestamp: int,
) -> Quote | None:
    """Map a raw remote record into a Quote, or ``None`` when unusable.

    Text comes from ``text``, then ``title``, then ``body``; category from
    ``category`` or *default_category*. Remote records are always fresh, so
    ``updated_at`` is the merge *timestamp*.
    """
    raw_id = record.get("id")
    if isinstance(raw_id, bool) or not isinstance(raw_id, (int, str)):
        return None
    try:
        quote_id = int(raw_id)
    except ValueError:
        return None
    text = (
        clean_text(record.get("text"))
        or clean_text(record.get("title"))
        or clean_text(record.get("body"))
    )
    category = clean_text(record.get("category")) or default_category
    if not text or not category:
        return None
    return Quote(id=quote_id, text=text, category=category, updated_at=timestamp)


class SyncEngine:
    """Coordinate fetch/merge cycles and fire-and-forget pushes for a store."""

    def __init__(
        self,
        store: QuoteStore,
        remote: RemoteQuoteSource,
        *,
        commit: Callable[[], None],
        status_sink: Callable[[SyncStatusUpdate], None] | None = None,
        notification_center: NotificationCenter | None = None,
        fetch_limit: int = DEFAULT_FETCH_LIMIT,
        remote_category: str = DEFAULT_REMOTE_CATEGORY,
        interval_seconds: float = DEFAULT_SYNC_INTERVAL_SECONDS,
    ) -> None:
        if fetch_limit <= 0:
            raise ValueError("fetch_limit must be greater than zero")
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be greater than zero")
        self._store = store
        self._remote = remote
        self._commit = commit
        self._status_sink = status_sink
        self._notifications = notification_center
        self._fetch_limit = fetch_limit
        self._remote_category = remote_category
        self._interval = interval_seconds
        self._status = SyncStatusUpdate(SyncStatus.IDLE)
        self._cycle_in_flight = False
        self._schedule_task: asyncio.Task[None] | None = None
        self._push_tasks: set[asyncio.Task[PushOutcome]] = set()

    @property
    def status(self) -> SyncStatusUpdate:
        """Return the most recently reported status."""
        return self._status

    @property
    def interval_seconds(self) -> float:
        """Return the scheduler period."""
        return self._interval

    @property
    def is_running(self) -> bool:
        """Return ``True`` while the periodic scheduler task is active."""
        return self._schedule_task is not None and not self._schedule_task.done()

    def _report(self, update: SyncStatusUpdate) -> None:
        self._status = update
        if self._status_sink is not None:
            try:
                self._status_sink(update)
            except Exception:  # pragma: no cover - sink failures must not break a cycle
                logger.exception("Sync status sink raised an exception")

    # ------------------------------------------------------------------
    # Pull cycle
    # ------------------------------------------------------------------

    async def run_cycle(self) -> SyncOutcome | None:
        """Run one reconciliation cycle.

        Returns ``None`` when another cycle is still in flight. Raises
        :class:`TransportError` after reporting ``SYNC_FAILED`` when the fetch
        fails; the store is left untouched in that case.
        """
        if self._cycle_in_flight:
            logger.info("Sync cycle skipped: previous cycle still running")
            return None
        self._cycle_in_flight = True
        try:
            self._report(SyncStatusUpdate(SyncStatus.SYNCING))
            try:
                records = await self._remote.fetch(self._fetch_limit)
            except TransportError as exc:
                logger.warning("Sync fetch failed: %s", exc)
                self._report(SyncStatusUpdate(SyncStatus.SYNC_FAILED, error=str(exc)))
                raise

            batch = records[: self._fetch_limit]
            timestamp = now_ms()
            incoming: list[Quote] = []
            for record in batch:
                quote = normalise_remote_record(
                    record,
                    default_category=self._remote_category,
                    timestamp=timestamp,
                )
                if quote is None:
                    logger.warning("Skipping unusable remote record: %r", record.get("id"))
                    continue
                incoming.append(quote)

            conflicts = 0
            appended = 0
            for quote in incoming:
                if self._store.replace(quote.id, quote):
                    conflicts += 1
                else:
                    appended += 1

            self._commit()
            outcome = SyncOutcome(fetched=len(batch), appended=appended, conflicts=conflicts)
            update = SyncStatusUpdate(SyncStatus.SYNCED, conflicts=conflicts)
            self._report(update)
            logger.info(
                "Sync cycle complete",
                extra={"fetched": outcome.fetched, "appended": appended, "conflicts": conflicts},
            )
            if self._notifications is not None and conflicts:
                self._notifications.notify(
                    "Sync",
                    update.describe(),
                    level=NotificationLevel.INFO,
                    metadata={"conflicts": conflicts, "appended": appended},
                )
            return outcome
        finally:
            self._cycle_in_flight = False

    # ------------------------------------------------------------------
    # Push
    # ------------------------------------------------------------------

    async def push_now(self, quote: Quote) -> PushOutcome:
        """Push *quote* and return the outcome; failures are reported, not raised."""
        try:
            await self._remote.push(quote)
        except TransportError as exc:
            logger.warning("Push of quote %s failed: %s", quote.id, exc)
            outcome = PushOutcome(quote_id=quote.id, success=False, error=str(exc))
            if self._notifications is not None:
                self._notifications.notify(
                    "Push",
                    f"Quote saved locally but could not be sent to the server: {exc}",
                    level=NotificationLevel.WARNING,
                    metadata={"quote_id": quote.id},
                )
            return outcome
        if self._notifications is not None:
            self._notifications.notify(
                "Push",
                "Quote sent to the server.",
                level=NotificationLevel.SUCCESS,
                metadata={"quote_id": quote.id},
            )
        return PushOutcome(quote_id=quote.id, success=True)

    def push(self, quote: Quote) -> asyncio.Task[PushOutcome]:
        """Schedule a fire-and-forget push of *quote* on the running loop.

        Raises ``RuntimeError`` when called outside a running event loop.
        """
        loop = asyncio.get_running_loop()
        task = loop.create_task(self.push_now(quote.copy()))
        self._push_tasks.add(task)
        task.add_done_callback(self._push_tasks.discard)
        return task

    async def drain_pushes(self) -> list[PushOutcome]:
        """Wait for every outstanding push task and return their outcomes."""
        if not self._push_tasks:
            return []
        return list(await asyncio.gather(*list(self._push_tasks)))

    # ------------------------------------------------------------------
    # Scheduling
    # ------------------------------------------------------------------

    async def run_periodically(self, *, cycles: int | None = None) -> None:
        """Run a cycle now and then every interval, forever or for *cycles* cycles."""
        completed = 0
        while cycles is None or completed < cycles:
            try:
                with contextlib.suppress(TransportError):
                    await self.run_cycle()
            except Exception as exc:
                logger.exception("Sync cycle failed unexpectedly")
                self._report(SyncStatusUpdate(SyncStatus.SYNC_FAILED, error=str(exc)))
            completed += 1
            if cycles is not None and completed >= cycles:
                break
            await asyncio.sleep(self._interval)

    def start(self, interval_seconds: float | None = None) -> asyncio.Task[None]:
        """Start the periodic scheduler on the running loop, once.

        *interval_seconds* replaces the configured period when given.
        """
        if self._schedule_task is not None and not self._schedule_task.done():
            return self._schedule_task
        if interval_seconds is not None:
            if interval_seconds <= 0:
                raise ValueError("interval_seconds must be greater than zero")
            self._interval = interval_seconds
        self._schedule_task = asyncio.get_running_loop().create_task(self.run_periodically())
        logger.info("Sync scheduler started (every %.1fs)", self._interval)
        return self._schedule_task

    async def stop(self) -> None:
        """Cancel the periodic scheduler if it is running."""
        task = self._schedule_task
        self._schedule_task = None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        self._report(SyncStatusUpdate(SyncStatus.IDLE))


__all__ = [
    "DEFAULT_FETCH_LIMIT",
    "DEFAULT_REMOTE_CATEGORY",
    "DEFAULT_SYNC_INTERVAL_SECONDS",
    "PushOutcome",
    "SyncEngine",
    "SyncOutcome",
    "SyncStatus",
    "SyncStatusUpdate",
    "normalise_remote_record",
]
