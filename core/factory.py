"""Factories for constructing QuoteManager instances from validated settings.

Updates:
  v0.2.0 - 2026-10-07 - Prefer a Redis durable store when a DSN is configured.
  v0.1.1 - 2026-09-30 - Allow callers to inject storage, remote source and notification hub.
  v0.1.0 - 2026-09-19 - Initial builder wiring storage, persistence and sync.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .notifications import NotificationCenter
from .persistence import QuotePersistence
from .quote_manager import QuoteManager
from .remote import HttpRemoteQuoteSource
from .storage import JsonFileKeyValueStore, MemoryKeyValueStore, RedisKeyValueStore

if TYPE_CHECKING:  # pragma: no cover - typing only
    from collections.abc import Callable

    from config import QuoteManagerSettings

    from .remote import RemoteQuoteSource
    from .storage import KeyValueStore
    from .sync import SyncStatusUpdate

factory_logger = logging.getLogger("quote_manager.factory")


def build_durable_store(settings: QuoteManagerSettings) -> KeyValueStore:
    """Return the durable key-value store selected by *settings*."""
    if settings.redis_dsn:
        factory_logger.info("Using Redis durable store")
        return RedisKeyValueStore.from_dsn(settings.redis_dsn)
    return JsonFileKeyValueStore(settings.data_path)


def build_remote_source(settings: QuoteManagerSettings) -> HttpRemoteQuoteSource:
    """Return the HTTPX remote source configured by *settings*."""
    return HttpRemoteQuoteSource(
        base_url=settings.remote_base_url,
        posts_path=settings.remote_posts_path,
        timeout=settings.remote_timeout_seconds,
    )


def build_quote_manager(
    settings: QuoteManagerSettings,
    *,
    durable_store: KeyValueStore | None = None,
    session_store: KeyValueStore | None = None,
    remote: RemoteQuoteSource | None = None,
    notification_center: NotificationCenter | None = None,
    status_sink: Callable[[SyncStatusUpdate], None] | None = None,
    initialize: bool = True,
) -> QuoteManager:
    """Return a QuoteManager wired from *settings* and optional overrides."""
    center = notification_center or NotificationCenter()
    persistence = QuotePersistence(
        durable_store or build_durable_store(settings),
        session_store or MemoryKeyValueStore(),
        notification_center=center,
    )
    resolved_remote: RemoteQuoteSource | None = None
    if settings.sync_enabled:
        resolved_remote = remote or build_remote_source(settings)
    else:
        factory_logger.info("Remote sync disabled; quotes stay local")

    manager = QuoteManager(
        persistence,
        remote=resolved_remote,
        notification_center=center,
        status_sink=status_sink,
        fetch_limit=settings.fetch_limit,
        remote_category=settings.remote_category,
        sync_interval_seconds=settings.sync_interval_seconds,
    )
    if initialize:
        manager.initialize()
    return manager


__all__ = ["build_durable_store", "build_quote_manager", "build_remote_source"]
