"""Pytest configuration for shared test fixtures and environment hooks.

Updates:
  v0.2.0 - 2026-10-09 - Provide fake remote source and manager fixtures.
  v0.1.0 - 2026-09-20 - Isolate settings from developer environment variables.
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING, Any

import pytest

from core.exceptions import TransportError
from core.notifications import NotificationCenter
from core.persistence import QuotePersistence
from core.quote_manager import QuoteManager
from core.storage import MemoryKeyValueStore

if TYPE_CHECKING:
    from pathlib import Path

    from models.quote_model import Quote


class FakeRemoteSource:
    """In-memory remote source recording pushes and serving canned records."""

    def __init__(self, records: list[dict[str, Any]] | None = None) -> None:
        self.records: list[dict[str, Any]] = list(records or [])
        self.pushed: list[Quote] = []
        self.fetch_calls: list[int] = []
        self.fail_fetch = False
        self.fail_push = False

    async def fetch(self, limit: int) -> list[dict[str, Any]]:
        self.fetch_calls.append(limit)
        if self.fail_fetch:
            raise TransportError("network unreachable")
        return [dict(record) for record in self.records]

    async def push(self, quote: Quote) -> None:
        if self.fail_push:
            raise TransportError("server rejected the quote")
        self.pushed.append(quote)


@pytest.fixture(autouse=True)
def _isolate_settings_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep developer environment variables and config files out of tests."""
    for key in list(os.environ):
        if key.startswith("QUOTE_MANAGER_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture()
def remote() -> FakeRemoteSource:
    return FakeRemoteSource()


@pytest.fixture()
def durable_store() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture()
def session_store() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture()
def notifications() -> NotificationCenter:
    return NotificationCenter()


@pytest.fixture()
def persistence(
    durable_store: MemoryKeyValueStore,
    session_store: MemoryKeyValueStore,
    notifications: NotificationCenter,
) -> QuotePersistence:
    return QuotePersistence(durable_store, session_store, notification_center=notifications)


@pytest.fixture()
def manager(
    persistence: QuotePersistence,
    remote: FakeRemoteSource,
    notifications: NotificationCenter,
) -> QuoteManager:
    qm = QuoteManager(persistence, remote=remote, notification_center=notifications)
    qm.initialize()
    return qm
