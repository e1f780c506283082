"""Tests for the QuoteManager facade."""

from __future__ import annotations

import asyncio
import json
from typing import TYPE_CHECKING

import pytest

from core.exceptions import FormatError, QuoteManagerError, ValidationError
from core.notifications import NotificationLevel, NotificationStatus
from core.persistence import CATEGORY_FILTER_KEY, LAST_VIEWED_KEY, QUOTES_KEY, QuotePersistence
from core.quote_manager import QuoteManager
from core.storage import JsonFileKeyValueStore, MemoryKeyValueStore
from models.quote_model import DEFAULT_QUOTES, now_ms

if TYPE_CHECKING:
    from pathlib import Path

    from conftest import FakeRemoteSource

    from core.notifications import NotificationCenter


def test_initialize_seeds_and_persists_defaults(
    manager: QuoteManager,
    durable_store: MemoryKeyValueStore,
) -> None:
    stored = json.loads(durable_store.get(QUOTES_KEY) or "[]")

    assert len(manager.all_quotes()) == len(DEFAULT_QUOTES)
    assert len(stored) == len(DEFAULT_QUOTES)
    assert manager.categories == ["Education", "Motivation", "Philosophy", "Programming"]
    assert manager.category_filter == "all"


def test_initialize_restores_persisted_collection_and_filter() -> None:
    durable = MemoryKeyValueStore(
        {
            QUOTES_KEY: json.dumps([{"id": 1, "text": "Kept", "category": "Saved"}]),
            CATEGORY_FILTER_KEY: json.dumps("Saved"),
        }
    )
    qm = QuoteManager(QuotePersistence(durable, MemoryKeyValueStore()))

    qm.initialize()

    assert [quote.text for quote in qm.all_quotes()] == ["Kept"]
    assert qm.category_filter == "Saved"


def test_initialize_recovers_from_malformed_payload() -> None:
    durable = MemoryKeyValueStore({QUOTES_KEY: json.dumps([{"category": "no text"}])})
    qm = QuoteManager(QuotePersistence(durable, MemoryKeyValueStore()))

    qm.initialize()

    assert len(qm.all_quotes()) == len(DEFAULT_QUOTES)
    assert len(json.loads(durable.get(QUOTES_KEY) or "[]")) == len(DEFAULT_QUOTES)


def test_initialize_recovers_from_unreadable_store_file(tmp_path: Path) -> None:
    path = tmp_path / "quote_store.json"
    path.write_bytes(b"\xff\xfe" + b"[" * 200_000)
    durable = JsonFileKeyValueStore(path)
    qm = QuoteManager(QuotePersistence(durable, MemoryKeyValueStore()))

    qm.initialize()

    assert len(qm.all_quotes()) == len(DEFAULT_QUOTES)
    assert len(json.loads(durable.get(QUOTES_KEY) or "[]")) == len(DEFAULT_QUOTES)


def test_generated_ids_survive_reload() -> None:
    durable = MemoryKeyValueStore({QUOTES_KEY: json.dumps([{"text": "No id", "category": "C"}])})

    first = QuoteManager(QuotePersistence(durable, MemoryKeyValueStore()))
    first.initialize()
    second = QuoteManager(QuotePersistence(durable, MemoryKeyValueStore()))
    second.initialize()

    stored = json.loads(durable.get(QUOTES_KEY) or "[]")
    assert stored[0]["id"] == first.all_quotes()[0].id
    assert second.all_quotes()[0].id == first.all_quotes()[0].id


def test_clean_load_is_not_rewritten(monkeypatch: pytest.MonkeyPatch) -> None:
    record = {"id": 1, "text": "Kept", "category": "Saved", "updatedAt": 5}
    durable = MemoryKeyValueStore({QUOTES_KEY: json.dumps([record])})
    writes: list[str] = []
    original_set = durable.set

    def _recording_set(key: str, value: str) -> None:
        writes.append(key)
        original_set(key, value)

    monkeypatch.setattr(durable, "set", _recording_set)
    QuoteManager(QuotePersistence(durable, MemoryKeyValueStore())).initialize()

    assert QUOTES_KEY not in writes


def test_stale_filter_resets_to_all() -> None:
    durable = MemoryKeyValueStore({CATEGORY_FILTER_KEY: json.dumps("Removed")})
    qm = QuoteManager(QuotePersistence(durable, MemoryKeyValueStore()))
    qm.initialize()

    assert qm.category_filter == "all"
    assert len(qm.quotes_in_category()) == len(DEFAULT_QUOTES)


def test_select_category_persists_and_filters(
    manager: QuoteManager,
    durable_store: MemoryKeyValueStore,
) -> None:
    resolved = manager.select_category("Education")

    assert resolved == "Education"
    assert durable_store.get(CATEGORY_FILTER_KEY) == '"Education"'
    assert [quote.category for quote in manager.quotes_in_category()] == ["Education"]
    assert manager.select_category("Unknown") == "all"


def test_show_random_quote_records_last_viewed(
    manager: QuoteManager,
    session_store: MemoryKeyValueStore,
) -> None:
    manager.select_category("Philosophy")

    shown = manager.show_random_quote()

    assert shown is not None
    assert shown.category == "Philosophy"
    assert session_store.get(LAST_VIEWED_KEY) is not None
    restored = manager.current_quote()
    assert restored is not None
    assert restored.pair() == shown.pair()

    manager.close()
    assert manager.last_viewed_quote() is None


def test_add_quote_commits_and_reindexes(
    manager: QuoteManager,
    durable_store: MemoryKeyValueStore,
    notifications: NotificationCenter,
) -> None:
    before = now_ms()

    quote = manager.add_quote("Stay curious.", "Science", push=False)

    assert quote.updated_at >= before
    assert manager.all_quotes()[-1] is quote
    assert "Science" in manager.categories
    stored = json.loads(durable_store.get(QUOTES_KEY) or "[]")
    assert stored[-1]["text"] == "Stay curious."
    assert notifications.history()[-1].message == "New quote added successfully!"


def test_add_quote_rejects_empty_fields(manager: QuoteManager) -> None:
    with pytest.raises(ValidationError):
        manager.add_quote("", "Science")

    assert len(manager.all_quotes()) == len(DEFAULT_QUOTES)


def test_add_quote_outside_loop_keeps_quote_local(
    manager: QuoteManager,
    remote: FakeRemoteSource,
) -> None:
    quote = manager.add_quote("Offline", "Local")

    assert manager.store.get(quote.id) is quote
    assert remote.pushed == []


@pytest.mark.asyncio()
async def test_add_quote_pushes_in_background(
    manager: QuoteManager,
    remote: FakeRemoteSource,
) -> None:
    quote = manager.add_quote("Online", "Remote")

    outcomes = await manager.drain_pushes()

    assert [outcome.quote_id for outcome in outcomes] == [quote.id]
    assert remote.pushed[0].pair() == ("Online", "Remote")


@pytest.mark.asyncio()
async def test_failed_push_keeps_local_quote(
    manager: QuoteManager,
    remote: FakeRemoteSource,
    notifications: NotificationCenter,
) -> None:
    remote.fail_push = True

    quote = manager.add_quote("Kept anyway", "Local")
    outcomes = await manager.drain_pushes()

    assert outcomes[0].success is False
    assert manager.store.get(quote.id) is quote
    assert notifications.history()[-1].level is NotificationLevel.WARNING


def test_import_json_reports_through_notifications(
    manager: QuoteManager,
    durable_store: MemoryKeyValueStore,
    notifications: NotificationCenter,
) -> None:
    payload = json.dumps(
        [{"text": "X", "category": "Y"}, {"text": "", "category": "Z"}, "not-an-object"]
    )

    result = manager.import_json(payload)

    assert (result.added, result.skipped) == (1, 2)
    assert "Y" in manager.categories
    assert len(json.loads(durable_store.get(QUOTES_KEY) or "[]")) == len(DEFAULT_QUOTES) + 1
    final = notifications.history()[-1]
    assert final.status is NotificationStatus.SUCCEEDED
    assert final.message.startswith("Import complete. 1 new quote(s) added, 2 skipped")


def test_import_json_format_error_leaves_collection(
    manager: QuoteManager,
    notifications: NotificationCenter,
) -> None:
    with pytest.raises(FormatError):
        manager.import_json('{"text": "X", "category": "Y"}')

    assert len(manager.all_quotes()) == len(DEFAULT_QUOTES)
    assert notifications.history()[-1].status is NotificationStatus.FAILED


def test_export_roundtrip_appends_nothing(manager: QuoteManager) -> None:
    pairs = {quote.pair() for quote in manager.all_quotes()}

    result = manager.import_json(manager.export_json())

    assert result.added == 0
    assert {quote.pair() for quote in manager.all_quotes()} == pairs


def test_export_to_directory_uses_timestamped_name(
    manager: QuoteManager,
    tmp_path: Path,
) -> None:
    written = manager.export_to_path(tmp_path)

    assert written.parent == tmp_path
    assert written.name.startswith("quotes_export_")
    assert len(json.loads(written.read_bytes())) == len(DEFAULT_QUOTES)


@pytest.mark.asyncio()
async def test_sync_now_merges_and_persists(
    manager: QuoteManager,
    remote: FakeRemoteSource,
    durable_store: MemoryKeyValueStore,
) -> None:
    remote.records = [
        {"id": DEFAULT_QUOTES[0].id, "title": "Server wins"},
        {"id": 1, "title": "New"},
    ]

    outcome = await manager.sync_now()

    assert outcome is not None
    assert outcome.conflicts == 1
    assert manager.store.get(DEFAULT_QUOTES[0].id).text == "Server wins"  # type: ignore[union-attr]
    assert "Server" in manager.categories
    stored = json.loads(durable_store.get(QUOTES_KEY) or "[]")
    assert len(stored) == len(DEFAULT_QUOTES) + 1


@pytest.mark.asyncio()
async def test_sync_requires_remote() -> None:
    qm = QuoteManager(QuotePersistence(MemoryKeyValueStore(), MemoryKeyValueStore()))
    qm.initialize()

    assert qm.sync_engine is None
    with pytest.raises(QuoteManagerError, match="not configured"):
        await qm.sync_now()
    assert await qm.drain_pushes() == []


@pytest.mark.asyncio()
async def test_start_and_stop_sync_scheduler(
    manager: QuoteManager,
    remote: FakeRemoteSource,
) -> None:
    remote.records = [{"id": 1, "title": "Scheduled"}]

    task = manager.start_sync(interval_seconds=0.01)
    await asyncio.sleep(0.05)
    await manager.stop_sync()

    assert task.cancelled()
    assert manager.sync_engine is not None
    assert manager.sync_engine.interval_seconds == 0.01
    assert manager.store.get(1) is not None
    assert len(remote.fetch_calls) >= 2
