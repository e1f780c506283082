"""Import and export quote collections as portable JSON arrays.

The exchange format is a UTF-8 JSON array of ``{"text", "category"}`` objects
with optional ``id`` and ``updatedAt`` keys. Exports are pretty-printed and
byte-stable for a given collection.

Import policy: elements are validated one by one. Invalid elements are skipped
and counted; elements whose trimmed ``(text, category)`` pair already exists in
the store, or earlier in the same payload, are counted as duplicates and not
appended. Imported quotes receive fresh ids and ``updatedAt = now``.

Updates:
  v0.2.2 - 2026-10-20 - Reject over-nested import payloads with FormatError.
  v0.2.1 - 2026-10-05 - Record per-element error messages on import results.
  v0.2.0 - 2026-09-29 - Skip duplicate text/category pairs on import.
  v0.1.0 - 2026-09-17 - Initial JSON export/import helpers.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, cast

from models.quote_model import Quote, clean_text, now_ms

from .exceptions import FormatError

if TYPE_CHECKING:  # pragma: no cover - typing only
    from collections.abc import Sequence
    from pathlib import Path

    from .quote_store import QuoteStore

logger = logging.getLogger("quote_manager.codec")


def _error_list_factory() -> list[str]:
    return []


@dataclass(slots=True)
class QuoteImportResult:
    """Aggregate statistics from a quote import."""

    added: int = 0
    skipped: int = 0
    duplicates: int = 0
    errors: list[str] = field(default_factory=_error_list_factory)

    def summary(self) -> dict[str, int]:
        """Return the import counters for reporting."""
        return {
            "added": self.added,
            "skipped": self.skipped,
            "duplicates": self.duplicates,
        }


def export_quotes(quotes: Sequence[Quote]) -> bytes:
    """Return the indented JSON array representation of *quotes*."""
    records = [quote.to_record() for quote in quotes]
    return json.dumps(records, ensure_ascii=False, indent=2).encode("utf-8")


def default_export_filename(moment: datetime | None = None) -> str:
    """Return ``quotes_export_YYYY-MM-DD-HH-MM-SS.json`` for *moment* (UTC)."""
    stamp = (moment or datetime.now(UTC)).strftime("%Y-%m-%d-%H-%M-%S")
    return f"quotes_export_{stamp}.json"


def export_quotes_to_path(quotes: Sequence[Quote], output_path: Path) -> Path:
    """Write the JSON export of *quotes* to *output_path* and return it."""
    resolved = output_path.expanduser()
    resolved.parent.mkdir(parents=True, exist_ok=True)
    resolved.write_bytes(export_quotes(quotes))
    return resolved


def read_import_file(path: Path) -> bytes:
    """Return the raw bytes of an import file."""
    try:
        return path.expanduser().read_bytes()
    except OSError as exc:
        raise FileNotFoundError(f"Cannot read quote file: {path}") from exc


def _decode_payload(payload: bytes | str) -> list[object]:
    try:
        text = payload.decode("utf-8") if isinstance(payload, bytes) else payload
        parsed: object = json.loads(text)
    except (UnicodeDecodeError, json.JSONDecodeError, RecursionError) as exc:
        raise FormatError(
            "Failed to import JSON. Make sure it is valid JSON with an array of "
            "{text, category} objects."
        ) from exc
    if not isinstance(parsed, list):
        raise FormatError("Invalid JSON format: expected an array of quotes.")
    return cast("list[object]", parsed)


def import_quotes(store: QuoteStore, payload: bytes | str) -> QuoteImportResult:
    """Append the valid, non-duplicate quotes in *payload* to *store*.

    Raises :class:`FormatError` without touching the store when *payload* is not a
    JSON array.
    """
    entries = _decode_payload(payload)
    result = QuoteImportResult()
    seen = {quote.pair() for quote in store.all()}
    accepted: list[Quote] = []

    for index, raw_entry in enumerate(entries):
        if not isinstance(raw_entry, Mapping):
            result.skipped += 1
            result.errors.append(f"Element {index}: expected an object")
            logger.warning("Invalid quote skipped at index %d", index)
            continue
        entry = cast("Mapping[str, Any]", raw_entry)
        text = clean_text(entry.get("text"))
        category = clean_text(entry.get("category"))
        if not text or not category:
            result.skipped += 1
            result.errors.append(f"Element {index}: text and category are required")
            logger.warning("Invalid quote skipped at index %d", index)
            continue
        if (text, category) in seen:
            result.duplicates += 1
            continue
        seen.add((text, category))
        accepted.append(Quote(id=0, text=text, category=category, updated_at=now_ms()))

    result.added = store.extend(accepted)
    logger.info(
        "Imported quotes",
        extra={"added": result.added, "skipped": result.skipped, "duplicates": result.duplicates},
    )
    return result


__all__ = [
    "QuoteImportResult",
    "default_export_filename",
    "export_quotes",
    "export_quotes_to_path",
    "import_quotes",
    "read_import_file",
]
