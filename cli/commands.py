"""Command handlers and registry for the Quote Manager CLI.

Updates:
  v0.2.1 - 2026-10-20 - Show always restores or picks within the current process session.
  v0.2.0 - 2026-10-08 - Add watch command running the periodic sync scheduler.
  v0.1.1 - 2026-10-06 - Map domain errors onto stable exit codes.
  v0.1.0 - 2026-09-20 - Initial show/list/categories/add/import/export/sync handlers.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from core import (
    CATEGORY_ALL,
    FormatError,
    QuoteManagerError,
    TransportError,
    ValidationError,
    read_import_file,
)

from .utils import format_quote, print_and_log

if TYPE_CHECKING:  # pragma: no cover - typing helpers
    import argparse

    from core.quote_manager import QuoteManager
    from core.sync import PushOutcome
    from models.quote_model import Quote

CommandHandler = Callable[["QuoteManager | None", "argparse.Namespace", logging.Logger], int]

EXIT_OK = 0
EXIT_SETTINGS = 2
EXIT_INIT = 3
EXIT_INVALID = 4
EXIT_IO = 5
EXIT_SYNC = 6


@dataclass(frozen=True)
class CommandSpec:
    """Describe how to execute a CLI command."""

    handler: CommandHandler
    requires_manager: bool = True


def _require_manager(manager: QuoteManager | None) -> QuoteManager:
    if manager is None:  # pragma: no cover - guarded by main
        raise RuntimeError("Quote manager is not initialised")
    return manager


def run_show(
    manager: QuoteManager | None,
    args: argparse.Namespace,
    logger: logging.Logger,
) -> int:
    """Print the session's last viewed quote or a random one from the filter."""
    qm = _require_manager(manager)
    category = getattr(args, "category", None)
    if category is not None:
        resolved = qm.select_category(category)
        if resolved != category.strip():
            logger.warning("Unknown category %r; showing all quotes", category)
    quote = qm.current_quote()
    if quote is None:
        print_and_log(logger, logging.WARNING, "No quotes available in this category.")
        return EXIT_OK
    print(format_quote(quote))
    return EXIT_OK


def run_list(
    manager: QuoteManager | None,
    args: argparse.Namespace,
    logger: logging.Logger,
) -> int:
    """Print every quote in the requested category."""
    qm = _require_manager(manager)
    category = getattr(args, "category", None) or CATEGORY_ALL
    quotes = qm.quotes_in_category(category)
    if not quotes:
        print_and_log(logger, logging.INFO, f"No quotes found for category '{category}'.")
        return EXIT_OK
    for quote in quotes:
        print(f"{quote.id}\t{format_quote(quote)}")
    return EXIT_OK


def run_categories(
    manager: QuoteManager | None,
    _args: argparse.Namespace,
    _logger: logging.Logger,
) -> int:
    """Print the category index, one name per line."""
    qm = _require_manager(manager)
    for category in qm.categories:
        print(category)
    return EXIT_OK


async def _add_and_push(
    manager: QuoteManager,
    text: str,
    category: str,
    *,
    push: bool,
) -> tuple[Quote, list[PushOutcome]]:
    quote = manager.add_quote(text, category, push=push)
    outcomes = await manager.drain_pushes()
    return quote, outcomes


def run_add(
    manager: QuoteManager | None,
    args: argparse.Namespace,
    logger: logging.Logger,
) -> int:
    """Add a quote and wait for its best-effort push to settle."""
    qm = _require_manager(manager)
    try:
        quote, outcomes = asyncio.run(
            _add_and_push(qm, args.text, args.category, push=not args.no_push)
        )
    except ValidationError as exc:
        print_and_log(logger, logging.ERROR, str(exc))
        return EXIT_INVALID
    print_and_log(logger, logging.INFO, f"New quote added successfully! (id {quote.id})")
    for outcome in outcomes:
        if not outcome.success:
            print_and_log(
                logger,
                logging.WARNING,
                f"Quote saved locally but the server push failed: {outcome.error}",
            )
    return EXIT_OK


def run_export(
    manager: QuoteManager | None,
    args: argparse.Namespace,
    logger: logging.Logger,
) -> int:
    """Write the collection to a JSON file."""
    qm = _require_manager(manager)
    target = getattr(args, "path", None) or Path.cwd()
    try:
        written = qm.export_to_path(target)
    except OSError as exc:
        print_and_log(logger, logging.ERROR, f"Failed to export quotes: {exc}")
        return EXIT_IO
    print_and_log(logger, logging.INFO, f"Exported {len(qm.store)} quote(s) to {written}")
    return EXIT_OK


def run_import(
    manager: QuoteManager | None,
    args: argparse.Namespace,
    logger: logging.Logger,
) -> int:
    """Import quotes from a JSON array file."""
    qm = _require_manager(manager)
    try:
        payload = read_import_file(args.path)
    except OSError as exc:
        print_and_log(logger, logging.ERROR, f"Failed to read import file: {exc}")
        return EXIT_IO
    try:
        result = qm.import_json(payload)
    except FormatError as exc:
        print_and_log(logger, logging.ERROR, f"Error importing file: {exc}")
        return EXIT_INVALID
    print_and_log(
        logger,
        logging.INFO,
        f"Import complete. {result.added} new quote(s) added, {result.skipped} skipped, "
        f"{result.duplicates} duplicate(s) ignored.",
    )
    for message in result.errors:
        logger.debug("Import skipped entry: %s", message)
    return EXIT_OK


def run_sync(
    manager: QuoteManager | None,
    _args: argparse.Namespace,
    logger: logging.Logger,
) -> int:
    """Run one reconciliation cycle and print its counters."""
    qm = _require_manager(manager)
    try:
        outcome = asyncio.run(qm.sync_now())
    except TransportError as exc:
        print_and_log(logger, logging.ERROR, f"Sync failed: {exc}")
        return EXIT_SYNC
    except QuoteManagerError as exc:
        print_and_log(logger, logging.ERROR, str(exc))
        return EXIT_SETTINGS
    if outcome is None:
        print_and_log(logger, logging.WARNING, "Sync already in progress.")
        return EXIT_OK
    print_and_log(
        logger,
        logging.INFO,
        f"Fetched {outcome.fetched} record(s): {outcome.appended} appended, "
        f"{outcome.conflicts} conflict(s) resolved (server version kept).",
    )
    return EXIT_OK


async def _watch(manager: QuoteManager, cycles: int | None) -> None:
    engine = manager.sync_engine
    if engine is None:
        raise QuoteManagerError("Remote sync is not configured.")
    try:
        await engine.run_periodically(cycles=cycles)
    finally:
        await manager.stop_sync()


def run_watch(
    manager: QuoteManager | None,
    args: argparse.Namespace,
    logger: logging.Logger,
) -> int:
    """Run periodic reconciliation until interrupted or *cycles* complete."""
    qm = _require_manager(manager)
    cycles = getattr(args, "cycles", None)
    if cycles is not None and cycles <= 0:
        print_and_log(logger, logging.ERROR, "--cycles must be a positive integer.")
        return EXIT_INVALID
    try:
        asyncio.run(_watch(qm, cycles))
    except QuoteManagerError as exc:
        print_and_log(logger, logging.ERROR, str(exc))
        return EXIT_SETTINGS
    except KeyboardInterrupt:
        print_and_log(logger, logging.INFO, "Sync watch stopped.")
    return EXIT_OK


COMMAND_SPECS: dict[str | None, CommandSpec] = {
    None: CommandSpec(run_show),
    "show": CommandSpec(run_show),
    "list": CommandSpec(run_list),
    "categories": CommandSpec(run_categories),
    "add": CommandSpec(run_add),
    "export": CommandSpec(run_export),
    "import": CommandSpec(run_import),
    "sync": CommandSpec(run_sync),
    "watch": CommandSpec(run_watch),
}

__all__ = [
    "COMMAND_SPECS",
    "EXIT_INIT",
    "EXIT_INVALID",
    "EXIT_IO",
    "EXIT_OK",
    "EXIT_SETTINGS",
    "EXIT_SYNC",
    "CommandSpec",
]
