"""Application entry point for Quote Manager.

Updates:
  v0.2.0 - 2026-10-08 - Print sync status transitions while watching.
  v0.1.1 - 2026-10-06 - Map settings and initialisation failures to exit codes.
  v0.1.0 - 2026-09-20 - Wire settings, services and CLI commands.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from cli.commands import COMMAND_SPECS, EXIT_INIT, EXIT_SETTINGS
from cli.parser import parse_args
from cli.runtime import setup_logging
from cli.settings_summary import print_settings_summary
from config import SettingsError, load_settings
from core import QuoteManagerError, SyncStatus, build_quote_manager

if TYPE_CHECKING:  # pragma: no cover - typing helpers
    from collections.abc import Sequence

    from config import QuoteManagerSettings
    from core.quote_manager import QuoteManager
    from core.sync import SyncStatusUpdate


def _print_sync_status(update: SyncStatusUpdate) -> None:
    if update.status in {SyncStatus.SYNCED, SyncStatus.SYNC_FAILED}:
        print(update.describe())


def _initialise_manager(
    settings: QuoteManagerSettings,
    logger: logging.Logger,
) -> QuoteManager | None:
    try:
        return build_quote_manager(settings, status_sink=_print_sync_status)
    except (QuoteManagerError, OSError, ValueError) as exc:
        logger.error("Failed to initialise services: %s", exc)
        return None


def main(argv: Sequence[str] | None = None) -> int:
    """Entrypoint that wires settings, services, and CLI commands."""
    args = parse_args(argv)
    setup_logging(args.logging_config, verbose=args.verbose)

    logger = logging.getLogger("quote_manager.main")
    try:
        settings = load_settings()
    except SettingsError as exc:
        logger.error("Failed to load settings: %s", exc)
        return EXIT_SETTINGS

    if args.print_settings:
        print_settings_summary(settings)
        return 0

    spec = COMMAND_SPECS[getattr(args, "command", None)]
    manager = None
    if spec.requires_manager:
        manager = _initialise_manager(settings, logger)
        if manager is None:
            return EXIT_INIT

    try:
        return spec.handler(manager, args, logger)
    finally:
        if manager is not None:
            manager.close()


if __name__ == "__main__":
    raise SystemExit(main())
