"""Argument parser for the Quote Manager CLI.

Updates:
  v0.2.1 - 2026-10-20 - Drop show --new; a session lasts one CLI process.
  v0.2.0 - 2026-10-08 - Add watch command for the periodic sync scheduler.
  v0.1.0 - 2026-09-20 - Initial browse/add/import/export/sync commands.
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence


def build_parser() -> argparse.ArgumentParser:
    """Return the configured argument parser."""
    parser = argparse.ArgumentParser(description="Quote Manager")
    parser.add_argument(
        "--logging-config",
        type=Path,
        default=None,
        help="Path to logging configuration file (INI format)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )
    parser.add_argument(
        "--print-settings",
        action="store_true",
        help="Print resolved settings and exit",
    )

    subparsers = parser.add_subparsers(dest="command")

    show_parser = subparsers.add_parser(
        "show",
        help=(
            "Show the last viewed quote of this session or a random one; "
            "a session lasts for one process."
        ),
    )
    show_parser.add_argument(
        "--category",
        default=None,
        help="Category filter ('all' for every quote); remembered for next time.",
    )

    list_parser = subparsers.add_parser("list", help="List quotes, optionally by category.")
    list_parser.add_argument("--category", default=None, help="Category filter.")

    subparsers.add_parser("categories", help="List the known categories.")

    add_parser = subparsers.add_parser("add", help="Add a new quote.")
    add_parser.add_argument("text", help="Quote text.")
    add_parser.add_argument("category", help="Quote category.")
    add_parser.add_argument(
        "--no-push",
        action="store_true",
        help="Keep the quote local instead of sending it to the remote source.",
    )

    export_parser = subparsers.add_parser("export", help="Export quotes to a JSON file.")
    export_parser.add_argument(
        "path",
        type=Path,
        nargs="?",
        default=None,
        help="Destination file or directory (defaults to a timestamped file in the cwd).",
    )

    import_parser = subparsers.add_parser("import", help="Import quotes from a JSON file.")
    import_parser.add_argument("path", type=Path, help="JSON file containing a quote array.")

    subparsers.add_parser("sync", help="Run one reconciliation cycle with the remote source.")

    watch_parser = subparsers.add_parser(
        "watch",
        help="Run periodic reconciliation until interrupted.",
    )
    watch_parser.add_argument(
        "--cycles",
        type=int,
        default=None,
        help="Stop after this many cycles (default: run until interrupted).",
    )
    return parser


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Return parsed CLI arguments."""
    return build_parser().parse_args(argv)
