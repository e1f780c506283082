"""Shared CLI utility functions for Quote Manager commands.

Updates:
  v0.1.0 - 2026-09-20 - Extract stdout logging, quote formatting and path helpers.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover - typing helpers
    from logging import Logger

    from models.quote_model import Quote


def print_and_log(logger: Logger, level: int, message: str) -> None:
    """Log *message* at *level* and mirror it to stdout."""
    logger.log(level, message)
    print(message)


def format_quote(quote: Quote) -> str:
    """Return the display form ``"text" — [category]``."""
    return f"“{quote.text}” — [{quote.category}]"


def mask_secret(value: str | None) -> str:
    """Return an obfuscated representation of secret configuration values."""
    if not value:
        return "not set"
    secret = value.strip()
    if len(secret) <= 6:
        return "set (****)"
    return f"set ({secret[:4]}...{secret[-4:]})"


def describe_path(path_value: object) -> str:
    """Return a human-friendly description of a storage file path."""
    try:
        path = Path(path_value) if path_value is not None else None
    except TypeError:
        path = None
    if path is None:
        return "not set"
    resolved = path.expanduser()
    if resolved.is_dir():
        return f"{resolved} (exists but is a directory)"
    if resolved.exists():
        return f"{resolved} (exists)"
    return f"{resolved} (missing - created on demand)"
