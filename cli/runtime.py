"""Runtime boot helpers for the Quote Manager CLI.

Updates:
  v0.1.1 - 2026-10-08 - Allow forcing debug level from the command line.
  v0.1.0 - 2026-09-20 - Extract logging configuration helpers.
"""

from __future__ import annotations

import logging
import logging.config
from pathlib import Path

DEFAULT_LOGGING_CONFIG = Path("config/logging.conf")


def setup_logging(logging_conf_path: Path | None, *, verbose: bool = False) -> None:
    """Configure logging using *logging_conf_path* when available."""
    path = logging_conf_path or DEFAULT_LOGGING_CONFIG
    configured = False
    if path.exists():
        try:
            logging.config.fileConfig(path, disable_existing_loggers=False)
            configured = True
        except (OSError, ValueError, KeyError) as exc:  # pragma: no cover - configuration fallback
            logging.getLogger("quote_manager.runtime").warning(
                "Ignoring logging config %s: %s", path, exc
            )
    if not configured:
        logging.basicConfig(
            level=logging.INFO,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)
