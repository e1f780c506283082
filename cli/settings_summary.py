"""Printable summaries for Quote Manager configuration.

Updates:
  v0.1.1 - 2026-10-07 - Mask Redis DSN credentials in summaries.
  v0.1.0 - 2026-09-20 - Extract CLI settings summary rendering.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .utils import describe_path, mask_secret

if TYPE_CHECKING:  # pragma: no cover - typing helpers
    from config import QuoteManagerSettings


def print_settings_summary(settings: QuoteManagerSettings) -> None:
    """Emit a readable summary of storage and sync configuration."""
    lines = [
        "Quote Manager configuration",
        "---------------------------",
        "Durable store: "
        + ("Redis " + mask_secret(settings.redis_dsn) if settings.redis_dsn else "JSON file"),
        f"Data path: {describe_path(settings.data_path)}",
        f"Remote source: {settings.remote_base_url}{settings.remote_posts_path}",
        f"Remote timeout: {settings.remote_timeout_seconds:.1f}s",
        f"Remote category: {settings.remote_category}",
        f"Sync: {'enabled' if settings.sync_enabled else 'disabled'}",
        f"Sync interval: {settings.sync_interval_seconds:.1f}s",
        f"Fetch limit: {settings.fetch_limit}",
    ]
    print("\n".join(lines))
