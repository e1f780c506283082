"""Configuration helpers for Quote Manager.

Updates: v0.2.0 - 2026-09-25 - Expose settings loader and configuration error types.
Updates: v0.1.0 - 2026-09-14 - Package scaffold.
"""

from .settings import (
    DEFAULT_DATA_PATH,
    DEFAULT_FETCH_LIMIT,
    DEFAULT_REMOTE_BASE_URL,
    DEFAULT_REMOTE_CATEGORY,
    DEFAULT_SYNC_INTERVAL_SECONDS,
    QuoteManagerSettings,
    SettingsError,
    load_settings,
)

__all__ = [
    "DEFAULT_DATA_PATH",
    "DEFAULT_FETCH_LIMIT",
    "DEFAULT_REMOTE_BASE_URL",
    "DEFAULT_REMOTE_CATEGORY",
    "DEFAULT_SYNC_INTERVAL_SECONDS",
    "QuoteManagerSettings",
    "SettingsError",
    "load_settings",
]
