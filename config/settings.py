"""Settings management utilities for Quote Manager configuration.

Updates:
  v0.3.0 - 2026-10-07 - Add Redis DSN for a shared durable store.
  v0.2.1 - 2026-10-02 - Validate sync interval, fetch limit and remote timeout bounds.
  v0.2.0 - 2026-09-25 - Load JSON configuration files ahead of environment values.
  v0.1.0 - 2026-09-14 - Initial settings model for storage and remote sync.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any, cast

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

DEFAULT_DATA_PATH = Path("data") / "quote_store.json"
DEFAULT_REMOTE_BASE_URL = "https://jsonplaceholder.typicode.com"
DEFAULT_REMOTE_POSTS_PATH = "/posts"
DEFAULT_REMOTE_CATEGORY = "Server"
DEFAULT_FETCH_LIMIT = 5
DEFAULT_SYNC_INTERVAL_SECONDS = 30.0
CONFIG_JSON_ENV = "QUOTE_MANAGER_CONFIG_JSON"
DEFAULT_CONFIG_PATH = Path("config") / "config.json"

_JSON_CONFIG_KEYS: tuple[str, ...] = (
    "data_path",
    "redis_dsn",
    "remote_base_url",
    "remote_posts_path",
    "remote_timeout_seconds",
    "remote_category",
    "fetch_limit",
    "sync_interval_seconds",
    "sync_enabled",
)


class SettingsError(Exception):
    """Raised when Quote Manager configuration cannot be loaded or validated."""


class QuoteManagerSettings(BaseSettings):
    """Application configuration sourced from keyword overrides, JSON, env and ``.env``."""

    data_path: Path = Field(
        default=DEFAULT_DATA_PATH,
        description="JSON file holding the durable key-value store.",
    )
    redis_dsn: str | None = Field(
        default=None,
        description="Optional Redis DSN; when set the durable store lives in Redis.",
    )
    remote_base_url: str = Field(
        default=DEFAULT_REMOTE_BASE_URL,
        description="Base URL of the remote quote source.",
    )
    remote_posts_path: str = Field(
        default=DEFAULT_REMOTE_POSTS_PATH,
        description="Endpoint path used for remote GET and POST requests.",
    )
    remote_timeout_seconds: float = Field(
        default=10.0,
        description="HTTP timeout applied to remote requests.",
    )
    remote_category: str = Field(
        default=DEFAULT_REMOTE_CATEGORY,
        description="Category assigned to remote records that carry none.",
    )
    fetch_limit: int = Field(
        default=DEFAULT_FETCH_LIMIT,
        description="Maximum number of remote records merged per cycle.",
    )
    sync_interval_seconds: float = Field(
        default=DEFAULT_SYNC_INTERVAL_SECONDS,
        description="Period between reconciliation cycles.",
    )
    sync_enabled: bool = Field(
        default=True,
        description="Disable to keep the collection strictly local.",
    )

    model_config = SettingsConfigDict(
        env_prefix="QUOTE_MANAGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("data_path", mode="before")
    def _normalise_path(cls, value: Any) -> Path:
        """Expand user-relative paths and coerce values to Path instances."""
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ValueError("a filesystem path is required")
        return Path(str(value)).expanduser()

    @field_validator("redis_dsn", mode="before")
    def _trim_redis_dsn(cls, value: str | None) -> str | None:
        """Normalise Redis DSN values by stripping whitespace and empty strings."""
        if value is None:
            return None
        stripped = str(value).strip()
        return stripped or None

    @field_validator("remote_base_url", "remote_category", mode="before")
    def _require_text(cls, value: object) -> str:
        text = str(value or "").strip()
        if not text:
            raise ValueError("value must be a non-empty string")
        return text

    @field_validator("remote_posts_path", mode="before")
    def _normalise_posts_path(cls, value: object) -> str:
        text = str(value or "").strip() or DEFAULT_REMOTE_POSTS_PATH
        return text if text.startswith("/") else f"/{text}"

    @field_validator("remote_timeout_seconds", "sync_interval_seconds")
    def _validate_positive(cls, value: float) -> float:
        """Ensure durations are strictly positive."""
        if value <= 0:
            raise ValueError("durations must be greater than zero")
        return value

    @field_validator("fetch_limit")
    def _validate_fetch_limit(cls, value: int) -> int:
        if value < 1 or value > 100:
            raise ValueError("fetch_limit must be between 1 and 100")
        return value

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Define configuration source precedence.

        Order (highest → lowest):
            1. Explicit keyword arguments (e.g. load_settings(fetch_limit=3)).
            2. JSON configuration file.
            3. Environment variables.
            4. ``.env`` file.
            5. File secrets.
        """
        return (
            init_settings,
            cls._json_config_settings_source(settings_cls),
            env_settings,
            dotenv_settings,
            file_secret_settings,
        )

    @classmethod
    def _json_config_settings_source(
        cls,
        _: type[BaseSettings],
    ) -> PydanticBaseSettingsSource:
        """Return settings extracted from an optional JSON config file."""

        def _loader(_: BaseSettings | None = None) -> dict[str, Any]:
            explicit_path = os.getenv(CONFIG_JSON_ENV)
            if explicit_path:
                path = Path(explicit_path).expanduser()
                if not path.exists():
                    raise SettingsError(f"Configuration file not found: {path}")
            else:
                path = DEFAULT_CONFIG_PATH
                if not path.exists():
                    return {}
            try:
                raw_contents = path.read_text(encoding="utf-8")
            except OSError as exc:  # pragma: no cover - filesystem failure is env-specific
                raise SettingsError(f"Unable to read configuration file: {path}") from exc
            try:
                data = json.loads(raw_contents)
            except json.JSONDecodeError as exc:
                raise SettingsError(f"Invalid JSON in configuration file: {path}") from exc
            if not isinstance(data, dict):
                raise SettingsError(f"Configuration file {path} must contain a JSON object")
            mapping_data = cast("Mapping[object, Any]", data)
            unknown = sorted(
                str(key) for key in mapping_data if str(key) not in _JSON_CONFIG_KEYS
            )
            if unknown:
                logger.warning(
                    "Ignoring unknown key(s) %s in configuration file %s",
                    ", ".join(unknown),
                    path,
                )
            return {
                str(key): value
                for key, value in mapping_data.items()
                if str(key) in _JSON_CONFIG_KEYS
            }

        return cast("PydanticBaseSettingsSource", _loader)


def load_settings(**overrides: Any) -> QuoteManagerSettings:
    """Return validated settings, raising SettingsError on failure."""
    try:
        return QuoteManagerSettings(**overrides)
    except SettingsError:
        raise
    except ValidationError as exc:
        raise SettingsError("Invalid Quote Manager configuration") from exc


logger = logging.getLogger("quote_manager.settings")
