"""Key-value storage backends for durable and session-scoped state.

Three backends share the same ``get``/``set``/``delete`` surface:

* :class:`JsonFileKeyValueStore` keeps string values inside a single JSON object
  on disk and survives process restarts.
* :class:`RedisKeyValueStore` stores the same values in Redis when a DSN is
  configured.
* :class:`MemoryKeyValueStore` lives for the current session only and is cleared
  when the session ends.

Every backend raises :class:`~core.exceptions.StorageUnavailableError` when the
underlying medium cannot be read or written; callers decide whether that is fatal.

Updates:
  v0.2.1 - 2026-10-20 - Treat undecodable or over-nested storage files as corrupt.
  v0.2.0 - 2026-10-02 - Add Redis-backed durable store with key namespacing.
  v0.1.1 - 2026-09-30 - Write JSON store atomically through a temporary file.
  v0.1.0 - 2026-09-15 - Introduce file and in-memory key-value stores.
"""

from __future__ import annotations

import json
import logging
import os
import threading
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, cast

import redis

from .exceptions import StorageUnavailableError

if TYPE_CHECKING:  # pragma: no cover - typing only
    from redis import Redis

logger = logging.getLogger("quote_manager.storage")


class KeyValueStore(Protocol):
    """Minimal string key-value contract used by the persistence adapter."""

    def get(self, key: str) -> str | None:  # pragma: no cover - Protocol
        """Return the stored value for *key* or ``None`` when absent."""
        ...

    def set(self, key: str, value: str) -> None:  # pragma: no cover - Protocol
        """Store *value* under *key*, replacing any prior value."""
        ...

    def delete(self, key: str) -> None:  # pragma: no cover - Protocol
        """Remove *key* if present."""
        ...

    def clear(self) -> None:  # pragma: no cover - Protocol
        """Remove every key owned by the store."""
        ...


class MemoryKeyValueStore:
    """Session-scoped store backed by a plain dictionary."""

    def __init__(self, initial: Mapping[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def delete(self, key: str) -> None:
        self._values.pop(key, None)

    def clear(self) -> None:
        self._values.clear()

    def __len__(self) -> int:
        return len(self._values)


class JsonFileKeyValueStore:
    """Durable store persisting a JSON object of string values to *path*."""

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path).expanduser()
        self._lock = threading.RLock()

    @property
    def path(self) -> Path:
        """Return the backing file path."""
        return self._path

    def _read_all(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            contents = self._path.read_text(encoding="utf-8")
        except UnicodeDecodeError:
            logger.warning("Ignoring storage file %s: not valid UTF-8", self._path)
            return {}
        except OSError as exc:
            raise StorageUnavailableError(f"Unable to read storage file {self._path}") from exc
        if not contents.strip():
            return {}
        try:
            payload: object = json.loads(contents)
        except (json.JSONDecodeError, RecursionError):
            logger.warning("Ignoring corrupt storage file %s", self._path)
            return {}
        if not isinstance(payload, dict):
            logger.warning("Storage file %s does not contain a JSON object", self._path)
            return {}
        mapping = cast("Mapping[object, object]", payload)
        return {
            str(key): value for key, value in mapping.items() if isinstance(value, str)
        }

    def _write_all(self, values: Mapping[str, str]) -> None:
        temp_path = self._path.with_name(f"{self._path.name}.tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            temp_path.write_text(
                json.dumps(dict(values), ensure_ascii=False, indent=2, sort_keys=True),
                encoding="utf-8",
            )
            os.replace(temp_path, self._path)
        except OSError as exc:
            raise StorageUnavailableError(f"Unable to write storage file {self._path}") from exc

    def get(self, key: str) -> str | None:
        with self._lock:
            return self._read_all().get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            values = self._read_all()
            values[key] = value
            self._write_all(values)

    def delete(self, key: str) -> None:
        with self._lock:
            values = self._read_all()
            if values.pop(key, None) is not None:
                self._write_all(values)

    def clear(self) -> None:
        with self._lock:
            self._write_all({})


class RedisKeyValueStore:
    """Durable store writing values to Redis under a key *namespace*."""

    def __init__(self, client: Redis, *, namespace: str = "quote_manager") -> None:
        self._client = client
        self._namespace = namespace.strip(":")

    @classmethod
    def from_dsn(cls, dsn: str, *, namespace: str = "quote_manager") -> RedisKeyValueStore:
        """Create a store from a Redis connection string."""
        client = redis.Redis.from_url(dsn, decode_responses=True)
        return cls(client, namespace=namespace)

    def _key(self, key: str) -> str:
        return f"{self._namespace}:{key}" if self._namespace else key

    def get(self, key: str) -> str | None:
        try:
            value = self._client.get(self._key(key))
        except redis.RedisError as exc:
            raise StorageUnavailableError(f"Redis read failed for {key}") from exc
        if value is None:
            return None
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return str(value)

    def set(self, key: str, value: str) -> None:
        try:
            self._client.set(self._key(key), value)
        except redis.RedisError as exc:
            raise StorageUnavailableError(f"Redis write failed for {key}") from exc

    def delete(self, key: str) -> None:
        try:
            self._client.delete(self._key(key))
        except redis.RedisError as exc:
            raise StorageUnavailableError(f"Redis delete failed for {key}") from exc

    def clear(self) -> None:
        try:
            keys = list(self._client.scan_iter(match=self._key("*")))
            if keys:
                self._client.delete(*keys)
        except redis.RedisError as exc:
            raise StorageUnavailableError("Redis clear failed") from exc


__all__ = [
    "JsonFileKeyValueStore",
    "KeyValueStore",
    "MemoryKeyValueStore",
    "RedisKeyValueStore",
]
