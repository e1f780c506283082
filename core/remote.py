"""Remote quote source protocol and the HTTPX-backed implementation.

Updates:
  v0.1.3 - 2026-10-20 - Map invalid URLs and undecodable payloads to TransportError.
  v0.1.2 - 2026-10-06 - Reject non-array GET payloads as transport failures.
  v0.1.1 - 2026-09-30 - Accept an injected client factory for tests and pooling.
  v0.1.0 - 2026-09-22 - Introduce remote source abstraction over a JSON posts API.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol, cast, runtime_checkable

import httpx

from .exceptions import TransportError

if TYPE_CHECKING:
    from collections.abc import Callable

    from models.quote_model import Quote

logger = logging.getLogger("quote_manager.remote")

DEFAULT_REMOTE_BASE_URL = "https://jsonplaceholder.typicode.com"
DEFAULT_POSTS_PATH = "/posts"


@runtime_checkable
class RemoteQuoteSource(Protocol):
    """Request/response collaborator used by the sync engine."""

    async def fetch(self, limit: int) -> list[dict[str, Any]]:
        """Return at most *limit* raw remote records."""
        ...

    async def push(self, quote: Quote) -> None:
        """Send *quote* to the remote source."""
        ...


@dataclass(slots=True)
class HttpRemoteQuoteSource:
    """Remote source speaking to a JSON posts endpoint over HTTPX."""

    base_url: str = DEFAULT_REMOTE_BASE_URL
    posts_path: str = DEFAULT_POSTS_PATH
    timeout: float = 10.0
    client_factory: Callable[[], httpx.AsyncClient] | None = None

    def __post_init__(self) -> None:
        """Normalise the base URL and endpoint path."""
        base = self.base_url.strip().rstrip("/")
        if not base:
            raise ValueError("remote base URL is required")
        self.base_url = base
        path = self.posts_path.strip() or DEFAULT_POSTS_PATH
        self.posts_path = path if path.startswith("/") else f"/{path}"

    def _client(self) -> tuple[httpx.AsyncClient, bool]:
        if self.client_factory is not None:
            return self.client_factory(), False
        client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={"Content-Type": "application/json; charset=UTF-8"},
            timeout=self.timeout,
        )
        return client, True

    async def fetch(self, limit: int) -> list[dict[str, Any]]:
        """GET the posts endpoint and return the first *limit* object records."""
        clamped = max(1, limit)
        client, manage_client = self._client()
        try:
            response = await client.get(self.posts_path, params={"_limit": clamped})
            response.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise TransportError(f"Fetching remote quotes failed: {exc}") from exc
        finally:
            if manage_client:
                await client.aclose()
        try:
            payload: object = response.json()
        except (ValueError, RecursionError) as exc:
            raise TransportError("Remote source returned invalid JSON") from exc
        if not isinstance(payload, list):
            raise TransportError("Remote source did not return a JSON array")
        records: list[dict[str, Any]] = []
        for entry in cast("list[object]", payload)[:clamped]:
            if isinstance(entry, dict):
                records.append(cast("dict[str, Any]", entry))
        return records

    async def push(self, quote: Quote) -> None:
        """POST *quote* to the posts endpoint; the response body is ignored."""
        client, manage_client = self._client()
        try:
            response = await client.post(self.posts_path, json=quote.to_record())
            response.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise TransportError(f"Pushing quote {quote.id} failed: {exc}") from exc
        finally:
            if manage_client:
                await client.aclose()
        logger.debug("Pushed quote %s (status %s)", quote.id, response.status_code)


__all__ = [
    "DEFAULT_POSTS_PATH",
    "DEFAULT_REMOTE_BASE_URL",
    "HttpRemoteQuoteSource",
    "RemoteQuoteSource",
]
