"""Common exception classes for the core package.

All exceptions ultimately inherit from :class:`QuoteManagerError`, allowing
callers to catch a single base class for any manager-related failure while
still distinguishing individual error categories when needed.

Updates:
  v0.3.0 - 2026-09-30 - Add StorageUnavailableError for key-value backend failures.
  v0.2.0 - 2026-09-22 - Add TransportError for remote fetch/push failures.
  v0.1.0 - 2026-09-14 - Created module with validation and format errors.
"""

from __future__ import annotations


class QuoteManagerError(Exception):
    """Base exception for Quote Manager failures."""


class ValidationError(QuoteManagerError):
    """Raised when quote text or category is empty after trimming."""


class FormatError(QuoteManagerError):
    """Raised when an import payload or persisted collection has the wrong shape."""


class TransportError(QuoteManagerError):
    """Raised when fetching from or pushing to the remote source fails."""


class StorageUnavailableError(QuoteManagerError):
    """Raised when a durable or ephemeral storage backend cannot be used."""


__all__ = [
    "FormatError",
    "QuoteManagerError",
    "StorageUnavailableError",
    "TransportError",
    "ValidationError",
]
