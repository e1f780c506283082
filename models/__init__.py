"""Data models for Quote Manager.

Updates: v0.1.0 - 2026-09-14 - Export Quote dataclass and default collection helpers.
"""

from .quote_model import DEFAULT_QUOTES, Quote, default_quotes, generate_quote_id, now_ms

__all__ = [
    "DEFAULT_QUOTES",
    "Quote",
    "default_quotes",
    "generate_quote_id",
    "now_ms",
]
