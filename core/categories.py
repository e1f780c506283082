"""Category index derived from the quote collection.

Updates:
  v0.1.1 - 2026-09-26 - Reset stale filters to the ``all`` sentinel.
  v0.1.0 - 2026-09-15 - Introduce sorted, de-duplicated category computation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from models.quote_model import Quote

CATEGORY_ALL = "all"


def compute_categories(quotes: Iterable[Quote]) -> list[str]:
    """Return the distinct categories in *quotes* sorted ascending."""
    return sorted({quote.category for quote in quotes})


def resolve_category_filter(selected: str | None, categories: Sequence[str]) -> str:
    """Return *selected* when it is still a known category, else ``"all"``."""
    if not selected or selected == CATEGORY_ALL:
        return CATEGORY_ALL
    if selected not in categories:
        return CATEGORY_ALL
    return selected


__all__ = ["CATEGORY_ALL", "compute_categories", "resolve_category_filter"]
