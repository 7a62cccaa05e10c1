# path: src/nsn_search/schemas/__init__.py
from __future__ import annotations

from src.nsn_search.schemas.common import CamelSchema
from src.nsn_search.schemas.search import (
    HistoryIn,
    HistoryOut,
    SearchFilters,
    SearchPage,
    SearchResult,
)

__all__ = [
    "CamelSchema",
    "SearchFilters",
    "SearchResult",
    "SearchPage",
    "HistoryIn",
    "HistoryOut",
]
