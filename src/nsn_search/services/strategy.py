# path: src/nsn_search/services/strategy.py
from __future__ import annotations

from enum import Enum

from src.nsn_search.services.normalizer import NormalizedQuery, QueryKind


class LookupStrategy(str, Enum):
    EXACT_MATCH = "exact_match"
    PARTIAL_DISCOVERY = "partial_discovery"


_EXACT_KINDS = frozenset({QueryKind.FULL_STOCK_NUMBER, QueryKind.ITEM_IDENTIFIER})


def select_strategy(query: NormalizedQuery) -> LookupStrategy:
    """Известен полный NIIN -> точный поиск, иначе discovery. Без I/O."""
    if query.kind in _EXACT_KINDS and query.niin_candidate:
        return LookupStrategy.EXACT_MATCH
    return LookupStrategy.PARTIAL_DISCOVERY
