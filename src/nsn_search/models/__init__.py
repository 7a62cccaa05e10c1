# path: src/nsn_search/models/__init__.py
from __future__ import annotations

from src.nsn_search.models.reference import (
    AacEntry,
    DescriptionEntry,
    FscEntry,
    NameEntry,
    PriceEntry,
    StockRecord,
    WeightEntry,
)
from src.nsn_search.models.enums import FSC_TABLES, PREFIX_TABLES, ReferenceTable
from src.nsn_search.models.history import SearchHistory

__all__ = [
    "StockRecord",
    "NameEntry",
    "PriceEntry",
    "WeightEntry",
    "DescriptionEntry",
    "AacEntry",
    "FscEntry",
    "SearchHistory",
    "ReferenceTable",
    "FSC_TABLES",
    "PREFIX_TABLES",
]
