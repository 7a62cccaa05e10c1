# path: src/core/utils/__init__.py
from __future__ import annotations

from .pagination import (
    Pagination,
    build_pagination,
    parse_bool,
    slice_page,
)

__all__ = (
    "Pagination",
    "build_pagination",
    "parse_bool",
    "slice_page",
)
