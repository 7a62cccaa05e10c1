# path: src/nsn_search/services/filters.py
"""
Пост-фильтры, которые нельзя выразить предикатом справочной таблицы.

Правила:
- classIX: None пропускает всё, иначе точное совпадение;
- цена: нет unitPrice -> запись НЕ проходит min/max;
  кривая цена в записи -> не проходит;
  кривое значение фильтра -> не проходит ничего;
- fsc: совпадение итогового (смёрженного) fsc с уже очищенным SearchFilters.fsc.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any, List, Optional, Sequence

from src.nsn_search.schemas.search import SearchFilters, SearchResult


class _Malformed:
    """Маркер: значение фильтра не парсится как число."""


MALFORMED = _Malformed()


def parse_price(value: Any) -> Optional[Decimal]:
    """Decimal из строки/числа; None для пустых и нечисловых значений (а также NaN/inf)."""
    if value is None:
        return None
    if isinstance(value, Decimal):
        parsed = value
    else:
        raw = str(value).strip().replace(",", "").lstrip("$")
        if not raw:
            return None
        try:
            parsed = Decimal(raw)
        except (InvalidOperation, ValueError):
            return None
    if not parsed.is_finite():
        return None
    return parsed


def _bound(value: Any) -> Decimal | _Malformed | None:
    if value is None:
        return None
    if isinstance(value, str) and not value.strip():
        return None
    parsed = parse_price(value)
    return MALFORMED if parsed is None else parsed


def passes_price(result: SearchResult, min_price: Any = None, max_price: Any = None) -> bool:
    low = _bound(min_price)
    high = _bound(max_price)
    if low is None and high is None:
        return True
    if low is MALFORMED or high is MALFORMED:
        return False

    price = parse_price(result.unit_price)
    if price is None:
        return False
    if low is not None and price < low:
        return False
    if high is not None and price > high:
        return False
    return True


def passes_filters(result: SearchResult, filters: Optional[SearchFilters]) -> bool:
    """Одна запись против всех фильтров (exact-путь использует напрямую)."""
    if filters is None:
        return True

    if filters.class_ix is not None and result.class_ix != filters.class_ix:
        return False

    if filters.fsc and result.fsc != filters.fsc:
        return False

    return passes_price(result, filters.min_price, filters.max_price)


def apply_post_filters(
    results: Sequence[SearchResult],
    filters: Optional[SearchFilters],
) -> List[SearchResult]:
    """Фильтрация с сохранением порядка."""
    return [r for r in results if passes_filters(r, filters)]
