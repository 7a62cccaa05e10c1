# path: src/core/utils/pagination.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Pagination:
    page: int
    page_size: int
    total: int
    pages: int
    has_prev: bool
    has_next: bool
    offset: int
    limit: int


def build_pagination(*, total: int, page: int, page_size: int) -> Pagination:
    """
    pages = ceil(total / page_size); при total == 0 страниц 0.

    page НЕ зажимаем в [1, pages]: запрос страницы за пределами
    даёт пустой срез, а не подмену на последнюю страницу.
    """
    if page_size <= 0:
        page_size = 50
    page = max(1, int(page))
    total = max(0, int(total))
    pages = (total + page_size - 1) // page_size
    offset = (page - 1) * page_size
    return Pagination(
        page=page,
        page_size=page_size,
        total=total,
        pages=pages,
        has_prev=page > 1,
        has_next=page < pages,
        offset=offset,
        limit=page_size,
    )


def slice_page(items: Sequence[T], pagination: Pagination) -> list[T]:
    return list(items[pagination.offset:pagination.offset + pagination.limit])


def parse_bool(v: str | None) -> Optional[bool]:
    if v is None:
        return None
    s = str(v).strip().lower()
    if s in {"1", "true", "yes", "y", "on"}:
        return True
    if s in {"0", "false", "no", "n", "off"}:
        return False
    return None
