# path: src/nsn_search/schemas/search.py
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Annotated, List, Literal, Optional, Union

from pydantic import Field, StringConstraints, field_validator

from src.nsn_search.schemas.common import CamelSchema
from src.nsn_search.services.normalizer import clean_query


PriceValue = Union[Decimal, str]


class SearchFilters(CamelSchema):
    """
    Фильтры поиска.

    Цены принимаем как есть (Decimal или строка из query string):
    парсинг и правило "кривое значение -> ничего не подходит" живут в filters.py.

    fsc чистится так же, как запрос ("59-65" -> "5965"): одно значение
    и для discovery (SQL), и для пост-фильтра.
    """
    fsc: Optional[str] = Field(default=None, examples=["5965"])
    class_ix: Optional[bool] = Field(default=None, alias="classIX")
    min_price: Optional[PriceValue] = Field(default=None, examples=["10.00"])
    max_price: Optional[PriceValue] = Field(default=None, examples=["250"])

    @field_validator("fsc")
    @classmethod
    def _clean_fsc(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return clean_query(v) or None


class SearchResult(CamelSchema):
    """
    Денормализованная запись по одному niin (собирается на каждый запрос, не хранится).
    """
    nsn: str = Field(..., examples=["5965015726371"])
    niin: str = Field(..., examples=["015726371"])
    fsc: str = ""
    name: str = "Unknown Item"
    description: Optional[str] = None
    characteristics: Optional[str] = None
    publication_date: Optional[str] = None

    aac: str = ""
    class_ix: bool = Field(default=False, alias="classIX")

    unit_price: Optional[str] = None
    unit_of_issue: Optional[str] = None

    weight: Optional[str] = None
    cube: Optional[str] = None
    weight_publication_date: Optional[str] = None

    requirements_statement: Optional[str] = None
    clear_text_reply: Optional[str] = None

    alternate_names: List[str] = Field(default_factory=list)


class SearchPage(CamelSchema):
    """
    Ответ resolve_search.

    total_basis:
    - "candidates": total = число различных niin ДО пост-фильтров (partial-путь),
      поэтому страница может быть короче page_size;
    - "filtered":   total = число записей ПОСЛЕ фильтров (exact-путь и пустой запрос).
    """
    results: List[SearchResult] = Field(default_factory=list)
    total: int = 0
    page: int = 1
    page_size: int
    total_pages: int = 0
    total_basis: Literal["candidates", "filtered"] = "filtered"
    strategy: Optional[Literal["exact_match", "partial_discovery"]] = None
    truncated: bool = False


class HistoryIn(CamelSchema):
    query: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=200)]


class HistoryOut(CamelSchema):
    id: int
    query: str
    created_at: datetime
