# path: src/nsn_search/services/normalizer.py
"""
Нормализация сырого запроса пользователя в ключ поиска.

Правила:
- оставляем только буквы и цифры, переводим в верхний регистр
  ("5965-01-572-6371" -> "5965015726371");
- короче min_length -> INVALID (в БД не ходим);
- только цифры:
    * >= 13  -> полный NSN: первые 4 = FSC, последние 9 = NIIN;
    * == 9   -> NIIN;
    * 3..8, 10..12 -> префикс (а 4 цифры ещё и кандидат в FSC);
- иначе свободный текст.

Исключений не бросает: пользовательский ввод произвольный.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional


MIN_QUERY_LENGTH = 3
NIIN_LENGTH = 9
FSC_LENGTH = 4
NSN_LENGTH = FSC_LENGTH + NIIN_LENGTH

_NON_ALNUM = re.compile(r"[^A-Za-z0-9]+")


class QueryKind(str, Enum):
    FULL_STOCK_NUMBER = "full_stock_number"
    ITEM_IDENTIFIER = "item_identifier"
    PREFIX_OR_CODE = "prefix_or_code"
    FREE_TEXT = "free_text"
    INVALID = "invalid"


@dataclass(frozen=True)
class NormalizedQuery:
    raw_length: int
    cleaned: str
    is_numeric: bool
    kind: QueryKind
    niin_candidate: Optional[str] = None
    fsc_candidate: Optional[str] = None
    # для поиска по названиям: слова через один пробел ("BOLT, HEX" -> "BOLT HEX")
    phrase: str = ""

    @property
    def is_valid(self) -> bool:
        return self.kind is not QueryKind.INVALID


def clean_query(raw: Optional[str]) -> str:
    """Только A-Z/0-9, верхний регистр."""
    return _NON_ALNUM.sub("", str(raw or "")).upper()


def clean_phrase(raw: Optional[str]) -> str:
    return " ".join(_NON_ALNUM.sub(" ", str(raw or "")).split()).upper()


def normalize_query(raw: Optional[str], *, min_length: int = MIN_QUERY_LENGTH) -> NormalizedQuery:
    text = "" if raw is None else str(raw)
    cleaned = clean_query(text)
    is_numeric = cleaned.isdigit()

    if len(cleaned) < max(1, int(min_length)):
        return NormalizedQuery(
            raw_length=len(text),
            cleaned=cleaned,
            is_numeric=is_numeric,
            kind=QueryKind.INVALID,
        )

    if not is_numeric:
        return NormalizedQuery(
            raw_length=len(text),
            cleaned=cleaned,
            is_numeric=False,
            kind=QueryKind.FREE_TEXT,
            phrase=clean_phrase(text),
        )

    if len(cleaned) >= NSN_LENGTH:
        return NormalizedQuery(
            raw_length=len(text),
            cleaned=cleaned,
            is_numeric=True,
            kind=QueryKind.FULL_STOCK_NUMBER,
            niin_candidate=cleaned[-NIIN_LENGTH:],
            fsc_candidate=cleaned[:FSC_LENGTH],
        )

    if len(cleaned) == NIIN_LENGTH:
        return NormalizedQuery(
            raw_length=len(text),
            cleaned=cleaned,
            is_numeric=True,
            kind=QueryKind.ITEM_IDENTIFIER,
            niin_candidate=cleaned,
        )

    return NormalizedQuery(
        raw_length=len(text),
        cleaned=cleaned,
        is_numeric=True,
        kind=QueryKind.PREFIX_OR_CODE,
        niin_candidate=cleaned,
        fsc_candidate=cleaned if len(cleaned) == FSC_LENGTH else None,
    )


def normalize_identifier(raw: Optional[str]) -> Optional[tuple[str, Optional[str]]]:
    """
    Для /nsn/{niin}: принимает только NIIN (9) или NSN (13+) цифр.

    Возвращает (niin, fsc_candidate) либо None.
    """
    q = normalize_query(raw, min_length=NIIN_LENGTH)
    if q.kind in (QueryKind.FULL_STOCK_NUMBER, QueryKind.ITEM_IDENTIFIER) and q.niin_candidate:
        return q.niin_candidate, q.fsc_candidate
    return None
