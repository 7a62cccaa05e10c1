# path: src/nsn_search/services/merger.py
"""
Сборка SearchResult из фрагментов справочных таблиц.

Важно:
- Чистая функция: без I/O, без исключений при любом наборе фрагментов.
- Фрагмент = dict строки таблицы (ключи - атрибуты ORM-модели) или None.
- Приоритет полей: первый непустой выигрывает
  (names -> pull2 -> fscs -> fsc из запроса).
"""

from __future__ import annotations

from typing import Any, Iterable, List, Mapping, Optional, Sequence

from src.nsn_search.schemas.search import SearchResult


UNKNOWN_ITEM_NAME = "Unknown Item"
CLASS_IX_AAC_CODES = frozenset({"D", "V", "Z"})

Fragment = Optional[Mapping[str, Any]]


def _text(value: Any) -> Optional[str]:
    """Непустая строка или None (пробелы считаем пустотой)."""
    if value is None:
        return None
    try:
        s = str(value).strip()
    except Exception:
        return None
    return s or None


def _field(fragment: Fragment, key: str) -> Optional[str]:
    if not fragment:
        return None
    try:
        return _text(fragment.get(key))
    except Exception:
        return None


def _first(*values: Optional[str]) -> Optional[str]:
    for v in values:
        if v:
            return v
    return None


def is_class_ix(aac: Optional[str]) -> bool:
    """Class IX (запчасти) <=> AAC in {D, V, Z}, без учёта регистра."""
    return (_text(aac) or "").upper() in CLASS_IX_AAC_CODES


def build_nsn(fsc: Optional[str], niin: str) -> str:
    fsc_clean = _text(fsc)
    return f"{fsc_clean}{niin}" if fsc_clean else niin


def _alternate_names(names: Sequence[Mapping[str, Any]]) -> List[str]:
    """item_name всех строк names после первой, в порядке таблицы (повторы сохраняем)."""
    return [v for v in (_field(entry, "item_name") for entry in names[1:]) if v is not None]


def _as_rows(names: Optional[Iterable[Mapping[str, Any]]]) -> List[Mapping[str, Any]]:
    if not names or isinstance(names, (str, bytes, Mapping)):
        return []
    try:
        return [n for n in names if isinstance(n, Mapping) and n]
    except TypeError:
        return []


def merge_fragments(
    niin: str,
    *,
    stock: Fragment = None,
    names: Optional[Iterable[Mapping[str, Any]]] = None,
    price: Fragment = None,
    weight: Fragment = None,
    description: Fragment = None,
    aac: Fragment = None,
    fsc_entry: Fragment = None,
    fsc_candidate: Optional[str] = None,
) -> SearchResult:
    """
    Один niin + 0..1 строка из каждой таблицы (names: 0..N) -> SearchResult.

    Отсутствующие фрагменты дают null/пустые поля, но не ошибку.
    """
    niin = _text(niin) or ""
    name_rows = _as_rows(names)
    primary = name_rows[0] if name_rows else None

    name = _first(_field(primary, "item_name"), _field(stock, "item_name")) or UNKNOWN_ITEM_NAME
    fsc = _first(
        _field(primary, "fsc"),
        _field(stock, "fsc"),
        _field(fsc_entry, "fsc"),
        _text(fsc_candidate),
    ) or ""
    aac_code = _field(aac, "aac") or ""

    return SearchResult(
        nsn=build_nsn(fsc, niin),
        niin=niin,
        fsc=fsc,
        name=name,
        description=_first(_field(primary, "common_name"), _field(stock, "common_name")),
        characteristics=_first(_field(stock, "characteristics"), _field(primary, "characteristics")),
        publication_date=_field(stock, "publication_date"),
        aac=aac_code,
        class_ix=is_class_ix(aac_code),
        unit_price=_field(price, "unit_price"),
        unit_of_issue=_field(price, "unit_of_issue"),
        weight=_field(weight, "dss_weight"),
        cube=_field(weight, "dss_cube"),
        weight_publication_date=_field(weight, "publication_date"),
        requirements_statement=_field(description, "requirements_statement"),
        clear_text_reply=_field(description, "clear_text_reply"),
        alternate_names=_alternate_names(name_rows),
    )
