# path: src/nsn_search/services/discovery_resolver.py
"""
Partial-discovery: поиск по префиксу NIIN, коду FSC или названию.

Шаги:
1) discovery - независимые запросы к names / prices / pull2 (конкурентно),
   каждый ORDER BY niin LIMIT discovery_limit;
2) объединение в множество различных niin;
3) сортировка по возрастанию и обрезка до discovery_limit;
4) срез страницы;
5) обогащение ТОЛЬКО niin текущей страницы (батч niin IN (...) по каждой таблице);
6) пост-фильтры страницы. total = число кандидатов ДО пост-фильтров.

Инвариант: каждая таблица отдаёт свои первые limit niin, значит первые
limit элементов объединения точны; дальше возможны пропуски (truncated).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Awaitable, Dict, List, Optional, Sequence, Tuple

from src.app_logging import get_logger, timed
from src.core.utils import build_pagination, slice_page
from src.crud.reference_repository import IReferenceStore, NameMode, Row
from src.nsn_search.exceptions import CriticalStorageError
from src.nsn_search.models import FSC_TABLES, PREFIX_TABLES, ReferenceTable
from src.nsn_search.schemas.search import SearchFilters, SearchResult
from src.nsn_search.services.filters import apply_post_filters
from src.nsn_search.services.lookups import failed, gather_lookups, log_fragment_failure
from src.nsn_search.services.merger import merge_fragments
from src.nsn_search.services.normalizer import FSC_LENGTH, NormalizedQuery, QueryKind


logger = get_logger(__name__)

OPTIONAL_FRAGMENT_TABLES = frozenset({ReferenceTable.WEIGHTS, ReferenceTable.DESCRIPTIONS})


@dataclass(frozen=True)
class DiscoveryOutcome:
    results: List[SearchResult] = field(default_factory=list)
    total: int = 0
    truncated: bool = False


class PartialDiscoveryResolver:
    """
    Важно:
    - store приходит снаружи (DI);
    - лимит discovery и режим поиска по названиям берутся из SearchConfig.
    """

    def __init__(
        self,
        store: IReferenceStore,
        *,
        timeout_s: float,
        discovery_page_multiple: int = 20,
        discovery_max_rows: int = 5000,
        free_text_mode: str = "substring",
        enrich_optional_fragments: bool = True,
    ) -> None:
        self._store = store
        self._timeout_s = float(timeout_s)
        self._page_multiple = max(1, int(discovery_page_multiple))
        self._max_rows = max(1, int(discovery_max_rows))
        self._free_text_mode = free_text_mode
        self._enrich_optional = bool(enrich_optional_fragments)

    def discovery_limit(self, page_size: int) -> int:
        """Лимит на одну таблицу: кратен размеру страницы, но не больше max_rows."""
        return max(1, min(int(page_size) * self._page_multiple, self._max_rows))

    def _discovery_calls(
        self,
        query: NormalizedQuery,
        filters: Optional[SearchFilters],
        limit: int,
    ) -> Dict[str, Awaitable[List[str]]]:
        """
        {label: запрос}. label = "<таблица>:<вид>" - для логов и ошибок.

        fsc-фильтр вызывающего опускаем в SQL: тогда спрашиваем только
        таблицы с колонкой fsc.
        """
        fsc_filter = filters.fsc if filters else None
        calls: Dict[str, Awaitable[List[str]]] = {}

        def _code_lookups(code: str) -> None:
            # fsc = code AND fsc = fsc_filter пусто, если коды разные
            if fsc_filter and fsc_filter != code:
                return
            for table in FSC_TABLES:
                calls[f"{table.value}:fsc"] = self._store.discover_niins(table, fsc=code, limit=limit)

        if query.kind is QueryKind.PREFIX_OR_CODE:
            prefix_tables = FSC_TABLES if fsc_filter else PREFIX_TABLES
            for table in prefix_tables:
                calls[f"{table.value}:prefix"] = self._store.discover_niins(
                    table,
                    prefix=query.cleaned,
                    fsc=fsc_filter,
                    limit=limit,
                )
            if query.fsc_candidate:
                _code_lookups(query.fsc_candidate)

        elif query.kind is QueryKind.FREE_TEXT:
            if len(query.cleaned) == FSC_LENGTH:
                _code_lookups(query.cleaned)
            if self._free_text_mode in ("prefix", "substring") and query.phrase:
                mode: NameMode = "prefix" if self._free_text_mode == "prefix" else "substring"
                for table in FSC_TABLES:
                    calls[f"{table.value}:name"] = self._store.discover_niins(
                        table,
                        name=query.phrase,
                        name_mode=mode,
                        fsc=fsc_filter,
                        limit=limit,
                    )

        return calls

    async def discover(
        self,
        query: NormalizedQuery,
        filters: Optional[SearchFilters],
        *,
        limit: int,
    ) -> Tuple[List[str], bool]:
        """(отсортированные niin-кандидаты, truncated)."""
        calls = self._discovery_calls(query, filters, limit)
        if not calls:
            return [], False

        outcomes = await gather_lookups(calls, timeout_s=self._timeout_s)

        failures = [o for o in outcomes.values() if failed(o)]
        if failures and len(failures) == len(outcomes):
            logger.error(
                "discovery_all_failed",
                extra={"queries": list(outcomes.keys()), "error": str(failures[0])},
            )
            raise CriticalStorageError("discovery", failures[0])

        candidates: set[str] = set()
        truncated = False
        for label, outcome in outcomes.items():
            if failed(outcome):
                log_fragment_failure(outcome, query=label)
                continue
            ids = [str(n) for n in (outcome or []) if n]
            if len(ids) >= limit:
                truncated = True
            candidates.update(ids)

        ordered = sorted(candidates)
        if len(ordered) > limit:
            ordered = ordered[:limit]
            truncated = True
        return ordered, truncated

    async def enrich(self, niins: Sequence[str]) -> List[SearchResult]:
        """Батч-обогащение страницы: по одному запросу на таблицу, порядок niins сохраняется."""
        if not niins:
            return []

        tables = [
            t for t in ReferenceTable
            if self._enrich_optional or t not in OPTIONAL_FRAGMENT_TABLES
        ]
        calls = {t: self._store.fetch_by_niins(t, list(niins)) for t in tables}
        outcomes = await gather_lookups(calls, timeout_s=self._timeout_s)

        single: Dict[ReferenceTable, Dict[str, Row]] = {}
        names: Dict[str, List[Row]] = {}
        for table, outcome in outcomes.items():
            if failed(outcome):
                log_fragment_failure(outcome, niins=len(niins))
                continue
            rows = list(outcome or [])
            if table is ReferenceTable.NAMES:
                for row in rows:
                    names.setdefault(str(row.get("niin")), []).append(row)
            else:
                by_niin: Dict[str, Row] = {}
                for row in rows:
                    by_niin.setdefault(str(row.get("niin")), row)
                single[table] = by_niin

        def _one(table: ReferenceTable, niin: str) -> Optional[Row]:
            return single.get(table, {}).get(niin)

        return [
            merge_fragments(
                niin,
                stock=_one(ReferenceTable.STOCK, niin),
                names=names.get(niin, []),
                price=_one(ReferenceTable.PRICES, niin),
                weight=_one(ReferenceTable.WEIGHTS, niin),
                description=_one(ReferenceTable.DESCRIPTIONS, niin),
                aac=_one(ReferenceTable.AACS, niin),
                fsc_entry=_one(ReferenceTable.FSCS, niin),
            )
            for niin in niins
        ]

    async def resolve(
        self,
        query: NormalizedQuery,
        *,
        filters: Optional[SearchFilters],
        page: int,
        page_size: int,
    ) -> DiscoveryOutcome:
        limit = self.discovery_limit(page_size)

        with timed(logger, "discovery_done", kind=query.kind.value, limit=limit) as stats:
            candidates, truncated = await self.discover(query, filters, limit=limit)
            stats.update(candidates=len(candidates), truncated=truncated)

        if not candidates:
            return DiscoveryOutcome()

        pagination = build_pagination(total=len(candidates), page=page, page_size=page_size)
        page_ids = slice_page(candidates, pagination)
        if not page_ids:
            return DiscoveryOutcome(total=len(candidates), truncated=truncated)

        enriched = await self.enrich(page_ids)
        return DiscoveryOutcome(
            results=apply_post_filters(enriched, filters),
            total=len(candidates),
            truncated=truncated,
        )
