# path: src/nsn_search/services/exact_resolver.py
"""
Точный поиск по известному NIIN.

Все таблицы запрашиваются одновременно (не цепочкой), по одной строке
(names - все строки, в порядке id). Затем merge_fragments.

Ошибки:
- pull2 - основной запрос: ошибка/таймаут -> CriticalStorageError;
- остальные - фрагмент считается отсутствующим (warning в лог).
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from src.app_logging import get_logger
from src.crud.reference_repository import IReferenceStore, Row
from src.nsn_search.exceptions import CriticalStorageError
from src.nsn_search.models import ReferenceTable
from src.nsn_search.schemas.search import SearchFilters, SearchResult
from src.nsn_search.services.filters import passes_filters
from src.nsn_search.services.lookups import failed, gather_lookups, log_fragment_failure
from src.nsn_search.services.merger import merge_fragments


logger = get_logger(__name__)

PRIMARY_TABLE = ReferenceTable.STOCK


def _first_row(rows: Any) -> Optional[Row]:
    if isinstance(rows, list) and rows:
        return rows[0]
    return None


class ExactMatchResolver:
    """
    Важно:
    - store приходит снаружи (DI), resolver не создаёт соединений сам;
    - состояние между запросами не хранится.
    """

    def __init__(
        self,
        store: IReferenceStore,
        *,
        timeout_s: float,
    ) -> None:
        self._store = store
        self._timeout_s = float(timeout_s)

    async def fetch_detail(
        self,
        niin: str,
        fsc_candidate: Optional[str] = None,
    ) -> Optional[SearchResult]:
        """Полная запись по niin или None, если ни в одной таблице строки нет."""
        calls = {
            table: self._store.fetch_by_niin(
                table,
                niin,
                limit=None if table is ReferenceTable.NAMES else 1,
            )
            for table in ReferenceTable
        }
        outcomes = await gather_lookups(calls, timeout_s=self._timeout_s)

        primary = outcomes[PRIMARY_TABLE]
        if failed(primary):
            logger.error(
                "exact_primary_lookup_failed",
                extra={"niin": niin, "table": PRIMARY_TABLE.value, "error": str(primary)},
            )
            raise CriticalStorageError(PRIMARY_TABLE.value, primary)

        fragments: Dict[ReferenceTable, List[Row]] = {}
        for table, outcome in outcomes.items():
            if failed(outcome):
                log_fragment_failure(outcome, niin=niin)
                fragments[table] = []
            else:
                fragments[table] = list(outcome or [])

        if not any(fragments.values()):
            logger.info("exact_not_found", extra={"niin": niin})
            return None

        return merge_fragments(
            niin,
            stock=_first_row(fragments[ReferenceTable.STOCK]),
            names=fragments[ReferenceTable.NAMES],
            price=_first_row(fragments[ReferenceTable.PRICES]),
            weight=_first_row(fragments[ReferenceTable.WEIGHTS]),
            description=_first_row(fragments[ReferenceTable.DESCRIPTIONS]),
            aac=_first_row(fragments[ReferenceTable.AACS]),
            fsc_entry=_first_row(fragments[ReferenceTable.FSCS]),
            fsc_candidate=fsc_candidate,
        )

    async def resolve(
        self,
        niin: str,
        *,
        fsc_candidate: Optional[str] = None,
        filters: Optional[SearchFilters] = None,
    ) -> Tuple[List[SearchResult], int]:
        """
        (results, total): 0 или 1 запись.

        Фильтры - предикат на одну запись: не прошла -> пустой набор, total = 0.
        """
        record = await self.fetch_detail(niin, fsc_candidate)
        if record is None:
            return [], 0
        if not passes_filters(record, filters):
            return [], 0
        return [record], 1
