# path: src/nsn_search/services/search_service.py
"""
Сервис поиска NSN: единый pipeline вместо нескольких вариантов поиска.

raw query + filters
  -> normalize_query
  -> select_strategy
  -> ExactMatchResolver | PartialDiscoveryResolver
  -> merge_fragments (внутри resolver'ов)
  -> пост-фильтры + пагинация
  -> SearchPage

DI-правило:
- Сервис НЕ создаёт engine/сессии и НЕ пишет SQL.
- Справочное хранилище (IReferenceStore) приходит снаружи - из lifespan приложения
  или из тестов.
- История поиска сюда не относится: её пишет HTTP-слой после ответа.
"""

from __future__ import annotations

from typing import Optional

from src.app_logging import get_logger, timed
from src.core.config import SearchConfig, settings
from src.core.utils import build_pagination
from src.crud.reference_repository import IReferenceStore
from src.nsn_search.schemas.search import SearchFilters, SearchPage, SearchResult
from src.nsn_search.services.discovery_resolver import PartialDiscoveryResolver
from src.nsn_search.services.exact_resolver import ExactMatchResolver
from src.nsn_search.services.normalizer import normalize_query
from src.nsn_search.services.strategy import LookupStrategy, select_strategy


logger = get_logger(__name__)


class SearchService:
    """
    Ядро поиска.

    Важно:
    - Между запросами состояния нет: один экземпляр безопасно делить.
    - Вызывается только для уже авторизованных запросов (проверка - в HTTP-слое).
    """

    def __init__(self, store: IReferenceStore, config: Optional[SearchConfig] = None) -> None:
        self._config: SearchConfig = config or settings.search
        self.exact = ExactMatchResolver(
            store,
            timeout_s=self._config.lookup_timeout_s,
        )
        self.discovery = PartialDiscoveryResolver(
            store,
            timeout_s=self._config.lookup_timeout_s,
            discovery_page_multiple=self._config.discovery_page_multiple,
            discovery_max_rows=self._config.discovery_max_rows,
            free_text_mode=self._config.free_text_mode,
            enrich_optional_fragments=self._config.enrich_optional_fragments,
        )

    @property
    def config(self) -> SearchConfig:
        return self._config

    def _page_size(self, page_size: Optional[int]) -> int:
        size = self._config.default_page_size if page_size is None else int(page_size)
        return max(1, min(size, self._config.max_page_size))

    async def resolve_search(
        self,
        query: Optional[str],
        filters: Optional[SearchFilters] = None,
        page: int = 1,
        page_size: Optional[int] = None,
    ) -> SearchPage:
        """
        Главная операция: запрос -> страница результатов.

        total:
        - exact-путь: 0/1 после фильтров (total_basis="filtered");
        - partial-путь: различные niin ДО пост-фильтров (total_basis="candidates"),
          страница может быть короче page_size.
        """
        page = max(1, int(page or 1))
        size = self._page_size(page_size)
        normalized = normalize_query(query, min_length=self._config.min_query_length)

        if not normalized.is_valid:
            # короткий/пустой запрос: в БД не ходим
            return SearchPage(results=[], total=0, page=page, page_size=size, total_pages=0)

        strategy = select_strategy(normalized)

        with timed(
            logger,
            "search_resolved",
            strategy=strategy.value,
            kind=normalized.kind.value,
            page=page,
            page_size=size,
        ) as stats:
            if strategy is LookupStrategy.EXACT_MATCH:
                results, total = await self.exact.resolve(
                    normalized.niin_candidate or "",
                    fsc_candidate=normalized.fsc_candidate,
                    filters=filters,
                )
                # одна запись живёт на странице 1
                if page > 1:
                    results = []
                truncated = False
                total_basis = "filtered"
            else:
                outcome = await self.discovery.resolve(
                    normalized,
                    filters=filters,
                    page=page,
                    page_size=size,
                )
                results, total, truncated = outcome.results, outcome.total, outcome.truncated
                total_basis = "candidates"

            stats.update(total=total, returned=len(results), truncated=truncated)

        pagination = build_pagination(total=total, page=page, page_size=size)
        return SearchPage(
            results=results,
            total=total,
            page=page,
            page_size=size,
            total_pages=pagination.pages,
            total_basis=total_basis,
            strategy=strategy.value,
            truncated=truncated,
        )

    async def get_detail(self, niin: str, fsc_candidate: Optional[str] = None) -> Optional[SearchResult]:
        """Карточка NSN (все фрагменты). None - ничего не найдено."""
        return await self.exact.fetch_detail(niin, fsc_candidate)
