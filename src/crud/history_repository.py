# path: src/crud/history_repository.py
from __future__ import annotations

from typing import List, Protocol

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.nsn_search.models import SearchHistory


class ISearchHistoryRepository(Protocol):
    async def add(self, session: AsyncSession, *, user_id: str, query: str) -> SearchHistory: ...

    async def list_recent(
        self,
        session: AsyncSession,
        *,
        user_id: str,
        limit: int = 20,
    ) -> List[SearchHistory]: ...


class SearchHistoryRepository(ISearchHistoryRepository):
    """
    Репозиторий search_history.

    Правило:
    - SQL/DB вызовы живут только здесь (src/crud/);
    - commit делает вызывающий (фоновая задача или роутер).
    """

    async def add(self, session: AsyncSession, *, user_id: str, query: str) -> SearchHistory:
        entry = SearchHistory(user_id=str(user_id), query=query.strip())
        session.add(entry)
        await session.flush()
        return entry

    async def list_recent(
        self,
        session: AsyncSession,
        *,
        user_id: str,
        limit: int = 20,
    ) -> List[SearchHistory]:
        """Последние запросы пользователя, новые сверху."""
        stmt = (
            select(SearchHistory)
            .where(SearchHistory.user_id == str(user_id))
            .order_by(SearchHistory.created_at.desc(), SearchHistory.id.desc())
            .limit(int(limit))
        )
        res = await session.execute(stmt)
        return list(res.scalars().all())
