# path: src/nsn_search/services/history_recorder.py
"""
Запись истории поиска - fire-and-forget после ответа.

Важно:
- Вызывается HTTP-слоем через BackgroundTasks, ядро поиска о ней не знает.
- Ошибка записи не должна влиять на ответ: логируем и выходим.
- Сессия своя (сессия запроса к этому моменту уже закрыта).
"""

from __future__ import annotations

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.app_logging import get_logger
from src.crud.history_repository import ISearchHistoryRepository


logger = get_logger(__name__)

MAX_QUERY_LENGTH = 200


async def record_search(
    session_factory: async_sessionmaker[AsyncSession],
    repo: ISearchHistoryRepository,
    *,
    user_id: str,
    query: str,
) -> bool:
    """True - запись сохранена, False - пропущена или упала (см. лог)."""
    text = (query or "").strip()[:MAX_QUERY_LENGTH]
    if not text or not user_id:
        return False

    try:
        async with session_factory() as session:
            await repo.add(session, user_id=str(user_id), query=text)
            await session.commit()
    except (SQLAlchemyError, OSError) as e:
        logger.warning(
            "history_write_failed",
            extra={"user_id": str(user_id), "error": str(e)},
        )
        return False

    return True
