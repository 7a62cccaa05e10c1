# path: src/nsn_search/api/api_v1/history.py
from __future__ import annotations

from typing import Annotated, Any, Dict, List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config import settings
from src.core.dependencies import get_current_subject, get_history_repository
from src.core.models.db_helper import db_helper
from src.crud.history_repository import ISearchHistoryRepository
from src.nsn_search.schemas.search import HistoryIn, HistoryOut


router = APIRouter()


@router.get("", response_model=List[HistoryOut], name="history_list")
async def list_history(
    subject: Annotated[Dict[str, Any], Depends(get_current_subject)],
    session: Annotated[AsyncSession, Depends(db_helper.session_getter)],
    history_repo: Annotated[ISearchHistoryRepository, Depends(get_history_repository)],
):
    """Последние запросы пользователя (подписка не нужна - только логин)."""
    rows = await history_repo.list_recent(
        session,
        user_id=str(subject.get("sub")),
        limit=settings.search.history_limit,
    )
    return [HistoryOut.model_validate(r) for r in rows]


@router.post("", name="history_add")
async def add_history(
    payload: HistoryIn,
    subject: Annotated[Dict[str, Any], Depends(get_current_subject)],
    session: Annotated[AsyncSession, Depends(db_helper.session_getter)],
    history_repo: Annotated[ISearchHistoryRepository, Depends(get_history_repository)],
) -> Dict[str, bool]:
    await history_repo.add(session, user_id=str(subject.get("sub")), query=payload.query)
    await session.commit()
    return {"success": True}
