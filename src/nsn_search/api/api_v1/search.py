# path: src/nsn_search/api/api_v1/search.py
from __future__ import annotations

from typing import Annotated, Any, Dict, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, Request, status

from src.app_logging import get_logger
from src.core.config import settings
from src.core.dependencies import (
    get_history_repository,
    get_search_service,
    require_search_access,
)
from src.core.utils import parse_bool
from src.crud.history_repository import ISearchHistoryRepository
from src.nsn_search.exceptions import CriticalStorageError
from src.nsn_search.schemas.search import SearchFilters, SearchPage
from src.nsn_search.services.history_recorder import record_search
from src.nsn_search.services.search_service import SearchService


router = APIRouter()
log = get_logger("api.search")


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


@router.get("", response_model=SearchPage, name="nsn_search")
async def search(
    request: Request,
    background_tasks: BackgroundTasks,
    subject: Annotated[Dict[str, Any], Depends(require_search_access)],
    service: Annotated[SearchService, Depends(get_search_service)],
    history_repo: Annotated[ISearchHistoryRepository, Depends(get_history_repository)],
    q: str = "",
    fsc: Optional[str] = None,
    class_ix: Annotated[Optional[str], Query(alias="classIX")] = None,
    min_price: Annotated[Optional[str], Query(alias="minPrice")] = None,
    max_price: Annotated[Optional[str], Query(alias="maxPrice")] = None,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[
        int,
        Query(ge=1, le=settings.search.max_page_size),
    ] = settings.search.default_page_size,
) -> SearchPage:
    """
    Поиск по NSN/NIIN, коду FSC или названию.

    Важно:
    - авторизация и подписка проверены в require_search_access;
    - q любой длины: нормализатор сводит мусор к пустой выдаче, не к 422;
    - minPrice/maxPrice не валидируем здесь: нечисловой фильтр = "ничего не подходит";
    - classIX: true/false (1/0, yes/no, on/off), пусто = без фильтра, прочее -> 422;
    - историю пишем фоном ПОСЛЕ ответа, её ошибки ответ не ломают.
    """
    class_ix_value = _blank_to_none(class_ix)
    class_ix_flag = parse_bool(class_ix_value)
    if class_ix_value is not None and class_ix_flag is None:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="classIX must be true or false",
        )

    filters = SearchFilters(
        fsc=_blank_to_none(fsc),
        class_ix=class_ix_flag,
        min_price=_blank_to_none(min_price),
        max_price=_blank_to_none(max_price),
    )

    try:
        result = await service.resolve_search(q, filters, page=page, page_size=limit)
    except CriticalStorageError as e:
        log.error("search_storage_unavailable", extra={"table": e.table, "error": str(e.cause)})
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Reference data is temporarily unavailable",
        ) from e

    session_factory = getattr(request.app.state, "session_factory", None)
    if q.strip() and session_factory is not None:
        background_tasks.add_task(
            record_search,
            session_factory,
            history_repo,
            user_id=str(subject.get("sub")),
            query=q,
        )

    return result
