# path: src/core/dependencies.py
from __future__ import annotations

from functools import lru_cache
from typing import Any, Dict

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError

from src.app_logging import get_logger
from src.core.config import settings
from src.core.security import decode_token, has_search_access
from src.crud.history_repository import ISearchHistoryRepository, SearchHistoryRepository
from src.nsn_search.services.search_service import SearchService


oauth2_scheme = OAuth2PasswordBearer(tokenUrl=settings.auth.token_url)
log = get_logger("deps")


def get_current_subject(token: str = Depends(oauth2_scheme)) -> Dict[str, Any]:
    try:
        payload = decode_token(token)
        return payload
    except JWTError as e:
        log.info("jwt_error", extra={"error": str(e)})
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        ) from e


def require_search_access(
    payload: Dict[str, Any] = Depends(get_current_subject),
) -> Dict[str, Any]:
    """401 - нет/битый токен, 403 - нет активной подписки."""
    if not has_search_access(payload):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Active subscription required",
        )
    return payload


def get_search_service(request: Request) -> SearchService:
    """
    SearchService создаётся в lifespan (src/main.py) и живёт в app.state.

    Тесты подменяют его через app.dependency_overrides.
    """
    service = getattr(request.app.state, "search_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Search service is not initialized",
        )
    return service


@lru_cache(maxsize=1)
def _history_repo_singleton() -> SearchHistoryRepository:
    return SearchHistoryRepository()


def get_history_repository() -> ISearchHistoryRepository:
    return _history_repo_singleton()
