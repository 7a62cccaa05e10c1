# path: src/nsn_search/api/api_v1/nsn.py
from __future__ import annotations

from typing import Annotated, Any, Dict

from fastapi import APIRouter, Depends, HTTPException, status

from src.app_logging import get_logger
from src.core.dependencies import get_search_service, require_search_access
from src.nsn_search.exceptions import CriticalStorageError
from src.nsn_search.schemas.search import SearchResult
from src.nsn_search.services.normalizer import normalize_identifier
from src.nsn_search.services.search_service import SearchService


router = APIRouter()
log = get_logger("api.nsn")


@router.get("/{niin}", response_model=SearchResult, name="nsn_detail")
async def nsn_detail(
    niin: str,
    _subject: Annotated[Dict[str, Any], Depends(require_search_access)],
    service: Annotated[SearchService, Depends(get_search_service)],
) -> SearchResult:
    """
    Карточка NSN: все фрагменты по одному niin.

    Принимает NIIN (9 цифр) или полный NSN (13, дефисы допустимы).
    """
    parsed = normalize_identifier(niin)
    if parsed is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="NIIN must be 9 digits or a 13-digit NSN",
        )

    clean_niin, fsc_candidate = parsed
    try:
        record = await service.get_detail(clean_niin, fsc_candidate)
    except CriticalStorageError as e:
        log.error("nsn_storage_unavailable", extra={"niin": clean_niin, "error": str(e.cause)})
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Reference data is temporarily unavailable",
        ) from e

    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="NSN not found")
    return record
