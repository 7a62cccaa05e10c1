# src/nsn_search/api/api_v1/__init__.py
from __future__ import annotations

from fastapi import APIRouter

from src.core.config import settings
from .history import router as history_router
from .nsn import router as nsn_router
from .search import router as search_router

router = APIRouter()
router.include_router(search_router, prefix=settings.api.v1.search, tags=["nsn-search"])
router.include_router(nsn_router, prefix=settings.api.v1.nsn, tags=["nsn-search"])
router.include_router(history_router, prefix=settings.api.v1.history, tags=["history"])
