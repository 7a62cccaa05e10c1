# /src/core/api/api_v1/__init__.py
from fastapi import APIRouter

from src.core.config import settings
from src.nsn_search.api.api_v1 import router as nsn_search_router


router = APIRouter(prefix=settings.api.v1.prefix)

# /api/<v1>/search, /api/<v1>/nsn/{niin}, /api/<v1>/history
router.include_router(nsn_search_router, prefix="")
