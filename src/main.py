# /src/main.py
from __future__ import annotations

from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.responses import ORJSONResponse

from src.app_logging import get_logger
from src.core.api import router as api_router
from src.core.config import settings
from src.core.models import db_helper
from src.crud.reference_repository import ReferenceRepository
from src.nsn_search.services.search_service import SearchService


logger = get_logger("app")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # startup: справочное хранилище создаём один раз и кладём в app.state
    store = ReferenceRepository(db_helper.session_factory)
    app.state.session_factory = db_helper.session_factory
    app.state.search_service = SearchService(store, settings.search)
    logger.info("app_started", extra={"free_text_mode": settings.search.free_text_mode})
    yield
    # shutdown
    await db_helper.dispose()
    logger.info("app_stopped")


def create_app() -> FastAPI:
    app = FastAPI(
        title="NSN search",
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
    )
    app.include_router(api_router)
    return app


# Экспортируемый объект приложения
main_app = create_app()


if __name__ == "__main__":
    # Запуск: uvicorn src.main:main_app --reload
    uvicorn.run(
        "src.main:main_app",
        host=settings.run.host,
        port=settings.run.port,
        reload=True,
    )
