# path: src/scripts/check_reference_db.py
"""
Проверка справочной БД: доступность таблиц и пробный поиск.

Использование:
  python -m src.scripts.check_reference_db
  python -m src.scripts.check_reference_db --query 5965-01-572-6371
"""

from __future__ import annotations

import argparse
import asyncio
from typing import Optional

from sqlalchemy import func, select

from src.app_logging import get_logger
from src.core.models import db_helper
from src.crud.reference_repository import ReferenceRepository, model_for
from src.nsn_search.models import ReferenceTable
from src.nsn_search.services.search_service import SearchService


logger = get_logger(__name__)


async def _table_has_rows(table: ReferenceTable) -> Optional[bool]:
    """
    Не COUNT(*): на 10M+ строк это секунды. Достаточно EXISTS.
    None - таблица недоступна.
    """
    model = model_for(table)
    stmt = select(func.count()).select_from(select(model.niin).limit(1).subquery())
    try:
        async with db_helper.session_factory() as session:
            res = await session.execute(stmt)
            return int(res.scalar_one()) > 0
    except Exception as e:
        logger.error("table_check_failed", extra={"table": table.value, "error": str(e)})
        return None


async def main(query: Optional[str]) -> None:
    try:
        for table in ReferenceTable:
            has_rows = await _table_has_rows(table)
            logger.info("table_checked", extra={"table": table.value, "has_rows": has_rows})

        if query:
            service = SearchService(ReferenceRepository(db_helper.session_factory))
            page = await service.resolve_search(query, page=1, page_size=5)
            logger.info(
                "probe_search",
                extra={
                    "query": query,
                    "strategy": page.strategy,
                    "total": page.total,
                    "nsns": [r.nsn for r in page.results],
                },
            )
    finally:
        await db_helper.dispose()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Check NSN reference tables")
    parser.add_argument("--query", default=None, help="пробный поисковый запрос")
    args = parser.parse_args()
    asyncio.run(main(args.query))
