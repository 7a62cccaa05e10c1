# path: src/nsn_search/services/lookups.py
"""
Конкурентный запуск независимых запросов к справочным таблицам.

Каждый запрос:
- ограничен таймаутом (asyncio.wait_for);
- при ошибке/таймауте превращается в StorageLookupError (а не роняет весь gather).

Что делать с ошибкой (считать фрагмент отсутствующим или падать):
решает вызывающий resolver.
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Dict, Hashable, Mapping, TypeVar

from src.app_logging import get_logger
from src.nsn_search.exceptions import StorageLookupError


logger = get_logger(__name__)

K = TypeVar("K", bound=Hashable)


def _label(key: Any) -> str:
    return str(getattr(key, "value", key))


async def run_lookup(key: Any, awaitable: Awaitable[Any], *, timeout_s: float) -> Any:
    """Один запрос с таймаутом; любая ошибка -> StorageLookupError."""
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout_s)
    except asyncio.CancelledError:
        raise
    except Exception as e:
        raise StorageLookupError(_label(key), e) from e


async def gather_lookups(
    calls: Mapping[K, Awaitable[Any]],
    *,
    timeout_s: float,
) -> Dict[K, Any]:
    """
    Запускает все calls одновременно и ждёт их вместе.

    Возвращает {key: результат | StorageLookupError}.
    """
    if not calls:
        return {}

    keys = list(calls.keys())
    outcomes = await asyncio.gather(
        *(run_lookup(k, calls[k], timeout_s=timeout_s) for k in keys),
        return_exceptions=True,
    )

    out: Dict[K, Any] = {}
    for key, outcome in zip(keys, outcomes):
        if isinstance(outcome, BaseException) and not isinstance(outcome, StorageLookupError):
            # CancelledError и прочее не-Exception - не наша зона
            raise outcome
        out[key] = outcome
    return out


def failed(outcome: Any) -> bool:
    return isinstance(outcome, StorageLookupError)


def log_fragment_failure(outcome: StorageLookupError, **fields: Any) -> None:
    """Необязательный фрагмент не пришёл: пишем warning, в ответ не пробрасываем."""
    logger.warning(
        "fragment_lookup_failed",
        extra={"table": outcome.table, "error": str(outcome), **fields},
    )
