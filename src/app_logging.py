"""
# path: src/app_logging.py

Единый JSON-логгер для сервиса поиска NSN.

ВАЖНО:
- Файл НЕ называется logging.py, чтобы не перекрыть стандартный модуль `logging`
  (uvicorn и alembic импортируют его на старте).
- LoggerAdapter прокидывает user extra в JSON: time, level, logger, func, message (+ extra).
- timed() - замер длительности блока (поиск, discovery, enrichment) в поле duration_ms.
"""

from __future__ import annotations

import json
import logging
import os
import sys
import time
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, Optional


class JsonFormatter(logging.Formatter):
    """LogRecord -> одна JSON-строка."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "time": datetime.now(timezone.utc).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "func": record.funcName,
            "message": record.getMessage(),
        }

        extra: Optional[Dict[str, Any]] = getattr(record, "extra", None)
        if isinstance(extra, dict) and extra:
            payload.update(extra)

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        # default=str: Decimal/datetime из extra не должны ронять логирование
        return json.dumps(payload, ensure_ascii=False, default=str)


class JsonLoggerAdapter(logging.LoggerAdapter):
    """Кладёт user extra в record.extra (а не в атрибуты record)."""

    def process(self, msg: str, kwargs: Dict[str, Any]):
        user_extra = kwargs.pop("extra", None)
        kwargs["extra"] = {"extra": user_extra} if user_extra else {}
        return msg, kwargs


def get_logger(name: str) -> JsonLoggerAdapter:
    """Создаёт/возвращает JSON-логгер (stdout, idempotent)."""
    logger = logging.getLogger(name)
    logger.propagate = False

    if logger.handlers:
        return JsonLoggerAdapter(logger, {})

    level_str = os.getenv("LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_str, logging.INFO)
    logger.setLevel(level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(JsonFormatter())

    logger.addHandler(handler)
    return JsonLoggerAdapter(logger, {})


@contextmanager
def timed(
    logger: logging.LoggerAdapter,
    event: str,
    **fields: Any,
) -> Iterator[Dict[str, Any]]:
    """
    Логирует event с duration_ms по выходу из блока.

    Блок может дописать поля в отдаваемый dict (например, число найденных niin).
    """
    extra: Dict[str, Any] = dict(fields)
    started = time.perf_counter()
    try:
        yield extra
    finally:
        extra["duration_ms"] = round((time.perf_counter() - started) * 1000, 2)
        logger.info(event, extra=extra)
