# path: src/nsn_search/exceptions.py
from __future__ import annotations

from typing import Optional


class SearchError(Exception):
    """Базовая ошибка ядра поиска."""


class StorageLookupError(SearchError):
    """
    Сбой одного запроса к справочной таблице (ошибка БД или таймаут).

    Для необязательных фрагментов перехватывается и логируется:
    фрагмент считается отсутствующим.
    """

    def __init__(self, table: str, cause: Optional[BaseException] = None) -> None:
        self.table = table
        self.cause = cause
        reason = "timeout" if isinstance(cause, TimeoutError) else repr(cause)
        super().__init__(f"lookup on {table} failed: {reason}")


class CriticalStorageError(SearchError):
    """
    Без этого запроса ответ построить нельзя:
    - основной lookup pull2 в exact-пути;
    - все discovery-запросы в partial-пути.

    HTTP-слой отдаёт 503.
    """

    def __init__(self, table: str, cause: Optional[BaseException] = None) -> None:
        self.table = table
        self.cause = cause
        super().__init__(f"storage unavailable for {table}")
