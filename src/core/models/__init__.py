# src/core/models/__init__.py

__all__ = (
    "db_helper",
    "Base",
)

from .db_helper import db_helper
from .base import Base

# Модели справочника (src.nsn_search.models) сюда НЕ импортируем:
# они сами импортируют Base, получится цикл. Alembic подтягивает их в env.py.
