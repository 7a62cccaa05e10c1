# path: src/core/models/base.py
from __future__ import annotations

from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase

from src.core.config import settings


class Base(DeclarativeBase):
    """
    Общий Base для всех моделей.

    __tablename__ задаётся в каждой модели явно: справочные таблицы
    уже существуют (pull2, names, prices, ...) и их имена менять нельзя.
    """
    __abstract__ = True

    metadata = MetaData(naming_convention=settings.db.naming_convention)
