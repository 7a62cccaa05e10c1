# path: src/nsn_search/models/history.py
from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, Index, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from src.core.models.base import Base


class SearchHistory(Base):
    """
    Таблица search_history - запросы пользователя.

    Важно:
    - пишет только HTTP-слой (фоном, после ответа), ядро поиска сюда не ходит;
    - user_id - subject из JWT (пользователи живут в другом сервисе, FK нет).
    """

    __tablename__ = "search_history"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(Text, nullable=False)
    query: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    __table_args__ = (
        Index("ix_search_history_user_created_at", "user_id", "created_at"),
    )
