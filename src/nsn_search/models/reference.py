# path: src/nsn_search/models/reference.py
from __future__ import annotations

from typing import Optional

from sqlalchemy import BigInteger, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from src.core.models.base import Base


class StockRecord(Base):
    """
    Таблица pull2 - каноническая запись по NIIN (одна строка на niin).

    Важно:
    - Таблица загружается пакетно снаружи, сервис только читает.
    - Имена колонок в БД исторические (camelCase), атрибуты - snake_case.
    """

    __tablename__ = "pull2"

    niin: Mapped[str] = mapped_column(String(9), primary_key=True)
    fsc: Mapped[Optional[str]] = mapped_column(String(4), nullable=True, index=True)
    item_name: Mapped[Optional[str]] = mapped_column("itemName", Text, nullable=True)
    common_name: Mapped[Optional[str]] = mapped_column("commonName", Text, nullable=True)
    characteristics: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    publication_date: Mapped[Optional[str]] = mapped_column("publicationDate", Text, nullable=True)

    __table_args__ = (
        Index("ix_pull2_niin_pattern", "niin", postgresql_ops={"niin": "text_pattern_ops"}),
    )


class NameEntry(Base):
    """
    Таблица names - альтернативные названия (0..N строк на niin).

    Порядок строк по id = порядок alternateNames в выдаче.
    """

    __tablename__ = "names"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    niin: Mapped[str] = mapped_column(String(9), nullable=False, index=True)
    item_name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    fsc: Mapped[Optional[str]] = mapped_column(String(4), nullable=True, index=True)
    common_name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    characteristics: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index("ix_names_niin_pattern", "niin", postgresql_ops={"niin": "text_pattern_ops"}),
    )


class PriceEntry(Base):
    """Таблица prices: unitPrice хранится строкой (decimal), ui - единица выдачи."""

    __tablename__ = "prices"

    niin: Mapped[str] = mapped_column(String(9), primary_key=True)
    unit_price: Mapped[Optional[str]] = mapped_column("unitPrice", Text, nullable=True)
    unit_of_issue: Mapped[Optional[str]] = mapped_column("ui", String(8), nullable=True)

    __table_args__ = (
        Index("ix_prices_niin_pattern", "niin", postgresql_ops={"niin": "text_pattern_ops"}),
    )


class WeightEntry(Base):
    __tablename__ = "weights"

    niin: Mapped[str] = mapped_column(String(9), primary_key=True)
    dss_weight: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    dss_cube: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    publication_date: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class DescriptionEntry(Base):
    __tablename__ = "descriptions"

    niin: Mapped[str] = mapped_column(String(9), primary_key=True)
    requirements_statement: Mapped[Optional[str]] = mapped_column("requirementsStatement", Text, nullable=True)
    clear_text_reply: Mapped[Optional[str]] = mapped_column("clearTextReply", Text, nullable=True)


class AacEntry(Base):
    """Таблица aacs: однобуквенный Acquisition Advice Code. D/V/Z -> Class IX."""

    __tablename__ = "aacs"

    niin: Mapped[str] = mapped_column(String(9), primary_key=True)
    aac: Mapped[Optional[str]] = mapped_column(String(1), nullable=True)


class FscEntry(Base):
    """Таблица fscs: запасной источник FSC, если в pull2/names его нет."""

    __tablename__ = "fscs"

    niin: Mapped[str] = mapped_column(String(9), primary_key=True)
    fsc: Mapped[Optional[str]] = mapped_column(String(4), nullable=True)
