# path: src/nsn_search/models/enums.py
from __future__ import annotations

from enum import Enum


class ReferenceTable(str, Enum):
    """
    Справочные таблицы, связанные по niin.

    Значение = имя таблицы в БД.
    """

    STOCK = "pull2"
    NAMES = "names"
    PRICES = "prices"
    WEIGHTS = "weights"
    DESCRIPTIONS = "descriptions"
    AACS = "aacs"
    FSCS = "fscs"


# таблицы с колонкой fsc (по ним работает поиск по классу)
FSC_TABLES: tuple[ReferenceTable, ...] = (ReferenceTable.NAMES, ReferenceTable.STOCK)

# таблицы, по которым ищем niin по префиксу
PREFIX_TABLES: tuple[ReferenceTable, ...] = (
    ReferenceTable.NAMES,
    ReferenceTable.PRICES,
    ReferenceTable.STOCK,
)
