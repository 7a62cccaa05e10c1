# path: src/crud/reference_repository.py
from __future__ import annotations

from typing import (
    Any,
    Dict,
    List,
    Literal,
    Optional,
    Protocol,
    Sequence,
    Type,
)

from sqlalchemy import inspect as sa_inspect
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.core.models.base import Base
from src.nsn_search.models import (
    AacEntry,
    DescriptionEntry,
    FscEntry,
    NameEntry,
    PriceEntry,
    ReferenceTable,
    StockRecord,
    WeightEntry,
)


Row = Dict[str, Any]
NameMode = Literal["prefix", "substring"]

_MODELS: Dict[ReferenceTable, Type[Base]] = {
    ReferenceTable.STOCK: StockRecord,
    ReferenceTable.NAMES: NameEntry,
    ReferenceTable.PRICES: PriceEntry,
    ReferenceTable.WEIGHTS: WeightEntry,
    ReferenceTable.DESCRIPTIONS: DescriptionEntry,
    ReferenceTable.AACS: AacEntry,
    ReferenceTable.FSCS: FscEntry,
}


def model_for(table: ReferenceTable) -> Type[Base]:
    """ORM-модель справочной таблицы."""
    return _MODELS[ReferenceTable(table)]


class IReferenceStore(Protocol):
    """
    Интерфейс справочного хранилища (DI-контракт).

    Зачем:
    - ядро поиска не знает про SQLAlchemy;
    - в тестах подменяется in-memory реализацией;
    - каждый метод - один независимый запрос, их можно гонять конкурентно.

    Строки отдаём dict'ами: ключи = атрибуты ORM-модели (snake_case).
    """

    async def fetch_by_niin(
        self,
        table: ReferenceTable,
        niin: str,
        *,
        limit: Optional[int] = 1,
    ) -> List[Row]: ...

    async def fetch_by_niins(
        self,
        table: ReferenceTable,
        niins: Sequence[str],
    ) -> List[Row]: ...

    async def discover_niins(
        self,
        table: ReferenceTable,
        *,
        limit: int,
        prefix: Optional[str] = None,
        fsc: Optional[str] = None,
        name: Optional[str] = None,
        name_mode: NameMode = "substring",
    ) -> List[str]: ...


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class ReferenceRepository(IReferenceStore):
    """
    Репозиторий справочных таблиц (pull2, names, prices, weights, descriptions, aacs, fscs).

    Правило:
    - SQL/DB вызовы живут только здесь (src/crud/).
    - Таблицы только читаем.

    Важно:
    - Одна AsyncSession не умеет выполнять запросы параллельно,
      поэтому КАЖДЫЙ метод открывает свою сессию из session_factory.
      Фабрику (и engine за ней) создаёт и закрывает lifespan приложения.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    @staticmethod
    def _model(table: ReferenceTable) -> Type[Base]:
        return model_for(table)

    @staticmethod
    def _to_row(obj: Any) -> Row:
        """ORM-объект -> dict по column-атрибутам."""
        mapper = sa_inspect(type(obj))
        return {attr.key: getattr(obj, attr.key) for attr in mapper.column_attrs}

    @staticmethod
    def _order_columns(model: Type[Base]) -> list[Any]:
        # names: порядок строк по id (первая = основное название)
        if model is NameEntry:
            return [NameEntry.id]
        return [model.niin]

    async def fetch_by_niin(
        self,
        table: ReferenceTable,
        niin: str,
        *,
        limit: Optional[int] = 1,
    ) -> List[Row]:
        """До limit строк таблицы по niin = :niin (limit=None - все строки)."""
        model = self._model(table)
        stmt = (
            select(model)
            .where(model.niin == str(niin))
            .order_by(*self._order_columns(model))
        )
        if limit is not None:
            stmt = stmt.limit(max(1, int(limit)))
        async with self._session_factory() as session:
            res = await session.execute(stmt)
            return [self._to_row(obj) for obj in res.scalars().all()]

    async def fetch_by_niins(
        self,
        table: ReferenceTable,
        niins: Sequence[str],
    ) -> List[Row]:
        """Батч: niin IN (...) для одной страницы выдачи (без N+1)."""
        ids = sorted({str(n) for n in niins if n})
        if not ids:
            return []

        model = self._model(table)
        stmt = (
            select(model)
            .where(model.niin.in_(ids))
            .order_by(model.niin, *self._order_columns(model))
        )
        async with self._session_factory() as session:
            res = await session.execute(stmt)
            return [self._to_row(obj) for obj in res.scalars().all()]

    async def discover_niins(
        self,
        table: ReferenceTable,
        *,
        limit: int,
        prefix: Optional[str] = None,
        fsc: Optional[str] = None,
        name: Optional[str] = None,
        name_mode: NameMode = "substring",
    ) -> List[str]:
        """
        Discovery: первые limit различных niin по возрастанию.

        Условия объединяются через AND:
          - prefix -> niin LIKE 'prefix%' (индекс text_pattern_ops);
          - fsc    -> fsc = :fsc (только для таблиц с колонкой fsc);
          - name   -> item_name ILIKE 'name%' | '%name%'.

        ORDER BY niin + LIMIT: читается не больше limit строк индекса.
        """
        model = self._model(table)
        column = model.niin
        stmt = select(column).distinct()

        if prefix:
            stmt = stmt.where(column.like(f"{_escape_like(prefix)}%", escape="\\"))

        if fsc:
            fsc_col = getattr(model, "fsc", None)
            if fsc_col is None:
                return []
            stmt = stmt.where(fsc_col == fsc)

        if name:
            name_col = getattr(model, "item_name", None)
            if name_col is None:
                return []
            pattern = _escape_like(name)
            pattern = f"{pattern}%" if name_mode == "prefix" else f"%{pattern}%"
            stmt = stmt.where(name_col.ilike(pattern, escape="\\"))

        if not (prefix or fsc or name):
            return []

        stmt = stmt.order_by(column).limit(max(1, int(limit)))

        async with self._session_factory() as session:
            res = await session.execute(stmt)
            return [str(n) for n in res.scalars().all() if n]
