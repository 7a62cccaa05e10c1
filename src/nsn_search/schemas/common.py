# path: src/nsn_search/schemas/common.py
from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelSchema(BaseModel):
    """
    Базовая схема ответов API (pydantic v2).

    Наружу поля уходят в camelCase (контракт фронтенда),
    внутри работаем со snake_case (populate_by_name).
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )
