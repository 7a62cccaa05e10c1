# src/core/config.py
from pydantic import BaseModel
from pydantic import PostgresDsn
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Literal


class RunConfig(BaseModel):
    host: str = "0.0.0.0"
    port: int = 8015


class ApiV1Prefix(BaseModel):
    prefix: str = "/v1"
    search: str = "/search"
    nsn: str = "/nsn"
    history: str = "/history"


class ApiPrefix(BaseModel):
    prefix: str = "/api"
    v1: ApiV1Prefix = ApiV1Prefix()


class DatabaseConfig(BaseModel):
    url: PostgresDsn
    echo: bool = False
    echo_pool: bool = False
    pool_size: int = 50
    max_overflow: int = 10

    naming_convention: dict[str, str] = {
        "ix": "ix_%(column_0_label)s",
        "uq": "uq_%(table_name)s_%(column_0_N_name)s",
        "ck": "ck_%(table_name)s_%(constraint_name)s",
        "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
        "pk": "pk_%(table_name)s",
    }


class AuthConfig(BaseModel):
    secret_key: str = "CHANGE_ME"                # общий секрет JWT (тот же, что у сервиса логина)
    algorithm: str = "HS256"
    access_token_minutes: int = 60
    # токены выдаёт внешний сервис логина; URL только для OpenAPI (Authorize)
    token_url: str = "http://localhost:3000/api/auth/token"
    # claim subscription_status в токене; поиск только для этих статусов
    allowed_subscription_statuses: tuple[str, ...] = ("active", "trialing")


class SearchConfig(BaseModel):
    min_query_length: int = 3
    default_page_size: int = 50
    max_page_size: int = 200

    # discovery: limit = min(page_size * multiple, max_rows) на КАЖДУЮ таблицу.
    # Компромисс полнота/латентность на таблицах в десятки миллионов строк.
    discovery_page_multiple: int = 20
    discovery_max_rows: int = 5000

    # таймаут одного запроса к таблице (сек)
    lookup_timeout_s: float = 5.0

    # текстовые запросы по названиям: off | prefix | substring
    free_text_mode: Literal["off", "prefix", "substring"] = "substring"

    # False -> страница partial-поиска не тянет weights/descriptions (режим под нагрузкой)
    enrich_optional_fragments: bool = True

    history_limit: int = 20


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=(".env.example", ".env"),
        case_sensitive=False,
        env_nested_delimiter="__",
        env_prefix="APP_CONFIG__",
    )
    run: RunConfig = RunConfig()
    api: ApiPrefix = ApiPrefix()
    db: DatabaseConfig

    auth: AuthConfig = AuthConfig()
    search: SearchConfig = SearchConfig()

settings = Settings()
