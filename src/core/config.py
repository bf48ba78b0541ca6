from enum import StrEnum
from logging import config as logging_config

from pydantic_settings import BaseSettings, SettingsConfigDict

from core.logger import LOGGING

# Применяем настройки логирования.
logging_config.dictConfig(LOGGING)


class Environment(StrEnum):
    DEVELOPMENT = 'development'
    STAGING = 'staging'
    PRODUCTION = 'production'
    TEST = 'test'


class Settings(BaseSettings):
    """Настройки проекта."""
    # Общие настройки проекта.
    host: str = '0.0.0.0'
    app_port: int = 8000
    project_name: str = 'movies'
    app_version: str = 'v1.0.0'
    environment: Environment = Environment.DEVELOPMENT
    debug: bool = False
    # Имена служебных заголовков.
    request_id_header_name: str = 'X-Request-ID'
    response_time_header_name: str = 'X-Response-Time'
    # Источники, которым разрешены кросс-доменные запросы.
    cors_origins: list[str] = ['*']
    # Настройки Elasticsearch.
    elastic_host: str = '127.0.0.1'
    elastic_port: int = 9200
    elastic_schema: str = 'http://'
    # Настройки Redis.
    redis_host: str | None = '127.0.0.1'
    redis_port: int = 6379
    redis_db: int = 0
    redis_username: str | None = None
    redis_password: str | None = None
    # Время кеширования ответов. 1 час по умолчанию.
    cache_ttl: int = 3600
    # Максимальное число записей во внутреннем кеше процесса.
    max_item_in_cache: int = 1000
    # Ограничение частоты запросов: окно в секундах и лимит запросов.
    default_rate_limit_ttl: int = 60
    default_rate_limit_limit: int = 250
    write_rate_limit_ttl: int = 30
    write_rate_limit_limit: int = 20
    # Время на корректное завершение работы, в секундах.
    shutdown_timeout: int = 10

    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore',
    )

    @property
    def elastic_url(self) -> str:
        return f'{self.elastic_schema}{self.elastic_host}:{self.elastic_port}'


settings = Settings()
