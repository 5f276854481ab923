# explore/core/config.py
from __future__ import annotations

from functools import lru_cache

from pydantic import Field, PositiveInt
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    api_url: str = Field(
        default="http://localhost:14318", description="Tracing backend endpoint"
    )
    request_timeout: float = Field(
        default=5.0, description="Timeout in seconds for explorer queries"
    )

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # =============================================================================
    # Span attribute keys
    # =============================================================================

    span_system_key: str = Field(
        default="span.system",
        description="Composite type/subsystem attribute, e.g. 'db:postgresql'",
    )
    span_time_key: str = Field(
        default="span.time", description="Span timestamp attribute"
    )
    span_count_per_min_key: str = Field(
        default="span.count_per_min",
        description="Span rate attribute used as the default sort column",
    )

    # Any of these characters ends the type token of a system value
    system_separators: str = ":."

    # =============================================================================
    # Explorer defaults
    # =============================================================================

    per_page: PositiveInt = Field(default=10, description="Default page size")
    order_desc: bool = Field(
        default=True, description="Sort the default column in descending order"
    )

    # Dialect used to pretty-print failed queries
    sql_dialect: str = "clickhouse"


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
