from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConverterSettings(BaseSettings):
    """Runtime options, read from ``TARIFF_CSV_*`` environment variables."""

    model_config = SettingsConfigDict(env_prefix="TARIFF_CSV_", extra="ignore")

    strict_mode: bool = Field(
        default=False,
        description="Fail the whole conversion on any error-severity finding.",
    )
    max_content_bytes: int = Field(
        default=5 * 1024 * 1024,
        gt=0,
        description="Largest request body accepted by the HTTP API.",
    )
    log_level: str = Field(default="INFO")


@lru_cache
def get_settings() -> ConverterSettings:
    return ConverterSettings()
