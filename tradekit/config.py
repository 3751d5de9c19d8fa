"""
Centralized Configuration for tradekit
Uses Pydantic Settings with .env loading.
"""

import logging
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class PlaygroundSettings(BaseSettings):
    """In-memory playground broker settings."""
    model_config = SettingsConfigDict(env_prefix="TRADEKIT_PLAYGROUND_", extra="ignore")

    initial_balance: float = Field(default=10_000.0, ge=0)
    leverage: float = Field(default=30.0, gt=0)
    commission_per_lot: float = Field(default=0.0, ge=0)
    currency_iso: str = "USD"
    currency_digits: int = 2


class LoggingSettings(BaseSettings):
    """Logging settings."""
    model_config = SettingsConfigDict(extra="ignore")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        alias="LOG_FORMAT",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize and check the level name."""
        level = str(v).upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {v}")
        return level


class TradekitSettings(BaseSettings):
    """Main tradekit settings."""
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    playground: PlaygroundSettings = Field(default_factory=PlaygroundSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


@lru_cache()
def get_settings() -> TradekitSettings:
    """Get cached settings instance."""
    return TradekitSettings()


def reload_settings() -> TradekitSettings:
    """Force reload settings (clears cache)."""
    get_settings.cache_clear()
    return get_settings()


def configure_logging(settings: Optional[LoggingSettings] = None) -> None:
    """Apply logging settings to the root logger."""
    settings = settings or get_settings().logging
    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format=settings.log_format,
        force=True,
    )
