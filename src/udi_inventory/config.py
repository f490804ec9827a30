"""Configuration management for UDI Inventory."""

from __future__ import annotations

import logging
from functools import lru_cache

import structlog
from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from udi_inventory.core.expiration import ExpirationThresholds

logger = structlog.get_logger()


class DatabaseSettings(BaseSettings):
    """Postgres record store configuration."""

    model_config = SettingsConfigDict(
        env_prefix="DATABASE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    host: str = ""
    port: int = 5432
    database: str = "postgres"
    user: str = "postgres"
    password: str = ""
    sslmode: str = "prefer"

    @property
    def is_configured(self) -> bool:
        """Check if a database host is configured."""
        return bool(self.host)

    @property
    def conninfo(self) -> str:
        """Get psycopg connection string."""
        parts = [
            f"host={self.host}",
            f"port={self.port}",
            f"dbname={self.database}",
            f"user={self.user}",
            f"sslmode={self.sslmode}",
        ]
        if self.password:
            parts.append(f"password={self.password}")
        return " ".join(parts)


class InventorySettings(BaseSettings):
    """Inventory business logic settings."""

    model_config = SettingsConfigDict(
        env_prefix="INVENTORY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Keep records in memory only, never touch the database
    offline_mode: bool = False
    recent_items_limit: int = 5
    default_quantity: int = 1


class ExpirationSettings(BaseSettings):
    """Expiration tier thresholds, in days."""

    model_config = SettingsConfigDict(
        env_prefix="EXPIRATION_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    critical_days: int = 7
    warning_days: int = 30
    soon_warning_days: int = 30

    @model_validator(mode="after")
    def _check_order(self) -> "ExpirationSettings":
        if not 0 <= self.critical_days < self.warning_days:
            raise ValueError("critical_days must be >= 0 and below warning_days")
        return self

    @property
    def thresholds(self) -> ExpirationThresholds:
        """Get classifier thresholds."""
        return ExpirationThresholds(
            critical_days=self.critical_days,
            warning_days=self.warning_days,
        )


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = "INFO"

    @property
    def database(self) -> DatabaseSettings:
        """Get database settings."""
        return DatabaseSettings()

    @property
    def inventory(self) -> InventorySettings:
        """Get inventory business logic settings."""
        return InventorySettings()

    @property
    def expiration(self) -> ExpirationSettings:
        """Get expiration tier settings."""
        return ExpirationSettings()


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def configure_logging(log_level: str | None = None) -> None:
    """Configure structlog to drop events below the given level.

    Args:
        log_level: Level name such as "DEBUG". If None, uses configured settings.
    """
    if log_level is None:
        log_level = get_settings().log_level
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        logger.warning("unknown_log_level", log_level=log_level)
        level = logging.INFO

    structlog.configure(wrapper_class=structlog.make_filtering_bound_logger(level))
