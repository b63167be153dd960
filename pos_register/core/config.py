"""
Register configuration using Pydantic Settings.
"""
import logging
from functools import lru_cache
from typing import Optional

import pytz
from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Register settings loaded from environment variables."""

    # Application
    APP_NAME: str = "POS Register"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "sqlite:///register.db"

    # Suspensions
    MAX_SUSPENDED_TRANSACTIONS: int = 10
    SUSPENSION_RETENTION_DAYS: int = 7
    CLEANUP_INTERVAL_SECONDS: float = 3600.0
    CLEANUP_SHUTDOWN_TIMEOUT_SECONDS: float = 5.0

    # Register location; None means host local time
    REGISTER_TIMEZONE: Optional[str] = None

    # Files
    RECEIPTS_DIR: str = "receipts"
    PRICE_BOOK_PATH: Optional[str] = None

    # Popularity
    POPULAR_TOP_N: int = 65
    SALES_PERIOD_DAYS: int = 30

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"LOG_LEVEL must be a logging level name (got {v!r})")
        return level

    @field_validator("MAX_SUSPENDED_TRANSACTIONS", "SUSPENSION_RETENTION_DAYS", "SALES_PERIOD_DAYS")
    @classmethod
    def at_least_one(cls, v: int) -> int:
        if v < 1:
            raise ValueError("must be at least 1")
        return v

    @field_validator("REGISTER_TIMEZONE")
    @classmethod
    def validate_timezone(cls, v: Optional[str]) -> Optional[str]:
        """Reject timezone names pytz does not know."""
        if v is None:
            return v
        try:
            pytz.timezone(v)
        except pytz.UnknownTimeZoneError:
            raise ValueError(f"Unknown timezone: {v}")
        return v

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
