"""
Application settings and configuration management
Uses Pydantic Settings for environment variable handling and validation
"""

from functools import lru_cache
from typing import Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
import pytz


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    # Application
    app_name: str = "Root-Cause Context Service"
    environment: str = Field(default="development")
    debug: bool = Field(default=False, description="FastAPI debug mode; unhandled errors render a traceback")
    log_level: str = Field(default="INFO")
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)

    # Context resolution
    timezone: str = Field(
        default="UTC",
        description="Reference timezone for flooring timestamps to hours and days"
    )
    default_compare_mode: str = Field(
        default="WoW",
        description="Compare mode of a blank or anomaly-seeded investigation"
    )
    default_permissions: str = Field(
        default="READ_WRITE",
        description="Permissions of a new, unsaved investigation session"
    )
    report_missing_metric: bool = Field(
        default=False,
        description="Add a resolution error when a requested metric cannot be found"
    )
    fetch_timeout_seconds: Optional[float] = Field(
        default=None,
        description="Per-record fetch timeout; a timed out fetch counts as failed"
    )

    model_config = SettingsConfigDict(
        env_prefix="ROOTCAUSE_",
        case_sensitive=False,
        env_parse_none_str="null"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v.upper()

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v):
        try:
            pytz.timezone(v)
        except pytz.UnknownTimeZoneError as e:
            raise ValueError(f"Unknown timezone: {v}") from e
        return v

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings
    Uses lru_cache to avoid reading environment variables multiple times
    """
    return Settings()


def clear_settings_cache() -> None:
    """
    Clear the settings cache. Used primarily for testing.
    After calling this, the next call to get_settings() will
    create a new Settings instance with fresh environment variables.
    """
    get_settings.cache_clear()
