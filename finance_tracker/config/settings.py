"""
Configuration Management for Personal Finance Tracker

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Each concern gets its own settings class with its own environment prefix,
so the database location can be changed without touching anything else.
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Local SQLite database configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FINANCE_DB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    path: str = Field(
        default="finance_tracker.db",
        description="Path to the SQLite database file (':memory:' for a throwaway database)"
    )
    timeout_seconds: float = Field(
        default=5.0,
        gt=0.0,
        le=60.0,
        description="How long a statement waits on a locked database before failing"
    )
    connect_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="How many times opening the database is attempted"
    )

    @field_validator('path')
    @classmethod
    def validate_path(cls, v: str) -> str:
        """Reject an empty path, which sqlite would treat as a private temp database."""
        if not v.strip():
            raise ValueError("Database path cannot be empty")
        return v


class StateSettings(BaseSettings):
    """Reactive state layer configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FINANCE_STATE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    stop_timeout_seconds: float = Field(
        default=5.0,
        ge=0.0,
        le=300.0,
        description="Grace period before derived values stop after the last observer leaves"
    )


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        description="Minimum level for structured logs"
    )

    # Display
    currency_symbol: str = Field(
        default="TSh",
        description="Currency symbol shown in front of amounts"
    )

    # Validation thresholds
    max_transaction_amount: float = Field(
        default=100000000.0,
        gt=0.0,
        description="Amounts above this are flagged for a second look"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {v}")
        return level


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Sub-settings are loaded lazily so one bad section does not hide the others

    @property
    def database(self) -> DatabaseSettings:
        return DatabaseSettings()

    @property
    def state(self) -> StateSettings:
        return StateSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, with an extra
    "<name>_error" entry describing each failure.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    for name in ("database", "state", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except ValueError as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
