"""Configuration package."""

from finance_tracker.config.settings import (
    AppSettings,
    DatabaseSettings,
    Settings,
    StateSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "DatabaseSettings",
    "Settings",
    "StateSettings",
    "get_settings",
    "validate_all_settings",
]
