"""Configuration package."""

from finance_tracker.config.settings import (
    ApiSettings,
    AppSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "ApiSettings",
    "AppSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
