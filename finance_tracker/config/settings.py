"""
Configuration Management for the Finance Tracker client

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The only external dependency is the REST API, so its location and
request limits live next to the application-level switches.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ApiSettings(BaseSettings):
    """Backend REST API configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FINANCE_API_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    base_url: str = Field(
        default="http://localhost:8080/api",
        description="Base URL of the finance tracker API (including the /api prefix)"
    )
    timeout_seconds: Optional[float] = Field(
        default=30.0,
        gt=0,
        description="Per-request timeout in seconds (None waits forever)"
    )
    user_agent: str = Field(
        default="finance-tracker-client/1.0",
        description="User-Agent header sent with every request"
    )

    @field_validator('base_url')
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Paths are joined with a leading slash, so drop the trailing one."""
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"API base URL must start with http:// or https://, got {v!r}")
        return v.rstrip("/")


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
        description="Minimum level for local structured logs"
    )

    # Display
    currency_symbol: str = Field(
        default="",
        max_length=5,
        description="Symbol prefixed to amounts in the UI"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
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

    # Note: These are loaded lazily to allow partial configuration

    @property
    def api(self) -> ApiSettings:
        return ApiSettings()

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

    Returns a dict of {setting_name: is_valid}, plus a
    {setting_name}_error entry for every failure.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    try:
        _ = settings.api
        results["api"] = True
    except Exception as e:
        results["api"] = False
        results["api_error"] = str(e)

    try:
        _ = settings.app
        results["app"] = True
    except Exception as e:
        results["app"] = False
        results["app_error"] = str(e)

    return results
