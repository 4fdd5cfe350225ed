"""
Configuration Management for Financial Calendar

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Defaults that the date logic falls back on (month start day, projection
horizon, iteration cap) live in one place and are validated at startup.
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class CalendarSettings(BaseSettings):
    """Defaults and limits for period computation and projection."""

    model_config = SettingsConfigDict(
        env_prefix="FINCAL_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    default_month_start_day: int = Field(
        default=1,
        ge=1,
        le=31,
        description="Month start day used when a profile does not set one"
    )
    default_months_ahead: int = Field(
        default=6,
        ge=0,
        le=60,
        description="How many months ahead recurring obligations are projected"
    )
    max_projection_iterations: int = Field(
        default=100,
        ge=1,
        le=1000,
        description="Hard cap on candidates examined per projected obligation"
    )
    strict_period_types: bool = Field(
        default=False,
        description="Raise on unknown period type tags instead of falling back"
    )
    profile_cache_ttl_seconds: float = Field(
        default=300.0,
        ge=0.0,
        description="How long a fetched profile setting stays cached"
    )
    profile_fetch_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts made against the profile store before giving up"
    )
    profile_fetch_backoff_seconds: float = Field(
        default=1.0,
        ge=0.0,
        le=30.0,
        description="Base of the exponential backoff between profile fetch attempts"
    )


class LoggingSettings(BaseSettings):
    """Structured logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FINCAL_LOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    level: str = Field(
        default="INFO",
        description="Minimum log level"
    )
    json_output: bool = Field(
        default=True,
        description="Render JSON lines (False renders for the console)"
    )

    @field_validator('level')
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Only accept standard logging level names."""
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        level = v.strip().upper()
        if level not in allowed:
            raise ValueError(f"Unsupported log level: {v}. Allowed: {sorted(allowed)}")
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

    # Sub-settings are loaded lazily to allow partial configuration

    @property
    def calendar(self) -> CalendarSettings:
        return CalendarSettings()

    @property
    def logging(self) -> LoggingSettings:
        return LoggingSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, object]:
    """
    Validate all settings are properly configured.

    Returns a dict of {section_name: is_valid}, plus
    {section_name}_error entries for failures. Useful for startup checks.
    """
    results: dict[str, object] = {}
    settings = get_settings()

    for name in ("calendar", "logging"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
