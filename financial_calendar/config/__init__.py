"""Configuration package."""

from financial_calendar.config.settings import (
    CalendarSettings,
    LoggingSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "CalendarSettings",
    "LoggingSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
