"""Profile settings package."""

from financial_calendar.services.profile.interface import (
    InMemoryProfileSource,
    ProfileSourceError,
    ProfileSourceInterface,
)
from financial_calendar.services.profile.settings_service import (
    ProfileSettingsService,
    parse_month_start_day,
)

__all__ = [
    "InMemoryProfileSource",
    "ProfileSettingsService",
    "ProfileSourceError",
    "ProfileSourceInterface",
    "parse_month_start_day",
]
