"""
Tests for configuration loading.
"""

import pytest
from pydantic import ValidationError

from financial_calendar.config import (
    CalendarSettings,
    LoggingSettings,
    get_settings,
    validate_all_settings,
)


class TestCalendarSettings:

    def test_defaults(self):
        settings = CalendarSettings()
        assert settings.default_month_start_day == 1
        assert settings.default_months_ahead == 6
        assert settings.max_projection_iterations == 100
        assert settings.strict_period_types is False

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("FINCAL_DEFAULT_MONTH_START_DAY", "15")
        assert get_settings().calendar.default_month_start_day == 15

    def test_rejects_out_of_range_start_day(self):
        with pytest.raises(ValidationError):
            CalendarSettings(default_month_start_day=32)


class TestLoggingSettings:

    def test_level_is_normalized(self):
        assert LoggingSettings(level=" debug ").level == "DEBUG"

    def test_rejects_unknown_level(self):
        with pytest.raises(ValidationError):
            LoggingSettings(level="LOUD")


def test_validate_all_settings_reports_errors(monkeypatch):
    monkeypatch.setenv("FINCAL_MAX_PROJECTION_ITERATIONS", "0")
    results = validate_all_settings()
    assert results["calendar"] is False
    assert "calendar_error" in results
    assert results["logging"] is True
