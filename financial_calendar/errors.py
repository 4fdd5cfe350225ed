"""
Exception hierarchy for Financial Calendar.

Every error raised by the package derives from FinancialCalendarError so
callers can catch the whole family in one place.
"""


class FinancialCalendarError(Exception):
    """Base exception for the package."""
    pass


class InvalidDateError(FinancialCalendarError, ValueError):
    """A date string is not a valid YYYY-MM-DD calendar date."""

    def __init__(self, value: object, reason: str = "expected YYYY-MM-DD"):
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid date {value!r}: {reason}")


class InvalidMonthStartDayError(FinancialCalendarError, ValueError):
    """Month start day outside 1..31."""

    def __init__(self, month_start_day: object):
        self.month_start_day = month_start_day
        super().__init__(
            f"Month start day must be between 1 and 31, got {month_start_day!r}"
        )


class UnknownPeriodTypeError(FinancialCalendarError, ValueError):
    """Unrecognized period type tag (strict mode only)."""

    def __init__(self, period_type: object):
        self.period_type = period_type
        super().__init__(f"Unknown period type: {period_type!r}")


class VirtualOccurrenceError(FinancialCalendarError):
    """Attempted to treat a projected occurrence as a stored record."""
    pass


class ProfileSourceError(FinancialCalendarError):
    """The profile store could not be read."""
    pass
