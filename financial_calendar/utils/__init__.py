"""Utility package."""

from financial_calendar.utils.dates import (
    add_months,
    add_years,
    clamped_date,
    compare_date_strings,
    days_until_due,
    end_of_day,
    local_midnight,
    parse_local_date,
    start_of_day,
    to_date_string,
    try_parse_local_date,
    validate_day,
    validate_month,
)

__all__ = [
    "add_months",
    "add_years",
    "clamped_date",
    "compare_date_strings",
    "days_until_due",
    "end_of_day",
    "local_midnight",
    "parse_local_date",
    "start_of_day",
    "to_date_string",
    "try_parse_local_date",
    "validate_day",
    "validate_month",
]
