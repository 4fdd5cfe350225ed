"""Financial period computation package."""

from financial_calendar.periods.calculator import (
    filter_transactions_by_period,
    format_financial_period,
    get_financial_period,
    get_financial_period_by_type,
    is_date_in_current_financial_period,
    period_start_in_month,
    shift_financial_period,
)

__all__ = [
    "filter_transactions_by_period",
    "format_financial_period",
    "get_financial_period",
    "get_financial_period_by_type",
    "is_date_in_current_financial_period",
    "period_start_in_month",
    "shift_financial_period",
]
