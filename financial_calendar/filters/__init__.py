"""Transaction filtering package."""

from financial_calendar.filters.transactions import (
    apply_date_range_filter,
    apply_transaction_filters,
    date_range_bounds,
    matches_search,
    parse_amount_bound,
    sort_by_date_desc,
)

__all__ = [
    "apply_date_range_filter",
    "apply_transaction_filters",
    "date_range_bounds",
    "matches_search",
    "parse_amount_bound",
    "sort_by_date_desc",
]
