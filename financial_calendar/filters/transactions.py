"""
Transaction Filtering

Filters the transaction list the way the transaction screen does:
free-text search, type, category, account, card, amount bounds and a
relative date range. All active filters must match (logical AND).

DESIGN DECISION: Transaction dates are compared as local calendar days,
parsed field by field from YYYY-MM-DD. The final ordering compares the raw
YYYY-MM-DD strings, which sort chronologically by construction and do not
depend on any parsing.
"""

from datetime import datetime, timedelta
from decimal import Decimal, InvalidOperation
from functools import cmp_to_key
from typing import Iterable, Mapping, Optional, Union

from financial_calendar.audit import get_logger
from financial_calendar.models.period import DateBounds
from financial_calendar.models.transaction import (
    DateRangeSelector,
    TransactionFilters,
    TransactionRecord,
    as_transaction_records,
)
from financial_calendar.utils.dates import (
    compare_date_strings,
    end_of_day,
    local_midnight,
    now as local_now,
    shift_month,
    start_of_day,
)

logger = get_logger(__name__)

RecordInput = Union[TransactionRecord, Mapping]

NO_FILTER = "all"


def _resolve_selector(selector: Union[DateRangeSelector, str, None]) -> DateRangeSelector:
    if selector is None:
        return DateRangeSelector.ALL
    try:
        return DateRangeSelector(selector)
    except ValueError:
        logger.warning("unknown_date_range", requested=str(selector))
        return DateRangeSelector.ALL


def date_range_bounds(
    selector: Union[DateRangeSelector, str],
    now: Optional[datetime] = None,
) -> DateBounds:
    """
    Resolve a relative date range against the local "now".

    Weeks start on Sunday. "last-N-days" counts N days back from now and
    truncates to the start of that day. "last-month" is closed on both ends.
    """
    selector = _resolve_selector(selector)
    current = now or local_now()
    today = start_of_day(current)

    if selector == DateRangeSelector.TODAY:
        return DateBounds(start=today)
    if selector == DateRangeSelector.THIS_WEEK:
        days_since_sunday = (today.weekday() + 1) % 7
        return DateBounds(start=today - timedelta(days=days_since_sunday))
    if selector == DateRangeSelector.LAST_7_DAYS:
        return DateBounds(start=start_of_day(current - timedelta(days=7)))
    if selector == DateRangeSelector.LAST_30_DAYS:
        return DateBounds(start=start_of_day(current - timedelta(days=30)))
    if selector == DateRangeSelector.CURRENT_MONTH:
        return DateBounds(start=datetime(current.year, current.month, 1))
    if selector == DateRangeSelector.LAST_MONTH:
        prev_year, prev_month = shift_month(current.year, current.month, -1)
        first_of_this_month = datetime(current.year, current.month, 1)
        return DateBounds(
            start=datetime(prev_year, prev_month, 1),
            end=end_of_day(first_of_this_month - timedelta(days=1)),
        )
    if selector == DateRangeSelector.CURRENT_YEAR:
        return DateBounds(start=datetime(current.year, 1, 1))
    return DateBounds()


def sort_by_date_desc(records: Iterable[TransactionRecord]) -> list[TransactionRecord]:
    """Newest first, by raw YYYY-MM-DD string. Ties keep their input order."""
    return sorted(
        records,
        key=cmp_to_key(lambda a, b: compare_date_strings(a.date, b.date)),
        reverse=True,
    )


def apply_date_range_filter(
    records: Iterable[RecordInput],
    selector: Union[DateRangeSelector, str],
    now: Optional[datetime] = None,
) -> list[TransactionRecord]:
    """Keep the records inside the selector's range, newest first."""
    bounds = date_range_bounds(selector, now)
    records = as_transaction_records(records)
    if not bounds.is_open:
        records = [r for r in records if bounds.contains(local_midnight(r.date))]
    return sort_by_date_desc(records)


def parse_amount_bound(value: Union[str, Decimal, float, None]) -> Optional[Decimal]:
    """
    Parse a min/max amount filter value.

    Empty or non-numeric input turns the bound off instead of failing.
    """
    if value is None or value == "":
        return None
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation:
        return None
    if not amount.is_finite():
        return None
    return amount


def matches_search(record: TransactionRecord, term: str) -> bool:
    """Case-insensitive substring match on description, notes or any tag name."""
    term = term.lower()
    if term in record.description.lower():
        return True
    if record.notes and term in record.notes.lower():
        return True
    return any(tag.name and term in tag.name.lower() for tag in record.tags)


def apply_transaction_filters(
    records: Iterable[RecordInput],
    filters: Union[TransactionFilters, Mapping],
    now: Optional[datetime] = None,
) -> list[TransactionRecord]:
    """
    Apply every active filter, then sort newest first.

    Returns a new list; the input is not modified.
    """
    if not isinstance(filters, TransactionFilters):
        filters = TransactionFilters.model_validate(filters)

    filtered = as_transaction_records(records)
    input_count = len(filtered)

    if filters.search:
        filtered = [r for r in filtered if matches_search(r, filters.search)]

    if filters.type != NO_FILTER:
        filtered = [r for r in filtered if r.type == filters.type]

    if filters.category_id != NO_FILTER:
        filtered = [r for r in filtered if r.category_id == filters.category_id]

    if filters.account_id != NO_FILTER:
        filtered = [r for r in filtered if r.account_id == filters.account_id]

    if filters.card_id != NO_FILTER:
        filtered = [r for r in filtered if r.card_id == filters.card_id]

    min_amount = parse_amount_bound(filters.min_amount)
    if min_amount is not None:
        filtered = [r for r in filtered if r.amount >= min_amount]

    max_amount = parse_amount_bound(filters.max_amount)
    if max_amount is not None:
        filtered = [r for r in filtered if r.amount <= max_amount]

    result = apply_date_range_filter(filtered, filters.date_range, now)

    logger.debug(
        "transactions_filtered",
        input_count=input_count,
        output_count=len(result),
        date_range=filters.date_range.value,
    )
    return result
