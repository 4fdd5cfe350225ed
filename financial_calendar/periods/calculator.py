"""
Financial Period Calculator

A financial period runs from the user's month start day in one month to
the day before the start day in the next. With a start day of 10, the
period containing 2024-01-05 is 2023-12-10 .. 2024-01-09.

DESIGN DECISION: A start day that does not exist in a month (e.g. 31 in
April) is clamped to that month's last day, and the "have we reached the
start day yet" test uses the clamped day. Consecutive periods therefore
tile the calendar with no gaps or overlaps, and every period contains its
reference date.

All functions are pure: same arguments, same period.
"""

from datetime import date, datetime, timedelta
from typing import Iterable, Mapping, Optional, Union

from financial_calendar.audit import get_logger
from financial_calendar.config import get_settings
from financial_calendar.errors import (
    InvalidMonthStartDayError,
    UnknownPeriodTypeError,
)
from financial_calendar.models.period import FinancialPeriod, PeriodType
from financial_calendar.models.transaction import (
    TransactionRecord,
    as_transaction_records,
)
from financial_calendar.utils.dates import (
    clamped_date,
    end_of_day,
    local_midnight,
    now,
    shift_month,
    start_of_day,
    validate_day,
)

logger = get_logger(__name__)

DateLike = Union[date, datetime]


def _check_month_start_day(month_start_day: Optional[int]) -> int:
    if month_start_day is None:
        return 1
    if isinstance(month_start_day, bool) or not isinstance(month_start_day, int):
        raise InvalidMonthStartDayError(month_start_day)
    if not validate_day(month_start_day):
        raise InvalidMonthStartDayError(month_start_day)
    return month_start_day


def period_start_in_month(year: int, month: int, month_start_day: int) -> date:
    """The day a financial period starts in the given calendar month."""
    return clamped_date(year, month, month_start_day)


def get_financial_period(
    month_start_day: Optional[int] = 1,
    reference_date: Optional[DateLike] = None,
) -> FinancialPeriod:
    """
    Return the financial period containing reference_date (default: now).

    Raises:
        InvalidMonthStartDayError: if month_start_day is outside 1..31.
    """
    month_start_day = _check_month_start_day(month_start_day)
    ref = reference_date or now()
    ref_day = date(ref.year, ref.month, ref.day)

    this_start = period_start_in_month(ref.year, ref.month, month_start_day)
    if ref_day >= this_start:
        start = this_start
        next_year, next_month = shift_month(ref.year, ref.month, 1)
        next_start = period_start_in_month(next_year, next_month, month_start_day)
    else:
        prev_year, prev_month = shift_month(ref.year, ref.month, -1)
        start = period_start_in_month(prev_year, prev_month, month_start_day)
        next_start = this_start

    return FinancialPeriod(
        start_date=start_of_day(start),
        end_date=end_of_day(next_start - timedelta(days=1)),
    )


def shift_financial_period(
    month_start_day: Optional[int] = 1,
    reference_date: Optional[DateLike] = None,
    steps: int = 1,
) -> FinancialPeriod:
    """
    The period `steps` periods after the one containing reference_date.

    Negative steps go back. Each step moves to the day just past the
    current period's edge.
    """
    period = get_financial_period(month_start_day, reference_date)
    for _ in range(abs(steps)):
        if steps > 0:
            anchor = period.end_date.date() + timedelta(days=1)
        else:
            anchor = period.start_date.date() - timedelta(days=1)
        period = get_financial_period(month_start_day, anchor)
    return period


def _resolve_period_type(
    period_type: Union[PeriodType, str, None],
    strict: bool,
) -> PeriodType:
    try:
        return PeriodType(period_type)
    except ValueError:
        if strict:
            raise UnknownPeriodTypeError(period_type) from None
        logger.warning(
            "period_type_fallback",
            requested=str(period_type),
            fallback=PeriodType.CURRENT_MONTH.value,
        )
        return PeriodType.CURRENT_MONTH


def get_financial_period_by_type(
    period_type: Union[PeriodType, str],
    month_start_day: Optional[int] = 1,
    reference_date: Optional[DateLike] = None,
    strict: Optional[bool] = None,
) -> FinancialPeriod:
    """
    Return the period of the given type that ends with the current one.

    - current-month: the financial period containing reference_date
    - last-3-months / last-6-months: same end, start moved back 2 / 5 periods
    - current-year: the calendar year of reference_date

    Unknown period types fall back to current-month with a warning, or
    raise UnknownPeriodTypeError when strict (default from settings).
    """
    if strict is None:
        strict = get_settings().calendar.strict_period_types
    kind = _resolve_period_type(period_type, strict)
    ref = reference_date or now()

    if kind == PeriodType.CURRENT_YEAR:
        return FinancialPeriod(
            start_date=datetime(ref.year, 1, 1),
            end_date=end_of_day(date(ref.year, 12, 31)),
        )

    current = get_financial_period(month_start_day, ref)
    if kind == PeriodType.CURRENT_MONTH:
        return current

    months_back = 2 if kind == PeriodType.LAST_3_MONTHS else 5
    start_year, start_month = shift_month(
        current.start_date.year, current.start_date.month, -months_back
    )
    start = period_start_in_month(
        start_year, start_month, _check_month_start_day(month_start_day)
    )
    return FinancialPeriod(
        start_date=start_of_day(start),
        end_date=current.end_date,
    )


def is_date_in_current_financial_period(
    moment: DateLike,
    month_start_day: Optional[int] = 1,
    reference_date: Optional[DateLike] = None,
) -> bool:
    """Whether moment falls inside the period containing reference_date (default: now)."""
    return get_financial_period(month_start_day, reference_date).contains(moment)


def format_financial_period(period: FinancialPeriod) -> str:
    """Render as 'dd/mm/yyyy - dd/mm/yyyy'."""
    return period.format()


def filter_transactions_by_period(
    records: Iterable[Union[TransactionRecord, Mapping]],
    period_type: Union[PeriodType, str],
    month_start_day: Optional[int] = 1,
    reference_date: Optional[DateLike] = None,
    strict: Optional[bool] = None,
) -> list[TransactionRecord]:
    """Keep the records whose date lies inside the typed period. Order is preserved."""
    period = get_financial_period_by_type(period_type, month_start_day, reference_date, strict)
    return [
        record for record in as_transaction_records(records)
        if period.contains(local_midnight(record.date))
    ]
