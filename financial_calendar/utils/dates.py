"""
Local Calendar Date Helpers

DESIGN DECISION: Every date in this package is built from local calendar
fields (year, month, day). Stored dates arrive as YYYY-MM-DD strings and
are parsed field by field into naive local dates. Nothing is routed through
a UTC timestamp, which would shift dates by one day west of Greenwich.

Parsing is the boundary between stored data and the date logic:
- parse_local_date() fails loudly with InvalidDateError
- try_parse_local_date() returns None on failure
No sentinel "invalid date" value ever reaches the calculations.
"""

import calendar
import re
from datetime import date, datetime, time, timedelta
from typing import Optional, Union

from financial_calendar.errors import InvalidDateError

DATE_FORMAT = "%Y-%m-%d"
DISPLAY_FORMAT = "%d/%m/%Y"

_DATE_PATTERN = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")

# 23:59:59.999, the last instant of a day at millisecond resolution
END_OF_DAY = time(23, 59, 59, 999000)

DateLike = Union[date, datetime]


def now() -> datetime:
    """Current local wall-clock time (naive)."""
    return datetime.now()


def parse_local_date(value: str) -> date:
    """
    Parse a YYYY-MM-DD string into a local calendar date.

    Raises:
        InvalidDateError: if the string is not shaped YYYY-MM-DD or names a
            day that does not exist (e.g. 2024-02-30).
    """
    if not isinstance(value, str):
        raise InvalidDateError(value, "expected a string")
    match = _DATE_PATTERN.match(value.strip())
    if match is None:
        raise InvalidDateError(value)
    year, month, day = (int(part) for part in match.groups())
    try:
        return date(year, month, day)
    except ValueError as e:
        raise InvalidDateError(value, str(e)) from e


def try_parse_local_date(value: Optional[str]) -> Optional[date]:
    """Parse a YYYY-MM-DD string, returning None on failure."""
    if not value:
        return None
    try:
        return parse_local_date(value)
    except InvalidDateError:
        return None


def to_date_string(d: DateLike) -> str:
    """Format a date as YYYY-MM-DD from its local fields."""
    return f"{d.year:04d}-{d.month:02d}-{d.day:02d}"


def start_of_day(d: DateLike) -> datetime:
    """Local midnight of the given calendar day."""
    return datetime(d.year, d.month, d.day)


def end_of_day(d: DateLike) -> datetime:
    """Last instant (23:59:59.999) of the given calendar day."""
    return datetime.combine(date(d.year, d.month, d.day), END_OF_DAY)


def local_midnight(value: str) -> datetime:
    """Local midnight of a YYYY-MM-DD string."""
    return start_of_day(parse_local_date(value))


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def shift_month(year: int, month: int, n: int) -> tuple[int, int]:
    """Return (year, month) n months away from (year, month)."""
    index = year * 12 + (month - 1) + n
    return index // 12, index % 12 + 1


def clamped_date(year: int, month: int, day: int) -> date:
    """Build a date, clamping day to the month's last day."""
    return date(year, month, min(day, days_in_month(year, month)))


def add_months(d: DateLike, n: int) -> DateLike:
    """Add n months to d, clamping the day to the target month's end."""
    year, month = shift_month(d.year, d.month, n)
    return d.replace(year=year, month=month, day=min(d.day, days_in_month(year, month)))


def add_years(d: DateLike, n: int) -> DateLike:
    """Add n years to d (Feb 29 becomes Feb 28 in common years)."""
    return add_months(d, 12 * n)


def days_until_due(due_day: int, today: Optional[date] = None) -> int:
    """
    Days from today until the next occurrence of a monthly due day.

    If the due day already passed this month, counts to next month's.
    """
    today = today or now().date()
    due = clamped_date(today.year, today.month, due_day)
    if due < today:
        year, month = shift_month(today.year, today.month, 1)
        due = clamped_date(year, month, due_day)
    return (due - today).days


def validate_day(
    day: int,
    month: Optional[int] = None,
    year: Optional[int] = None,
) -> bool:
    """Check a day of month; with a month, also check it exists in that month."""
    if day < 1 or day > 31:
        return False
    if month is not None:
        if not validate_month(month):
            return False
        return day <= days_in_month(year or 2024, month)
    return True


def validate_month(month: int) -> bool:
    return 1 <= month <= 12


def compare_date_strings(a: str, b: str) -> int:
    """Compare two YYYY-MM-DD strings: -1 if a < b, 0 if equal, 1 if a > b."""
    return (a > b) - (a < b)


def format_display_date(d: DateLike) -> str:
    """Format as dd/mm/yyyy."""
    return d.strftime(DISPLAY_FORMAT)
