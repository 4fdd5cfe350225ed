"""
Recurring Obligation Projection

Generates the future virtual occurrences of a recurring debt or receivable
so upcoming payments can be shown before they are stored.

Starting from the obligation's own due date, candidates advance by one
cadence step (7 days, 1 month or 1 year). Generation stops at the first
candidate that breaks any configured limit:
1. after the recurrence end date
2. beyond the maximum occurrence count
3. after today + months_ahead months
4. past the iteration safety cap

DESIGN DECISION: Month and year steps are computed from the original due
date (due date + i months), not chained from the previous candidate. A
series due on the 31st lands on Feb 29 and then back on Mar 31 instead of
drifting to the 29th forever.
"""

from datetime import date, datetime, timedelta
from typing import Iterable, Mapping, Optional, Union

from financial_calendar.audit import get_logger
from financial_calendar.config import get_settings
from financial_calendar.models.obligation import (
    RecurrenceType,
    RecurringObligation,
    VirtualOccurrence,
    ensure_persisted,
    parse_obligations,
)
from financial_calendar.utils.dates import (
    add_months,
    add_years,
    end_of_day,
    local_midnight,
    now as local_now,
    parse_local_date,
    start_of_day,
    to_date_string,
)

logger = get_logger(__name__)

AnyObligation = Union[RecurringObligation, VirtualOccurrence]

# Fields that are recomputed for each occurrence rather than copied
_PER_OCCURRENCE_FIELDS = {"kind", "id", "status", "due_date", "current_count"}


def _coerce(obligation: Union[AnyObligation, Mapping]) -> AnyObligation:
    if isinstance(obligation, (RecurringObligation, VirtualOccurrence)):
        return obligation
    return parse_obligations([obligation])[0]


def advance(base: date, cadence: RecurrenceType, steps: int) -> date:
    """The date `steps` cadence steps after base."""
    if cadence == RecurrenceType.WEEKLY:
        return base + timedelta(weeks=steps)
    if cadence == RecurrenceType.YEARLY:
        return add_years(base, steps)
    return add_months(base, steps)


def projection_horizon(months_ahead: int, now: Optional[datetime] = None) -> date:
    """Last due date a projection may reach: today + months_ahead months."""
    if months_ahead < 0:
        raise ValueError(f"months_ahead must be >= 0, got {months_ahead}")
    today = (now or local_now()).date()
    return add_months(today, months_ahead)


def _make_occurrence(
    obligation: RecurringObligation,
    due: date,
    occurrence_number: int,
) -> VirtualOccurrence:
    copied = obligation.model_dump(exclude=_PER_OCCURRENCE_FIELDS)
    return VirtualOccurrence(
        **copied,
        id=VirtualOccurrence.make_id(obligation.id, occurrence_number),
        parent_id=obligation.id,
        occurrence_number=occurrence_number,
        due_date=to_date_string(due),
        current_count=occurrence_number,
    )


def generate_virtual_occurrences(
    obligation: Union[RecurringObligation, Mapping],
    months_ahead: int = 6,
    now: Optional[datetime] = None,
    max_iterations: Optional[int] = None,
) -> list[VirtualOccurrence]:
    """
    Project the future occurrences of a recurring obligation.

    Returns an empty list for non-recurring obligations or ones without a
    cadence. The obligation's own due date is never included.

    Raises:
        VirtualOccurrenceError: if given a virtual occurrence.
        ValueError: if months_ahead is negative or max_iterations is below 1.
    """
    obligation = ensure_persisted(_coerce(obligation))
    horizon = projection_horizon(months_ahead, now)

    if not obligation.is_recurring or obligation.recurrence_type is None:
        return []

    if max_iterations is None:
        max_iterations = get_settings().calendar.max_projection_iterations
    if max_iterations < 1:
        raise ValueError(f"max_iterations must be >= 1, got {max_iterations}")
    cap = max_iterations
    base = parse_local_date(obligation.due_date)
    end_limit = (
        parse_local_date(obligation.recurrence_end_date)
        if obligation.recurrence_end_date
        else None
    )
    current_count = obligation.current_count or 1

    occurrences: list[VirtualOccurrence] = []
    for step in range(1, cap + 1):
        candidate = advance(base, obligation.recurrence_type, step)
        occurrence_number = current_count + step

        if end_limit is not None and candidate > end_limit:
            break
        if obligation.max_occurrences and occurrence_number > obligation.max_occurrences:
            break
        if candidate > horizon:
            break
        if candidate == base:
            continue

        occurrences.append(_make_occurrence(obligation, candidate, occurrence_number))
    else:
        logger.warning(
            "projection_cap_reached",
            obligation_id=obligation.id,
            cap=cap,
        )

    logger.debug(
        "occurrences_projected",
        obligation_id=obligation.id,
        count=len(occurrences),
        months_ahead=months_ahead,
    )
    return occurrences


def combine_with_virtual_occurrences(
    obligations: Iterable[Union[AnyObligation, Mapping]],
    months_ahead: int = 6,
    now: Optional[datetime] = None,
    max_iterations: Optional[int] = None,
) -> list[AnyObligation]:
    """
    Each obligation followed by its projected occurrences, in input order.

    Non-recurring obligations, and occurrences that are already virtual,
    contribute only themselves.
    """
    result: list[AnyObligation] = []
    for obligation in obligations:
        obligation = _coerce(obligation)
        result.append(obligation)
        if isinstance(obligation, RecurringObligation) and obligation.is_recurring:
            result.extend(generate_virtual_occurrences(
                obligation,
                months_ahead=months_ahead,
                now=now,
                max_iterations=max_iterations,
            ))
    return result


def filter_occurrences_by_period(
    occurrences: Iterable[AnyObligation],
    start: Union[date, datetime],
    end: Union[date, datetime],
) -> list[AnyObligation]:
    """
    Keep the occurrences due within [start, end], inclusive.

    Plain dates cover whole days: start at midnight, end at 23:59:59.999.
    """
    if not isinstance(start, datetime):
        start = start_of_day(start)
    if not isinstance(end, datetime):
        end = end_of_day(end)
    return [
        occurrence for occurrence in occurrences
        if start <= local_midnight(occurrence.due_date) <= end
    ]
