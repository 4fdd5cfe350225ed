"""
Main Orchestrator for Financial Calendar

Ties together the profile settings, the period calculator, the transaction
filters and the recurrence projector for one user, following the flow
the dashboard uses:

1. Resolve the user's month start day (profile store, cached)
2. Compute the requested financial period
3. Select transactions or synthesize upcoming obligations inside it

DESIGN DECISION: The orchestrator owns the clock and the audit trail.
The underlying functions stay pure and take "now" as an argument; this
class supplies it and records what was decided.
"""

from contextlib import contextmanager
from datetime import date, datetime
from typing import Callable, Iterable, Iterator, Mapping, Optional, Union
from uuid import UUID

from pydantic import ValidationError

from financial_calendar.audit import AuditLogger, create_correlation_id, get_logger
from financial_calendar.config import CalendarSettings, get_settings
from financial_calendar.filters import apply_transaction_filters
from financial_calendar.models.obligation import RecurringObligation, VirtualOccurrence
from financial_calendar.models.period import FinancialPeriod, PeriodType
from financial_calendar.models.transaction import (
    TransactionFilters,
    TransactionRecord,
    as_transaction_records,
)
from financial_calendar.periods import (
    get_financial_period_by_type,
    shift_financial_period,
)
from financial_calendar.recurrence import (
    combine_with_virtual_occurrences,
    filter_occurrences_by_period,
)
from financial_calendar.services.cache import TTLCache
from financial_calendar.services.profile import (
    ProfileSettingsService,
    ProfileSourceInterface,
)
from financial_calendar.services.storage import AuditSinkInterface
from financial_calendar.utils.dates import (
    days_until_due,
    local_midnight,
    now as local_now,
)

logger = get_logger(__name__)

_DATE_FIELDS = {"date", "due_date", "recurrence_end_date"}

AnyObligation = Union[RecurringObligation, VirtualOccurrence]


class FinancialCalendar:
    """
    Period, filtering and projection for one user.

    Without a profile service the configured default month start day is used.
    """

    def __init__(
        self,
        user_id: Optional[str] = None,
        profile_service: Optional[ProfileSettingsService] = None,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[CalendarSettings] = None,
        clock: Callable[[], datetime] = local_now,
    ):
        self._user_id = user_id
        self._profile_service = profile_service
        self._audit_logger = audit_logger
        self._settings = settings or get_settings().calendar
        self._clock = clock

    @property
    def month_start_day(self) -> int:
        if self._profile_service is not None and self._user_id:
            return self._profile_service.get_month_start_day(self._user_id)
        return self._settings.default_month_start_day

    def period(
        self,
        period_type: Union[PeriodType, str] = PeriodType.CURRENT_MONTH,
        reference_date: Optional[Union[date, datetime]] = None,
        correlation_id: Optional[UUID] = None,
    ) -> FinancialPeriod:
        """The period of the given type around reference_date (default: now)."""
        month_start_day = self.month_start_day
        strict = self._settings.strict_period_types

        try:
            resolved = PeriodType(period_type)
        except ValueError:
            resolved = None
        if resolved is None and not strict and self._audit_logger is not None:
            self._audit_logger.log_period_type_fallback(
                requested=str(period_type),
                correlation_id=correlation_id,
            )

        period = get_financial_period_by_type(
            period_type,
            month_start_day,
            reference_date or self._clock(),
            strict=strict,
        )

        if self._audit_logger is not None:
            self._audit_logger.log_period_computed(
                period_type=(resolved or PeriodType.CURRENT_MONTH).value,
                month_start_day=month_start_day,
                start_date=period.start_date,
                end_date=period.end_date,
                correlation_id=correlation_id,
            )
        return period

    def current_period(self) -> FinancialPeriod:
        return self.period(PeriodType.CURRENT_MONTH)

    def previous_period(
        self,
        reference_date: Optional[Union[date, datetime]] = None,
        correlation_id: Optional[UUID] = None,
    ) -> FinancialPeriod:
        """The financial period before the one containing reference_date."""
        return self._shifted_period(-1, reference_date, correlation_id)

    def next_period(
        self,
        reference_date: Optional[Union[date, datetime]] = None,
        correlation_id: Optional[UUID] = None,
    ) -> FinancialPeriod:
        """The financial period after the one containing reference_date."""
        return self._shifted_period(1, reference_date, correlation_id)

    def _shifted_period(
        self,
        steps: int,
        reference_date: Optional[Union[date, datetime]],
        correlation_id: Optional[UUID],
    ) -> FinancialPeriod:
        month_start_day = self.month_start_day
        period = shift_financial_period(
            month_start_day,
            reference_date or self._clock(),
            steps,
        )
        if self._audit_logger is not None:
            self._audit_logger.log_period_computed(
                period_type=PeriodType.CURRENT_MONTH.value,
                month_start_day=month_start_day,
                start_date=period.start_date,
                end_date=period.end_date,
                correlation_id=correlation_id,
            )
        return period

    def days_until(self, due_day: int) -> int:
        """Days from the calendar's today until the next monthly due day."""
        return days_until_due(due_day, self._clock().date())

    def filter_transactions(
        self,
        records: Iterable[Union[TransactionRecord, Mapping]],
        filters: Union[TransactionFilters, Mapping],
        correlation_id: Optional[UUID] = None,
    ) -> list[TransactionRecord]:
        """Apply the transaction list filters relative to the calendar's clock."""
        records = list(records)
        if not isinstance(filters, TransactionFilters):
            filters = TransactionFilters.model_validate(filters)

        with self._audit_invalid_dates(correlation_id):
            result = apply_transaction_filters(records, filters, now=self._clock())

        if self._audit_logger is not None:
            self._audit_logger.log_filters_applied(
                filters=filters.model_dump(mode="json"),
                input_count=len(records),
                output_count=len(result),
                correlation_id=correlation_id,
            )
        return result

    def transactions_in_period(
        self,
        records: Iterable[Union[TransactionRecord, Mapping]],
        period_type: Union[PeriodType, str] = PeriodType.CURRENT_MONTH,
        reference_date: Optional[Union[date, datetime]] = None,
        correlation_id: Optional[UUID] = None,
    ) -> list[TransactionRecord]:
        """Transactions inside the typed period, in input order."""
        period = self.period(period_type, reference_date, correlation_id)
        with self._audit_invalid_dates(correlation_id):
            records = as_transaction_records(records)
        return [r for r in records if period.contains(local_midnight(r.date))]

    def upcoming_obligations(
        self,
        obligations: Iterable[Union[AnyObligation, Mapping]],
        period_type: Union[PeriodType, str] = PeriodType.CURRENT_MONTH,
        months_ahead: Optional[int] = None,
        reference_date: Optional[Union[date, datetime]] = None,
        correlation_id: Optional[UUID] = None,
    ) -> list[AnyObligation]:
        """
        Stored obligations plus their projected occurrences, limited to the
        typed period. Order follows the input, each obligation followed by
        its own occurrences.
        """
        correlation_id = correlation_id or create_correlation_id()
        if months_ahead is None:
            months_ahead = self._settings.default_months_ahead
        cap = self._settings.max_projection_iterations

        period = self.period(period_type, reference_date, correlation_id)

        with self._audit_invalid_dates(correlation_id):
            combined = combine_with_virtual_occurrences(
                obligations,
                months_ahead=months_ahead,
                now=self._clock(),
                max_iterations=cap,
            )

        if self._audit_logger is not None:
            self._audit_projections(combined, months_ahead, cap, correlation_id)

        return filter_occurrences_by_period(combined, period.start_date, period.end_date)

    def _audit_projections(
        self,
        combined: list[AnyObligation],
        months_ahead: int,
        cap: int,
        correlation_id: UUID,
    ) -> None:
        counts: dict[str, int] = {}
        for item in combined:
            if isinstance(item, VirtualOccurrence):
                counts[item.parent_id] = counts.get(item.parent_id, 0) + 1
            elif item.is_recurring:
                counts.setdefault(item.id, 0)
        for parent_id, count in counts.items():
            self._audit_logger.log_occurrences_projected(
                parent_id=parent_id,
                count=count,
                months_ahead=months_ahead,
                correlation_id=correlation_id,
            )
            if count >= cap:
                self._audit_logger.log_projection_cap_reached(
                    parent_id=parent_id,
                    cap=cap,
                    correlation_id=correlation_id,
                )

    @contextmanager
    def _audit_invalid_dates(self, correlation_id: Optional[UUID]) -> Iterator[None]:
        """Record rejected date fields in the audit trail, then re-raise."""
        try:
            yield
        except ValidationError as e:
            for error in e.errors():
                field = error["loc"][-1] if error["loc"] else None
                if field not in _DATE_FIELDS:
                    continue
                value = str(error.get("input"))
                logger.warning("invalid_date_rejected", field=field, value=value)
                if self._audit_logger is not None:
                    self._audit_logger.log_invalid_date(
                        value=value,
                        reason=error["msg"],
                        correlation_id=correlation_id,
                    )
            raise


def create_calendar(
    user_id: Optional[str] = None,
    profile_source: Optional[ProfileSourceInterface] = None,
    audit_sink: Optional[AuditSinkInterface] = None,
    settings: Optional[CalendarSettings] = None,
    clock: Callable[[], datetime] = local_now,
) -> FinancialCalendar:
    """
    Factory function to wire a FinancialCalendar.

    Args:
        user_id: Whose preferences to read.
        profile_source: Profile store. Without one, defaults are used.
        audit_sink: Where audit events are persisted. Without one, events
                    only go to the local log.
    """
    settings = settings or get_settings().calendar
    audit_logger = AuditLogger(audit_sink)

    profile_service = None
    if profile_source is not None:
        profile_service = ProfileSettingsService(
            source=profile_source,
            cache=TTLCache(default_ttl_seconds=settings.profile_cache_ttl_seconds),
            settings=settings,
            audit_logger=audit_logger,
        )

    return FinancialCalendar(
        user_id=user_id,
        profile_service=profile_service,
        audit_logger=audit_logger,
        settings=settings,
        clock=clock,
    )
