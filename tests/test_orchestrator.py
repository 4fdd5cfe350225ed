"""
Tests for the FinancialCalendar facade.
"""

import pytest
from datetime import date, datetime

from pydantic import ValidationError

from financial_calendar.config import CalendarSettings
from financial_calendar.errors import UnknownPeriodTypeError
from financial_calendar.models import AuditEventType, PeriodType
from financial_calendar.orchestrator import FinancialCalendar, create_calendar
from financial_calendar.services.profile import InMemoryProfileSource
from financial_calendar.services.storage import InMemoryAuditSink


def fixed_clock(moment: datetime):
    return lambda: moment


@pytest.fixture
def settings():
    return CalendarSettings(profile_fetch_backoff_seconds=0)


@pytest.fixture
def sink():
    return InMemoryAuditSink()


@pytest.fixture
def rent():
    return {
        "id": "debt-1",
        "description": "Rent",
        "amount": "1200",
        "due_date": "2024-01-15",
        "is_recurring": True,
        "recurrence_type": "monthly",
    }


def _types(sink):
    return [e.event_type for e in reversed(sink.get_recent_events())]


class TestPeriods:
    """Tests for period resolution through the facade."""

    def test_uses_profile_month_start_day(self, settings, sink):
        calendar = create_calendar(
            user_id="u1",
            profile_source=InMemoryProfileSource({"u1": {"month_start_day": "10"}}),
            audit_sink=sink,
            settings=settings,
            clock=fixed_clock(datetime(2024, 1, 5, 12)),
        )
        period = calendar.current_period()
        assert period.start_date == datetime(2023, 12, 10)
        assert period.end_date == datetime(2024, 1, 9, 23, 59, 59, 999000)

        event = sink.get_recent_events(event_type=AuditEventType.PERIOD_COMPUTED)[0]
        assert event.details["month_start_day"] == 10
        assert event.details["period_type"] == "current-month"

    def test_without_profile_uses_default(self):
        calendar = FinancialCalendar(
            settings=CalendarSettings(default_month_start_day=20),
            clock=fixed_clock(datetime(2024, 1, 5)),
        )
        assert calendar.month_start_day == 20
        assert calendar.current_period().start_date == datetime(2023, 12, 20)

    def test_explicit_reference_date(self, settings):
        calendar = create_calendar(settings=settings, clock=fixed_clock(datetime(2030, 1, 1)))
        period = calendar.period(PeriodType.CURRENT_YEAR, reference_date=date(2024, 6, 1))
        assert period.start_date == datetime(2024, 1, 1)

    def test_unknown_period_type_is_audited(self, settings, sink):
        calendar = create_calendar(
            audit_sink=sink, settings=settings, clock=fixed_clock(datetime(2024, 1, 5))
        )
        period = calendar.period("last-decade")
        assert period.start_date == datetime(2024, 1, 1)
        assert _types(sink) == [
            AuditEventType.PERIOD_TYPE_FALLBACK,
            AuditEventType.PERIOD_COMPUTED,
        ]

    def test_unknown_period_type_strict(self, sink):
        calendar = create_calendar(
            audit_sink=sink,
            settings=CalendarSettings(strict_period_types=True),
            clock=fixed_clock(datetime(2024, 1, 5)),
        )
        with pytest.raises(UnknownPeriodTypeError):
            calendar.period("last-decade")
        assert len(sink) == 0


class TestTransactions:
    """Tests for transaction filtering through the facade."""

    def test_filter_transactions_uses_clock(self, settings, sink):
        calendar = create_calendar(
            audit_sink=sink, settings=settings, clock=fixed_clock(datetime(2024, 3, 14, 15, 30))
        )
        records = [
            {"id": "a", "date": "2024-03-14"},
            {"id": "b", "date": "2024-03-13"},
        ]
        result = calendar.filter_transactions(records, {"date_range": "today"})
        assert [r.id for r in result] == ["a"]

        event = sink.get_recent_events(event_type=AuditEventType.FILTERS_APPLIED)[0]
        assert event.details["input_count"] == 2
        assert event.details["output_count"] == 1
        assert event.details["filters"]["date_range"] == "today"

    def test_transactions_in_period(self, settings):
        calendar = create_calendar(
            user_id="u1",
            profile_source=InMemoryProfileSource({"u1": {"month_start_day": 10}}),
            settings=settings,
            clock=fixed_clock(datetime(2024, 1, 5)),
        )
        records = [
            {"id": "a", "date": "2024-01-09"},
            {"id": "b", "date": "2024-01-10"},
            {"id": "c", "date": "2023-12-10"},
        ]
        assert [r.id for r in calendar.transactions_in_period(records)] == ["a", "c"]

    def test_invalid_date_is_audited_and_raised(self, settings, sink):
        calendar = create_calendar(
            audit_sink=sink, settings=settings, clock=fixed_clock(datetime(2024, 3, 14))
        )
        with pytest.raises(ValidationError):
            calendar.filter_transactions([{"id": "x", "date": "2024-02-30"}], {})

        events = sink.get_recent_events(event_type=AuditEventType.INVALID_DATE_REJECTED)
        assert len(events) == 1
        assert events[0].details["value"] == "2024-02-30"


class TestUpcomingObligations:
    """Tests for upcoming_obligations."""

    def test_current_year_includes_projections(self, settings, sink, rent):
        calendar = create_calendar(
            audit_sink=sink, settings=settings, clock=fixed_clock(datetime(2024, 1, 20))
        )
        result = calendar.upcoming_obligations([rent], PeriodType.CURRENT_YEAR, months_ahead=6)
        assert [o.due_date for o in result] == [
            "2024-01-15", "2024-02-15", "2024-03-15", "2024-04-15",
            "2024-05-15", "2024-06-15", "2024-07-15",
        ]
        assert result[0].is_virtual is False
        assert all(o.is_virtual for o in result[1:])

        projected = sink.get_recent_events(event_type=AuditEventType.OCCURRENCES_PROJECTED)
        assert projected[0].entity_id == "debt-1"
        assert projected[0].details["count"] == 6

    def test_period_limits_projections(self, settings, rent):
        calendar = create_calendar(settings=settings, clock=fixed_clock(datetime(2024, 1, 20)))
        result = calendar.upcoming_obligations([rent], "current-month", months_ahead=6)
        assert [o.id for o in result] == ["debt-1"]

    def test_events_share_correlation_id(self, settings, sink, rent):
        calendar = create_calendar(
            audit_sink=sink, settings=settings, clock=fixed_clock(datetime(2024, 1, 20))
        )
        calendar.upcoming_obligations([rent], "current-year", months_ahead=2)
        correlation_id = sink.get_recent_events()[0].correlation_id
        assert correlation_id is not None
        assert len(sink.get_events_by_correlation_id(correlation_id)) == len(sink)

    def test_cap_reached_is_audited(self, sink, rent):
        calendar = create_calendar(
            audit_sink=sink,
            settings=CalendarSettings(max_projection_iterations=2),
            clock=fixed_clock(datetime(2024, 1, 20)),
        )
        calendar.upcoming_obligations([rent], "current-year", months_ahead=12)
        events = sink.get_recent_events(event_type=AuditEventType.PROJECTION_CAP_REACHED)
        assert [e.entity_id for e in events] == ["debt-1"]

    def test_default_months_ahead_from_settings(self, rent):
        calendar = create_calendar(
            settings=CalendarSettings(default_months_ahead=1),
            clock=fixed_clock(datetime(2024, 1, 20)),
        )
        result = calendar.upcoming_obligations([rent], "current-year")
        assert [o.due_date for o in result] == ["2024-01-15", "2024-02-15"]

    def test_invalid_due_date_is_audited(self, settings, sink, rent):
        calendar = create_calendar(
            audit_sink=sink, settings=settings, clock=fixed_clock(datetime(2024, 1, 20))
        )
        rent["due_date"] = "2024-13-01"
        with pytest.raises(ValidationError):
            calendar.upcoming_obligations([rent], "current-year")
        assert sink.get_recent_events(event_type=AuditEventType.INVALID_DATE_REJECTED)


class TestTransactionsInPeriodTypes:
    """Unknown period types behave the same for periods and transactions."""

    RECORDS = [
        {"id": "a", "date": "2024-01-09"},
        {"id": "b", "date": "2023-12-31"},
    ]

    def test_strict_mode_raises(self, sink):
        calendar = create_calendar(
            audit_sink=sink,
            settings=CalendarSettings(strict_period_types=True),
            clock=fixed_clock(datetime(2024, 1, 5)),
        )
        with pytest.raises(UnknownPeriodTypeError):
            calendar.period("last-decade")
        with pytest.raises(UnknownPeriodTypeError):
            calendar.transactions_in_period(self.RECORDS, "last-decade")

    def test_strict_mode_ignores_global_settings(self, monkeypatch):
        monkeypatch.setenv("FINCAL_STRICT_PERIOD_TYPES", "true")
        calendar = create_calendar(
            settings=CalendarSettings(strict_period_types=False),
            clock=fixed_clock(datetime(2024, 1, 5)),
        )
        assert [r.id for r in calendar.transactions_in_period(self.RECORDS, "last-decade")] == ["a"]

    def test_fallback_is_audited(self, settings, sink):
        calendar = create_calendar(
            audit_sink=sink, settings=settings, clock=fixed_clock(datetime(2024, 1, 5))
        )
        result = calendar.transactions_in_period(self.RECORDS, "last-decade")
        assert [r.id for r in result] == ["a"]
        assert _types(sink) == [
            AuditEventType.PERIOD_TYPE_FALLBACK,
            AuditEventType.PERIOD_COMPUTED,
        ]


class TestPeriodNavigation:
    """Tests for previous_period, next_period and days_until."""

    @pytest.fixture
    def calendar(self, settings, sink):
        return create_calendar(
            user_id="u1",
            profile_source=InMemoryProfileSource({"u1": {"month_start_day": 10}}),
            audit_sink=sink,
            settings=settings,
            clock=fixed_clock(datetime(2024, 1, 5)),
        )

    def test_previous_period(self, calendar):
        period = calendar.previous_period()
        assert period.start_date == datetime(2023, 11, 10)
        assert period.end_date == datetime(2023, 12, 9, 23, 59, 59, 999000)

    def test_next_period(self, calendar):
        period = calendar.next_period()
        assert period.start_date == datetime(2024, 1, 10)
        assert period.end_date == datetime(2024, 2, 9, 23, 59, 59, 999000)

    def test_navigation_from_reference_date(self, calendar):
        assert calendar.next_period(date(2024, 12, 20)).start_date == datetime(2025, 1, 10)

    def test_navigation_is_audited(self, calendar, sink):
        calendar.next_period()
        assert _types(sink) == [AuditEventType.PERIOD_COMPUTED]

    def test_days_until(self, calendar):
        assert calendar.days_until(10) == 5
        assert calendar.days_until(1) == 27
