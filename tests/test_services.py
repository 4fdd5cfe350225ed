"""
Tests for the cache, profile settings and audit services.
"""

import logging

import pytest

from financial_calendar.audit import (
    AuditLogger,
    configure_logging,
    create_correlation_id,
    get_logger,
)
from financial_calendar.config import CalendarSettings, LoggingSettings
from financial_calendar.models import AuditEventBuilder, AuditEventType
from financial_calendar.services.cache import TTLCache
from financial_calendar.services.profile import (
    InMemoryProfileSource,
    ProfileSettingsService,
    ProfileSourceError,
    ProfileSourceInterface,
    parse_month_start_day,
)
from financial_calendar.services.storage import AuditSinkInterface, InMemoryAuditSink


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FailingSource(ProfileSourceInterface):
    """Fails a fixed number of times, then returns its settings."""

    def __init__(self, failures: int, settings=None):
        self.failures = failures
        self.settings = settings
        self.calls = 0

    def fetch_general_settings(self, user_id):
        self.calls += 1
        if self.calls <= self.failures:
            raise ProfileSourceError("store unavailable")
        return self.settings


class BrokenSink(AuditSinkInterface):
    def append_event(self, event):
        raise RuntimeError("disk full")

    def get_events_by_correlation_id(self, correlation_id):
        return []

    def get_recent_events(self, limit=100, event_type=None):
        return []


@pytest.fixture
def settings():
    return CalendarSettings(
        default_month_start_day=1,
        profile_fetch_attempts=3,
        profile_fetch_backoff_seconds=0,
    )


class TestTTLCache:
    """Tests for TTLCache."""

    def test_get_and_set(self):
        cache = TTLCache(default_ttl_seconds=60)
        cache.set("a", 1)
        assert cache.get("a") == 1
        assert cache.get("missing", "fallback") == "fallback"

    def test_entries_expire(self):
        clock = FakeClock()
        cache = TTLCache(default_ttl_seconds=60, clock=clock)
        cache.set("a", 1)
        clock.advance(59)
        assert cache.get("a") == 1
        clock.advance(1)
        assert cache.get("a") is None
        assert len(cache) == 0

    def test_per_entry_ttl(self):
        clock = FakeClock()
        cache = TTLCache(default_ttl_seconds=60, clock=clock)
        cache.set("short", 1, ttl_seconds=5)
        cache.set("long", 2)
        clock.advance(10)
        assert cache.get("short") is None
        assert cache.get("long") == 2

    def test_invalidate_and_clear(self):
        cache = TTLCache()
        cache.set("a", 1)
        cache.set("b", 2)
        cache.invalidate("a")
        cache.invalidate("never-set")
        assert cache.get("a") is None
        cache.clear()
        assert len(cache) == 0

    def test_len_ignores_expired_entries(self):
        clock = FakeClock()
        cache = TTLCache(default_ttl_seconds=60, clock=clock)
        cache.set("a", 1)
        cache.set("b", 2, ttl_seconds=120)
        clock.advance(90)
        assert len(cache) == 1
        assert cache.get("b") == 2

    def test_rejects_negative_ttl(self):
        with pytest.raises(ValueError):
            TTLCache(default_ttl_seconds=-1)


class TestParseMonthStartDay:
    """Tests for parse_month_start_day."""

    @pytest.mark.parametrize("raw,expected", [
        (10, 10),
        ("15", 15),
        (" 31 ", 31),
        ("1", 1),
        (None, None),
        ("", None),
        ("abc", None),
        ("0", None),
        (32, None),
        (True, None),
        ("10.5", None),
    ])
    def test_values(self, raw, expected):
        assert parse_month_start_day(raw) == expected


class TestProfileSettingsService:
    """Tests for ProfileSettingsService."""

    def test_reads_stored_value(self, settings):
        source = InMemoryProfileSource({"u1": {"month_start_day": "10"}})
        service = ProfileSettingsService(source, settings=settings)
        assert service.get_month_start_day("u1") == 10

    def test_unknown_user_gets_default(self, settings):
        service = ProfileSettingsService(InMemoryProfileSource(), settings=settings)
        assert service.get_month_start_day("nobody") == 1

    def test_invalid_value_gets_default(self, settings):
        source = InMemoryProfileSource({"u1": {"month_start_day": "forty"}})
        service = ProfileSettingsService(source, settings=settings)
        assert service.get_month_start_day("u1") == 1

    def test_result_is_cached(self, settings):
        source = InMemoryProfileSource({"u1": {"month_start_day": 5}})
        service = ProfileSettingsService(source, settings=settings)
        service.get_month_start_day("u1")
        service.get_month_start_day("u1")
        assert source.fetch_count == 1

    def test_invalidate_refetches(self, settings):
        source = InMemoryProfileSource({"u1": {"month_start_day": 5}})
        service = ProfileSettingsService(source, settings=settings)
        assert service.get_month_start_day("u1") == 5
        source.update("u1", month_start_day=20)
        assert service.get_month_start_day("u1") == 5
        service.invalidate("u1")
        assert service.get_month_start_day("u1") == 20

    def test_cache_expiry_refetches(self, settings):
        clock = FakeClock()
        source = InMemoryProfileSource({"u1": {"month_start_day": 5}})
        service = ProfileSettingsService(
            source,
            cache=TTLCache(default_ttl_seconds=30, clock=clock),
            settings=settings,
        )
        service.get_month_start_day("u1")
        clock.advance(31)
        service.get_month_start_day("u1")
        assert source.fetch_count == 2

    def test_retries_transient_failures(self, settings):
        source = FailingSource(failures=2, settings={"month_start_day": 12})
        service = ProfileSettingsService(source, settings=settings)
        assert service.get_month_start_day("u1") == 12
        assert source.calls == 3

    def test_gives_up_and_uses_default(self, settings):
        sink = InMemoryAuditSink()
        source = FailingSource(failures=10)
        service = ProfileSettingsService(
            source, settings=settings, audit_logger=AuditLogger(sink)
        )
        assert service.get_month_start_day("u1") == 1
        assert source.calls == 3

        events = sink.get_recent_events(event_type=AuditEventType.PROFILE_FETCH_FAILED)
        assert len(events) == 1
        assert events[0].entity_id == "u1"

    def test_failure_is_not_cached(self, settings):
        source = FailingSource(failures=3, settings={"month_start_day": 7})
        service = ProfileSettingsService(source, settings=settings)
        assert service.get_month_start_day("u1") == 1
        assert service.get_month_start_day("u1") == 7

    def test_configured_default(self):
        settings = CalendarSettings(default_month_start_day=25, profile_fetch_backoff_seconds=0)
        service = ProfileSettingsService(InMemoryProfileSource(), settings=settings)
        assert service.get_month_start_day("u1") == 25


class TestAuditLogger:
    """Tests for AuditLogger and the in-memory sink."""

    def test_events_reach_sink(self):
        sink = InMemoryAuditSink()
        audit = AuditLogger(sink)
        correlation_id = create_correlation_id()
        audit.log_period_type_fallback("fortnight", correlation_id=correlation_id)
        audit.log_projection_cap_reached("debt-1", 100, correlation_id=correlation_id)

        events = sink.get_events_by_correlation_id(correlation_id)
        assert [e.event_type for e in events] == [
            AuditEventType.PERIOD_TYPE_FALLBACK,
            AuditEventType.PROJECTION_CAP_REACHED,
        ]

    def test_recent_events_newest_first(self):
        sink = InMemoryAuditSink()
        audit = AuditLogger(sink)
        audit.log_error("A", "first")
        audit.log_error("B", "second")
        recent = sink.get_recent_events(limit=1)
        assert recent[0].error_message == "second"

    def test_sink_capacity(self):
        sink = InMemoryAuditSink(max_events=2)
        audit = AuditLogger(sink)
        for i in range(5):
            audit.log_error("E", str(i))
        assert len(sink) == 2
        assert [e.error_message for e in sink.get_recent_events()] == ["4", "3"]

    def test_sink_failure_does_not_raise(self):
        audit = AuditLogger(BrokenSink())
        event = AuditEventBuilder.system_error("X", "boom")
        assert audit.log(event) is False

    def test_without_sink(self):
        assert AuditLogger().log(AuditEventBuilder.system_error("X", "boom")) is True

    def test_fresh_sink_receives_first_event(self):
        """An empty sink still gets written to."""
        sink = InMemoryAuditSink()
        AuditLogger(sink).log(AuditEventBuilder.period_type_fallback("fortnight"))
        assert len(sink) == 1

    def test_get_logger_leaves_root_logging_alone(self, monkeypatch):
        calls = []
        monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))
        get_logger("financial_calendar.tests")
        AuditLogger(InMemoryAuditSink()).log_error("X", "boom")
        assert calls == []

    def test_configure_logging_sets_level(self, monkeypatch):
        calls = []
        monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))
        configure_logging(LoggingSettings(level="debug", json_output=True))
        assert calls[0]["level"] == logging.DEBUG
        assert logging.getLogger("financial_calendar").level == logging.DEBUG
        logging.getLogger("financial_calendar").setLevel(logging.NOTSET)
