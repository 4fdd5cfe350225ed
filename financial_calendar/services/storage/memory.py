"""
In-memory audit sink.

Keeps events in a list. Used in tests and for single-process deployments
where the local structured log is the real record.
"""

from typing import Optional
from uuid import UUID

from financial_calendar.models.audit import AuditEvent, AuditEventType
from financial_calendar.services.storage.interface import AuditSinkInterface


class InMemoryAuditSink(AuditSinkInterface):
    """Append-only list of audit events."""

    def __init__(self, max_events: Optional[int] = None):
        self._events: list[AuditEvent] = []
        self._max_events = max_events

    def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        if self._max_events is not None and len(self._events) > self._max_events:
            # Oldest events fall off first
            del self._events[: len(self._events) - self._max_events]
        return True

    def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        return [e for e in self._events if e.correlation_id == correlation_id]

    def get_recent_events(
        self,
        limit: int = 100,
        event_type: Optional[AuditEventType] = None,
    ) -> list[AuditEvent]:
        events = [
            e for e in reversed(self._events)
            if event_type is None or e.event_type == event_type
        ]
        return events[:limit]

    def __len__(self) -> int:
        return len(self._events)
