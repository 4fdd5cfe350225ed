"""
Abstract Audit Sink Interface

DESIGN DECISION: Audit events can be persisted somewhere other than the
local log (the hosted data store, a file, a test buffer). The sink is an
injected interface so the date logic never depends on a concrete backend.

The interface is intentionally small: append and read back.
"""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from financial_calendar.errors import FinancialCalendarError
from financial_calendar.models.audit import AuditEvent, AuditEventType


class AuditSinkInterface(ABC):
    """
    Abstract interface for audit event persistence.

    Audit events are append-only - we never delete or modify them.
    """

    @abstractmethod
    def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event.

        Returns:
            True if stored successfully

        Raises:
            StorageError: If the backend rejects the write
        """
        pass

    @abstractmethod
    def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """
        Get all events for a correlation ID, in chronological order.
        """
        pass

    @abstractmethod
    def get_recent_events(
        self,
        limit: int = 100,
        event_type: Optional[AuditEventType] = None,
    ) -> list[AuditEvent]:
        """
        Get the most recent events (newest first), optionally of one type.
        """
        pass


class StorageError(FinancialCalendarError):
    """Base exception for sink operations."""
    pass
