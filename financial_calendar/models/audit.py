"""
Audit Models for Financial Calendar

Significant decisions made by the date logic are recorded as audit events:
which period was computed, when a fallback was taken, how many occurrences
were projected and whether a safety limit cut a projection short.

DESIGN DECISION: Audit events are append-only. We never modify them.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Periods
    PERIOD_COMPUTED = "period_computed"
    PERIOD_TYPE_FALLBACK = "period_type_fallback"

    # Filtering
    FILTERS_APPLIED = "filters_applied"

    # Projection
    OCCURRENCES_PROJECTED = "occurrences_projected"
    PROJECTION_CAP_REACHED = "projection_cap_reached"

    # Input boundary
    INVALID_DATE_REJECTED = "invalid_date_rejected"

    # Collaborators
    PROFILE_FETCH_FAILED = "profile_fetch_failed"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    Every significant decision creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.now,
        description="When the event occurred (local time)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'period', 'obligation', 'profile')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one dashboard refresh)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.period_computed(period_type, start, end, correlation_id)
        event = AuditEventBuilder.occurrences_projected(parent_id, count, correlation_id)
    """

    @staticmethod
    def period_computed(
        period_type: str,
        month_start_day: int,
        start_date: datetime,
        end_date: datetime,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PERIOD_COMPUTED,
            entity_type="period",
            correlation_id=correlation_id,
            description=f"Computed {period_type} period",
            details={
                "period_type": period_type,
                "month_start_day": month_start_day,
                "start_date": start_date.isoformat(),
                "end_date": end_date.isoformat(),
            },
        )

    @staticmethod
    def period_type_fallback(
        requested: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PERIOD_TYPE_FALLBACK,
            severity=AuditSeverity.WARNING,
            entity_type="period",
            correlation_id=correlation_id,
            description=f"Unknown period type {requested!r}, used current-month",
            details={"requested": requested},
        )

    @staticmethod
    def filters_applied(
        filters: dict,
        input_count: int,
        output_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.FILTERS_APPLIED,
            severity=AuditSeverity.DEBUG,
            entity_type="transaction",
            correlation_id=correlation_id,
            description=f"Filters kept {output_count} of {input_count} transactions",
            details={
                "filters": filters,
                "input_count": input_count,
                "output_count": output_count,
            },
        )

    @staticmethod
    def occurrences_projected(
        parent_id: str,
        count: int,
        months_ahead: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.OCCURRENCES_PROJECTED,
            severity=AuditSeverity.DEBUG,
            entity_type="obligation",
            entity_id=parent_id,
            correlation_id=correlation_id,
            description=f"Projected {count} occurrences over {months_ahead} months",
            details={"count": count, "months_ahead": months_ahead},
        )

    @staticmethod
    def projection_cap_reached(
        parent_id: str,
        cap: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PROJECTION_CAP_REACHED,
            severity=AuditSeverity.WARNING,
            entity_type="obligation",
            entity_id=parent_id,
            correlation_id=correlation_id,
            description=f"Projection stopped at the {cap} iteration cap",
            details={"cap": cap},
        )

    @staticmethod
    def invalid_date_rejected(
        value: str,
        reason: str,
        entity_id: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INVALID_DATE_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_id=entity_id,
            correlation_id=correlation_id,
            description=f"Rejected invalid date {value!r}",
            details={"value": value, "reason": reason},
        )

    @staticmethod
    def profile_fetch_failed(
        user_id: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PROFILE_FETCH_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="profile",
            entity_id=user_id,
            correlation_id=correlation_id,
            description="Could not read profile settings, using defaults",
            error_message=error_message,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
