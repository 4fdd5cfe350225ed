"""
Audit Logger

DESIGN DECISION: Every significant decision in the date logic is logged.
This provides:
1. Traceability of which period and horizon a screen was built from
2. Visibility of silent fallbacks (unknown period types, default start day)
3. Early warning when a projection hits its safety cap

The audit logger:
- Always writes to the local structured log
- Optionally appends to an injected sink
- Never raises if the sink fails
- Supports correlation IDs to trace related events
"""

import logging
import sys
from typing import Optional
from uuid import UUID, uuid4

import structlog

from financial_calendar.config import LoggingSettings, get_settings
from financial_calendar.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditSeverity,
)
from financial_calendar.services.storage import AuditSinkInterface


def _configure_structlog(json_output: bool = True) -> None:
    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


# Configure structlog for local logging. The host application owns the
# standard library handlers; configure_logging() sets them up on request.
_configure_structlog()


def configure_logging(settings: Optional[LoggingSettings] = None) -> None:
    """
    Route log output to stderr at the configured level.

    Intended for applications and scripts that have no logging setup of
    their own. Libraries embedding the package should not call it.
    """
    settings = settings or get_settings().logging
    level = getattr(logging, settings.level)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=level,
    )
    logging.getLogger("financial_calendar").setLevel(level)
    _configure_structlog(settings.json_output)


def get_logger(name: Optional[str] = None):
    return structlog.get_logger(name)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. The injected sink, if any (for persistence)
    """

    def __init__(
        self,
        sink: Optional[AuditSinkInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            sink: Backend for persistence.
                  If None, only logs locally.
        """
        self._sink = sink
        self._logger = get_logger("financial_calendar.audit")

    @property
    def sink(self) -> Optional[AuditSinkInterface]:
        return self._sink

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to the sink if available.

        Returns True if the sink write succeeded (or no sink configured).
        """
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._sink is not None:
            try:
                return self._sink.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_sink_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    def log_period_computed(
        self,
        period_type: str,
        month_start_day: int,
        start_date,
        end_date,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.period_computed(
            period_type=period_type,
            month_start_day=month_start_day,
            start_date=start_date,
            end_date=end_date,
            correlation_id=correlation_id,
        ))

    def log_period_type_fallback(
        self,
        requested: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.period_type_fallback(
            requested=requested,
            correlation_id=correlation_id,
        ))

    def log_filters_applied(
        self,
        filters: dict,
        input_count: int,
        output_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.filters_applied(
            filters=filters,
            input_count=input_count,
            output_count=output_count,
            correlation_id=correlation_id,
        ))

    def log_occurrences_projected(
        self,
        parent_id: str,
        count: int,
        months_ahead: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.occurrences_projected(
            parent_id=parent_id,
            count=count,
            months_ahead=months_ahead,
            correlation_id=correlation_id,
        ))

    def log_projection_cap_reached(
        self,
        parent_id: str,
        cap: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.projection_cap_reached(
            parent_id=parent_id,
            cap=cap,
            correlation_id=correlation_id,
        ))

    def log_invalid_date(
        self,
        value: str,
        reason: str,
        entity_id: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.invalid_date_rejected(
            value=value,
            reason=reason,
            entity_id=entity_id,
            correlation_id=correlation_id,
        ))

    def log_profile_fetch_failed(
        self,
        user_id: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.profile_fetch_failed(
            user_id=user_id,
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a user action (e.g., one dashboard refresh)
    and pass it through all subsequent calls.
    """
    return uuid4()
