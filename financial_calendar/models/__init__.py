"""
Data Models Package

This package contains all Pydantic models used by Financial Calendar.
All data flowing through the date logic must conform to these schemas.
"""

from financial_calendar.models.period import (
    DateBounds,
    FinancialPeriod,
    PeriodType,
)
from financial_calendar.models.obligation import (
    Obligation,
    ObligationStatus,
    RecurrenceType,
    RecurringObligation,
    VirtualOccurrence,
    ensure_persisted,
    parse_obligations,
)
from financial_calendar.models.transaction import (
    DateRangeSelector,
    TagRef,
    TransactionFilters,
    TransactionRecord,
    as_transaction_records,
)
from financial_calendar.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Period models
    "DateBounds",
    "FinancialPeriod",
    "PeriodType",
    # Obligation models
    "Obligation",
    "ObligationStatus",
    "RecurrenceType",
    "RecurringObligation",
    "VirtualOccurrence",
    "ensure_persisted",
    "parse_obligations",
    # Transaction models
    "DateRangeSelector",
    "TagRef",
    "TransactionFilters",
    "TransactionRecord",
    "as_transaction_records",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
