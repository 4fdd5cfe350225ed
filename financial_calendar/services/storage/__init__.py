"""
Audit Storage Package

Provides the abstract audit sink interface and an in-memory implementation.
"""

from financial_calendar.services.storage.interface import (
    AuditSinkInterface,
    StorageError,
)
from financial_calendar.services.storage.memory import InMemoryAuditSink

__all__ = [
    "AuditSinkInterface",
    "InMemoryAuditSink",
    "StorageError",
]
