"""
Services package.

Collaborators the date logic is given rather than reaching for: the audit
sink, caches and the profile store. Profile services live in
financial_calendar.services.profile.
"""

from financial_calendar.services.cache import CacheInterface, TTLCache
from financial_calendar.services.storage import (
    AuditSinkInterface,
    InMemoryAuditSink,
    StorageError,
)

__all__ = [
    # Caches
    "CacheInterface",
    "TTLCache",
    # Audit sinks
    "AuditSinkInterface",
    "InMemoryAuditSink",
    "StorageError",
]
