"""
Abstract Cache Interface

DESIGN DECISION: Caches are injected, never module-level singletons.
Each consumer receives the cache it should use, so tests get a fresh one
and expiry is explicit per entry.
"""

from abc import ABC, abstractmethod
from typing import Any, Hashable, Optional


class CacheInterface(ABC):
    """Key/value cache with per-entry expiry."""

    @abstractmethod
    def get(self, key: Hashable, default: Any = None) -> Any:
        """
        Return the cached value, or default if missing or expired.
        """
        pass

    @abstractmethod
    def set(self, key: Hashable, value: Any, ttl_seconds: Optional[float] = None) -> None:
        """
        Store a value. ttl_seconds overrides the cache's default expiry.
        """
        pass

    @abstractmethod
    def invalidate(self, key: Hashable) -> None:
        """Drop one entry if present."""
        pass

    @abstractmethod
    def clear(self) -> None:
        """Drop every entry."""
        pass
