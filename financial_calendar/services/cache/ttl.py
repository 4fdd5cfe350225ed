"""
Time-to-live cache.

Entries expire a fixed number of seconds after they are stored. The clock
is injectable so expiry can be tested without sleeping.
"""

import threading
import time
from typing import Any, Callable, Hashable, Optional

from financial_calendar.services.cache.interface import CacheInterface


class TTLCache(CacheInterface):
    """
    In-memory cache with per-entry expiry.

    Expired entries are removed lazily when read.
    """

    def __init__(
        self,
        default_ttl_seconds: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        if default_ttl_seconds < 0:
            raise ValueError("default_ttl_seconds must be >= 0")
        self._default_ttl = default_ttl_seconds
        self._clock = clock
        self._entries: dict[Hashable, tuple[Any, float]] = {}
        self._lock = threading.Lock()

    def get(self, key: Hashable, default: Any = None) -> Any:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return default
            value, expires_at = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return default
            return value

    def set(self, key: Hashable, value: Any, ttl_seconds: Optional[float] = None) -> None:
        ttl = self._default_ttl if ttl_seconds is None else ttl_seconds
        with self._lock:
            self._entries[key] = (value, self._clock() + ttl)

    def invalidate(self, key: Hashable) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        """Number of live entries. Expired ones are purged first."""
        with self._lock:
            now = self._clock()
            expired = [k for k, (_, expires_at) in self._entries.items() if now >= expires_at]
            for key in expired:
                del self._entries[key]
            return len(self._entries)
