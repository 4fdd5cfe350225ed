"""Cache package."""

from financial_calendar.services.cache.interface import CacheInterface
from financial_calendar.services.cache.ttl import TTLCache

__all__ = ["CacheInterface", "TTLCache"]
