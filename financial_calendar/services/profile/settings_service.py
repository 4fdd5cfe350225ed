"""
Profile Settings Service

Resolves the month start day for a user.

The stored value is free-form (the settings form saves it as text), so it
is parsed leniently: anything missing, non-numeric or outside 1..31 falls
back to the configured default. Fetches are retried with exponential
backoff and cached per user in the injected cache.
"""

from typing import Any, Optional
from uuid import UUID

from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from financial_calendar.audit import AuditLogger, get_logger
from financial_calendar.config import CalendarSettings, get_settings
from financial_calendar.errors import ProfileSourceError
from financial_calendar.services.cache import CacheInterface, TTLCache
from financial_calendar.services.profile.interface import ProfileSourceInterface
from financial_calendar.utils.dates import validate_day

logger = get_logger(__name__)

MONTH_START_DAY_KEY = "month_start_day"


def parse_month_start_day(raw: Any) -> Optional[int]:
    """
    Parse a stored month start day.

    Accepts ints and numeric strings ("15", " 15 "). Returns None for
    missing values, garbage, or values outside 1..31.
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        value = raw
    else:
        try:
            value = int(str(raw).strip())
        except ValueError:
            return None
    if not validate_day(value):
        return None
    return value


class ProfileSettingsService:
    """
    Reads per-user calendar preferences through a ProfileSourceInterface.

    Failures of the store never break the caller: after the retries are
    exhausted the default is returned and the failure is logged.
    """

    def __init__(
        self,
        source: ProfileSourceInterface,
        cache: Optional[CacheInterface] = None,
        settings: Optional[CalendarSettings] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._source = source
        self._settings = settings or get_settings().calendar
        self._cache = cache if cache is not None else TTLCache(
            default_ttl_seconds=self._settings.profile_cache_ttl_seconds
        )
        self._audit_logger = audit_logger
        backoff = self._settings.profile_fetch_backoff_seconds
        self._retrying = Retrying(
            stop=stop_after_attempt(self._settings.profile_fetch_attempts),
            wait=wait_exponential(multiplier=backoff, min=backoff, max=10 * backoff),
            retry=retry_if_exception_type(ProfileSourceError),
            reraise=True,
        )

    @property
    def default_month_start_day(self) -> int:
        return self._settings.default_month_start_day

    def _cache_key(self, user_id: str) -> tuple[str, str]:
        return (MONTH_START_DAY_KEY, user_id)

    def get_month_start_day(
        self,
        user_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> int:
        """Month start day for the user, or the configured default."""
        key = self._cache_key(user_id)
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        try:
            general = self._retrying(self._source.fetch_general_settings, user_id)
        except ProfileSourceError as e:
            logger.error(
                "profile_fetch_failed",
                user_id=user_id,
                error=str(e),
            )
            if self._audit_logger is not None:
                self._audit_logger.log_profile_fetch_failed(
                    user_id=user_id,
                    error_message=str(e),
                    correlation_id=correlation_id,
                )
            # Not cached: the next call tries the store again
            return self.default_month_start_day

        raw = (general or {}).get(MONTH_START_DAY_KEY)
        month_start_day = parse_month_start_day(raw)
        if month_start_day is None:
            if raw is not None:
                logger.warning(
                    "month_start_day_defaulted",
                    user_id=user_id,
                    stored=str(raw),
                    used=self.default_month_start_day,
                )
            month_start_day = self.default_month_start_day

        self._cache.set(key, month_start_day)
        return month_start_day

    def invalidate(self, user_id: str) -> None:
        """Forget the cached value after the user changes their settings."""
        self._cache.invalidate(self._cache_key(user_id))
