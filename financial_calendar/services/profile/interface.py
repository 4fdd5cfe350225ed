"""
Abstract Profile Source Interface

User preferences (the month start day among them) live in the hosted data
store. The date logic only needs to read them, through this interface.
"""

from abc import ABC, abstractmethod
from typing import Any, Mapping, Optional

from financial_calendar.errors import ProfileSourceError


class ProfileSourceInterface(ABC):
    """Read access to a user's general settings."""

    @abstractmethod
    def fetch_general_settings(self, user_id: str) -> Optional[Mapping[str, Any]]:
        """
        Fetch the general settings row for a user.

        Returns:
            The settings mapping, or None if the user has none saved

        Raises:
            ProfileSourceError: If the store could not be reached
        """
        pass


class InMemoryProfileSource(ProfileSourceInterface):
    """Settings held in a dict keyed by user id. For tests and local runs."""

    def __init__(self, settings_by_user: Optional[dict[str, Mapping[str, Any]]] = None):
        self._settings = dict(settings_by_user or {})
        self.fetch_count = 0

    def fetch_general_settings(self, user_id: str) -> Optional[Mapping[str, Any]]:
        self.fetch_count += 1
        return self._settings.get(user_id)

    def update(self, user_id: str, **values: Any) -> None:
        current = dict(self._settings.get(user_id) or {})
        current.update(values)
        self._settings[user_id] = current


__all__ = ["InMemoryProfileSource", "ProfileSourceError", "ProfileSourceInterface"]
