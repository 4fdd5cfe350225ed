"""
Shared fixtures.

Settings are cached process-wide, so every test starts from a clean cache
and an environment without FINCAL_* overrides.
"""

import os

import pytest

from financial_calendar.config import get_settings


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    for name in list(os.environ):
        if name.startswith("FINCAL_"):
            monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
