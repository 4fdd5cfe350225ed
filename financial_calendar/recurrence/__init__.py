"""Recurring obligation projection package."""

from financial_calendar.recurrence.projector import (
    advance,
    combine_with_virtual_occurrences,
    filter_occurrences_by_period,
    generate_virtual_occurrences,
    projection_horizon,
)

__all__ = [
    "advance",
    "combine_with_virtual_occurrences",
    "filter_occurrences_by_period",
    "generate_virtual_occurrences",
    "projection_horizon",
]
