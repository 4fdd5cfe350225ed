"""
Period Models

A financial period is a month-like window whose boundaries are offset by
the user's month start day instead of the calendar month.
"""

from datetime import date, datetime
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from financial_calendar.utils.dates import format_display_date, start_of_day


class PeriodType(str, Enum):
    """Period types offered by the dashboard period filter."""
    CURRENT_MONTH = "current-month"
    LAST_3_MONTHS = "last-3-months"
    LAST_6_MONTHS = "last-6-months"
    CURRENT_YEAR = "current-year"


class FinancialPeriod(BaseModel):
    """
    A closed [start_date, end_date] window of local time.

    Immutable: a new period is computed for every query.
    end_date is always 23:59:59.999 of its calendar day.
    """
    model_config = ConfigDict(frozen=True)

    start_date: datetime = Field(
        ...,
        description="First instant of the period (local midnight)"
    )
    end_date: datetime = Field(
        ...,
        description="Last instant of the period (23:59:59.999 local)"
    )

    @model_validator(mode='after')
    def validate_order(self) -> 'FinancialPeriod':
        if self.end_date < self.start_date:
            raise ValueError("Period end cannot be before start")
        return self

    def contains(self, moment: Union[date, datetime]) -> bool:
        """Inclusive on both ends. Plain dates are taken at local midnight."""
        if not isinstance(moment, datetime):
            moment = start_of_day(moment)
        return self.start_date <= moment <= self.end_date

    def format(self) -> str:
        """Render as 'dd/mm/yyyy - dd/mm/yyyy'."""
        return f"{format_display_date(self.start_date)} - {format_display_date(self.end_date)}"


class DateBounds(BaseModel):
    """
    Concrete boundaries a relative date range selector resolves to.

    None on either side means that side is open.
    """
    model_config = ConfigDict(frozen=True)

    start: Optional[datetime] = None
    end: Optional[datetime] = None

    def contains(self, moment: datetime) -> bool:
        if self.start is not None and moment < self.start:
            return False
        if self.end is not None and moment > self.end:
            return False
        return True

    @property
    def is_open(self) -> bool:
        """True when neither side is bounded."""
        return self.start is None and self.end is None
