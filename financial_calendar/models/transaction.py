"""
Transaction Models

Transactions arrive from the hosted data store as plain records with a
YYYY-MM-DD `date` field. The date is checked here, at the boundary, so the
filters never see a malformed date.
"""

from decimal import Decimal
from enum import Enum
from typing import Any, Iterable, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from financial_calendar.utils.dates import parse_local_date


class DateRangeSelector(str, Enum):
    """
    Relative date ranges offered by the transaction list.

    Each tag is resolved against the local "now" at call time.
    """
    TODAY = "today"
    THIS_WEEK = "this-week"
    LAST_7_DAYS = "last-7-days"
    CURRENT_MONTH = "current-month"
    LAST_MONTH = "last-month"
    CURRENT_YEAR = "current-year"
    LAST_30_DAYS = "last-30-days"
    ALL = "all"

    @classmethod
    def _missing_(cls, value: object) -> Optional['DateRangeSelector']:
        # Older saved filters use "this-year"
        if value == "this-year":
            return cls.CURRENT_YEAR
        return None


class TagRef(BaseModel):
    """A tag attached to a transaction."""
    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    name: Optional[str] = None


class TransactionRecord(BaseModel):
    """
    A stored transaction as returned by the data store.

    Unknown columns are kept so callers get their full records back.
    """
    model_config = ConfigDict(extra="allow", str_strip_whitespace=True)

    id: Optional[str] = None
    date: str = Field(
        ...,
        description="Transaction date, YYYY-MM-DD"
    )
    description: str = ""
    notes: Optional[str] = None
    type: str = Field(
        default="expense",
        description="income | expense | transfer"
    )
    amount: Decimal = Decimal("0")
    category_id: Optional[str] = None
    account_id: Optional[str] = None
    card_id: Optional[str] = None
    tags: list[TagRef] = Field(default_factory=list)

    @field_validator('date')
    @classmethod
    def validate_date(cls, v: str) -> str:
        """Reject anything that is not a real YYYY-MM-DD date."""
        parse_local_date(v)
        return v

    @field_validator('tags', mode='before')
    @classmethod
    def drop_empty_tags(cls, v):
        """Tag joins can come back with null entries."""
        if v is None:
            return []
        return [tag for tag in v if tag]


class TransactionFilters(BaseModel):
    """
    Filter state of the transaction list.

    "all" or an empty value means the filter is off.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    search: str = ""
    type: str = "all"
    category_id: str = "all"
    account_id: str = "all"
    card_id: str = "all"
    min_amount: Optional[Union[str, Decimal]] = None
    max_amount: Optional[Union[str, Decimal]] = None
    date_range: DateRangeSelector = DateRangeSelector.ALL

    @field_validator('date_range', mode='before')
    @classmethod
    def accept_legacy_tags(cls, v):
        if v == "this-year":
            return DateRangeSelector.CURRENT_YEAR
        return v


def as_transaction_records(
    records: Iterable[Union[TransactionRecord, Mapping[str, Any]]],
) -> list[TransactionRecord]:
    """
    Accept models or raw rows from the data store.

    Raw rows are validated, so a malformed date raises here.
    """
    return [
        record if isinstance(record, TransactionRecord)
        else TransactionRecord.model_validate(record)
        for record in records
    ]
