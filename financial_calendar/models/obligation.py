"""
Obligation Models

Debts and receivables share one shape: a due date, an amount and optional
recurrence metadata. They exist in two variants:

- RecurringObligation: a record stored in the data store ("stored")
- VirtualOccurrence: a projected future instance, never persisted ("virtual")

CRITICAL: Only stored obligations may be mutated (marked paid, edited).
A virtual occurrence must first be promoted to a stored record by the
persistence layer. Code that mutates must call ensure_persisted() and
branch on the variant.
"""

from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Iterable, Literal, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    field_validator,
)

from financial_calendar.errors import VirtualOccurrenceError
from financial_calendar.utils.dates import parse_local_date


class RecurrenceType(str, Enum):
    """Cadence of a recurring obligation."""
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class ObligationStatus(str, Enum):
    """Settlement status of a debt or receivable."""
    PENDING = "pending"
    PAID = "paid"
    OVERDUE = "overdue"
    RECEIVED = "received"


class ObligationFields(BaseModel):
    """Descriptive fields shared by stored and virtual obligations."""
    model_config = ConfigDict(str_strip_whitespace=True)

    description: str = Field(
        ...,
        min_length=1,
        max_length=500,
        description="What the obligation is for"
    )
    amount: Decimal = Field(
        ...,
        ge=0,
        description="Amount due"
    )
    due_date: str = Field(
        ...,
        description="Due date, YYYY-MM-DD"
    )
    notes: Optional[str] = None
    account_id: Optional[str] = None
    category_id: Optional[str] = None

    # Recurrence metadata
    is_recurring: bool = False
    recurrence_type: Optional[RecurrenceType] = None
    max_occurrences: Optional[int] = Field(
        default=None,
        ge=0,
        description="Total occurrences allowed; 0 or None means unlimited"
    )
    current_count: Optional[int] = Field(
        default=None,
        ge=0,
        description="Sequence number of this record within its series"
    )
    recurrence_end_date: Optional[str] = Field(
        default=None,
        description="Last allowed due date, YYYY-MM-DD"
    )

    # Credit card bill linkage
    card_id: Optional[str] = None
    is_card_bill: Optional[bool] = None
    bill_month: Optional[int] = Field(default=None, ge=1, le=12)
    bill_year: Optional[int] = None
    installment_id: Optional[str] = None
    installment_number: Optional[int] = None

    @field_validator('due_date')
    @classmethod
    def validate_due_date(cls, v: str) -> str:
        parse_local_date(v)
        return v

    @field_validator('recurrence_end_date')
    @classmethod
    def validate_end_date(cls, v: Optional[str]) -> Optional[str]:
        # The data store sends "" for a cleared end date
        if not v:
            return None
        parse_local_date(v)
        return v


class RecurringObligation(ObligationFields):
    """
    A debt or receivable as stored in the data store.

    Recurrence is optional: with is_recurring False this is a one-off.
    """
    kind: Literal["stored"] = "stored"

    id: str = Field(
        ...,
        min_length=1,
        description="Identifier assigned by the data store"
    )
    status: ObligationStatus = Field(
        default=ObligationStatus.PENDING,
        description="Settlement status"
    )

    @property
    def is_virtual(self) -> bool:
        return False


class VirtualOccurrence(ObligationFields):
    """
    A projected future instance of a recurring obligation.

    Derived on demand for display and discarded afterwards. Frozen, always
    pending, and carries a back-reference to its stored parent.
    """
    model_config = ConfigDict(frozen=True)

    kind: Literal["virtual"] = "virtual"

    id: str = Field(
        ...,
        description="Synthetic id: virtual-{parent_id}-{occurrence_number}"
    )
    parent_id: str = Field(
        ...,
        description="Id of the stored obligation this was projected from"
    )
    occurrence_number: int = Field(
        ...,
        ge=1,
        description="1-based position in the series"
    )
    status: ObligationStatus = ObligationStatus.PENDING
    is_virtual: Literal[True] = True

    @field_validator('status')
    @classmethod
    def validate_status(cls, v: ObligationStatus) -> ObligationStatus:
        """Virtual occurrences cannot be settled."""
        if v != ObligationStatus.PENDING:
            raise ValueError("Virtual occurrences are always pending")
        return v

    @staticmethod
    def make_id(parent_id: str, occurrence_number: int) -> str:
        return f"virtual-{parent_id}-{occurrence_number}"


Obligation = Annotated[
    Union[RecurringObligation, VirtualOccurrence],
    Field(discriminator="kind"),
]

_obligation_list_adapter = TypeAdapter(list[Obligation])


def parse_obligations(rows: Iterable[dict[str, Any]]) -> list[Union[RecurringObligation, VirtualOccurrence]]:
    """
    Validate raw rows from the data store into obligation models.

    Rows without a `kind` are classified by their `is_virtual` flag.
    """
    prepared = []
    for row in rows:
        row = dict(row)
        row.setdefault("kind", "virtual" if row.get("is_virtual") else "stored")
        prepared.append(row)
    return _obligation_list_adapter.validate_python(prepared)


def ensure_persisted(
    obligation: Union[RecurringObligation, VirtualOccurrence],
) -> RecurringObligation:
    """
    Return the obligation if it is a stored record.

    Raises:
        VirtualOccurrenceError: for projected occurrences, which must be
            promoted to a stored record before they can be changed.
    """
    if isinstance(obligation, VirtualOccurrence):
        raise VirtualOccurrenceError(
            f"Occurrence {obligation.id} of {obligation.parent_id} is virtual "
            "and must be saved before it can be changed"
        )
    return obligation
