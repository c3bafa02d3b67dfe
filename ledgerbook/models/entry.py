"""
Core Data Models for Ledgerbook

These models define the schemas for every entry flowing through the ledger.
They are designed to:
1. Reject impossible values at construction time
2. Keep derived values (month key, net amount) consistent with their sources
3. Be cheap to copy into read-only projections

DESIGN DECISION: Amounts are Decimal, never float.
Monthly sums are compared for exact equality in the cache checks, and
float drift would make a correct cache look wrong.
"""

from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PrivateAttr,
    computed_field,
    field_validator,
)

from ledgerbook.validation import month_key_for


# =============================================================================
# ENUMS
# =============================================================================

class EntryKind(str, Enum):
    """
    Income/Expense discriminator.

    The on-disk format has used both the text tokens and the numeric codes
    0/1 over time; in memory there are only these two variants.
    """
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"

    @property
    def label(self) -> str:
        """Human-facing label ("Income" / "Expense")."""
        return self.value.capitalize()

    @property
    def code(self) -> int:
        """Numeric encoding used by older ledger files."""
        return 0 if self is EntryKind.INCOME else 1


# =============================================================================
# ENTRY
# =============================================================================

class Entry(BaseModel):
    """
    One recorded income or expense event.

    Category names are validated by whoever builds the entry; the model
    only insists the label is present and fits on one line of the ledger
    file.
    """
    model_config = ConfigDict(
        str_strip_whitespace=True,
        validate_assignment=True,
    )

    amount: Decimal = Field(
        ...,
        gt=0,
        allow_inf_nan=False,
        description="Positive magnitude of the event"
    )
    timestamp: datetime = Field(
        ...,
        description="When the event happened (naive local time)"
    )
    category: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Free-text category label"
    )
    kind: EntryKind = Field(
        ...,
        description="Income or expense"
    )

    _month_key: Optional[str] = PrivateAttr(default=None)
    _month_key_source: Optional[datetime] = PrivateAttr(default=None)

    @field_validator('timestamp', mode='before')
    @classmethod
    def coerce_timestamp(cls, v):
        """Accept plain dates and normalise aware datetimes to local time."""
        if isinstance(v, date) and not isinstance(v, datetime):
            return datetime.combine(v, time())
        if isinstance(v, datetime) and v.tzinfo is not None:
            return v.astimezone().replace(tzinfo=None)
        return v

    @field_validator('category')
    @classmethod
    def single_line_category(cls, v: str) -> str:
        if "\n" in v or "\r" in v:
            raise ValueError("Category cannot contain line breaks")
        return v

    @property
    def month_key(self) -> str:
        """
        "YYYY-MM" grouping key.

        Derived once and reused; reassigning timestamp causes it to be
        derived again on the next read.
        """
        if self._month_key is None or self._month_key_source != self.timestamp:
            self._month_key = month_key_for(self.timestamp)
            self._month_key_source = self.timestamp
        return self._month_key

    @property
    def day(self) -> date:
        return self.timestamp.date()

    @property
    def is_income(self) -> bool:
        return self.kind is EntryKind.INCOME

    @property
    def formatted_date(self) -> str:
        return self.timestamp.strftime("%Y-%m-%d")

    @property
    def formatted_amount(self) -> str:
        """Signed amount with two decimals, e.g. "+100.00" or "-40.00"."""
        sign = "+" if self.is_income else "-"
        return f"{sign}{self.amount:.2f}"

    @property
    def display_string(self) -> str:
        return (
            f"[{self.formatted_date}] {self.kind.label}: "
            f"{self.formatted_amount} ({self.category})"
        )

    def __eq__(self, other: object) -> bool:
        # The cached month key is derived state and must not affect equality.
        if not isinstance(other, Entry):
            return NotImplemented
        return (
            self.amount == other.amount
            and self.timestamp == other.timestamp
            and self.category == other.category
            and self.kind == other.kind
        )


# =============================================================================
# MONTHLY SUMMARY
# =============================================================================

class MonthlySummary(BaseModel):
    """
    Aggregated totals for one month key.

    CRITICAL: net_amount is computed from the two sums on every read.
    It is never stored, so it cannot drift from them.
    """
    model_config = ConfigDict(frozen=True)

    total_income: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        description="Sum of income amounts"
    )
    total_expenses: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        description="Sum of expense amounts"
    )

    @computed_field
    @property
    def net_amount(self) -> Decimal:
        return self.total_income - self.total_expenses

    @classmethod
    def empty(cls) -> 'MonthlySummary':
        return cls()

    @classmethod
    def from_entries(cls, entries) -> 'MonthlySummary':
        """Sum an iterable of entries by kind."""
        income = Decimal("0")
        expenses = Decimal("0")
        for entry in entries:
            if entry.kind is EntryKind.INCOME:
                income += entry.amount
            else:
                expenses += entry.amount
        return cls(total_income=income, total_expenses=expenses)

    def as_tuple(self) -> tuple[Decimal, Decimal, Decimal]:
        """(income, expenses, net)"""
        return self.total_income, self.total_expenses, self.net_amount
