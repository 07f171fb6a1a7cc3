"""
Debt Models

A debt is money owed to a source, due by a date. It stays outstanding
until cleared; clearing is a one-way transition.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from finance_tracker.models.common import check_flat_text


class DebtSortField(str, Enum):
    """Fields debts can be sorted by when searching."""
    SOURCE = "source"
    AMOUNT = "amount"
    DUE_DATE = "due_date"


class Debt(BaseModel):
    """A debt tracked by the debt ledger."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: int = Field(
        default=0,
        ge=0,
        description="Sequential identifier assigned by the ledger"
    )
    source: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Who the money is owed to (lender, bank, ...)"
    )
    amount: Decimal = Field(
        ...,
        ge=0,
        decimal_places=2,
    )
    due_date: datetime
    is_cleared: bool = False

    @field_validator("source")
    @classmethod
    def validate_source(cls, v: str) -> str:
        return check_flat_text(v)

    def is_pending_at(self, moment: datetime) -> bool:
        """Not cleared and due after ``moment``."""
        return not self.is_cleared and self.due_date > moment

    @property
    def is_pending(self) -> bool:
        return self.is_pending_at(datetime.now(self.due_date.tzinfo))

    def can_be_cleared_with(self, available_balance: Decimal) -> bool:
        return available_balance >= self.amount

    def matches(self, source: str, amount: Decimal) -> bool:
        return self.source == source and self.amount == amount


class DebtChangeKind(str, Enum):
    """What happened to a debt."""
    ADDED = "added"
    CLEARED = "cleared"
    UPDATED = "updated"
    DELETED = "deleted"


class DebtChange(BaseModel):
    """
    Message describing a debt-ledger mutation.

    ``previous`` holds the debt as it was before an update, which is
    what the mirrored transaction still looks like.
    """

    kind: DebtChangeKind
    debt: Debt
    previous: Optional[Debt] = None

    @property
    def before(self) -> Debt:
        return self.previous or self.debt
