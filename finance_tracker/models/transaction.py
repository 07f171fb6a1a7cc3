"""
Transaction Models

A transaction is a single credit, debit or debt entry made by the user.
Amounts are always non-negative; the transaction type decides whether
the amount adds to or subtracts from the balance.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Iterable, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)

from finance_tracker.models.common import check_flat_text, normalize_tags


# =============================================================================
# ENUMS
# =============================================================================

class TransactionType(str, Enum):
    """Kind of money movement recorded by a transaction."""
    CREDIT = "Credit"
    DEBIT = "Debit"
    DEBT = "Debt"


class TransactionSortField(str, Enum):
    """Fields transactions can be sorted by when searching."""
    TITLE = "title"
    AMOUNT = "amount"
    DATE = "date"


CLEARED_TAG = "cleared"


# =============================================================================
# CORE TRANSACTION MODEL
# =============================================================================

class Transaction(BaseModel):
    """
    A single entry in the transaction ledger.

    An id of 0 means the transaction has not been added yet;
    the ledger assigns the real id.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: int = Field(
        default=0,
        ge=0,
        description="Sequential identifier assigned by the ledger"
    )
    title: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Short description (for debts, the debt source)"
    )
    amount: Decimal = Field(
        ...,
        ge=0,
        decimal_places=2,
        description="Amount, always non-negative"
    )
    date: datetime = Field(
        ...,
        description="When the transaction happened (for debts, the due date)"
    )
    transaction_type: TransactionType
    note: Optional[str] = Field(
        default=None,
        max_length=1000,
    )
    tags: list[str] = Field(default_factory=list)

    @field_validator("title", "note")
    @classmethod
    def validate_flat_text(cls, v: Optional[str]) -> Optional[str]:
        return check_flat_text(v)

    @field_validator("note")
    @classmethod
    def empty_note_is_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v: list[str]) -> list[str]:
        return normalize_tags(v)

    @property
    def is_debt(self) -> bool:
        return self.transaction_type == TransactionType.DEBT

    @property
    def is_cleared_debt(self) -> bool:
        return self.is_debt and CLEARED_TAG in self.tags

    def has_any_tag(self, tags: Iterable[str]) -> bool:
        """True when this transaction shares at least one tag with ``tags``."""
        return not set(self.tags).isdisjoint(tags)


class BalanceSummary(BaseModel):
    """Totals behind the current balance."""

    total_credits: Decimal = Decimal("0")
    total_debits: Decimal = Decimal("0")
    outstanding_debt: Decimal = Decimal("0")
    cleared_debt: Decimal = Decimal("0")
    pending_debt_count: int = Field(default=0, ge=0)

    @property
    def balance(self) -> Decimal:
        return self.total_credits - self.total_debits + self.outstanding_debt
