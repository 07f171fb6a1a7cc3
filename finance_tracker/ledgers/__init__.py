"""Ledgers package."""

from finance_tracker.ledgers.debts import DebtLedger
from finance_tracker.ledgers.errors import (
    AmountLimitError,
    DebtAlreadyClearedError,
    DebtNotFoundError,
    InsufficientBalanceError,
    LedgerError,
    TransactionNotFoundError,
)
from finance_tracker.ledgers.transactions import TransactionLedger

__all__ = [
    "AmountLimitError",
    "DebtAlreadyClearedError",
    "DebtLedger",
    "DebtNotFoundError",
    "InsufficientBalanceError",
    "LedgerError",
    "TransactionLedger",
    "TransactionNotFoundError",
]
