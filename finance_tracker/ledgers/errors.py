"""Ledger exceptions."""

from decimal import Decimal


class LedgerError(Exception):
    """Base exception for ledger operations."""
    pass


class TransactionNotFoundError(LedgerError):
    """No transaction with the requested id."""

    def __init__(self, transaction_id: int):
        super().__init__(f"Transaction not found: {transaction_id}")
        self.transaction_id = transaction_id


class DebtNotFoundError(LedgerError):
    """No debt with the requested id."""

    def __init__(self, debt_id: int):
        super().__init__(f"Debt not found: {debt_id}")
        self.debt_id = debt_id


class InsufficientBalanceError(LedgerError):
    """The balance does not cover a debit or a debt clearance."""

    def __init__(self, required: Decimal, available: Decimal):
        super().__init__(
            f"Insufficient balance: {required} required, {available} available"
        )
        self.required = required
        self.available = available


class DebtAlreadyClearedError(LedgerError):
    """The debt was cleared before."""
    pass


class AmountLimitError(LedgerError):
    """An amount exceeds the configured maximum for a single entry."""
    pass
