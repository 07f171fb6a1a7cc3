"""
Abstract Storage Interface

DESIGN DECISION: The ledgers talk to storage only through these interfaces.
The CSV files are the one backend today; tests and future backends
implement the same methods.

The interface is intentionally small: load everything, append one record,
replace one record, delete one record, or rewrite the whole collection.
"""

from abc import ABC, abstractmethod

from finance_tracker.models.debt import Debt
from finance_tracker.models.transaction import Transaction
from finance_tracker.models.user import User


class TransactionStorageInterface(ABC):
    """Persistence operations for transactions."""

    @abstractmethod
    async def load_transactions(self) -> list[Transaction]:
        """
        Load every stored transaction, in file order.

        Raises:
            StorageError: If the file cannot be read
            MalformedRecordError: If a row does not match the schema
        """
        pass

    @abstractmethod
    async def append_transaction(self, transaction: Transaction) -> None:
        """Append a single transaction to storage."""
        pass

    @abstractmethod
    async def update_transaction(self, transaction: Transaction) -> None:
        """
        Replace the stored transaction with the same id.

        Raises:
            NotFoundError: If no stored transaction has that id
        """
        pass

    @abstractmethod
    async def delete_transaction(self, transaction_id: int) -> None:
        """
        Delete the stored transaction with this id.

        Raises:
            NotFoundError: If no stored transaction has that id
        """
        pass

    @abstractmethod
    async def save_transactions(self, transactions: list[Transaction]) -> None:
        """Rewrite storage so it holds exactly ``transactions``."""
        pass


class DebtStorageInterface(ABC):
    """Persistence operations for debts."""

    @abstractmethod
    async def load_debts(self) -> list[Debt]:
        """Load every stored debt, in file order."""
        pass

    @abstractmethod
    async def append_debt(self, debt: Debt) -> None:
        """Append a single debt to storage."""
        pass

    @abstractmethod
    async def update_debt(self, debt: Debt) -> None:
        """
        Replace the stored debt with the same id.

        Raises:
            NotFoundError: If no stored debt has that id
        """
        pass

    @abstractmethod
    async def delete_debt(self, debt_id: int) -> None:
        """
        Delete the stored debt with this id.

        Raises:
            NotFoundError: If no stored debt has that id
        """
        pass

    @abstractmethod
    async def save_debts(self, debts: list[Debt]) -> None:
        """Rewrite storage so it holds exactly ``debts``."""
        pass


class UserStorageInterface(ABC):
    """Persistence operations for user credentials."""

    @abstractmethod
    async def load_users(self) -> list[User]:
        """Load every stored user, in file order."""
        pass

    @abstractmethod
    async def append_user(self, user: User) -> None:
        """Append a single user record."""
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class MalformedRecordError(StorageError):
    """A stored row does not match the expected schema."""
    pass
