"""
Main Orchestrator for Finance Tracker

Ties the record store, the two ledgers and the user service together.

DESIGN DECISION: Debt operations go through FinanceBook. Each debt-ledger
change comes back as a DebtChange message, which FinanceBook hands to
the transaction ledger with an explicit apply_debt_change() call.
The transaction ledger never forwards anything back, so a change is
applied exactly once.
"""

from pathlib import Path
from typing import Awaitable, Optional

from finance_tracker.audit import AuditLogger
from finance_tracker.ledgers import DebtLedger, TransactionLedger
from finance_tracker.models.debt import Debt, DebtChange
from finance_tracker.models.user import Session, User
from finance_tracker.services.storage import (
    CsvRecordStore,
    DebtStorageInterface,
    StorageError,
    TransactionStorageInterface,
    UserStorageInterface,
)
from finance_tracker.users import UserService


class FinanceBook:
    """
    One user's books: debts, transactions and login.

    Usage:
        book = await FinanceBook.open(data_dir=Path("~/Documents"))
        session = await book.users.authenticate("sam", "secret")
        await book.transactions.add_transaction(...)
        await book.clear_debt(debt_id)
    """

    def __init__(
        self,
        transaction_storage: TransactionStorageInterface,
        debt_storage: DebtStorageInterface,
        user_storage: UserStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self.audit_logger = audit_logger or AuditLogger()
        self.debts = DebtLedger(debt_storage, self.audit_logger)
        self.transactions = TransactionLedger(
            transaction_storage,
            self.debts,
            self.audit_logger,
        )
        self.users = UserService(user_storage, self.audit_logger)

    @classmethod
    async def open(
        cls,
        data_dir: Optional[Path] = None,
        audit_logger: Optional[AuditLogger] = None,
    ) -> "FinanceBook":
        """
        Create a book over the CSV files and load both ledgers.

        Args:
            data_dir: Directory with the CSV files; configured location if None
        """
        store = CsvRecordStore(data_dir) if data_dir else CsvRecordStore.from_settings()
        book = cls(
            transaction_storage=store.transactions,
            debt_storage=store.debts,
            user_storage=store.users,
            audit_logger=audit_logger,
        )
        await book.debts.load()
        await book.transactions.load()
        return book

    async def _forward(self, operation: str, pending: Awaitable[DebtChange]) -> Debt:
        try:
            change = await pending
            await self.transactions.apply_debt_change(change)
        except StorageError as e:
            await self.audit_logger.log_storage_error(
                operation=operation,
                error_message=str(e),
            )
            raise
        return change.debt

    async def add_debt(self, debt: Debt) -> Debt:
        """Record a debt and its shadowing Debt-typed transaction."""
        return await self._forward("add_debt", self.debts.add_debt(debt))

    async def clear_debt(self, debt_id: int) -> Debt:
        """
        Clear a debt using the current balance.

        Raises:
            InsufficientBalanceError: The balance does not cover the debt
        """
        balance = await self.transactions.balance()
        return await self._forward("clear_debt", self.debts.clear_debt(debt_id, balance))

    async def update_debt(self, debt: Debt) -> Debt:
        return await self._forward("update_debt", self.debts.update_debt(debt))

    async def remove_debt(self, debt_id: int) -> Debt:
        return await self._forward("remove_debt", self.debts.remove_debt(debt_id))

    async def populate_user(self, session: Session) -> User:
        """The session's user with its transaction and debt lists filled in."""
        user = session.current_user()
        return user.model_copy(update={
            "transactions": await self.transactions.list_transactions(),
            "debts": await self.debts.list_debts(),
        })
