"""
Debt Ledger

Holds the user's debts in memory and persists every change through the
debt store. Each mutating operation returns a DebtChange message; the
caller decides who else needs to hear about it (see FinanceBook).

Identifiers are assigned as one more than the highest id seen, so they
only grow while the ledger is alive, even after deletions.
"""

from decimal import Decimal
from typing import Optional, Union

from finance_tracker.audit import AuditLogger
from finance_tracker.config import get_settings
from finance_tracker.ledgers.errors import (
    AmountLimitError,
    DebtAlreadyClearedError,
    DebtNotFoundError,
    InsufficientBalanceError,
)
from finance_tracker.ledgers.filters import DateBound, contains_text, in_range
from finance_tracker.models.debt import Debt, DebtChange, DebtChangeKind, DebtSortField
from finance_tracker.services.storage import DebtStorageInterface


class DebtLedger:
    """
    In-memory debt collection backed by a DebtStorageInterface.

    Debts are loaded from storage on first use.
    """

    def __init__(
        self,
        storage: DebtStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
        max_amount: Optional[Decimal] = None,
    ):
        self._storage = storage
        self._audit_logger = audit_logger
        self._max_amount = (
            max_amount if max_amount is not None
            else get_settings().app.max_transaction_amount
        )
        self._debts: list[Debt] = []
        self._next_id = 1
        self._loaded = False

    async def load(self) -> None:
        """(Re)load debts from storage."""
        self._debts = await self._storage.load_debts()
        highest = max((d.id for d in self._debts), default=0)
        self._next_id = max(self._next_id, highest + 1)
        self._loaded = True

    async def _ensure_loaded(self) -> None:
        if not self._loaded:
            await self.load()

    def _index_of(self, debt_id: int) -> int:
        for index, debt in enumerate(self._debts):
            if debt.id == debt_id:
                return index
        raise DebtNotFoundError(debt_id)

    def _check_amount(self, amount: Decimal) -> None:
        if amount > self._max_amount:
            raise AmountLimitError(
                f"Amount {amount} exceeds the maximum of {self._max_amount}"
            )

    async def _audit(self, change: DebtChange) -> None:
        if self._audit_logger:
            await self._audit_logger.log_debt_changed(
                kind=change.kind.value,
                debt_id=change.debt.id,
                source=change.debt.source,
                amount=str(change.debt.amount),
            )

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    async def add_debt(self, debt: Debt) -> DebtChange:
        """Assign the next id to ``debt`` and append it to storage."""
        await self._ensure_loaded()
        self._check_amount(debt.amount)

        new_debt = debt.model_copy(update={"id": self._next_id}, deep=True)
        self._next_id += 1

        await self._storage.append_debt(new_debt)
        self._debts.append(new_debt)

        change = DebtChange(kind=DebtChangeKind.ADDED, debt=new_debt.model_copy())
        await self._audit(change)
        return change

    async def clear_debt(
        self,
        debt_id: int,
        available_balance: Decimal,
    ) -> DebtChange:
        """
        Mark a debt as cleared.

        Raises:
            DebtNotFoundError: Unknown id
            DebtAlreadyClearedError: The debt was cleared before
            InsufficientBalanceError: ``available_balance`` is below the amount;
                the debt is left untouched
        """
        await self._ensure_loaded()
        index = self._index_of(debt_id)
        debt = self._debts[index]

        if debt.is_cleared:
            raise DebtAlreadyClearedError(f"Debt {debt_id} is already cleared")

        if not debt.can_be_cleared_with(available_balance):
            if self._audit_logger:
                await self._audit_logger.log_insufficient_balance(
                    operation="clear_debt",
                    required=str(debt.amount),
                    available=str(available_balance),
                )
            raise InsufficientBalanceError(debt.amount, available_balance)

        cleared = debt.model_copy(update={"is_cleared": True}, deep=True)
        await self._storage.update_debt(cleared)
        self._debts[index] = cleared

        change = DebtChange(
            kind=DebtChangeKind.CLEARED,
            debt=cleared.model_copy(),
            previous=debt,
        )
        await self._audit(change)
        return change

    async def update_debt(self, debt: Debt) -> DebtChange:
        """Replace the stored fields of the debt with ``debt.id``."""
        await self._ensure_loaded()
        index = self._index_of(debt.id)
        self._check_amount(debt.amount)

        previous = self._debts[index]
        updated = debt.model_copy(deep=True)
        await self._storage.update_debt(updated)
        self._debts[index] = updated

        change = DebtChange(
            kind=DebtChangeKind.UPDATED,
            debt=updated.model_copy(),
            previous=previous,
        )
        await self._audit(change)
        return change

    async def remove_debt(self, debt_id: int) -> DebtChange:
        await self._ensure_loaded()
        index = self._index_of(debt_id)

        await self._storage.delete_debt(debt_id)
        removed = self._debts.pop(index)

        change = DebtChange(kind=DebtChangeKind.DELETED, debt=removed)
        await self._audit(change)
        return change

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    async def list_debts(self) -> list[Debt]:
        await self._ensure_loaded()
        return [d.model_copy() for d in self._debts]

    async def get_debt(self, debt_id: int) -> Debt:
        await self._ensure_loaded()
        return self._debts[self._index_of(debt_id)].model_copy()

    async def search_debts(
        self,
        source: Optional[str] = None,
        date_from: Optional[DateBound] = None,
        date_to: Optional[DateBound] = None,
        sort_by: Optional[Union[DebtSortField, str]] = None,
        ascending: bool = True,
    ) -> list[Debt]:
        """
        Search debts. All given filters must match.

        Args:
            source: Case-insensitive substring of the debt source
            date_from: Earliest due date (inclusive)
            date_to: Latest due date (inclusive)
            sort_by: source, amount or due_date; file order when omitted
            ascending: Sort direction
        """
        await self._ensure_loaded()
        results = [
            d.model_copy() for d in self._debts
            if contains_text(d.source, source)
            and in_range(d.due_date, date_from, date_to)
        ]

        if sort_by is not None:
            field = DebtSortField(sort_by)
            if field == DebtSortField.SOURCE:
                results.sort(key=lambda d: d.source.casefold(), reverse=not ascending)
            elif field == DebtSortField.AMOUNT:
                results.sort(key=lambda d: d.amount, reverse=not ascending)
            else:
                results.sort(key=lambda d: d.due_date, reverse=not ascending)

        return results

    async def pending_debts(self) -> list[Debt]:
        """Debts not cleared and not yet due."""
        await self._ensure_loaded()
        return [d.model_copy() for d in self._debts if d.is_pending]

    async def find_matching(
        self,
        source: str,
        amount: Decimal,
        prefer_cleared: bool = False,
    ) -> Optional[Debt]:
        """
        First debt with exactly this source and amount.

        Debts whose cleared flag equals ``prefer_cleared`` come first.
        """
        await self._ensure_loaded()
        matches = [d for d in self._debts if d.matches(source, amount)]
        if not matches:
            return None
        preferred = [d for d in matches if d.is_cleared == prefer_cleared]
        return (preferred or matches)[0].model_copy()

    async def count_matching(self, source: str, amount: Decimal, is_cleared: bool) -> int:
        """Number of debts with this source, amount and cleared state."""
        await self._ensure_loaded()
        return sum(
            1 for d in self._debts
            if d.matches(source, amount) and d.is_cleared == is_cleared
        )

    async def total_outstanding(self) -> Decimal:
        """Sum of amounts of debts not yet cleared."""
        await self._ensure_loaded()
        return sum((d.amount for d in self._debts if not d.is_cleared), Decimal("0"))

    async def total_cleared(self) -> Decimal:
        await self._ensure_loaded()
        return sum((d.amount for d in self._debts if d.is_cleared), Decimal("0"))
