"""
Transaction Ledger

Holds the user's transactions and derives the balance:

    balance = sum(credits) - sum(debits) + outstanding debt

Every debt in the debt ledger is shadowed by one Debt-typed transaction
whose title and amount equal the debt's source and amount. Debt-typed
transactions never count toward the balance themselves; the borrowed
amount is counted once, through the debt ledger's outstanding total.

DESIGN DECISION: The two ledgers never call each other implicitly.
This ledger reads and edits the debt ledger when a transaction change
must be reflected there, and receives debt-ledger changes only through
apply_debt_change(). Nothing applied there is sent back.
"""

from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional, Union

from finance_tracker.audit import AuditLogger
from finance_tracker.config import get_settings
from finance_tracker.ledgers.debts import DebtLedger
from finance_tracker.ledgers.errors import (
    AmountLimitError,
    InsufficientBalanceError,
    TransactionNotFoundError,
)
from finance_tracker.ledgers.filters import DateBound, contains_text, in_range
from finance_tracker.models.debt import Debt, DebtChange, DebtChangeKind
from finance_tracker.models.transaction import (
    CLEARED_TAG,
    BalanceSummary,
    Transaction,
    TransactionSortField,
    TransactionType,
)
from finance_tracker.services.storage import TransactionStorageInterface


def _with_cleared_tag(tags: list[str], is_cleared: bool) -> list[str]:
    tags = [t for t in tags if t != CLEARED_TAG]
    if is_cleared:
        tags.append(CLEARED_TAG)
    return tags


def _mirror_of(debt: Debt) -> Transaction:
    """The Debt-typed transaction shadowing ``debt``."""
    return Transaction(
        title=debt.source,
        amount=debt.amount,
        date=debt.due_date,
        transaction_type=TransactionType.DEBT,
        tags=[CLEARED_TAG] if debt.is_cleared else [],
    )


class TransactionLedger:
    """
    In-memory transaction collection backed by a TransactionStorageInterface.

    Transactions are loaded from storage on first use.
    """

    def __init__(
        self,
        storage: TransactionStorageInterface,
        debt_ledger: DebtLedger,
        audit_logger: Optional[AuditLogger] = None,
        max_amount: Optional[Decimal] = None,
    ):
        self._storage = storage
        self._debts = debt_ledger
        self._audit_logger = audit_logger
        self._max_amount = (
            max_amount if max_amount is not None
            else get_settings().app.max_transaction_amount
        )
        self._transactions: list[Transaction] = []
        self._next_id = 1
        self._loaded = False

    async def load(self) -> None:
        """(Re)load transactions from storage."""
        self._transactions = await self._storage.load_transactions()
        highest = max((t.id for t in self._transactions), default=0)
        self._next_id = max(self._next_id, highest + 1)
        self._loaded = True

    async def _ensure_loaded(self) -> None:
        if not self._loaded:
            await self.load()

    def _index_of(self, transaction_id: int) -> int:
        for index, transaction in enumerate(self._transactions):
            if transaction.id == transaction_id:
                return index
        raise TransactionNotFoundError(transaction_id)

    def _check_amount(self, amount: Decimal) -> None:
        if amount > self._max_amount:
            raise AmountLimitError(
                f"Amount {amount} exceeds the maximum of {self._max_amount}"
            )

    def _find_mirror(
        self,
        source: str,
        amount: Decimal,
        is_cleared: Optional[bool] = None,
    ) -> Optional[int]:
        """
        Index of a Debt-typed transaction shadowing a debt, if any.

        One in the given cleared state is preferred; None means any.
        """
        matches = [
            index for index, t in enumerate(self._transactions)
            if t.is_debt and t.title == source and t.amount == amount
        ]
        preferred = [
            i for i in matches
            if is_cleared is None or self._transactions[i].is_cleared_debt == is_cleared
        ]
        if preferred:
            return preferred[0]
        return matches[0] if matches else None

    async def _append(self, transaction: Transaction) -> Transaction:
        new_transaction = transaction.model_copy(update={"id": self._next_id}, deep=True)
        self._next_id += 1
        await self._storage.append_transaction(new_transaction)
        self._transactions.append(new_transaction)
        return new_transaction

    async def _replace(self, index: int, transaction: Transaction) -> None:
        await self._storage.update_transaction(transaction)
        self._transactions[index] = transaction

    async def _remove(self, index: int) -> Transaction:
        await self._storage.delete_transaction(self._transactions[index].id)
        return self._transactions.pop(index)

    def _count_mirrors(self, source: str, amount: Decimal, is_cleared: bool) -> int:
        return sum(
            1 for t in self._transactions
            if t.is_debt and t.title == source and t.amount == amount
            and t.is_cleared_debt == is_cleared
        )

    async def _register_debt(self, transaction: Transaction) -> None:
        """
        Create the debt shadowed by a Debt-typed transaction.

        Debts and Debt-typed transactions with the same source, amount and
        cleared state pair up one to one; a debt is only created while the
        transactions outnumber the debts.
        """
        source, amount = transaction.title, transaction.amount
        is_cleared = transaction.is_cleared_debt
        debts = await self._debts.count_matching(source, amount, is_cleared)
        if debts < self._count_mirrors(source, amount, is_cleared):
            await self._debts.add_debt(Debt(
                source=transaction.title,
                amount=transaction.amount,
                due_date=transaction.date,
                is_cleared=transaction.is_cleared_debt,
            ))

    async def _contribution(self, transaction: Transaction) -> Decimal:
        """How much ``transaction`` currently adds to the balance."""
        if transaction.transaction_type == TransactionType.CREDIT:
            return transaction.amount
        if transaction.transaction_type == TransactionType.DEBIT:
            return -transaction.amount
        debt = await self._debts.find_matching(
            transaction.title, transaction.amount, prefer_cleared=transaction.is_cleared_debt
        )
        if debt is not None and not debt.is_cleared:
            return debt.amount
        return Decimal("0")

    async def _reject_debit(
        self,
        operation: str,
        required: Decimal,
        available: Decimal,
    ) -> None:
        if self._audit_logger:
            await self._audit_logger.log_insufficient_balance(
                operation=operation,
                required=str(required),
                available=str(available),
            )
        raise InsufficientBalanceError(required, available)

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    async def add_transaction(self, transaction: Transaction) -> Transaction:
        """
        Add a transaction and return it with its assigned id.

        Debits must be covered by the current balance. A Debt-typed
        transaction also registers the matching debt, which raises the
        balance by its amount.

        Raises:
            InsufficientBalanceError: A debit exceeds the balance
            AmountLimitError: The amount exceeds the configured maximum
        """
        await self._ensure_loaded()
        self._check_amount(transaction.amount)

        if transaction.transaction_type == TransactionType.DEBIT:
            available = await self.balance()
            if available < transaction.amount:
                await self._reject_debit("add_transaction", transaction.amount, available)

        new_transaction = await self._append(transaction)
        if new_transaction.is_debt:
            await self._register_debt(new_transaction)

        if self._audit_logger:
            await self._audit_logger.log_transaction_added(
                transaction_id=new_transaction.id,
                transaction_type=new_transaction.transaction_type.value,
                amount=str(new_transaction.amount),
            )
        return new_transaction.model_copy(deep=True)

    async def update_transaction(self, transaction: Transaction) -> Transaction:
        """
        Replace the transaction with ``transaction.id``.

        Changing a Debt-typed transaction to another type removes its debt
        (its outstanding contribution to the balance goes away); changing
        to Debt registers one; editing a debt keeps the debt in step.
        The `cleared` tag follows the debt, so an edit cannot add or drop it.

        Raises:
            TransactionNotFoundError: Unknown id
            InsufficientBalanceError: The edited debit exceeds what the
                balance would be without the transaction it replaces
        """
        await self._ensure_loaded()
        index = self._index_of(transaction.id)
        self._check_amount(transaction.amount)
        previous = self._transactions[index]

        if transaction.transaction_type == TransactionType.DEBIT:
            available = await self.balance() - await self._contribution(previous)
            if available < transaction.amount:
                await self._reject_debit("update_transaction", transaction.amount, available)

        previous_debt = None
        if previous.is_debt:
            previous_debt = await self._debts.find_matching(
                previous.title, previous.amount, prefer_cleared=previous.is_cleared_debt
            )

        updated = transaction.model_copy(deep=True)
        if previous_debt is not None and updated.is_debt:
            # the cleared state belongs to the debt; only clear_debt changes it
            updated = updated.model_copy(update={
                "tags": _with_cleared_tag(updated.tags, previous_debt.is_cleared),
            })
        await self._replace(index, updated)

        if previous_debt is not None and not updated.is_debt:
            await self._debts.remove_debt(previous_debt.id)
        elif previous_debt is not None:
            synced = previous_debt.model_copy(update={
                "source": updated.title,
                "amount": updated.amount,
                "due_date": updated.date,
            })
            if synced != previous_debt:
                await self._debts.update_debt(synced)
        elif updated.is_debt:
            await self._register_debt(updated)

        if self._audit_logger:
            await self._audit_logger.log_transaction_updated(
                transaction_id=updated.id,
                previous_type=previous.transaction_type.value,
                transaction_type=updated.transaction_type.value,
            )
        return updated.model_copy(deep=True)

    async def delete_transaction(self, transaction_id: int) -> Transaction:
        """
        Delete a transaction. Deleting a Debt-typed transaction also
        removes the debt with the same source and amount.
        """
        await self._ensure_loaded()
        removed = await self._remove(self._index_of(transaction_id))

        if removed.is_debt:
            debt = await self._debts.find_matching(
                removed.title, removed.amount, prefer_cleared=removed.is_cleared_debt
            )
            if debt is not None:
                await self._debts.remove_debt(debt.id)

        if self._audit_logger:
            await self._audit_logger.log_transaction_deleted(
                transaction_id=removed.id,
                transaction_type=removed.transaction_type.value,
            )
        return removed

    async def delete_by_debt(
        self,
        debt_source: str,
        debt_amount: Decimal,
    ) -> Optional[Transaction]:
        """Delete the Debt-typed transaction shadowing a debt; the debt is left alone."""
        await self._ensure_loaded()
        index = self._find_mirror(debt_source, debt_amount)
        if index is None:
            return None
        removed = await self._remove(index)
        if self._audit_logger:
            await self._audit_logger.log_transaction_deleted(
                transaction_id=removed.id,
                transaction_type=removed.transaction_type.value,
            )
        return removed

    async def apply_debt_change(self, change: DebtChange) -> Optional[Transaction]:
        """
        Mirror a debt-ledger change into the shadowing transaction.

        - added: create a Debt-typed transaction unless an unpaired one matches
        - updated: copy source, amount and due date onto it
        - cleared: tag it as cleared
        - deleted: remove it

        Returns the transaction that was created, changed or removed.
        """
        await self._ensure_loaded()
        debt = change.debt
        result: Optional[Transaction] = None

        if change.kind == DebtChangeKind.DELETED:
            index = self._find_mirror(debt.source, debt.amount, debt.is_cleared)
            if index is not None:
                result = await self._remove(index)

        elif change.kind == DebtChangeKind.ADDED:
            mirrors = self._count_mirrors(debt.source, debt.amount, debt.is_cleared)
            debts = await self._debts.count_matching(debt.source, debt.amount, debt.is_cleared)
            if mirrors < debts:
                result = await self._append(_mirror_of(debt))

        else:
            before = change.before
            index = self._find_mirror(before.source, before.amount, before.is_cleared)
            if index is None:
                result = await self._append(_mirror_of(debt))
            else:
                mirror = self._transactions[index]
                update = {"tags": _with_cleared_tag(mirror.tags, debt.is_cleared)}
                if change.kind == DebtChangeKind.UPDATED:
                    update.update(title=debt.source, amount=debt.amount, date=debt.due_date)
                result = mirror.model_copy(update=update)
                await self._replace(index, result)

        if self._audit_logger:
            await self._audit_logger.log_debt_mirrored(
                kind=change.kind.value,
                debt_id=debt.id,
                transaction_id=result.id if result else None,
            )
        return result.model_copy(deep=True) if result else None

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    async def list_transactions(self) -> list[Transaction]:
        await self._ensure_loaded()
        return [t.model_copy(deep=True) for t in self._transactions]

    async def get_transaction(self, transaction_id: int) -> Transaction:
        await self._ensure_loaded()
        return self._transactions[self._index_of(transaction_id)].model_copy(deep=True)

    async def search_transactions(
        self,
        title: Optional[str] = None,
        transaction_type: Optional[Union[TransactionType, str]] = None,
        tags: Optional[Iterable[str]] = None,
        date_from: Optional[DateBound] = None,
        date_to: Optional[DateBound] = None,
        sort_by: Optional[Union[TransactionSortField, str]] = None,
        ascending: bool = True,
    ) -> list[Transaction]:
        """
        Search transactions. All given filters must match.

        Args:
            title: Case-insensitive substring of the title
            transaction_type: Only this type
            tags: Transaction must carry at least one of these tags
            date_from: Earliest date (inclusive)
            date_to: Latest date (inclusive)
            sort_by: title, amount or date; insertion order when omitted
            ascending: Sort direction
        """
        await self._ensure_loaded()
        wanted_type = TransactionType(transaction_type) if transaction_type else None
        wanted_tags = set(tags or ())

        results = [
            t.model_copy(deep=True) for t in self._transactions
            if contains_text(t.title, title)
            and (wanted_type is None or t.transaction_type == wanted_type)
            and (not wanted_tags or t.has_any_tag(wanted_tags))
            and in_range(t.date, date_from, date_to)
        ]

        if sort_by is not None:
            field = TransactionSortField(sort_by)
            if field == TransactionSortField.TITLE:
                results.sort(key=lambda t: t.title.casefold(), reverse=not ascending)
            elif field == TransactionSortField.AMOUNT:
                results.sort(key=lambda t: t.amount, reverse=not ascending)
            else:
                results.sort(key=lambda t: t.date, reverse=not ascending)

        return results

    async def top_transactions(self, count: int, highest: bool = True) -> list[Transaction]:
        """The ``count`` largest (or smallest) transactions by amount."""
        await self._ensure_loaded()
        if count <= 0:
            return []
        ranked = sorted(self._transactions, key=lambda t: t.amount, reverse=highest)
        return [t.model_copy(deep=True) for t in ranked[:count]]

    async def pending_debts(self) -> list[Transaction]:
        """Debt-typed transactions dated in the future and not cleared."""
        await self._ensure_loaded()
        return [
            t.model_copy(deep=True) for t in self._transactions
            if t.is_debt
            and not t.is_cleared_debt
            and t.date > datetime.now(t.date.tzinfo)
        ]

    async def existing_tags(self) -> list[str]:
        """Every tag in use, sorted."""
        await self._ensure_loaded()
        return sorted({tag for t in self._transactions for tag in t.tags})

    async def summary(self) -> BalanceSummary:
        await self._ensure_loaded()
        return BalanceSummary(
            total_credits=self._total(TransactionType.CREDIT),
            total_debits=self._total(TransactionType.DEBIT),
            outstanding_debt=await self._debts.total_outstanding(),
            cleared_debt=await self._debts.total_cleared(),
            pending_debt_count=len(await self._debts.pending_debts()),
        )

    async def balance(self) -> Decimal:
        """Credits minus debits plus outstanding debt."""
        await self._ensure_loaded()
        return (
            self._total(TransactionType.CREDIT)
            - self._total(TransactionType.DEBIT)
            + await self._debts.total_outstanding()
        )

    def _total(self, transaction_type: TransactionType) -> Decimal:
        return sum(
            (t.amount for t in self._transactions if t.transaction_type == transaction_type),
            Decimal("0"),
        )
