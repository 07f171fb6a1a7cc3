"""Shared fixtures: CSV stores in a temporary directory and ledgers over them."""

from datetime import datetime, timedelta
from decimal import Decimal
from pathlib import Path
from typing import Optional

import pytest

from finance_tracker.audit import AuditLogger
from finance_tracker.ledgers import DebtLedger, TransactionLedger
from finance_tracker.models import Debt, Transaction, TransactionType
from finance_tracker.orchestrator import FinanceBook
from finance_tracker.services.storage import CsvRecordStore
from finance_tracker.users import UserService


PAST = datetime(2024, 1, 15, 10, 30)


@pytest.fixture
def future() -> datetime:
    return (datetime.now() + timedelta(days=30)).replace(microsecond=0)


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    return tmp_path / "data"


@pytest.fixture
def store(data_dir: Path) -> CsvRecordStore:
    return CsvRecordStore(data_dir=data_dir)


@pytest.fixture
def audit_logger() -> AuditLogger:
    return AuditLogger()


@pytest.fixture
def debt_ledger(store: CsvRecordStore, audit_logger: AuditLogger) -> DebtLedger:
    return DebtLedger(store.debts, audit_logger)


@pytest.fixture
def transaction_ledger(
    store: CsvRecordStore,
    debt_ledger: DebtLedger,
    audit_logger: AuditLogger,
) -> TransactionLedger:
    return TransactionLedger(store.transactions, debt_ledger, audit_logger)


@pytest.fixture
def user_service(store: CsvRecordStore, audit_logger: AuditLogger) -> UserService:
    return UserService(store.users, audit_logger)


@pytest.fixture
def book(store: CsvRecordStore, audit_logger: AuditLogger) -> FinanceBook:
    return FinanceBook(
        transaction_storage=store.transactions,
        debt_storage=store.debts,
        user_storage=store.users,
        audit_logger=audit_logger,
    )


@pytest.fixture
def make_transaction():
    def _make(
        title: str,
        amount: str,
        transaction_type: TransactionType,
        date: datetime = PAST,
        tags: Optional[list[str]] = None,
        note: Optional[str] = None,
        id: int = 0,
    ) -> Transaction:
        return Transaction(
            id=id,
            title=title,
            amount=Decimal(amount),
            date=date,
            transaction_type=transaction_type,
            tags=tags or [],
            note=note,
        )
    return _make


@pytest.fixture
def make_debt():
    def _make(
        source: str,
        amount: str,
        due_date: datetime = PAST,
        is_cleared: bool = False,
        id: int = 0,
    ) -> Debt:
        return Debt(
            id=id,
            source=source,
            amount=Decimal(amount),
            due_date=due_date,
            is_cleared=is_cleared,
        )
    return _make
