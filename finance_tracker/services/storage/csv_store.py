"""
CSV Storage Implementation

Records live in three plain-text files (users, transactions, debts),
one record per line with a header row. Fields are separated by commas
and tags by semicolons. There is no quoting: the models reject values
that contain a delimiter, and rows are written exactly as joined.

TRADEOFFS:
- No locking: two processes writing at once can interleave lines
- No migration: a file whose header differs from the schema fails to load
- Single-record saves append; updates and deletes rewrite the whole file
"""

from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Callable, Generic, Optional, TypeVar

import structlog

from finance_tracker.config import get_settings
from finance_tracker.models.common import FIELD_DELIMITER, TAG_DELIMITER
from finance_tracker.models.debt import Debt
from finance_tracker.models.transaction import Transaction, TransactionType
from finance_tracker.models.user import User
from finance_tracker.services.storage.interface import (
    DebtStorageInterface,
    MalformedRecordError,
    NotFoundError,
    StorageError,
    TransactionStorageInterface,
    UserStorageInterface,
)


logger = structlog.get_logger(__name__)

# Column layout of each file
USER_COLUMNS = [
    "username",
    "password",
    "currency",
]

TRANSACTION_COLUMNS = [
    "id",
    "title",
    "amount",
    "date",
    "type",
    "note",
    "tags",
]

DEBT_COLUMNS = [
    "id",
    "source",
    "amount",
    "due_date",
    "is_cleared",
]

T = TypeVar("T")


def _parse_bool(value: str) -> bool:
    if value == "True":
        return True
    if value == "False":
        return False
    raise ValueError(f"Expected True or False, got {value!r}")


class CsvFile:
    """
    Low-level access to one delimited file.

    Reads and writes raw rows (lists of strings) and owns the header.
    """

    def __init__(self, path: Path, columns: list[str]):
        self.path = Path(path)
        self.columns = columns

    @property
    def header(self) -> str:
        return FIELD_DELIMITER.join(self.columns)

    def _format_row(self, row: list[str]) -> str:
        if len(row) != len(self.columns):
            raise StorageError(
                f"Row has {len(row)} fields, {self.path.name} expects {len(self.columns)}"
            )
        for value in row:
            if FIELD_DELIMITER in value or "\n" in value or "\r" in value:
                raise StorageError(
                    f"Field {value!r} cannot be written to {self.path.name} "
                    "without breaking the record"
                )
        return FIELD_DELIMITER.join(row)

    def read_rows(self) -> list[tuple[int, list[str]]]:
        """
        Read all data rows as (line_number, fields).

        A missing file reads as empty. Blank lines are ignored.
        """
        if not self.path.exists():
            return []

        try:
            with self.path.open("r", encoding="utf-8", newline="") as f:
                lines = f.read().splitlines()
        except OSError as e:
            logger.error("csv_read_failed", path=str(self.path), error=str(e))
            raise StorageError(f"Failed to read {self.path}: {e}") from e

        if not lines:
            return []

        if lines[0].lstrip("\ufeff") != self.header:
            raise MalformedRecordError(
                f"Unexpected header in {self.path}: {lines[0]!r} "
                f"(expected {self.header!r})"
            )

        rows = []
        for line_number, line in enumerate(lines[1:], start=2):
            if not line:
                continue
            fields = line.split(FIELD_DELIMITER)
            if len(fields) != len(self.columns):
                raise MalformedRecordError(
                    f"{self.path}:{line_number}: expected {len(self.columns)} "
                    f"fields, found {len(fields)}"
                )
            rows.append((line_number, fields))
        return rows

    def append_row(self, row: list[str]) -> None:
        """Append one row, writing the header first if the file is new."""
        line = self._format_row(row)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            is_new = not self.path.exists() or self.path.stat().st_size == 0
            with self.path.open("a", encoding="utf-8", newline="") as f:
                if is_new:
                    f.write(self.header + "\n")
                f.write(line + "\n")
        except OSError as e:
            logger.error("csv_append_failed", path=str(self.path), error=str(e))
            raise StorageError(f"Failed to write {self.path}: {e}") from e

    def write_rows(self, rows: list[list[str]]) -> None:
        """Replace the file contents with the header and ``rows``."""
        lines = [self.header] + [self._format_row(row) for row in rows]
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("w", encoding="utf-8", newline="") as f:
                f.write("\n".join(lines) + "\n")
        except OSError as e:
            logger.error("csv_write_failed", path=str(self.path), error=str(e))
            raise StorageError(f"Failed to write {self.path}: {e}") from e


class CsvTable(Generic[T]):
    """
    Typed view over a CsvFile.

    Converts rows to records and back, and implements the
    append / update / delete-by-id operations shared by the
    transaction and debt stores.
    """

    def __init__(
        self,
        csv_file: CsvFile,
        to_row: Callable[[T], list[str]],
        from_row: Callable[[list[str]], T],
        key: Callable[[T], int],
    ):
        self._file = csv_file
        self._to_row = to_row
        self._from_row = from_row
        self._key = key

    @property
    def path(self) -> Path:
        return self._file.path

    def load(self) -> list[T]:
        records = []
        for line_number, fields in self._file.read_rows():
            try:
                records.append(self._from_row(fields))
            except (ValueError, ArithmeticError) as e:
                raise MalformedRecordError(
                    f"{self._file.path}:{line_number}: {e}"
                ) from e
        logger.debug("csv_loaded", path=str(self._file.path), count=len(records))
        return records

    def append(self, record: T) -> None:
        self._file.append_row(self._to_row(record))

    def save_all(self, records: list[T]) -> None:
        self._file.write_rows([self._to_row(record) for record in records])

    def update(self, record: T) -> None:
        records = self.load()
        for index, existing in enumerate(records):
            if self._key(existing) == self._key(record):
                records[index] = record
                self.save_all(records)
                return
        raise NotFoundError(
            f"No record with id {self._key(record)} in {self._file.path.name}"
        )

    def delete(self, record_id: int) -> None:
        records = self.load()
        remaining = [r for r in records if self._key(r) != record_id]
        if len(remaining) == len(records):
            raise NotFoundError(
                f"No record with id {record_id} in {self._file.path.name}"
            )
        self.save_all(remaining)


# =============================================================================
# ROW CONVERSION
# =============================================================================

def transaction_to_row(transaction: Transaction) -> list[str]:
    """Convert a Transaction to a CSV row."""
    return [
        str(transaction.id),
        transaction.title,
        str(transaction.amount),
        transaction.date.isoformat(),
        transaction.transaction_type.value,
        transaction.note or "",
        TAG_DELIMITER.join(transaction.tags),
    ]


def row_to_transaction(row: list[str]) -> Transaction:
    """Convert a CSV row to a Transaction."""
    return Transaction(
        id=int(row[0]),
        title=row[1],
        amount=Decimal(row[2]),
        date=datetime.fromisoformat(row[3]),
        transaction_type=TransactionType(row[4]),
        note=row[5] or None,
        tags=row[6].split(TAG_DELIMITER) if row[6] else [],
    )


def debt_to_row(debt: Debt) -> list[str]:
    """Convert a Debt to a CSV row."""
    return [
        str(debt.id),
        debt.source,
        str(debt.amount),
        debt.due_date.isoformat(),
        str(debt.is_cleared),
    ]


def row_to_debt(row: list[str]) -> Debt:
    """Convert a CSV row to a Debt."""
    return Debt(
        id=int(row[0]),
        source=row[1],
        amount=Decimal(row[2]),
        due_date=datetime.fromisoformat(row[3]),
        is_cleared=_parse_bool(row[4]),
    )


def user_to_row(user: User) -> list[str]:
    return [user.username, user.password, user.currency]


def row_to_user(row: list[str]) -> User:
    return User(username=row[0], password=row[1], currency=row[2])


# =============================================================================
# STORES
# =============================================================================

class CsvTransactionStorage(TransactionStorageInterface):
    """Transactions stored one per line in a CSV file."""

    def __init__(self, path: Optional[Path] = None):
        path = path or get_settings().storage.transactions_path
        self._table = CsvTable(
            CsvFile(path, TRANSACTION_COLUMNS),
            to_row=transaction_to_row,
            from_row=row_to_transaction,
            key=lambda t: t.id,
        )

    @property
    def path(self) -> Path:
        return self._table.path

    async def load_transactions(self) -> list[Transaction]:
        return self._table.load()

    async def append_transaction(self, transaction: Transaction) -> None:
        self._table.append(transaction)

    async def update_transaction(self, transaction: Transaction) -> None:
        self._table.update(transaction)

    async def delete_transaction(self, transaction_id: int) -> None:
        self._table.delete(transaction_id)

    async def save_transactions(self, transactions: list[Transaction]) -> None:
        self._table.save_all(transactions)


class CsvDebtStorage(DebtStorageInterface):
    """Debts stored one per line in a CSV file."""

    def __init__(self, path: Optional[Path] = None):
        path = path or get_settings().storage.debts_path
        self._table = CsvTable(
            CsvFile(path, DEBT_COLUMNS),
            to_row=debt_to_row,
            from_row=row_to_debt,
            key=lambda d: d.id,
        )

    @property
    def path(self) -> Path:
        return self._table.path

    async def load_debts(self) -> list[Debt]:
        return self._table.load()

    async def append_debt(self, debt: Debt) -> None:
        self._table.append(debt)

    async def update_debt(self, debt: Debt) -> None:
        self._table.update(debt)

    async def delete_debt(self, debt_id: int) -> None:
        self._table.delete(debt_id)

    async def save_debts(self, debts: list[Debt]) -> None:
        self._table.save_all(debts)


class CsvUserStorage(UserStorageInterface):
    """User credentials stored one per line in a CSV file."""

    def __init__(self, path: Optional[Path] = None):
        path = path or get_settings().storage.users_path
        self._file = CsvFile(path, USER_COLUMNS)

    @property
    def path(self) -> Path:
        return self._file.path

    async def load_users(self) -> list[User]:
        users = []
        for line_number, fields in self._file.read_rows():
            try:
                users.append(row_to_user(fields))
            except ValueError as e:
                raise MalformedRecordError(f"{self._file.path}:{line_number}: {e}") from e
        return users

    async def append_user(self, user: User) -> None:
        self._file.append_row(user_to_row(user))


class CsvRecordStore:
    """
    The three CSV stores for one data directory.

    File names left as None come from StorageSettings.

    Usage:
        store = CsvRecordStore.from_settings()
        store = CsvRecordStore(data_dir=tmp_path)
    """

    def __init__(
        self,
        data_dir: Optional[Path] = None,
        users_file: Optional[str] = None,
        transactions_file: Optional[str] = None,
        debts_file: Optional[str] = None,
    ):
        storage = get_settings().storage
        data_dir = Path(data_dir) if data_dir else storage.data_dir
        data_dir = data_dir.expanduser()
        self.users = CsvUserStorage(data_dir / (users_file or storage.users_file))
        self.transactions = CsvTransactionStorage(
            data_dir / (transactions_file or storage.transactions_file)
        )
        self.debts = CsvDebtStorage(data_dir / (debts_file or storage.debts_file))

    @classmethod
    def from_settings(cls) -> "CsvRecordStore":
        return cls()
