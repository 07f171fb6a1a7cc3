"""Services package."""

from finance_tracker.services.storage import (
    CsvDebtStorage,
    CsvRecordStore,
    CsvTransactionStorage,
    CsvUserStorage,
    DebtStorageInterface,
    MalformedRecordError,
    NotFoundError,
    StorageError,
    TransactionStorageInterface,
    UserStorageInterface,
)

__all__ = [
    "CsvDebtStorage",
    "CsvRecordStore",
    "CsvTransactionStorage",
    "CsvUserStorage",
    "DebtStorageInterface",
    "MalformedRecordError",
    "NotFoundError",
    "StorageError",
    "TransactionStorageInterface",
    "UserStorageInterface",
]
