"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
Currently implements flat CSV files as the backend.
"""

from finance_tracker.services.storage.interface import (
    DebtStorageInterface,
    MalformedRecordError,
    NotFoundError,
    StorageError,
    TransactionStorageInterface,
    UserStorageInterface,
)
from finance_tracker.services.storage.csv_store import (
    DEBT_COLUMNS,
    TRANSACTION_COLUMNS,
    USER_COLUMNS,
    CsvDebtStorage,
    CsvFile,
    CsvRecordStore,
    CsvTransactionStorage,
    CsvUserStorage,
)

__all__ = [
    # Interfaces
    "DebtStorageInterface",
    "TransactionStorageInterface",
    "UserStorageInterface",
    # Exceptions
    "MalformedRecordError",
    "NotFoundError",
    "StorageError",
    # CSV implementation
    "DEBT_COLUMNS",
    "TRANSACTION_COLUMNS",
    "USER_COLUMNS",
    "CsvDebtStorage",
    "CsvFile",
    "CsvRecordStore",
    "CsvTransactionStorage",
    "CsvUserStorage",
]
