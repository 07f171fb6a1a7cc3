"""
Data Models Package

This package contains all Pydantic models used in the Finance Tracker.
All records read from or written to storage conform to these schemas.
"""

from finance_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from finance_tracker.models.common import (
    FIELD_DELIMITER,
    TAG_DELIMITER,
)
from finance_tracker.models.debt import (
    Debt,
    DebtChange,
    DebtChangeKind,
    DebtSortField,
)
from finance_tracker.models.transaction import (
    CLEARED_TAG,
    BalanceSummary,
    Transaction,
    TransactionSortField,
    TransactionType,
)
from finance_tracker.models.user import (
    NotLoggedInError,
    Session,
    User,
)

__all__ = [
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
    # Record format
    "FIELD_DELIMITER",
    "TAG_DELIMITER",
    # Debt models
    "Debt",
    "DebtChange",
    "DebtChangeKind",
    "DebtSortField",
    # Transaction models
    "CLEARED_TAG",
    "BalanceSummary",
    "Transaction",
    "TransactionSortField",
    "TransactionType",
    # User models
    "NotLoggedInError",
    "Session",
    "User",
]
