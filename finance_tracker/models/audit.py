"""
Audit Models for Finance Tracker

Every ledger mutation and session change is described by an AuditEvent.
Events are emitted through the structured logger; they are never edited
after creation.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Transactions
    TRANSACTION_ADDED = "transaction_added"
    TRANSACTION_UPDATED = "transaction_updated"
    TRANSACTION_DELETED = "transaction_deleted"

    # Debts
    DEBT_ADDED = "debt_added"
    DEBT_UPDATED = "debt_updated"
    DEBT_CLEARED = "debt_cleared"
    DEBT_DELETED = "debt_deleted"
    DEBT_MIRRORED = "debt_mirrored"

    # Business rules
    INSUFFICIENT_BALANCE = "insufficient_balance"

    # Users and sessions
    USER_REGISTERED = "user_registered"
    LOGIN_SUCCEEDED = "login_succeeded"
    LOGIN_FAILED = "login_failed"
    SIGNED_OUT = "signed_out"

    # System events
    STORAGE_ERROR = "storage_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """A single audit event."""

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.now,
        description="When the event occurred"
    )

    # Event classification
    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # What entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'transaction', 'debt', 'user')"
    )
    entity_id: Optional[str] = None

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(default_factory=dict)

    error_message: Optional[str] = None
    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.transaction_added(tx_id, "Credit", "100")
        event = AuditEventBuilder.debt_changed("cleared", debt_id, "Bank", "250")
    """

    @staticmethod
    def transaction_added(
        transaction_id: int,
        transaction_type: str,
        amount: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_ADDED,
            entity_type="transaction",
            entity_id=str(transaction_id),
            description=f"{transaction_type} transaction added: {amount}",
            details={
                "transaction_type": transaction_type,
                "amount": amount,
            },
            is_user_action=True,
        )

    @staticmethod
    def transaction_updated(
        transaction_id: int,
        previous_type: str,
        transaction_type: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_UPDATED,
            entity_type="transaction",
            entity_id=str(transaction_id),
            description=f"Transaction {transaction_id} updated",
            details={
                "previous_type": previous_type,
                "transaction_type": transaction_type,
            },
            is_user_action=True,
        )

    @staticmethod
    def transaction_deleted(
        transaction_id: int,
        transaction_type: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_DELETED,
            entity_type="transaction",
            entity_id=str(transaction_id),
            description=f"Transaction {transaction_id} deleted",
            details={"transaction_type": transaction_type},
            is_user_action=True,
        )

    @staticmethod
    def debt_changed(
        kind: str,
        debt_id: int,
        source: str,
        amount: str,
    ) -> AuditEvent:
        event_type = {
            "added": AuditEventType.DEBT_ADDED,
            "updated": AuditEventType.DEBT_UPDATED,
            "cleared": AuditEventType.DEBT_CLEARED,
            "deleted": AuditEventType.DEBT_DELETED,
        }[kind]
        return AuditEvent(
            event_type=event_type,
            entity_type="debt",
            entity_id=str(debt_id),
            description=f"Debt {kind}: {source} - {amount}",
            details={
                "source": source,
                "amount": amount,
            },
            is_user_action=True,
        )

    @staticmethod
    def debt_mirrored(
        kind: str,
        debt_id: int,
        transaction_id: Optional[int],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DEBT_MIRRORED,
            severity=AuditSeverity.DEBUG,
            entity_type="transaction",
            entity_id=str(transaction_id) if transaction_id else None,
            description=f"Debt {debt_id} {kind} mirrored into transactions",
            details={
                "kind": kind,
                "debt_id": debt_id,
            },
        )

    @staticmethod
    def insufficient_balance(
        operation: str,
        required: str,
        available: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INSUFFICIENT_BALANCE,
            severity=AuditSeverity.WARNING,
            description=f"Rejected {operation}: insufficient balance",
            details={
                "operation": operation,
                "required": required,
                "available": available,
            },
            is_user_action=True,
        )

    @staticmethod
    def user_registered(username: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_REGISTERED,
            entity_type="user",
            entity_id=username,
            description=f"User registered: {username}",
            is_user_action=True,
        )

    @staticmethod
    def login_succeeded(username: str, session_id: UUID) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOGIN_SUCCEEDED,
            entity_type="user",
            entity_id=username,
            description=f"User logged in: {username}",
            details={"session_id": str(session_id)},
            is_user_action=True,
        )

    @staticmethod
    def login_failed(username: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOGIN_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="user",
            entity_id=username,
            description=f"Login failed for: {username}",
            is_user_action=True,
        )

    @staticmethod
    def signed_out(username: Optional[str], session_id: UUID) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SIGNED_OUT,
            entity_type="user",
            entity_id=username,
            description="User signed out",
            details={"session_id": str(session_id)},
            is_user_action=True,
        )

    @staticmethod
    def storage_error(
        operation: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"Storage error during {operation}",
            error_message=error_message,
            details={"operation": operation, **(details or {})},
        )
