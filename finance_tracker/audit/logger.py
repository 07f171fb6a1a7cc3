"""
Audit Logger

DESIGN DECISION: Every ledger mutation and session change is logged.

The audit logger:
- Writes each event to the structured local log
- Keeps the most recent events in memory for display
- Never raises: an audit failure must not undo a completed operation
"""

from collections import deque
from typing import Optional
from uuid import UUID

import structlog

from finance_tracker.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Events go to the structured log and to a bounded in-memory history.
    """

    def __init__(self, history_size: int = 1000):
        self._logger = structlog.get_logger("finance_tracker.audit")
        self._history: deque[AuditEvent] = deque(maxlen=history_size)

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Returns False if the local log write failed.
        """
        self._history.append(event)
        log_dict = event.to_log_dict()

        try:
            if event.severity == AuditSeverity.ERROR:
                self._logger.error("audit_event", **log_dict)
            elif event.severity == AuditSeverity.WARNING:
                self._logger.warning("audit_event", **log_dict)
            elif event.severity == AuditSeverity.DEBUG:
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except (OSError, ValueError):
            return False

        return True

    def recent_events(self, limit: int = 100) -> list[AuditEvent]:
        """Most recent events, newest first."""
        events = list(self._history)[-limit:]
        events.reverse()
        return events

    async def log_transaction_added(
        self,
        transaction_id: int,
        transaction_type: str,
        amount: str,
    ) -> None:
        await self.log(AuditEventBuilder.transaction_added(
            transaction_id=transaction_id,
            transaction_type=transaction_type,
            amount=amount,
        ))

    async def log_transaction_updated(
        self,
        transaction_id: int,
        previous_type: str,
        transaction_type: str,
    ) -> None:
        await self.log(AuditEventBuilder.transaction_updated(
            transaction_id=transaction_id,
            previous_type=previous_type,
            transaction_type=transaction_type,
        ))

    async def log_transaction_deleted(
        self,
        transaction_id: int,
        transaction_type: str,
    ) -> None:
        await self.log(AuditEventBuilder.transaction_deleted(
            transaction_id=transaction_id,
            transaction_type=transaction_type,
        ))

    async def log_debt_changed(
        self,
        kind: str,
        debt_id: int,
        source: str,
        amount: str,
    ) -> None:
        await self.log(AuditEventBuilder.debt_changed(
            kind=kind,
            debt_id=debt_id,
            source=source,
            amount=amount,
        ))

    async def log_debt_mirrored(
        self,
        kind: str,
        debt_id: int,
        transaction_id: Optional[int],
    ) -> None:
        await self.log(AuditEventBuilder.debt_mirrored(
            kind=kind,
            debt_id=debt_id,
            transaction_id=transaction_id,
        ))

    async def log_insufficient_balance(
        self,
        operation: str,
        required: str,
        available: str,
    ) -> None:
        """Log a rejected debit or debt clearance."""
        await self.log(AuditEventBuilder.insufficient_balance(
            operation=operation,
            required=required,
            available=available,
        ))

    async def log_user_registered(self, username: str) -> None:
        await self.log(AuditEventBuilder.user_registered(username))

    async def log_login(
        self,
        username: str,
        session_id: Optional[UUID],
    ) -> None:
        """Log a login attempt; a missing session id means it failed."""
        if session_id is None:
            await self.log(AuditEventBuilder.login_failed(username))
        else:
            await self.log(AuditEventBuilder.login_succeeded(username, session_id))

    async def log_signed_out(
        self,
        username: Optional[str],
        session_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.signed_out(username, session_id))

    async def log_storage_error(
        self,
        operation: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> None:
        """Log a storage failure before it propagates."""
        await self.log(AuditEventBuilder.storage_error(
            operation=operation,
            error_message=error_message,
            details=details,
        ))
