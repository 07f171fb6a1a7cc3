"""
Tests for Finance Tracker models

Test strategy:
1. Unit tests for models and validation rules
2. Storage and ledger tests against CSV files in a temp directory
3. No test touches the configured data directory
"""

import pytest
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from pydantic import ValidationError

from finance_tracker.models import (
    CLEARED_TAG,
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
    BalanceSummary,
    Debt,
    DebtChange,
    DebtChangeKind,
    NotLoggedInError,
    Session,
    Transaction,
    TransactionType,
    User,
)


class TestTransactionModel:
    """Tests for the Transaction model."""

    def test_transaction_creation(self):
        tx = Transaction(
            title="Salary",
            amount=Decimal("2500.00"),
            date=datetime(2024, 12, 1),
            transaction_type=TransactionType.CREDIT,
        )
        assert tx.id == 0
        assert tx.note is None
        assert tx.tags == []
        assert tx.is_debt is False

    def test_transaction_type_from_string(self):
        tx = Transaction(
            title="Rent",
            amount="800",
            date="2024-12-01T00:00:00",
            transaction_type="Debit",
        )
        assert tx.transaction_type == TransactionType.DEBIT
        assert tx.amount == Decimal("800")

    def test_rejects_negative_amount(self):
        with pytest.raises(ValidationError):
            Transaction(
                title="Refund",
                amount=Decimal("-10"),
                date=datetime(2024, 12, 1),
                transaction_type=TransactionType.CREDIT,
            )

    def test_rejects_more_than_two_decimal_places(self):
        with pytest.raises(ValidationError):
            Transaction(
                title="Coffee",
                amount=Decimal("3.999"),
                date=datetime(2024, 12, 1),
                transaction_type=TransactionType.DEBIT,
            )

    def test_requires_title(self):
        with pytest.raises(ValidationError):
            Transaction(
                title="   ",
                amount=Decimal("1"),
                date=datetime(2024, 12, 1),
                transaction_type=TransactionType.DEBIT,
            )

    def test_rejects_field_delimiter_in_title(self):
        with pytest.raises(ValidationError, match="reserved character"):
            Transaction(
                title="Lunch, dinner",
                amount=Decimal("20"),
                date=datetime(2024, 12, 1),
                transaction_type=TransactionType.DEBIT,
            )

    def test_rejects_line_break_in_note(self):
        with pytest.raises(ValidationError):
            Transaction(
                title="Lunch",
                amount=Decimal("20"),
                date=datetime(2024, 12, 1),
                transaction_type=TransactionType.DEBIT,
                note="first line\nsecond line",
            )

    def test_tags_are_normalized(self):
        tx = Transaction(
            title="Groceries",
            amount=Decimal("45.10"),
            date=datetime(2024, 12, 1),
            transaction_type=TransactionType.DEBIT,
            tags=[" food ", "weekly", "food", ""],
        )
        assert tx.tags == ["food", "weekly"]

    def test_rejects_tag_delimiter_in_tag(self):
        with pytest.raises(ValidationError):
            Transaction(
                title="Groceries",
                amount=Decimal("45.10"),
                date=datetime(2024, 12, 1),
                transaction_type=TransactionType.DEBIT,
                tags=["food;weekly"],
            )

    def test_empty_note_becomes_none(self):
        tx = Transaction(
            title="Bus",
            amount=Decimal("2"),
            date=datetime(2024, 12, 1),
            transaction_type=TransactionType.DEBIT,
            note="",
        )
        assert tx.note is None

    def test_has_any_tag(self):
        tx = Transaction(
            title="Groceries",
            amount=Decimal("45.10"),
            date=datetime(2024, 12, 1),
            transaction_type=TransactionType.DEBIT,
            tags=["food", "weekly"],
        )
        assert tx.has_any_tag(["weekly", "travel"])
        assert not tx.has_any_tag(["travel"])

    def test_cleared_debt_flag(self):
        tx = Transaction(
            title="Bank",
            amount=Decimal("100"),
            date=datetime(2024, 12, 1),
            transaction_type=TransactionType.DEBT,
            tags=[CLEARED_TAG],
        )
        assert tx.is_cleared_debt is True


class TestDebtModel:
    """Tests for the Debt model."""

    def test_pending_when_uncleared_and_due_in_future(self):
        debt = Debt(
            source="Bank",
            amount=Decimal("100"),
            due_date=datetime.now() + timedelta(days=5),
        )
        assert debt.is_pending is True

    def test_not_pending_when_cleared(self):
        debt = Debt(
            source="Bank",
            amount=Decimal("100"),
            due_date=datetime.now() + timedelta(days=5),
            is_cleared=True,
        )
        assert debt.is_pending is False

    def test_not_pending_when_overdue(self):
        debt = Debt(
            source="Bank",
            amount=Decimal("100"),
            due_date=datetime(2020, 1, 1),
        )
        assert debt.is_pending is False

    def test_pending_with_aware_due_date(self):
        debt = Debt(
            source="Bank",
            amount=Decimal("100"),
            due_date=datetime.now(timezone.utc) + timedelta(days=1),
        )
        assert debt.is_pending is True

    def test_can_be_cleared_with(self):
        debt = Debt(source="Bank", amount=Decimal("100"), due_date=datetime(2025, 1, 1))
        assert debt.can_be_cleared_with(Decimal("100"))
        assert not debt.can_be_cleared_with(Decimal("99.99"))

    def test_rejects_delimiter_in_source(self):
        with pytest.raises(ValidationError):
            Debt(source="Bank, Inc", amount=Decimal("1"), due_date=datetime(2025, 1, 1))

    def test_change_before_defaults_to_debt(self):
        debt = Debt(id=1, source="Bank", amount=Decimal("100"), due_date=datetime(2025, 1, 1))
        change = DebtChange(kind=DebtChangeKind.ADDED, debt=debt)
        assert change.before is debt

    def test_change_before_uses_previous(self):
        previous = Debt(id=1, source="Bank", amount=Decimal("100"), due_date=datetime(2025, 1, 1))
        current = previous.model_copy(update={"amount": Decimal("80")})
        change = DebtChange(kind=DebtChangeKind.UPDATED, debt=current, previous=previous)
        assert change.before.amount == Decimal("100")


class TestUserModels:
    """Tests for User and Session."""

    def test_currency_is_upper_cased(self):
        user = User(username="sam", password="secret", currency="npr")
        assert user.currency == "NPR"
        assert user.transactions == []
        assert user.debts == []

    def test_rejects_delimiter_in_password(self):
        with pytest.raises(ValidationError):
            User(username="sam", password="se,cret", currency="USD")

    def test_session_lifecycle(self):
        user = User(username="sam", password="secret", currency="USD")
        session = Session(user=user)
        assert session.is_logged_in is True
        assert session.current_user() is user

        session.end()
        assert session.is_logged_in is False
        assert session.ended_at is not None
        with pytest.raises(NotLoggedInError):
            session.current_user()

    def test_empty_session_is_not_logged_in(self):
        with pytest.raises(NotLoggedInError):
            Session().current_user()


class TestBalanceSummary:
    def test_balance(self):
        summary = BalanceSummary(
            total_credits=Decimal("500"),
            total_debits=Decimal("120"),
            outstanding_debt=Decimal("200"),
            cleared_debt=Decimal("50"),
        )
        assert summary.balance == Decimal("580")


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        event = AuditEvent(
            event_type=AuditEventType.TRANSACTION_ADDED,
            description="Test transaction added",
        )
        assert event.severity == AuditSeverity.INFO
        assert event.is_user_action is False

    def test_audit_event_to_log_dict(self):
        event = AuditEventBuilder.transaction_added(
            transaction_id=7,
            transaction_type="Credit",
            amount="100",
        )
        log_dict = event.to_log_dict()
        assert log_dict["event_type"] == "transaction_added"
        assert log_dict["entity_id"] == "7"
        assert log_dict["details"]["amount"] == "100"

    def test_debt_changed_maps_kind_to_event_type(self):
        event = AuditEventBuilder.debt_changed(
            kind="cleared",
            debt_id=3,
            source="Bank",
            amount="100",
        )
        assert event.event_type == AuditEventType.DEBT_CLEARED
        assert event.entity_type == "debt"

    def test_insufficient_balance_is_a_warning(self):
        event = AuditEventBuilder.insufficient_balance(
            operation="add_transaction",
            required="100",
            available="60",
        )
        assert event.severity == AuditSeverity.WARNING
        assert event.details["available"] == "60"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
