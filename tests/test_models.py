"""
Tests for Expense Tracker

Test strategy:
1. Unit tests for individual components (models, validators)
2. Integration tests for flows (with fake external services)
3. No real API calls in tests (use fakes)
"""

import pytest
from datetime import date
from decimal import Decimal
from uuid import uuid4

from expense_tracker.models.finance import (
    ExpenseCategory,
    ExpenseOwner,
    InvestmentAccount,
    Reconciliation,
    RecurrencePlan,
    ScheduledPayment,
    Transaction,
    TransactionDraft,
    TransactionType,
)
from expense_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)


class TestTransactionModels:
    """Tests for ledger Pydantic models."""

    def test_expense_draft_creation(self):
        """Test TransactionDraft creation for an expense."""
        draft = TransactionDraft(
            type=TransactionType.EXPENSE,
            description="Groceries",
            amount=Decimal("54.20"),
            category=ExpenseCategory.FOOD,
        )
        assert draft.amount == Decimal("54.20")
        assert draft.effective_owner == ExpenseOwner.MINE

    def test_description_strips_whitespace(self):
        """Test that whitespace is stripped from descriptions."""
        draft = TransactionDraft(
            type=TransactionType.INCOME,
            description="  Salary  ",
            amount=Decimal("1000"),
        )
        assert draft.description == "Salary"

    def test_rejects_blank_description(self):
        """Test that a whitespace-only description is rejected."""
        with pytest.raises(ValueError):
            TransactionDraft(
                type=TransactionType.INCOME,
                description="   ",
                amount=Decimal("1000"),
            )

    @pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-5")])
    def test_rejects_non_positive_amount(self, amount):
        """Test that zero and negative amounts are rejected."""
        with pytest.raises(ValueError):
            TransactionDraft(
                type=TransactionType.EXPENSE,
                description="Coffee",
                amount=amount,
                category=ExpenseCategory.FOOD,
            )

    def test_expense_requires_category(self):
        """Test that an expense without a category is rejected."""
        with pytest.raises(ValueError, match="Expenses must have a category"):
            TransactionDraft(
                type=TransactionType.EXPENSE,
                description="Coffee",
                amount=Decimal("3.50"),
            )

    def test_income_cannot_have_owner(self):
        """Test that income carries no owner."""
        with pytest.raises(ValueError, match="Income cannot have an owner"):
            TransactionDraft(
                type=TransactionType.INCOME,
                description="Salary",
                amount=Decimal("1000"),
                owner=ExpenseOwner.OTHER,
            )

    def test_income_has_no_effective_owner(self):
        draft = TransactionDraft(
            type=TransactionType.INCOME,
            description="Salary",
            amount=Decimal("1000"),
        )
        assert draft.effective_owner is None

    def test_transaction_is_immutable(self):
        """Test that recorded transactions cannot be edited."""
        transaction = Transaction(
            type=TransactionType.INCOME,
            description="Salary",
            amount=Decimal("1000"),
        )
        with pytest.raises(ValueError):
            transaction.amount = Decimal("2000")


class TestScheduledPaymentModels:
    """Tests for scheduled payment models."""

    def test_scheduled_payment_defaults_unpaid(self):
        payment = ScheduledPayment(
            description="Internet",
            amount=Decimal("45.00"),
            category=ExpenseCategory.INTERNET,
            due_date=date(2024, 5, 1),
            series_id=uuid4(),
        )
        assert payment.paid is False
        assert payment.owner == ExpenseOwner.MINE

    def test_plan_needs_at_least_one_draft(self):
        """Test that an empty recurrence plan is rejected."""
        with pytest.raises(ValueError):
            RecurrencePlan(drafts=[])

    def test_reconciliation_requires_matching_transaction(self):
        """Test that a reconciliation cannot pair unrelated records."""
        payment = ScheduledPayment(
            description="Internet",
            amount=Decimal("45.00"),
            category=ExpenseCategory.INTERNET,
            due_date=date(2024, 5, 1),
            series_id=uuid4(),
            paid=True,
        )
        transaction = Transaction(
            type=TransactionType.EXPENSE,
            description="Internet",
            amount=Decimal("45.00"),
            category=ExpenseCategory.INTERNET,
            scheduled_payment_id=uuid4(),
        )
        with pytest.raises(ValueError, match="does not belong"):
            Reconciliation(payment=payment, transaction=transaction)


class TestInvestmentModels:

    def test_rejects_negative_rate(self):
        with pytest.raises(ValueError):
            InvestmentAccount(name="Bonds", principal=Decimal("100"), rate=Decimal("-1"))

    def test_zero_rate_is_allowed(self):
        account = InvestmentAccount(name="Cash", principal=Decimal("100"), rate=Decimal("0"))
        assert account.rate == Decimal("0")

    def test_rejects_empty_name(self):
        with pytest.raises(ValueError):
            InvestmentAccount(name="", principal=Decimal("100"), rate=Decimal("5"))


class TestAuditModels:
    """Tests for audit event models."""

    def test_audit_event_creation(self):
        """Test AuditEvent creation."""
        event = AuditEvent(
            event_type=AuditEventType.TRANSACTION_ADDED,
            description="Test event",
        )
        assert event.event_type == AuditEventType.TRANSACTION_ADDED
        assert event.severity == AuditSeverity.INFO
        assert event.event_id is not None

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        entity_id = uuid4()
        event = AuditEvent(
            event_type=AuditEventType.TRANSACTION_DELETED,
            entity_type="transaction",
            entity_id=entity_id,
            description="Transaction deleted",
        )
        log_dict = event.to_log_dict()

        assert log_dict["event_type"] == "transaction_deleted"
        assert log_dict["entity_id"] == str(entity_id)
        assert "timestamp" in log_dict

    def test_builder_transaction_added(self):
        """Test AuditEventBuilder for a new transaction."""
        transaction = Transaction(
            type=TransactionType.EXPENSE,
            description="Groceries",
            amount=Decimal("54.20"),
            category=ExpenseCategory.FOOD,
        )
        event = AuditEventBuilder.transaction_added(transaction)

        assert event.entity_id == transaction.id
        assert event.details["amount"] == "54.20"
        assert event.details["category"] == "Food"

    def test_builder_validation_failed_is_warning(self):
        event = AuditEventBuilder.validation_failed(
            operation="add_transaction",
            issues=[{"field": "amount", "type": "non_positive", "message": "bad"}],
        )
        assert event.severity == AuditSeverity.WARNING
        assert event.details["operation"] == "add_transaction"


class TestExpenseCategories:
    """Tests for expense categories."""

    def test_all_categories_exist(self):
        """Test the full category list is available."""
        assert [c.value for c in ExpenseCategory] == [
            "Food", "Gas", "Water", "Housing", "Transportation",
            "Entertainment", "Shopping", "Health", "Electricity",
            "Internet", "Home appliances", "Medication", "Credit Card", "Other",
        ]

    def test_category_from_value(self):
        assert ExpenseCategory("Credit Card") == ExpenseCategory.CREDIT_CARD
