"""Tests for the transaction ledger."""

from decimal import Decimal
from uuid import uuid4

from expense_tracker.ledger import Ledger
from expense_tracker.models.finance import (
    ExpenseCategory,
    ExpenseOwner,
    Transaction,
    TransactionDraft,
    TransactionType,
)


def _income(amount):
    return TransactionDraft(
        type=TransactionType.INCOME,
        description="Salary",
        amount=Decimal(amount),
    )


def _expense(amount, owner=None, category=ExpenseCategory.FOOD):
    return TransactionDraft(
        type=TransactionType.EXPENSE,
        description="Spend",
        amount=Decimal(amount),
        category=category,
        owner=owner,
    )


class TestLedgerMutations:

    def test_add_assigns_identity_and_prepends(self):
        ledger = Ledger()
        first = ledger.add(_income("100"))
        second = ledger.add(_expense("20"))

        assert first.id != second.id
        assert first.created_at is not None
        assert ledger.transactions == [second, first]

    def test_delete_removes_transaction(self):
        ledger = Ledger()
        kept = ledger.add(_income("100"))
        gone = ledger.add(_expense("20"))

        assert ledger.delete(gone.id) is True
        assert ledger.transactions == [kept]

    def test_delete_unknown_id_is_no_op(self):
        snapshots = []
        ledger = Ledger(on_change=snapshots.append)
        ledger.add(_income("100"))
        snapshots.clear()

        assert ledger.delete(uuid4()) is False
        assert snapshots == []

    def test_on_change_receives_full_collection(self):
        snapshots = []
        ledger = Ledger(on_change=snapshots.append)
        ledger.add(_income("100"))
        ledger.add(_expense("20"))

        assert [len(s) for s in snapshots] == [1, 2]

    def test_snapshot_is_a_copy(self):
        ledger = Ledger()
        ledger.add(_income("100"))
        ledger.transactions.clear()
        assert len(ledger) == 1

    def test_find_by_scheduled_payment(self):
        payment_id = uuid4()
        linked = Transaction(
            type=TransactionType.EXPENSE,
            description="Rent",
            amount=Decimal("900"),
            category=ExpenseCategory.HOUSING,
            scheduled_payment_id=payment_id,
        )
        ledger = Ledger([linked])

        assert ledger.find_by_scheduled_payment(payment_id) == linked
        assert ledger.find_by_scheduled_payment(uuid4()) is None


class TestAggregate:
    """Tests for the derived balances."""

    def test_income_and_split_expenses(self):
        """Test 1000 income, 200 mine, 50 other gives a 750 balance."""
        ledger = Ledger()
        ledger.add(_income("1000"))
        ledger.add(_expense("200", ExpenseOwner.MINE))
        ledger.add(_expense("50", ExpenseOwner.OTHER))

        summary = ledger.aggregate()

        assert summary.total_income == Decimal("1000")
        assert summary.my_expenses == Decimal("200")
        assert summary.other_expenses == Decimal("50")
        assert summary.total_expenses == Decimal("250")
        assert summary.balance == Decimal("750")

    def test_expense_without_owner_counts_as_mine(self):
        ledger = Ledger()
        ledger.add(_expense("30"))

        summary = ledger.aggregate()
        assert summary.my_expenses == Decimal("30")
        assert summary.other_expenses == Decimal("0")

    def test_empty_ledger(self):
        summary = Ledger().aggregate()
        assert summary.balance == Decimal("0")
        assert summary.total_expenses == Decimal("0")

    def test_sums_are_exact(self):
        ledger = Ledger()
        for _ in range(10):
            ledger.add(_expense("0.10"))
        assert ledger.aggregate().my_expenses == Decimal("1.00")

    def test_balance_can_go_negative(self):
        ledger = Ledger()
        ledger.add(_income("100"))
        ledger.add(_expense("150.50"))
        assert ledger.aggregate().balance == Decimal("-50.50")
