"""
Transaction Ledger

The ledger owns the ordered transaction history (most recent first)
and derives the balances shown in the header.

DESIGN DECISION: Transactions are immutable. The only mutations are
adding (prepend) and deleting. Every committed mutation hands the full
collection to the on_change callback, which is how persistence happens.
"""

from decimal import Decimal
from typing import Callable, Iterable, Optional
from uuid import UUID, uuid4

import structlog

from expense_tracker.models.finance import (
    ExpenseOwner,
    LedgerSummary,
    Transaction,
    TransactionDraft,
    TransactionType,
    utc_now,
)

logger = structlog.get_logger(__name__)

TransactionsChanged = Callable[[list[Transaction]], None]


class Ledger:
    """
    In-memory transaction history.

    Order is significant: index 0 is the most recently recorded transaction.
    """

    def __init__(
        self,
        transactions: Optional[Iterable[Transaction]] = None,
        on_change: Optional[TransactionsChanged] = None,
    ):
        self._transactions: list[Transaction] = list(transactions or [])
        self._on_change = on_change

    @property
    def transactions(self) -> list[Transaction]:
        """Snapshot of the history, most recent first."""
        return list(self._transactions)

    def __len__(self) -> int:
        return len(self._transactions)

    def _changed(self) -> None:
        if self._on_change:
            self._on_change(self.transactions)

    def add(self, draft: TransactionDraft) -> Transaction:
        """Assign id and creation timestamp, then prepend."""
        transaction = Transaction(
            **draft.model_dump(),
            id=uuid4(),
            created_at=utc_now(),
        )
        return self.record(transaction)

    def record(self, transaction: Transaction) -> Transaction:
        """Prepend an already-built transaction."""
        self._transactions.insert(0, transaction)
        self._changed()
        logger.debug(
            "transaction_recorded",
            transaction_id=str(transaction.id),
            type=transaction.type.value,
        )
        return transaction

    def delete(self, transaction_id: UUID) -> bool:
        """Remove a transaction. Unknown ids are a no-op."""
        remaining = [t for t in self._transactions if t.id != transaction_id]
        if len(remaining) == len(self._transactions):
            return False

        self._transactions = remaining
        self._changed()
        return True

    def get(self, transaction_id: UUID) -> Optional[Transaction]:
        return next(
            (t for t in self._transactions if t.id == transaction_id),
            None,
        )

    def find_by_scheduled_payment(self, payment_id: UUID) -> Optional[Transaction]:
        """The transaction reconciled from a scheduled payment, if any."""
        return next(
            (t for t in self._transactions if t.scheduled_payment_id == payment_id),
            None,
        )

    def aggregate(self) -> LedgerSummary:
        """
        Derive the balances.

        Expenses without an owner count as the user's own.
        """
        total_income = Decimal("0")
        my_expenses = Decimal("0")
        other_expenses = Decimal("0")

        for t in self._transactions:
            if t.type == TransactionType.INCOME:
                total_income += t.amount
            elif t.effective_owner == ExpenseOwner.OTHER:
                other_expenses += t.amount
            else:
                my_expenses += t.amount

        total_expenses = my_expenses + other_expenses

        return LedgerSummary(
            total_income=total_income,
            my_expenses=my_expenses,
            other_expenses=other_expenses,
            total_expenses=total_expenses,
            balance=total_income - total_expenses,
        )
