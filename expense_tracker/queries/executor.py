"""
Derived Data Queries

DESIGN DECISION: Queries are read-only and DETERMINISTIC.
They derive the numbers behind the expense breakdown chart and the
payment calendar from the ledger and the schedule store. Rendering is
left to the UI.
"""

from datetime import date
from decimal import Decimal
from typing import Iterable, Union

from expense_tracker.ledger import Ledger
from expense_tracker.models.finance import (
    ExpenseCategory,
    ExpenseOwner,
    OwnerFilter,
    ScheduledPayment,
    Transaction,
    TransactionType,
)
from expense_tracker.scheduling import ScheduleStore


def _matches_owner(transaction: Transaction, owner_filter: OwnerFilter) -> bool:
    if owner_filter == OwnerFilter.ALL:
        return True
    if owner_filter == OwnerFilter.MINE:
        return transaction.effective_owner == ExpenseOwner.MINE
    return transaction.effective_owner == ExpenseOwner.OTHER


def expense_breakdown(
    transactions: Iterable[Transaction],
    owner_filter: Union[OwnerFilter, str] = OwnerFilter.ALL,
) -> dict[ExpenseCategory, Decimal]:
    """
    Total expense amount per category.

    Categories appear in the order they are first seen. Expenses
    without a category are left out.
    """
    owner_filter = OwnerFilter(owner_filter)
    totals: dict[ExpenseCategory, Decimal] = {}

    for t in transactions:
        if t.type != TransactionType.EXPENSE or t.category is None:
            continue
        if not _matches_owner(t, owner_filter):
            continue
        totals[t.category] = totals.get(t.category, Decimal("0")) + t.amount

    return totals


def has_expenses(transactions: Iterable[Transaction]) -> bool:
    return any(t.type == TransactionType.EXPENSE for t in transactions)


def payment_dates(payments: Iterable[ScheduledPayment]) -> set[date]:
    """Days to mark on the payment calendar."""
    return {p.due_date for p in payments}


class QueryExecutor:
    """
    Runs derived-data queries against the live collections.

    GUARANTEES:
    - Only reads, never mutates
    - Works on a snapshot taken at call time
    """

    def __init__(self, ledger: Ledger, schedule: ScheduleStore):
        self._ledger = ledger
        self._schedule = schedule

    def expense_breakdown(
        self,
        owner_filter: Union[OwnerFilter, str] = OwnerFilter.ALL,
    ) -> dict[ExpenseCategory, Decimal]:
        return expense_breakdown(self._ledger.transactions, owner_filter)

    def has_expenses(self) -> bool:
        return has_expenses(self._ledger.transactions)

    def payment_dates(self) -> set[date]:
        return payment_dates(self._schedule.payments)

    def payments_in_month(self, year: int, month: int) -> list[ScheduledPayment]:
        """Payments due in one calendar month, for the calendar view."""
        return [
            p for p in self._schedule.payments
            if p.due_date.year == year and p.due_date.month == month
        ]
