"""Derived data queries package."""

from expense_tracker.queries.executor import (
    QueryExecutor,
    expense_breakdown,
    has_expenses,
    payment_dates,
)

__all__ = ["QueryExecutor", "expense_breakdown", "has_expenses", "payment_dates"]
