"""
Scheduled Payments Package

Recurrence engine, schedule store and the reconciliation bridge
into the ledger.
"""

from expense_tracker.scheduling.recurrence import add_months, expand
from expense_tracker.scheduling.reconciliation import ReconciliationBridge, reconcile
from expense_tracker.scheduling.store import (
    PaymentPaid,
    PaymentsChanged,
    ScheduleStore,
    normalize_day,
)

__all__ = [
    "PaymentPaid",
    "PaymentsChanged",
    "ReconciliationBridge",
    "ScheduleStore",
    "add_months",
    "expand",
    "normalize_day",
    "reconcile",
]
