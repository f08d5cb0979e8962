"""
Reconciliation Bridge

Turns a scheduled payment into a realized ledger expense when the user
marks it as paid.

DESIGN DECISION: reconcile() is a pure function that produces the paid
payment AND the new transaction together (a Reconciliation). The schedule
store only commits the paid flag after the bridge has recorded the
transaction, so either both changes happen or neither does.

GUARANTEES:
- An already-paid payment never produces a transaction
- A payment is never the source of more than one transaction, even if
  the same reconciliation is delivered twice
"""

from datetime import datetime
from typing import Optional

import structlog

from expense_tracker.audit import AuditLogger, get_audit_logger
from expense_tracker.ledger import Ledger
from expense_tracker.models.finance import (
    Reconciliation,
    ScheduledPayment,
    Transaction,
    TransactionType,
    utc_now,
)

logger = structlog.get_logger(__name__)


def reconcile(
    payment: ScheduledPayment,
    paid_at: Optional[datetime] = None,
) -> Optional[Reconciliation]:
    """
    Build the result of paying a scheduled payment.

    The transaction copies description, amount, category and owner
    verbatim. Its timestamp is the time of payment, not the due date.

    Returns None if the payment is already paid.
    """
    if payment.paid:
        return None

    transaction = Transaction(
        type=TransactionType.EXPENSE,
        description=payment.description,
        amount=payment.amount,
        category=payment.category,
        owner=payment.owner,
        created_at=paid_at or utc_now(),
        scheduled_payment_id=payment.id,
    )

    return Reconciliation(
        payment=payment.model_copy(update={"paid": True}),
        transaction=transaction,
    )


class ReconciliationBridge:
    """
    Records reconciled payments in the ledger.

    Registered as the schedule store's on_paid listener.
    """

    def __init__(
        self,
        ledger: Ledger,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._ledger = ledger
        self._audit_logger = audit_logger or get_audit_logger()

    def on_mark_paid(self, reconciliation: Reconciliation) -> Optional[Transaction]:
        """
        Record the reconciliation's transaction.

        Returns the recorded transaction, or None if a transaction from
        this payment is already in the ledger (duplicate event).
        """
        payment = reconciliation.payment
        existing = self._ledger.find_by_scheduled_payment(payment.id)
        if existing is not None:
            logger.warning(
                "duplicate_reconciliation_ignored",
                payment_id=str(payment.id),
                transaction_id=str(existing.id),
            )
            return None

        transaction = self._ledger.record(reconciliation.transaction)
        self._audit_logger.log_payment_reconciled(reconciliation)
        return transaction
