"""
Schedule Store

Owns every ScheduledPayment. All mutation funnels through here:
- add_series: persist the occurrences of a recurrence plan
- mark_paid: the ONLY path that creates a ledger transaction
- delete_one / delete_series

The collection is kept sorted ascending by due date. Sorting is stable,
so payments due on the same day keep their insertion order.

Unknown ids are silent no-ops for mark_paid and both deletes.
"""

from datetime import date, datetime
from typing import Callable, Iterable, Iterator, Optional, Union
from uuid import UUID, uuid4

import structlog

from expense_tracker.errors import ValidationError
from expense_tracker.models.finance import (
    DeletionChoice,
    Reconciliation,
    RecurrencePlan,
    ScheduledPayment,
    ValidationIssue,
)
from expense_tracker.scheduling.reconciliation import reconcile

logger = structlog.get_logger(__name__)

PaymentsChanged = Callable[[list[ScheduledPayment]], None]
PaymentPaid = Callable[[Reconciliation], object]

DayLike = Union[date, datetime, str]


def normalize_day(day: DayLike) -> date:
    """
    Reduce a date, datetime or ISO string to a calendar date.

    Strings are cut to their first 10 characters, so
    "2024-03-15T12:00:00.000Z" and "2024-03-15" are the same day.
    """
    if isinstance(day, datetime):
        return day.date()
    if isinstance(day, date):
        return day
    try:
        return date.fromisoformat(str(day)[:10])
    except ValueError:
        raise ValidationError(
            f"Not a valid date: {day!r}",
            issues=[ValidationIssue(
                field="date",
                issue_type="invalid_format",
                message="Expected a YYYY-MM-DD date",
            )],
        )


class ScheduleStore:
    """
    In-memory collection of scheduled payments.

    Args:
        payments: Initial records (e.g. loaded from storage)
        on_change: Called with the full collection after every committed mutation
        on_paid: Called with the Reconciliation when a payment is marked paid,
                 before the paid flag is committed
    """

    def __init__(
        self,
        payments: Optional[Iterable[ScheduledPayment]] = None,
        on_change: Optional[PaymentsChanged] = None,
        on_paid: Optional[PaymentPaid] = None,
    ):
        self._payments: list[ScheduledPayment] = sorted(
            payments or [], key=lambda p: p.due_date
        )
        self._on_change = on_change
        self._on_paid = on_paid

    def set_paid_listener(self, on_paid: Optional[PaymentPaid]) -> None:
        self._on_paid = on_paid

    @property
    def payments(self) -> list[ScheduledPayment]:
        """Snapshot of all payments, ascending by due date."""
        return list(self._payments)

    def __len__(self) -> int:
        return len(self._payments)

    def _changed(self) -> None:
        if self._on_change:
            self._on_change(self.payments)

    def get(self, payment_id: UUID) -> Optional[ScheduledPayment]:
        return next((p for p in self._payments if p.id == payment_id), None)

    def add_series(self, plan: RecurrencePlan) -> list[ScheduledPayment]:
        """
        Persist every occurrence of a plan.

        Each draft gets a fresh id, paid=False and the plan's series id.
        Returns the new records in plan order.
        """
        created = [
            ScheduledPayment(
                **draft.model_dump(),
                id=uuid4(),
                series_id=plan.series_id,
                paid=False,
            )
            for draft in plan.drafts
        ]

        self._payments.extend(created)
        self._payments.sort(key=lambda p: p.due_date)
        self._changed()

        logger.debug(
            "payment_series_added",
            series_id=str(plan.series_id),
            occurrences=len(created),
        )
        return created

    def find_by_date(self, day: DayLike) -> Iterator[ScheduledPayment]:
        """Lazily yield the payments due on a calendar day."""
        target = normalize_day(day)
        return (p for p in self.payments if p.due_date == target)

    def upcoming(self, today: date, limit: Optional[int] = None) -> list[ScheduledPayment]:
        """Unpaid payments due today or later, soonest first."""
        pending = [p for p in self._payments if not p.paid and p.due_date >= today]
        pending.sort(key=lambda p: p.due_date)
        return pending if limit is None else pending[:limit]

    def mark_paid(
        self,
        payment_id: UUID,
        paid_at: Optional[datetime] = None,
    ) -> Optional[Reconciliation]:
        """
        Mark a payment as paid and reconcile it into the ledger.

        Returns None (and changes nothing) if the id is unknown or the
        payment is already paid. If the paid listener raises, the paid
        flag is not committed.
        """
        index = next(
            (i for i, p in enumerate(self._payments) if p.id == payment_id),
            None,
        )
        if index is None:
            logger.debug("mark_paid_unknown_payment", payment_id=str(payment_id))
            return None

        reconciliation = reconcile(self._payments[index], paid_at)
        if reconciliation is None:
            logger.debug("mark_paid_already_paid", payment_id=str(payment_id))
            return None

        if self._on_paid:
            self._on_paid(reconciliation)

        self._payments[index] = reconciliation.payment
        self._changed()
        return reconciliation

    def has_other_series_members(self, payment_id: UUID) -> bool:
        """
        Whether any other payment shares this payment's series.

        Decides if "delete entire series" is offered. False for unknown ids.
        """
        target = self.get(payment_id)
        if target is None:
            return False
        return any(
            p.series_id == target.series_id and p.id != target.id
            for p in self._payments
        )

    def deletion_options(self, payment_id: UUID) -> list[DeletionChoice]:
        """
        Choices to offer before deleting a payment.

        Empty for unknown ids.
        """
        if self.get(payment_id) is None:
            return []
        if self.has_other_series_members(payment_id):
            return [DeletionChoice.THIS_OCCURRENCE, DeletionChoice.ENTIRE_SERIES]
        return [DeletionChoice.THIS_OCCURRENCE]

    def delete_one(self, payment_id: UUID) -> bool:
        """Remove exactly one payment; the rest of its series stays."""
        remaining = [p for p in self._payments if p.id != payment_id]
        if len(remaining) == len(self._payments):
            return False

        self._payments = remaining
        self._changed()
        return True

    def delete_series(self, series_id: UUID) -> int:
        """
        Remove every payment of a series, paid or not.

        Returns the number of payments removed.
        """
        remaining = [p for p in self._payments if p.series_id != series_id]
        removed = len(self._payments) - len(remaining)
        if removed == 0:
            return 0

        self._payments = remaining
        self._changed()
        return removed
