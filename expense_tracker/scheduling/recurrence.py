"""
Recurrence Engine

Expands one payment template into N monthly occurrences sharing a series id.

MONTH ARITHMETIC:
Occurrence k is always computed from the base date (base + k months),
never from occurrence k-1, and never by adding a fixed number of days.
When the base day does not exist in the target month the date is clamped
to that month's last day:

    2024-01-31, 3 occurrences -> 2024-01-31, 2024-02-29, 2024-03-31

Because each date is computed from the base, a clamp in February does not
drag March back to the 29th.
"""

from datetime import date
from uuid import uuid4

from dateutil.relativedelta import relativedelta

from expense_tracker.errors import ValidationError
from expense_tracker.models.finance import (
    PaymentTemplate,
    RecurrencePlan,
    ScheduledPaymentDraft,
)
from expense_tracker.validation import validate_repetition_count


def add_months(base: date, months: int) -> date:
    """Calendar-month addition, clamping to the end of short months."""
    return base + relativedelta(months=months)


def expand(template: PaymentTemplate, count: int) -> RecurrencePlan:
    """
    Build the occurrences of a recurrence request.

    Args:
        template: Validated payment template (description, amount, category,
                  owner, base date)
        count: Number of monthly occurrences, at least 1

    Returns:
        A plan with one fresh series id and exactly `count` drafts,
        ordered by due date.

    Raises:
        ValidationError: If count < 1. Nothing is generated.
    """
    issues = validate_repetition_count(count)
    if issues:
        raise ValidationError(issues[0].message, issues=issues)

    fields = template.model_dump(exclude={"base_date"})
    drafts = [
        ScheduledPaymentDraft(
            **fields,
            due_date=add_months(template.base_date, offset),
        )
        for offset in range(count)
    ]

    # One series id per request, shared by every occurrence
    return RecurrencePlan(series_id=uuid4(), drafts=drafts)
