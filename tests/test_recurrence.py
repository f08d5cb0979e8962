"""Tests for the recurrence engine."""

import pytest
from datetime import date
from decimal import Decimal

from expense_tracker.errors import ValidationError
from expense_tracker.models.finance import ExpenseCategory, ExpenseOwner, PaymentTemplate
from expense_tracker.scheduling import add_months, expand


def _template(base_date):
    return PaymentTemplate(
        description="Gym",
        amount=Decimal("30.00"),
        category=ExpenseCategory.HEALTH,
        owner=ExpenseOwner.OTHER,
        base_date=base_date,
    )


class TestAddMonths:

    def test_same_day_next_month(self):
        assert add_months(date(2024, 3, 15), 1) == date(2024, 4, 15)

    def test_clamps_to_leap_february(self):
        assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)

    def test_clamps_to_non_leap_february(self):
        assert add_months(date(2023, 1, 31), 1) == date(2023, 2, 28)

    def test_crosses_year_boundary(self):
        assert add_months(date(2024, 11, 30), 3) == date(2025, 2, 28)


class TestExpand:
    """Tests for expanding a template into a payment plan."""

    def test_month_end_base_is_clamped_per_occurrence(self, rent_template):
        """Test 2024-01-31 x3 gives Jan 31, Feb 29, Mar 31."""
        plan = expand(rent_template, 3)
        assert [d.due_date for d in plan.drafts] == [
            date(2024, 1, 31),
            date(2024, 2, 29),
            date(2024, 3, 31),
        ]

    def test_first_occurrence_is_base_date(self):
        plan = expand(_template(date(2024, 6, 10)), 1)
        assert len(plan.drafts) == 1
        assert plan.drafts[0].due_date == date(2024, 6, 10)

    @pytest.mark.parametrize("count", [1, 2, 12, 36])
    def test_produces_exactly_count_occurrences(self, count):
        plan = expand(_template(date(2024, 1, 15)), count)
        assert len(plan.drafts) == count

    def test_copies_template_fields(self):
        """Test every occurrence carries the template's description, amount, category and owner."""
        plan = expand(_template(date(2024, 1, 15)), 3)
        for draft in plan.drafts:
            assert draft.description == "Gym"
            assert draft.amount == Decimal("30.00")
            assert draft.category == ExpenseCategory.HEALTH
            assert draft.owner == ExpenseOwner.OTHER

    def test_each_call_gets_a_new_series(self):
        template = _template(date(2024, 1, 15))
        assert expand(template, 2).series_id != expand(template, 2).series_id

    @pytest.mark.parametrize("count", [0, -1])
    def test_rejects_count_below_one(self, count):
        """Test nothing is generated for a count below 1."""
        with pytest.raises(ValidationError) as exc_info:
            expand(_template(date(2024, 1, 15)), count)
        assert exc_info.value.issues[0].field == "count"
