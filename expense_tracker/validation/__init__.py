"""Input validation package."""

from expense_tracker.validation.validator import (
    InputValidator,
    issues_from_pydantic,
    validate_repetition_count,
)

__all__ = ["InputValidator", "issues_from_pydantic", "validate_repetition_count"]
