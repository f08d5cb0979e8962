"""
Error Taxonomy for Expense Tracker

DESIGN DECISION: No error in this system is fatal to the process.
Every failure is either:
1. A rejected input (ValidationError) - raised before any state changes
2. A silently ignored no-op (unknown id on delete / mark paid)
3. A locally recovered failure (corrupt stored collection, advice service down)

Callers only ever need to catch ExpenseTrackerError subclasses.
"""

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from expense_tracker.models.finance import ValidationIssue


class ExpenseTrackerError(Exception):
    """Base exception for the expense tracker."""
    pass


class ValidationError(ExpenseTrackerError, ValueError):
    """
    User input was rejected at the boundary.

    Carries the individual issues so the UI can show them next to
    the offending fields.
    """

    def __init__(
        self,
        message: str,
        issues: Optional[list["ValidationIssue"]] = None,
    ):
        super().__init__(message)
        self.issues = issues or []


class NotFoundError(ExpenseTrackerError):
    """Entity not found."""
    pass


class PersistenceReadError(ExpenseTrackerError):
    """A stored collection could not be decoded."""

    def __init__(self, key: str, reason: str):
        super().__init__(f"Could not read collection '{key}': {reason}")
        self.key = key
        self.reason = reason


class StorageWriteError(ExpenseTrackerError):
    """A collection could not be written to the key-value store."""
    pass


class CollaboratorError(ExpenseTrackerError):
    """An external collaborator (the advice service) failed."""
    pass


class MissingCredentialError(CollaboratorError):
    """The advice service has no API key configured."""
    pass


class AdviceUnavailableError(CollaboratorError):
    """The advice service call failed or returned nothing usable."""
    pass
