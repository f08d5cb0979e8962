"""
Core Data Models for Expense Tracker

These models define the strict schemas for all data flowing through the system.
They are designed to:
1. Enforce the amount/description/category rules at construction time
2. Provide clear validation error messages
3. Be serializable for the key-value store and for logging

DESIGN DECISION: Money is always Decimal, never float.
Sums of many small amounts must be exact so the balance never drifts.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    model_validator,
)


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TransactionType(str, Enum):
    """Direction of a ledger transaction."""
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


class ExpenseOwner(str, Enum):
    """
    Who an expense belongs to.

    OTHER marks an expense the user is fronting for someone else.
    An expense without an owner is treated as MINE.
    """
    MINE = "mine"
    OTHER = "other"


class ExpenseCategory(str, Enum):
    """
    Supported expense categories.

    DESIGN DECISION: Using explicit categories rather than free text ensures
    consistent grouping in the expense breakdown.
    """
    FOOD = "Food"
    GAS = "Gas"
    WATER = "Water"
    HOUSING = "Housing"
    TRANSPORTATION = "Transportation"
    ENTERTAINMENT = "Entertainment"
    SHOPPING = "Shopping"
    HEALTH = "Health"
    ELECTRICITY = "Electricity"
    INTERNET = "Internet"
    HOME_APPLIANCES = "Home appliances"
    MEDICATION = "Medication"
    CREDIT_CARD = "Credit Card"
    OTHER = "Other"


class OwnerFilter(str, Enum):
    """Which expenses to include in the breakdown."""
    ALL = "all"
    MINE = "mine"
    OTHER = "other"


class DeletionChoice(str, Enum):
    """Options offered to the user when deleting a scheduled payment."""
    THIS_OCCURRENCE = "this_occurrence"
    ENTIRE_SERIES = "entire_series"


# =============================================================================
# LEDGER MODELS
# =============================================================================

class TransactionDraft(BaseModel):
    """
    What the user enters for a new transaction.

    The ledger assigns the id and creation timestamp.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    type: TransactionType
    description: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="What the money was for"
    )
    amount: Decimal = Field(
        ...,
        gt=0,
        decimal_places=2,
        description="Amount in currency units"
    )
    category: Optional[ExpenseCategory] = Field(
        default=None,
        description="Expense category (required for expenses)"
    )
    owner: Optional[ExpenseOwner] = Field(
        default=None,
        description="Who the expense belongs to (expenses only)"
    )

    @model_validator(mode='after')
    def validate_type_fields(self) -> 'TransactionDraft':
        """Expenses need a category; income carries no category or owner."""
        if self.type == TransactionType.EXPENSE and self.category is None:
            raise ValueError("Expenses must have a category")

        if self.type == TransactionType.INCOME:
            if self.category is not None:
                raise ValueError("Income cannot have a category")
            if self.owner is not None:
                raise ValueError("Income cannot have an owner")

        return self

    @property
    def effective_owner(self) -> Optional[ExpenseOwner]:
        """Owner of an expense, defaulting to MINE. None for income."""
        if self.type != TransactionType.EXPENSE:
            return None
        return self.owner or ExpenseOwner.MINE


class Transaction(TransactionDraft):
    """
    A recorded ledger transaction.

    Immutable once created; the only lifecycle event is deletion.
    """
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique transaction ID"
    )
    created_at: datetime = Field(
        default_factory=utc_now,
        description="When the transaction was recorded"
    )
    scheduled_payment_id: Optional[UUID] = Field(
        default=None,
        description="Scheduled payment this was reconciled from, if any"
    )


class LedgerSummary(BaseModel):
    """Aggregate balances derived from the ledger."""

    total_income: Decimal = Decimal("0")
    my_expenses: Decimal = Decimal("0")
    other_expenses: Decimal = Decimal("0")
    total_expenses: Decimal = Decimal("0")
    balance: Decimal = Decimal("0")


# =============================================================================
# SCHEDULED PAYMENT MODELS
# =============================================================================

class PaymentTemplate(BaseModel):
    """
    A recurrence request: one payment to be repeated monthly.

    The base date is the due date of the first occurrence.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    description: str = Field(..., min_length=1, max_length=200)
    amount: Decimal = Field(..., gt=0, decimal_places=2)
    category: ExpenseCategory
    owner: ExpenseOwner = ExpenseOwner.MINE
    base_date: date


class ScheduledPaymentDraft(BaseModel):
    """One occurrence of a series, before the store assigns identity."""
    model_config = ConfigDict(str_strip_whitespace=True)

    description: str = Field(..., min_length=1, max_length=200)
    amount: Decimal = Field(..., gt=0, decimal_places=2)
    category: ExpenseCategory
    owner: ExpenseOwner = ExpenseOwner.MINE
    due_date: date


class ScheduledPayment(ScheduledPaymentDraft):
    """
    A future payment the user has scheduled.

    CRITICAL: paid flips to True exactly once, through the schedule
    store's mark_paid. It is never flipped back.
    """
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    id: UUID = Field(default_factory=uuid4)
    series_id: UUID = Field(
        ...,
        description="Shared by every occurrence created by one recurrence request"
    )
    paid: bool = False


class RecurrencePlan(BaseModel):
    """Output of the recurrence engine: one series id and its occurrences."""

    series_id: UUID = Field(default_factory=uuid4)
    drafts: list[ScheduledPaymentDraft] = Field(..., min_length=1)


class Reconciliation(BaseModel):
    """
    Result of marking a scheduled payment as paid.

    DESIGN DECISION: The paid flag flip and the new ledger transaction
    travel together. There is no way to produce one without the other.
    """

    payment: ScheduledPayment
    transaction: Transaction

    @model_validator(mode='after')
    def validate_pairing(self) -> 'Reconciliation':
        """The transaction must come from this payment."""
        if not self.payment.paid:
            raise ValueError("Reconciled payment must be marked paid")
        if self.transaction.scheduled_payment_id != self.payment.id:
            raise ValueError("Transaction does not belong to this payment")
        return self


# =============================================================================
# INVESTMENT MODELS
# =============================================================================

class InvestmentAccount(BaseModel):
    """An investment account with a simple annual rate."""
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    id: UUID = Field(default_factory=uuid4)
    name: str = Field(..., min_length=1, max_length=100)
    principal: Decimal = Field(
        ...,
        gt=0,
        decimal_places=2,
        description="Amount invested"
    )
    rate: Decimal = Field(
        ...,
        ge=0,
        description="Annual interest rate in percent"
    )


class AccountProjection(BaseModel):
    """One-year projection for a single account."""

    account: InvestmentAccount
    projected_value: Decimal


class PortfolioProjection(BaseModel):
    """One-year projection for all accounts."""

    accounts: list[AccountProjection] = Field(default_factory=list)
    total_invested: Decimal = Decimal("0")
    total_projected_value: Decimal = Decimal("0")


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single problem with user input."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
