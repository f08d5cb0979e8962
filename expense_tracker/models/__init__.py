"""
Data Models Package

This package contains all Pydantic models used in the Expense Tracker.
All data flowing through the system must conform to these schemas.
"""

from expense_tracker.models.finance import (
    AccountProjection,
    DeletionChoice,
    ExpenseCategory,
    ExpenseOwner,
    InvestmentAccount,
    LedgerSummary,
    OwnerFilter,
    PaymentTemplate,
    PortfolioProjection,
    Reconciliation,
    RecurrencePlan,
    ScheduledPayment,
    ScheduledPaymentDraft,
    Transaction,
    TransactionDraft,
    TransactionType,
    ValidationIssue,
    utc_now,
)
from expense_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Finance models
    "AccountProjection",
    "DeletionChoice",
    "ExpenseCategory",
    "ExpenseOwner",
    "InvestmentAccount",
    "LedgerSummary",
    "OwnerFilter",
    "PaymentTemplate",
    "PortfolioProjection",
    "Reconciliation",
    "RecurrencePlan",
    "ScheduledPayment",
    "ScheduledPaymentDraft",
    "Transaction",
    "TransactionDraft",
    "TransactionType",
    "ValidationIssue",
    "utc_now",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
