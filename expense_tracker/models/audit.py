"""
Audit Models for Expense Tracker

Every state change in the system is logged as an audit event.
This provides:
1. Complete traceability of all money movements
2. Debugging information when things go wrong
3. Ability to reconstruct how a balance came to be

DESIGN DECISION: Audit events are emitted AFTER a mutation is committed.
A rejected input produces a VALIDATION_FAILED event and nothing else.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from expense_tracker.models.finance import (
    InvestmentAccount,
    Reconciliation,
    ScheduledPayment,
    Transaction,
    utc_now,
)


class AuditEventType(str, Enum):
    """
    Types of events we audit.

    One event type per mutation, plus the recovered failures.
    """
    # Ledger
    TRANSACTION_ADDED = "transaction_added"
    TRANSACTION_DELETED = "transaction_deleted"

    # Scheduled payments
    PAYMENT_SERIES_SCHEDULED = "payment_series_scheduled"
    PAYMENT_RECONCILED = "payment_reconciled"
    SCHEDULED_PAYMENT_DELETED = "scheduled_payment_deleted"
    PAYMENT_SERIES_DELETED = "payment_series_deleted"

    # Investments
    INVESTMENT_ACCOUNT_ADDED = "investment_account_added"
    INVESTMENT_ACCOUNT_DELETED = "investment_account_deleted"

    # Advice
    ADVICE_REFUSED = "advice_refused"
    ADVICE_GENERATED = "advice_generated"

    # Failures
    VALIDATION_FAILED = "validation_failed"
    COLLECTION_LOAD_FAILED = "collection_load_failed"
    EXTERNAL_SERVICE_ERROR = "external_service_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    event_id: UUID = Field(default_factory=uuid4)
    timestamp: datetime = Field(
        default_factory=utc_now,
        description="When the event occurred (UTC)"
    )

    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # What entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'transaction', 'scheduled_payment')"
    )
    entity_id: Optional[UUID] = None

    description: str = Field(..., max_length=500)
    details: dict[str, Any] = Field(default_factory=dict)
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": str(self.entity_id) if self.entity_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.transaction_added(transaction)
        event = AuditEventBuilder.payment_reconciled(reconciliation)
    """

    @staticmethod
    def transaction_added(transaction: Transaction) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_ADDED,
            entity_type="transaction",
            entity_id=transaction.id,
            description=f"{transaction.type.value.title()} recorded: {transaction.description}",
            details={
                "type": transaction.type.value,
                "amount": str(transaction.amount),
                "category": transaction.category.value if transaction.category else None,
            },
        )

    @staticmethod
    def transaction_deleted(transaction_id: UUID) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_DELETED,
            entity_type="transaction",
            entity_id=transaction_id,
            description="Transaction deleted",
        )

    @staticmethod
    def payment_series_scheduled(payments: list[ScheduledPayment]) -> AuditEvent:
        first = payments[0]
        return AuditEvent(
            event_type=AuditEventType.PAYMENT_SERIES_SCHEDULED,
            entity_type="payment_series",
            entity_id=first.series_id,
            description=f"Scheduled {len(payments)} payment(s): {first.description}",
            details={
                "occurrences": len(payments),
                "amount": str(first.amount),
                "first_due_date": first.due_date.isoformat(),
                "last_due_date": payments[-1].due_date.isoformat(),
            },
        )

    @staticmethod
    def payment_reconciled(reconciliation: Reconciliation) -> AuditEvent:
        payment = reconciliation.payment
        return AuditEvent(
            event_type=AuditEventType.PAYMENT_RECONCILED,
            entity_type="scheduled_payment",
            entity_id=payment.id,
            description=f"Scheduled payment paid: {payment.description}",
            details={
                "series_id": str(payment.series_id),
                "transaction_id": str(reconciliation.transaction.id),
                "amount": str(payment.amount),
            },
        )

    @staticmethod
    def scheduled_payment_deleted(payment_id: UUID) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SCHEDULED_PAYMENT_DELETED,
            entity_type="scheduled_payment",
            entity_id=payment_id,
            description="Scheduled payment deleted",
        )

    @staticmethod
    def payment_series_deleted(series_id: UUID, removed: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PAYMENT_SERIES_DELETED,
            entity_type="payment_series",
            entity_id=series_id,
            description=f"Payment series deleted ({removed} occurrence(s))",
            details={"removed": removed},
        )

    @staticmethod
    def investment_account_added(account: InvestmentAccount) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INVESTMENT_ACCOUNT_ADDED,
            entity_type="investment_account",
            entity_id=account.id,
            description=f"Investment account added: {account.name}",
            details={
                "principal": str(account.principal),
                "rate": str(account.rate),
            },
        )

    @staticmethod
    def investment_account_deleted(account_id: UUID) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INVESTMENT_ACCOUNT_DELETED,
            entity_type="investment_account",
            entity_id=account_id,
            description="Investment account deleted",
        )

    @staticmethod
    def advice_refused(transaction_count: int, payment_count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ADVICE_REFUSED,
            description="Not enough data for financial advice",
            details={
                "transaction_count": transaction_count,
                "payment_count": payment_count,
            },
        )

    @staticmethod
    def advice_generated(transaction_count: int, payment_count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ADVICE_GENERATED,
            description="Financial tip generated",
            details={
                "transactions_sent": transaction_count,
                "upcoming_payments_sent": payment_count,
            },
        )

    @staticmethod
    def validation_failed(operation: str, issues: list[dict]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            description=f"Input rejected for {operation} with {len(issues)} issue(s)",
            details={
                "operation": operation,
                "issues": issues,
            },
        )

    @staticmethod
    def collection_load_failed(key: str, reason: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.COLLECTION_LOAD_FAILED,
            severity=AuditSeverity.WARNING,
            description=f"Stored collection '{key}' is unreadable, starting empty",
            error_message=reason,
            details={"key": key},
        )

    @staticmethod
    def external_service_error(
        service: str,
        error_message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXTERNAL_SERVICE_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"External service error: {service}",
            error_message=error_message,
            details={
                "service": service,
            },
        )
