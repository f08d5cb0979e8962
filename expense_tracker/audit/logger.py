"""
Audit Logger

DESIGN DECISION: Every state change in the system is logged.
This provides:
1. Complete traceability of balances
2. Debugging capability
3. A record of every recovered failure

The audit logger:
- Is synchronous, like the rest of the core
- Gracefully handles failures (doesn't crash the app if logging fails)
"""

import logging
import sys
from typing import Optional
from uuid import UUID

import structlog

from expense_tracker.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity
from expense_tracker.models.finance import (
    InvestmentAccount,
    Reconciliation,
    ScheduledPayment,
    Transaction,
    ValidationIssue,
)


def configure_logging(level: str = "INFO", json_output: bool = True) -> None:
    """
    Configure structlog on top of the standard library logger.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: JSON lines if True, otherwise human-readable console output
    """
    log_level = getattr(logging, level.upper())

    logging.basicConfig(
        level=log_level,
        stream=sys.stdout,
        format="%(message)s",
    )
    logging.getLogger().setLevel(log_level)

    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


class AuditLogger:
    """
    Central audit logging service.

    Every event becomes one structured log line at the event's severity.
    """

    def __init__(self, logger_name: str = "expense_tracker.audit"):
        self._logger = structlog.get_logger(logger_name)

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Returns True if the event was written.
        """
        log_dict = event.to_log_dict()

        try:
            if event.severity == AuditSeverity.ERROR:
                self._logger.error("audit_event", **log_dict)
            elif event.severity == AuditSeverity.WARNING:
                self._logger.warning("audit_event", **log_dict)
            elif event.severity == AuditSeverity.DEBUG:
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except (OSError, ValueError, TypeError) as e:
            # A broken log handler must never break a money operation
            print(f"WARNING: Failed to write audit event {event.event_id}: {e}",
                  file=sys.stderr)
            return False

        return True

    def log_transaction_added(self, transaction: Transaction) -> None:
        """Log a new ledger transaction."""
        self.log(AuditEventBuilder.transaction_added(transaction))

    def log_transaction_deleted(self, transaction_id: UUID) -> None:
        """Log a ledger deletion."""
        self.log(AuditEventBuilder.transaction_deleted(transaction_id))

    def log_series_scheduled(self, payments: list[ScheduledPayment]) -> None:
        """Log a newly scheduled payment series."""
        if payments:
            self.log(AuditEventBuilder.payment_series_scheduled(payments))

    def log_payment_reconciled(self, reconciliation: Reconciliation) -> None:
        """Log a scheduled payment turning into a transaction."""
        self.log(AuditEventBuilder.payment_reconciled(reconciliation))

    def log_payment_deleted(self, payment_id: UUID) -> None:
        self.log(AuditEventBuilder.scheduled_payment_deleted(payment_id))

    def log_series_deleted(self, series_id: UUID, removed: int) -> None:
        self.log(AuditEventBuilder.payment_series_deleted(series_id, removed))

    def log_account_added(self, account: InvestmentAccount) -> None:
        self.log(AuditEventBuilder.investment_account_added(account))

    def log_account_deleted(self, account_id: UUID) -> None:
        self.log(AuditEventBuilder.investment_account_deleted(account_id))

    def log_validation_failed(
        self,
        operation: str,
        issues: list[ValidationIssue],
    ) -> None:
        """Log rejected user input."""
        self.log(AuditEventBuilder.validation_failed(
            operation=operation,
            issues=[
                {"field": i.field, "type": i.issue_type, "message": i.message}
                for i in issues
            ],
        ))

    def log_collection_load_failed(self, key: str, reason: str) -> None:
        """Log a stored collection that had to be replaced with an empty one."""
        self.log(AuditEventBuilder.collection_load_failed(key, reason))

    def log_advice_refused(self, transaction_count: int, payment_count: int) -> None:
        self.log(AuditEventBuilder.advice_refused(transaction_count, payment_count))

    def log_advice_generated(self, transaction_count: int, payment_count: int) -> None:
        self.log(AuditEventBuilder.advice_generated(transaction_count, payment_count))

    def log_external_service_error(
        self,
        service: str,
        error_message: str,
    ) -> None:
        """Log external service error."""
        self.log(AuditEventBuilder.external_service_error(
            service=service,
            error_message=error_message,
        ))


_default_logger: Optional[AuditLogger] = None


def get_audit_logger() -> AuditLogger:
    """Shared audit logger for components created without one."""
    global _default_logger
    if _default_logger is None:
        _default_logger = AuditLogger()
    return _default_logger
