"""
Boundary Validation

DESIGN DECISION: Every user input is validated BEFORE any state changes.

The pydantic models carry the field rules (positive amounts, non-empty
descriptions, expense categories). This module is the single place where
raw input is turned into those models, so that:
1. Callers get one error type (ValidationError) for every bad input
2. Each problem is reported as a ValidationIssue tied to a field
3. Every rejection is audited

IMPORTANT: Validation NEVER silently fixes issues.
It reports them so the user can correct the input.
"""

from datetime import date
from decimal import Decimal
from typing import Any, Optional, TypeVar, Union

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from expense_tracker.audit import AuditLogger, get_audit_logger
from expense_tracker.errors import ValidationError
from expense_tracker.models.finance import (
    ExpenseCategory,
    ExpenseOwner,
    InvestmentAccount,
    PaymentTemplate,
    TransactionDraft,
    TransactionType,
    ValidationIssue,
)

ModelT = TypeVar("ModelT", bound=BaseModel)

Amount = Union[Decimal, str, int, float]

# Friendlier names for the pydantic error types users actually hit
_ISSUE_TYPES = {
    "missing": "missing",
    "string_too_short": "empty",
    "greater_than": "non_positive",
    "greater_than_equal": "negative",
    "decimal_parsing": "invalid_format",
    "decimal_max_places": "too_many_decimal_places",
    "enum": "unknown_value",
    "date_from_datetime_parsing": "invalid_format",
    "date_parsing": "invalid_format",
    "value_error": "invalid_value",
}


def issues_from_pydantic(error: PydanticValidationError) -> list[ValidationIssue]:
    """Convert a pydantic error into our ValidationIssue list."""
    issues = []
    for detail in error.errors():
        field = ".".join(str(part) for part in detail.get("loc", ())) or "input"
        message = detail.get("msg", "Invalid value")
        # model_validator errors come through as "Value error, <text>"
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        issues.append(ValidationIssue(
            field=field,
            issue_type=_ISSUE_TYPES.get(detail.get("type", ""), "invalid_value"),
            message=message,
        ))
    return issues


def validate_repetition_count(count: Any) -> list[ValidationIssue]:
    """A recurrence must produce at least one occurrence."""
    if isinstance(count, bool) or not isinstance(count, int):
        return [ValidationIssue(
            field="count",
            issue_type="invalid_format",
            message="Repetition count must be a whole number",
        )]
    if count < 1:
        return [ValidationIssue(
            field="count",
            issue_type="invalid_value",
            message="Repetition count must be at least 1",
        )]
    return []


class InputValidator:
    """
    Turns raw user input into validated models.

    Every method either returns a fully valid model or raises
    ValidationError. Nothing is stored here.
    """

    def __init__(self, audit_logger: Optional[AuditLogger] = None):
        self._audit_logger = audit_logger or get_audit_logger()

    def _build(
        self,
        model_cls: type[ModelT],
        operation: str,
        data: dict[str, Any],
        extra_issues: Optional[list[ValidationIssue]] = None,
    ) -> ModelT:
        issues = list(extra_issues or [])
        model = None

        try:
            model = model_cls(**data)
        except PydanticValidationError as e:
            issues.extend(issues_from_pydantic(e))

        if issues:
            self._audit_logger.log_validation_failed(operation, issues)
            raise ValidationError(
                f"Invalid input for {operation}: "
                + "; ".join(f"{i.field}: {i.message}" for i in issues),
                issues=issues,
            )

        return model

    def transaction_draft(
        self,
        transaction_type: Union[TransactionType, str],
        description: str,
        amount: Amount,
        category: Optional[Union[ExpenseCategory, str]] = None,
        owner: Optional[Union[ExpenseOwner, str]] = None,
    ) -> TransactionDraft:
        """Validate a new ledger entry."""
        return self._build(TransactionDraft, "add_transaction", {
            "type": transaction_type,
            "description": description,
            "amount": amount,
            "category": category,
            "owner": owner,
        })

    def payment_template(
        self,
        description: str,
        amount: Amount,
        category: Union[ExpenseCategory, str],
        base_date: Union[date, str],
        count: int,
        owner: Optional[Union[ExpenseOwner, str]] = None,
    ) -> PaymentTemplate:
        """
        Validate a recurrence request.

        The count is checked together with the template so the user
        sees every problem at once.
        """
        data = {
            "description": description,
            "amount": amount,
            "category": category,
            "base_date": base_date,
        }
        if owner is not None:
            data["owner"] = owner

        return self._build(
            PaymentTemplate,
            "schedule_payments",
            data,
            extra_issues=validate_repetition_count(count),
        )

    def investment_account(
        self,
        name: str,
        principal: Amount,
        rate: Amount,
    ) -> InvestmentAccount:
        """Validate a new investment account (principal > 0, rate >= 0)."""
        return self._build(InvestmentAccount, "add_investment_account", {
            "name": name,
            "principal": principal,
            "rate": rate,
        })

    @staticmethod
    def get_user_friendly_summary(error: ValidationError) -> str:
        """
        Generate a user-friendly summary of a rejected input.

        This is what we show next to the form.
        """
        if not error.issues:
            return f"❌ {error}"

        lines = ["❌ Please fix the following:"]
        for issue in error.issues:
            lines.append(f"   • {issue.field}: {issue.message}")
        return "\n".join(lines)
