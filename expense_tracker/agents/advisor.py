"""
Financial Advice Agent

DESIGN DECISION: The LLM only ever sees a SNAPSHOT summary of the data.
It cannot read or change the ledger or the schedule. It receives:
1. The most recent transactions (type, amount, description, category, owner)
2. The soonest unpaid scheduled payments
and returns one short tip as plain text.

BOUNDARIES:
- CAN: Comment on spending patterns and upcoming obligations
- CANNOT: Mutate any state
- CANNOT: Be called without enough data (see should_request_advice)

Failures are reported as CollaboratorError subclasses so the caller can
tell "no API key" apart from "the service did not answer".
"""

import json
from datetime import date
from decimal import Decimal
from typing import Any, Iterable, Optional

import google.generativeai as genai
import structlog
from pydantic import BaseModel, Field

from expense_tracker.config import get_settings
from expense_tracker.config.settings import GeminiSettings
from expense_tracker.errors import AdviceUnavailableError, MissingCredentialError
from expense_tracker.models.finance import (
    ExpenseOwner,
    ScheduledPayment,
    Transaction,
    TransactionType,
)

logger = structlog.get_logger(__name__)

ADVICE_GUIDANCE = (
    "Add at least 3 transactions or a scheduled payment to get personalized advice."
)


class AdviceTransaction(BaseModel):
    """A transaction as the advisor sees it."""

    type: TransactionType
    amount: Decimal
    description: str
    category: str = "N/A"
    owner: ExpenseOwner = ExpenseOwner.MINE


class AdvicePayment(BaseModel):
    """An upcoming scheduled payment as the advisor sees it."""

    description: str
    amount: Decimal
    due_date: date
    category: str
    owner: ExpenseOwner = ExpenseOwner.MINE


class AdviceRequest(BaseModel):
    """Everything sent to the advice model for one tip."""

    transactions: list[AdviceTransaction] = Field(default_factory=list)
    upcoming_payments: list[AdvicePayment] = Field(default_factory=list)


def should_request_advice(
    transaction_count: int,
    payment_count: int,
    min_transactions: int = 3,
) -> bool:
    """Advice needs a few transactions or at least one scheduled payment."""
    return transaction_count >= min_transactions or payment_count >= 1


def build_advice_request(
    transactions: Iterable[Transaction],
    payments: Iterable[ScheduledPayment],
    today: date,
    max_transactions: int = 20,
    max_payments: int = 10,
) -> AdviceRequest:
    """
    Summarize the collections for the advice model.

    Transactions are expected newest first, as the ledger keeps them.
    Only unpaid payments due today or later are included, soonest first.
    """
    recent = list(transactions)[:max_transactions]
    upcoming = sorted(
        (p for p in payments if not p.paid and p.due_date >= today),
        key=lambda p: p.due_date,
    )[:max_payments]

    return AdviceRequest(
        transactions=[
            AdviceTransaction(
                type=t.type,
                amount=t.amount,
                description=t.description,
                category=t.category.value if t.category else "N/A",
                owner=t.owner or ExpenseOwner.MINE,
            )
            for t in recent
        ],
        upcoming_payments=[
            AdvicePayment(
                description=p.description,
                amount=p.amount,
                due_date=p.due_date,
                category=p.category.value,
                owner=p.owner,
            )
            for p in upcoming
        ],
    )


def build_prompt(request: AdviceRequest) -> str:
    data = request.model_dump(mode="json")
    return f"""You are a friendly and helpful financial advisor.
Based on the following JSON data of a user's recent transactions and their upcoming scheduled payments, analyze their financial situation.
Provide one short, actionable, and encouraging financial tip.
Keep the response concise and friendly, under 75 words.
Do not repeat the user's data back to them. Focus only on the advice.
Expenses have an "owner" field, which is 'mine' or 'other'. 'other' marks an expense the user is paying for someone else.
Take this into account, for example by acknowledging the responsibility of covering someone else's expenses.

Recent Transaction Data:
{json.dumps(data["transactions"], indent=2)}

Upcoming Scheduled Payments:
{json.dumps(data["upcoming_payments"], indent=2)}"""


class FinancialAdvisor:
    """
    Gemini-backed advice generator.

    Args:
        settings: Gemini settings; defaults come from the environment
        model: Pre-built model exposing generate_content_async (tests pass a fake)
    """

    def __init__(
        self,
        settings: Optional[GeminiSettings] = None,
        model: Optional[Any] = None,
    ):
        self._settings = settings or get_settings().gemini
        self._model = model

    def _get_model(self) -> Any:
        """Configure Google Generative AI on first use."""
        if self._model is not None:
            return self._model

        if not self._settings.has_api_key:
            raise MissingCredentialError(
                "Gemini API key is not configured (set GEMINI_API_KEY)"
            )

        genai.configure(api_key=self._settings.api_key)
        self._model = genai.GenerativeModel(
            model_name=self._settings.model_name,
            generation_config={
                "temperature": self._settings.temperature,
                "max_output_tokens": self._settings.max_tokens,
            }
        )
        return self._model

    async def generate_tip(self, request: AdviceRequest) -> str:
        """
        Ask the model for one financial tip.

        Raises:
            MissingCredentialError: No API key configured
            AdviceUnavailableError: The call failed or returned no text
        """
        model = self._get_model()
        prompt = build_prompt(request)

        try:
            response = await model.generate_content_async(prompt)
            text = (response.text or "").strip()
        except Exception as e:
            logger.error("advice_call_failed", error=str(e))
            raise AdviceUnavailableError(f"Failed to get advice: {e}") from e

        if not text:
            raise AdviceUnavailableError("Advice service returned an empty response")

        logger.debug(
            "advice_generated",
            transactions=len(request.transactions),
            upcoming_payments=len(request.upcoming_payments),
        )
        return text
