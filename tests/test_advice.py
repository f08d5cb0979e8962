"""
Tests for the advice agent and flow.

The Gemini model is always replaced by a fake; no network calls.
"""

import asyncio
import json
import pytest
from datetime import date
from decimal import Decimal
from uuid import uuid4

from expense_tracker.agents import (
    ADVICE_GUIDANCE,
    FinancialAdvisor,
    build_advice_request,
    build_prompt,
    should_request_advice,
)
from expense_tracker.config.settings import AppSettings, GeminiSettings
from expense_tracker.errors import AdviceUnavailableError, MissingCredentialError
from expense_tracker.models.finance import (
    ExpenseCategory,
    ExpenseOwner,
    ScheduledPayment,
    Transaction,
    TransactionType,
)
from expense_tracker.orchestrator import (
    ADVICE_NO_CREDENTIAL_MESSAGE,
    ADVICE_UNAVAILABLE_MESSAGE,
    AdviceFlow,
    LedgerFlow,
    ScheduleFlow,
)

TODAY = date(2024, 5, 15)


class FakeResponse:
    def __init__(self, text):
        self.text = text


class FakeModel:
    """Stands in for genai.GenerativeModel."""

    def __init__(self, text="Set aside 10% of every paycheck."):
        self.text = text
        self.prompts = []

    async def generate_content_async(self, prompt):
        self.prompts.append(prompt)
        return FakeResponse(self.text)


class FailingModel:
    def __init__(self):
        self.calls = 0

    async def generate_content_async(self, prompt):
        self.calls += 1
        raise RuntimeError("503 Service Unavailable")


def _payment(due_date, paid=False, owner=ExpenseOwner.MINE):
    return ScheduledPayment(
        description="Rent",
        amount=Decimal("900"),
        category=ExpenseCategory.HOUSING,
        owner=owner,
        due_date=due_date,
        series_id=uuid4(),
        paid=paid,
    )


def _transaction(n):
    return Transaction(
        type=TransactionType.EXPENSE,
        description=f"Purchase {n}",
        amount=Decimal("10"),
        category=ExpenseCategory.SHOPPING,
    )


class TestAdviceGate:

    def test_three_transactions_are_enough(self):
        assert should_request_advice(3, 0) is True

    def test_one_payment_is_enough(self):
        assert should_request_advice(0, 1) is True

    def test_too_little_data(self):
        assert should_request_advice(2, 0) is False


class TestBuildAdviceRequest:

    def test_fills_missing_category_and_owner(self):
        income = Transaction(type=TransactionType.INCOME, description="Salary", amount=Decimal("1000"))
        request = build_advice_request([income], [], TODAY)

        sent = request.transactions[0]
        assert sent.category == "N/A"
        assert sent.owner == ExpenseOwner.MINE

    def test_keeps_most_recent_transactions(self):
        transactions = [_transaction(n) for n in range(25)]
        request = build_advice_request(transactions, [], TODAY)

        assert len(request.transactions) == 20
        assert request.transactions[0].description == "Purchase 0"

    def test_only_unpaid_payments_from_today(self):
        payments = [
            _payment(date(2024, 5, 14)),
            _payment(date(2024, 5, 15)),
            _payment(date(2024, 6, 1), paid=True),
            _payment(date(2024, 7, 1), owner=ExpenseOwner.OTHER),
        ]
        request = build_advice_request([], payments, TODAY)

        assert [p.due_date for p in request.upcoming_payments] == [
            date(2024, 5, 15),
            date(2024, 7, 1),
        ]
        assert request.upcoming_payments[1].owner == ExpenseOwner.OTHER

    def test_caps_upcoming_payments(self):
        payments = [_payment(date(2024, 6, day)) for day in range(1, 16)]
        request = build_advice_request([], payments, TODAY)
        assert len(request.upcoming_payments) == 10

    def test_prompt_embeds_json_data(self):
        request = build_advice_request([_transaction(1)], [_payment(date(2024, 6, 1))], TODAY)
        prompt = build_prompt(request)

        assert "under 75 words" in prompt
        assert json.dumps(request.model_dump(mode="json")["transactions"], indent=2) in prompt
        assert '"due_date": "2024-06-01"' in prompt


class TestFinancialAdvisor:

    def test_returns_tip(self):
        model = FakeModel("  Build an emergency fund.  ")
        advisor = FinancialAdvisor(GeminiSettings(api_key="test"), model=model)
        request = build_advice_request([_transaction(1)], [], TODAY)

        tip = asyncio.run(advisor.generate_tip(request))

        assert tip == "Build an emergency fund."
        assert len(model.prompts) == 1

    def test_missing_api_key(self):
        advisor = FinancialAdvisor(GeminiSettings(api_key=None))
        with pytest.raises(MissingCredentialError):
            asyncio.run(advisor.generate_tip(build_advice_request([], [], TODAY)))

    def test_call_failure(self):
        advisor = FinancialAdvisor(GeminiSettings(api_key="test"), model=FailingModel())
        with pytest.raises(AdviceUnavailableError):
            asyncio.run(advisor.generate_tip(build_advice_request([], [], TODAY)))

    def test_empty_response(self):
        advisor = FinancialAdvisor(GeminiSettings(api_key="test"), model=FakeModel(""))
        with pytest.raises(AdviceUnavailableError):
            asyncio.run(advisor.generate_tip(build_advice_request([], [], TODAY)))


class TestAdviceFlow:
    """Tests for the advice panel flow."""

    def _flow(self, state, audit_logger, model):
        advisor = FinancialAdvisor(GeminiSettings(api_key="test"), model=model)
        return AdviceFlow(state, advisor, AppSettings(), audit_logger)

    def test_refuses_without_enough_data(self, state, audit_logger):
        """Test the gate refuses before any external call."""
        model = FakeModel()
        LedgerFlow(state, audit_logger=audit_logger).add_transaction("INCOME", "Salary", "100")

        response = asyncio.run(self._flow(state, audit_logger, model).get_advice(TODAY))

        assert response.success is False
        assert response.message == ADVICE_GUIDANCE
        assert model.prompts == []

    def test_one_scheduled_payment_unlocks_advice(self, state, audit_logger):
        model = FakeModel("Automate your rent.")
        ScheduleFlow(state, audit_logger=audit_logger).schedule_payments(
            "Rent", "900", "Housing", date(2024, 6, 1), 1
        )

        response = asyncio.run(self._flow(state, audit_logger, model).get_advice(TODAY))

        assert response.success is True
        assert response.tip == "Automate your rent."

    def test_service_failure_becomes_message(self, state, audit_logger):
        model = FailingModel()
        ScheduleFlow(state, audit_logger=audit_logger).schedule_payments(
            "Rent", "900", "Housing", date(2024, 6, 1), 1
        )

        response = asyncio.run(self._flow(state, audit_logger, model).get_advice(TODAY))

        assert response.success is False
        assert response.message == ADVICE_UNAVAILABLE_MESSAGE
        assert model.calls == 1

    def test_missing_key_becomes_message(self, state, audit_logger):
        ScheduleFlow(state, audit_logger=audit_logger).schedule_payments(
            "Rent", "900", "Housing", date(2024, 6, 1), 1
        )
        advisor = FinancialAdvisor(GeminiSettings(api_key=""))
        flow = AdviceFlow(state, advisor, AppSettings(), audit_logger)

        response = asyncio.run(flow.get_advice(TODAY))

        assert response.success is False
        assert response.message == ADVICE_NO_CREDENTIAL_MESSAGE

    def test_advice_does_not_mutate_state(self, state, audit_logger):
        ledger_flow = LedgerFlow(state, audit_logger=audit_logger)
        for n in range(3):
            ledger_flow.add_transaction("EXPENSE", f"Item {n}", "5", "Shopping")
        before = state.ledger.transactions

        asyncio.run(self._flow(state, audit_logger, FakeModel()).get_advice(TODAY))

        assert state.ledger.transactions == before
