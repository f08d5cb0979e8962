"""AI Agents package."""

from expense_tracker.agents.advisor import (
    ADVICE_GUIDANCE,
    AdvicePayment,
    AdviceRequest,
    AdviceTransaction,
    FinancialAdvisor,
    build_advice_request,
    build_prompt,
    should_request_advice,
)

__all__ = [
    "ADVICE_GUIDANCE",
    "AdvicePayment",
    "AdviceRequest",
    "AdviceTransaction",
    "FinancialAdvisor",
    "build_advice_request",
    "build_prompt",
    "should_request_advice",
]
