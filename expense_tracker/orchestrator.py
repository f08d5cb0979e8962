"""
Main Orchestrator for Expense Tracker

This module ties together all the components and defines the
end-to-end flows for:
1. Ledger (add / delete transactions, balances, expense breakdown)
2. Schedule (recurring payments, mark paid, series-aware deletion)
3. Portfolio (investment accounts and their one-year projection)
4. Advice (snapshot → Gemini → one tip)

DESIGN DECISION: Application state is an explicit AppState object.
Each collection persists itself through an on_change callback wired to
the CollectionRepository, so a flow only has to mutate state.

The orchestrator enforces the boundaries:
- Every input is validated before any state changes
- The schedule store is the only path into the ledger for scheduled payments
- Advice reads a snapshot and never mutates anything
- Every step is audited
"""

from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from typing import Optional, Union
from uuid import UUID

from pydantic import BaseModel

from expense_tracker.agents import (
    ADVICE_GUIDANCE,
    FinancialAdvisor,
    build_advice_request,
    should_request_advice,
)
from expense_tracker.audit import AuditLogger, configure_logging, get_audit_logger
from expense_tracker.config import get_settings
from expense_tracker.config.settings import AppSettings
from expense_tracker.errors import AdviceUnavailableError, MissingCredentialError
from expense_tracker.investments import InvestmentPortfolio
from expense_tracker.ledger import Ledger
from expense_tracker.models.finance import (
    DeletionChoice,
    ExpenseCategory,
    ExpenseOwner,
    InvestmentAccount,
    LedgerSummary,
    OwnerFilter,
    PortfolioProjection,
    ScheduledPayment,
    Transaction,
    TransactionType,
)
from expense_tracker.queries import QueryExecutor
from expense_tracker.scheduling import ReconciliationBridge, ScheduleStore, expand
from expense_tracker.scheduling.store import DayLike
from expense_tracker.services.storage import (
    CollectionRepository,
    JsonFileKeyValueStore,
    KeyValueStore,
)
from expense_tracker.validation import InputValidator

Amount = Union[Decimal, str, int, float]

ADVICE_UNAVAILABLE_MESSAGE = (
    "Sorry, I couldn't get any advice right now. Please try again later."
)
ADVICE_NO_CREDENTIAL_MESSAGE = (
    "API Key not found. Please set it up to use this feature."
)


class AppState:
    """The three live collections."""

    def __init__(
        self,
        ledger: Ledger,
        schedule: ScheduleStore,
        portfolio: InvestmentPortfolio,
    ):
        self.ledger = ledger
        self.schedule = schedule
        self.portfolio = portfolio


def create_app_state(
    repository: CollectionRepository,
    audit_logger: Optional[AuditLogger] = None,
) -> AppState:
    """
    Load every collection and wire persistence.

    Each collection loads on its own; a corrupt one comes back empty
    without affecting the others.
    """
    ledger = Ledger(
        repository.load_transactions(),
        on_change=repository.save_transactions,
    )
    bridge = ReconciliationBridge(ledger, audit_logger)
    schedule = ScheduleStore(
        repository.load_scheduled_payments(),
        on_change=repository.save_scheduled_payments,
        on_paid=bridge.on_mark_paid,
    )
    portfolio = InvestmentPortfolio(
        repository.load_investment_accounts(),
        on_change=repository.save_investment_accounts,
    )
    return AppState(ledger=ledger, schedule=schedule, portfolio=portfolio)


class LedgerFlow:
    """Adding and removing transactions, plus the derived balances."""

    def __init__(
        self,
        state: AppState,
        validator: Optional[InputValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._state = state
        self._audit_logger = audit_logger or get_audit_logger()
        self._validator = validator or InputValidator(self._audit_logger)
        self._queries = QueryExecutor(state.ledger, state.schedule)

    @property
    def transactions(self) -> list[Transaction]:
        return self._state.ledger.transactions

    def add_transaction(
        self,
        transaction_type: Union[TransactionType, str],
        description: str,
        amount: Amount,
        category: Optional[Union[ExpenseCategory, str]] = None,
        owner: Optional[Union[ExpenseOwner, str]] = None,
    ) -> Transaction:
        """
        Validate and record a new transaction.

        Raises:
            ValidationError: Nothing is recorded
        """
        draft = self._validator.transaction_draft(
            transaction_type, description, amount, category, owner
        )
        transaction = self._state.ledger.add(draft)
        self._audit_logger.log_transaction_added(transaction)
        return transaction

    def delete_transaction(self, transaction_id: UUID) -> bool:
        deleted = self._state.ledger.delete(transaction_id)
        if deleted:
            self._audit_logger.log_transaction_deleted(transaction_id)
        return deleted

    def summary(self) -> LedgerSummary:
        return self._state.ledger.aggregate()

    def expense_breakdown(
        self,
        owner_filter: Union[OwnerFilter, str] = OwnerFilter.ALL,
    ) -> dict[ExpenseCategory, Decimal]:
        return self._queries.expense_breakdown(owner_filter)


class ScheduleFlow:
    """
    Scheduled payments.

    Flow:
    1. Schedule → validate template and count → expand → add series
    2. Pay → mark_paid (the transaction is recorded by the bridge)
    3. Delete → offer this occurrence / entire series → delete
    """

    def __init__(
        self,
        state: AppState,
        validator: Optional[InputValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._state = state
        self._audit_logger = audit_logger or get_audit_logger()
        self._validator = validator or InputValidator(self._audit_logger)
        self._queries = QueryExecutor(state.ledger, state.schedule)

    @property
    def payments(self) -> list[ScheduledPayment]:
        return self._state.schedule.payments

    def schedule_payments(
        self,
        description: str,
        amount: Amount,
        category: Union[ExpenseCategory, str],
        base_date: Union[date, str],
        count: int,
        owner: Optional[Union[ExpenseOwner, str]] = None,
    ) -> list[ScheduledPayment]:
        """
        Schedule `count` monthly payments starting at base_date.

        Raises:
            ValidationError: Nothing is scheduled
        """
        template = self._validator.payment_template(
            description, amount, category, base_date, count, owner
        )
        plan = expand(template, count)
        created = self._state.schedule.add_series(plan)
        self._audit_logger.log_series_scheduled(created)
        return created

    def payments_on(self, day: DayLike) -> list[ScheduledPayment]:
        """Payments due on a calendar day (for the selected calendar date)."""
        return list(self._state.schedule.find_by_date(day))

    def payment_dates(self) -> set[date]:
        return self._queries.payment_dates()

    def upcoming(self, today: Optional[date] = None) -> list[ScheduledPayment]:
        return self._state.schedule.upcoming(today or date.today())

    def mark_paid(
        self,
        payment_id: UUID,
        paid_at: Optional[datetime] = None,
    ) -> Optional[Transaction]:
        """
        Pay a scheduled payment.

        Returns the new ledger transaction, or None if the payment is
        unknown or already paid.
        """
        reconciliation = self._state.schedule.mark_paid(payment_id, paid_at)
        if reconciliation is None:
            return None
        return reconciliation.transaction

    def deletion_options(self, payment_id: UUID) -> list[DeletionChoice]:
        return self._state.schedule.deletion_options(payment_id)

    def delete_payment(
        self,
        payment_id: UUID,
        choice: Union[DeletionChoice, str] = DeletionChoice.THIS_OCCURRENCE,
    ) -> int:
        """
        Delete one occurrence or its whole series.

        Returns the number of payments removed (0 for unknown ids).
        """
        choice = DeletionChoice(choice)
        payment = self._state.schedule.get(payment_id)
        if payment is None:
            return 0

        if choice == DeletionChoice.ENTIRE_SERIES:
            removed = self._state.schedule.delete_series(payment.series_id)
            self._audit_logger.log_series_deleted(payment.series_id, removed)
            return removed

        self._state.schedule.delete_one(payment_id)
        self._audit_logger.log_payment_deleted(payment_id)
        return 1


class PortfolioFlow:
    """Investment accounts and their projection."""

    def __init__(
        self,
        state: AppState,
        validator: Optional[InputValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._state = state
        self._audit_logger = audit_logger or get_audit_logger()
        self._validator = validator or InputValidator(self._audit_logger)

    @property
    def accounts(self) -> list[InvestmentAccount]:
        return self._state.portfolio.accounts

    def add_account(self, name: str, principal: Amount, rate: Amount) -> InvestmentAccount:
        account = self._validator.investment_account(name, principal, rate)
        self._state.portfolio.add(account)
        self._audit_logger.log_account_added(account)
        return account

    def delete_account(self, account_id: UUID) -> bool:
        deleted = self._state.portfolio.delete(account_id)
        if deleted:
            self._audit_logger.log_account_deleted(account_id)
        return deleted

    def projection(self) -> PortfolioProjection:
        return self._state.portfolio.projection()


class AdviceResponse(BaseModel):
    """What the advice panel shows."""

    success: bool
    tip: Optional[str] = None
    message: str = ""


class AdviceFlow:
    """
    Orchestrates the advice request.

    BOUNDARIES:
    1. Not enough data → refuse with guidance, no external call
    2. The advisor only sees a snapshot summary
    3. Collaborator failures become a message, never an exception
    """

    def __init__(
        self,
        state: AppState,
        advisor: Optional[FinancialAdvisor] = None,
        app_settings: Optional[AppSettings] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._state = state
        self._advisor = advisor
        self._app_settings = app_settings or get_settings().app
        self._audit_logger = audit_logger or get_audit_logger()

    def _get_advisor(self) -> FinancialAdvisor:
        if self._advisor is None:
            self._advisor = FinancialAdvisor()
        return self._advisor

    async def get_advice(self, today: Optional[date] = None) -> AdviceResponse:
        transactions = self._state.ledger.transactions
        payments = self._state.schedule.payments

        if not should_request_advice(
            len(transactions),
            len(payments),
            self._app_settings.advice_min_transactions,
        ):
            self._audit_logger.log_advice_refused(len(transactions), len(payments))
            return AdviceResponse(success=False, message=ADVICE_GUIDANCE)

        request = build_advice_request(
            transactions,
            payments,
            today or date.today(),
            max_transactions=self._app_settings.advice_max_transactions,
            max_payments=self._app_settings.advice_max_upcoming_payments,
        )

        try:
            tip = await self._get_advisor().generate_tip(request)
        except MissingCredentialError as e:
            self._audit_logger.log_external_service_error("gemini", str(e))
            return AdviceResponse(success=False, message=ADVICE_NO_CREDENTIAL_MESSAGE)
        except AdviceUnavailableError as e:
            self._audit_logger.log_external_service_error("gemini", str(e))
            return AdviceResponse(success=False, message=ADVICE_UNAVAILABLE_MESSAGE)

        self._audit_logger.log_advice_generated(
            len(request.transactions), len(request.upcoming_payments)
        )
        return AdviceResponse(success=True, tip=tip)


class AppComponents:
    """Everything a front end needs, built by create_app_components."""

    def __init__(
        self,
        repository: CollectionRepository,
        state: AppState,
        ledger_flow: LedgerFlow,
        schedule_flow: ScheduleFlow,
        portfolio_flow: PortfolioFlow,
        advice_flow: AdviceFlow,
        queries: QueryExecutor,
    ):
        self.repository = repository
        self.state = state
        self.ledger_flow = ledger_flow
        self.schedule_flow = schedule_flow
        self.portfolio_flow = portfolio_flow
        self.advice_flow = advice_flow
        self.queries = queries


def create_app_components(
    data_dir: Optional[Union[str, Path]] = None,
    store: Optional[KeyValueStore] = None,
    advisor: Optional[FinancialAdvisor] = None,
    setup_logging: bool = True,
) -> AppComponents:
    """
    Factory function to create all application components.

    Args:
        data_dir: Directory for the JSON files (defaults to STORAGE_DATA_DIR)
        store: Use this key-value store instead of JSON files
        advisor: Advice generator (defaults to the Gemini advisor)
        setup_logging: Configure structlog from AppSettings

    Returns:
        The wired components
    """
    settings = get_settings()

    if setup_logging:
        configure_logging(settings.app.log_level, settings.app.log_json)

    audit_logger = get_audit_logger()

    if store is None:
        store = JsonFileKeyValueStore(data_dir or settings.storage.data_dir)

    repository = CollectionRepository(store, settings.storage, audit_logger)
    state = create_app_state(repository, audit_logger)
    validator = InputValidator(audit_logger)

    return AppComponents(
        repository=repository,
        state=state,
        ledger_flow=LedgerFlow(state, validator, audit_logger),
        schedule_flow=ScheduleFlow(state, validator, audit_logger),
        portfolio_flow=PortfolioFlow(state, validator, audit_logger),
        advice_flow=AdviceFlow(state, advisor, settings.app, audit_logger),
        queries=QueryExecutor(state.ledger, state.schedule),
    )
