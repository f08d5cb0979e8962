"""
Investment Projector

Single-period, non-compounding projection:

    projected_value = principal * (1 + rate / 100)

Accounts are validated when they are created (principal > 0, rate >= 0),
so projection itself cannot fail.
"""

from decimal import Decimal
from typing import Callable, Iterable, Optional
from uuid import UUID

from expense_tracker.models.finance import (
    AccountProjection,
    InvestmentAccount,
    PortfolioProjection,
)

AccountsChanged = Callable[[list[InvestmentAccount]], None]

_HUNDRED = Decimal("100")


def project_account(account: InvestmentAccount) -> AccountProjection:
    """One-year value of a single account."""
    projected = account.principal * (1 + account.rate / _HUNDRED)
    return AccountProjection(account=account, projected_value=projected)


def project_portfolio(accounts: Iterable[InvestmentAccount]) -> PortfolioProjection:
    """Per-account projections plus portfolio totals."""
    projections = [project_account(a) for a in accounts]
    return PortfolioProjection(
        accounts=projections,
        total_invested=sum((p.account.principal for p in projections), Decimal("0")),
        total_projected_value=sum((p.projected_value for p in projections), Decimal("0")),
    )


class InvestmentPortfolio:
    """
    The investment accounts collection.

    Has no relation to the ledger or the scheduled payments.
    """

    def __init__(
        self,
        accounts: Optional[Iterable[InvestmentAccount]] = None,
        on_change: Optional[AccountsChanged] = None,
    ):
        self._accounts: list[InvestmentAccount] = list(accounts or [])
        self._on_change = on_change

    @property
    def accounts(self) -> list[InvestmentAccount]:
        return list(self._accounts)

    def __len__(self) -> int:
        return len(self._accounts)

    def _changed(self) -> None:
        if self._on_change:
            self._on_change(self.accounts)

    def add(self, account: InvestmentAccount) -> InvestmentAccount:
        """Append a validated account."""
        self._accounts.append(account)
        self._changed()
        return account

    def delete(self, account_id: UUID) -> bool:
        """Remove an account. Unknown ids are a no-op."""
        remaining = [a for a in self._accounts if a.id != account_id]
        if len(remaining) == len(self._accounts):
            return False

        self._accounts = remaining
        self._changed()
        return True

    def projection(self) -> PortfolioProjection:
        return project_portfolio(self._accounts)
