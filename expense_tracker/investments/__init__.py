"""Investment accounts package."""

from expense_tracker.investments.projector import (
    AccountsChanged,
    InvestmentPortfolio,
    project_account,
    project_portfolio,
)

__all__ = [
    "AccountsChanged",
    "InvestmentPortfolio",
    "project_account",
    "project_portfolio",
]
