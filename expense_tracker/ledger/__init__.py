"""Transaction ledger package."""

from expense_tracker.ledger.ledger import Ledger, TransactionsChanged

__all__ = ["Ledger", "TransactionsChanged"]
