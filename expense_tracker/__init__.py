"""
Expense Tracker - Source Package

A personal finance tracker: a transaction ledger, recurring scheduled
payments that reconcile into the ledger when paid, and simple
investment projections.

DESIGN PRINCIPLES:
1. Validate first, then mutate
2. Money is Decimal, never float
3. A scheduled payment becomes exactly one transaction, once
4. Every step must be auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Expense Tracker Team"
