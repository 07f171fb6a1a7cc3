"""
Finance Tracker - Source Package

A personal finance tracker: credit/debit transactions, debts and a
derived running balance, persisted to flat CSV files.

DESIGN PRINCIPLES:
1. The balance is always derived, never stored
2. Fail early, fail visibly
3. Debts are counted once, through the debt ledger
4. Every mutation is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Finance Tracker Team"
