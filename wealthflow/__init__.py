"""
WealthFlow - Ledger Core

A local-first personal finance ledger: accounts, categories, budgets and
income/expense/transfer transactions, with derived balances, vendor
autocomplete, money-flow graphs and versioned schema migration.

DESIGN PRINCIPLES:
1. Balances are derived, never stored
2. Every mutation returns a new Store
3. Loading never fails; bad data degrades to a default store
4. Every persisted change is auditable
5. Storage backend is swappable
"""

__version__ = "2.0.0"
__author__ = "WealthFlow Team"
