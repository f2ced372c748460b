"""
Ledger Derivation Package

Pure functions that derive balances, rankings and flow graphs from a
Store, and the mutations that produce new Stores.
"""

from wealthflow.ledger.aggregator import (
    MANUAL_ENTRY_LABEL,
    account_balances,
    active_accounts,
    available_months,
    budget_progress,
    categories_for,
    category_spend,
    category_spend_named,
    count_account_references,
    derive_balances,
    month_key,
    month_summary,
    monthly_totals,
    rank_amounts,
    top_categories,
    vendor_spend,
)
from wealthflow.ledger.flow import INCOME_NODE, NodeRole, build_flow_graph
from wealthflow.ledger.operations import (
    add_account,
    add_budget,
    add_category,
    delete_account,
    delete_budget,
    delete_category,
    delete_transaction,
    rename_account,
    rename_category,
    save_transaction,
    toggle_account_archived,
)
from wealthflow.ledger.suggestions import (
    query_weight,
    recency_weight,
    suggest,
    suggestion_label,
)

__all__ = [
    # Aggregations
    "MANUAL_ENTRY_LABEL",
    "account_balances",
    "active_accounts",
    "available_months",
    "budget_progress",
    "categories_for",
    "category_spend",
    "category_spend_named",
    "count_account_references",
    "derive_balances",
    "month_key",
    "month_summary",
    "monthly_totals",
    "rank_amounts",
    "top_categories",
    "vendor_spend",
    # Flow graph
    "INCOME_NODE",
    "NodeRole",
    "build_flow_graph",
    # Mutations
    "add_account",
    "add_budget",
    "add_category",
    "delete_account",
    "delete_budget",
    "delete_category",
    "delete_transaction",
    "rename_account",
    "rename_category",
    "save_transaction",
    "toggle_account_archived",
    # Suggestions
    "query_weight",
    "recency_weight",
    "suggest",
    "suggestion_label",
]
