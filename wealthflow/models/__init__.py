"""
Data Models Package

This package contains all Pydantic models used by WealthFlow.
Everything persisted, imported or derived conforms to these schemas.
"""

from wealthflow.models.ledger import (
    CURRENT_SCHEMA_VERSION,
    UNKNOWN_NAME,
    Account,
    Budget,
    BudgetProgress,
    CategorizedTransaction,
    Category,
    CategoryGroup,
    ExpenseTransaction,
    FlowGraph,
    FlowLink,
    FlowNode,
    ImportResult,
    IncomeTransaction,
    LoadResult,
    MonthlyTotals,
    MutationResult,
    NamedAmount,
    Store,
    Suggestion,
    Transaction,
    TransactionBuildResult,
    TransactionType,
    TransferTransaction,
    ValidationIssue,
)
from wealthflow.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Ledger models
    "CURRENT_SCHEMA_VERSION",
    "UNKNOWN_NAME",
    "Account",
    "Budget",
    "BudgetProgress",
    "CategorizedTransaction",
    "Category",
    "CategoryGroup",
    "ExpenseTransaction",
    "FlowGraph",
    "FlowLink",
    "FlowNode",
    "ImportResult",
    "IncomeTransaction",
    "LoadResult",
    "MonthlyTotals",
    "MutationResult",
    "NamedAmount",
    "Store",
    "Suggestion",
    "Transaction",
    "TransactionBuildResult",
    "TransactionType",
    "TransferTransaction",
    "ValidationIssue",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
