"""
Core Ledger Models for WealthFlow

These models define the canonical (schema version 2) shape of everything
the ledger persists and derives:
1. Accounts, categories and budgets
2. Transactions as a discriminated union on ``type``
3. The Store aggregate root that owns all of them
4. Result shapes for suggestions, flow graphs and derived totals

DESIGN DECISION: Field names are snake_case in Python and camelCase on the
wire. The persisted and exported JSON documents use ``accountId``,
``schemaVersion`` and friends, so every model shares an alias generator and
``Store.to_document()`` always dumps by alias.

Amounts are always positive. Direction lives in the transaction ``type``,
never in the sign.
"""

from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel


CURRENT_SCHEMA_VERSION = 2

UNKNOWN_NAME = "Unknown"


class LedgerModel(BaseModel):
    """Shared configuration for every persisted ledger entity."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",
    )


# =============================================================================
# ENUMS
# =============================================================================

class CategoryGroup(str, Enum):
    """Which side of the ledger a category belongs to."""
    INCOME = "Income"
    EXPENSE = "Expense"


class TransactionType(str, Enum):
    """Transaction discriminator values."""
    INCOME = "income"
    EXPENSE = "expense"
    TRANSFER = "transfer"


# =============================================================================
# ENTITIES
# =============================================================================

class Account(LedgerModel):
    """
    A place money lives (checking account, card, cash).

    Archived accounts stay in the ledger for history but are hidden from
    new-transaction pickers.
    """

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=200)
    archived: bool = False


class Category(LedgerModel):
    """An income or expense bucket."""

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=200)
    group: CategoryGroup = Field(
        default=CategoryGroup.EXPENSE,
        description="Stored categories without a group are read as expense",
    )
    color: Optional[str] = None

    @field_validator("group", mode="before")
    @classmethod
    def default_missing_group(cls, v):
        return CategoryGroup.EXPENSE if v is None else v


class Budget(LedgerModel):
    """
    Spending limit for a category.

    One budget per category is the UI convention only. Duplicates are
    allowed and summed by the aggregator.
    """

    id: str = Field(..., min_length=1)
    category_id: str = Field(..., min_length=1)
    limit: float = Field(..., gt=0)


class _TransactionBase(LedgerModel):
    id: str = Field(..., min_length=1)
    date: str = Field(
        ...,
        min_length=1,
        description="ISO 8601 calendar date, e.g. 2024-03-15",
    )
    amount: float = Field(..., gt=0, description="Always positive")
    vendor: Optional[str] = None
    memo: Optional[str] = None


class IncomeTransaction(_TransactionBase):
    """Money arriving into an account."""

    type: Literal["income"] = "income"
    account_id: str = Field(..., min_length=1)
    category_id: str = Field(..., min_length=1)


class ExpenseTransaction(_TransactionBase):
    """Money leaving an account."""

    type: Literal["expense"] = "expense"
    account_id: str = Field(..., min_length=1)
    category_id: str = Field(..., min_length=1)


class TransferTransaction(_TransactionBase):
    """Money moving between two of the user's own accounts. No category."""

    type: Literal["transfer"] = "transfer"
    from_account_id: str = Field(..., min_length=1)
    to_account_id: str = Field(..., min_length=1)

    @model_validator(mode="after")
    def validate_distinct_accounts(self) -> "TransferTransaction":
        if self.from_account_id == self.to_account_id:
            raise ValueError("Transfer source and destination must differ")
        return self


Transaction = Annotated[
    Union[IncomeTransaction, ExpenseTransaction, TransferTransaction],
    Field(discriminator="type"),
]

CategorizedTransaction = Union[IncomeTransaction, ExpenseTransaction]


# =============================================================================
# AGGREGATE ROOT
# =============================================================================

class Store(LedgerModel):
    """
    The full persisted application state.

    ``transactions`` is kept most-recent-first by convention. Nothing that
    reads the store may depend on that order.
    """

    schema_version: Literal[2] = CURRENT_SCHEMA_VERSION
    accounts: list[Account] = Field(default_factory=list)
    categories: list[Category] = Field(default_factory=list)
    budgets: list[Budget] = Field(default_factory=list)
    transactions: list[Transaction] = Field(default_factory=list)
    updated_at: str = Field(..., description="ISO 8601 timestamp of last write")

    def to_document(self) -> dict:
        """JSON-ready dict in the persisted (camelCase) wire format."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def find_account(self, account_id: str) -> Optional[Account]:
        return next((a for a in self.accounts if a.id == account_id), None)

    def find_category(self, category_id: str) -> Optional[Category]:
        return next((c for c in self.categories if c.id == category_id), None)

    def account_name(self, account_id: Optional[str]) -> str:
        account = self.find_account(account_id) if account_id else None
        return account.name if account else UNKNOWN_NAME

    def category_name(self, category_id: Optional[str]) -> str:
        category = self.find_category(category_id) if category_id else None
        return category.name if category else UNKNOWN_NAME


# =============================================================================
# DERIVED RESULT MODELS
# =============================================================================

class Suggestion(BaseModel):
    """A ranked autocomplete candidate for the transaction form."""

    vendor: str
    category_id: Optional[str] = None
    account_id: Optional[str] = None
    score: float = Field(..., ge=0)


class FlowNode(BaseModel):
    name: str


class FlowLink(BaseModel):
    source: int = Field(..., ge=0, description="Index into FlowGraph.nodes")
    target: int = Field(..., ge=0, description="Index into FlowGraph.nodes")
    value: float = Field(..., gt=0)


class FlowGraph(BaseModel):
    """
    Sankey-ready money flow graph.

    Links never repeat a (source, target) pair; amounts for the same pair
    are summed into one link.
    """

    nodes: list[FlowNode] = Field(default_factory=list)
    links: list[FlowLink] = Field(default_factory=list)

    def node_names(self) -> list[str]:
        return [node.name for node in self.nodes]


class NamedAmount(BaseModel):
    """A labelled total, e.g. spend for one vendor or category."""

    name: str
    amount: float


class MonthlyTotals(BaseModel):
    month: str = Field(..., description="YYYY-MM")
    income: float = 0.0
    expense: float = 0.0

    @property
    def net(self) -> float:
        return self.income - self.expense


class BudgetProgress(BaseModel):
    """Spend against the combined limit of every budget on one category."""

    category_id: str
    category_name: str
    limit: float
    spent: float

    @property
    def progress_pct(self) -> float:
        if self.limit <= 0:
            return 100.0
        return min(100.0, self.spent / self.limit * 100)

    @property
    def remaining(self) -> float:
        return self.limit - self.spent

    @property
    def is_over(self) -> bool:
        return self.spent > self.limit


# =============================================================================
# VALIDATION AND OPERATION RESULT MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single field-level problem with user input."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value', 'not_found')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        default="error",
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )


def _has_errors(issues: list[ValidationIssue]) -> bool:
    return any(issue.severity == "error" for issue in issues)


class TransactionBuildResult(BaseModel):
    """Outcome of turning a form draft into a transaction."""

    transaction: Optional[Transaction] = None
    issues: list[ValidationIssue] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.transaction is not None and not _has_errors(self.issues)


class MutationResult(BaseModel):
    """
    Outcome of a ledger mutation.

    On failure ``store`` is the unchanged input store.
    """

    store: Store
    issues: list[ValidationIssue] = Field(default_factory=list)
    entity_id: Optional[str] = Field(
        default=None,
        description="Id of the entity created, changed or removed"
    )

    @property
    def ok(self) -> bool:
        return not _has_errors(self.issues)

    @property
    def messages(self) -> list[str]:
        return [issue.message for issue in self.issues]


class LoadResult(BaseModel):
    """What the persistence layer hands back on load."""

    store: Store
    warning: Optional[str] = None


class ImportResult(BaseModel):
    """Outcome of parsing an imported backup file."""

    store: Optional[Store] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.store is not None and self.error is None
