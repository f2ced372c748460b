"""
Ledger Aggregator

Pure derivations over the transaction list: balances, spend by category
and vendor, monthly totals and budget progress.

DESIGN DECISION: Nothing here is cached or maintained incrementally.
Every view is recomputed from the full transaction list on each change,
and no function depends on the order of that list or mutates it.

Every ranked output uses the same total order: amount descending, then
name ascending. The explicit tie-break keeps charts and tests stable.
"""

from collections import defaultdict
from collections.abc import Iterable
from typing import Optional

from wealthflow.models.ledger import (
    Account,
    BudgetProgress,
    Category,
    CategoryGroup,
    ExpenseTransaction,
    IncomeTransaction,
    MonthlyTotals,
    NamedAmount,
    Store,
    Transaction,
    TransferTransaction,
)


MANUAL_ENTRY_LABEL = "Manual Entry"


def month_key(date_str: str) -> str:
    """``YYYY-MM`` bucket for an ISO date string."""
    return date_str[:7]


def rank_amounts(totals: dict[str, float], limit: Optional[int] = None) -> list[NamedAmount]:
    """Sort totals by amount descending, then name ascending."""
    ranked = sorted(totals.items(), key=lambda item: (-item[1], item[0]))
    if limit is not None:
        ranked = ranked[:limit]
    return [NamedAmount(name=name, amount=amount) for name, amount in ranked]


# =============================================================================
# BALANCES
# =============================================================================

def derive_balances(transactions: Iterable[Transaction]) -> dict[str, float]:
    """
    Net balance per account id.

    Only accounts that appear in a transaction are present; callers treat a
    missing id as 0.
    """
    balances: dict[str, float] = defaultdict(float)

    for tx in transactions:
        if isinstance(tx, IncomeTransaction):
            balances[tx.account_id] += tx.amount
        elif isinstance(tx, ExpenseTransaction):
            balances[tx.account_id] -= tx.amount
        elif isinstance(tx, TransferTransaction):
            balances[tx.from_account_id] -= tx.amount
            balances[tx.to_account_id] += tx.amount

    return dict(balances)


def account_balances(store: Store) -> dict[str, float]:
    """Balances for every known account (0 when unused), plus any dangling ids."""
    balances = {account.id: 0.0 for account in store.accounts}
    balances.update(derive_balances(store.transactions))
    return balances


def count_account_references(transactions: Iterable[Transaction], account_id: str) -> int:
    """How many transactions touch an account (either side of a transfer counts)."""
    count = 0
    for tx in transactions:
        if isinstance(tx, TransferTransaction):
            if account_id in (tx.from_account_id, tx.to_account_id):
                count += 1
        elif tx.account_id == account_id:
            count += 1
    return count


# =============================================================================
# SPEND BREAKDOWNS
# =============================================================================

def category_spend(transactions: Iterable[Transaction]) -> dict[str, float]:
    """Expense totals keyed by category id."""
    totals: dict[str, float] = defaultdict(float)
    for tx in transactions:
        if isinstance(tx, ExpenseTransaction):
            totals[tx.category_id] += tx.amount
    return dict(totals)


def category_spend_named(store: Store) -> list[NamedAmount]:
    """
    Expense totals by category name, ranked.

    Dangling ids resolve to "Unknown"; categories sharing a display name
    are merged.
    """
    totals: dict[str, float] = defaultdict(float)
    for category_id, amount in category_spend(store.transactions).items():
        totals[store.category_name(category_id)] += amount
    return rank_amounts(totals)


def vendor_spend(
    transactions: Iterable[Transaction],
    limit: Optional[int] = 10,
) -> list[NamedAmount]:
    """Expense totals by vendor, ranked. Blank vendors count as "Manual Entry"."""
    totals: dict[str, float] = defaultdict(float)
    for tx in transactions:
        if isinstance(tx, ExpenseTransaction):
            vendor = (tx.vendor or "").strip() or MANUAL_ENTRY_LABEL
            totals[vendor] += tx.amount
    return rank_amounts(totals, limit)


# =============================================================================
# MONTHLY VIEWS
# =============================================================================

def monthly_totals(transactions: Iterable[Transaction]) -> dict[str, MonthlyTotals]:
    """Income and expense per ``YYYY-MM``. Transfers are excluded."""
    months: dict[str, MonthlyTotals] = {}
    for tx in transactions:
        if isinstance(tx, TransferTransaction):
            continue
        key = month_key(tx.date)
        totals = months.setdefault(key, MonthlyTotals(month=key))
        if isinstance(tx, IncomeTransaction):
            totals.income += tx.amount
        else:
            totals.expense += tx.amount
    return months


def month_summary(transactions: Iterable[Transaction], month: str) -> MonthlyTotals:
    """Totals for a single month (zeros when nothing happened)."""
    return monthly_totals(transactions).get(month, MonthlyTotals(month=month))


def available_months(transactions: Iterable[Transaction]) -> list[str]:
    """Distinct months with any activity, newest first."""
    return sorted({month_key(tx.date) for tx in transactions}, reverse=True)


def top_categories(store: Store, month: str, limit: int = 5) -> list[NamedAmount]:
    """Highest-spend expense categories for one month, by name."""
    totals: dict[str, float] = defaultdict(float)
    for tx in store.transactions:
        if isinstance(tx, ExpenseTransaction) and month_key(tx.date) == month:
            totals[store.category_name(tx.category_id)] += tx.amount
    return rank_amounts(totals, limit)


# =============================================================================
# BUDGETS
# =============================================================================

def budget_progress(store: Store) -> list[BudgetProgress]:
    """
    Spend against budget, one row per budgeted category.

    Duplicate budgets on the same category are summed into one limit.
    Rows follow the order in which categories first appear in the budgets.
    """
    limits: dict[str, float] = {}
    for budget in store.budgets:
        limits[budget.category_id] = limits.get(budget.category_id, 0.0) + budget.limit

    spend = category_spend(store.transactions)
    return [
        BudgetProgress(
            category_id=category_id,
            category_name=store.category_name(category_id),
            limit=limit,
            spent=spend.get(category_id, 0.0),
        )
        for category_id, limit in limits.items()
    ]


def active_accounts(store: Store) -> list[Account]:
    """Accounts offered when entering a new transaction."""
    return [account for account in store.accounts if not account.archived]


def categories_for(store: Store, group: CategoryGroup) -> list[Category]:
    """Categories offered for a transaction of the given side."""
    return [category for category in store.categories if category.group == group]
