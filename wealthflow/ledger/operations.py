"""
Ledger Mutations

Every user edit is a pure function ``Store -> MutationResult``. The input
store is never modified; when an operation is refused the original store
comes back together with field-level issues.

CRITICAL: No entity is removed while something still references it.
Accounts and categories are deleted with the reassign-then-delete
protocol: every reference is rewritten to a replacement first, then the
entity is dropped, in one step.
"""

from typing import Optional, Union

from wealthflow.ids import IdGenerator, new_id
from wealthflow.ledger.aggregator import count_account_references
from wealthflow.models.ledger import (
    Account,
    Budget,
    Category,
    CategoryGroup,
    MutationResult,
    Store,
    Transaction,
    TransferTransaction,
    ValidationIssue,
)
from wealthflow.validation.validator import TransactionDraft, build_transaction


def _issue(field: str, issue_type: str, message: str) -> ValidationIssue:
    return ValidationIssue(field=field, issue_type=issue_type, message=message)


def _refuse(store: Store, *issues: ValidationIssue, entity_id: Optional[str] = None) -> MutationResult:
    return MutationResult(store=store, issues=list(issues), entity_id=entity_id)


def _clean_name(name: Optional[str]) -> str:
    return (name or "").strip()


# =============================================================================
# ACCOUNTS
# =============================================================================

def add_account(store: Store, name: str, new_id: IdGenerator = new_id) -> MutationResult:
    clean = _clean_name(name)
    if not clean:
        return _refuse(store, _issue("name", "missing", "Account name is required"))

    account = Account(id=new_id(), name=clean)
    return MutationResult(
        store=store.model_copy(update={"accounts": [*store.accounts, account]}),
        entity_id=account.id,
    )


def rename_account(store: Store, account_id: str, name: str) -> MutationResult:
    clean = _clean_name(name)
    if store.find_account(account_id) is None:
        return _refuse(store, _issue("account_id", "not_found", "Account does not exist"))
    if not clean:
        return _refuse(
            store, _issue("name", "missing", "Account name is required"), entity_id=account_id
        )

    accounts = [
        a.model_copy(update={"name": clean}) if a.id == account_id else a
        for a in store.accounts
    ]
    return MutationResult(store=store.model_copy(update={"accounts": accounts}), entity_id=account_id)


def toggle_account_archived(store: Store, account_id: str) -> MutationResult:
    """Archive an active account or restore an archived one."""
    if store.find_account(account_id) is None:
        return _refuse(store, _issue("account_id", "not_found", "Account does not exist"))

    accounts = [
        a.model_copy(update={"archived": not a.archived}) if a.id == account_id else a
        for a in store.accounts
    ]
    return MutationResult(store=store.model_copy(update={"accounts": accounts}), entity_id=account_id)


def _reassign_account(tx: Transaction, old_id: str, new_account_id: str) -> Optional[Transaction]:
    """
    Point a transaction at ``new_account_id`` instead of ``old_id``.

    Returns None for a transfer that would end up between one account and
    itself; such a transfer nets to zero so removing it keeps every balance.
    """
    if isinstance(tx, TransferTransaction):
        source = new_account_id if tx.from_account_id == old_id else tx.from_account_id
        target = new_account_id if tx.to_account_id == old_id else tx.to_account_id
        if source == target:
            return None
        if (source, target) == (tx.from_account_id, tx.to_account_id):
            return tx
        return tx.model_copy(update={"from_account_id": source, "to_account_id": target})
    if tx.account_id == old_id:
        return tx.model_copy(update={"account_id": new_account_id})
    return tx


def delete_account(
    store: Store,
    account_id: str,
    reassign_to: Optional[str] = None,
) -> MutationResult:
    """
    Delete an account, moving its transactions to ``reassign_to`` first.

    ``reassign_to`` is required whenever any transaction references the
    account.
    """
    if store.find_account(account_id) is None:
        return _refuse(store, _issue("account_id", "not_found", "Account does not exist"))

    references = count_account_references(store.transactions, account_id)

    if reassign_to is not None:
        if reassign_to == account_id:
            return _refuse(
                store,
                _issue("reassign_to", "same_account", "Choose a different account to reassign to"),
                entity_id=account_id,
            )
        if store.find_account(reassign_to) is None:
            return _refuse(
                store,
                _issue("reassign_to", "not_found", "Reassignment account does not exist"),
                entity_id=account_id,
            )
    elif references:
        return _refuse(
            store,
            _issue(
                "reassign_to",
                "missing",
                f"This account has {references} linked transactions. "
                "Reassign them before deleting.",
            ),
            entity_id=account_id,
        )

    transactions = store.transactions
    if references:
        transactions = [
            moved
            for moved in (
                _reassign_account(tx, account_id, reassign_to) for tx in store.transactions
            )
            if moved is not None
        ]

    return MutationResult(
        store=store.model_copy(update={
            "accounts": [a for a in store.accounts if a.id != account_id],
            "transactions": transactions,
        }),
        entity_id=account_id,
    )


# =============================================================================
# CATEGORIES
# =============================================================================

def add_category(
    store: Store,
    name: str,
    group: CategoryGroup,
    color: Optional[str] = None,
    new_id: IdGenerator = new_id,
) -> MutationResult:
    clean = _clean_name(name)
    if not clean:
        return _refuse(store, _issue("name", "missing", "Category name is required"))

    category = Category(id=new_id(), name=clean, group=group, color=color)
    return MutationResult(
        store=store.model_copy(update={"categories": [*store.categories, category]}),
        entity_id=category.id,
    )


def rename_category(store: Store, category_id: str, name: str) -> MutationResult:
    clean = _clean_name(name)
    if store.find_category(category_id) is None:
        return _refuse(store, _issue("category_id", "not_found", "Category does not exist"))
    if not clean:
        return _refuse(
            store, _issue("name", "missing", "Category name is required"), entity_id=category_id
        )

    categories = [
        c.model_copy(update={"name": clean}) if c.id == category_id else c
        for c in store.categories
    ]
    return MutationResult(
        store=store.model_copy(update={"categories": categories}),
        entity_id=category_id,
    )


def delete_category(store: Store, category_id: str, replacement_id: str) -> MutationResult:
    """
    Delete a category after pointing its budgets and transactions at a replacement.

    The replacement must be a different, existing category in the same group.
    """
    category = store.find_category(category_id)
    if category is None:
        return _refuse(store, _issue("category_id", "not_found", "Category does not exist"))

    if not replacement_id:
        return _refuse(
            store,
            _issue("replacement_id", "missing", "Choose a replacement category"),
            entity_id=category_id,
        )
    if replacement_id == category_id:
        return _refuse(
            store,
            _issue("replacement_id", "same_category", "Replacement must be a different category"),
            entity_id=category_id,
        )
    replacement = store.find_category(replacement_id)
    if replacement is None:
        return _refuse(
            store,
            _issue("replacement_id", "not_found", "Replacement category does not exist"),
            entity_id=category_id,
        )
    if replacement.group != category.group:
        return _refuse(
            store,
            _issue(
                "replacement_id",
                "group_mismatch",
                f"Replacement must also be an {category.group.value} category",
            ),
            entity_id=category_id,
        )

    budgets = [
        b.model_copy(update={"category_id": replacement_id}) if b.category_id == category_id else b
        for b in store.budgets
    ]
    transactions = [
        tx.model_copy(update={"category_id": replacement_id})
        if not isinstance(tx, TransferTransaction) and tx.category_id == category_id
        else tx
        for tx in store.transactions
    ]

    return MutationResult(
        store=store.model_copy(update={
            "categories": [c for c in store.categories if c.id != category_id],
            "budgets": budgets,
            "transactions": transactions,
        }),
        entity_id=category_id,
    )


# =============================================================================
# BUDGETS
# =============================================================================

def add_budget(
    store: Store,
    category_id: str,
    limit: Union[float, str],
    new_id: IdGenerator = new_id,
) -> MutationResult:
    """Add a spending limit to an expense category."""
    issues = []

    category = store.find_category(category_id) if category_id else None
    if not category_id:
        issues.append(_issue("category_id", "missing", "Category is required"))
    elif category is None:
        issues.append(_issue("category_id", "not_found", "Category does not exist"))
    elif category.group != CategoryGroup.EXPENSE:
        issues.append(_issue(
            "category_id", "group_mismatch", "Budgets can only be set on expense categories"
        ))

    try:
        parsed_limit = float(limit)
    except (TypeError, ValueError):
        parsed_limit = None
    if parsed_limit is None or parsed_limit != parsed_limit:
        issues.append(_issue("limit", "invalid_value", "Limit must be a number"))
    elif parsed_limit <= 0:
        issues.append(_issue("limit", "invalid_value", "Limit must be greater than zero"))

    if issues:
        return _refuse(store, *issues)

    budget = Budget(id=new_id(), category_id=category_id, limit=parsed_limit)
    return MutationResult(
        store=store.model_copy(update={"budgets": [*store.budgets, budget]}),
        entity_id=budget.id,
    )


def delete_budget(store: Store, budget_id: str) -> MutationResult:
    if not any(b.id == budget_id for b in store.budgets):
        return _refuse(store, _issue("budget_id", "not_found", "Budget does not exist"))
    return MutationResult(
        store=store.model_copy(update={
            "budgets": [b for b in store.budgets if b.id != budget_id],
        }),
        entity_id=budget_id,
    )


# =============================================================================
# TRANSACTIONS
# =============================================================================

def save_transaction(
    store: Store,
    draft: TransactionDraft,
    editing_id: Optional[str] = None,
    new_id: IdGenerator = new_id,
) -> MutationResult:
    """
    Create or update a transaction from the form draft.

    New transactions are prepended (most recent first); edits replace the
    original in place and keep its id.
    """
    existing = None
    if editing_id is not None:
        existing = next((tx for tx in store.transactions if tx.id == editing_id), None)
        if existing is None:
            return _refuse(
                store, _issue("transaction_id", "not_found", "Transaction does not exist")
            )

    built = build_transaction(draft, store, editing_id or new_id(), existing=existing)
    if not built.ok:
        return _refuse(store, *built.issues, entity_id=editing_id)

    tx = built.transaction
    if existing is None:
        transactions = [tx, *store.transactions]
    else:
        transactions = [tx if item.id == editing_id else item for item in store.transactions]

    return MutationResult(
        store=store.model_copy(update={"transactions": transactions}),
        entity_id=tx.id,
    )


def delete_transaction(store: Store, transaction_id: str) -> MutationResult:
    if not any(tx.id == transaction_id for tx in store.transactions):
        return _refuse(store, _issue("transaction_id", "not_found", "Transaction does not exist"))
    return MutationResult(
        store=store.model_copy(update={
            "transactions": [tx for tx in store.transactions if tx.id != transaction_id],
        }),
        entity_id=transaction_id,
    )
