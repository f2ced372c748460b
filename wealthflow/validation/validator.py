"""
Input Validation

Two gates sit in front of the ledger:

GATE 1 - IMPORTED PAYLOADS (``validate_store_payload``):
- Shallow structural check of a backup before migration
- Returns the first violation as a message the user can act on
- Does not check cross-references; dangling ids render as "Unknown"

GATE 2 - USER INPUT (``build_transaction``):
- Turns the transaction form's draft into a typed Transaction
- Reports every problem as a field-level ValidationIssue
- Never raises

IMPORTANT: Validation never silently fixes input. It reports issues and
leaves the decision to the caller.
"""

from collections.abc import Mapping
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from wealthflow.models.ledger import (
    CategoryGroup,
    ExpenseTransaction,
    IncomeTransaction,
    Store,
    Transaction,
    TransactionBuildResult,
    TransactionType,
    TransferTransaction,
    ValidationIssue,
)


# =============================================================================
# GATE 1 - IMPORTED PAYLOADS
# =============================================================================

INVALID_OBJECT = "Invalid file: JSON object expected."
ACCOUNTS_REQUIRED = "Invalid file: accounts[] is required."
TRANSACTIONS_REQUIRED = "Invalid file: transactions[] is required."
BUDGETS_REQUIRED = "Invalid file: budgets[] is required."
CATEGORIES_NOT_ARRAY = "Invalid file: categories must be an array when present."
ACCOUNT_FIELDS_REQUIRED = "Invalid file: each account must include id and name."
TRANSACTION_FIELDS_REQUIRED = (
    "Invalid file: each transaction must include id, type, date, and amount."
)

ACCOUNT_REQUIRED_KEYS = ("id", "name")
TRANSACTION_REQUIRED_KEYS = ("id", "type", "date", "amount")


def _has_keys(item: Any, keys: tuple[str, ...]) -> bool:
    return isinstance(item, Mapping) and all(key in item for key in keys)


def validate_store_payload(raw: Any) -> Optional[str]:
    """
    Check an imported payload has the minimal store shape.

    Returns the first failing message, or None when the payload may be
    handed to ``migrate``.
    """
    if not isinstance(raw, Mapping):
        return INVALID_OBJECT

    if not isinstance(raw.get("accounts"), list):
        return ACCOUNTS_REQUIRED
    if not isinstance(raw.get("transactions"), list):
        return TRANSACTIONS_REQUIRED
    if not isinstance(raw.get("budgets"), list):
        return BUDGETS_REQUIRED
    if "categories" in raw and not isinstance(raw["categories"], list):
        return CATEGORIES_NOT_ARRAY

    if not all(_has_keys(a, ACCOUNT_REQUIRED_KEYS) for a in raw["accounts"]):
        return ACCOUNT_FIELDS_REQUIRED
    if not all(_has_keys(t, TRANSACTION_REQUIRED_KEYS) for t in raw["transactions"]):
        return TRANSACTION_FIELDS_REQUIRED

    return None


# =============================================================================
# GATE 2 - USER INPUT
# =============================================================================

class TransactionDraft(BaseModel):
    """
    Raw transaction form state.

    Every field is the text the user typed or picked; nothing is trusted
    until ``build_transaction`` has checked it.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    date: str = ""
    amount: str = ""
    type: TransactionType = TransactionType.EXPENSE
    account_id: str = ""
    category_id: str = ""
    vendor: str = ""
    memo: str = ""
    from_account_id: str = ""
    to_account_id: str = ""


def draft_from_transaction(tx: Transaction) -> TransactionDraft:
    """Pre-fill the form for editing an existing transaction."""
    amount = f"{tx.amount:g}"
    if isinstance(tx, TransferTransaction):
        return TransactionDraft(
            date=tx.date,
            amount=amount,
            type=TransactionType.TRANSFER,
            vendor=tx.vendor or tx.memo or "",
            memo=tx.memo or "",
            from_account_id=tx.from_account_id,
            to_account_id=tx.to_account_id,
        )
    return TransactionDraft(
        date=tx.date,
        amount=amount,
        type=TransactionType(tx.type),
        account_id=tx.account_id,
        category_id=tx.category_id,
        vendor=tx.vendor or "",
        memo=tx.memo or "",
    )


def _issue(field: str, issue_type: str, message: str) -> ValidationIssue:
    return ValidationIssue(field=field, issue_type=issue_type, message=message)


def _parse_amount(raw: str) -> tuple[Optional[float], Optional[ValidationIssue]]:
    try:
        amount = float(raw)
    except ValueError:
        return None, _issue("amount", "invalid_value", "Amount must be a number")
    if amount != amount or amount in (float("inf"), float("-inf")):
        return None, _issue("amount", "invalid_value", "Amount must be a number")
    if amount <= 0:
        return None, _issue("amount", "invalid_value", "Amount must be greater than zero")
    return amount, None


def _check_date(raw: str) -> Optional[ValidationIssue]:
    if not raw:
        return _issue("date", "missing", "Date is required")
    try:
        if len(raw) != 10:
            raise ValueError(raw)
        datetime.strptime(raw, "%Y-%m-%d")
    except ValueError:
        return _issue("date", "invalid_format", "Date must be in YYYY-MM-DD format")
    return None


def _check_account(
    store: Store,
    field: str,
    account_id: str,
    label: str,
    allowed_archived: frozenset[str],
) -> Optional[ValidationIssue]:
    if not account_id:
        return _issue(field, "missing", f"{label} is required")
    account = store.find_account(account_id)
    if account is None:
        return _issue(field, "not_found", f"{label} does not exist")
    if account.archived and account_id not in allowed_archived:
        return _issue(field, "archived", f"{label} '{account.name}' is archived")
    return None


def build_transaction(
    draft: TransactionDraft,
    store: Store,
    transaction_id: str,
    existing: Optional[Transaction] = None,
) -> TransactionBuildResult:
    """
    Validate a form draft against the store and build the transaction.

    ``existing`` is the transaction being edited, if any; accounts it
    already referenced stay usable even if they have since been archived.

    Category group is enforced here: income needs an Income category,
    expense needs an Expense category.
    """
    issues: list[ValidationIssue] = []

    amount, amount_issue = _parse_amount(draft.amount)
    if amount_issue:
        issues.append(amount_issue)

    date_issue = _check_date(draft.date)
    if date_issue:
        issues.append(date_issue)

    allowed_archived: frozenset[str] = frozenset()
    if isinstance(existing, TransferTransaction):
        allowed_archived = frozenset({existing.from_account_id, existing.to_account_id})
    elif existing is not None:
        allowed_archived = frozenset({existing.account_id})

    vendor = draft.vendor or None
    memo = draft.memo or None

    if draft.type == TransactionType.TRANSFER:
        for field, account_id, label in (
            ("from_account_id", draft.from_account_id, "From account"),
            ("to_account_id", draft.to_account_id, "To account"),
        ):
            issue = _check_account(store, field, account_id, label, allowed_archived)
            if issue:
                issues.append(issue)
        if draft.from_account_id and draft.from_account_id == draft.to_account_id:
            issues.append(_issue(
                "to_account_id",
                "same_account",
                "Transfer needs two different accounts",
            ))
        if issues:
            return TransactionBuildResult(issues=issues)
        return TransactionBuildResult(transaction=TransferTransaction(
            id=transaction_id,
            date=draft.date,
            amount=amount,
            vendor=vendor,
            memo=memo,
            from_account_id=draft.from_account_id,
            to_account_id=draft.to_account_id,
        ))

    account_issue = _check_account(
        store, "account_id", draft.account_id, "Account", allowed_archived
    )
    if account_issue:
        issues.append(account_issue)

    expected_group = (
        CategoryGroup.INCOME if draft.type == TransactionType.INCOME
        else CategoryGroup.EXPENSE
    )
    if not draft.category_id:
        issues.append(_issue("category_id", "missing", "Category is required"))
    else:
        category = store.find_category(draft.category_id)
        if category is None:
            issues.append(_issue("category_id", "not_found", "Category does not exist"))
        elif category.group != expected_group:
            issues.append(_issue(
                "category_id",
                "group_mismatch",
                f"'{category.name}' is an {category.group.value} category; "
                f"{draft.type.value} transactions need an {expected_group.value} category",
            ))

    if issues:
        return TransactionBuildResult(issues=issues)

    model = IncomeTransaction if draft.type == TransactionType.INCOME else ExpenseTransaction
    return TransactionBuildResult(transaction=model(
        id=transaction_id,
        date=draft.date,
        amount=amount,
        vendor=vendor,
        memo=memo,
        account_id=draft.account_id,
        category_id=draft.category_id,
    ))


def field_errors(issues: list[ValidationIssue]) -> dict[str, str]:
    """First error message per field, for inline form messages."""
    errors: dict[str, str] = {}
    for issue in issues:
        if issue.severity == "error":
            errors.setdefault(issue.field, issue.message)
    return errors
