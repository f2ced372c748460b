"""
Schema Migrator

Turns whatever the storage backend (or an imported backup) hands us into a
fully populated, current-schema Store.

DESIGN DECISION: Migration is an explicit version chain. Each step is a
pure ``dict -> dict`` function that lifts a document exactly one version;
``migrate`` detects the starting version once and composes steps until it
reaches CURRENT_SCHEMA_VERSION. Adding v3 later means adding one step,
not another round of shape-sniffing.

IMPORTANT: ``migrate`` never raises. Input that is not store-shaped at all
falls back to the seeded default store; individual entities that cannot be
coerced are dropped and logged.
"""

from collections.abc import Mapping
from typing import Any, Callable, Optional

import structlog
from pydantic import BaseModel, TypeAdapter, ValidationError

from wealthflow.ids import Clock, IdGenerator, iso_timestamp, new_id, utc_now
from wealthflow.models.ledger import (
    CURRENT_SCHEMA_VERSION,
    Account,
    Budget,
    Category,
    CategoryGroup,
    Store,
    Transaction,
)


logger = structlog.get_logger(__name__)

LEGACY_SCHEMA_VERSION = 1

STORE_KEYS = frozenset(
    {"schemaVersion", "accounts", "categories", "budgets", "transactions"}
)

LEGACY_INCOME_FALLBACK = "Income"
LEGACY_EXPENSE_FALLBACK = "Uncategorized"


# =============================================================================
# DEFAULT STORE
# =============================================================================

DEFAULT_ACCOUNT_NAMES = ("Main Checking", "Credit Card")

DEFAULT_CATEGORIES = (
    ("Salary", CategoryGroup.INCOME, "#22c55e"),
    ("Dining", CategoryGroup.EXPENSE, "#f97316"),
    ("Groceries", CategoryGroup.EXPENSE, "#60a5fa"),
)

DEFAULT_BUDGET_CATEGORY = "Dining"
DEFAULT_BUDGET_LIMIT = 500.0


def create_default_store(
    new_id: IdGenerator = new_id,
    now: Clock = utc_now,
) -> Store:
    """
    The seeded workspace used for first runs and unreadable input.

    Two accounts, three categories (Salary, Dining, Groceries) and a
    budget on Dining.
    """
    accounts = [Account(id=new_id(), name=name) for name in DEFAULT_ACCOUNT_NAMES]
    categories = [
        Category(id=new_id(), name=name, group=group, color=color)
        for name, group, color in DEFAULT_CATEGORIES
    ]
    dining = next(c for c in categories if c.name == DEFAULT_BUDGET_CATEGORY)
    budgets = [Budget(id=new_id(), category_id=dining.id, limit=DEFAULT_BUDGET_LIMIT)]

    return Store(
        accounts=accounts,
        categories=categories,
        budgets=budgets,
        transactions=[],
        updated_at=iso_timestamp(now),
    )


# =============================================================================
# VERSION DETECTION
# =============================================================================

def detect_schema_version(raw: Any) -> Optional[int]:
    """
    Decide which schema version a raw document is in.

    Returns None when the input is not store-shaped at all (not a mapping,
    or a mapping with none of the store keys).
    """
    if isinstance(raw, Store):
        return CURRENT_SCHEMA_VERSION
    if not isinstance(raw, Mapping) or not STORE_KEYS.intersection(raw.keys()):
        return None
    if (
        raw.get("schemaVersion") == CURRENT_SCHEMA_VERSION
        and isinstance(raw.get("categories"), list)
    ):
        return CURRENT_SCHEMA_VERSION
    return LEGACY_SCHEMA_VERSION


# =============================================================================
# MIGRATION STEPS
# =============================================================================

def _as_list(value: Any) -> list:
    return value if isinstance(value, list) else []


def migrate_v1_to_v2(doc: dict, new_id: IdGenerator = new_id) -> dict:
    """
    Lift a legacy (pre-category-list) document to schema version 2.

    Legacy transactions and budgets carry a free-text ``category``. Every
    distinct string (compared case-insensitively, first casing wins) becomes
    a Category, and the string is replaced by that category's id. A missing
    string falls back to "Income" or "Uncategorized" by transaction type.
    Transfers never get a category.
    """
    categories: dict[str, dict] = {}

    def ensure_category(name: Any, kind: str) -> dict:
        safe = name.strip() if isinstance(name, str) else ""
        if not safe:
            safe = LEGACY_INCOME_FALLBACK if kind == "income" else LEGACY_EXPENSE_FALLBACK
        key = safe.lower()
        if key not in categories:
            group = CategoryGroup.INCOME if kind == "income" else CategoryGroup.EXPENSE
            categories[key] = {"id": new_id(), "name": safe, "group": group.value}
        return categories[key]

    def without_category(entry: Mapping) -> dict:
        return {k: v for k, v in entry.items() if k != "category"}

    accounts = [
        {**account, "id": account.get("id") or new_id()}
        if isinstance(account, Mapping) else account
        for account in _as_list(doc.get("accounts"))
    ]

    transactions = []
    for tx in _as_list(doc.get("transactions")):
        if not isinstance(tx, Mapping):
            transactions.append(tx)
            continue
        entry = without_category(tx)
        entry["id"] = tx.get("id") or new_id()
        if tx.get("type") == "transfer":
            entry.pop("categoryId", None)
        else:
            kind = "income" if tx.get("type") == "income" else "expense"
            entry["type"] = kind
            entry["categoryId"] = ensure_category(tx.get("category"), kind)["id"]
        transactions.append(entry)

    budgets = []
    for budget in _as_list(doc.get("budgets")):
        if not isinstance(budget, Mapping):
            budgets.append(budget)
            continue
        entry = without_category(budget)
        entry["id"] = budget.get("id") or new_id()
        entry["categoryId"] = ensure_category(budget.get("category"), "expense")["id"]
        budgets.append(entry)

    return {
        "schemaVersion": 2,
        "accounts": accounts,
        "categories": list(categories.values()),
        "budgets": budgets,
        "transactions": transactions,
    }


MigrationStep = Callable[[dict, IdGenerator], dict]

MIGRATIONS: dict[int, MigrationStep] = {
    LEGACY_SCHEMA_VERSION: migrate_v1_to_v2,
}


# =============================================================================
# COERCION TO THE CANONICAL MODEL
# =============================================================================

_ACCOUNT_ADAPTER = TypeAdapter(Account)
_CATEGORY_ADAPTER = TypeAdapter(Category)
_BUDGET_ADAPTER = TypeAdapter(Budget)
_TRANSACTION_ADAPTER = TypeAdapter(Transaction)


def _coerce_entities(items: Any, adapter: TypeAdapter, kind: str) -> list:
    """Validate each entity on its own; drop (and log) the ones that fail."""
    coerced = []
    for index, item in enumerate(_as_list(items)):
        if isinstance(item, BaseModel):
            item = item.model_dump(by_alias=True)
        try:
            coerced.append(adapter.validate_python(item))
        except ValidationError as e:
            logger.warning(
                "migration_entity_dropped",
                entity_type=kind,
                index=index,
                errors=[err["msg"] for err in e.errors()],
            )
    return coerced


def _coerce_store(doc: Mapping, now: Clock) -> Store:
    updated_at = doc.get("updatedAt")
    if not isinstance(updated_at, str) or not updated_at.strip():
        updated_at = iso_timestamp(now)

    return Store(
        accounts=_coerce_entities(doc.get("accounts"), _ACCOUNT_ADAPTER, "account"),
        categories=_coerce_entities(doc.get("categories"), _CATEGORY_ADAPTER, "category"),
        budgets=_coerce_entities(doc.get("budgets"), _BUDGET_ADAPTER, "budget"),
        transactions=_coerce_entities(
            doc.get("transactions"), _TRANSACTION_ADAPTER, "transaction"
        ),
        updated_at=updated_at,
    )


# =============================================================================
# ENTRY POINT
# =============================================================================

def migrate(
    raw: Any,
    new_id: IdGenerator = new_id,
    now: Clock = utc_now,
) -> Store:
    """
    Convert an arbitrary persisted blob into the current-schema Store.

    - Not store-shaped (None, a string, ``{}``) -> seeded default store
    - Current schema -> fields passed through, missing lists defaulted
    - Older schema -> lifted step by step, then ``updatedAt`` stamped now

    Idempotent: ``migrate(migrate(x)) == migrate(x)``.
    """
    version = detect_schema_version(raw)
    if version is None:
        return create_default_store(new_id=new_id, now=now)

    doc = raw.to_document() if isinstance(raw, Store) else dict(raw)

    while version < CURRENT_SCHEMA_VERSION:
        doc = MIGRATIONS[version](doc, new_id)
        logger.info(
            "schema_migrated",
            from_version=version,
            to_version=version + 1,
        )
        version += 1

    return _coerce_store(doc, now)
