"""
Vendor Suggestion Engine

Ranks (vendor, category, account) combinations from transaction history
for the transaction form's autocomplete.

Scoring: every matching historical transaction adds
``recency_weight(date) * query_weight(vendor, query)`` to its exact triple.
The same vendor used with a different category or account is a separate
suggestion.
"""

from collections.abc import Iterable
from datetime import date
from typing import Optional

from wealthflow.ids import Clock, utc_now
from wealthflow.models.ledger import (
    ExpenseTransaction,
    IncomeTransaction,
    Store,
    Suggestion,
    Transaction,
)


DEFAULT_SUGGESTION_LIMIT = 5

# (max age in days, weight), checked in order
RECENCY_TIERS = ((30, 3.0), (90, 2.0))
OLDEST_WEIGHT = 1.0

EMPTY_QUERY_WEIGHT = 1.2
PREFIX_MATCH_WEIGHT = 3.0
CONTAINS_MATCH_WEIGHT = 1.5
NO_MATCH_WEIGHT = 0.2

LABEL_SEPARATOR = " · "
MISSING_LABEL = "—"


def _parse_date(value: str) -> Optional[date]:
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


def recency_weight(tx_date: str, today: date) -> float:
    """3 within 30 days, 2 within 90 days, otherwise 1. Unparseable dates count as old."""
    parsed = _parse_date(tx_date)
    if parsed is None:
        return OLDEST_WEIGHT
    age = (today - parsed).days
    for max_age, weight in RECENCY_TIERS:
        if age <= max_age:
            return weight
    return OLDEST_WEIGHT


def query_weight(vendor: str, query: str) -> float:
    """
    How well a vendor matches the typed text.

    ``query`` must already be trimmed and lower-cased. A non-match still
    scores a little so sparse histories produce ranked results.
    """
    if not query:
        return EMPTY_QUERY_WEIGHT
    name = vendor.lower()
    if name.startswith(query):
        return PREFIX_MATCH_WEIGHT
    if query in name:
        return CONTAINS_MATCH_WEIGHT
    return NO_MATCH_WEIGHT


def suggest(
    transactions: Iterable[Transaction],
    query: str,
    limit: int = DEFAULT_SUGGESTION_LIMIT,
    now: Clock = utc_now,
) -> list[Suggestion]:
    """
    Top suggestions for the vendor text typed so far.

    Transfers and transactions without a vendor are ignored. Results are
    sorted by score descending, then vendor, category and account ascending.
    """
    today = now().date()
    q = (query or "").strip().lower()
    scores: dict[tuple[str, str, str], float] = {}

    for tx in transactions:
        if not isinstance(tx, (IncomeTransaction, ExpenseTransaction)):
            continue
        vendor = (tx.vendor or "").strip()
        if not vendor:
            continue

        key = (vendor, tx.category_id, tx.account_id)
        weight = recency_weight(tx.date, today) * query_weight(vendor, q)
        scores[key] = scores.get(key, 0.0) + weight

    ranked = sorted(scores.items(), key=lambda item: (-item[1], item[0]))
    return [
        Suggestion(vendor=vendor, category_id=category_id, account_id=account_id, score=score)
        for (vendor, category_id, account_id), score in ranked[:limit]
    ]


def suggestion_label(suggestion: Suggestion, store: Store) -> str:
    """Chip text such as ``Costco · Groceries · Main Checking``."""
    category = store.find_category(suggestion.category_id) if suggestion.category_id else None
    account = store.find_account(suggestion.account_id) if suggestion.account_id else None
    return LABEL_SEPARATOR.join([
        suggestion.vendor,
        category.name if category else MISSING_LABEL,
        account.name if account else MISSING_LABEL,
    ])
