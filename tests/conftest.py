"""Shared fixtures: a small hand-built ledger and a pinned clock."""

from datetime import datetime, timezone

import pytest

from wealthflow.models.ledger import (
    Account,
    Budget,
    Category,
    CategoryGroup,
    ExpenseTransaction,
    IncomeTransaction,
    Store,
    TransferTransaction,
)


FIXED_NOW = datetime(2024, 5, 15, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def fixed_now():
    return lambda: FIXED_NOW


@pytest.fixture
def sample_store() -> Store:
    """
    Three accounts (one archived), three categories, one budget and a
    month and a half of activity.
    """
    return Store(
        accounts=[
            Account(id="a1", name="Checking"),
            Account(id="a2", name="Savings"),
            Account(id="a3", name="Old Card", archived=True),
        ],
        categories=[
            Category(id="c-salary", name="Salary", group=CategoryGroup.INCOME),
            Category(id="c-dining", name="Dining", group=CategoryGroup.EXPENSE),
            Category(id="c-groceries", name="Groceries", group=CategoryGroup.EXPENSE),
        ],
        budgets=[Budget(id="b1", category_id="c-dining", limit=200)],
        transactions=[
            ExpenseTransaction(
                id="t5", date="2024-05-10", amount=40, vendor="Costco",
                account_id="a1", category_id="c-groceries",
            ),
            ExpenseTransaction(
                id="t4", date="2024-05-08", amount=25, vendor="Chipotle",
                account_id="a1", category_id="c-dining",
            ),
            TransferTransaction(
                id="t3", date="2024-05-02", amount=300,
                from_account_id="a1", to_account_id="a2",
            ),
            IncomeTransaction(
                id="t2", date="2024-05-01", amount=2000, vendor="Acme Corp",
                account_id="a1", category_id="c-salary",
            ),
            ExpenseTransaction(
                id="t1", date="2024-04-20", amount=60, vendor="Costco",
                account_id="a3", category_id="c-groceries",
            ),
        ],
        updated_at="2024-05-10T09:00:00.000Z",
    )
