"""Tests for the ledger aggregator."""

from wealthflow.ledger import (
    MANUAL_ENTRY_LABEL,
    account_balances,
    active_accounts,
    available_months,
    budget_progress,
    categories_for,
    category_spend_named,
    count_account_references,
    derive_balances,
    month_summary,
    rank_amounts,
    top_categories,
    vendor_spend,
)
from wealthflow.models.ledger import (
    Budget,
    CategoryGroup,
    ExpenseTransaction,
    IncomeTransaction,
    TransferTransaction,
)


class TestBalances:
    """Tests for balance derivation."""

    def test_income_expense_and_transfer(self):
        """Test the canonical income/expense/transfer example."""
        transactions = [
            IncomeTransaction(id="1", date="2024-01-01", amount=100, account_id="A", category_id="c"),
            ExpenseTransaction(id="2", date="2024-01-02", amount=30, account_id="A", category_id="c"),
            TransferTransaction(
                id="3", date="2024-01-03", amount=20, from_account_id="A", to_account_id="B"
            ),
        ]
        assert derive_balances(transactions) == {"A": 50, "B": 20}

    def test_balances_ignore_order(self, sample_store):
        """Test balances do not depend on transaction order."""
        forward = derive_balances(sample_store.transactions)
        backward = derive_balances(list(reversed(sample_store.transactions)))
        assert forward == backward

    def test_account_balances_include_unused_accounts(self, sample_store):
        """Test every account gets a balance, archived or not."""
        balances = account_balances(sample_store)
        assert balances == {"a1": 2000 - 40 - 25 - 300, "a2": 300, "a3": -60}

    def test_empty_ledger(self):
        """Test no transactions means no balances."""
        assert derive_balances([]) == {}

    def test_reference_count_includes_both_transfer_sides(self, sample_store):
        """Test transfers count for both accounts."""
        assert count_account_references(sample_store.transactions, "a1") == 4
        assert count_account_references(sample_store.transactions, "a2") == 1


class TestRankings:
    """Tests for ranked spend breakdowns."""

    def test_ties_break_by_name(self):
        """Test equal amounts sort by name ascending."""
        ranked = rank_amounts({"b": 10, "a": 10, "c": 20})
        assert [r.name for r in ranked] == ["c", "a", "b"]

    def test_vendor_spend(self, sample_store):
        """Test expense totals per vendor."""
        ranked = vendor_spend(sample_store.transactions)
        assert [(r.name, r.amount) for r in ranked] == [("Costco", 100), ("Chipotle", 25)]

    def test_blank_vendor_is_manual_entry(self):
        """Test vendors missing text are grouped."""
        tx = ExpenseTransaction(
            id="1", date="2024-01-01", amount=5, vendor="  ", account_id="a", category_id="c"
        )
        assert vendor_spend([tx])[0].name == MANUAL_ENTRY_LABEL

    def test_category_spend_named(self, sample_store):
        """Test expense totals resolve to category names."""
        ranked = category_spend_named(sample_store)
        assert [(r.name, r.amount) for r in ranked] == [("Groceries", 100), ("Dining", 25)]

    def test_top_categories_for_month(self, sample_store):
        """Test monthly snapshot only counts that month."""
        ranked = top_categories(sample_store, "2024-05")
        assert [(r.name, r.amount) for r in ranked] == [("Groceries", 40), ("Dining", 25)]
        assert top_categories(sample_store, "2024-05", limit=1)[0].name == "Groceries"


class TestMonthlyViews:
    """Tests for month-level totals."""

    def test_month_summary_excludes_transfers(self, sample_store):
        """Test transfers are neither income nor expense."""
        summary = month_summary(sample_store.transactions, "2024-05")
        assert summary.income == 2000
        assert summary.expense == 65
        assert summary.net == 1935

    def test_empty_month(self, sample_store):
        """Test a month without activity is all zeros."""
        summary = month_summary(sample_store.transactions, "2023-01")
        assert (summary.income, summary.expense) == (0, 0)

    def test_available_months_newest_first(self, sample_store):
        """Test distinct months sorted descending."""
        assert available_months(sample_store.transactions) == ["2024-05", "2024-04"]


class TestBudgets:
    """Tests for budget progress."""

    def test_budget_progress(self, sample_store):
        """Test spend against the Dining budget."""
        [progress] = budget_progress(sample_store)
        assert progress.category_name == "Dining"
        assert progress.spent == 25
        assert progress.limit == 200

    def test_duplicate_budgets_are_summed(self, sample_store):
        """Test two budgets on one category form one combined limit."""
        store = sample_store.model_copy(update={
            "budgets": [*sample_store.budgets, Budget(id="b2", category_id="c-dining", limit=50)],
        })
        [progress] = budget_progress(store)
        assert progress.limit == 250


class TestPickers:
    """Tests for form picker helpers."""

    def test_archived_accounts_hidden(self, sample_store):
        """Test archived accounts are not offered."""
        assert [a.id for a in active_accounts(sample_store)] == ["a1", "a2"]

    def test_categories_for_group(self, sample_store):
        """Test categories are filtered by group."""
        assert [c.id for c in categories_for(sample_store, CategoryGroup.INCOME)] == ["c-salary"]
