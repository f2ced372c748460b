"""Tests for the vendor suggestion engine."""

from datetime import date

from wealthflow.ledger import query_weight, recency_weight, suggest, suggestion_label
from wealthflow.models.ledger import ExpenseTransaction, Suggestion


TODAY = date(2024, 5, 15)


class TestWeights:
    """Tests for the scoring weights."""

    def test_recency_tiers(self):
        """Test 3/2/1 weighting by age."""
        assert recency_weight("2024-05-01", TODAY) == 3
        assert recency_weight("2024-03-01", TODAY) == 2
        assert recency_weight("2023-01-01", TODAY) == 1

    def test_unparseable_date_counts_as_old(self):
        """Test garbage dates get the lowest weight."""
        assert recency_weight("someday", TODAY) == 1

    def test_query_weights(self):
        """Test prefix beats contains beats no match."""
        assert query_weight("Costco", "") == 1.2
        assert query_weight("Costco", "cos") == 3
        assert query_weight("Costco", "tco") == 1.5
        assert query_weight("Costco", "zzz") == 0.2


class TestSuggest:
    """Tests for ranked suggestions."""

    def test_ranking_for_query(self, sample_store, fixed_now):
        """Test prefix matches rank first and triples stay separate."""
        results = suggest(sample_store.transactions, "co", now=fixed_now)
        assert [(s.vendor, s.account_id) for s in results] == [
            ("Costco", "a1"),
            ("Costco", "a3"),
            ("Acme Corp", "a1"),
            ("Chipotle", "a1"),
        ]
        assert results[0].score == 9

    def test_transfers_are_ignored(self, sample_store, fixed_now):
        """Test transfers never produce suggestions."""
        results = suggest(sample_store.transactions, "", now=fixed_now)
        assert all(s.category_id for s in results)

    def test_scores_accumulate_per_triple(self, fixed_now):
        """Test repeated use of one combination adds up."""
        txs = [
            ExpenseTransaction(
                id=str(i), date="2024-05-10", amount=1, vendor="Cafe",
                account_id="a1", category_id="c1",
            )
            for i in range(3)
        ]
        [only] = suggest(txs, "caf", now=fixed_now)
        assert only.score == 27

    def test_limit(self, sample_store, fixed_now):
        """Test the result count is capped."""
        assert len(suggest(sample_store.transactions, "", limit=2, now=fixed_now)) == 2

    def test_deterministic_under_reordering(self, sample_store, fixed_now):
        """Test identical inputs give identical output regardless of order."""
        forward = suggest(sample_store.transactions, "c", now=fixed_now)
        backward = suggest(list(reversed(sample_store.transactions)), "c", now=fixed_now)
        assert forward == backward

    def test_label(self, sample_store):
        """Test chip label resolves names and marks missing ones."""
        known = Suggestion(vendor="Costco", category_id="c-groceries", account_id="a1", score=1)
        assert suggestion_label(known, sample_store) == "Costco · Groceries · Checking"

        dangling = Suggestion(vendor="Costco", category_id="gone", account_id=None, score=1)
        assert suggestion_label(dangling, sample_store) == "Costco · — · —"

    def test_recent_repeats_outrank_old_single_use(self, fixed_now):
        """Test two recent uses of one combination beat one old use of another vendor."""
        txs = [
            ExpenseTransaction(
                id="old", date="2023-12-01", amount=1, vendor="Bakery",
                account_id="a1", category_id="c1",
            ),
            ExpenseTransaction(
                id="r1", date="2024-05-10", amount=1, vendor="Cafe",
                account_id="a1", category_id="c1",
            ),
            ExpenseTransaction(
                id="r2", date="2024-05-01", amount=1, vendor="Cafe",
                account_id="a1", category_id="c1",
            ),
        ]
        results = suggest(txs, "", now=fixed_now)
        assert [s.vendor for s in results] == ["Cafe", "Bakery"]
        assert results[0].score > results[1].score
