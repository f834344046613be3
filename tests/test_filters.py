"""
Tests for filter criteria and filtered views.
"""
from datetime import date

from copilot_stats.core.filters import FilterCriteria, apply_filter
from copilot_stats.storage.models import (
    FeatureTotals,
    LanguageModelTotals,
    ModelFeatureTotals,
    UsageRecord,
)


class TestFilterCriteria:
    """Test filtering of usage records."""

    def create_records(self):
        """Create a small mixed dataset."""
        return [
            UsageRecord(
                day=date(2025, 3, 3),
                user_login="Alice",
                totals_by_feature=(FeatureTotals(feature="code_completion"),),
                totals_by_model_feature=(ModelFeatureTotals(model="gpt-4o"),),
            ),
            UsageRecord(
                day=date(2025, 3, 4),
                user_login="bob",
                totals_by_feature=(FeatureTotals(feature="chat_inline"),),
                totals_by_language_model=(LanguageModelTotals(language="python", model="claude-sonnet"),),
            ),
            UsageRecord(
                day=date(2025, 3, 5),
                user_login="carol",
            ),
        ]

    def test_empty_criteria_returns_everything(self):
        """Test that no active dimension keeps all records."""
        records = self.create_records()
        assert apply_filter(records, FilterCriteria()) == records

    def test_date_bounds_inclusive(self):
        """Test inclusive from/to bounds."""
        records = self.create_records()
        criteria = FilterCriteria(from_date=date(2025, 3, 4), to_date=date(2025, 3, 5))

        result = apply_filter(records, criteria)

        assert [r.user_login for r in result] == ["bob", "carol"]

    def test_open_ended_bounds(self):
        """Test that either bound may be omitted."""
        records = self.create_records()

        assert len(apply_filter(records, FilterCriteria(to_date=date(2025, 3, 3)))) == 1
        assert len(apply_filter(records, FilterCriteria(from_date=date(2025, 3, 4)))) == 2

    def test_users_case_insensitive(self):
        """Test user selection ignores case."""
        records = self.create_records()

        result = apply_filter(records, FilterCriteria(users={"ALICE", "Carol"}))

        assert [r.user_login for r in result] == ["Alice", "carol"]

    def test_features(self):
        """Test feature selection matches any feature breakdown entry."""
        records = self.create_records()

        result = apply_filter(records, FilterCriteria(features={"Chat_Inline"}))

        assert [r.user_login for r in result] == ["bob"]

    def test_models_match_either_breakdown(self):
        """Test model selection checks model-feature and language-model entries."""
        records = self.create_records()

        result = apply_filter(records, FilterCriteria(models={"GPT-4o", "claude-sonnet"}))

        assert [r.user_login for r in result] == ["Alice", "bob"]

    def test_dimensions_combine(self):
        """Test that active dimensions are combined with AND."""
        records = self.create_records()
        criteria = FilterCriteria(users={"alice", "bob"}, features={"chat_inline"})

        assert [r.user_login for r in apply_filter(records, criteria)] == ["bob"]

    def test_filter_is_subset_and_idempotent(self):
        """Test the view is a subset, leaves the input alone and repeats."""
        records = self.create_records()
        original = list(records)
        criteria = FilterCriteria(users={"bob", "carol"})

        first = apply_filter(records, criteria)
        second = apply_filter(records, criteria)

        assert first == second
        assert first is not second
        assert all(r in records for r in first)
        assert records == original

    def test_criteria_mutation_between_queries(self):
        """Test that changing criteria changes the next view."""
        records = self.create_records()
        criteria = FilterCriteria()
        assert len(apply_filter(records, criteria)) == 3

        criteria.from_date = date(2025, 3, 5)

        assert [r.user_login for r in apply_filter(records, criteria)] == ["carol"]

    def test_key_sets_mutated_with_mixed_case(self):
        """Test keys added or assigned after construction still ignore case."""
        records = self.create_records()

        criteria = FilterCriteria()
        criteria.users.add("ALICE")
        assert [r.user_login for r in apply_filter(records, criteria)] == ["Alice"]

        criteria.users = {"Bob"}
        assert [r.user_login for r in apply_filter(records, criteria)] == ["bob"]

        criteria.users = set()
        criteria.features.add("Code_Completion")
        assert [r.user_login for r in apply_filter(records, criteria)] == ["Alice"]

        criteria.features = set()
        criteria.models = {"Claude-Sonnet"}
        assert [r.user_login for r in apply_filter(records, criteria)] == ["bob"]
