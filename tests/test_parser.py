"""
Unit tests for NDJSON record parsing.

Tests field mapping, defaults, date handling and rejection of bad lines.
"""

import json
from datetime import date

import pytest

from copilot_stats.storage.models import FeatureTotals, IdeTotals, ModelFeatureTotals
from copilot_stats.storage.parser import (
    RecordParseError,
    format_day,
    parse_day,
    parse_line,
    parse_record,
)


def full_record() -> dict:
    """A record carrying every recognized key."""
    return {
        "report_start_day": "2025-03-01",
        "report_end_day": "2025-03-28",
        "day": "2025-03-05",
        "enterprise_id": "acme",
        "user_id": 42,
        "user_login": "Octocat",
        "user_initiated_interaction_count": 7,
        "code_generation_activity_count": 12,
        "code_acceptance_activity_count": 5,
        "generated_loc_sum": 80,
        "accepted_loc_sum": 30,
        "totals_by_ide": [
            {
                "ide": "vscode",
                "code_generation_activity_count": 12,
                "last_known_plugin_version": {
                    "sampled_at": "2025-03-05T10:15:00Z",
                    "plugin": "copilot",
                    "plugin_version": "1.250.0"
                }
            }
        ],
        "totals_by_feature": [
            {"feature": "code_completion", "code_generation_activity_count": 10},
            {"feature": "chat_inline", "code_generation_activity_count": 2}
        ],
        "totals_by_language_feature": [
            {"language": "python", "feature": "code_completion", "code_generation_activity_count": 10}
        ],
        "totals_by_language_model": [
            {"language": "python", "model": "gpt-4o", "code_acceptance_activity_count": 5}
        ],
        "totals_by_model_feature": [
            {"model": "gpt-4o", "feature": "code_completion", "code_generation_activity_count": 10}
        ],
        "used_agent": True,
        "used_chat": True,
        "some_future_field": {"ignored": True}
    }


class TestParseDay:
    """Test date parsing and canonical formatting."""

    def test_strict_format(self):
        """Test the primary YYYY-MM-DD format."""
        assert parse_day("2025-03-05") == date(2025, 3, 5)

    def test_lenient_fallback(self):
        """Test that other date spellings fall back to the generic parser."""
        assert parse_day("2025/03/05") == date(2025, 3, 5)
        assert parse_day("March 5, 2025") == date(2025, 3, 5)

    def test_round_trip(self):
        """Test that formatting and parsing round-trip."""
        value = date(2024, 2, 29)
        assert format_day(value) == "2024-02-29"
        assert parse_day(format_day(value)) == value

    def test_invalid_date_raises_error(self):
        """Test that garbage is rejected."""
        with pytest.raises(RecordParseError):
            parse_day("xyz")

    def test_incomplete_date_raises_error(self):
        """Test that date fragments are not completed from today."""
        for fragment in ("5", "March", "March 5", "2025"):
            with pytest.raises(RecordParseError, match="Incomplete date"):
                parse_day(fragment)

    def test_non_string_raises_error(self):
        """Test that non-string values are rejected."""
        with pytest.raises(RecordParseError, match="must be a date string"):
            parse_day(20250305)


class TestParseRecord:
    """Test mapping of JSON objects to records."""

    def test_all_fields_mapped(self):
        """Test that every recognized key lands on the record."""
        record = parse_record(full_record())

        assert record.day == date(2025, 3, 5)
        assert record.report_start_day == date(2025, 3, 1)
        assert record.report_end_day == date(2025, 3, 28)
        assert record.enterprise_id == "acme"
        assert record.user_id == 42
        assert record.user_login == "Octocat"
        assert record.user_key == "octocat"
        assert record.user_initiated_interaction_count == 7
        assert record.code_generation_activity_count == 12
        assert record.code_acceptance_activity_count == 5
        assert record.generated_loc_sum == 80
        assert record.accepted_loc_sum == 30
        assert record.used_agent is True
        assert record.used_chat is True

    def test_breakdowns_mapped(self):
        """Test nested breakdown lists and their defaults."""
        record = parse_record(full_record())

        assert record.totals_by_feature == (
            FeatureTotals(feature="code_completion", code_generation_activity_count=10),
            FeatureTotals(feature="chat_inline", code_generation_activity_count=2),
        )
        assert record.totals_by_model_feature == (
            ModelFeatureTotals(model="gpt-4o", feature="code_completion", code_generation_activity_count=10),
        )
        assert record.totals_by_language_model[0].code_acceptance_activity_count == 5
        assert record.totals_by_language_model[0].code_generation_activity_count == 0

    def test_plugin_version_parsed(self):
        """Test the IDE plugin version block."""
        ide = parse_record(full_record()).totals_by_ide[0]

        assert isinstance(ide, IdeTotals)
        assert ide.last_known_plugin_version.plugin == "copilot"
        assert ide.last_known_plugin_version.plugin_version == "1.250.0"
        assert ide.last_known_plugin_version.sampled_at.year == 2025

    def test_missing_fields_default(self):
        """Test that only 'day' is required."""
        record = parse_record({"day": "2025-03-05"})

        assert record.user_login == ""
        assert record.user_id == 0
        assert record.code_generation_activity_count == 0
        assert record.report_start_day is None
        assert record.totals_by_feature == ()
        assert record.used_chat is False

    def test_missing_day_raises_error(self):
        """Test that a record without a day is rejected."""
        with pytest.raises(RecordParseError, match="Missing required 'day'"):
            parse_record({"user_login": "octocat"})

    def test_wrong_type_raises_error(self):
        """Test that a string count is rejected."""
        data = full_record()
        data["code_generation_activity_count"] = "12"

        with pytest.raises(RecordParseError, match="must be an integer"):
            parse_record(data)

    def test_boolean_count_raises_error(self):
        """Test that booleans are not accepted as counts."""
        data = full_record()
        data["user_id"] = True

        with pytest.raises(RecordParseError):
            parse_record(data)


class TestParseLine:
    """Test line-level parsing results."""

    def test_valid_line(self):
        """Test that a valid line yields a record."""
        result = parse_line(json.dumps(full_record()))

        assert result.ok
        assert result.error is None
        assert result.record.user_login == "Octocat"

    def test_invalid_json(self):
        """Test that truncated JSON yields an error result."""
        result = parse_line('{"day": "2025-03-05", ')

        assert not result.ok
        assert result.record is None
        assert "Invalid JSON" in result.error

    def test_non_object_json(self):
        """Test that JSON arrays are rejected."""
        result = parse_line("[1, 2, 3]")

        assert not result.ok
        assert "JSON object" in result.error

    def test_invalid_day(self):
        """Test that an unparseable date yields an error result."""
        result = parse_line('{"day": "xyz"}')

        assert not result.ok
        assert "day" in result.error

    def test_deeply_nested_json(self):
        """Test that nesting beyond the decoder's depth yields an error result."""
        result = parse_line("[" * 200000)

        assert not result.ok
        assert "Invalid JSON" in result.error
