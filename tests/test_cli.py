"""
Tests for the CLI interface.
"""
import pytest
from typer.testing import CliRunner

from copilot_stats.cli.main import app, EXIT_CODE_PASS, EXIT_CODE_FAIL
from copilot_stats.demo.generate_demo_data import write_demo_file

runner = CliRunner()


@pytest.fixture
def usage_file(tmp_path):
    """Write the demo export to a temporary file."""
    path = tmp_path / "usage.ndjson"
    write_demo_file(path)
    return path


@pytest.fixture
def config_file(tmp_path):
    """Write a report config to a temporary file."""
    path = tmp_path / "report.yaml"
    path.write_text(
        "total_licensed_users: 6\n"
        "cost_per_hour: 100\n"
        "thresholds:\n"
        "  seconds_per_acceptance: 60\n",
        encoding="utf-8"
    )
    return path


class TestCLI:
    """Test CLI commands."""

    def test_no_command_prints_hint(self):
        """Test running without a subcommand."""
        result = runner.invoke(app, [])

        assert result.exit_code == EXIT_CODE_PASS
        assert "Use --help" in result.output

    def test_invalid_log_level(self, usage_file):
        """Test that an unknown log level fails."""
        result = runner.invoke(app, ["--log-level", "LOUD", "summary", str(usage_file)])

        assert result.exit_code == EXIT_CODE_FAIL
        assert "Invalid log level" in result.output

    def test_summary_command(self, usage_file):
        """Test summary output for the demo export."""
        result = runner.invoke(app, ["summary", str(usage_file)])

        assert result.exit_code == EXIT_CODE_PASS
        assert "Copilot Usage Summary" in result.output
        assert "Records: 25" in result.output
        assert "Generations: 290" in result.output
        assert "Active users: 3" in result.output
        assert "Skipped 1 malformed line(s)" in result.output
        assert "AI Development Enablement Index" in result.output
        assert "Engineering Metrics" in result.output

    def test_summary_with_config(self, usage_file, config_file):
        """Test that config values reach the metrics and the time-saved value."""
        result = runner.invoke(app, ["summary", str(usage_file), "--config", str(config_file)])

        assert result.exit_code == EXIT_CODE_PASS
        # 3 active users out of 6 seats
        assert "50.0%" in result.output
        assert "at $100.00/hour" in result.output

    def test_summary_overrides_config(self, usage_file, config_file):
        """Test that command-line options override the config file."""
        result = runner.invoke(app, [
            "summary", str(usage_file),
            "--config", str(config_file),
            "--licensed-users", "3",
            "--cost-per-hour", "75"
        ])

        assert result.exit_code == EXIT_CODE_PASS
        assert "100.0%" in result.output
        assert "at $75.00/hour" in result.output

    def test_summary_with_user_filter(self, usage_file):
        """Test that filter options narrow the dataset."""
        result = runner.invoke(app, ["summary", str(usage_file), "--user", "CAROL"])

        assert result.exit_code == EXIT_CODE_PASS
        assert "Records: 5" in result.output
        assert "Active users: 1" in result.output

    def test_summary_with_date_range(self, usage_file):
        """Test inclusive date bounds."""
        result = runner.invoke(app, [
            "summary", str(usage_file), "--from", "2025-03-10", "--to", "2025-03-10"
        ])

        assert result.exit_code == EXIT_CODE_PASS
        assert "Records: 3" in result.output

    def test_missing_file_fails(self, tmp_path):
        """Test that a missing export exits with failure."""
        result = runner.invoke(app, ["summary", str(tmp_path / "missing.ndjson")])

        assert result.exit_code == EXIT_CODE_FAIL
        assert "Usage file not found" in result.output

    def test_invalid_config_fails(self, usage_file, tmp_path):
        """Test that a bad config exits with failure."""
        bad_config = tmp_path / "bad.yaml"
        bad_config.write_text("seats: 10\n", encoding="utf-8")

        result = runner.invoke(app, ["summary", str(usage_file), "--config", str(bad_config)])

        assert result.exit_code == EXIT_CODE_FAIL
        assert "Unknown configuration keys" in result.output

    def test_top_users_command(self, usage_file):
        """Test the leaderboard with languages and models."""
        result = runner.invoke(app, ["top-users", str(usage_file), "--limit", "2"])

        assert result.exit_code == EXIT_CODE_PASS
        assert "Top 2 Users" in result.output
        assert "alice" in result.output
        assert "bob" in result.output
        assert "carol" not in result.output
        assert "TypeScript" in result.output

    def test_timeseries_command(self, usage_file):
        """Test the daily activity table."""
        result = runner.invoke(app, ["timeseries", str(usage_file)])

        assert result.exit_code == EXIT_CODE_PASS
        assert "Daily Activity" in result.output
        assert "2025-03-03" in result.output
        assert "2025-03-14" in result.output

    def test_mix_by_feature(self, usage_file):
        """Test feature mix uses display names."""
        result = runner.invoke(app, ["mix", str(usage_file)])

        assert result.exit_code == EXIT_CODE_PASS
        assert "Code Completion" in result.output
        assert "290" in result.output

    def test_mix_by_model(self, usage_file):
        """Test model mix."""
        result = runner.invoke(app, ["mix", str(usage_file), "--by", "model"])

        assert result.exit_code == EXIT_CODE_PASS
        assert "Claude 3.7 Sonnet" in result.output
        assert "GPT-4.1" in result.output

    def test_mix_invalid_grouping(self, usage_file):
        """Test that an unknown --by value fails."""
        result = runner.invoke(app, ["mix", str(usage_file), "--by", "ide"])

        assert result.exit_code == EXIT_CODE_FAIL
        assert "--by must be" in result.output

    def test_daily_by_language(self, usage_file):
        """Test per-day language usage."""
        result = runner.invoke(app, ["daily", str(usage_file), "--by", "language"])

        assert result.exit_code == EXIT_CODE_PASS
        assert "2025-03-03" in result.output
        assert "Python: 18" in result.output
        assert "TypeScript: 9" in result.output

    def test_daily_without_activity(self, usage_file):
        """Test the empty message when the filter matches nothing."""
        result = runner.invoke(app, ["daily", str(usage_file), "--user", "nobody"])

        assert result.exit_code == EXIT_CODE_PASS
        assert "No model activity found." in result.output
