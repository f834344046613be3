"""
CLI interface for Copilot Stats.

Loads a usage export and prints totals, leaderboards, mixes and the
enablement metrics.
"""

import dataclasses
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from copilot_stats.config.loader import ReportConfig, load_report_config
from copilot_stats.core.filters import FilterCriteria
from copilot_stats.core.metrics import estimate_time_saved_value
from copilot_stats.core.session import UsageSession

app = typer.Typer()
console = Console()
logger = logging.getLogger(__name__)

EXIT_CODE_PASS = 0
EXIT_CODE_FAIL = 1

VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]

FILE_ARGUMENT = typer.Argument(..., help="Newline-delimited JSON usage export")
FROM_OPTION = typer.Option(None, "--from", formats=["%Y-%m-%d"], help="First day to include")
TO_OPTION = typer.Option(None, "--to", formats=["%Y-%m-%d"], help="Last day to include")
USER_OPTION = typer.Option(None, "--user", "-u", help="Only include this user (repeatable)")
FEATURE_OPTION = typer.Option(None, "--feature", "-f", help="Only include this feature (repeatable)")
MODEL_OPTION = typer.Option(None, "--model", "-m", help="Only include this model (repeatable)")


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    log_level: str = typer.Option("WARNING", "--log-level", help="Logging level")
):
    """Copilot Stats CLI."""
    log_level_upper = log_level.upper()
    if log_level_upper not in VALID_LOG_LEVELS:
        console.print(f"[red]Error: Invalid log level '{log_level}'[/red]")
        console.print(f"Valid levels: {', '.join(VALID_LOG_LEVELS)}")
        raise typer.Exit(EXIT_CODE_FAIL)

    logging.basicConfig(
        level=getattr(logging, log_level_upper),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if ctx.invoked_subcommand is None:
        console.print("Copilot Stats - Use --help to see available commands")


def _load_session(
    file: Path,
    from_date: Optional[datetime],
    to_date: Optional[datetime],
    users: Optional[List[str]],
    features: Optional[List[str]],
    models: Optional[List[str]]
) -> UsageSession:
    """Load the export and apply the filter options."""
    session = UsageSession()

    def _report(records: int, bytes_read: int) -> None:
        logger.debug("Parsed %d records (%d bytes)", records, bytes_read)

    result = session.load_file(file, on_progress=_report)
    if result.failed_lines:
        console.print(f"[yellow]Skipped {result.failed_lines} malformed line(s)[/]")

    session.set_filter(FilterCriteria(
        from_date=from_date.date() if from_date else None,
        to_date=to_date.date() if to_date else None,
        users=set(users or []),
        features=set(features or []),
        models=set(models or []),
    ))
    return session


def _resolve_config(
    config_path: Optional[Path],
    licensed_users: Optional[int],
    cost_per_hour: Optional[float]
) -> ReportConfig:
    """Load the config file, then apply command-line overrides."""
    config = load_report_config(str(config_path)) if config_path else ReportConfig()
    overrides = {}
    if licensed_users is not None:
        overrides["total_licensed_users"] = licensed_users
    if cost_per_hour is not None:
        overrides["cost_per_hour"] = cost_per_hour
    return dataclasses.replace(config, **overrides) if overrides else config


def _format_percent(rate: float) -> str:
    """Format a 0-1 rate as a percentage."""
    return f"{rate * 100:,.1f}%"


def _format_currency(amount: float) -> str:
    """Format currency with proper symbols and formatting."""
    return f"${abs(amount):,.2f}"


@app.command()
def summary(
    file: Path = FILE_ARGUMENT,
    from_date: Optional[datetime] = FROM_OPTION,
    to_date: Optional[datetime] = TO_OPTION,
    users: Optional[List[str]] = USER_OPTION,
    features: Optional[List[str]] = FEATURE_OPTION,
    models: Optional[List[str]] = MODEL_OPTION,
    config_path: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="YAML file with licensed seats, hourly cost and thresholds"
    ),
    licensed_users: Optional[int] = typer.Option(
        None,
        "--licensed-users",
        "-l",
        help="Total licensed users (overrides config)"
    ),
    cost_per_hour: Optional[float] = typer.Option(
        None,
        "--cost-per-hour",
        help="Engineering cost per hour (overrides config)"
    )
):
    """
    Show totals, adoption and the enablement metrics.

    Rates against licensed users are 0 unless a licensed-user count is
    given with --licensed-users or a config file.
    """
    try:
        config = _resolve_config(config_path, licensed_users, cost_per_hour)
        session = _load_session(file, from_date, to_date, users, features, models)
    except Exception as e:
        console.print(f"[red]Error:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)

    totals = session.get_totals()
    adoption = session.get_adoption_stats()
    aidei = session.get_aidei(config.total_licensed_users, config.thresholds)
    metrics = session.get_engineering_metrics(config.total_licensed_users, config.thresholds)

    console.print("\n[bold]Copilot Usage Summary[/bold]")
    console.print("-" * 40)
    console.print(f"Records: {len(session.get_filtered()):,}")
    console.print(f"Interactions: {totals.interactions:,}")
    console.print(f"Generations: {totals.generations:,}")
    console.print(f"Acceptances: {totals.acceptances:,}")
    console.print(f"Acceptance rate (activity-based): {_format_percent(totals.acceptance_rate)}")
    console.print(f"Active users: {adoption.active_users:,}")
    console.print(f"Records using chat: {adoption.using_chat:,}")
    console.print(f"Records using inline chat: {adoption.using_inline:,}")
    console.print(f"Records using completions: {adoption.using_completions:,}")

    aidei_table = Table(title="AI Development Enablement Index")
    aidei_table.add_column("Component")
    aidei_table.add_column("Value", justify="right")
    aidei_table.add_row("Adoption rate", _format_percent(aidei.adoption_rate))
    aidei_table.add_row("Acceptance rate", _format_percent(aidei.acceptance_rate))
    aidei_table.add_row("Licensed vs engaged", _format_percent(aidei.licensed_vs_engaged_rate))
    aidei_table.add_row("Usage rate", _format_percent(aidei.usage_rate))
    aidei_table.add_row("AIDEI score", f"{aidei.score * 100:,.1f}")
    console.print(aidei_table)

    metrics_table = Table(title="Engineering Metrics")
    metrics_table.add_column("Metric")
    metrics_table.add_column("Value", justify="right")
    metrics_table.add_row("License utilization", _format_percent(metrics.license_utilization))
    metrics_table.add_row("Unused seats", f"{metrics.unused_seats:,}")
    metrics_table.add_row("Engaged users", _format_percent(metrics.engaged_users_percent))
    metrics_table.add_row("Usage rate", _format_percent(metrics.usage_rate))
    metrics_table.add_row("Median acceptance rate", _format_percent(metrics.median_acceptance_rate))
    metrics_table.add_row(
        "Acceptances per active user per day",
        f"{metrics.acceptances_per_active_user_per_day:,.2f}"
    )
    metrics_table.add_row("Power users", _format_percent(metrics.power_users_percent))
    metrics_table.add_row("Inline share", _format_percent(metrics.inline_share_percent))
    metrics_table.add_row("Chat adoption", _format_percent(metrics.chat_adoption_percent))
    metrics_table.add_row("Model leader margin", _format_percent(metrics.model_leader_margin))
    metrics_table.add_row("Concentration index", f"{metrics.concentration_index:.3f}")
    metrics_table.add_row("Ramp rate (users/week)", f"{metrics.ramp_rate_users_per_week:+.2f}")
    metrics_table.add_row("Time to first value (days)", f"{metrics.time_to_first_value_days:.1f}")
    metrics_table.add_row("Language coverage", _format_percent(metrics.language_coverage_percent))
    metrics_table.add_row("Estimated time saved (hours)", f"{metrics.estimated_time_saved_hours:,.1f}")
    console.print(metrics_table)

    value = estimate_time_saved_value(metrics.estimated_time_saved_hours, config.cost_per_hour)
    console.print(
        f"Estimated value of time saved: {_format_currency(value)} "
        f"at {_format_currency(config.cost_per_hour)}/hour"
    )
    sys.exit(EXIT_CODE_PASS)


@app.command(name="top-users")
def top_users(
    file: Path = FILE_ARGUMENT,
    limit: int = typer.Option(10, "--limit", "-n", help="Number of users to show"),
    from_date: Optional[datetime] = FROM_OPTION,
    to_date: Optional[datetime] = TO_OPTION,
    users: Optional[List[str]] = USER_OPTION,
    features: Optional[List[str]] = FEATURE_OPTION,
    models: Optional[List[str]] = MODEL_OPTION
):
    """Show the users with the most generations."""
    try:
        session = _load_session(file, from_date, to_date, users, features, models)
    except Exception as e:
        console.print(f"[red]Error:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)

    table = Table(title=f"Top {limit} Users")
    table.add_column("User")
    table.add_column("Generations", justify="right")
    table.add_column("Acceptances", justify="right")
    table.add_column("Acceptance rate", justify="right")
    table.add_column("Top language")
    table.add_column("Top model")

    for user in session.get_top_users(limit):
        rate = user.acceptances / user.generations if user.generations > 0 else 0.0
        table.add_row(
            user.user,
            f"{user.generations:,}",
            f"{user.acceptances:,}",
            _format_percent(rate),
            session.get_most_used_language_for_user(user.user),
            session.get_most_used_model_for_user(user.user),
        )

    console.print(table)
    sys.exit(EXIT_CODE_PASS)


@app.command()
def timeseries(
    file: Path = FILE_ARGUMENT,
    from_date: Optional[datetime] = FROM_OPTION,
    to_date: Optional[datetime] = TO_OPTION,
    users: Optional[List[str]] = USER_OPTION,
    features: Optional[List[str]] = FEATURE_OPTION,
    models: Optional[List[str]] = MODEL_OPTION
):
    """Show interactions, generations and acceptances per day."""
    try:
        session = _load_session(file, from_date, to_date, users, features, models)
    except Exception as e:
        console.print(f"[red]Error:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)

    table = Table(title="Daily Activity")
    table.add_column("Day")
    table.add_column("Interactions", justify="right")
    table.add_column("Generations", justify="right")
    table.add_column("Acceptances", justify="right")
    for point in session.get_time_series():
        table.add_row(
            point.day.isoformat(),
            f"{point.interactions:,}",
            f"{point.generations:,}",
            f"{point.acceptances:,}",
        )

    console.print(table)
    sys.exit(EXIT_CODE_PASS)


@app.command()
def mix(
    file: Path = FILE_ARGUMENT,
    by: str = typer.Option("feature", "--by", help="Group by 'feature' or 'model'"),
    from_date: Optional[datetime] = FROM_OPTION,
    to_date: Optional[datetime] = TO_OPTION,
    users: Optional[List[str]] = USER_OPTION,
    features: Optional[List[str]] = FEATURE_OPTION,
    models: Optional[List[str]] = MODEL_OPTION
):
    """Show generations per feature or per model."""
    if by not in ("feature", "model"):
        console.print(f"[red]Error:[/] --by must be 'feature' or 'model', got '{by}'")
        sys.exit(EXIT_CODE_FAIL)

    try:
        session = _load_session(file, from_date, to_date, users, features, models)
    except Exception as e:
        console.print(f"[red]Error:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)

    if by == "feature":
        rows = session.get_feature_mix()
        label = session.display_names.feature
    else:
        rows = session.get_model_mix()
        label = session.display_names.model

    table = Table(title=f"Generations by {by}")
    table.add_column(by.capitalize())
    table.add_column("Generations", justify="right")
    for key, generations in rows:
        table.add_row(label(key), f"{generations:,}")

    console.print(table)
    sys.exit(EXIT_CODE_PASS)


@app.command()
def daily(
    file: Path = FILE_ARGUMENT,
    by: str = typer.Option("model", "--by", help="Group by 'model' or 'language'"),
    from_date: Optional[datetime] = FROM_OPTION,
    to_date: Optional[datetime] = TO_OPTION,
    users: Optional[List[str]] = USER_OPTION,
    features: Optional[List[str]] = FEATURE_OPTION,
    models: Optional[List[str]] = MODEL_OPTION
):
    """Show per-day generations by model or language."""
    if by not in ("model", "language"):
        console.print(f"[red]Error:[/] --by must be 'model' or 'language', got '{by}'")
        sys.exit(EXIT_CODE_FAIL)

    try:
        session = _load_session(file, from_date, to_date, users, features, models)
    except Exception as e:
        console.print(f"[red]Error:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)

    if by == "model":
        days = session.get_per_day_model_usage()
    else:
        days = session.get_per_day_language_usage()

    if not days:
        console.print(f"\n[dim]No {by} activity found.[/]")
        sys.exit(EXIT_CODE_PASS)

    for entry in days:
        breakdown = ", ".join(
            f"{label}: {generations:,}"
            for label, generations in sorted(entry.usage.items(), key=lambda item: item[1], reverse=True)
        )
        console.print(f"[bold]{entry.day.isoformat()}[/bold]  {breakdown}")

    sys.exit(EXIT_CODE_PASS)


if __name__ == "__main__":
    app()
