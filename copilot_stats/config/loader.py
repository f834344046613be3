"""
Configuration management and loading.

Handles report settings: licensed seats, hourly cost and metric thresholds.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict

import yaml

from copilot_stats.core.metrics import MetricThresholds

DEFAULT_COST_PER_HOUR = 90.0


@dataclass(frozen=True)
class ReportConfig:
    """Settings supplied from outside the usage data."""
    total_licensed_users: int = 0
    cost_per_hour: float = DEFAULT_COST_PER_HOUR
    thresholds: MetricThresholds = field(default_factory=MetricThresholds)

    def __post_init__(self):
        """Validate cost is non-negative.

        A non-positive licensed-user count is allowed; rates computed
        against it degrade to 0.
        """
        if self.cost_per_hour < 0:
            raise ValueError("cost_per_hour cannot be negative")


def load_report_config(path: str) -> ReportConfig:
    """Load and validate report configuration from YAML file.

    Every key is optional. Unknown keys are rejected so that a typo in a
    threshold name cannot silently fall back to its default.

    Args:
        path: Path to YAML configuration file

    Returns:
        Validated ReportConfig object

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If YAML is invalid
        ValueError: If configuration is invalid
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Report config file not found: {path}")

    with open(config_path, 'r', encoding='utf-8') as f:
        try:
            raw_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise yaml.YAMLError(f"Invalid YAML in config file {path}: {e}")

    if raw_config is None:
        return ReportConfig()

    if not isinstance(raw_config, dict):
        raise ValueError("Configuration must be a dictionary")

    allowed_top_keys = {'total_licensed_users', 'cost_per_hour', 'thresholds'}
    unknown_keys = set(raw_config.keys()) - allowed_top_keys
    if unknown_keys:
        raise ValueError(f"Unknown configuration keys: {unknown_keys}")

    total_licensed_users = raw_config.get('total_licensed_users', 0)
    if isinstance(total_licensed_users, bool) or not isinstance(total_licensed_users, int):
        raise ValueError("'total_licensed_users' must be an integer")

    cost_per_hour = raw_config.get('cost_per_hour', DEFAULT_COST_PER_HOUR)
    if isinstance(cost_per_hour, bool) or not isinstance(cost_per_hour, (int, float)):
        raise ValueError("'cost_per_hour' must be a number")

    thresholds_data = raw_config.get('thresholds', {})
    if thresholds_data is None:
        thresholds_data = {}
    if not isinstance(thresholds_data, dict):
        raise ValueError("'thresholds' must be a dictionary")

    return ReportConfig(
        total_licensed_users=total_licensed_users,
        cost_per_hour=float(cost_per_hour),
        thresholds=_parse_thresholds(thresholds_data)
    )


def _parse_thresholds(data: Dict[str, Any]) -> MetricThresholds:
    """Parse and validate metric thresholds.

    Args:
        data: Thresholds section of the configuration

    Returns:
        Validated MetricThresholds

    Raises:
        ValueError: If a threshold is unknown, of the wrong type or negative
    """
    defaults = MetricThresholds()

    number_keys = {'seconds_per_acceptance', 'power_user_acceptance_threshold'}
    integer_keys = {'power_user_active_days_threshold', 'engagement_threshold'}

    unknown_keys = set(data.keys()) - number_keys - integer_keys
    if unknown_keys:
        raise ValueError(f"Unknown keys in thresholds: {unknown_keys}")

    values = {}
    for key in number_keys:
        value = data.get(key, getattr(defaults, key))
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"'{key}' in thresholds must be a number")
        values[key] = float(value)

    for key in integer_keys:
        value = data.get(key, getattr(defaults, key))
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"'{key}' in thresholds must be an integer")
        values[key] = value

    return MetricThresholds(**values)
