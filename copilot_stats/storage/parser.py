"""
NDJSON record parsing.

Turns a single line of the usage export into a UsageRecord. Parsing never
raises to the caller: every line yields a ParseResult that either carries
the record or the reason it was rejected.
"""

import json
import logging
from dataclasses import dataclass, fields
from datetime import date, datetime
from typing import Any, Dict, Optional, Tuple, Type

from dateutil import parser as dateutil_parser

from .models import (
    FeatureTotals,
    IdeTotals,
    LanguageFeatureTotals,
    LanguageModelTotals,
    ModelFeatureTotals,
    PluginVersion,
    UsageRecord,
)

logger = logging.getLogger(__name__)

DAY_FORMAT = "%Y-%m-%d"

# Two unrelated defaults; a date that parses differently under each is incomplete
_FALLBACK_DEFAULTS = (datetime(2000, 1, 1), datetime(2011, 12, 31))

_COUNT_FIELDS = (
    "user_initiated_interaction_count",
    "code_generation_activity_count",
    "code_acceptance_activity_count",
    "generated_loc_sum",
    "accepted_loc_sum",
)

_BREAKDOWN_TYPES: Dict[str, Type] = {
    "totals_by_ide": IdeTotals,
    "totals_by_feature": FeatureTotals,
    "totals_by_language_feature": LanguageFeatureTotals,
    "totals_by_language_model": LanguageModelTotals,
    "totals_by_model_feature": ModelFeatureTotals,
}


class RecordParseError(ValueError):
    """Raised when a usage line cannot be turned into a record."""
    def __init__(self, message: str, field_name: Optional[str] = None):
        super().__init__(message)
        self.field_name = field_name


@dataclass(frozen=True)
class ParseResult:
    """Outcome of parsing one line."""
    record: Optional[UsageRecord] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.record is not None


def format_day(value: date) -> str:
    """Canonical serialization of a record date."""
    return value.strftime(DAY_FORMAT)


def parse_day(value: Any, field_name: str = "day") -> date:
    """Parse a date string, strict format first then a lenient fallback.

    The fallback only accepts complete dates; fragments such as "March" or
    "5" are rejected instead of being completed from the current date.

    Args:
        value: Raw JSON value
        field_name: Field being parsed, for error messages

    Returns:
        Parsed date

    Raises:
        RecordParseError: If the value is not a string or not a date
    """
    if not isinstance(value, str) or not value.strip():
        raise RecordParseError(f"'{field_name}' must be a date string", field_name)

    text = value.strip()
    try:
        return datetime.strptime(text, DAY_FORMAT).date()
    except ValueError:
        pass

    try:
        parsed = [dateutil_parser.parse(text, default=d).date() for d in _FALLBACK_DEFAULTS]
    except (ValueError, OverflowError) as e:
        raise RecordParseError(f"Invalid date in '{field_name}': {text!r} ({e})", field_name)

    if parsed[0] != parsed[1]:
        raise RecordParseError(
            f"Incomplete date in '{field_name}': {text!r} needs year, month and day",
            field_name
        )
    return parsed[0]


def parse_record(data: Dict[str, Any]) -> UsageRecord:
    """Build a UsageRecord from a decoded JSON object.

    Unknown keys are ignored. Missing strings, counts, flags and lists
    default to empty values. The 'day' field is required.

    Raises:
        RecordParseError: If a field has the wrong type or an invalid date
    """
    if not isinstance(data, dict):
        raise RecordParseError("Record must be a JSON object")

    if data.get("day") is None:
        raise RecordParseError("Missing required 'day'", "day")

    values: Dict[str, Any] = {
        "day": parse_day(data["day"], "day"),
        "report_start_day": _optional_day(data, "report_start_day"),
        "report_end_day": _optional_day(data, "report_end_day"),
        "enterprise_id": _str_field(data, "enterprise_id"),
        "user_id": _int_field(data, "user_id"),
        "user_login": _str_field(data, "user_login"),
        "used_agent": _bool_field(data, "used_agent"),
        "used_chat": _bool_field(data, "used_chat"),
    }
    for name in _COUNT_FIELDS:
        values[name] = _int_field(data, name)
    for name, entry_type in _BREAKDOWN_TYPES.items():
        values[name] = _parse_breakdown(data, name, entry_type)

    return UsageRecord(**values)


def parse_line(line: str) -> ParseResult:
    """Parse one NDJSON line into a ParseResult."""
    try:
        data = json.loads(line)
    except (ValueError, RecursionError) as e:
        return ParseResult(error=f"Invalid JSON: {e}")

    try:
        return ParseResult(record=parse_record(data))
    except RecordParseError as e:
        return ParseResult(error=str(e))


def _optional_day(data: Dict[str, Any], name: str) -> Optional[date]:
    value = data.get(name)
    if value is None:
        return None
    return parse_day(value, name)


def _int_field(data: Dict[str, Any], name: str) -> int:
    value = data.get(name)
    if value is None:
        return 0
    # bool is an int subclass in Python but not in the export format
    if isinstance(value, bool) or not isinstance(value, int):
        raise RecordParseError(f"'{name}' must be an integer", name)
    return value


def _str_field(data: Dict[str, Any], name: str) -> str:
    value = data.get(name)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise RecordParseError(f"'{name}' must be a string", name)
    return value


def _bool_field(data: Dict[str, Any], name: str) -> bool:
    value = data.get(name)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise RecordParseError(f"'{name}' must be a boolean", name)
    return value


def _parse_plugin_version(data: Any) -> Optional[PluginVersion]:
    if data is None:
        return None
    if not isinstance(data, dict):
        raise RecordParseError("'last_known_plugin_version' must be an object")

    sampled_at = None
    raw_sampled_at = data.get("sampled_at")
    if raw_sampled_at is not None:
        if not isinstance(raw_sampled_at, str):
            raise RecordParseError("'sampled_at' must be a timestamp string", "sampled_at")
        try:
            sampled_at = dateutil_parser.isoparse(raw_sampled_at)
        except ValueError as e:
            raise RecordParseError(f"Invalid 'sampled_at': {raw_sampled_at!r} ({e})", "sampled_at")

    return PluginVersion(
        sampled_at=sampled_at,
        plugin=_str_field(data, "plugin"),
        plugin_version=_str_field(data, "plugin_version"),
    )


def _parse_breakdown(data: Dict[str, Any], name: str, entry_type: Type) -> Tuple:
    entries = data.get(name)
    if entries is None:
        return ()
    if not isinstance(entries, list):
        raise RecordParseError(f"'{name}' must be a list", name)

    parsed = []
    for entry in entries:
        if not isinstance(entry, dict):
            raise RecordParseError(f"Entries of '{name}' must be objects", name)

        values = {}
        for f in fields(entry_type):
            if f.name == "last_known_plugin_version":
                values[f.name] = _parse_plugin_version(entry.get(f.name))
            elif f.type is int:
                values[f.name] = _int_field(entry, f.name)
            else:
                values[f.name] = _str_field(entry, f.name)
        parsed.append(entry_type(**values))

    return tuple(parsed)
