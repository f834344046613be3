"""
Grouped views over filtered usage records.

Time series, leaderboards, feature and model mixes, per-day breakdowns,
per-user lookups and raw totals. Every function is a pure function of the
records it is given.
"""

from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from copilot_stats.storage.models import UsageRecord

from .display_names import DEFAULT_DISPLAY_NAMES, UNKNOWN, DisplayNames

INLINE_CHAT_FEATURE = "chat_inline"
CODE_COMPLETION_FEATURE = "code_completion"


@dataclass(frozen=True)
class TimeSeriesPoint:
    """Summed activity for one day."""
    day: date
    interactions: int
    generations: int
    acceptances: int


@dataclass(frozen=True)
class UserTotals:
    """Summed activity for one user."""
    user: str
    generations: int
    acceptances: int


@dataclass(frozen=True)
class DailyUsage:
    """Generations per display label for one day."""
    day: date
    usage: Dict[str, int]


@dataclass(frozen=True)
class LanguageModelAcceptance:
    """Accepted activities for a language and model pair."""
    language: str
    model: str
    acceptances: int


@dataclass(frozen=True)
class AdoptionStats:
    """Adoption counts over the filtered records."""
    active_users: int
    using_chat: int
    using_inline: int
    using_completions: int


@dataclass(frozen=True)
class Totals:
    """Raw activity totals with an activity-based acceptance rate.

    The acceptance rate counts generation and acceptance activity sessions,
    not individual suggestions, so it usually differs from suggestion-based
    rates reported elsewhere.
    """
    interactions: int
    generations: int
    acceptances: int

    @property
    def acceptance_rate(self) -> float:
        """Acceptances / generations, 0.0 when nothing was generated."""
        if self.generations > 0:
            return self.acceptances / self.generations
        return 0.0


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def _sorted_desc(totals: Dict[str, int]) -> List[Tuple[str, int]]:
    return sorted(totals.items(), key=lambda item: item[1], reverse=True)


def time_series(records: Iterable[UsageRecord]) -> List[TimeSeriesPoint]:
    """Sum interactions, generations and acceptances per day, ascending."""
    by_day: Dict[date, List[int]] = defaultdict(lambda: [0, 0, 0])
    for record in records:
        sums = by_day[record.day]
        sums[0] += record.user_initiated_interaction_count
        sums[1] += record.code_generation_activity_count
        sums[2] += record.code_acceptance_activity_count

    return [
        TimeSeriesPoint(day=day, interactions=s[0], generations=s[1], acceptances=s[2])
        for day, s in sorted(by_day.items())
    ]


def top_users(records: Iterable[UsageRecord], n: int = 10) -> List[UserTotals]:
    """Get top N users by total generations.

    Users are grouped case-insensitively and reported under the first
    spelling of their login. Ties keep the order users were first seen.

    Args:
        records: Filtered records
        n: Number of users to return

    Returns:
        List of UserTotals sorted by generations descending
    """
    logins: Dict[str, str] = {}
    sums: Dict[str, List[int]] = defaultdict(lambda: [0, 0])
    for record in records:
        key = record.user_key
        logins.setdefault(key, record.user_login)
        sums[key][0] += record.code_generation_activity_count
        sums[key][1] += record.code_acceptance_activity_count

    ranked = sorted(sums.items(), key=lambda item: item[1][0], reverse=True)
    return [
        UserTotals(user=logins[key], generations=s[0], acceptances=s[1])
        for key, s in ranked[:n]
    ]


def feature_mix(records: Iterable[UsageRecord]) -> List[Tuple[str, int]]:
    """Generations per feature across all feature breakdowns, descending."""
    totals: Dict[str, int] = defaultdict(int)
    for record in records:
        for entry in record.totals_by_feature:
            totals[entry.feature] += entry.code_generation_activity_count
    return _sorted_desc(totals)


def model_mix(records: Iterable[UsageRecord]) -> List[Tuple[str, int]]:
    """Generations per model across model-feature breakdowns, descending.

    Blank model keys are reported as "Unknown".
    """
    totals: Dict[str, int] = defaultdict(int)
    for record in records:
        for entry in record.totals_by_model_feature:
            model = UNKNOWN if _is_blank(entry.model) else entry.model
            totals[model] += entry.code_generation_activity_count
    return _sorted_desc(totals)


def most_used_model(records: Iterable[UsageRecord]) -> Optional[Tuple[str, int]]:
    """Model with the most generations, or None without model data."""
    mix = model_mix(records)
    return mix[0] if mix else None


def _usage_per_day(
    records: Iterable[UsageRecord],
    entries: Callable[[UsageRecord], Iterable],
    key_of: Callable,
    label_of: Callable[[str], str],
) -> List[DailyUsage]:
    by_day: Dict[date, Dict[str, int]] = defaultdict(lambda: defaultdict(int))
    for record in records:
        day_totals = by_day[record.day]
        for entry in entries(record):
            key = key_of(entry)
            if _is_blank(key) or entry.code_generation_activity_count <= 0:
                continue
            day_totals[key] += entry.code_generation_activity_count

    result = []
    for day, day_totals in sorted(by_day.items()):
        if not day_totals:
            continue
        labelled: Dict[str, int] = defaultdict(int)
        for key, generations in day_totals.items():
            labelled[label_of(key)] += generations
        result.append(DailyUsage(day=day, usage=dict(labelled)))
    return result


def model_usage_per_day(
    records: Iterable[UsageRecord],
    display_names: DisplayNames = DEFAULT_DISPLAY_NAMES
) -> List[DailyUsage]:
    """Generations per model label for each day with model activity."""
    return _usage_per_day(
        records,
        lambda r: r.totals_by_model_feature,
        lambda e: e.model,
        display_names.model,
    )


def language_usage_per_day(
    records: Iterable[UsageRecord],
    display_names: DisplayNames = DEFAULT_DISPLAY_NAMES
) -> List[DailyUsage]:
    """Generations per language label for each day with language activity."""
    return _usage_per_day(
        records,
        lambda r: r.totals_by_language_feature,
        lambda e: e.language,
        display_names.language,
    )


def model_acceptance_by_language(
    records: Iterable[UsageRecord],
    display_names: DisplayNames = DEFAULT_DISPLAY_NAMES
) -> List[LanguageModelAcceptance]:
    """Accepted activities per (language, model) label pair.

    Returns:
        Pairs sorted by language label, then acceptances descending
    """
    totals: Dict[Tuple[str, str], int] = defaultdict(int)
    for record in records:
        for entry in record.totals_by_language_model:
            if _is_blank(entry.language) or _is_blank(entry.model):
                continue
            if entry.code_acceptance_activity_count <= 0:
                continue
            key = (display_names.language(entry.language), display_names.model(entry.model))
            totals[key] += entry.code_acceptance_activity_count

    ranked = sorted(totals.items(), key=lambda item: (item[0][0], -item[1]))
    return [
        LanguageModelAcceptance(language=language, model=model, acceptances=acceptances)
        for (language, model), acceptances in ranked
    ]


def _most_used_for_user(
    records: Iterable[UsageRecord],
    user_login: str,
    entries: Callable[[UsageRecord], Iterable],
    key_of: Callable,
) -> Optional[str]:
    user_key = user_login.casefold()
    totals: Dict[str, int] = defaultdict(int)
    for record in records:
        if record.user_key != user_key:
            continue
        for entry in entries(record):
            key = key_of(entry)
            if _is_blank(key) or entry.code_generation_activity_count <= 0:
                continue
            totals[key] += entry.code_generation_activity_count

    if not totals:
        return None
    return max(totals.items(), key=lambda item: item[1])[0]


def most_used_language_for_user(
    records: Iterable[UsageRecord],
    user_login: str,
    display_names: DisplayNames = DEFAULT_DISPLAY_NAMES
) -> str:
    """Label of the language a user generated the most with, or "Unknown"."""
    key = _most_used_for_user(
        records, user_login, lambda r: r.totals_by_language_feature, lambda e: e.language
    )
    return display_names.language(key or UNKNOWN)


def most_used_model_for_user(
    records: Iterable[UsageRecord],
    user_login: str,
    display_names: DisplayNames = DEFAULT_DISPLAY_NAMES
) -> str:
    """Label of the model a user generated the most with, or "Unknown"."""
    key = _most_used_for_user(
        records, user_login, lambda r: r.totals_by_model_feature, lambda e: e.model
    )
    return display_names.model(key or UNKNOWN)


def _has_feature(record: UsageRecord, feature: str) -> bool:
    return any(entry.feature.casefold() == feature for entry in record.totals_by_feature)


def adoption_stats(records: Sequence[UsageRecord]) -> AdoptionStats:
    """Count distinct users and records using chat, inline chat and completions."""
    return AdoptionStats(
        active_users=len({record.user_key for record in records}),
        using_chat=sum(1 for record in records if record.used_chat),
        using_inline=sum(1 for record in records if _has_feature(record, INLINE_CHAT_FEATURE)),
        using_completions=sum(
            1 for record in records if _has_feature(record, CODE_COMPLETION_FEATURE)
        ),
    )


def totals(records: Iterable[UsageRecord]) -> Totals:
    """Sum interactions, generations and acceptances."""
    interactions = generations = acceptances = 0
    for record in records:
        interactions += record.user_initiated_interaction_count
        generations += record.code_generation_activity_count
        acceptances += record.code_acceptance_activity_count
    return Totals(interactions=interactions, generations=generations, acceptances=acceptances)
