"""
Composite enablement metrics.

Computes the AI Development Enablement Index (AIDEI) and the extended
engineering metrics from filtered usage records.

All ratios fall back to 0 on a zero denominator. Nothing in this module
raises for an empty dataset or a non-positive licensed-user count; those
inputs degrade the affected rates to 0 instead.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional, Sequence, Set, Tuple

from copilot_stats.storage.models import UsageRecord

from .aggregation import CODE_COMPLETION_FEATURE, totals
from .statistics import gini_coefficient, median, safe_ratio, trend_slope, working_days

ADOPTION_WEIGHT = 0.4
ACCEPTANCE_WEIGHT = 0.4
ENGAGEMENT_WEIGHT = 0.2

# Minimum interactions + generations for a day to count towards usage rate
USAGE_DAY_MIN_ACTIVITY = 3

MIN_ENGAGED_DAYS = 2


@dataclass(frozen=True)
class MetricThresholds:
    """Tunable parameters for the metrics engine.

    Values are validated when the thresholds are constructed, so a negative
    value raises ValueError here and never during metric computation.
    """
    seconds_per_acceptance: float = 30.0
    power_user_acceptance_threshold: float = 0.3
    power_user_active_days_threshold: int = 3
    engagement_threshold: int = 5

    def __post_init__(self):
        """Validate thresholds are non-negative."""
        if self.seconds_per_acceptance < 0:
            raise ValueError("seconds_per_acceptance cannot be negative")
        if self.power_user_acceptance_threshold < 0:
            raise ValueError("power_user_acceptance_threshold cannot be negative")
        if self.power_user_active_days_threshold < 0:
            raise ValueError("power_user_active_days_threshold cannot be negative")
        if self.engagement_threshold < 0:
            raise ValueError("engagement_threshold cannot be negative")


@dataclass(frozen=True)
class AIDEIMetrics:
    """AI Development Enablement Index and its component rates.

    acceptance_rate is activity-based (sessions, not suggestions).
    usage_rate is reported but does not contribute to the score.
    """
    adoption_rate: float
    acceptance_rate: float
    licensed_vs_engaged_rate: float
    usage_rate: float
    score: float


@dataclass(frozen=True)
class EngineeringMetrics:
    """Extended adoption, quality and growth indicators."""
    # License and adoption
    license_utilization: float
    unused_seats: int
    engaged_users_percent: float
    usage_rate: float

    # Performance and quality
    median_acceptance_rate: float
    acceptances_per_active_user_per_day: float
    power_users_percent: float

    # Feature usage
    inline_share_percent: float
    chat_adoption_percent: float

    # Model and distribution
    model_leader_margin: float
    concentration_index: float

    # Growth and efficiency
    ramp_rate_users_per_week: float
    time_to_first_value_days: float
    language_coverage_percent: float
    estimated_time_saved_hours: float

    @classmethod
    def empty(cls, total_licensed_users: int) -> "EngineeringMetrics":
        """Metrics for a dataset without records."""
        return cls(
            license_utilization=0.0,
            unused_seats=total_licensed_users,
            engaged_users_percent=0.0,
            usage_rate=0.0,
            median_acceptance_rate=0.0,
            acceptances_per_active_user_per_day=0.0,
            power_users_percent=0.0,
            inline_share_percent=0.0,
            chat_adoption_percent=0.0,
            model_leader_margin=0.0,
            concentration_index=0.0,
            ramp_rate_users_per_week=0.0,
            time_to_first_value_days=0.0,
            language_coverage_percent=0.0,
            estimated_time_saved_hours=0.0,
        )


@dataclass
class _UserActivity:
    generations: int = 0
    acceptances: int = 0
    days: Set[date] = field(default_factory=set)
    first_seen: Optional[date] = None
    first_acceptance: Optional[date] = None
    used_chat: bool = False

    @property
    def acceptance_rate(self) -> float:
        return safe_ratio(self.acceptances, self.generations)


def aidei_score(adoption_rate: float, acceptance_rate: float, licensed_vs_engaged_rate: float) -> float:
    """Weighted AIDEI score: 0.4 adoption + 0.4 acceptance + 0.2 engagement."""
    return (
        (adoption_rate * ADOPTION_WEIGHT)
        + (acceptance_rate * ACCEPTANCE_WEIGHT)
        + (licensed_vs_engaged_rate * ENGAGEMENT_WEIGHT)
    )


def count_engaged_users_per_record(records: Sequence[UsageRecord], threshold: int) -> int:
    """Users with at least two days holding a single record above threshold.

    A day qualifies when one record's interactions + generations is strictly
    greater than the threshold. Used by the AIDEI score.
    """
    qualifying_days: Dict[str, Set[date]] = defaultdict(set)
    for record in records:
        if record.combined_activity > threshold:
            qualifying_days[record.user_key].add(record.day)
    return sum(1 for days in qualifying_days.values() if len(days) >= MIN_ENGAGED_DAYS)


def count_engaged_users_per_day(records: Sequence[UsageRecord], threshold: int) -> int:
    """Users with at least two days whose summed activity meets threshold.

    A day qualifies when interactions + generations summed over all of the
    user's records that day is greater than or equal to the threshold. Used
    by the engineering metrics.
    """
    daily: Dict[Tuple[str, date], int] = defaultdict(int)
    for record in records:
        daily[(record.user_key, record.day)] += record.combined_activity

    engaged_days: Dict[str, int] = defaultdict(int)
    for (user_key, _), activity in daily.items():
        if activity >= threshold:
            engaged_days[user_key] += 1
    return sum(1 for count in engaged_days.values() if count >= MIN_ENGAGED_DAYS)


def _usage_rate(records: Sequence[UsageRecord], work_days: int) -> float:
    if work_days <= 0:
        return 0.0

    active_days: Dict[str, Set[date]] = defaultdict(set)
    total_activity: Dict[str, int] = defaultdict(int)
    for record in records:
        total_activity[record.user_key] += record.combined_activity
        if record.combined_activity > USAGE_DAY_MIN_ACTIVITY:
            active_days[record.user_key].add(record.day)

    day_counts = [
        len(days) for user_key, days in active_days.items()
        if total_activity[user_key] > 0 and days
    ]
    if not day_counts:
        return 0.0

    average_days = sum(day_counts) / len(day_counts)
    return min(1.0, average_days / work_days)


def compute_aidei(
    records: Sequence[UsageRecord],
    total_licensed_users: int = 0,
    thresholds: Optional[MetricThresholds] = None
) -> AIDEIMetrics:
    """Compute the AI Development Enablement Index.

    Args:
        records: Filtered records
        total_licensed_users: Seats purchased; rates against it are 0 when <= 0
        thresholds: Tunable parameters, defaults when omitted

    Returns:
        AIDEIMetrics with component rates and the weighted score
    """
    thresholds = thresholds or MetricThresholds()
    work_days = working_days(record.day for record in records)

    users_with_activity = {
        record.user_key for record in records
        if record.code_generation_activity_count > 0 or record.user_initiated_interaction_count > 0
    }
    adoption_rate = safe_ratio(len(users_with_activity), total_licensed_users)

    acceptance_rate = totals(records).acceptance_rate

    licensed_vs_engaged_rate = 0.0
    if total_licensed_users > 0 and work_days > 0:
        engaged = count_engaged_users_per_record(records, thresholds.engagement_threshold)
        licensed_vs_engaged_rate = engaged / total_licensed_users

    usage_rate = _usage_rate(records, work_days)

    return AIDEIMetrics(
        adoption_rate=adoption_rate,
        acceptance_rate=acceptance_rate,
        licensed_vs_engaged_rate=licensed_vs_engaged_rate,
        usage_rate=usage_rate,
        score=aidei_score(adoption_rate, acceptance_rate, licensed_vs_engaged_rate),
    )


def _collect_user_activity(records: Sequence[UsageRecord]) -> Dict[str, _UserActivity]:
    users: Dict[str, _UserActivity] = defaultdict(_UserActivity)
    for record in records:
        user = users[record.user_key]
        user.generations += record.code_generation_activity_count
        user.acceptances += record.code_acceptance_activity_count
        user.days.add(record.day)
        if user.first_seen is None or record.day < user.first_seen:
            user.first_seen = record.day
        if record.code_acceptance_activity_count > 0:
            if user.first_acceptance is None or record.day < user.first_acceptance:
                user.first_acceptance = record.day
        if record.used_chat:
            user.used_chat = True
    return users


def _model_leader_margin(records: Sequence[UsageRecord], overall_rate: float) -> float:
    model_totals: Dict[str, List[int]] = defaultdict(lambda: [0, 0])
    for record in records:
        for entry in record.totals_by_model_feature:
            model_totals[entry.model][0] += entry.code_generation_activity_count
            model_totals[entry.model][1] += entry.code_acceptance_activity_count

    if not model_totals:
        return 0.0

    best_rate = max(safe_ratio(acc, gen) for gen, acc in model_totals.values())
    return best_rate - overall_rate


def _ramp_rate(records: Sequence[UsageRecord]) -> float:
    weekly_users: Dict[Tuple[int, int], Set[str]] = defaultdict(set)
    for record in records:
        iso_year, iso_week, _ = record.day.isocalendar()
        weekly_users[(iso_year, iso_week)].add(record.user_key)

    counts = [len(users) for _, users in sorted(weekly_users.items())]
    return trend_slope(counts)


def _time_to_first_value(users: Dict[str, _UserActivity]) -> float:
    delays = [
        (user.first_acceptance - user.first_seen).days
        for user in users.values()
        if user.first_acceptance is not None
    ]
    return median(delays)


def _language_coverage(records: Sequence[UsageRecord], active_user_count: int) -> float:
    language_users: Dict[str, Set[str]] = defaultdict(set)
    for record in records:
        for entry in record.totals_by_language_model:
            language_users[entry.language].add(record.user_key)

    if not language_users:
        return 0.0

    top_users = max(len(users) for users in language_users.values())
    return safe_ratio(top_users, active_user_count)


def compute_engineering_metrics(
    records: Sequence[UsageRecord],
    total_licensed_users: int = 0,
    thresholds: Optional[MetricThresholds] = None
) -> EngineeringMetrics:
    """Compute the extended engineering metrics.

    Args:
        records: Filtered records
        total_licensed_users: Seats purchased; may be <= 0
        thresholds: Tunable parameters, defaults when omitted

    Returns:
        EngineeringMetrics; all zero except unused seats for an empty dataset
    """
    thresholds = thresholds or MetricThresholds()
    if not records:
        return EngineeringMetrics.empty(total_licensed_users)

    users = _collect_user_activity(records)
    active_user_count = len(users)
    work_days = working_days(record.day for record in records)
    overall = totals(records)

    license_utilization = safe_ratio(active_user_count, total_licensed_users)
    unused_seats = max(0, total_licensed_users - active_user_count)

    engaged_users = 0
    if work_days > 0:
        engaged_users = count_engaged_users_per_day(records, thresholds.engagement_threshold)
    engaged_users_percent = safe_ratio(engaged_users, total_licensed_users)

    active_pairs = len({(record.user_key, record.day) for record in records})
    usage_rate = safe_ratio(active_pairs, engaged_users * work_days)

    median_acceptance_rate = median([user.acceptance_rate for user in users.values()])
    acceptances_per_active_user_per_day = safe_ratio(
        overall.acceptances, active_user_count * work_days
    )

    power_users = sum(
        1 for user in users.values()
        if user.acceptance_rate >= thresholds.power_user_acceptance_threshold
        and len(user.days) >= thresholds.power_user_active_days_threshold
    )
    power_users_percent = safe_ratio(power_users, active_user_count)

    inline_generations = sum(
        entry.code_generation_activity_count
        for record in records
        for entry in record.totals_by_feature
        if entry.feature.casefold() == CODE_COMPLETION_FEATURE
    )
    inline_share_percent = safe_ratio(inline_generations, overall.generations)

    chat_users = sum(1 for user in users.values() if user.used_chat)
    chat_adoption_percent = safe_ratio(chat_users, active_user_count)

    return EngineeringMetrics(
        license_utilization=license_utilization,
        unused_seats=unused_seats,
        engaged_users_percent=engaged_users_percent,
        usage_rate=usage_rate,
        median_acceptance_rate=median_acceptance_rate,
        acceptances_per_active_user_per_day=acceptances_per_active_user_per_day,
        power_users_percent=power_users_percent,
        inline_share_percent=inline_share_percent,
        chat_adoption_percent=chat_adoption_percent,
        model_leader_margin=_model_leader_margin(records, overall.acceptance_rate),
        concentration_index=gini_coefficient(user.generations for user in users.values()),
        ramp_rate_users_per_week=_ramp_rate(records),
        time_to_first_value_days=_time_to_first_value(users),
        language_coverage_percent=_language_coverage(records, active_user_count),
        estimated_time_saved_hours=(
            overall.acceptances * thresholds.seconds_per_acceptance / 3600.0
        ),
    )


def estimate_time_saved_value(hours: float, cost_per_hour: float) -> float:
    """Monetary value of saved hours at a given hourly cost."""
    return hours * cost_per_hour
