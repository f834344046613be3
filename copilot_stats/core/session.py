"""
Usage analytics session.

Bundles a dataset with the caller's filter criteria and exposes every
query over the filtered view. A session is an explicit value owned by its
caller; there is no module-level state.
"""

import threading
from pathlib import Path
from typing import BinaryIO, List, Optional, Tuple, Union

from copilot_stats.storage.models import UsageRecord
from copilot_stats.storage.repository import IngestResult, ProgressCallback, UsageRepository

from . import aggregation
from .aggregation import (
    AdoptionStats,
    DailyUsage,
    LanguageModelAcceptance,
    TimeSeriesPoint,
    Totals,
    UserTotals,
)
from .display_names import DEFAULT_DISPLAY_NAMES, DisplayNames
from .filters import FilterCriteria, apply_filter
from .metrics import (
    AIDEIMetrics,
    EngineeringMetrics,
    MetricThresholds,
    compute_aidei,
    compute_engineering_metrics,
)


class UsageSession:
    """Dataset, filter criteria and display names for one analysis.

    Queries recompute from the base collection on every call; nothing is
    cached between calls.
    """

    def __init__(
        self,
        repository: Optional[UsageRepository] = None,
        criteria: Optional[FilterCriteria] = None,
        display_names: DisplayNames = DEFAULT_DISPLAY_NAMES
    ):
        """Initialize the session.

        Args:
            repository: Dataset to analyse; a new empty one when omitted
            criteria: Initial filter criteria; no restriction when omitted
            display_names: Labels for language, model and feature keys
        """
        self.repository = repository or UsageRepository()
        self.criteria = criteria or FilterCriteria()
        self.display_names = display_names

    def ingest(
        self,
        stream: BinaryIO,
        on_progress: Optional[ProgressCallback] = None,
        cancel_event: Optional[threading.Event] = None
    ) -> IngestResult:
        """Replace the dataset with records read from an NDJSON stream."""
        return self.repository.ingest(stream, on_progress=on_progress, cancel_event=cancel_event)

    def load_file(
        self,
        path: Union[str, Path],
        on_progress: Optional[ProgressCallback] = None,
        cancel_event: Optional[threading.Event] = None
    ) -> IngestResult:
        """Replace the dataset with records read from an NDJSON file."""
        return self.repository.load_file(path, on_progress=on_progress, cancel_event=cancel_event)

    def set_filter(self, criteria: FilterCriteria) -> None:
        self.criteria = criteria

    def get_filtered(self) -> List[UsageRecord]:
        return apply_filter(self.repository.records, self.criteria)

    def get_time_series(self) -> List[TimeSeriesPoint]:
        return aggregation.time_series(self.get_filtered())

    def get_top_users(self, n: int = 10) -> List[UserTotals]:
        return aggregation.top_users(self.get_filtered(), n)

    def get_feature_mix(self) -> List[Tuple[str, int]]:
        return aggregation.feature_mix(self.get_filtered())

    def get_model_mix(self) -> List[Tuple[str, int]]:
        return aggregation.model_mix(self.get_filtered())

    def get_most_used_model(self) -> Optional[Tuple[str, int]]:
        return aggregation.most_used_model(self.get_filtered())

    def get_per_day_model_usage(self) -> List[DailyUsage]:
        return aggregation.model_usage_per_day(self.get_filtered(), self.display_names)

    def get_per_day_language_usage(self) -> List[DailyUsage]:
        return aggregation.language_usage_per_day(self.get_filtered(), self.display_names)

    def get_model_acceptance_by_language(self) -> List[LanguageModelAcceptance]:
        return aggregation.model_acceptance_by_language(self.get_filtered(), self.display_names)

    def get_most_used_language_for_user(self, user_login: str) -> str:
        return aggregation.most_used_language_for_user(
            self.get_filtered(), user_login, self.display_names
        )

    def get_most_used_model_for_user(self, user_login: str) -> str:
        return aggregation.most_used_model_for_user(
            self.get_filtered(), user_login, self.display_names
        )

    def get_adoption_stats(self) -> AdoptionStats:
        return aggregation.adoption_stats(self.get_filtered())

    def get_totals(self) -> Totals:
        return aggregation.totals(self.get_filtered())

    def get_aidei(
        self,
        total_licensed_users: int = 0,
        thresholds: Optional[MetricThresholds] = None
    ) -> AIDEIMetrics:
        """AIDEI over the filtered records."""
        return compute_aidei(self.get_filtered(), total_licensed_users, thresholds)

    def get_engineering_metrics(
        self,
        total_licensed_users: int = 0,
        thresholds: Optional[MetricThresholds] = None
    ) -> EngineeringMetrics:
        """Extended engineering metrics over the filtered records."""
        return compute_engineering_metrics(self.get_filtered(), total_licensed_users, thresholds)
