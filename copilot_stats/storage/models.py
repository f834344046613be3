"""
Data models for storage layer.

Defines the usage record and its nested per-dimension breakdowns.
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Tuple


@dataclass(frozen=True)
class PluginVersion:
    """Last plugin version seen for an IDE."""
    sampled_at: Optional[datetime] = None
    plugin: str = ""
    plugin_version: str = ""


@dataclass(frozen=True)
class IdeTotals:
    """Activity counts for a single IDE."""
    ide: str = ""
    user_initiated_interaction_count: int = 0
    code_generation_activity_count: int = 0
    code_acceptance_activity_count: int = 0
    generated_loc_sum: int = 0
    accepted_loc_sum: int = 0
    last_known_plugin_version: Optional[PluginVersion] = None


@dataclass(frozen=True)
class FeatureTotals:
    """Activity counts for a single assistant feature."""
    feature: str = ""
    user_initiated_interaction_count: int = 0
    code_generation_activity_count: int = 0
    code_acceptance_activity_count: int = 0
    generated_loc_sum: int = 0
    accepted_loc_sum: int = 0


@dataclass(frozen=True)
class LanguageFeatureTotals:
    """Activity counts for a language and feature pair."""
    language: str = ""
    feature: str = ""
    code_generation_activity_count: int = 0
    code_acceptance_activity_count: int = 0
    generated_loc_sum: int = 0
    accepted_loc_sum: int = 0


@dataclass(frozen=True)
class LanguageModelTotals:
    """Activity counts for a language and model pair."""
    language: str = ""
    model: str = ""
    code_generation_activity_count: int = 0
    code_acceptance_activity_count: int = 0
    generated_loc_sum: int = 0
    accepted_loc_sum: int = 0


@dataclass(frozen=True)
class ModelFeatureTotals:
    """Activity counts for a model and feature pair."""
    model: str = ""
    feature: str = ""
    user_initiated_interaction_count: int = 0
    code_generation_activity_count: int = 0
    code_acceptance_activity_count: int = 0
    generated_loc_sum: int = 0
    accepted_loc_sum: int = 0


@dataclass(frozen=True)
class UsageRecord:
    """Immutable usage of the assistant by one user on one day.
    
    Counts are activity sessions, not individual suggestions. Counts are
    expected to be non-negative but this is not enforced.
    """
    day: date
    report_start_day: Optional[date] = None
    report_end_day: Optional[date] = None
    enterprise_id: str = ""
    user_id: int = 0
    user_login: str = ""
    user_initiated_interaction_count: int = 0
    code_generation_activity_count: int = 0
    code_acceptance_activity_count: int = 0
    generated_loc_sum: int = 0
    accepted_loc_sum: int = 0
    totals_by_ide: Tuple[IdeTotals, ...] = ()
    totals_by_feature: Tuple[FeatureTotals, ...] = ()
    totals_by_language_feature: Tuple[LanguageFeatureTotals, ...] = ()
    totals_by_language_model: Tuple[LanguageModelTotals, ...] = ()
    totals_by_model_feature: Tuple[ModelFeatureTotals, ...] = ()
    used_agent: bool = False
    used_chat: bool = False
    
    @property
    def user_key(self) -> str:
        """Case-insensitive identity of the user."""
        return self.user_login.casefold()
    
    @property
    def combined_activity(self) -> int:
        """Interactions plus generations, used by engagement tests."""
        return self.user_initiated_interaction_count + self.code_generation_activity_count
