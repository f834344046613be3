"""
Filtering of the usage dataset.

Holds the caller's current filter criteria and produces filtered views of
the base collection on demand.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, List, Optional, Set

from copilot_stats.storage.models import UsageRecord


def _normalize(keys: Iterable[str]) -> Set[str]:
    return {key.casefold() for key in keys if key is not None}


@dataclass
class FilterCriteria:
    """Current filter selection.

    Date bounds are inclusive and either may be open. Each key set is
    compared case-insensitively; an empty set places no restriction on
    its dimension.
    """
    from_date: Optional[date] = None
    to_date: Optional[date] = None
    users: Set[str] = field(default_factory=set)
    features: Set[str] = field(default_factory=set)
    models: Set[str] = field(default_factory=set)

    @property
    def is_empty(self) -> bool:
        """True when no dimension restricts the dataset."""
        return (
            self.from_date is None
            and self.to_date is None
            and not self.users
            and not self.features
            and not self.models
        )

    def matches(self, record: UsageRecord) -> bool:
        """Check a record against every active dimension.

        Key sets are case-folded on every call; callers may change them
        between queries.
        """
        users = _normalize(self.users)
        features = _normalize(self.features)
        models = _normalize(self.models)
        if self.from_date is not None and record.day < self.from_date:
            return False
        if self.to_date is not None and record.day > self.to_date:
            return False
        if users and record.user_key not in users:
            return False
        if features and not any(
            f.feature.casefold() in features for f in record.totals_by_feature
        ):
            return False
        if models and not (
            any(m.model.casefold() in models for m in record.totals_by_model_feature)
            or any(m.model.casefold() in models for m in record.totals_by_language_model)
        ):
            return False
        return True


def apply_filter(records: Iterable[UsageRecord], criteria: FilterCriteria) -> List[UsageRecord]:
    """Return the records matching the criteria.

    Builds a new list on every call and never modifies the input.

    Args:
        records: Base collection
        criteria: Filter selection to apply

    Returns:
        Matching records in their original order
    """
    if criteria.is_empty:
        return list(records)
    return [record for record in records if criteria.matches(record)]
