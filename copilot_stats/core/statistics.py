"""
Statistical helpers for the metrics engine.

Every function here returns 0 instead of failing on empty input or a
zero denominator.
"""

from datetime import date, timedelta
from typing import Iterable, List, Sequence


def safe_ratio(numerator: float, denominator: float) -> float:
    """Divide, falling back to 0.0 for a non-positive denominator."""
    if denominator <= 0:
        return 0.0
    return numerator / denominator


def working_days(days: Iterable[date]) -> int:
    """Count weekdays (Mon-Fri) in the inclusive span of the given dates.
    
    Args:
        days: Observed dates, in any order and possibly repeated
        
    Returns:
        Number of weekdays between the earliest and latest date, 0 if none
    """
    observed = set(days)
    if not observed:
        return 0
    
    current = min(observed)
    last = max(observed)
    count = 0
    while current <= last:
        if current.weekday() < 5:
            count += 1
        current += timedelta(days=1)
    return count


def median(values: Sequence[float]) -> float:
    """Median of the values, 0.0 for an empty sequence.
    
    Odd-length input returns the middle element; even-length input returns
    the mean of the two middle elements.
    """
    if not values:
        return 0.0
    
    sorted_values = sorted(values)
    n = len(sorted_values)
    mid = n // 2
    if n % 2 == 0:
        return (sorted_values[mid - 1] + sorted_values[mid]) / 2.0
    return float(sorted_values[mid])


def gini_coefficient(values: Iterable[float]) -> float:
    """Gini coefficient of non-negative values.
    
    0 means perfectly even distribution; (n-1)/n means a single value holds
    everything.
    
    Args:
        values: Non-negative values, e.g. per-user generation totals
        
    Returns:
        Gini coefficient, 0.0 for fewer than two values or a zero total
    """
    sorted_values: List[float] = sorted(values)
    n = len(sorted_values)
    if n <= 1:
        return 0.0
    
    total = sum(sorted_values)
    if total == 0:
        return 0.0
    
    weighted = 0.0
    for i, value in enumerate(sorted_values):
        weighted += (2 * (i + 1) - n - 1) * value
    
    return weighted / (n * total)


def trend_slope(values: Sequence[float]) -> float:
    """Ordinary least squares slope of values against x = 1..n.
    
    Args:
        values: Chronologically ordered observations
        
    Returns:
        Slope in units per step, 0.0 for fewer than two observations
    """
    n = len(values)
    if n < 2:
        return 0.0
    
    sum_x = n * (n + 1) / 2.0
    sum_x2 = n * (n + 1) * (2 * n + 1) / 6.0
    sum_y = sum(values)
    sum_xy = sum((i + 1) * y for i, y in enumerate(values))
    
    return (n * sum_xy - sum_x * sum_y) / (n * sum_x2 - sum_x * sum_x)
