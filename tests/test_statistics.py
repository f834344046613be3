"""
Tests for statistical helpers.
"""
from datetime import date

import pytest

from copilot_stats.core.statistics import (
    gini_coefficient,
    median,
    safe_ratio,
    trend_slope,
    working_days,
)


class TestSafeRatio:
    """Test zero-safe division."""

    def test_regular_division(self):
        assert safe_ratio(3, 4) == 0.75

    def test_zero_or_negative_denominator(self):
        """Test the 0.0 fallback."""
        assert safe_ratio(5, 0) == 0.0
        assert safe_ratio(5, -2) == 0.0


class TestWorkingDays:
    """Test weekday counting over the observed span."""

    def test_full_week(self):
        """Test Monday to Sunday counts five days."""
        assert working_days([date(2025, 3, 3), date(2025, 3, 9)]) == 5

    def test_weekend_only(self):
        """Test a Saturday-Sunday span has no working days."""
        assert working_days([date(2025, 3, 8), date(2025, 3, 9)]) == 0

    def test_gaps_and_duplicates(self):
        """Test the whole span counts regardless of gaps or repeats."""
        days = [date(2025, 3, 14), date(2025, 3, 3), date(2025, 3, 3)]
        assert working_days(days) == 10

    def test_single_day_and_empty(self):
        assert working_days([date(2025, 3, 5)]) == 1
        assert working_days([]) == 0


class TestMedian:
    """Test the median."""

    def test_odd_length(self):
        assert median([5, 1, 3]) == 3.0

    def test_even_length(self):
        """Test the mean of the two middle values."""
        assert median([4, 1, 3, 2]) == 2.5

    def test_empty(self):
        assert median([]) == 0.0


class TestGiniCoefficient:
    """Test the concentration index."""

    def test_equal_values(self):
        """Test equal values give 0."""
        assert gini_coefficient([10, 10, 10, 10]) == 0.0

    def test_single_holder(self):
        """Test one holder of everything gives (n-1)/n."""
        assert gini_coefficient([0, 0, 0, 12]) == pytest.approx(0.75)
        assert gini_coefficient([0, 7]) == pytest.approx(0.5)

    def test_degenerate_inputs(self):
        """Test fewer than two values or a zero sum give 0."""
        assert gini_coefficient([]) == 0.0
        assert gini_coefficient([42]) == 0.0
        assert gini_coefficient([0, 0, 0]) == 0.0

    def test_bounded(self):
        """Test an uneven distribution stays within [0, 1)."""
        value = gini_coefficient([1, 2, 3, 50])
        assert 0.0 < value < 1.0


class TestTrendSlope:
    """Test the least squares slope."""

    def test_constant_series(self):
        assert trend_slope([4, 4, 4, 4]) == 0.0

    def test_linear_series(self):
        """Test a linear series returns its step."""
        assert trend_slope([1, 3, 5, 7]) == pytest.approx(2.0)
        assert trend_slope([9, 6, 3]) == pytest.approx(-3.0)

    def test_too_short(self):
        assert trend_slope([]) == 0.0
        assert trend_slope([5]) == 0.0
