import pytest

from farm_analytics.analytics.trends import TrendComparator, direction_of
from farm_analytics.domain.models import Aggregate, TrendDirection


def _daily(values: dict) -> Aggregate:
    return Aggregate(total=sum(values.values()), by_dimension=values, count=len(values))


def test_trend_from_zero_baseline_reports_full_growth():
    result = TrendComparator().trend(current=50, previous=0)
    assert result.change_percent == 100
    assert result.direction is TrendDirection.UP
    assert result.change_absolute == 50


def test_trend_with_both_values_zero_is_stable():
    result = TrendComparator().trend(current=0, previous=0)
    assert result.change_percent == 0
    assert result.direction is TrendDirection.STABLE


def test_trend_percent_is_rounded():
    result = TrendComparator().trend(current=10, previous=3)
    assert result.change_percent == pytest.approx(233.33)
    assert result.direction is TrendDirection.UP


def test_trend_decline():
    result = TrendComparator().trend(current=75, previous=100)
    assert result.change_absolute == -25
    assert result.change_percent == -25
    assert result.direction is TrendDirection.DOWN


def test_direction_of_exact_comparison():
    assert direction_of(1.0, 1.0) is TrendDirection.STABLE
    assert direction_of(1.01, 1.0) is TrendDirection.UP


def test_split_half_trend_sorts_days_before_splitting():
    daily = _daily(
        {"2024-01-04": 40, "2024-01-01": 10, "2024-01-03": 30, "2024-01-02": 20}
    )

    result = TrendComparator().split_half_trend(daily)

    assert result.first_half_average == 15
    assert result.second_half_average == 35
    assert result.direction is TrendDirection.UP


def test_split_half_trend_odd_series_puts_extra_day_in_second_half():
    daily = _daily({"2024-01-01": 30, "2024-01-02": 20, "2024-01-03": 10})

    result = TrendComparator().split_half_trend(daily)

    assert result.first_half_average == 30
    assert result.second_half_average == 15
    assert result.direction is TrendDirection.DOWN


def test_split_half_trend_of_single_day_or_empty_series():
    comparator = TrendComparator()

    single = comparator.split_half_trend(_daily({"2024-01-01": 8}))
    empty = comparator.split_half_trend(_daily({}))

    assert single.first_half_average == 0
    assert single.second_half_average == 8
    assert single.direction is TrendDirection.UP
    assert empty.direction is TrendDirection.STABLE
