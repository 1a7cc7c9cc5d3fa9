"""Trend comparisons between two figures or two halves of a series."""

from __future__ import annotations

from farm_analytics.domain.models import (
    Aggregate,
    SplitHalfTrend,
    TrendDirection,
    TrendResult,
)
from farm_analytics.utils.numeric import round2


def direction_of(current: float, previous: float) -> TrendDirection:
    if current > previous:
        return TrendDirection.UP
    if current < previous:
        return TrendDirection.DOWN
    return TrendDirection.STABLE


class TrendComparator:
    """Compares current and previous aggregates of the same metric."""

    ZERO_BASELINE_GROWTH = 100.0

    def trend(self, current: float, previous: float) -> TrendResult:
        """Absolute and percentage change plus direction.

        A zero baseline reports +100% when the current figure is positive and
        0% otherwise, instead of an undefined ratio.
        """

        change = current - previous
        if previous > 0:
            change_percent = round2(change / previous * 100)
        elif current > 0:
            change_percent = self.ZERO_BASELINE_GROWTH
        else:
            change_percent = 0.0
        return TrendResult(
            current=current,
            previous=previous,
            change_absolute=change,
            change_percent=change_percent,
            direction=direction_of(current, previous),
        )

    def split_half_trend(self, daily: Aggregate) -> SplitHalfTrend:
        values = [value for _, value in sorted(daily.by_dimension.items())]
        midpoint = len(values) // 2
        first_half = values[:midpoint]
        second_half = values[midpoint:]
        first_average = sum(first_half) / (len(first_half) or 1)
        second_average = sum(second_half) / (len(second_half) or 1)
        return SplitHalfTrend(
            direction=direction_of(second_average, first_average),
            first_half_average=first_average,
            second_half_average=second_average,
        )
