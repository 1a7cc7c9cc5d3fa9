"""Day-to-day consistency scoring and extreme-day extraction."""

from __future__ import annotations

from statistics import pstdev
from typing import List, Optional

from farm_analytics.domain.models import Aggregate, DayValue
from farm_analytics.utils.numeric import mean, round2


class ConsistencyAnalyzer:
    """Works on daily aggregates keyed by ISO day."""

    def __init__(self, low_day_ratio: float = 0.7, low_day_limit: int = 5) -> None:
        if low_day_ratio < 0:
            raise ValueError("low_day_ratio must be non-negative")
        if low_day_limit < 0:
            raise ValueError("low_day_limit must be non-negative")
        self._low_day_ratio = low_day_ratio
        self._low_day_limit = low_day_limit

    def consistency_score(self, daily: Aggregate) -> float:
        """100 minus the coefficient of variation (in percent), floored at 0."""

        values = list(daily.by_dimension.values())
        average = mean(values)
        if average <= 0:
            return 0.0
        deviation = pstdev(values)
        return round2(max(0.0, 100 - (deviation / average) * 100))

    def peak_day(self, daily: Aggregate) -> Optional[DayValue]:
        peak: Optional[DayValue] = None
        for day, value in daily.by_dimension.items():
            # Strict comparison keeps the first of tied days.
            if peak is None or value > peak.value:
                peak = DayValue(date=day, value=value)
        return peak

    def low_days(self, daily: Aggregate) -> List[DayValue]:
        if not daily.by_dimension:
            return []
        threshold = mean(daily.by_dimension.values()) * self._low_day_ratio
        below = [
            DayValue(date=day, value=value)
            for day, value in daily.by_dimension.items()
            if value < threshold
        ]
        below.sort(key=lambda day: day.value)
        return below[: self._low_day_limit]
