"""Report payloads assembled by the analytics service.

Every report defaults to its zeroed form, which is what a farm without records
(or a blank farm id) receives.
"""

from __future__ import annotations

from typing import Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from .models import (
    BreakdownEntry,
    CategoryExpense,
    DayValue,
    FeedTypeUsage,
    FinancialSummary,
    SplitHalfTrend,
    TrendResult,
)

GRADE_KEYS = ("AA", "A", "B", "C")
SHIFT_KEYS = ("Morning", "Afternoon", "Evening")
CRACKED_KEY = "cracked"


def _zero_grades() -> Dict[str, float]:
    return {key: 0 for key in GRADE_KEYS}


def _zero_shifts() -> Dict[str, float]:
    return {key: 0 for key in SHIFT_KEYS}


class _Report(BaseModel):
    model_config = ConfigDict(frozen=True)

    farm_id: str = ""
    start: str = ""
    end: str = ""


class ProductionSummary(_Report):
    total_eggs: float = 0
    total_collections: int = 0
    average_daily: float = 0
    days_in_period: int = 0
    peak_day: Optional[DayValue] = None
    grade_breakdown: Dict[str, float] = Field(default_factory=_zero_grades)
    shift_breakdown: Dict[str, float] = Field(default_factory=_zero_shifts)


class GradeDistribution(_Report):
    """Grade counts plus cracked eggs, each with its share of the total."""

    total: float = 0
    grades: Dict[str, BreakdownEntry] = Field(
        default_factory=lambda: {
            key: BreakdownEntry() for key in (*GRADE_KEYS, CRACKED_KEY)
        }
    )


class ProductionTrends(_Report):
    total_eggs: float = 0
    points: Tuple[DayValue, ...] = ()
    trend: SplitHalfTrend = Field(default_factory=SplitHalfTrend)


class RevenueTrends(_Report):
    total_revenue: float = 0
    points: Tuple[DayValue, ...] = ()
    trend: SplitHalfTrend = Field(default_factory=SplitHalfTrend)


class PeriodComparison(_Report):
    """Current window against the contiguous previous window."""

    previous_start: str = ""
    previous_end: str = ""
    eggs: TrendResult = Field(default_factory=TrendResult)
    revenue: TrendResult = Field(default_factory=TrendResult)
    expenses: TrendResult = Field(default_factory=TrendResult)
    feed_efficiency: TrendResult = Field(default_factory=TrendResult)


class YearOverYear(_Report):
    previous_start: str = ""
    previous_end: str = ""
    eggs: TrendResult = Field(default_factory=TrendResult)
    revenue: TrendResult = Field(default_factory=TrendResult)


class FinancialReport(_Report):
    summary: FinancialSummary = Field(default_factory=FinancialSummary)
    revenue_change: float = 0
    # Expense trend is not tracked yet; always 0.
    expense_change: float = 0
    profit_change: float = 0


class CostAnalysis(_Report):
    total_cost: float = 0
    feed_cost: float = 0
    medicine_cost: float = 0
    categories: Tuple[CategoryExpense, ...] = ()
    cost_per_egg: float = 0
    cost_per_bird: float = 0


class FeedConsumption(_Report):
    total_consumption: float = 0
    average_daily: float = 0
    feed_per_egg: float = 0
    total_cost: float = 0
    average_cost_per_unit: float = 0
    by_feed_type: Tuple[FeedTypeUsage, ...] = ()
    daily: Tuple[DayValue, ...] = ()


class EfficiencyMetrics(_Report):
    feed_per_egg: float = 0
    eggs_per_bird: float = 0
    resource_utilization: float = 0
    # Labor is not tracked yet; always 0.
    labor_efficiency: float = 0


class ProductivityMetrics(_Report):
    eggs_per_bird: float = 0
    eggs_per_day: float = 0
    collection_rate: float = 0
    quality_score: float = 0


class PerformanceOverview(_Report):
    total_eggs: float = 0
    total_collections: int = 0
    average_daily: float = 0
    days_in_period: int = 0
    grade_breakdown: Dict[str, float] = Field(default_factory=dict)
    shift_breakdown: Dict[str, float] = Field(default_factory=dict)
    top_pens: Dict[str, float] = Field(default_factory=dict)
    total_pens: int = 0
    daily: Tuple[DayValue, ...] = ()
    weekly: Tuple[DayValue, ...] = ()
    monthly: Tuple[DayValue, ...] = ()
    consistency_score: float = 0
    peak_day: Optional[DayValue] = None
    low_days: Tuple[DayValue, ...] = ()


class CollectorStats(BaseModel):
    model_config = ConfigDict(frozen=True)

    collector: str
    total_collections: int
    total_eggs: float
    average_per_day: float
    efficiency: float
    rank: int


class CollectorPerformance(_Report):
    collectors: Tuple[CollectorStats, ...] = ()


class PenStats(BaseModel):
    model_config = ConfigDict(frozen=True)

    pen: str
    production: float
    collections: int
    percentage: float
    rank: int


class PenPerformance(_Report):
    pens: Tuple[PenStats, ...] = ()


class CollectionStats(_Report):
    """Rolling collection totals, each against the window just before it.

    ``today`` compares with yesterday, ``week`` (the last seven days) with the
    seven days before, and ``month`` (month to date) with the whole previous
    calendar month.
    """

    today: TrendResult = Field(default_factory=TrendResult)
    week: TrendResult = Field(default_factory=TrendResult)
    month: TrendResult = Field(default_factory=TrendResult)
    average_per_bird: float = 0
    daily_production: float = 0
    grade_aa_rate: float = 0


class MonthlyMargin(BaseModel):
    model_config = ConfigDict(frozen=True)

    month: str
    revenue: float
    expense: float
    margin: float


class ProfitMargins(_Report):
    revenue: float = 0
    expense: float = 0
    gross_profit: float = 0
    gross_margin: float = 0
    # No deductions beyond feed are tracked, so net equals gross.
    net_profit: float = 0
    net_margin: float = 0
    by_month: Tuple[MonthlyMargin, ...] = ()
