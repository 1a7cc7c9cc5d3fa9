"""Analytics facade composing period resolution, fetching and calculators."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import date
from typing import Any, Callable, List, Optional, Type, TypeVar

from pydantic import BaseModel

from farm_analytics.analytics import dimensions
from farm_analytics.analytics.aggregator import Aggregator
from farm_analytics.analytics.consistency import ConsistencyAnalyzer
from farm_analytics.analytics.financials import FinancialCalculator
from farm_analytics.analytics.inventory import InventoryIndex
from farm_analytics.analytics.trends import TrendComparator
from farm_analytics.cache.read_through import ReadThroughCache, build_cache_key
from farm_analytics.core.config import AnalyticsConfig
from farm_analytics.domain.interfaces import IRecordFetcher
from farm_analytics.domain.models import (
    Aggregate,
    BreakdownEntry,
    DateRange,
    DayValue,
    ProductionRecord,
    UsageKind,
)
from farm_analytics.domain.reports import (
    CRACKED_KEY,
    GRADE_KEYS,
    SHIFT_KEYS,
    CollectionStats,
    CollectorPerformance,
    CollectorStats,
    CostAnalysis,
    EfficiencyMetrics,
    FeedConsumption,
    FinancialReport,
    GradeDistribution,
    MonthlyMargin,
    PenPerformance,
    PenStats,
    PerformanceOverview,
    PeriodComparison,
    ProductionSummary,
    ProductionTrends,
    ProductivityMetrics,
    ProfitMargins,
    RevenueTrends,
    YearOverYear,
)
from farm_analytics.periods.resolver import PeriodInput, PeriodResolver
from farm_analytics.utils.numeric import percentage, round2, safe_divide

R = TypeVar("R", bound=BaseModel)

COLLECTIONS_PER_DAY = 3
TOP_PEN_LIMIT = 5
WEEK_DAYS = 7
HIGH_QUALITY_GRADES = ("AA", "A")


class AnalyticsService:
    """High-level API returning farm reports for a period.

    Every report accepts a period token (``7d``, ``30d``, ``90d``, ``1y``) or
    explicit bounds. A blank farm id yields the zeroed report without any
    record fetch.
    """

    def __init__(
        self,
        fetcher: IRecordFetcher,
        config: Optional[AnalyticsConfig] = None,
        *,
        resolver: Optional[PeriodResolver] = None,
        aggregator: Optional[Aggregator] = None,
        trends: Optional[TrendComparator] = None,
        calculator: Optional[FinancialCalculator] = None,
        analyzer: Optional[ConsistencyAnalyzer] = None,
        cache: Optional[ReadThroughCache] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._fetcher = fetcher
        self._config = config or AnalyticsConfig()
        self._resolver = resolver or PeriodResolver(
            default_period=self._config.default_period
        )
        self._aggregator = aggregator or Aggregator()
        self._trends = trends or TrendComparator()
        self._calculator = calculator or FinancialCalculator(self._aggregator)
        self._analyzer = analyzer or ConsistencyAnalyzer(
            low_day_ratio=self._config.low_day_ratio,
            low_day_limit=self._config.low_day_limit,
        )
        self._cache = cache
        self._logger = logger or logging.getLogger(__name__)

    @property
    def config(self) -> AnalyticsConfig:
        return self._config

    @property
    def resolver(self) -> PeriodResolver:
        return self._resolver

    # ------------------------------------------------------------------
    # Production reports
    # ------------------------------------------------------------------
    def production_summary(
        self, farm_id: str, period: PeriodInput = None
    ) -> ProductionSummary:
        if self._is_blank(farm_id):
            return self._zeroed(ProductionSummary, "production_summary")
        date_range = self._resolver.resolve_period(period)

        def build() -> ProductionSummary:
            records = self._fetcher.fetch_production(farm_id, date_range)
            daily = self._aggregator.aggregate_by_day(records)
            days = self._resolver.days_in_range(date_range)
            return ProductionSummary(
                **self._bounds(farm_id, date_range),
                total_eggs=daily.total,
                total_collections=len(records),
                average_daily=round2(safe_divide(daily.total, days)),
                days_in_period=days,
                peak_day=self._analyzer.peak_day(daily),
                grade_breakdown=self._aggregator.fixed_breakdown(
                    self._aggregator.aggregate(records, dimensions.by_grade), GRADE_KEYS
                ),
                shift_breakdown=self._aggregator.fixed_breakdown(
                    self._aggregator.aggregate(records, dimensions.by_shift), SHIFT_KEYS
                ),
            )

        return self._cached("production_summary", farm_id, date_range, ProductionSummary, build)

    def grade_distribution(
        self, farm_id: str, period: PeriodInput = None
    ) -> GradeDistribution:
        if self._is_blank(farm_id):
            return self._zeroed(GradeDistribution, "grade_distribution")
        date_range = self._resolver.resolve_period(period)

        def build() -> GradeDistribution:
            records = self._fetcher.fetch_production(farm_id, date_range)
            grades = self._aggregator.aggregate(records, dimensions.by_grade)
            amounts = self._aggregator.fixed_breakdown(grades, GRADE_KEYS)
            counts = {key: grades.counts.get(key, 0) for key in GRADE_KEYS}
            # Cracked eggs count towards the distribution total.
            amounts[CRACKED_KEY] = self._aggregator.total(
                records, value=lambda record: record.broken
            )
            counts[CRACKED_KEY] = sum(1 for record in records if record.broken)
            total = sum(amounts.values())
            return GradeDistribution(
                **self._bounds(farm_id, date_range),
                total=total,
                grades={
                    key: BreakdownEntry(
                        count=counts[key],
                        amount=amount,
                        percentage=percentage(amount, total),
                    )
                    for key, amount in amounts.items()
                },
            )

        return self._cached("grade_distribution", farm_id, date_range, GradeDistribution, build)

    def production_trends(
        self, farm_id: str, period: PeriodInput = None
    ) -> ProductionTrends:
        if self._is_blank(farm_id):
            return self._zeroed(ProductionTrends, "production_trends")
        date_range = self._resolver.resolve_period(period)

        def build() -> ProductionTrends:
            records = self._fetcher.fetch_production(farm_id, date_range)
            daily = self._aggregator.aggregate_by_day(records)
            return ProductionTrends(
                **self._bounds(farm_id, date_range),
                total_eggs=daily.total,
                points=self._points(daily),
                trend=self._trends.split_half_trend(daily),
            )

        return self._cached("production_trends", farm_id, date_range, ProductionTrends, build)

    def revenue_trends(self, farm_id: str, period: PeriodInput = None) -> RevenueTrends:
        if self._is_blank(farm_id):
            return self._zeroed(RevenueTrends, "revenue_trends")
        date_range = self._resolver.resolve_period(period)

        def build() -> RevenueTrends:
            records = self._fetcher.fetch_production(farm_id, date_range)
            daily = self._aggregator.aggregate_by_day(records, value=self._revenue_of)
            return RevenueTrends(
                **self._bounds(farm_id, date_range),
                total_revenue=round2(daily.total),
                points=self._points(daily, rounded=True),
                trend=self._trends.split_half_trend(daily),
            )

        return self._cached("revenue_trends", farm_id, date_range, RevenueTrends, build)

    def monthly_summary(
        self, farm_id: str, month: Optional[str] = None
    ) -> ProductionSummary:
        """Production summary over a calendar month `YYYY-MM`.

        Without a month the current month up to now is summarized.
        """

        if self._is_blank(farm_id):
            return self._zeroed(ProductionSummary, "monthly_summary")
        return self.production_summary(farm_id, self._resolver.month_range(month))

    def collection_stats(self, farm_id: str) -> CollectionStats:
        if self._is_blank(farm_id):
            return self._zeroed(CollectionStats, "collection_stats")
        today = self._resolver.day_range()
        yesterday = self._resolver.day_range(1)
        week = self._resolver.trailing_days(WEEK_DAYS)
        previous_week = self._resolver.trailing_days(WEEK_DAYS, offset=WEEK_DAYS)
        month = self._resolver.month_range()
        previous_month = self._resolver.previous_month()
        span = DateRange(
            start=min(previous_week.start, previous_month.start), end=week.end
        )

        def build() -> CollectionStats:
            records, birds = self._gather(
                lambda: self._fetcher.fetch_production(farm_id, span),
                lambda: self._fetcher.count_birds(farm_id),
            )
            daily = self._aggregator.aggregate_by_day(records)
            week_total = self._window_total(daily, week)
            month_total = self._window_total(daily, month)
            month_grades = self._aggregator.aggregate(
                (record for record in records if month.contains_day(record.date)),
                dimensions.by_grade,
            )
            return CollectionStats(
                **self._bounds(farm_id, span),
                today=self._trends.trend(
                    self._window_total(daily, today),
                    self._window_total(daily, yesterday),
                ),
                week=self._trends.trend(
                    week_total, self._window_total(daily, previous_week)
                ),
                month=self._trends.trend(
                    month_total, self._window_total(daily, previous_month)
                ),
                # An unknown flock yields 0 here rather than a per-bird total.
                average_per_bird=round2(safe_divide(month_total, birds)),
                daily_production=round2(week_total / WEEK_DAYS),
                grade_aa_rate=percentage(
                    month_grades.by_dimension.get("AA", 0), month_grades.total
                ),
            )

        return self._cached("collection_stats", farm_id, span, CollectionStats, build)

    # ------------------------------------------------------------------
    # Comparisons
    # ------------------------------------------------------------------
    def period_comparison(
        self, farm_id: str, period: PeriodInput = None
    ) -> PeriodComparison:
        if self._is_blank(farm_id):
            return self._zeroed(PeriodComparison, "period_comparison")
        current = self._resolver.resolve_period(period)
        previous = self._resolver.previous_window(current)

        def build() -> PeriodComparison:
            (
                production,
                previous_production,
                feed,
                previous_feed,
                inventory,
            ) = self._gather(
                lambda: self._fetcher.fetch_production(farm_id, current),
                lambda: self._fetcher.fetch_production(farm_id, previous),
                lambda: self._fetcher.fetch_usage(farm_id, current, UsageKind.FEED),
                lambda: self._fetcher.fetch_usage(farm_id, previous, UsageKind.FEED),
                lambda: self._fetcher.fetch_inventory(farm_id),
            )
            index = InventoryIndex(inventory)
            eggs = self._aggregator.total(production)
            previous_eggs = self._aggregator.total(previous_production)
            feed_used = self._aggregator.total(feed)
            previous_feed_used = self._aggregator.total(previous_feed)
            return PeriodComparison(
                **self._bounds(farm_id, current),
                previous_start=previous.start_day,
                previous_end=previous.end_day,
                eggs=self._trends.trend(eggs, previous_eggs),
                revenue=self._trends.trend(
                    round2(eggs * self._config.unit_price),
                    round2(previous_eggs * self._config.unit_price),
                ),
                expenses=self._trends.trend(
                    round2(self._calculator.total_usage_cost(feed, index)),
                    round2(self._calculator.total_usage_cost(previous_feed, index)),
                ),
                # Eggs produced per unit of feed consumed.
                feed_efficiency=self._trends.trend(
                    round2(safe_divide(eggs, feed_used)),
                    round2(safe_divide(previous_eggs, previous_feed_used)),
                ),
            )

        return self._cached("period_comparison", farm_id, current, PeriodComparison, build)

    def year_over_year(self, farm_id: str) -> YearOverYear:
        """Year to date against the whole previous calendar year."""

        if self._is_blank(farm_id):
            return self._zeroed(YearOverYear, "year_over_year")
        current = self._resolver.year_to_date()
        previous = self._resolver.previous_year()

        def build() -> YearOverYear:
            production, previous_production = self._gather(
                lambda: self._fetcher.fetch_production(farm_id, current),
                lambda: self._fetcher.fetch_production(farm_id, previous),
            )
            eggs = self._aggregator.total(production)
            previous_eggs = self._aggregator.total(previous_production)
            return YearOverYear(
                **self._bounds(farm_id, current),
                previous_start=previous.start_day,
                previous_end=previous.end_day,
                eggs=self._trends.trend(eggs, previous_eggs),
                revenue=self._trends.trend(
                    round2(eggs * self._config.unit_price),
                    round2(previous_eggs * self._config.unit_price),
                ),
            )

        return self._cached("year_over_year", farm_id, current, YearOverYear, build)

    # ------------------------------------------------------------------
    # Financial reports
    # ------------------------------------------------------------------
    def financial_report(
        self, farm_id: str, period: PeriodInput = None
    ) -> FinancialReport:
        if self._is_blank(farm_id):
            return self._zeroed(FinancialReport, "financial_report")
        current = self._resolver.resolve_period(period)
        previous = self._resolver.previous_window(current)

        def build() -> FinancialReport:
            production, previous_production, feed, medicine, inventory, birds = self._gather(
                lambda: self._fetcher.fetch_production(farm_id, current),
                lambda: self._fetcher.fetch_production(farm_id, previous),
                lambda: self._fetcher.fetch_usage(farm_id, current, UsageKind.FEED),
                lambda: self._fetcher.fetch_usage(farm_id, current, UsageKind.MEDICINE),
                lambda: self._fetcher.fetch_inventory(farm_id),
                lambda: self._fetcher.count_birds(farm_id),
            )
            summary = self._calculator.financials(
                self._aggregator.total(production),
                self._config.unit_price,
                [*feed, *medicine],
                InventoryIndex(inventory),
                total_birds=birds or 1,
            )
            previous_revenue = round2(
                self._aggregator.total(previous_production) * self._config.unit_price
            )
            # Previous profit is approximated with the current expenses.
            previous_profit = previous_revenue - summary.expense
            return FinancialReport(
                **self._bounds(farm_id, current),
                summary=summary,
                revenue_change=percentage(
                    summary.revenue - previous_revenue, previous_revenue
                ),
                expense_change=0,
                profit_change=percentage(
                    summary.profit - previous_profit, previous_profit
                ),
            )

        return self._cached("financial_report", farm_id, current, FinancialReport, build)

    def cost_analysis(self, farm_id: str, period: PeriodInput = None) -> CostAnalysis:
        if self._is_blank(farm_id):
            return self._zeroed(CostAnalysis, "cost_analysis")
        date_range = self._resolver.resolve_period(period)

        def build() -> CostAnalysis:
            production, feed, inventory, birds = self._gather(
                lambda: self._fetcher.fetch_production(farm_id, date_range),
                lambda: self._fetcher.fetch_usage(farm_id, date_range, UsageKind.FEED),
                lambda: self._fetcher.fetch_inventory(farm_id),
                lambda: self._fetcher.count_birds(farm_id),
            )
            index = InventoryIndex(inventory)
            # Medicine is valued by stock on hand, feed by priced consumption.
            medicine_items = index.of_kind(UsageKind.MEDICINE)
            subtotals = self._calculator.expense_by_category(
                feed, index, holding_items=medicine_items
            )
            total = sum(subtotals.values())
            eggs = self._aggregator.total(production)
            return CostAnalysis(
                **self._bounds(farm_id, date_range),
                total_cost=round2(total),
                feed_cost=round2(subtotals[UsageKind.FEED.value]),
                medicine_cost=round2(subtotals[UsageKind.MEDICINE.value]),
                categories=tuple(self._calculator.category_breakdown(subtotals)),
                cost_per_egg=round2(safe_divide(total, eggs)),
                cost_per_bird=round2(safe_divide(total, birds or 1)),
            )

        return self._cached("cost_analysis", farm_id, date_range, CostAnalysis, build)

    def profit_margins(self, farm_id: str, period: PeriodInput = None) -> ProfitMargins:
        """Gross and net margin against priced feed usage, overall and per month."""

        if self._is_blank(farm_id):
            return self._zeroed(ProfitMargins, "profit_margins")
        date_range = self._resolver.resolve_period(period)

        def build() -> ProfitMargins:
            production, feed, inventory = self._gather(
                lambda: self._fetcher.fetch_production(farm_id, date_range),
                lambda: self._fetcher.fetch_usage(farm_id, date_range, UsageKind.FEED),
                lambda: self._fetcher.fetch_inventory(farm_id),
            )
            index = InventoryIndex(inventory)
            revenue = self._aggregator.total(production, value=self._revenue_of)
            expense = self._calculator.total_usage_cost(feed, index)
            gross_profit = revenue - expense
            monthly_revenue = self._aggregator.aggregate_by_month(
                production, value=self._revenue_of
            )
            monthly_expense = self._aggregator.aggregate_by_month(
                feed, value=lambda record: self._calculator.usage_cost(record, index)
            )
            months = sorted(
                set(monthly_revenue.by_dimension) | set(monthly_expense.by_dimension)
            )
            return ProfitMargins(
                **self._bounds(farm_id, date_range),
                revenue=round2(revenue),
                expense=round2(expense),
                gross_profit=round2(gross_profit),
                gross_margin=self._calculator.margin(gross_profit, revenue),
                net_profit=round2(gross_profit),
                net_margin=self._calculator.margin(gross_profit, revenue),
                by_month=tuple(
                    self._month_margin(
                        month,
                        monthly_revenue.by_dimension.get(month, 0),
                        monthly_expense.by_dimension.get(month, 0),
                    )
                    for month in months
                ),
            )

        return self._cached("profit_margins", farm_id, date_range, ProfitMargins, build)

    def feed_consumption(
        self, farm_id: str, period: PeriodInput = None
    ) -> FeedConsumption:
        if self._is_blank(farm_id):
            return self._zeroed(FeedConsumption, "feed_consumption")
        date_range = self._resolver.resolve_period(period)

        def build() -> FeedConsumption:
            feed, production, inventory = self._gather(
                lambda: self._fetcher.fetch_usage(farm_id, date_range, UsageKind.FEED),
                lambda: self._fetcher.fetch_production(farm_id, date_range),
                lambda: self._fetcher.fetch_inventory(farm_id),
            )
            index = InventoryIndex(inventory)
            daily = self._aggregator.aggregate_by_day(feed)
            total = daily.total
            cost = self._calculator.total_usage_cost(feed, index)
            days = self._resolver.days_in_range(date_range)
            return FeedConsumption(
                **self._bounds(farm_id, date_range),
                total_consumption=round2(total),
                average_daily=round2(safe_divide(total, days)),
                feed_per_egg=round2(
                    safe_divide(total, self._aggregator.total(production))
                ),
                total_cost=round2(cost),
                average_cost_per_unit=round2(safe_divide(cost, total)),
                by_feed_type=tuple(self._calculator.feed_type_breakdown(feed, index)),
                daily=self._points(daily, rounded=True),
            )

        return self._cached("feed_consumption", farm_id, date_range, FeedConsumption, build)

    # ------------------------------------------------------------------
    # Performance reports
    # ------------------------------------------------------------------
    def efficiency_metrics(
        self, farm_id: str, period: PeriodInput = None
    ) -> EfficiencyMetrics:
        if self._is_blank(farm_id):
            return self._zeroed(EfficiencyMetrics, "efficiency_metrics")
        date_range = self._resolver.resolve_period(period)

        def build() -> EfficiencyMetrics:
            production, feed, birds = self._gather(
                lambda: self._fetcher.fetch_production(farm_id, date_range),
                lambda: self._fetcher.fetch_usage(farm_id, date_range, UsageKind.FEED),
                lambda: self._fetcher.count_birds(farm_id),
            )
            birds = birds or 1
            eggs = self._aggregator.total(production)
            days = self._resolver.days_in_range(date_range)
            expected_eggs = birds * self._config.expected_lay_rate * days
            return EfficiencyMetrics(
                **self._bounds(farm_id, date_range),
                feed_per_egg=round2(safe_divide(self._aggregator.total(feed), eggs)),
                eggs_per_bird=round2(safe_divide(eggs, birds)),
                resource_utilization=percentage(eggs, expected_eggs),
                labor_efficiency=0,
            )

        return self._cached("efficiency_metrics", farm_id, date_range, EfficiencyMetrics, build)

    def productivity_metrics(
        self, farm_id: str, period: PeriodInput = None
    ) -> ProductivityMetrics:
        if self._is_blank(farm_id):
            return self._zeroed(ProductivityMetrics, "productivity_metrics")
        date_range = self._resolver.resolve_period(period)

        def build() -> ProductivityMetrics:
            production, birds = self._gather(
                lambda: self._fetcher.fetch_production(farm_id, date_range),
                lambda: self._fetcher.count_birds(farm_id),
            )
            grades = self._aggregator.aggregate(production, dimensions.by_grade)
            eggs = grades.total
            days = self._resolver.days_in_range(date_range)
            high_quality = sum(
                grades.by_dimension.get(grade, 0) for grade in HIGH_QUALITY_GRADES
            )
            return ProductivityMetrics(
                **self._bounds(farm_id, date_range),
                eggs_per_bird=round2(safe_divide(eggs, birds or 1)),
                eggs_per_day=round2(safe_divide(eggs, days)),
                collection_rate=percentage(len(production), days * COLLECTIONS_PER_DAY),
                quality_score=percentage(high_quality, eggs),
            )

        return self._cached(
            "productivity_metrics", farm_id, date_range, ProductivityMetrics, build
        )

    def performance_overview(
        self, farm_id: str, period: PeriodInput = None
    ) -> PerformanceOverview:
        if self._is_blank(farm_id):
            return self._zeroed(PerformanceOverview, "performance_overview")
        date_range = self._resolver.resolve_period(period)

        def build() -> PerformanceOverview:
            records = self._fetcher.fetch_production(farm_id, date_range)
            daily = self._aggregator.aggregate_by_day(records)
            pens = self._aggregator.aggregate(records, dimensions.by_pen)
            days = self._resolver.days_in_range(date_range)
            return PerformanceOverview(
                **self._bounds(farm_id, date_range),
                total_eggs=daily.total,
                total_collections=len(records),
                average_daily=round2(safe_divide(daily.total, days)),
                days_in_period=days,
                grade_breakdown=dict(
                    self._aggregator.aggregate(records, dimensions.by_grade).by_dimension
                ),
                shift_breakdown=dict(
                    self._aggregator.aggregate(records, dimensions.by_shift).by_dimension
                ),
                top_pens={
                    pen: pens.by_dimension[pen]
                    for pen in self._aggregator.top(pens, TOP_PEN_LIMIT)
                },
                total_pens=len(pens.by_dimension),
                daily=self._points(daily),
                weekly=self._points(self._aggregator.aggregate_by_week(records)),
                monthly=self._points(self._aggregator.aggregate_by_month(records)),
                consistency_score=self._analyzer.consistency_score(daily),
                peak_day=self._analyzer.peak_day(daily),
                low_days=tuple(self._analyzer.low_days(daily)),
            )

        return self._cached(
            "performance_overview", farm_id, date_range, PerformanceOverview, build
        )

    def collector_performance(
        self, farm_id: str, period: PeriodInput = None
    ) -> CollectorPerformance:
        if self._is_blank(farm_id):
            return self._zeroed(CollectorPerformance, "collector_performance")
        date_range = self._resolver.resolve_period(period)

        def build() -> CollectorPerformance:
            records = self._fetcher.fetch_production(farm_id, date_range)
            collectors = self._aggregator.aggregate(records, dimensions.by_collector)
            days = self._resolver.days_in_range(date_range)
            ranked = sorted(
                collectors.by_dimension,
                key=lambda name: collectors.counts[name],
                reverse=True,
            )
            return CollectorPerformance(
                **self._bounds(farm_id, date_range),
                collectors=tuple(
                    CollectorStats(
                        collector=name,
                        total_collections=collectors.counts[name],
                        total_eggs=collectors.by_dimension[name],
                        average_per_day=round2(
                            safe_divide(collectors.by_dimension[name], days)
                        ),
                        efficiency=round2(
                            safe_divide(
                                collectors.by_dimension[name], collectors.counts[name]
                            )
                        ),
                        rank=rank,
                    )
                    for rank, name in enumerate(ranked, start=1)
                ),
            )

        return self._cached(
            "collector_performance", farm_id, date_range, CollectorPerformance, build
        )

    def pen_performance(self, farm_id: str, period: PeriodInput = None) -> PenPerformance:
        if self._is_blank(farm_id):
            return self._zeroed(PenPerformance, "pen_performance")
        date_range = self._resolver.resolve_period(period)

        def build() -> PenPerformance:
            records = self._fetcher.fetch_production(farm_id, date_range)
            pens = self._aggregator.aggregate(records, dimensions.by_pen)
            breakdown = self._aggregator.percentage_breakdown(pens)
            return PenPerformance(
                **self._bounds(farm_id, date_range),
                pens=tuple(
                    PenStats(
                        pen=pen,
                        production=breakdown[pen].amount,
                        collections=breakdown[pen].count,
                        percentage=breakdown[pen].percentage,
                        rank=rank,
                    )
                    for rank, pen in enumerate(self._aggregator.top(pens), start=1)
                ),
            )

        return self._cached("pen_performance", farm_id, date_range, PenPerformance, build)

    def daily_dataframe(self, farm_id: str, period: PeriodInput = None) -> Any:
        """Export the daily egg and revenue series to a pandas DataFrame."""

        try:
            import pandas as pd  # type: ignore
        except ImportError as exc:  # pragma: no cover - optional dependency
            raise RuntimeError("pandas is required for dataframe export") from exc

        trends = self.production_trends(farm_id, period)
        rows = [
            {
                "date": point.date,
                "eggs": point.value,
                "revenue": round2(point.value * self._config.unit_price),
            }
            for point in trends.points
        ]
        return pd.DataFrame(rows, columns=["date", "eggs", "revenue"])

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _is_blank(farm_id: Optional[str]) -> bool:
        return not farm_id or not farm_id.strip()

    def _zeroed(self, model: Type[R], report: str) -> R:
        self._logger.info("zeroed_report", extra={"report": report})
        return model()

    @staticmethod
    def _bounds(farm_id: str, date_range: DateRange) -> dict[str, str]:
        return {
            "farm_id": farm_id,
            "start": date_range.start_day,
            "end": date_range.end_day,
        }

    def _cached(
        self,
        namespace: str,
        farm_id: str,
        date_range: DateRange,
        model: Type[R],
        build: Callable[[], R],
    ) -> R:
        if self._cache is None:
            return build()
        # Full instants: day counts and previous windows depend on the time of day.
        key = build_cache_key(
            namespace,
            farm_id,
            start=date_range.start.isoformat(),
            end=date_range.end.isoformat(),
        )
        return self._cache.get_or_compute(key, build, model=model)

    def _gather(self, *calls: Callable[[], Any]) -> List[Any]:
        """Run independent fetches concurrently, preserving call order."""

        workers = min(self._config.fetch_workers, len(calls))
        if workers <= 1:
            return [call() for call in calls]
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = [pool.submit(call) for call in calls]
            return [future.result() for future in futures]

    def _month_margin(self, month: str, revenue: float, expense: float) -> MonthlyMargin:
        return MonthlyMargin(
            month=month,
            revenue=round2(revenue),
            expense=round2(expense),
            margin=self._calculator.margin(revenue - expense, revenue),
        )

    @staticmethod
    def _window_total(daily: Aggregate, window: DateRange) -> float:
        return sum(
            value
            for day, value in daily.items()
            if window.contains_day(date.fromisoformat(day))
        )

    def _revenue_of(self, record: ProductionRecord) -> float:
        return record.quantity * self._config.unit_price

    @staticmethod
    def _points(aggregate: Aggregate, *, rounded: bool = False) -> tuple[DayValue, ...]:
        return tuple(
            DayValue(date=day, value=round2(value) if rounded else value)
            for day, value in Aggregator.sorted_days(aggregate)
        )
