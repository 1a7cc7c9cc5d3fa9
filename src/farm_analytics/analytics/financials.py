"""Revenue, expense and profitability derived from production and usage."""

from __future__ import annotations

from typing import Dict, Iterable, List, Sequence

from farm_analytics.analytics.aggregator import Aggregator
from farm_analytics.analytics.dimensions import by_feed_type
from farm_analytics.domain.interfaces import IInventoryIndex
from farm_analytics.domain.models import (
    CategoryExpense,
    FeedTypeUsage,
    FinancialSummary,
    InventoryItem,
    UsageKind,
    UsageRecord,
)
from farm_analytics.utils.numeric import percentage, round2, safe_divide

# Expense families that are not tracked yet; they always contribute zero.
UNTRACKED_CATEGORIES = ("labor", "utilities", "other")


class FinancialCalculator:
    """Prices usage against inventory and derives profitability figures."""

    def __init__(self, aggregator: Aggregator | None = None) -> None:
        self._aggregator = aggregator or Aggregator()

    def usage_cost(self, record: UsageRecord, index: IInventoryIndex) -> float:
        # Usage of an unknown item is free rather than an error.
        cost_per_unit = index.cost_per_unit(record.item_id) or 0.0
        return (record.quantity_used or 0.0) * cost_per_unit

    def total_usage_cost(
        self, usage: Iterable[UsageRecord], index: IInventoryIndex
    ) -> float:
        return sum(self.usage_cost(record, index) for record in usage)

    @staticmethod
    def holding_value(items: Iterable[InventoryItem]) -> float:
        """Static value of stock on hand, independent of usage."""

        return sum(item.stock * item.cost_per_unit for item in items)

    def expense_by_category(
        self,
        usage: Iterable[UsageRecord],
        index: IInventoryIndex,
        holding_items: Iterable[InventoryItem] = (),
    ) -> Dict[str, float]:
        subtotals: Dict[str, float] = {kind.value: 0.0 for kind in UsageKind}
        for record in usage:
            subtotals[record.kind.value] += self.usage_cost(record, index)
        for item in holding_items:
            subtotals[item.kind.value] += item.stock * item.cost_per_unit
        for category in UNTRACKED_CATEGORIES:
            subtotals[category] = 0.0
        return subtotals

    def category_breakdown(self, subtotals: Dict[str, float]) -> List[CategoryExpense]:
        total = sum(subtotals.values())
        return [
            CategoryExpense(
                category=category,
                amount=round2(amount),
                percentage=percentage(amount, total),
            )
            for category, amount in subtotals.items()
            if amount > 0
        ]

    def financials(
        self,
        quantity: float,
        unit_price: float,
        usage_records: Sequence[UsageRecord],
        inventory_index: IInventoryIndex,
        *,
        holding_items: Sequence[InventoryItem] = (),
        total_birds: int = 0,
    ) -> FinancialSummary:
        revenue = quantity * unit_price
        subtotals = self.expense_by_category(
            usage_records, inventory_index, holding_items
        )
        expense = sum(subtotals.values())
        profit = revenue - expense
        return FinancialSummary(
            revenue=round2(revenue),
            expense=round2(expense),
            profit=round2(profit),
            margin=self.margin(profit, revenue),
            by_category=tuple(self.category_breakdown(subtotals)),
            cost_per_unit_produced=round2(safe_divide(expense, quantity)),
            cost_per_bird=round2(safe_divide(expense, total_birds)),
        )

    @staticmethod
    def margin(profit: float, revenue: float) -> float:
        return percentage(profit, revenue) if revenue > 0 else 0.0

    def feed_type_breakdown(
        self, usage: Sequence[UsageRecord], index: IInventoryIndex
    ) -> List[FeedTypeUsage]:
        quantities = self._aggregator.aggregate(usage, by_feed_type(index))
        costs = self._aggregator.aggregate(
            usage,
            by_feed_type(index),
            value=lambda record: self.usage_cost(record, index),
        )
        return [
            FeedTypeUsage(
                type=feed_type,
                quantity=round2(amount),
                cost=round2(costs.by_dimension.get(feed_type, 0.0)),
                percentage=percentage(amount, quantities.total),
            )
            for feed_type, amount in quantities.by_dimension.items()
        ]
