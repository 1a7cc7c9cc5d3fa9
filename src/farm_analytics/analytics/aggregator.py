"""Pure business-logic helpers for grouping record sets."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Sequence

from farm_analytics.analytics import dimensions
from farm_analytics.domain.interfaces import DimensionExtractor, ValueExtractor
from farm_analytics.domain.models import Aggregate, BreakdownEntry
from farm_analytics.utils.numeric import coerce_amount, percentage


def record_quantity(record: Any) -> float:
    """Quantity field of a production or usage record, 0 when absent."""

    if hasattr(record, "quantity_used"):
        return coerce_amount(record.quantity_used)
    return coerce_amount(getattr(record, "quantity", None))


class Aggregator:
    """Reduces record sets into totals and ordered per-key breakdowns."""

    def aggregate(
        self,
        records: Iterable[Any],
        dimension: DimensionExtractor,
        value: Optional[ValueExtractor] = None,
    ) -> Aggregate:
        """Group records by dimension, summing value (quantity by default).

        Keys keep first-seen order. Records whose key is None are excluded from
        the grouping, the total and the count.
        """

        extract_value = value or record_quantity
        by_dimension: Dict[str, float] = {}
        counts: Dict[str, int] = {}
        total = 0
        count = 0
        for record in records:
            key = dimension(record)
            if key is None:
                continue
            amount = coerce_amount(extract_value(record))
            by_dimension[key] = by_dimension.get(key, 0) + amount
            counts[key] = counts.get(key, 0) + 1
            total += amount
            count += 1
        return Aggregate(
            total=total, by_dimension=by_dimension, count=count, counts=counts
        )

    def total(self, records: Iterable[Any], value: Optional[ValueExtractor] = None) -> float:
        extract_value = value or record_quantity
        return sum(coerce_amount(extract_value(record)) for record in records)

    def aggregate_by_day(
        self, records: Iterable[Any], value: Optional[ValueExtractor] = None
    ) -> Aggregate:
        return self.aggregate(records, dimensions.by_day, value)

    def aggregate_by_week(self, records: Iterable[Any]) -> Aggregate:
        return self.aggregate(records, dimensions.by_week)

    def aggregate_by_month(
        self, records: Iterable[Any], value: Optional[ValueExtractor] = None
    ) -> Aggregate:
        return self.aggregate(records, dimensions.by_month, value)

    def percentage_breakdown(self, aggregate: Aggregate) -> Dict[str, BreakdownEntry]:
        return {
            key: BreakdownEntry(
                count=aggregate.counts.get(key, 0),
                amount=amount,
                percentage=percentage(amount, aggregate.total),
            )
            for key, amount in aggregate.by_dimension.items()
        }

    def fixed_breakdown(
        self, aggregate: Aggregate, keys: Sequence[str]
    ) -> Dict[str, float]:
        """Zero-filled view over a known key set, in the given order."""

        return {key: aggregate.by_dimension.get(key, 0) for key in keys}

    def top(self, aggregate: Aggregate, limit: Optional[int] = None) -> List[str]:
        ranked = sorted(
            aggregate.by_dimension, key=lambda key: aggregate.by_dimension[key], reverse=True
        )
        return ranked if limit is None else ranked[:limit]

    @staticmethod
    def sorted_days(aggregate: Aggregate) -> List[tuple[str, float]]:
        return sorted(aggregate.by_dimension.items(), key=lambda item: item[0])
