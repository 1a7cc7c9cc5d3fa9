"""In-memory record fetcher backed by canonical record lists."""

from __future__ import annotations

from typing import Dict, Iterable, List

from farm_analytics.domain.interfaces import IRecordFetcher
from farm_analytics.domain.models import (
    DateRange,
    InventoryItem,
    ProductionRecord,
    UsageKind,
    UsageRecord,
)


class InMemoryRecordFetcher(IRecordFetcher):
    """Filters held records by farm and inclusive calendar-day window."""

    def __init__(
        self,
        production: Iterable[ProductionRecord] = (),
        usage: Iterable[UsageRecord] = (),
        inventory: Iterable[InventoryItem] = (),
        bird_counts: Dict[str, int] | None = None,
    ) -> None:
        self._production = list(production)
        self._usage = list(usage)
        self._inventory = list(inventory)
        self._bird_counts = dict(bird_counts or {})

    def fetch_production(
        self, farm_id: str, date_range: DateRange
    ) -> List[ProductionRecord]:
        return [
            record
            for record in self._production
            if record.farm_id == farm_id and date_range.contains_day(record.date)
        ]

    def fetch_usage(
        self, farm_id: str, date_range: DateRange, kind: UsageKind
    ) -> List[UsageRecord]:
        return [
            record
            for record in self._usage
            if record.farm_id == farm_id
            and record.kind == kind
            and date_range.contains_day(record.date)
        ]

    def fetch_inventory(self, farm_id: str) -> List[InventoryItem]:
        return [item for item in self._inventory if item.farm_id == farm_id]

    def count_birds(self, farm_id: str) -> int:
        return self._bird_counts.get(farm_id, 0)
