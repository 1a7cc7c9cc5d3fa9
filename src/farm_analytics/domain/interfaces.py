"""Domain-level interfaces defining contracts for analytics collaborators."""

from __future__ import annotations

from typing import Any, Callable, List, Optional, Protocol

from .models import DateRange, InventoryItem, ProductionRecord, UsageKind, UsageRecord


DimensionExtractor = Callable[[Any], Optional[str]]
ValueExtractor = Callable[[Any], Optional[float]]


class IRecordFetcher(Protocol):
    """Data-access boundary returning canonical records for a farm and window."""

    def fetch_production(
        self, farm_id: str, date_range: DateRange
    ) -> List[ProductionRecord]:
        """Return egg collections dated inside the inclusive window."""

    def fetch_usage(
        self, farm_id: str, date_range: DateRange, kind: UsageKind
    ) -> List[UsageRecord]:
        """Return consumption entries of the given kind inside the window."""

    def fetch_inventory(self, farm_id: str) -> List[InventoryItem]:
        """Return the farm's feed and medicine inventory items."""

    def count_birds(self, farm_id: str) -> int:
        """Return the current flock size of the farm."""


class IInventoryIndex(Protocol):
    """Lookup used to price usage records."""

    def cost_per_unit(self, item_id: str) -> Optional[float]:
        """Return the unit cost of the item or None when it is unknown."""

    def get(self, item_id: str) -> Optional[InventoryItem]:
        """Return the inventory item with the given id."""


class ICacheBackend(Protocol):
    """Key/value store with expiry used by the read-through cache."""

    def get(self, key: str) -> Any:
        """Return the cached payload or None on a miss."""

    def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        """Store a JSON-compatible payload for ttl_seconds."""

    def delete(self, key: str) -> None:
        """Drop the key if present."""
