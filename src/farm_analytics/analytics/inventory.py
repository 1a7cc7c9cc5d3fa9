"""In-memory inventory lookup joined against usage records."""

from __future__ import annotations

from typing import Dict, Iterable, Iterator, Optional

from farm_analytics.domain.interfaces import IInventoryIndex
from farm_analytics.domain.models import InventoryItem, UsageKind


class InventoryIndex(IInventoryIndex):
    """Indexes inventory items by id; the first item wins on duplicate ids."""

    def __init__(self, items: Iterable[InventoryItem] = ()) -> None:
        self._items: Dict[str, InventoryItem] = {}
        for item in items:
            self._items.setdefault(item.id, item)

    def cost_per_unit(self, item_id: str) -> Optional[float]:
        item = self._items.get(item_id)
        return item.cost_per_unit if item is not None else None

    def get(self, item_id: str) -> Optional[InventoryItem]:
        return self._items.get(item_id)

    def of_kind(self, kind: UsageKind) -> list[InventoryItem]:
        return [item for item in self._items.values() if item.kind == kind]

    def __iter__(self) -> Iterator[InventoryItem]:
        return iter(self._items.values())

    def __len__(self) -> int:
        return len(self._items)
