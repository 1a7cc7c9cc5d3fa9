"""Canonicalization of raw store documents into engine records.

Store documents carry legacy aliases (``collected`` for ``quantity``,
``quality`` for ``grade``, ``feedId`` for ``itemId`` and so on). They are
resolved here, once, so the aggregation code only ever sees canonical fields.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Mapping, Optional

from pydantic import ValidationError as PydanticValidationError

from farm_analytics.domain.exceptions import RecordNormalizationError
from farm_analytics.domain.models import (
    EggGrade,
    InventoryItem,
    ProductionRecord,
    Shift,
    UsageKind,
    UsageRecord,
)

UNKNOWN = "Unknown"


def _first(document: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    """First truthy value among keys, mirroring ``a || b || default``."""

    for key in keys:
        value = document.get(key)
        if value:
            return value
    return default


def _parse_day(value: Any) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        text = value.strip()
        try:
            return date.fromisoformat(text[:10])
        except ValueError:
            return None
    return None


def _grade(value: Any) -> EggGrade:
    try:
        return EggGrade(value)
    except ValueError:
        return EggGrade.A


def _shift(value: Any) -> Optional[Shift]:
    try:
        return Shift(value)
    except ValueError:
        return None


def _kind(value: Any, default: UsageKind) -> UsageKind:
    try:
        return UsageKind(str(value).lower())
    except ValueError:
        return default


def normalize_production(document: Mapping[str, Any]) -> ProductionRecord:
    day = _parse_day(_first(document, "date", "collectedAt", "createdAt"))
    if day is None:
        raise RecordNormalizationError(
            "production document has no valid date",
            context={"id": document.get("id")},
        )
    try:
        return ProductionRecord(
            date=day,
            shift=_shift(document.get("shift")),
            pen=str(_first(document, "pen", "penId", default=UNKNOWN)),
            quantity=_first(document, "quantity", "collected", default=0),
            grade=_grade(_first(document, "grade", "quality", default=EggGrade.A.value)),
            collector=str(_first(document, "collector", "collectedBy", default=UNKNOWN)),
            farm_id=str(document.get("farmId") or document.get("farm_id") or ""),
            broken=_first(document, "broken", "cracked", default=0),
        )
    except PydanticValidationError as exc:
        raise RecordNormalizationError(
            "invalid production document", context={"id": document.get("id")}
        ) from exc


def normalize_usage(
    document: Mapping[str, Any], kind: UsageKind = UsageKind.FEED
) -> UsageRecord:
    day = _parse_day(_first(document, "date", "consumedAt", "usedAt", "createdAt"))
    item_id = _first(document, "itemId", "item_id", "feedId", "medicineId")
    if day is None or not item_id:
        raise RecordNormalizationError(
            "usage document needs a date and an item id",
            context={"id": document.get("id")},
        )
    try:
        return UsageRecord(
            date=day,
            item_id=str(item_id),
            quantity_used=_first(document, "quantityUsed", "quantity_used", "quantity", default=0),
            farm_id=str(document.get("farmId") or document.get("farm_id") or ""),
            kind=_kind(document.get("kind"), kind),
        )
    except PydanticValidationError as exc:
        raise RecordNormalizationError(
            "invalid usage document", context={"id": document.get("id")}
        ) from exc


def normalize_inventory(
    document: Mapping[str, Any], kind: UsageKind = UsageKind.FEED
) -> InventoryItem:
    item_id = document.get("id")
    if not item_id:
        raise RecordNormalizationError("inventory document has no id")
    try:
        return InventoryItem(
            id=str(item_id),
            cost_per_unit=_first(document, "costPerUnit", "cost_per_unit", "cost", default=0),
            category=str(
                _first(document, "category", "type", "feedType", default=UNKNOWN)
            ),
            farm_id=str(document.get("farmId") or document.get("farm_id") or ""),
            kind=_kind(document.get("kind"), kind),
            stock=_first(document, "stock", "currentStock", "quantity", default=0),
        )
    except PydanticValidationError as exc:
        raise RecordNormalizationError(
            "invalid inventory document", context={"id": item_id}
        ) from exc
