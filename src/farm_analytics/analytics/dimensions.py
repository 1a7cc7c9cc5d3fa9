"""Dimension extractors used to group records.

Each extractor maps a canonical record to a grouping key. Returning None drops
the record from that grouping; fallbacks are spelled out per dimension.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Any, Optional

from farm_analytics.domain.interfaces import DimensionExtractor, IInventoryIndex
from farm_analytics.domain.models import EggGrade, ProductionRecord, UsageRecord

GRADE_FALLBACK = EggGrade.A.value
UNKNOWN = "Unknown"


def by_grade(record: ProductionRecord) -> str:
    grade = getattr(record, "grade", None)
    if grade is None:
        return GRADE_FALLBACK
    return grade.value if isinstance(grade, EggGrade) else str(grade)


def by_shift(record: ProductionRecord) -> Optional[str]:
    # No fallback: records without a recognised shift are left out.
    shift = getattr(record, "shift", None)
    if shift is None:
        return None
    return shift.value


def by_pen(record: ProductionRecord) -> str:
    return record.pen or UNKNOWN


def by_collector(record: ProductionRecord) -> str:
    return record.collector or UNKNOWN


def by_day(record: Any) -> str:
    return record.date.isoformat()


def week_start(day: date) -> date:
    """Sunday on or before the given day."""

    return day - timedelta(days=(day.weekday() + 1) % 7)


def by_week(record: Any) -> str:
    return week_start(record.date).isoformat()


def by_month(record: Any) -> str:
    return f"{record.date.year}-{record.date.month:02d}"


def by_usage_kind(record: UsageRecord) -> str:
    return record.kind.value


def by_feed_type(index: IInventoryIndex) -> DimensionExtractor:
    """Group usage by the category of the inventory item it consumed."""

    def extract(record: UsageRecord) -> str:
        item = index.get(record.item_id)
        if item is None or not item.category:
            return UNKNOWN
        return item.category

    return extract
