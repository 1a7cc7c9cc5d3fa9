"""Domain value objects consumed and produced by the analytics engine."""

from __future__ import annotations

import datetime as dt
from enum import Enum
from typing import Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Shift(str, Enum):
    """Collection shifts recorded on egg production entries."""

    MORNING = "Morning"
    AFTERNOON = "Afternoon"
    EVENING = "Evening"


class EggGrade(str, Enum):
    """Egg quality grades."""

    AA = "AA"
    A = "A"
    B = "B"
    C = "C"


class UsageKind(str, Enum):
    """Inventory families whose consumption is priced as expense."""

    FEED = "feed"
    MEDICINE = "medicine"


class TrendDirection(str, Enum):
    """Three-way classification of a comparison between two figures."""

    UP = "up"
    DOWN = "down"
    STABLE = "stable"


class ProductionRecord(BaseModel):
    """Canonical egg collection entry."""

    model_config = ConfigDict(frozen=True)

    date: dt.date
    shift: Optional[Shift] = None
    pen: str = "Unknown"
    quantity: int = Field(default=0, ge=0)
    grade: EggGrade = EggGrade.A
    collector: str = "Unknown"
    farm_id: str = ""
    broken: int = Field(default=0, ge=0)


class UsageRecord(BaseModel):
    """Canonical feed or medicine consumption entry."""

    model_config = ConfigDict(frozen=True)

    date: dt.date
    item_id: str
    quantity_used: float = Field(default=0.0, ge=0)
    farm_id: str = ""
    kind: UsageKind = UsageKind.FEED


class InventoryItem(BaseModel):
    """Stock item used to price consumption."""

    model_config = ConfigDict(frozen=True)

    id: str
    cost_per_unit: float = Field(default=0.0, ge=0)
    category: str = "Unknown"
    farm_id: str = ""
    kind: UsageKind = UsageKind.FEED
    stock: float = Field(default=0.0, ge=0)


class DateRange(BaseModel):
    """Inclusive reporting window."""

    model_config = ConfigDict(frozen=True)

    start: dt.datetime
    end: dt.datetime

    @model_validator(mode="after")
    def validate_order(self) -> "DateRange":
        if self.start > self.end:
            raise ValueError("start must not be after end")
        return self

    @property
    def length(self) -> dt.timedelta:
        return self.end - self.start

    @property
    def start_day(self) -> str:
        return self.start.date().isoformat()

    @property
    def end_day(self) -> str:
        return self.end.date().isoformat()

    def contains_day(self, day: dt.date) -> bool:
        return self.start.date() <= day <= self.end.date()


class Aggregate(BaseModel):
    """Total plus ordered per-key breakdown of a record set."""

    model_config = ConfigDict(frozen=True)

    total: float = 0
    by_dimension: Dict[str, float] = Field(default_factory=dict)
    count: int = 0
    counts: Dict[str, int] = Field(default_factory=dict)

    def items(self) -> Tuple[Tuple[str, float], ...]:
        return tuple(self.by_dimension.items())


class BreakdownEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    count: int = 0
    amount: float = 0
    percentage: float = 0


class TrendResult(BaseModel):
    """Current vs previous comparison of one metric."""

    model_config = ConfigDict(frozen=True)

    current: float = 0
    previous: float = 0
    change_absolute: float = 0
    change_percent: float = 0
    direction: TrendDirection = TrendDirection.STABLE


class SplitHalfTrend(BaseModel):
    """Within-period direction derived from the two halves of a daily series."""

    model_config = ConfigDict(frozen=True)

    direction: TrendDirection = TrendDirection.STABLE
    first_half_average: float = 0
    second_half_average: float = 0


class DayValue(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: str
    value: float


class CategoryExpense(BaseModel):
    model_config = ConfigDict(frozen=True)

    category: str
    amount: float
    percentage: float


class FinancialSummary(BaseModel):
    """Revenue, expense and derived profitability for a window."""

    model_config = ConfigDict(frozen=True)

    revenue: float = 0
    expense: float = 0
    profit: float = 0
    margin: float = 0
    by_category: Tuple[CategoryExpense, ...] = Field(default_factory=tuple)
    cost_per_unit_produced: float = 0
    cost_per_bird: float = 0


class FeedTypeUsage(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: str
    quantity: float
    cost: float
    percentage: float
