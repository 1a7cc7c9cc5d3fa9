"""Rounding and guarded-division helpers shared by every calculator."""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Context, Decimal
from typing import Iterable, Optional

_CENT = Decimal("0.01")
# Enough digits to hold any finite float at cent precision.
_EXACT = Context(prec=400)


def round2(value: float) -> float:
    """Round half away from zero to two decimal places.

    Rounds the shortest decimal form of the float, so values that already
    print with two decimals are returned unchanged.
    """

    if not math.isfinite(value):
        return value
    cents = Decimal(repr(value)).quantize(_CENT, rounding=ROUND_HALF_UP, context=_EXACT)
    rounded = float(cents)
    return rounded if rounded else 0.0


def safe_divide(numerator: float, denominator: float) -> float:
    """Return numerator / denominator, or 0 when the denominator is not positive."""

    if denominator <= 0:
        return 0.0
    return numerator / denominator


def percentage(part: float, whole: float) -> float:
    return round2(safe_divide(part, whole) * 100)


def coerce_amount(value: Optional[float]) -> float:
    if value is None:
        return 0.0
    return value


def mean(values: Iterable[float]) -> float:
    items = list(values)
    if not items:
        return 0.0
    return sum(items) / len(items)
