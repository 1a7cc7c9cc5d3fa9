"""Turns period tokens or explicit bounds into concrete reporting windows."""

from __future__ import annotations

import calendar
import math
from datetime import date, datetime, timedelta, timezone
from typing import Callable, Mapping, Optional, Sequence, Union

from farm_analytics.domain.exceptions import InvalidDateRange
from farm_analytics.domain.models import DateRange

PeriodInput = Union[None, str, DateRange, Mapping[str, object], Sequence[object]]

DEFAULT_PERIOD = "30d"
SECONDS_PER_DAY = 86400


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class PeriodResolver:
    """Resolves trailing windows relative to an injectable clock."""

    PERIOD_DAYS = {
        "7d": 7,
        "30d": 30,
        "90d": 90,
    }
    YEAR_TOKEN = "1y"

    def __init__(
        self,
        clock: Callable[[], datetime] | None = None,
        default_period: str = DEFAULT_PERIOD,
    ) -> None:
        self._clock = clock or _utc_now
        self._default_period = (
            default_period if self.is_known_token(default_period) else DEFAULT_PERIOD
        )

    @classmethod
    def is_known_token(cls, token: str) -> bool:
        return token in cls.PERIOD_DAYS or token == cls.YEAR_TOKEN

    def now(self) -> datetime:
        return self._clock()

    def resolve_period(self, period: PeriodInput = None) -> DateRange:
        """Return the window for a token, explicit bounds or an existing range.

        Unknown tokens fall back to the default trailing window. Explicit bounds
        must both parse and be ordered, otherwise InvalidDateRange is raised.
        """

        if isinstance(period, DateRange):
            return period
        if isinstance(period, Mapping):
            return self.explicit_range(period.get("start"), period.get("end"))
        if isinstance(period, (tuple, list)):
            if len(period) != 2:
                raise InvalidDateRange(
                    "explicit range needs exactly two bounds",
                    context={"bounds": list(period)},
                )
            return self.explicit_range(period[0], period[1])
        return self._trailing_window(period if isinstance(period, str) else None)

    def explicit_range(self, start: object, end: object) -> DateRange:
        start_at = _parse_bound(start, "start")
        end_at = _parse_bound(end, "end")
        if start_at > end_at:
            raise InvalidDateRange(
                "start must not be after end",
                context={"start": str(start), "end": str(end)},
            )
        return DateRange(start=start_at, end=end_at)

    def previous_window(self, date_range: DateRange) -> DateRange:
        """Window of identical length ending exactly where date_range starts."""

        return DateRange(start=date_range.start - date_range.length, end=date_range.start)

    @staticmethod
    def days_in_range(date_range: DateRange) -> int:
        seconds = date_range.length.total_seconds()
        return max(1, math.ceil(seconds / SECONDS_PER_DAY))

    def month_range(self, month: Optional[str] = None) -> DateRange:
        """Calendar month `YYYY-MM`, or the current month up to now."""

        if not month:
            now = self.now()
            return DateRange(start=_midnight(now).replace(day=1), end=now)
        try:
            year_part, month_part = month.split("-")
            year, month_number = int(year_part), int(month_part)
            last_day = calendar.monthrange(year, month_number)[1]
            start = datetime(year, month_number, 1, tzinfo=timezone.utc)
            end = datetime(year, month_number, last_day, tzinfo=timezone.utc)
        except (ValueError, calendar.IllegalMonthError) as exc:
            raise InvalidDateRange(
                "month must use the YYYY-MM format", context={"month": month}
            ) from exc
        return DateRange(start=start, end=end)

    def previous_month(self) -> DateRange:
        first = _midnight(self.now()).replace(day=1)
        last = first - timedelta(days=1)
        return self.month_range(f"{last.year:04d}-{last.month:02d}")

    def day_range(self, days_ago: int = 0) -> DateRange:
        """Single calendar day, `days_ago` days before today."""

        day = _midnight(self.now()) - timedelta(days=days_ago)
        return DateRange(start=day, end=day)

    def trailing_days(self, days: int, *, offset: int = 0) -> DateRange:
        """From midnight `days + offset` days ago until `offset` days ago.

        Without an offset the window runs up to now, so today is included.
        Day membership is inclusive, so consecutive windows share their
        boundary day.
        """

        now = self.now()
        start = _midnight(now) - timedelta(days=days + offset)
        end = now if offset == 0 else _midnight(now) - timedelta(days=offset)
        return DateRange(start=start, end=end)

    def year_to_date(self) -> DateRange:
        now = self.now()
        start = datetime(now.year, 1, 1, tzinfo=now.tzinfo)
        return DateRange(start=start, end=now)

    def previous_year(self) -> DateRange:
        year = self.now().year - 1
        return DateRange(
            start=datetime(year, 1, 1, tzinfo=timezone.utc),
            end=datetime(year, 12, 31, tzinfo=timezone.utc),
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _trailing_window(self, token: Optional[str]) -> DateRange:
        if token is None or not self.is_known_token(token):
            token = self._default_period
        end = self.now()
        if token == self.YEAR_TOKEN:
            start = _shift_years(end, -1)
        else:
            start = end - timedelta(days=self.PERIOD_DAYS[token])
        return DateRange(start=start, end=end)


def _midnight(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def _shift_years(moment: datetime, years: int) -> datetime:
    target_year = moment.year + years
    day = min(moment.day, calendar.monthrange(target_year, moment.month)[1])
    return moment.replace(year=target_year, day=day)


def _parse_bound(value: object, name: str) -> datetime:
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError as exc:
            raise InvalidDateRange(
                f"{name} is not a valid date", context={name: value}
            ) from exc
    else:
        raise InvalidDateRange(f"{name} is required", context={name: value})
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
