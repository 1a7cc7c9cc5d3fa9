from datetime import date, datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from farm_analytics.domain.exceptions import (
    CacheUnavailable,
    FarmAnalyticsError,
    InvalidDateRange,
    RecordStoreUnavailable,
)
from farm_analytics.domain.models import DateRange, ProductionRecord
from farm_analytics.domain.reports import FinancialReport, GradeDistribution

START = datetime(2024, 1, 1, tzinfo=timezone.utc)


def test_production_record_is_immutable():
    record = ProductionRecord(date=date(2024, 1, 1), quantity=5)

    with pytest.raises((TypeError, ValidationError)):
        record.quantity = 6  # type: ignore[misc]


def test_production_record_rejects_negative_quantity():
    with pytest.raises(ValidationError):
        ProductionRecord(date=date(2024, 1, 1), quantity=-1)


def test_date_range_rejects_inverted_bounds():
    with pytest.raises(ValidationError):
        DateRange(start=START, end=START - timedelta(seconds=1))


def test_date_range_helpers():
    window = DateRange(start=START, end=START + timedelta(days=2, hours=3))

    assert window.length == timedelta(days=2, hours=3)
    assert window.start_day == "2024-01-01"
    assert window.end_day == "2024-01-03"
    assert window.contains_day(date(2024, 1, 3))
    assert not window.contains_day(date(2024, 1, 4))


def test_zeroed_reports_have_canonical_shape():
    report = FinancialReport()

    assert report.summary.revenue == 0
    assert report.summary.by_category == ()
    assert report.expense_change == 0
    assert GradeDistribution().grades["cracked"].percentage == 0


def test_error_message_includes_context():
    error = InvalidDateRange("start must not be after end", context={"start": "b"})

    assert error.message == "start must not be after end"
    assert str(error) == "start must not be after end | context={'start': 'b'}"
    assert isinstance(error, FarmAnalyticsError)


def test_errors_fall_back_to_default_message():
    assert str(CacheUnavailable()) == "Cache backend unavailable"
    assert RecordStoreUnavailable().message == "Record store is unavailable"


def test_error_log_fields_avoid_reserved_record_names():
    error = RecordStoreUnavailable(context={"url": "https://store.test"})

    fields = error.to_log_fields()

    assert fields == {
        "error_type": "RecordStoreUnavailable",
        "reason": "Record store is unavailable",
        "error_context": {"url": "https://store.test"},
    }
    assert "message" not in fields
