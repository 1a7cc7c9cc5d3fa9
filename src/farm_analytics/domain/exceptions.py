"""Exception hierarchy for farm analytics failures."""

from __future__ import annotations

from typing import Any, Mapping


class FarmAnalyticsError(Exception):
    """Base class for all domain-level errors in the analytics engine."""

    default_message = "Farm analytics error occurred"

    def __init__(
        self, message: str | None = None, *, context: Mapping[str, Any] | None = None
    ):
        self.message = message or self.default_message
        self.context: Mapping[str, Any] = dict(context or {})
        formatted = self._format_message()
        super().__init__(formatted)

    def to_log_fields(self) -> dict[str, Any]:
        """Fields for a log record's `extra`, avoiding reserved attribute names."""

        return {
            "error_type": type(self).__name__,
            "reason": self.message,
            "error_context": dict(self.context),
        }

    def _format_message(self) -> str:
        if self.context:
            return f"{self.message} | context={self.context}"
        return self.message


class InvalidDateRange(FarmAnalyticsError):
    """Explicit period bounds are malformed or inverted."""

    default_message = "Invalid date range"


class CacheUnavailable(FarmAnalyticsError):
    """Cache backend could not be reached or returned garbage."""

    default_message = "Cache backend unavailable"


class RecordFetchError(FarmAnalyticsError):
    """Record store could not be queried."""

    default_message = "Failed to fetch records"


class RecordStoreUnavailable(RecordFetchError):
    """Record store is unreachable or temporarily failing."""

    default_message = "Record store is unavailable"


class ValidationError(FarmAnalyticsError):
    """Raised when domain validation fails."""

    default_message = "Domain validation failed"


class RecordNormalizationError(ValidationError):
    """A raw store document cannot be mapped onto a canonical record."""

    default_message = "Record could not be normalized"


class ConfigurationError(ValidationError):
    """Analytics configuration holds an invalid value."""

    default_message = "Invalid analytics configuration"
