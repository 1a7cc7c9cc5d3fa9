"""Farm analytics package following Clean Architecture layering."""

from .core.service import AnalyticsService
from .core.container import DIContainer
from .data.memory_fetcher import InMemoryRecordFetcher

__all__ = [
    "AnalyticsService",
    "DIContainer",
    "InMemoryRecordFetcher",
    "domain",
    "periods",
    "analytics",
    "cache",
    "data",
    "core",
    "utils",
]
