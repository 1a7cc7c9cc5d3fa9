"""Dependency injection container for building fully-wired AnalyticsService instances."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional

import httpx

from farm_analytics.analytics.aggregator import Aggregator
from farm_analytics.analytics.consistency import ConsistencyAnalyzer
from farm_analytics.analytics.financials import FinancialCalculator
from farm_analytics.analytics.trends import TrendComparator
from farm_analytics.cache.backends import InMemoryTTLCache, RedisCacheBackend
from farm_analytics.cache.read_through import ReadThroughCache
from farm_analytics.core.config import AnalyticsConfig
from farm_analytics.core.service import AnalyticsService
from farm_analytics.data.http_fetcher import FetcherConfig, HttpRecordFetcher
from farm_analytics.domain.interfaces import ICacheBackend, IRecordFetcher
from farm_analytics.periods.resolver import PeriodResolver

logger = logging.getLogger(__name__)


class DIContainer:
    """Factory helpers that assemble an AnalyticsService with default wiring."""

    @staticmethod
    def create_service(
        *,
        fetcher: Optional[IRecordFetcher] = None,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        config: Optional[AnalyticsConfig] = None,
        cache_backend: Optional[ICacheBackend] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> AnalyticsService:
        if fetcher is not None and base_url:
            raise ValueError("Provide either 'fetcher' or 'base_url', not both")
        cfg = config or AnalyticsConfig.from_env()
        record_fetcher = fetcher or DIContainer._build_http_fetcher(base_url, api_key)

        aggregator = Aggregator()
        return AnalyticsService(
            record_fetcher,
            cfg,
            resolver=PeriodResolver(clock=clock, default_period=cfg.default_period),
            aggregator=aggregator,
            trends=TrendComparator(),
            calculator=FinancialCalculator(aggregator),
            analyzer=ConsistencyAnalyzer(
                low_day_ratio=cfg.low_day_ratio, low_day_limit=cfg.low_day_limit
            ),
            cache=DIContainer._build_cache(cfg, cache_backend),
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _build_http_fetcher(
        base_url: Optional[str], api_key: Optional[str]
    ) -> HttpRecordFetcher:
        if not base_url:
            raise ValueError("A record fetcher or a record store base_url must be supplied")
        fetcher_config = FetcherConfig(base_url=base_url, api_key=api_key)
        return HttpRecordFetcher(
            httpx.Client(timeout=fetcher_config.timeout), fetcher_config
        )

    @staticmethod
    def _build_cache(
        config: AnalyticsConfig, backend: Optional[ICacheBackend]
    ) -> Optional[ReadThroughCache]:
        if not config.enable_cache:
            return None
        if backend is None:
            backend = (
                RedisCacheBackend.from_url(config.redis_url)
                if config.redis_url
                else InMemoryTTLCache()
            )
        logger.debug(
            "analytics_cache_enabled",
            extra={"backend": type(backend).__name__, "ttl": config.cache_ttl_seconds},
        )
        return ReadThroughCache(
            backend,
            ttl_seconds=config.cache_ttl_seconds,
            prefix=config.cache_prefix,
        )
