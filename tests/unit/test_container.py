from datetime import datetime, timezone

import pytest

from farm_analytics.cache.backends import InMemoryTTLCache, RedisCacheBackend
from farm_analytics.core.config import AnalyticsConfig
from farm_analytics.core.container import DIContainer
from farm_analytics.core.service import AnalyticsService
from farm_analytics.data.http_fetcher import HttpRecordFetcher
from farm_analytics.data.memory_fetcher import InMemoryRecordFetcher

NOW = datetime(2024, 5, 1, tzinfo=timezone.utc)


def test_create_service_requires_a_record_source():
    with pytest.raises(ValueError):
        DIContainer.create_service(config=AnalyticsConfig())


def test_create_service_rejects_fetcher_and_base_url_together():
    with pytest.raises(ValueError):
        DIContainer.create_service(
            fetcher=InMemoryRecordFetcher(),
            base_url="https://store.test",
            config=AnalyticsConfig(),
        )


def test_create_service_builds_http_fetcher_from_base_url():
    service = DIContainer.create_service(
        base_url="https://store.test", api_key="secret", config=AnalyticsConfig()
    )

    assert isinstance(service, AnalyticsService)
    assert isinstance(service._fetcher, HttpRecordFetcher)
    assert service._fetcher.config.api_key == "secret"
    assert service._cache is None


def test_create_service_wires_clock_and_default_period():
    service = DIContainer.create_service(
        fetcher=InMemoryRecordFetcher(),
        config=AnalyticsConfig(default_period="7d"),
        clock=lambda: NOW,
    )

    window = service.resolver.resolve_period("bogus")

    assert window.end == NOW
    assert service.resolver.days_in_range(window) == 7


def test_create_service_uses_in_memory_cache_when_enabled():
    service = DIContainer.create_service(
        fetcher=InMemoryRecordFetcher(), config=AnalyticsConfig(enable_cache=True)
    )

    assert service._cache is not None
    assert isinstance(service._cache._backend, InMemoryTTLCache)


def test_create_service_uses_redis_when_url_configured():
    config = AnalyticsConfig(enable_cache=True, redis_url="redis://localhost:6379/0")

    service = DIContainer.create_service(fetcher=InMemoryRecordFetcher(), config=config)

    assert isinstance(service._cache._backend, RedisCacheBackend)


def test_create_service_prefers_explicit_cache_backend():
    backend = InMemoryTTLCache()

    service = DIContainer.create_service(
        fetcher=InMemoryRecordFetcher(),
        config=AnalyticsConfig(enable_cache=True, redis_url="redis://localhost:6379/0"),
        cache_backend=backend,
    )

    assert service._cache._backend is backend


def test_create_service_reads_config_from_env(monkeypatch):
    monkeypatch.setenv("FARM_ANALYTICS_UNIT_PRICE", "4")

    service = DIContainer.create_service(fetcher=InMemoryRecordFetcher())

    assert service.config.unit_price == 4


def test_package_exports_in_memory_fetcher():
    from farm_analytics import InMemoryRecordFetcher as exported

    service = DIContainer.create_service(fetcher=exported(), config=AnalyticsConfig())

    assert exported is InMemoryRecordFetcher
    assert service.production_summary("farm-1").total_eggs == 0
