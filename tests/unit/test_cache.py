import json
import logging

import pytest
import redis

from farm_analytics.cache.backends import InMemoryTTLCache, RedisCacheBackend
from farm_analytics.cache.read_through import ReadThroughCache, build_cache_key
from farm_analytics.domain.exceptions import CacheUnavailable
from farm_analytics.domain.models import DayValue


class _Clock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


class _FakeRedis:
    def __init__(self) -> None:
        self.store = {}
        self.ttls = {}

    def get(self, key):
        return self.store.get(key)

    def setex(self, key, ttl, value):
        self.store[key] = value
        self.ttls[key] = ttl

    def delete(self, key):
        self.store.pop(key, None)


class _DownRedis:
    def get(self, key):
        raise redis.ConnectionError("connection refused")

    def setex(self, key, ttl, value):
        raise redis.ConnectionError("connection refused")

    def delete(self, key):
        raise redis.ConnectionError("connection refused")


class _BrokenBackend:
    def get(self, key):
        raise CacheUnavailable("down")

    def set(self, key, value, ttl_seconds):
        raise CacheUnavailable("down")

    def delete(self, key):
        raise CacheUnavailable("down")


def test_build_cache_key_is_deterministic():
    first = build_cache_key("summary", "farm-1", end="2024-01-31", start="2024-01-01")
    second = build_cache_key("summary", "farm-1", start="2024-01-01", end="2024-01-31")
    assert first == second == "summary:farm-1:end=2024-01-31:start=2024-01-01"
    assert build_cache_key("summary", "") == "summary:-"


def test_in_memory_cache_expires_entries():
    clock = _Clock()
    cache = InMemoryTTLCache(clock=clock)

    cache.set("k", {"v": 1}, ttl_seconds=10)
    assert cache.get("k") == {"v": 1}

    clock.now += 10
    assert cache.get("k") is None
    assert len(cache) == 0


def test_in_memory_cache_evicts_oldest_when_full():
    cache = InMemoryTTLCache(clock=_Clock(), max_entries=2)

    cache.set("a", 1, 60)
    cache.set("b", 2, 60)
    cache.set("c", 3, 60)

    assert cache.get("a") is None
    assert cache.get("b") == 2
    assert cache.get("c") == 3


def test_redis_backend_round_trips_json_with_ttl():
    client = _FakeRedis()
    backend = RedisCacheBackend(client)

    backend.set("k", {"total": 150}, ttl_seconds=300)

    assert json.loads(client.store["k"]) == {"total": 150}
    assert client.ttls["k"] == 300
    assert backend.get("k") == {"total": 150}
    backend.delete("k")
    assert backend.get("k") is None


def test_redis_backend_wraps_connection_errors():
    backend = RedisCacheBackend(_DownRedis())
    with pytest.raises(CacheUnavailable):
        backend.get("k")
    with pytest.raises(CacheUnavailable):
        backend.set("k", 1, 10)
    with pytest.raises(CacheUnavailable):
        backend.delete("k")


def test_redis_backend_rejects_corrupt_payloads():
    client = _FakeRedis()
    client.store["k"] = "{not json"
    with pytest.raises(CacheUnavailable):
        RedisCacheBackend(client).get("k")


def test_read_through_computes_once_then_serves_cached_value():
    backend = InMemoryTTLCache(clock=_Clock())
    cache = ReadThroughCache(backend, ttl_seconds=60, prefix="test")
    calls = {"count": 0}

    def compute():
        calls["count"] += 1
        return DayValue(date="2024-01-01", value=100)

    first = cache.get_or_compute("peak", compute, model=DayValue)
    second = cache.get_or_compute("peak", compute, model=DayValue)

    assert first == second == DayValue(date="2024-01-01", value=100)
    assert calls["count"] == 1
    assert backend.get("test:peak") == {"date": "2024-01-01", "value": 100.0}


def test_read_through_falls_back_when_backend_is_down(caplog):
    cache = ReadThroughCache(_BrokenBackend())

    with caplog.at_level(logging.WARNING):
        value = cache.get_or_compute("k", lambda: 42)

    assert value == 42
    messages = [record.getMessage() for record in caplog.records]
    assert "cache_read_failed" in messages
    assert "cache_write_failed" in messages


def test_read_through_over_unreachable_redis_still_returns_value():
    cache = ReadThroughCache(RedisCacheBackend(_DownRedis()))
    assert cache.get_or_compute("k", lambda: {"total": 1}) == {"total": 1}


def test_read_through_treats_invalid_cached_payload_as_miss():
    backend = InMemoryTTLCache(clock=_Clock())
    backend.set("farm_analytics:peak", {"unexpected": True}, 60)
    cache = ReadThroughCache(backend)

    value = cache.get_or_compute(
        "peak", lambda: DayValue(date="2024-01-02", value=5), model=DayValue
    )

    assert value.date == "2024-01-02"


def test_invalidate_drops_entry():
    backend = InMemoryTTLCache(clock=_Clock())
    cache = ReadThroughCache(backend, prefix="")
    cache.get_or_compute("k", lambda: 1)

    cache.invalidate("k")

    assert backend.get("k") is None


def test_read_through_rejects_non_positive_ttl():
    with pytest.raises(ValueError):
        ReadThroughCache(InMemoryTTLCache(), ttl_seconds=0)
