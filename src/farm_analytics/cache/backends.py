"""Cache backends for the read-through analytics cache."""

from __future__ import annotations

import json
import threading
import time
from typing import Any, Callable, Dict, Optional, Tuple

import redis

from farm_analytics.domain.exceptions import CacheUnavailable
from farm_analytics.domain.interfaces import ICacheBackend


class InMemoryTTLCache(ICacheBackend):
    """Process-local cache; entries expire lazily on read."""

    def __init__(
        self, *, clock: Callable[[], float] = time.monotonic, max_entries: int = 1024
    ) -> None:
        if max_entries <= 0:
            raise ValueError("max_entries must be greater than zero")
        self._clock = clock
        self._max_entries = max_entries
        self._entries: Dict[str, Tuple[float, Any]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Any:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if expires_at <= self._clock():
                del self._entries[key]
                return None
            return value

    def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        with self._lock:
            if key not in self._entries and len(self._entries) >= self._max_entries:
                self._evict_expired()
                if len(self._entries) >= self._max_entries:
                    # Oldest insertion goes first.
                    self._entries.pop(next(iter(self._entries)))
            self._entries[key] = (self._clock() + ttl_seconds, value)

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def __len__(self) -> int:
        return len(self._entries)

    def _evict_expired(self) -> None:
        now = self._clock()
        for key in [k for k, (expires_at, _) in self._entries.items() if expires_at <= now]:
            del self._entries[key]


class RedisCacheBackend(ICacheBackend):
    """Stores JSON payloads in Redis with SETEX expiry."""

    def __init__(self, client: redis.Redis) -> None:
        self._client = client

    @classmethod
    def from_url(cls, url: str, *, socket_timeout: Optional[float] = 5.0) -> "RedisCacheBackend":
        return cls(
            redis.Redis.from_url(url, socket_timeout=socket_timeout, decode_responses=True)
        )

    def get(self, key: str) -> Any:
        try:
            raw = self._client.get(key)
        except redis.RedisError as exc:
            raise CacheUnavailable("Redis get failed", context={"key": key}) from exc
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except (TypeError, ValueError) as exc:
            raise CacheUnavailable(
                "Cached payload is not valid JSON", context={"key": key}
            ) from exc

    def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        try:
            payload = json.dumps(value, default=str)
        except (TypeError, ValueError) as exc:
            raise CacheUnavailable(
                "Value cannot be serialized for caching", context={"key": key}
            ) from exc
        try:
            self._client.setex(key, ttl_seconds, payload)
        except redis.RedisError as exc:
            raise CacheUnavailable("Redis set failed", context={"key": key}) from exc

    def delete(self, key: str) -> None:
        try:
            self._client.delete(key)
        except redis.RedisError as exc:
            raise CacheUnavailable("Redis delete failed", context={"key": key}) from exc
