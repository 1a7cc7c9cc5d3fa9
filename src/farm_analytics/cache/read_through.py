"""Read-through cache wrapper that never lets cache trouble fail a report."""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from farm_analytics.domain.exceptions import CacheUnavailable
from farm_analytics.domain.interfaces import ICacheBackend

T = TypeVar("T")


def build_cache_key(namespace: str, farm_id: str, **params: Any) -> str:
    """Deterministic key: namespace, farm and parameters sorted by name."""

    parts = [namespace, farm_id or "-"]
    parts.extend(f"{name}={params[name]}" for name in sorted(params))
    return ":".join(parts)


class ReadThroughCache:
    """Returns cached values when present, otherwise computes and stores them.

    Concurrent misses on one key may each recompute; the last write wins.
    Backend failures are logged and the value is computed directly.
    """

    def __init__(
        self,
        backend: ICacheBackend,
        *,
        ttl_seconds: int = 300,
        prefix: str = "farm_analytics",
        logger: logging.Logger | None = None,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be greater than zero")
        self._backend = backend
        self._ttl_seconds = ttl_seconds
        self._prefix = prefix
        self._logger = logger or logging.getLogger(__name__)

    def get_or_compute(
        self,
        key: str,
        compute: Callable[[], T],
        *,
        model: Optional[Type[BaseModel]] = None,
    ) -> T:
        full_key = self._full_key(key)
        cached = self._read(full_key, model)
        if cached is not None:
            self._logger.debug("cache_hit", extra={"key": full_key})
            return cached
        value = compute()
        self._write(full_key, value)
        return value

    def invalidate(self, key: str) -> None:
        full_key = self._full_key(key)
        try:
            self._backend.delete(full_key)
        except CacheUnavailable as exc:
            self._log_unavailable("cache_delete_failed", full_key, exc)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _full_key(self, key: str) -> str:
        return f"{self._prefix}:{key}" if self._prefix else key

    def _read(self, key: str, model: Optional[Type[BaseModel]]) -> Any:
        try:
            raw = self._backend.get(key)
        except CacheUnavailable as exc:
            self._log_unavailable("cache_read_failed", key, exc)
            return None
        if raw is None or model is None:
            return raw
        try:
            return model.model_validate(raw)
        except PydanticValidationError:
            self._logger.warning("cache_payload_invalid", extra={"key": key})
            return None

    def _write(self, key: str, value: Any) -> None:
        payload = value.model_dump(mode="json") if isinstance(value, BaseModel) else value
        try:
            self._backend.set(key, payload, self._ttl_seconds)
        except CacheUnavailable as exc:
            self._log_unavailable("cache_write_failed", key, exc)

    def _log_unavailable(self, event: str, key: str, exc: CacheUnavailable) -> None:
        self._logger.warning(event, extra={"key": key, **exc.to_log_fields()})
