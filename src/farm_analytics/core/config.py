"""Analytics configuration management helpers."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

from farm_analytics.domain.exceptions import ConfigurationError
from farm_analytics.periods.resolver import PeriodResolver

ENV_PREFIX = "FARM_ANALYTICS_"


def _str_to_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    value = value.strip().lower()
    if value in {"1", "true", "yes", "on"}:
        return True
    if value in {"0", "false", "no", "off"}:
        return False
    return default


def _str_to_int(value: str | None, default: int) -> int:
    if value is None:
        return default
    try:
        return int(value)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid integer value: {value}") from exc


def _str_to_float(value: str | None, default: float) -> float:
    if value is None:
        return default
    try:
        return float(value)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid number value: {value}") from exc


@dataclass(frozen=True)
class AnalyticsConfig:
    """Immutable configuration object loaded from env or files."""

    unit_price: float = 2.5
    default_period: str = "30d"
    enable_cache: bool = False
    cache_ttl_seconds: int = 300
    cache_prefix: str = "farm_analytics"
    redis_url: Optional[str] = None
    low_day_ratio: float = 0.7
    low_day_limit: int = 5
    expected_lay_rate: float = 0.8
    fetch_workers: int = 2

    def __post_init__(self) -> None:
        self.validate()

    @classmethod
    def from_env(cls) -> "AnalyticsConfig":
        defaults = cls()

        def env(name: str) -> str | None:
            return os.getenv(f"{ENV_PREFIX}{name}")

        return cls(
            unit_price=_str_to_float(env("UNIT_PRICE"), defaults.unit_price),
            default_period=env("DEFAULT_PERIOD") or defaults.default_period,
            enable_cache=_str_to_bool(env("ENABLE_CACHE"), defaults.enable_cache),
            cache_ttl_seconds=_str_to_int(
                env("CACHE_TTL_SECONDS"), defaults.cache_ttl_seconds
            ),
            cache_prefix=env("CACHE_PREFIX") or defaults.cache_prefix,
            redis_url=env("REDIS_URL") or defaults.redis_url,
            low_day_ratio=_str_to_float(env("LOW_DAY_RATIO"), defaults.low_day_ratio),
            low_day_limit=_str_to_int(env("LOW_DAY_LIMIT"), defaults.low_day_limit),
            expected_lay_rate=_str_to_float(
                env("EXPECTED_LAY_RATE"), defaults.expected_lay_rate
            ),
            fetch_workers=_str_to_int(env("FETCH_WORKERS"), defaults.fetch_workers),
        )

    @classmethod
    def from_file(cls, path: str) -> "AnalyticsConfig":
        file_path = Path(path)
        if not file_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")
        raw = file_path.read_text()
        data: Dict[str, Any]
        suffix = file_path.suffix.lower()
        if suffix == ".json":
            data = json.loads(raw)
        elif suffix in {".yaml", ".yml"}:
            data = cls._load_yaml(raw)
        else:
            raise ConfigurationError("Unsupported config format. Use JSON or YAML.")
        return cls(**cls._merge_with_defaults(data))

    def validate(self) -> None:
        if self.unit_price < 0:
            raise ConfigurationError("unit_price must be non-negative")
        if not PeriodResolver.is_known_token(self.default_period):
            raise ConfigurationError(
                "default_period must be one of 7d, 30d, 90d, 1y",
                context={"default_period": self.default_period},
            )
        if self.cache_ttl_seconds <= 0:
            raise ConfigurationError("cache_ttl_seconds must be greater than zero")
        if not 0 <= self.low_day_ratio <= 1:
            raise ConfigurationError("low_day_ratio must be between 0 and 1")
        if self.low_day_limit < 0:
            raise ConfigurationError("low_day_limit must be non-negative")
        if not 0 < self.expected_lay_rate <= 1:
            raise ConfigurationError("expected_lay_rate must be in (0, 1]")
        if self.fetch_workers < 1:
            raise ConfigurationError("fetch_workers must be at least 1")

    @classmethod
    def _merge_with_defaults(cls, data: Dict[str, Any]) -> Dict[str, Any]:
        defaults = cls()
        known = {field.name for field in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError(
                "Unknown configuration keys", context={"keys": unknown}
            )
        return {name: data.get(name, getattr(defaults, name)) for name in known}

    @staticmethod
    def _load_yaml(raw: str) -> Dict[str, Any]:
        import yaml

        return yaml.safe_load(raw) or {}
