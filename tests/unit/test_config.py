import json
from pathlib import Path

import pytest

from farm_analytics.core.config import AnalyticsConfig
from farm_analytics.domain.exceptions import ConfigurationError


def test_analytics_config_defaults():
    config = AnalyticsConfig()
    assert config.unit_price == 2.5
    assert config.default_period == "30d"
    assert config.enable_cache is False
    assert config.cache_ttl_seconds == 300
    assert config.cache_prefix == "farm_analytics"
    assert config.redis_url is None
    assert config.low_day_ratio == 0.7
    assert config.low_day_limit == 5
    assert config.expected_lay_rate == 0.8
    assert config.fetch_workers == 2


def test_analytics_config_from_env(monkeypatch):
    monkeypatch.setenv("FARM_ANALYTICS_UNIT_PRICE", "3.1")
    monkeypatch.setenv("FARM_ANALYTICS_DEFAULT_PERIOD", "7d")
    monkeypatch.setenv("FARM_ANALYTICS_ENABLE_CACHE", "yes")
    monkeypatch.setenv("FARM_ANALYTICS_CACHE_TTL_SECONDS", "60")
    monkeypatch.setenv("FARM_ANALYTICS_REDIS_URL", "redis://localhost:6379/1")
    monkeypatch.setenv("FARM_ANALYTICS_FETCH_WORKERS", "4")

    config = AnalyticsConfig.from_env()

    assert config.unit_price == 3.1
    assert config.default_period == "7d"
    assert config.enable_cache is True
    assert config.cache_ttl_seconds == 60
    assert config.redis_url == "redis://localhost:6379/1"
    assert config.fetch_workers == 4
    assert config.low_day_limit == 5


def test_analytics_config_from_env_rejects_bad_numbers(monkeypatch):
    monkeypatch.setenv("FARM_ANALYTICS_CACHE_TTL_SECONDS", "soon")
    with pytest.raises(ConfigurationError):
        AnalyticsConfig.from_env()


def test_analytics_config_from_file_json(tmp_path: Path):
    data = {"unit_price": 3.0, "enable_cache": True, "low_day_ratio": 0.5}
    path = tmp_path / "config.json"
    path.write_text(json.dumps(data))

    config = AnalyticsConfig.from_file(str(path))

    assert config.unit_price == 3.0
    assert config.enable_cache is True
    assert config.low_day_ratio == 0.5
    assert config.default_period == "30d"


def test_analytics_config_from_file_yaml(tmp_path: Path):
    yaml = pytest.importorskip("yaml")
    data = {"default_period": "90d", "cache_prefix": "eggs", "cache_ttl_seconds": 900}
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump(data))

    config = AnalyticsConfig.from_file(str(path))

    assert config.default_period == "90d"
    assert config.cache_prefix == "eggs"
    assert config.cache_ttl_seconds == 900


def test_analytics_config_from_file_rejects_unknown_keys(tmp_path: Path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"unit_cost": 1}))
    with pytest.raises(ConfigurationError):
        AnalyticsConfig.from_file(str(path))


def test_analytics_config_from_file_rejects_unknown_format(tmp_path: Path):
    path = tmp_path / "config.toml"
    path.write_text("unit_price = 1")
    with pytest.raises(ConfigurationError):
        AnalyticsConfig.from_file(str(path))


def test_analytics_config_from_missing_file():
    with pytest.raises(FileNotFoundError):
        AnalyticsConfig.from_file("/nonexistent/config.json")


@pytest.mark.parametrize(
    "overrides",
    [
        {"unit_price": -1},
        {"default_period": "2w"},
        {"cache_ttl_seconds": 0},
        {"low_day_ratio": 1.5},
        {"low_day_limit": -1},
        {"expected_lay_rate": 0},
        {"fetch_workers": 0},
    ],
)
def test_analytics_config_validate_rejects_invalid_values(overrides):
    with pytest.raises(ConfigurationError):
        AnalyticsConfig(**overrides)
