"""Configuration tests for the external data collectors."""

import pytest

from landscape.config import DEFAULT_MAX_RETRIES
from landscape.exceptions import ConfigurationError
from landscape.pipeline.collectors import CollectorConfig


def test_defaults():
    cfg = CollectorConfig()
    assert cfg.max_retries == DEFAULT_MAX_RETRIES
    assert cfg.max_concurrent_requests >= 1


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("MAX_RETRIES", "0")
    monkeypatch.setenv("BACKOFF_FACTOR", "1.5")
    monkeypatch.setenv("COLLECTOR_MAX_CONCURRENCY", "2")
    cfg = CollectorConfig()
    assert cfg.max_retries == 0
    assert cfg.backoff_factor == 1.5
    assert cfg.max_concurrent_requests == 2


def test_dotenv_file_is_loaded(tmp_path, monkeypatch):
    # Registered so the value loaded from .env is removed on teardown.
    monkeypatch.setenv("CACHE_TTL_DAYS", "1")
    monkeypatch.delenv("CACHE_TTL_DAYS")
    # conftest chdirs into tmp_path
    (tmp_path / ".env").write_text("CACHE_TTL_DAYS=3\n", encoding="utf-8")
    assert CollectorConfig().cache_ttl_days == 3


@pytest.mark.parametrize(
    "name,value",
    [
        ("MAX_RETRIES", "many"),
        ("BACKOFF_FACTOR", "fast"),
        ("REQUEST_TIMEOUT", "0"),
        ("MAX_RETRIES", "-1"),
        ("GITHUB_TARGET_RPM", "0"),
    ],
)
def test_invalid_values(monkeypatch, name, value):
    monkeypatch.setenv(name, value)
    with pytest.raises(ConfigurationError):
        CollectorConfig()
