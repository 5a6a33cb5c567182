"""Configuration loader for the external data collectors.

This module provides ``CollectorConfig``, which loads and validates the
tunables shared by the Crunchbase and GitHub collectors: request timeout,
retries and backoff, rate limits, concurrency and cache freshness.

Role in Architecture
--------------------
- Forms the boundary between the process environment (and an optional
  ``.env`` file) and the collectors' strongly-typed runtime config.
- No client logic: only configuration loading, structuring and validation.
- Credentials are not part of it; see
  ``landscape.pipeline.builder.credentials``.

Examples
--------
>>> from landscape.pipeline.collectors.config import CollectorConfig
>>> cfg = CollectorConfig()
>>> assert cfg.max_retries >= 0
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

from landscape.config import (
    DEFAULT_BACKOFF_FACTOR,
    DEFAULT_CACHE_TTL_DAYS,
    DEFAULT_COLLECTOR_MAX_CONCURRENCY,
    DEFAULT_CRUNCHBASE_TARGET_RPM,
    DEFAULT_GITHUB_TARGET_RPM,
    DEFAULT_MAX_RETRIES,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_RETRY_SLEEP_ON_429,
)
from landscape.exceptions import ConfigurationError


class CollectorConfig:
    r"""Runtime configuration of the external data collectors.

    Attributes
    ----------
    request_timeout : int
        Timeout (seconds) for individual requests.
    max_retries : int
        Maximum allowed retries for transient request errors.
    backoff_factor : float
        Exponential backoff base for retries.
    retry_sleep_on_429 : int
        Seconds to sleep when rate limited (multiplied by the attempt).
    crunchbase_target_rpm : int
        Requests per minute allowed against the Crunchbase API.
    github_target_rpm : int
        Requests per minute allowed against the GitHub API.
    max_concurrent_requests : int
        Maximum in-flight requests per collector.
    cache_ttl_days : int
        Age after which cached entries are refreshed.

    Notes
    -----
    Instantiate once at process start; no runtime mutation is intended.
    """

    def __init__(self) -> None:
        env_path = Path.cwd() / ".env"
        if env_path.exists():
            load_dotenv(env_path, override=False)
        self.request_timeout = _env_int("REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT)
        self.max_retries = _env_int("MAX_RETRIES", DEFAULT_MAX_RETRIES)
        self.backoff_factor = _env_float("BACKOFF_FACTOR", DEFAULT_BACKOFF_FACTOR)
        self.retry_sleep_on_429 = _env_int(
            "RETRY_SLEEP_ON_429", DEFAULT_RETRY_SLEEP_ON_429
        )
        self.crunchbase_target_rpm = _env_int(
            "CRUNCHBASE_TARGET_RPM", DEFAULT_CRUNCHBASE_TARGET_RPM
        )
        self.github_target_rpm = _env_int(
            "GITHUB_TARGET_RPM", DEFAULT_GITHUB_TARGET_RPM
        )
        self.max_concurrent_requests = _env_int(
            "COLLECTOR_MAX_CONCURRENCY", DEFAULT_COLLECTOR_MAX_CONCURRENCY
        )
        self.cache_ttl_days = _env_int("CACHE_TTL_DAYS", DEFAULT_CACHE_TTL_DAYS)
        if self.request_timeout <= 0:
            raise ConfigurationError("REQUEST_TIMEOUT must be positive")
        if self.max_retries < 0:
            raise ConfigurationError("MAX_RETRIES cannot be negative")
        if min(
            self.crunchbase_target_rpm,
            self.github_target_rpm,
            self.max_concurrent_requests,
        ) < 1:
            raise ConfigurationError("Rate limits and concurrency must be at least 1")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError as error:
        raise ConfigurationError(
            f"{name} must be an integer", context={"value": raw}
        ) from error


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError as error:
        raise ConfigurationError(
            f"{name} must be a number", context={"value": raw}
        ) from error
