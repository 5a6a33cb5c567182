"""Pytest configuration for test environment setup.

- Forces ``DISABLE_FILE_LOGS=1`` to avoid writing log files during tests.
- Ensures the project root is available on ``sys.path`` for imports.
- Keeps the collectors' credentials and tunables out of the test runs.
"""

import os
import sys
from pathlib import Path

import pytest

os.environ.setdefault("DISABLE_FILE_LOGS", "1")  # Avoid creating log files during tests

# Ensure project root is on sys.path
ROOT = Path(__file__).resolve().parents[1]
root_str = str(ROOT)
if root_str not in sys.path:
    sys.path.insert(0, root_str)

_ISOLATED_ENV = (
    "CRUNCHBASE_API_KEY",
    "GITHUB_TOKENS",
    "REQUEST_TIMEOUT",
    "MAX_RETRIES",
    "BACKOFF_FACTOR",
    "RETRY_SLEEP_ON_429",
    "CRUNCHBASE_TARGET_RPM",
    "GITHUB_TARGET_RPM",
    "COLLECTOR_MAX_CONCURRENCY",
    "CACHE_TTL_DAYS",
)


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path):
    """Run every test without credentials and away from any real ``.env``."""
    for name in _ISOLATED_ENV:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
