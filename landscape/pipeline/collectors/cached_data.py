"""Cache helpers shared by the external data collectors.

Each collector keeps all its collected entries in a single JSON document in
the cache (``{key: entry}``), every entry carrying the ``generated_at``
timestamp used to decide when it must be refreshed. This module only deals
with that document; it does not contact external services.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timedelta, timezone
from typing import Any

from landscape.cache import Cache

logger = logging.getLogger(__name__)


def load_cached_data(cache: Cache, key: str) -> dict[str, dict[str, Any]]:
    """Return the entries cached under ``key`` (empty when absent or corrupt).

    Raises
    ------
    OSError
        If the cache entry exists but cannot be read.
    """
    raw = cache.get(key)
    if raw is None:
        return {}
    try:
        data = json.loads(raw)
    except (UnicodeDecodeError, json.JSONDecodeError):
        logger.warning("Ignoring corrupt cache entry %s", key)
        return {}
    if not isinstance(data, dict):
        logger.warning("Ignoring unexpected cache entry %s", key)
        return {}
    return {k: v for k, v in data.items() if isinstance(v, dict)}


def store_cached_data(cache: Cache, key: str, data: dict[str, dict[str, Any]]) -> None:
    """Persist the collected entries under ``key``.

    Raises
    ------
    OSError
        If the cache entry cannot be written.
    """
    cache.put(key, json.dumps(data, ensure_ascii=False, sort_keys=True).encode("utf-8"))


def is_fresh(entry: dict[str, Any], ttl_days: int, now: datetime | None = None) -> bool:
    """Tell whether a cached entry is younger than ``ttl_days``."""
    generated_at = entry.get("generated_at")
    if not isinstance(generated_at, str):
        return False
    try:
        timestamp = datetime.fromisoformat(generated_at)
    except ValueError:
        return False
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    now = now or datetime.now(timezone.utc)
    return now - timestamp < timedelta(days=ttl_days)


def utc_now_iso() -> str:
    """Return the current UTC time in ISO 8601 format."""
    return datetime.now(timezone.utc).isoformat(timespec="seconds")
