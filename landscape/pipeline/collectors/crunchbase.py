"""Crunchbase data collection.

Collects the organization information (description, location, headcount,
funding, stock symbol, social links) of every Crunchbase organization
referenced by the landscape items. Entries are cached and only refreshed
once they are older than the configured TTL.

Without an API key nothing is requested: the entries already in the cache
are returned and a warning is logged. A failure collecting one organization
is logged and the stale cached entry (if any) is used instead; an
authentication failure aborts the collection.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import aiohttp
from aiolimiter import AsyncLimiter

from landscape.cache import Cache
from landscape.config import (
    CACHE_KEY_CRUNCHBASE,
    CRUNCHBASE_API_URL,
    CRUNCHBASE_ORGANIZATION_FIELDS,
)
from landscape.exceptions import ExternalServiceError
from landscape.pipeline.loaders.data import LandscapeData

from .cached_data import is_fresh, load_cached_data, store_cached_data, utc_now_iso
from .client import ExternalAPIClient, gather_fail_fast

logger = logging.getLogger(__name__)


async def collect_crunchbase_data(
    cache: Cache,
    api_key: str | None,
    landscape_data: LandscapeData,
    session: aiohttp.ClientSession,
    config: Any,
) -> dict[str, dict[str, Any]]:
    """Collect Crunchbase data for the organizations in the landscape.

    Parameters
    ----------
    cache : Cache
        Shared cache holding previously collected organizations.
    api_key : str | None
        Crunchbase API key; when missing only cached data is returned.
    landscape_data : LandscapeData
        Entity set, read only.
    session : aiohttp.ClientSession
        Shared HTTP session of the build.
    config : Any
        Collector configuration (see ``CollectorConfig``).

    Returns
    -------
    dict[str, dict[str, Any]]
        Organization data keyed by Crunchbase URL.

    Raises
    ------
    ExternalServiceError
        If Crunchbase rejects the API key.
    OSError
        If the cache cannot be read or written.
    """
    urls = sorted(
        {item.crunchbase_url for item in landscape_data.items if item.crunchbase_url}
    )
    cached = load_cached_data(cache, CACHE_KEY_CRUNCHBASE)

    if not api_key:
        logger.warning(
            "Crunchbase API key not provided: no information will be collected from Crunchbase"
        )
        return {url: cached[url] for url in urls if url in cached}

    client = ExternalAPIClient(config)
    limiter = AsyncLimiter(config.crunchbase_target_rpm, 60)
    semaphore = asyncio.Semaphore(config.max_concurrent_requests)

    async def collect_one(url: str) -> tuple[str, dict[str, Any] | None]:
        entry = cached.get(url)
        if entry is not None and is_fresh(entry, config.cache_ttl_days):
            return url, entry
        async with semaphore:
            async with limiter:
                organization = await fetch_organization(client, session, api_key, url)
        if organization is None:
            return url, entry
        return url, organization

    results = await gather_fail_fast(collect_one(url) for url in urls)
    collected: dict[str, dict[str, Any]] = {}
    for url, organization in results:
        if organization is not None:
            collected[url] = organization

    store_cached_data(cache, CACHE_KEY_CRUNCHBASE, {**cached, **collected})
    logger.info("Collected Crunchbase data for %d/%d organizations", len(collected), len(urls))
    return collected


async def fetch_organization(
    client: ExternalAPIClient,
    session: aiohttp.ClientSession,
    api_key: str,
    crunchbase_url: str,
) -> dict[str, Any] | None:
    """Fetch one organization, returning ``None`` on non-fatal failures.

    Raises
    ------
    ExternalServiceError
        If the API key is rejected (HTTP 401 or 403).
    """
    permalink = crunchbase_url.rstrip("/").rsplit("/", 1)[-1]
    ok, data, meta = await client.get_json(
        session,
        f"{CRUNCHBASE_API_URL}/entities/organizations/{permalink}",
        headers={"X-cb-user-key": api_key},
        params={"field_ids": ",".join(CRUNCHBASE_ORGANIZATION_FIELDS)},
    )
    if not ok:
        if meta.get("status_code") in (401, 403):
            raise ExternalServiceError(
                "Crunchbase rejected the API key",
                context={"status_code": meta.get("status_code")},
                transient=False,
            )
        logger.error("Error collecting Crunchbase data for %s: %s", crunchbase_url, meta)
        return None
    return parse_organization(data)


def parse_organization(data: dict[str, Any]) -> dict[str, Any]:
    """Extract the organization fields used by the website from an API response."""
    props = data.get("properties") or {}
    locations = {
        loc.get("location_type"): loc.get("value")
        for loc in props.get("location_identifiers") or []
        if isinstance(loc, dict)
    }
    employees_min, employees_max = parse_num_employees(props.get("num_employees_enum"))
    funding = props.get("funding_total") or {}
    return {
        "name": props.get("name"),
        "description": props.get("short_description"),
        "homepage_url": props.get("website_url"),
        "city": locations.get("city"),
        "region": locations.get("region"),
        "country": locations.get("country"),
        "num_employees_min": employees_min,
        "num_employees_max": employees_max,
        "funding": funding.get("value_usd") if isinstance(funding, dict) else None,
        "stock_exchange": props.get("stock_exchange_symbol"),
        "ticker": _identifier_value(props.get("stock_symbol")),
        "categories": [
            c.get("value") for c in props.get("categories") or [] if isinstance(c, dict)
        ],
        "linkedin_url": _identifier_value(props.get("linkedin")),
        "twitter_url": _identifier_value(props.get("twitter")),
        "generated_at": utc_now_iso(),
    }


def parse_num_employees(value: Any) -> tuple[int | None, int | None]:
    """Parse a Crunchbase headcount range such as ``c_00101_00250``.

    >>> parse_num_employees("c_00101_00250")
    (101, 250)
    >>> parse_num_employees("c_10001_max")
    (10001, None)
    """
    if not isinstance(value, str):
        return None, None
    parts = value.split("_")
    if len(parts) != 3:
        return None, None
    bounds: list[int | None] = []
    for part in parts[1:]:
        bounds.append(int(part) if part.isdigit() else None)
    return bounds[0], bounds[1]


def _identifier_value(value: Any) -> str | None:
    if isinstance(value, dict):
        return value.get("value")
    if isinstance(value, str):
        return value
    return None
