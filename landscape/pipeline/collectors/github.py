"""GitHub data collection.

Collects repository information (description, stars, topics, license,
languages, latest commit and contributors count) for every GitHub repository
referenced by the landscape items. Requests are authenticated with the
provided tokens, used in rotation, and entries are cached like the Crunchbase
ones.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
import re
from collections.abc import Iterator
from typing import Any
from urllib.parse import parse_qs, urlparse

import aiohttp
from aiolimiter import AsyncLimiter

from landscape.cache import Cache
from landscape.config import CACHE_KEY_GITHUB, GITHUB_API_URL
from landscape.exceptions import ExternalServiceError
from landscape.pipeline.loaders.data import LandscapeData

from .cached_data import is_fresh, load_cached_data, store_cached_data, utc_now_iso
from .client import ExternalAPIClient, gather_fail_fast

logger = logging.getLogger(__name__)

GITHUB_REPO_URL = re.compile(r"^https://github\.com/(?P<owner>[^/]+)/(?P<repo>[^/]+?)/?$")
LAST_PAGE_LINK = re.compile(r'<([^>]+)>;\s*rel="last"')


async def collect_github_data(
    cache: Cache,
    tokens: list[str] | None,
    landscape_data: LandscapeData,
    session: aiohttp.ClientSession,
    config: Any,
) -> dict[str, dict[str, Any]]:
    """Collect GitHub data for the repositories in the landscape.

    Parameters
    ----------
    cache : Cache
        Shared cache holding previously collected repositories.
    tokens : list[str] | None
        GitHub tokens; when missing only cached data is returned.
    landscape_data : LandscapeData
        Entity set, read only.
    session : aiohttp.ClientSession
        Shared HTTP session of the build.
    config : Any
        Collector configuration (see ``CollectorConfig``).

    Returns
    -------
    dict[str, dict[str, Any]]
        Repository data keyed by repository URL.

    Raises
    ------
    ExternalServiceError
        If GitHub rejects one of the tokens.
    OSError
        If the cache cannot be read or written.
    """
    urls = sorted(
        {
            repo.url
            for item in landscape_data.items
            for repo in item.repositories
            if GITHUB_REPO_URL.match(repo.url)
        }
    )
    cached = load_cached_data(cache, CACHE_KEY_GITHUB)

    if not tokens:
        logger.warning(
            "GitHub tokens not provided: no information will be collected from GitHub"
        )
        return {url: cached[url] for url in urls if url in cached}

    client = ExternalAPIClient(config)
    limiter = AsyncLimiter(config.github_target_rpm, 60)
    semaphore = asyncio.Semaphore(config.max_concurrent_requests)
    token_pool = itertools.cycle(tokens)

    async def collect_one(url: str) -> tuple[str, dict[str, Any] | None]:
        entry = cached.get(url)
        if entry is not None and is_fresh(entry, config.cache_ttl_days):
            return url, entry
        async with semaphore:
            repository = await fetch_repository(client, session, limiter, token_pool, url)
        if repository is None:
            return url, entry
        return url, repository

    results = await gather_fail_fast(collect_one(url) for url in urls)
    collected: dict[str, dict[str, Any]] = {}
    for url, repository in results:
        if repository is not None:
            collected[url] = repository

    store_cached_data(cache, CACHE_KEY_GITHUB, {**cached, **collected})
    logger.info("Collected GitHub data for %d/%d repositories", len(collected), len(urls))
    return collected


class _RequestFailed(Exception):
    """Internal signal: a request for one repository failed (non fatal)."""


async def fetch_repository(
    client: ExternalAPIClient,
    session: aiohttp.ClientSession,
    limiter: AsyncLimiter,
    token_pool: Iterator[str],
    repo_url: str,
) -> dict[str, Any] | None:
    """Fetch one repository, returning ``None`` on non-fatal failures.

    Raises
    ------
    ExternalServiceError
        If a token is rejected (HTTP 401).
    """
    match = GITHUB_REPO_URL.match(repo_url)
    if match is None:
        return None
    endpoint = f"{GITHUB_API_URL}/repos/{match['owner']}/{match['repo']}"

    async def get(path: str, params: dict[str, str] | None = None,
                  allowed: tuple[int, ...] = ()) -> tuple[Any, dict[str, Any]]:
        headers = {
            "Authorization": f"Bearer {next(token_pool)}",
            "Accept": "application/vnd.github+json",
        }
        async with limiter:
            ok, data, meta = await client.get_json(
                session, endpoint + path, headers=headers, params=params
            )
        if ok:
            return data, meta
        status = meta.get("status_code")
        if status == 401:
            raise ExternalServiceError(
                "GitHub rejected the token",
                context={"status_code": status},
                transient=False,
            )
        if status in allowed:
            return None, meta
        raise _RequestFailed(meta)

    try:
        repo, _ = await get("")
        languages, _ = await get("/languages")
        # An empty repository answers 409 to the commits listing.
        commits, _ = await get("/commits", {"per_page": "1"}, allowed=(409,))
        contributors, contributors_meta = await get(
            "/contributors", {"per_page": "1", "anon": "true"}, allowed=(204,)
        )
    except _RequestFailed as failure:
        logger.error("Error collecting GitHub data for %s: %s", repo_url, failure.args[0])
        return None

    return {
        "url": repo_url,
        "description": repo.get("description"),
        "homepage_url": repo.get("homepage") or None,
        "stars": repo.get("stargazers_count", 0),
        "forks": repo.get("forks_count", 0),
        "open_issues": repo.get("open_issues_count", 0),
        "topics": repo.get("topics") or [],
        "license": (repo.get("license") or {}).get("spdx_id"),
        "default_branch": repo.get("default_branch"),
        "created_at": repo.get("created_at"),
        "languages": languages if isinstance(languages, dict) else {},
        "latest_commit": parse_latest_commit(commits),
        "contributors": {
            "count": count_contributors(contributors, contributors_meta.get("link", "")),
            "url": f"{repo_url.rstrip('/')}/graphs/contributors",
        },
        "generated_at": utc_now_iso(),
    }


def parse_latest_commit(commits: Any) -> dict[str, Any] | None:
    """Return the date and URL of the first commit in a commits listing."""
    if not isinstance(commits, list) or not commits:
        return None
    commit = commits[0]
    committer = (commit.get("commit") or {}).get("committer") or {}
    return {"ts": committer.get("date"), "url": commit.get("html_url")}


def count_contributors(contributors: Any, link_header: str) -> int:
    """Count contributors from a one-per-page listing.

    With ``per_page=1`` the number of the last page advertised in the
    ``Link`` header is the number of contributors.

    >>> count_contributors([{}], '<https://x/contributors?per_page=1&page=42>; rel="last"')
    42
    >>> count_contributors([{}], "")
    1
    """
    match = LAST_PAGE_LINK.search(link_header or "")
    if match:
        page = parse_qs(urlparse(match.group(1)).query).get("page")
        if page and page[0].isdigit():
            return int(page[0])
    if isinstance(contributors, list):
        return len(contributors)
    return 0
