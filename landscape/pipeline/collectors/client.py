"""collectors.client module.

This module defines the `ExternalAPIClient` class, the resilient asynchronous
networking boundary for all the JSON API requests made by the external data
collectors (Crunchbase, GitHub). Its strict focus is on sending GET requests,
handling transient network failures, rate limits and retries, and returning
parsed or error-enriched responses.

All retries, backoff, and timeout logic are performed per configuration
values provided via the `config` object. The client never performs file I/O
or business logic and does not raise for HTTP or network failures: it always
returns a structured tuple describing the result, so that the calling
collector can decide whether a failure is local to one entity or fatal for
the whole collection.

Examples
--------
>>> import aiohttp
>>> from types import SimpleNamespace
>>> from landscape.pipeline.collectors.client import ExternalAPIClient
>>> client = ExternalAPIClient(SimpleNamespace(max_retries=2, backoff_factor=0.1))
>>> async def main():
...     async with aiohttp.ClientSession() as session:
...         ok, data, meta = await client.get_json(session, "https://api.github.com/zen")
>>> # To actually run:
>>> # import asyncio; asyncio.run(main())

Notes
-----
- Rate limiting (requests per minute) is applied by the collectors with
  `aiolimiter`; the client only reacts to rate limit responses.
- The error return pattern is relied upon by the collectors; unexpected
  exceptions (programming errors) are not caught.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Awaitable, Iterable, Mapping
from typing import Any, TypeVar

import aiohttp

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ExternalAPIClient:
    r"""Asynchronous client for GET requests against a JSON API.

    Attributes
    ----------
    config : Any
        The configuration object (e.g., `CollectorConfig`) providing retry
        limits, backoff and timeouts. Accessed via getattr so tests can pass
        lightweight namespaces.
    """

    def __init__(self, config: Any) -> None:
        self.config = config

    async def get_json(
        self,
        session: aiohttp.ClientSession,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, str] | None = None,
    ) -> tuple[bool, Any, dict[str, Any]]:
        r"""Send a GET request and return the decoded JSON body or error details.

        It handles:
          * Network issues (retries on aiohttp.ClientError and TimeoutError,
            up to config.max_retries)
          * Invalid JSON bodies (not retried)
          * HTTP 429 and GitHub's exhausted-quota 403 (sleep-and-retry)
          * Server errors (5xx, retried with exponential backoff)
          * Other client errors (4xx, not retried)

        Parameters
        ----------
        session : aiohttp.ClientSession
            The aiohttp session for HTTP requests. Used and not closed by
            this method.
        url : str
            Endpoint to request.
        headers : Mapping[str, str] | None, optional
            Extra request headers (authentication, accept).
        params : Mapping[str, str] | None, optional
            Query string parameters.

        Returns
        -------
        tuple[bool, Any, dict[str, Any]]
            Tuple of three elements:
              - ok : bool
                  True if a JSON body was decoded from a 200 response.
              - data : Any
                  The decoded JSON body, or None on failure.
              - meta : dict
                  On success ``{"status_code": 200, "link": <Link header>}``;
                  on failure a dict with ``error_type`` and, when a response
                  was received, ``status_code``.

        Examples
        --------
        >>> # ok, data, meta = await client.get_json(session, url)
        >>> # if not ok and meta.get("status_code") == 401: ...
        """
        max_retries = getattr(self.config, "max_retries", 3)
        backoff = getattr(self.config, "backoff_factor", 2.0)
        timeout = aiohttp.ClientTimeout(
            total=getattr(self.config, "request_timeout", 30)
        )

        for attempt in range(max_retries + 1):
            try:
                async with session.get(
                    url, headers=headers, params=params, timeout=timeout
                ) as response:
                    status = response.status
                    text = await response.text()
                    response_headers = getattr(response, "headers", None) or {}

                    if status == 200:
                        try:
                            data = json.loads(text)
                        except json.JSONDecodeError:
                            return (
                                False,
                                None,
                                {
                                    "error_type": "InvalidJSON",
                                    "status_code": status,
                                    "raw_response_text": text,
                                },
                            )
                        return (
                            True,
                            data,
                            {
                                "status_code": status,
                                "link": response_headers.get("Link", ""),
                            },
                        )

                    if _is_rate_limited(status, response_headers):
                        if attempt < max_retries:
                            logger.warning(
                                "Rate limited by %s (status %d), retrying", url, status
                            )
                            await asyncio.sleep(
                                getattr(self.config, "retry_sleep_on_429", 60)
                                * (attempt + 1)
                            )
                            continue
                        return (
                            False,
                            None,
                            {"error_type": "RateLimited", "status_code": status},
                        )

                    if status >= 500 and attempt < max_retries:
                        await asyncio.sleep(backoff**attempt)
                        continue
                    return (
                        False,
                        None,
                        {
                            "error_type": "HTTPError",
                            "status_code": status,
                            "error_body": text,
                        },
                    )

            except aiohttp.ClientError as e:
                if attempt < max_retries:
                    await asyncio.sleep(backoff**attempt)
                    continue
                return False, None, {"error_type": "ClientError", "message": str(e)}
            except TimeoutError:
                if attempt < max_retries:
                    await asyncio.sleep(backoff**attempt)
                    continue
                return False, None, {"error_type": "TimeoutError"}

        return False, None, {"error_type": "RetryExhausted"}


def _is_rate_limited(status: int, headers: Mapping[str, str]) -> bool:
    if status == 429:
        return True
    return status == 403 and headers.get("X-RateLimit-Remaining") == "0"


async def gather_fail_fast(aws: Iterable[Awaitable[T]]) -> list[T]:
    """Await all of ``aws`` and return their results in order.

    Unlike ``asyncio.gather``, the first exception cancels the requests still
    in flight (waiting for them to unwind) and is raised right away.
    """
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    if not tasks:
        return []
    try:
        done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
    except asyncio.CancelledError:
        await _cancel(tasks)
        raise
    await _cancel(pending)
    for task in tasks:
        if task in done and not task.cancelled() and task.exception() is not None:
            raise task.exception()
    return [task.result() for task in tasks]


async def _cancel(tasks: Iterable[asyncio.Future]) -> None:
    tasks = list(tasks)
    for task in tasks:
        task.cancel()
    if tasks:
        await asyncio.gather(*tasks, return_exceptions=True)
