"""Tests for the external API client retry, rate limit and error branches."""

import asyncio
import json
from types import SimpleNamespace

import aiohttp
import pytest

from landscape.pipeline.collectors.client import ExternalAPIClient


class FakeResponse:
    def __init__(self, status: int, text: str = "", headers=None):
        self.status = status
        self._text = text
        self.headers = headers or {}

    async def text(self):
        return self._text

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


class FakeSession:
    def __init__(self, responses):
        self._responses = iter(responses)
        self.calls = []

    def get(self, url, **kwargs):
        self.calls.append((url, kwargs))
        item = next(self._responses)
        if isinstance(item, BaseException):
            raise item
        return item


def make_client(max_retries: int = 1) -> ExternalAPIClient:
    return ExternalAPIClient(
        SimpleNamespace(
            request_timeout=5,
            max_retries=max_retries,
            backoff_factor=2.0,
            retry_sleep_on_429=3,
        )
    )


@pytest.fixture
def slept(monkeypatch):
    calls = []

    async def fake_sleep(t):
        calls.append(t)

    monkeypatch.setattr(asyncio, "sleep", fake_sleep)
    return calls


@pytest.mark.asyncio
async def test_get_json_success_returns_link_header(slept):
    session = FakeSession(
        [FakeResponse(200, json.dumps({"a": 1}), headers={"Link": '<x>; rel="last"'})]
    )
    ok, data, meta = await make_client().get_json(
        session, "https://api/x", headers={"H": "v"}, params={"p": "1"}
    )
    assert ok is True and data == {"a": 1}
    assert meta == {"status_code": 200, "link": '<x>; rel="last"'}
    assert session.calls[0][1]["headers"] == {"H": "v"}
    assert slept == []


@pytest.mark.asyncio
async def test_get_json_invalid_json(slept):
    ok, data, meta = await make_client().get_json(
        FakeSession([FakeResponse(200, "not json")]), "https://api/x"
    )
    assert ok is False and data is None
    assert meta["error_type"] == "InvalidJSON"


@pytest.mark.asyncio
async def test_get_json_rate_limited_then_success(slept):
    session = FakeSession([FakeResponse(429, "slow down"), FakeResponse(200, "[]")])
    ok, data, _ = await make_client().get_json(session, "https://api/x")
    assert ok is True and data == []
    assert slept == [3]


@pytest.mark.asyncio
async def test_get_json_github_quota_exhausted(slept):
    limited = FakeResponse(403, "quota", headers={"X-RateLimit-Remaining": "0"})
    session = FakeSession([limited, limited])
    ok, _, meta = await make_client().get_json(session, "https://api/x")
    assert ok is False
    assert meta == {"error_type": "RateLimited", "status_code": 403}


@pytest.mark.asyncio
async def test_get_json_server_error_retried(slept):
    session = FakeSession([FakeResponse(502, "bad"), FakeResponse(503, "bad")])
    ok, _, meta = await make_client().get_json(session, "https://api/x")
    assert ok is False
    assert meta["error_type"] == "HTTPError" and meta["status_code"] == 503
    assert slept == [1.0]


@pytest.mark.asyncio
async def test_get_json_client_error_not_retried(slept):
    session = FakeSession([FakeResponse(401, "denied")])
    ok, _, meta = await make_client().get_json(session, "https://api/x")
    assert ok is False and meta["status_code"] == 401
    assert len(session.calls) == 1


@pytest.mark.asyncio
async def test_get_json_network_errors(slept):
    session = FakeSession(
        [aiohttp.ClientConnectionError("down"), aiohttp.ClientConnectionError("down")]
    )
    ok, _, meta = await make_client().get_json(session, "https://api/x")
    assert ok is False and meta["error_type"] == "ClientError"

    session = FakeSession([TimeoutError()])
    ok, _, meta = await make_client(max_retries=0).get_json(session, "https://api/x")
    assert ok is False and meta == {"error_type": "TimeoutError"}
