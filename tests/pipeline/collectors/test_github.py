"""Tests for the GitHub collector."""

import json
from types import SimpleNamespace

import pytest

from landscape.cache import Cache
from landscape.config import CACHE_KEY_GITHUB, GITHUB_API_URL
from landscape.exceptions import ExternalServiceError
from landscape.pipeline.collectors import collect_github_data
from landscape.pipeline.collectors.github import count_contributors, parse_latest_commit
from landscape.pipeline.loaders import LandscapeData

REPO = "https://github.com/ansible/ansible"
API = f"{GITHUB_API_URL}/repos/ansible/ansible"

DATA = LandscapeData.from_yaml(
    f"""
landscape:
  - name: C
    subcategories:
      - name: S
        items:
          - name: A
            homepage_url: https://a
            logo: a.svg
            repo_url: {REPO}
            additional_repos:
              - repo_url: https://gitlab.com/a/b
"""
)

LAST_LINK = f'<{API}/contributors?per_page=1&anon=true&page=2>; rel="next", <{API}/contributors?per_page=1&anon=true&page=57>; rel="last"'


class FakeResponse:
    def __init__(self, status: int, body=None, headers=None):
        self.status = status
        self._text = json.dumps(body) if body is not None else ""
        self.headers = headers or {}

    async def text(self):
        return self._text

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


class FakeSession:
    def __init__(self, routes):
        self.routes = routes
        self.calls = []

    def get(self, url, headers=None, params=None, timeout=None):
        self.calls.append((url, headers))
        return self.routes[url]()


def make_config():
    return SimpleNamespace(
        request_timeout=5,
        max_retries=0,
        backoff_factor=1.0,
        retry_sleep_on_429=0,
        github_target_rpm=6000,
        max_concurrent_requests=4,
        cache_ttl_days=7,
    )


def ok_routes():
    return {
        API: lambda: FakeResponse(
            200,
            {
                "description": "Automation",
                "homepage": "",
                "stargazers_count": 5,
                "topics": ["ansible"],
                "license": {"spdx_id": "GPL-3.0"},
                "default_branch": "devel",
            },
        ),
        f"{API}/languages": lambda: FakeResponse(200, {"Python": 100}),
        f"{API}/commits": lambda: FakeResponse(
            200,
            [
                {
                    "html_url": f"{REPO}/commit/abc",
                    "commit": {"committer": {"date": "2024-05-01T00:00:00Z"}},
                }
            ],
        ),
        f"{API}/contributors": lambda: FakeResponse(
            200, [{"login": "x"}], headers={"Link": LAST_LINK}
        ),
    }


def test_count_contributors():
    assert count_contributors([{}], LAST_LINK) == 57
    assert count_contributors([{}, {}], "") == 2
    assert count_contributors(None, "") == 0


def test_parse_latest_commit():
    assert parse_latest_commit([]) is None
    commit = parse_latest_commit(
        [{"html_url": "u", "commit": {"committer": {"date": "d"}}}]
    )
    assert commit == {"ts": "d", "url": "u"}


@pytest.mark.asyncio
async def test_collect_repository(tmp_path):
    session = FakeSession(ok_routes())
    cache = Cache(tmp_path)
    data = await collect_github_data(cache, ["t1", "t2"], DATA, session, make_config())
    repo = data[REPO]
    assert list(data) == [REPO]
    assert repo["stars"] == 5 and repo["license"] == "GPL-3.0"
    assert repo["homepage_url"] is None
    assert repo["languages"] == {"Python": 100}
    assert repo["latest_commit"]["ts"] == "2024-05-01T00:00:00Z"
    assert repo["contributors"]["count"] == 57
    tokens = [headers["Authorization"] for _, headers in session.calls]
    assert tokens == ["Bearer t1", "Bearer t2", "Bearer t1", "Bearer t2"]
    assert REPO in json.loads(cache.get(CACHE_KEY_GITHUB))


@pytest.mark.asyncio
async def test_collect_empty_repository(tmp_path):
    routes = ok_routes()
    routes[f"{API}/commits"] = lambda: FakeResponse(409, {"message": "empty"})
    routes[f"{API}/contributors"] = lambda: FakeResponse(204)
    data = await collect_github_data(Cache(tmp_path), ["t"], DATA, FakeSession(routes), make_config())
    assert data[REPO]["latest_commit"] is None
    assert data[REPO]["contributors"]["count"] == 0


@pytest.mark.asyncio
async def test_collect_failure_falls_back_to_stale_cache(tmp_path):
    cache = Cache(tmp_path)
    stale = {"stars": 1, "generated_at": "2000-01-01T00:00:00+00:00"}
    cache.put(CACHE_KEY_GITHUB, json.dumps({REPO: stale}).encode())
    routes = ok_routes()
    routes[f"{API}/languages"] = lambda: FakeResponse(500, {})
    data = await collect_github_data(cache, ["t"], DATA, FakeSession(routes), make_config())
    assert data == {REPO: stale}


@pytest.mark.asyncio
async def test_collect_without_tokens(tmp_path):
    session = FakeSession({})
    assert await collect_github_data(Cache(tmp_path), None, DATA, session, make_config()) == {}
    assert session.calls == []


@pytest.mark.asyncio
async def test_collect_rejected_token_is_fatal(tmp_path):
    routes = {API: lambda: FakeResponse(401, {"message": "Bad credentials"})}
    with pytest.raises(ExternalServiceError):
        await collect_github_data(Cache(tmp_path), ["t"], DATA, FakeSession(routes), make_config())
