"""Tests for reading the collectors' credentials."""

from landscape.pipeline.builder import Credentials, read_credentials


def test_github_tokens_split_in_order():
    creds = read_credentials({"GITHUB_TOKENS": "t1,t2,t3"})
    assert creds.github_tokens == ["t1", "t2", "t3"]


def test_unset_variables_give_none():
    assert read_credentials({}) == Credentials(crunchbase_api_key=None, github_tokens=None)


def test_empty_segments_are_dropped():
    assert read_credentials({"GITHUB_TOKENS": "t1,,t2,"}).github_tokens == ["t1", "t2"]
    assert read_credentials({"GITHUB_TOKENS": ""}).github_tokens is None


def test_read_from_process_environment(monkeypatch):
    monkeypatch.setenv("CRUNCHBASE_API_KEY", "cb-key")
    monkeypatch.setenv("GITHUB_TOKENS", "gh")
    creds = read_credentials()
    assert creds.crunchbase_api_key == "cb-key"
    assert creds.github_tokens == ["gh"]
