"""Credentials used to collect data from external services."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from landscape.config import CRUNCHBASE_API_KEY, GITHUB_TOKENS


@dataclass(frozen=True)
class Credentials:
    """API credentials for the external data collectors.

    Attributes
    ----------
    crunchbase_api_key : str | None
        Crunchbase API key, if available.
    github_tokens : list[str] | None
        GitHub tokens in the order they were provided, if any.
    """

    crunchbase_api_key: str | None = None
    github_tokens: list[str] | None = None


def read_credentials(environ: Mapping[str, str] | None = None) -> Credentials:
    """Read the collectors' credentials from the environment.

    ``GITHUB_TOKENS`` holds a comma separated list of tokens; empty segments
    are ignored. Unset (or empty) variables yield ``None``.

    Examples
    --------
    >>> read_credentials({"GITHUB_TOKENS": "t1,t2,t3"}).github_tokens
    ['t1', 't2', 't3']
    >>> read_credentials({}).github_tokens is None
    True
    """
    environ = os.environ if environ is None else environ
    api_key = environ.get(CRUNCHBASE_API_KEY) or None
    tokens = [t for t in (environ.get(GITHUB_TOKENS) or "").split(",") if t]
    return Credentials(crunchbase_api_key=api_key, github_tokens=tokens or None)
