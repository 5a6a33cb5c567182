"""Input sources for the landscape build.

Every input document (landscape data, settings) and the logos collection can
be provided either from the local filesystem or from a remote URL. This
module holds the small value types describing those sources and the helper
used to fetch remote content with the build's shared ``aiohttp`` session.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

import aiohttp

from landscape.exceptions import ConfigurationError, ExternalServiceError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DocumentSource:
    """Location of a YAML document: a local file or a URL (exactly one)."""

    file: Path | None = None
    url: str | None = None

    def __post_init__(self) -> None:
        if (self.file is None) == (self.url is None):
            raise ConfigurationError(
                "A source must provide exactly one of a file or a url",
                context={"file": str(self.file), "url": self.url},
            )

    def describe(self) -> str:
        """Return a short human-readable description of the source."""
        return str(self.file) if self.file is not None else str(self.url)

    async def read_text(self, session: aiohttp.ClientSession) -> str:
        """Read the document content from the file or the URL.

        Raises
        ------
        ExternalServiceError
            If the document cannot be read or fetched.
        """
        if self.file is not None:
            try:
                return Path(self.file).read_text(encoding="utf-8")
            except OSError as error:
                raise ExternalServiceError(
                    f"Cannot read {self.file}: {error}",
                    context={"file": str(self.file)},
                    transient=False,
                ) from error
        data = await fetch_bytes(session, str(self.url))
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as error:
            raise ExternalServiceError(
                f"{self.url} is not UTF-8 encoded",
                context={"url": self.url},
                transient=False,
            ) from error


@dataclass(frozen=True)
class LogosSource:
    """Location of the logos collection: a local directory or a base URL."""

    path: Path | None = None
    url: str | None = None

    def __post_init__(self) -> None:
        if (self.path is None) == (self.url is None):
            raise ConfigurationError(
                "A logos source must provide exactly one of a path or a url",
                context={"path": str(self.path), "url": self.url},
            )


async def fetch_bytes(session: aiohttp.ClientSession, url: str) -> bytes:
    """GET ``url`` and return the response body.

    Parameters
    ----------
    session : aiohttp.ClientSession
        Shared HTTP session of the build.
    url : str
        Remote location to fetch.

    Returns
    -------
    bytes
        Raw response body.

    Raises
    ------
    ExternalServiceError
        On network failures or any non-200 response status.
    """
    logger.debug("Fetching %s", url)
    try:
        async with session.get(url) as response:
            if response.status != 200:
                raise ExternalServiceError(
                    f"Unexpected status {response.status} fetching {url}",
                    context={"url": url, "status_code": response.status},
                    transient=response.status >= 500,
                )
            return await response.read()
    except aiohttp.ClientError as error:
        raise ExternalServiceError(
            f"Error fetching {url}: {error}", context={"url": url}
        ) from error
    except TimeoutError as error:
        raise ExternalServiceError(
            f"Timeout fetching {url}", context={"url": url}
        ) from error
