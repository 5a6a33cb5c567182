"""Logo resolution for landscape items.

Given the logo reference of an item and the logos source of the build, this
module reads (or fetches) the SVG document, checks it really is an SVG,
normalizes it and computes the SHA-256 digest used as the logo's output
file name. Identical logos therefore end up in a single output file.

Remote logos are cached by URL in the shared ``Cache`` so repeated builds
do not download them again.

Examples
--------
>>> from landscape.pipeline.logos.resolver import normalize_svg
>>> normalize_svg(b'<?xml version="1.0"?>\\n<svg xmlns="http://www.w3.org/2000/svg"/>\\n')
b'<svg xmlns="http://www.w3.org/2000/svg"/>'
"""

from __future__ import annotations

import hashlib
import logging
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from pathlib import Path

import aiohttp

from landscape.cache import Cache
from landscape.config import CACHE_KEY_LOGOS_PREFIX
from landscape.exceptions import ExternalServiceError, LogoError
from landscape.pipeline.loaders.sources import LogosSource, fetch_bytes

logger = logging.getLogger(__name__)

_PROLOG_PATTERN = re.compile(
    r"^(?:\s*(?:<\?xml.*?\?>|<!--(?:(?!-->).)*-->|<!DOCTYPE[^>]*>))*\s*", re.DOTALL
)
_EPILOG_PATTERN = re.compile(r"(?:\s*<!--(?:(?!-->).)*-->)*\s*$", re.DOTALL)


@dataclass(frozen=True)
class LogoArtifact:
    """A prepared logo: normalized SVG bytes and their SHA-256 hex digest."""

    digest: str
    svg_data: bytes


async def prepare_logo(
    cache: Cache,
    session: aiohttp.ClientSession,
    logos_source: LogosSource,
    file_name: str,
) -> LogoArtifact:
    """Read, validate and normalize an item's logo.

    Parameters
    ----------
    cache : Cache
        Shared cache; used for remote logos only.
    session : aiohttp.ClientSession
        Shared HTTP session of the build.
    logos_source : LogosSource
        Local directory or base URL holding the logos.
    file_name : str
        Logo reference of the item, relative to the logos source.

    Returns
    -------
    LogoArtifact
        Normalized SVG data and its digest.

    Raises
    ------
    LogoError
        If no logo is referenced, it cannot be read or fetched, or it is not
        a valid SVG document.
    """
    if not file_name:
        raise LogoError("Logo not provided")
    if logos_source.path is not None:
        raw = _read_local_logo(Path(logos_source.path), file_name)
    else:
        raw = await _fetch_remote_logo(cache, session, str(logos_source.url), file_name)
    svg_data = normalize_svg(raw)
    return LogoArtifact(digest=hashlib.sha256(svg_data).hexdigest(), svg_data=svg_data)


def normalize_svg(raw: bytes) -> bytes:
    """Return the normalized form of an SVG document.

    The XML declaration, doctype and comments around the root element and
    any surrounding whitespace are removed; the root element is kept as is.

    Raises
    ------
    LogoError
        If the data is not UTF-8 or its root element is not ``<svg>``.
    """
    try:
        text = raw.decode("utf-8-sig")
    except UnicodeDecodeError as error:
        raise LogoError("Logo is not UTF-8 encoded") from error
    try:
        root = ET.fromstring(text.strip())
    except ET.ParseError as error:
        raise LogoError(f"Logo is not a valid XML document: {error}") from error
    if root.tag.rsplit("}", 1)[-1] != "svg":
        raise LogoError(f"Logo root element is not svg: {root.tag}")
    text = _PROLOG_PATTERN.sub("", text, count=1)
    text = _EPILOG_PATTERN.sub("", text, count=1)
    return text.encode("utf-8")


def _read_local_logo(logos_path: Path, file_name: str) -> bytes:
    base = logos_path.resolve()
    path = (base / file_name).resolve()
    if not path.is_relative_to(base):
        raise LogoError(f"Logo path escapes the logos directory: {file_name}")
    try:
        return path.read_bytes()
    except OSError as error:
        raise LogoError(f"Cannot read logo {path}: {error}") from error


async def _fetch_remote_logo(
    cache: Cache, session: aiohttp.ClientSession, base_url: str, file_name: str
) -> bytes:
    url = f"{base_url.rstrip('/')}/{file_name.lstrip('/')}"
    cache_key = f"{CACHE_KEY_LOGOS_PREFIX}/{hashlib.sha256(url.encode('utf-8')).hexdigest()}"
    cached = cache.get(cache_key)
    if cached is not None:
        return cached
    try:
        data = await fetch_bytes(session, url)
    except ExternalServiceError as error:
        raise LogoError(f"Cannot fetch logo {url}: {error.message}") from error
    cache.put(cache_key, data)
    return data
