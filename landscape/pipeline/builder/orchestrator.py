"""Landscape website build orchestration.

This module sequences the stages of a build, from the input sources to the
output tree:

1. check the web application assets are present;
2. set up the output directory (``data/`` and ``logos/`` inside it);
3. open the cache;
4. load the landscape data and settings;
5. apply the settings (featured items, member subcategories);
6. prepare the logos, with bounded concurrency, and write them to ``logos/``;
7. collect data from Crunchbase and GitHub in parallel;
8. merge the collected data, write the datasets, render ``index.html`` and
   copy the web assets.

Every stage except the logos one is fatal: its first error aborts the build
and is raised to the caller as an ``AppError``. A logo that cannot be
prepared only leaves its item without a logo.

Examples
--------
>>> import asyncio
>>> from pathlib import Path
>>> from landscape.pipeline.builder.orchestrator import BuildArgs, build
>>> from landscape.pipeline.loaders import DocumentSource, LogosSource
>>> args = BuildArgs(
...     data_source=DocumentSource(file=Path("landscape.yml")),
...     settings_source=DocumentSource(file=Path("settings.yml")),
...     logos_source=LogosSource(path=Path("hosted_logos")),
...     cache_dir=Path(".cache"),
...     output_dir=Path("build"),
... )
>>> # asyncio.run(build(args))
"""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import aiohttp

from landscape.cache import Cache, write_atomic
from landscape.config import (
    DATASETS_PATH,
    INDEX_FILENAME,
    LOGOS_PATH,
    PREPARE_LOGOS_MAX_CONCURRENCY,
)
from landscape.exceptions import BuildError
from landscape.pipeline.collectors import (
    CollectorConfig,
    collect_crunchbase_data,
    collect_github_data,
)
from landscape.pipeline.loaders import (
    DocumentSource,
    LandscapeData,
    LandscapeSettings,
    LogosSource,
    get_landscape_data,
    get_landscape_settings,
)
from landscape.pipeline.logos import prepare_logo
from landscape.pipeline.website_generator import (
    Datasets,
    WebAssets,
    check_web_assets,
    copy_web_assets,
    render_index,
    write_datasets,
)

from .credentials import Credentials, read_credentials
from .joiner import join_first_error
from .mapper import bounded_map

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BuildArgs:
    """Inputs of a build."""

    data_source: DocumentSource
    settings_source: DocumentSource
    logos_source: LogosSource
    cache_dir: Path
    output_dir: Path


async def build(
    args: BuildArgs,
    *,
    credentials: Credentials | None = None,
    assets: WebAssets | None = None,
    config: Any | None = None,
) -> None:
    """Build the landscape website into ``args.output_dir``.

    Parameters
    ----------
    args : BuildArgs
        Input sources, cache directory and output directory.
    credentials : Credentials | None, optional
        Collectors' credentials; read from the environment when omitted.
    assets : WebAssets | None, optional
        Web application bundle; the packaged one when omitted.
    config : Any | None, optional
        Collector configuration; a ``CollectorConfig`` when omitted.

    Raises
    ------
    AppError
        The first fatal error of any stage (``AssetsNotFoundError``,
        ``BuildError``, ``DataValidationError``, ``ConfigurationError``,
        ``ExternalServiceError``).
    """
    logger.info("Building landscape website...")
    start = time.perf_counter()
    assets = assets or WebAssets()
    config = config or CollectorConfig()

    check_web_assets(assets)
    setup_output_dir(args.output_dir)
    try:
        cache = Cache(args.cache_dir)
    except OSError as error:
        raise BuildError(
            f"Cannot set up cache directory: {error}",
            context={"cache_dir": str(args.cache_dir)},
        ) from error

    async with aiohttp.ClientSession() as session:
        landscape_data = await get_landscape_data(args.data_source, session)
        settings = await get_landscape_settings(args.settings_source, session)

        landscape_data.add_featured_items_data(settings)
        landscape_data.add_member_subcategory(settings.members_category)

        await prepare_logos(cache, session, args.logos_source, landscape_data, args.output_dir)

        if credentials is None:
            credentials = read_credentials()
        try:
            crunchbase_data, github_data = await join_first_error(
                collect_crunchbase_data(
                    cache, credentials.crunchbase_api_key, landscape_data, session, config
                ),
                collect_github_data(
                    cache, credentials.github_tokens, landscape_data, session, config
                ),
            )
        except OSError as error:
            raise BuildError(f"Cache I/O failed while collecting data: {error}") from error

    landscape_data.add_crunchbase_data(crunchbase_data)
    landscape_data.add_github_data(github_data)
    try:
        datasets = generate_datasets(
            landscape_data, settings, crunchbase_data, github_data, args.output_dir
        )
        write_index(datasets, assets, args.output_dir)
        copy_web_assets(assets, args.output_dir)
    except (OSError, TypeError, ValueError) as error:
        raise BuildError(
            f"Cannot write website: {error}",
            context={"output_dir": str(args.output_dir)},
        ) from error

    logger.info(
        "Landscape website built! (took: %.3fs)", time.perf_counter() - start
    )


def setup_output_dir(output_dir: Path) -> None:
    """Create the output directory and its ``data`` and ``logos`` directories.

    Existing directories and their content are left untouched.

    Raises
    ------
    BuildError
        If a directory cannot be created.
    """
    try:
        for path in (output_dir, output_dir / DATASETS_PATH, output_dir / LOGOS_PATH):
            if not path.exists():
                logger.debug("Creating %s", path)
            path.mkdir(parents=True, exist_ok=True)
    except OSError as error:
        raise BuildError(
            f"Cannot set up output directory: {error}",
            context={"output_dir": str(output_dir)},
        ) from error


def compute_concurrency() -> int:
    """Return how many logos can be prepared concurrently.

    The CPUs available to this process (its affinity mask where the platform
    exposes one) are capped at ``PREPARE_LOGOS_MAX_CONCURRENCY``.
    """
    if hasattr(os, "sched_getaffinity"):
        available = len(os.sched_getaffinity(0))
    else:
        available = os.cpu_count() or 1
    return min(max(available, 1), PREPARE_LOGOS_MAX_CONCURRENCY)


async def prepare_logos(
    cache: Cache,
    session: aiohttp.ClientSession,
    logos_source: LogosSource,
    landscape_data: LandscapeData,
    output_dir: Path,
) -> None:
    """Prepare the items' logos and write them to the output directory.

    Each logo is written as ``logos/<digest>.svg`` and the item's ``logo``
    becomes that relative path. Items whose logo cannot be prepared or
    written end with an empty ``logo``. Items are only updated once every
    logo has been processed.
    """
    logger.debug("Preparing logos")
    logos_dir = output_dir / LOGOS_PATH

    async def prepare(item: Any) -> str:
        logo = await prepare_logo(cache, session, logos_source, item.logo)
        file_name = f"{logo.digest}.svg"
        write_atomic(logos_dir / file_name, logo.svg_data)
        return f"{LOGOS_PATH}/{file_name}"

    logos = await bounded_map(landscape_data.items, prepare, compute_concurrency())

    degraded = []
    for item in landscape_data.items:
        logo = logos.get(item.id)
        if logo is None:
            degraded.append(item.name)
        item.logo = logo or ""
    if degraded:
        logger.warning(
            "%d item(s) have no logo: %s", len(degraded), ", ".join(degraded)
        )


def generate_datasets(
    landscape_data: LandscapeData,
    settings: LandscapeSettings,
    crunchbase_data: dict[str, dict[str, Any]],
    github_data: dict[str, dict[str, Any]],
    output_dir: Path,
) -> Datasets:
    """Generate the datasets and write them to the output ``data`` directory."""
    logger.debug("Generating datasets")
    datasets = Datasets.new(settings, landscape_data, crunchbase_data, github_data)
    write_datasets(datasets, landscape_data, output_dir / DATASETS_PATH)
    return datasets


def write_index(datasets: Datasets, assets: WebAssets, output_dir: Path) -> None:
    """Render ``index.html`` from the bundle template into the output directory."""
    logger.debug("Rendering %s", INDEX_FILENAME)
    index = render_index(datasets, assets.index_template())
    (output_dir / INDEX_FILENAME).write_text(index, encoding="utf-8")
