"""data_aggregator.py: Module for aggregating the landscape entity set into the website datasets.

This module forms the data-oriented component of the website generation
pipeline. Its responsibility is to turn the fully enriched ``LandscapeData``
(items with prepared logos, featured and member information, and the data
collected from Crunchbase and GitHub) into the datasets consumed by the web
application, and to write them to the output directory.

Datasets
--------
- ``base``: the landscape identity plus the lightweight view of every item,
  enough to draw the landscape grid. Embedded in ``index.html``.
- ``full``: every item with all its details, plus the collected external
  data keyed by Crunchbase URL and repository URL.
- ``items.csv``: a flat export of the items, generated with pandas.

Usage
-----
>>> datasets = Datasets.new(settings, landscape_data, crunchbase_data, github_data)
>>> write_datasets(datasets, landscape_data, Path("build/data"))
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pandas as pd

from landscape.config import (
    BASE_DATASET_FILENAME,
    FULL_DATASET_FILENAME,
    ITEMS_EXPORT_FILENAME,
)
from landscape.pipeline.loaders.data import Item, LandscapeData
from landscape.pipeline.loaders.settings import LandscapeSettings

logger = logging.getLogger(__name__)

ITEMS_EXPORT_COLUMNS = [
    "id",
    "name",
    "category",
    "subcategory",
    "homepage_url",
    "logo",
    "maturity",
    "member_subcategory",
    "crunchbase_url",
    "repository_url",
    "stars",
    "city",
    "country",
    "funding",
]


@dataclass
class Datasets:
    """The datasets generated for the website."""

    base: dict[str, Any]
    full: dict[str, Any]

    @classmethod
    def new(
        cls,
        settings: LandscapeSettings,
        landscape_data: LandscapeData,
        crunchbase_data: dict[str, dict[str, Any]],
        github_data: dict[str, dict[str, Any]],
    ) -> Datasets:
        """Build the datasets from the enriched entity set.

        Parameters
        ----------
        settings : LandscapeSettings
            Landscape identity (foundation, url, members category).
        landscape_data : LandscapeData
            Entity set after all the enrichment stages, items in order.
        crunchbase_data : dict[str, dict[str, Any]]
            Organizations keyed by Crunchbase URL.
        github_data : dict[str, dict[str, Any]]
            Repositories keyed by repository URL.

        Returns
        -------
        Datasets
            The ``base`` and ``full`` datasets, items in entity-set order.
        """
        base = {
            "foundation": settings.foundation,
            "url": settings.url,
            "members_category": settings.members_category,
            "categories": [
                {"name": c.name, "subcategories": list(c.subcategories)}
                for c in landscape_data.categories
            ],
            "items": [base_item(item) for item in landscape_data.items],
        }
        full = {
            "crunchbase_data": crunchbase_data,
            "github_data": github_data,
            "items": [full_item(item) for item in landscape_data.items],
        }
        return cls(base=base, full=full)


def base_item(item: Item) -> dict[str, Any]:
    """Return the lightweight view of an item."""
    return {
        "id": item.id,
        "name": item.name,
        "category": item.category,
        "subcategory": item.subcategory,
        "logo": item.logo,
        "featured": item.featured,
        "maturity": item.maturity,
        "member_subcategory": item.member_subcategory,
    }


def full_item(item: Item) -> dict[str, Any]:
    """Return every detail of an item, including the collected data."""
    return {
        **base_item(item),
        "homepage_url": item.homepage_url,
        "description": item.description,
        "crunchbase_url": item.crunchbase_url,
        "crunchbase_data": item.crunchbase_data,
        "twitter_url": item.twitter_url,
        "repositories": [
            {"url": repo.url, "primary": repo.primary, "github_data": repo.github_data}
            for repo in item.repositories
        ],
    }


def items_dataframe(landscape_data: LandscapeData) -> pd.DataFrame:
    """Flatten the items into a DataFrame with ``ITEMS_EXPORT_COLUMNS``.

    Examples
    --------
    >>> df = items_dataframe(LandscapeData())
    >>> list(df.columns) == ITEMS_EXPORT_COLUMNS and df.empty
    True
    """
    rows = []
    for item in landscape_data.items:
        repo = item.primary_repository()
        github = (repo.github_data if repo else None) or {}
        crunchbase = item.crunchbase_data or {}
        rows.append(
            {
                "id": item.id,
                "name": item.name,
                "category": item.category,
                "subcategory": item.subcategory,
                "homepage_url": item.homepage_url,
                "logo": item.logo,
                "maturity": item.maturity,
                "member_subcategory": item.member_subcategory,
                "crunchbase_url": item.crunchbase_url,
                "repository_url": repo.url if repo else None,
                "stars": github.get("stars"),
                "city": crunchbase.get("city"),
                "country": crunchbase.get("country"),
                "funding": crunchbase.get("funding"),
            }
        )
    return pd.DataFrame(rows, columns=ITEMS_EXPORT_COLUMNS)


def write_datasets(
    datasets: Datasets, landscape_data: LandscapeData, data_dir: Path
) -> None:
    """Write ``base.json``, ``full.json`` and ``items.csv`` into ``data_dir``.

    Raises
    ------
    OSError
        If a file cannot be written.
    TypeError, ValueError
        If a dataset cannot be serialized.
    """
    for filename, dataset in (
        (BASE_DATASET_FILENAME, datasets.base),
        (FULL_DATASET_FILENAME, datasets.full),
    ):
        payload = json.dumps(dataset, ensure_ascii=False)
        (data_dir / filename).write_text(payload, encoding="utf-8")
    items_dataframe(landscape_data).to_csv(data_dir / ITEMS_EXPORT_FILENAME, index=False)
    logger.debug("Datasets written to %s", data_dir)
