"""Website Generator Pipeline Module.

Summary
-------
Provides the import surface of the website generation stage: turning the
enriched landscape entity set into the datasets, rendering the index page
and copying the web application assets to the output directory.

References
----------
- See ``data_aggregator.py`` for the ``base``/``full`` datasets and the CSV export.
- See ``renderer.py`` for the index page rendering.
- See ``assets.py`` for the web asset bundle access.
"""

from .assets import WebAssets, check_web_assets, copy_web_assets
from .data_aggregator import Datasets, items_dataframe, write_datasets
from .renderer import render_index

__all__ = [
    "Datasets",
    "WebAssets",
    "check_web_assets",
    "copy_web_assets",
    "items_dataframe",
    "render_index",
    "write_datasets",
]
