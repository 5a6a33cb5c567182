"""Loaders for the landscape build inputs.

Exports the source descriptors and the data and settings loaders consumed
by the build orchestrator.
"""

from __future__ import annotations

from .data import Category, Item, LandscapeData, Repository, get_landscape_data
from .settings import (
    FeaturedItemOption,
    FeaturedItemRule,
    LandscapeSettings,
    get_landscape_settings,
)
from .sources import DocumentSource, LogosSource, fetch_bytes

__all__ = [
    "Category",
    "DocumentSource",
    "FeaturedItemOption",
    "FeaturedItemRule",
    "Item",
    "LandscapeData",
    "LandscapeSettings",
    "LogosSource",
    "Repository",
    "fetch_bytes",
    "get_landscape_data",
    "get_landscape_settings",
]
