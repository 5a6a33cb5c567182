"""External data collectors (Crunchbase and GitHub)."""

from __future__ import annotations

from .client import ExternalAPIClient
from .config import CollectorConfig
from .crunchbase import collect_crunchbase_data
from .github import collect_github_data

__all__ = [
    "CollectorConfig",
    "ExternalAPIClient",
    "collect_crunchbase_data",
    "collect_github_data",
]
