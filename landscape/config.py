"""Global configuration constants for the landscape builder.

Defines paths, environment variable names, output layout names and limits
used across the build pipeline and its collaborators.
"""

from __future__ import annotations

import os
from pathlib import Path

# Project directories
PACKAGE_ROOT: Path = Path(__file__).resolve().parent
PROJECT_ROOT: Path = PACKAGE_ROOT.parent
LOG_DIR: Path = Path.cwd() / "logs"

# Embedded web application bundle (index template and static assets)
WEB_ASSETS_DIR: Path = PACKAGE_ROOT / "web" / "dist"
WEB_ASSETS_REQUIRED_PREFIX: str = "assets/"
WEB_ASSETS_EXCLUDED: tuple[str, ...] = ("index.html", ".keep")
INDEX_TEMPLATE_NAME: str = "index.html"

# Output layout
DATASETS_PATH: str = "data"
LOGOS_PATH: str = "logos"
INDEX_FILENAME: str = "index.html"
BASE_DATASET_FILENAME: str = "base.json"
FULL_DATASET_FILENAME: str = "full.json"
ITEMS_EXPORT_FILENAME: str = "items.csv"

# Credentials (environment)
CRUNCHBASE_API_KEY: str = "CRUNCHBASE_API_KEY"
GITHUB_TOKENS: str = "GITHUB_TOKENS"

# Logo preparation
PREPARE_LOGOS_MAX_CONCURRENCY: int = 20

# Cache
CACHE_KEY_CRUNCHBASE: str = "crunchbase.json"
CACHE_KEY_GITHUB: str = "github.json"
CACHE_KEY_LOGOS_PREFIX: str = "logos"


def default_cache_dir() -> Path:
    """Return the per-user cache directory used when none is supplied."""
    xdg = os.environ.get("XDG_CACHE_HOME")
    if xdg:
        return Path(xdg) / "landscape"
    return Path.home() / ".cache" / "landscape"


# External services
CRUNCHBASE_API_URL: str = "https://api.crunchbase.com/api/v4"
CRUNCHBASE_ORGANIZATION_FIELDS: tuple[str, ...] = (
    "name",
    "short_description",
    "website_url",
    "location_identifiers",
    "num_employees_enum",
    "funding_total",
    "stock_exchange_symbol",
    "stock_symbol",
    "categories",
    "linkedin",
    "twitter",
)
GITHUB_API_URL: str = "https://api.github.com"
GITHUB_REPO_URL_PREFIX: str = "https://github.com/"

# Collector defaults (overridable through the environment or .env)
DEFAULT_REQUEST_TIMEOUT: int = 30
DEFAULT_MAX_RETRIES: int = 3
DEFAULT_BACKOFF_FACTOR: float = 2.0
DEFAULT_RETRY_SLEEP_ON_429: int = 60
DEFAULT_CRUNCHBASE_TARGET_RPM: int = 200
DEFAULT_GITHUB_TARGET_RPM: int = 1000
DEFAULT_COLLECTOR_MAX_CONCURRENCY: int = 10
DEFAULT_CACHE_TTL_DAYS: int = 7

# Settings
FEATURED_ITEMS_FIELDS: tuple[str, ...] = ("maturity", "subcategory")

# Logging
LOG_FILENAME_BUILD: str = "build.log"
LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
