"""Landscape Builder package.

This package builds a static "landscape" website: it loads the landscape
data and settings documents, prepares every item's logo, collects extra
information from external services (Crunchbase and GitHub), and writes a
deterministic output tree with the datasets, the rendered index document,
the logos and the bundled web application assets.

Package Structure
-----------------
- `pipeline/loaders/`:
    Sources, landscape data and settings loaders.
- `pipeline/logos/`:
    Logo resolution and normalization.
- `pipeline/collectors/`:
    Resilient asynchronous clients collecting Crunchbase and GitHub data.
- `pipeline/website_generator/`:
    Dataset generation, index rendering and web asset handling.
- `pipeline/builder/`:
    Build orchestration, bounded concurrency and the collectors join.
- `cache.py`: Content cache shared by the collectors and the logo resolver.
- `config.py`: All configuration constants, as UPPER_SNAKE_CASE.
- `exceptions.py`: Project-specific exception classes.

Examples
--------
>>> # Build from the command line
>>> # landscape build --data-file landscape.yml --settings-file settings.yml \\
>>> #     --logos-path logos --output-dir build
"""

__version__ = "0.11.0"
