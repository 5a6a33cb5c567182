"""Minimal runner for the landscape builder.

Its single responsibility is to provide a tiny entrypoint, usable from a
source checkout, that delegates execution to ``landscape.cli``.

Usage:
    python build_landscape.py build --data-file landscape.yml \
        --settings-file settings.yml --logos-path hosted_logos --output-dir build

"""

from __future__ import annotations

import sys


def entry_point(argv: list[str] | None = None) -> int:
    """Run the landscape CLI.

    The CLI is imported inside the function to avoid importing the whole
    application at module import time.
    """
    from landscape.cli import main

    return main(argv)


if __name__ == "__main__":
    sys.exit(entry_point())
