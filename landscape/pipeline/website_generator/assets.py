"""Web application asset bundle.

The static web application (``index.html`` template, styles and scripts) is
shipped inside the package under ``landscape/web/dist``. ``WebAssets`` gives
read access to a bundle rooted at any directory so builds can be tested
against a small fake bundle.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

from landscape.config import (
    INDEX_TEMPLATE_NAME,
    WEB_ASSETS_DIR,
    WEB_ASSETS_EXCLUDED,
    WEB_ASSETS_REQUIRED_PREFIX,
)
from landscape.exceptions import AssetsNotFoundError

logger = logging.getLogger(__name__)


class WebAssets:
    """Read-only view of a web asset bundle directory."""

    def __init__(self, root: Path = WEB_ASSETS_DIR) -> None:
        self.root = Path(root)

    def iter_paths(self) -> Iterator[str]:
        """Yield the bundle file paths, POSIX style and relative to the root, sorted."""
        if not self.root.is_dir():
            return iter(())
        paths = sorted(
            p.relative_to(self.root).as_posix() for p in self.root.rglob("*") if p.is_file()
        )
        return iter(paths)

    def read(self, path: str) -> bytes | None:
        """Return the content of a bundle file, or ``None`` if it does not exist."""
        file_path = self.root / path
        if not file_path.is_file():
            return None
        return file_path.read_bytes()

    def index_template(self) -> str:
        """Return the ``index.html`` template of the bundle.

        Raises
        ------
        AssetsNotFoundError
            If the bundle has no index template.
        """
        content = self.read(INDEX_TEMPLATE_NAME)
        if content is None:
            raise AssetsNotFoundError(
                "Index template not found in web assets",
                context={"root": str(self.root)},
            )
        return content.decode("utf-8")


def check_web_assets(assets: WebAssets) -> None:
    """Check the bundle contains the built web application.

    Raises
    ------
    AssetsNotFoundError
        If no path of the bundle starts with ``assets/``.
    """
    if not any(p.startswith(WEB_ASSETS_REQUIRED_PREFIX) for p in assets.iter_paths()):
        raise AssetsNotFoundError(
            "Web assets not found, please make sure they have been built",
            context={"root": str(assets.root)},
        )


def copy_web_assets(assets: WebAssets, output_dir: Path) -> int:
    """Copy the bundle into ``output_dir``, except the template and placeholders.

    Returns
    -------
    int
        Number of files copied.

    Raises
    ------
    OSError
        If a file cannot be written.
    """
    copied = 0
    for path in assets.iter_paths():
        if path in WEB_ASSETS_EXCLUDED:
            continue
        content = assets.read(path)
        if content is None:
            continue
        target = output_dir / path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content)
        copied += 1
    logger.debug("Copied %d web assets to %s", copied, output_dir)
    return copied
