"""Logo resolution for landscape items."""

from __future__ import annotations

from .resolver import LogoArtifact, normalize_svg, prepare_logo

__all__ = ["LogoArtifact", "normalize_svg", "prepare_logo"]
