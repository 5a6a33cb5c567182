"""Tests for the landscape settings loader."""

from pathlib import Path

import pytest

from landscape.exceptions import ConfigurationError
from landscape.pipeline.loaders import (
    DocumentSource,
    LandscapeSettings,
    get_landscape_settings,
)

SETTINGS_YAML = """
foundation: CNCF
url: https://landscape.cncf.io
members_category: Members
featured_items:
  - field: maturity
    options:
      - value: graduated
        order: 1
        label: Graduated
      - value: incubating
"""


def test_from_yaml_full_document():
    settings = LandscapeSettings.from_yaml(SETTINGS_YAML)
    assert settings.foundation == "CNCF"
    assert settings.url == "https://landscape.cncf.io"
    assert settings.members_category == "Members"
    rule = settings.featured_items[0]
    assert rule.field == "maturity"
    assert [o.value for o in rule.options] == ["graduated", "incubating"]
    assert rule.options[0].order == 1 and rule.options[1].label is None


def test_optional_settings_default():
    settings = LandscapeSettings.from_yaml("foundation: F\nurl: https://f\n")
    assert settings.members_category is None
    assert settings.featured_items == []


@pytest.mark.parametrize(
    "text",
    [
        "url: https://f\n",
        "foundation: F\n",
        "foundation: ''\nurl: https://f\n",
        "- a list\n",
        "foundation: [\n",
        "foundation: F\nurl: https://f\nmembers_category: [a]\n",
        "foundation: F\nurl: https://f\nfeatured_items: {}\n",
        "foundation: F\nurl: https://f\nfeatured_items:\n  - field: stars\n",
        "foundation: F\nurl: https://f\nfeatured_items:\n  - field: maturity\n    options:\n      - label: x\n",
        "foundation: F\nurl: https://f\nfeatured_items:\n  - field: maturity\n    options:\n      - value: x\n        order: first\n",
    ],
)
def test_invalid_settings_are_rejected(text):
    with pytest.raises(ConfigurationError):
        LandscapeSettings.from_yaml(text)


@pytest.mark.asyncio
async def test_get_landscape_settings_from_file(tmp_path: Path):
    path = tmp_path / "settings.yml"
    path.write_text(SETTINGS_YAML, encoding="utf-8")
    settings = await get_landscape_settings(DocumentSource(file=path), session=None)
    assert settings.foundation == "CNCF"
