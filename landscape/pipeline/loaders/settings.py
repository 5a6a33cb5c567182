"""Landscape settings model and loader.

The settings document (``settings.yml``) customizes a landscape build:
the foundation name and URL shown in the website, the category holding the
member organizations, and the rules used to feature some items.

Examples
--------
>>> from landscape.pipeline.loaders.settings import LandscapeSettings
>>> settings = LandscapeSettings.from_yaml("foundation: CNCF\\nurl: https://landscape.cncf.io\\n")
>>> settings.foundation
'CNCF'
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import aiohttp
import yaml

from landscape.config import FEATURED_ITEMS_FIELDS
from landscape.exceptions import ConfigurationError

from .sources import DocumentSource

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FeaturedItemOption:
    """Value of a featured items rule and how matching items are featured."""

    value: str
    order: int | None = None
    label: str | None = None


@dataclass(frozen=True)
class FeaturedItemRule:
    """Feature the items whose ``field`` matches one of the ``options``."""

    field: str
    options: tuple[FeaturedItemOption, ...] = ()


@dataclass
class LandscapeSettings:
    """Settings of a landscape build."""

    foundation: str
    url: str
    members_category: str | None = None
    featured_items: list[FeaturedItemRule] = field(default_factory=list)

    @classmethod
    def from_yaml(cls, text: str) -> LandscapeSettings:
        """Parse and validate a settings document.

        Raises
        ------
        ConfigurationError
            If the YAML is malformed or required settings are missing or
            invalid.
        """
        try:
            document = yaml.safe_load(text)
        except yaml.YAMLError as error:
            raise ConfigurationError(f"Invalid settings YAML: {error}") from error
        if not isinstance(document, dict):
            raise ConfigurationError("Settings must be a YAML mapping")

        for key in ("foundation", "url"):
            value = document.get(key)
            if not isinstance(value, str) or not value.strip():
                raise ConfigurationError(f"Settings '{key}' is required")

        members_category = document.get("members_category")
        if members_category is not None and not isinstance(members_category, str):
            raise ConfigurationError("Settings 'members_category' must be a string")

        return cls(
            foundation=document["foundation"].strip(),
            url=document["url"].strip(),
            members_category=members_category,
            featured_items=_parse_featured_items(document.get("featured_items")),
        )


async def get_landscape_settings(
    source: DocumentSource, session: aiohttp.ClientSession
) -> LandscapeSettings:
    """Load the landscape settings from the source provided.

    Raises
    ------
    ConfigurationError
        If the settings are invalid.
    ExternalServiceError
        If the document cannot be read or fetched.
    """
    logger.debug("Loading landscape settings from %s", source.describe())
    text = await source.read_text(session)
    return LandscapeSettings.from_yaml(text)


def _parse_featured_items(raw: Any) -> list[FeaturedItemRule]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ConfigurationError("Settings 'featured_items' must be a list")
    rules: list[FeaturedItemRule] = []
    for index, raw_rule in enumerate(raw):
        if not isinstance(raw_rule, dict):
            raise ConfigurationError(f"Featured items rule #{index} must be a mapping")
        rule_field = raw_rule.get("field")
        if rule_field not in FEATURED_ITEMS_FIELDS:
            raise ConfigurationError(
                f"Featured items rule #{index}: invalid field {rule_field!r}",
                context={"supported": list(FEATURED_ITEMS_FIELDS)},
            )
        options: list[FeaturedItemOption] = []
        for raw_option in raw_rule.get("options") or []:
            if not isinstance(raw_option, dict) or raw_option.get("value") is None:
                raise ConfigurationError(
                    f"Featured items rule #{index}: every option needs a value"
                )
            order = raw_option.get("order")
            if order is not None and not isinstance(order, int):
                raise ConfigurationError(
                    f"Featured items rule #{index}: order must be an integer"
                )
            options.append(
                FeaturedItemOption(
                    value=str(raw_option["value"]),
                    order=order,
                    label=raw_option.get("label"),
                )
            )
        rules.append(FeaturedItemRule(field=rule_field, options=tuple(options)))
    return rules
