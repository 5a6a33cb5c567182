"""Landscape data model and loader.

This module parses the landscape data document (``landscape.yml``) into the
in-memory ``LandscapeData`` entity set used by every build stage, and hosts
the enrichment and merge operations the orchestrator applies to it:
featured items, member subcategories, and the data collected from
Crunchbase and GitHub.

The document is a YAML mapping with a ``landscape`` list of categories; each
category has ``subcategories`` and each subcategory has ``items``::

    landscape:
      - category:
        name: Provisioning
        subcategories:
          - subcategory:
            name: Automation & Configuration
            items:
              - item:
                name: Ansible
                homepage_url: https://www.ansible.com
                logo: ansible.svg
                crunchbase: https://www.crunchbase.com/organization/red-hat
                repo_url: https://github.com/ansible/ansible

Items keep their document order and get a stable identifier derived from
their category, subcategory and name, so repeated builds over the same
document produce the same output.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import aiohttp
import yaml

from landscape.config import FEATURED_ITEMS_FIELDS
from landscape.exceptions import DataValidationError

from .sources import DocumentSource

if TYPE_CHECKING:
    from .settings import LandscapeSettings

logger = logging.getLogger(__name__)


@dataclass
class Repository:
    """Source code repository of an item."""

    url: str
    primary: bool = False
    github_data: dict[str, Any] | None = None


@dataclass
class Item:
    """A landscape item.

    ``id`` never changes once the item is loaded. ``logo`` starts as the
    reference to the logo in the logos source and ends as the output
    relative path of the prepared logo (or an empty string).
    """

    id: str
    name: str
    category: str
    subcategory: str
    homepage_url: str
    logo: str
    description: str | None = None
    crunchbase_url: str | None = None
    repositories: list[Repository] = field(default_factory=list)
    maturity: str | None = None
    twitter_url: str | None = None
    member_subcategory: str | None = None
    featured: dict[str, Any] | None = None
    crunchbase_data: dict[str, Any] | None = None

    def primary_repository(self) -> Repository | None:
        """Return the primary repository of the item, if any."""
        return next((repo for repo in self.repositories if repo.primary), None)


@dataclass
class Category:
    """A landscape category and the names of its subcategories."""

    name: str
    subcategories: list[str] = field(default_factory=list)


@dataclass
class LandscapeData:
    """Ordered collection of the landscape categories and items."""

    categories: list[Category] = field(default_factory=list)
    items: list[Item] = field(default_factory=list)

    @classmethod
    def from_yaml(cls, text: str) -> LandscapeData:
        """Parse and validate a landscape data document.

        Parameters
        ----------
        text : str
            YAML content of the landscape data document.

        Returns
        -------
        LandscapeData
            Parsed entity set, items in document order.

        Raises
        ------
        DataValidationError
            If the YAML is malformed or any category, subcategory or item
            is invalid. All problems found are listed in the error context.
        """
        try:
            document = yaml.safe_load(text)
        except yaml.YAMLError as error:
            raise DataValidationError(f"Invalid landscape data YAML: {error}") from error
        if not isinstance(document, dict) or not isinstance(
            document.get("landscape"), list
        ):
            raise DataValidationError(
                "Landscape data must be a mapping with a 'landscape' list"
            )

        data = cls()
        errors: list[str] = []
        seen_ids: set[str] = set()
        for c_index, raw_category in enumerate(document["landscape"]):
            if not isinstance(raw_category, dict) or not _non_empty_str(
                raw_category.get("name")
            ):
                errors.append(f"category #{c_index}: name is required")
                continue
            category = Category(name=raw_category["name"].strip())
            data.categories.append(category)
            for s_index, raw_subcategory in enumerate(
                raw_category.get("subcategories") or []
            ):
                if not isinstance(raw_subcategory, dict) or not _non_empty_str(
                    raw_subcategory.get("name")
                ):
                    errors.append(
                        f"category '{category.name}', subcategory #{s_index}: name is required"
                    )
                    continue
                subcategory = raw_subcategory["name"].strip()
                category.subcategories.append(subcategory)
                for i_index, raw_item in enumerate(raw_subcategory.get("items") or []):
                    location = f"{category.name} / {subcategory} / item #{i_index}"
                    item_errors = _validate_item(raw_item)
                    if item_errors:
                        errors.extend(f"{location}: {e}" for e in item_errors)
                        continue
                    item = _build_item(raw_item, category.name, subcategory)
                    if item.id in seen_ids:
                        errors.append(f"{location}: duplicate item '{item.name}'")
                        continue
                    seen_ids.add(item.id)
                    data.items.append(item)

        if errors:
            raise DataValidationError(
                f"Landscape data is invalid ({len(errors)} problems found): {errors[0]}",
                context={"errors": errors},
            )
        return data

    def add_featured_items_data(self, settings: LandscapeSettings) -> None:
        """Mark items matching the settings' featured items rules.

        Raises
        ------
        DataValidationError
            If a rule references an unsupported item field.
        """
        for rule in settings.featured_items:
            if rule.field not in FEATURED_ITEMS_FIELDS:
                raise DataValidationError(
                    f"Invalid featured items field: {rule.field}",
                    context={"supported": list(FEATURED_ITEMS_FIELDS)},
                )
            options = {option.value: option for option in rule.options}
            for item in self.items:
                value = item.maturity if rule.field == "maturity" else item.subcategory
                option = options.get(value) if value is not None else None
                if option is not None:
                    item.featured = {"order": option.order, "label": option.label}

    def add_member_subcategory(self, members_category: str | None) -> None:
        """Assign the member subcategory to the items of member organizations.

        The members category groups the member organizations by subcategory
        (e.g. Platinum, Gold). Any item whose Crunchbase URL matches a member
        gets that member's subcategory.

        Raises
        ------
        DataValidationError
            If ``members_category`` is set but not present in the data.
        """
        if not members_category:
            return
        if not any(c.name == members_category for c in self.categories):
            raise DataValidationError(
                f"Members category not found in landscape data: {members_category}"
            )
        members: dict[str, str] = {}
        for item in self.items:
            if item.category == members_category and item.crunchbase_url:
                members[item.crunchbase_url] = item.subcategory
        for item in self.items:
            if item.crunchbase_url and item.crunchbase_url in members:
                item.member_subcategory = members[item.crunchbase_url]

    def add_crunchbase_data(self, crunchbase_data: dict[str, dict[str, Any]]) -> None:
        """Attach the collected Crunchbase organization data to the items."""
        for item in self.items:
            if item.crunchbase_url:
                item.crunchbase_data = crunchbase_data.get(item.crunchbase_url)

    def add_github_data(self, github_data: dict[str, dict[str, Any]]) -> None:
        """Attach the collected GitHub repository data to the repositories."""
        for item in self.items:
            for repo in item.repositories:
                repo.github_data = github_data.get(repo.url)


async def get_landscape_data(
    source: DocumentSource, session: aiohttp.ClientSession
) -> LandscapeData:
    """Load the landscape data from the source provided.

    Raises
    ------
    DataValidationError
        If the document is invalid.
    ExternalServiceError
        If the document cannot be read or fetched.
    """
    logger.debug("Loading landscape data from %s", source.describe())
    text = await source.read_text(session)
    data = LandscapeData.from_yaml(text)
    logger.info(
        "Loaded landscape data: %d categories, %d items",
        len(data.categories),
        len(data.items),
    )
    return data


def item_id(category: str, subcategory: str, name: str) -> str:
    """Return the stable identifier of an item."""
    return str(uuid.uuid5(uuid.NAMESPACE_URL, f"{category}/{subcategory}/{name}"))


OPTIONAL_STR_FIELDS = ("description", "crunchbase", "repo_url", "project", "twitter")


def _non_empty_str(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def _validate_item(raw_item: Any) -> list[str]:
    if not isinstance(raw_item, dict):
        return ["item must be a mapping"]
    errors = [
        f"{key} is required"
        for key in ("name", "homepage_url", "logo")
        if not _non_empty_str(raw_item.get(key))
    ]
    errors.extend(
        f"{key} must be a string"
        for key in OPTIONAL_STR_FIELDS
        if raw_item.get(key) is not None and not isinstance(raw_item[key], str)
    )
    additional_repos = raw_item.get("additional_repos") or []
    if not isinstance(additional_repos, list):
        return [*errors, "additional_repos must be a list"]
    for extra in additional_repos:
        if not isinstance(extra, dict) or not _non_empty_str(extra.get("repo_url")):
            errors.append("additional_repos entries need a repo_url")
    return errors


def _build_item(raw_item: dict[str, Any], category: str, subcategory: str) -> Item:
    name = raw_item["name"].strip()
    repositories: list[Repository] = []
    if _non_empty_str(raw_item.get("repo_url")):
        repositories.append(Repository(url=raw_item["repo_url"].strip(), primary=True))
    for extra in raw_item.get("additional_repos") or []:
        repositories.append(Repository(url=extra["repo_url"].strip()))
    return Item(
        id=item_id(category, subcategory, name),
        name=name,
        category=category,
        subcategory=subcategory,
        homepage_url=raw_item["homepage_url"].strip(),
        logo=raw_item["logo"].strip(),
        description=raw_item.get("description"),
        crunchbase_url=raw_item.get("crunchbase"),
        repositories=repositories,
        maturity=raw_item.get("project"),
        twitter_url=raw_item.get("twitter"),
    )
