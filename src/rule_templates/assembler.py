"""Turns remote listings into categorized rule templates."""
from __future__ import annotations

import logging
from typing import Any
from typing import Iterable
from typing import Mapping
from typing import Sequence

from .cache import DiscoveryCache
from .client import to_directory_entry
from .errors import InvalidLocatorError
from .errors import MalformedResponseError
from .errors import NetworkError
from .errors import NotFoundError
from .errors import RateLimitedError
from .locator import RepositoryLocator
from .locator import parse_locator
from .metadata import DEFAULT_CATEGORY
from .metadata import TEMPLATE_SUFFIXES
from .metadata import TemplateMetadata
from .metadata import default_metadata
from .metadata import extract_metadata
from .metadata import has_template_suffix
from .metadata import serialize_content
from .models import DirectoryEntry
from .models import RemoteEntry
from .models import Template
from .ratelimit import RateLimitGuard
from .ratelimit import placeholder_template


logger = logging.getLogger(__name__)

CANONICAL_FILENAME = ".cursorrules"
MAX_SEARCH_DEPTH = 3


def build_template(raw_content: Any, defaults: TemplateMetadata) -> Template:
    meta = extract_metadata(raw_content, defaults)
    return Template(
        name=meta.name,
        description=meta.description,
        category=meta.category,
        content=serialize_content(raw_content),
    )


def select_content_file(entries: Iterable[RemoteEntry]) -> RemoteEntry | None:
    """Pick the rule file of a directory: ``.cursorrules`` first, then by suffix priority."""
    files = [entry for entry in entries if entry.is_file]
    for entry in files:
        if entry.name == CANONICAL_FILENAME:
            return entry
    for suffix in TEMPLATE_SUFFIXES:
        for entry in files:
            if entry.name.lower().endswith(suffix):
                return entry
    return None


def group_by_category(templates: Iterable[Template]) -> dict[str, list[Template]]:
    grouped: dict[str, list[Template]] = {}
    for template in templates:
        grouped.setdefault(template.category, []).append(template)
    return grouped


def merge_catalogs(*catalogs: Mapping[str, Sequence[Template]]) -> dict[str, list[Template]]:
    merged: dict[str, list[Template]] = {}
    for catalog in catalogs:
        for category, templates in catalog.items():
            merged.setdefault(category, []).extend(templates)
    return merged


class TemplateAssembler:
    """Entry point for template discovery.

    ``list_directories`` + ``fetch_one`` is the interactive flow: one listing
    call up front and a single content fetch per selection. ``list_templates``
    walks every directory eagerly and is meant for catalog views.
    """

    def __init__(self, cache: DiscoveryCache) -> None:
        self.cache = cache

    @property
    def guard(self) -> RateLimitGuard:
        return self.cache.guard

    def reset(self) -> None:
        self.cache.reset()

    # Two-phase flow -------------------------------------------------------
    def list_directories(self, reference: str) -> list[DirectoryEntry]:
        locator = parse_locator(reference)
        if self.cache.degraded:
            return self.guard.placeholder_entries()
        try:
            listing = self.cache.listing(locator)
        except RateLimitedError:
            return self.guard.placeholder_entries()
        return [to_directory_entry(entry) for entry in listing if entry.is_dir]

    def fetch_one(self, reference: str, entry: DirectoryEntry) -> Template:
        locator = parse_locator(reference)
        if self.cache.degraded:
            return self.guard.placeholder_template(entry)
        try:
            return self.cache.content(
                locator,
                entry.path,
                lambda: self._load_directory(locator, entry.name, entry.path),
            )
        except NotFoundError as exc:
            return placeholder_template(entry.name, DEFAULT_CATEGORY, reason=str(exc))
        except RateLimitedError:
            return self.guard.placeholder_template(entry)

    # Eager flow -----------------------------------------------------------
    def list_templates(self, reference: str) -> dict[str, list[Template]]:
        locator = parse_locator(reference)
        if self.cache.degraded:
            return self.guard.placeholder_catalog()
        try:
            listing = self.cache.listing(locator)
            templates: list[Template] = []
            for entry in listing:
                if entry.is_file and has_template_suffix(entry.name):
                    templates.append(self._eager_entry(locator, entry, self._load_file))
                elif entry.is_dir:
                    templates.append(self._eager_entry(locator, entry, self._load_directory_entry))
        except RateLimitedError:
            return self.guard.placeholder_catalog()
        return group_by_category(templates)

    # Helpers --------------------------------------------------------------
    def _eager_entry(self, locator: RepositoryLocator, entry: RemoteEntry, load) -> Template:
        try:
            return self.cache.content(locator, entry.path, lambda: load(locator, entry))
        except (InvalidLocatorError, NetworkError, MalformedResponseError, NotFoundError) as exc:
            logger.warning("Using placeholder for %s: %s", entry.path, exc)
            return placeholder_template(entry.name, DEFAULT_CATEGORY, reason=str(exc))

    def _load_file(self, locator: RepositoryLocator, entry: RemoteEntry) -> Template:
        return build_template(self._download(entry), default_metadata(entry.name))

    def _load_directory_entry(self, locator: RepositoryLocator, entry: RemoteEntry) -> Template:
        return self._load_directory(locator, entry.name, entry.path)

    def _load_directory(self, locator: RepositoryLocator, name: str, path: str) -> Template:
        content_file = self._find_content_file(locator.child(path), depth=0)
        if content_file is None:
            logger.info("No rule file under %s, using placeholder", path)
            return placeholder_template(name, DEFAULT_CATEGORY, reason=f"no rule file in {path}")
        return build_template(self._download(content_file), default_metadata(name))

    def _find_content_file(self, locator: RepositoryLocator, depth: int) -> RemoteEntry | None:
        listing = self.cache.listing(locator)
        found = select_content_file(listing)
        if found is not None or depth >= MAX_SEARCH_DEPTH:
            return found
        for entry in listing:
            if entry.is_dir:
                found = self._find_content_file(locator.child(entry.path), depth + 1)
                if found is not None:
                    return found
        return None

    def _download(self, entry: RemoteEntry) -> str:
        if not entry.download_url:
            raise MalformedResponseError("File entry has no download URL", target=entry.path)
        return self.cache.fetch_text(entry.download_url)
