"""Degraded mode used once the upstream quota is exhausted."""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import Enum

from .metadata import DEFAULT_CATEGORY
from .metadata import default_metadata
from .models import DirectoryEntry
from .models import Template


logger = logging.getLogger(__name__)

PLACEHOLDER_DIRECTORIES: tuple[tuple[str, str], ...] = (
    ("react-typescript", "Frontend"),
    ("nextjs-tailwind", "Frontend"),
    ("python-fastapi", "Backend"),
    ("go-microservice", "Backend"),
)
PLACEHOLDER_ROOT = "placeholders"


class GuardState(str, Enum):
    NORMAL = "normal"
    DEGRADED = "degraded"


def placeholder_template(name: str, category: str, *, reason: str | None = None) -> Template:
    """Build a selectable template for an entry whose content is unavailable."""
    meta = default_metadata(name, category)
    lines = [f"# {meta.name}", "", "Describe the conventions this project should follow."]
    if reason:
        lines += ["", f"<!-- {reason} -->"]
    return Template(
        name=meta.name,
        description=meta.description,
        category=meta.category,
        content="\n".join(lines) + "\n",
        placeholder=True,
    )


@dataclass(frozen=True)
class PlaceholderDataset:
    entries: tuple[DirectoryEntry, ...]
    templates: dict[str, Template]

    def catalog(self) -> dict[str, list[Template]]:
        grouped: dict[str, list[Template]] = {}
        for template in self.templates.values():
            grouped.setdefault(template.category, []).append(template)
        return grouped


def _build_dataset() -> PlaceholderDataset:
    entries: list[DirectoryEntry] = []
    templates: dict[str, Template] = {}
    for name, category in PLACEHOLDER_DIRECTORIES:
        path = f"{PLACEHOLDER_ROOT}/{name}"
        template = placeholder_template(name, category, reason="offline sample: upstream rate limit reached")
        entries.append(DirectoryEntry(name=name, path=path, description=template.description))
        templates[path] = template
    return PlaceholderDataset(entries=tuple(entries), templates=templates)


class RateLimitGuard:
    """Two-state switch between live discovery and the placeholder dataset.

    Leaving the degraded state requires an explicit ``reset()``.
    """

    def __init__(self) -> None:
        self._state = GuardState.NORMAL
        self._reason: str | None = None
        self._dataset: PlaceholderDataset | None = None
        self._extra: dict[str, Template] = {}
        self._lock = threading.Lock()

    @property
    def state(self) -> GuardState:
        return self._state

    @property
    def degraded(self) -> bool:
        return self._state is GuardState.DEGRADED

    @property
    def reason(self) -> str | None:
        return self._reason

    def trip(self, reason: str) -> None:
        with self._lock:
            if self._state is GuardState.DEGRADED:
                return
            self._state = GuardState.DEGRADED
            self._reason = reason
        logger.warning("Switching to placeholder templates: %s", reason)

    def reset(self) -> None:
        with self._lock:
            self._state = GuardState.NORMAL
            self._reason = None
            self._dataset = None
            self._extra = {}

    def dataset(self) -> PlaceholderDataset:
        with self._lock:
            if self._dataset is None:
                self._dataset = _build_dataset()
            return self._dataset

    def placeholder_entries(self) -> list[DirectoryEntry]:
        return list(self.dataset().entries)

    def placeholder_template(self, entry: DirectoryEntry) -> Template:
        template = self.dataset().templates.get(entry.path)
        if template is None:
            with self._lock:
                template = self._extra.setdefault(
                    entry.path,
                    placeholder_template(entry.name, DEFAULT_CATEGORY, reason="upstream rate limit reached"),
                )
        return template

    def placeholder_catalog(self) -> dict[str, list[Template]]:
        return self.dataset().catalog()
