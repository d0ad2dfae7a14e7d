"""Value types shared by the discovery engine and its consumers."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

REMOTE_CATEGORY = "GitHub"


class EntryKind(str, Enum):
    FILE = "file"
    DIR = "dir"


@dataclass(frozen=True)
class RemoteEntry:
    """One item of a contents listing, as returned by the upstream."""

    name: str
    path: str
    kind: EntryKind
    download_url: str | None = None

    @property
    def is_dir(self) -> bool:
        return self.kind is EntryKind.DIR

    @property
    def is_file(self) -> bool:
        return self.kind is EntryKind.FILE


@dataclass(frozen=True)
class DirectoryEntry:
    """A selectable sub-location whose content has not been fetched yet."""

    name: str
    path: str
    description: str
    category: str = REMOTE_CATEGORY
    kind: str = "directory"


@dataclass(frozen=True)
class Template:
    name: str
    description: str
    category: str
    content: str
    placeholder: bool = False
    kind: str = "template"


@dataclass(frozen=True)
class Rule:
    """A rule file living in a project workspace."""

    name: str
    content: str

    @classmethod
    def from_template(cls, template: Template) -> "Rule":
        return cls(name=template.name, content=template.content)
