"""Parsing of repository references such as ``https://github.com/owner/repo/tree/main/rules``."""
from __future__ import annotations

from dataclasses import dataclass
from dataclasses import replace
from typing import Any

from .errors import InvalidLocatorError

HOST_PREFIX = "https://github.com/"
BROWSE_SEGMENT = "tree"


@dataclass(frozen=True)
class RepositoryLocator:
    owner: str
    collection: str
    sub_path: str = ""
    ref: str | None = None

    @property
    def repository(self) -> str:
        return f"{self.owner}/{self.collection}"

    @property
    def cache_key(self) -> str:
        if self.ref:
            return f"{self.repository}@{self.ref}"
        return self.repository

    def child(self, path: str) -> "RepositoryLocator":
        """Address another path inside the same repository and ref."""
        return replace(self, sub_path=_clean_path(path, reference=path))

    def __str__(self) -> str:
        if self.sub_path:
            return f"{self.cache_key}/{self.sub_path}"
        return self.cache_key


def parse_locator(reference: Any) -> RepositoryLocator:
    """Split a repository reference into owner, collection, ref and sub path.

    The browse suffix ``/tree/<ref>/<path>`` is optional. Nothing is
    percent-encoded here; request builders encode each segment themselves.
    """
    if not isinstance(reference, str):
        raise InvalidLocatorError("Repository reference must be a string", target=repr(reference))
    text = reference.strip()
    if not text:
        raise InvalidLocatorError("Repository reference is empty")
    if not text.startswith(HOST_PREFIX):
        raise InvalidLocatorError(f"Repository reference must start with {HOST_PREFIX}", target=text)

    remainder = text[len(HOST_PREFIX):].rstrip("/")
    segments = remainder.split("/") if remainder else []
    if len(segments) < 2 or not segments[0] or not segments[1]:
        raise InvalidLocatorError("Repository reference needs both an owner and a repository name", target=text)

    owner = segments[0]
    collection = segments[1]
    if collection.endswith(".git"):
        collection = collection[: -len(".git")]
        if not collection:
            raise InvalidLocatorError("Repository name is empty", target=text)

    rest = segments[2:]
    if not rest:
        return RepositoryLocator(owner=owner, collection=collection)
    if rest[0] != BROWSE_SEGMENT or len(rest) < 2 or not rest[1]:
        raise InvalidLocatorError(
            f"Unsupported repository path; expected /{BROWSE_SEGMENT}/<ref>/<path>",
            target=text,
        )
    ref = rest[1]
    if any(not part for part in rest[2:]):
        raise InvalidLocatorError("Path contains empty segments", target=text)
    sub_path = "/".join(rest[2:])
    return RepositoryLocator(owner=owner, collection=collection, sub_path=sub_path, ref=ref)


def _clean_path(path: str, *, reference: str) -> str:
    path = path.strip("/")
    if not path:
        return ""
    parts = path.split("/")
    if any(not part for part in parts):
        raise InvalidLocatorError("Path contains empty segments", target=reference)
    return "/".join(parts)
