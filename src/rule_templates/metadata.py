"""Metadata hints embedded in rule template text."""
from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any

TEMPLATE_SUFFIXES: tuple[str, ...] = (".cursorrules", ".mdc", ".md")
DEFAULT_CATEGORY = "General"

_HINT_RE = re.compile(r"^[ \t]*(name|description|category)[ \t]*:(.*)$", re.IGNORECASE | re.MULTILINE)
_SEPARATORS_RE = re.compile(r"[-_\s]+")


@dataclass(frozen=True)
class TemplateMetadata:
    name: str
    description: str
    category: str


def extract_metadata(raw_content: Any, defaults: TemplateMetadata) -> TemplateMetadata:
    """Read ``name:``, ``description:`` and ``category:`` hints from the text.

    Keys match case-insensitively and the first non-empty value per key
    wins. Content that is not a string is not scanned at all.
    """
    if not isinstance(raw_content, str):
        return defaults
    found: dict[str, str] = {}
    for match in _HINT_RE.finditer(raw_content):
        key = match.group(1).lower()
        value = match.group(2).strip()
        if key in found or not value:
            continue
        found[key] = value
    return TemplateMetadata(
        name=found.get("name", defaults.name),
        description=found.get("description", defaults.description),
        category=found.get("category", defaults.category),
    )


def strip_template_suffix(filename: str) -> str:
    lowered = filename.lower()
    for suffix in TEMPLATE_SUFFIXES:
        if lowered.endswith(suffix) and len(filename) > len(suffix):
            return filename[: -len(suffix)]
    return filename


def has_template_suffix(filename: str) -> bool:
    return filename.lower().endswith(TEMPLATE_SUFFIXES)


def derive_display_name(filename: str) -> str:
    """``react-app.cursorrules`` -> ``React app``."""
    stem = strip_template_suffix(filename)
    text = _SEPARATORS_RE.sub(" ", stem).strip()
    if not text:
        return filename.strip()
    return text[0].upper() + text[1:]


def default_metadata(filename: str, category: str = DEFAULT_CATEGORY) -> TemplateMetadata:
    name = derive_display_name(filename)
    return TemplateMetadata(name=name, description=f"Template for {name}", category=category)


def serialize_content(raw_content: Any) -> str:
    if isinstance(raw_content, str):
        return raw_content
    if isinstance(raw_content, bytes):
        return raw_content.decode("utf-8", errors="replace")
    return json.dumps(raw_content, ensure_ascii=False)
