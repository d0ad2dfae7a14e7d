"""Rule templates bundled on the local filesystem."""
from __future__ import annotations

from pathlib import Path

from .assembler import build_template
from .assembler import group_by_category
from .metadata import default_metadata
from .models import Template

LOCAL_CATEGORY = "Local Templates"
LOCAL_PATTERNS = ("*.md", "*.cursorrules")


def load_local_templates(directory: Path) -> list[Template]:
    templates: list[Template] = []
    if not directory.is_dir():
        return templates
    paths: set[Path] = set()
    for pattern in LOCAL_PATTERNS:
        paths.update(directory.glob(pattern))
    for path in sorted(paths):
        text = path.read_text(encoding="utf-8")
        templates.append(build_template(text, default_metadata(path.name, LOCAL_CATEGORY)))
    return templates


def local_catalog(directory: Path) -> dict[str, list[Template]]:
    return group_by_category(load_local_templates(directory))
