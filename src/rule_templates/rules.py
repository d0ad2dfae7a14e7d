"""Writing chosen templates into a project workspace."""
from __future__ import annotations

import logging
import re
from pathlib import Path

from .models import Rule


logger = logging.getLogger(__name__)

FLAT_RULE_FILE = ".cursorrules"
RULES_DIR = Path(".cursor") / "rules"

_UNSAFE_RE = re.compile(r"[^a-z0-9_-]", re.IGNORECASE)


def safe_rule_name(name: str) -> str:
    return _UNSAFE_RE.sub("_", name).lower()


class RuleStore:
    """Reads and writes rules under ``.cursor/rules`` or the flat ``.cursorrules`` file."""

    def __init__(self, root: Path, *, use_directory_structure: bool = True) -> None:
        self.root = Path(root).expanduser()
        self.use_directory_structure = use_directory_structure

    @property
    def rules_dir(self) -> Path:
        return self.root / RULES_DIR

    @property
    def flat_rule_path(self) -> Path:
        return self.root / FLAT_RULE_FILE

    def save(self, rule: Rule) -> Path:
        if self.use_directory_structure:
            self.rules_dir.mkdir(parents=True, exist_ok=True)
            path = self.rules_dir / f"{safe_rule_name(rule.name)}.md"
        else:
            path = self.flat_rule_path
        path.write_text(rule.content, encoding="utf-8")
        logger.info("Rule %r saved to %s", rule.name, path)
        return path

    def list_rules(self) -> list[Rule]:
        rules: list[Rule] = []
        if self.flat_rule_path.is_file():
            rules.append(Rule(name=FLAT_RULE_FILE, content=self.flat_rule_path.read_text(encoding="utf-8")))
        if self.rules_dir.is_dir():
            for path in sorted(self.rules_dir.glob("*.md")):
                rules.append(Rule(name=path.stem, content=path.read_text(encoding="utf-8")))
        return rules

    def delete(self, name: str) -> None:
        path = self.rules_dir / f"{name}.md"
        if not path.is_file():
            raise FileNotFoundError(f"Rule {name!r} not found in {self.rules_dir}")
        path.unlink()
