from pathlib import Path

import pytest

from rule_templates.models import Rule
from rule_templates.models import Template
from rule_templates.rules import RuleStore
from rule_templates.rules import safe_rule_name


def test_save_in_directory_mode(tmp_path: Path) -> None:
    store = RuleStore(tmp_path)
    path = store.save(Rule(name="React Starter!", content="body"))
    assert path == tmp_path / ".cursor" / "rules" / "react_starter_.md"
    assert path.read_text(encoding="utf-8") == "body"


def test_save_flat_file(tmp_path: Path) -> None:
    store = RuleStore(tmp_path, use_directory_structure=False)
    path = store.save(Rule.from_template(Template(name="A", description="", category="", content="flat")))
    assert path == tmp_path / ".cursorrules"
    assert path.read_text(encoding="utf-8") == "flat"


def test_list_and_delete_rules(tmp_path: Path) -> None:
    (tmp_path / ".cursorrules").write_text("root rule", encoding="utf-8")
    store = RuleStore(tmp_path)
    store.save(Rule(name="b-rule", content="b"))
    store.save(Rule(name="a-rule", content="a"))

    assert [rule.name for rule in store.list_rules()] == [".cursorrules", "a-rule", "b-rule"]
    store.delete("a-rule")
    assert [rule.name for rule in store.list_rules()] == [".cursorrules", "b-rule"]
    with pytest.raises(FileNotFoundError):
        store.delete("a-rule")


def test_safe_rule_name() -> None:
    assert safe_rule_name("Next.js + Tailwind") == "next_js___tailwind"
