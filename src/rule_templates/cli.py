"""Command line front end for browsing and saving rule templates."""
from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Sequence

from dotenv import load_dotenv

from .assembler import TemplateAssembler
from .assembler import merge_catalogs
from .cache import DiscoveryCache
from .client import ContentClient
from .config import TemplateSourcesConfig
from .config import load_config
from .errors import TemplateSourceError
from .local import local_catalog
from .models import DirectoryEntry
from .models import Rule
from .models import Template
from .rules import RuleStore


logger = logging.getLogger(__name__)

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="rule-templates", description="Browse and install rule templates")
    parser.add_argument("--config", type=Path, default=None, help="Path to a YAML config file")
    parser.add_argument("--log-level", type=str, default=os.getenv("LOG_LEVEL", "WARNING"))
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("sources", help="List configured template sources")

    dirs_cmd = sub.add_parser("dirs", help="List template directories of a source")
    dirs_cmd.add_argument("--source", help="Repository reference (defaults to the first configured source)")

    show_cmd = sub.add_parser("show", help="Print one template")
    show_cmd.add_argument("name", help="Directory name as printed by 'dirs'")
    show_cmd.add_argument("--source", help="Repository reference")

    catalog_cmd = sub.add_parser("catalog", help="Fetch every template and group by category")
    catalog_cmd.add_argument("--source", help="Repository reference")
    catalog_cmd.add_argument("--local", type=Path, default=None, help="Directory with local templates to merge in")

    save_cmd = sub.add_parser("save", help="Write a template into the workspace")
    save_cmd.add_argument("name", help="Directory name as printed by 'dirs'")
    save_cmd.add_argument("--source", help="Repository reference")
    save_cmd.add_argument("--root", type=Path, default=Path.cwd(), help="Workspace root")
    save_cmd.add_argument("--flat", action="store_true", help="Write a single .cursorrules file")

    rules_cmd = sub.add_parser("rules", help="List rules already in the workspace")
    rules_cmd.add_argument("--root", type=Path, default=Path.cwd(), help="Workspace root")

    delete_cmd = sub.add_parser("delete", help="Remove a rule from .cursor/rules")
    delete_cmd.add_argument("name", help="Rule name as printed by 'rules'")
    delete_cmd.add_argument("--root", type=Path, default=Path.cwd(), help="Workspace root")

    return parser


def build_assembler(config: TemplateSourcesConfig) -> TemplateAssembler:
    client = ContentClient(token=config.token, timeout=config.request_timeout)
    return TemplateAssembler(DiscoveryCache(client))


def cmd_sources(config: TemplateSourcesConfig) -> None:
    if not config.template_sources:
        print("No template sources configured")
        return
    for source in config.template_sources:
        print(source)


def cmd_dirs(args: argparse.Namespace, config: TemplateSourcesConfig, assembler: TemplateAssembler) -> None:
    entries = assembler.list_directories(_source(args, config))
    if assembler.guard.degraded:
        print("(rate limited: showing placeholder templates)", file=sys.stderr)
    if not entries:
        print("No template directories found")
        return
    for entry in entries:
        print(f"- {entry.name}\n  {entry.description}")


def cmd_show(args: argparse.Namespace, config: TemplateSourcesConfig, assembler: TemplateAssembler) -> None:
    template = _fetch_named(args, config, assembler)
    print(f"# {template.name} [{template.category}]\n# {template.description}\n")
    print(template.content)


def cmd_catalog(args: argparse.Namespace, config: TemplateSourcesConfig, assembler: TemplateAssembler) -> None:
    catalogs = []
    local_dir = args.local or config.expanded_local_templates_dir()
    if local_dir is not None:
        catalogs.append(local_catalog(local_dir))
    source = _source(args, config)
    try:
        catalogs.append(assembler.list_templates(source))
    except TemplateSourceError as exc:
        if not catalogs:
            raise
        logger.warning("Remote templates from %s unavailable: %s", source, exc)
        print(f"(remote templates unavailable: {exc})", file=sys.stderr)
    merged = merge_catalogs(*catalogs)
    if not merged:
        print("No templates found")
        return
    for category, templates in merged.items():
        print(f"{category}:")
        for template in templates:
            marker = " (placeholder)" if template.placeholder else ""
            print(f"  - {template.name}{marker}: {template.description}")


def cmd_save(args: argparse.Namespace, config: TemplateSourcesConfig, assembler: TemplateAssembler) -> None:
    template = _fetch_named(args, config, assembler)
    use_directory = config.use_directory_structure and not args.flat
    store = RuleStore(args.root, use_directory_structure=use_directory)
    path = store.save(Rule.from_template(template))
    print(f"Saved {template.name} to {path}")


def cmd_rules(args: argparse.Namespace) -> None:
    rules = RuleStore(args.root).list_rules()
    if not rules:
        print("No rules found in the workspace")
        return
    for rule in rules:
        preview = rule.content[:100] + ("..." if len(rule.content) > 100 else "")
        print(f"- {rule.name}\n  {preview}")


def cmd_delete(args: argparse.Namespace) -> None:
    RuleStore(args.root).delete(args.name)
    print(f"Deleted rule {args.name}")


def _source(args: argparse.Namespace, config: TemplateSourcesConfig) -> str:
    if args.source:
        return args.source
    if not config.template_sources:
        raise SystemExit("No template source configured; pass --source")
    return config.template_sources[0]


def _fetch_named(args: argparse.Namespace, config: TemplateSourcesConfig, assembler: TemplateAssembler) -> Template:
    source = _source(args, config)
    entries = assembler.list_directories(source)
    entry = _find_entry(entries, args.name)
    if entry is None:
        available = ", ".join(item.name for item in entries) or "none"
        raise SystemExit(f"Template directory {args.name!r} not found; available: {available}")
    return assembler.fetch_one(source, entry)


def _find_entry(entries: Sequence[DirectoryEntry], name: str) -> DirectoryEntry | None:
    for entry in entries:
        if entry.name == name:
            return entry
    return None


def main(argv: Sequence[str] | None = None) -> int:
    load_dotenv()
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.WARNING), format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    try:
        config = load_config(args.config)
        if args.command == "sources":
            cmd_sources(config)
        elif args.command == "rules":
            cmd_rules(args)
        elif args.command == "delete":
            cmd_delete(args)
        else:
            assembler = build_assembler(config)
            if args.command == "dirs":
                cmd_dirs(args, config, assembler)
            elif args.command == "show":
                cmd_show(args, config, assembler)
            elif args.command == "catalog":
                cmd_catalog(args, config, assembler)
            elif args.command == "save":
                cmd_save(args, config, assembler)
            else:  # pragma: no cover - argparse restricts choices
                parser.print_help()
                return 1
        return 0
    except (TemplateSourceError, ValueError, OSError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
