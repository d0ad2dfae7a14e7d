"""Configuration loading for rule-templates."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Any
from typing import Mapping

import yaml
from pydantic import BaseModel
from pydantic import Field
from pydantic import ValidationError
from pydantic import field_validator

from .client import DEFAULT_TIMEOUT

DEFAULT_SOURCES = ["https://github.com/PatrickJS/awesome-cursorrules/tree/main/rules"]

_TRUE_VALUES = {"1", "true", "yes", "on"}


class TemplateSourcesConfig(BaseModel):
    """Where templates come from and how chosen rules are written."""

    template_sources: list[str] = Field(default_factory=lambda: list(DEFAULT_SOURCES), alias="sources")
    token: str | None = None
    use_directory_structure: bool = True
    request_timeout: float = DEFAULT_TIMEOUT
    local_templates_dir: Path | None = None

    model_config = {"populate_by_name": True}

    @field_validator("template_sources", mode="before")
    @classmethod
    def _split_sources(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return value

    @field_validator("token", mode="before")
    @classmethod
    def _blank_token(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("request_timeout")
    @classmethod
    def _positive_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("request_timeout must be positive")
        return value

    def expanded_local_templates_dir(self) -> Path | None:
        return self.local_templates_dir.expanduser() if self.local_templates_dir else None


def load_yaml(path: Path) -> Any:
    with path.open("r", encoding="utf-8") as handle:
        return yaml.safe_load(handle)


def env_overrides(environ: Mapping[str, str] | None = None) -> dict[str, Any]:
    env = os.environ if environ is None else environ
    overrides: dict[str, Any] = {}
    sources = env.get("RULE_TEMPLATES_SOURCES", "").strip()
    if sources:
        overrides["template_sources"] = sources
    token = env.get("RULE_TEMPLATES_TOKEN", "").strip() or env.get("GITHUB_TOKEN", "").strip()
    if token:
        overrides["token"] = token
    use_directory = env.get("RULE_TEMPLATES_USE_DIRECTORY", "").strip()
    if use_directory:
        overrides["use_directory_structure"] = use_directory.lower() in _TRUE_VALUES
    timeout = env.get("RULE_TEMPLATES_TIMEOUT", "").strip()
    if timeout:
        overrides["request_timeout"] = timeout
    return overrides


def load_config(path: Path | None = None, *, environ: Mapping[str, str] | None = None) -> TemplateSourcesConfig:
    """Read the optional YAML file, then apply environment overrides."""
    raw: Any = {}
    if path is not None:
        raw = load_yaml(path) or {}
        if not isinstance(raw, dict):
            raise ValueError(f"Invalid rule-templates config at {path}: expected a mapping")
    payload = {**raw, **env_overrides(environ)}
    if "template_sources" in payload and "sources" in payload:
        payload.pop("sources")
    try:
        return TemplateSourcesConfig.model_validate(payload)
    except ValidationError as exc:
        where = path if path is not None else "environment"
        raise ValueError(f"Invalid rule-templates config at {where}: {exc}") from exc
