from __future__ import annotations

import pytest

from helpers import FakeUpstream
from rule_templates.assembler import TemplateAssembler
from rule_templates.cache import DiscoveryCache
from rule_templates.client import ContentClient


@pytest.fixture()
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture()
def client(upstream: FakeUpstream) -> ContentClient:
    return ContentClient(transport=upstream.transport())


@pytest.fixture()
def cache(client: ContentClient) -> DiscoveryCache:
    return DiscoveryCache(client)


@pytest.fixture()
def assembler(cache: DiscoveryCache) -> TemplateAssembler:
    return TemplateAssembler(cache)


@pytest.fixture(autouse=True)
def _clear_template_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in (
        "RULE_TEMPLATES_SOURCES",
        "RULE_TEMPLATES_TOKEN",
        "RULE_TEMPLATES_USE_DIRECTORY",
        "RULE_TEMPLATES_TIMEOUT",
        "GITHUB_TOKEN",
    ):
        monkeypatch.delenv(key, raising=False)
