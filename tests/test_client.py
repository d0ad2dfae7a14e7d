import httpx
import pytest

from helpers import API
from helpers import RAW
from helpers import dir_item
from helpers import file_item
from helpers import rate_limited_response
from rule_templates.client import ContentClient
from rule_templates.client import classify_response
from rule_templates.errors import InvalidLocatorError
from rule_templates.errors import MalformedResponseError
from rule_templates.errors import NetworkError
from rule_templates.errors import NotFoundError
from rule_templates.errors import RateLimitedError
from rule_templates.locator import parse_locator
from rule_templates.models import EntryKind

REFERENCE = "https://github.com/Acme/templates/tree/main/rules"
LISTING_URL = f"{API}/Acme/templates/contents/rules"


def test_list_contents_builds_request(client, upstream):
    upstream.add(LISTING_URL, [dir_item("rules/react-app"), file_item("rules/README.md", f"{RAW}/Acme/templates/main/rules/README.md")])
    entries = client.list_contents(parse_locator(REFERENCE))

    assert [entry.kind for entry in entries] == [EntryKind.DIR, EntryKind.FILE]
    assert entries[1].download_url.endswith("README.md")
    request = upstream.requests[0]
    assert request.url.params["ref"] == "main"
    assert request.headers["accept"] == "application/vnd.github+json"
    assert "authorization" not in request.headers


def test_token_is_sent_as_bearer(upstream):
    client = ContentClient(token="secret", transport=upstream.transport())
    upstream.add(LISTING_URL, [])
    client.list_contents(parse_locator(REFERENCE))
    assert upstream.requests[0].headers["authorization"] == "Bearer secret"


def test_path_segments_are_percent_encoded(client, upstream):
    locator = parse_locator("https://github.com/Acme/templates/tree/main/my rules/c#")
    upstream.add(f"{API}/Acme/templates/contents/my%20rules/c%23", [])
    assert client.list_contents(locator) == []
    assert upstream.calls(f"{API}/Acme/templates/contents/my%20rules/c%23") == 1


def test_list_entries_filters_directories(client, upstream):
    upstream.add(LISTING_URL, [dir_item("rules/react-app"), file_item("rules/README.md")])
    entries = client.list_entries(parse_locator(REFERENCE))
    assert [entry.name for entry in entries] == ["react-app"]
    assert entries[0].kind == "directory"
    assert entries[0].category == "GitHub"
    assert entries[0].description == "Rules for React app"


def test_list_entries_without_directories_is_not_found(client, upstream):
    upstream.add(LISTING_URL, [file_item("rules/README.md")])
    with pytest.raises(NotFoundError):
        client.list_entries(parse_locator(REFERENCE))


def test_unknown_entry_types_are_skipped(client, upstream):
    upstream.add(LISTING_URL, [{"type": "symlink", "name": "x", "path": "rules/x"}, dir_item("rules/a")])
    assert [entry.name for entry in client.list_contents(parse_locator(REFERENCE))] == ["a"]


@pytest.mark.parametrize(
    "payload",
    [
        {"type": "file", "name": "rules", "path": "rules"},
        ["not-an-object"],
        [{"name": "a", "type": "dir"}],
        httpx.Response(200, text="<html>oops</html>"),
    ],
)
def test_malformed_listing(client, upstream, payload):
    upstream.add(LISTING_URL, payload)
    with pytest.raises(MalformedResponseError) as exc:
        client.list_contents(parse_locator(REFERENCE))
    assert exc.value.target == "Acme/templates@main/rules"


def test_missing_path_is_not_found(client):
    with pytest.raises(NotFoundError):
        client.list_contents(parse_locator(REFERENCE))


def test_rate_limit_is_classified(client, upstream):
    upstream.add(LISTING_URL, rate_limited_response())
    with pytest.raises(RateLimitedError):
        client.list_contents(parse_locator(REFERENCE))


def test_timeout_becomes_network_error(client, upstream):
    upstream.add(LISTING_URL, httpx.ConnectTimeout("timed out"))
    with pytest.raises(NetworkError) as exc:
        client.list_contents(parse_locator(REFERENCE))
    assert "timed out" in str(exc.value)
    assert exc.value.kind == "network"


def test_server_error_becomes_network_error(client, upstream):
    upstream.add(LISTING_URL, httpx.Response(502, text="bad gateway"))
    with pytest.raises(NetworkError) as exc:
        client.list_contents(parse_locator(REFERENCE))
    assert exc.value.status == 502


def test_fetch_file_returns_text(client, upstream):
    url = f"{RAW}/Acme/templates/main/rules/react-app/.cursorrules"
    upstream.add(url, "name: React\nbody")
    assert client.fetch_file(url) == "name: React\nbody"


def test_fetch_file_rejects_plain_http(client, upstream):
    with pytest.raises(InvalidLocatorError):
        client.fetch_file("http://raw.githubusercontent.com/Acme/templates/main/x.md")
    assert upstream.requests == []


def test_fetch_file_refuses_redirect_to_plain_http(client, upstream):
    url = f"{RAW}/Acme/templates/main/rules/x.md"
    upstream.add(url, httpx.Response(302, headers={"location": "http://mirror.example/x.md"}))
    upstream.add("http://mirror.example/x.md", "served over plain http")
    with pytest.raises(InvalidLocatorError):
        client.fetch_file(url)
    assert upstream.calls(url) == 1
    assert upstream.calls("http://mirror.example/x.md") == 0


def test_fetch_file_follows_https_redirect(client, upstream):
    url = f"{RAW}/Acme/templates/main/rules/x.md"
    upstream.add(url, httpx.Response(301, headers={"location": f"{RAW}/Acme/templates/main/rules/y.md"}))
    upstream.add(f"{RAW}/Acme/templates/main/rules/y.md", "moved body")
    assert client.fetch_file(url) == "moved body"


def _response(status, **kwargs):
    return httpx.Response(status, request=httpx.Request("GET", "https://api.github.com/x"), **kwargs)


def test_classify_response_mapping():
    assert classify_response(_response(200, json=[]), "t") is None
    assert isinstance(classify_response(_response(404), "t"), NotFoundError)
    assert isinstance(classify_response(_response(429), "t"), RateLimitedError)
    assert isinstance(classify_response(_response(403, json={"message": "API rate limit exceeded"}), "t"), RateLimitedError)
    forbidden = classify_response(_response(403, json={"message": "Resource not accessible"}), "t")
    assert isinstance(forbidden, NetworkError)
    assert forbidden.status == 403
