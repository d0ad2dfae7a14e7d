"""HTTP access to the repository contents API."""
from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx

from .errors import InvalidLocatorError
from .errors import MalformedResponseError
from .errors import NetworkError
from .errors import NotFoundError
from .errors import RateLimitedError
from .errors import TemplateSourceError
from .locator import RepositoryLocator
from .metadata import derive_display_name
from .models import DirectoryEntry
from .models import EntryKind
from .models import RemoteEntry


logger = logging.getLogger(__name__)

DEFAULT_API_BASE = "https://api.github.com"
DEFAULT_TIMEOUT = 10.0
USER_AGENT = "rule-templates"


def classify_response(response: httpx.Response, target: str) -> TemplateSourceError | None:
    """Map an upstream response onto the error taxonomy; ``None`` means success."""
    status = response.status_code
    if status < 400:
        return None
    if status == 404:
        return NotFoundError("Nothing found upstream", target=target)
    if status == 429 or (status == 403 and _quota_exhausted(response)):
        return RateLimitedError("Upstream request quota exhausted", target=target)
    return NetworkError(f"Upstream responded with HTTP {status}", target=target, status=status)


def classify_transport_error(exc: httpx.HTTPError, target: str) -> TemplateSourceError:
    if isinstance(exc, httpx.TimeoutException):
        return NetworkError("Request timed out", target=target)
    return NetworkError(f"Request failed: {exc}", target=target)


def _quota_exhausted(response: httpx.Response) -> bool:
    if response.headers.get("x-ratelimit-remaining") == "0":
        return True
    try:
        body = response.json()
    except ValueError:
        return "rate limit" in response.text.lower()
    message = body.get("message") if isinstance(body, dict) else None
    return isinstance(message, str) and "rate limit" in message.lower()


class ContentClient:
    """Issues listing and raw-content requests against the contents API."""

    def __init__(
        self,
        *,
        token: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        api_base: str = DEFAULT_API_BASE,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._token = token or None
        self._timeout = timeout
        self._api_base = api_base.rstrip("/")
        self._transport = transport

    def contents_url(self, locator: RepositoryLocator) -> str:
        url = f"{self._api_base}/repos/{quote(locator.owner, safe='')}/{quote(locator.collection, safe='')}/contents"
        if locator.sub_path:
            encoded = "/".join(quote(part, safe="") for part in locator.sub_path.split("/"))
            url = f"{url}/{encoded}"
        return url

    def list_contents(self, locator: RepositoryLocator) -> list[RemoteEntry]:
        url = self.contents_url(locator)
        params = {"ref": locator.ref} if locator.ref else None
        logger.info("Listing %s", locator)
        response = self._get(url, target=str(locator), params=params)
        try:
            payload = response.json()
        except ValueError as exc:
            raise MalformedResponseError("Listing response is not JSON", target=str(locator)) from exc
        return _parse_listing(payload, target=str(locator))

    def list_entries(self, locator: RepositoryLocator) -> list[DirectoryEntry]:
        """Directory-typed entries only; raises NotFoundError when there are none."""
        entries = [to_directory_entry(entry) for entry in self.list_contents(locator) if entry.is_dir]
        if not entries:
            raise NotFoundError("No directories found", target=str(locator))
        return entries

    def fetch_file(self, url: str) -> str:
        if not isinstance(url, str) or not url.lower().startswith("https://"):
            raise InvalidLocatorError("Refusing to download over a non-HTTPS URL", target=str(url))
        logger.debug("Downloading %s", url)
        return self._get(url, target=url, https_only=True).text

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": USER_AGENT,
        }
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    def _get(
        self,
        url: str,
        *,
        target: str,
        params: dict[str, str] | None = None,
        https_only: bool = False,
    ) -> httpx.Response:
        event_hooks = {"request": [_require_https]} if https_only else None
        try:
            with httpx.Client(
                timeout=self._timeout,
                headers=self._headers(),
                follow_redirects=True,
                transport=self._transport,
                event_hooks=event_hooks,
            ) as client:
                response = client.get(url, params=params)
                error = classify_response(response, target)
                if error is not None:
                    raise error
                return response
        except httpx.HTTPError as exc:
            raise classify_transport_error(exc, target) from exc


def _require_https(request: httpx.Request) -> None:
    # Runs before every hop, so a redirect cannot downgrade the scheme.
    if request.url.scheme != "https":
        raise InvalidLocatorError("Refusing to download over a non-HTTPS URL", target=str(request.url))


def _parse_listing(payload: Any, *, target: str) -> list[RemoteEntry]:
    if not isinstance(payload, list):
        raise MalformedResponseError("Listing response is not a list", target=target)
    entries: list[RemoteEntry] = []
    for item in payload:
        if not isinstance(item, dict):
            raise MalformedResponseError("Listing item is not an object", target=target)
        name = item.get("name")
        path = item.get("path")
        kind = item.get("type")
        if not isinstance(name, str) or not isinstance(path, str) or not isinstance(kind, str):
            raise MalformedResponseError("Listing item lacks name, path or type", target=target)
        if kind not in (EntryKind.FILE.value, EntryKind.DIR.value):
            continue
        download_url = item.get("download_url")
        entries.append(
            RemoteEntry(
                name=name,
                path=path,
                kind=EntryKind(kind),
                download_url=download_url if isinstance(download_url, str) else None,
            )
        )
    return entries


def to_directory_entry(entry: RemoteEntry) -> DirectoryEntry:
    return DirectoryEntry(
        name=entry.name,
        path=entry.path,
        description=f"Rules for {derive_display_name(entry.name)}",
    )
