"""Fake contents API shared by the test modules."""
from __future__ import annotations

from typing import Any
from typing import Callable

import httpx

API = "https://api.github.com/repos"
RAW = "https://raw.githubusercontent.com"

Route = Any  # dict/list payload, str body, httpx.Response, or an exception instance


class FakeUpstream:
    """Routes keyed by URL (without query string); records every request."""

    def __init__(self) -> None:
        self.routes: dict[str, Route | Callable[[httpx.Request], Route]] = {}
        self.requests: list[httpx.Request] = []

    def add(self, url: str, payload: Route) -> None:
        self.routes[url] = payload

    def calls(self, url: str) -> int:
        return sum(1 for request in self.requests if _base(request) == url)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(_base(request))
        if route is None:
            return httpx.Response(404, json={"message": "Not Found"})
        if callable(route) and not isinstance(route, httpx.Response):
            route = route(request)
        if isinstance(route, Exception):
            raise route
        if isinstance(route, httpx.Response):
            return route
        if isinstance(route, str):
            return httpx.Response(200, text=route)
        return httpx.Response(200, json=route)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


def _base(request: httpx.Request) -> str:
    return str(request.url).split("?", 1)[0]


def dir_item(path: str) -> dict[str, Any]:
    return {"type": "dir", "name": path.rsplit("/", 1)[-1], "path": path, "download_url": None}


def file_item(path: str, download_url: str | None = None) -> dict[str, Any]:
    return {"type": "file", "name": path.rsplit("/", 1)[-1], "path": path, "download_url": download_url}


def rate_limited_response() -> httpx.Response:
    return httpx.Response(
        403,
        headers={"X-RateLimit-Remaining": "0"},
        json={"message": "API rate limit exceeded for 127.0.0.1."},
    )
