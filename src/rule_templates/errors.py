"""Error taxonomy for template discovery."""
from __future__ import annotations


class TemplateSourceError(RuntimeError):
    """Base class for failures while discovering remote templates."""

    kind = "unknown"

    def __init__(self, message: str, *, target: str | None = None) -> None:
        if target:
            message = f"{message} ({target})"
        super().__init__(message)
        self.target = target


class InvalidLocatorError(TemplateSourceError):
    """Raised for malformed repository references or unsafe URLs."""

    kind = "invalid_locator"


class NotFoundError(TemplateSourceError):
    """The upstream has nothing at the requested path."""

    kind = "not_found"


class RateLimitedError(TemplateSourceError):
    """The upstream signalled that the request quota is exhausted."""

    kind = "rate_limited"


class NetworkError(TemplateSourceError):
    """Timeouts, transport failures and unexpected HTTP statuses."""

    kind = "network"

    def __init__(self, message: str, *, target: str | None = None, status: int | None = None) -> None:
        super().__init__(message, target=target)
        self.status = status


class MalformedResponseError(TemplateSourceError):
    """The upstream payload did not have the expected shape."""

    kind = "malformed_response"
