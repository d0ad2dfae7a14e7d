"""Process-local memoization of listings and fetched templates."""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable

from .client import ContentClient
from .errors import NotFoundError
from .errors import RateLimitedError
from .locator import RepositoryLocator
from .models import RemoteEntry
from .models import Template
from .ratelimit import RateLimitGuard


logger = logging.getLogger(__name__)

CacheKey = tuple[str, str]


@dataclass
class CacheStats:
    listing_hits: int = 0
    listing_misses: int = 0
    content_hits: int = 0
    content_misses: int = 0


class DiscoveryCache:
    """Owns the listing map, the content map and the rate-limit guard.

    A miss performs exactly one upstream call. Concurrent misses for the same
    key may both reach the network; whichever finishes stores its result.
    The lock covers map access only, never network I/O.
    """

    def __init__(self, client: ContentClient, guard: RateLimitGuard | None = None) -> None:
        self.client = client
        self.guard = guard or RateLimitGuard()
        self._listings: dict[CacheKey, tuple[RemoteEntry, ...]] = {}
        self._contents: dict[CacheKey, Template] = {}
        self._lock = threading.Lock()
        self._stats = CacheStats()

    @property
    def degraded(self) -> bool:
        return self.guard.degraded

    def listing(self, locator: RepositoryLocator) -> tuple[RemoteEntry, ...]:
        """Return the cached listing for ``locator`` or fetch it once.

        NotFound is stored as an empty listing. A rate-limit signal trips the
        guard and is re-raised so the caller can substitute placeholders.
        """
        self._ensure_live(str(locator))
        key = (locator.cache_key, locator.sub_path)
        with self._lock:
            cached = self._listings.get(key)
            if cached is not None:
                self._stats.listing_hits += 1
                logger.debug("Listing cache hit for %s", locator)
                return cached
            self._stats.listing_misses += 1

        try:
            entries = tuple(self.client.list_contents(locator))
        except NotFoundError:
            logger.debug("Nothing at %s, caching empty listing", locator)
            entries = ()
        except RateLimitedError as exc:
            self.guard.trip(str(exc))
            raise

        with self._lock:
            return self._listings.setdefault(key, entries)

    def content(
        self,
        locator: RepositoryLocator,
        key_path: str,
        loader: Callable[[], Template],
    ) -> Template:
        """Return the cached template stored under ``key_path`` or build it via ``loader``."""
        self._ensure_live(f"{locator.cache_key}/{key_path}")
        key = (locator.cache_key, key_path)
        with self._lock:
            cached = self._contents.get(key)
            if cached is not None:
                self._stats.content_hits += 1
                logger.debug("Content cache hit for %s", key_path)
                return cached
            self._stats.content_misses += 1

        try:
            template = loader()
        except RateLimitedError as exc:
            self.guard.trip(str(exc))
            raise

        with self._lock:
            return self._contents.setdefault(key, template)

    def fetch_text(self, url: str) -> str:
        try:
            return self.client.fetch_file(url)
        except RateLimitedError as exc:
            self.guard.trip(str(exc))
            raise

    def reset(self) -> None:
        """Drop every cached value and leave degraded mode."""
        with self._lock:
            self._listings.clear()
            self._contents.clear()
            self._stats = CacheStats()
        self.guard.reset()
        logger.debug("Discovery cache reset")

    def stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(**vars(self._stats))

    def _ensure_live(self, target: str) -> None:
        if self.guard.degraded:
            raise RateLimitedError("Serving placeholders until reset", target=target)
