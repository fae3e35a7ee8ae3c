"""In-memory caching of normalized specs keyed by URL.

Each entry stores the :class:`~openapi_ui.models.ParsedApiSpec` together
with the time it was stored. An entry is fresh while
``now - timestamp < ttl``; stale entries are reported as misses but kept
until they are overwritten, invalidated or cleared.

See Also:
    :class:`~openapi_ui.models.CacheConfig` -- the Pydantic model that
    controls ``enabled`` and ``ttl_seconds``.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

from openapi_ui.models import CacheConfig, ParsedApiSpec

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    """A cached spec and the clock reading at which it was stored."""

    spec: ParsedApiSpec
    timestamp: float


class SpecCache:
    """URL-keyed cache of normalized specs with a time-to-live.

    The cache is an ordinary object handed to each
    :class:`~openapi_ui.loader.SpecLoader` that should share it; there is no
    process-wide instance.

    Args:
        config: Cache configuration (``enabled`` flag and ``ttl_seconds``).
        clock: Returns the current time in seconds. Defaults to
            :func:`time.monotonic`.

    Example::

        from openapi_ui.cache import SpecCache
        from openapi_ui.models import CacheConfig

        cache = SpecCache(CacheConfig(ttl_seconds=60))
        cache.set("https://api.example.com/openapi.json", parsed)
        hit = cache.get("https://api.example.com/openapi.json")
    """

    def __init__(
        self,
        config: Optional[CacheConfig] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._config = config or CacheConfig()
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    @property
    def config(self) -> CacheConfig:
        return self._config

    def get(self, url: str, max_age: Optional[float] = None) -> Optional[ParsedApiSpec]:
        """Look up a fresh cached spec.

        Args:
            url: The spec URL.
            max_age: Freshness window in seconds for this lookup. Defaults to
                :attr:`~openapi_ui.models.CacheConfig.ttl_seconds`.

        Returns:
            The cached spec on a fresh hit, or ``None`` on a miss, a stale
            entry, or when caching is disabled.
        """
        if not self._config.enabled:
            return None

        entry = self._entries.get(url)
        if entry is None:
            logger.debug("Spec cache miss for %s", url)
            return None

        ttl = self._config.ttl_seconds if max_age is None else max_age
        if self._clock() - entry.timestamp >= ttl:
            logger.debug("Spec cache entry for %s is stale", url)
            return None

        logger.debug("Spec cache hit for %s", url)
        return entry.spec

    def set(self, url: str, spec: ParsedApiSpec) -> None:
        """Store *spec* under *url*, stamped with the current clock reading.

        Silently ignored when caching is disabled.
        """
        if not self._config.enabled:
            return
        self._entries[url] = CacheEntry(spec=spec, timestamp=self._clock())

    def invalidate(self, url: str) -> None:
        """Remove the entry for *url*, if any."""
        self._entries.pop(url, None)

    def clear(self) -> None:
        """Remove all entries from the cache."""
        self._entries.clear()

    def stats(self) -> dict[str, Any]:
        """Return cache statistics.

        Returns:
            A ``dict`` with ``size`` (number of entries, fresh or stale) and
            ``keys`` (the cached URLs in insertion order).
        """
        return {"size": len(self._entries), "keys": list(self._entries)}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, url: object) -> bool:
        return url in self._entries
