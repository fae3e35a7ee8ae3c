"""Load specs from URLs or inline documents, with retry and caching.

:class:`SpecLoader` is a small state machine over :class:`LoaderStatus`::

    idle --load_spec()--> loading --success--> loaded
                                 \\--failure--> error

A URL load consults the :class:`~openapi_ui.cache.SpecCache` first, then
fetches and normalizes the document, retrying failed attempts with
exponential backoff (``retry_delay * 2**attempt`` seconds). Inline loads are
parsed once with no cache and no retry.

Concurrent loads of the same URL are not coalesced, and a retry sequence
cannot be interrupted once started.
"""

from __future__ import annotations

import enum
import logging
import time
from typing import Callable, Optional

import httpx

from openapi_ui.cache import SpecCache
from openapi_ui.exceptions import InvalidUsageError, SpecLoadError
from openapi_ui.models import LoaderConfig, ParsedApiSpec
from openapi_ui.parser import normalize

logger = logging.getLogger(__name__)

Fetcher = Callable[[str], str]
Listener = Callable[["SpecLoader"], None]


class LoaderStatus(str, enum.Enum):
    """Lifecycle states of a :class:`SpecLoader`."""

    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    ERROR = "error"


def default_fetcher(url: str, timeout: float = 30.0) -> str:
    """Fetch spec text with a plain ``GET``.

    Raises:
        SpecLoadError: On a transport failure or a non-2xx response.
    """
    try:
        response = httpx.get(url, timeout=timeout, follow_redirects=True)
    except httpx.RequestError as exc:
        raise SpecLoadError(f"Failed to fetch spec from {url}: {exc}") from exc

    if not response.is_success:
        raise SpecLoadError(
            f"Failed to fetch spec: {response.status_code} {response.reason_phrase}"
        )
    return response.text


class SpecLoader:
    """Fetches, normalizes and caches OpenAPI specs.

    Args:
        cache: Cache shared with other loaders. A private
            :class:`~openapi_ui.cache.SpecCache` is created when omitted.
        fetcher: Fallback fetch function for configs that do not carry
            their own. Defaults to :func:`default_fetcher`.
        sleep: Called with the backoff delay in seconds between attempts.

    Example::

        loader = SpecLoader()
        url = "https://petstore3.swagger.io/api/v3/openapi.json"
        parsed = loader.load_spec(LoaderConfig(url=url))
        loader.reload()
    """

    def __init__(
        self,
        cache: Optional[SpecCache] = None,
        fetcher: Optional[Fetcher] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._cache = cache if cache is not None else SpecCache()
        self._fetcher: Fetcher = fetcher or default_fetcher
        self._sleep = sleep
        self._status = LoaderStatus.IDLE
        self._spec: Optional[ParsedApiSpec] = None
        self._error: Optional[Exception] = None
        self._config: Optional[LoaderConfig] = None
        self._listeners: list[Listener] = []

    # ------------------------------------------------------------------ #
    # State
    # ------------------------------------------------------------------ #

    @property
    def status(self) -> LoaderStatus:
        return self._status

    @property
    def spec(self) -> Optional[ParsedApiSpec]:
        return self._spec

    @property
    def error(self) -> Optional[Exception]:
        return self._error

    @property
    def loading(self) -> bool:
        return self._status is LoaderStatus.LOADING

    @property
    def current_url(self) -> Optional[str]:
        return self._config.url if self._config is not None else None

    @property
    def cache(self) -> SpecCache:
        return self._cache

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register *listener* for state changes.

        Returns:
            A callable that removes the listener again.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ------------------------------------------------------------------ #
    # Loading
    # ------------------------------------------------------------------ #

    def load_spec(self, config: LoaderConfig) -> ParsedApiSpec:
        """Load a spec from ``config.url`` or ``config.spec``.

        Args:
            config: Exactly one of ``url`` or ``spec`` must be set.

        Returns:
            The normalized spec, also available as :attr:`spec`.

        Raises:
            InvalidUsageError: If neither or both of ``url`` and ``spec``
                are given. The loader moves straight to ``error``.
            SpecLoadError: If fetching fails on every attempt.
            SpecParseError: If the document cannot be decoded.
            ReferenceResolutionError: If a ``$ref`` is broken.
        """
        has_url = config.url is not None
        has_spec = config.spec is not None
        if has_url == has_spec:
            error = InvalidUsageError(
                "Either url or spec must be provided"
                if not has_url
                else "Provide either url or spec, not both"
            )
            self._fail(error)
            raise error

        self._config = config
        self._error = None
        self._set_status(LoaderStatus.LOADING)

        try:
            if config.url is not None:
                parsed = self._load_from_url(config.url, config)
            else:
                parsed = normalize(config.spec)  # type: ignore[arg-type]
        except Exception as exc:
            self._fail(exc)
            raise

        self._spec = parsed
        self._set_status(LoaderStatus.LOADED)
        return parsed

    def reload(self) -> ParsedApiSpec:
        """Invalidate the current URL's cache entry and load it again.

        Raises:
            InvalidUsageError: If the last load was not from a URL.
        """
        if self._config is None or self._config.url is None:
            raise InvalidUsageError("Nothing to reload: no spec URL has been loaded")

        self._cache.invalidate(self._config.url)
        return self.load_spec(self._config)

    def _load_from_url(self, url: str, config: LoaderConfig) -> ParsedApiSpec:
        """Return a cached spec or fetch it, retrying with exponential backoff."""
        cached = self._cache.get(url, max_age=config.cache_duration)
        if cached is not None:
            return cached

        fetch = config.fetcher or self._fetcher
        last_error: Optional[Exception] = None

        for attempt in range(config.retries + 1):
            try:
                parsed = normalize(fetch(url))
            except Exception as exc:
                last_error = exc
                if attempt < config.retries:
                    delay = config.retry_delay * 2 ** attempt
                    logger.info(
                        "Loading %s failed (%s), retrying in %ss (attempt %d/%d)",
                        url,
                        exc,
                        delay,
                        attempt + 1,
                        config.retries,
                    )
                    self._sleep(delay)
                continue

            self._cache.set(url, parsed)
            return parsed

        assert last_error is not None
        logger.warning("Giving up on %s after %d attempts", url, config.retries + 1)
        raise last_error

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _fail(self, error: Exception) -> None:
        self._error = error
        self._spec = None
        self._set_status(LoaderStatus.ERROR)

    def _set_status(self, status: LoaderStatus) -> None:
        self._status = status
        for listener in list(self._listeners):
            listener(self)
