"""The current API spec and its lookup helpers, scoped with :mod:`contextvars`.

:class:`ApiContext` owns the loaded :class:`~openapi_ui.models.ParsedApiSpec`
together with its loading and error state. It is either bound to a URL (and
then delegates to a :class:`~openapi_ui.loader.SpecLoader`) or holds an
inline spec that the caller may replace with :meth:`ApiContext.set_spec`.

:func:`provide_context` makes a context current for a block of code, and the
``use_*`` accessors read from whichever context is current::

    ctx = ApiContext(spec=raw_document)
    with provide_context(ctx):
        users = use_endpoints(tag="users")
        pet = use_schema("Pet")

Calling an accessor outside :func:`provide_context` raises
:class:`~openapi_ui.exceptions.InvalidUsageError`.
"""

from __future__ import annotations

import contextlib
import contextvars
import logging
from typing import Any, Callable, Iterator, Optional, Union

from openapi_ui.endpoints import (
    filter_endpoints,
    filter_endpoints_by_tag,
    find_endpoint_by_id,
    find_endpoint_by_method_and_path,
)
from openapi_ui.exceptions import InvalidUsageError
from openapi_ui.loader import SpecLoader
from openapi_ui.models import (
    HTTPMethod,
    LoaderConfig,
    NormalizedEndpoint,
    NormalizedSchema,
    ParsedApiSpec,
)
from openapi_ui.parser import normalize

logger = logging.getLogger(__name__)

Listener = Callable[["ApiContext"], None]
EndpointIdentifier = Union[str, tuple[Union[HTTPMethod, str], str]]

_current: contextvars.ContextVar[Optional[ApiContext]] = contextvars.ContextVar(
    "openapi_ui_context", default=None
)


class ApiContext:
    """Holds the current spec plus loading and error state.

    Args:
        spec: An inline document (dict or JSON/YAML text) or an already
            normalized :class:`~openapi_ui.models.ParsedApiSpec`. Ignored
            when *url* is given.
        url: Bind the context to a spec URL. Call :meth:`load` to fetch it.
        loader: The loader used for *url*. A fresh
            :class:`~openapi_ui.loader.SpecLoader` is created when omitted.
        loader_options: Extra :class:`~openapi_ui.models.LoaderConfig`
            fields (``retries``, ``retry_delay``, ``cache_duration``,
            ``fetcher``) applied to URL loads.
        on_error: Called with the error message whenever an error is set.
        on_loading_change: Called with the new flag whenever loading
            starts or stops.

    An inline spec that fails to normalize does not raise: the failure is
    recorded in :attr:`error` and reported through *on_error*.
    """

    def __init__(
        self,
        spec: Union[ParsedApiSpec, dict[str, Any], str, None] = None,
        *,
        url: Optional[str] = None,
        loader: Optional[SpecLoader] = None,
        loader_options: Optional[dict[str, Any]] = None,
        on_error: Optional[Callable[[str], None]] = None,
        on_loading_change: Optional[Callable[[bool], None]] = None,
    ) -> None:
        self._url = url
        self._loader_options = dict(loader_options or {})
        self._on_error = on_error
        self._on_loading_change = on_loading_change
        self._listeners: list[Listener] = []
        self._spec: Optional[ParsedApiSpec] = None
        self._error: Optional[str] = None
        self._loading = False

        self._loader: Optional[SpecLoader] = None
        if url is not None:
            self._loader = loader or SpecLoader()
            self._loader.subscribe(self._sync_from_loader)
        elif isinstance(spec, ParsedApiSpec):
            self._spec = spec
        elif spec is not None:
            try:
                self._spec = normalize(spec)
            except Exception as exc:
                logger.warning("Failed to parse OpenAPI specification: %s", exc)
                self._set_error(str(exc) or "Failed to parse OpenAPI specification")

    # ------------------------------------------------------------------ #
    # State
    # ------------------------------------------------------------------ #

    @property
    def spec(self) -> Optional[ParsedApiSpec]:
        return self._spec

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def url(self) -> Optional[str]:
        return self._url

    @property
    def loader(self) -> Optional[SpecLoader]:
        return self._loader

    @property
    def endpoints(self) -> list[NormalizedEndpoint]:
        return list(self._spec.endpoints) if self._spec else []

    @property
    def schemas(self) -> dict[str, NormalizedSchema]:
        return dict(self._spec.schemas) if self._spec else {}

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register *listener* to be called after every state change.

        Returns:
            A callable that removes the listener again.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ------------------------------------------------------------------ #
    # Actions
    # ------------------------------------------------------------------ #

    def load(self) -> Optional[ParsedApiSpec]:
        """Fetch the bound URL through the loader.

        Load failures are recorded in :attr:`error` rather than raised.

        Raises:
            InvalidUsageError: If the context is not bound to a URL.
        """
        if self._loader is None or self._url is None:
            raise InvalidUsageError("load() requires a context bound to a URL")
        try:
            return self._loader.load_spec(
                LoaderConfig(url=self._url, **self._loader_options)
            )
        except Exception as exc:
            logger.warning("Failed to load %s: %s", self._url, exc)
            return None

    def reload(self) -> Optional[ParsedApiSpec]:
        """Invalidate the cached spec for the bound URL and load it again."""
        if self._loader is None:
            raise InvalidUsageError("reload() requires a context bound to a URL")
        try:
            return self._loader.reload()
        except InvalidUsageError:
            raise
        except Exception as exc:
            logger.warning("Failed to reload %s: %s", self._url, exc)
            return None

    def set_spec(self, spec: ParsedApiSpec) -> None:
        """Replace the inline spec and clear any error.

        Ignored with a warning when the context is bound to a URL.
        """
        if self._url is not None:
            logger.warning(
                "Cannot set spec when using URL loading. Use reload() or load() instead."
            )
            return
        self._spec = spec
        self._error = None
        self._notify()

    def set_error(self, error: Optional[str]) -> None:
        """Set or clear the error. Ignored with a warning when URL-bound."""
        if self._url is not None:
            logger.warning("Cannot set error when using URL loading")
            return
        self._set_error(error)

    def set_loading(self, loading: bool) -> None:
        """Accepted for symmetry; inline contexts never report loading."""
        if self._url is not None:
            logger.warning("Cannot set loading when using URL loading")

    # ------------------------------------------------------------------ #
    # Lookups
    # ------------------------------------------------------------------ #

    def get_endpoint_by_id(self, endpoint_id: str) -> Optional[NormalizedEndpoint]:
        return find_endpoint_by_id(self.endpoints, endpoint_id)

    def get_endpoint_by_method_and_path(
        self, method: Union[HTTPMethod, str], path: str
    ) -> Optional[NormalizedEndpoint]:
        return find_endpoint_by_method_and_path(self.endpoints, method, path)

    def get_schema(self, name: str) -> Optional[NormalizedSchema]:
        return self._spec.schemas.get(name) if self._spec else None

    def get_endpoints_by_tag(self, tag: str) -> list[NormalizedEndpoint]:
        return filter_endpoints_by_tag(self.endpoints, tag)

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _sync_from_loader(self, loader: SpecLoader) -> None:
        was_loading = self._loading
        self._loading = loader.loading
        self._spec = loader.spec
        self._error = str(loader.error) if loader.error else None

        if was_loading != self._loading and self._on_loading_change:
            self._on_loading_change(self._loading)
        if self._error and self._on_error:
            self._on_error(self._error)
        self._notify()

    def _set_error(self, error: Optional[str]) -> None:
        self._error = error
        if error and self._on_error:
            self._on_error(error)
        self._notify()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)


@contextlib.contextmanager
def provide_context(context: ApiContext) -> Iterator[ApiContext]:
    """Make *context* current for the duration of the ``with`` block.

    Contexts nest: the innermost one wins, and the previous one is restored
    on exit.
    """
    token = _current.set(context)
    try:
        yield context
    finally:
        _current.reset(token)


def get_current_context() -> Optional[ApiContext]:
    """Return the current context, or ``None`` outside :func:`provide_context`."""
    return _current.get()


def use_api_context(accessor: str = "use_api_context") -> ApiContext:
    """Return the current context.

    Raises:
        InvalidUsageError: Outside :func:`provide_context`.
    """
    context = _current.get()
    if context is None:
        raise InvalidUsageError(f"{accessor} must be used within provide_context()")
    return context


def use_api_spec() -> Optional[ParsedApiSpec]:
    """Return the current spec, or ``None`` while nothing is loaded."""
    return use_api_context("use_api_spec").spec


def use_endpoints(
    *,
    tag: Optional[str] = None,
    method: Optional[Union[HTTPMethod, str]] = None,
    search: Optional[str] = None,
    predicate: Optional[Callable[[NormalizedEndpoint], bool]] = None,
) -> list[NormalizedEndpoint]:
    """Return the current endpoints, optionally filtered.

    See :func:`~openapi_ui.endpoints.filter_endpoints` for the filters.
    """
    context = use_api_context("use_endpoints")
    return filter_endpoints(
        context.endpoints, tag=tag, method=method, search=search, predicate=predicate
    )


def use_endpoint(identifier: EndpointIdentifier) -> Optional[NormalizedEndpoint]:
    """Look up one endpoint by id, or by a ``(method, path)`` tuple."""
    context = use_api_context("use_endpoint")
    if isinstance(identifier, str):
        return context.get_endpoint_by_id(identifier)
    method, path = identifier
    return context.get_endpoint_by_method_and_path(method, path)


def use_schema(name: str) -> Optional[NormalizedSchema]:
    """Return the named component schema, or ``None`` when absent."""
    return use_api_context("use_schema").get_schema(name)


def use_schemas() -> dict[str, NormalizedSchema]:
    """Return all component schemas by name."""
    return use_api_context("use_schemas").schemas
