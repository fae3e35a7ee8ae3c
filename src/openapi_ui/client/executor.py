"""Asynchronous execution of normalized endpoints against a live API.

This module provides :class:`OperationExecutor`, which wraps
:class:`httpx.AsyncClient` and layers on:

- **URL building** -- base URL from the request config or the spec's first
  server, path substitution and query encoding.
- **Auth injection** -- default and per-call
  :class:`~openapi_ui.models.SecurityConfig` merged into headers, query
  parameters or cookies.
- **Interceptors** -- ``on_request``, ``on_response`` and ``on_error``
  hooks via :class:`~openapi_ui.client.hooks.InterceptorChain`.
- **Cancellation** -- :meth:`OperationExecutor.cancel` aborts the most
  recently started call, which then raises
  :class:`~openapi_ui.exceptions.RequestCancelledError`.

The executor also tracks ``loading``, ``error`` and ``result`` for the
benefit of interactive front-ends.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional, Union

import httpx

from openapi_ui.client.hooks import Interceptor, InterceptorChain, PreparedRequest
from openapi_ui.client.request_builder import (
    build_auth,
    build_url,
    cookie_header,
    encode_body,
    merge_headers,
    merge_query,
    merge_security,
    resolve_base_url,
)
from openapi_ui.client.response import (
    ExecutionResult,
    extract_response_data,
    raise_for_status,
)
from openapi_ui.context import ApiContext
from openapi_ui.endpoints import find_endpoint_by_id
from openapi_ui.exceptions import (
    ExecutionError,
    InvalidUsageError,
    OperationNotFoundError,
    RequestCancelledError,
)
from openapi_ui.models import (
    ExecuteParams,
    NormalizedEndpoint,
    ParsedApiSpec,
    RequestConfig,
    SecurityConfig,
)

logger = logging.getLogger(__name__)


class OperationExecutor:
    """Executes endpoints over HTTP.

    Args:
        spec: The spec whose servers and endpoints are used, or an
            :class:`~openapi_ui.context.ApiContext` to read the current
            spec from on every call.
        config: Default request settings (base URL, headers, timeout).
        default_security: Credentials applied to every call; per-call
            security overrides it scheme by scheme.
        interceptors: Hooks run around every call, in order.
        client: An existing :class:`httpx.AsyncClient` to send through.
            When omitted, one is created from *config* and *transport*
            and closed by :meth:`aclose`.
        transport: Transport for the internally created client (e.g.
            :class:`httpx.MockTransport` in tests).

    Example::

        async with OperationExecutor(parsed) as executor:
            result = await executor.execute_by_id(
                "getUser", ExecuteParams(path_params={"id": "123"})
            )
            print(result.status, result.data)
    """

    def __init__(
        self,
        spec: Union[ParsedApiSpec, ApiContext, None] = None,
        config: Optional[RequestConfig] = None,
        default_security: Optional[SecurityConfig] = None,
        interceptors: Optional[list[Interceptor]] = None,
        client: Optional[httpx.AsyncClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._spec_source = spec
        self._config = config or RequestConfig()
        self._default_security = default_security
        self._chain = InterceptorChain(interceptors)
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            transport=transport,
            timeout=self._config.timeout,
            follow_redirects=True,
        )
        self._in_flight: Optional[asyncio.Task[httpx.Response]] = None
        self._cancel_requested: set[asyncio.Task[httpx.Response]] = set()
        self._pending = 0
        self._error: Optional[str] = None
        self._result: Optional[ExecutionResult] = None

    # ------------------------------------------------------------------ #
    # Async context manager
    # ------------------------------------------------------------------ #

    async def __aenter__(self) -> OperationExecutor:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the HTTP client if this executor created it."""
        if self._owns_client:
            await self._client.aclose()

    # ------------------------------------------------------------------ #
    # State
    # ------------------------------------------------------------------ #

    @property
    def spec(self) -> Optional[ParsedApiSpec]:
        if isinstance(self._spec_source, ApiContext):
            return self._spec_source.spec
        return self._spec_source

    @property
    def loading(self) -> bool:
        return self._pending > 0

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def result(self) -> Optional[ExecutionResult]:
        return self._result

    def clear_error(self) -> None:
        self._error = None

    def clear_result(self) -> None:
        self._result = None

    # ------------------------------------------------------------------ #
    # Execution
    # ------------------------------------------------------------------ #

    async def execute_by_id(
        self, operation_id: str, params: Optional[ExecuteParams] = None
    ) -> ExecutionResult:
        """Look up an endpoint by id and execute it.

        Raises:
            InvalidUsageError: If no spec is loaded.
            OperationNotFoundError: If no endpoint has this id.
        """
        spec = self.spec
        if spec is None:
            raise InvalidUsageError("No API specification loaded")

        endpoint = find_endpoint_by_id(spec.endpoints, operation_id)
        if endpoint is None:
            raise OperationNotFoundError(operation_id)
        return await self.execute(endpoint, params)

    async def execute(
        self, endpoint: NormalizedEndpoint, params: Optional[ExecuteParams] = None
    ) -> ExecutionResult:
        """Send the request described by *endpoint* and *params*.

        Args:
            endpoint: The endpoint to call.
            params: Path, query, header, body and security values.

        Returns:
            An :class:`~openapi_ui.client.response.ExecutionResult`.

        Raises:
            InvalidUsageError: If no base URL can be determined.
            ExecutionError: On a transport failure or a non-2xx response.
            RequestCancelledError: If :meth:`cancel` aborted this call.
        """
        params = params or ExecuteParams()
        self._pending += 1
        self._error = None
        self._result = None
        request: Optional[PreparedRequest] = None

        try:
            request = self._prepare(endpoint, params)
            request = await self._chain.run_request(request)
            response = await self._send(request)

            data = extract_response_data(response, parse_json=self._config.parse_json)
            raise_for_status(response, data)
            data = await self._chain.run_response(response, data)

            result = ExecutionResult(
                data=data,
                status=response.status_code,
                headers=response.headers,
                response=response,
            )
            self._result = result
            return result
        except RequestCancelledError:
            logger.debug("Request for %s was cancelled", endpoint.id)
            raise
        except Exception as exc:
            self._error = str(exc)
            await self._chain.run_error(exc, request)
            raise
        finally:
            self._pending -= 1

    def cancel(self) -> bool:
        """Cancel the most recently started in-flight request.

        Returns:
            ``True`` if a request was cancelled.
        """
        task = self._in_flight
        if task is None or task.done():
            return False
        self._cancel_requested.add(task)
        task.cancel()
        return True

    def for_endpoint(self, endpoint: Optional[NormalizedEndpoint]) -> EndpointExecutor:
        """Return an executor bound to *endpoint*."""
        return EndpointExecutor(self, endpoint)

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _prepare(
        self, endpoint: NormalizedEndpoint, params: ExecuteParams
    ) -> PreparedRequest:
        """Build the URL, headers and body for one call."""
        base_url = resolve_base_url(self._config.base_url, self.spec)
        url = build_url(base_url, endpoint.path, params.path_params, params.query_params)

        auth = build_auth(merge_security(self._default_security, params.security))
        if auth.params:
            url = merge_query(url, auth.params)

        headers = merge_headers(self._config.headers, params.headers, auth.headers)
        if auth.cookies:
            headers["Cookie"] = cookie_header(auth.cookies, headers.pop("Cookie", None))

        content = files = None
        if params.body is not None:
            content, files, content_type = encode_body(params.body, params.content_type)
            headers = {k: v for k, v in headers.items() if k.lower() != "content-type"}
            if content_type is not None:
                headers["Content-Type"] = content_type

        return PreparedRequest(
            method=endpoint.method.value.upper(),
            url=url,
            headers=headers,
            content=content,
            files=files,
        )

    async def _send(self, request: PreparedRequest) -> httpx.Response:
        """Send *request* under a task that :meth:`cancel` can abort."""
        http_request = self._client.build_request(
            request.method,
            request.url,
            headers=request.headers,
            content=request.content,
            files=request.files,
            timeout=self._config.timeout,
        )
        logger.debug("Dispatching %s %s", request.method, request.url)

        task = asyncio.ensure_future(self._client.send(http_request))
        self._in_flight = task
        try:
            return await task
        except asyncio.CancelledError:
            if task in self._cancel_requested:
                raise RequestCancelledError(
                    f"Request cancelled: {request.method} {request.url}"
                ) from None
            raise
        except httpx.HTTPError as exc:
            raise ExecutionError(
                f"Request failed: {request.method} {request.url}: {exc}"
            ) from exc
        finally:
            self._cancel_requested.discard(task)
            if self._in_flight is task:
                self._in_flight = None


class EndpointExecutor:
    """An :class:`OperationExecutor` view bound to one endpoint.

    State (``loading``, ``error``, ``result``) is shared with the parent.
    """

    def __init__(
        self, executor: OperationExecutor, endpoint: Optional[NormalizedEndpoint]
    ) -> None:
        self._executor = executor
        self._endpoint = endpoint

    @property
    def endpoint(self) -> Optional[NormalizedEndpoint]:
        return self._endpoint

    def __getattr__(self, name: str) -> Any:
        return getattr(self._executor, name)

    async def execute(self, params: Optional[ExecuteParams] = None) -> ExecutionResult:
        """Execute the bound endpoint.

        Raises:
            InvalidUsageError: If the view was created without an endpoint.
        """
        if self._endpoint is None:
            raise InvalidUsageError("No endpoint provided")
        return await self._executor.execute(self._endpoint, params)
