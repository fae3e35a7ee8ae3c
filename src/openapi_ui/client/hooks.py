"""Request interceptors and the chain that runs them.

This module provides three components:

* :class:`PreparedRequest` -- A mutable dataclass describing the request the
  executor is about to send. Request interceptors may rewrite any field,
  including the URL.
* :class:`Interceptor` -- Base class with no-op ``on_request``,
  ``on_response`` and ``on_error`` hooks; subclasses override what they
  need. Hooks may be plain or ``async`` methods.
* :class:`InterceptorChain` -- Runs the hooks of several interceptors in
  registration order, each receiving the previous one's output.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass, field
from typing import Any, Optional, Union

import httpx


@dataclass
class PreparedRequest:
    """Mutable description of an outgoing request.

    Exactly one of ``content`` and ``files`` is set when the request has a
    body. ``files`` holds multipart form fields as ``(None, value)`` tuples,
    which :mod:`httpx` sends without a filename.

    Attributes:
        method: Upper-case HTTP method.
        url: The fully built request URL, including the query string.
        headers: Request headers.
        content: Encoded body for JSON, url-encoded and raw payloads.
        files: Multipart form fields.
    """

    method: str
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    content: Optional[Union[str, bytes]] = None
    files: Optional[dict[str, Any]] = None


class Interceptor:
    """Base class for request interceptors.

    Every hook has a default pass-through implementation, so subclasses
    only override the hooks they care about.

    Example::

        class TraceHeader(Interceptor):
            def on_request(self, request):
                request.headers["X-Trace-Id"] = new_trace_id()
                return request
    """

    def on_request(self, request: PreparedRequest) -> Any:
        """Inspect or rewrite a request before it is sent.

        Returns:
            The request to send (the same or a new :class:`PreparedRequest`).
        """
        return request

    def on_response(self, response: httpx.Response, data: Any) -> Any:
        """Transform parsed response data after a successful call.

        Returns:
            The data handed to the caller.
        """
        return data

    def on_error(self, error: Exception, request: Optional[PreparedRequest]) -> Any:
        """Observe a failed call. *request* is ``None`` if it was never built."""
        return None


async def _resolve(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


class InterceptorChain:
    """Runs interceptor hooks in registration order.

    The chain holds a snapshot of the interceptor list taken at
    construction time.
    """

    def __init__(self, interceptors: Optional[list[Interceptor]] = None) -> None:
        self._interceptors = list(interceptors or [])

    def __len__(self) -> int:
        return len(self._interceptors)

    async def run_request(self, request: PreparedRequest) -> PreparedRequest:
        """Pass *request* through every ``on_request`` hook in turn."""
        for interceptor in self._interceptors:
            result = await _resolve(interceptor.on_request(request))
            if isinstance(result, PreparedRequest):
                request = result
        return request

    async def run_response(self, response: httpx.Response, data: Any) -> Any:
        """Pass *data* through every ``on_response`` hook in turn."""
        for interceptor in self._interceptors:
            data = await _resolve(interceptor.on_response(response, data))
        return data

    async def run_error(
        self, error: Exception, request: Optional[PreparedRequest]
    ) -> None:
        """Notify every ``on_error`` hook.

        An exception raised by a hook propagates and stops the chain; the
        original failure stays reachable as its ``__context__``.
        """
        for interceptor in self._interceptors:
            await _resolve(interceptor.on_error(error, request))
