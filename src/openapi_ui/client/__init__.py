"""HTTP execution of normalized endpoints for openapi-ui.

Provides the asynchronous :class:`OperationExecutor`, which wraps
:mod:`httpx` with URL building, credential injection, body encoding,
interceptors and cancellation.

Classes:
    :class:`OperationExecutor` -- executes endpoints via :class:`httpx.AsyncClient`.
    :class:`Interceptor` -- base class for request/response/error hooks.
    :class:`ExecutionResult` -- data, status and headers of a successful call.

Example::

    from openapi_ui.client import OperationExecutor

    async with OperationExecutor(parsed) as executor:
        result = await executor.execute(endpoint, ExecuteParams(path_params={"id": 1}))
"""

from openapi_ui.client.executor import EndpointExecutor, OperationExecutor
from openapi_ui.client.hooks import Interceptor, InterceptorChain, PreparedRequest
from openapi_ui.client.response import ExecutionResult

__all__ = [
    "EndpointExecutor",
    "ExecutionResult",
    "Interceptor",
    "InterceptorChain",
    "OperationExecutor",
    "PreparedRequest",
]
