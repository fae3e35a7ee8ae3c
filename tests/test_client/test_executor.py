"""Tests for the asynchronous OperationExecutor."""

from __future__ import annotations

import asyncio
import json
from typing import Any, Callable, Optional

import httpx
import pytest

from openapi_ui.client import (
    EndpointExecutor,
    ExecutionResult,
    Interceptor,
    OperationExecutor,
    PreparedRequest,
)
from openapi_ui.context import ApiContext
from openapi_ui.exceptions import (
    ExecutionError,
    InvalidUsageError,
    OperationNotFoundError,
    RequestCancelledError,
)
from openapi_ui.models import (
    ApiKeyAuth,
    BearerAuth,
    ExecuteParams,
    ParsedApiSpec,
    RequestConfig,
    SecurityConfig,
)
from openapi_ui.parser import normalize


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class Recorder:
    """MockTransport handler that records requests and replies with JSON."""

    def __init__(
        self, status_code: int = 200, body: Any = None, content_type: str = "application/json"
    ) -> None:
        self.status_code = status_code
        self.body = {"ok": True} if body is None else body
        self.content_type = content_type
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.content_type == "application/json":
            content = json.dumps(self.body).encode()
        else:
            content = str(self.body).encode()
        return httpx.Response(
            self.status_code, headers={"content-type": self.content_type}, content=content
        )

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


def _run(
    spec: Any,
    action: Callable[[OperationExecutor], Any],
    handler: Optional[Callable[..., Any]] = None,
    **kwargs: Any,
) -> Any:
    """Build an executor over a MockTransport and run *action* against it."""

    async def scenario() -> Any:
        transport = httpx.MockTransport(handler or Recorder())
        async with OperationExecutor(spec, transport=transport, **kwargs) as executor:
            return await action(executor)

    return asyncio.run(scenario())


# ---------------------------------------------------------------------------
# Request building
# ---------------------------------------------------------------------------


class TestRequest:
    def test_get_with_path_param(self, users_api: ParsedApiSpec) -> None:
        recorder = Recorder(body={"id": "123", "name": "Ada"})

        result = _run(
            users_api,
            lambda ex: ex.execute_by_id("getUser", ExecuteParams(path_params={"id": "123"})),
            recorder,
        )

        assert str(recorder.last.url) == "https://api.example.com/users/123"
        assert recorder.last.method == "GET"
        assert result.status == 200
        assert result.data == {"id": "123", "name": "Ada"}
        assert result.headers["content-type"] == "application/json"

    def test_base_url_from_config(self, users_api: ParsedApiSpec) -> None:
        recorder = Recorder()
        _run(
            users_api,
            lambda ex: ex.execute_by_id("listUsers", ExecuteParams(query_params={"limit": 5})),
            recorder,
            config=RequestConfig(base_url="http://localhost:8080/v2"),
        )
        assert str(recorder.last.url) == "http://localhost:8080/v2/users?limit=5"

    def test_json_body_and_headers(self, users_api: ParsedApiSpec) -> None:
        recorder = Recorder(status_code=201, body={"id": "7"})

        result = _run(
            users_api,
            lambda ex: ex.execute_by_id(
                "createUser",
                ExecuteParams(body={"name": "Ada"}, headers={"X-Trace-Id": "t-1"}),
            ),
            recorder,
            config=RequestConfig(headers={"Accept": "application/json"}),
        )

        request = recorder.last
        assert request.method == "POST"
        assert json.loads(request.content) == {"name": "Ada"}
        assert request.headers["content-type"] == "application/json"
        assert request.headers["x-trace-id"] == "t-1"
        assert request.headers["accept"] == "application/json"
        assert result.status == 201

    def test_body_content_type_replaces_header(self, users_api: ParsedApiSpec) -> None:
        recorder = Recorder()
        _run(
            users_api,
            lambda ex: ex.execute_by_id(
                "createUser",
                ExecuteParams(
                    body={"name": "Ada"},
                    content_type="application/x-www-form-urlencoded",
                    headers={"content-type": "text/plain"},
                ),
            ),
            recorder,
        )
        assert recorder.last.headers["content-type"] == "application/x-www-form-urlencoded"
        assert recorder.last.content == b"name=Ada"

    def test_multipart_body(self, users_api: ParsedApiSpec) -> None:
        recorder = Recorder()
        _run(
            users_api,
            lambda ex: ex.execute_by_id(
                "createUser",
                ExecuteParams(body={"name": "Ada"}, content_type="multipart/form-data"),
            ),
            recorder,
        )
        request = recorder.last
        assert request.headers["content-type"].startswith("multipart/form-data; boundary=")
        assert b'name="name"' in request.content
        assert b"Ada" in request.content

    def test_no_body_for_get(self, users_api: ParsedApiSpec) -> None:
        recorder = Recorder()
        _run(users_api, lambda ex: ex.execute_by_id("listUsers"), recorder)
        assert recorder.last.content == b""
        assert "content-type" not in recorder.last.headers


# ---------------------------------------------------------------------------
# Credentials
# ---------------------------------------------------------------------------


class TestSecurity:
    def test_default_bearer(self, users_api: ParsedApiSpec) -> None:
        recorder = Recorder()
        _run(
            users_api,
            lambda ex: ex.execute_by_id("listUsers"),
            recorder,
            default_security=SecurityConfig(bearer=BearerAuth(token="test-token")),
        )
        assert recorder.last.headers["authorization"] == "Bearer test-token"

    def test_per_call_overrides_default(self, users_api: ParsedApiSpec) -> None:
        recorder = Recorder()
        _run(
            users_api,
            lambda ex: ex.execute_by_id(
                "listUsers",
                ExecuteParams(security=SecurityConfig(bearer=BearerAuth(token="call"))),
            ),
            recorder,
            default_security=SecurityConfig(bearer=BearerAuth(token="default")),
        )
        assert recorder.last.headers["authorization"] == "Bearer call"

    def test_api_key_in_query(self, users_api: ParsedApiSpec) -> None:
        recorder = Recorder()
        security = SecurityConfig(api_key=ApiKeyAuth(name="api_key", value="secret-key", location="query"))
        _run(
            users_api,
            lambda ex: ex.execute_by_id(
                "listUsers", ExecuteParams(query_params={"limit": 1}, security=security)
            ),
            recorder,
        )
        assert recorder.last.url.params["api_key"] == "secret-key"
        assert recorder.last.url.params["limit"] == "1"

    def test_api_key_cookie_appends(self, users_api: ParsedApiSpec) -> None:
        recorder = Recorder()
        security = SecurityConfig(api_key=ApiKeyAuth(name="session", value="abc", location="cookie"))
        _run(
            users_api,
            lambda ex: ex.execute_by_id(
                "listUsers", ExecuteParams(headers={"Cookie": "theme=dark"}, security=security)
            ),
            recorder,
        )
        assert recorder.last.headers["cookie"] == "theme=dark; session=abc"


# ---------------------------------------------------------------------------
# Interceptors
# ---------------------------------------------------------------------------


class TraceHeader(Interceptor):
    def on_request(self, request: PreparedRequest) -> PreparedRequest:
        request.headers["X-Trace-Id"] = "trace-1"
        return request


class Unwrap(Interceptor):
    async def on_response(self, response: httpx.Response, data: Any) -> Any:
        return data["items"]


class Rewrite(Interceptor):
    def on_request(self, request: PreparedRequest) -> PreparedRequest:
        return PreparedRequest(method=request.method, url="https://mirror.example.com/users")


class ErrorLog(Interceptor):
    def __init__(self) -> None:
        self.calls: list[tuple[Exception, Optional[PreparedRequest]]] = []

    def on_error(self, error: Exception, request: Optional[PreparedRequest]) -> None:
        self.calls.append((error, request))


class Exploding(Interceptor):
    def on_error(self, error: Exception, request: Optional[PreparedRequest]) -> None:
        raise RuntimeError("hook failed")


class TestInterceptors:
    def test_request_and_response_hooks(self, users_api: ParsedApiSpec) -> None:
        recorder = Recorder(body={"items": [1, 2]})
        result = _run(
            users_api,
            lambda ex: ex.execute_by_id("listUsers"),
            recorder,
            interceptors=[TraceHeader(), Unwrap()],
        )
        assert recorder.last.headers["x-trace-id"] == "trace-1"
        assert result.data == [1, 2]

    def test_request_hook_may_replace_request(self, users_api: ParsedApiSpec) -> None:
        recorder = Recorder()
        _run(users_api, lambda ex: ex.execute_by_id("listUsers"), recorder, interceptors=[Rewrite()])
        assert str(recorder.last.url) == "https://mirror.example.com/users"

    def test_error_hook_sees_failure(self, users_api: ParsedApiSpec) -> None:
        log = ErrorLog()
        with pytest.raises(ExecutionError):
            _run(
                users_api,
                lambda ex: ex.execute_by_id("getUser", ExecuteParams(path_params={"id": "1"})),
                Recorder(status_code=500, body={}),
                interceptors=[log],
            )
        error, request = log.calls[0]
        assert isinstance(error, ExecutionError)
        assert request.url == "https://api.example.com/users/1"

    def test_failing_error_hook_propagates(self, users_api: ParsedApiSpec) -> None:
        log = ErrorLog()
        with pytest.raises(RuntimeError, match="hook failed") as exc_info:
            _run(
                users_api,
                lambda ex: ex.execute_by_id("listUsers"),
                Recorder(status_code=500, body={}),
                interceptors=[Exploding(), log],
            )
        assert isinstance(exc_info.value.__context__, ExecutionError)
        assert log.calls == []


# ---------------------------------------------------------------------------
# Errors and state
# ---------------------------------------------------------------------------


class TestErrors:
    def test_non_2xx_uses_body_message(self, users_api: ParsedApiSpec) -> None:
        async def action(ex: OperationExecutor) -> OperationExecutor:
            with pytest.raises(ExecutionError, match="User not found") as exc_info:
                await ex.execute_by_id("getUser", ExecuteParams(path_params={"id": "9"}))
            assert exc_info.value.status_code == 404
            return ex

        executor = _run(users_api, action, Recorder(status_code=404, body={"message": "User not found"}))
        assert executor.error == "User not found"
        assert executor.result is None
        assert not executor.loading

    def test_transport_failure(self, users_api: ParsedApiSpec) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(ExecutionError, match="Request failed: GET https://api.example.com/users"):
            _run(users_api, lambda ex: ex.execute_by_id("listUsers"), handler)

    def test_unknown_operation(self, users_api: ParsedApiSpec) -> None:
        with pytest.raises(OperationNotFoundError, match='Operation with ID "nope" not found'):
            _run(users_api, lambda ex: ex.execute_by_id("nope"))

    def test_no_spec(self) -> None:
        with pytest.raises(InvalidUsageError, match="No API specification loaded"):
            _run(None, lambda ex: ex.execute_by_id("listUsers"))

    def test_no_base_url(self) -> None:
        spec = normalize({"openapi": "3.0.0", "paths": {"/ping": {"get": {"operationId": "ping"}}}})
        log = ErrorLog()
        with pytest.raises(InvalidUsageError, match="No base URL"):
            _run(spec, lambda ex: ex.execute_by_id("ping"), interceptors=[log])
        assert log.calls[0][1] is None

    def test_result_and_clear(self, users_api: ParsedApiSpec) -> None:
        async def action(ex: OperationExecutor) -> None:
            result = await ex.execute_by_id("listUsers")
            assert ex.result is result
            ex.clear_result()
            assert ex.result is None

        _run(users_api, action)

    def test_success_clears_previous_error(self, users_api: ParsedApiSpec) -> None:
        responses = iter([Recorder(status_code=500, body={}), Recorder()])

        def handler(request: httpx.Request) -> httpx.Response:
            return next(responses)(request)

        async def action(ex: OperationExecutor) -> None:
            with pytest.raises(ExecutionError):
                await ex.execute_by_id("listUsers")
            assert ex.error is not None
            await ex.execute_by_id("listUsers")
            assert ex.error is None

        _run(users_api, action, handler)


# ---------------------------------------------------------------------------
# Cancellation
# ---------------------------------------------------------------------------


class TestCancel:
    def test_cancel_in_flight(self, users_api: ParsedApiSpec) -> None:
        async def scenario() -> OperationExecutor:
            started = asyncio.Event()

            async def handler(request: httpx.Request) -> httpx.Response:
                started.set()
                await asyncio.sleep(10)
                return httpx.Response(200)

            executor = OperationExecutor(users_api, transport=httpx.MockTransport(handler))
            async with executor:
                task = asyncio.ensure_future(executor.execute_by_id("listUsers"))
                await started.wait()
                assert executor.loading
                assert executor.cancel() is True
                with pytest.raises(RequestCancelledError):
                    await task
            return executor

        executor = asyncio.run(scenario())
        assert executor.error is None
        assert not executor.loading

    def test_cancel_aborts_only_latest_call(self, users_api: ParsedApiSpec) -> None:
        async def scenario() -> tuple[OperationExecutor, ExecutionResult, BaseException]:
            release = asyncio.Event()
            seen: list[str] = []

            async def handler(request: httpx.Request) -> httpx.Response:
                seen.append(request.url.params["call"])
                await release.wait()
                return httpx.Response(200, json={"call": request.url.params["call"]})

            async def wait_for(count: int) -> None:
                while len(seen) < count:
                    await asyncio.sleep(0)

            executor = OperationExecutor(users_api, transport=httpx.MockTransport(handler))
            async with executor:
                first = asyncio.ensure_future(
                    executor.execute_by_id("listUsers", ExecuteParams(query_params={"call": "1"}))
                )
                await wait_for(1)
                second = asyncio.ensure_future(
                    executor.execute_by_id("listUsers", ExecuteParams(query_params={"call": "2"}))
                )
                await wait_for(2)

                assert executor.cancel() is True
                release.set()
                outcomes = await asyncio.gather(first, second, return_exceptions=True)
            return executor, outcomes[0], outcomes[1]

        executor, first, second = asyncio.run(scenario())
        assert isinstance(first, ExecutionResult)
        assert first.data == {"call": "1"}
        assert isinstance(second, RequestCancelledError)
        assert executor.error is None
        assert executor.result is first
        assert not executor.loading

    def test_cancel_with_nothing_in_flight(self, users_api: ParsedApiSpec) -> None:
        assert _run(users_api, lambda ex: _async(ex.cancel())) is False


async def _async(value: Any) -> Any:
    return value


# ---------------------------------------------------------------------------
# Spec sources and endpoint views
# ---------------------------------------------------------------------------


class TestSpecSource:
    def test_reads_spec_from_context(self, users_api: ParsedApiSpec) -> None:
        ctx = ApiContext()
        recorder = Recorder()

        async def action(ex: OperationExecutor) -> None:
            with pytest.raises(InvalidUsageError):
                await ex.execute_by_id("listUsers")
            ctx.set_spec(users_api)
            await ex.execute_by_id("listUsers")

        _run(ctx, action, recorder)
        assert len(recorder.requests) == 1

    def test_external_client_is_not_closed(self, users_api: ParsedApiSpec) -> None:
        async def scenario() -> bool:
            client = httpx.AsyncClient(transport=httpx.MockTransport(Recorder()))
            async with OperationExecutor(users_api, client=client) as executor:
                await executor.execute_by_id("listUsers")
            closed = client.is_closed
            await client.aclose()
            return closed

        assert asyncio.run(scenario()) is False


class TestEndpointExecutor:
    def test_bound_execute(self, users_api: ParsedApiSpec) -> None:
        recorder = Recorder()
        endpoint = users_api.endpoints[0]

        async def action(ex: OperationExecutor) -> Any:
            view = ex.for_endpoint(endpoint)
            assert isinstance(view, EndpointExecutor)
            assert view.endpoint is endpoint
            result = await view.execute(ExecuteParams(query_params={"limit": 2}))
            assert view.result is result
            return result

        _run(users_api, action, recorder)
        assert str(recorder.last.url) == "https://api.example.com/users?limit=2"

    def test_unbound_raises(self, users_api: ParsedApiSpec) -> None:
        with pytest.raises(InvalidUsageError, match="No endpoint provided"):
            _run(users_api, lambda ex: ex.for_endpoint(None).execute())
