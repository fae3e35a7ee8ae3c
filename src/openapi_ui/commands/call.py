"""``call`` command -- execute an endpoint against the live API.

The response body goes to stdout; the status line goes to stderr so the
body can be piped. Non-2xx responses exit with
:data:`~openapi_ui.exit_codes.EXIT_EXECUTION_ERROR`.
"""

from __future__ import annotations

import asyncio
from typing import Optional

import typer

from openapi_ui.client import ExecutionResult, OperationExecutor
from openapi_ui.commands.common import get_settings, load_api_spec, parse_body, parse_pairs
from openapi_ui.config import resolve_credential
from openapi_ui.endpoints import find_endpoint_by_id
from openapi_ui.exceptions import InvalidUsageError
from openapi_ui.models import (
    ApiKeyAuth,
    BasicAuth,
    BearerAuth,
    ExecuteParams,
    ParsedApiSpec,
    RequestConfig,
    SecurityConfig,
)
from openapi_ui.output import debug, get_output, info, warning


def _build_security(
    bearer: Optional[str], basic: Optional[str], api_key: Optional[str], api_key_in: str
) -> Optional[SecurityConfig]:
    security = SecurityConfig()

    if bearer is not None:
        security.bearer = BearerAuth(token=resolve_credential(bearer))

    if basic is not None:
        username, sep, password = resolve_credential(basic).partition(":")
        if not sep:
            raise InvalidUsageError("--basic expects user:password")
        security.basic = BasicAuth(username=username, password=password)

    if api_key is not None:
        name, sep, value = api_key.partition("=")
        if not sep or not name:
            raise InvalidUsageError("--api-key expects NAME=VALUE")
        if api_key_in not in ("header", "query", "cookie"):
            raise InvalidUsageError("--api-key-in must be header, query or cookie")
        security.api_key = ApiKeyAuth(
            name=name, value=resolve_credential(value), location=api_key_in
        )

    if security == SecurityConfig():
        return None
    return security


async def _execute(
    spec: ParsedApiSpec, operation_id: str, config: RequestConfig, params: ExecuteParams
) -> ExecutionResult:
    async with OperationExecutor(spec, config=config) as executor:
        return await executor.execute_by_id(operation_id, params)


def call_command(
    ctx: typer.Context,
    operation_id: str = typer.Argument(..., help="Endpoint id (operationId or METHOD_path)."),
    path: Optional[list[str]] = typer.Option(None, "--path", help="Path parameter key=value."),
    query: Optional[list[str]] = typer.Option(None, "--query", help="Query parameter key=value."),
    header: Optional[list[str]] = typer.Option(None, "--header", "-H", help="Header key=value."),
    body: Optional[str] = typer.Option(None, "--body", "-d", help="Request body (JSON or text)."),
    content_type: Optional[str] = typer.Option(
        None, "--content-type", help="Body content type (default application/json)."
    ),
    bearer: Optional[str] = typer.Option(
        None, "--bearer", help="Bearer token, or env:VAR / file:PATH."
    ),
    basic: Optional[str] = typer.Option(
        None, "--basic", help="user:password, or env:VAR / file:PATH holding it."
    ),
    api_key: Optional[str] = typer.Option(
        None, "--api-key", help="API key NAME=VALUE (VALUE may be env:VAR / file:PATH)."
    ),
    api_key_in: str = typer.Option(
        "header", "--api-key-in", help="Where to send --api-key: header, query or cookie."
    ),
    base_url: Optional[str] = typer.Option(
        None, "--base-url", help="Override the spec's server URL."
    ),
) -> None:
    """Execute an endpoint and print the response body.

    Example::

        openapi-ui call getUser --path id=123 --bearer env:API_TOKEN
        openapi-ui call createUser --body '{"name": "Ada"}'
    """
    settings = get_settings(ctx)
    spec = load_api_spec(ctx)

    config = RequestConfig(base_url=base_url or settings.base_url, timeout=settings.timeout)
    params = ExecuteParams(
        path_params=parse_pairs(path, "--path"),
        query_params=parse_pairs(query, "--query"),
        headers=parse_pairs(header, "--header"),
        body=parse_body(body),
        content_type=content_type,
        security=_build_security(bearer, basic, api_key, api_key_in),
    )

    endpoint = find_endpoint_by_id(spec.endpoints, operation_id)
    if endpoint is not None and endpoint.deprecated:
        warning(f"{operation_id} is deprecated")

    debug(f"Executing {operation_id}")
    result = asyncio.run(_execute(spec, operation_id, config, params))

    info(f"HTTP {result.status}")
    if result.data is not None:
        get_output().format_response(result.data)
