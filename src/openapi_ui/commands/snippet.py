"""``snippet`` command -- print a ready-to-run request in one of eight languages."""

from __future__ import annotations

from typing import Optional

import typer

from openapi_ui.codegen import CodeSnippetGenerator
from openapi_ui.commands.common import load_api_spec, parse_body, parse_pairs
from openapi_ui.config import resolve_credential
from openapi_ui.models import CodeSnippetOptions, SnippetAuth, SnippetParameters
from openapi_ui.output import get_output


def snippet_command(
    ctx: typer.Context,
    operation_id: str = typer.Argument(..., help="Endpoint id (operationId or METHOD_path)."),
    lang: str = typer.Option(
        "curl", "--lang", "-l", help="curl, javascript, typescript, python, node, php, java or go."
    ),
    bearer: Optional[str] = typer.Option(
        None, "--bearer", help="Bearer token, or env:VAR / file:PATH."
    ),
    path: Optional[list[str]] = typer.Option(None, "--path", help="Path parameter key=value."),
    query: Optional[list[str]] = typer.Option(None, "--query", help="Query parameter key=value."),
    header: Optional[list[str]] = typer.Option(None, "--header", "-H", help="Header key=value."),
    body: Optional[str] = typer.Option(None, "--body", "-d", help="Request body (JSON or text)."),
    server: Optional[str] = typer.Option(
        None, "--server", help="Server URL to use instead of the spec's."
    ),
) -> None:
    """Generate a code snippet for an endpoint.

    Example::

        openapi-ui snippet getUser --lang python --path id=123 --bearer env:API_TOKEN
    """
    spec = load_api_spec(ctx)

    auth = None
    if bearer is not None:
        auth = SnippetAuth(type="bearer", bearer={"token": resolve_credential(bearer)})

    options = CodeSnippetOptions(
        language=lang,
        auth=auth,
        server_url=server,
        parameters=SnippetParameters(
            path_params=parse_pairs(path, "--path"),
            query_params=parse_pairs(query, "--query"),
            headers=parse_pairs(header, "--header"),
            body=parse_body(body),
        ),
    )
    result = CodeSnippetGenerator(spec).generate(operation_id, options)

    get_output().print_code(result.code, result.language.id)
