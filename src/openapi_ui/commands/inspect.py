"""Inspect commands -- read-only views of an OpenAPI spec.

Provides ``info``, ``endpoints``, ``schemas`` and ``schema``. Each loads
the spec named by ``--spec`` (or the configured default), normalizes it,
and prints tables or structured data through the active
:class:`~openapi_ui.output.OutputManager`.
"""

from __future__ import annotations

from typing import Optional

import typer

from openapi_ui.commands.common import load_api_spec
from openapi_ui.endpoints import filter_endpoints, group_endpoints
from openapi_ui.exceptions import InvalidUsageError, OpenApiUIError
from openapi_ui.exit_codes import EXIT_NOT_FOUND
from openapi_ui.models import NormalizedEndpoint
from openapi_ui.output import get_output, info


def info_command(ctx: typer.Context) -> None:
    """Show API info (title, version, servers, counts).

    Example::

        openapi-ui --spec petstore.yaml info
    """
    spec = load_api_spec(ctx)

    data: dict = {
        "title": spec.info.title,
        "version": spec.info.version,
        "openapi_version": spec.openapi_version or "-",
        "description": spec.info.description or "-",
        "servers": [s.url for s in spec.servers],
        "endpoints": len(spec.endpoints),
        "schemas": len(spec.schemas),
        "tags": [t.name for t in spec.tags],
        "security_schemes": sorted(spec.security_schemes or {}),
    }
    if spec.info.contact_email:
        data["contact"] = spec.info.contact_email
    if spec.info.license_name:
        data["license"] = spec.info.license_name

    get_output().format_response(data)


def endpoints_command(
    ctx: typer.Context,
    tag: Optional[str] = typer.Option(None, "--tag", "-t", help="Only endpoints with this tag."),
    method: Optional[str] = typer.Option(None, "--method", "-m", help="Only this HTTP method."),
    group_by: Optional[str] = typer.Option(
        None, "--group-by", "-g", help="Group by tag, method or path."
    ),
) -> None:
    """List endpoints, optionally filtered and grouped.

    Example::

        openapi-ui endpoints --tag users
        openapi-ui endpoints --group-by method
    """
    spec = load_api_spec(ctx)
    endpoints = filter_endpoints(spec.endpoints, tag=tag, method=method)

    headers = ["ID", "Method", "Path", "Summary", "Deprecated"]

    def _row(endpoint: NormalizedEndpoint) -> list[str]:
        return [
            endpoint.id,
            endpoint.method.value.upper(),
            endpoint.path,
            endpoint.summary or "-",
            "Yes" if endpoint.deprecated else "",
        ]

    output = get_output()
    if group_by is None:
        rows = [_row(e) for e in endpoints]
        output.print_table(headers, rows, title=f"{spec.info.title} -- Endpoints ({len(rows)})")
        return

    if group_by not in ("tag", "method", "path"):
        raise InvalidUsageError(f"Invalid --group-by {group_by!r}: use tag, method or path")

    groups = group_endpoints(endpoints, by=group_by)  # type: ignore[arg-type]
    rows = [[name, *_row(e)] for name, members in groups.items() for e in members]
    output.print_table(
        ["Group", *headers], rows, title=f"{spec.info.title} -- Endpoints by {group_by}"
    )


def schemas_command(ctx: typer.Context) -> None:
    """List the schemas defined under ``components.schemas``."""
    spec = load_api_spec(ctx)

    if not spec.schemas:
        info("No schemas defined in this spec.")
        return

    rows: list[list[str]] = []
    for name, schema in sorted(spec.schemas.items()):
        schema_type = schema.type or "object"
        if isinstance(schema_type, list):
            schema_type = "|".join(schema_type)
        prop_names = list(schema.properties or {})
        props = ", ".join(prop_names[:5])
        if len(prop_names) > 5:
            props += "..."
        rows.append([name, schema_type, props])

    get_output().print_table(["Schema", "Type", "Properties"], rows, title=f"Schemas ({len(rows)})")


def schema_command(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Schema name under components.schemas."),
) -> None:
    """Show one normalized schema as JSON."""
    spec = load_api_spec(ctx)

    schema = spec.schemas.get(name)
    if schema is None:
        raise OpenApiUIError(f"Schema '{name}' not found", exit_code=EXIT_NOT_FOUND)

    get_output().format_response(schema.model_dump(by_alias=True, exclude_none=True))
