"""``search`` command -- ranked endpoint search over a spec."""

from __future__ import annotations

from typing import Optional

import typer

from openapi_ui.commands.common import load_api_spec
from openapi_ui.exceptions import InvalidUsageError
from openapi_ui.models import HTTPMethod, SearchFilters, SearchOptions
from openapi_ui.output import get_output, info
from openapi_ui.search import search_endpoints


def search_command(
    ctx: typer.Context,
    query: str = typer.Argument(..., help="Text to look for."),
    method: Optional[list[str]] = typer.Option(
        None, "--method", "-m", help="Restrict to HTTP method (repeatable)."
    ),
    tag: Optional[list[str]] = typer.Option(
        None, "--tag", "-t", help="Restrict to tag (repeatable)."
    ),
    fuzzy: bool = typer.Option(False, "--fuzzy", help="Also match characters in order."),
    case_sensitive: bool = typer.Option(False, "--case-sensitive", help="Match case exactly."),
    deprecated: Optional[bool] = typer.Option(
        None, "--deprecated/--no-deprecated", help="Only (or never) deprecated endpoints."
    ),
) -> None:
    """Search endpoints by summary, description, id, path, tags and parameters.

    Example::

        openapi-ui search users --method get
        openapi-ui search lstusr --fuzzy
    """
    spec = load_api_spec(ctx)

    try:
        methods = [HTTPMethod(m.lower()) for m in method] if method else None
    except ValueError as exc:
        raise InvalidUsageError(f"Unknown HTTP method: {exc}") from None

    filters = SearchFilters(query=query, methods=methods, tags=tag or None, deprecated=deprecated)
    options = SearchOptions(fuzzy_search=fuzzy, case_sensitive=case_sensitive)
    results = search_endpoints(spec.endpoints, filters, options)

    if not results:
        info(f"No endpoints match {query!r}.")
        return

    rows = [
        [
            r.endpoint.id,
            r.endpoint.method.value.upper(),
            r.endpoint.path,
            f"{r.score:.2f}",
            ", ".join(r.matched_fields),
        ]
        for r in results
    ]
    get_output().print_table(
        ["ID", "Method", "Path", "Score", "Matched"],
        rows,
        title=f"Results for {query!r} ({len(rows)})",
    )
