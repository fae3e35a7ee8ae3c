"""Typer application and CLI entry point for openapi-ui.

This module wires together the top-level Typer application and registers
the built-in commands (``info``, ``endpoints``, ``schemas``, ``schema``,
``search``, ``snippet``, ``call``).

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. Library errors exit with their ``exit_code``;
anything else exits with :data:`~openapi_ui.exit_codes.EXIT_GENERIC_FAILURE`.

See Also:
    :mod:`openapi_ui.config`: Settings resolution used by :func:`main_callback`.
    :mod:`openapi_ui.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from openapi_ui import __version__
from openapi_ui.commands.call import call_command
from openapi_ui.commands.inspect import (
    endpoints_command,
    info_command,
    schema_command,
    schemas_command,
)
from openapi_ui.commands.search import search_command
from openapi_ui.commands.snippet import snippet_command
from openapi_ui.exceptions import OpenApiUIError
from openapi_ui.exit_codes import EXIT_CANCELLED, EXIT_GENERIC_FAILURE

app = typer.Typer(
    name="openapi-ui",
    help="Explore, search and call OpenAPI 3.x specs from the terminal.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"openapi-ui {__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool, no_color: bool) -> None:
    """Send library log records to stderr through Rich."""
    handler = RichHandler(
        console=Console(stderr=True, no_color=no_color),
        show_time=False,
        show_path=False,
    )
    logger = logging.getLogger("openapi_ui")
    logger.handlers = [handler]
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    spec: Optional[str] = typer.Option(
        None, "--spec", "-s", help="OpenAPI spec URL or file path."
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress non-essential output."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug output."),
) -> None:
    """Root callback executed before every command.

    Resolves :class:`~openapi_ui.models.Settings` (flags > environment >
    ``./openapi-ui.json`` > global config), installs the global
    :class:`~openapi_ui.output.OutputManager`, and stores the settings in
    ``ctx.obj`` for the commands.
    """
    from openapi_ui.config import resolve_settings
    from openapi_ui.output import OutputFormat, OutputManager, set_output

    cli_format: Optional[str] = None
    if json_output:
        cli_format = OutputFormat.JSON.value
    elif plain_output:
        cli_format = OutputFormat.PLAIN.value

    settings = resolve_settings(cli_spec=spec, cli_format=cli_format)

    try:
        fmt = OutputFormat(settings.output_format)
    except ValueError:
        fmt = OutputFormat.AUTO

    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))
    _configure_logging(verbose, no_color)

    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings
    ctx.obj["verbose"] = verbose


app.command("info")(info_command)
app.command("endpoints")(endpoints_command)
app.command("schemas")(schemas_command)
app.command("schema")(schema_command)
app.command("search")(search_command)
app.command("snippet")(snippet_command)
app.command("call")(call_command)


def main() -> None:
    """CLI entry point invoked by the ``openapi-ui`` console script.

    :class:`~openapi_ui.exceptions.OpenApiUIError` instances cause a clean
    exit with the error's ``exit_code``. Any other exception is reported
    and exits with :data:`~openapi_ui.exit_codes.EXIT_GENERIC_FAILURE`.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(EXIT_CANCELLED)
    except Exception as exc:
        from openapi_ui.output import error

        if isinstance(exc, OpenApiUIError):
            error(str(exc))
            sys.exit(exc.exit_code)
        error(f"Unexpected error: {exc}")
        sys.exit(EXIT_GENERIC_FAILURE)
