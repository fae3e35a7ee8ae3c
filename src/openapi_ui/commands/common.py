"""Helpers shared by the CLI commands: spec loading and option parsing."""

from __future__ import annotations

import functools
import json
from typing import Any

import typer

from openapi_ui.cache import SpecCache
from openapi_ui.exceptions import InvalidUsageError
from openapi_ui.loader import SpecLoader, default_fetcher
from openapi_ui.models import LoaderConfig, ParsedApiSpec, Settings
from openapi_ui.output import debug
from openapi_ui.parser import load_spec_file


def get_settings(ctx: typer.Context) -> Settings:
    """Return the settings resolved by the root callback."""
    obj = ctx.find_root().obj or {}
    settings = obj.get("settings")
    return settings if settings is not None else Settings()


def is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))


def load_api_spec(ctx: typer.Context) -> ParsedApiSpec:
    """Load and normalize the spec named by ``--spec`` or the settings.

    URLs go through :class:`~openapi_ui.loader.SpecLoader` with the
    configured retries and timeout; anything else is read as a local file.

    Raises:
        InvalidUsageError: If no spec source is configured.
    """
    settings = get_settings(ctx)
    source = settings.spec
    if not source:
        raise InvalidUsageError(
            "No spec given. Pass --spec or set OPENAPI_UI_SPEC."
        )

    loader = SpecLoader(
        cache=SpecCache(settings.cache),
        fetcher=functools.partial(default_fetcher, timeout=settings.timeout),
    )
    if is_url(source):
        debug(f"Fetching spec from {source}")
        config = LoaderConfig(
            url=source, retries=settings.retries, retry_delay=settings.retry_delay
        )
    else:
        debug(f"Reading spec file {source}")
        config = LoaderConfig(spec=load_spec_file(source))
    return loader.load_spec(config)


def parse_pairs(values: list[str] | None, option: str) -> dict[str, str]:
    """Parse repeated ``key=value`` options into a dict.

    Raises:
        InvalidUsageError: If an item has no ``=``.
    """
    pairs: dict[str, str] = {}
    for item in values or []:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise InvalidUsageError(f"Invalid {option} value {item!r}, expected key=value")
        pairs[key] = value
    return pairs


def parse_body(body: str | None) -> Any:
    """Parse *body* as JSON if possible, returning the raw string otherwise."""
    if body is None:
        return None
    try:
        return json.loads(body)
    except json.JSONDecodeError:
        return body
