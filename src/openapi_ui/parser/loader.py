"""Decode OpenAPI documents from text and local files.

This module turns raw spec text into a Python dictionary. JSON and YAML are
both accepted, with JSON attempted first, and the decoded document is
checked for a supported OpenAPI version (3.x; Swagger 2.x is rejected).

The public functions are:

* :func:`parse_spec_string` -- Decode spec text (JSON, then YAML).
* :func:`load_spec_file` -- Read and decode a local ``.json``/``.yaml`` file.
* :func:`validate_openapi_version` -- Check the ``openapi`` version string.

Network fetching, retries and caching live in :mod:`openapi_ui.loader`.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

import yaml

from openapi_ui.exceptions import SpecParseError


def parse_spec_string(content: str) -> dict[str, Any]:
    """Parse spec text as JSON, falling back to YAML.

    Args:
        content: The raw document text.

    Returns:
        The decoded document. It is a fresh object owned by the caller.

    Raises:
        SpecParseError: If the text is neither valid JSON nor valid YAML
            (the message carries both parser errors), or if it decodes to
            something other than a mapping.
    """
    try:
        result = json.loads(content)
    except json.JSONDecodeError as json_error:
        try:
            result = yaml.safe_load(content)
        except yaml.YAMLError as yaml_error:
            raise SpecParseError(
                "Failed to parse OpenAPI specification. "
                f"Invalid JSON: {json_error}. Invalid YAML: {yaml_error}"
            ) from yaml_error

    if not isinstance(result, dict):
        kind = type(result).__name__ if result is not None else "empty document"
        raise SpecParseError(f"Spec must be a JSON/YAML object (got {kind})")
    return result


def load_spec_file(path: str) -> dict[str, Any]:
    """Load a spec from a local file.

    Args:
        path: Path to a JSON or YAML file.

    Returns:
        The decoded document.

    Raises:
        SpecParseError: If the file is missing, unreadable, empty, or
            cannot be parsed.
    """
    file_path = Path(path)
    if not file_path.is_file():
        raise SpecParseError(f"Spec file not found: {path}")

    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SpecParseError(f"Failed to read spec file {path}: {exc}") from exc

    if not content.strip():
        raise SpecParseError(f"Spec file is empty: {path}")

    return parse_spec_string(content)


def validate_openapi_version(spec: dict[str, Any]) -> Optional[str]:
    """Validate and return the OpenAPI version string.

    Any 3.x version is accepted. A document without an ``openapi`` field is
    tolerated and yields ``None``.

    Args:
        spec: The decoded spec dictionary.

    Returns:
        The version string (e.g. ``'3.0.3'``), or ``None`` when absent.

    Raises:
        SpecParseError: For Swagger 2.x documents or non-3.x versions.
    """
    if "swagger" in spec:
        raise SpecParseError(
            f"Swagger {spec['swagger']} is not supported. "
            "Only OpenAPI 3.x documents can be normalized. "
            "Consider converting with https://converter.swagger.io"
        )

    openapi_version = spec.get("openapi")
    if openapi_version is None:
        return None

    version_str = str(openapi_version)
    if not version_str.startswith("3."):
        raise SpecParseError(
            f"Unsupported OpenAPI version: {version_str}. "
            "Only OpenAPI 3.x is supported."
        )
    return version_str
