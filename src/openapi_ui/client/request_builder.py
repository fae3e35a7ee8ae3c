"""Pure helpers that turn an endpoint plus call parameters into a request.

These functions hold no state and perform no I/O, which keeps URL
construction, credential placement and body encoding testable on their own.
:class:`~openapi_ui.client.executor.OperationExecutor` composes them.
"""

from __future__ import annotations

import base64
import json
from typing import Any, Mapping, Optional, Union
from urllib.parse import quote, urlencode

import httpx

from openapi_ui.exceptions import InvalidUsageError
from openapi_ui.models import ParsedApiSpec, SecurityConfig

DEFAULT_CONTENT_TYPE = "application/json"

# Characters left unescaped in path values, besides alphanumerics and "_.-~"
_PATH_SAFE = "!*'()"


class AuthResult:
    """Container for the credentials to inject into a request.

    Args:
        headers: HTTP headers to add (e.g. ``{"Authorization": "Bearer ..."}``).
        params: Query-string parameters to add (e.g. ``{"api_key": "..."}``).
        cookies: Cookies to add (serialised into a ``Cookie`` header).
    """

    def __init__(
        self,
        headers: dict[str, str] | None = None,
        params: dict[str, str] | None = None,
        cookies: dict[str, str] | None = None,
    ):
        self.headers = headers or {}
        self.params = params or {}
        self.cookies = cookies or {}


def stringify(value: Any) -> str:
    """Render a parameter value; booleans become ``true``/``false``."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def resolve_base_url(base_url: Optional[str], spec: Optional[ParsedApiSpec]) -> str:
    """Pick the explicit base URL, else the spec's first server URL.

    Raises:
        InvalidUsageError: If neither is available.
    """
    if base_url:
        return base_url
    if spec is not None and spec.servers:
        return spec.servers[0].url
    raise InvalidUsageError(
        "No base URL available. Provide base_url in the request config "
        "or ensure the OpenAPI spec declares servers."
    )


def substitute_path(path: str, path_params: Mapping[str, Any]) -> str:
    """Replace ``{name}`` placeholders with percent-encoded values.

    Placeholders without a matching key are left untouched.
    """
    for key, value in path_params.items():
        path = path.replace(f"{{{key}}}", quote(stringify(value), safe=_PATH_SAFE))
    return path


def build_url(
    base_url: str,
    path: str,
    path_params: Optional[Mapping[str, Any]] = None,
    query_params: Optional[Mapping[str, Any]] = None,
) -> str:
    """Join *base_url* and the substituted *path*, then append the query.

    The base URL is concatenated with the path rather than resolved against
    it, so a base of ``https://host/v1`` keeps its ``/v1`` prefix.

    Query values: lists and tuples become repeated keys, ``None`` is
    skipped, and any other value replaces an existing key of the same name.

    Example::

        >>> build_url("https://api.example.com", "/users/{id}", {"id": "123"})
        'https://api.example.com/users/123'
    """
    url = base_url.rstrip("/") + substitute_path(path, path_params or {})
    if not query_params:
        return url
    return merge_query(url, query_params)


def merge_query(url: str, query_params: Mapping[str, Any]) -> str:
    """Merge *query_params* into the query string of *url*.

    Only the query is re-encoded; the part before ``?`` is kept verbatim so
    unfilled ``{placeholders}`` survive.
    """
    head, _, query = url.partition("?")
    pairs: list[tuple[str, str]] = list(httpx.QueryParams(query).multi_items())

    for key, value in query_params.items():
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            pairs.extend((key, stringify(item)) for item in value)
        else:
            pairs = [(k, v) for k, v in pairs if k != key]
            pairs.append((key, stringify(value)))

    if not pairs:
        return head
    return f"{head}?{httpx.QueryParams(pairs)}"


def merge_security(
    default: Optional[SecurityConfig], override: Optional[SecurityConfig]
) -> Optional[SecurityConfig]:
    """Overlay per-call credentials on the defaults, scheme by scheme."""
    if default is None:
        return override
    if override is None:
        return default
    merged = default.model_dump(exclude_none=True)
    merged.update(override.model_dump(exclude_none=True))
    return SecurityConfig.model_validate(merged)


def build_auth(security: Optional[SecurityConfig]) -> AuthResult:
    """Translate a :class:`~openapi_ui.models.SecurityConfig` into request parts.

    ``bearer``, ``basic`` and ``oauth2`` all write ``Authorization``; they
    are applied in that order, so the last one present wins.
    """
    result = AuthResult()
    if security is None:
        return result

    if security.api_key is not None:
        api_key = security.api_key
        if api_key.location == "header":
            result.headers[api_key.name] = api_key.value
        elif api_key.location == "query":
            result.params[api_key.name] = api_key.value
        else:
            result.cookies[api_key.name] = api_key.value

    if security.bearer is not None:
        result.headers["Authorization"] = f"Bearer {security.bearer.token}"

    if security.basic is not None:
        raw = f"{security.basic.username}:{security.basic.password}"
        encoded = base64.b64encode(raw.encode()).decode()
        result.headers["Authorization"] = f"Basic {encoded}"

    if security.oauth2 is not None:
        result.headers["Authorization"] = f"Bearer {security.oauth2.token}"

    if security.custom is not None:
        result.headers[security.custom.name] = security.custom.value

    return result


def merge_headers(*sources: Optional[Mapping[str, str]]) -> dict[str, str]:
    """Merge header mappings; later sources win, compared case-insensitively."""
    merged: dict[str, str] = {}
    names: dict[str, str] = {}
    for source in sources:
        for key, value in (source or {}).items():
            previous = names.get(key.lower())
            if previous is not None:
                del merged[previous]
            names[key.lower()] = key
            merged[key] = value
    return merged


def cookie_header(cookies: Mapping[str, str], existing: Optional[str] = None) -> str:
    """Serialise *cookies* into a ``Cookie`` header, after any existing value."""
    cookie_str = "; ".join(f"{k}={v}" for k, v in cookies.items())
    if existing:
        return f"{existing}; {cookie_str}"
    return cookie_str


def encode_body(
    body: Any, content_type: Optional[str]
) -> tuple[Optional[Union[str, bytes]], Optional[dict[str, Any]], Optional[str]]:
    """Encode *body* according to *content_type*.

    Returns:
        A ``(content, files, content_type_header)`` tuple. For multipart
        bodies ``content_type_header`` is ``None`` so that the transport can
        add the boundary itself.
    """
    content_type = content_type or DEFAULT_CONTENT_TYPE

    if "application/json" in content_type:
        return json.dumps(body), None, content_type

    if "multipart/form-data" in content_type:
        fields = body if isinstance(body, Mapping) else {}
        files = {key: (None, stringify(value)) for key, value in fields.items()}
        return None, files, None

    if "application/x-www-form-urlencoded" in content_type:
        items = body.items() if isinstance(body, Mapping) else []
        return urlencode([(k, stringify(v)) for k, v in items]), None, content_type

    if isinstance(body, bytes):
        return body, None, content_type
    return str(body), None, content_type
