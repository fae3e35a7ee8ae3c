"""Shared request model and base class for the snippet generators.

Every language generator receives the same :class:`SnippetRequest`, built
once by :func:`prepare_request` from an endpoint and its
:class:`~openapi_ui.models.CodeSnippetOptions`. Generators share no output
structure beyond that: each one is a standalone string builder for its
language's usual HTTP client.
"""

from __future__ import annotations

import base64
import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional

from openapi_ui.client.request_builder import merge_query, stringify
from openapi_ui.models import (
    CodeSnippetLanguage,
    CodeSnippetOptions,
    NormalizedEndpoint,
    ParsedApiSpec,
    SnippetAuth,
)

DEFAULT_SERVER_URL = "https://api.example.com"

BODY_METHODS = frozenset({"POST", "PUT", "PATCH"})


@dataclass
class SnippetRequest:
    """Everything a generator needs to render one request.

    Attributes:
        endpoint: The endpoint being rendered.
        method: Upper-case HTTP method.
        url: Absolute URL with path values and query string filled in.
        headers: Auth headers followed by caller headers (caller wins).
            ``Content-Type`` is not included; generators add it for bodies.
        body: The example body, or ``None`` when the request has none.
        summary: Comment line for the snippet.
    """

    endpoint: NormalizedEndpoint
    method: str
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    body: Any = None
    summary: str = "API Request"

    @property
    def has_body(self) -> bool:
        return self.body is not None


class SnippetGenerator(ABC):
    """Base class for language generators.

    Subclasses set :attr:`language` and implement :meth:`render`.
    Generators are registered with
    :class:`~openapi_ui.codegen.generator.CodeSnippetGenerator` by their
    language id.
    """

    language: CodeSnippetLanguage

    @abstractmethod
    def render(self, request: SnippetRequest) -> str:
        """Return the snippet text for *request*."""


def resolve_server_url(
    server_url: Optional[str], spec: Optional[ParsedApiSpec]
) -> str:
    """Pick the option override, else the first server, else the placeholder host."""
    if server_url:
        return server_url
    if spec is not None and spec.servers:
        return spec.servers[0].url
    return DEFAULT_SERVER_URL


def auth_headers(auth: Optional[SnippetAuth]) -> dict[str, str]:
    """Headers rendered for *auth*, selected by ``auth.type``."""
    if auth is None:
        return {}

    if auth.type == "apiKey":
        if auth.api_key is not None and auth.api_key.location == "header":
            return {auth.api_key.name: auth.api_key.value}
    elif auth.type == "bearer":
        if auth.bearer is not None and auth.bearer.token:
            return {"Authorization": f"Bearer {auth.bearer.token}"}
    elif auth.type == "basic":
        if auth.basic is not None and auth.basic.username and auth.basic.password:
            raw = f"{auth.basic.username}:{auth.basic.password}"
            return {"Authorization": f"Basic {base64.b64encode(raw.encode()).decode()}"}
    elif auth.type == "oauth2":
        if auth.oauth2 is not None and auth.oauth2.token:
            return {"Authorization": f"Bearer {auth.oauth2.token}"}
    return {}


def _is_blank(body: Any) -> bool:
    """True for ``None`` and empty scalars (``""``, ``0``, ``False``).

    Empty containers still count as a body.
    """
    return body is None or (isinstance(body, (str, int, float)) and not body)


def prepare_request(
    endpoint: NormalizedEndpoint,
    options: CodeSnippetOptions,
    spec: Optional[ParsedApiSpec] = None,
) -> SnippetRequest:
    """Build the :class:`SnippetRequest` shared by all generators.

    Path values are inserted verbatim. ``None`` query values are skipped.
    An API key placed in the query is appended to the URL when auth is
    included. A non-blank body is kept only for POST, PUT and PATCH.
    """
    params = options.parameters
    method = endpoint.method.value.upper()

    path = endpoint.path
    for key, value in params.path_params.items():
        path = path.replace(f"{{{key}}}", stringify(value))

    url = resolve_server_url(options.server_url, spec).rstrip("/") + path
    query = {k: v for k, v in params.query_params.items() if v is not None}

    auth = options.auth if options.include_auth else None
    if auth is not None and auth.type == "apiKey" and auth.api_key is not None:
        if auth.api_key.location == "query":
            query[auth.api_key.name] = auth.api_key.value
    if query:
        url = merge_query(url, query)

    headers = {**auth_headers(auth), **params.headers}

    body = params.body
    if _is_blank(body) or method not in BODY_METHODS:
        body = None

    return SnippetRequest(
        endpoint=endpoint,
        method=method,
        url=url,
        headers=headers,
        body=body,
        summary=endpoint.summary or "API Request",
    )


def json_text(body: Any, indent: Optional[int] = None) -> str:
    """Render *body* as JSON; strings are passed through unchanged."""
    if isinstance(body, str):
        return body
    if indent is None:
        return json.dumps(body, separators=(",", ":"))
    return json.dumps(body, indent=indent)
