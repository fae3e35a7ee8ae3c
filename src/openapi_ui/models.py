"""Canonical Pydantic models shared across all openapi-ui modules.

This is the single source of truth for data shapes in the project. Every
other module imports from here rather than defining its own models. The
models fall into three groups:

**Normalized spec models** -- produced by
:func:`~openapi_ui.parser.normalizer.normalize` and frozen after
construction: :class:`HTTPMethod`, :class:`ParameterLocation`,
:class:`NormalizedSchema`, :class:`NormalizedMediaType`,
:class:`NormalizedParameter`, :class:`NormalizedRequestBody`,
:class:`NormalizedHeader`, :class:`NormalizedResponse`,
:class:`NormalizedEndpoint`, :class:`APIInfo`, :class:`ServerInfo`,
:class:`TagInfo`, :class:`SecurityScheme`, and :class:`ParsedApiSpec`.

**Request models** -- inputs to the loader, search engine, executor and
snippet generator: :class:`CacheConfig`, :class:`LoaderConfig`,
:class:`RequestConfig`, :class:`SecurityConfig`, :class:`ExecuteParams`,
:class:`SearchFilters`, :class:`SearchOptions`,
:class:`CodeSnippetOptions` and friends.

**Settings** -- :class:`Settings`, the command-line configuration resolved
by :func:`~openapi_ui.config.resolve_settings`.

Normalized models use snake_case field names and accept the camelCase
OpenAPI spelling as an alias, so ``model_dump(by_alias=True,
exclude_none=True)`` round-trips to an OpenAPI-shaped dict.
"""

from __future__ import annotations

import enum
from typing import Any, Callable, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# --- Normalized spec models ---


class HTTPMethod(str, enum.Enum):
    """HTTP methods recognised by OpenAPI 3.x path-item objects.

    Declaration order is the order in which the normalizer visits the
    methods of a path item.
    """

    GET = "get"
    POST = "post"
    PUT = "put"
    DELETE = "delete"
    PATCH = "patch"
    OPTIONS = "options"
    HEAD = "head"
    TRACE = "trace"


class ParameterLocation(str, enum.Enum):
    """Locations where an API parameter can appear, per OpenAPI ``in`` field."""

    QUERY = "query"
    HEADER = "header"
    PATH = "path"
    COOKIE = "cookie"


class _Normalized(BaseModel):
    """Shared configuration for the immutable normalized models."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)


class NormalizedSchema(_Normalized):
    """A fully dereferenced JSON-Schema-like node.

    Nested ``properties``, ``items``, ``additional_properties`` and the
    ``all_of``/``one_of``/``any_of`` compositions are themselves normalized.
    ``ref`` is only populated at the point where a schema refers back to one
    of its own ancestors; everywhere else references have been replaced by
    their target content.
    """

    type: Optional[Union[str, list[str]]] = None
    format: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    example: Any = None
    enum: Optional[list[Any]] = None
    default: Any = None
    nullable: Optional[bool] = None
    deprecated: Optional[bool] = None
    read_only: Optional[bool] = Field(default=None, alias="readOnly")
    write_only: Optional[bool] = Field(default=None, alias="writeOnly")
    required: Optional[list[str]] = None
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    min_length: Optional[int] = Field(default=None, alias="minLength")
    max_length: Optional[int] = Field(default=None, alias="maxLength")
    pattern: Optional[str] = None
    min_items: Optional[int] = Field(default=None, alias="minItems")
    max_items: Optional[int] = Field(default=None, alias="maxItems")
    unique_items: Optional[bool] = Field(default=None, alias="uniqueItems")
    properties: Optional[dict[str, NormalizedSchema]] = None
    items: Optional[NormalizedSchema] = None
    additional_properties: Optional[Union[bool, NormalizedSchema]] = Field(
        default=None, alias="additionalProperties"
    )
    all_of: Optional[list[NormalizedSchema]] = Field(default=None, alias="allOf")
    one_of: Optional[list[NormalizedSchema]] = Field(default=None, alias="oneOf")
    any_of: Optional[list[NormalizedSchema]] = Field(default=None, alias="anyOf")
    ref: Optional[str] = Field(
        default=None,
        alias="$ref",
        description="Set only where a schema recursively refers to an ancestor",
    )


class NormalizedMediaType(_Normalized):
    """One entry of a ``content`` map, flattened into a list item."""

    media_type: str = Field(alias="mediaType")
    schema_: Optional[NormalizedSchema] = Field(default=None, alias="schema")
    example: Any = None
    examples: Optional[dict[str, Any]] = None


class NormalizedParameter(_Normalized):
    """A resolved *Parameter Object*. Path parameters are always required."""

    name: str
    location: ParameterLocation = Field(alias="in")
    description: Optional[str] = None
    required: bool = False
    deprecated: bool = False
    schema_: Optional[NormalizedSchema] = Field(default=None, alias="schema")
    example: Any = None


class NormalizedRequestBody(_Normalized):
    """A resolved *Request Body Object* with its media types in source order."""

    description: Optional[str] = None
    required: bool = False
    content: list[NormalizedMediaType] = Field(default_factory=list)


class NormalizedHeader(_Normalized):
    """A resolved response *Header Object*, keyed by its name."""

    name: str
    description: Optional[str] = None
    required: bool = False
    schema_: Optional[NormalizedSchema] = Field(default=None, alias="schema")
    example: Any = None


class NormalizedResponse(_Normalized):
    """Response metadata for a single declared status code."""

    status_code: str = Field(alias="statusCode")
    description: str = ""
    content: Optional[list[NormalizedMediaType]] = None
    headers: Optional[dict[str, NormalizedHeader]] = None


class NormalizedEndpoint(_Normalized):
    """One (path, HTTP method) pair from the spec's ``paths`` object.

    ``id`` is the declared ``operationId`` when present, otherwise a slug
    of the form ``METHOD_path`` with every non-alphanumeric path character
    replaced by an underscore (``GET__users__id_`` for ``GET /users/{id}``).
    """

    id: str
    method: HTTPMethod
    path: str
    summary: Optional[str] = None
    description: Optional[str] = None
    operation_id: Optional[str] = Field(default=None, alias="operationId")
    tags: list[str] = Field(default_factory=list)
    parameters: list[NormalizedParameter] = Field(default_factory=list)
    request_body: Optional[NormalizedRequestBody] = Field(
        default=None, alias="requestBody"
    )
    responses: list[NormalizedResponse] = Field(default_factory=list)
    deprecated: bool = False
    security: Optional[list[dict[str, list[str]]]] = None


class APIInfo(_Normalized):
    """API metadata extracted from the spec's *Info Object*."""

    title: str
    version: str
    description: Optional[str] = None
    terms_of_service: Optional[str] = None
    contact_name: Optional[str] = None
    contact_email: Optional[str] = None
    contact_url: Optional[str] = None
    license_name: Optional[str] = None
    license_url: Optional[str] = None


class ServerInfo(_Normalized):
    """A server entry from the spec's ``servers`` array.

    The first server's ``url`` is the default base URL for request
    execution and code snippets.
    """

    url: str
    description: Optional[str] = None
    variables: Optional[dict[str, Any]] = None


class TagInfo(_Normalized):
    """A top-level *Tag Object*."""

    name: str
    description: Optional[str] = None
    external_docs: Optional[dict[str, Any]] = Field(default=None, alias="externalDocs")


class SecurityScheme(_Normalized):
    """An OpenAPI *Security Scheme Object* from ``components.securitySchemes``.

    The ``type`` field discriminates between ``apiKey``, ``http``,
    ``oauth2``, and ``openIdConnect`` schemes. Only the fields relevant to
    the active scheme type are populated.
    """

    name: str
    type: str
    description: Optional[str] = None
    param_name: Optional[str] = None
    location: Optional[str] = None
    scheme: Optional[str] = None
    bearer_format: Optional[str] = None
    flows: Optional[dict[str, Any]] = None
    openid_connect_url: Optional[str] = None


class ParsedApiSpec(_Normalized):
    """The normalized, read-only artifact every downstream consumer queries.

    See Also:
        :class:`NormalizedEndpoint`: One entry per path + method pair.
        :class:`~openapi_ui.context.ApiContext`: Holds the current spec.
    """

    openapi_version: Optional[str] = None
    info: APIInfo
    servers: list[ServerInfo] = Field(default_factory=list)
    endpoints: list[NormalizedEndpoint] = Field(default_factory=list)
    schemas: dict[str, NormalizedSchema] = Field(default_factory=dict)
    tags: list[TagInfo] = Field(default_factory=list)
    security_schemes: Optional[dict[str, SecurityScheme]] = None


# --- Loader models ---


class CacheConfig(BaseModel):
    """Settings for the in-memory :class:`~openapi_ui.cache.SpecCache`."""

    enabled: bool = Field(default=True, description="Enable spec caching")
    ttl_seconds: float = Field(default=300.0, description="Cache TTL in seconds")


class LoaderConfig(BaseModel):
    """Input to :meth:`~openapi_ui.loader.SpecLoader.load_spec`.

    Exactly one of ``url`` or ``spec`` must be provided.
    """

    url: Optional[str] = None
    spec: Optional[Union[dict[str, Any], str]] = None
    cache_duration: Optional[float] = Field(
        default=None, description="Seconds a cached spec stays valid (cache TTL when unset)"
    )
    retries: int = Field(default=3, ge=0, description="Additional attempts after the first")
    retry_delay: float = Field(
        default=1.0, ge=0, description="Base backoff delay in seconds (doubles each attempt)"
    )
    fetcher: Optional[Callable[[str], str]] = Field(
        default=None, description="Custom fetch function returning the spec text"
    )


# --- Request execution models ---


class RequestConfig(BaseModel):
    """Defaults applied to every request an executor sends."""

    base_url: Optional[str] = Field(
        default=None, description="Overrides the spec's first server URL"
    )
    headers: dict[str, str] = Field(default_factory=dict)
    timeout: float = Field(default=30.0, description="Request timeout in seconds")
    parse_json: bool = Field(default=True, description="Decode JSON response bodies")


class ApiKeyAuth(BaseModel):
    """An API key sent in a header, query parameter, or cookie."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    value: str
    location: Literal["header", "query", "cookie"] = Field(default="header", alias="in")


class BearerAuth(BaseModel):
    """A bearer token sent as ``Authorization: Bearer <token>``."""

    token: str


class BasicAuth(BaseModel):
    """HTTP Basic credentials, base64-encoded as ``user:pass``."""

    username: str
    password: str


class OAuth2Auth(BaseModel):
    """An already-acquired OAuth2 access token, sent as a bearer token."""

    token: str


class CustomAuth(BaseModel):
    """An arbitrary authentication header."""

    name: str
    value: str


class SecurityConfig(BaseModel):
    """Credentials applied to an executed request.

    Several schemes may be set at once; ``bearer``, ``basic`` and
    ``oauth2`` all write ``Authorization`` and are applied in that order,
    so the last one present wins.
    """

    api_key: Optional[ApiKeyAuth] = None
    bearer: Optional[BearerAuth] = None
    basic: Optional[BasicAuth] = None
    oauth2: Optional[OAuth2Auth] = None
    custom: Optional[CustomAuth] = None


class ExecuteParams(BaseModel):
    """Per-call inputs to :meth:`~openapi_ui.client.OperationExecutor.execute`."""

    path_params: dict[str, Union[str, int, float]] = Field(default_factory=dict)
    query_params: dict[str, Any] = Field(default_factory=dict)
    body: Any = None
    content_type: Optional[str] = None
    security: Optional[SecurityConfig] = None
    headers: dict[str, str] = Field(default_factory=dict)


# --- Search models ---


SearchField = Literal[
    "summary", "description", "operationId", "path", "tags", "parameters", "responses"
]

ALL_SEARCH_FIELDS: tuple[str, ...] = (
    "summary",
    "description",
    "operationId",
    "path",
    "tags",
    "parameters",
    "responses",
)


class SearchFilters(BaseModel):
    """Criteria combined with AND by :func:`~openapi_ui.search.search_endpoints`.

    ``None`` (or an empty list) disables a criterion.
    """

    query: Optional[str] = None
    methods: Optional[list[HTTPMethod]] = None
    tags: Optional[list[str]] = None
    deprecated: Optional[bool] = None
    has_parameters: Optional[bool] = None
    has_request_body: Optional[bool] = None
    response_status_codes: Optional[list[str]] = None


class SearchOptions(BaseModel):
    """Text-search behaviour."""

    search_fields: list[SearchField] = Field(
        default_factory=lambda: list(ALL_SEARCH_FIELDS)
    )
    case_sensitive: bool = False
    fuzzy_search: bool = False
    min_query_length: int = Field(default=1, ge=0)


class SearchResult(BaseModel):
    """One ranked search hit."""

    endpoint: NormalizedEndpoint
    score: float
    matched_fields: list[str] = Field(default_factory=list)
    highlights: dict[str, str] = Field(default_factory=dict)


class FilterOptions(BaseModel):
    """Distinct filter values present in an endpoint list, each sorted."""

    methods: list[HTTPMethod] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    status_codes: list[str] = Field(default_factory=list)


# --- Code snippet models ---


class SnippetApiKey(BaseModel):
    """API key placement for generated snippets (header or query only)."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    value: str
    location: Literal["header", "query"] = Field(default="header", alias="in")


class SnippetAuth(BaseModel):
    """Authentication rendered into a snippet, selected by ``type``."""

    model_config = ConfigDict(populate_by_name=True)

    type: Literal["apiKey", "bearer", "basic", "oauth2"]
    api_key: Optional[SnippetApiKey] = Field(default=None, alias="apiKey")
    bearer: Optional[BearerAuth] = None
    basic: Optional[BasicAuth] = None
    oauth2: Optional[OAuth2Auth] = None


class SnippetParameters(BaseModel):
    """Example request values substituted into a snippet."""

    path_params: dict[str, Any] = Field(default_factory=dict)
    query_params: dict[str, Any] = Field(default_factory=dict)
    headers: dict[str, str] = Field(default_factory=dict)
    body: Any = None


class CodeSnippetOptions(BaseModel):
    """Inputs to :meth:`~openapi_ui.codegen.CodeSnippetGenerator.generate`."""

    language: str
    include_auth: bool = Field(
        default=True, description="Render ``auth`` into the snippet when given"
    )
    auth: Optional[SnippetAuth] = None
    parameters: SnippetParameters = Field(default_factory=SnippetParameters)
    server_url: Optional[str] = None


class CodeSnippetLanguage(BaseModel):
    """A supported snippet target."""

    id: str
    name: str
    extension: str


class CodeSnippetResult(BaseModel):
    """Generated snippet text plus the language it was rendered for."""

    code: str
    language: CodeSnippetLanguage
    description: Optional[str] = None


# --- Settings ---


class Settings(BaseModel):
    """Command-line configuration persisted at ``~/.config/openapi-ui/config.json``.

    Loaded by :func:`~openapi_ui.config.load_global_settings` and layered
    with the project file, environment variables and CLI flags by
    :func:`~openapi_ui.config.resolve_settings`.
    """

    spec: Optional[str] = Field(default=None, description="URL or file path of the default spec")
    base_url: Optional[str] = Field(default=None, description="Override base URL for `call`")
    cache: CacheConfig = Field(default_factory=CacheConfig)
    retries: int = Field(default=3, ge=0)
    retry_delay: float = Field(default=1.0, ge=0)
    timeout: float = Field(default=30.0, gt=0)
    output_format: str = Field(default="auto", description="auto, json, plain, rich")


NormalizedSchema.model_rebuild()
