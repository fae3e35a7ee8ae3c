"""Normalize OpenAPI 3.x documents into :class:`~openapi_ui.models.ParsedApiSpec`.

This module walks a decoded OpenAPI document and builds the frozen model
that every other part of openapi-ui queries. References are resolved at
each site where a node is consumed (parameters, request bodies, responses,
headers, examples and schemas) rather than in a whole-document pre-pass,
and the input document is never mutated.

The single public entry point is :func:`normalize`. Internally it delegates
to private helpers that each handle one section of the OpenAPI structure:

* ``_normalize_info`` -- the ``info`` object (title, version, contact, license).
* ``_normalize_servers`` / ``_normalize_tags`` -- top-level arrays.
* ``_normalize_endpoints`` -- the ``paths`` object, one endpoint per
  path + HTTP method combination.
* ``_normalize_schema`` -- recursive schema normalization.
* ``_normalize_security_schemes`` -- ``components/securitySchemes``.

Parameter merging follows the OpenAPI specification: path-level parameters
provide defaults, and operation-level parameters override them when they share
the same ``name`` and ``in`` values.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Optional, Union

from openapi_ui.exceptions import DuplicateOperationIdError, SpecParseError
from openapi_ui.models import (
    APIInfo,
    HTTPMethod,
    NormalizedEndpoint,
    NormalizedHeader,
    NormalizedMediaType,
    NormalizedParameter,
    NormalizedRequestBody,
    NormalizedResponse,
    NormalizedSchema,
    ParameterLocation,
    ParsedApiSpec,
    SecurityScheme,
    ServerInfo,
    TagInfo,
)
from openapi_ui.parser.loader import parse_spec_string, validate_openapi_version
from openapi_ui.parser.resolver import dereference, follow_references, is_reference

logger = logging.getLogger(__name__)

_NON_ALNUM = re.compile(r"[^a-zA-Z0-9]")

# Schema keywords copied verbatim: (OpenAPI key, model field)
_SCALAR_SCHEMA_KEYS: tuple[tuple[str, str], ...] = (
    ("type", "type"),
    ("format", "format"),
    ("title", "title"),
    ("description", "description"),
    ("example", "example"),
    ("enum", "enum"),
    ("default", "default"),
    ("nullable", "nullable"),
    ("deprecated", "deprecated"),
    ("readOnly", "read_only"),
    ("writeOnly", "write_only"),
    ("required", "required"),
    ("minimum", "minimum"),
    ("maximum", "maximum"),
    ("minLength", "min_length"),
    ("maxLength", "max_length"),
    ("pattern", "pattern"),
    ("minItems", "min_items"),
    ("maxItems", "max_items"),
    ("uniqueItems", "unique_items"),
)


def normalize(
    spec: Union[dict[str, Any], str],
    *,
    strict_operation_ids: bool = False,
) -> ParsedApiSpec:
    """Normalize an OpenAPI 3.x document.

    Args:
        spec: A decoded document, or its JSON/YAML text.
        strict_operation_ids: Raise instead of warning when two endpoints
            end up with the same id.

    Returns:
        A frozen :class:`~openapi_ui.models.ParsedApiSpec`. Endpoints are
        ordered by path declaration order, then by the fixed method order
        of :class:`~openapi_ui.models.HTTPMethod`.

    Raises:
        SpecParseError: If the text cannot be decoded, the document is not
            a mapping, or it is a Swagger 2.x / non-3.x document.
        DuplicateOperationIdError: On an id collision in strict mode.
        ReferenceResolutionError: If any ``$ref`` cannot be resolved.

    Example::

        parsed = normalize(Path("petstore.yaml").read_text())
        for endpoint in parsed.endpoints:
            print(endpoint.id, endpoint.method.value.upper(), endpoint.path)
    """
    root = parse_spec_string(spec) if isinstance(spec, str) else spec
    if not isinstance(root, dict):
        raise SpecParseError(
            f"Spec must be a JSON/YAML object (got {type(root).__name__})"
        )
    openapi_version = validate_openapi_version(root)

    return ParsedApiSpec(
        openapi_version=openapi_version,
        info=_normalize_info(root),
        servers=_normalize_servers(root),
        endpoints=_normalize_endpoints(root, strict_operation_ids),
        schemas=_normalize_component_schemas(root),
        tags=_normalize_tags(root),
        security_schemes=_normalize_security_schemes(root),
    )


def endpoint_id(method: HTTPMethod, path: str, operation_id: Optional[str]) -> str:
    """Return the declared operation id, or the ``METHOD_path`` slug."""
    if operation_id:
        return operation_id
    return f"{method.value.upper()}_{_NON_ALNUM.sub('_', path)}"


def _normalize_info(root: dict[str, Any]) -> APIInfo:
    info = root.get("info") or {}
    contact = info.get("contact") or {}
    license_info = info.get("license") or {}

    return APIInfo(
        title=info.get("title", "Untitled API"),
        version=str(info.get("version", "0.0.0")),
        description=info.get("description"),
        terms_of_service=info.get("termsOfService"),
        contact_name=contact.get("name"),
        contact_email=contact.get("email"),
        contact_url=contact.get("url"),
        license_name=license_info.get("name"),
        license_url=license_info.get("url"),
    )


def _normalize_servers(root: dict[str, Any]) -> list[ServerInfo]:
    return [
        ServerInfo(
            url=server.get("url", "/"),
            description=server.get("description"),
            variables=server.get("variables"),
        )
        for server in root.get("servers") or []
        if isinstance(server, dict)
    ]


def _normalize_tags(root: dict[str, Any]) -> list[TagInfo]:
    return [
        TagInfo(
            name=tag["name"],
            description=tag.get("description"),
            external_docs=tag.get("externalDocs"),
        )
        for tag in root.get("tags") or []
        if isinstance(tag, dict) and "name" in tag
    ]


def _normalize_endpoints(
    root: dict[str, Any], strict_operation_ids: bool
) -> list[NormalizedEndpoint]:
    """Build one endpoint per path + method, detecting id collisions.

    On a collision the first endpoint keeps the id for lookups; the later
    one is still listed.
    """
    endpoints: list[NormalizedEndpoint] = []
    first_seen: dict[str, str] = {}

    for path, path_item in (root.get("paths") or {}).items():
        path_item = dereference(path_item, root)
        if not isinstance(path_item, dict):
            continue

        path_params = path_item.get("parameters") or []

        for method in HTTPMethod:
            operation = path_item.get(method.value)
            if not isinstance(operation, dict):
                continue

            endpoint = _normalize_endpoint(path, method, operation, path_params, root)
            label = f"{method.value.upper()} {path}"
            if endpoint.id in first_seen:
                if strict_operation_ids:
                    raise DuplicateOperationIdError(
                        endpoint.id, first_seen[endpoint.id], label
                    )
                logger.warning(
                    "Duplicate operation id %r: %s keeps the id, %s is unreachable by id",
                    endpoint.id,
                    first_seen[endpoint.id],
                    label,
                )
            else:
                first_seen[endpoint.id] = label
            endpoints.append(endpoint)

    return endpoints


def _normalize_endpoint(
    path: str,
    method: HTTPMethod,
    operation: dict[str, Any],
    path_params: list[Any],
    root: dict[str, Any],
) -> NormalizedEndpoint:
    operation_id = operation.get("operationId")
    request_body = operation.get("requestBody")

    return NormalizedEndpoint(
        id=endpoint_id(method, path, operation_id),
        method=method,
        path=path,
        summary=operation.get("summary"),
        description=operation.get("description"),
        operation_id=operation_id,
        tags=list(operation.get("tags") or []),
        parameters=_normalize_parameters(
            _merge_parameters(path_params, operation.get("parameters") or [], root),
            root,
        ),
        request_body=(
            _normalize_request_body(request_body, root)
            if request_body is not None
            else None
        ),
        responses=_normalize_responses(operation.get("responses") or {}, root),
        deprecated=bool(operation.get("deprecated", False)),
        security=operation.get("security"),
    )


def _merge_parameters(
    path_params: list[Any],
    op_params: list[Any],
    root: dict[str, Any],
) -> list[dict[str, Any]]:
    """Merge path-level and operation-level parameters.

    Operation-level parameters override path-level parameters with the same
    name and location (``in`` field), per the OpenAPI spec. Both lists are
    dereferenced first so that the ``(name, in)`` key is comparable.
    """
    resolved_path = [dereference(p, root) for p in path_params]
    resolved_op = [dereference(p, root) for p in op_params]

    op_keys = {(p.get("name", ""), p.get("in", "")) for p in resolved_op}
    merged = [
        p for p in resolved_path if (p.get("name", ""), p.get("in", "")) not in op_keys
    ]
    merged.extend(resolved_op)
    return merged


def _normalize_parameters(
    params_list: list[dict[str, Any]], root: dict[str, Any]
) -> list[NormalizedParameter]:
    """Convert dereferenced parameter dicts into models.

    Path parameters are always required. Parameters with unrecognised ``in``
    locations are skipped.
    """
    parameters: list[NormalizedParameter] = []

    for param in params_list:
        try:
            location = ParameterLocation(param.get("in", "query"))
        except ValueError:
            logger.debug(
                "Skipping parameter %r with location %r",
                param.get("name"),
                param.get("in"),
            )
            continue

        required = bool(param.get("required", False))
        if location == ParameterLocation.PATH:
            required = True

        schema = param.get("schema")
        parameters.append(
            NormalizedParameter(
                name=param.get("name", ""),
                location=location,
                description=param.get("description"),
                required=required,
                deprecated=bool(param.get("deprecated", False)),
                schema_=_normalize_schema(schema, root) if schema is not None else None,
                example=param.get("example"),
            )
        )

    return parameters


def _normalize_request_body(body: Any, root: dict[str, Any]) -> NormalizedRequestBody:
    resolved = dereference(body, root)
    return NormalizedRequestBody(
        description=resolved.get("description"),
        required=bool(resolved.get("required", False)),
        content=_normalize_content(resolved.get("content") or {}, root),
    )


def _normalize_responses(
    responses: dict[str, Any], root: dict[str, Any]
) -> list[NormalizedResponse]:
    result: list[NormalizedResponse] = []

    for status_code, response in responses.items():
        resolved = dereference(response, root)
        if not isinstance(resolved, dict):
            continue

        content = resolved.get("content")
        headers = resolved.get("headers")
        result.append(
            NormalizedResponse(
                status_code=str(status_code),
                description=resolved.get("description", ""),
                content=_normalize_content(content, root) if content is not None else None,
                headers=_normalize_headers(headers, root) if headers is not None else None,
            )
        )

    return result


def _normalize_headers(
    headers: dict[str, Any], root: dict[str, Any]
) -> dict[str, NormalizedHeader]:
    result: dict[str, NormalizedHeader] = {}
    for name, header in headers.items():
        resolved = dereference(header, root)
        schema = resolved.get("schema")
        result[name] = NormalizedHeader(
            name=name,
            description=resolved.get("description"),
            required=bool(resolved.get("required", False)),
            schema_=_normalize_schema(schema, root) if schema is not None else None,
            example=resolved.get("example"),
        )
    return result


def _normalize_content(
    content: dict[str, Any], root: dict[str, Any]
) -> list[NormalizedMediaType]:
    """Flatten a ``content`` map into media types, in source key order."""
    result: list[NormalizedMediaType] = []
    for media_type, entry in content.items():
        entry = dereference(entry, root) or {}
        schema = entry.get("schema")
        examples = entry.get("examples")
        result.append(
            NormalizedMediaType(
                media_type=media_type,
                schema_=_normalize_schema(schema, root) if schema is not None else None,
                example=entry.get("example"),
                examples=(
                    {name: _example_value(ex, root) for name, ex in examples.items()}
                    if examples is not None
                    else None
                ),
            )
        )
    return result


def _example_value(example: Any, root: dict[str, Any]) -> Any:
    """Return an *Example Object*'s ``value``, or the object itself when it has none."""
    resolved = dereference(example, root)
    if isinstance(resolved, dict) and "value" in resolved:
        return resolved["value"]
    return resolved


def _normalize_component_schemas(root: dict[str, Any]) -> dict[str, NormalizedSchema]:
    components = root.get("components") or {}
    schemas = components.get("schemas") or {}
    return {
        name: _normalize_schema(schema, root, frozenset({f"#/components/schemas/{name}"}))
        for name, schema in schemas.items()
    }


def _normalize_schema(
    schema: Any,
    root: dict[str, Any],
    expanding: frozenset[str] = frozenset(),
) -> NormalizedSchema:
    """Recursively normalize a schema node.

    *expanding* holds the ``$ref`` pointers currently being expanded on this
    branch. A reference back to one of them is kept as
    ``NormalizedSchema(ref=...)`` so that recursive schemas terminate.
    """
    if is_reference(schema):
        if schema["$ref"] in expanding:
            return NormalizedSchema(ref=schema["$ref"])
        target, refs = follow_references(schema, root)
        return _normalize_schema(target, root, expanding | frozenset(refs))

    if not isinstance(schema, dict):
        # Boolean schemas (OpenAPI 3.1) carry no structure to expose
        return NormalizedSchema()

    fields: dict[str, Any] = {
        attr: schema[key] for key, attr in _SCALAR_SCHEMA_KEYS if key in schema
    }

    properties = schema.get("properties")
    if isinstance(properties, dict):
        fields["properties"] = {
            name: _normalize_schema(prop, root, expanding)
            for name, prop in properties.items()
        }

    if "items" in schema:
        fields["items"] = _normalize_schema(schema["items"], root, expanding)

    additional = schema.get("additionalProperties")
    if isinstance(additional, bool):
        fields["additional_properties"] = additional
    elif additional is not None:
        fields["additional_properties"] = _normalize_schema(additional, root, expanding)

    for key, attr in (("allOf", "all_of"), ("oneOf", "one_of"), ("anyOf", "any_of")):
        if isinstance(schema.get(key), list):
            fields[attr] = [_normalize_schema(s, root, expanding) for s in schema[key]]

    return NormalizedSchema(**fields)


def _normalize_security_schemes(
    root: dict[str, Any],
) -> Optional[dict[str, SecurityScheme]]:
    """Extract ``components/securitySchemes``, or ``None`` when undeclared.

    Supports all OpenAPI security scheme types: ``apiKey``, ``http``,
    ``oauth2``, and ``openIdConnect``.
    """
    components = root.get("components") or {}
    schemes_raw = components.get("securitySchemes")
    if schemes_raw is None:
        return None

    schemes: dict[str, SecurityScheme] = {}
    for name, scheme_data in schemes_raw.items():
        scheme_data = dereference(scheme_data, root)
        if not isinstance(scheme_data, dict):
            continue
        schemes[name] = SecurityScheme(
            name=name,
            type=scheme_data.get("type", ""),
            description=scheme_data.get("description"),
            param_name=scheme_data.get("name"),
            location=scheme_data.get("in"),
            scheme=scheme_data.get("scheme"),
            bearer_format=scheme_data.get("bearerFormat"),
            flows=scheme_data.get("flows"),
            openid_connect_url=scheme_data.get("openIdConnectUrl"),
        )
    return schemes
