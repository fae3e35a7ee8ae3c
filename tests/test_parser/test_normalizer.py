"""Tests for openapi_ui.parser.normalizer -- building ParsedApiSpec."""

from __future__ import annotations

import copy
import json
import logging
from typing import Any

import pytest

from openapi_ui.exceptions import (
    CircularReferenceError,
    DuplicateOperationIdError,
    ReferenceResolutionError,
    SpecParseError,
)
from openapi_ui.models import HTTPMethod, NormalizedSchema, ParameterLocation, ParsedApiSpec
from openapi_ui.parser import endpoint_id, normalize


def _endpoint(parsed: ParsedApiSpec, id: str):
    return next(e for e in parsed.endpoints if e.id == id)


# ---------------------------------------------------------------------------
# Basic scenario
# ---------------------------------------------------------------------------


class TestMinimalSpec:
    def test_single_endpoint(self, minimal_raw: dict[str, Any]) -> None:
        parsed = normalize(minimal_raw)

        assert len(parsed.endpoints) == 1
        endpoint = parsed.endpoints[0]
        assert endpoint.id == "listUsers"
        assert endpoint.method == HTTPMethod.GET
        assert endpoint.responses[0].status_code == "200"
        assert endpoint.responses[0].description == "OK"

    def test_accepts_json_text(self, minimal_raw: dict[str, Any]) -> None:
        parsed = normalize(json.dumps(minimal_raw))
        assert parsed.endpoints[0].id == "listUsers"

    def test_accepts_yaml_text(self) -> None:
        text = (
            "openapi: 3.0.0\n"
            "info: {title: Y, version: '1'}\n"
            "paths:\n"
            "  /ping:\n"
            "    get:\n"
            "      responses:\n"
            "        '200': {description: pong}\n"
        )
        parsed = normalize(text)
        assert parsed.endpoints[0].id == "GET__ping"

    def test_info_defaults(self) -> None:
        parsed = normalize({"openapi": "3.0.0", "paths": {}})
        assert parsed.info.title == "Untitled API"
        assert parsed.info.version == "0.0.0"
        assert parsed.endpoints == []
        assert parsed.security_schemes is None

    def test_missing_openapi_field_tolerated(self) -> None:
        parsed = normalize({"info": {"title": "T", "version": "1"}, "paths": {}})
        assert parsed.openapi_version is None

    def test_swagger_rejected(self) -> None:
        with pytest.raises(SpecParseError, match="Swagger"):
            normalize({"swagger": "2.0", "paths": {}})

    def test_non_object_text_rejected(self) -> None:
        with pytest.raises(SpecParseError):
            normalize("- a\n- b\n")


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


class TestEndpoints:
    def test_endpoint_count_matches_method_keys(
        self, users_api_raw: dict[str, Any], users_api: ParsedApiSpec
    ) -> None:
        methods = {m.value for m in HTTPMethod}
        expected = sum(
            1
            for item in users_api_raw["paths"].values()
            for key in item
            if key in methods
        )
        assert len(users_api.endpoints) == expected == 5

    def test_declaration_then_method_order(self, users_api: ParsedApiSpec) -> None:
        assert [e.id for e in users_api.endpoints] == [
            "listUsers",
            "createUser",
            "getUser",
            "deleteUser",
            "GET__health",
        ]

    def test_method_order_ignores_key_order(self) -> None:
        spec = {
            "openapi": "3.0.0",
            "paths": {
                "/x": {
                    "delete": {"responses": {}},
                    "post": {"responses": {}},
                    "get": {"responses": {}},
                }
            },
        }
        parsed = normalize(spec)
        assert [e.method for e in parsed.endpoints] == [
            HTTPMethod.GET,
            HTTPMethod.POST,
            HTTPMethod.DELETE,
        ]

    def test_non_method_keys_ignored(self, users_api: ParsedApiSpec) -> None:
        # "/users/{id}" has a "parameters" key next to its methods.
        assert {e.path for e in users_api.endpoints} == {"/users", "/users/{id}", "/health"}

    def test_generated_id(self) -> None:
        assert endpoint_id(HTTPMethod.GET, "/users/{id}", None) == "GET__users__id_"
        assert endpoint_id(HTTPMethod.POST, "/a-b.c", "") == "POST__a_b_c"
        assert endpoint_id(HTTPMethod.PUT, "/x", "replaceX") == "replaceX"

    def test_fields(self, users_api: ParsedApiSpec) -> None:
        delete = _endpoint(users_api, "deleteUser")
        assert delete.operation_id == "deleteUser"
        assert delete.summary == "Delete a user"
        assert delete.description == "Permanently removes a user account"
        assert delete.tags == ["users", "admin"]
        assert delete.deprecated is True
        assert delete.security == [{"bearerAuth": []}]

    def test_defaults(self, users_api: ParsedApiSpec) -> None:
        health = _endpoint(users_api, "GET__health")
        assert health.operation_id is None
        assert health.tags == []
        assert health.deprecated is False
        assert health.security is None
        assert health.request_body is None

    def test_path_item_ref(self) -> None:
        spec = {
            "openapi": "3.1.0",
            "paths": {"/a": {"$ref": "#/components/pathItems/A"}},
            "components": {"pathItems": {"A": {"get": {"operationId": "getA", "responses": {}}}}},
        }
        assert normalize(spec).endpoints[0].id == "getA"


# ---------------------------------------------------------------------------
# Parameters
# ---------------------------------------------------------------------------


class TestParameters:
    def test_path_level_ref_parameter_inherited(self, users_api: ParsedApiSpec) -> None:
        get_user = _endpoint(users_api, "getUser")
        assert len(get_user.parameters) == 1
        param = get_user.parameters[0]
        assert param.name == "id"
        assert param.location == ParameterLocation.PATH
        assert param.description == "User ID"
        assert param.schema_ == NormalizedSchema(type="string")

    def test_path_parameter_forced_required(self, users_api: ParsedApiSpec) -> None:
        # The UserId component omits "required".
        assert _endpoint(users_api, "getUser").parameters[0].required is True

    def test_query_and_header_parameters(self, users_api: ParsedApiSpec) -> None:
        params = _endpoint(users_api, "listUsers").parameters
        assert [(p.name, p.location) for p in params] == [
            ("limit", ParameterLocation.QUERY),
            ("X-Trace-Id", ParameterLocation.HEADER),
        ]
        assert params[0].required is False
        assert params[0].schema_.default == 20

    def test_operation_overrides_path_level(self) -> None:
        spec = {
            "openapi": "3.0.0",
            "paths": {
                "/items": {
                    "parameters": [
                        {"name": "q", "in": "query", "description": "path-level"},
                        {"name": "page", "in": "query"},
                    ],
                    "get": {
                        "parameters": [
                            {"name": "q", "in": "query", "description": "operation-level"},
                            {"name": "q", "in": "header"},
                        ],
                        "responses": {},
                    },
                }
            },
        }
        params = normalize(spec).endpoints[0].parameters
        assert [(p.name, p.location.value, p.description) for p in params] == [
            ("page", "query", None),
            ("q", "query", "operation-level"),
            ("q", "header", None),
        ]

    def test_unknown_location_skipped(self) -> None:
        spec = {
            "openapi": "3.0.0",
            "paths": {
                "/x": {
                    "get": {
                        "parameters": [
                            {"name": "weird", "in": "body"},
                            {"name": "ok", "in": "cookie"},
                        ],
                        "responses": {},
                    }
                }
            },
        }
        params = normalize(spec).endpoints[0].parameters
        assert [p.name for p in params] == ["ok"]

    def test_broken_parameter_ref_raises(self) -> None:
        spec = {
            "openapi": "3.0.0",
            "paths": {
                "/x": {
                    "get": {
                        "parameters": [{"$ref": "#/components/parameters/Missing"}],
                        "responses": {},
                    }
                }
            },
        }
        with pytest.raises(ReferenceResolutionError, match="#/components/parameters/Missing"):
            normalize(spec)


# ---------------------------------------------------------------------------
# Request bodies and responses
# ---------------------------------------------------------------------------


class TestRequestBodiesAndResponses:
    def test_request_body_ref(self, users_api: ParsedApiSpec) -> None:
        body = _endpoint(users_api, "createUser").request_body
        assert body is not None
        assert body.required is True
        assert body.description == "User to create"
        assert [c.media_type for c in body.content] == ["application/json"]
        assert body.content[0].schema_.type == "object"

    def test_response_order_and_defaults(self, users_api: ParsedApiSpec) -> None:
        responses = _endpoint(users_api, "createUser").responses
        assert [r.status_code for r in responses] == ["201", "400"]
        assert responses[1].description == "Invalid input"
        assert responses[1].content is None

    def test_response_ref(self, users_api: ParsedApiSpec) -> None:
        not_found = _endpoint(users_api, "getUser").responses[1]
        assert not_found.status_code == "404"
        assert not_found.description == "User not found"
        assert not_found.content[0].schema_.properties["message"].type == "string"

    def test_response_headers(self, users_api: ParsedApiSpec) -> None:
        ok = _endpoint(users_api, "getUser").responses[0]
        header = ok.headers["X-Rate-Limit"]
        assert header.name == "X-Rate-Limit"
        assert header.description == "Calls left"
        assert header.schema_.type == "integer"

    def test_example_ref_resolved_to_value(self, users_api: ParsedApiSpec) -> None:
        media = _endpoint(users_api, "getUser").responses[0].content[0]
        assert media.examples == {"ada": {"id": 1, "name": "Ada"}}

    def test_missing_description_defaults_to_empty(self) -> None:
        spec = {"openapi": "3.0.0", "paths": {"/x": {"get": {"responses": {"200": {}}}}}}
        assert normalize(spec).endpoints[0].responses[0].description == ""

    def test_integer_status_codes_stringified(self) -> None:
        spec = {"openapi": "3.0.0", "paths": {"/x": {"get": {"responses": {200: {"description": "OK"}}}}}}
        assert normalize(spec).endpoints[0].responses[0].status_code == "200"


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------


class TestSchemas:
    def test_component_schemas_in_order(self, users_api: ParsedApiSpec) -> None:
        assert list(users_api.schemas) == ["User", "Address"]

    def test_nested_ref_expanded(self, users_api: ParsedApiSpec) -> None:
        address = users_api.schemas["User"].properties["address"]
        assert address.properties["city"].type == "string"

    def test_recursive_ref_preserved(self, users_api: ParsedApiSpec) -> None:
        manager = users_api.schemas["User"].properties["manager"]
        assert manager == NormalizedSchema(ref="#/components/schemas/User")

    def test_recursive_ref_preserved_at_use_site(self, users_api: ParsedApiSpec) -> None:
        schema = _endpoint(users_api, "listUsers").responses[0].content[0].schema_
        assert schema.type == "array"
        assert schema.items.properties["name"].type == "string"
        assert schema.items.properties["manager"].ref == "#/components/schemas/User"

    def test_reference_transparency(self) -> None:
        address = {"type": "object", "properties": {"city": {"type": "string"}}}

        def doc(schema: dict[str, Any]) -> dict[str, Any]:
            return {
                "openapi": "3.0.0",
                "paths": {
                    "/a": {
                        "get": {
                            "responses": {
                                "200": {
                                    "description": "OK",
                                    "content": {"application/json": {"schema": schema}},
                                }
                            }
                        }
                    }
                },
                "components": {"schemas": {"Address": address}},
            }

        via_ref = normalize(doc({"$ref": "#/components/schemas/Address"}))
        inline = normalize(doc(copy.deepcopy(address)))
        assert via_ref.endpoints == inline.endpoints

    def test_compositions_and_additional_properties(self) -> None:
        spec = {
            "openapi": "3.0.0",
            "paths": {},
            "components": {
                "schemas": {
                    "Base": {"type": "object", "properties": {"id": {"type": "integer"}}},
                    "Derived": {
                        "allOf": [{"$ref": "#/components/schemas/Base"}, {"type": "object"}],
                        "additionalProperties": {"type": "string"},
                    },
                    "Open": {"type": "object", "additionalProperties": True},
                    "Either": {"oneOf": [{"type": "string"}, {"type": "integer"}]},
                }
            },
        }
        schemas = normalize(spec).schemas
        assert schemas["Derived"].all_of[0].properties["id"].type == "integer"
        assert schemas["Derived"].additional_properties == NormalizedSchema(type="string")
        assert schemas["Open"].additional_properties is True
        assert [s.type for s in schemas["Either"].one_of] == ["string", "integer"]

    def test_alias_serialization(self, users_api: ParsedApiSpec) -> None:
        dumped = users_api.schemas["User"].model_dump(by_alias=True, exclude_none=True)
        assert dumped["properties"]["manager"] == {"$ref": "#/components/schemas/User"}

    def test_pure_ref_loop_raises(self) -> None:
        spec = {
            "openapi": "3.0.0",
            "paths": {},
            "components": {
                "schemas": {
                    "A": {"$ref": "#/components/schemas/B"},
                    "B": {"$ref": "#/components/schemas/C"},
                    "C": {"$ref": "#/components/schemas/B"},
                }
            },
        }
        with pytest.raises(CircularReferenceError):
            normalize(spec)


# ---------------------------------------------------------------------------
# Top-level sections
# ---------------------------------------------------------------------------


class TestTopLevel:
    def test_info(self, users_api: ParsedApiSpec) -> None:
        assert users_api.openapi_version == "3.0.3"
        assert users_api.info.title == "User Service"
        assert users_api.info.contact_email == "api@example.com"
        assert users_api.info.license_name == "MIT"

    def test_servers(self, users_api: ParsedApiSpec) -> None:
        assert [s.url for s in users_api.servers] == [
            "https://api.example.com",
            "https://staging.example.com",
        ]

    def test_tags(self, users_api: ParsedApiSpec) -> None:
        assert [(t.name, t.description) for t in users_api.tags] == [
            ("users", "User operations"),
            ("admin", "Administrative operations"),
        ]

    def test_security_schemes(self, users_api: ParsedApiSpec) -> None:
        schemes = users_api.security_schemes
        assert schemes["bearerAuth"].scheme == "bearer"
        assert schemes["bearerAuth"].bearer_format == "JWT"
        assert schemes["apiKey"].param_name == "X-API-Key"
        assert schemes["apiKey"].location == "header"


# ---------------------------------------------------------------------------
# Duplicate ids, idempotence, immutability
# ---------------------------------------------------------------------------


class TestDuplicateIds:
    @pytest.fixture
    def duplicate_raw(self) -> dict[str, Any]:
        return {
            "openapi": "3.0.0",
            "paths": {
                "/a": {"get": {"operationId": "fetch", "responses": {}}},
                "/b": {"get": {"operationId": "fetch", "responses": {}}},
            },
        }

    def test_warns_and_keeps_both(
        self, duplicate_raw: dict[str, Any], caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.WARNING, logger="openapi_ui.parser.normalizer"):
            parsed = normalize(duplicate_raw)
        assert [e.path for e in parsed.endpoints] == ["/a", "/b"]
        assert "Duplicate operation id 'fetch'" in caplog.text

    def test_strict_mode_raises(self, duplicate_raw: dict[str, Any]) -> None:
        with pytest.raises(DuplicateOperationIdError, match="GET /a and GET /b"):
            normalize(duplicate_raw, strict_operation_ids=True)


class TestIdempotence:
    def test_normalize_twice_equal(self, users_api_raw: dict[str, Any]) -> None:
        assert normalize(users_api_raw) == normalize(users_api_raw)

    def test_input_not_mutated(self, users_api_raw: dict[str, Any]) -> None:
        before = copy.deepcopy(users_api_raw)
        normalize(users_api_raw)
        assert users_api_raw == before

    def test_result_is_frozen(self, users_api: ParsedApiSpec) -> None:
        with pytest.raises(Exception):
            users_api.endpoints[0].path = "/changed"
