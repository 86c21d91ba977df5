"""Tests for the document-level checks in specforge.validation.structure."""

from __future__ import annotations

from typing import Any

from specforge import rules
from specforge.models import DiagnosticMessage, DiagnosticSeverity, OpenAPIDocument, ValidationStrictness
from specforge.validation import validate


def _find(raw: dict[str, Any], rule_id: str, strictness=ValidationStrictness.STRICT) -> list[DiagnosticMessage]:
    return [d for d in validate(OpenAPIDocument(raw=raw), strictness) if d.rule_id == rule_id]


def _base(**extra: Any) -> dict[str, Any]:
    raw: dict[str, Any] = {"openapi": "3.0.3", "info": {"title": "T", "version": "1"}, "paths": {}}
    raw.update(extra)
    return raw


def _response(schema: dict[str, Any]) -> dict[str, Any]:
    return {
        "200": {
            "description": "OK",
            "content": {"application/json": {"schema": schema}},
        }
    }


class TestVersion:
    """OpenAPI version checks."""

    def test_swagger(self) -> None:
        found = _find({"swagger": "2.0"}, rules.OPENAPI_20_NOT_SUPPORTED, ValidationStrictness.STANDARD)
        assert len(found) == 1
        assert "Current version: 2.0" in found[0].message

    def test_openapi_two(self) -> None:
        assert _find({"openapi": "2.0"}, rules.OPENAPI_20_NOT_SUPPORTED, ValidationStrictness.STANDARD)

    def test_missing_version(self) -> None:
        found = _find({"paths": {}}, rules.OPENAPI_CORE_ERROR, ValidationStrictness.STANDARD)
        assert "Missing 'openapi'" in found[0].message
        assert found[0].context == "openapi"

    def test_three_one_accepted(self) -> None:
        raw = _base(openapi="3.1.0")
        assert _find(raw, rules.OPENAPI_CORE_ERROR) == []


class TestSchemaReferences:
    """Dangling $ref detection."""

    def test_response_reference(self) -> None:
        raw = _base(paths={
            "/pets": {"get": {"responses": _response({"$ref": "#/components/schemas/Ghost"})}}
        })
        found = _find(raw, rules.INVALID_SCHEMA_REFERENCE, ValidationStrictness.STANDARD)
        assert len(found) == 1
        assert found[0].severity == DiagnosticSeverity.ERROR
        assert "'Ghost'" in found[0].message
        assert found[0].context == "/pets/get/responses/200/content/application/json/schema"

    def test_array_items_reference(self) -> None:
        raw = _base(components={"schemas": {
            "Pet": {
                "type": "object",
                "properties": {"tags": {"type": "array", "items": {"$ref": "#/components/schemas/Tag"}}},
            }
        }})
        found = _find(raw, rules.INVALID_SCHEMA_REFERENCE, ValidationStrictness.STANDARD)
        assert [d.context for d in found] == ["components/schemas/Pet/properties/tags/items"]

    def test_request_body_and_parameter(self) -> None:
        raw = _base(paths={"/pets": {"post": {
            "parameters": [{"name": "kind", "in": "query", "schema": {"$ref": "#/components/schemas/Kind"}}],
            "requestBody": {"content": {"application/json": {"schema": {"$ref": "#/components/schemas/NewPet"}}}},
            "responses": {},
        }}})
        found = _find(raw, rules.INVALID_SCHEMA_REFERENCE, ValidationStrictness.STANDARD)
        assert sorted(d.context for d in found) == [
            "/pets/post/parameters/kind/schema",
            "/pets/post/requestBody/content/application/json/schema",
        ]

    def test_external_reference_ignored(self) -> None:
        raw = _base(paths={"/pets": {"get": {"responses": _response({"$ref": "other.yaml#/Pet"})}}})
        assert _find(raw, rules.INVALID_SCHEMA_REFERENCE) == []


class TestServers:
    """Server URL formats."""

    def test_valid_forms(self) -> None:
        raw = _base(servers=[
            {"url": "https://api.example.com"},
            {"url": "/v1"},
            {"url": "https://{region}.example.com", "variables": {"region": {"default": "eu"}}},
        ])
        assert _find(raw, rules.INVALID_SERVER_URL) == []

    def test_invalid_forms(self) -> None:
        raw = _base(servers=[
            {"url": ""},
            {"url": "api.example.com"},
            {"url": "https://{region}.example.com"},
        ])
        found = _find(raw, rules.INVALID_SERVER_URL)
        assert len(found) == 3
        assert "empty" in found[0].message
        assert "'api.example.com' is not a valid format" in found[1].message
        assert "'{region}'" in found[2].message

    def test_strict_only(self) -> None:
        raw = _base(servers=[{"url": "nope"}])
        assert _find(raw, rules.INVALID_SERVER_URL, ValidationStrictness.STANDARD) == []


class TestPathTemplates:
    """Route template well-formedness."""

    def test_unbalanced(self) -> None:
        found = _find(_base(paths={"/pets/{id": {}}), rules.PATH_PARAMETERS_NOT_WELL_FORMATTED)
        assert len(found) == 1
        assert "unbalanced braces" in found[0].message

    def test_empty_placeholder(self) -> None:
        found = _find(_base(paths={"/pets/{}": {}}), rules.PATH_PARAMETERS_NOT_WELL_FORMATTED)
        assert "empty parameter placeholder" in found[0].message
        assert "Empty parameter name" in found[1].message

    def test_whitespace(self) -> None:
        found = _find(_base(paths={"/pets/{pet id}": {}}), rules.PATH_PARAMETERS_NOT_WELL_FORMATTED)
        assert ["contains whitespace" in d.message for d in found] == [True]

    def test_well_formed(self) -> None:
        assert _find(_base(paths={"/pets/{petId}/toys/{toyId}": {}}), rules.PATH_PARAMETERS_NOT_WELL_FORMATTED) == []


class TestWebhooks:
    """OpenAPI 3.1 webhooks."""

    def test_incomplete_webhook(self) -> None:
        raw = _base(openapi="3.1.0", webhooks={"orderCreated": {"post": {"responses": {}}}})
        ids = [d.rule_id for d in validate(OpenAPIDocument(raw=raw), ValidationStrictness.STRICT)]
        assert rules.WEBHOOKS_DETECTED in ids
        assert rules.WEBHOOK_MISSING_OPERATION_ID in ids
        assert rules.WEBHOOK_MISSING_REQUEST_BODY in ids

    def test_complete_webhook(self) -> None:
        raw = _base(openapi="3.1.0", webhooks={"orderCreated": {"post": {
            "operationId": "onOrderCreated",
            "requestBody": {"content": {"application/json": {"schema": {"type": "object"}}}},
            "responses": {},
        }}})
        found = _find(raw, rules.WEBHOOKS_DETECTED)
        assert found[0].severity == DiagnosticSeverity.INFO
        assert "1 webhook(s)" in found[0].message
        assert _find(raw, rules.WEBHOOK_MISSING_OPERATION_ID) == []
        assert _find(raw, rules.WEBHOOK_MISSING_REQUEST_BODY) == []
