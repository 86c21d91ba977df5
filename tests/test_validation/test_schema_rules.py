"""Tests for the component schema checks."""

from __future__ import annotations

from typing import Any

from specforge import rules
from specforge.models import DiagnosticMessage, DiagnosticSeverity, OpenAPIDocument, ValidationStrictness
from specforge.validation import validate


def _schema_findings(
    schemas: dict[str, Any], strictness: ValidationStrictness = ValidationStrictness.STRICT
) -> list[DiagnosticMessage]:
    raw = {
        "openapi": "3.1.0",
        "info": {"title": "T", "version": "1"},
        "paths": {},
        "components": {"schemas": schemas},
    }
    return [
        d
        for d in validate(OpenAPIDocument(raw=raw), strictness)
        if d.rule_id.startswith("SF_SCH")
    ]


def _ids(schemas: dict[str, Any], strictness: ValidationStrictness = ValidationStrictness.STRICT) -> list[str]:
    return [d.rule_id for d in _schema_findings(schemas, strictness)]


def _model(**props: Any) -> dict[str, Any]:
    return {"type": "object", "title": "Model", "properties": props}


class TestArrayItems:
    """Standard-tier array property checks."""

    def test_missing_items(self) -> None:
        found = _schema_findings({"Pet": _model(tags={"type": "array"})}, ValidationStrictness.STANDARD)
        assert [d.rule_id for d in found] == [rules.ARRAY_PROPERTY_MISSING_ITEMS]
        assert found[0].context == "#/components/schemas/Pet/properties/tags"
        assert found[0].severity == DiagnosticSeverity.ERROR

    def test_untyped_items(self) -> None:
        ids = _ids({"Pet": _model(tags={"type": "array", "items": {}})}, ValidationStrictness.STANDARD)
        assert ids == [rules.ARRAY_PROPERTY_MISSING_TYPE]

    def test_envelope_names_allowed_untyped(self) -> None:
        ids = _ids({"Page": _model(results={"type": "array", "items": {}})}, ValidationStrictness.STANDARD)
        assert ids == []

    def test_referenced_items(self) -> None:
        schemas = {
            "Pet": _model(tags={"type": "array", "items": {"$ref": "#/components/schemas/Tag"}}),
            "Tag": {"type": "string"},
        }
        assert _ids(schemas, ValidationStrictness.STANDARD) == []

    def test_numeric_property_key(self) -> None:
        found = _schema_findings({"Pet": {"type": "object", "properties": {1: {"type": "array"}}}})
        missing = [d for d in found if d.rule_id == rules.ARRAY_PROPERTY_MISSING_ITEMS]
        assert [d.context for d in missing] == ["#/components/schemas/Pet/properties/1"]


class TestTitlesAndCasing:
    """Titles and names of component schemas."""

    def test_missing_object_title(self) -> None:
        assert _ids({"Pet": {"type": "object"}}) == [rules.OBJECT_TITLE_MISSING]

    def test_lowercase_array_title(self) -> None:
        ids = _ids({"Pets": {"type": "array", "title": "pets", "items": {"type": "string"}}})
        assert ids == [rules.ARRAY_TITLE_NOT_UPPERCASE]

    def test_object_name_casing(self) -> None:
        assert _ids({"pet": {"type": "object", "title": "Pet"}}) == [rules.OBJECT_NAME_CASING]

    def test_property_casing(self) -> None:
        found = _schema_findings({"Pet": _model(pet_name={"type": "string"})})
        assert [d.rule_id for d in found] == [rules.PROPERTY_NAME_CASING]
        assert "Suggestion: 'petName'" in found[0].message

    def test_enum_name_casing(self) -> None:
        assert _ids({"order_status": {"type": "string", "enum": ["Placed"]}}) == [rules.ENUM_NAME_CASING]

    def test_missing_property_key(self) -> None:
        assert rules.PROPERTY_KEY_MISSING in _ids({"Pet": _model(**{"": {"type": "string"}})})


class TestInlineObjects:
    """Inline object definitions."""

    def test_inline_object_property(self) -> None:
        ids = _ids({"Pet": _model(owner={"type": "object", "properties": {"id": {"type": "string"}}})})
        assert ids == [rules.IMPLICIT_OBJECT_NOT_SUPPORTED]

    def test_dictionary_property_allowed(self) -> None:
        ids = _ids({"Pet": _model(labels={"type": "object", "additionalProperties": {"type": "string"}})})
        assert ids == []

    def test_inline_array_items(self) -> None:
        ids = _ids({"Pet": _model(toys={"type": "array", "items": {"type": "object"}})})
        assert ids == [rules.IMPLICIT_ARRAY_OBJECT_NOT_SUPPORTED]


class TestJsonSchema2020:
    """Constructs that are only partially supported."""

    def test_multiple_non_null_types(self) -> None:
        found = _schema_findings({"Pet": _model(code={"type": ["string", "integer", "null"]})})
        assert [d.rule_id for d in found] == [rules.MULTIPLE_NON_NULL_TYPES]
        assert "Using primary type 'string'" in found[0].message
        assert found[0].context == "Property: Pet.code"

    def test_ref_with_siblings(self) -> None:
        schemas = {
            "Pet": _model(owner={"$ref": "#/components/schemas/Owner", "description": "The owner"}),
            "Owner": {"type": "object", "title": "Owner"},
        }
        found = _schema_findings(schemas)
        assert [d.rule_id for d in found] == [rules.REF_WITH_SIBLING_PROPERTIES]
        assert found[0].severity == DiagnosticSeverity.INFO
        assert "[description]" in found[0].message

    def test_const(self) -> None:
        found = _schema_findings({"Pet": _model(kind={"type": "string", "const": "dog"})})
        assert [d.rule_id for d in found] == [rules.SCHEMA_USES_CONST_VALUE]
        assert "const value 'dog'" in found[0].message

    def test_unevaluated_properties(self) -> None:
        schema = {**_model(), "unevaluatedProperties": False}
        assert _ids({"Pet": schema}) == [rules.UNEVALUATED_PROPERTIES_NOT_SUPPORTED]
