"""Tests for specforge.projector -- schema classification and type descriptors."""

from __future__ import annotations

from typing import Any

import pytest

from specforge.projector import (
    ArrayShape,
    CompositionShape,
    MapShape,
    PrimitiveShape,
    ProjectionOptions,
    RefShape,
    UnknownShape,
    classify_schema,
    project_return_type,
    project_type,
    shape_adapter,
)

PET = {"$ref": "#/components/schemas/Pet"}


class TestClassifySchema:
    """Each fragment lands in exactly one shape."""

    @pytest.mark.parametrize(
        ("fragment", "shape_type"),
        [
            (PET, RefShape),
            ({"allOf": [{"description": "x"}, PET]}, CompositionShape),
            ({"oneOf": [PET]}, CompositionShape),
            ({"additionalProperties": {"type": "integer"}}, MapShape),
            ({"type": "object", "additionalProperties": True}, MapShape),
            ({"type": "array", "items": {"type": "string"}}, ArrayShape),
            ({"items": {"type": "string"}}, ArrayShape),
            ({"type": "integer", "format": "int64"}, PrimitiveShape),
            ({"type": "object"}, UnknownShape),
            ("not a schema", UnknownShape),
        ],
    )
    def test_shapes(self, fragment: Any, shape_type: type) -> None:
        assert isinstance(classify_schema(fragment), shape_type)

    def test_one_of_with_several_members_is_not_composition(self) -> None:
        shape = classify_schema({"oneOf": [PET, {"$ref": "#/components/schemas/Cat"}]})
        assert isinstance(shape, UnknownShape)

    def test_ref_wins_over_siblings(self) -> None:
        shape = classify_schema({**PET, "nullable": True})
        assert shape == RefShape(name="Pet")

    def test_nullable_recorded(self) -> None:
        assert classify_schema({"type": ["string", "null"]}).nullable
        assert classify_schema({"type": "string", "nullable": True}).nullable

    def test_discriminated_round_trip(self) -> None:
        shape = classify_schema({"type": "string", "format": "uuid"})
        dumped = shape_adapter.dump_python(shape, mode="json")
        assert dumped == {"kind": "primitive", "type": "string", "format": "uuid", "nullable": False}
        assert shape_adapter.validate_python(dumped) == shape


class TestProjectType:
    """Descriptor rendering."""

    @pytest.mark.parametrize(
        ("fragment", "expected"),
        [
            (PET, "Pet"),
            ({"type": "string"}, "string"),
            ({"type": "string", "format": "uuid"}, "string"),
            ({"type": "string", "format": "byte"}, "string"),
            ({"type": "string", "format": "binary"}, "Blob | File"),
            ({"type": "string", "format": "date-time"}, "string"),
            ({"type": "integer", "format": "int32"}, "number"),
            ({"type": "number", "format": "double"}, "number"),
            ({"type": "boolean"}, "boolean"),
            ({"type": "array", "items": PET}, "Pet[]"),
            ({"type": "array"}, "unknown[]"),
            ({"type": "array", "items": {"type": "array", "items": {"type": "integer"}}}, "number[][]"),
            ({"additionalProperties": {"type": "string"}}, "Record<string, string>"),
            ({"additionalProperties": True}, "Record<string, unknown>"),
            ({"allOf": [PET]}, "Pet"),
            ({"type": "object"}, "unknown"),
            ({}, "unknown"),
        ],
    )
    def test_descriptors(self, fragment: Any, expected: str) -> None:
        assert project_type(fragment) == expected

    def test_nullable_union(self) -> None:
        assert project_type({"type": "string", "nullable": True}) == "string | null"
        assert project_type({"type": ["integer", "null"]}) == "number | null"
        assert project_type({"type": "array", "nullable": True, "items": PET}) == "Pet[] | null"
        assert project_type({"allOf": [PET], "nullable": True}) == "Pet | null"

    def test_nullable_items_are_parenthesised(self) -> None:
        fragment = {"type": "array", "items": {"type": "string", "nullable": True}}
        assert project_type(fragment) == "(string | null)[]"

    def test_binary_items_are_parenthesised(self) -> None:
        fragment = {"type": "array", "items": {"type": "string", "format": "binary"}}
        assert project_type(fragment) == "(Blob | File)[]"

    def test_nullable_union_disabled(self) -> None:
        options = ProjectionOptions(nullable_as_union=False)
        assert project_type({"type": "string", "nullable": True}, options) == "string"

    def test_convert_dates(self) -> None:
        options = ProjectionOptions(convert_dates=True)
        assert project_type({"type": "string", "format": "date"}, options) == "Date"
        assert project_type({"type": "string", "format": "Date-Time"}, options) == "Date"
        assert project_type({"type": "array", "items": {"type": "string", "format": "date"}}, options) == "Date[]"

    def test_required_does_not_change_descriptor(self) -> None:
        fragment = {"type": "string", "nullable": True}
        assert project_type(fragment, is_required=False) == project_type(fragment, is_required=True)


class TestProjectReturnType:
    """Return-type projection."""

    def test_binary_is_blob(self) -> None:
        assert project_return_type({"type": "string", "format": "binary"}) == "Blob"

    def test_nullability_dropped(self) -> None:
        assert project_return_type({"type": "array", "nullable": True, "items": PET}) == "Pet[]"

    def test_envelope_from_all_of(self) -> None:
        fragment = {"allOf": [{"$ref": "#/components/schemas/PagedResult"}, {"properties": {}}]}
        assert project_return_type(fragment) == "PagedResult"

    def test_reference(self) -> None:
        assert project_return_type(PET) == "Pet"
