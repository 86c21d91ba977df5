"""Tests for specforge.diagnostics and the DiagnosticMessage model."""

from __future__ import annotations

from specforge import rules
from specforge.diagnostics import (
    count_by_severity,
    documentation_url,
    format_diagnostic,
    has_errors,
    missing_required_field,
    naming_convention_warning,
    operation_id_casing_warning,
    parsing_error,
    response_code_warning,
    schema_reference_error,
    sort_diagnostics,
    with_file_path,
)
from specforge.models import DiagnosticMessage, DiagnosticSeverity


class TestDiagnosticMessage:
    """Builders on the model itself."""

    def test_factories_set_severity(self) -> None:
        assert DiagnosticMessage.error("SF_X001", "m").severity == DiagnosticSeverity.ERROR
        assert DiagnosticMessage.warning("SF_X001", "m").severity == DiagnosticSeverity.WARNING
        assert DiagnosticMessage.info("SF_X001", "m").severity == DiagnosticSeverity.INFO

    def test_with_builders_return_copies(self) -> None:
        original = DiagnosticMessage.warning("SF_NAM001", "bad name")
        updated = original.with_context("GET /pets").with_suggestions("a", "b")
        assert original.context is None
        assert updated.context == "GET /pets"
        assert updated.suggestions == ["a", "b"]
        assert updated.has_rich_context
        assert not original.has_rich_context

    def test_location(self) -> None:
        d = DiagnosticMessage.error("SF_X001", "m").with_location("api.yaml", 12, 4)
        assert d.location == "api.yaml:12:4"
        assert DiagnosticMessage.error("SF_X001", "m").location == ""
        assert DiagnosticMessage.error("SF_X001", "m", file_path="a.yaml").location == "a.yaml"


class TestBuilders:
    """Shared diagnostic builders."""

    def test_documentation_url(self) -> None:
        assert documentation_url("SF_NAM001").endswith("#sf-nam001")

    def test_schema_reference_error(self) -> None:
        d = schema_reference_error("Ghost", "#/paths/~1pets/get", file_path="api.yaml")
        assert d.rule_id == rules.INVALID_SCHEMA_REFERENCE
        assert d.is_error
        assert "'Ghost'" in d.message
        assert d.context == "#/paths/~1pets/get"
        assert d.documentation_url.endswith("#sf-sch013")

    def test_naming_convention_warning(self) -> None:
        d = naming_convention_warning(
            rules.MODEL_NAME_MUST_BE_PASCAL_CASE,
            "Model",
            "pet_item",
            "PascalCase",
            "PetItem",
            "components/schemas/pet_item",
        )
        assert d.message == "Model 'pet_item' must use PascalCase"
        assert d.suggestions == ["Rename to 'PetItem'"]
        assert d.severity == DiagnosticSeverity.WARNING

    def test_operation_id_casing_warning(self) -> None:
        d = operation_id_casing_warning("Get_Pets", "getPets", "get", "/pets")
        assert d.rule_id == rules.OPERATION_ID_MUST_BE_CAMEL_CASE
        assert d.context == "GET /pets"
        assert "'getPets'" in d.suggestions[0]

    def test_response_code_warning(self) -> None:
        d = response_code_warning(
            rules.NOT_FOUND_ON_POST_OPERATION, "msg", "createPet", "post", "/pets", ["fix it"]
        )
        assert d.context == "POST /pets (createPet)"
        assert d.suggestions == ["fix it"]

    def test_parsing_error(self) -> None:
        d = parsing_error("bad indent", file_path="a.yaml", json_pointer="#/paths")
        assert d.message == "OpenAPI parsing error: bad indent"
        assert d.suggestions[0] == "Check the element at JSON path: #/paths"

    def test_missing_required_field(self) -> None:
        d = missing_required_field(
            rules.OPERATION_ID_MISSING, "operationId", "GET /pets", "#/paths/~1pets/get", "Use verbs"
        )
        assert d.message == "Missing required 'operationId' in GET /pets"
        assert d.suggestions[-1] == "Use verbs"


class TestListHelpers:
    """Operations on whole diagnostic lists."""

    def test_sort_by_category_then_number_and_stable(self) -> None:
        diagnostics = [
            DiagnosticMessage.warning("SF_OPR003", "first opr3"),
            DiagnosticMessage.warning("SF_NAM002", "nam"),
            DiagnosticMessage.error("SF_VAL001", "val"),
            DiagnosticMessage.warning("SF_OPR003", "second opr3"),
            DiagnosticMessage.warning("SF_OPR001", "opr1"),
        ]
        ordered = [d.message for d in sort_diagnostics(diagnostics)]
        assert ordered == ["val", "nam", "opr1", "first opr3", "second opr3"]

    def test_unknown_category_sorts_last(self) -> None:
        diagnostics = [DiagnosticMessage.info("SF_ZZZ001", "z"), DiagnosticMessage.info("SF_WBH003", "w")]
        assert [d.rule_id for d in sort_diagnostics(diagnostics)] == ["SF_WBH003", "SF_ZZZ001"]

    def test_has_errors_and_counts(self) -> None:
        diagnostics = [
            DiagnosticMessage.warning("SF_A001", "w"),
            DiagnosticMessage.error("SF_A002", "e"),
            DiagnosticMessage.warning("SF_A003", "w"),
        ]
        assert has_errors(diagnostics)
        assert not has_errors(diagnostics[:1])
        counts = count_by_severity(diagnostics)
        assert counts[DiagnosticSeverity.ERROR] == 1
        assert counts[DiagnosticSeverity.WARNING] == 2
        assert counts[DiagnosticSeverity.INFO] == 0

    def test_with_file_path_keeps_existing(self) -> None:
        diagnostics = [
            DiagnosticMessage.warning("SF_A001", "w"),
            DiagnosticMessage.warning("SF_A001", "w", file_path="part.yaml"),
        ]
        stamped = with_file_path(diagnostics, "base.yaml")
        assert [d.file_path for d in stamped] == ["base.yaml", "part.yaml"]

    def test_format_diagnostic(self) -> None:
        d = DiagnosticMessage.error("SF_SCH013", "Bad ref", file_path="a.yaml").with_context("#/x")
        assert format_diagnostic(d) == "a.yaml: error SF_SCH013: Bad ref [#/x]"
        assert format_diagnostic(DiagnosticMessage.error("SF_SCH013", "Bad ref")) == (
            "error SF_SCH013: Bad ref"
        )
