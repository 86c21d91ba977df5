"""Tests for specforge.validation.engine -- tiers, ordering and parallel runs."""

from __future__ import annotations

import pytest

from specforge import rules
from specforge.models import OpenAPIDocument, ValidationStrictness
from specforge.validation import registered_rules, rule, validate


def _doc(**paths) -> OpenAPIDocument:
    return OpenAPIDocument(raw={
        "openapi": "3.0.3",
        "info": {"title": "T", "version": "1"},
        "paths": paths,
    })


class TestTiers:
    """Strictness gating."""

    def test_none_runs_nothing(self) -> None:
        doc = OpenAPIDocument(raw={"swagger": "2.0"})
        assert validate(doc, ValidationStrictness.NONE) == []

    def test_standard_rules(self) -> None:
        names = {r.name for r in registered_rules(ValidationStrictness.STANDARD)}
        assert names == {"check_openapi_version", "check_schema_references", "check_array_items"}

    def test_strict_includes_standard(self) -> None:
        standard = {r.name for r in registered_rules(ValidationStrictness.STANDARD)}
        strict = {r.name for r in registered_rules(ValidationStrictness.STRICT)}
        assert standard < strict
        assert len(registered_rules()) == len(strict)

    def test_naming_only_when_strict(self) -> None:
        doc = _doc(**{"/pets": {"get": {"operationId": "ListPets", "responses": {}}}})
        standard = [d.rule_id for d in validate(doc, ValidationStrictness.STANDARD)]
        strict = [d.rule_id for d in validate(doc, ValidationStrictness.STRICT)]
        assert rules.OPERATION_ID_MUST_BE_CAMEL_CASE not in standard
        assert rules.OPERATION_ID_MUST_BE_CAMEL_CASE in strict

    def test_cannot_register_under_none(self) -> None:
        with pytest.raises(ValueError, match="none"):
            rule(ValidationStrictness.NONE)


class TestValidateResult:
    """Shape of the returned diagnostics."""

    def test_valid_petstore(self, petstore_document: OpenAPIDocument) -> None:
        assert validate(petstore_document) == []

    def test_sorted_by_rule_priority(self, petstore_document: OpenAPIDocument) -> None:
        diagnostics = validate(petstore_document, ValidationStrictness.STRICT)
        assert diagnostics
        keys = [rules.rule_priority(d.rule_id) for d in diagnostics]
        assert keys == sorted(keys)

    def test_parallel_matches_sequential(self, petstore_document: OpenAPIDocument) -> None:
        sequential = validate(petstore_document, ValidationStrictness.STRICT)
        parallel = validate(petstore_document, ValidationStrictness.STRICT, parallel=True)
        assert parallel == sequential

    def test_file_path_stamped(self) -> None:
        doc = OpenAPIDocument(raw={"openapi": "2.0"})
        diagnostics = validate(doc, file_path="api.yaml")
        assert [d.file_path for d in diagnostics] == ["api.yaml"]

    def test_reports_everything_in_one_run(self) -> None:
        doc = _doc(**{
            "/a": {"get": {"responses": {}}},
            "/b": {"get": {"responses": {}}},
        })
        found = [d for d in validate(doc, ValidationStrictness.STRICT) if d.rule_id == rules.OPERATION_ID_MISSING]
        assert len(found) == 2
