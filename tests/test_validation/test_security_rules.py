"""Tests for the security cross-reference checks."""

from __future__ import annotations

from typing import Any

from specforge import rules
from specforge.models import DiagnosticMessage, DiagnosticSeverity, OpenAPIDocument, ValidationStrictness
from specforge.validation import validate


def _security(path_item: dict[str, Any], **root: Any) -> list[DiagnosticMessage]:
    raw = {
        "openapi": "3.0.3",
        "info": {"title": "T", "version": "1"},
        "x-authorize-roles": ["Admin", "Clerk"],
        "x-authentication-schemes": ["Bearer"],
        "paths": {"/orders": path_item},
    }
    raw.update(root)
    return [
        d
        for d in validate(OpenAPIDocument(raw=raw), ValidationStrictness.STRICT)
        if d.rule_id.startswith("SF_SEC")
    ]


class TestRoles:
    """x-authorize-roles against the document declaration."""

    def test_declared_roles_pass(self) -> None:
        assert _security({"x-authorize-roles": ["Admin"], "get": {"x-authorize-roles": ["Clerk"]}}) == []

    def test_undeclared_operation_role(self) -> None:
        found = _security({"get": {"operationId": "listOrders", "x-authorize-roles": ["Guest"]}})
        assert [d.rule_id for d in found] == [rules.OPERATION_AUTHORIZE_ROLE_NOT_DEFINED]
        assert found[0].severity == DiagnosticSeverity.ERROR
        assert "Operation 'listOrders' has the role 'Guest'" in found[0].message

    def test_path_role_casing(self) -> None:
        found = _security({"x-authorize-roles": ["admin", "ADMIN"]})
        assert [d.rule_id for d in found] == [rules.PATH_AUTHORIZE_ROLE_CASING]
        assert found[0].severity == DiagnosticSeverity.WARNING
        assert found[0].message.startswith("Path '/orders' has the role 'admin'")

    def test_operation_without_id_is_named_by_path(self) -> None:
        found = _security({"get": {"x-authorize-roles": ["admin"]}})
        assert [d.rule_id for d in found] == [rules.OPERATION_AUTHORIZE_ROLE_CASING]
        assert "Operation 'operation at /orders'" in found[0].message


class TestSchemes:
    """x-authentication-schemes against the document declaration."""

    def test_undeclared_path_scheme(self) -> None:
        found = _security({"x-authentication-schemes": ["Cookie"]})
        assert [d.rule_id for d in found] == [rules.PATH_AUTHENTICATION_SCHEME_NOT_DEFINED]

    def test_operation_scheme_casing(self) -> None:
        found = _security({"post": {"operationId": "createOrder", "x-authentication-schemes": ["bearer"]}})
        assert [d.rule_id for d in found] == [rules.OPERATION_AUTHENTICATION_SCHEME_CASING]

    def test_nothing_declared_globally(self) -> None:
        found = _security(
            {"get": {"x-authentication-schemes": ["Bearer"]}},
            **{"x-authentication-schemes": []},
        )
        assert [d.rule_id for d in found] == [rules.OPERATION_AUTHENTICATION_SCHEME_NOT_DEFINED]


class TestConflicts:
    """Roles or schemes on an endpoint that opts out of authentication."""

    def test_operation_conflict(self) -> None:
        found = _security({"get": {
            "operationId": "listOrders",
            "x-authentication-required": False,
            "x-authorize-roles": ["Admin"],
        }})
        assert [d.rule_id for d in found] == [rules.OPERATION_AUTHENTICATION_CONFLICT]

    def test_path_conflict(self) -> None:
        found = _security({"x-authentication-required": False, "x-authentication-schemes": ["Bearer"]})
        assert [d.rule_id for d in found] == [rules.PATH_AUTHENTICATION_CONFLICT]

    def test_opt_out_alone_is_fine(self) -> None:
        assert _security({"get": {"x-authentication-required": False}}) == []
