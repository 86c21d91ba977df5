"""Security cross-reference checks (``SEC`` rules).

Roles and authentication schemes used on a path or operation
(``x-authorize-roles`` / ``x-authentication-schemes``) must be declared in
the document-level lists of the same name, with exactly the same casing.
Declaring roles or schemes while ``x-authentication-required`` is ``false``
is contradictory and reported as a warning.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator

from specforge import rules
from specforge.extensions.security import (
    AUTHENTICATION_REQUIRED,
    AUTHENTICATION_SCHEMES,
    AUTHORIZE_ROLES,
)
from specforge.extensions.values import read_bool, read_str_list, scope_extensions
from specforge.models import (
    DiagnosticMessage,
    OpenAPIDocument,
    OperationRef,
    ValidationStrictness,
)
from specforge.validation.common import operation_name
from specforge.validation.engine import rule


@dataclass(frozen=True)
class _ScopeRules:
    label: str
    conflict: str
    role_missing: str
    role_casing: str
    scheme_missing: str
    scheme_casing: str


_PATH_RULES = _ScopeRules(
    label="Path",
    conflict=rules.PATH_AUTHENTICATION_CONFLICT,
    role_missing=rules.PATH_AUTHORIZE_ROLE_NOT_DEFINED,
    role_casing=rules.PATH_AUTHORIZE_ROLE_CASING,
    scheme_missing=rules.PATH_AUTHENTICATION_SCHEME_NOT_DEFINED,
    scheme_casing=rules.PATH_AUTHENTICATION_SCHEME_CASING,
)

_OPERATION_RULES = _ScopeRules(
    label="Operation",
    conflict=rules.OPERATION_AUTHENTICATION_CONFLICT,
    role_missing=rules.OPERATION_AUTHORIZE_ROLE_NOT_DEFINED,
    role_casing=rules.OPERATION_AUTHORIZE_ROLE_CASING,
    scheme_missing=rules.OPERATION_AUTHENTICATION_SCHEME_NOT_DEFINED,
    scheme_casing=rules.OPERATION_AUTHENTICATION_SCHEME_CASING,
)


def _distinct_ignore_case(values: list[str]) -> list[str]:
    seen: set[str] = set()
    result = []
    for value in values:
        if value.lower() not in seen:
            seen.add(value.lower())
            result.append(value)
    return result


def _check_names(
    names: list[str],
    declared: list[str],
    subject: str,
    kind: str,
    section: str,
    missing_rule: str,
    casing_rule: str,
) -> Iterator[DiagnosticMessage]:
    declared_lower = {d.lower() for d in declared}
    for name in names:
        if name.lower() not in declared_lower:
            yield DiagnosticMessage.error(
                missing_rule,
                f"{subject} has the {kind} '{name}' defined which is not defined "
                f"in the global {section} section.",
            )
        elif name not in declared:
            yield DiagnosticMessage.warning(
                casing_rule,
                f"{subject} has the {kind} '{name}' defined, but is using incorrect "
                f"casing compared to the global {section} section.",
            )


def _check_scope(
    extensions: dict[str, Any],
    subject: str,
    scope_rules: _ScopeRules,
    global_roles: list[str],
    global_schemes: list[str],
) -> Iterator[DiagnosticMessage]:
    if not extensions:
        return
    roles = _distinct_ignore_case(read_str_list(extensions, AUTHORIZE_ROLES))
    schemes = _distinct_ignore_case(read_str_list(extensions, AUTHENTICATION_SCHEMES))

    if read_bool(extensions, AUTHENTICATION_REQUIRED) is False and (roles or schemes):
        yield DiagnosticMessage.warning(
            scope_rules.conflict,
            f"{subject} has {AUTHENTICATION_REQUIRED} set to false but has "
            f"{AUTHORIZE_ROLES} and/or {AUTHENTICATION_SCHEMES} set.",
        )
    yield from _check_names(
        roles,
        global_roles,
        subject,
        "role",
        AUTHORIZE_ROLES,
        scope_rules.role_missing,
        scope_rules.role_casing,
    )
    yield from _check_names(
        schemes,
        global_schemes,
        subject,
        "authentication scheme",
        AUTHENTICATION_SCHEMES,
        scope_rules.scheme_missing,
        scope_rules.scheme_casing,
    )


@rule(ValidationStrictness.STRICT)
def check_security_references(document: OpenAPIDocument) -> Iterator[DiagnosticMessage]:
    """Path and operation roles/schemes against the document-level declarations."""
    root = document.extensions
    global_roles = _distinct_ignore_case(read_str_list(root, AUTHORIZE_ROLES))
    global_schemes = _distinct_ignore_case(read_str_list(root, AUTHENTICATION_SCHEMES))

    operations: dict[str, list[OperationRef]] = {}
    for op in document.iter_operations():
        operations.setdefault(op.path, []).append(op)

    for path, path_item in document.paths.items():
        yield from _check_scope(
            scope_extensions(path_item), f"Path '{path}'", _PATH_RULES, global_roles, global_schemes
        )
        for op in operations.get(path, ()):
            yield from _check_scope(
                scope_extensions(op.operation),
                f"Operation '{operation_name(op.operation, path)}'",
                _OPERATION_RULES,
                global_roles,
                global_schemes,
            )
