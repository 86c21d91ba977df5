"""Unify extension-based and standard OpenAPI security for one operation.

Two sources describe who may call an operation:

* the ``x-authentication-required`` / ``x-authorize-roles`` /
  ``x-authentication-schemes`` extensions, resolved operation -> path ->
  document like every other family;
* the standard ``security`` requirement list, where the operation's list
  replaces the document's and an explicit empty list means "public".

:func:`resolve_security` merges both into one
:class:`~specforge.models.SecurityConfiguration` whose ``source`` records
which of them contributed.
"""

from __future__ import annotations

from typing import Any, NamedTuple, Optional

from specforge.extensions.values import Extensions, coalesce, read_bool, read_str_list
from specforge.models import SecurityConfiguration, SecurityRequirement, SecuritySource

AUTHENTICATION_REQUIRED = "x-authentication-required"
AUTHORIZE_ROLES = "x-authorize-roles"
AUTHENTICATION_SCHEMES = "x-authentication-schemes"


class ExtensionSecurity(NamedTuple):
    authentication_required: bool
    roles: list[str]
    schemes: list[str]
    allow_anonymous: bool


def resolve_extension_security(
    operation: Extensions, path: Extensions, document: Extensions
) -> Optional[ExtensionSecurity]:
    """Resolve the ``x-authentication-*`` / ``x-authorize-*`` extensions.

    Returns ``None`` when authentication is not required anywhere and no
    roles or schemes are set on the path or operation. Roles or schemes on
    their own imply that authentication is required.
    """
    op_required = read_bool(operation, AUTHENTICATION_REQUIRED)
    if op_required is False:
        return ExtensionSecurity(False, [], [], True)

    required = coalesce(read_bool, AUTHENTICATION_REQUIRED, operation, path, document) or False

    roles = read_str_list(operation, AUTHORIZE_ROLES) or read_str_list(path, AUTHORIZE_ROLES)
    schemes = read_str_list(operation, AUTHENTICATION_SCHEMES) or read_str_list(
        path, AUTHENTICATION_SCHEMES
    )
    if not required:
        if not roles and not schemes:
            return None
        required = True

    return ExtensionSecurity(required, roles, schemes, False)


def security_requirements(
    operation_security: Any, document_security: Any
) -> Optional[list[SecurityRequirement]]:
    """Flatten the effective ``security`` list into scheme/scope pairs.

    The operation's list replaces the document's. ``None`` means neither
    declares security; ``[]`` means the operation is explicitly public.
    Entries inside one requirement object are AND-ed and separate objects are
    OR-ed; both end up as consecutive items here.
    """
    effective = operation_security if isinstance(operation_security, list) else None
    if effective is None:
        effective = document_security if isinstance(document_security, list) else None
    if effective is None:
        return None

    requirements = []
    for requirement in effective:
        if not isinstance(requirement, dict):
            continue
        for scheme_name, scopes in requirement.items():
            scope_list = [s for s in scopes if isinstance(s, str)] if isinstance(scopes, list) else []
            requirements.append(SecurityRequirement(scheme_name=str(scheme_name), scopes=scope_list))
    return requirements


def _distinct(values: list[str]) -> list[str]:
    return list(dict.fromkeys(values))


def resolve_security(
    operation: Extensions,
    path: Extensions,
    document: Extensions,
    operation_security: Any = None,
    document_security: Any = None,
) -> SecurityConfiguration:
    """Resolve the unified security configuration for one operation.

    Args:
        operation: The operation's ``x-*`` fields.
        path: The enclosing path item's ``x-*`` fields.
        document: The document's root ``x-*`` fields.
        operation_security: The operation's raw ``security`` value, if any.
        document_security: The document's raw ``security`` value, if any.

    Returns:
        The configuration. Its ``source`` is ``NONE`` when neither the
        extensions nor standard ``security`` apply.
    """
    extension = resolve_extension_security(operation, path, document)
    requirements = security_requirements(operation_security, document_security)

    if extension is not None and requirements is not None:
        if extension.allow_anonymous:
            return SecurityConfiguration(source=SecuritySource.BOTH, allow_anonymous=True)
        return SecurityConfiguration(
            source=SecuritySource.BOTH,
            authentication_required=extension.authentication_required,
            roles=extension.roles,
            schemes=extension.schemes,
            requirements=requirements,
            scopes=_distinct([s for r in requirements for s in r.scopes]),
        )

    if extension is not None:
        return SecurityConfiguration(
            source=SecuritySource.EXTENSIONS,
            allow_anonymous=extension.allow_anonymous,
            authentication_required=extension.authentication_required,
            roles=extension.roles,
            schemes=extension.schemes,
        )

    if requirements is not None:
        if not requirements:
            return SecurityConfiguration(source=SecuritySource.OPENAPI, allow_anonymous=True)
        return SecurityConfiguration(
            source=SecuritySource.OPENAPI,
            authentication_required=True,
            requirements=requirements,
            schemes=_distinct([r.scheme_name for r in requirements]),
            scopes=_distinct([s for r in requirements for s in r.scopes]),
        )

    return SecurityConfiguration()
