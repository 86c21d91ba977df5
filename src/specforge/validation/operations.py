"""Operation checks (``OPR`` rules).

Covers operationId presence, casing and verb prefixes, whether the
operationId's plurality matches the success response, path-parameter
consistency between route templates and declarations, request-body shape,
and response codes that contradict the rest of the operation (a ``401``
on an endpoint with no authentication, a ``429`` with no rate limit, ...).

The response-code rules consult the resolved extension configuration, so a
``x-ratelimit-policy`` set on the document root satisfies a ``429`` on every
operation.
"""

from __future__ import annotations

from typing import Any, Iterator, Optional

from specforge import rules
from specforge.casing import detect_casing_style, is_valid_operation_id_casing, suggest_camel_case
from specforge.diagnostics import response_code_warning
from specforge.extensions.rate_limit import resolve_rate_limit
from specforge.extensions.security import resolve_security
from specforge.extensions.values import scope_extensions
from specforge.models import (
    DiagnosticMessage,
    HTTPMethod,
    OpenAPIDocument,
    OperationRef,
    ValidationStrictness,
)
from specforge.parser.schema import is_nullable, properties, resolve_schema, schema_type
from specforge.validation.common import (
    first_media_schema,
    in_route,
    media_schemas,
    path_parameters,
    responses,
    route_parameters,
)
from specforge.validation.engine import rule

# (rule, allowed prefixes, True when the prefixes are forbidden instead)
_PREFIX_RULES: dict[HTTPMethod, tuple[str, tuple[str, ...], bool]] = {
    HTTPMethod.GET: (rules.GET_OPERATION_ID_PREFIX, ("get", "list"), False),
    HTTPMethod.POST: (rules.POST_OPERATION_ID_PREFIX, ("delete",), True),
    HTTPMethod.PUT: (rules.PUT_OPERATION_ID_PREFIX, ("update",), False),
    HTTPMethod.PATCH: (rules.PATCH_OPERATION_ID_PREFIX, ("patch", "update"), False),
    HTTPMethod.DELETE: (rules.DELETE_OPERATION_ID_PREFIX, ("delete", "remove"), False),
}

_QUERY_PREFIXES = ("get", "list", "find", "search", "fetch", "retrieve")
_SUCCESS_CODES = ("200", "201", "202", "204")
_PAGINATION_PROPERTIES = frozenset({"items", "results", "data", "records", "values"})


# ------------------------------------------------------------------ #
# Helpers
# ------------------------------------------------------------------ #


def is_pluralized(operation_id: str) -> bool:
    """Whether the noun of *operation_id* reads as a plural.

    A leading query verb (``get``, ``list``, ``find``...) is dropped first.
    Words ending in ``ss``, ``us`` or ``is`` (``address``, ``status``,
    ``analysis``) count as singular.

    Example::

        >>> is_pluralized("listPets"), is_pluralized("getAddress")
        (True, False)
    """
    name = operation_id
    lowered = operation_id.lower()
    for prefix in _QUERY_PREFIXES:
        if lowered.startswith(prefix):
            name = operation_id[len(prefix) :]
            break
    name = name.lower()
    return bool(name) and name.endswith("s") and not name.endswith(("ss", "us", "is"))


def _success_schema(operation: dict[str, Any], root: dict[str, Any]) -> Optional[Any]:
    codes = responses(operation)
    for code in _SUCCESS_CODES:
        if code in codes:
            return first_media_schema(resolve_schema(codes[code], root))
    return None


def _is_array(schema: Any, root: dict[str, Any]) -> bool:
    return schema_type(resolve_schema(schema, root)) == "array"


def _is_paginated(schema: Any, root: dict[str, Any], depth: int = 0) -> bool:
    target = resolve_schema(schema, root)
    if not isinstance(target, dict) or depth > 16:
        return False
    if schema_type(target) == "object":
        for key, prop in properties(target).items():
            if key.lower() in _PAGINATION_PROPERTIES and _is_array(prop, root):
                return True
    parts = target.get("allOf")
    return isinstance(parts, list) and any(_is_paginated(p, root, depth + 1) for p in parts)


# ------------------------------------------------------------------ #
# Per-operation checks
# ------------------------------------------------------------------ #


def _operation_id_checks(op: OperationRef, operation_id: str) -> Iterator[DiagnosticMessage]:
    location = f"{op.method.value.upper()} {op.path}"
    if not is_valid_operation_id_casing(operation_id):
        yield DiagnosticMessage.warning(
            rules.OPERATION_ID_CASING,
            f"OperationId '{operation_id}' is not using a valid casing style. "
            f"Detected: {detect_casing_style(operation_id)}. Expected: camelCase or kebab-case. "
            f"Suggestion: '{suggest_camel_case(operation_id)}'. Location: {location}",
        )

    if op.method not in _PREFIX_RULES:
        return
    rule_id, prefixes, forbidden = _PREFIX_RULES[op.method]
    matches = operation_id.lower().startswith(prefixes)
    if matches == forbidden:
        quoted = " or ".join(f"'{p}'" for p in prefixes)
        verb = "should not start with" if forbidden else "should start with"
        yield DiagnosticMessage.warning(
            rule_id,
            f"OperationId '{operation_id}' {verb} {quoted} for {op.method.value.upper()} "
            f"operation. Location: {location}",
        )


def _pluralization(op: OperationRef, operation_id: str, root: dict[str, Any]) -> Iterator[DiagnosticMessage]:
    schema = _success_schema(op.operation, root)
    if schema is None:
        return
    plural = is_pluralized(operation_id)
    many = _is_array(schema, root) or _is_paginated(schema, root)
    location = f"{op.method.value.upper()} {op.path}"
    if plural and not many:
        yield DiagnosticMessage.warning(
            rules.OPERATION_ID_PLURALIZATION_MISMATCH,
            f"OperationId '{operation_id}' is pluralized but response is a single item. "
            f"Location: {location}",
        )
    elif many and not plural:
        yield DiagnosticMessage.warning(
            rules.OPERATION_ID_SINGULAR_MISMATCH,
            f"OperationId '{operation_id}' is singular but response is an array. "
            f"Location: {location}",
        )


def _response_codes(
    document: OpenAPIDocument, op: OperationRef, operation_id: str
) -> Iterator[DiagnosticMessage]:
    codes = responses(op.operation)
    method = op.method.value

    def warning(rule_id: str, message: str, *suggestions: str) -> DiagnosticMessage:
        return response_code_warning(rule_id, message, operation_id, method, op.path, suggestions)

    if "400" in codes:
        has_input = (
            bool(op.operation.get("parameters"))
            or op.operation.get("requestBody") is not None
            or bool(op.path_item.get("parameters"))
        )
        if not has_input:
            yield warning(
                rules.BAD_REQUEST_WITHOUT_PARAMETERS,
                f"Operation '{operation_id}' contains BadRequest (400) response but has no "
                "parameters or request body.",
                "Remove the 400 response or add the parameters it validates",
            )

    op_ext = scope_extensions(op.operation)
    path_ext = scope_extensions(op.path_item)
    if "401" in codes or "403" in codes:
        security = resolve_security(
            op_ext, path_ext, document.extensions, op.operation.get("security"), document.security
        )
        if "401" in codes and not security.authentication_required:
            yield warning(
                rules.UNAUTHORIZED_WITHOUT_SECURITY,
                f"Operation '{operation_id}' defines 401 Unauthorized response but has no "
                "security requirements.",
                "Add a security requirement or x-authentication-required: true",
                "Remove the 401 response if the operation is public",
            )
        if "403" in codes and not (security.roles or security.scopes):
            yield warning(
                rules.FORBIDDEN_WITHOUT_AUTHORIZATION,
                f"Operation '{operation_id}' defines 403 Forbidden response but has no "
                "authorization requirements (roles/scopes).",
                "Add x-authorize-roles or OAuth2 scopes to the operation",
            )

    if "404" in codes and op.method is HTTPMethod.POST:
        yield warning(
            rules.NOT_FOUND_ON_POST_OPERATION,
            f"Operation '{operation_id}' defines 404 NotFound response on POST operation - "
            "POST creates resources, so 'not found' is unusual.",
        )

    if "409" in codes and op.method in (HTTPMethod.GET, HTTPMethod.DELETE):
        yield warning(
            rules.CONFLICT_ON_NON_MUTATING_OPERATION,
            f"Operation '{operation_id}' defines 409 Conflict response but operation is "
            f"{method.upper()} - conflicts typically occur during POST/PUT/PATCH operations.",
        )

    if "429" in codes and resolve_rate_limit(op_ext, path_ext, document.extensions) is None:
        yield warning(
            rules.TOO_MANY_REQUESTS_WITHOUT_RATE_LIMITING,
            f"Operation '{operation_id}' defines 429 TooManyRequests response but no rate "
            "limiting is configured (x-ratelimit-* extensions).",
            "Add an x-ratelimit-policy to the operation, path or document",
        )


def _path_parameter_checks(
    op: OperationRef, operation_id: str, path_level: list[dict[str, Any]], root: dict[str, Any]
) -> Iterator[DiagnosticMessage]:
    declared = path_parameters(op.operation, root)
    route = route_parameters(op.path)

    if not path_level and route:
        names = {str(p.get("name", "")).lower() for p in declared}
        for name in route:
            if name.lower() not in names:
                yield DiagnosticMessage.error(
                    rules.OPERATION_MISSING_PATH_PARAMETER,
                    f"Operation '{operation_id}' in path '{op.path}' does not define a "
                    f"parameter named '{name}'.",
                )

    for parameter in declared:
        if not in_route(parameter.get("name"), op.path):
            yield DiagnosticMessage.error(
                rules.OPERATION_PATH_PARAMETER_NOT_IN_ROUTE,
                f"Defined path parameter '{parameter.get('name')}' does not exist in route "
                f"'{op.path}' for operation '{operation_id}'.",
            )

    if op.method is HTTPMethod.GET and (path_level or declared) and "404" not in responses(op.operation):
        yield DiagnosticMessage.warning(
            rules.GET_MISSING_NOT_FOUND_RESPONSE,
            f"Missing NotFound (404) response type for operation '{operation_id}', "
            "required by path parameter.",
        )

    for parameter in declared:
        name = parameter.get("name")
        if parameter.get("required") is not True:
            yield DiagnosticMessage.warning(
                rules.PATH_PARAMETER_NOT_REQUIRED,
                f"Path parameter '{name}' for operation '{operation_id}' is missing required=true.",
            )
        if is_nullable(parameter.get("schema")):
            yield DiagnosticMessage.warning(
                rules.PATH_PARAMETER_NULLABLE,
                f"Path parameter '{name}' for operation '{operation_id}' must not be nullable.",
            )


def _request_body(op: OperationRef, operation_id: str, root: dict[str, Any]) -> Iterator[DiagnosticMessage]:
    body = resolve_schema(op.operation.get("requestBody"), root)
    for _content_type, schema in media_schemas(body):
        if not isinstance(schema, dict) or "$ref" in schema:
            continue
        if str(schema.get("format", "")).lower() == "binary":
            continue
        if properties(schema):
            yield DiagnosticMessage.error(
                rules.REQUEST_BODY_INLINE_MODEL,
                f"RequestBody is defined with inline model for operation '{operation_id}' - "
                "only reference to component schemas are supported.",
            )


def _check_operation(
    document: OpenAPIDocument, op: OperationRef, path_level: list[dict[str, Any]]
) -> Iterator[DiagnosticMessage]:
    root = document.raw
    operation_id = op.operation_id
    if not operation_id:
        yield DiagnosticMessage.error(
            rules.OPERATION_ID_MISSING,
            f"Missing operationId in path '{op.method.value.upper()} {op.path}'.",
        )
        return

    yield from _operation_id_checks(op, operation_id)
    yield from _pluralization(op, operation_id, root)
    yield from _response_codes(document, op, operation_id)
    yield from _path_parameter_checks(op, operation_id, path_level, root)
    yield from _request_body(op, operation_id, root)

    success = [code for code in responses(op.operation) if code.startswith("2")]
    if len(success) > 1:
        yield DiagnosticMessage.error(
            rules.MULTIPLE_2XX_STATUS_CODES,
            f"Operation '{operation_id}' contains multiple 2xx status codes "
            f"({', '.join(success)}), which is not supported.",
        )


@rule(ValidationStrictness.STRICT)
def check_operations(document: OpenAPIDocument) -> Iterator[DiagnosticMessage]:
    """Per-path parameter declarations, then every operation under the path."""
    operations: dict[str, list[OperationRef]] = {}
    for op in document.iter_operations():
        operations.setdefault(op.path, []).append(op)

    for path, path_item in document.paths.items():
        path_level = path_parameters(path_item, document.raw)
        for parameter in path_level:
            if not in_route(parameter.get("name"), path):
                yield DiagnosticMessage.error(
                    rules.GLOBAL_PATH_PARAMETER_NOT_IN_ROUTE,
                    f"Defined global path parameter '{parameter.get('name')}' does not exist "
                    f"in route '{path}'.",
                )
        for op in operations.get(path, ()):
            yield from _check_operation(document, op, path_level)
