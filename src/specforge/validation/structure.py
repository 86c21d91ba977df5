"""Document-level checks: version, references, servers, path templates, webhooks.

The version and reference checks run at ``standard`` strictness because a
document failing them cannot be generated from at all. The rest are
``strict``.
"""

from __future__ import annotations

from typing import Any, Iterator

from specforge import rules
from specforge.diagnostics import documentation_url, schema_reference_error
from specforge.exceptions import SpecParseError
from specforge.models import (
    DiagnosticMessage,
    DiagnosticSeverity,
    OpenAPIDocument,
    ValidationStrictness,
)
from specforge.parser.loader import validate_openapi_version
from specforge.parser.resolver import ref_name, try_resolve
from specforge.parser.schema import is_reference, properties, resolve_schema
from specforge.validation.common import media_schemas, resolved_parameters, responses
from specforge.validation.engine import rule

# ------------------------------------------------------------------ #
# Version
# ------------------------------------------------------------------ #


@rule(ValidationStrictness.STANDARD)
def check_openapi_version(document: OpenAPIDocument) -> Iterator[DiagnosticMessage]:
    """Reject Swagger / OpenAPI 2.0 and documents with no usable 3.x version."""
    version = document.swagger_version or document.openapi_version
    if document.swagger_version is not None or (version or "").startswith("2."):
        yield DiagnosticMessage.error(
            rules.OPENAPI_20_NOT_SUPPORTED,
            "OpenAPI 2.0 (Swagger) is not supported. Please use OpenAPI 3.0.x or 3.1.x. "
            f"Current version: {version}",
        ).with_suggestions(
            "Convert the document to OpenAPI 3.x with a Swagger-to-OpenAPI converter"
        )
        return
    try:
        validate_openapi_version(document.raw)
    except SpecParseError as exc:
        yield DiagnosticMessage.error(rules.OPENAPI_CORE_ERROR, str(exc)).with_context("openapi")


# ------------------------------------------------------------------ #
# Schema references
# ------------------------------------------------------------------ #


def _dangling(schema: Any, root: dict[str, Any]) -> bool:
    ref = schema["$ref"]
    return ref.startswith("#/") and try_resolve(ref, root) is None


def _reference_errors(schema: Any, root: dict[str, Any], json_path: str) -> Iterator[DiagnosticMessage]:
    if is_reference(schema):
        if _dangling(schema, root):
            yield schema_reference_error(ref_name(schema["$ref"]), json_path)
    elif isinstance(schema, dict):
        items = schema.get("items")
        if is_reference(items) and _dangling(items, root):
            yield schema_reference_error(ref_name(items["$ref"]), f"{json_path}/items")


@rule(ValidationStrictness.STANDARD)
def check_schema_references(document: OpenAPIDocument) -> Iterator[DiagnosticMessage]:
    """Every schema ``$ref`` used by operations or component properties must resolve.

    Looks at response and request-body media types, operation parameters,
    and the properties of each component schema (including array ``items``).
    """
    root = document.raw
    for op in document.iter_operations():
        prefix = f"{op.path}/{op.method.value}"
        for status, response in responses(op.operation).items():
            response = resolve_schema(response, root)
            for content_type, schema in media_schemas(response):
                yield from _reference_errors(
                    schema, root, f"{prefix}/responses/{status}/content/{content_type}/schema"
                )
        body = resolve_schema(op.operation.get("requestBody"), root)
        for content_type, schema in media_schemas(body):
            yield from _reference_errors(
                schema, root, f"{prefix}/requestBody/content/{content_type}/schema"
            )
        for parameter in resolved_parameters(op.operation, root):
            yield from _reference_errors(
                parameter.get("schema"), root, f"{prefix}/parameters/{parameter.get('name')}/schema"
            )

    for name, schema in document.schemas.items():
        target = resolve_schema(schema, root)
        for prop_name, prop in properties(target).items():
            yield from _reference_errors(
                prop, root, f"components/schemas/{name}/properties/{prop_name}"
            )


# ------------------------------------------------------------------ #
# Servers
# ------------------------------------------------------------------ #


def _server_error(message: str, suggestion: str) -> DiagnosticMessage:
    return DiagnosticMessage(
        rule_id=rules.INVALID_SERVER_URL,
        message=message,
        severity=DiagnosticSeverity.ERROR,
        context="servers",
        suggestions=[suggestion],
        documentation_url=documentation_url(rules.INVALID_SERVER_URL),
    )


@rule(ValidationStrictness.STRICT)
def check_servers(document: OpenAPIDocument) -> Iterator[DiagnosticMessage]:
    """Server URLs must be absolute http(s), relative (``/``), or fully templated."""
    for server in document.servers:
        url = server.get("url")
        url = url.strip() if isinstance(url, str) else ""
        if not url:
            yield _server_error(
                "Server URL is empty or null.",
                "Provide a valid server URL (e.g., https://api.example.com)",
            )
            continue
        if url.startswith("/"):
            continue
        if "{" in url:
            variables = server.get("variables")
            defined = variables if isinstance(variables, dict) else {}
            for variable in _template_variables(url):
                if variable not in defined:
                    yield _server_error(
                        f"Server URL '{url}' uses variable '{{{variable}}}' "
                        "but it is not defined in server variables.",
                        f"Add '{variable}' to server variables with a default value",
                    )
            continue
        if not url.lower().startswith(("http://", "https://")):
            yield _server_error(
                f"Server URL '{url}' is not a valid format. Must be an absolute URL "
                "(http:// or https://), a relative path (/), or use server variables.",
                f"Use an absolute URL like 'https://{url}' or a relative path like '/{url}'",
            )


def _template_variables(url: str) -> list[str]:
    names = []
    start = url.find("{")
    while start >= 0:
        end = url.find("}", start)
        if end < 0:
            break
        if end > start + 1:
            names.append(url[start + 1 : end])
        start = url.find("{", end + 1)
    return names


# ------------------------------------------------------------------ #
# Path templates
# ------------------------------------------------------------------ #


def _path_error(path: str, message: str, *suggestions: str) -> DiagnosticMessage:
    return (
        DiagnosticMessage.error(rules.PATH_PARAMETERS_NOT_WELL_FORMATTED, message)
        .with_context(path)
        .with_suggestions(*suggestions)
    )


def malformed_parameter(path: str) -> str:
    """Describe the first malformed ``{parameter}`` in *path*, or return ``""``."""
    index = 0
    while True:
        open_brace = path.find("{", index)
        if open_brace < 0:
            return ""
        close_brace = path.find("}", open_brace)
        if close_brace < 0:
            return f"Unclosed brace starting at position {open_brace}"
        next_open = path.find("{", open_brace + 1)
        if 0 <= next_open < close_brace:
            return f"Nested brace at position {next_open}"
        name = path[open_brace + 1 : close_brace]
        if not name.strip():
            return "Empty parameter name"
        if any(c.isspace() for c in name):
            return f"Parameter '{name}' contains whitespace"
        index = close_brace + 1


@rule(ValidationStrictness.STRICT)
def check_path_templates(document: OpenAPIDocument) -> Iterator[DiagnosticMessage]:
    """Route templates must use balanced, named, single-brace parameters."""
    for path in document.paths:
        opening, closing = path.count("{"), path.count("}")
        if opening != closing:
            yield _path_error(
                path,
                f"Path '{path}' has unbalanced braces: {opening} opening '{{', {closing} closing '}}'.",
                "Ensure each '{' has a matching '}'",
                "Path parameters should be formatted as {parameterName}",
            )
            continue
        if "{}" in path:
            yield _path_error(
                path,
                f"Path '{path}' contains empty parameter placeholder '{{}}'.",
                "Provide a name for the path parameter (e.g., {id})",
            )
        if "{{" in path or "}}" in path:
            yield _path_error(
                path,
                f"Path '{path}' contains nested or escaped braces which are not valid in OpenAPI paths.",
                "Use single braces for path parameters (e.g., {id} not {{id}})",
            )
        problem = malformed_parameter(path)
        if problem:
            yield _path_error(
                path,
                f"Path '{path}' has malformed parameters: {problem}",
                "Path parameters should be formatted as {parameterName}",
                "Parameter names should be valid identifiers (letters, digits, underscores)",
            )


# ------------------------------------------------------------------ #
# Webhooks
# ------------------------------------------------------------------ #


@rule(ValidationStrictness.STRICT)
def check_webhooks(document: OpenAPIDocument) -> Iterator[DiagnosticMessage]:
    """Report OpenAPI 3.1 webhooks and the handler-relevant parts they lack."""
    if not document.webhooks:
        return
    yield DiagnosticMessage.info(
        rules.WEBHOOKS_DETECTED,
        f"OpenAPI 3.1 webhooks detected: {len(document.webhooks)} webhook(s) defined. "
        "Webhooks allow your API to send data to consumer endpoints.",
    ).with_context("Webhooks")

    for op in document.iter_webhook_operations():
        method = op.method.value.upper()
        context = f"Webhook: {op.path}"
        if op.operation_id is None:
            yield DiagnosticMessage.error(
                rules.WEBHOOK_MISSING_OPERATION_ID,
                f"Webhook '{op.path}' ({method}) is missing an operationId. "
                "An operationId is required for generating handler interfaces.",
            ).with_context(context).with_suggestions(
                f"Add an operationId to the {method} operation in webhook '{op.path}'",
                "Use a descriptive name like 'onOrderCreated' or 'handlePaymentWebhook'",
            )
        body = resolve_schema(op.operation.get("requestBody"), document.raw)
        if not media_schemas(body):
            yield DiagnosticMessage.warning(
                rules.WEBHOOK_MISSING_REQUEST_BODY,
                f"Webhook '{op.path}' ({method}) is missing a request body. "
                "Webhooks typically receive data in the request body.",
            ).with_context(context).with_suggestions(
                f"Add a requestBody to the {method} operation in webhook '{op.path}'",
                "Define the schema for the data your API will receive",
            )
