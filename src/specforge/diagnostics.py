"""Builders and helpers for :class:`~specforge.models.DiagnosticMessage` lists.

The engines create diagnostics in many places; the builders here keep the
wording, suggestions, and documentation links consistent for the findings
that recur across modules (unresolved references, naming conventions,
response-code checks, parse failures).

The helpers at the bottom operate on whole lists:

* :func:`sort_diagnostics` -- deterministic ordering by rule priority, then
  discovery order (a stable sort).
* :func:`has_errors` / :func:`count_by_severity` -- blocking checks and
  summary counts.
* :func:`format_diagnostic` -- one-line plain-text rendering.
"""

from __future__ import annotations

from collections import Counter
from typing import Iterable, Optional

from specforge import rules
from specforge.models import DiagnosticMessage, DiagnosticSeverity

DOCS_BASE_URL = "https://github.com/specforge/specforge/blob/main/docs/rules.md"


def documentation_url(rule_id: str) -> str:
    """Return the documentation anchor for *rule_id* (``SF_NAM001`` -> ``#sf-nam001``)."""
    anchor = rule_id.lower().replace("_", "-")
    return f"{DOCS_BASE_URL}#{anchor}"


def schema_reference_error(
    reference_id: str, json_path: str, file_path: Optional[str] = None
) -> DiagnosticMessage:
    """Build the error for a ``$ref`` that does not resolve to a component schema."""
    return DiagnosticMessage(
        rule_id=rules.INVALID_SCHEMA_REFERENCE,
        message=f"Schema reference '{reference_id}' does not exist in components.schemas",
        severity=DiagnosticSeverity.ERROR,
        file_path=file_path,
        context=json_path,
        suggestions=[
            f"Add the missing schema '{reference_id}' to components.schemas",
            "Check for typos in the $ref path",
            "Ensure the schema name matches exactly (case-sensitive)",
        ],
        documentation_url=documentation_url(rules.INVALID_SCHEMA_REFERENCE),
    )


def naming_convention_warning(
    rule_id: str,
    item_type: str,
    item_name: str,
    expected_casing: str,
    suggested_name: str,
    json_path: str,
    file_path: Optional[str] = None,
) -> DiagnosticMessage:
    """Build a warning for a name that does not follow *expected_casing*.

    Args:
        rule_id: One of the ``NAM`` / ``SCH`` casing rule identifiers.
        item_type: Human label for the item (``"Model"``, ``"Property"``...).
        item_name: The offending name.
        expected_casing: Casing style name shown in the message.
        suggested_name: Converted name offered as the fix.
        json_path: Location of the item inside the document.
        file_path: Source file, when known.

    Example::

        naming_convention_warning(
            rules.MODEL_NAME_MUST_BE_PASCAL_CASE,
            "Model", "pet_item", "PascalCase", "PetItem",
            "components/schemas/pet_item",
        )
    """
    return DiagnosticMessage(
        rule_id=rule_id,
        message=f"{item_type} '{item_name}' must use {expected_casing}",
        severity=DiagnosticSeverity.WARNING,
        file_path=file_path,
        context=json_path,
        suggestions=[f"Rename to '{suggested_name}'"],
        documentation_url=documentation_url(rule_id),
    )


def operation_id_casing_warning(
    operation_id: str,
    suggested_name: str,
    http_method: str,
    path: str,
    file_path: Optional[str] = None,
) -> DiagnosticMessage:
    return DiagnosticMessage(
        rule_id=rules.OPERATION_ID_MUST_BE_CAMEL_CASE,
        message=f"operationId '{operation_id}' must use camelCase",
        severity=DiagnosticSeverity.WARNING,
        file_path=file_path,
        context=f"{http_method.upper()} {path}",
        suggestions=[
            f"Rename operationId to '{suggested_name}'",
            "Use camelCase for operationIds (e.g., 'getPetById', 'createUser')",
        ],
        documentation_url=documentation_url(rules.OPERATION_ID_MUST_BE_CAMEL_CASE),
    )


def response_code_warning(
    rule_id: str,
    message: str,
    operation_id: str,
    http_method: str,
    path: str,
    suggestions: Iterable[str] = (),
    file_path: Optional[str] = None,
) -> DiagnosticMessage:
    """Build a warning about a response status code that contradicts the operation."""
    return DiagnosticMessage(
        rule_id=rule_id,
        message=message,
        severity=DiagnosticSeverity.WARNING,
        file_path=file_path,
        context=f"{http_method.upper()} {path} ({operation_id})",
        suggestions=list(suggestions),
        documentation_url=documentation_url(rule_id),
    )


def parsing_error(
    error_message: str,
    file_path: Optional[str] = None,
    json_pointer: Optional[str] = None,
) -> DiagnosticMessage:
    """Build the error recorded when a specification file cannot be parsed."""
    suggestions = [
        "Validate your OpenAPI document with an editor or linter",
        "Check YAML/JSON syntax for formatting errors",
    ]
    if json_pointer:
        suggestions.insert(0, f"Check the element at JSON path: {json_pointer}")
    return DiagnosticMessage(
        rule_id=rules.PARSING_ERROR,
        message=f"OpenAPI parsing error: {error_message}",
        severity=DiagnosticSeverity.ERROR,
        file_path=file_path,
        context=json_pointer,
        suggestions=suggestions,
        documentation_url=documentation_url(rules.PARSING_ERROR),
    )


def missing_required_field(
    rule_id: str,
    field_name: str,
    parent_context: str,
    json_path: str,
    suggestion: Optional[str] = None,
    file_path: Optional[str] = None,
) -> DiagnosticMessage:
    suggestions = [f"Add the required '{field_name}' field to {parent_context}"]
    if suggestion is not None:
        suggestions.append(suggestion)
    return DiagnosticMessage(
        rule_id=rule_id,
        message=f"Missing required '{field_name}' in {parent_context}",
        severity=DiagnosticSeverity.WARNING,
        file_path=file_path,
        context=json_path,
        suggestions=suggestions,
        documentation_url=documentation_url(rule_id),
    )


# ------------------------------------------------------------------ #
# List helpers
# ------------------------------------------------------------------ #


def sort_diagnostics(diagnostics: Iterable[DiagnosticMessage]) -> list[DiagnosticMessage]:
    """Return *diagnostics* ordered by rule priority, then discovery order.

    ``sorted`` is stable, so findings of the same rule keep the order in
    which they were produced. Running the same checks twice therefore always
    yields identical lists.
    """
    return sorted(diagnostics, key=lambda d: rules.rule_priority(d.rule_id))


def has_errors(diagnostics: Iterable[DiagnosticMessage]) -> bool:
    """Whether any diagnostic has error severity (and therefore blocks generation)."""
    return any(d.severity == DiagnosticSeverity.ERROR for d in diagnostics)


def count_by_severity(diagnostics: Iterable[DiagnosticMessage]) -> dict[DiagnosticSeverity, int]:
    """Count diagnostics per severity; every severity is present in the result."""
    counts = Counter(d.severity for d in diagnostics)
    return {severity: counts.get(severity, 0) for severity in DiagnosticSeverity}


def with_file_path(
    diagnostics: Iterable[DiagnosticMessage], file_path: Optional[str]
) -> list[DiagnosticMessage]:
    """Stamp *file_path* on every diagnostic that does not already carry one."""
    if not file_path:
        return list(diagnostics)
    return [
        d if d.file_path else d.model_copy(update={"file_path": file_path})
        for d in diagnostics
    ]


def format_diagnostic(diagnostic: DiagnosticMessage) -> str:
    """Render one diagnostic as a single plain-text line.

    Example::

        >>> format_diagnostic(DiagnosticMessage.error("SF_SCH013", "Bad ref"))
        'error SF_SCH013: Bad ref'
    """
    parts = []
    if diagnostic.location:
        parts.append(f"{diagnostic.location}:")
    parts.append(f"{diagnostic.severity.value} {diagnostic.rule_id}: {diagnostic.message}")
    if diagnostic.context:
        parts.append(f"[{diagnostic.context}]")
    return " ".join(parts)
