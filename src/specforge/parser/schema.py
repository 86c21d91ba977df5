"""Shape queries over raw schema objects.

OpenAPI 3.0 and 3.1 spell the same things differently -- ``nullable: true``
versus ``type: [X, "null"]``, for instance -- and real documents often leave
``type`` out entirely. These helpers give the validation rules and the type
projector one consistent reading of a schema mapping.
"""

from __future__ import annotations

from typing import Any, Optional

from specforge.parser.resolver import try_resolve

_MAX_REF_DEPTH = 32


def is_reference(schema: Any) -> bool:
    return isinstance(schema, dict) and isinstance(schema.get("$ref"), str)


def declared_types(schema: Any) -> list[str]:
    """The ``type`` keyword as a list (3.0 string or 3.1 array form)."""
    if not isinstance(schema, dict):
        return []
    value = schema.get("type")
    if isinstance(value, str):
        return [value]
    if isinstance(value, list):
        return [t for t in value if isinstance(t, str)]
    return []


def non_null_types(schema: Any) -> list[str]:
    return [t for t in declared_types(schema) if t != "null"]


def schema_type(schema: Any) -> Optional[str]:
    """The primary non-null type of *schema*, inferred when not declared.

    A schema without ``type`` counts as an ``object`` when it has
    ``properties`` or ``additionalProperties`` and as an ``array`` when it has
    ``items``.

    Example::

        >>> schema_type({"type": ["string", "null"]})
        'string'
        >>> schema_type({"properties": {"id": {"type": "integer"}}})
        'object'
    """
    types = non_null_types(schema)
    if types:
        return types[0]
    if not isinstance(schema, dict):
        return None
    if "properties" in schema or "additionalProperties" in schema:
        return "object"
    if "items" in schema:
        return "array"
    return None


def is_nullable(schema: Any) -> bool:
    """``nullable: true`` (3.0) or ``"null"`` among the types (3.1)."""
    if not isinstance(schema, dict):
        return False
    return schema.get("nullable") is True or "null" in declared_types(schema)


def properties(schema: Any) -> dict[str, Any]:
    """Declared properties keyed by name; YAML scalar keys such as ``1`` become strings."""
    if not isinstance(schema, dict):
        return {}
    value = schema.get("properties")
    if not isinstance(value, dict):
        return {}
    return {str(key): prop for key, prop in value.items()}


def resolve_schema(schema: Any, root: dict[str, Any]) -> Optional[Any]:
    """Follow a chain of ``$ref`` pointers to the schema they name.

    Non-reference schemas are returned unchanged. Returns ``None`` when a
    pointer dangles or the chain is cyclic.
    """
    current = schema
    for _ in range(_MAX_REF_DEPTH):
        if not is_reference(current):
            return current
        current = try_resolve(current["$ref"], root)
    return None
