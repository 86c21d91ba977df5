"""Component schema checks (``SCH`` rules other than reference resolution).

Two rules live here:

* :func:`check_array_items` runs at ``standard`` strictness -- an array
  property without a usable ``items`` schema cannot be projected to a type.
* :func:`check_schema_conventions` runs at ``strict`` strictness and covers
  titles, casing, inline object definitions and the JSON Schema 2020-12
  constructs (type arrays, ``$ref`` siblings, ``const``,
  ``unevaluatedProperties``) that are only partially supported.

Every message carries the ``#/components/schemas/...`` location of the
offending schema or property.
"""

from __future__ import annotations

from typing import Any, Iterator, Optional

from specforge import rules
from specforge.casing import is_camel_case, is_pascal_case, suggest_camel_case, suggest_pascal_case
from specforge.models import DiagnosticMessage, OpenAPIDocument, ValidationStrictness
from specforge.parser.schema import (
    is_reference,
    non_null_types,
    properties,
    resolve_schema,
    schema_type,
)
from specforge.validation.engine import rule

# Array properties with these names are commonly untyped envelopes.
_SPECIAL_ARRAY_PROPERTIES = frozenset({"items", "result", "results"})

_REF_SIBLINGS = ("description", "deprecated", "default")

_TYPE_ARRAY_SUGGESTIONS = (
    "Consider using a single type instead of type array",
    "Use oneOf/anyOf for polymorphic types",
)

_REF_SIBLING_SUGGESTIONS = (
    "This is supported - sibling properties override referenced schema properties",
    "For OpenAPI 3.0 compatibility, move overrides to a separate schema using allOf",
)


def _location(name: str, prop: Optional[str] = None) -> str:
    location = f"#/components/schemas/{name}"
    return f"{location}/properties/{prop}" if prop is not None else location


def _array_properties(document: OpenAPIDocument) -> Iterator[tuple[str, str, Any]]:
    """``(schema_name, property_key, resolved_property)`` for array-typed properties."""
    root = document.raw
    for name, schema in document.schemas.items():
        target = resolve_schema(schema, root)
        if schema_type(target) != "object":
            continue
        for key, prop in properties(target).items():
            if not key:
                continue
            resolved = resolve_schema(prop, root)
            if schema_type(resolved) == "array":
                yield name, key, resolved


# ------------------------------------------------------------------ #
# Standard tier
# ------------------------------------------------------------------ #


@rule(ValidationStrictness.STANDARD)
def check_array_items(document: OpenAPIDocument) -> Iterator[DiagnosticMessage]:
    """Array properties must declare ``items`` with a type or ``$ref``."""
    for name, key, prop in _array_properties(document):
        items = prop.get("items")
        if not isinstance(items, dict):
            yield DiagnosticMessage.error(
                rules.ARRAY_PROPERTY_MISSING_ITEMS,
                f"Not specifying items for array property '{key}' in type '{_location(name)}' "
                "is not supported. Add an 'items' specification.",
            ).with_context(_location(name, key))
            continue
        untyped = schema_type(resolve_schema(items, document.raw)) is None
        if untyped and key.lower() not in _SPECIAL_ARRAY_PROPERTIES:
            yield DiagnosticMessage.error(
                rules.ARRAY_PROPERTY_MISSING_TYPE,
                f"Not specifying a data type for array property '{key}' in type '{_location(name)}' "
                "is not supported. Add a type or $ref to the items specification.",
            ).with_context(_location(name, key))


# ------------------------------------------------------------------ #
# Strict tier
# ------------------------------------------------------------------ #


def _multiple_types(name: str, target: Any, root: dict[str, Any]) -> Iterator[DiagnosticMessage]:
    types = non_null_types(target)
    if len(types) > 1:
        yield DiagnosticMessage.warning(
            rules.MULTIPLE_NON_NULL_TYPES,
            f"Schema '{name}' has multiple non-null types [{', '.join(types)}]. "
            f"Using primary type '{types[0]}'. Location: {_location(name)}",
        ).with_context(f"Schema: {name}").with_suggestions(*_TYPE_ARRAY_SUGGESTIONS)
    for key, prop in properties(target).items():
        types = non_null_types(resolve_schema(prop, root))
        if len(types) > 1:
            yield DiagnosticMessage.warning(
                rules.MULTIPLE_NON_NULL_TYPES,
                f"Property '{key}' in schema '{name}' has multiple non-null types "
                f"[{', '.join(types)}]. Using primary type '{types[0]}'. "
                f"Location: {_location(name, key)}",
            ).with_context(f"Property: {name}.{key}").with_suggestions(*_TYPE_ARRAY_SUGGESTIONS)


def _ref_siblings(schema: Any) -> list[str]:
    if not is_reference(schema):
        return []
    found = []
    for key in _REF_SIBLINGS:
        value = schema.get(key)
        if key == "deprecated":
            if value is True:
                found.append(key)
        elif key == "description":
            if isinstance(value, str) and value:
                found.append(key)
        elif key in schema:
            found.append(key)
    return found


def _ref_with_siblings(name: str, schema: Any, target: Any) -> Iterator[DiagnosticMessage]:
    siblings = _ref_siblings(schema)
    if siblings:
        yield DiagnosticMessage.info(
            rules.REF_WITH_SIBLING_PROPERTIES,
            f"Schema '{name}' uses $ref with sibling properties [{', '.join(siblings)}]. "
            "The sibling properties override the referenced schema's properties. "
            f"Location: {_location(name)}",
        ).with_context(f"Schema: {name}").with_suggestions(*_REF_SIBLING_SUGGESTIONS)
    for key, prop in properties(target).items():
        siblings = _ref_siblings(prop)
        if siblings:
            yield DiagnosticMessage.info(
                rules.REF_WITH_SIBLING_PROPERTIES,
                f"Property '{key}' in schema '{name}' uses $ref with sibling properties "
                f"[{', '.join(siblings)}]. The sibling properties override the referenced "
                f"schema's properties. Location: {_location(name, key)}",
            ).with_context(f"Property: {name}.{key}").with_suggestions(*_REF_SIBLING_SUGGESTIONS)


def _const_values(name: str, target: Any) -> Iterator[DiagnosticMessage]:
    subjects = [(f"Schema '{name}'", f"Schema: {name}", _location(name), target)]
    subjects.extend(
        (f"Property '{key}' in schema '{name}'", f"Property: {name}.{key}", _location(name, key), prop)
        for key, prop in properties(target).items()
    )
    for subject, context, location, schema in subjects:
        if isinstance(schema, dict) and "const" in schema:
            value = schema["const"]
            yield DiagnosticMessage.info(
                rules.SCHEMA_USES_CONST_VALUE,
                f"{subject} uses const value '{value}' (JSON Schema 2020-12). This value is "
                f"the default and only valid value. Location: {location}",
            ).with_context(context).with_suggestions(
                f"The const value '{value}' will be used as a fixed value",
                "Consider using enum with a single value for better OpenAPI 3.0 compatibility",
            )


def _title_checks(name: str, target: dict[str, Any], kind: str) -> Iterator[DiagnosticMessage]:
    missing, lowercase = (
        (rules.ARRAY_TITLE_MISSING, rules.ARRAY_TITLE_NOT_UPPERCASE)
        if kind == "array"
        else (rules.OBJECT_TITLE_MISSING, rules.OBJECT_TITLE_NOT_UPPERCASE)
    )
    title = target.get("title")
    if not isinstance(title, str) or not title:
        yield DiagnosticMessage.warning(
            missing,
            f"Missing title on {kind} type '{_location(name)}'. Add a 'title' property to the schema.",
        )
    elif title[0].islower():
        yield DiagnosticMessage.warning(
            lowercase,
            f"Title on {kind} type '{title}' is not starting with uppercase. "
            f"Location: {_location(name)}",
        )
    if not is_pascal_case(name):
        yield DiagnosticMessage.warning(
            rules.OBJECT_NAME_CASING,
            f"Schema '{name}' is not using PascalCase. Suggestion: "
            f"'{suggest_pascal_case(name)}'. Location: {_location(name)}",
        )


def _object_property(name: str, key: str, prop: Any, root: dict[str, Any]) -> Iterator[DiagnosticMessage]:
    if not key:
        yield DiagnosticMessage.error(
            rules.PROPERTY_KEY_MISSING,
            f"Missing key/name for one or more properties on object type '{_location(name)}'.",
        )
        return
    if not is_camel_case(key):
        yield DiagnosticMessage.warning(
            rules.PROPERTY_NAME_CASING,
            f"Property '{key}' in schema '{name}' is not using camelCase. Suggestion: "
            f"'{suggest_camel_case(key)}'. Location: {_location(name, key)}",
        )

    resolved = resolve_schema(prop, root)
    kind = schema_type(resolved)
    if kind == "object":
        if not is_reference(prop) and "additionalProperties" not in resolved:
            yield DiagnosticMessage.error(
                rules.IMPLICIT_OBJECT_NOT_SUPPORTED,
                f"Implicit object definition on property '{key}' in type '{_location(name)}' "
                "is not supported. Use a $ref to a named schema instead.",
            )
    elif kind == "array":
        items = resolved.get("items")
        if (
            isinstance(items, dict)
            and not is_reference(items)
            and schema_type(items) == "object"
        ):
            yield DiagnosticMessage.error(
                rules.IMPLICIT_ARRAY_OBJECT_NOT_SUPPORTED,
                f"Implicit object definition on property '{key}' in array type "
                f"'{_location(name)}' is not supported. Use a $ref to a named schema instead.",
            )


@rule(ValidationStrictness.STRICT)
def check_schema_conventions(document: OpenAPIDocument) -> Iterator[DiagnosticMessage]:
    """Titles, casing, inline objects and 2020-12 constructs of component schemas."""
    root = document.raw
    for name, schema in document.schemas.items():
        target = resolve_schema(schema, root)
        if not isinstance(target, dict):
            continue

        yield from _multiple_types(name, target, root)
        yield from _ref_with_siblings(name, schema, target)
        yield from _const_values(name, target)
        if target.get("unevaluatedProperties") is False:
            yield DiagnosticMessage.warning(
                rules.UNEVALUATED_PROPERTIES_NOT_SUPPORTED,
                f"Schema '{name}' uses unevaluatedProperties: false (JSON Schema 2020-12). "
                "This restricts additional properties in composition but is not fully "
                f"supported. Location: {_location(name)}",
            ).with_context(f"Schema: {name}").with_suggestions(
                "unevaluatedProperties affects allOf/oneOf/anyOf composition validation",
                "additionalProperties: false provides similar behavior",
            )

        kind = schema_type(target)
        if kind in ("array", "object"):
            yield from _title_checks(name, target, kind)
        if kind == "object":
            for key, prop in properties(target).items():
                yield from _object_property(name, key, prop, root)

        if isinstance(target.get("enum"), list) and target["enum"] and not is_pascal_case(name):
            yield DiagnosticMessage.warning(
                rules.ENUM_NAME_CASING,
                f"Enum '{name}' is not using PascalCase. Suggestion: "
                f"'{suggest_pascal_case(name)}'. Location: {_location(name)}",
            )
