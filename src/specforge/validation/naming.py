"""Naming-convention checks (``NAM`` rules).

Conventions: operationIds, parameters and schema properties in camelCase,
models in PascalCase, enum values in PascalCase or UPPER_SNAKE_CASE, tags in
kebab-case. Every finding is a warning.
"""

from __future__ import annotations

from typing import Iterator

from specforge import rules
from specforge.casing import (
    is_camel_case,
    is_kebab_case,
    is_pascal_case,
    is_upper_snake_case,
    suggest_camel_case,
    suggest_kebab_case,
    suggest_pascal_case,
)
from specforge.diagnostics import naming_convention_warning, operation_id_casing_warning
from specforge.models import DiagnosticMessage, OpenAPIDocument, ValidationStrictness
from specforge.parser.schema import properties, resolve_schema
from specforge.validation.common import resolved_parameters
from specforge.validation.engine import rule


@rule(ValidationStrictness.STRICT)
def check_operation_naming(document: OpenAPIDocument) -> Iterator[DiagnosticMessage]:
    """operationId first letter, parameter names and operation tags."""
    for op in document.iter_operations():
        method = op.method.value.upper()
        operation_id = op.operation_id
        if operation_id and operation_id[0].isalpha() and operation_id[0].isupper():
            yield operation_id_casing_warning(
                operation_id,
                operation_id[0].lower() + operation_id[1:],
                op.method.value,
                op.path,
            )

        for parameter in resolved_parameters(op.operation, document.raw):
            name = parameter.get("name")
            if isinstance(name, str) and name.strip() and not is_camel_case(name):
                yield naming_convention_warning(
                    rules.PARAMETER_NAME_MUST_BE_CAMEL_CASE,
                    "Parameter",
                    name,
                    "camelCase",
                    suggest_camel_case(name),
                    f"{method} {op.path}/parameters/{name}",
                )

        for tag in op.tags:
            if tag.strip() and not is_kebab_case(tag):
                yield naming_convention_warning(
                    rules.TAG_NAME_MUST_BE_KEBAB_CASE,
                    "Tag",
                    tag,
                    "kebab-case",
                    suggest_kebab_case(tag),
                    f"{method} {op.path}/tags/{tag}",
                )


@rule(ValidationStrictness.STRICT)
def check_schema_naming(document: OpenAPIDocument) -> Iterator[DiagnosticMessage]:
    """Model names, property names and enum values of component schemas."""
    for name, schema in document.schemas.items():
        location = f"#/components/schemas/{name}"
        if name.strip() and not is_pascal_case(name):
            yield naming_convention_warning(
                rules.MODEL_NAME_MUST_BE_PASCAL_CASE,
                "Model",
                name,
                "PascalCase",
                suggest_pascal_case(name),
                location,
            )

        target = resolve_schema(schema, document.raw)
        for prop_name in properties(target):
            if prop_name.strip() and not is_camel_case(prop_name):
                yield naming_convention_warning(
                    rules.PROPERTY_NAME_MUST_BE_CAMEL_CASE,
                    "Property",
                    prop_name,
                    "camelCase",
                    suggest_camel_case(prop_name),
                    f"{location}/properties/{prop_name}",
                )

        values = target.get("enum") if isinstance(target, dict) else None
        for value in values if isinstance(values, list) else ():
            # Numeric and boolean enums have no casing.
            if not isinstance(value, str):
                continue
            if value.strip() and not is_pascal_case(value) and not is_upper_snake_case(value):
                yield naming_convention_warning(
                    rules.ENUM_VALUE_CASING,
                    "Enum value",
                    value,
                    "PascalCase or UPPER_SNAKE_CASE",
                    suggest_pascal_case(value),
                    f"{location}/enum",
                )


@rule(ValidationStrictness.STRICT)
def check_global_tag_naming(document: OpenAPIDocument) -> Iterator[DiagnosticMessage]:
    for tag in document.tag_names:
        if tag.strip() and not is_kebab_case(tag):
            yield naming_convention_warning(
                rules.TAG_NAME_MUST_BE_KEBAB_CASE,
                "Global tag",
                tag,
                "kebab-case",
                suggest_kebab_case(tag),
                "#/tags",
            )
