"""Project schema fragments to client-side type descriptors.

A schema fragment is first classified into one of six shapes -- a tagged
union validated by pydantic on the ``kind`` field -- and each shape is then
rendered to a descriptor string such as ``Pet``, ``Pet[] | null`` or
``Record<string, number>``:

* :class:`RefShape` -- a ``$ref``; renders as the referenced name.
* :class:`CompositionShape` -- ``allOf`` containing a reference, or
  ``oneOf`` wrapping exactly one; renders as that reference.
* :class:`MapShape` -- ``additionalProperties``; renders as a record of the
  projected value type.
* :class:`ArrayShape` -- renders as the projected item type plus ``[]``.
* :class:`PrimitiveShape` -- rendered through a format-aware table.
* :class:`UnknownShape` -- anything else; renders as ``unknown``.

Example::

    >>> project_type({"type": "array", "items": {"$ref": "#/components/schemas/Pet"}})
    'Pet[]'
    >>> project_type({"type": "string", "format": "date-time"},
    ...              ProjectionOptions(convert_dates=True))
    'Date'
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter

from specforge.parser.resolver import ref_name
from specforge.parser.schema import is_nullable, is_reference, schema_type

UNKNOWN = "unknown"


class ProjectionOptions(BaseModel):
    """Knobs for :func:`project_type`.

    Attributes:
        convert_dates: Map ``date`` / ``date-time`` strings to ``Date``
            instead of ``string``.
        nullable_as_union: Append ``| null`` to nullable fragments. When
            off, nullability is dropped from the descriptor.
    """

    convert_dates: bool = False
    nullable_as_union: bool = True


# ------------------------------------------------------------------ #
# Shapes
# ------------------------------------------------------------------ #


class RefShape(BaseModel):
    kind: Literal["ref"] = "ref"
    name: str


class CompositionShape(BaseModel):
    kind: Literal["composition"] = "composition"
    name: str
    nullable: bool = False


class MapShape(BaseModel):
    kind: Literal["map"] = "map"
    values: Any = None
    nullable: bool = False


class ArrayShape(BaseModel):
    kind: Literal["array"] = "array"
    items: Any = None
    nullable: bool = False


class PrimitiveShape(BaseModel):
    kind: Literal["primitive"] = "primitive"
    type: str
    format: Optional[str] = None
    nullable: bool = False


class UnknownShape(BaseModel):
    kind: Literal["unknown"] = "unknown"
    nullable: bool = False


SchemaShape = Annotated[
    Union[RefShape, CompositionShape, MapShape, ArrayShape, PrimitiveShape, UnknownShape],
    Field(discriminator="kind"),
]

shape_adapter: TypeAdapter[SchemaShape] = TypeAdapter(SchemaShape)


def _composition_ref(fragment: dict[str, Any]) -> Optional[str]:
    all_of = fragment.get("allOf")
    if isinstance(all_of, list):
        for part in all_of:
            if is_reference(part):
                return ref_name(part["$ref"])
    one_of = fragment.get("oneOf")
    if isinstance(one_of, list) and len(one_of) == 1 and is_reference(one_of[0]):
        return ref_name(one_of[0]["$ref"])
    return None


def classify_schema(fragment: Any) -> SchemaShape:
    """Classify *fragment* into exactly one shape, in priority order.

    Example::

        >>> classify_schema({"$ref": "#/components/schemas/Pet"})
        RefShape(kind='ref', name='Pet')
        >>> classify_schema({"additionalProperties": {"type": "integer"}}).kind
        'map'
    """
    if is_reference(fragment):
        return RefShape(name=ref_name(fragment["$ref"]))
    if not isinstance(fragment, dict):
        return UnknownShape()

    nullable = is_nullable(fragment)
    composed = _composition_ref(fragment)
    if composed is not None:
        return CompositionShape(name=composed, nullable=nullable)

    additional = fragment.get("additionalProperties")
    if isinstance(additional, dict) or additional is True:
        return MapShape(values=additional if isinstance(additional, dict) else None, nullable=nullable)

    kind = schema_type(fragment)
    if kind == "array":
        return ArrayShape(items=fragment.get("items"), nullable=nullable)
    if kind in ("string", "integer", "number", "boolean"):
        fmt = fragment.get("format")
        return PrimitiveShape(
            type=kind, format=fmt if isinstance(fmt, str) else None, nullable=nullable
        )
    return UnknownShape(nullable=nullable)


# ------------------------------------------------------------------ #
# Rendering
# ------------------------------------------------------------------ #


def _primitive(type_name: str, fmt: Optional[str], convert_dates: bool) -> str:
    if type_name in ("integer", "number"):
        return "number"
    if type_name == "boolean":
        return "boolean"
    fmt = (fmt or "").lower()
    if fmt == "binary":
        return "Blob | File"
    if fmt in ("date", "date-time") and convert_dates:
        return "Date"
    # byte, uuid, guid, uri and friends all travel as strings.
    return "string"


def _nullable(descriptor: str, nullable: bool, options: ProjectionOptions) -> str:
    return f"{descriptor} | null" if nullable and options.nullable_as_union else descriptor


def _array_item(items: Any, options: ProjectionOptions) -> str:
    if items is None:
        return UNKNOWN
    item = project_type(items, options)
    return f"({item})" if " | " in item else item


def project_type(
    fragment: Any,
    options: Optional[ProjectionOptions] = None,
    is_required: bool = True,
) -> str:
    """Project a property or parameter schema to a type descriptor.

    Args:
        fragment: The raw schema mapping.
        options: Projection options; defaults apply when ``None``.
        is_required: Whether the owning property is required. Optionality
            is expressed by the property declaration, not the descriptor,
            so the result is the same either way.

    Returns:
        The descriptor string. Unrecognised shapes project to ``unknown``
        instead of failing.

    Example::

        >>> project_type({"type": "array", "nullable": True,
        ...               "items": {"$ref": "#/components/schemas/Pet"}})
        'Pet[] | null'
    """
    options = options or ProjectionOptions()
    shape = classify_schema(fragment)

    if isinstance(shape, RefShape):
        return shape.name
    if isinstance(shape, CompositionShape):
        return _nullable(shape.name, shape.nullable, options)
    if isinstance(shape, MapShape):
        value = UNKNOWN if shape.values is None else project_type(shape.values, options)
        return _nullable(f"Record<string, {value}>", shape.nullable, options)
    if isinstance(shape, ArrayShape):
        return _nullable(f"{_array_item(shape.items, options)}[]", shape.nullable, options)
    if isinstance(shape, PrimitiveShape):
        return _nullable(
            _primitive(shape.type, shape.format, options.convert_dates), shape.nullable, options
        )
    return _nullable(UNKNOWN, shape.nullable, options)


def project_return_type(fragment: Any) -> str:
    """Project a response schema to a method return type.

    Differs from :func:`project_type` in three ways: a binary string is a
    plain ``Blob``, an ``allOf`` returns its referenced envelope (the usual
    paginated-result pattern), and nullability is not rendered.
    """
    if (
        isinstance(fragment, dict)
        and not is_reference(fragment)
        and schema_type(fragment) == "string"
        and str(fragment.get("format", "")).lower() == "binary"
    ):
        return "Blob"
    return project_type(fragment, ProjectionOptions(nullable_as_union=False))
