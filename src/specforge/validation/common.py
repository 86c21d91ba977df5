"""Small lookups shared by the rule modules."""

from __future__ import annotations

from typing import Any, Optional

from specforge.parser.schema import resolve_schema


def resolved_parameters(container: Any, root: dict[str, Any]) -> list[dict[str, Any]]:
    """The ``parameters`` of an operation or path item, ``$ref`` entries resolved.

    Dangling references are skipped; they are reported by the reference
    check, not here.
    """
    if not isinstance(container, dict):
        return []
    raw = container.get("parameters")
    if not isinstance(raw, list):
        return []
    result = []
    for parameter in raw:
        target = resolve_schema(parameter, root)
        if isinstance(target, dict):
            result.append(target)
    return result


def path_parameters(container: Any, root: dict[str, Any]) -> list[dict[str, Any]]:
    return [p for p in resolved_parameters(container, root) if p.get("in") == "path"]


def route_parameters(path: str) -> list[str]:
    """Names between braces in a route template, in order.

    Example::

        >>> route_parameters("/users/{userId}/orders/{orderId}")
        ['userId', 'orderId']
    """
    names = []
    start = path.find("{")
    while start >= 0:
        end = path.find("}", start)
        if end < 0:
            break
        names.append(path[start + 1 : end])
        start = path.find("{", end + 1)
    return names


def in_route(name: Any, path: str) -> bool:
    """Whether ``{name}`` occurs in *path*, ignoring case."""
    return isinstance(name, str) and f"{{{name}}}".lower() in path.lower()


def responses(operation: dict[str, Any]) -> dict[str, Any]:
    value = operation.get("responses")
    if not isinstance(value, dict):
        return {}
    return {str(code): response for code, response in value.items()}


def media_schemas(container: Any) -> list[tuple[str, Any]]:
    """``(content_type, schema)`` for each media type under ``content``."""
    if not isinstance(container, dict):
        return []
    content = container.get("content")
    if not isinstance(content, dict):
        return []
    return [
        (str(content_type), media.get("schema"))
        for content_type, media in content.items()
        if isinstance(media, dict)
    ]


def operation_name(operation: dict[str, Any], path: str) -> str:
    operation_id = operation.get("operationId")
    if isinstance(operation_id, str) and operation_id:
        return operation_id
    return f"operation at {path}"


def first_media_schema(container: Any) -> Optional[Any]:
    schemas = media_schemas(container)
    return schemas[0][1] if schemas else None
