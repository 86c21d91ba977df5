"""Group operations into split domains.

Shared by :mod:`~specforge.multipart.analysis` (statistics and
recommendations) and :mod:`~specforge.multipart.split` (file generation) so
that a suggested split and an actual split always agree on group names.

Group keys are PascalCase (``user-profiles`` -> ``UserProfiles``):

* ``ByTag`` -- the operation's first tag, ``Untagged`` when it has none.
* ``ByPathSegment`` -- the first path segment that is neither a version
  (``v1``, ``V2``) nor a template parameter, ``Api`` when none is left.
* ``ByDomain`` -- the first tag, falling back to the path segment.
"""

from __future__ import annotations

from typing import Any

from specforge.casing import to_pascal_case
from specforge.models import OpenAPIDocument, OperationRef, SplitStrategy
from specforge.parser.resolver import collect_schema_refs

UNTAGGED_GROUP = "Untagged"
FALLBACK_SEGMENT = "Api"


def first_path_segment(path: str) -> str:
    """Return the first meaningful segment of *path*.

    Example::

        >>> first_path_segment("/v1/{tenant}/orders/{id}")
        'orders'
    """
    for segment in path.split("/"):
        if not segment:
            continue
        if segment[0] in "vV" and len(segment) > 1 and segment[1].isdigit():
            continue
        if segment.startswith("{"):
            continue
        return segment
    return FALLBACK_SEGMENT


def raw_group_name(op: OperationRef, strategy: SplitStrategy) -> str:
    """The un-normalised group label of *op* under *strategy*."""
    tags = op.tags
    if strategy == SplitStrategy.BY_TAG:
        return tags[0] if tags else UNTAGGED_GROUP
    if strategy == SplitStrategy.BY_PATH_SEGMENT:
        return first_path_segment(op.path)
    return tags[0] if tags else first_path_segment(op.path)


def group_key(op: OperationRef, strategy: SplitStrategy) -> str:
    return to_pascal_case(raw_group_name(op, strategy)) or FALLBACK_SEGMENT


def group_operations(
    document: OpenAPIDocument, strategy: SplitStrategy
) -> dict[str, list[OperationRef]]:
    """Map group key -> operations, keys ordered case-insensitively.

    Keys that differ only by case are folded into the first one seen.
    """
    groups: dict[str, list[OperationRef]] = {}
    canonical: dict[str, str] = {}
    for op in document.iter_operations():
        key = group_key(op, strategy)
        key = canonical.setdefault(key.lower(), key)
        groups.setdefault(key, []).append(op)
    return {k: groups[k] for k in sorted(groups, key=str.lower)}


def operation_schemas(operation: dict[str, Any]) -> set[str]:
    """Component schemas an operation references directly.

    Looks at parameters, the request body, and responses -- wherever a
    ``$ref`` appears, including array ``items`` and compositions.
    """
    names: set[str] = set()
    for key in ("parameters", "requestBody", "responses"):
        if key in operation:
            names |= collect_schema_refs(operation[key])
    return names


def schema_usage(groups: dict[str, list[OperationRef]]) -> dict[str, list[str]]:
    """Map schema name -> ordered list of groups whose operations use it."""
    usage: dict[str, list[str]] = {}
    for key, operations in groups.items():
        for op in operations:
            for name in sorted(operation_schemas(op.operation)):
                users = usage.setdefault(name, [])
                if key not in users:
                    users.append(key)
    return usage
