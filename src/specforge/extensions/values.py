"""Typed readers for ``x-*`` extension values and the three-scope coalesce.

Extension values come straight from parsed YAML/JSON, so a field documented
as an integer may arrive as a string, a boolean, or a nested object. The
readers here return ``None`` for anything that is not of the documented
type; a mis-typed value therefore behaves exactly like a missing one and
resolution falls through to the next scope.

``bool`` is a subclass of ``int`` in Python. :func:`read_int` and
:func:`read_float` reject booleans explicitly so that ``x-ratelimit-permit-limit:
true`` is not read as ``1``.
"""

from __future__ import annotations

from typing import Any, Callable, Optional, TypeVar

T = TypeVar("T")

Extensions = dict[str, Any]


def read_str(extensions: Extensions, key: str) -> Optional[str]:
    """Non-empty string value of *key*, else ``None``."""
    value = extensions.get(key)
    if isinstance(value, str) and value:
        return value
    return None


def read_bool(extensions: Extensions, key: str) -> Optional[bool]:
    value = extensions.get(key)
    return value if isinstance(value, bool) else None


def read_int(extensions: Extensions, key: str) -> Optional[int]:
    value = extensions.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def read_float(extensions: Extensions, key: str) -> Optional[float]:
    """Numeric value of *key* as a float; integers are widened."""
    value = extensions.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def read_str_list(extensions: Extensions, key: str) -> list[str]:
    """Non-empty string items of an array value; ``[]`` for anything else."""
    value = extensions.get(key)
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str) and item]


def scope_extensions(obj: Any) -> Extensions:
    """The ``x-*`` fields of a document, path item, or operation mapping."""
    if not isinstance(obj, dict):
        return {}
    return {k: v for k, v in obj.items() if isinstance(k, str) and k.startswith("x-")}


def coalesce(
    reader: Callable[[Extensions, str], Optional[T]],
    key: str,
    *scopes: Extensions,
) -> Optional[T]:
    """Return the first non-``None`` reading of *key* across *scopes*.

    Scopes are passed highest precedence first (operation, path, document).

    Example::

        >>> coalesce(read_int, "x-ratelimit-permit-limit", {}, {"x-ratelimit-permit-limit": 5})
        5
    """
    for scope in scopes:
        value = reader(scope, key)
        if value is not None:
            return value
    return None


def coalesce_list(key: str, *scopes: Extensions) -> list[str]:
    """First non-empty string list of *key* across *scopes*."""
    for scope in scopes:
        values = read_str_list(scope, key)
        if values:
            return values
    return []
