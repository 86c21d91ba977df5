"""Follow and enumerate ``$ref`` JSON Reference pointers in OpenAPI documents.

The engines never inline references: merged and split documents keep their
``$ref`` pointers so that serialising them again yields the same shape the
author wrote. What they need instead is to *look up* a pointer, *walk* every
pointer in a subtree, and find the pointers that dangle.

Only **internal** references (those starting with ``#/``) are followed.
External file or URL references are reported by :func:`resolve_pointer` as
:class:`~specforge.exceptions.SpecParseError` and treated as unresolvable by
the non-raising helpers.

Public functions:

* :func:`resolve_pointer` / :func:`try_resolve` -- look up one pointer.
* :func:`ref_name` -- last segment of a pointer (the component name).
* :func:`iter_refs` -- yield every ``(json_path, ref)`` pair in a subtree.
* :func:`find_unresolved_refs` -- internal pointers with no target.
* :func:`collect_schema_refs` -- component schema names used by a subtree.
* :func:`collect_component_refs` / :func:`component_closure` -- every
  ``(kind, name)`` component a subtree uses, optionally transitively.
"""

from __future__ import annotations

from typing import Any, Iterable, Iterator, Optional

from specforge.exceptions import SpecParseError

COMPONENT_REF_PREFIX = "#/components/"
SCHEMA_REF_PREFIX = "#/components/schemas/"


def resolve_pointer(ref: str, root: dict[str, Any]) -> Any:
    """Resolve a single ``$ref`` string against the root document.

    Parses JSON Pointer references like ``#/components/schemas/Pet`` and
    navigates the root dict to locate the referenced value. Handles
    RFC 6901 JSON Pointer escaping (``~0`` for ``~``, ``~1`` for ``/``).

    Args:
        ref: The ``$ref`` string (e.g., ``"#/components/schemas/Pet"``).
        root: The root document dictionary to resolve against.

    Returns:
        The value found at the referenced path.

    Raises:
        SpecParseError: If the reference is external (does not start with
            ``#/``), or if any segment in the pointer path does not exist
            in the document.
    """
    if not ref.startswith("#/"):
        raise SpecParseError(
            f"External $ref not supported: {ref}. "
            "Only internal references (#/...) are handled."
        )

    current: Any = root
    for segment in ref[2:].split("/"):
        segment = segment.replace("~1", "/").replace("~0", "~")

        if isinstance(current, dict):
            if segment not in current:
                raise SpecParseError(
                    f"Cannot resolve $ref '{ref}': key '{segment}' not found at path"
                )
            current = current[segment]
        elif isinstance(current, list):
            try:
                current = current[int(segment)]
            except (ValueError, IndexError) as exc:
                raise SpecParseError(
                    f"Cannot resolve $ref '{ref}': invalid array index '{segment}'"
                ) from exc
        else:
            raise SpecParseError(
                f"Cannot resolve $ref '{ref}': cannot navigate into {type(current).__name__}"
            )

    return current


def try_resolve(ref: str, root: dict[str, Any]) -> Optional[Any]:
    """Like :func:`resolve_pointer`, but return ``None`` instead of raising."""
    try:
        return resolve_pointer(ref, root)
    except SpecParseError:
        return None


def ref_name(ref: str) -> str:
    """Return the last pointer segment (``#/components/schemas/Pet`` -> ``Pet``)."""
    return ref.rsplit("/", 1)[-1].replace("~1", "/").replace("~0", "~")


def schema_ref_name(ref: Any) -> Optional[str]:
    """Return the component schema name for a schema ``$ref``, else ``None``."""
    if isinstance(ref, str) and ref.startswith(SCHEMA_REF_PREFIX):
        return ref_name(ref)
    return None


def iter_refs(obj: Any, path: str = "#") -> Iterator[tuple[str, str]]:
    """Yield ``(json_path, ref)`` for every ``$ref`` string under *obj*.

    Traversal is depth-first in mapping order, so the sequence is stable for
    a given document. *json_path* is the pointer of the object holding the
    ``$ref`` key.

    Example::

        >>> list(iter_refs({"items": {"$ref": "#/components/schemas/Pet"}}))
        [('#/items', '#/components/schemas/Pet')]
    """
    if isinstance(obj, dict):
        ref = obj.get("$ref")
        if isinstance(ref, str):
            yield path, ref
        for key, value in obj.items():
            if key == "$ref":
                continue
            escaped = str(key).replace("~", "~0").replace("/", "~1")
            yield from iter_refs(value, f"{path}/{escaped}")
    elif isinstance(obj, list):
        for index, item in enumerate(obj):
            yield from iter_refs(item, f"{path}/{index}")


def find_unresolved_refs(document: dict[str, Any]) -> list[tuple[str, str]]:
    """Return ``(json_path, ref)`` pairs for internal pointers with no target.

    External references are not checked; they are outside this document.
    """
    unresolved = []
    for json_path, ref in iter_refs(document):
        if not ref.startswith("#/"):
            continue
        if try_resolve(ref, document) is None:
            unresolved.append((json_path, ref))
    return unresolved


def collect_schema_refs(obj: Any) -> set[str]:
    """Names of component schemas referenced anywhere under *obj* (one level)."""
    names = set()
    for _, ref in iter_refs(obj):
        name = schema_ref_name(ref)
        if name is not None:
            names.add(name)
    return names


def component_ref(ref: Any) -> Optional[tuple[str, str]]:
    """Split ``#/components/<kind>/<name>`` into ``(kind, name)``, else ``None``."""
    if not isinstance(ref, str) or not ref.startswith(COMPONENT_REF_PREFIX):
        return None
    kind, _, name = ref[len(COMPONENT_REF_PREFIX):].partition("/")
    if not kind or not name:
        return None
    return kind, name.replace("~1", "/").replace("~0", "~")


def collect_component_refs(obj: Any) -> set[tuple[str, str]]:
    """``(kind, name)`` of every component referenced under *obj* (one level)."""
    found = set()
    for _, ref in iter_refs(obj):
        key = component_ref(ref)
        if key is not None:
            found.add(key)
    return found


def component_closure(
    refs: Iterable[tuple[str, str]], components: dict[str, Any]
) -> set[tuple[str, str]]:
    """Expand *refs* with every component they reference, transitively.

    References to components that do not exist are kept (so callers can
    report them) but contribute no further references. Cycles terminate
    because each component is visited once.
    """
    closure: set[tuple[str, str]] = set()
    pending = list(refs)
    while pending:
        key = pending.pop()
        if key in closure:
            continue
        closure.add(key)
        section = components.get(key[0])
        target = section.get(key[1]) if isinstance(section, dict) else None
        if target is not None:
            pending.extend(collect_component_refs(target) - closure)
    return closure
