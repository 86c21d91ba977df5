"""Decompose one document into a base file, part files, and a common file.

:func:`split` is the inverse of
:func:`~specforge.multipart.merge.merge_specifications`:

1. Operations are grouped by the chosen (or recommended)
   :class:`~specforge.models.SplitStrategy`; groups smaller than
   ``min_operations`` are folded into an ``Other`` group.
2. Each path goes to the group of its first operation. A path whose
   operations belong to several groups produces a warning.
3. Components reachable from a group's paths (transitively, so a schema
   used only by another schema travels with it) go to that group's part.
   Components reachable from several groups are promoted to the common file
   when ``extract_common`` is on; otherwise every group gets a copy and the
   base file asks the merge to accept identical duplicates.
4. The base file keeps the document-level metadata (``openapi``, ``info``,
   ``servers``, ``security``, ``tags``, ``components.securitySchemes`` and
   root extensions), no paths and no schemas, plus an ``x-multipart`` block
   listing the parts, so that merging the output reproduces the original
   path and schema key sets.
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Optional

from specforge import rules
from specforge.casing import to_pascal_case
from specforge.diagnostics import schema_reference_error
from specforge.models import (
    DiagnosticMessage,
    MergeStrategy,
    OpenAPIDocument,
    OperationRef,
    SplitFileContent,
    SplitResult,
    SplitStrategy,
)
from specforge.multipart.analysis import recommend_strategy
from specforge.multipart.grouping import first_path_segment, group_operations
from specforge.multipart.merge import MULTIPART_EXTENSION
from specforge.parser.resolver import collect_component_refs, component_closure
from specforge.parser.serializer import dump_document

logger = logging.getLogger(__name__)

OTHER_GROUP = "Other"
COMMON_PART = "Common"

# Components that stay in the base file instead of being distributed.
_BASE_COMPONENTS = ("securitySchemes",)

Component = tuple[str, str]


def split(
    document: OpenAPIDocument,
    base_name: str,
    strategy: Optional[SplitStrategy] = None,
    extract_common: bool = True,
    min_operations: int = 1,
    file_format: str = "yaml",
) -> SplitResult:
    """Split *document* into files named after *base_name*.

    Args:
        document: The document to split.
        base_name: Stem shared by every output file (``Petstore`` gives
            ``Petstore.yaml``, ``Petstore_Pets.yaml``, ...).
        strategy: Grouping strategy; the analysis recommendation when
            ``None``.
        extract_common: Promote components used by several groups into a
            ``{base}_Common`` file.
        min_operations: Groups with fewer operations are folded into
            ``Other``.
        file_format: ``"yaml"`` or ``"json"``.

    Returns:
        The :class:`SplitResult`. Unresolvable component references are
        reported as errors; the files are still produced.
    """
    if strategy is None:
        strategy, _ = recommend_strategy(document)
    ext = "json" if file_format.lower() == "json" else "yaml"
    diagnostics: list[DiagnosticMessage] = []

    groups = _fold_small_groups(group_operations(document, strategy), min_operations)
    group_paths, path_diags = _assign_paths(document, groups)
    diagnostics.extend(path_diags)
    logger.debug(
        "Split %s by %s into %d group(s)", base_name, strategy.value, len(group_paths)
    )

    components = document.components
    usage: dict[Component, list[str]] = {}
    missing: dict[Component, str] = {}
    for key, paths in group_paths.items():
        subtree = {p: document.paths[p] for p in paths}
        for component in sorted(component_closure(collect_component_refs(subtree), components)):
            if component[0] in _BASE_COMPONENTS:
                continue
            if not _exists(components, component):
                missing.setdefault(component, key)
                continue
            usage.setdefault(component, []).append(key)

    for (kind, name), key in missing.items():
        if kind == "schemas":
            diagnostics.append(schema_reference_error(name, f"paths of group '{key}'"))
        else:
            diagnostics.append(
                DiagnosticMessage.error(
                    rules.INVALID_SCHEMA_REFERENCE,
                    f"Reference '#/components/{kind}/{name}' does not exist in components.{kind}",
                ).with_context(f"paths of group '{key}'")
            )

    group_keys = list(group_paths)
    common_name = COMMON_PART
    if any(k.lower() == common_name.lower() for k in group_keys):
        common_name = f"Shared{COMMON_PART}"

    destinations: dict[Component, list[str]] = {}
    for component in _distributable(components):
        users = usage.get(component, [])
        if len(users) == 1:
            destinations[component] = users
        elif len(users) > 1:
            destinations[component] = [common_name] if extract_common else users
        elif extract_common or not group_keys:
            destinations[component] = [common_name]
        else:
            destinations[component] = [group_keys[0]]

    part_files: list[SplitFileContent] = []
    for key in group_keys:
        part_doc: dict[str, Any] = {
            "paths": {p: copy.deepcopy(document.paths[p]) for p in group_paths[key]}
        }
        part_components = _components_for(components, destinations, key)
        if part_components:
            part_doc["components"] = part_components
        part_files.append(
            _file_content(
                f"{base_name}_{key}.{ext}",
                part_doc,
                ext,
                header=f"Part file for {key}",
                part_name=key,
            )
        )

    common_file = None
    common_components = _components_for(components, destinations, common_name)
    if common_components:
        common_file = _file_content(
            f"{base_name}_{common_name}.{ext}",
            {"components": common_components},
            ext,
            header="Common components shared across multiple domains",
            part_name=common_name,
            is_common_file=True,
        )

    part_names = [p.file_name for p in part_files]
    if common_file is not None:
        part_names.append(common_file.file_name)
    base_doc = _base_document(document, part_names, duplicates_allowed=not extract_common)
    base_file = _file_content(f"{base_name}.{ext}", base_doc, ext, is_base_file=True)

    return SplitResult(
        base_file=base_file,
        part_files=part_files,
        common_file=common_file,
        diagnostics=diagnostics,
        strategy=strategy,
    )


# ------------------------------------------------------------------ #
# Grouping
# ------------------------------------------------------------------ #


def _fold_small_groups(
    groups: dict[str, list[OperationRef]], min_operations: int
) -> dict[str, list[OperationRef]]:
    if min_operations <= 1:
        return groups
    folded: dict[str, list[OperationRef]] = {}
    for key, ops in groups.items():
        target = key if len(ops) >= min_operations else OTHER_GROUP
        folded.setdefault(target, []).extend(ops)
    return {k: folded[k] for k in sorted(folded, key=str.lower)}


def _assign_paths(
    document: OpenAPIDocument, groups: dict[str, list[OperationRef]]
) -> tuple[dict[str, list[str]], list[DiagnosticMessage]]:
    """Give every path exactly one group, in document path order."""
    op_group = {(op.path, op.method): key for key, ops in groups.items() for op in ops}
    path_group: dict[str, str] = {}
    diagnostics: list[DiagnosticMessage] = []
    warned: set[str] = set()

    for op in document.iter_operations():
        key = op_group[(op.path, op.method)]
        first = path_group.setdefault(op.path, key)
        if key != first and op.path not in warned:
            warned.add(op.path)
            diagnostics.append(
                DiagnosticMessage.warning(
                    rules.SPLIT_PATH_SPANS_GROUPS,
                    f"Path '{op.path}' has operations in groups '{first}' and '{key}'; "
                    f"the whole path is placed in '{first}'",
                ).with_context(op.label)
            )

    # Path items without operations follow their first segment.
    for path in document.paths:
        if path not in path_group:
            path_group[path] = to_pascal_case(first_path_segment(path)) or OTHER_GROUP

    grouped: dict[str, list[str]] = {}
    for path in document.paths:
        grouped.setdefault(path_group[path], []).append(path)
    return {k: grouped[k] for k in sorted(grouped, key=str.lower)}, diagnostics


# ------------------------------------------------------------------ #
# Components
# ------------------------------------------------------------------ #


def _exists(components: dict[str, Any], component: Component) -> bool:
    section = components.get(component[0])
    return isinstance(section, dict) and component[1] in section


def _distributable(components: dict[str, Any]) -> list[Component]:
    result = []
    for kind, section in components.items():
        if kind in _BASE_COMPONENTS or not isinstance(section, dict):
            continue
        result.extend((kind, name) for name in section)
    return result


def _components_for(
    components: dict[str, Any], destinations: dict[Component, list[str]], target: str
) -> dict[str, Any]:
    result: dict[str, Any] = {}
    for kind, section in components.items():
        if kind in _BASE_COMPONENTS or not isinstance(section, dict):
            continue
        picked = {
            name: copy.deepcopy(value)
            for name, value in section.items()
            if target in destinations.get((kind, name), ())
        }
        if picked:
            result[kind] = picked
    return result


# ------------------------------------------------------------------ #
# Files
# ------------------------------------------------------------------ #


def _base_document(
    document: OpenAPIDocument, part_names: list[str], duplicates_allowed: bool
) -> dict[str, Any]:
    base: dict[str, Any] = {}
    for key, value in document.raw.items():
        if key == MULTIPART_EXTENSION:
            continue
        if key == "paths":
            base["paths"] = {}
        elif key == "components":
            kept = {k: copy.deepcopy(v) for k, v in document.components.items() if k in _BASE_COMPONENTS}
            if kept:
                base["components"] = kept
        else:
            base[key] = copy.deepcopy(value)
    base.setdefault("paths", {})

    multipart: dict[str, Any] = {"enabled": True, "discovery": "explicit", "parts": part_names}
    if duplicates_allowed:
        multipart["schemasMergeStrategy"] = MergeStrategy.MERGE_IF_IDENTICAL.value
    base[MULTIPART_EXTENSION] = multipart
    return base


def _file_content(
    file_name: str,
    doc: dict[str, Any],
    fmt: str,
    header: Optional[str] = None,
    part_name: Optional[str] = None,
    is_base_file: bool = False,
    is_common_file: bool = False,
) -> SplitFileContent:
    content = dump_document(doc, fmt)
    if header and fmt == "yaml":
        content = f"# {header}\n# This file is merged with the base file\n\n{content}"
    components = doc.get("components", {})
    return SplitFileContent(
        file_name=file_name,
        content=content,
        part_name=part_name,
        is_base_file=is_base_file,
        is_common_file=is_common_file,
        path_count=0 if is_base_file else len(doc.get("paths", {})),
        schema_count=len(components.get("schemas", {})),
        parameter_count=len(components.get("parameters", {})),
    )
