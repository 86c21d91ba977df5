"""Fold part specifications into a base specification.

:func:`merge_specifications` is the merge engine. It takes an already-loaded
base :class:`~specforge.models.SpecificationFile`, an ordered list of part
files, and a :class:`~specforge.models.MultiPartConfiguration`, and returns
a :class:`~specforge.models.MergeResult`.

Sections are folded in a fixed order -- ``paths``, ``components.schemas``
(together with ``requestBodies``, ``responses``, ``headers`` and
``examples``, which share the schema strategy), ``components.parameters``,
then ``tags`` -- and each section uses its own
:class:`~specforge.models.MergeStrategy`:

``ErrorOnDuplicate``
    A key defined in more than one file produces exactly one error and is
    left out of the merged section.
``MergeIfIdentical``
    Duplicates are accepted silently when their values are deeply equal;
    otherwise they are handled as in ``ErrorOnDuplicate``.
``AppendUnique``
    Keys are unioned. When two files define the same key with mapping
    values the mappings are unioned recursively (so two files may
    contribute different methods of one path); for other values the first
    one is kept. Tags are unique by case-insensitive name.
``FirstWins`` / ``LastWins``
    The earliest / latest file in traversal order supplies the value.

Part files only ever contribute these sections. Their ``info``,
``servers``, ``security`` and ``components.securitySchemes`` are ignored;
:func:`validate_part_file` warns about them.

A merge that raises errors still returns the partially merged document so
callers can inspect it; :attr:`MergeResult.is_success` is ``False``.
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Optional, Sequence

from specforge import rules
from specforge.models import (
    DiagnosticMessage,
    MergeResult,
    MergeStrategy,
    MultiPartConfiguration,
    OpenAPIDocument,
    SpecificationFile,
)
from specforge.parser.resolver import find_unresolved_refs

logger = logging.getLogger(__name__)

MULTIPART_EXTENSION = "x-multipart"

# (components key, label used in messages, rule id, config attribute)
_COMPONENT_SECTIONS = (
    ("schemas", "schema", rules.DUPLICATE_SCHEMA_IN_PART, "schemas_merge_strategy"),
    ("requestBodies", "request body", rules.DUPLICATE_SCHEMA_IN_PART, "schemas_merge_strategy"),
    ("responses", "response", rules.DUPLICATE_SCHEMA_IN_PART, "schemas_merge_strategy"),
    ("headers", "header", rules.DUPLICATE_SCHEMA_IN_PART, "schemas_merge_strategy"),
    ("examples", "example", rules.DUPLICATE_SCHEMA_IN_PART, "schemas_merge_strategy"),
    ("parameters", "parameter", rules.DUPLICATE_PARAMETER_IN_PART, "parameters_merge_strategy"),
)


def merge_specifications(
    base: SpecificationFile,
    parts: Sequence[SpecificationFile],
    config: Optional[MultiPartConfiguration] = None,
) -> MergeResult:
    """Merge *parts* into *base*, section by section.

    Args:
        base: The base specification. Must have a parsed document.
        parts: Part specifications in merge order. Order matters for
            ``FirstWins`` / ``LastWins`` and for diagnostic order.
        config: Merge strategies; :meth:`MultiPartConfiguration.default`
            when omitted.

    Returns:
        A :class:`MergeResult`. When the base has no document the result
        holds a single error and no document. With no parts the base
        document is returned unchanged.
    """
    config = config or MultiPartConfiguration.default()

    if base.document is None:
        return MergeResult.failed(
            [
                DiagnosticMessage.error(
                    rules.PARSING_ERROR,
                    f"Base file '{base.file_name}' has no valid document",
                    file_path=base.file_path,
                )
            ],
            base_file=base,
        )

    if not parts:
        return MergeResult.single_file(base)

    diagnostics: list[DiagnosticMessage] = []
    sources: list[SpecificationFile] = [base]
    for part in parts:
        if part.document is None:
            diagnostics.append(
                DiagnosticMessage.error(
                    rules.PARSING_ERROR,
                    f"Failed to parse part file: {part.file_name}",
                    file_path=part.file_path,
                )
            )
            continue
        diagnostics.extend(validate_part_file(part))
        sources.append(part)

    merged = copy.deepcopy(base.document.raw)
    merged.pop(MULTIPART_EXTENSION, None)

    paths, path_diags = _fold_mapping(
        [(s.file_path, s.document.paths) for s in sources],
        config.paths_merge_strategy,
        label="path",
        rule_id=rules.DUPLICATE_PATH_IN_PART,
    )
    diagnostics.extend(path_diags)
    if paths or "paths" in merged:
        merged["paths"] = paths

    for key, label, rule_id, strategy_attr in _COMPONENT_SECTIONS:
        section_sources = [
            (s.file_path, _component(s.document, key))
            for s in sources
        ]
        if not any(mapping for _, mapping in section_sources):
            continue
        folded, section_diags = _fold_mapping(
            section_sources, getattr(config, strategy_attr), label=label, rule_id=rule_id
        )
        diagnostics.extend(section_diags)
        if not isinstance(merged.get("components"), dict):
            merged["components"] = {}
        merged["components"][key] = folded

    tags, tag_diags = _fold_tags(
        [(s.file_path, s.document.tags) for s in sources], config.tags_merge_strategy
    )
    diagnostics.extend(tag_diags)
    if tags or "tags" in merged:
        merged["tags"] = tags

    seen_refs: set[str] = set()
    for json_path, ref in find_unresolved_refs(merged):
        if not ref.startswith("#/components/") or ref in seen_refs:
            continue
        seen_refs.add(ref)
        diagnostics.append(
            DiagnosticMessage.warning(
                rules.UNRESOLVED_REFERENCE_AFTER_MERGE,
                f"Unresolved reference after merge: {ref}",
            ).with_context(json_path)
        )

    if not any(d.is_error for d in diagnostics):
        diagnostics.append(
            DiagnosticMessage.info(
                rules.MULTI_PART_MERGE_SUCCESSFUL,
                f"Successfully merged {len(parts)} part file(s) with base file",
            )
        )

    logger.debug(
        "Merged %d part file(s) into %s: %d paths, %d diagnostics",
        len(parts),
        base.file_name,
        len(paths),
        len(diagnostics),
    )
    parsed_parts = [p for p in parts if p.document is not None]
    return MergeResult.success(
        OpenAPIDocument(raw=merged), base, parsed_parts, diagnostics
    )


def validate_part_file(part: SpecificationFile) -> list[DiagnosticMessage]:
    """Warn about sections a part file declares but the merge ignores.

    ``info.version``, ``servers`` and ``components.securitySchemes`` belong
    to the base file only.
    """
    diagnostics: list[DiagnosticMessage] = []
    if part.document is None:
        return diagnostics

    if part.document.info.get("version"):
        diagnostics.append(
            DiagnosticMessage.warning(
                rules.PART_FILE_HAS_INFO_VERSION,
                f"Part file '{part.file_name}' has 'info' section - will be ignored during merge",
                file_path=part.file_path,
            )
        )
    if part.document.servers:
        diagnostics.append(
            DiagnosticMessage.warning(
                rules.PART_FILE_CONTAINS_PROHIBITED_SECTION,
                f"Part file '{part.file_name}' contains 'servers' section - "
                "only the base file may define servers",
                file_path=part.file_path,
            )
        )
    if part.document.security_schemes:
        diagnostics.append(
            DiagnosticMessage.warning(
                rules.PART_FILE_CONTAINS_PROHIBITED_SECTION,
                f"Part file '{part.file_name}' contains 'securitySchemes' - "
                "only the base file may define security schemes",
                file_path=part.file_path,
            )
        )
    return diagnostics


# ------------------------------------------------------------------ #
# Section folding
# ------------------------------------------------------------------ #


def _component(document: OpenAPIDocument, key: str) -> dict[str, Any]:
    value = document.components.get(key)
    return value if isinstance(value, dict) else {}


def _fold_mapping(
    sources: list[tuple[str, dict[str, Any]]],
    strategy: MergeStrategy,
    label: str,
    rule_id: str,
) -> tuple[dict[str, Any], list[DiagnosticMessage]]:
    """Fold keyed sections from *sources* (``(file_path, mapping)`` pairs) in order."""
    merged: dict[str, Any] = {}
    origin: dict[str, str] = {}
    conflicted: set[str] = set()
    diagnostics: list[DiagnosticMessage] = []

    for file_path, mapping in sources:
        for key, value in mapping.items():
            if key in conflicted:
                continue
            if key not in merged:
                merged[key] = copy.deepcopy(value)
                origin[key] = file_path
                continue

            if strategy == MergeStrategy.MERGE_IF_IDENTICAL and merged[key] == value:
                continue
            if strategy in (MergeStrategy.ERROR_ON_DUPLICATE, MergeStrategy.MERGE_IF_IDENTICAL):
                conflicted.add(key)
                del merged[key]
                reason = "with a different definition " if strategy == MergeStrategy.MERGE_IF_IDENTICAL else ""
                diagnostics.append(
                    DiagnosticMessage.error(
                        rule_id,
                        f"Duplicate {label} '{key}' found in part file {reason}"
                        f"(already defined in '{origin[key]}')",
                        file_path=file_path,
                    )
                )
                logger.debug("Conflict on %s '%s' in %s", label, key, file_path)
            elif strategy == MergeStrategy.LAST_WINS:
                merged[key] = copy.deepcopy(value)
                origin[key] = file_path
            elif strategy == MergeStrategy.APPEND_UNIQUE:
                merged[key] = _union(merged[key], value)
            # FirstWins keeps the existing value

    return merged, diagnostics


def _union(existing: Any, incoming: Any) -> Any:
    if isinstance(existing, dict) and isinstance(incoming, dict):
        result = dict(existing)
        for key, value in incoming.items():
            result[key] = _union(result[key], value) if key in result else copy.deepcopy(value)
        return result
    if isinstance(existing, list) and isinstance(incoming, list):
        return existing + [copy.deepcopy(v) for v in incoming if v not in existing]
    return existing


def _fold_tags(
    sources: list[tuple[str, list[dict[str, Any]]]],
    strategy: MergeStrategy,
) -> tuple[list[dict[str, Any]], list[DiagnosticMessage]]:
    """Fold tag lists; tags are identified by case-insensitive name."""
    merged: dict[str, dict[str, Any]] = {}
    origin: dict[str, str] = {}
    conflicted: set[str] = set()
    diagnostics: list[DiagnosticMessage] = []

    for file_path, tags in sources:
        for tag in tags:
            name = tag.get("name")
            if not isinstance(name, str) or not name:
                continue
            key = name.lower()
            if key in conflicted:
                continue
            if key not in merged:
                merged[key] = copy.deepcopy(tag)
                origin[key] = file_path
                continue

            if strategy in (MergeStrategy.APPEND_UNIQUE, MergeStrategy.FIRST_WINS):
                continue
            if strategy == MergeStrategy.LAST_WINS:
                merged[key] = copy.deepcopy(tag)
                continue
            if strategy == MergeStrategy.MERGE_IF_IDENTICAL and merged[key] == tag:
                continue
            conflicted.add(key)
            del merged[key]
            diagnostics.append(
                DiagnosticMessage.error(
                    rules.DUPLICATE_TAG_IN_PART,
                    f"Duplicate tag '{name}' found in part file (already defined in '{origin[key]}')",
                    file_path=file_path,
                )
            )

    return list(merged.values()), diagnostics
