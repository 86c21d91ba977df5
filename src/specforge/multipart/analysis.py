"""Pre-split statistics and strategy recommendation.

:func:`analyze` scans a document once and returns a
:class:`~specforge.models.SpecificationAnalysis`: size totals, per-tag and
per-path-segment statistics, the schemas shared between groups, a
recommended :class:`~specforge.models.SplitStrategy` with a human-readable
reason, and one suggested part file per group.

The recommendation follows a fixed precedence:

1. ``ByDomain`` when the document is only partly tagged but its schemas
   cluster cleanly into two or more domains (at least three quarters of the
   referenced schemas are used by a single domain).
2. ``ByTag`` when more than 80% of operations carry a tag.
3. ``ByPathSegment`` otherwise.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from specforge.models import (
    OpenAPIDocument,
    PathSegmentAnalysis,
    SharedSchemaAnalysis,
    SpecificationAnalysis,
    SplitStrategy,
    SuggestedSplit,
    TagAnalysis,
)
from specforge.multipart.grouping import (
    first_path_segment,
    group_operations,
    operation_schemas,
    schema_usage,
)
from specforge.parser.serializer import to_yaml

logger = logging.getLogger(__name__)

TAG_COVERAGE_THRESHOLD = 0.8
DOMAIN_CLUSTER_THRESHOLD = 0.75
LINES_PER_OPERATION = 50


def recommend_strategy(document: OpenAPIDocument) -> tuple[SplitStrategy, str]:
    """Return the recommended split strategy and the reason for it."""
    operations = list(document.iter_operations())
    total = len(operations)
    tagged = sum(1 for op in operations if op.tags)

    if 0 < tagged < total:
        domains = group_operations(document, SplitStrategy.BY_DOMAIN)
        usage = schema_usage(domains)
        if len(domains) >= 2 and usage:
            exclusive = sum(1 for users in usage.values() if len(users) == 1)
            if exclusive / len(usage) >= DOMAIN_CLUSTER_THRESHOLD:
                return (
                    SplitStrategy.BY_DOMAIN,
                    f"Schemas cluster into {len(domains)} domains "
                    f"({exclusive} of {len(usage)} used by a single domain), "
                    "grouping by domain recommended",
                )

    if total and tagged > total * TAG_COVERAGE_THRESHOLD:
        return SplitStrategy.BY_TAG, "Most operations are well-tagged, grouping by tag recommended"

    if not total:
        return SplitStrategy.BY_PATH_SEGMENT, "No operations found, grouping by path segment by default"
    return (
        SplitStrategy.BY_PATH_SEGMENT,
        f"Only {tagged} of {total} operations are tagged, grouping by path segment recommended",
    )


def analyze(
    document: OpenAPIDocument,
    file_path: str = "",
    content: Optional[str] = None,
) -> SpecificationAnalysis:
    """Compute split statistics for *document*.

    Args:
        document: The document to analyse.
        file_path: Source path, used for reporting and to name suggested
            part files (``{stem}_{Group}.yaml``).
        content: Raw file text. When omitted, line counts come from the
            document serialised as YAML.

    Returns:
        The :class:`SpecificationAnalysis`.
    """
    tags: dict[str, TagAnalysis] = {}
    tag_schemas: dict[str, set[str]] = {}
    segments: dict[str, PathSegmentAnalysis] = {}
    segment_schemas: dict[str, set[str]] = {}
    counted_paths: set[tuple[str, str]] = set()

    for op in document.iter_operations():
        used = operation_schemas(op.operation)

        segment = first_path_segment(op.path)
        seg_key = segment.lower()
        seg = segments.setdefault(seg_key, PathSegmentAnalysis(segment=segment))
        seg.operation_count += 1
        if (seg_key, op.path) not in counted_paths:
            counted_paths.add((seg_key, op.path))
            seg.path_count += 1
        segment_schemas.setdefault(seg_key, set()).update(used)

        for tag in op.tags:
            tag_key = tag.lower()
            stats = tags.setdefault(tag_key, TagAnalysis(name=tag))
            stats.operation_count += 1
            if op.path not in stats.paths:
                stats.paths.append(op.path)
            tag_schemas.setdefault(tag_key, set()).update(used)

    for key, stats in tags.items():
        stats.schema_count = len(tag_schemas.get(key, ()))
    for key, seg in segments.items():
        seg.schemas = sorted(segment_schemas.get(key, ()), key=str.lower)

    strategy, reason = recommend_strategy(document)
    groups = group_operations(document, strategy)

    shared = [
        SharedSchemaAnalysis(name=name, used_by_domains=sorted(users, key=str.lower))
        for name, users in schema_usage(groups).items()
        if len(users) > 1
    ]
    shared.sort(key=lambda s: s.name.lower())

    base_name = Path(file_path).stem if file_path else "{BaseName}"
    suggested = [
        SuggestedSplit(
            file_name=f"{base_name}_{key}.yaml",
            description=f"Contains {len(ops)} operation(s) for {key}",
            part_name=key,
            estimated_operations=len(ops),
            estimated_lines=len(ops) * LINES_PER_OPERATION,
        )
        for key, ops in groups.items()
    ]

    text = content if content is not None else to_yaml(document.raw)
    analysis = SpecificationAnalysis(
        file_path=file_path,
        total_lines=len(text.splitlines()),
        total_paths=len(document.paths),
        total_operations=document.operation_count,
        total_schemas=len(document.schemas),
        total_parameters=len(document.parameters),
        tags=sorted(tags.values(), key=lambda t: t.name.lower()),
        path_segments=sorted(segments.values(), key=lambda s: s.segment.lower()),
        shared_schemas=shared,
        recommended_strategy=strategy,
        recommended_strategy_reason=reason,
        suggested_splits=suggested,
    )
    logger.debug(
        "Analysed %s: %d operations, %d schemas, recommend %s",
        file_path or "<document>",
        analysis.total_operations,
        analysis.total_schemas,
        strategy.value,
    )
    return analysis
