"""Locate the files of a multi-part specification and merge them.

A multi-part set is a base file plus part files named
``{BaseName}_{PartName}.{ext}`` in the same directory. Parts are either
discovered automatically from that naming convention or listed explicitly in
the base file's ``x-multipart`` block:

.. code-block:: yaml

    x-multipart:
      discovery: explicit
      parts: [Petstore_Pets.yaml, Petstore_Orders.yaml]
      exclude: ["*_Draft.yaml"]

The ``exclude`` list uses gitignore-style patterns (matched with
:mod:`pathspec`) against part file names during auto discovery.

:func:`read_and_merge` is the one-call entry point used by the CLI:
read the base, resolve the configuration, load the parts, and hand
everything to :func:`~specforge.multipart.merge.merge_specifications`.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterable, Optional, Sequence

import pathspec
from pydantic import ValidationError

from specforge import rules
from specforge.exceptions import ConfigError
from specforge.models import (
    DiagnosticMessage,
    DiscoveryMode,
    MergeResult,
    MultiPartConfiguration,
    OpenAPIDocument,
    SpecificationFile,
)
from specforge.multipart.merge import MULTIPART_EXTENSION, merge_specifications
from specforge.parser.specfile import read_specification

logger = logging.getLogger(__name__)

# Lower-cased, separator-free key -> field alias accepted by MultiPartConfiguration.
_MULTIPART_KEYS = {
    "enabled": "enabled",
    "discovery": "discovery",
    "parts": "parts",
    "exclude": "exclude",
    "pathsmergestrategy": "pathsMergeStrategy",
    "schemasmergestrategy": "schemasMergeStrategy",
    "parametersmergestrategy": "parametersMergeStrategy",
    "tagsmergestrategy": "tagsMergeStrategy",
}


def extract_multipart_config(document: OpenAPIDocument) -> Optional[MultiPartConfiguration]:
    """Read the ``x-multipart`` block of *document*, if any.

    Keys are matched case-insensitively and ``snake_case`` spellings are
    accepted; unknown keys are ignored.

    Returns:
        The configuration, or ``None`` when the document has no block.

    Raises:
        ConfigError: If the block is not a mapping or holds invalid values.
    """
    block = document.raw.get(MULTIPART_EXTENSION)
    if block is None:
        return None
    if not isinstance(block, dict):
        raise ConfigError(f"'{MULTIPART_EXTENSION}' must be an object")

    normalized: dict[str, Any] = {}
    for key, value in block.items():
        alias = _MULTIPART_KEYS.get(str(key).lower().replace("_", "").replace("-", ""))
        if alias is not None:
            normalized[alias] = value

    try:
        return MultiPartConfiguration.model_validate(normalized)
    except ValidationError as exc:
        raise ConfigError(f"Invalid '{MULTIPART_EXTENSION}' configuration: {exc}") from exc


def identify_base_file(file_names: Sequence[str]) -> Optional[str]:
    """Pick the base file out of a set of related specification file names.

    The base is the first name without an underscore in its stem, or the
    first whose prefix before the last underscore does not name another file
    in the set. When every file looks like a part, the shortest name wins.

    Example::

        >>> identify_base_file(["Shop_Orders.yaml", "Shop.yaml", "Shop_Users.yaml"])
        'Shop.yaml'
    """
    if not file_names:
        return None

    stems = {Path(name).stem.lower() for name in file_names}
    for name in file_names:
        stem = Path(name).stem
        cut = stem.rfind("_")
        if cut <= 0:
            return name
        if stem[:cut].lower() not in stems:
            return name

    return min(file_names, key=len)


def discover_part_files(base_path: Path, exclude: Iterable[str] = ()) -> list[Path]:
    """Find ``{base}_*{ext}`` siblings of *base_path*, sorted case-insensitively.

    Args:
        base_path: Path to the base specification.
        exclude: Gitignore-style patterns matched against part file names.

    Returns:
        Part file paths in merge order. The base itself is never included.
    """
    directory = base_path.parent
    prefix = f"{base_path.stem}_".lower()
    suffix = base_path.suffix.lower()
    if not directory.is_dir():
        return []

    candidates = [
        p
        for p in directory.iterdir()
        if p.is_file()
        and p.name.lower().startswith(prefix)
        and p.suffix.lower() == suffix
        and p.name != base_path.name
    ]

    patterns = list(exclude)
    if patterns:
        exclude_spec = pathspec.PathSpec.from_lines("gitwildmatch", patterns)
        candidates = [p for p in candidates if not exclude_spec.match_file(p.name)]

    parts = sorted(candidates, key=lambda p: p.name.lower())
    logger.debug("Discovered %d part file(s) for %s", len(parts), base_path.name)
    return parts


def _explicit_part_paths(
    base_path: Path, names: Sequence[str]
) -> tuple[list[Path], list[DiagnosticMessage]]:
    found: list[Path] = []
    diagnostics: list[DiagnosticMessage] = []
    for name in names:
        candidate = Path(name)
        if not candidate.is_absolute():
            candidate = base_path.parent / candidate
        if candidate.is_file():
            found.append(candidate)
        else:
            diagnostics.append(
                DiagnosticMessage.warning(
                    rules.PART_FILE_NOT_FOUND,
                    f"Part file not found: {name}",
                    file_path=str(base_path),
                )
            )
    return found, diagnostics


def _as_part(spec: SpecificationFile) -> SpecificationFile:
    # Explicit parts may use any file name; their role comes from the list.
    if spec.is_part_file:
        return spec
    return spec.model_copy(
        update={"is_base_file": False, "is_part_file": True, "part_name": spec.stem}
    )


def read_and_merge(
    base_path: str | Path,
    config: Optional[MultiPartConfiguration] = None,
) -> MergeResult:
    """Read a base specification, load its parts, and merge them.

    An ``x-multipart`` block in the base file takes precedence over
    *config*. Missing explicit parts are reported as warnings and skipped.

    Args:
        base_path: Path to the base specification file.
        config: Caller-supplied configuration, used when the base file has
            no ``x-multipart`` block.

    Returns:
        The :class:`MergeResult`. A missing or unparseable base file yields a
        failed result carrying one error.
    """
    base_path = Path(base_path)
    if not base_path.is_file():
        return MergeResult.failed(
            [
                DiagnosticMessage.error(
                    rules.BASE_FILE_NOT_FOUND,
                    f"Base specification file not found: {base_path}",
                    file_path=str(base_path),
                )
            ]
        )

    base = read_specification(base_path, base_name=base_path.stem)
    if base.document is None:
        return MergeResult.failed(list(base.diagnostics), base_file=base)

    diagnostics: list[DiagnosticMessage] = []
    try:
        embedded = extract_multipart_config(base.document)
    except ConfigError as exc:
        embedded = None
        diagnostics.append(
            DiagnosticMessage.warning(
                rules.INVALID_MULTIPART_CONFIGURATION,
                str(exc),
                file_path=str(base_path),
            )
        )
    effective = embedded or config or MultiPartConfiguration.default()

    if not effective.enabled:
        return MergeResult.single_file(base, diagnostics)

    if effective.discovery == DiscoveryMode.EXPLICIT:
        part_paths, missing = _explicit_part_paths(base_path, effective.parts)
        diagnostics.extend(missing)
    else:
        part_paths = discover_part_files(base_path, effective.exclude)

    if not part_paths:
        return MergeResult.single_file(base, diagnostics)

    parts = [_as_part(read_specification(p, base_name=base_path.stem)) for p in part_paths]
    result = merge_specifications(base, parts, effective)
    if not diagnostics:
        return result
    return result.model_copy(update={"diagnostics": diagnostics + list(result.diagnostics)})
