"""Construct :class:`~specforge.models.SpecificationFile` values.

A specification file is classified as *base* or *part* purely from its name:
given the shared base name ``Petstore``, ``Petstore.yaml`` is the base and
``Petstore_Orders.yaml`` is a part named ``Orders``. Without a base name
every file is treated as a standalone base.

Parsing never raises here. A file that cannot be parsed is still returned,
with ``document=None`` and a :data:`~specforge.rules.PARSING_ERROR`
diagnostic, so that a whole multi-part set can be loaded and reported on
in one pass.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from specforge.diagnostics import parsing_error
from specforge.exceptions import SpecParseError
from specforge.models import OpenAPIDocument, SpecificationFile
from specforge.parser.loader import parse_content

logger = logging.getLogger(__name__)


def part_name_for(file_path: str, base_name: str) -> Optional[str]:
    """Return the part name if *file_path* follows ``{base_name}_{part}.ext``.

    The comparison of the base prefix is case-insensitive; the part name
    keeps the casing used in the file name.

    Example::

        >>> part_name_for("specs/Petstore_Orders.yaml", "Petstore")
        'Orders'
        >>> part_name_for("specs/Petstore.yaml", "Petstore") is None
        True
    """
    stem = Path(file_path).stem
    prefix = f"{base_name}_"
    if len(stem) > len(prefix) and stem.lower().startswith(prefix.lower()):
        return stem[len(prefix):]
    return None


def specification_from_content(
    file_path: str,
    content: str,
    base_name: Optional[str] = None,
) -> SpecificationFile:
    """Build a specification file from already-read text.

    Args:
        file_path: Path used for provenance and role classification.
        content: The raw file text.
        base_name: Shared base name of a multi-part set, or ``None`` for a
            standalone file.

    Returns:
        A :class:`SpecificationFile`. Its ``document`` is ``None`` and its
        ``diagnostics`` hold one parse error when *content* is not a valid
        JSON/YAML object.
    """
    part_name = part_name_for(file_path, base_name) if base_name else None
    is_part = part_name is not None

    try:
        raw = parse_content(content, source_name=file_path)
    except SpecParseError as exc:
        logger.debug("Failed to parse %s: %s", file_path, str(exc))
        return SpecificationFile(
            file_path=file_path,
            content=content,
            is_base_file=not is_part,
            is_part_file=is_part,
            part_name=part_name,
            diagnostics=[parsing_error(str(exc), file_path=file_path)],
        )

    return SpecificationFile(
        file_path=file_path,
        content=content,
        document=OpenAPIDocument(raw=raw),
        is_base_file=not is_part,
        is_part_file=is_part,
        part_name=part_name,
    )


def read_specification(file_path: str | Path, base_name: Optional[str] = None) -> SpecificationFile:
    """Read and classify a specification file from disk.

    A missing or unreadable file yields an unparsed specification carrying a
    parse error diagnostic; it never raises.
    """
    path = Path(file_path)
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        spec = empty_specification(str(path), base_name=base_name)
        return spec.model_copy(
            update={"diagnostics": [parsing_error(f"Cannot read file: {exc}", file_path=str(path))]}
        )
    return specification_from_content(str(path), content, base_name=base_name)


def empty_specification(file_path: str, base_name: Optional[str] = None) -> SpecificationFile:
    """Return an unparsed specification with no content."""
    part_name = part_name_for(file_path, base_name) if base_name else None
    return SpecificationFile(
        file_path=file_path,
        is_base_file=part_name is None,
        is_part_file=part_name is not None,
        part_name=part_name,
    )
