"""Multi-part specifications -- discover, merge, analyse, and split.

Typical usage::

    from specforge.multipart import read_and_merge, split

    result = read_and_merge("specs/Petstore.yaml")
    if result.is_success:
        parts = split(result.document, "Petstore")

Sub-modules:

* :mod:`~specforge.multipart.discovery` -- base identification, part
  discovery (naming convention or explicit list), ``x-multipart`` parsing.
* :mod:`~specforge.multipart.merge` -- the section-by-section merge engine.
* :mod:`~specforge.multipart.grouping` -- operation grouping shared by
  analysis and split.
* :mod:`~specforge.multipart.analysis` -- statistics and strategy
  recommendation.
* :mod:`~specforge.multipart.split` -- the split engine.
"""

from specforge.multipart.analysis import analyze, recommend_strategy
from specforge.multipart.discovery import (
    discover_part_files,
    extract_multipart_config,
    identify_base_file,
    read_and_merge,
)
from specforge.multipart.merge import merge_specifications, validate_part_file
from specforge.multipart.split import split

__all__ = [
    "analyze",
    "recommend_strategy",
    "discover_part_files",
    "extract_multipart_config",
    "identify_base_file",
    "read_and_merge",
    "merge_specifications",
    "validate_part_file",
    "split",
]
