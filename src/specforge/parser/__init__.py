"""Specification I/O -- load, classify, follow ``$ref`` pointers, and serialise.

This sub-package is the only part of specforge that touches the file
system for specification content. Everything downstream (merge, split,
validation, extension resolution) works on the
:class:`~specforge.models.OpenAPIDocument` values produced here.

Typical usage::

    from specforge.parser import read_specification

    spec = read_specification("specs/Petstore.yaml")
    if spec.document is None:
        ...  # spec.diagnostics explains why

Sub-modules:

* :mod:`~specforge.parser.loader` -- JSON/YAML parsing with format hints and
  OpenAPI version checks.
* :mod:`~specforge.parser.specfile` -- base/part classification and
  non-raising construction of specification files.
* :mod:`~specforge.parser.resolver` -- ``$ref`` lookup and enumeration.
* :mod:`~specforge.parser.serializer` -- YAML/JSON output.
"""

from specforge.parser.loader import load_document, parse_content, validate_openapi_version
from specforge.parser.serializer import dump_document
from specforge.parser.specfile import read_specification, specification_from_content

__all__ = [
    "load_document",
    "parse_content",
    "validate_openapi_version",
    "dump_document",
    "read_specification",
    "specification_from_content",
]
