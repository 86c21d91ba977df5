"""Load OpenAPI descriptions from a local file or stdin.

This module handles all I/O for reading raw OpenAPI documents and converting
them into Python dictionaries. It supports both JSON and YAML with
content-based format detection, and checks that the document declares a
supported OpenAPI version (3.0.x or 3.1.x).

The public functions are:

* :func:`load_document` -- Read and parse a description from a path or ``-``.
* :func:`parse_content` -- Parse already-read text, using the source name's
  extension as a format hint.
* :func:`validate_openapi_version` -- Check and return the ``openapi``
  version string, rejecting Swagger 2.x and unsupported versions.

Every failure raises :class:`~specforge.exceptions.SpecParseError`. Callers
that must not fail (such as
:func:`~specforge.parser.specfile.specification_from_content`) convert the
exception into a diagnostic.

YAML scalars are normalised after loading: mapping keys are always strings
(``200:`` becomes ``"200"``) and timestamps are kept as ISO strings, so the
result behaves like a JSON document regardless of the input format.
"""

from __future__ import annotations

import datetime
import json
import sys
from pathlib import Path
from typing import Any

import yaml

from specforge.exceptions import SpecParseError


def load_document(source: str) -> dict[str, Any]:
    """Load an OpenAPI description from a file path or stdin (``'-'``).

    Args:
        source: A local file path, or ``'-'`` for stdin.

    Returns:
        The parsed description as a dictionary.

    Raises:
        SpecParseError: If the source cannot be read or parsed.
    """
    if source == "-":
        return _load_from_stdin()
    return _load_from_file(source)


def _load_from_stdin() -> dict[str, Any]:
    try:
        content = sys.stdin.read()
    except OSError as exc:
        raise SpecParseError(f"Failed to read from stdin: {exc}") from exc

    if not content.strip():
        raise SpecParseError("No input received from stdin")

    return _parse_content(content, hint="")


def _load_from_file(path: str) -> dict[str, Any]:
    """Load a description from a local file.

    Raises:
        SpecParseError: If the file is missing, unreadable, empty, or not
            valid JSON/YAML.
    """
    file_path = Path(path)
    if not file_path.is_file():
        raise SpecParseError(f"Specification file not found: {path}")

    try:
        content = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise SpecParseError(f"Failed to read specification file {path}: {exc}") from exc

    return parse_content(content, source_name=path)


def parse_content(content: str, source_name: str = "") -> dict[str, Any]:
    """Parse *content* as JSON or YAML.

    The extension of *source_name* (``.json``, ``.yaml``, ``.yml``) is used as
    a format hint; other names fall back to content-based detection.

    Raises:
        SpecParseError: If the content is empty or cannot be parsed.
    """
    if not content.strip():
        raise SpecParseError(f"Specification is empty: {source_name or '<inline>'}")

    suffix = Path(source_name).suffix.lower() if source_name else ""
    hint = ""
    if suffix == ".json":
        hint = "json"
    elif suffix in (".yaml", ".yml"):
        hint = "yaml"
    return _parse_content(content, hint=hint)


def _parse_content(content: str, hint: str = "") -> dict[str, Any]:
    """Parse content as JSON or YAML.

    Tries JSON first (unless hint is 'yaml'), then falls back to YAML.
    Valid JSON is also valid YAML, but JSON parsing is stricter and faster.

    Args:
        content: The raw string content.
        hint: Optional format hint ('json' or 'yaml').

    Returns:
        The parsed dictionary.

    Raises:
        SpecParseError: If the content cannot be parsed as either format.
    """
    json_error: Exception | None = None
    yaml_error: Exception | None = None

    if hint != "yaml":
        try:
            result = json.loads(content)
        except json.JSONDecodeError as exc:
            json_error = exc
            if hint == "json":
                raise SpecParseError(f"Invalid JSON: {exc}") from exc
        else:
            return _ensure_mapping(result)

    try:
        result = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        yaml_error = exc
    else:
        return _ensure_mapping(_normalize(result))

    msg = "Failed to parse specification as JSON or YAML"
    if json_error:
        msg += f"\n  JSON error: {json_error}"
    if yaml_error:
        msg += f"\n  YAML error: {yaml_error}"
    raise SpecParseError(msg)


def _ensure_mapping(result: Any) -> dict[str, Any]:
    if not isinstance(result, dict):
        kind = type(result).__name__ if result is not None else "empty document"
        raise SpecParseError(f"Specification must be a JSON/YAML object (got {kind})")
    return result


def _normalize(obj: Any) -> Any:
    """Coerce YAML-only scalar types into their JSON equivalents."""
    if isinstance(obj, dict):
        return {str(key): _normalize(value) for key, value in obj.items()}
    if isinstance(obj, list):
        return [_normalize(item) for item in obj]
    if isinstance(obj, (datetime.date, datetime.datetime)):
        return obj.isoformat()
    return obj


def validate_openapi_version(document: dict[str, Any]) -> str:
    """Validate and return the OpenAPI version string.

    Supports OpenAPI 3.0.x and 3.1.x (and tolerates later 3.x versions).

    Args:
        document: The parsed description dictionary.

    Returns:
        The OpenAPI version string (e.g., '3.0.3', '3.1.0').

    Raises:
        SpecParseError: If the version is missing, unsupported, or indicates
            Swagger 2.x.
    """
    if "swagger" in document:
        swagger_ver = str(document["swagger"])
        raise SpecParseError(
            f"Swagger {swagger_ver} is not supported. "
            "Only OpenAPI 3.0.x and 3.1.x are supported."
        )

    openapi_version = document.get("openapi")
    if openapi_version is None:
        raise SpecParseError("Missing 'openapi' field. Is this an OpenAPI 3.x document?")

    version_str = str(openapi_version)
    if version_str.startswith("3."):
        return version_str

    raise SpecParseError(
        f"Unsupported OpenAPI version: {version_str}. "
        "Only OpenAPI 3.0.x and 3.1.x are supported."
    )
