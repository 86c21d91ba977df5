"""Serialise OpenAPI documents back to YAML or JSON text.

Section order is preserved (``sort_keys=False``) so that a document read by
:mod:`specforge.parser.loader` and written again keeps the layout its author
chose.
"""

from __future__ import annotations

import json
from typing import Any

import yaml

from specforge.exceptions import InvalidUsageError

FORMATS = ("yaml", "json")


def to_yaml(document: dict[str, Any]) -> str:
    return yaml.safe_dump(
        document,
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
        width=120,
    )


def to_json(document: dict[str, Any]) -> str:
    return json.dumps(document, indent=2, ensure_ascii=False) + "\n"


def dump_document(document: dict[str, Any], fmt: str = "yaml") -> str:
    """Serialise *document* in *fmt* (``"yaml"`` or ``"json"``).

    Raises:
        InvalidUsageError: If *fmt* is not a supported format.
    """
    fmt = fmt.lower()
    if fmt in ("yaml", "yml"):
        return to_yaml(document)
    if fmt == "json":
        return to_json(document)
    raise InvalidUsageError(f"Unsupported output format: {fmt}. Use one of: {', '.join(FORMATS)}")


def format_for_path(file_name: str) -> str:
    """Pick the output format from a file extension (``.json`` -> json, else yaml)."""
    return "json" if file_name.lower().endswith(".json") else "yaml"
