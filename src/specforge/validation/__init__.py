"""Strictness-tiered validation of OpenAPI documents.

Importing this package registers every built-in check; :func:`validate`
then runs those enabled by the requested
:class:`~specforge.models.ValidationStrictness`.
"""

from __future__ import annotations

from specforge.validation.engine import Rule, registered_rules, rule, validate

# Rule modules register their checks on import.
from specforge.validation import structure  # noqa: F401  isort: skip
from specforge.validation import naming  # noqa: F401  isort: skip
from specforge.validation import security  # noqa: F401  isort: skip
from specforge.validation import schemas  # noqa: F401  isort: skip
from specforge.validation import operations  # noqa: F401  isort: skip

__all__ = ["Rule", "registered_rules", "rule", "validate"]
