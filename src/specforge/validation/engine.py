"""Rule registry and the strictness-gated validation driver.

Every check is a pure function ``OpenAPIDocument -> Iterable[DiagnosticMessage]``
registered with :func:`rule` under the lowest
:class:`~specforge.models.ValidationStrictness` tier that runs it. The
checks are independent of one another, so :func:`validate` may run them
concurrently; the combined list is always put through
:func:`~specforge.diagnostics.sort_diagnostics` (rule priority, then
discovery order) so that the output does not depend on scheduling.

Registering a new check::

    from specforge.validation.engine import rule

    @rule(ValidationStrictness.STRICT)
    def check_something(document):
        for op in document.iter_operations():
            ...
            yield DiagnosticMessage.warning(...)
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from specforge.diagnostics import sort_diagnostics, with_file_path
from specforge.models import DiagnosticMessage, OpenAPIDocument, ValidationStrictness

logger = logging.getLogger(__name__)

Check = Callable[[OpenAPIDocument], Iterable[DiagnosticMessage]]

_TIER_RANK = {
    ValidationStrictness.NONE: 0,
    ValidationStrictness.STANDARD: 1,
    ValidationStrictness.STRICT: 2,
}


@dataclass(frozen=True)
class Rule:
    """A registered check and the lowest tier that runs it."""

    name: str
    tier: ValidationStrictness
    check: Check

    def applies_to(self, strictness: ValidationStrictness) -> bool:
        return _TIER_RANK[strictness] >= _TIER_RANK[self.tier]

    def run(self, document: OpenAPIDocument) -> list[DiagnosticMessage]:
        return list(self.check(document))


_REGISTRY: list[Rule] = []


def rule(tier: ValidationStrictness) -> Callable[[Check], Check]:
    """Decorator registering a check under *tier*."""
    if tier == ValidationStrictness.NONE:
        raise ValueError("Checks cannot be registered under the 'none' tier")

    def decorator(func: Check) -> Check:
        _REGISTRY.append(Rule(name=func.__name__, tier=tier, check=func))
        return func

    return decorator


def registered_rules(strictness: Optional[ValidationStrictness] = None) -> list[Rule]:
    """Registered rules in registration order, optionally filtered by tier."""
    if strictness is None:
        return list(_REGISTRY)
    return [r for r in _REGISTRY if r.applies_to(strictness)]


def validate(
    document: OpenAPIDocument,
    strictness: ValidationStrictness = ValidationStrictness.STANDARD,
    file_path: Optional[str] = None,
    parallel: bool = False,
) -> list[DiagnosticMessage]:
    """Run every check enabled by *strictness* and return all findings.

    Checks never stop at the first failure; a single run reports the complete
    set of issues.

    Args:
        document: The document to check.
        strictness: ``NONE`` returns ``[]`` without running anything.
        file_path: Stamped on diagnostics that do not carry a file already.
        parallel: Run the checks on a thread pool. The result is identical
            to a sequential run.

    Returns:
        Diagnostics sorted by rule priority, then discovery order.
    """
    if strictness == ValidationStrictness.NONE:
        return []

    rules = registered_rules(strictness)
    logger.debug(
        "Validating %s with %d rule(s) at %s strictness%s",
        file_path or "<document>",
        len(rules),
        strictness.value,
        " (parallel)" if parallel else "",
    )

    if parallel and len(rules) > 1:
        with ThreadPoolExecutor() as pool:
            # map() yields in submission order, preserving discovery order.
            batches = list(pool.map(lambda r: r.run(document), rules))
    else:
        batches = [r.run(document) for r in rules]

    diagnostics = [d for batch in batches for d in batch]
    return sort_diagnostics(with_file_path(diagnostics, file_path))
