"""Resolve every extension family for the operations of a document.

The family modules are pure functions over three flat ``x-*`` maps; this
module supplies those maps (operation, enclosing path item, document root)
for each :class:`~specforge.models.OperationRef`, and answers the
document-wide "is this family used anywhere" questions generators ask
before emitting shared registration code.
"""

from __future__ import annotations

import logging

from specforge.extensions import cache, rate_limit, retry
from specforge.extensions.security import resolve_security
from specforge.extensions.values import read_str, scope_extensions
from specforge.models import OpenAPIDocument, OperationRef, ResolvedExtensions

logger = logging.getLogger(__name__)


def resolve_operation(document: OpenAPIDocument, op: OperationRef) -> ResolvedExtensions:
    """Resolve cache, rate limit, retry and security for a single operation.

    Example::

        doc = load_document("petstore.yaml")
        for op in doc.iter_operations():
            resolved = resolve_operation(doc, op)
            if resolved.rate_limit is not None:
                print(op.label, resolved.rate_limit.policy)
    """
    op_ext = scope_extensions(op.operation)
    path_ext = scope_extensions(op.path_item)
    doc_ext = document.extensions

    resolved = ResolvedExtensions(
        path=op.path,
        method=op.method,
        operation_id=op.operation_id,
        cache=cache.resolve_cache(op_ext, path_ext, doc_ext),
        rate_limit=rate_limit.resolve_rate_limit(op_ext, path_ext, doc_ext),
        retry=retry.resolve_retry(op_ext, path_ext, doc_ext),
        security=resolve_security(
            op_ext,
            path_ext,
            doc_ext,
            op.operation.get("security"),
            document.security,
        ),
    )
    logger.debug(
        "Resolved extensions for %s: cache=%s rate_limit=%s retry=%s security=%s",
        op.label,
        resolved.cache is not None,
        resolved.rate_limit is not None,
        resolved.retry is not None,
        resolved.security.source.value,
    )
    return resolved


def resolve_extensions(document: OpenAPIDocument) -> list[ResolvedExtensions]:
    """Resolve every operation of *document*, in document order."""
    return [resolve_operation(document, op) for op in document.iter_operations()]


def _policy_anywhere(document: OpenAPIDocument, key: str) -> bool:
    if read_str(document.extensions, key) is not None:
        return True
    for path_item in document.paths.values():
        if read_str(scope_extensions(path_item), key) is not None:
            return True
    return any(
        read_str(scope_extensions(op.operation), key) is not None
        for op in document.iter_operations()
    )


def has_caching(document: OpenAPIDocument) -> bool:
    """Whether any scope of *document* names an ``x-cache-policy``."""
    return _policy_anywhere(document, cache.POLICY)


def has_rate_limiting(document: OpenAPIDocument) -> bool:
    return _policy_anywhere(document, rate_limit.POLICY)


def has_retry(document: OpenAPIDocument) -> bool:
    return _policy_anywhere(document, retry.POLICY)


def has_security_schemes(document: OpenAPIDocument) -> bool:
    return bool(document.security_schemes)
