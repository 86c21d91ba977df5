"""Hierarchical resolution of operational ``x-*`` extensions.

Four families are supported -- cache (``x-cache-*``), rate limit
(``x-ratelimit-*``), retry (``x-retry-*``) and security
(``x-authentication-*`` / ``x-authorize-roles`` plus standard ``security``).
Each field resolves independently with operation -> path -> document
precedence. A family with no policy name in any scope resolves to ``None``,
which is distinct from a configuration with ``enabled=False``.
"""

from specforge.extensions.cache import resolve_cache
from specforge.extensions.rate_limit import resolve_rate_limit
from specforge.extensions.resolver import (
    has_caching,
    has_rate_limiting,
    has_retry,
    has_security_schemes,
    resolve_extensions,
    resolve_operation,
)
from specforge.extensions.retry import resolve_retry
from specforge.extensions.security import resolve_security

__all__ = [
    "resolve_cache",
    "resolve_rate_limit",
    "resolve_retry",
    "resolve_security",
    "resolve_extensions",
    "resolve_operation",
    "has_caching",
    "has_rate_limiting",
    "has_retry",
    "has_security_schemes",
]
