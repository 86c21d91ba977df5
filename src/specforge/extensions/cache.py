"""Resolve the ``x-cache-*`` family for one operation."""

from __future__ import annotations

from typing import Optional

from specforge.extensions.values import (
    Extensions,
    coalesce,
    coalesce_list,
    read_bool,
    read_int,
    read_str,
    read_str_list,
)
from specforge.models import CacheConfiguration, CacheMode, CacheType

TYPE = "x-cache-type"
POLICY = "x-cache-policy"
ENABLED = "x-cache-enabled"
EXPIRATION_SECONDS = "x-cache-expiration-seconds"
TAGS = "x-cache-tags"
VARY_BY_QUERY = "x-cache-vary-by-query"
VARY_BY_HEADER = "x-cache-vary-by-header"
VARY_BY_ROUTE = "x-cache-vary-by-route"
MODE = "x-cache-mode"
SLIDING_EXPIRATION_SECONDS = "x-cache-sliding-expiration-seconds"
KEY_PREFIX = "x-cache-key-prefix"

DEFAULT_EXPIRATION_SECONDS = 300


def parse_cache_type(value: Optional[str]) -> CacheType:
    if value and value.lower() in ("hybrid", "hybridcache"):
        return CacheType.HYBRID
    return CacheType.OUTPUT


def parse_cache_mode(value: Optional[str]) -> CacheMode:
    lowered = (value or "").lower()
    if lowered in ("in-memory", "inmemory", "memory"):
        return CacheMode.IN_MEMORY
    if lowered in ("distributed", "l2"):
        return CacheMode.DISTRIBUTED
    return CacheMode.HYBRID


def resolve_cache(
    operation: Extensions, path: Extensions, document: Extensions
) -> Optional[CacheConfiguration]:
    """Resolve caching for one operation.

    ``x-cache-enabled: false`` on the operation disables caching outright.
    Otherwise caching is configured only when some scope names a policy.
    Tags are unioned across all three scopes (and sorted); every other
    field is taken from the most specific scope that sets it.

    Returns:
        The configuration, or ``None`` when caching is not configured.
    """
    if read_bool(operation, ENABLED) is False:
        return CacheConfiguration(enabled=False)

    scopes = (operation, path, document)
    policy = coalesce(read_str, POLICY, *scopes)
    if policy is None:
        return None

    tags = sorted({tag for scope in scopes for tag in read_str_list(scope, TAGS)})
    expiration = coalesce(read_int, EXPIRATION_SECONDS, *scopes)

    return CacheConfiguration(
        enabled=True,
        type=parse_cache_type(coalesce(read_str, TYPE, *scopes)),
        policy=policy,
        expiration_seconds=DEFAULT_EXPIRATION_SECONDS if expiration is None else expiration,
        tags=tags,
        vary_by_query=coalesce_list(VARY_BY_QUERY, *scopes),
        vary_by_header=coalesce_list(VARY_BY_HEADER, *scopes),
        vary_by_route=coalesce_list(VARY_BY_ROUTE, *scopes),
        mode=parse_cache_mode(coalesce(read_str, MODE, *scopes)),
        sliding_expiration_seconds=coalesce(read_int, SLIDING_EXPIRATION_SECONDS, *scopes),
        key_prefix=coalesce(read_str, KEY_PREFIX, *scopes),
    )
