"""Resolve the ``x-ratelimit-*`` family for one operation."""

from __future__ import annotations

from typing import Optional

from specforge.extensions.values import Extensions, coalesce, read_bool, read_int, read_str
from specforge.models import RateLimitAlgorithm, RateLimitConfiguration

POLICY = "x-ratelimit-policy"
ENABLED = "x-ratelimit-enabled"
PERMIT_LIMIT = "x-ratelimit-permit-limit"
WINDOW_SECONDS = "x-ratelimit-window-seconds"
QUEUE_LIMIT = "x-ratelimit-queue-limit"
ALGORITHM = "x-ratelimit-algorithm"

DEFAULT_PERMIT_LIMIT = 100
DEFAULT_WINDOW_SECONDS = 60
DEFAULT_QUEUE_LIMIT = 0


def parse_algorithm(value: Optional[str]) -> RateLimitAlgorithm:
    """Map an algorithm name to the enum; unknown names fall back to ``fixed``."""
    lowered = (value or "").lower()
    if lowered in ("sliding", "sliding-window"):
        return RateLimitAlgorithm.SLIDING
    if lowered in ("token-bucket", "tokenbucket"):
        return RateLimitAlgorithm.TOKEN_BUCKET
    if lowered == "concurrency":
        return RateLimitAlgorithm.CONCURRENCY
    return RateLimitAlgorithm.FIXED


def _or_default(value: Optional[int], default: int) -> int:
    return default if value is None else value


def resolve_rate_limit(
    operation: Extensions, path: Extensions, document: Extensions
) -> Optional[RateLimitConfiguration]:
    """Resolve rate limiting for one operation.

    The policy name is the discriminator: with no ``x-ratelimit-policy`` in
    any scope the result is ``None`` (not configured), never a default-filled
    configuration. An operation-level ``x-ratelimit-enabled: false`` wins
    over everything and yields a disabled configuration.
    """
    if read_bool(operation, ENABLED) is False:
        return RateLimitConfiguration(enabled=False)

    scopes = (operation, path, document)
    policy = coalesce(read_str, POLICY, *scopes)
    if policy is None:
        return None

    return RateLimitConfiguration(
        enabled=True,
        policy=policy,
        permit_limit=_or_default(coalesce(read_int, PERMIT_LIMIT, *scopes), DEFAULT_PERMIT_LIMIT),
        window_seconds=_or_default(
            coalesce(read_int, WINDOW_SECONDS, *scopes), DEFAULT_WINDOW_SECONDS
        ),
        queue_limit=_or_default(coalesce(read_int, QUEUE_LIMIT, *scopes), DEFAULT_QUEUE_LIMIT),
        algorithm=parse_algorithm(coalesce(read_str, ALGORITHM, *scopes)),
    )
