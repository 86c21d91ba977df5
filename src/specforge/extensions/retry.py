"""Resolve the ``x-retry-*`` family (retry, timeout and circuit breaker)."""

from __future__ import annotations

from typing import Optional, TypeVar

from specforge.extensions.values import (
    Extensions,
    coalesce,
    read_bool,
    read_float,
    read_int,
    read_str,
)
from specforge.models import RetryBackoffType, RetryConfiguration

T = TypeVar("T")

POLICY = "x-retry-policy"
ENABLED = "x-retry-enabled"
MAX_ATTEMPTS = "x-retry-max-attempts"
DELAY_SECONDS = "x-retry-delay-seconds"
BACKOFF = "x-retry-backoff"
USE_JITTER = "x-retry-use-jitter"
TIMEOUT_SECONDS = "x-retry-timeout-seconds"
CIRCUIT_BREAKER = "x-retry-circuit-breaker"
CB_FAILURE_RATIO = "x-retry-cb-failure-ratio"
CB_SAMPLING_DURATION_SECONDS = "x-retry-cb-sampling-duration-seconds"
CB_MINIMUM_THROUGHPUT = "x-retry-cb-minimum-throughput"
CB_BREAK_DURATION_SECONDS = "x-retry-cb-break-duration-seconds"
HANDLE_429 = "x-retry-handle-429"


def parse_backoff(value: Optional[str]) -> RetryBackoffType:
    lowered = (value or "").lower()
    if lowered == "linear":
        return RetryBackoffType.LINEAR
    if lowered == "constant":
        return RetryBackoffType.CONSTANT
    return RetryBackoffType.EXPONENTIAL


def _pick(value: Optional[T], default: T) -> T:
    return default if value is None else value


def resolve_retry(
    operation: Extensions, path: Extensions, document: Extensions
) -> Optional[RetryConfiguration]:
    """Resolve the resilience pipeline for one operation.

    Like the other families, a policy name somewhere in the hierarchy turns
    retry on. An operation-level ``x-retry-enabled: false`` disables retry
    but keeps the inherited ``timeout-seconds``, so an operation can opt out
    of retries while still being bounded by the timeout.
    """
    scopes = (operation, path, document)
    timeout = coalesce(read_float, TIMEOUT_SECONDS, *scopes)

    if read_bool(operation, ENABLED) is False:
        return RetryConfiguration(enabled=False, timeout_seconds=timeout)

    policy = coalesce(read_str, POLICY, *scopes)
    if policy is None:
        return None

    defaults = RetryConfiguration()
    return RetryConfiguration(
        enabled=True,
        policy=policy,
        max_attempts=_pick(coalesce(read_int, MAX_ATTEMPTS, *scopes), defaults.max_attempts),
        delay_seconds=_pick(coalesce(read_float, DELAY_SECONDS, *scopes), defaults.delay_seconds),
        backoff_type=parse_backoff(coalesce(read_str, BACKOFF, *scopes)),
        use_jitter=_pick(coalesce(read_bool, USE_JITTER, *scopes), defaults.use_jitter),
        timeout_seconds=timeout,
        circuit_breaker_enabled=_pick(
            coalesce(read_bool, CIRCUIT_BREAKER, *scopes), defaults.circuit_breaker_enabled
        ),
        circuit_breaker_failure_ratio=_pick(
            coalesce(read_float, CB_FAILURE_RATIO, *scopes),
            defaults.circuit_breaker_failure_ratio,
        ),
        circuit_breaker_sampling_duration_seconds=_pick(
            coalesce(read_float, CB_SAMPLING_DURATION_SECONDS, *scopes),
            defaults.circuit_breaker_sampling_duration_seconds,
        ),
        circuit_breaker_minimum_throughput=_pick(
            coalesce(read_int, CB_MINIMUM_THROUGHPUT, *scopes),
            defaults.circuit_breaker_minimum_throughput,
        ),
        circuit_breaker_break_duration_seconds=_pick(
            coalesce(read_float, CB_BREAK_DURATION_SECONDS, *scopes),
            defaults.circuit_breaker_break_duration_seconds,
        ),
        handle_429=_pick(coalesce(read_bool, HANDLE_429, *scopes), defaults.handle_429),
    )
