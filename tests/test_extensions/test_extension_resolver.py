"""Tests for specforge.extensions.resolver against the extensions fixture."""

from __future__ import annotations

from specforge.extensions import (
    has_caching,
    has_rate_limiting,
    has_retry,
    has_security_schemes,
    resolve_extensions,
)
from specforge.models import (
    HTTPMethod,
    OpenAPIDocument,
    RateLimitAlgorithm,
    ResolvedExtensions,
    RetryBackoffType,
    SecuritySource,
)


def _by_id(document: OpenAPIDocument) -> dict[str, ResolvedExtensions]:
    return {r.operation_id: r for r in resolve_extensions(document)}


class TestResolveExtensions:
    """Operation -> path -> document precedence per operation."""

    def test_document_order(self, extensions_document: OpenAPIDocument) -> None:
        resolved = resolve_extensions(extensions_document)
        assert [(r.method, r.path) for r in resolved] == [
            (HTTPMethod.GET, "/orders"),
            (HTTPMethod.POST, "/orders"),
            (HTTPMethod.GET, "/health"),
        ]

    def test_list_orders(self, extensions_document: OpenAPIDocument) -> None:
        resolved = _by_id(extensions_document)["listOrders"]
        assert resolved.cache.policy == "orders-list"
        assert resolved.cache.expiration_seconds == 60
        assert resolved.cache.tags == ["api", "orders"]
        assert resolved.cache.vary_by_query == ["page", "size"]
        assert resolved.rate_limit.policy == "standard"
        assert resolved.rate_limit.permit_limit == 50
        assert resolved.rate_limit.window_seconds == 10
        assert resolved.retry.max_attempts == 5
        assert resolved.retry.backoff_type == RetryBackoffType.LINEAR
        assert resolved.retry.timeout_seconds == 30.0
        assert resolved.security.source == SecuritySource.OPENAPI
        assert resolved.security.schemes == ["bearerAuth"]

    def test_create_order(self, extensions_document: OpenAPIDocument) -> None:
        resolved = _by_id(extensions_document)["createOrder"]
        assert resolved.cache is not None and not resolved.cache.enabled
        assert resolved.rate_limit.policy == "strict"
        assert resolved.rate_limit.permit_limit == 5
        assert resolved.rate_limit.algorithm == RateLimitAlgorithm.TOKEN_BUCKET
        assert resolved.retry is None
        assert resolved.security.source == SecuritySource.BOTH
        assert resolved.security.roles == ["admin", "clerk"]
        assert resolved.security.scopes == ["orders:write"]

    def test_health(self, extensions_document: OpenAPIDocument) -> None:
        resolved = _by_id(extensions_document)["getHealth"]
        assert resolved.cache.policy == "default"
        assert resolved.cache.tags == ["api"]
        assert not resolved.rate_limit.enabled
        assert not resolved.retry.enabled
        assert resolved.retry.timeout_seconds == 30.0
        assert resolved.security.allow_anonymous


class TestFeatureDetection:
    """Document-wide has_* helpers."""

    def test_fixture_uses_everything(self, extensions_document: OpenAPIDocument) -> None:
        assert has_caching(extensions_document)
        assert has_rate_limiting(extensions_document)
        assert has_retry(extensions_document)
        assert has_security_schemes(extensions_document)

    def test_petstore_uses_nothing(self, petstore_document: OpenAPIDocument) -> None:
        assert not has_caching(petstore_document)
        assert not has_rate_limiting(petstore_document)
        assert not has_retry(petstore_document)
        assert not has_security_schemes(petstore_document)

    def test_path_level_policy(self) -> None:
        doc = OpenAPIDocument(raw={"paths": {"/a": {"x-retry-policy": "p", "get": {}}}})
        assert has_retry(doc)
        assert resolve_extensions(doc)[0].retry.policy == "p"
