"""Tests for rate limiting middleware and error mapping."""

from unittest.mock import AsyncMock

from fastapi import FastAPI
from fastapi.testclient import TestClient

from storefront.api.middleware import rate_limit_exemptions
from storefront.application import Container, build_container
from storefront.domain import (
    ConflictError,
    DuplicateKeyError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from storefront.infrastructure.config import Settings
from storefront.main import create_app, status_code_for


def rate_limited_client(max_requests: int) -> TestClient:
    """Create a client whose rate limiter is enabled."""
    container = build_container(
        Settings(
            store_backend="memory",
            object_store_backend="memory",
            rate_limit_enabled=True,
            rate_limit_max_requests=max_requests,
        )
    )
    return TestClient(create_app(container))


class TestRateLimitMiddleware:
    """Tests for per-client rate limiting."""

    def test_rejects_after_limit(self) -> None:
        """Requests past the limit get a 429 with Retry-After."""
        client = rate_limited_client(max_requests=2)
        assert client.get("/api/categories").status_code == 200
        assert client.get("/api/categories").status_code == 200

        response = client.get("/api/categories")
        assert response.status_code == 429
        assert response.json()["error_code"] == "RATE_LIMITED"
        assert int(response.headers["Retry-After"]) > 0
        assert response.json()["request_id"] == response.headers["X-Request-ID"]

    def test_health_is_exempt(self) -> None:
        """Health checks are never limited."""
        client = rate_limited_client(max_requests=1)
        for _ in range(3):
            assert client.get("/api/health").status_code == 200

    def test_exemption_matches_whole_path(self) -> None:
        """A route that only ends in an exempt name is still limited."""
        client = rate_limited_client(max_requests=1)
        assert client.get("/api/products/health").status_code == 404
        assert client.get("/api/products/health").status_code == 429

    def test_exemptions_follow_prefix(self) -> None:
        """Health checks are exempt under the configured prefix, docs at their own paths."""
        assert rate_limit_exemptions(FastAPI(), "/v1") == {
            "/v1/health",
            "/v1/ready",
            "/docs",
            "/redoc",
            "/openapi.json",
        }

    def test_disabled_by_default(self, client: TestClient) -> None:
        """The default test container does not limit."""
        for _ in range(5):
            assert client.get("/api/categories").status_code == 200


class TestErrorMapping:
    """Tests for domain error status codes."""

    def test_status_codes(self) -> None:
        """Each error kind maps to its status code."""
        assert status_code_for(ValidationError("bad")) == 400
        assert status_code_for(NotFoundError("Category", "x")) == 404
        assert status_code_for(ConflictError("taken")) == 409
        assert status_code_for(DuplicateKeyError("categories", ("name",))) == 409
        assert status_code_for(StorageError("write failed")) == 500

    def test_storage_error_hides_message(self, client: TestClient, container: Container) -> None:
        """Storage failures return a generic message."""
        container.store.find = AsyncMock(side_effect=StorageError("connection refused on 10.0.0.5"))
        response = client.get("/api/categories")
        assert response.status_code == 500
        data = response.json()
        assert data["error_code"] == "STORAGE_ERROR"
        assert data["message"] == "An internal error occurred"
