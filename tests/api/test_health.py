"""Tests for health endpoints and request middleware."""

from unittest.mock import AsyncMock

from fastapi.testclient import TestClient

from storefront.application import Container


def test_health_check(client: TestClient) -> None:
    """Test health endpoint returns healthy status."""
    response = client.get("/api/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["service"] == "storefront-api"
    assert "version" in data


def test_readiness_check(client: TestClient) -> None:
    """Test readiness endpoint when the store answers."""
    response = client.get("/api/ready")
    assert response.status_code == 200
    assert response.json() == {"status": "ready"}


def test_readiness_check_store_down(client: TestClient, container: Container) -> None:
    """Test readiness endpoint when the store is unreachable."""
    container.store.ping = AsyncMock(return_value=False)
    response = client.get("/api/ready")
    assert response.status_code == 503
    assert response.json() == {"status": "unavailable"}


class TestRequestContextMiddleware:
    """Tests for request id and client context middleware."""

    def test_generates_request_id_if_not_provided(self, client: TestClient) -> None:
        """Should generate request ID if not in request headers."""
        response = client.get("/api/health")
        assert response.status_code == 200
        # UUID format
        assert len(response.headers["X-Request-ID"]) == 36

    def test_uses_provided_request_id(self, client: TestClient) -> None:
        """Should use request ID from request headers."""
        response = client.get("/api/health", headers={"X-Request-ID": "custom-request-id-12345"})
        assert response.headers["X-Request-ID"] == "custom-request-id-12345"

    def test_request_id_in_error_envelope(self, client: TestClient) -> None:
        """Error bodies carry the request ID."""
        response = client.get("/api/categories/missing", headers={"X-Request-ID": "req-1"})
        assert response.status_code == 404
        assert response.json()["request_id"] == "req-1"
