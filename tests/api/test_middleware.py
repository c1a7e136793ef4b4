"""Tests for API middleware."""

from uuid import uuid4

from fastapi.testclient import TestClient


class TestRequestIdMiddleware:
    """Tests for request ID correlation middleware."""

    def test_generates_request_id_if_not_provided(self, client: TestClient) -> None:
        """Should generate request ID if not in request headers."""
        response = client.get("/health")
        assert response.status_code == 200
        # UUID format
        assert len(response.headers["X-Request-ID"]) == 36

    def test_uses_provided_request_id(self, client: TestClient) -> None:
        """Should use request ID from request headers."""
        custom_id = "custom-request-id-12345"
        response = client.get("/health", headers={"X-Request-ID": custom_id})
        assert response.headers["X-Request-ID"] == custom_id

    def test_error_body_carries_request_id(self, client: TestClient) -> None:
        """Error responses echo the request ID in body and header."""
        response = client.get(f"/orders/{uuid4()}", headers={"X-Request-ID": "req-404"})

        assert response.status_code == 404
        assert response.headers["X-Request-ID"] == "req-404"
        data = response.json()
        assert data["request_id"] == "req-404"
        assert set(data) == {"error_code", "message", "details", "request_id"}


class TestErrorFormat:
    """Tests for the standard error body."""

    def test_unknown_route(self, client: TestClient) -> None:
        """Framework errors use the same body shape."""
        response = client.get("/nope")
        assert response.status_code == 404
        data = response.json()
        assert data["error_code"] == "ERROR"
        assert data["request_id"]
