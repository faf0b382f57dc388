"""Tests for global exception handlers.

Validates that all exception types are handled consistently with
proper HTTP status codes, error format, and no information leakage.
"""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from meeting_edge.core.errors import (
    AuthenticationAppError,
    RateLimitAppError,
    SerializationAppError,
    StoreAppError,
    ValidationAppError,
)
from meeting_edge.core.exception_handlers import setup_exception_handlers


@pytest.fixture
def app_with_handlers() -> FastAPI:
    """Create FastAPI app with exception handlers registered."""
    app = FastAPI()
    setup_exception_handlers(app)
    return app


@pytest.fixture
def client(app_with_handlers: FastAPI) -> TestClient:
    """Create test client with handlers enabled."""
    return TestClient(app_with_handlers, raise_server_exceptions=False)


class TestAppErrorHandler:
    """Test handler for AppError and subclasses."""

    def test_validation_error_returns_400_with_details(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.post("/test-validation")
        async def test_endpoint():
            raise ValidationAppError(
                code="missing_group_id",
                message="group_id is missing in the request body",
                details={"field": "group_id"},
            )

        response = client.post("/test-validation")

        assert response.status_code == 400
        data = response.json()
        assert data["error"]["code"] == "missing_group_id"
        assert data["error"]["details"] == {"field": "group_id"}
        assert "request_id" in data["error"]

    def test_authentication_error_returns_401(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.post("/test-auth")
        async def test_endpoint():
            raise AuthenticationAppError(code="invalid_api_key", message="Unauthorized")

        response = client.post("/test-auth")

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "invalid_api_key"

    def test_rate_limit_error_returns_429_with_headers(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-rate")
        async def test_endpoint():
            raise RateLimitAppError(
                code="rate_limit_exceeded",
                message="Rate limit exceeded. Try again later.",
                details={"limit": 100, "remaining": 0, "reset_at": 1020, "retry_after": 20},
            )

        response = client.get("/test-rate")

        assert response.status_code == 429
        assert response.headers["Retry-After"] == "20"
        assert response.headers["X-RateLimit-Limit"] == "100"
        assert response.headers["X-RateLimit-Remaining"] == "0"
        assert response.headers["X-RateLimit-Reset"] == "1020"

    def test_rate_limit_error_without_details_has_no_headers(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-rate-bare")
        async def test_endpoint():
            raise RateLimitAppError(code="rate_limit_exceeded", message="Rate limit exceeded.")

        response = client.get("/test-rate-bare")

        assert response.status_code == 429
        assert "Retry-After" not in response.headers

    @pytest.mark.parametrize("error_cls", [SerializationAppError, StoreAppError])
    def test_server_side_errors_return_500_without_details(
        self, client: TestClient, app_with_handlers: FastAPI, error_cls
    ):
        @app_with_handlers.get("/test-server")
        async def test_endpoint():
            raise error_cls(
                code="store_unavailable",
                message="Key-value store write failed",
                details={"backend": "redis"},
            )

        response = client.get("/test-server")

        assert response.status_code == 500
        error = response.json()["error"]
        assert error["code"] == "store_unavailable"
        assert "details" not in error


class TestGeneralExceptionHandler:
    """Test fallback handler for unexpected errors."""

    def test_unexpected_error_returns_generic_500(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-crash")
        async def test_endpoint():
            raise RuntimeError("secret internal detail")

        response = client.get("/test-crash")

        assert response.status_code == 500
        data = response.json()
        assert data["error"]["code"] == "internal_server_error"
        assert "secret internal detail" not in response.text
