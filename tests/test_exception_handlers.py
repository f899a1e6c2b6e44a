"""Tests for global exception handlers.

Validates that all exception types are handled consistently with
proper HTTP status codes, error format, and no information leakage.
"""

import asyncio
import json
from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from bnc_gateway.core.errors import (
    AppError,
    BinanceAPIError,
    UnexpectedStatusError,
    UpstreamBackoffError,
    ValidationAppError,
)
from bnc_gateway.core.exception_handlers import general_exception_handler, setup_exception_handlers


@pytest.fixture
def app_with_handlers() -> FastAPI:
    app = FastAPI()
    setup_exception_handlers(app)
    return app


@pytest.fixture
def client(app_with_handlers: FastAPI) -> TestClient:
    return TestClient(app_with_handlers, raise_server_exceptions=False)


class TestAppErrorHandler:
    """Test handler for AppError and subclasses."""

    def test_validation_error_returns_400(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-validation")
        async def test_endpoint():
            raise ValidationAppError(code="invalid_order_book_limit", message="bad limit")

        response = client.get("/test-validation")

        assert response.status_code == 400
        data = response.json()
        assert data["error"]["code"] == "invalid_order_book_limit"
        assert data["error"]["message"] == "bad limit"
        assert "request_id" in data["error"]
        assert "details" not in data["error"]

    def test_backoff_error_returns_503_with_retry_after(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-backoff")
        async def test_endpoint():
            raise UpstreamBackoffError(12.2, "budget exhausted")

        response = client.get("/test-backoff")

        assert response.status_code == 503
        assert response.headers["Retry-After"] == "13"
        assert response.json()["error"]["details"] == {"retry_after": 12.2}

    def test_unexpected_status_returns_502(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-status")
        async def test_endpoint():
            raise UnexpectedStatusError(500, b"Internal error")

        response = client.get("/test-status")

        assert response.status_code == 502
        data = response.json()
        assert data["error"]["code"] == "upstream_unexpected_status"
        assert data["error"]["details"] == {"upstream_status": 500}

    def test_api_error_returns_502(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-api")
        async def test_endpoint():
            raise BinanceAPIError(-1003, "Too many requests.")

        response = client.get("/test-api")

        assert response.status_code == 502
        assert response.json()["error"]["details"]["upstream_code"] == -1003

    def test_base_app_error_returns_500(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-base")
        async def test_endpoint():
            raise AppError(code="generic", message="generic")

        response = client.get("/test-base")

        assert response.status_code == 500
        assert response.json()["error"]["code"] == "generic"


class TestGeneralExceptionHandler:
    """Test fallback handler for unexpected exceptions."""

    def test_general_exception_handler_logic(self):
        request = AsyncMock()
        request.url.path = "/test"
        request.method = "GET"

        exc = RuntimeError("Unexpected error: socket pool corrupted")
        response = asyncio.run(general_exception_handler(request, exc))

        data = json.loads(bytes(response.body).decode())
        assert response.status_code == 500
        assert data["error"]["code"] == "internal_server_error"
        assert "socket pool" not in data["error"]["message"]
        assert "request_id" in data["error"]

    def test_unhandled_exception_through_app(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-crash")
        async def test_endpoint():
            raise ValueError("Test error with details")

        response = client.get("/test-crash")

        assert response.status_code == 500
        assert "Traceback" not in response.text
        assert "ValueError" not in response.text

    def test_setup_registers_handlers(self, app_with_handlers: FastAPI):
        assert AppError in app_with_handlers.exception_handlers
        assert Exception in app_with_handlers.exception_handlers
