"""Tests for global exception handlers.

Validates that all exception types are rendered as the flat
``{error, messageKey}`` body with the right status code, and that nothing
server-side leaks into the response.
"""

import asyncio
import json
from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from quiz_api.core.errors import (
    AppError,
    RateLimitAppError,
    RenderFailedAppError,
    RenderTimeoutAppError,
    ValidationAppError,
)
from quiz_api.core.exception_handlers import general_exception_handler, setup_exception_handlers


@pytest.fixture
def app_with_handlers() -> FastAPI:
    """Create FastAPI app with exception handlers registered."""
    app = FastAPI()
    setup_exception_handlers(app)
    return app


@pytest.fixture
def client(app_with_handlers: FastAPI) -> TestClient:
    return TestClient(app_with_handlers)


def _body(response) -> dict:
    return json.loads(bytes(response.body).decode())


class TestAppErrorHandler:
    """Handler for AppError and subclasses."""

    def test_validation_error_returns_400(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-validation")
        async def test_endpoint():
            raise ValidationAppError(code="error_manim_code_required", message="code is required")

        response = client.get("/test-validation")

        assert response.status_code == 400
        assert response.json() == {"error": "code is required", "messageKey": "error_manim_code_required"}

    def test_rate_limit_error_returns_429_with_retry_after(
        self, client: TestClient, app_with_handlers: FastAPI
    ):
        @app_with_handlers.get("/test-rate-limit")
        async def test_endpoint():
            raise RateLimitAppError(
                code="error_rate_limited",
                message="Rate limit exceeded",
                details={"address": "1.2.3.4", "retry_after": 42},
            )

        response = client.get("/test-rate-limit")

        assert response.status_code == 429
        assert response.json() == {
            "error": "Rate limit exceeded",
            "messageKey": "error_rate_limited",
            "retryAfter": 42,
        }
        assert response.headers["Retry-After"] == "42"

    def test_address_is_not_rendered(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-details")
        async def test_endpoint():
            raise RateLimitAppError(
                code="error_rate_limited",
                message="Rate limit exceeded",
                details={"address": "9.9.9.9", "retry_after": 1},
            )

        assert "9.9.9.9" not in client.get("/test-details").text

    def test_timeout_error_returns_408(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-timeout")
        async def test_endpoint():
            raise RenderTimeoutAppError(code="error_manim_timeout", message="timed out")

        response = client.get("/test-timeout")

        assert response.status_code == 408
        assert response.json()["messageKey"] == "error_manim_timeout"

    def test_render_failure_returns_500_with_extra(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-render")
        async def test_endpoint():
            raise RenderFailedAppError(
                code="error_manim_render_failed",
                message="Render failed",
                details={"original_message": "at /srv/x.py", "extra": {"details": "at [file]"}},
            )

        response = client.get("/test-render")

        assert response.status_code == 500
        assert response.json() == {
            "error": "Render failed",
            "messageKey": "error_manim_render_failed",
            "details": "at [file]",
        }

    def test_base_error_defaults_to_400(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-base")
        async def test_endpoint():
            raise AppError(code="error_generic", message="nope")

        assert client.get("/test-base").status_code == 400

    def test_str_of_error_is_message(self):
        assert str(ValidationAppError(code="x", message="readable")) == "readable"


class TestGeneralExceptionHandler:
    """Fallback handler for unexpected exceptions."""

    def test_unexpected_exception_handler_registered(self, app_with_handlers: FastAPI):
        assert Exception in app_with_handlers.exception_handlers

    def test_general_exception_handler_logic(self):
        request = AsyncMock()
        request.url.path = "/test"
        request.method = "GET"

        exc = RuntimeError("Unexpected error: database connection failed")
        response = asyncio.run(general_exception_handler(request, exc))

        data = _body(response)
        assert response.status_code == 500
        assert data["messageKey"] == "error_internal"
        assert "database connection" not in data["error"]
        assert "requestId" in data

    def test_general_exception_handler_never_leaks_stack_trace(self):
        request = AsyncMock()
        request.url.path = "/test"
        request.method = "GET"

        response = asyncio.run(general_exception_handler(request, ValueError("Test error with details")))

        response_text = bytes(response.body).decode()
        assert "Traceback" not in response_text
        assert 'File "' not in response_text
        assert "ValueError" not in response_text

    def test_unhandled_route_error_returns_generic_500(self, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-crash")
        async def test_endpoint():
            raise KeyError("secret internals")

        response = TestClient(app_with_handlers, raise_server_exceptions=False).get("/test-crash")

        assert response.status_code == 500
        assert response.json()["messageKey"] == "error_internal"
        assert "secret internals" not in response.text


class TestErrorHandlerIntegration:
    def test_setup_exception_handlers_registers_handlers(self, app_with_handlers: FastAPI):
        assert AppError in app_with_handlers.exception_handlers
        assert Exception in app_with_handlers.exception_handlers

    def test_multiple_handler_setups_does_not_fail(self):
        app = FastAPI()

        setup_exception_handlers(app)
        setup_exception_handlers(app)

        assert AppError in app.exception_handlers
