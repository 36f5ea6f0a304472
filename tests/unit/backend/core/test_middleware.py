"""
Unit Tests for Request Context Middleware.

Tests the RequestContextMiddleware functionality including:
- Request ID generation and propagation
- Frontend extraction from X-Frontend-ID header
- Response timing headers
- Structlog context binding
"""

import uuid
from unittest.mock import MagicMock, patch

import pytest
from starlette.requests import Request
from starlette.responses import Response

from notekeeper.backend.core.middleware import (
    KNOWN_FRONTENDS,
    RequestContextMiddleware,
    resolve_frontend,
)


@pytest.fixture
def middleware():
    return RequestContextMiddleware(MagicMock())


@pytest.fixture
def mock_request():
    request = MagicMock(spec=Request)
    request.headers = {}
    request.method = "GET"
    request.url = MagicMock()
    request.url.path = "/api/v1/notes"
    request.client = MagicMock()
    request.client.host = "127.0.0.1"
    request.state = MagicMock()
    return request


async def _ok(request):
    return Response(content="OK", status_code=200)


class TestResolveFrontend:
    """Tests for X-Frontend-ID normalisation."""

    @pytest.mark.parametrize("value", sorted(KNOWN_FRONTENDS))
    def test_known_frontends_pass_through(self, value):
        assert resolve_frontend(value) == value

    def test_case_and_whitespace_are_normalised(self):
        assert resolve_frontend("  Client ") == "client"

    @pytest.mark.parametrize("value", [None, "", "telegram", "mobile-app"])
    def test_unrecognised_values_become_unknown(self, value):
        assert resolve_frontend(value) == "unknown"


class TestRequestContextMiddleware:
    """Tests for RequestContextMiddleware.dispatch."""

    @pytest.mark.asyncio
    async def test_propagates_request_id(self, middleware, mock_request):
        mock_request.headers = {"X-Request-ID": "req-abc"}

        response = await middleware.dispatch(mock_request, _ok)

        assert mock_request.state.request_id == "req-abc"
        assert response.headers["X-Request-ID"] == "req-abc"

    @pytest.mark.asyncio
    async def test_generates_request_id_when_missing(self, middleware, mock_request):
        response = await middleware.dispatch(mock_request, _ok)

        uuid.UUID(response.headers["X-Request-ID"])

    @pytest.mark.asyncio
    async def test_sets_frontend_on_state(self, middleware, mock_request):
        mock_request.headers = {"X-Frontend-ID": "client"}
        seen = {}

        async def call_next(request):
            seen["frontend"] = request.state.frontend
            return Response(status_code=204)

        await middleware.dispatch(mock_request, call_next)

        assert seen["frontend"] == "client"

    @pytest.mark.asyncio
    async def test_adds_response_time_header(self, middleware, mock_request):
        response = await middleware.dispatch(mock_request, _ok)

        assert response.headers["X-Response-Time"].endswith("ms")

    @pytest.mark.asyncio
    async def test_binds_and_clears_structlog_context(self, middleware, mock_request):
        mock_request.headers = {"X-Request-ID": "req-1", "X-Frontend-ID": "web"}

        with patch("notekeeper.backend.core.middleware.structlog.contextvars") as ctx:
            await middleware.dispatch(mock_request, _ok)

        ctx.bind_contextvars.assert_called_once_with(
            request_id="req-1", frontend="web", method="GET", path="/api/v1/notes"
        )
        assert ctx.clear_contextvars.call_count == 2

    @pytest.mark.asyncio
    async def test_reraises_handler_exceptions(self, middleware, mock_request):
        async def call_next(request):
            raise RuntimeError("boom")

        with patch("notekeeper.backend.core.middleware.structlog.contextvars") as ctx:
            with pytest.raises(RuntimeError, match="boom"):
                await middleware.dispatch(mock_request, call_next)

        assert ctx.clear_contextvars.call_count == 2
