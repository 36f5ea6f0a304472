"""
Request Context Middleware.

Tags every request with an id and the calling frontend, binds both to
structlog for the duration of the request and reports timing.

Headers:
    X-Request-ID     - propagated when sent, generated otherwise
    X-Frontend-ID    - web, client, cli, api or internal; anything else is "unknown"
    X-Response-Time  - handler duration in milliseconds

Handlers can read request.state.request_id, request.state.frontend and
request.state.start_time.
"""

import uuid
from datetime import datetime

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from notekeeper.backend.core.logging import VALID_SOURCES, get_logger
from notekeeper.backend.core.utils import utc_now

logger = get_logger(__name__)

# Callers that may identify themselves; "events" is server-side only
KNOWN_FRONTENDS = VALID_SOURCES - {"events", "unknown"}


def resolve_frontend(header_value: str | None) -> str:
    """Normalise an X-Frontend-ID header value."""
    frontend = (header_value or "").strip().lower()
    return frontend if frontend in KNOWN_FRONTENDS else "unknown"


def _elapsed_ms(start_time: datetime) -> int:
    return int((utc_now() - start_time).total_seconds() * 1000)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Request id, frontend and timing for every request."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        frontend = resolve_frontend(request.headers.get("X-Frontend-ID"))
        start_time = utc_now()

        request.state.request_id = request_id
        request.state.frontend = frontend
        request.state.start_time = start_time

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            frontend=frontend,
            method=request.method,
            path=request.url.path,
        )
        logger.debug(
            "Request started",
            extra={"client_host": request.client.host if request.client else None},
        )

        try:
            response = await call_next(request)
            duration_ms = _elapsed_ms(start_time)
            response.headers["X-Request-ID"] = request_id
            response.headers["X-Response-Time"] = f"{duration_ms}ms"
            logger.debug(
                "Request completed",
                extra={"status_code": response.status_code, "duration_ms": duration_ms},
            )
            return response
        except Exception as exc:
            logger.error(
                "Request failed with exception",
                extra={"duration_ms": _elapsed_ms(start_time), "error_type": type(exc).__name__},
            )
            raise
        finally:
            # Context must not leak into the next request on this task
            structlog.contextvars.clear_contextvars()
