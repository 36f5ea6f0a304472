"""
Notekeeper API.

    uvicorn notekeeper.backend.main:app

The app is built on first access to ``app`` so that importing this module
never reads configuration.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from notekeeper.backend.api import health
from notekeeper.backend.api.v1 import build_router
from notekeeper.backend.core.config import get_app_config
from notekeeper.backend.core.database import dispose_engine
from notekeeper.backend.core.exception_handlers import register_exception_handlers
from notekeeper.backend.core.logging import get_logger, setup_logging
from notekeeper.backend.core.middleware import RequestContextMiddleware
from notekeeper.backend.events.broker import close_event_broker

logger = get_logger(__name__)

_app: FastAPI | None = None


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    app_config = get_app_config()
    setup_logging(level=app_config.logging.level)

    logger.info(
        "Application starting",
        extra={
            "app_name": app_config.application.name,
            "env": app_config.application.environment,
        },
    )
    yield
    logger.info("Application shutting down")
    await close_event_broker()
    await dispose_engine()


def create_app() -> FastAPI:
    """Middleware, CORS, error envelopes, health routes and the feature-flagged v1 API."""
    app_config = get_app_config()
    app_settings = app_config.application

    app = FastAPI(
        title=app_settings.name,
        description=app_settings.description,
        version=app_settings.version,
        docs_url="/docs" if app_settings.docs_enabled else None,
        redoc_url="/redoc" if app_settings.docs_enabled else None,
        lifespan=lifespan,
    )

    app.add_middleware(RequestContextMiddleware)

    cors_origins = app_settings.cors.origins
    if cors_origins:
        cors = app_config.security.cors
        app.add_middleware(
            CORSMiddleware,
            allow_origins=cors_origins,
            allow_credentials=True,
            allow_methods=cors.allow_methods,
            allow_headers=cors.allow_headers,
            expose_headers=["X-Request-ID", "X-Response-Time"],
        )

    register_exception_handlers(app)

    app.include_router(health.router, tags=["health"])
    app.include_router(build_router(app_config.features), prefix=app_settings.api_prefix)

    return app


def get_app() -> FastAPI:
    global _app
    if _app is None:
        _app = create_app()
    return _app


def __getattr__(name: str) -> FastAPI:
    if name == "app":
        return get_app()
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
