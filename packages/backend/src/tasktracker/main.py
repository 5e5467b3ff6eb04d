"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance. Settings are loaded here, once, and everything built from them
(engine, session factory, token codec) is stored on app.state for the
request dependencies to pick up. Missing TASKTRACKER_DATABASE_URL or
TASKTRACKER_JWT_SECRET makes create_app() raise, so the process never
starts serving with a half-configured app.

Run with: uvicorn --factory tasktracker.main:create_app
"""

from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tasktracker import __version__
from tasktracker.api import api_router
from tasktracker.auth.jwt import TokenCodec
from tasktracker.config import Settings, load_settings
from tasktracker.db.engine import build_engine, build_session_factory
from tasktracker.errors import register_error_handlers
from tasktracker.middleware.request_id import RequestIdMiddleware
from tasktracker.middleware.security import SecurityHeadersMiddleware

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle.

    Learn: Anything before `yield` runs at startup, after `yield` runs at
    shutdown. The engine already exists (create_app built it); shutdown
    returns its pooled connections.
    """
    settings: Settings = app.state.settings
    logger.info(
        "tasktracker.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
    )

    yield

    logger.info("tasktracker.shutdown")
    await app.state.engine.dispose()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build and return the FastAPI application."""
    settings = settings or load_settings()

    app = FastAPI(
        title="Task Tracker",
        description="Projects and tasks, each visible only to its owner",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.engine = build_engine(settings)
    app.state.session_factory = build_session_factory(app.state.engine)
    app.state.token_codec = TokenCodec.from_settings(settings)

    register_error_handlers(app)

    # ── Middleware stack ──────────────────────────────────────
    # Note: Starlette middleware executes in reverse order of registration.
    # Request flow: RequestId → Security → CORS → handler

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIdMiddleware)

    # Mount API routes
    app.include_router(api_router)

    return app
