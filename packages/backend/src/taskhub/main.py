"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance. Settings are read once here and turned into the long-lived,
read-only collaborators every request shares (TokenService, the user
deletion strategy), which are parked on app.state for injection.
"""

from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from taskhub import __version__
from taskhub.api import api_router
from taskhub.api.error_handlers import register_error_handlers
from taskhub.auth.jwt import TokenService
from taskhub.config import Settings, settings
from taskhub.services.user_service import deletion_strategy_for

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle."""
    app_settings: Settings = app.state.settings
    logger.info(
        "taskhub.starting",
        version=__version__,
        environment=app_settings.environment,
        user_delete_strategy=app_settings.user_delete_strategy,
    )

    yield

    logger.info("taskhub.shutdown")

    from taskhub.db.engine import engine
    await engine.dispose()


def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    """Build and return the FastAPI application."""
    app_settings = app_settings or settings

    app = FastAPI(
        title="Taskhub",
        description="Users, tasks and places with bearer-token auth and ownership checks",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.settings = app_settings
    app.state.token_service = TokenService.from_settings(app_settings)
    app.state.user_deletion = deletion_strategy_for(app_settings.user_delete_strategy)

    # ── Middleware stack ──────────────────────────────────────
    # Note: Starlette middleware executes in reverse order of registration.
    # Request flow: RequestId → Security → CORS → handler

    from taskhub.middleware.request_id import RequestIdMiddleware
    from taskhub.middleware.security import SecurityHeadersMiddleware

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIdMiddleware)

    register_error_handlers(app)
    app.include_router(api_router)

    return app


# Default app instance (used by uvicorn: taskhub.main:app)
app = create_app()
