"""Application factory for FastAPI app.

Centralizes app construction (services, middleware, handlers, routers) to
improve testability: every call builds its own service container, so each app
instance gets fresh limiters and session stores.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.api.routes import admin_router, auth_router, health_router
from app.core.config import Settings, settings as default_settings
from app.core.container import ServiceContainer, build_container
from app.core.exception_handlers import setup_exception_handlers
from app.core.logging import configure_logging
from app.core.middleware import rate_limit_middleware, request_id_middleware
from app.core.openapi import apply_openapi_customizations

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    container: ServiceContainer = app.state.container
    await container.start_background_tasks()
    logger.info(
        "app.started",
        extra={
            "environment": container.settings.app_env,
            "limiters": container.limiters.names(),
        },
    )

    yield

    await container.stop_background_tasks()
    logger.info("app.stopped")


def create_app(
    settings: Settings | None = None,
    *,
    container: ServiceContainer | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        settings: Settings to build services from; defaults to the global
            settings (ignored when ``container`` is given).
        container: Pre-built services, mainly for tests injecting clocks or
            reporters.

    Returns:
        Configured FastAPI app with middleware, handlers, routers and docs.
    """
    if container is None:
        container = build_container(settings or default_settings)
    cfg = container.settings

    # Logging first so subsequent init logs are formatted as desired
    configure_logging(cfg.log)

    app = FastAPI(
        title=cfg.app.name,
        description=(
            "Gateway services for the storefront: per-client fixed-window rate "
            "limiting and cookie-based session authentication."
        ),
        version=cfg.app.version,
        lifespan=lifespan,
        docs_url="/docs" if cfg.app_env != "production" else None,
        redoc_url="/redoc" if cfg.app_env != "production" else None,
    )
    app.state.container = container

    # Middleware (last registered runs first)
    app.middleware("http")(rate_limit_middleware)
    app.middleware("http")(request_id_middleware)

    # Exception handlers
    setup_exception_handlers(app)

    # Routers
    app.include_router(auth_router, prefix="/api")
    app.include_router(admin_router, prefix="/api")
    app.include_router(health_router, prefix="/api")

    # OpenAPI customizations (security scheme, tags, exemptions)
    apply_openapi_customizations(app, cookie_name=cfg.session.cookie_name)

    return app
