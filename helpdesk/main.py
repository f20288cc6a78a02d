"""
Main FastAPI application.

WHY: This is the entry point for the application. It configures logging,
middleware, routes, exception handlers and the database lifecycle.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from helpdesk.core.config import Settings, settings
from helpdesk.core.exception_handlers import register_exception_handlers
from helpdesk.db.session import Database
from helpdesk.middleware import RequestContextMiddleware, RequestIdLogFilter
from helpdesk.api import auth, tickets, dashboard, consultants, health

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] [%(request_id)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """
    Configure root logging.

    WHY: Every record carries the request ID (or "-"), so lines emitted by
    services and DAOs can be grouped per request.
    """
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.addFilter(RequestIdLogFilter())

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level.upper())


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Application lifespan.

    WHY: The pool is created once at startup and drained on shutdown so
    in-flight connections are closed before the process exits. A Database
    already attached to app.state (tests) is reused and left to its owner,
    together with logging setup.
    """
    app_settings = app.state.settings
    owned = getattr(app.state, "database", None) is None
    if owned:
        configure_logging(app_settings.LOG_LEVEL)
        app.state.database = Database.from_settings(app_settings)
    logger.info("%s %s started", app_settings.PROJECT_NAME, app_settings.VERSION)

    try:
        yield
    finally:
        if owned:
            await app.state.database.dispose()
            app.state.database = None
        logger.info("%s stopped", app_settings.PROJECT_NAME)


def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure FastAPI application.

    WHY: Factory pattern allows easier testing with different configurations
    and makes it possible to create multiple app instances if needed.

    Returns:
        Configured FastAPI application instance
    """
    app_settings = app_settings or settings

    app = FastAPI(
        title=app_settings.PROJECT_NAME,
        description="Support ticket API",
        version=app_settings.VERSION,
        docs_url=f"{app_settings.API_PREFIX}/docs",
        redoc_url=f"{app_settings.API_PREFIX}/redoc",
        openapi_url=f"{app_settings.API_PREFIX}/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = app_settings

    # Register exception handlers
    # WHY: Every failure maps to a stable status code and error kind, never
    # raw internal error text
    register_exception_handlers(app)

    # WHY: Captures request ID, client IP and user agent, and logs each
    # request outcome
    app.add_middleware(RequestContextMiddleware)

    # Configure CORS
    # WHY: The browser frontend is served from a different origin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )

    # Register API routers
    app.include_router(health.router, prefix=app_settings.API_PREFIX)
    app.include_router(auth.router, prefix=app_settings.API_PREFIX)
    app.include_router(tickets.router, prefix=app_settings.API_PREFIX)
    app.include_router(dashboard.router, prefix=app_settings.API_PREFIX)
    app.include_router(consultants.router, prefix=app_settings.API_PREFIX)

    return app


# Create app instance
# WHY: Creating the app instance here allows it to be imported by uvicorn
app = create_app()


if __name__ == "__main__":
    import uvicorn

    # WHY: This allows running the app directly with `python -m helpdesk.main`
    # for development. In production, use `uvicorn helpdesk.main:app` directly.
    uvicorn.run(
        "helpdesk.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
        log_config=None,
    )
