"""Main application module.

This module builds the FastAPI application, includes routes,
and configures middleware, exception handlers and the expiry sweeper.
"""

import time
from typing import Optional

import uvicorn
from fastapi import FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from shorturl.api import api_router
from shorturl.core.config import Settings, get_settings
from shorturl.core.logging import setup_logging
from shorturl.db.base import configure_engine, init_db
from shorturl.middleware.logging import RequestLoggingMiddleware
from shorturl.scheduler import SchedulerService


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application.

    Args:
        settings: Explicit settings; loaded from the environment when omitted

    Raises:
        pydantic.ValidationError: If required configuration such as API_KEYS is missing
    """
    settings = settings or get_settings()
    logger = setup_logging(settings)
    configure_engine(settings)

    app = FastAPI(
        title=settings.APP_NAME,
        description=settings.APP_DESCRIPTION,
        version=settings.APP_VERSION,
        docs_url=settings.DOCS_URL,
        redoc_url=None,
        servers=[{"url": settings.PUBLIC_URL}],
    )
    app.state.settings = settings
    app.state.scheduler = SchedulerService(settings)

    if settings.REQUEST_LOGGING_ENABLED:
        app.add_middleware(RequestLoggingMiddleware)

    # Include API router
    app.include_router(api_router)

    # Add exception handlers
    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Handle validation errors with field-level detail."""
        logger.info(f"Request validation error on {request.method} {request.url.path}: {exc.errors()}")
        return JSONResponse(
            status_code=400,
            content={"detail": "Validation error", "errors": jsonable_encoder(exc.errors())}
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Global exception handler to catch and log all unhandled exceptions."""
        error_id = f"error-{time.time()}"

        logger.opt(exception=exc).error(
            f"Unhandled exception in {request.method} {request.url.path} ({error_id})"
        )

        return JSONResponse(
            status_code=500,
            content={
                "detail": "Internal server error occurred",
                "error_id": error_id,
            }
        )

    # Add startup and shutdown event handlers
    @app.on_event("startup")
    async def startup_event():
        """Run startup tasks."""
        logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
        logger.info(f"Environment: {settings.ENVIRONMENT.value}")

        await init_db()

        if settings.CLEANUP_ENABLED:
            app.state.scheduler.start()
        else:
            logger.info("Expired URL cleanup is disabled in settings")

    @app.on_event("shutdown")
    async def shutdown_event():
        """Run cleanup tasks."""
        logger.info(f"Shutting down {settings.APP_NAME}")
        if app.state.scheduler.is_running:
            app.state.scheduler.shutdown()

    return app


def run() -> None:
    """Start the HTTP listener on HOST:PORT."""
    settings = get_settings()
    app = create_app(settings)
    uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_config=None)


if __name__ == "__main__":
    run()
