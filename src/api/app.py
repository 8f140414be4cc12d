# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""FastAPI Application Factory.

This module provides the main application factory for the CourseGrade API.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src import __version__
from src.api.dependencies import close_db, init_db
from src.api.middleware.auth import AuthMiddleware
from src.api.routes import health
from src.api.v1 import router as v1_router
from src.core.config import get_settings
from src.core.exceptions import (
    AuthorizationError,
    ConflictError,
    CoreError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from src.models.common import ErrorBody, ErrorResponse
from src.utils.logging import setup_logging

logger = logging.getLogger(__name__)

# Order matters: subclasses are matched before their bases
_STATUS_BY_ERROR: tuple[tuple[type[CoreError], int], ...] = (
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (AuthorizationError, status.HTTP_403_FORBIDDEN),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_409_CONFLICT),
    (StorageError, status.HTTP_500_INTERNAL_SERVER_ERROR),
)


def status_for_error(exc: CoreError) -> int:
    """Map an error category to its HTTP status code."""
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def core_error_handler(request: Request, exc: CoreError) -> JSONResponse:
    """Render a CoreError as an error envelope.

    Storage failures are logged with their cause and returned with a
    generic message only.
    """
    status_code = status_for_error(exc)

    if isinstance(exc, StorageError):
        logger.error("Storage failure on %s %s: %s", request.method, request.url.path, str(exc))
        body = {
            "code": exc.code.value,
            "message": "Storage operation failed",
            "details": {},
        }
    else:
        logger.info(
            "Request failed: path=%s, code=%s, status=%d",
            request.url.path,
            exc.code.value,
            status_code,
        )
        body = exc.to_dict()

    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=ErrorBody(**body)).model_dump(),
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Configures logging and opens the database pool on startup, and
    closes the pool on shutdown.

    Args:
        app: The FastAPI application instance.

    Yields:
        None during application runtime.
    """
    settings = get_settings()
    setup_logging(settings)
    logger.info(
        "Starting CourseGrade API: environment=%s, debug=%s",
        settings.environment,
        settings.debug,
    )

    await init_db()
    logger.info("Database connection initialized")

    yield

    try:
        await close_db()
        logger.info("Database connection closed")
    except Exception as e:
        logger.warning("Error closing database connection: %s", str(e))

    logger.info("Shutting down CourseGrade API")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    This factory function creates a new FastAPI instance with all
    middleware, routes, and configurations applied.

    Returns:
        Configured FastAPI application instance.
    """
    settings = get_settings()

    app = FastAPI(
        title="CourseGrade API",
        description="Course enrollment and assignment grading backend",
        version=__version__,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
        # Disable automatic redirects from /path to /path/
        # This prevents 307 redirects that lose Authorization headers
        redirect_slashes=False,
    )

    # =========================================================================
    # Exception handlers
    # =========================================================================
    app.add_exception_handler(CoreError, core_error_handler)

    # =========================================================================
    # Middleware (order matters - last added is first executed)
    # =========================================================================

    # Auth middleware - validates JWT tokens
    app.add_middleware(AuthMiddleware)

    # CORS middleware (added last to execute first)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors.origins_list,
        allow_credentials=settings.cors.allow_credentials,
        allow_methods=settings.cors.allow_methods,
        allow_headers=settings.cors.allow_headers,
    )

    # =========================================================================
    # Routes
    # =========================================================================
    app.include_router(health.router, tags=["Health"])
    app.include_router(v1_router)

    return app


def run() -> None:
    """Serve the API with uvicorn using the API_* settings.

    Installed as the ``coursegrade`` console script.
    """
    settings = get_settings()
    uvicorn.run(
        "src.api.app:create_app",
        factory=True,
        host=settings.api.host,
        port=settings.api.port,
        workers=None if settings.api.reload else settings.api.workers,
        reload=settings.api.reload,
        log_level=settings.log_level.lower(),
    )
