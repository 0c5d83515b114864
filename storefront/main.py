"""Storefront API main application module.

This module builds the FastAPI application: middleware, routers,
exception handlers and startup/shutdown events.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from storefront.api.categories import router as categories_router
from storefront.api.health import router as health_router
from storefront.api.middleware import error_response, setup_middleware
from storefront.api.products import router as products_router
from storefront.api.subcategories import router as subcategories_router
from storefront.api.wishlist import router as wishlist_router
from storefront.application.container import Container, build_container
from storefront.domain.exceptions import (
    AuthError,
    ConflictError,
    DomainError,
    ForbiddenError,
    NotFoundError,
    RateLimitError,
    StorageError,
    ValidationError,
)
from storefront.infrastructure.config import settings
from storefront.infrastructure.logging_config import configure_logging

logger = structlog.get_logger()

STATUS_CODES: dict[type[DomainError], int] = {
    ValidationError: 400,
    AuthError: 401,
    ForbiddenError: 403,
    NotFoundError: 404,
    ConflictError: 409,
    RateLimitError: 429,
    StorageError: 500,
}


def status_code_for(exc: DomainError) -> int:
    """HTTP status for a domain error, by its nearest mapped base class."""
    for cls in type(exc).__mro__:
        if cls in STATUS_CODES:
            return STATUS_CODES[cls]
    return 500


# ============================================================================
# Custom Exception Handlers
# ============================================================================


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    """Render a domain error with its mapped status code."""
    status_code = status_code_for(exc)

    if status_code >= 500:
        logger.error(
            "Request failed",
            path=request.url.path,
            method=request.method,
            error_code=exc.error_code,
            error=exc.message,
            exc_info=exc,
        )
        return error_response(request, status_code, exc.error_code, "An internal error occurred")

    headers = {}
    if isinstance(exc, RateLimitError):
        headers["Retry-After"] = str(exc.retry_after_seconds)

    return error_response(
        request,
        status_code,
        exc.error_code,
        exc.message,
        [{"field": d.field, "message": d.message} for d in exc.details],
        headers=headers,
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render request parsing failures as validation errors."""
    details = []
    for error in exc.errors():
        location = [str(part) for part in error["loc"] if part not in ("body", "query", "path")]
        details.append({"field": ".".join(location) or None, "message": error["msg"]})
    return error_response(request, 400, "VALIDATION_ERROR", "Validation error", details)


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle HTTP exceptions with consistent format."""
    detail = exc.detail
    if isinstance(detail, dict):
        error_code = detail.get("error_code", "ERROR")
        message = detail.get("message", str(detail))
        details = detail.get("details", [])
    else:
        error_code = "ERROR"
        message = str(detail)
        details = []
    return error_response(request, exc.status_code, error_code, message, details)


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle uncaught exceptions with consistent format."""
    logger.exception(
        "Unhandled exception in handler",
        path=request.url.path,
        method=request.method,
        error=str(exc),
    )
    return error_response(request, 500, "INTERNAL_ERROR", "An internal error occurred")


# ============================================================================
# Application Factory
# ============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup and shutdown events.

    Args:
        app: The FastAPI application instance.

    Yields:
        None after startup, cleanup happens after yield.
    """
    container: Container = app.state.container
    logger.info(
        "Starting Storefront API",
        version=container.settings.api_version,
        debug=container.settings.debug,
        store_backend=container.settings.store_backend,
    )

    yield

    logger.info("Shutting down Storefront API")
    await container.close()


def create_app(container: Container | None = None) -> FastAPI:
    """Build the FastAPI application.

    Args:
        container: Collaborators to serve from; built from settings when omitted.

    Returns:
        Configured application.
    """
    container = container or build_container(settings)
    config = container.settings

    app = FastAPI(
        title="Storefront API",
        description="Catalog of categories, subcategories and products with wishlists",
        version=config.api_version,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.container = container

    # CORS middleware (must be added before custom middleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    setup_middleware(app, config.api_prefix)

    app.include_router(health_router, prefix=config.api_prefix, tags=["Health"])
    app.include_router(categories_router, prefix=config.api_prefix)
    app.include_router(subcategories_router, prefix=config.api_prefix)
    app.include_router(products_router, prefix=config.api_prefix)
    app.include_router(wishlist_router, prefix=config.api_prefix)

    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    return app


configure_logging(settings)
app = create_app()
