"""Request pipeline middleware.

Every route runs inside three layers, outermost first:

- ``RequestContextMiddleware`` names the request and its client in the
  log context and echoes the request id back.
- ``RateLimitMiddleware`` counts the client against its window.
- ``ErrorHandlerMiddleware`` turns escaped exceptions into the error
  envelope.
"""

import time
from collections.abc import Iterable, Mapping
from typing import Any, Callable
from uuid import uuid4

import structlog
from fastapi import FastAPI, Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from storefront.domain.exceptions import RateLimitError

logger = structlog.get_logger()

REQUEST_ID_HEADER = "X-Request-ID"


def error_response(
    request: Request,
    status_code: int,
    error_code: str,
    message: str,
    details: list[dict[str, Any]] | None = None,
    headers: Mapping[str, str] | None = None,
) -> JSONResponse:
    """Render the error envelope, tagged with the request id."""
    return JSONResponse(
        status_code=status_code,
        content={
            "error_code": error_code,
            "message": message,
            "details": details or [],
            "request_id": getattr(request.state, "request_id", None),
        },
        headers=dict(headers) if headers else None,
    )


def client_key(request: Request) -> str:
    """Address a request is rate limited and logged under."""
    return request.client.host if request.client else "unknown"


# ============================================================================
# Request Context
# ============================================================================


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Binds the request id and client address for the request's lifetime.

    The id comes from ``X-Request-ID`` when the caller sends one. Both
    values land on ``request.state`` and in the structlog context, so
    every log line of the request carries them, and one access line is
    written when the response is ready.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid4())
        request.state.request_id = request_id
        request.state.client = client_key(request)
        structlog.contextvars.bind_contextvars(request_id=request_id, client=request.state.client)

        started = time.perf_counter()
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
        try:
            response = await call_next(request)
            status_code = response.status_code
        finally:
            logger.info(
                "Request completed",
                method=request.method,
                path=request.url.path,
                status_code=status_code,
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
            )
            structlog.contextvars.unbind_contextvars("request_id", "client")

        response.headers[REQUEST_ID_HEADER] = request_id
        return response


# ============================================================================
# Rate Limiting
# ============================================================================


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Applies the container's rate limiter per client address.

    Disabled unless ``rate_limit_enabled`` is set. Paths in
    ``exempt_paths`` are matched exactly, ignoring a trailing slash.
    """

    def __init__(self, app: ASGIApp, exempt_paths: Iterable[str] = ()) -> None:
        super().__init__(app)
        self.exempt_paths = frozenset(path.rstrip("/") for path in exempt_paths)

    def is_exempt(self, path: str) -> bool:
        return path.rstrip("/") in self.exempt_paths

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        container = request.app.state.container
        if not container.settings.rate_limit_enabled or self.is_exempt(request.url.path):
            return await call_next(request)

        try:
            container.rate_limiter.hit(getattr(request.state, "client", None) or client_key(request))
        except RateLimitError as e:
            logger.warning(
                "Rate limit exceeded",
                path=request.url.path,
                retry_after_seconds=e.retry_after_seconds,
            )
            return error_response(
                request,
                status.HTTP_429_TOO_MANY_REQUESTS,
                e.error_code,
                e.message,
                headers={"Retry-After": str(e.retry_after_seconds)},
            )

        return await call_next(request)


# ============================================================================
# Error Handling
# ============================================================================


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Last-resort handler for exceptions no exception handler rendered."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            logger.exception(
                "Unhandled exception",
                path=request.url.path,
                method=request.method,
                error=str(e),
            )
            return error_response(
                request,
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                "INTERNAL_ERROR",
                "An internal error occurred",
            )


# ============================================================================
# Middleware Setup
# ============================================================================


def rate_limit_exemptions(app: FastAPI, api_prefix: str) -> set[str]:
    """Health checks and API docs, as exact paths."""
    paths = {f"{api_prefix}/health", f"{api_prefix}/ready"}
    paths.update(path for path in (app.docs_url, app.redoc_url, app.openapi_url) if path)
    return paths


def setup_middleware(app: FastAPI, api_prefix: str) -> None:
    """Install the request pipeline.

    Middleware added last runs first, so the request context wraps
    everything else.

    Args:
        app: FastAPI application instance.
        api_prefix: Prefix the routers are mounted under.
    """
    app.add_middleware(ErrorHandlerMiddleware)
    app.add_middleware(RateLimitMiddleware, exempt_paths=rate_limit_exemptions(app, api_prefix))
    app.add_middleware(RequestContextMiddleware)
