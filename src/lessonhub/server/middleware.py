"""Request logging, CORS and error handling middleware for the lessonhub server."""

from __future__ import annotations

import logging
import time
import uuid
from typing import Callable

try:
    from fastapi import FastAPI, Request, Response
    from fastapi.middleware.cors import CORSMiddleware
    from starlette.middleware.base import BaseHTTPMiddleware
except ImportError:
    raise ImportError("FastAPI is required. Install with: pip install lessonhub")

from lessonhub.exceptions import StoreError
from lessonhub.server.errors import error_response, map_failure
from lessonhub.server.responses import PrettyJSONResponse

logger = logging.getLogger(__name__)

# Max request body size: 1MB
MAX_BODY_SIZE = 1_048_576

UNMATCHED_ROUTE = "unmatched"


def route_label(request: Request) -> str:
    """Path template of the route that served ``request``.

    Keeps metric label sets bounded: every lesson ID maps to
    ``/updateLesson/{lesson_id}``. Requests no route matched share one label.
    """
    route = request.scope.get("route")
    return getattr(route, "path", None) or UNMATCHED_ROUTE


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Add a request ID, write one access-log line, collect HTTP metrics."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("x-request-id", str(uuid.uuid4()))
        request.state.request_id = request_id

        start = time.monotonic()
        response = await call_next(request)
        duration = time.monotonic() - start

        response.headers["X-Request-Id"] = request_id

        path = request.url.path
        route = route_label(request)
        if route not in ("/metrics", "/health"):
            from lessonhub.server.config import settings as _s
            from lessonhub.server.metrics import http_request_duration, http_requests_total

            if _s.metrics_enabled:
                http_requests_total.inc(method=request.method, path=route, status=str(response.status_code))
                http_request_duration.observe(duration, method=request.method, path=route)

        access_logger = logging.getLogger("lessonhub.server.access")
        access_logger.info(
            "%s %s %s",
            request.method,
            path,
            response.status_code,
            extra={
                "request_id": request_id,
                "client": request.client.host if request.client else None,
                "method": request.method,
                "path": path,
                "route": route,
                "status": response.status_code,
                "latency_ms": round(duration * 1000, 2),
            },
        )

        return response


class BodySizeLimitMiddleware(BaseHTTPMiddleware):
    """Reject requests with bodies exceeding MAX_BODY_SIZE."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        content_length = request.headers.get("content-length")
        if content_length is not None and content_length.isdigit():
            if int(content_length) > MAX_BODY_SIZE:
                return PrettyJSONResponse(
                    status_code=413,
                    content={
                        "error": "request_too_large",
                        "message": f"Request body exceeds {MAX_BODY_SIZE} bytes.",
                    },
                )

        return await call_next(request)


# ── Error Handlers ─────────────────────────────────────────────────


def install_error_handlers(app: FastAPI) -> None:
    """Install global exception handlers for consistent JSON error responses."""

    from fastapi.exceptions import RequestValidationError
    from starlette.exceptions import HTTPException as StarletteHTTPException

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> PrettyJSONResponse:
        error_codes = {
            400: "bad_request",
            404: "not_found",
            405: "method_not_allowed",
            406: "not_acceptable",
            408: "request_timeout",
            413: "request_too_large",
            422: "validation_error",
        }
        error_code = error_codes.get(exc.status_code, "error")
        message = str(exc.detail) if exc.detail else f"HTTP {exc.status_code}"

        return PrettyJSONResponse(
            status_code=exc.status_code,
            content={"error": error_code, "message": message},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> PrettyJSONResponse:
        for error in exc.errors():
            if error.get("type") == "json_invalid":
                return PrettyJSONResponse(
                    status_code=400,
                    content={
                        "error": "malformed_json",
                        "message": "Request body contains invalid JSON.",
                    },
                )

        messages = []
        for error in exc.errors():
            loc = " -> ".join(str(l) for l in error["loc"])
            messages.append(f"{loc}: {error['msg']}")

        return PrettyJSONResponse(
            status_code=422,
            content={
                "error": "validation_error",
                "message": "; ".join(messages),
            },
        )

    @app.exception_handler(StoreError)
    async def store_error_handler(request: Request, exc: StoreError) -> PrettyJSONResponse:
        return error_response(map_failure(exc, f"Store failure on {request.url.path}"))

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request, exc: Exception
    ) -> PrettyJSONResponse:
        return error_response(map_failure(exc, f"Unhandled exception on {request.url.path}"))


def install_middleware(app: FastAPI) -> None:
    """Install all middleware on the app."""
    # Order matters: outermost runs first (added last)
    app.add_middleware(BodySizeLimitMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestContextMiddleware)
    install_error_handlers(app)
