"""
API Middleware - Tracing, timing and the JSON error envelope.

Error bodies share one shape: {"error", "code", ..., "request_id"}.
Unexpected exceptions become a generic 500 in the same shape.
"""

from __future__ import annotations

import logging
import time
import uuid
from collections.abc import Awaitable, Callable

from fastapi import Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from learnonauts.config.errors import ErrorCode, LearnonautsError

logger = logging.getLogger(__name__)


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "unknown")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Attach request ID for tracing across logs and responses."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

        request.state.request_id = request_id

        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id

        return response


class LatencyMiddleware(BaseHTTPMiddleware):
    """Track and log request latency."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        start_time = time.perf_counter()

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        response.headers["X-Response-Time-Ms"] = f"{duration_ms:.2f}"

        logger.info(
            "%s %s status=%d latency_ms=%.2f request_id=%s",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
            _request_id(request),
        )

        return response


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Convert LearnonautsError exceptions to structured JSON responses."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        try:
            return await call_next(request)
        except LearnonautsError as e:
            request_id = _request_id(request)
            status = _error_code_to_status(e.code)
            log = logger.error if status >= 500 else logger.info
            log(
                "%s: %s request_id=%s details=%s",
                e.code.value,
                e.message,
                request_id,
                e.details,
            )
            return JSONResponse(
                status_code=status,
                content={**e.to_dict(), "request_id": request_id},
            )
        except Exception as e:
            request_id = _request_id(request)
            logger.exception("Unhandled error: %s request_id=%s", str(e), request_id)
            return JSONResponse(
                status_code=500,
                content={
                    "error": "Internal server error",
                    "code": ErrorCode.INTERNAL_ERROR.value,
                    "request_id": request_id,
                },
            )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report malformed bodies and query strings as 400 in the error shape."""
    issues = [
        {"loc": [str(part) for part in err.get("loc", ())], "msg": err.get("msg", "")}
        for err in exc.errors()
    ]
    request_id = _request_id(request)
    logger.info("Request validation failed: %s request_id=%s", issues, request_id)
    return JSONResponse(
        status_code=400,
        content={
            "error": "Invalid request",
            "code": ErrorCode.VALIDATION_ERROR.value,
            "issues": issues,
            "request_id": request_id,
        },
    )


def _error_code_to_status(code: ErrorCode) -> int:
    """Map error codes to HTTP status codes."""
    mapping = {
        # 400 Bad Request
        ErrorCode.VALIDATION_ERROR: 400,
        ErrorCode.RESET_KEY_INVALID: 400,
        ErrorCode.RESET_KEY_EXPIRED: 400,
        # 401 Unauthorized
        ErrorCode.SECURITY_UNAUTHORIZED: 401,
        # 403 Forbidden
        ErrorCode.SECURITY_FORBIDDEN: 403,
        # 404 Not Found
        ErrorCode.NOT_FOUND: 404,
        # 409 Conflict
        ErrorCode.CONFLICT: 409,
    }
    return mapping.get(code, 500)
