"""
Consolidated middleware for the MealLog API
"""

import time
import logging
from datetime import datetime, timezone
from uuid import uuid4
from decimal import Decimal

from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from app.exceptions import (
    AppError,
    ServiceValidationError,
    NotFoundError,
    ConflictError,
    ImageProcessingError,
)

logger = logging.getLogger("meallog.middleware")


# ============================================================================
# Helper Functions
# ============================================================================


def make_serializable(obj):
    """Convert objects to JSON-serializable format"""
    if isinstance(obj, Decimal):
        return float(obj)
    elif isinstance(obj, bytes):
        return obj.decode("utf-8", "replace")
    elif isinstance(obj, Exception):
        return str(obj)
    elif isinstance(obj, dict):
        return {k: make_serializable(v) for k, v in obj.items()}
    elif isinstance(obj, (list, tuple)):
        return [make_serializable(item) for item in obj]
    return obj


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def _error_body(code: str, message, details=None) -> dict:
    error = {"code": code, "message": message}
    if details:
        error["details"] = make_serializable(details)
    return {"success": False, "error": error, "timestamp": _timestamp()}


def _app_error_response(exc: AppError, fallback_code: str) -> JSONResponse:
    return JSONResponse(
        status_code=exc.http_status,
        content=_error_body(exc.code or fallback_code, exc.message, exc.details),
    )


# ============================================================================
# Request Logging Middleware
# ============================================================================

REQUEST_ID_HEADER = "X-Request-ID"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    One log line per request with method, path, status and duration.

    A caller-supplied X-Request-ID is reused so a photo upload can be traced
    from the browser through the codec logs.
    """

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid4().hex
        request.state.request_id = request_id
        started = time.perf_counter()
        path = request.url.path
        body_size = request.headers.get("content-length", "-")

        try:
            response: Response = await call_next(request)
        except Exception:
            logger.exception(
                f"request_failed id={request_id} method={request.method} path={path} "
                f"elapsed_ms={(time.perf_counter() - started) * 1000:.1f}"
            )
            raise

        elapsed_ms = (time.perf_counter() - started) * 1000
        log = logger.warning if response.status_code >= 500 else logger.info
        log(
            f"request id={request_id} method={request.method} path={path} "
            f"status={response.status_code} body_bytes={body_size} elapsed_ms={elapsed_ms:.1f}"
        )

        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers["X-Process-Time"] = f"{elapsed_ms / 1000:.4f}"
        return response


# ============================================================================
# Error Handlers
# ============================================================================


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle Pydantic validation errors"""
    logger.warning(f"Validation error on {request.url}: {exc.errors()}")

    return JSONResponse(
        status_code=422,
        content=_error_body(
            "VALIDATION_ERROR", "Request validation failed", list(exc.errors())
        ),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handle HTTP exceptions"""
    logger.warning(f"HTTP {exc.status_code} on {request.url}: {exc.detail}")

    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(f"HTTP_{exc.status_code}", exc.detail),
        headers=getattr(exc, "headers", None),
    )


async def service_validation_exception_handler(
    request: Request, exc: ServiceValidationError
):
    """Handle service validation errors, including upload rejections (413/415)"""
    logger.warning(f"Service validation error on {request.url}: {str(exc)}")
    return _app_error_response(exc, "SERVICE_VALIDATION_ERROR")


async def not_found_exception_handler(request: Request, exc: NotFoundError):
    """Handle not found errors, including meals without a stored image"""
    logger.warning(f"Resource not found on {request.url}: {str(exc)}")
    return _app_error_response(exc, "NOT_FOUND")


async def conflict_exception_handler(request: Request, exc: ConflictError):
    """Handle duplicate resources"""
    logger.warning(f"Conflict on {request.url}: {str(exc)}")
    return _app_error_response(exc, "CONFLICT")


async def image_processing_exception_handler(
    request: Request, exc: ImageProcessingError
):
    """Handle codec failures that could not be recovered"""
    logger.error(f"Image processing failed on {request.url}: {str(exc)}")

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body(exc.code or "IMAGE_PROCESSING_ERROR", exc.message),
    )


async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected errors"""
    logger.exception(f"Unexpected error on {request.url}: {str(exc)}")

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body("INTERNAL_SERVER_ERROR", "An unexpected error occurred"),
    )
