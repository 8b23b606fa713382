"""
Centralized error handlers for the FastAPI application

Every error leaves the service in the same envelope:

    {"error": {"id": ..., "code": ..., "message": ..., "status_code": ...}}

with the correlation ID repeated in the ``X-Error-ID`` header. Stack traces
are logged, never returned.
"""
import logging
import uuid
from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from typing import Dict, Any

from .constants import REQUEST_ID_HEADER
from .error_context import error_context_middleware
from .exceptions import BaseAPIException

logger = logging.getLogger(__name__)


def _request_error_id(request: Request) -> str:
    return getattr(request.state, 'error_id', None) or str(uuid.uuid4())


def _envelope(error_id: str, code: str, message: Any, status_code: int, **extra: Any) -> Dict[str, Any]:
    body = {
        "id": error_id,
        "code": code,
        "message": message,
        "status_code": status_code,
    }
    body.update({key: value for key, value in extra.items() if value is not None})
    return {"error": body}


async def base_api_exception_handler(request: Request, exc: BaseAPIException) -> JSONResponse:
    """Handle the service's own exceptions, which carry their error ID and code"""
    error_id = exc.error_id
    log = logger.error if exc.status_code >= 500 else logger.warning

    log(
        f"[{error_id}] {exc.error_code}: {exc.detail}",
        extra={
            "error_id": error_id,
            "error_code": exc.error_code,
            "status_code": exc.status_code,
            "path": str(request.url.path),
            "method": request.method,
        }
    )

    headers = dict(exc.headers or {})
    headers[REQUEST_ID_HEADER] = error_id

    content = _envelope(error_id, exc.error_code, exc.detail, exc.status_code)
    content["error"].update(exc.context)
    return JSONResponse(status_code=exc.status_code, content=content, headers=headers)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handle framework HTTP exceptions (unknown routes, wrong methods)"""
    error_id = _request_error_id(request)

    logger.warning(
        f"[{error_id}] HTTP {exc.status_code}: {exc.detail}",
        extra={
            "error_id": error_id,
            "status_code": exc.status_code,
            "path": str(request.url.path),
            "method": request.method,
        }
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=_envelope(error_id, f"HTTP_{exc.status_code}", exc.detail, exc.status_code),
        headers={REQUEST_ID_HEADER: error_id}
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle request body / query validation errors"""
    error_id = _request_error_id(request)

    errors = [
        {
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]

    logger.warning(f"[{error_id}] Validation error on {request.url.path}: {errors}")

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=_envelope(error_id, "VALIDATION_ERROR", "Request validation failed", 422, details=errors),
        headers={REQUEST_ID_HEADER: error_id}
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle anything unexpected: full traceback in the log, opaque message to the client"""
    error_id = _request_error_id(request)

    logger.error(
        f"[{error_id}] Unexpected error: {type(exc).__name__}: {str(exc)}",
        exc_info=exc,
        extra={
            "error_id": error_id,
            "path": str(request.url.path),
            "method": request.method,
            "exception_type": type(exc).__name__,
        }
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_envelope(
            error_id,
            "INTERNAL_ERROR",
            "An unexpected error occurred. Please contact support with the error ID.",
            500,
        ),
        headers={REQUEST_ID_HEADER: error_id}
    )


def register_error_handlers(app):
    """Register all error handlers and the correlation ID middleware"""
    # Most specific first
    app.add_exception_handler(BaseAPIException, base_api_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    error_context_middleware(app)
