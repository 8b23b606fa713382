"""
Request correlation IDs shared by handlers, services and log lines
"""
import uuid
import logging
from typing import Optional, Dict, Any
from contextvars import ContextVar

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from .constants import REQUEST_ID_HEADER

# Correlation ID of the request currently being served
error_context_id: ContextVar[Optional[str]] = ContextVar('error_context_id', default=None)

logger = logging.getLogger(__name__)


def get_error_context_id() -> str:
    """Get or create the correlation ID for the current request"""
    error_id = error_context_id.get()
    if not error_id:
        error_id = str(uuid.uuid4())
        error_context_id.set(error_id)
    return error_id


def set_error_context_id(error_id: str) -> None:
    error_context_id.set(error_id)


def log_with_context(
    level: int,
    message: str,
    error_id: Optional[str] = None,
    extra: Optional[Dict[str, Any]] = None,
    exc_info: bool = False
) -> None:
    """
    Log with the request correlation ID prefixed to the message

    Args:
        level: Logging level (logging.ERROR, logging.WARNING, etc.)
        message: Log message
        error_id: Correlation ID (taken from the context when omitted)
        extra: Additional structured fields
        exc_info: Whether to include exception info
    """
    if error_id is None:
        error_id = get_error_context_id()

    log_extra = {"error_id": error_id}
    if extra:
        log_extra.update(extra)

    logger.log(level, f"[{error_id}] {message}", extra=log_extra, exc_info=exc_info)


class ErrorContextMiddleware(BaseHTTPMiddleware):
    """Assigns a correlation ID to every request and echoes it in the response headers"""

    async def dispatch(self, request: Request, call_next):
        error_id = str(uuid.uuid4())
        set_error_context_id(error_id)
        request.state.error_id = error_id

        try:
            response = await call_next(request)
        except Exception as e:
            log_with_context(
                logging.ERROR,
                f"Unhandled exception in middleware: {type(e).__name__}: {str(e)}",
                error_id=error_id,
                exc_info=True
            )
            raise

        if isinstance(response, Response) and REQUEST_ID_HEADER not in response.headers:
            response.headers[REQUEST_ID_HEADER] = error_id
        return response


def error_context_middleware(app):
    """Register the correlation ID middleware on a FastAPI app"""
    app.add_middleware(ErrorContextMiddleware)
    return app
