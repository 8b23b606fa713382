"""
Centralized exception classes for consistent error handling
"""
from fastapi import HTTPException, status
from typing import Optional, Dict, Any, Iterable
import uuid

from .error_context import error_context_id


class BaseAPIException(HTTPException):
    """Base exception class for API errors"""

    def __init__(
        self,
        status_code: int,
        detail: str,
        error_code: Optional[str] = None,
        error_id: Optional[str] = None,
        headers: Optional[Dict[str, Any]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.error_code = error_code or f"ERR_{status_code}"
        self.error_id = error_id or error_context_id.get() or str(uuid.uuid4())
        self.detail = detail
        # Extra fields returned to the client next to the message
        self.context = context or {}


class ValidationError(BaseAPIException):
    """Raised when input validation fails"""

    def __init__(self, detail: str, error_id: Optional[str] = None):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            error_code="VALIDATION_ERROR",
            error_id=error_id
        )


class AuthenticationError(BaseAPIException):
    """Raised when no usable identity is attached to the request"""

    def __init__(
        self,
        detail: str = "Authentication required",
        login_url: Optional[str] = None,
        error_id: Optional[str] = None,
    ):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            error_code="AUTH_ERROR",
            error_id=error_id,
            headers={"WWW-Authenticate": "Bearer"},
            context={"login_url": login_url} if login_url else None,
        )


class AuthorizationError(BaseAPIException):
    """Raised when the caller's role or permissions do not cover the request"""

    def __init__(
        self,
        detail: str = "Insufficient permissions",
        required_roles: Optional[Iterable[str]] = None,
        actual_role: Optional[str] = None,
        error_id: Optional[str] = None,
    ):
        context: Dict[str, Any] = {}
        if required_roles is not None:
            context["required_roles"] = list(required_roles)
        if actual_role is not None:
            context["your_role"] = actual_role
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
            error_code="AUTHORIZATION_ERROR",
            error_id=error_id,
            context=context,
        )


class AccountStatusError(BaseAPIException):
    """Raised when an account cannot sign in because of its lifecycle state"""

    def __init__(self, account_status: str, detail: Optional[str] = None, error_id: Optional[str] = None):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail or f"Account is {account_status}",
            error_code="ACCOUNT_STATUS",
            error_id=error_id,
            context={"account_status": account_status},
        )


class NotFoundError(BaseAPIException):
    """Raised when a resource is not found"""

    def __init__(self, resource: str = "Resource", identifier: Optional[Any] = None, error_id: Optional[str] = None):
        detail = f"{resource} not found" if identifier is None else f"{resource} {identifier} not found"
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            error_code="NOT_FOUND",
            error_id=error_id
        )


class ConflictError(BaseAPIException):
    """Raised when a request collides with the current state of a resource"""

    def __init__(self, detail: str, current_state: Optional[str] = None, error_id: Optional[str] = None):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
            error_code="CONFLICT",
            error_id=error_id,
            context={"current_state": current_state} if current_state else None,
        )


class ServiceUnavailableError(BaseAPIException):
    """Raised when a downstream service is unavailable"""

    def __init__(self, service_name: str, error_id: Optional[str] = None):
        super().__init__(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"{service_name} service unavailable",
            error_code="SERVICE_UNAVAILABLE",
            error_id=error_id
        )


class InternalServerError(BaseAPIException):
    """Raised for internal server errors"""

    def __init__(self, detail: str = "Internal server error", error_id: Optional[str] = None):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
            error_code="INTERNAL_ERROR",
            error_id=error_id
        )
