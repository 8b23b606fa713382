"""
Shared utilities and constants for the workforce services
"""
from .constants import *
from .exceptions import *
from .validators import *
from .error_context import get_error_context_id, set_error_context_id, log_with_context

__all__ = [
    # Constants
    "TIMEOUT_SHORT",
    "MAX_RETRY_ATTEMPTS",
    "DEFAULT_PAGE_SIZE",
    "MAX_PAGE_SIZE",
    # Exceptions
    "BaseAPIException",
    "ValidationError",
    "AuthenticationError",
    "AuthorizationError",
    "AccountStatusError",
    "NotFoundError",
    "ConflictError",
    "ServiceUnavailableError",
    "InternalServerError",
    # Validators
    "validate_pagination",
    "normalize_search_term",
    # Error context
    "get_error_context_id",
    "set_error_context_id",
    "log_with_context",
]
