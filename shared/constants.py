"""
Shared constants for the workforce services
"""
from typing import Final

# Timeout configurations (in seconds)
TIMEOUT_SHORT: Final[int] = 10

# Outbound calls get one retry after a timeout, never more
MAX_RETRY_ATTEMPTS: Final[int] = 1

# Request limits
DEFAULT_PAGE_SIZE: Final[int] = 20
MAX_PAGE_SIZE: Final[int] = 100
MAX_SEARCH_TERM_LENGTH: Final[int] = 100

# Account lifecycle
TEMPORARY_PASSWORD_LENGTH: Final[int] = 12
ACTIVATION_CONFIRM_PURPOSE: Final[str] = "manual_activation"

# Headers
REQUEST_ID_HEADER: Final[str] = "X-Error-ID"
