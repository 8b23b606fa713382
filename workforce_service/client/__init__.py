from .result import Result, FetchError, FetchErrorKind, FetchFailed
from .api_client import WorkforceClient
from .session import SessionStore
from .search import LatestRequestGuard, EmployeeSearch

__all__ = [
    "Result",
    "FetchError",
    "FetchErrorKind",
    "FetchFailed",
    "WorkforceClient",
    "SessionStore",
    "LatestRequestGuard",
    "EmployeeSearch",
]
