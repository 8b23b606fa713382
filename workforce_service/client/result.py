"""Explicit success/failure values for remote calls

A failed fetch is reported as a FetchError, never replaced with sample data.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class FetchErrorKind(str, Enum):
    TIMEOUT = "timeout"
    CONNECTION = "connection"
    HTTP = "http"
    INVALID_RESPONSE = "invalid_response"


@dataclass(frozen=True)
class FetchError:
    kind: FetchErrorKind
    message: str
    status_code: Optional[int] = None
    error_code: Optional[str] = None
    attempts: int = 1

    @property
    def retryable(self) -> bool:
        """Whether offering the user a retry makes sense"""
        if self.kind is FetchErrorKind.HTTP:
            return self.status_code is not None and self.status_code >= 500
        return self.kind is not FetchErrorKind.INVALID_RESPONSE


class FetchFailed(Exception):
    def __init__(self, error: FetchError):
        super().__init__(error.message)
        self.error = error


@dataclass(frozen=True)
class Result(Generic[T]):
    value: Optional[T] = None
    error: Optional[FetchError] = None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: FetchError) -> "Result[T]":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        if self.error is not None:
            raise FetchFailed(self.error)
        return self.value
