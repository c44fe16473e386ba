"""Result objects returned by the entity services."""
from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from zxsgit.utils.exceptions import AppException

T = TypeVar("T")


@dataclass
class Result(Generic[T]):
    """Outcome of a service operation: a value on success, an error otherwise."""
    ok: bool
    value: Optional[T] = None
    message: Optional[str] = None
    error: Optional[AppException] = None

    @classmethod
    def success(cls, value: Optional[T] = None, message: Optional[str] = None) -> "Result[T]":
        return cls(ok=True, value=value, message=message)

    @classmethod
    def failure(cls, error: AppException) -> "Result[T]":
        return cls(ok=False, message=error.message, error=error)
