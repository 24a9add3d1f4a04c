"""
Tagged results returned by the event query service.

Queries never raise across the service boundary. They return either
``Ok(value)`` or ``NotFound(message)``; the ``reason`` on a ``NotFound``
tells apart missing data, malformed input and storage failures while the
caller only needs the message.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, Optional, TypeVar, Union

from workday_agent.utils.error_handling import AppError, StorageError, ValidationError

T = TypeVar("T")


class FailureReason(Enum):
    """Why a query produced no result."""

    NOT_FOUND = "not_found"
    VALIDATION = "validation"
    IO = "io"


@dataclass(frozen=True)
class Ok(Generic[T]):
    """A successful query result."""

    value: T
    ok = True


@dataclass(frozen=True)
class NotFound:
    """
    A failed query result.

    Attributes:
        message: Human-readable text suitable for the end user
        reason: Class of failure
        next_event: For time lookups, the nearest upcoming event, if any
    """

    message: str
    reason: FailureReason = FailureReason.NOT_FOUND
    next_event: Optional[Any] = None
    ok = False

    @classmethod
    def from_error(cls, error: AppError) -> "NotFound":
        """Normalize an application error into a failed result."""
        if isinstance(error, StorageError):
            return cls(f"Failed to read events: {error.message}", FailureReason.IO)
        if isinstance(error, ValidationError):
            return cls(error.message, FailureReason.VALIDATION)
        return cls(error.message, FailureReason.NOT_FOUND, error.details.get("next_event"))


QueryResult = Union[Ok[T], NotFound]
