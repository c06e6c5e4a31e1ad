"""
Per-attempt outcomes.

Every attempt produces exactly one Outcome. The retry policy only ever
looks at outcomes, never at raw exceptions or responses.
"""

from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Success(Generic[T]):
    """The attempt returned a usable result."""
    value: T

    def describe(self) -> str:
        return "success"


@dataclass(frozen=True)
class TransportFailure:
    """
    The request never produced a response.

    ``cancelled`` is True when the failure was caused by the caller's own
    cancellation rather than the network.
    """
    cause: BaseException
    cancelled: bool = False

    def describe(self) -> str:
        if self.cancelled:
            return "cancelled by caller"
        return str(self.cause) or type(self.cause).__name__


@dataclass(frozen=True)
class ApplicationFailure:
    """The service answered with a non-success status code."""
    status_code: int
    cause: Optional[BaseException] = None
    body: Optional[Any] = None

    def describe(self) -> str:
        return f"HTTP {self.status_code}"


Outcome = Union[Success, TransportFailure, ApplicationFailure]
