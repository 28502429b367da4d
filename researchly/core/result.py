"""
Two-variant result type.

Non-streaming operations return Ok(value) or Err(kind, message) instead of
raising, so the realtime handlers branch on the variant explicitly.

Dependencies: dataclasses
System role: Explicit success/failure values for operation boundaries
"""

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

from researchly.core.exceptions import ErrorKind, ResearchlyException

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful outcome carrying a value."""

    value: T


@dataclass(frozen=True)
class Err:
    """Failed outcome carrying a named kind and a client-safe message."""

    kind: ErrorKind
    message: str

    @classmethod
    def from_exception(cls, exc: ResearchlyException, message: str | None = None) -> "Err":
        """
        Build an Err from a domain exception.

        Args:
            exc: Domain exception
            message: Client-facing message override (defaults to exc.message)

        Returns:
            Err: Failure value with the exception's kind
        """
        return cls(kind=exc.kind, message=message or exc.message)


Result = Union[Ok[T], Err]
