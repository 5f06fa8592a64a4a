"""
=============================================================================
RESULT VALUES
=============================================================================

A Result is what every fallible operation returns instead of raising:

    result = ListeningSocket.create(8080)

    if not result:
        print(result.error)          # ErrorKind.BIND_FAILED
    else:
        listener = result.value

    listener = ListeningSocket.create(8080).unwrap()   # raise on failure

A Result holds EITHER a value OR an ErrorKind, never both.

=============================================================================
"""

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from .errors import ErrorKind, ResultError


T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    """
    Outcome of a fallible operation.

    Attributes:
        value: The produced value (None for operations with no output).
        error: Why the operation failed, or None on success.
    """

    value: Optional[T] = None
    error: Optional[ErrorKind] = None

    @classmethod
    def success(cls, value: Optional[T] = None) -> "Result[T]":
        """Wrap a successful outcome."""
        return cls(value=value)

    @classmethod
    def failure(cls, error: ErrorKind) -> "Result[T]":
        """Wrap a failed outcome."""
        return cls(error=error)

    @property
    def ok(self) -> bool:
        """True if the operation happened."""
        return self.error is None

    def __bool__(self) -> bool:
        return self.ok

    def unwrap(self) -> T:
        """
        Get the value, or raise if the operation failed.

        Raises:
            ResultError: If this Result carries an error.
        """
        if self.error is not None:
            raise ResultError(self.error)
        return self.value

    def value_or(self, default: T) -> T:
        """Get the value, or `default` if the operation failed."""
        return self.value if self.error is None else default
