"""
Duration conversion for socket timeouts.

Sockets take timeouts in milliseconds. Callers may instead say "5 seconds"
with a Duration; this module turns that into milliseconds.

Only MILLISECONDS and SECONDS are supported. The remaining units exist so
that a caller passing one gets a clear InvalidUnitError instead of a
silently wrong timeout.
"""

from dataclasses import dataclass
from enum import Enum

from .errors import InvalidUnitError


class TimeUnit(Enum):
    """Units a Duration may be expressed in."""
    NANOSECONDS = "ns"
    MICROSECONDS = "us"
    MILLISECONDS = "ms"
    SECONDS = "s"
    MINUTES = "min"
    HOURS = "h"
    DAYS = "d"


def convert_to_milliseconds(value: int, unit: TimeUnit) -> int:
    """
    Convert a duration to milliseconds.

    Args:
        value: Duration amount. Anything <= 0 converts to 0.
        unit: Unit of `value`.

    Returns:
        The duration in milliseconds.

    Raises:
        InvalidUnitError: If `unit` is not MILLISECONDS or SECONDS.
    """
    # Non-positive durations never reach the unit check
    if value <= 0:
        return 0

    if unit is TimeUnit.MILLISECONDS:
        return value
    if unit is TimeUnit.SECONDS:
        return value * 1000

    raise InvalidUnitError(f"Invalid unit conversion for timeout duration: {unit!r}")


@dataclass(frozen=True)
class Duration:
    """A signed amount of time in a given unit."""

    value: int
    unit: TimeUnit = TimeUnit.MILLISECONDS

    def to_milliseconds(self) -> int:
        """See convert_to_milliseconds()."""
        return convert_to_milliseconds(self.value, self.unit)

    @classmethod
    def seconds(cls, value: int) -> "Duration":
        return cls(value, TimeUnit.SECONDS)

    @classmethod
    def milliseconds(cls, value: int) -> "Duration":
        return cls(value, TimeUnit.MILLISECONDS)
