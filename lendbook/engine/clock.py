"""
Clock

The engine and the flows never read the wall clock directly. They take a
Clock, any zero-argument callable returning an aware datetime, and
default to utc_now.
"""

from datetime import datetime, timezone
from typing import Callable

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Current instant in UTC."""
    return datetime.now(timezone.utc)


def fixed_clock(instant: datetime) -> Clock:
    """
    Return a clock pinned to one instant.

    Naive datetimes are read as UTC.
    """
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)

    def _now() -> datetime:
        return instant

    return _now
