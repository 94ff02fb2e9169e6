"""
Period Calculator

Counts the accrual periods between an obligation's origination and the
end of its accrual horizon.

Calendar dates are read as the instant at midnight UTC that starts them,
so a date and a datetime can be mixed freely. The count is never
negative: an end before the start gives zero periods.

KNOWN COARSE BEHAVIOUR: monthly periods are a plain calendar-month
difference that ignores the day of month. Jan 31 -> Feb 1 counts one
month while Jan 1 -> Jan 31 counts none. Existing balances depend on
this, so it is kept as is.
"""

from datetime import date, datetime, timedelta, timezone
from typing import Optional, Union

from lendbook.models.obligation import AccrualFrequency

DateLike = Union[date, datetime]

_ONE_DAY = timedelta(days=1)


def to_utc_instant(value: DateLike) -> datetime:
    """Normalize a date or datetime to an aware UTC datetime."""
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)


def days_between(start: DateLike, end: DateLike) -> int:
    """Whole days from start to end, floored and clamped at zero."""
    elapsed = to_utc_instant(end) - to_utc_instant(start)
    return max(0, elapsed // _ONE_DAY)


def months_between(start: DateLike, end: DateLike) -> int:
    """Calendar-month difference, clamped at zero. Day of month is ignored."""
    start_at = to_utc_instant(start)
    end_at = to_utc_instant(end)
    months = (end_at.year - start_at.year) * 12 + (end_at.month - start_at.month)
    return max(0, months)


def calculate_periods(
    start: Optional[DateLike],
    end: Optional[DateLike],
    frequency: Union[AccrualFrequency, str],
) -> int:
    """
    Number of accrual periods elapsed between start and end.

    Args:
        start: First day of accrual (origination date)
        end: End of the accrual horizon
        frequency: Accrual frequency; unknown values yield zero periods

    Returns:
        Non-negative period count
    """
    if start is None or end is None:
        return 0

    try:
        frequency = AccrualFrequency(frequency)
    except ValueError:
        return 0

    if frequency == AccrualFrequency.DAILY:
        return days_between(start, end)
    if frequency == AccrualFrequency.WEEKLY:
        # A started week is a full period
        return -(-days_between(start, end) // 7)
    return months_between(start, end)
