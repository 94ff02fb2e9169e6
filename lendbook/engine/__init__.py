"""Obligation accrual engine package."""

from lendbook.engine.clock import Clock, fixed_clock, utc_now
from lendbook.engine.metrics import (
    accrued_interest,
    compute_metrics,
    derive_status,
    is_fully_covered,
    total_paid,
)
from lendbook.engine.periods import (
    calculate_periods,
    days_between,
    months_between,
    to_utc_instant,
)

__all__ = [
    "Clock",
    "accrued_interest",
    "calculate_periods",
    "compute_metrics",
    "days_between",
    "derive_status",
    "fixed_clock",
    "is_fully_covered",
    "months_between",
    "to_utc_instant",
    "total_paid",
    "utc_now",
]
