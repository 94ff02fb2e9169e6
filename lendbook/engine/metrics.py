"""
Obligation Metrics Engine

Turns an obligation, its payments and an evaluation instant into a
MetricsSnapshot: periods elapsed, interest accrued, total payable,
total paid, remaining balance and status.

GUARANTEES:
- Pure: reads its arguments, touches no storage, allocates a fresh result
- Deterministic for a fixed as_of; the clock is only consulted when
  as_of is omitted
- Never raises on numeric values; callers validate user input first

Interest is simple and non-compounding. Every elapsed period charges
against the original principal only. Accrual stops at `settled_at` once
an obligation has been paid off.
"""

from decimal import Decimal
from typing import Iterable, Optional

from lendbook.engine.clock import Clock, utc_now
from lendbook.engine.periods import DateLike, calculate_periods, to_utc_instant
from lendbook.models.obligation import (
    InterestConfig,
    InterestKind,
    MetricsSnapshot,
    Obligation,
    ObligationStatus,
    Payment,
)

_ZERO = Decimal("0")
_HUNDRED = Decimal("100")


def total_paid(payments: Iterable[Payment]) -> Decimal:
    """Sum of payment amounts; zero for no payments."""
    return sum((payment.amount for payment in payments), _ZERO)


def accrued_interest(
    principal: Decimal,
    interest: InterestConfig,
    periods: int,
) -> Decimal:
    """Interest owed after `periods` accrual periods."""
    if not interest.enabled:
        return _ZERO
    if interest.kind == InterestKind.PERCENTAGE:
        per_period = principal * (interest.value / _HUNDRED)
        return per_period * periods
    if interest.kind == InterestKind.FIXED:
        return interest.value * periods
    return _ZERO


def derive_status(
    remaining_balance: Decimal,
    due_date: Optional[DateLike],
    as_of: DateLike,
) -> ObligationStatus:
    """
    Status from balance and due date, first match wins:

    1. Nothing left to pay -> PAID
    2. Due date set and as_of strictly after it -> OVERDUE
    3. Otherwise -> ONGOING

    The due date is compared as the midnight UTC instant that starts it.
    """
    if remaining_balance <= 0:
        return ObligationStatus.PAID
    if due_date is not None and to_utc_instant(as_of) > to_utc_instant(due_date):
        return ObligationStatus.OVERDUE
    return ObligationStatus.ONGOING


def compute_metrics(
    obligation: Obligation,
    payments: Iterable[Payment],
    as_of: Optional[DateLike] = None,
    clock: Clock = utc_now,
) -> MetricsSnapshot:
    """
    Compute the metrics snapshot of one obligation.

    Args:
        obligation: The loan or debt
        payments: Payments recorded against it, in any order
        as_of: Evaluation instant; defaults to clock()
        clock: Source of "now" when as_of is omitted

    Returns:
        A new MetricsSnapshot
    """
    if as_of is None:
        as_of = clock()

    paid = total_paid(payments)

    # Accrual horizon freezes at settlement
    accrual_end = obligation.settled_at or as_of

    interest = obligation.interest
    periods = 0
    if interest.enabled:
        periods = calculate_periods(
            obligation.origination_date,
            accrual_end,
            interest.frequency,
        )

    total_interest = accrued_interest(obligation.principal, interest, periods)
    total_payable = obligation.principal + total_interest
    remaining = total_payable - paid

    return MetricsSnapshot(
        periods_elapsed=periods,
        total_interest=total_interest,
        total_payable=total_payable,
        total_paid=paid,
        remaining_balance=remaining,
        status=derive_status(remaining, obligation.due_date, as_of),
    )


def is_fully_covered(snapshot: MetricsSnapshot, additional_amount: Decimal) -> bool:
    """Would paying `additional_amount` more cover the total payable?"""
    return snapshot.total_paid + additional_amount >= snapshot.total_payable
