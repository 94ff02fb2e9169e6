"""
Portfolio Models

Read-side views built by lendbook.queries: one row per obligation for
listings, and the dashboard totals across all loans and debts.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from lendbook.models.obligation import MetricsSnapshot, Obligation


class TransactionDirection(str, Enum):
    """Cash direction of a payment, from the ledger owner's view."""
    INCOMING = "incoming"  # payment received on a loan
    OUTGOING = "outgoing"  # payment sent on a debt


class ObligationView(BaseModel):
    """An obligation with its counterparty name and current metrics."""

    obligation: Obligation
    counterparty_name: Optional[str] = None
    metrics: MetricsSnapshot


class RecentTransaction(BaseModel):
    """A payment as shown in the activity feed."""

    payment_id: UUID
    obligation_id: UUID
    direction: TransactionDirection
    amount: Decimal
    payment_date: date
    method: str
    counterparty_name: Optional[str] = None

    @property
    def label(self) -> str:
        if self.direction == TransactionDirection.INCOMING:
            return "Payment Received"
        return "Payment Sent"


class PortfolioSummary(BaseModel):
    """
    Totals across the whole ledger.

    Outstanding amounts are sums of raw remaining balances, so an
    overpaid obligation reduces them.
    """

    # Loans (money lent)
    total_lent: Decimal = Decimal("0")
    total_collected: Decimal = Decimal("0")
    outstanding_receivable: Decimal = Decimal("0")
    overdue_loans: int = Field(default=0, ge=0)

    # Debts (money borrowed)
    total_borrowed: Decimal = Decimal("0")
    total_paid_back: Decimal = Decimal("0")
    outstanding_payable: Decimal = Decimal("0")
    overdue_debts: int = Field(default=0, ge=0)

    @property
    def net_position(self) -> Decimal:
        """What others owe us minus what we owe."""
        return self.outstanding_receivable - self.outstanding_payable

    @property
    def overdue_count(self) -> int:
        return self.overdue_loans + self.overdue_debts
