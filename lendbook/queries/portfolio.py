"""
Portfolio Queries

Read-side views over the ledger: obligation listings with live metrics,
dashboard totals and the recent payment feed.

Every figure comes from stored obligations and payments run through the
accrual engine with one evaluation instant per call, so all rows of a
listing or summary agree on "now".
"""

from typing import Optional
from uuid import UUID

from lendbook.engine.clock import Clock, utc_now
from lendbook.engine.metrics import compute_metrics
from lendbook.engine.periods import DateLike
from lendbook.models.obligation import (
    ObligationKind,
    ObligationStatus,
)
from lendbook.models.portfolio import (
    ObligationView,
    PortfolioSummary,
    RecentTransaction,
    TransactionDirection,
)
from lendbook.services.storage import LedgerStorageInterface


class PortfolioQueries:
    """Queries across all obligations in a ledger."""

    def __init__(
        self,
        storage: LedgerStorageInterface,
        clock: Clock = utc_now,
        recent_limit: int = 10,
    ):
        self._storage = storage
        self._clock = clock
        self._recent_limit = recent_limit

    def _counterparty_names(self) -> dict[UUID, str]:
        return {party.id: party.full_name for party in self._storage.list_parties()}

    def obligation_views(
        self,
        kind: Optional[ObligationKind] = None,
        search: Optional[str] = None,
        status: Optional[ObligationStatus] = None,
        as_of: Optional[DateLike] = None,
    ) -> list[ObligationView]:
        """
        List obligations with their current metrics.

        Args:
            kind: Only loans or only debts
            search: Case-insensitive substring of the counterparty's name
            status: Only obligations currently in this status
            as_of: Evaluation instant; defaults to now

        Returns:
            Matching views in storage order
        """
        as_of = as_of or self._clock()
        names = self._counterparty_names()
        needle = search.strip().lower() if search else None

        views = []
        for obligation in self._storage.list_obligations(kind=kind):
            name = names.get(obligation.counterparty_id)
            if needle and (name is None or needle not in name.lower()):
                continue

            metrics = compute_metrics(
                obligation,
                self._storage.list_payments(obligation.id),
                as_of=as_of,
            )
            if status and metrics.status != status:
                continue

            views.append(ObligationView(
                obligation=obligation,
                counterparty_name=name,
                metrics=metrics,
            ))
        return views

    def summary(self, as_of: Optional[DateLike] = None) -> PortfolioSummary:
        """Dashboard totals for loans and debts."""
        summary = PortfolioSummary()

        for view in self.obligation_views(as_of=as_of):
            obligation, metrics = view.obligation, view.metrics
            overdue = metrics.status == ObligationStatus.OVERDUE

            if obligation.kind == ObligationKind.LOAN:
                summary.total_lent += obligation.principal
                summary.total_collected += metrics.total_paid
                summary.outstanding_receivable += metrics.remaining_balance
                summary.overdue_loans += int(overdue)
            else:
                summary.total_borrowed += obligation.principal
                summary.total_paid_back += metrics.total_paid
                summary.outstanding_payable += metrics.remaining_balance
                summary.overdue_debts += int(overdue)

        return summary

    def recent_transactions(self, limit: Optional[int] = None) -> list[RecentTransaction]:
        """
        Latest payments on both sides of the ledger, newest first.

        At most `limit` payments are returned, or the configured
        recent_limit when omitted.

        Payments on loans are incoming, payments on debts outgoing.
        Ties on payment date are broken by recording time.
        """
        names = self._counterparty_names()
        obligations = {o.id: o for o in self._storage.list_obligations()}

        transactions = []
        for payment in self._storage.list_all_payments():
            obligation = obligations.get(payment.obligation_id)
            if obligation is None:
                continue
            direction = (
                TransactionDirection.INCOMING
                if obligation.kind == ObligationKind.LOAN
                else TransactionDirection.OUTGOING
            )
            transactions.append((payment.recorded_at, RecentTransaction(
                payment_id=payment.id,
                obligation_id=obligation.id,
                direction=direction,
                amount=payment.amount,
                payment_date=payment.payment_date,
                method=payment.method,
                counterparty_name=names.get(obligation.counterparty_id),
            )))

        transactions.sort(key=lambda t: (t[1].payment_date, t[0]), reverse=True)
        limit = limit or self._recent_limit
        return [transaction for _, transaction in transactions[:limit]]
