"""
In-Memory Storage Implementation

Holds the whole ledger in dictionaries. Used directly in tests and as
the working set of the JSON file store.
"""

from datetime import date
from typing import Optional
from uuid import UUID

import structlog

from lendbook.models.audit import AuditEvent
from lendbook.models.obligation import (
    Obligation,
    ObligationKind,
    Party,
    PartyRole,
    Payment,
)
from lendbook.services.storage.interface import (
    AuditStorageInterface,
    DuplicateError,
    LedgerStorageInterface,
    NotFoundError,
)

logger = structlog.get_logger(__name__)


class InMemoryLedgerStorage(LedgerStorageInterface):
    """Ledger storage backed by plain dictionaries."""

    def __init__(self):
        self._parties: dict[UUID, Party] = {}
        self._obligations: dict[UUID, Obligation] = {}
        self._payments: dict[UUID, Payment] = {}

    # Parties

    def save_party(self, party: Party) -> Party:
        if party.id in self._parties:
            raise DuplicateError(f"Party already exists: {party.id}")
        self._parties[party.id] = party
        self._changed()
        return party

    def get_party(self, party_id: UUID) -> Optional[Party]:
        return self._parties.get(party_id)

    def update_party(self, party: Party) -> Party:
        if party.id not in self._parties:
            raise NotFoundError(f"Party not found: {party.id}")
        self._parties[party.id] = party
        self._changed()
        return party

    def list_parties(self, role: Optional[PartyRole] = None) -> list[Party]:
        return [
            party for party in self._parties.values()
            if role is None or party.role == role
        ]

    def delete_party(self, party_id: UUID) -> bool:
        if self._parties.pop(party_id, None) is None:
            return False
        self._changed()
        return True

    # Obligations

    def save_obligation(self, obligation: Obligation) -> Obligation:
        if obligation.id in self._obligations:
            raise DuplicateError(f"Obligation already exists: {obligation.id}")
        self._obligations[obligation.id] = obligation
        self._changed()
        return obligation

    def get_obligation(self, obligation_id: UUID) -> Optional[Obligation]:
        return self._obligations.get(obligation_id)

    def list_obligations(
        self,
        kind: Optional[ObligationKind] = None,
        counterparty_id: Optional[UUID] = None,
    ) -> list[Obligation]:
        obligations = []
        for obligation in self._obligations.values():
            if kind and obligation.kind != kind:
                continue
            if counterparty_id and obligation.counterparty_id != counterparty_id:
                continue
            obligations.append(obligation)
        return obligations

    def stamp_settlement(self, obligation_id: UUID, settled_on: date) -> Obligation:
        obligation = self._obligations.get(obligation_id)
        if obligation is None:
            raise NotFoundError(f"Obligation not found: {obligation_id}")

        if obligation.settled_at is not None:
            logger.debug(
                "settlement_already_stamped",
                obligation_id=str(obligation_id),
                settled_at=obligation.settled_at.isoformat(),
            )
            return obligation

        stamped = obligation.model_copy(update={"settled_at": settled_on})
        self._obligations[obligation_id] = stamped
        self._changed()
        return stamped

    def delete_obligation(self, obligation_id: UUID) -> bool:
        if self._obligations.pop(obligation_id, None) is None:
            return False

        # Cascade
        self._payments = {
            payment_id: payment
            for payment_id, payment in self._payments.items()
            if payment.obligation_id != obligation_id
        }
        self._changed()
        return True

    # Payments

    def append_payment(self, payment: Payment) -> Payment:
        if payment.obligation_id not in self._obligations:
            raise NotFoundError(f"Obligation not found: {payment.obligation_id}")
        if payment.id in self._payments:
            raise DuplicateError(f"Payment already exists: {payment.id}")
        self._payments[payment.id] = payment
        self._changed()
        return payment

    def list_payments(self, obligation_id: UUID) -> list[Payment]:
        return [
            payment for payment in self._payments.values()
            if payment.obligation_id == obligation_id
        ]

    def list_all_payments(self, kind: Optional[ObligationKind] = None) -> list[Payment]:
        if kind is None:
            return list(self._payments.values())
        return [
            payment for payment in self._payments.values()
            if self._obligations[payment.obligation_id].kind == kind
        ]

    # Maintenance

    def reset(self) -> None:
        self._parties.clear()
        self._obligations.clear()
        self._payments.clear()
        self._changed()

    def _changed(self) -> None:
        """Hook called after every mutation."""


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only audit log kept in a list."""

    def __init__(self):
        self._events: list[AuditEvent] = []

    def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: UUID,
    ) -> list[AuditEvent]:
        events = [
            event for event in self._events
            if event.entity_type == entity_type and event.entity_id == entity_id
        ]
        events.sort(key=lambda e: e.timestamp)
        return events

    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        events = sorted(self._events, key=lambda e: e.timestamp, reverse=True)
        return events[:limit]
