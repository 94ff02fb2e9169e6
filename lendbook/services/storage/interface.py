"""
Abstract Storage Interface

The ledger store is an injected repository. Flows and queries talk to
this interface only, so the in-memory store used in tests and the JSON
file store used on disk are interchangeable.

Only the operations the ledger needs are offered. In particular there is
no way to edit a payment or to change an obligation's terms: payments are
append-only and the only write to an existing obligation is the one-time
settlement stamp.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import Optional
from uuid import UUID

from lendbook.models.audit import AuditEvent
from lendbook.models.obligation import (
    Obligation,
    ObligationKind,
    Party,
    PartyRole,
    Payment,
)


class LedgerStorageInterface(ABC):
    """
    Abstract interface for ledger storage operations.

    Any storage implementation must implement these methods.
    """

    # -------------------------------------------------------------------------
    # Parties
    # -------------------------------------------------------------------------

    @abstractmethod
    def save_party(self, party: Party) -> Party:
        """
        Save a new party.

        Raises:
            DuplicateError: If a party with the same ID exists
        """

    @abstractmethod
    def get_party(self, party_id: UUID) -> Optional[Party]:
        """Retrieve a party by ID, or None."""

    @abstractmethod
    def update_party(self, party: Party) -> Party:
        """
        Replace a stored party.

        Raises:
            NotFoundError: If the party doesn't exist
        """

    @abstractmethod
    def list_parties(self, role: Optional[PartyRole] = None) -> list[Party]:
        """List parties in insertion order, optionally by role."""

    @abstractmethod
    def delete_party(self, party_id: UUID) -> bool:
        """
        Delete a party by ID.

        Obligations referring to the party are left untouched.

        Returns:
            True if a party was removed
        """

    # -------------------------------------------------------------------------
    # Obligations
    # -------------------------------------------------------------------------

    @abstractmethod
    def save_obligation(self, obligation: Obligation) -> Obligation:
        """
        Save a new obligation.

        Raises:
            DuplicateError: If an obligation with the same ID exists
        """

    @abstractmethod
    def get_obligation(self, obligation_id: UUID) -> Optional[Obligation]:
        """Retrieve an obligation by ID, or None."""

    @abstractmethod
    def list_obligations(
        self,
        kind: Optional[ObligationKind] = None,
        counterparty_id: Optional[UUID] = None,
    ) -> list[Obligation]:
        """List obligations in insertion order with optional filters."""

    @abstractmethod
    def stamp_settlement(self, obligation_id: UUID, settled_on: date) -> Obligation:
        """
        Set an obligation's completion date.

        The stamp is written once. Stamping an already settled obligation
        changes nothing and returns it as stored.

        Raises:
            NotFoundError: If the obligation doesn't exist
        """

    @abstractmethod
    def delete_obligation(self, obligation_id: UUID) -> bool:
        """
        Delete an obligation and every payment recorded against it.

        Returns:
            True if the obligation existed
        """

    # -------------------------------------------------------------------------
    # Payments
    # -------------------------------------------------------------------------

    @abstractmethod
    def append_payment(self, payment: Payment) -> Payment:
        """
        Append a payment.

        Raises:
            NotFoundError: If the payment's obligation doesn't exist
            DuplicateError: If a payment with the same ID exists
        """

    @abstractmethod
    def list_payments(self, obligation_id: UUID) -> list[Payment]:
        """Payments of one obligation, in the order they were recorded."""

    @abstractmethod
    def list_all_payments(self, kind: Optional[ObligationKind] = None) -> list[Payment]:
        """All payments, optionally only those against one kind of obligation."""

    # -------------------------------------------------------------------------
    # Maintenance
    # -------------------------------------------------------------------------

    @abstractmethod
    def reset(self) -> None:
        """Delete all parties, obligations and payments."""


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """

    @abstractmethod
    def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: UUID,
    ) -> list[AuditEvent]:
        """All events for one entity, in chronological order."""

    @abstractmethod
    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        """The most recent events, newest first."""


class StorageError(Exception):
    """Base exception for storage operations."""


class NotFoundError(StorageError):
    """Entity not found in storage."""


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
