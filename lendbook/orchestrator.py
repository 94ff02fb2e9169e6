"""
Main Orchestrator for Lendbook

This module ties together storage, validation, the accrual engine and
the audit log, and defines the ledger flows:
1. Parties (add, update, delete)
2. Obligations (validate -> create; delete with its payments)
3. Payments (validate -> append -> stamp settlement when covered)

The orchestrator enforces the boundaries:
- Nothing is stored without passing validation
- Interest terms are never changed after creation
- The settlement date is stamped once, by the payment that covers the
  total payable, and never moved afterwards
- Every change is audited
"""

from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, NoReturn, Optional, Union
from uuid import UUID

import structlog
from pydantic import BaseModel

from lendbook.audit import AuditLogger, configure_logging
from lendbook.config import Settings, get_settings
from lendbook.engine.clock import Clock, utc_now
from lendbook.engine.metrics import compute_metrics, is_fully_covered
from lendbook.engine.periods import DateLike
from lendbook.models.audit import AuditEventBuilder
from lendbook.models.obligation import (
    MetricsSnapshot,
    Obligation,
    ObligationDraft,
    Party,
    PartyRole,
    Payment,
)
from lendbook.models.validation import ValidationIssue, ValidationResult
from lendbook.queries import PortfolioQueries
from lendbook.services.storage import (
    AuditStorageInterface,
    InMemoryAuditStorage,
    InMemoryLedgerStorage,
    JsonFileLedgerStorage,
    LedgerStorageInterface,
    NotFoundError,
    StorageError,
)
from lendbook.validation import LedgerValidator

logger = structlog.get_logger(__name__)


class LedgerValidationError(Exception):
    """User input failed validation; nothing was stored."""

    def __init__(self, result: ValidationResult):
        self.result = result
        messages = "; ".join(issue.message for issue in result.errors)
        super().__init__(f"Invalid {result.subject}: {messages}")


class PaymentOutcome(BaseModel):
    """Result of recording a payment."""

    payment: Payment
    metrics: MetricsSnapshot
    settled: bool
    warnings: list[str] = []


class LedgerService:
    """
    Orchestrates every change to the ledger.

    Flow for a payment:
    1. Look up the obligation and its current metrics
    2. Validate the amount and date
    3. Append the payment
    4. If the obligation was unsettled and the cumulative paid amount now
       covers the total payable, stamp `settled_at` with the payment date
    """

    def __init__(
        self,
        storage: LedgerStorageInterface,
        validator: Optional[LedgerValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
        clock: Clock = utc_now,
    ):
        self._storage = storage
        self._clock = clock
        self._validator = validator or LedgerValidator(storage, clock=clock)
        self._audit_logger = audit_logger or AuditLogger()

    @property
    def storage(self) -> LedgerStorageInterface:
        return self._storage

    # -------------------------------------------------------------------------
    # Parties
    # -------------------------------------------------------------------------

    def add_party(
        self,
        role: PartyRole,
        full_name: str,
        contact_number: str = "",
        address: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Party:
        """Register a lender, borrower or creditor."""
        party = Party(
            role=role,
            full_name=full_name,
            contact_number=contact_number,
            address=address,
            notes=notes,
        )
        self._storage.save_party(party)
        self._audit_logger.log(AuditEventBuilder.party_added(
            party_id=party.id,
            role=party.role.value,
            full_name=party.full_name,
        ))
        return party

    def update_party(self, party_id: UUID, **changes: Any) -> Party:
        """
        Update a party's details.

        Raises:
            NotFoundError: If the party doesn't exist
            ValueError: If the changes are invalid
        """
        party = self._storage.get_party(party_id)
        if party is None:
            raise NotFoundError(f"Party not found: {party_id}")
        if "id" in changes:
            raise ValueError("A party's ID cannot be changed")

        updated = Party.model_validate({**party.model_dump(), **changes})
        self._storage.update_party(updated)
        self._audit_logger.log(AuditEventBuilder.party_updated(
            party_id=party_id,
            fields=sorted(changes),
        ))
        return updated

    def delete_party(self, party_id: UUID) -> bool:
        """Delete a party. Their obligations are kept."""
        deleted = self._storage.delete_party(party_id)
        if deleted:
            self._audit_logger.log(AuditEventBuilder.party_deleted(party_id))
        return deleted

    # -------------------------------------------------------------------------
    # Obligations
    # -------------------------------------------------------------------------

    def create_obligation(self, draft: ObligationDraft) -> Obligation:
        """
        Validate a draft and store it as a new obligation.

        Raises:
            LedgerValidationError: If validation finds errors
        """
        result = self._validator.validate_obligation(draft)
        self._raise_if_invalid(result)

        obligation = Obligation.from_draft(draft)
        try:
            self._storage.save_obligation(obligation)
        except StorageError as e:
            self._log_storage_failure("create_obligation", e, obligation_id=obligation.id)
            raise
        self._audit_logger.log(AuditEventBuilder.obligation_created(
            obligation_id=obligation.id,
            kind=obligation.kind.value,
            principal=obligation.principal,
        ))
        if result.warnings:
            logger.info(
                "obligation_created_with_warnings",
                obligation_id=str(obligation.id),
                warnings=result.warnings,
            )
        return obligation

    def get_obligation(self, obligation_id: UUID) -> Obligation:
        obligation = self._storage.get_obligation(obligation_id)
        if obligation is None:
            raise NotFoundError(f"Obligation not found: {obligation_id}")
        return obligation

    def get_metrics(
        self,
        obligation_id: UUID,
        as_of: Optional[DateLike] = None,
    ) -> MetricsSnapshot:
        """Current metrics of one obligation."""
        obligation = self.get_obligation(obligation_id)
        return compute_metrics(
            obligation,
            self._storage.list_payments(obligation_id),
            as_of=as_of,
            clock=self._clock,
        )

    def delete_obligation(self, obligation_id: UUID) -> bool:
        """Delete an obligation together with its payments."""
        payments_removed = len(self._storage.list_payments(obligation_id))
        deleted = self._storage.delete_obligation(obligation_id)
        if deleted:
            self._audit_logger.log(AuditEventBuilder.obligation_deleted(
                obligation_id=obligation_id,
                payments_removed=payments_removed,
            ))
        return deleted

    # -------------------------------------------------------------------------
    # Payments
    # -------------------------------------------------------------------------

    def record_payment(
        self,
        obligation_id: UUID,
        amount: Union[Decimal, int, str],
        payment_date: date,
        method: str = "Cash",
        remarks: Optional[str] = None,
    ) -> PaymentOutcome:
        """
        Record a payment against an obligation.

        Raises:
            NotFoundError: If the obligation doesn't exist
            LedgerValidationError: If validation finds errors
            StorageError: If the payment could not be saved
        """
        amount = self._parse_amount(amount)
        obligation = self.get_obligation(obligation_id)
        now = self._clock()

        before = compute_metrics(
            obligation,
            self._storage.list_payments(obligation_id),
            as_of=now,
        )

        result = self._validator.validate_payment(obligation, amount, payment_date, before)
        self._raise_if_invalid(result)

        payment = Payment(
            obligation_id=obligation_id,
            amount=amount,
            payment_date=payment_date,
            method=method,
            remarks=remarks,
        )
        try:
            self._storage.append_payment(payment)
        except StorageError as e:
            self._log_storage_failure("record_payment", e, obligation_id=obligation_id)
            raise
        self._audit_logger.log(AuditEventBuilder.payment_recorded(
            payment_id=payment.id,
            obligation_id=obligation_id,
            amount=amount,
            payment_date=payment_date,
        ))

        settled = False
        if not obligation.is_settled and is_fully_covered(before, amount):
            try:
                obligation = self._storage.stamp_settlement(obligation_id, payment_date)
            except StorageError as e:
                self._log_storage_failure("stamp_settlement", e, obligation_id=obligation_id)
                raise
            settled = True
            self._audit_logger.log(AuditEventBuilder.obligation_settled(
                obligation_id=obligation_id,
                settled_on=payment_date,
            ))

        after = compute_metrics(
            obligation,
            self._storage.list_payments(obligation_id),
            as_of=now,
        )
        return PaymentOutcome(
            payment=payment,
            metrics=after,
            settled=settled,
            warnings=result.warnings,
        )

    # -------------------------------------------------------------------------
    # Maintenance
    # -------------------------------------------------------------------------

    def reset_ledger(self) -> None:
        """Delete all ledger data."""
        self._storage.reset()
        self._audit_logger.log(AuditEventBuilder.ledger_reset())

    def _parse_amount(self, amount: Union[Decimal, int, str]) -> Decimal:
        try:
            return Decimal(str(amount))
        except InvalidOperation:
            self._reject(ValidationResult(
                subject="payment",
                is_valid=False,
                issues=[ValidationIssue(
                    field="amount",
                    issue_type="invalid_value",
                    message=f"Payment amount is not a number: {amount!r}",
                    severity="error",
                )],
            ))

    def _raise_if_invalid(self, result: ValidationResult) -> None:
        if not result.is_valid:
            self._reject(result)

    def _reject(self, result: ValidationResult) -> NoReturn:
        self._audit_logger.log_validation_failed(
            entity_type=result.subject,
            issues=[issue.model_dump() for issue in result.errors],
        )
        raise LedgerValidationError(result)

    def _log_storage_failure(
        self,
        operation: str,
        error: StorageError,
        obligation_id: Optional[UUID] = None,
    ) -> None:
        """Audit a write the store could not complete. The caller re-raises."""
        details = {"operation": operation}
        if obligation_id is not None:
            details["obligation_id"] = str(obligation_id)
        self._audit_logger.log_error(
            error_type=type(error).__name__,
            error_message=str(error),
            details=details,
        )


def build_storage(settings: Settings) -> LedgerStorageInterface:
    """Create the ledger storage selected in settings."""
    storage_settings = settings.storage
    if storage_settings.backend == "json":
        return JsonFileLedgerStorage(storage_settings.data_file)
    return InMemoryLedgerStorage()


def create_app_components(
    settings: Optional[Settings] = None,
    clock: Clock = utc_now,
    audit_storage: Optional[AuditStorageInterface] = None,
) -> tuple[LedgerService, PortfolioQueries, LedgerStorageInterface]:
    """
    Factory function to create all application components.

    Args:
        settings: Application settings; loaded from the environment if omitted.
        clock: Source of "now" for every component.
        audit_storage: Where audit events are kept. Defaults to a fresh
            in-memory store, so the audit history lasts only as long as
            the process, whichever ledger backend is selected.

    Returns:
        (ledger_service, portfolio_queries, storage)
    """
    settings = settings or get_settings()

    log_settings = settings.logging
    configure_logging(log_settings.level, log_settings.json_output)

    storage = build_storage(settings)
    audit_logger = AuditLogger(audit_storage or InMemoryAuditStorage())
    validator = LedgerValidator(storage, settings=settings.app, clock=clock)

    ledger_service = LedgerService(
        storage=storage,
        validator=validator,
        audit_logger=audit_logger,
        clock=clock,
    )
    portfolio_queries = PortfolioQueries(
        storage,
        clock=clock,
        recent_limit=settings.app.recent_transactions_limit,
    )

    return ledger_service, portfolio_queries, storage
