"""
Audit Models for Lendbook

Every change to the ledger is recorded as an audit event: parties
added or removed, obligations created or deleted, payments recorded,
settlements stamped.

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Parties
    PARTY_ADDED = "party_added"
    PARTY_UPDATED = "party_updated"
    PARTY_DELETED = "party_deleted"

    # Obligations
    OBLIGATION_CREATED = "obligation_created"
    OBLIGATION_DELETED = "obligation_deleted"
    OBLIGATION_SETTLED = "obligation_settled"

    # Payments
    PAYMENT_RECORDED = "payment_recorded"

    # Validation
    VALIDATION_FAILED = "validation_failed"

    # System events
    LEDGER_RESET = "ledger_reset"
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'obligation', 'payment', 'party')"
    )
    entity_id: Optional[UUID] = None

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(default_factory=dict)

    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": str(self.entity_id) if self.entity_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.obligation_created(obligation_id, "loan", amount)
        event = AuditEventBuilder.payment_recorded(payment_id, obligation_id, amount, paid_on)
    """

    @staticmethod
    def party_added(party_id: UUID, role: str, full_name: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PARTY_ADDED,
            entity_type="party",
            entity_id=party_id,
            description=f"{role.capitalize()} added: {full_name}",
            details={"role": role, "full_name": full_name},
        )

    @staticmethod
    def party_updated(party_id: UUID, fields: list[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PARTY_UPDATED,
            entity_type="party",
            entity_id=party_id,
            description=f"Party updated: {', '.join(fields)}",
            details={"fields": fields},
        )

    @staticmethod
    def party_deleted(party_id: UUID) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PARTY_DELETED,
            entity_type="party",
            entity_id=party_id,
            description="Party deleted",
        )

    @staticmethod
    def obligation_created(
        obligation_id: UUID,
        kind: str,
        principal: Decimal,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.OBLIGATION_CREATED,
            entity_type="obligation",
            entity_id=obligation_id,
            description=f"{kind.capitalize()} created with principal {principal}",
            details={"kind": kind, "principal": str(principal)},
        )

    @staticmethod
    def obligation_deleted(obligation_id: UUID, payments_removed: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.OBLIGATION_DELETED,
            severity=AuditSeverity.WARNING,
            entity_type="obligation",
            entity_id=obligation_id,
            description=f"Obligation deleted with {payments_removed} payments",
            details={"payments_removed": payments_removed},
        )

    @staticmethod
    def obligation_settled(obligation_id: UUID, settled_on: date) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.OBLIGATION_SETTLED,
            entity_type="obligation",
            entity_id=obligation_id,
            description=f"Obligation fully paid on {settled_on.isoformat()}",
            details={"settled_at": settled_on.isoformat()},
        )

    @staticmethod
    def payment_recorded(
        payment_id: UUID,
        obligation_id: UUID,
        amount: Decimal,
        payment_date: date,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PAYMENT_RECORDED,
            entity_type="payment",
            entity_id=payment_id,
            description=f"Payment of {amount} recorded",
            details={
                "obligation_id": str(obligation_id),
                "amount": str(amount),
                "payment_date": payment_date.isoformat(),
            },
        )

    @staticmethod
    def validation_failed(
        entity_type: str,
        issues: list[dict],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type=entity_type,
            description=f"{entity_type.capitalize()} validation failed with {len(issues)} issues",
            details={"issues": issues},
        )

    @staticmethod
    def ledger_reset() -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_RESET,
            severity=AuditSeverity.WARNING,
            description="All ledger data deleted",
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
        )
