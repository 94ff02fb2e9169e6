"""
Data Models Package

This package contains all Pydantic models used in Lendbook.
All data flowing through the ledger must conform to these schemas.
"""

from lendbook.models.obligation import (
    COUNTERPARTY_ROLES,
    AccrualFrequency,
    InterestConfig,
    InterestKind,
    MetricsSnapshot,
    Obligation,
    ObligationDraft,
    ObligationKind,
    ObligationStatus,
    Party,
    PartyRole,
    Payment,
)
from lendbook.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from lendbook.models.portfolio import (
    ObligationView,
    PortfolioSummary,
    RecentTransaction,
    TransactionDirection,
)
from lendbook.models.validation import ValidationIssue, ValidationResult

__all__ = [
    # Ledger models
    "COUNTERPARTY_ROLES",
    "AccrualFrequency",
    "InterestConfig",
    "InterestKind",
    "MetricsSnapshot",
    "Obligation",
    "ObligationDraft",
    "ObligationKind",
    "ObligationStatus",
    "Party",
    "PartyRole",
    "Payment",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
    # Portfolio models
    "ObligationView",
    "PortfolioSummary",
    "RecentTransaction",
    "TransactionDirection",
    # Validation models
    "ValidationIssue",
    "ValidationResult",
]
