"""
Core Data Models for Lendbook

These models define the schemas for everything the ledger stores and
everything the accrual engine returns.

An obligation is either a LOAN (money lent to a borrower) or a DEBT
(money borrowed from a creditor). Both share one shape and one engine.

DESIGN DECISION: Interest terms are frozen. InterestConfig is immutable
and an Obligation's principal/dates/interest are only ever set when it is
created. The single field written later is `settled_at`, and only once.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class InterestKind(str, Enum):
    """How interest is charged per accrual period."""
    NONE = "none"
    PERCENTAGE = "percentage"  # value is a percent of the principal
    FIXED = "fixed"            # value is a flat amount


class AccrualFrequency(str, Enum):
    """Length of one accrual period."""
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class ObligationStatus(str, Enum):
    """
    Derived status of an obligation.

    Never stored. Recomputed from the obligation, its payments and an
    evaluation instant.
    """
    ONGOING = "ongoing"
    PAID = "paid"
    OVERDUE = "overdue"


class ObligationKind(str, Enum):
    """Which side of the ledger an obligation sits on."""
    LOAN = "loan"  # we lent, a borrower owes us
    DEBT = "debt"  # we borrowed, we owe a creditor


class PartyRole(str, Enum):
    """Role of a person in the ledger."""
    LENDER = "lender"
    BORROWER = "borrower"
    CREDITOR = "creditor"


# Counterparty role each obligation kind requires
COUNTERPARTY_ROLES: dict[ObligationKind, PartyRole] = {
    ObligationKind.LOAN: PartyRole.BORROWER,
    ObligationKind.DEBT: PartyRole.CREDITOR,
}


# =============================================================================
# PARTIES
# =============================================================================

class Party(BaseModel):
    """A lender, borrower or creditor."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique party ID"
    )
    role: PartyRole
    full_name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Full name of the person"
    )
    contact_number: str = Field(
        default="",
        max_length=50,
        description="Phone number or other contact"
    )
    address: Optional[str] = Field(
        default=None,
        max_length=500,
    )
    notes: Optional[str] = Field(
        default=None,
        max_length=1000,
    )


# =============================================================================
# OBLIGATIONS
# =============================================================================

class InterestConfig(BaseModel):
    """
    Interest terms of an obligation.

    `value` is a percent number for PERCENTAGE (5 means 5% of the
    principal per period) and a currency amount for FIXED.
    """
    model_config = ConfigDict(frozen=True)

    enabled: bool = False
    kind: InterestKind = InterestKind.NONE
    value: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        description="Rate in percent or flat amount, depending on kind"
    )
    frequency: AccrualFrequency = AccrualFrequency.MONTHLY

    @classmethod
    def disabled(cls) -> "InterestConfig":
        return cls()


class ObligationDraft(BaseModel):
    """
    User input for a new obligation.

    This is PROPOSED data. It goes through LedgerValidator before an
    Obligation is created from it, so amounts are not range-checked here.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    kind: ObligationKind
    counterparty_id: Optional[UUID] = None
    lender_id: Optional[UUID] = None
    principal: Decimal
    origination_date: date
    due_date: Optional[date] = None
    interest: InterestConfig = Field(default_factory=InterestConfig)
    notes: Optional[str] = Field(default=None, max_length=1000)


class Obligation(BaseModel):
    """
    A loan or a debt.

    `settled_at` is the completion date. Once set, interest stops
    accruing at that date no matter when metrics are computed.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique obligation ID"
    )
    kind: ObligationKind
    counterparty_id: UUID = Field(
        ...,
        description="Borrower for a loan, creditor for a debt"
    )
    lender_id: Optional[UUID] = None
    principal: Decimal = Field(
        ...,
        ge=0,
        description="Amount lent or borrowed, excluding interest"
    )
    origination_date: date
    due_date: Optional[date] = None
    interest: InterestConfig = Field(default_factory=InterestConfig)
    settled_at: Optional[date] = Field(
        default=None,
        description="Date cumulative payments first covered the total payable"
    )
    created_at: datetime = Field(default_factory=_utc_now)
    notes: Optional[str] = Field(default=None, max_length=1000)

    @property
    def is_settled(self) -> bool:
        return self.settled_at is not None

    @classmethod
    def from_draft(cls, draft: ObligationDraft) -> "Obligation":
        """Build an obligation from a validated draft."""
        return cls(
            kind=draft.kind,
            counterparty_id=draft.counterparty_id,
            lender_id=draft.lender_id,
            principal=draft.principal,
            origination_date=draft.origination_date,
            due_date=draft.due_date,
            interest=draft.interest,
            notes=draft.notes,
        )


class Payment(BaseModel):
    """
    A payment against exactly one obligation.

    Payments are append-only: never edited, only removed together with
    their obligation.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(default_factory=uuid4)
    obligation_id: UUID
    amount: Decimal = Field(
        ...,
        gt=0,
        description="Amount paid"
    )
    payment_date: date
    method: str = Field(
        default="Cash",
        max_length=50,
        description="Payment method (cash, bank transfer, ...)"
    )
    remarks: Optional[str] = Field(default=None, max_length=500)
    recorded_at: datetime = Field(default_factory=_utc_now)

    @field_validator("method")
    @classmethod
    def default_method(cls, v: str) -> str:
        """Blank methods are recorded as cash."""
        return v or "Cash"


# =============================================================================
# DERIVED METRICS
# =============================================================================

class MetricsSnapshot(BaseModel):
    """
    Point-in-time metrics of one obligation.

    Derived on demand and never persisted. `remaining_balance` is raw:
    it goes negative when an obligation is overpaid.
    """
    model_config = ConfigDict(frozen=True)

    periods_elapsed: int = Field(ge=0)
    total_interest: Decimal
    total_payable: Decimal
    total_paid: Decimal
    remaining_balance: Decimal
    status: ObligationStatus
