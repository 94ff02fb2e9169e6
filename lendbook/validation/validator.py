"""
Ledger Input Validation

The accrual engine trusts its inputs. Everything a user types in, a new
obligation or a payment, is checked here first.

Each check yields a ValidationIssue:
- error: the input cannot be recorded (e.g. a non-positive principal)
- warning: the input is suspicious but allowed (e.g. a due date before
  the origination date)

IMPORTANT: Validation NEVER silently fixes issues.
It reports them for the user to review.
"""

from datetime import date, timedelta
from decimal import Decimal
from typing import Optional

from lendbook.config import AppSettings, get_settings
from lendbook.engine.clock import Clock, utc_now
from lendbook.models.obligation import (
    COUNTERPARTY_ROLES,
    InterestKind,
    MetricsSnapshot,
    Obligation,
    ObligationDraft,
)
from lendbook.models.validation import ValidationIssue, ValidationResult
from lendbook.services.storage import LedgerStorageInterface


class LedgerValidator:
    """
    Validates obligation drafts and payments before they are recorded.

    Counterparty checks need storage; without it they are skipped.
    """

    def __init__(
        self,
        storage: Optional[LedgerStorageInterface] = None,
        settings: Optional[AppSettings] = None,
        clock: Clock = utc_now,
    ):
        """
        Initialize validator.

        Args:
            storage: Ledger storage for counterparty lookups.
            settings: Thresholds; loaded from the environment if omitted.
            clock: Source of "today" for future-date checks.
        """
        self._storage = storage
        self._settings = settings or get_settings().app
        self._clock = clock

    def _today(self) -> date:
        return self._clock().date()

    def _max_future_date(self) -> date:
        return self._today() + timedelta(days=self._settings.future_date_tolerance_days)

    def validate_obligation(self, draft: ObligationDraft) -> ValidationResult:
        """
        Validate a new loan or debt.

        Returns:
            ValidationResult with all issues found
        """
        issues = []

        if draft.principal <= 0:
            issues.append(ValidationIssue(
                field="principal",
                issue_type="invalid_value",
                message="Principal amount must be greater than zero",
                severity="error",
            ))
        elif draft.principal > Decimal(str(self._settings.max_principal)):
            issues.append(ValidationIssue(
                field="principal",
                issue_type="suspicious_value",
                message=f"Principal ({draft.principal:,.2f}) seems unusually high",
                severity="warning",
                suggested_fix="Please verify this amount is correct",
            ))

        issues.extend(self._check_counterparty(draft))
        issues.extend(self._check_interest(draft))

        if draft.due_date and draft.due_date < draft.origination_date:
            issues.append(ValidationIssue(
                field="due_date",
                issue_type="inconsistent",
                message="Due date is before the origination date",
                severity="warning",
                suggested_fix="Please verify both dates",
            ))

        if draft.origination_date > self._max_future_date():
            issues.append(ValidationIssue(
                field="origination_date",
                issue_type="future_date",
                message=f"Origination date ({draft.origination_date}) is in the future",
                severity="warning",
                suggested_fix="Please verify the date is correct",
            ))

        return self._result("obligation", issues)

    def _check_counterparty(self, draft: ObligationDraft) -> list[ValidationIssue]:
        expected_role = COUNTERPARTY_ROLES[draft.kind]

        if draft.counterparty_id is None:
            return [ValidationIssue(
                field="counterparty_id",
                issue_type="missing",
                message=f"A {expected_role.value} must be selected",
                severity="error",
            )]

        if self._storage is None:
            return []

        party = self._storage.get_party(draft.counterparty_id)
        if party is None:
            return [ValidationIssue(
                field="counterparty_id",
                issue_type="not_found",
                message=f"Unknown {expected_role.value}: {draft.counterparty_id}",
                severity="error",
            )]
        if party.role != expected_role:
            return [ValidationIssue(
                field="counterparty_id",
                issue_type="invalid_value",
                message=(
                    f"A {draft.kind.value} needs a {expected_role.value}, "
                    f"but {party.full_name} is a {party.role.value}"
                ),
                severity="error",
            )]
        return []

    def _check_interest(self, draft: ObligationDraft) -> list[ValidationIssue]:
        interest = draft.interest
        if not interest.enabled:
            return []

        if interest.kind == InterestKind.NONE:
            return [ValidationIssue(
                field="interest.kind",
                issue_type="inconsistent",
                message="Interest is enabled but no interest type is set; no interest will accrue",
                severity="warning",
            )]

        if interest.value <= 0:
            return [ValidationIssue(
                field="interest.value",
                issue_type="invalid_value",
                message="Interest value must be greater than zero when interest is enabled",
                severity="error",
            )]

        if interest.kind == InterestKind.PERCENTAGE and interest.value > 100:
            return [ValidationIssue(
                field="interest.value",
                issue_type="suspicious_value",
                message=f"Interest rate of {interest.value}% per period seems unusually high",
                severity="warning",
                suggested_fix="Rates are a percent of the principal per period",
            )]
        return []

    def validate_payment(
        self,
        obligation: Obligation,
        amount: Decimal,
        payment_date: date,
        snapshot: Optional[MetricsSnapshot] = None,
    ) -> ValidationResult:
        """
        Validate a payment against an obligation.

        Args:
            obligation: The obligation being paid
            amount: Amount entered
            payment_date: Date entered
            snapshot: Current metrics, for the overpayment check

        Returns:
            ValidationResult with all issues found
        """
        issues = []

        if not amount.is_finite():
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message=f"Payment amount must be a finite number, got {amount}",
                severity="error",
            ))
        elif amount <= 0:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message="Payment amount must be greater than zero",
                severity="error",
            ))
        elif snapshot is not None and amount > snapshot.remaining_balance:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="overpayment",
                message=(
                    f"Payment ({amount:,.2f}) is more than the remaining "
                    f"balance ({snapshot.remaining_balance:,.2f})"
                ),
                severity="warning",
            ))

        if payment_date < obligation.origination_date:
            issues.append(ValidationIssue(
                field="payment_date",
                issue_type="inconsistent",
                message="Payment date is before the origination date",
                severity="warning",
                suggested_fix="Please verify the payment date",
            ))

        if payment_date > self._max_future_date():
            issues.append(ValidationIssue(
                field="payment_date",
                issue_type="future_date",
                message=f"Payment date ({payment_date}) is in the future",
                severity="warning",
            ))

        if obligation.is_settled:
            issues.append(ValidationIssue(
                field="obligation_id",
                issue_type="already_settled",
                message=f"This obligation was fully paid on {obligation.settled_at}",
                severity="warning",
            ))

        return self._result("payment", issues)

    def _result(self, subject: str, issues: list[ValidationIssue]) -> ValidationResult:
        return ValidationResult(
            subject=subject,
            is_valid=not any(issue.severity == "error" for issue in issues),
            issues=issues,
            warnings=[issue.message for issue in issues if issue.severity == "warning"],
        )

    def get_user_friendly_summary(self, result: ValidationResult) -> str:
        """
        Generate a user-friendly summary of validation results.
        """
        if result.is_valid and not result.warnings:
            return "All checks passed."

        lines = []

        if result.has_errors:
            lines.append("Some details need fixing:")
            for issue in result.errors:
                lines.append(f"   - {issue.message}")
                if issue.suggested_fix:
                    lines.append(f"     ({issue.suggested_fix})")

        if result.warnings:
            if lines:
                lines.append("")
            lines.append("Please verify the following:")
            for warning in result.warnings:
                lines.append(f"   - {warning}")

        return "\n".join(lines)
