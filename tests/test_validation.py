"""
Tests for LedgerValidator.
"""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from lendbook.config import AppSettings
from lendbook.engine import compute_metrics
from lendbook.models import (
    InterestConfig,
    InterestKind,
    ObligationDraft,
    ObligationKind,
    Party,
    PartyRole,
)
from lendbook.validation import LedgerValidator

from conftest import make_obligation, monthly_percent


@pytest.fixture
def validator(storage, app_settings, clock):
    return LedgerValidator(storage, settings=app_settings, clock=clock)


@pytest.fixture
def maria(storage):
    return storage.save_party(Party(role=PartyRole.BORROWER, full_name="Maria Santos"))


def draft_for(party, **overrides) -> ObligationDraft:
    fields = {
        "kind": ObligationKind.LOAN,
        "counterparty_id": party.id,
        "principal": Decimal("10000"),
        "origination_date": date(2024, 1, 1),
        "due_date": date(2024, 12, 31),
    }
    fields.update(overrides)
    return ObligationDraft(**fields)


def issue_types(result) -> set[str]:
    return {issue.issue_type for issue in result.issues}


class TestObligationValidation:
    """Tests for validate_obligation."""

    def test_valid_draft(self, validator, maria):
        """Test a clean draft passes with no issues."""
        result = validator.validate_obligation(draft_for(maria, interest=monthly_percent("5")))
        assert result.is_valid is True
        assert result.issues == []
        assert result.subject == "obligation"

    @pytest.mark.parametrize("principal", ["0", "-1"])
    def test_non_positive_principal(self, validator, maria, principal):
        """Test principal must be greater than zero."""
        result = validator.validate_obligation(draft_for(maria, principal=Decimal(principal)))
        assert result.is_valid is False
        assert [issue.field for issue in result.errors] == ["principal"]

    def test_high_principal_is_a_warning(self, validator, maria):
        """Test a principal above the threshold is flagged, not rejected."""
        result = validator.validate_obligation(draft_for(maria, principal=Decimal("2000000")))
        assert result.is_valid is True
        assert "suspicious_value" in issue_types(result)
        assert len(result.warnings) == 1

    def test_missing_counterparty(self, validator):
        """Test a draft with no counterparty."""
        draft = ObligationDraft(
            kind=ObligationKind.DEBT,
            principal=Decimal("100"),
            origination_date=date(2024, 1, 1),
        )
        result = validator.validate_obligation(draft)
        assert result.is_valid is False
        assert "missing" in issue_types(result)
        assert "creditor" in result.errors[0].message

    def test_unknown_counterparty(self, validator):
        """Test a counterparty ID that isn't stored."""
        party = Party(role=PartyRole.BORROWER, full_name="Ghost")
        result = validator.validate_obligation(draft_for(party))
        assert result.is_valid is False
        assert "not_found" in issue_types(result)

    def test_counterparty_role_must_match_kind(self, validator, maria):
        """Test a debt cannot name a borrower as creditor."""
        result = validator.validate_obligation(draft_for(maria, kind=ObligationKind.DEBT))
        assert result.is_valid is False
        assert "Maria Santos is a borrower" in result.errors[0].message

    def test_counterparty_unchecked_without_storage(self, app_settings, clock):
        """Test counterparty lookups are skipped when no storage is given."""
        validator = LedgerValidator(settings=app_settings, clock=clock)
        draft = ObligationDraft(
            kind=ObligationKind.LOAN,
            counterparty_id=uuid4(),
            principal=Decimal("100"),
            origination_date=date(2024, 1, 1),
        )
        assert validator.validate_obligation(draft).is_valid is True

    def test_enabled_interest_needs_value(self, validator, maria):
        """Test enabled interest with a zero value is rejected."""
        interest = InterestConfig(enabled=True, kind=InterestKind.FIXED, value=Decimal("0"))
        result = validator.validate_obligation(draft_for(maria, interest=interest))
        assert result.is_valid is False
        assert result.errors[0].field == "interest.value"

    def test_enabled_interest_without_kind(self, validator, maria):
        """Test enabled interest of kind NONE is allowed with a warning."""
        interest = InterestConfig(enabled=True, kind=InterestKind.NONE)
        result = validator.validate_obligation(draft_for(maria, interest=interest))
        assert result.is_valid is True
        assert "inconsistent" in issue_types(result)

    def test_disabled_interest_is_not_checked(self, validator, maria):
        """Test terms of disabled interest are ignored."""
        interest = InterestConfig(enabled=False, kind=InterestKind.FIXED, value=Decimal("0"))
        result = validator.validate_obligation(draft_for(maria, interest=interest))
        assert result.issues == []

    def test_high_percentage_is_a_warning(self, validator, maria):
        """Test a rate above 100% per period is flagged."""
        result = validator.validate_obligation(draft_for(maria, interest=monthly_percent("150")))
        assert result.is_valid is True
        assert "suspicious_value" in issue_types(result)

    def test_due_date_before_origination(self, validator, maria):
        """Test reversed dates are flagged, not rejected."""
        result = validator.validate_obligation(draft_for(maria, due_date=date(2023, 12, 1)))
        assert result.is_valid is True
        assert "inconsistent" in issue_types(result)

    def test_future_origination(self, validator, maria):
        """Test an origination date beyond the tolerance window."""
        # clock is 2024-06-01, tolerance 7 days
        within = validator.validate_obligation(draft_for(maria, origination_date=date(2024, 6, 8)))
        beyond = validator.validate_obligation(draft_for(maria, origination_date=date(2024, 6, 9)))
        assert "future_date" not in issue_types(within)
        assert "future_date" in issue_types(beyond)
        assert beyond.is_valid is True

    def test_settings_default_from_environment(self, monkeypatch, storage, maria, clock):
        """Test thresholds are read from LENDBOOK_* variables when not given."""
        monkeypatch.setenv("LENDBOOK_MAX_PRINCIPAL", "500")
        validator = LedgerValidator(storage, clock=clock)
        result = validator.validate_obligation(draft_for(maria, principal=Decimal("600")))
        assert "suspicious_value" in issue_types(result)

    def test_explicit_settings(self, storage, maria, clock):
        """Test explicit settings take precedence over the environment."""
        validator = LedgerValidator(
            storage,
            settings=AppSettings(max_principal=100, future_date_tolerance_days=0),
            clock=clock,
        )
        result = validator.validate_obligation(draft_for(maria, origination_date=date(2024, 6, 2)))
        assert {"suspicious_value", "future_date"} <= issue_types(result)


class TestPaymentValidation:
    """Tests for validate_payment."""

    def test_valid_payment(self, validator):
        """Test a clean payment."""
        loan = make_obligation()
        result = validator.validate_payment(loan, Decimal("500"), date(2024, 3, 1))
        assert result.is_valid is True
        assert result.issues == []
        assert result.subject == "payment"

    @pytest.mark.parametrize("amount", ["0", "-20"])
    def test_non_positive_amount(self, validator, amount):
        """Test payment amounts must be greater than zero."""
        result = validator.validate_payment(make_obligation(), Decimal(amount), date(2024, 3, 1))
        assert result.is_valid is False
        assert result.errors[0].field == "amount"

    @pytest.mark.parametrize("amount", ["NaN", "Infinity", "-Infinity"])
    def test_amount_must_be_finite(self, validator, amount):
        """Test NaN and infinite payment amounts are errors."""
        loan = make_obligation(principal=Decimal("1000"))
        snapshot = compute_metrics(loan, [], as_of=date(2024, 6, 1))
        result = validator.validate_payment(loan, Decimal(amount), date(2024, 3, 1), snapshot)
        assert result.is_valid is False
        assert result.errors[0].field == "amount"
        assert "finite" in result.errors[0].message

    def test_overpayment_is_a_warning(self, validator):
        """Test paying more than the remaining balance."""
        loan = make_obligation(principal=Decimal("1000"))
        snapshot = compute_metrics(loan, [], as_of=date(2024, 6, 1))
        result = validator.validate_payment(loan, Decimal("1500"), date(2024, 3, 1), snapshot)
        assert result.is_valid is True
        assert "overpayment" in issue_types(result)

    def test_payment_before_origination(self, validator):
        """Test a payment dated before the obligation began."""
        result = validator.validate_payment(make_obligation(), Decimal("10"), date(2023, 12, 31))
        assert result.is_valid is True
        assert "inconsistent" in issue_types(result)

    def test_future_payment_date(self, validator):
        """Test a payment dated beyond the tolerance window."""
        result = validator.validate_payment(make_obligation(), Decimal("10"), date(2024, 7, 1))
        assert "future_date" in issue_types(result)

    def test_payment_on_settled_obligation(self, validator):
        """Test paying an obligation that is already settled."""
        loan = make_obligation(settled_at=date(2024, 4, 1))
        result = validator.validate_payment(loan, Decimal("10"), date(2024, 5, 1))
        assert result.is_valid is True
        assert "already_settled" in issue_types(result)


class TestUserFriendlySummary:
    """Tests for get_user_friendly_summary."""

    def test_clean_result(self, validator, maria):
        """Test the summary of a result without issues."""
        result = validator.validate_obligation(draft_for(maria))
        assert validator.get_user_friendly_summary(result) == "All checks passed."

    def test_errors_and_warnings(self, validator, maria):
        """Test both sections are listed."""
        result = validator.validate_obligation(draft_for(
            maria,
            principal=Decimal("0"),
            due_date=date(2023, 1, 1),
        ))
        summary = validator.get_user_friendly_summary(result)
        assert "Some details need fixing:" in summary
        assert "Please verify the following:" in summary
        assert "Principal amount must be greater than zero" in summary

