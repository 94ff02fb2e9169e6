"""Shared fixtures for Lendbook tests."""

import os
from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from lendbook.audit import AuditLogger
from lendbook.config import AppSettings, get_settings
from lendbook.engine import fixed_clock
from lendbook.models import (
    AccrualFrequency,
    InterestConfig,
    InterestKind,
    Obligation,
    ObligationKind,
    PartyRole,
)
from lendbook.orchestrator import LedgerService
from lendbook.services.storage import InMemoryAuditStorage, InMemoryLedgerStorage
from lendbook.validation import LedgerValidator

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch):
    """Keep tests independent of the caller's LENDBOOK_* environment."""
    for key in list(os.environ):
        if key.startswith("LENDBOOK_"):
            monkeypatch.delenv(key)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def clock():
    return fixed_clock(NOW)


@pytest.fixture
def app_settings():
    return AppSettings(max_principal=1_000_000, future_date_tolerance_days=7)


@pytest.fixture
def storage():
    return InMemoryLedgerStorage()


@pytest.fixture
def audit_storage():
    return InMemoryAuditStorage()


@pytest.fixture
def ledger(storage, audit_storage, app_settings, clock):
    validator = LedgerValidator(storage, settings=app_settings, clock=clock)
    return LedgerService(
        storage=storage,
        validator=validator,
        audit_logger=AuditLogger(audit_storage),
        clock=clock,
    )


@pytest.fixture
def borrower(ledger):
    return ledger.add_party(PartyRole.BORROWER, "Maria Santos", "09171234567")


@pytest.fixture
def creditor(ledger):
    return ledger.add_party(PartyRole.CREDITOR, "Pedro Reyes", "09281234567")


def monthly_percent(value: str) -> InterestConfig:
    return InterestConfig(
        enabled=True,
        kind=InterestKind.PERCENTAGE,
        value=Decimal(value),
        frequency=AccrualFrequency.MONTHLY,
    )


def make_obligation(**overrides) -> Obligation:
    """Build an obligation with sensible defaults for engine tests."""
    fields = {
        "kind": ObligationKind.LOAN,
        "counterparty_id": "00000000-0000-0000-0000-000000000001",
        "principal": Decimal("10000"),
        "origination_date": date(2024, 1, 1),
    }
    fields.update(overrides)
    return Obligation(**fields)
