"""Input validation package."""

from lendbook.validation.validator import LedgerValidator

__all__ = ["LedgerValidator"]
