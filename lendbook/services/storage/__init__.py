"""
Storage Services Package

Provides abstract interfaces and concrete implementations for ledger
storage: in-memory and a local JSON file.
"""

from lendbook.services.storage.interface import (
    AuditStorageInterface,
    DuplicateError,
    LedgerStorageInterface,
    NotFoundError,
    StorageError,
)
from lendbook.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryLedgerStorage,
)
from lendbook.services.storage.json_file import JsonFileLedgerStorage

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "LedgerStorageInterface",
    # Exceptions
    "DuplicateError",
    "NotFoundError",
    "StorageError",
    # Implementations
    "InMemoryAuditStorage",
    "InMemoryLedgerStorage",
    "JsonFileLedgerStorage",
]
