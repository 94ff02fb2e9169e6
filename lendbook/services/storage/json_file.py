"""
JSON File Storage Implementation

Keeps the ledger in memory and writes the whole of it to one JSON
document after every change. The file is read once, when the store is
created.

Writes go to a temporary file beside the target which then replaces it,
so a crash mid-write leaves the previous document intact. Transient
filesystem errors are retried.

TRADEOFFS:
- The whole ledger is rewritten on each change (fine for a personal ledger)
- A write that still fails after retries rolls memory back to the last
  document on disk, so a failed change can safely be tried again
"""

import json
import os
from pathlib import Path
from typing import Any, Union

import structlog
from pydantic import ValidationError
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from lendbook.models.obligation import Obligation, Party, Payment
from lendbook.services.storage.interface import StorageError
from lendbook.services.storage.memory import InMemoryLedgerStorage

logger = structlog.get_logger(__name__)

DOCUMENT_VERSION = 1


class JsonFileLedgerStorage(InMemoryLedgerStorage):
    """
    Ledger storage persisted as a single JSON document.

    Document layout:
        {"version": 1, "parties": [...], "obligations": [...], "payments": [...]}
    """

    def __init__(self, path: Union[str, Path]):
        super().__init__()
        self._path = Path(path)
        self._loading = False
        if self._path.exists():
            self._load()
        self._commit()

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> None:
        """Read the document into memory."""
        try:
            document = json.loads(self._path.read_text(encoding="utf-8"))
        except OSError as e:
            raise StorageError(f"Failed to read ledger file {self._path}: {e}") from e
        except json.JSONDecodeError as e:
            raise StorageError(f"Ledger file is not valid JSON: {self._path}: {e}") from e

        if not isinstance(document, dict):
            raise StorageError(f"Ledger file has an unexpected layout: {self._path}")

        self._loading = True
        try:
            for item in document.get("parties", []):
                self.save_party(Party.model_validate(item))
            for item in document.get("obligations", []):
                self.save_obligation(Obligation.model_validate(item))
            for item in document.get("payments", []):
                self.append_payment(Payment.model_validate(item))
        except (ValidationError, StorageError) as e:
            raise StorageError(f"Ledger file contains invalid records: {e}") from e
        finally:
            self._loading = False

        logger.info(
            "ledger_loaded",
            path=str(self._path),
            parties=len(self._parties),
            obligations=len(self._obligations),
            payments=len(self._payments),
        )

    def _commit(self) -> None:
        """Remember the state that matches the file on disk."""
        self._committed = (
            dict(self._parties),
            dict(self._obligations),
            dict(self._payments),
        )

    def _rollback(self) -> None:
        parties, obligations, payments = self._committed
        self._parties = dict(parties)
        self._obligations = dict(obligations)
        self._payments = dict(payments)

    def _to_document(self) -> dict[str, Any]:
        return {
            "version": DOCUMENT_VERSION,
            "parties": [p.model_dump(mode="json") for p in self._parties.values()],
            "obligations": [o.model_dump(mode="json") for o in self._obligations.values()],
            "payments": [p.model_dump(mode="json") for p in self._payments.values()],
        }

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=4),
        retry=retry_if_exception_type(OSError),
        reraise=True,
    )
    def _write_document(self, document: dict[str, Any]) -> None:
        """Atomically replace the ledger file."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        tmp_path.write_text(json.dumps(document, indent=2), encoding="utf-8")
        os.replace(tmp_path, self._path)

    def _changed(self) -> None:
        if self._loading:
            return
        try:
            self._write_document(self._to_document())
        except OSError as e:
            self._rollback()
            logger.error("ledger_write_failed", path=str(self._path), error=str(e))
            raise StorageError(f"Failed to write ledger file {self._path}: {e}") from e
        self._commit()
