# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

"""
JSON file storage backends.

The ledger is one JSON document holding every transaction and budget; the
notification history is a second, much smaller document. Every read parses
the file from disk so the in-process view stays consistent with other
writers. Every write goes to a temporary sibling file that then replaces the
original, so a crash mid-write never leaves a truncated document behind.
"""

from __future__ import annotations

import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Callable, TypeVar

from pydantic import BaseModel, Field, ValidationError

from budget_alerts.errors import LedgerStoreError
from budget_alerts.storage.interface import LedgerStore, NotificationHistoryStore
from budget_alerts.types import Budget, NotificationHistory, Transaction

logger = logging.getLogger("budget_alerts.storage")

DocumentT = TypeVar("DocumentT", bound=BaseModel)


class _LedgerDocument(BaseModel):
    transactions: list[Transaction] = Field(default_factory=list)
    budgets: list[Budget] = Field(default_factory=list)


def _read_document(path: Path, model: type[DocumentT]) -> DocumentT:
    if not path.exists():
        return model()
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise LedgerStoreError(f"Cannot read {path}: {exc}") from exc
    if not raw.strip():
        return model()
    try:
        return model.model_validate_json(raw)
    except ValidationError as exc:
        raise LedgerStoreError(f"Malformed document in {path}: {exc}") from exc


def _write_document(path: Path, document: BaseModel) -> None:
    payload = document.model_dump_json(indent=2)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        file_descriptor, temp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.")
    except OSError as exc:
        raise LedgerStoreError(f"Cannot write {path}: {exc}") from exc
    try:
        with os.fdopen(file_descriptor, "w", encoding="utf-8") as file_handle:
            file_handle.write(payload)
        os.replace(temp_name, path)
    except OSError as exc:
        Path(temp_name).unlink(missing_ok=True)
        raise LedgerStoreError(f"Cannot write {path}: {exc}") from exc


class JsonFileLedgerStore(LedgerStore):
    """
    Ledger persisted as a single JSON document.

    Parameters
    ----------
    file_path:
        Path to the JSON file. It is created on the first write.
    """

    def __init__(self, file_path: str | Path) -> None:
        self._file_path = Path(file_path)
        self._lock = threading.Lock()

    def _load(self) -> _LedgerDocument:
        return _read_document(self._file_path, _LedgerDocument)

    def _mutate(self, change: Callable[[_LedgerDocument], bool]) -> bool:
        with self._lock:
            try:
                document = self._load()
                if not change(document):
                    return False
                _write_document(self._file_path, document)
            except LedgerStoreError as exc:
                logger.warning(
                    "ledger_write_failed",
                    extra={"path": str(self._file_path), "error": exc.message},
                )
                return False
            return True

    # ─── Transactions ─────────────────────────────────────────────────────────

    def get_all_transactions(self) -> list[Transaction]:
        with self._lock:
            return self._load().transactions

    def add_transaction(self, transaction: Transaction) -> bool:
        def change(document: _LedgerDocument) -> bool:
            if any(existing.id == transaction.id for existing in document.transactions):
                return False
            document.transactions.append(transaction)
            return True

        return self._mutate(change)

    def update_transaction(self, transaction: Transaction) -> bool:
        def change(document: _LedgerDocument) -> bool:
            for index, existing in enumerate(document.transactions):
                if existing.id == transaction.id:
                    document.transactions[index] = transaction
                    return True
            return False

        return self._mutate(change)

    def delete_transaction(self, transaction_id: int) -> bool:
        def change(document: _LedgerDocument) -> bool:
            kept = [item for item in document.transactions if item.id != transaction_id]
            if len(kept) == len(document.transactions):
                return False
            document.transactions = kept
            return True

        return self._mutate(change)

    def clear_transactions(self) -> None:
        def change(document: _LedgerDocument) -> bool:
            document.transactions = []
            return True

        self._mutate(change)

    # ─── Budgets ──────────────────────────────────────────────────────────────

    def get_all_budgets(self) -> list[Budget]:
        with self._lock:
            return self._load().budgets

    def add_budget(self, budget: Budget) -> bool:
        def change(document: _LedgerDocument) -> bool:
            if any(existing.id == budget.id for existing in document.budgets):
                return False
            document.budgets.append(budget)
            return True

        return self._mutate(change)

    def update_budget(self, budget: Budget) -> bool:
        def change(document: _LedgerDocument) -> bool:
            for index, existing in enumerate(document.budgets):
                if existing.id == budget.id:
                    document.budgets[index] = budget
                    return True
            return False

        return self._mutate(change)

    def delete_budget(self, budget_id: str) -> bool:
        def change(document: _LedgerDocument) -> bool:
            kept = [item for item in document.budgets if item.id != budget_id]
            if len(kept) == len(document.budgets):
                return False
            document.budgets = kept
            return True

        return self._mutate(change)

    def clear_budgets(self) -> None:
        def change(document: _LedgerDocument) -> bool:
            document.budgets = []
            return True

        self._mutate(change)


class JsonFileHistoryStore(NotificationHistoryStore):
    """Notification history persisted as a small JSON document."""

    def __init__(self, file_path: str | Path) -> None:
        self._file_path = Path(file_path)

    def load(self) -> NotificationHistory:
        return _read_document(self._file_path, NotificationHistory)

    def save(self, history: NotificationHistory) -> None:
        _write_document(self._file_path, history)
