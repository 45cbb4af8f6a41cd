# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

from __future__ import annotations

import threading

from budget_alerts.storage.interface import LedgerStore, NotificationHistoryStore
from budget_alerts.types import Budget, NotificationHistory, Transaction


class MemoryLedgerStore(LedgerStore):
    """
    In-process ledger store, suitable for tests and short-lived sessions.

    All state is lost when the process exits. Records are immutable pydantic
    models, so reads hand out the stored objects in fresh lists.
    """

    def __init__(
        self,
        transactions: list[Transaction] | None = None,
        budgets: list[Budget] | None = None,
    ) -> None:
        self._lock = threading.Lock()
        self._transactions: dict[int, Transaction] = {
            transaction.id: transaction for transaction in transactions or []
        }
        self._budgets: dict[str, Budget] = {budget.id: budget for budget in budgets or []}

    # ─── Transactions ─────────────────────────────────────────────────────────

    def get_all_transactions(self) -> list[Transaction]:
        with self._lock:
            return list(self._transactions.values())

    def add_transaction(self, transaction: Transaction) -> bool:
        with self._lock:
            if transaction.id in self._transactions:
                return False
            self._transactions[transaction.id] = transaction
            return True

    def update_transaction(self, transaction: Transaction) -> bool:
        with self._lock:
            if transaction.id not in self._transactions:
                return False
            self._transactions[transaction.id] = transaction
            return True

    def delete_transaction(self, transaction_id: int) -> bool:
        with self._lock:
            return self._transactions.pop(transaction_id, None) is not None

    def clear_transactions(self) -> None:
        with self._lock:
            self._transactions.clear()

    # ─── Budgets ──────────────────────────────────────────────────────────────

    def get_all_budgets(self) -> list[Budget]:
        with self._lock:
            return list(self._budgets.values())

    def add_budget(self, budget: Budget) -> bool:
        with self._lock:
            if budget.id in self._budgets:
                return False
            self._budgets[budget.id] = budget
            return True

    def update_budget(self, budget: Budget) -> bool:
        with self._lock:
            if budget.id not in self._budgets:
                return False
            self._budgets[budget.id] = budget
            return True

    def delete_budget(self, budget_id: str) -> bool:
        with self._lock:
            return self._budgets.pop(budget_id, None) is not None

    def clear_budgets(self) -> None:
        with self._lock:
            self._budgets.clear()


class MemoryHistoryStore(NotificationHistoryStore):
    """In-process notification history; starts empty on every run."""

    def __init__(self, history: NotificationHistory | None = None) -> None:
        self._history = history.model_copy(deep=True) if history else NotificationHistory()

    def load(self) -> NotificationHistory:
        return self._history.model_copy(deep=True)

    def save(self, history: NotificationHistory) -> None:
        self._history = history.model_copy(deep=True)
