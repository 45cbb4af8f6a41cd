# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

from __future__ import annotations

from abc import ABC, abstractmethod

from budget_alerts.types import Budget, NotificationHistory, Transaction


class LedgerStore(ABC):
    """
    Minimal persistence contract for transactions and budgets.

    Implementors may back this with SQLite, a key-value store, or a JSON
    file. Each write is atomic for a single record; there is no multi-record
    transaction. Write methods report success as a boolean; read failures
    raise :class:`~budget_alerts.errors.LedgerStoreError`.
    """

    # ─── Transactions ─────────────────────────────────────────────────────────

    @abstractmethod
    def get_all_transactions(self) -> list[Transaction]:
        ...

    @abstractmethod
    def add_transaction(self, transaction: Transaction) -> bool:
        ...

    @abstractmethod
    def update_transaction(self, transaction: Transaction) -> bool:
        """Replace the transaction with the same id. False if it does not exist."""
        ...

    @abstractmethod
    def delete_transaction(self, transaction_id: int) -> bool:
        ...

    @abstractmethod
    def clear_transactions(self) -> None:
        ...

    # ─── Budgets ──────────────────────────────────────────────────────────────

    @abstractmethod
    def get_all_budgets(self) -> list[Budget]:
        ...

    @abstractmethod
    def add_budget(self, budget: Budget) -> bool:
        ...

    @abstractmethod
    def update_budget(self, budget: Budget) -> bool:
        """Replace the budget with the same id. False if it does not exist."""
        ...

    @abstractmethod
    def delete_budget(self, budget_id: str) -> bool:
        ...

    @abstractmethod
    def clear_budgets(self) -> None:
        ...


class NotificationHistoryStore(ABC):
    """
    Holds the single NotificationHistory record the notifier reads and
    writes on every check cycle.
    """

    @abstractmethod
    def load(self) -> NotificationHistory:
        """Return a copy of the stored history (a fresh one if none exists)."""
        ...

    @abstractmethod
    def save(self, history: NotificationHistory) -> None:
        ...

    def reset(self) -> None:
        """Clear the last-alert timestamps and force the next check to notify."""
        history = self.load()
        history.reset()
        self.save(history)
