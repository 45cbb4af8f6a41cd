# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation
from __future__ import annotations

import logging
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Callable

from budget_alerts.aggregator import (
    TransactionFilter,
    current_month_expense,
    current_month_income,
    current_month_transactions,
    filter_transactions,
    same_category,
)
from budget_alerts.errors import (
    BudgetNotFoundError,
    DuplicateBudgetError,
    LedgerStoreError,
    TransactionNotFoundError,
)
from budget_alerts.storage.interface import LedgerStore
from budget_alerts.types import Budget, Transaction

logger = logging.getLogger("budget_alerts.ledger")


def _local_now() -> datetime:
    return datetime.now().astimezone()


class BudgetManager:
    """
    Create / update / delete / query budgets on top of a LedgerStore.

    Write methods return True on success and False on failure (duplicate,
    unknown id, store failure); the reason is logged. At most one *active*
    budget may exist per (category, period); this is checked when a budget is
    added, not when it is updated.

    ``on_budget_updated`` is called with the new budget after every
    successful update. The tracker wires it to the notifier's history reset.
    """

    def __init__(
        self,
        store: LedgerStore,
        on_budget_updated: Callable[[Budget], object] | None = None,
    ) -> None:
        self._store = store
        self._on_budget_updated = on_budget_updated

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_all_budgets(self) -> list[Budget]:
        return self._store.get_all_budgets()

    def get_active_budgets(self) -> list[Budget]:
        return [budget for budget in self._store.get_all_budgets() if budget.is_active]

    def get_budget_by_id(self, budget_id: str) -> Budget | None:
        for budget in self._store.get_all_budgets():
            if budget.id == budget_id:
                return budget
        return None

    def get_budget_for_category(self, category: str) -> Budget | None:
        """First active budget for ``category`` (case-insensitive)."""
        for budget in self.get_active_budgets():
            if same_category(budget.category, category):
                return budget
        return None

    def require_budget(self, budget_id: str) -> Budget:
        """
        Return the budget with ``budget_id``.

        Raises:
            BudgetNotFoundError: If no such budget exists.
        """
        budget = self.get_budget_by_id(budget_id)
        if budget is None:
            raise BudgetNotFoundError(budget_id)
        return budget

    def ensure_unique(self, budget: Budget) -> None:
        """
        Raises:
            DuplicateBudgetError: If another active budget already covers the
                same category and period.
        """
        if not budget.is_active:
            return
        for existing in self.get_active_budgets():
            if existing.period is budget.period and same_category(existing.category, budget.category):
                raise DuplicateBudgetError(budget.category, budget.period.value, existing.id)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add_budget(self, budget: Budget) -> bool:
        """Store a new budget. False if it duplicates an active one."""
        try:
            self.ensure_unique(budget)
        except DuplicateBudgetError as exc:
            logger.info(
                "budget_rejected",
                extra={"code": exc.code, "category": exc.category, "period": exc.period},
            )
            return False
        except LedgerStoreError as exc:
            logger.error("budget_store_unavailable", extra={"error": exc.message})
            return False

        added = self._store.add_budget(budget)
        if added:
            logger.info("budget_added", extra={"budget_id": budget.id, "category": budget.category})
        return added

    def update_budget(self, budget: Budget) -> bool:
        """Replace the budget with the same id. False if the id is unknown."""
        if not self._store.update_budget(budget):
            logger.info(
                "budget_update_failed",
                extra={"code": "BUDGET_NOT_FOUND", "budget_id": budget.id},
            )
            return False

        logger.info("budget_updated", extra={"budget_id": budget.id, "category": budget.category})
        if self._on_budget_updated is not None:
            self._on_budget_updated(budget)
        return True

    def delete_budget(self, budget_id: str) -> bool:
        """Hard-delete a budget. Irreversible."""
        deleted = self._store.delete_budget(budget_id)
        logger.info("budget_deleted" if deleted else "budget_delete_failed", extra={"budget_id": budget_id})
        return deleted

    def deactivate_budget(self, budget_id: str) -> bool:
        """
        Soft-delete a budget by clearing ``is_active``.

        Goes through :meth:`update_budget`, so the update hook fires. There is
        no reactivation API.
        """
        try:
            budget = self.require_budget(budget_id)
        except (BudgetNotFoundError, LedgerStoreError) as exc:
            logger.info("budget_deactivate_failed", extra={"code": exc.code, "budget_id": budget_id})
            return False
        return self.update_budget(budget.model_copy(update={"is_active": False}))

    def clear_all_budgets(self) -> None:
        self._store.clear_budgets()


class TransactionManager:
    """
    Create / update / delete / query transactions on top of a LedgerStore.

    Identifiers are assigned here: the first transaction gets 1, every later
    one gets the current maximum plus one.
    """

    def __init__(self, store: LedgerStore, clock: Callable[[], datetime] | None = None) -> None:
        self._store = store
        self._clock: Callable[[], datetime] = clock if clock is not None else _local_now

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add_transaction(self, transaction: Transaction) -> int:
        """
        Store a transaction under a freshly assigned id.

        Returns:
            The new id, or 0 if the store rejected the write.
        """
        try:
            existing = self._store.get_all_transactions()
        except LedgerStoreError as exc:
            logger.error("transaction_store_unavailable", extra={"error": exc.message})
            return 0

        new_id = max((item.id for item in existing), default=0) + 1
        stored = transaction.model_copy(update={"id": new_id})
        if not self._store.add_transaction(stored):
            logger.error("transaction_add_failed", extra={"transaction_id": new_id})
            return 0

        logger.info("transaction_added", extra={"transaction_id": new_id, "category": stored.category})
        return new_id

    def update_transaction(self, transaction: Transaction) -> bool:
        updated = self._store.update_transaction(transaction)
        if not updated:
            logger.info(
                "transaction_update_failed",
                extra={"code": "TRANSACTION_NOT_FOUND", "transaction_id": transaction.id},
            )
        return updated

    def delete_transaction(self, transaction_id: int) -> bool:
        deleted = self._store.delete_transaction(transaction_id)
        if not deleted:
            logger.info(
                "transaction_delete_failed",
                extra={"code": "TRANSACTION_NOT_FOUND", "transaction_id": transaction_id},
            )
        return deleted

    def clear_all_transactions(self) -> None:
        self._store.clear_transactions()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_all_transactions(self) -> list[Transaction]:
        return self._store.get_all_transactions()

    def get_transaction_by_id(self, transaction_id: int) -> Transaction | None:
        for transaction in self._store.get_all_transactions():
            if transaction.id == transaction_id:
                return transaction
        return None

    def require_transaction(self, transaction_id: int) -> Transaction:
        """
        Raises:
            TransactionNotFoundError: If no such transaction exists.
        """
        transaction = self.get_transaction_by_id(transaction_id)
        if transaction is None:
            raise TransactionNotFoundError(transaction_id)
        return transaction

    def get_transactions(self, transaction_filter: TransactionFilter | None = None) -> list[Transaction]:
        return filter_transactions(self._store.get_all_transactions(), transaction_filter)

    def get_current_month_transactions(self, now: datetime | None = None) -> list[Transaction]:
        return current_month_transactions(self._store.get_all_transactions(), now or self._clock())

    def get_current_month_income(self, now: datetime | None = None) -> Decimal:
        return current_month_income(self._store.get_all_transactions(), now or self._clock())

    def get_current_month_expense(self, now: datetime | None = None) -> Decimal:
        return current_month_expense(self._store.get_all_transactions(), now or self._clock())

    def get_current_month_balance(self, now: datetime | None = None) -> Decimal:
        """Income minus expense for the calendar month containing ``now``."""
        transactions = self.get_current_month_transactions(now)
        return sum((transaction.signed_amount for transaction in transactions), Decimal("0"))

    def get_last_week_transactions(self, now: datetime | None = None) -> list[Transaction]:
        """Rolling seven days up to ``now``."""
        return self._rolling_window(timedelta(days=7), now)

    def get_last_month_transactions(self, now: datetime | None = None) -> list[Transaction]:
        """Rolling thirty days up to ``now``."""
        return self._rolling_window(timedelta(days=30), now)

    def _rolling_window(self, span: timedelta, now: datetime | None) -> list[Transaction]:
        end = now or self._clock()
        return self.get_transactions(TransactionFilter(since=end - span, until=end))
