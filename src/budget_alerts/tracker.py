# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Callable

from budget_alerts.alerts import AlertSink, CompositeAlertSink, ToastAlertSink, TrayAlertSink
from budget_alerts.config import TrackerConfig
from budget_alerts.evaluator import BudgetEvaluator
from budget_alerts.ledger import BudgetManager, TransactionManager
from budget_alerts.notifier import ThresholdNotifier
from budget_alerts.scheduler import ThresholdScheduler
from budget_alerts.storage.interface import LedgerStore, NotificationHistoryStore
from budget_alerts.storage.memory import MemoryHistoryStore, MemoryLedgerStore
from budget_alerts.types import (
    AlertKind,
    Budget,
    BudgetEvaluation,
    DeliveryResult,
    PeriodKind,
    ThresholdCheckResult,
    Transaction,
)


def _local_now() -> datetime:
    return datetime.now().astimezone()


class BudgetTracker:
    """
    Composes the ledger managers, BudgetEvaluator and ThresholdNotifier into
    the surface a UI layer or scheduler talks to.

    Mutations re-check thresholds straight away:

    - budget create / update / deactivate: notification history is reset and
      the check runs as a forced check.
    - budget delete, transaction add / update / delete: a regular check runs.

    Example::

        tracker = BudgetTracker()
        tracker.add_budget(Budget(category="Food", amount=Decimal("200")))
        tracker.add_transaction(Transaction(title="Groceries", amount=Decimal("80"), category="Food"))
        print(tracker.calculate_budget_usage_percentage(tracker.budgets.get_active_budgets()[0]))
    """

    def __init__(
        self,
        config: TrackerConfig | None = None,
        store: LedgerStore | None = None,
        history: NotificationHistoryStore | None = None,
        sink: AlertSink | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._config = config or TrackerConfig()
        self._clock: Callable[[], datetime] = clock if clock is not None else _local_now
        self.store: LedgerStore = store if store is not None else MemoryLedgerStore()
        self.history: NotificationHistoryStore = history if history is not None else MemoryHistoryStore()
        self.sink: AlertSink = (
            sink if sink is not None else CompositeAlertSink(ToastAlertSink(), TrayAlertSink())
        )

        self.notifier = ThresholdNotifier(
            store=self.store,
            history=self.history,
            sink=self.sink,
            config=self._config.notifier,
            week_start=self._config.week_start,
            clock=self._clock,
        )
        self.evaluator = BudgetEvaluator(week_start=self._config.week_start, config=self._config.notifier)
        self.budgets = BudgetManager(self.store, on_budget_updated=self.notifier.on_budget_updated)
        self.transactions = TransactionManager(self.store, clock=self._clock)

    @property
    def config(self) -> TrackerConfig:
        return self._config

    # ------------------------------------------------------------------
    # Threshold checks
    # ------------------------------------------------------------------

    def check_thresholds(self) -> ThresholdCheckResult:
        """Periodic entry point: call daily, at session start and after edits."""
        return self.notifier.check_thresholds()

    def on_budget_updated(self, budget: Budget | None = None) -> ThresholdCheckResult:
        """Reset notification history and re-check immediately."""
        return self.notifier.on_budget_updated(budget)

    def emit_alert(
        self,
        kind: AlertKind,
        category: str | None,
        spent: Decimal,
        limit: Decimal,
        percent: int,
        period: PeriodKind = PeriodKind.MONTHLY,
    ) -> DeliveryResult:
        return self.notifier.emit_alert(kind, category, spent, limit, percent, period)

    def send_daily_reminder(self) -> DeliveryResult | None:
        return self.notifier.send_daily_reminder()

    def set_budget_alerts_enabled(self, enabled: bool) -> None:
        self._update_notifier_config(budget_alerts_enabled=enabled)

    def set_daily_reminder_enabled(self, enabled: bool) -> None:
        self._update_notifier_config(daily_reminder_enabled=enabled)

    def create_scheduler(self) -> ThresholdScheduler:
        """Scheduler running this tracker's check on ``config.scheduler`` timing."""
        return ThresholdScheduler(self.check_thresholds, config=self._config.scheduler, clock=self._clock)

    # ------------------------------------------------------------------
    # Budget figures (store read failures propagate as LedgerStoreError)
    # ------------------------------------------------------------------

    def calculate_budget_spending(self, budget: Budget) -> Decimal:
        """
        Expense in ``budget``'s category over its current period window.

        Raises:
            LedgerStoreError: If the store cannot be read.
        """
        return self.evaluator.spent(budget, self.store.get_all_transactions(), self._clock())

    def calculate_budget_remaining(self, budget: Budget) -> Decimal:
        return self.evaluator.remaining(budget, self.store.get_all_transactions(), self._clock())

    def calculate_budget_usage_percentage(self, budget: Budget) -> int:
        """Clamped 0..100 usage for progress bars."""
        return self.evaluator.usage_percent(budget, self.store.get_all_transactions(), self._clock())

    def budget_statuses(self) -> list[BudgetEvaluation]:
        """
        Evaluations of all active budgets, most constrained first.

        Raises:
            LedgerStoreError: If the store cannot be read.
        """
        return self.evaluator.evaluate_all(
            self.budgets.get_active_budgets(),
            self.store.get_all_transactions(),
            self._clock(),
        )

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add_budget(self, budget: Budget) -> bool:
        added = self.budgets.add_budget(budget)
        if added:
            self.notifier.on_budget_updated(budget)
        return added

    def update_budget(self, budget: Budget) -> bool:
        # BudgetManager fires on_budget_updated on success.
        return self.budgets.update_budget(budget)

    def deactivate_budget(self, budget_id: str) -> bool:
        return self.budgets.deactivate_budget(budget_id)

    def delete_budget(self, budget_id: str) -> bool:
        deleted = self.budgets.delete_budget(budget_id)
        if deleted:
            self.notifier.check_thresholds()
        return deleted

    def add_transaction(self, transaction: Transaction) -> int:
        transaction_id = self.transactions.add_transaction(transaction)
        if transaction_id:
            self.notifier.check_thresholds()
        return transaction_id

    def update_transaction(self, transaction: Transaction) -> bool:
        updated = self.transactions.update_transaction(transaction)
        if updated:
            self.notifier.check_thresholds()
        return updated

    def delete_transaction(self, transaction_id: int) -> bool:
        deleted = self.transactions.delete_transaction(transaction_id)
        if deleted:
            self.notifier.check_thresholds()
        return deleted

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _update_notifier_config(self, **changes: object) -> None:
        notifier_config = self._config.notifier.model_copy(update=changes)
        self._config = self._config.model_copy(update={"notifier": notifier_config})
        self.notifier.configure(notifier_config)
