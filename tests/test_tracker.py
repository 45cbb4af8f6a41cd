# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation
"""Tests for BudgetTracker and its configuration."""

from __future__ import annotations

import calendar
from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from conftest import FakeClock, expense

from budget_alerts.alerts import TrayAlertSink
from budget_alerts.config import NotifierConfig, TrackerConfig
from budget_alerts.errors import LedgerStoreError
from budget_alerts.storage.memory import MemoryHistoryStore, MemoryLedgerStore
from budget_alerts.tracker import BudgetTracker
from budget_alerts.types import AlertKind, Budget, Transaction


class UnreadableLedgerStore(MemoryLedgerStore):
    def get_all_transactions(self) -> list[Transaction]:
        raise LedgerStoreError("ledger file is corrupt")


# ---------------------------------------------------------------------------
# TestTrackerConfig
# ---------------------------------------------------------------------------


class TestTrackerConfig:
    def test_defaults(self) -> None:
        config = TrackerConfig()
        assert config.notifier.warning_percent == 90
        assert config.notifier.exceeded_percent == 100
        assert config.notifier.suppression_window == timedelta(days=1)
        assert config.notifier.suppress_budget_alerts is False
        assert config.week_start == calendar.SUNDAY

    def test_warning_must_be_below_exceeded(self) -> None:
        with pytest.raises(ValueError, match="warning_percent"):
            NotifierConfig(warning_percent=100, exceeded_percent=100)

    def test_week_start_range(self) -> None:
        with pytest.raises(ValueError):
            TrackerConfig(week_start=7)


# ---------------------------------------------------------------------------
# TestBudgetTracker
# ---------------------------------------------------------------------------


class TestBudgetTracker:
    def test_default_construction(self) -> None:
        tracker = BudgetTracker()
        assert isinstance(tracker.store, MemoryLedgerStore)
        assert isinstance(tracker.history, MemoryHistoryStore)
        assert tracker.check_thresholds().skipped_reason == "no_active_budgets"

    def test_adding_budget_forces_check(
        self, tracker: BudgetTracker, tray: TrayAlertSink, clock: FakeClock
    ) -> None:
        tracker.add_transaction(expense("95", "Food", clock.now))
        assert tray.delivered == []

        assert tracker.add_budget(Budget(category="Food", amount=Decimal("100"))) is True
        assert [alert.category for alert in tray.delivered] == [None, "Food"]
        assert tracker.history.load().forced_check is False

    def test_duplicate_budget_is_rejected(self, tracker: BudgetTracker) -> None:
        assert tracker.add_budget(Budget(category="Food", amount=Decimal("100")))
        assert tracker.add_budget(Budget(category="Food", amount=Decimal("300"))) is False
        assert tracker.add_budget(Budget(category="Food", amount=Decimal("30"), period="weekly"))

    def test_transaction_changes_recheck(
        self, tracker: BudgetTracker, tray: TrayAlertSink, clock: FakeClock
    ) -> None:
        tracker.add_budget(Budget(category="Food", amount=Decimal("100")))
        tray.clear()

        transaction_id = tracker.add_transaction(expense("120", "Food", clock.now))
        assert transaction_id == 1
        # The forced check on creation found nothing to report, so the aggregate
        # alert is still due.
        assert [(alert.category, alert.kind) for alert in tray.delivered] == [
            (None, AlertKind.EXCEEDED),
            ("Food", AlertKind.EXCEEDED),
        ]

        stored = tracker.transactions.require_transaction(transaction_id)
        tray.clear()
        assert tracker.update_transaction(stored.model_copy(update={"amount": Decimal("10")}))
        assert tray.delivered == []
        assert tracker.delete_transaction(transaction_id)

    def test_budget_update_resets_history(
        self, tracker: BudgetTracker, tray: TrayAlertSink, clock: FakeClock
    ) -> None:
        budget = Budget(category="Food", amount=Decimal("100"))
        tracker.add_budget(budget)
        tracker.add_transaction(expense("95", "Food", clock.now))
        clock.advance(timedelta(minutes=5))
        tray.clear()

        assert tracker.update_budget(budget.model_copy(update={"amount": Decimal("90")}))
        aggregate = [alert for alert in tray.delivered if alert.is_aggregate]
        assert [alert.kind for alert in aggregate] == [AlertKind.EXCEEDED]
        assert tracker.history.load().last_notified == clock.now

    def test_deactivated_budget_stops_alerting(
        self, tracker: BudgetTracker, tray: TrayAlertSink, clock: FakeClock
    ) -> None:
        budget = Budget(category="Food", amount=Decimal("100"))
        tracker.add_budget(budget)
        tracker.add_transaction(expense("150", "Food", clock.now))
        assert tracker.deactivate_budget(budget.id)
        tray.clear()
        assert tracker.check_thresholds().skipped_reason == "no_active_budgets"
        assert tray.delivered == []

    def test_delete_budget(self, tracker: BudgetTracker) -> None:
        budget = Budget(category="Food", amount=Decimal("100"))
        tracker.add_budget(budget)
        assert tracker.delete_budget(budget.id) is True
        assert tracker.delete_budget(budget.id) is False

    def test_budget_figures(self, tracker: BudgetTracker, clock: FakeClock) -> None:
        food = Budget(category="Food", amount=Decimal("200"))
        travel = Budget(category="Travel", amount=Decimal("100"))
        tracker.add_budget(food)
        tracker.add_budget(travel)
        tracker.add_transaction(expense("50", "Food", datetime(2024, 2, 3)))
        tracker.add_transaction(expense("99", "Travel", datetime(2024, 2, 4)))

        assert tracker.calculate_budget_spending(food) == Decimal("50")
        assert tracker.calculate_budget_remaining(food) == Decimal("150")
        assert tracker.calculate_budget_usage_percentage(food) == 25
        assert [status.budget.category for status in tracker.budget_statuses()] == ["Travel", "Food"]

    def test_budget_figures_propagate_store_errors(
        self, history: MemoryHistoryStore, tray: TrayAlertSink, clock: FakeClock
    ) -> None:
        tracker = BudgetTracker(store=UnreadableLedgerStore(), history=history, sink=tray, clock=clock)
        food = Budget(category="Food", amount=Decimal("200"))
        with pytest.raises(LedgerStoreError):
            tracker.calculate_budget_spending(food)
        with pytest.raises(LedgerStoreError):
            tracker.calculate_budget_usage_percentage(food)
        with pytest.raises(LedgerStoreError):
            tracker.budget_statuses()

    def test_alert_switches(self, tracker: BudgetTracker, tray: TrayAlertSink, clock: FakeClock) -> None:
        tracker.set_budget_alerts_enabled(False)
        tracker.add_budget(Budget(category="Food", amount=Decimal("10")))
        tracker.add_transaction(expense("50", "Food", clock.now))
        assert tray.delivered == []
        assert tracker.config.notifier.budget_alerts_enabled is False

        tracker.set_daily_reminder_enabled(True)
        result = tracker.send_daily_reminder()
        assert result is not None and result.delivered

    def test_weekly_budget_uses_configured_week_start(
        self, store: MemoryLedgerStore, tray: TrayAlertSink, clock: FakeClock
    ) -> None:
        tracker = BudgetTracker(
            config=TrackerConfig(week_start=calendar.MONDAY),
            store=store,
            sink=tray,
            clock=clock,
        )
        budget = Budget(category="Food", amount=Decimal("100"), period="weekly")
        tracker.add_budget(budget)
        tracker.add_transaction(expense("40", "Food", datetime(2024, 2, 11, 9, 0)))  # Sunday
        tracker.add_transaction(expense("30", "Food", datetime(2024, 2, 13, 9, 0)))  # Tuesday
        assert tracker.calculate_budget_spending(budget) == Decimal("30")

    def test_create_scheduler_drives_checks(
        self, tracker: BudgetTracker, tray: TrayAlertSink, clock: FakeClock
    ) -> None:
        tracker.add_budget(Budget(category="Food", amount=Decimal("100")))
        tracker.add_transaction(expense("40", "Food", clock.now))
        scheduler = tracker.create_scheduler()

        assert scheduler.run_pending() is True
        assert scheduler.next_run == clock.now + tracker.config.scheduler.interval
        assert tray.delivered == []
