# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation
"""Shared fixtures for budget-alerts tests."""

from __future__ import annotations

from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from budget_alerts.alerts import TrayAlertSink
from budget_alerts.storage.memory import MemoryHistoryStore, MemoryLedgerStore
from budget_alerts.tracker import BudgetTracker
from budget_alerts.types import Transaction


class FakeClock:
    """Settable clock passed wherever the library accepts ``clock=``."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now = self.now + delta


def expense(amount: str, category: str, timestamp: datetime, transaction_id: int = 0) -> Transaction:
    return Transaction(
        id=transaction_id,
        title=f"{category} purchase",
        amount=Decimal(amount),
        category=category,
        timestamp=timestamp,
    )


@pytest.fixture
def clock() -> FakeClock:
    """Mid-February 2024, clear of month and DST boundaries."""
    return FakeClock(datetime(2024, 2, 15, 12, 0, 0))


@pytest.fixture
def store() -> MemoryLedgerStore:
    return MemoryLedgerStore()


@pytest.fixture
def history() -> MemoryHistoryStore:
    return MemoryHistoryStore()


@pytest.fixture
def tray() -> TrayAlertSink:
    return TrayAlertSink()


@pytest.fixture
def tracker(
    store: MemoryLedgerStore,
    history: MemoryHistoryStore,
    tray: TrayAlertSink,
    clock: FakeClock,
) -> BudgetTracker:
    """A tracker on in-memory storage delivering into ``tray``."""
    return BudgetTracker(store=store, history=history, sink=tray, clock=clock)
