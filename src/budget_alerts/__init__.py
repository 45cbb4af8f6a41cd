# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

"""
budget-alerts: budget tracking and threshold notifications for a personal
finance ledger.

Quick start::

    from decimal import Decimal
    from budget_alerts import Budget, BudgetTracker, Transaction

    tracker = BudgetTracker()
    tracker.add_budget(Budget(category="Food", amount=Decimal("200"), period="monthly"))
    tracker.add_transaction(Transaction(title="Groceries", amount=Decimal("80"), category="Food"))

    result = tracker.check_thresholds()
    for alert in result.alerts:
        print(alert.title, alert.message)
"""

from budget_alerts.aggregator import (
    TransactionFilter,
    current_month_expense,
    current_month_income,
    filter_transactions,
    sum_spending,
)
from budget_alerts.alerts import (
    AlertSink,
    CompositeAlertSink,
    ToastAlertSink,
    TrayAlertSink,
    WebhookAlertSink,
    WebhookSender,
    build_alert,
)
from budget_alerts.config import NotifierConfig, SchedulerConfig, TrackerConfig
from budget_alerts.errors import (
    AlertDeliveryError,
    BudgetAlertsError,
    BudgetNotFoundError,
    ConfigurationError,
    DuplicateBudgetError,
    LedgerStoreError,
    TransactionNotFoundError,
)
from budget_alerts.evaluator import BudgetEvaluator, classify, clamp_percent, percent_of
from budget_alerts.ledger import BudgetManager, TransactionManager
from budget_alerts.notifier import ThresholdNotifier
from budget_alerts.period import current_month_window, normalize_instant, resolve_period
from budget_alerts.scheduler import ThresholdScheduler
from budget_alerts.storage import (
    JsonFileHistoryStore,
    JsonFileLedgerStore,
    LedgerStore,
    MemoryHistoryStore,
    MemoryLedgerStore,
    NotificationHistoryStore,
)
from budget_alerts.tracker import BudgetTracker
from budget_alerts.types import (
    AGGREGATE_SCOPE,
    AggregateEvaluation,
    AlertKind,
    Budget,
    BudgetAlert,
    BudgetEvaluation,
    BudgetStatus,
    DeliveryResult,
    NotificationHistory,
    PeriodKind,
    ThresholdCheckResult,
    Transaction,
    budget_key,
    notification_key,
)

__all__ = [
    # Core classes
    "BudgetTracker",
    "ThresholdNotifier",
    "BudgetEvaluator",
    "BudgetManager",
    "TransactionManager",
    "ThresholdScheduler",
    # Types
    "PeriodKind",
    "Transaction",
    "Budget",
    "NotificationHistory",
    "BudgetStatus",
    "BudgetEvaluation",
    "AggregateEvaluation",
    "AlertKind",
    "AGGREGATE_SCOPE",
    "BudgetAlert",
    "DeliveryResult",
    "ThresholdCheckResult",
    "TransactionFilter",
    # Config
    "NotifierConfig",
    "SchedulerConfig",
    "TrackerConfig",
    # Errors
    "BudgetAlertsError",
    "DuplicateBudgetError",
    "BudgetNotFoundError",
    "TransactionNotFoundError",
    "AlertDeliveryError",
    "LedgerStoreError",
    "ConfigurationError",
    # Storage
    "LedgerStore",
    "NotificationHistoryStore",
    "MemoryLedgerStore",
    "MemoryHistoryStore",
    "JsonFileLedgerStore",
    "JsonFileHistoryStore",
    # Alerts
    "AlertSink",
    "WebhookSender",
    "ToastAlertSink",
    "TrayAlertSink",
    "WebhookAlertSink",
    "CompositeAlertSink",
    "build_alert",
    "budget_key",
    "notification_key",
    # Utilities
    "resolve_period",
    "current_month_window",
    "normalize_instant",
    "sum_spending",
    "filter_transactions",
    "current_month_expense",
    "current_month_income",
    "percent_of",
    "clamp_percent",
    "classify",
]
