# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

"""
Threshold notifier: the periodic budget check cycle.

Thresholds are STATIC (90% warning, 100% exceeded by default). Each cycle
re-derives every state from the current ledger snapshot; the only state kept
between cycles is the NotificationHistory (last aggregate alert time plus the
forced-check flag).

Aggregate alerts are sent at most once per suppression window unless a
forced check is pending. Per-budget alerts are evaluated on every cycle and
are not time-gated unless ``NotifierConfig.suppress_budget_alerts`` is set.
"""

from __future__ import annotations

import calendar
import logging
import threading
from datetime import datetime
from decimal import Decimal
from typing import Callable

from budget_alerts.alerts import AlertSink, aggregate_notification_ids, build_alert
from budget_alerts.config import NotifierConfig
from budget_alerts.errors import AlertDeliveryError, LedgerStoreError
from budget_alerts.evaluator import BudgetEvaluator
from budget_alerts.period import normalize_instant
from budget_alerts.storage.interface import LedgerStore, NotificationHistoryStore
from budget_alerts.types import (
    AlertKind,
    Budget,
    BudgetEvaluation,
    BudgetStatus,
    DeliveryResult,
    NotificationHistory,
    PeriodKind,
    SkipReason,
    ThresholdCheckResult,
    budget_key,
)

logger = logging.getLogger("budget_alerts.notifier")


def _local_now() -> datetime:
    return datetime.now().astimezone()


def alert_kind_for(status: BudgetStatus) -> AlertKind | None:
    """The alert a status calls for, or None when within limits."""
    if status is BudgetStatus.EXCEEDED:
        return AlertKind.EXCEEDED
    if status is BudgetStatus.WARNING:
        return AlertKind.WARNING
    return None


class ThresholdNotifier:
    """
    Decides when to emit WARNING / EXCEEDED alerts and records them.

    ``check_thresholds()`` holds a re-entrant lock for the whole cycle, so a
    scheduler tick racing a forced check after a budget edit cannot both
    decide to notify from the same stale ``last_notified``.

    Example::

        notifier = ThresholdNotifier(
            store=MemoryLedgerStore(),
            history=MemoryHistoryStore(),
            sink=TrayAlertSink(),
        )
        result = notifier.check_thresholds()
        for alert in result.alerts:
            print(alert.title, alert.message)
    """

    def __init__(
        self,
        store: LedgerStore,
        history: NotificationHistoryStore,
        sink: AlertSink,
        config: NotifierConfig | None = None,
        week_start: int = calendar.SUNDAY,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._store = store
        self._history = history
        self._sink = sink
        self._week_start = week_start
        self._clock: Callable[[], datetime] = clock if clock is not None else _local_now
        self._lock = threading.RLock()
        self._config = config or NotifierConfig()
        self._evaluator = BudgetEvaluator(week_start=week_start, config=self._config)

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    @property
    def config(self) -> NotifierConfig:
        return self._config

    def configure(self, config: NotifierConfig) -> None:
        """Swap the configuration; takes effect from the next cycle."""
        with self._lock:
            self._config = config
            self._evaluator = BudgetEvaluator(week_start=self._week_start, config=config)

    # ------------------------------------------------------------------
    # Check cycle
    # ------------------------------------------------------------------

    def check_thresholds(self) -> ThresholdCheckResult:
        """
        Run one check cycle.

        Returns:
            A ThresholdCheckResult describing the aggregate evaluation, the
            per-budget evaluations and every alert handed to the sink. A
            cycle that did nothing carries a ``skipped_reason``.
        """
        with self._lock:
            now = self._clock()

            try:
                budgets = [budget for budget in self._store.get_all_budgets() if budget.is_active]
            except LedgerStoreError as exc:
                return self._skip(now, "store_unavailable", error=exc.message)

            if not budgets:
                return self._skip(now, "no_active_budgets")

            if not self._config.budget_alerts_enabled:
                return self._skip(now, "alerts_disabled")

            try:
                transactions = self._store.get_all_transactions()
                history = self._history.load()
            except LedgerStoreError as exc:
                return self._skip(now, "store_unavailable", error=exc.message)

            logger.debug(
                "threshold_check_started",
                extra={
                    "budget_count": len(budgets),
                    "forced_check": history.forced_check,
                    "last_notified": history.last_notified.isoformat() if history.last_notified else None,
                },
            )

            deliveries: list[DeliveryResult] = []
            forced = history.forced_check

            # --- Aggregate check (time-gated) ---
            aggregate = self._evaluator.evaluate_aggregate(budgets, transactions, now)
            aggregate_due = False
            if aggregate is not None:
                aggregate_due = forced or self._window_elapsed(history.last_notified, now)
                if aggregate_due:
                    kind = alert_kind_for(aggregate.status)
                    if kind is not None:
                        deliveries.append(
                            self.emit_alert(
                                kind,
                                None,
                                spent=aggregate.total_spent,
                                limit=aggregate.total_budget,
                                percent=aggregate.raw_percent,
                                period=PeriodKind.MONTHLY,
                            )
                        )
                        history.last_notified = now
                    else:
                        logger.debug("aggregate_within_limits", extra={"percent": aggregate.raw_percent})
                    history.forced_check = False
                else:
                    logger.debug(
                        "aggregate_alert_suppressed",
                        extra={"percent": aggregate.raw_percent},
                    )

            # --- Per-budget checks ---
            evaluations = [self._evaluator.evaluate(budget, transactions, now) for budget in budgets]
            for evaluation in evaluations:
                delivery = self._check_budget(evaluation, history, forced, now)
                if delivery is not None:
                    deliveries.append(delivery)

            self._save_history(history)

            return ThresholdCheckResult(
                checked_at=now,
                aggregate=aggregate,
                aggregate_due=aggregate_due,
                evaluations=evaluations,
                deliveries=deliveries,
            )

    def on_budget_updated(self, budget: Budget | None = None) -> ThresholdCheckResult:
        """
        Invalidate notification history after a budget create/edit and
        re-check immediately.

        Resets the history (no last alert, forced check pending), withdraws
        any aggregate alerts still on display, then runs ``check_thresholds``.
        """
        with self._lock:
            logger.info(
                "notification_history_reset",
                extra={"budget_id": budget.id if budget is not None else None},
            )
            try:
                self._history.reset()
            except LedgerStoreError as exc:
                logger.error("history_reset_failed", extra={"error": exc.message})
            try:
                self._sink.dismiss(aggregate_notification_ids())
            except AlertDeliveryError as exc:
                logger.warning("alert_dismiss_failed", extra={"channel": exc.channel, "reason": exc.reason})
            return self.check_thresholds()

    # ------------------------------------------------------------------
    # Emission
    # ------------------------------------------------------------------

    def emit_alert(
        self,
        kind: AlertKind,
        category: str | None,
        spent: Decimal,
        limit: Decimal,
        percent: int,
        period: PeriodKind = PeriodKind.MONTHLY,
    ) -> DeliveryResult:
        """
        Build an alert and hand it to the sink.

        Delivery failures are logged and returned, never raised, so one
        failing alert cannot abort the rest of a check cycle.
        """
        alert = build_alert(
            kind,
            category,
            spent=spent,
            limit=limit,
            percent=percent,
            period=period,
            created_at=self._clock(),
        )
        log_fields = {"alert_kind": kind.value, "scope": alert.scope, "percent": percent}
        try:
            self._sink.deliver(alert)
        except AlertDeliveryError as exc:
            logger.warning("alert_delivery_failed", extra={**log_fields, "reason": exc.reason})
            return DeliveryResult(alert=alert, delivered=False, error=exc.message)
        except Exception as exc:
            logger.exception("alert_sink_error", extra=log_fields)
            return DeliveryResult(alert=alert, delivered=False, error=str(exc))

        logger.info("alert_delivered", extra=log_fields)
        return DeliveryResult(alert=alert, delivered=True)

    def send_daily_reminder(self) -> DeliveryResult | None:
        """Emit the daily expense-recording reminder when it is enabled."""
        if not self._config.daily_reminder_enabled:
            logger.debug("daily_reminder_disabled")
            return None
        return self.emit_alert(AlertKind.REMINDER, None, Decimal("0"), Decimal("0"), 0)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _check_budget(
        self,
        evaluation: BudgetEvaluation,
        history: NotificationHistory,
        forced: bool,
        now: datetime,
    ) -> DeliveryResult | None:
        budget = evaluation.budget
        kind = alert_kind_for(evaluation.status)
        logger.debug(
            "budget_evaluated",
            extra={
                "category": budget.category,
                "spent": str(evaluation.spent),
                "limit": str(budget.amount),
                "percent": evaluation.raw_percent,
            },
        )
        if kind is None:
            return None

        if self._config.suppress_budget_alerts:
            key = budget_key(budget.category, budget.period)
            if not (forced or self._window_elapsed(history.budget_last_notified.get(key), now)):
                logger.debug(
                    "budget_alert_suppressed",
                    extra={"category": budget.category, "period": budget.period.value},
                )
                return None
            history.budget_last_notified[key] = now

        return self.emit_alert(
            kind,
            budget.category,
            spent=evaluation.spent,
            limit=budget.amount,
            percent=evaluation.raw_percent,
            period=budget.period,
        )

    def _window_elapsed(self, last_notified: datetime | None, now: datetime) -> bool:
        if last_notified is None:
            return True
        elapsed = normalize_instant(now) - normalize_instant(last_notified)
        return elapsed > self._config.suppression_window

    def _save_history(self, history: NotificationHistory) -> None:
        try:
            self._history.save(history)
        except LedgerStoreError as exc:
            logger.error("history_save_failed", extra={"error": exc.message})

    @staticmethod
    def _skip(now: datetime, reason: SkipReason, error: str | None = None) -> ThresholdCheckResult:
        if error is not None:
            logger.error("threshold_check_skipped", extra={"reason": reason, "error": error})
        else:
            logger.debug("threshold_check_skipped", extra={"reason": reason})
        return ThresholdCheckResult(checked_at=now, skipped_reason=reason)
