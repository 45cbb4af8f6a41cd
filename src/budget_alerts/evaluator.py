# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation
from __future__ import annotations

import calendar
from collections.abc import Sequence
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal

from budget_alerts.aggregator import current_month_expense, sum_spending
from budget_alerts.config import NotifierConfig
from budget_alerts.period import resolve_period
from budget_alerts.types import (
    AggregateEvaluation,
    Budget,
    BudgetEvaluation,
    BudgetStatus,
    Transaction,
)

_ZERO = Decimal("0")
_HUNDRED = Decimal("100")


def percent_of(spent: Decimal, limit: Decimal) -> int:
    """
    Unclamped usage percentage, rounded half-up to an integer.

    A non-positive limit counts as fully used (100).
    """
    if limit <= _ZERO:
        return 100
    return int((spent / limit * _HUNDRED).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def clamp_percent(percent: int) -> int:
    return max(0, min(100, percent))


def classify(raw_percent: int, config: NotifierConfig | None = None) -> BudgetStatus:
    """Map a raw usage percentage onto the WITHIN_LIMIT / WARNING / EXCEEDED states."""
    cfg = config or NotifierConfig()
    if raw_percent >= cfg.exceeded_percent:
        return BudgetStatus.EXCEEDED
    if raw_percent >= cfg.warning_percent:
        return BudgetStatus.WARNING
    return BudgetStatus.WITHIN_LIMIT


class BudgetEvaluator:
    """
    Derives spent / remaining / usage figures for budgets.

    Stateless apart from its configuration. Each call takes the transaction
    snapshot and the reference instant explicitly, so nothing is cached
    between evaluation passes.
    """

    def __init__(
        self,
        week_start: int = calendar.SUNDAY,
        config: NotifierConfig | None = None,
    ) -> None:
        self._week_start = week_start
        self._config = config or NotifierConfig()

    def spent(self, budget: Budget, transactions: Sequence[Transaction], now: datetime) -> Decimal:
        """Expense total for the budget's category over its own period."""
        return sum_spending(
            budget.category,
            budget.period,
            now,
            transactions,
            week_start=self._week_start,
        )

    def remaining(self, budget: Budget, transactions: Sequence[Transaction], now: datetime) -> Decimal:
        """Budget amount minus spent. Negative once the budget is overspent."""
        return budget.amount - self.spent(budget, transactions, now)

    def usage_percent(self, budget: Budget, transactions: Sequence[Transaction], now: datetime) -> int:
        """Display percentage clamped to 0..100. A zero budget is always 100."""
        return clamp_percent(percent_of(self.spent(budget, transactions, now), budget.amount))

    def evaluate(
        self,
        budget: Budget,
        transactions: Sequence[Transaction],
        now: datetime,
    ) -> BudgetEvaluation:
        """Full snapshot for one budget over its own period."""
        spent = self.spent(budget, transactions, now)
        raw_percent = percent_of(spent, budget.amount)
        period_start, period_end = resolve_period(budget.period, now, week_start=self._week_start)
        return BudgetEvaluation(
            budget=budget,
            spent=spent,
            remaining=budget.amount - spent,
            raw_percent=raw_percent,
            display_percent=clamp_percent(raw_percent),
            status=classify(raw_percent, self._config),
            period_start=period_start,
            period_end=period_end,
        )

    def evaluate_all(
        self,
        budgets: Sequence[Budget],
        transactions: Sequence[Transaction],
        now: datetime,
    ) -> list[BudgetEvaluation]:
        """Evaluate every budget, most constrained first."""
        return sorted(
            (self.evaluate(budget, transactions, now) for budget in budgets),
            key=lambda evaluation: evaluation.raw_percent,
            reverse=True,
        )

    def evaluate_aggregate(
        self,
        budgets: Sequence[Budget],
        transactions: Sequence[Transaction],
        now: datetime,
    ) -> AggregateEvaluation | None:
        """
        Combined check across ``budgets``.

        The combined budget is compared with every expense of the current
        calendar month, budgeted category or not, whatever each budget's own
        period is. Returns None when the combined budget is not positive, in
        which case there is nothing to compare against.
        """
        total_budget = sum((budget.amount for budget in budgets), _ZERO)
        if total_budget <= _ZERO:
            return None

        total_spent = current_month_expense(transactions, now)
        raw_percent = percent_of(total_spent, total_budget)
        return AggregateEvaluation(
            total_budget=total_budget,
            total_spent=total_spent,
            raw_percent=raw_percent,
            display_percent=clamp_percent(raw_percent),
            status=classify(raw_percent, self._config),
            budget_count=len(budgets),
        )
