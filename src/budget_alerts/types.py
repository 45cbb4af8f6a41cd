# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Literal, Optional
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator


def _local_now() -> datetime:
    return datetime.now().astimezone()


# ─── Period ───────────────────────────────────────────────────────────────────


class PeriodKind(str, Enum):
    """Accounting period of a budget."""

    MONTHLY = "monthly"
    WEEKLY = "weekly"
    YEARLY = "yearly"

    @classmethod
    def parse(cls, value: PeriodKind | str | None) -> PeriodKind:
        """
        Parse a period identifier case-insensitively.

        Unknown or missing values fall back to ``MONTHLY``.
        """
        if isinstance(value, PeriodKind):
            return value
        if value is None:
            return cls.MONTHLY
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.MONTHLY


# ─── Ledger records ───────────────────────────────────────────────────────────


class Transaction(BaseModel, frozen=True):
    """
    A single income or expense entry.

    ``id`` is assigned by :class:`~budget_alerts.ledger.TransactionManager`;
    ``0`` means not yet assigned.
    """

    id: int = Field(default=0, ge=0)
    title: str
    amount: Decimal = Field(..., gt=0)
    category: str
    description: str = ""
    timestamp: datetime = Field(default_factory=_local_now)
    is_income: bool = False
    payment_method: str = "Cash"
    recurring_type: str = "None"

    @property
    def signed_amount(self) -> Decimal:
        """Amount with sign applied: positive for income, negative for expense."""
        return self.amount if self.is_income else -self.amount


class Budget(BaseModel, frozen=True):
    """A spending ceiling for one category over one accounting period."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    category: str = Field(..., min_length=1)
    amount: Decimal = Field(..., ge=0, description="Spending ceiling for the period")
    period: PeriodKind = PeriodKind.MONTHLY
    created_at: datetime = Field(default_factory=_local_now)
    is_active: bool = True
    notes: Optional[str] = None

    @field_validator("period", mode="before")
    @classmethod
    def parse_period(cls, value: object) -> PeriodKind:
        return PeriodKind.parse(value if isinstance(value, (str, PeriodKind)) else None)


# ─── Notification history ─────────────────────────────────────────────────────


class NotificationHistory(BaseModel):
    """
    Alert bookkeeping shared by every check cycle.

    ``last_notified`` of ``None`` means no aggregate alert has been sent since
    the last reset. ``budget_last_notified`` maps :func:`budget_key` values to
    the last per-budget alert and is only consulted when per-budget
    suppression is switched on.
    """

    last_notified: Optional[datetime] = None
    forced_check: bool = False
    budget_last_notified: dict[str, datetime] = Field(default_factory=dict)

    def reset(self) -> None:
        """Forget previous alerts and force the next check to notify."""
        self.last_notified = None
        self.forced_check = True
        self.budget_last_notified.clear()


# ─── Evaluation ───────────────────────────────────────────────────────────────


class BudgetStatus(str, Enum):
    """Threshold state derived fresh on every evaluation."""

    WITHIN_LIMIT = "within_limit"
    WARNING = "warning"
    EXCEEDED = "exceeded"


class BudgetEvaluation(BaseModel, frozen=True):
    """
    Point-in-time spending snapshot for one budget.

    ``raw_percent`` is unclamped and drives threshold comparisons and alert
    text; ``display_percent`` is clamped to 0..100 for progress bars.
    """

    budget: Budget
    spent: Decimal
    remaining: Decimal
    raw_percent: int
    display_percent: int
    status: BudgetStatus
    period_start: datetime
    period_end: datetime


class AggregateEvaluation(BaseModel, frozen=True):
    """Current-month spending across all active budgets combined."""

    total_budget: Decimal
    total_spent: Decimal
    raw_percent: int
    display_percent: int
    status: BudgetStatus
    budget_count: int

    @property
    def remaining(self) -> Decimal:
        return self.total_budget - self.total_spent


# ─── Alerts ───────────────────────────────────────────────────────────────────

AGGREGATE_SCOPE = "aggregate"


class AlertKind(str, Enum):
    WARNING = "warning"
    EXCEEDED = "exceeded"
    REMINDER = "reminder"


def budget_key(category: str, period: PeriodKind) -> str:
    """Identifies one budget by category (case-insensitive) and period."""
    return f"{category.casefold()}:{period.value}"


def notification_key(kind: AlertKind, category: str | None, period: PeriodKind = PeriodKind.MONTHLY) -> str:
    """Stable identifier of the notification slot an alert occupies."""
    scope = AGGREGATE_SCOPE if category is None else f"category:{budget_key(category, period)}"
    return f"{kind.value}:{scope}"


class BudgetAlert(BaseModel, frozen=True):
    """An alert ready to be handed to an :class:`~budget_alerts.alerts.AlertSink`."""

    kind: AlertKind
    category: Optional[str] = None
    spent: Decimal = Decimal("0")
    limit: Decimal = Decimal("0")
    percent: int = 0
    period: PeriodKind = PeriodKind.MONTHLY
    title: str
    message: str
    created_at: datetime = Field(default_factory=_local_now)

    @property
    def scope(self) -> str:
        return AGGREGATE_SCOPE if self.category is None else self.category

    @property
    def is_aggregate(self) -> bool:
        return self.category is None

    @property
    def remaining(self) -> Decimal:
        return self.limit - self.spent

    @property
    def notification_id(self) -> str:
        return notification_key(self.kind, self.category, self.period)


class DeliveryResult(BaseModel, frozen=True):
    """Outcome of handing one alert to the sink."""

    alert: BudgetAlert
    delivered: bool
    error: Optional[str] = None


# ─── Check cycle result ───────────────────────────────────────────────────────

SkipReason = Literal["no_active_budgets", "alerts_disabled", "store_unavailable"]


class ThresholdCheckResult(BaseModel, frozen=True):
    """Everything one ``check_thresholds()`` cycle decided and emitted."""

    checked_at: datetime
    aggregate: Optional[AggregateEvaluation] = None
    aggregate_due: bool = False
    evaluations: list[BudgetEvaluation] = Field(default_factory=list)
    deliveries: list[DeliveryResult] = Field(default_factory=list)
    skipped_reason: Optional[SkipReason] = None

    @property
    def alerts(self) -> list[BudgetAlert]:
        return [delivery.alert for delivery in self.deliveries]

    @property
    def aggregate_alert(self) -> BudgetAlert | None:
        for delivery in self.deliveries:
            if delivery.alert.is_aggregate:
                return delivery.alert
        return None
