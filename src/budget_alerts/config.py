# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation
from __future__ import annotations

import calendar
from datetime import timedelta
from typing import Annotated

from pydantic import BaseModel, Field, model_validator


class NotifierConfig(BaseModel, frozen=True):
    """
    Configuration for the ThresholdNotifier.

    Attributes:
        warning_percent: Usage percentage at which a WARNING alert fires.
        exceeded_percent: Usage percentage at which an EXCEEDED alert fires.
        suppression_window: Minimum time between two aggregate alerts unless
            a forced check is pending.
        suppress_budget_alerts: When True, per-budget alerts are gated by the
            same window (tracked per category). When False, every check
            cycle re-evaluates and re-alerts every budget.
        budget_alerts_enabled: Master switch; when False check cycles are
            no-ops.
        daily_reminder_enabled: Whether ``send_daily_reminder()`` emits.
    """

    warning_percent: Annotated[int, Field(gt=0)] = 90
    exceeded_percent: Annotated[int, Field(gt=0)] = 100
    suppression_window: timedelta = timedelta(days=1)
    suppress_budget_alerts: bool = False
    budget_alerts_enabled: bool = True
    daily_reminder_enabled: bool = False

    @model_validator(mode="after")
    def warning_below_exceeded(self) -> NotifierConfig:
        if self.warning_percent >= self.exceeded_percent:
            raise ValueError(
                f"warning_percent ({self.warning_percent}) must be below "
                f"exceeded_percent ({self.exceeded_percent})"
            )
        return self


class SchedulerConfig(BaseModel, frozen=True):
    """
    Configuration for the ThresholdScheduler.

    Attributes:
        interval: Time between two scheduled checks.
        run_on_start: Run one check immediately when the scheduler starts.
    """

    interval: timedelta = timedelta(days=1)
    run_on_start: bool = True

    @model_validator(mode="after")
    def interval_positive(self) -> SchedulerConfig:
        if self.interval <= timedelta(0):
            raise ValueError("interval must be positive")
        return self


class TrackerConfig(BaseModel, frozen=True):
    """
    Top-level configuration for the BudgetTracker.

    All fields are optional. ``week_start`` uses :mod:`calendar` weekday
    numbering (Monday is 0); the default is Sunday.

    Example::

        config = TrackerConfig(
            notifier=NotifierConfig(suppress_budget_alerts=True),
            week_start=calendar.MONDAY,
        )
        tracker = BudgetTracker(config=config)
    """

    notifier: NotifierConfig = Field(default_factory=NotifierConfig)
    scheduler: SchedulerConfig = Field(default_factory=SchedulerConfig)
    week_start: Annotated[int, Field(ge=0, le=6)] = calendar.SUNDAY
