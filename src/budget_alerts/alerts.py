# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

"""
Budget alert construction and delivery channels.

The notifier only knows the :class:`AlertSink` protocol. Concrete sinks:

- :class:`ToastAlertSink`: foreground, short-lived message (UI toast or log).
- :class:`TrayAlertSink`: system-notification tray kept in memory; one slot
  per notification id, so re-alerting replaces rather than stacks.
- :class:`WebhookAlertSink`: posts the alert as JSON through an injected
  :class:`WebhookSender`.
- :class:`CompositeAlertSink`: fans one alert out to several sinks.

Sinks signal failure by raising :class:`~budget_alerts.errors.AlertDeliveryError`.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime
from decimal import Decimal
from typing import Callable, Protocol

from budget_alerts.errors import AlertDeliveryError, ConfigurationError
from budget_alerts.types import AGGREGATE_SCOPE, AlertKind, BudgetAlert, PeriodKind, notification_key

logger = logging.getLogger("budget_alerts.alerts")

REMINDER_TITLE = "Daily Expense Reminder"
REMINDER_MESSAGE = "Don't forget to record your expenses for today!"


# ---------------------------------------------------------------------------
# Alert construction
# ---------------------------------------------------------------------------


def _money(value: Decimal) -> str:
    return f"${value:.2f}"


def build_alert(
    kind: AlertKind,
    category: str | None,
    spent: Decimal,
    limit: Decimal,
    percent: int,
    period: PeriodKind = PeriodKind.MONTHLY,
    created_at: datetime | None = None,
) -> BudgetAlert:
    """
    Build a BudgetAlert with its user-facing title and message.

    Args:
        kind: WARNING, EXCEEDED or REMINDER.
        category: Budget category, or None for the aggregate check.
        spent: Amount spent in the evaluated window.
        limit: Budget ceiling for the window.
        percent: Raw (unclamped) usage percentage shown in the text.
        period: Period of the budget; the aggregate check is always monthly.
        created_at: Timestamp of the alert; defaults to now.
    """
    if kind is AlertKind.REMINDER:
        title, message = REMINDER_TITLE, REMINDER_MESSAGE
    else:
        label = f"{period.value} budget" if category is None else f"{period.value} {category} budget"
        subject = "Monthly Budget" if category is None else f"{category} Budget"
        if kind is AlertKind.EXCEEDED:
            title = f"{subject} Exceeded!"
            message = f"You've spent {_money(spent)} of your {_money(limit)} {label} ({percent}%)"
        else:
            title = "Budget Warning" if category is None else f"{subject} Warning"
            message = f"You've used {percent}% of your {label}. {_money(limit - spent)} remaining."

    fields = {
        "kind": kind,
        "category": category,
        "spent": spent,
        "limit": limit,
        "percent": percent,
        "period": period,
        "title": title,
        "message": message,
    }
    if created_at is not None:
        fields["created_at"] = created_at
    return BudgetAlert(**fields)


def aggregate_notification_ids() -> list[str]:
    """Notification slots used by aggregate alerts."""
    return [notification_key(kind, None) for kind in (AlertKind.EXCEEDED, AlertKind.WARNING)]


# ---------------------------------------------------------------------------
# Sink protocol
# ---------------------------------------------------------------------------


class AlertSink(Protocol):
    """Delivery channel for budget alerts. Injected into the notifier."""

    def deliver(self, alert: BudgetAlert) -> None:
        """Show or send the alert. Raises AlertDeliveryError on failure."""
        ...

    def dismiss(self, notification_ids: Iterable[str]) -> None:
        """Withdraw previously shown alerts occupying the given slots."""
        ...


class WebhookSender(Protocol):
    """Protocol for sending webhook payloads. Injected for testability."""

    def send(self, url: str, payload: str) -> bool:
        """Send a JSON payload to the given URL. Returns True on success."""
        ...


# ---------------------------------------------------------------------------
# Concrete sinks
# ---------------------------------------------------------------------------


class ToastAlertSink:
    """
    Foreground alert: hands the message to ``show`` (e.g. a UI toast
    callback) or, without one, writes it to the ``budget_alerts.toast`` log.

    Toasts disappear on their own, so ``dismiss`` does nothing.
    """

    def __init__(self, show: Callable[[str], None] | None = None) -> None:
        self._show = show
        self._log = logging.getLogger("budget_alerts.toast")

    def deliver(self, alert: BudgetAlert) -> None:
        if self._show is None:
            self._log.warning(alert.message, extra={"alert_kind": alert.kind.value, "scope": alert.scope})
            return
        try:
            self._show(alert.message)
        except Exception as exc:
            raise AlertDeliveryError("toast", str(exc)) from exc

    def dismiss(self, notification_ids: Iterable[str]) -> None:
        return None


class TrayAlertSink:
    """
    In-memory notification tray.

    Each alert occupies the slot named by its ``notification_id``; a newer
    alert for the same slot replaces the older one. ``delivered`` keeps every
    alert ever accepted, in order.

    Set ``permission_granted`` to False to model a user who denied
    notification permission: deliveries then raise AlertDeliveryError.
    """

    def __init__(self, permission_granted: bool = True) -> None:
        self.permission_granted = permission_granted
        self._active: dict[str, BudgetAlert] = {}
        self.delivered: list[BudgetAlert] = []

    def deliver(self, alert: BudgetAlert) -> None:
        if not self.permission_granted:
            raise AlertDeliveryError("tray", "notification permission not granted")
        self._active[alert.notification_id] = alert
        self.delivered.append(alert)

    def dismiss(self, notification_ids: Iterable[str]) -> None:
        for notification_id in notification_ids:
            self._active.pop(notification_id, None)

    @property
    def active(self) -> list[BudgetAlert]:
        """Alerts currently shown, oldest slot first."""
        return list(self._active.values())

    def active_for(self, scope: str = AGGREGATE_SCOPE) -> list[BudgetAlert]:
        return [alert for alert in self._active.values() if alert.scope == scope]

    def clear(self) -> None:
        self._active.clear()
        self.delivered.clear()


class WebhookAlertSink:
    """
    Posts each alert as JSON to a webhook URL.

    Usage::

        sink = WebhookAlertSink("https://hooks.example.com/budget", sender=my_sender)
    """

    def __init__(self, url: str, sender: WebhookSender) -> None:
        if not url:
            raise ConfigurationError("WebhookAlertSink requires a non-empty url")
        self._url = url
        self._sender = sender

    def deliver(self, alert: BudgetAlert) -> None:
        payload = alert.model_dump_json()
        if not self._sender.send(self._url, payload):
            raise AlertDeliveryError("webhook", f"sender rejected payload for {self._url}")

    def dismiss(self, notification_ids: Iterable[str]) -> None:
        # Sent webhooks cannot be withdrawn.
        return None


class CompositeAlertSink:
    """
    Delivers every alert to each wrapped sink.

    A failing sink does not stop the others; once all have been tried, the
    collected failures are raised as one AlertDeliveryError.
    """

    def __init__(self, *sinks: AlertSink) -> None:
        self._sinks: tuple[AlertSink, ...] = sinks

    def deliver(self, alert: BudgetAlert) -> None:
        failures: list[str] = []
        for sink in self._sinks:
            try:
                sink.deliver(alert)
            except AlertDeliveryError as exc:
                logger.warning(
                    "alert_channel_failed",
                    extra={"channel": exc.channel, "reason": exc.reason, "scope": alert.scope},
                )
                failures.append(f"{exc.channel}: {exc.reason}")
        if failures:
            raise AlertDeliveryError("composite", "; ".join(failures))

    def dismiss(self, notification_ids: Iterable[str]) -> None:
        ids = list(notification_ids)
        for sink in self._sinks:
            sink.dismiss(ids)
