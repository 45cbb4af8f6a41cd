# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation
from __future__ import annotations


class BudgetAlertsError(Exception):
    """Base class for all budget-alerts errors."""

    def __init__(self, message: str, code: str = "BUDGET_ALERTS_ERROR") -> None:
        super().__init__(message)
        self.code = code
        self.message = message

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r})"


class DuplicateBudgetError(BudgetAlertsError):
    """
    Raised when an active budget already exists for a category + period.

    Attributes:
        category: The category of the rejected budget.
        period: The period of the rejected budget.
        existing_id: Identifier of the active budget that blocks creation.
    """

    def __init__(self, category: str, period: str, existing_id: str) -> None:
        super().__init__(
            f"An active {period} budget for category '{category}' already exists "
            f"(id {existing_id}).",
            code="DUPLICATE_BUDGET",
        )
        self.category = category
        self.period = period
        self.existing_id = existing_id


class BudgetNotFoundError(BudgetAlertsError):
    """Raised when a referenced budget identifier does not exist."""

    def __init__(self, budget_id: str) -> None:
        super().__init__(
            f"Budget '{budget_id}' does not exist.",
            code="BUDGET_NOT_FOUND",
        )
        self.budget_id = budget_id


class TransactionNotFoundError(BudgetAlertsError):
    """Raised when a referenced transaction identifier does not exist."""

    def __init__(self, transaction_id: int) -> None:
        super().__init__(
            f"Transaction {transaction_id} does not exist.",
            code="TRANSACTION_NOT_FOUND",
        )
        self.transaction_id = transaction_id


class AlertDeliveryError(BudgetAlertsError):
    """
    Raised by an alert sink when an alert cannot be delivered.

    Attributes:
        channel: Name of the sink that failed (e.g. ``'webhook'``).
        reason: Short description of the failure (e.g. ``'permission denied'``).
    """

    def __init__(self, channel: str, reason: str) -> None:
        super().__init__(
            f"Alert delivery via '{channel}' failed: {reason}.",
            code="ALERT_DELIVERY_FAILED",
        )
        self.channel = channel
        self.reason = reason


class LedgerStoreError(BudgetAlertsError):
    """Raised when the ledger or history store cannot be read or written."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="STORE_ERROR")


class ConfigurationError(BudgetAlertsError):
    """Raised when the tracker is misconfigured."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="CONFIGURATION_ERROR")
