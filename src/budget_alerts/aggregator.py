# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

"""
Spending aggregation over period windows.

Every function here is a pure function of its arguments: the caller passes
a snapshot of the ledger and gets a Decimal back.
"""

from __future__ import annotations

import calendar
from collections.abc import Iterable
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel

from budget_alerts.period import contains, current_month_window, normalize_instant, resolve_period
from budget_alerts.types import PeriodKind, Transaction

_ZERO = Decimal("0")


class TransactionFilter(BaseModel):
    """Optional filter applied to transaction queries. All fields are AND-ed."""

    category: Optional[str] = None
    since: Optional[datetime] = None
    until: Optional[datetime] = None
    is_income: Optional[bool] = None


def same_category(left: str, right: str) -> bool:
    """Case-insensitive exact category match."""
    return left.casefold() == right.casefold()


def filter_transactions(
    transactions: Iterable[Transaction],
    transaction_filter: TransactionFilter | None,
) -> list[Transaction]:
    """
    Apply an optional TransactionFilter to a sequence of transactions.

    ``since`` and ``until`` are inclusive bounds. Returns a new list; the
    input is not modified.
    """
    if transaction_filter is None:
        return list(transactions)

    since = transaction_filter.since
    until = transaction_filter.until

    results: list[Transaction] = []
    for transaction in transactions:
        if (
            transaction_filter.is_income is not None
            and transaction.is_income != transaction_filter.is_income
        ):
            continue

        if transaction_filter.category is not None and not same_category(
            transaction.category, transaction_filter.category
        ):
            continue

        if since is not None and until is not None:
            if not contains(since, until, transaction.timestamp):
                continue
        elif since is not None:
            if normalize_instant(transaction.timestamp) < normalize_instant(since):
                continue
        elif until is not None:
            if normalize_instant(transaction.timestamp) > normalize_instant(until):
                continue

        results.append(transaction)

    return results


def total_amount(transactions: Iterable[Transaction]) -> Decimal:
    return sum((transaction.amount for transaction in transactions), _ZERO)


def sum_spending(
    category: str,
    period: PeriodKind | str | None,
    reference: datetime,
    transactions: Iterable[Transaction],
    week_start: int = calendar.SUNDAY,
) -> Decimal:
    """
    Sum expense amounts for ``category`` inside the period window of ``reference``.

    Income is excluded. Category matching is case-insensitive and exact.
    Returns ``Decimal('0')`` when nothing matches.
    """
    start, end = resolve_period(period, reference, week_start=week_start)
    matches = filter_transactions(
        transactions,
        TransactionFilter(category=category, since=start, until=end, is_income=False),
    )
    return total_amount(matches)


def current_month_transactions(
    transactions: Iterable[Transaction],
    reference: datetime,
) -> list[Transaction]:
    """Every transaction, income or expense, in the calendar month of ``reference``."""
    start, end = current_month_window(reference)
    return filter_transactions(transactions, TransactionFilter(since=start, until=end))


def current_month_expense(transactions: Iterable[Transaction], reference: datetime) -> Decimal:
    return total_amount(
        transaction
        for transaction in current_month_transactions(transactions, reference)
        if not transaction.is_income
    )


def current_month_income(transactions: Iterable[Transaction], reference: datetime) -> Decimal:
    return total_amount(
        transaction
        for transaction in current_month_transactions(transactions, reference)
        if transaction.is_income
    )
