# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation
from __future__ import annotations

import calendar
from datetime import datetime, time, timedelta, timezone, tzinfo

from budget_alerts.types import PeriodKind

_DAY_START = time(0, 0, 0)
_DAY_END = time(23, 59, 59)


def normalize_instant(value: datetime) -> datetime:
    """
    Return an aware datetime suitable for comparison.

    Naive datetimes are taken to be local time.
    """
    if value.tzinfo is None:
        return value.astimezone()
    return value


def _wall_clock(reference: datetime) -> tuple[datetime, tzinfo | None]:
    """
    Split ``reference`` into a naive wall-clock time and the zone to rebuild
    window bounds in.

    Fixed-offset datetimes (what ``datetime.astimezone()`` returns) carry no
    DST rules, so they are read as system local time and the zone is None.
    Named zones such as ``zoneinfo.ZoneInfo`` are kept.
    """
    zone = reference.tzinfo
    if zone is None:
        return reference, None
    if isinstance(zone, timezone):
        return reference.astimezone().replace(tzinfo=None), None
    return reference.replace(tzinfo=None), zone


def _at(day: datetime, clock: time, zone: tzinfo | None, aware: bool) -> datetime:
    bound = day.replace(
        hour=clock.hour,
        minute=clock.minute,
        second=clock.second,
        microsecond=0,
    )
    if not aware:
        return bound
    if zone is None:
        # Local offset of the bound's own date, not of the reference.
        return bound.astimezone()
    return bound.replace(tzinfo=zone)


def resolve_period(
    period: PeriodKind | str | None,
    reference: datetime,
    week_start: int = calendar.SUNDAY,
) -> tuple[datetime, datetime]:
    """
    Compute the calendar window of a budget period containing ``reference``.

    Windows follow wall-clock time, so a month that starts before a DST change
    and ends after it still runs from local midnight to local 23:59:59.

    Args:
        period: ``'monthly'``, ``'weekly'`` or ``'yearly'`` (any case).
            Anything else is treated as monthly.
        reference: The instant the window must contain. Naive in, naive out.
            A named zone is kept; a fixed UTC offset is read as local time
            and the bounds get the local offset valid on their own date.
        week_start: First day of the week in :mod:`calendar` numbering
            (Monday is 0). Only used for weekly periods.

    Returns:
        ``(start, end)`` where start is 00:00:00 on the first day of the
        period and end is 23:59:59 on its last day.
    """
    kind = PeriodKind.parse(period)
    local, zone = _wall_clock(reference)
    aware = reference.tzinfo is not None

    if kind is PeriodKind.WEEKLY:
        days_back = (local.weekday() - week_start) % 7
        first = local - timedelta(days=days_back)
        last = first + timedelta(days=6)
    elif kind is PeriodKind.YEARLY:
        first = local.replace(month=1, day=1)
        last = local.replace(month=12, day=31)
    else:
        last_day = calendar.monthrange(local.year, local.month)[1]
        first = local.replace(day=1)
        last = local.replace(day=last_day)

    return _at(first, _DAY_START, zone, aware), _at(last, _DAY_END, zone, aware)


def current_month_window(reference: datetime) -> tuple[datetime, datetime]:
    """Shorthand for the monthly window containing ``reference``."""
    return resolve_period(PeriodKind.MONTHLY, reference)


def contains(start: datetime, end: datetime, instant: datetime) -> bool:
    """
    Inclusive window membership, compared at whole-second resolution so that
    an instant within the final second (23:59:59.5) still belongs to the window.
    """
    moment = normalize_instant(instant).replace(microsecond=0)
    return normalize_instant(start) <= moment <= normalize_instant(end)
