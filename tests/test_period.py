# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation
"""Tests for period window resolution and membership."""

from __future__ import annotations

import calendar
import time
from collections.abc import Iterator
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import pytest

from conftest import expense

from budget_alerts.aggregator import sum_spending
from budget_alerts.period import contains, current_month_window, normalize_instant, resolve_period
from budget_alerts.types import PeriodKind


REFERENCE = datetime(2024, 2, 15, 12, 30, 45, 123456)  # a Thursday

CET = timezone(timedelta(hours=1))
CEST = timezone(timedelta(hours=2))


def _berlin() -> ZoneInfo:
    try:
        return ZoneInfo("Europe/Berlin")
    except ZoneInfoNotFoundError:
        pytest.skip("Europe/Berlin time zone data not installed")


@pytest.fixture
def berlin_local_time(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Run with Europe/Berlin as the process-local time zone."""
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset is not available on this platform")
    _berlin()
    monkeypatch.setenv("TZ", "Europe/Berlin")
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()


# ---------------------------------------------------------------------------
# TestPeriodKind
# ---------------------------------------------------------------------------


class TestPeriodKind:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("monthly", PeriodKind.MONTHLY),
            ("Weekly", PeriodKind.WEEKLY),
            (" YEARLY ", PeriodKind.YEARLY),
            (PeriodKind.WEEKLY, PeriodKind.WEEKLY),
        ],
    )
    def test_parse_is_case_insensitive(self, raw: object, expected: PeriodKind) -> None:
        assert PeriodKind.parse(raw) is expected

    @pytest.mark.parametrize("raw", ["daily", "", None])
    def test_unknown_values_fall_back_to_monthly(self, raw: object) -> None:
        assert PeriodKind.parse(raw) is PeriodKind.MONTHLY


# ---------------------------------------------------------------------------
# TestResolvePeriod
# ---------------------------------------------------------------------------


class TestResolvePeriod:
    def test_monthly_window_covers_whole_calendar_month(self) -> None:
        start, end = resolve_period("monthly", REFERENCE)
        assert start == datetime(2024, 2, 1, 0, 0, 0)
        assert end == datetime(2024, 2, 29, 23, 59, 59)

    def test_monthly_window_in_thirty_day_month(self) -> None:
        start, end = resolve_period(PeriodKind.MONTHLY, datetime(2024, 4, 30, 8, 0))
        assert start == datetime(2024, 4, 1)
        assert end == datetime(2024, 4, 30, 23, 59, 59)

    def test_weekly_window_starts_on_sunday_by_default(self) -> None:
        start, end = resolve_period("weekly", REFERENCE)
        assert start == datetime(2024, 2, 11, 0, 0, 0)
        assert end == datetime(2024, 2, 17, 23, 59, 59)
        assert start.weekday() == calendar.SUNDAY

    def test_weekly_window_honours_monday_week_start(self) -> None:
        start, end = resolve_period("weekly", REFERENCE, week_start=calendar.MONDAY)
        assert start == datetime(2024, 2, 12, 0, 0, 0)
        assert end == datetime(2024, 2, 18, 23, 59, 59)

    def test_weekly_window_when_reference_is_week_start(self) -> None:
        sunday = datetime(2024, 2, 11, 0, 0, 0)
        start, end = resolve_period("weekly", sunday)
        assert start == sunday
        assert end == datetime(2024, 2, 17, 23, 59, 59)

    def test_weekly_window_can_span_months(self) -> None:
        start, end = resolve_period("weekly", datetime(2024, 3, 1, 9, 0))  # Friday
        assert start == datetime(2024, 2, 25)
        assert end == datetime(2024, 3, 2, 23, 59, 59)

    def test_yearly_window_covers_calendar_year(self) -> None:
        start, end = resolve_period("yearly", REFERENCE)
        assert start == datetime(2024, 1, 1, 0, 0, 0)
        assert end == datetime(2024, 12, 31, 23, 59, 59)

    def test_unknown_period_behaves_as_monthly(self) -> None:
        assert resolve_period("fortnightly", REFERENCE) == resolve_period("monthly", REFERENCE)

    def test_reference_always_inside_its_window(self) -> None:
        for kind in PeriodKind:
            start, end = resolve_period(kind, REFERENCE)
            assert start <= REFERENCE
            assert contains(start, end, REFERENCE)

    def test_aware_reference_yields_aware_bounds(self) -> None:
        reference = datetime(2024, 2, 15, 12, 0, tzinfo=timezone.utc)
        start, end = resolve_period("monthly", reference)
        assert start.tzinfo is not None
        assert end.tzinfo is not None
        assert contains(start, end, reference)

    def test_current_month_window_matches_monthly(self) -> None:
        assert current_month_window(REFERENCE) == resolve_period("monthly", REFERENCE)


# ---------------------------------------------------------------------------
# TestContains
# ---------------------------------------------------------------------------


class TestContains:
    def test_bounds_are_inclusive(self) -> None:
        start, end = resolve_period("monthly", REFERENCE)
        assert contains(start, end, start)
        assert contains(start, end, end)

    def test_fraction_of_final_second_is_inside(self) -> None:
        start, end = resolve_period("monthly", REFERENCE)
        assert contains(start, end, end.replace(microsecond=500000))

    def test_instants_outside_window_are_excluded(self) -> None:
        start, end = resolve_period("monthly", REFERENCE)
        assert not contains(start, end, start - timedelta(seconds=1))
        assert not contains(start, end, end + timedelta(seconds=1))

    def test_normalize_instant_leaves_aware_values_alone(self) -> None:
        aware = datetime(2024, 2, 15, tzinfo=timezone.utc)
        assert normalize_instant(aware) is aware

    def test_normalize_instant_makes_naive_values_aware(self) -> None:
        assert normalize_instant(REFERENCE).tzinfo is not None


# ---------------------------------------------------------------------------
# TestDaylightSavingTime
# ---------------------------------------------------------------------------


class TestDaylightSavingTime:
    def test_month_window_starts_at_local_midnight_before_dst_change(self, berlin_local_time: None) -> None:
        reference = datetime(2024, 3, 31, 12, 0, tzinfo=CEST)
        start, end = resolve_period("monthly", reference)

        assert start == datetime(2024, 3, 1, 0, 0, tzinfo=CET)
        assert end == datetime(2024, 3, 31, 23, 59, 59, tzinfo=CEST)
        assert not contains(start, end, datetime(2024, 2, 29, 23, 30, tzinfo=CET))
        assert contains(start, end, datetime(2024, 3, 1, 0, 0, tzinfo=CET))

    def test_last_evening_of_previous_month_is_not_counted(self, berlin_local_time: None) -> None:
        reference = datetime(2024, 3, 31, 12, 0, tzinfo=CEST)
        transactions = [
            expense("40", "Food", datetime(2024, 2, 29, 23, 30, tzinfo=CET)),
            expense("15", "Food", datetime(2024, 3, 10, 9, 0, tzinfo=CET)),
        ]
        assert sum_spending("Food", "monthly", reference, transactions) == Decimal("15")

    def test_yearly_window_ends_at_local_new_year(self, berlin_local_time: None) -> None:
        reference = datetime(2024, 7, 1, 12, 0, tzinfo=CEST)
        transactions = [expense("40", "Food", datetime(2024, 12, 31, 23, 30, tzinfo=CET))]
        assert sum_spending("Food", "yearly", reference, transactions) == Decimal("40")

    def test_utc_reference_is_read_as_local_time(self, berlin_local_time: None) -> None:
        start, _ = resolve_period("monthly", datetime(2024, 2, 29, 23, 30, tzinfo=timezone.utc))
        assert start == datetime(2024, 3, 1, 0, 0, tzinfo=CET)

    def test_named_zone_is_kept_across_dst_change(self) -> None:
        berlin = _berlin()
        start, end = resolve_period("monthly", datetime(2024, 3, 15, 12, 0, tzinfo=berlin))

        assert start.tzinfo is berlin
        assert start.utcoffset() == timedelta(hours=1)
        assert end.utcoffset() == timedelta(hours=2)
