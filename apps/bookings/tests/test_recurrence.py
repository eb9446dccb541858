"""Recurrence expansion tests."""

from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest

from apps.bookings.domain.exceptions import ConfigurationError
from apps.bookings.domain.recurrence import (
    RecurrenceRule,
    RecurrenceType,
    describe_recurrence,
    expand_recurrence,
    sunday_weekday,
)
from shared.domain.value_objects import TimeRange


def base(year: int, month: int, day: int, hours: int = 1) -> TimeRange:
    start = datetime(year, month, day, 10, 0)
    return TimeRange(start, start + timedelta(hours=hours))


def start_dates(instances):
    return [instance.start.date() for instance in instances]


def test_sunday_first_weekday_index() -> None:
    assert sunday_weekday(date(2025, 2, 2)) == 0  # Sunday
    assert sunday_weekday(date(2025, 2, 3)) == 1  # Monday
    assert sunday_weekday(date(2025, 2, 8)) == 6  # Saturday


def test_weekly_monday_wednesday_scenario() -> None:
    rule = RecurrenceRule.build(type="weekly", end_date=date(2025, 2, 17), days_of_week=[1, 3])

    instances = expand_recurrence(base(2025, 2, 3), rule)

    assert start_dates(instances) == [
        date(2025, 2, 3),
        date(2025, 2, 5),
        date(2025, 2, 10),
        date(2025, 2, 12),
        date(2025, 2, 17),
    ]
    assert all(instance.duration == timedelta(hours=1) for instance in instances)
    assert all(instance.start.hour == 10 for instance in instances)


def test_weekly_interval_skips_weeks() -> None:
    rule = RecurrenceRule.build(type="weekly", interval=2, end_date=date(2025, 3, 3), days_of_week=[1])

    instances = expand_recurrence(base(2025, 2, 3), rule)

    assert start_dates(instances) == [date(2025, 2, 3), date(2025, 2, 17), date(2025, 3, 3)]


def test_weekly_without_days_repeats_base_weekday() -> None:
    rule = RecurrenceRule.build(type="weekly", end_date=date(2025, 2, 20))

    instances = expand_recurrence(base(2025, 2, 5), rule)

    assert start_dates(instances) == [date(2025, 2, 5), date(2025, 2, 12), date(2025, 2, 19)]


def test_monthly_clamps_to_last_day_of_month() -> None:
    rule = RecurrenceRule.build(type="monthly", end_date=date(2025, 4, 30))

    instances = expand_recurrence(base(2025, 1, 31), rule)

    assert start_dates(instances) == [
        date(2025, 1, 31),
        date(2025, 2, 28),
        date(2025, 3, 31),
        date(2025, 4, 30),
    ]


def test_monthly_day_of_month_before_base_is_skipped() -> None:
    rule = RecurrenceRule.build(type="monthly", end_date=date(2025, 3, 31), day_of_month=15)

    instances = expand_recurrence(base(2025, 1, 20), rule)

    assert start_dates(instances) == [date(2025, 2, 15), date(2025, 3, 15)]


def test_expansion_is_deterministic() -> None:
    rule = RecurrenceRule.build(type="weekly", end_date=date(2025, 4, 1), days_of_week=[5, 2, 2])
    period = base(2025, 2, 4)

    assert expand_recurrence(period, rule) == expand_recurrence(period, rule)
    assert rule.days_of_week == (2, 5)


def test_instances_are_bounded_sorted_and_unique() -> None:
    rule = RecurrenceRule.build(type="weekly", end_date=date(2025, 3, 15), days_of_week=[0, 1, 4, 6])
    period = base(2025, 2, 3)

    instances = expand_recurrence(period, rule)

    starts = [instance.start for instance in instances]
    assert starts == sorted(starts)
    assert len(set(starts)) == len(starts)
    assert all(period.start <= start for start in starts)
    assert all(start.date() <= rule.end_date for start in starts)


def test_no_matching_occurrence_falls_back_to_base() -> None:
    # Sunday before a Monday base, and the next Sunday is past the end date
    rule = RecurrenceRule.build(type="weekly", end_date=date(2025, 2, 4), days_of_week=[0])
    period = base(2025, 2, 3)

    assert expand_recurrence(period, rule) == [period]


def test_rule_without_end_date_is_single_booking() -> None:
    rule = RecurrenceRule.build(type="weekly", days_of_week=[1, 3])
    period = base(2025, 2, 3)

    assert not rule.is_recurring
    assert expand_recurrence(period, rule) == [period]


def test_none_type_is_single_booking() -> None:
    period = base(2025, 2, 3)

    assert expand_recurrence(period, RecurrenceRule()) == [period]


@pytest.mark.parametrize(
    "kwargs",
    [
        {"type": "weekly", "interval": 0, "end_date": date(2025, 3, 1)},
        {"type": "weekly", "interval": -1, "end_date": date(2025, 3, 1)},
        {"type": "weekly", "end_date": date(2025, 1, 1)},
        {"type": "weekly", "end_date": date(2025, 3, 1), "days_of_week": [7]},
        {"type": "monthly", "end_date": date(2025, 3, 1), "day_of_month": 32},
        {"type": "monthly", "end_date": date(2025, 3, 1), "day_of_month": 0},
    ],
)
def test_invalid_rule_raises_configuration_error(kwargs) -> None:
    rule = RecurrenceRule.build(**kwargs)

    with pytest.raises(ConfigurationError):
        expand_recurrence(base(2025, 2, 3), rule)


def test_unknown_type_raises_configuration_error() -> None:
    with pytest.raises(ConfigurationError):
        RecurrenceRule.build(type="daily", end_date=date(2025, 3, 1))


def test_describe_recurrence() -> None:
    weekly = RecurrenceRule.build(type="weekly", interval=2, end_date=date(2025, 3, 1), days_of_week=[3, 1])
    monthly = RecurrenceRule.build(type=RecurrenceType.MONTHLY, end_date=date(2025, 6, 30), day_of_month=15)

    assert describe_recurrence(weekly) == "Every 2 weeks on Monday, Wednesday until 2025-03-01"
    assert describe_recurrence(monthly) == "Every month on day 15 until 2025-06-30"
    assert describe_recurrence(RecurrenceRule()) == "Does not repeat"
