"""
Recurrence Expansion

Turns a recurrence rule plus a base reservation interval into the concrete
intervals of every occurrence. Pure functions: the same input always yields
the same list.

Weekday indices follow the Sunday-first convention used by the booking
forms: 0=Sunday, 1=Monday, ..., 6=Saturday.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Iterable, List

from dateutil.relativedelta import relativedelta

from apps.bookings.domain.exceptions import ConfigurationError
from shared.domain.value_objects import TimeRange

DAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")


class RecurrenceType(str, Enum):
    NONE = 'none'
    WEEKLY = 'weekly'
    MONTHLY = 'monthly'


@dataclass(frozen=True)
class RecurrenceRule:
    """
    How a reservation repeats

    interval is the step in weeks (weekly) or months (monthly).
    end_date bounds the expansion: an occurrence starting on end_date is
    the last one kept.
    """
    type: RecurrenceType = RecurrenceType.NONE
    interval: int = 1
    end_date: date | None = None
    days_of_week: tuple[int, ...] = ()
    day_of_month: int | None = None

    @classmethod
    def build(
        cls,
        type: str | RecurrenceType = RecurrenceType.NONE,
        interval: int = 1,
        end_date: date | None = None,
        days_of_week: Iterable[int] | None = None,
        day_of_month: int | None = None,
    ) -> RecurrenceRule:
        try:
            recurrence_type = RecurrenceType(type)
        except ValueError:
            raise ConfigurationError(f"Unknown recurrence type: {type!r}")
        return cls(
            type=recurrence_type,
            interval=interval,
            end_date=end_date,
            days_of_week=tuple(sorted(set(days_of_week or ()))),
            day_of_month=day_of_month,
        )

    @property
    def is_recurring(self) -> bool:
        """A rule without an end date is booked as a single reservation"""
        return self.type != RecurrenceType.NONE and self.end_date is not None

    def validate(self, base_start: date) -> None:
        if not isinstance(self.interval, int) or isinstance(self.interval, bool) or self.interval < 1:
            raise ConfigurationError(
                f"Recurrence interval must be a positive integer, got {self.interval!r}"
            )
        if self.end_date is not None and self.end_date < base_start:
            raise ConfigurationError(
                f"Recurrence end date {self.end_date} is before the first occurrence {base_start}"
            )
        for day in self.days_of_week:
            if not 0 <= day <= 6:
                raise ConfigurationError(f"Weekday index must be within 0..6, got {day}")
        if self.day_of_month is not None and not 1 <= self.day_of_month <= 31:
            raise ConfigurationError(
                f"Day of month must be within 1..31, got {self.day_of_month}"
            )


def sunday_weekday(moment: datetime | date) -> int:
    """Weekday index with Sunday as 0"""
    return (moment.weekday() + 1) % 7


def expand_recurrence(base: TimeRange, rule: RecurrenceRule) -> List[TimeRange]:
    """
    Expand a rule into the ordered list of occurrence intervals

    Every occurrence keeps the base duration and time of day. The result is
    never empty: when no occurrence fits the rule, the base interval itself
    is returned.

    Raises:
        ConfigurationError: the rule is invalid for this base interval
    """
    rule.validate(base.start.date())

    if not rule.is_recurring:
        return [base]

    if rule.type == RecurrenceType.WEEKLY:
        instances = _expand_weekly(base, rule)
    else:
        instances = _expand_monthly(base, rule)

    unique = list(dict.fromkeys(instances))
    unique.sort(key=lambda occurrence: occurrence.start)
    return unique or [base]


def _expand_weekly(base: TimeRange, rule: RecurrenceRule) -> List[TimeRange]:
    days = rule.days_of_week or (sunday_weekday(base.start),)
    step = timedelta(weeks=rule.interval)
    instances = []

    current = base.start
    while current.date() <= rule.end_date:
        # Offsets are taken within the Sunday-first week holding ``current``
        for day in days:
            start = current + timedelta(days=day - sunday_weekday(current))
            if start.date() > rule.end_date or start < base.start:
                continue
            instances.append(base.starting_at(start))
        current += step

    return instances


def _expand_monthly(base: TimeRange, rule: RecurrenceRule) -> List[TimeRange]:
    day = rule.day_of_month or base.start.day
    instances = []

    months = 0
    while True:
        # Always step from the base so a clamped day never drifts
        current = base.start + relativedelta(months=months)
        last_day = calendar.monthrange(current.year, current.month)[1]
        start = current.replace(day=min(day, last_day))
        if start.date() > rule.end_date:
            break
        if start >= base.start:
            instances.append(base.starting_at(start))
        months += rule.interval

    return instances


def describe_recurrence(rule: RecurrenceRule) -> str:
    """Human readable summary, e.g. 'Every 2 weeks on Monday, Wednesday until 2025-03-01'"""
    if rule.type == RecurrenceType.NONE:
        return "Does not repeat"

    until = f" until {rule.end_date.isoformat()}" if rule.end_date else ""

    if rule.type == RecurrenceType.WEEKLY:
        every = "Every week" if rule.interval == 1 else f"Every {rule.interval} weeks"
        if rule.days_of_week:
            names = ", ".join(DAY_NAMES[day] for day in rule.days_of_week)
            return f"{every} on {names}{until}"
        return f"{every}{until}"

    every = "Every month" if rule.interval == 1 else f"Every {rule.interval} months"
    on_day = f" on day {rule.day_of_month}" if rule.day_of_month else " on the same day"
    return f"{every}{on_day}{until}"
