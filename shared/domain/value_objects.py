"""
Common Value Objects

Value objects used across multiple domains:
- TimeRange: a closed interval of timestamps (reservation start to end)
"""

from dataclasses import dataclass
from datetime import datetime, timedelta

from shared.domain.base import ValueObject


@dataclass(frozen=True)
class TimeRange(ValueObject):
    """
    Time range value object

    Represents the closed interval [start, end]. Both bounds belong to the
    range, so a range may be a single instant (start == end).
    """
    start: datetime
    end: datetime

    def __post_init__(self):
        if self.start > self.end:
            raise ValueError(f"Start ({self.start}) must not be after end ({self.end})")

    def overlaps_with(self, other: 'TimeRange') -> bool:
        """
        Check if this range overlaps with another

        Bounds are inclusive on both sides, so ranges that merely touch
        (one ends exactly when the other starts) DO overlap.

        Examples:
            - [10:00, 12:00] overlaps with [11:00, 13:00] -> True
            - [10:00, 12:00] overlaps with [12:00, 14:00] -> True (touching)
            - [10:00, 12:00] overlaps with [12:01, 14:00] -> False
        """
        if not isinstance(other, TimeRange):
            raise TypeError("Can only check overlap with another TimeRange")

        return self.start <= other.end and self.end >= other.start

    def starting_at(self, start: datetime) -> 'TimeRange':
        """Same duration, moved to begin at ``start``."""
        return TimeRange(start, start + self.duration)

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def __str__(self):
        return f"{self.start.isoformat()} - {self.end.isoformat()}"

    def __repr__(self):
        return f"TimeRange({self.start.isoformat()}, {self.end.isoformat()})"
