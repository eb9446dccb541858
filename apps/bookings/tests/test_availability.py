"""Double-booking check tests."""

from __future__ import annotations

from datetime import datetime, timedelta
from uuid import uuid4

import pytest

from apps.bookings.domain.availability import ReservedSlot, ResourceTimeline, overlaps
from apps.bookings.domain.entities import ReservationStatus
from shared.domain.value_objects import TimeRange


def span(start_day: int, end_day: int) -> TimeRange:
    return TimeRange(datetime(2025, 1, start_day), datetime(2025, 1, end_day))


def timeline(*slots: ReservedSlot) -> ResourceTimeline:
    return ResourceTimeline.from_slots("asset", uuid4(), slots)


def slot(period: TimeRange, status: ReservationStatus = ReservationStatus.PENDING) -> ReservedSlot:
    return ReservedSlot(reservation_id=uuid4(), period=period, status=status)


@pytest.mark.parametrize(
    "a, b",
    [
        (span(10, 12), span(11, 13)),
        (span(10, 12), span(12, 14)),
        (span(10, 12), span(13, 14)),
        (span(10, 20), span(12, 14)),
    ],
)
def test_overlap_is_symmetric(a, b) -> None:
    assert overlaps(a, b) == overlaps(b, a)


def test_touching_bounds_overlap() -> None:
    first = span(10, 12)
    end = first.end

    assert overlaps(first, TimeRange(end, end + timedelta(hours=2)))
    assert not overlaps(first, TimeRange(end + timedelta(microseconds=1), end + timedelta(hours=2)))


def test_scenario_from_booking_calendar() -> None:
    existing = timeline(slot(span(10, 12)))

    assert not existing.can_reserve(span(12, 14))
    assert existing.can_reserve(span(13, 14))


def test_inactive_reservations_do_not_block() -> None:
    existing = timeline(
        slot(span(10, 12), ReservationStatus.CANCELLED),
        slot(span(10, 12), ReservationStatus.REJECTED),
        slot(span(10, 12), ReservationStatus.RETURNED),
    )

    assert len(existing) == 0
    assert existing.can_reserve(span(10, 12))


def test_approved_reservation_blocks() -> None:
    existing = timeline(slot(span(10, 12), ReservationStatus.APPROVED))

    assert not existing.can_reserve(span(11, 11))


def test_conflicts_are_sorted_by_start() -> None:
    later = slot(span(20, 22))
    earlier = slot(span(5, 8))
    existing = timeline(later, earlier)

    conflicts = existing.get_conflicts(span(1, 25))

    assert [c.reservation_id for c in conflicts] == [earlier.reservation_id, later.reservation_id]
