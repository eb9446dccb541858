"""
Resource Timeline

The double-booking check. A ResourceTimeline is a snapshot of the active
(pending or approved) reservations of one resource; a candidate interval
can be reserved only if it overlaps none of them.

Overlap is inclusive on both bounds: a reservation ending at T and another
starting at T conflict.

Strategy (Defense in Depth):
1. Domain validation: can_reserve() checks the snapshot for overlaps
2. Row lock: the writer locks the resource row (SELECT FOR UPDATE)
3. Storage guard: PostgreSQL EXCLUDE constraint, or a re-check right
   before insert on other backends
"""

from dataclasses import dataclass, field
from typing import Iterable, List
from uuid import UUID

from shared.domain.value_objects import TimeRange

from apps.bookings.domain.entities import ACTIVE_STATUSES, ReservationStatus


def overlaps(a: TimeRange, b: TimeRange) -> bool:
    """Inclusive overlap test; symmetric in its arguments"""
    return a.overlaps_with(b)


@dataclass(frozen=True)
class ReservedSlot:
    """An existing reservation as seen by the availability check"""
    reservation_id: UUID
    period: TimeRange
    status: ReservationStatus = ReservationStatus.PENDING

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES


@dataclass
class ResourceTimeline:
    """
    Active reservations of a single resource

    Multi-unit equipment (quantity > 1) is still one indivisible timeline.

    Usage:
        timeline = reservations.timeline_for(kind, resource_id)
        if not timeline.can_reserve(period):
            raise SchedulingConflict(...)
    """
    resource_kind: str
    resource_id: UUID
    slots: List[ReservedSlot] = field(default_factory=list)

    @classmethod
    def from_slots(cls, resource_kind: str, resource_id: UUID, slots: Iterable[ReservedSlot]):
        return cls(
            resource_kind=resource_kind,
            resource_id=resource_id,
            slots=[slot for slot in slots if slot.is_active],
        )

    def can_reserve(self, period: TimeRange) -> bool:
        """True when no active reservation overlaps ``period``"""
        return not any(overlaps(slot.period, period) for slot in self.slots)

    def get_conflicts(self, period: TimeRange) -> List[ReservedSlot]:
        """All active reservations overlapping ``period``, earliest first"""
        conflicts = [slot for slot in self.slots if overlaps(slot.period, period)]
        conflicts.sort(key=lambda slot: slot.period.start)
        return conflicts

    def __len__(self) -> int:
        return len(self.slots)

    def __str__(self):
        return f"ResourceTimeline({self.resource_kind}:{self.resource_id}, slots={len(self.slots)})"
