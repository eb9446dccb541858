"""Django ORM persistence for Reservation aggregates."""

from __future__ import annotations

from uuid import UUID

import structlog
from django.db import IntegrityError, connection, transaction  # type: ignore
from django.db.utils import NotSupportedError  # type: ignore
from django.utils import timezone  # type: ignore

from shared.domain.value_objects import TimeRange
from apps.bookings.domain.availability import ReservedSlot, ResourceTimeline
from apps.bookings.domain.entities import (
    ACTIVE_STATUSES,
    Reservation,
    ReservationStatus,
    ResourceKind,
    ReturnStatus,
)
from apps.bookings.domain.exceptions import SchedulingConflict
from apps.bookings.domain.recurrence import RecurrenceRule, RecurrenceType

from .models import Reservation as ReservationModel

logger = structlog.get_logger(__name__)

EXCLUSION_CONSTRAINT = "reservation_no_active_overlap"

ACTIVE_STATUS_VALUES = [status.value for status in ACTIVE_STATUSES]


def _lock_queryset_if_possible(queryset):
    """Apply select_for_update when inside transaction.atomic()."""

    if not transaction.get_connection().in_atomic_block:
        return queryset

    try:
        return queryset.select_for_update()
    except NotSupportedError:
        return queryset


def _local_date(moment):
    if timezone.is_aware(moment):
        return timezone.localtime(moment).date()
    return moment.date()


def to_entity(row: ReservationModel) -> Reservation:
    recurrence = RecurrenceRule(
        type=RecurrenceType(row.recurrence_type),
        interval=row.recurrence_interval,
        end_date=row.recurrence_end_date,
        days_of_week=tuple(row.recurrence_days_of_week or ()),
        day_of_month=row.recurrence_day_of_month,
    )
    return Reservation(
        id=row.id,
        created_at=row.created_at,
        updated_at=row.updated_at,
        organization_id=row.organization_id,
        resource_kind=ResourceKind(row.resource_kind),
        resource_id=row.resource_id,
        borrower_id=row.borrower_id,
        period=TimeRange(row.start, row.end),
        status=ReservationStatus(row.status),
        note=row.note,
        recurrence=recurrence,
        parent_reservation_id=row.parent_reservation_id,
        is_recurring_instance=row.is_recurring_instance,
        start_odometer_reading=row.start_odometer_reading,
        odometer_reading=row.odometer_reading,
        distance_traveled=row.distance_traveled,
        return_status=ReturnStatus(row.return_status) if row.return_status else None,
        return_verified_by=row.return_verified_by_id,
        return_verified_at=row.return_verified_at,
        return_note=row.return_note,
        return_condition=row.return_condition,
        odometer_image=row.odometer_image,
        exterior_image=row.exterior_image,
    )


def _mutable_values(reservation: Reservation) -> dict:
    # Identity, resource and recurrence columns never change after insert
    return {
        "status": reservation.status.value,
        "note": reservation.note,
        "odometer_reading": reservation.odometer_reading,
        "distance_traveled": reservation.distance_traveled,
        "return_status": reservation.return_status.value if reservation.return_status else "",
        "return_verified_by_id": reservation.return_verified_by,
        "return_verified_at": reservation.return_verified_at,
        "return_note": reservation.return_note,
        "return_condition": reservation.return_condition,
        "odometer_image": reservation.odometer_image,
        "exterior_image": reservation.exterior_image,
    }


def to_model(reservation: Reservation) -> ReservationModel:
    rule = reservation.recurrence
    return ReservationModel(
        id=reservation.id,
        organization_id=reservation.organization_id,
        resource_kind=reservation.resource_kind.value,
        resource_id=reservation.resource_id,
        borrower_id=reservation.borrower_id,
        start=reservation.period.start,
        end=reservation.period.end,
        recurrence_type=rule.type.value,
        recurrence_interval=rule.interval,
        recurrence_end_date=rule.end_date,
        recurrence_days_of_week=list(rule.days_of_week),
        recurrence_day_of_month=rule.day_of_month,
        parent_reservation_id=reservation.parent_reservation_id,
        is_recurring_instance=reservation.is_recurring_instance,
        start_odometer_reading=reservation.start_odometer_reading,
        **_mutable_values(reservation),
    )


class DjangoReservationRepository:
    """
    Reservation storage

    add() carries the storage guard: on PostgreSQL the exclusion constraint
    rejects an overlapping insert, elsewhere the overlap is re-queried right
    before the insert inside the caller's transaction.
    """

    def get(self, reservation_id: UUID, *, lock: bool = False) -> Reservation | None:
        queryset = ReservationModel.objects.filter(pk=reservation_id)
        if lock:
            queryset = _lock_queryset_if_possible(queryset)
        row = queryset.first()
        return to_entity(row) if row else None

    def timeline_for(self, kind: ResourceKind, resource_id: UUID) -> ResourceTimeline:
        rows = self._active_rows(kind, resource_id).only("id", "start", "end", "status")
        slots = [
            ReservedSlot(
                reservation_id=row.id,
                period=TimeRange(row.start, row.end),
                status=ReservationStatus(row.status),
            )
            for row in rows
        ]
        return ResourceTimeline.from_slots(ResourceKind(kind).value, resource_id, slots)

    def add(self, reservation: Reservation) -> None:
        if connection.vendor != "postgresql":
            self._guard_overlap(reservation)

        try:
            with transaction.atomic():
                to_model(reservation).save(force_insert=True)
        except IntegrityError as exc:
            if EXCLUSION_CONSTRAINT not in str(exc):
                raise
            logger.warning(
                "reservation.storage_guard.rejected",
                resource_id=str(reservation.resource_id),
                start=reservation.period.start.isoformat(),
            )
            raise SchedulingConflict(
                "The resource is already reserved for this period",
                conflict_date=_local_date(reservation.period.start),
            ) from exc

    def save(self, reservation: Reservation) -> None:
        ReservationModel.objects.filter(pk=reservation.id).update(
            updated_at=timezone.now(),
            **_mutable_values(reservation),
        )

    def _active_rows(self, kind: ResourceKind, resource_id: UUID):
        return ReservationModel.objects.filter(
            resource_kind=ResourceKind(kind).value,
            resource_id=resource_id,
            status__in=ACTIVE_STATUS_VALUES,
        )

    def _guard_overlap(self, reservation: Reservation) -> None:
        if not reservation.is_active:
            return
        period = reservation.period
        clash = (
            self._active_rows(reservation.resource_kind, reservation.resource_id)
            .filter(start__lte=period.end, end__gte=period.start)
            .exclude(pk=reservation.id)
            .exists()
        )
        if clash:
            logger.warning(
                "reservation.storage_guard.rejected",
                resource_id=str(reservation.resource_id),
                start=period.start.isoformat(),
            )
            raise SchedulingConflict(
                "The resource is already reserved for this period",
                conflict_date=_local_date(period.start),
            )
