"""Reservation aggregate lifecycle tests."""

from __future__ import annotations

from datetime import datetime, timedelta
from decimal import Decimal
from uuid import uuid4

import pytest

from apps.bookings.domain.entities import Reservation, ReservationStatus, ResourceKind, ReturnStatus
from apps.bookings.domain.events import ReservationStatusChanged, VehicleReturnRecorded, VehicleReturnVerified
from apps.bookings.domain.exceptions import LifecycleError
from shared.domain.value_objects import TimeRange

BORROWER = 7
APPROVER = 8


def make_reservation(kind=ResourceKind.ASSET, status=ReservationStatus.PENDING, **kwargs) -> Reservation:
    start = datetime(2025, 3, 1, 9)
    return Reservation(
        organization_id=uuid4(),
        resource_kind=kind,
        resource_id=uuid4(),
        borrower_id=BORROWER,
        period=TimeRange(start, start + timedelta(hours=8)),
        status=status,
        **kwargs,
    )


@pytest.mark.parametrize(
    "source, target",
    [
        (ReservationStatus.PENDING, ReservationStatus.APPROVED),
        (ReservationStatus.PENDING, ReservationStatus.REJECTED),
        (ReservationStatus.PENDING, ReservationStatus.CANCELLED),
        (ReservationStatus.APPROVED, ReservationStatus.RETURNED),
        (ReservationStatus.APPROVED, ReservationStatus.CANCELLED),
    ],
)
def test_allowed_transitions(source, target) -> None:
    reservation = make_reservation(status=source)

    reservation.transition_to(target, APPROVER)

    assert reservation.status == target
    [event] = reservation.events
    assert isinstance(event, ReservationStatusChanged)
    assert (event.previous_status, event.status) == (source.value, target.value)
    assert event.actor_id == APPROVER


@pytest.mark.parametrize(
    "source, target",
    [
        (ReservationStatus.PENDING, ReservationStatus.RETURNED),
        (ReservationStatus.APPROVED, ReservationStatus.REJECTED),
        (ReservationStatus.REJECTED, ReservationStatus.APPROVED),
        (ReservationStatus.CANCELLED, ReservationStatus.PENDING),
        (ReservationStatus.RETURNED, ReservationStatus.CANCELLED),
    ],
)
def test_illegal_transitions_raise(source, target) -> None:
    reservation = make_reservation(status=source)

    with pytest.raises(LifecycleError):
        reservation.transition_to(target, APPROVER)

    assert reservation.status == source
    assert reservation.events == []


def test_recurring_instance_requires_anchor() -> None:
    with pytest.raises(ValueError):
        make_reservation(is_recurring_instance=True)


def test_vehicle_return_without_verification_closes_reservation() -> None:
    reservation = make_reservation(
        kind=ResourceKind.VEHICLE,
        status=ReservationStatus.APPROVED,
        start_odometer_reading=Decimal("1000"),
    )

    reservation.record_vehicle_return(
        actor_id=BORROWER,
        odometer_reading=Decimal("1120.5"),
        distance_traveled=Decimal("120.5"),
        odometer_image="",
        exterior_image="",
        note="Full tank",
        verification_required=False,
    )

    assert reservation.status == ReservationStatus.RETURNED
    assert reservation.return_status == ReturnStatus.VERIFIED
    assert reservation.return_verified_by == BORROWER
    assert reservation.return_verified_at is not None
    assert reservation.return_note == "Full tank"
    assert [type(e) for e in reservation.events] == [ReservationStatusChanged, VehicleReturnRecorded]


def test_vehicle_return_with_verification_waits_for_verifier() -> None:
    reservation = make_reservation(kind=ResourceKind.VEHICLE, status=ReservationStatus.APPROVED)

    reservation.record_vehicle_return(
        actor_id=BORROWER,
        odometer_reading=Decimal("50"),
        distance_traveled=None,
        odometer_image="odo.jpg",
        exterior_image="car.jpg",
        note="",
        verification_required=True,
    )

    assert reservation.status == ReservationStatus.APPROVED
    assert reservation.return_status == ReturnStatus.RETURNED
    assert reservation.return_verified_by is None

    reservation.verify_return(actor_id=APPROVER, approved=True, condition="good")

    assert reservation.status == ReservationStatus.RETURNED
    assert reservation.return_status == ReturnStatus.VERIFIED
    assert reservation.return_verified_by == APPROVER
    assert isinstance(reservation.events[-1], VehicleReturnVerified)


def test_rejected_return_keeps_reservation_approved() -> None:
    reservation = make_reservation(kind=ResourceKind.VEHICLE, status=ReservationStatus.APPROVED)
    reservation.record_vehicle_return(
        actor_id=BORROWER,
        odometer_reading=Decimal("50"),
        distance_traveled=None,
        odometer_image="odo.jpg",
        exterior_image="car.jpg",
        note="",
        verification_required=True,
    )

    reservation.verify_return(actor_id=APPROVER, approved=False, condition="scratched", note="Left door")

    assert reservation.status == ReservationStatus.APPROVED
    assert reservation.return_status == ReturnStatus.REJECTED
    assert reservation.return_condition == "scratched"
    assert reservation.return_note == "Left door"

    with pytest.raises(LifecycleError):
        reservation.verify_return(actor_id=APPROVER, approved=True)


def test_vehicle_return_requires_approved_vehicle_reservation() -> None:
    kwargs = dict(
        actor_id=BORROWER,
        odometer_reading=Decimal("10"),
        distance_traveled=None,
        odometer_image="",
        exterior_image="",
        note="",
        verification_required=False,
    )

    with pytest.raises(LifecycleError):
        make_reservation(kind=ResourceKind.ASSET, status=ReservationStatus.APPROVED).record_vehicle_return(**kwargs)
    with pytest.raises(LifecycleError):
        make_reservation(kind=ResourceKind.VEHICLE, status=ReservationStatus.PENDING).record_vehicle_return(**kwargs)


def test_verify_without_pending_return_raises() -> None:
    reservation = make_reservation(kind=ResourceKind.VEHICLE, status=ReservationStatus.APPROVED)

    with pytest.raises(LifecycleError):
        reservation.verify_return(actor_id=APPROVER, approved=True)
