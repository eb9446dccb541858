"""Reservation engine entry points.

Each function wires the command handlers to the Django-backed adapters and
runs one operation in its own transaction. Errors are the
``apps.bookings.domain.exceptions`` classes, raised unchanged.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Mapping
from uuid import UUID

from apps.organizations.services import (
    DjangoApprovalPolicySource,
    DjangoProfileDirectory,
    DjangoReturnPolicySource,
)
from apps.resources.services import DjangoResourceDirectory

from .application.command_handlers import (
    ApproverCheck,
    CreateReservationCommand,
    CreateReservationHandler,
    RecordVehicleReturnCommand,
    RecordVehicleReturnHandler,
    ReservationResult,
    TransitionStatusCommand,
    TransitionStatusHandler,
    VerifyVehicleReturnCommand,
    VerifyVehicleReturnHandler,
    parse_resource_kind,
)
from .domain.approval import Ownership, Role
from .domain.recurrence import RecurrenceRule
from .domain.returns import ReturnOutcome, ReturnPhotos
from .repositories import DjangoReservationRepository


def _ownership(value: Ownership | str | None) -> Ownership:
    if isinstance(value, Ownership):
        return value
    if value:
        return Ownership.of_department(value)
    return Ownership.organization_wide()


def create_reservation(
    resource_kind: str,
    resource_id: str | UUID,
    borrower_id: int,
    start: datetime,
    end: datetime,
    note: str | None = None,
    recurrence: RecurrenceRule | Mapping[str, Any] | None = None,
    start_odometer_reading: Decimal | None = None,
) -> ReservationResult:
    handler = CreateReservationHandler(
        reservations=DjangoReservationRepository(),
        resources=DjangoResourceDirectory(),
        profiles=DjangoProfileDirectory(),
    )
    return handler.handle(CreateReservationCommand(
        resource_kind=resource_kind,
        resource_id=resource_id,
        borrower_id=borrower_id,
        start=start,
        end=end,
        note=note or "",
        recurrence=recurrence,
        start_odometer_reading=start_odometer_reading,
    ))


def resolve_approval_role(organization_id: UUID, scope: str, ownership: Ownership | str | None = None) -> Role:
    """Role required to approve reservations of ``scope`` for the given owner."""

    checker = ApproverCheck(DjangoApprovalPolicySource())
    return checker.required_role(organization_id, parse_resource_kind(scope), _ownership(ownership))


def transition_status(reservation_id: UUID, actor_id: int, target_status: str) -> None:
    handler = TransitionStatusHandler(
        reservations=DjangoReservationRepository(),
        resources=DjangoResourceDirectory(),
        profiles=DjangoProfileDirectory(),
        policies=DjangoApprovalPolicySource(),
    )
    handler.handle(TransitionStatusCommand(
        reservation_id=reservation_id,
        actor_id=actor_id,
        target_status=target_status,
    ))


def record_vehicle_return(
    reservation_id: UUID,
    actor_id: int,
    odometer_reading: Decimal,
    photos: ReturnPhotos | Mapping[str, str] | None = None,
    note: str = "",
) -> ReturnOutcome:
    if photos is None:
        photos = ReturnPhotos()
    elif not isinstance(photos, ReturnPhotos):
        photos = ReturnPhotos(
            odometer_image=photos.get("odometer_image"),
            exterior_image=photos.get("exterior_image"),
        )

    handler = RecordVehicleReturnHandler(
        reservations=DjangoReservationRepository(),
        resources=DjangoResourceDirectory(),
        profiles=DjangoProfileDirectory(),
        policies=DjangoApprovalPolicySource(),
        return_policies=DjangoReturnPolicySource(),
    )
    return handler.handle(RecordVehicleReturnCommand(
        reservation_id=reservation_id,
        actor_id=actor_id,
        odometer_reading=odometer_reading,
        photos=photos,
        note=note or "",
    ))


def verify_vehicle_return(
    reservation_id: UUID,
    actor_id: int,
    approved: bool,
    condition: str = "",
    note: str = "",
) -> None:
    handler = VerifyVehicleReturnHandler(
        reservations=DjangoReservationRepository(),
        resources=DjangoResourceDirectory(),
        profiles=DjangoProfileDirectory(),
        policies=DjangoApprovalPolicySource(),
    )
    handler.handle(VerifyVehicleReturnCommand(
        reservation_id=reservation_id,
        actor_id=actor_id,
        approved=approved,
        condition=condition or "",
        note=note or "",
    ))
