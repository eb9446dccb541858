"""
Reservation Event Handlers

Subscribers of the reservation domain events. They run after the
reservation transaction has committed and hand the side effects to the
notification and audit adapters; a failure here is logged by the message
bus and never undoes the reservation.

Notifications and audit entries are registered as separate subscribers so
an unreachable broker for one does not skip the other.
"""

from __future__ import annotations

from decimal import Decimal
from typing import List

import structlog

from apps.bookings.application.command_handlers import ApproverCheck
from apps.bookings.application.ports import AuditLog, Notifier, ProfileDirectory
from apps.bookings.domain.approval import Ownership
from apps.bookings.domain.entities import ResourceKind
from apps.bookings.domain.events import (
    ReservationCreated,
    ReservationStatusChanged,
    VehicleReturnRecorded,
    VehicleReturnVerified,
)

logger = structlog.get_logger(__name__)


def notification_type(resource_kind: str, suffix: str) -> str:
    """Equipment keeps the unprefixed name, e.g. 'reservation_created'"""
    if resource_kind == "asset":
        return f"reservation_{suffix}"
    return f"{resource_kind}_reservation_{suffix}"


def _decimal(value: Decimal | None) -> str | None:
    return str(value) if value is not None else None


def _created_payload(event: ReservationCreated) -> dict:
    return {
        "reservation_id": str(event.reservation_id),
        "resource_kind": event.resource_kind,
        "resource_id": str(event.resource_id),
        "resource_name": event.resource_name,
        "start": event.first_start.isoformat(),
        "end": event.last_end.isoformat(),
        "instance_count": event.instance_count,
        "recurrence": event.recurrence_description,
    }


def _status_payload(event: ReservationStatusChanged) -> dict:
    return {
        "reservation_id": str(event.reservation_id),
        "resource_kind": event.resource_kind,
        "resource_id": str(event.resource_id),
        "previous_status": event.previous_status,
        "status": event.status,
    }


def _return_payload(event: VehicleReturnRecorded) -> dict:
    return {
        "reservation_id": str(event.reservation_id),
        "resource_id": str(event.resource_id),
        "odometer_reading": _decimal(event.odometer_reading),
        "distance_traveled": _decimal(event.distance_traveled),
        "verification_pending": event.verification_pending,
    }


def _verification_payload(event: VehicleReturnVerified) -> dict:
    return {
        "reservation_id": str(event.reservation_id),
        "resource_id": str(event.resource_id),
        "approved": event.approved,
        "condition": event.condition,
    }


class ReservationNotifications:
    """Messages to borrowers and approvers"""

    def __init__(self, notifier: Notifier, profiles: ProfileDirectory, approvers: ApproverCheck):
        self.notifier = notifier
        self.profiles = profiles
        self.approvers = approvers

    def approver_ids(self, event: ReservationCreated) -> List[int]:
        if event.owner_department:
            ownership = Ownership.of_department(event.owner_department)
        else:
            ownership = Ownership.organization_wide()
        kind = ResourceKind(event.resource_kind)

        return [
            member.user_id
            for member in self.profiles.members_of(event.organization_id)
            if member.user_id != event.borrower_id
            and self.approvers.may_approve(member, event.organization_id, kind, ownership)
        ]

    def on_reservation_created(self, event: ReservationCreated):
        payload = _created_payload(event)
        self.notifier.emit(
            user_id=event.borrower_id,
            organization_id=event.organization_id,
            type=notification_type(event.resource_kind, "created"),
            payload=payload,
        )

        approver_ids = self.approver_ids(event)
        for user_id in approver_ids:
            self.notifier.emit(
                user_id=user_id,
                organization_id=event.organization_id,
                type=notification_type(event.resource_kind, "requested"),
                payload={**payload, "borrower_id": event.borrower_id},
            )
        logger.info(
            "reservation.created.notified",
            reservation_id=str(event.reservation_id),
            approvers=len(approver_ids),
        )

    def on_status_changed(self, event: ReservationStatusChanged):
        self.notifier.emit(
            user_id=event.borrower_id,
            organization_id=event.organization_id,
            type=notification_type(event.resource_kind, "status_changed"),
            payload=_status_payload(event),
        )

    def on_vehicle_return_recorded(self, event: VehicleReturnRecorded):
        if event.actor_id == event.borrower_id:
            return
        self.notifier.emit(
            user_id=event.borrower_id,
            organization_id=event.organization_id,
            type="vehicle_return_recorded",
            payload=_return_payload(event),
        )

    def on_vehicle_return_verified(self, event: VehicleReturnVerified):
        self.notifier.emit(
            user_id=event.borrower_id,
            organization_id=event.organization_id,
            type="vehicle_return_verified",
            payload=_verification_payload(event),
        )


class ReservationAuditTrail:
    """One audit entry per reservation event"""

    def __init__(self, audit_log: AuditLog):
        self.audit_log = audit_log

    def on_reservation_created(self, event: ReservationCreated):
        self.audit_log.record(
            organization_id=event.organization_id,
            actor_id=event.borrower_id,
            action=f"{event.resource_kind}_reservation_create",
            target_type=f"{event.resource_kind}_reservation",
            target_id=str(event.reservation_id),
            metadata={**_created_payload(event), "recurrence_type": event.recurrence_type},
        )

    def on_status_changed(self, event: ReservationStatusChanged):
        self.audit_log.record(
            organization_id=event.organization_id,
            actor_id=event.actor_id,
            action=f"{event.resource_kind}_reservation_status_update",
            target_type=f"{event.resource_kind}_reservation",
            target_id=str(event.reservation_id),
            metadata=_status_payload(event),
        )

    def on_vehicle_return_recorded(self, event: VehicleReturnRecorded):
        self.audit_log.record(
            organization_id=event.organization_id,
            actor_id=event.actor_id,
            action="vehicle_return",
            target_type="vehicle_reservation",
            target_id=str(event.reservation_id),
            metadata=_return_payload(event),
        )

    def on_vehicle_return_verified(self, event: VehicleReturnVerified):
        self.audit_log.record(
            organization_id=event.organization_id,
            actor_id=event.actor_id,
            action="vehicle_return_verify",
            target_type="vehicle_reservation",
            target_id=str(event.reservation_id),
            metadata=_verification_payload(event),
        )


def register_event_handlers(bus, *subscribers):
    for subscriber in subscribers:
        bus.register_event_handler(ReservationCreated, subscriber.on_reservation_created)
        bus.register_event_handler(ReservationStatusChanged, subscriber.on_status_changed)
        bus.register_event_handler(VehicleReturnRecorded, subscriber.on_vehicle_return_recorded)
        bus.register_event_handler(VehicleReturnVerified, subscriber.on_vehicle_return_verified)
