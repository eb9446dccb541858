"""
Reservation Domain Events

Events that represent things that have happened in the reservation domain.
These are published after successful transaction commits.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from shared.domain.base import DomainEvent


@dataclass(kw_only=True)
class ReservationCreated(DomainEvent):
    """
    Event: a reservation request was stored

    Raised once per request; a recurring group of N instances produces a
    single event with instance_count=N.

    Triggers:
    - Notify the borrower and the approvers of the resource
    - Audit log entry
    """
    reservation_id: UUID
    organization_id: UUID
    resource_kind: str
    resource_id: UUID
    resource_name: str
    owner_department: str | None = None
    borrower_id: int
    first_start: datetime
    last_end: datetime
    instance_count: int
    recurrence_type: str = 'none'
    recurrence_description: str = ''


@dataclass(kw_only=True)
class ReservationStatusChanged(DomainEvent):
    """
    Event: a reservation moved through the lifecycle FSM

    Triggers:
    - Notify the borrower
    - Audit log entry with previous and next status
    """
    reservation_id: UUID
    organization_id: UUID
    resource_kind: str
    resource_id: UUID
    borrower_id: int
    actor_id: int
    previous_status: str
    status: str


@dataclass(kw_only=True)
class VehicleReturnRecorded(DomainEvent):
    """
    Event: odometer reading and photos of a vehicle return were stored

    verification_pending is True when the organization requires a second
    person to confirm the return.
    """
    reservation_id: UUID
    organization_id: UUID
    resource_id: UUID
    borrower_id: int
    actor_id: int
    odometer_reading: Decimal
    distance_traveled: Decimal | None
    verification_pending: bool


@dataclass(kw_only=True)
class VehicleReturnVerified(DomainEvent):
    """Event: a pending vehicle return was confirmed or rejected"""
    reservation_id: UUID
    organization_id: UUID
    resource_id: UUID
    borrower_id: int
    actor_id: int
    approved: bool
    condition: str = ''
