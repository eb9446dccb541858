"""
Ports

Interfaces of the collaborators the reservation engine depends on but does
not implement. Django-backed adapters live in the apps that own the data
(resources, organizations, notifications, audit) and are injected into the
command handlers.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, List, Mapping, Protocol
from uuid import UUID

from apps.bookings.domain.approval import ApprovalPolicy, Ownership, Role
from apps.bookings.domain.availability import ResourceTimeline
from apps.bookings.domain.entities import Reservation, ResourceKind
from apps.bookings.domain.returns import ReturnVerificationPolicy

RESOURCE_AVAILABLE = 'available'
RESOURCE_RENTED = 'rented'


@dataclass(frozen=True)
class ResourceSnapshot:
    kind: ResourceKind
    id: UUID
    organization_id: UUID | None
    name: str
    status: str = RESOURCE_AVAILABLE
    loanable: bool | None = None
    usable_until: date | None = None
    ownership: Ownership = Ownership()
    current_odometer: Decimal | None = None


@dataclass(frozen=True)
class ProfileSnapshot:
    user_id: int
    organization_id: UUID | None
    department: str | None
    role: Role


class ResourceDirectory(Protocol):
    def resolve(self, kind: ResourceKind, identity: str | UUID, *, lock: bool = False) -> ResourceSnapshot | None:
        """Find a resource by UUID or short public alias"""

    def mark_status(
        self,
        kind: ResourceKind,
        resource_id: UUID,
        status: str,
        *,
        current_odometer: Decimal | None = None,
    ) -> None:
        ...


class ProfileDirectory(Protocol):
    def get(self, user_id: int) -> ProfileSnapshot | None:
        ...

    def members_of(self, organization_id: UUID) -> List[ProfileSnapshot]:
        ...


class ApprovalPolicySource(Protocol):
    def policies_for(self, organization_id: UUID, scope: ResourceKind) -> List[ApprovalPolicy]:
        ...


class ReturnPolicySource(Protocol):
    def return_policy_for(self, organization_id: UUID) -> ReturnVerificationPolicy:
        ...


class ReservationRepository(Protocol):
    def get(self, reservation_id: UUID, *, lock: bool = False) -> Reservation | None:
        ...

    def timeline_for(self, kind: ResourceKind, resource_id: UUID) -> ResourceTimeline:
        """Fresh snapshot of the resource's pending/approved reservations"""

    def add(self, reservation: Reservation) -> None:
        """
        Insert a new reservation

        Raises SchedulingConflict when the storage guard finds an overlap
        that the availability check missed.
        """

    def save(self, reservation: Reservation) -> None:
        ...


class Notifier(Protocol):
    def emit(self, *, user_id: int, organization_id: UUID | None, type: str, payload: Mapping[str, Any]) -> None:
        """Fire and forget"""


class AuditLog(Protocol):
    def record(
        self,
        *,
        organization_id: UUID | None,
        actor_id: int | None,
        action: str,
        target_type: str,
        target_id: str | None,
        metadata: Mapping[str, Any],
    ) -> None:
        """Fire and forget"""
