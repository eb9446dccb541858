"""
Reservation Domain Entities

Core business entities for the reservation domain:
- Reservation: aggregate root for one booked interval of one resource
- ReservationStatus: FSM states for the reservation lifecycle
- ReturnStatus: progress of a vehicle return
- ResourceKind: which kind of resource is reserved
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from shared.domain.base import Aggregate, utcnow
from shared.domain.value_objects import TimeRange

from apps.bookings.domain.exceptions import LifecycleError
from apps.bookings.domain.recurrence import RecurrenceRule


class ResourceKind(str, Enum):
    ASSET = 'asset'        # equipment
    SPACE = 'space'        # rooms
    VEHICLE = 'vehicle'


class ReservationStatus(str, Enum):
    """
    Reservation Status Finite State Machine

    State transitions:
    - PENDING -> APPROVED (approver accepted the request)
    - PENDING -> REJECTED (approver declined the request)
    - PENDING -> CANCELLED (borrower or approver withdrew the request)
    - APPROVED -> RETURNED (resource handed back)
    - APPROVED -> CANCELLED (approver withdrew the booking)
    """
    PENDING = 'pending'
    APPROVED = 'approved'
    REJECTED = 'rejected'
    RETURNED = 'returned'
    CANCELLED = 'cancelled'


class ReturnStatus(str, Enum):
    RETURNED = 'returned'      # handed back, waiting for verification
    VERIFIED = 'verified'
    REJECTED = 'rejected'      # verifier did not accept the return


# Statuses that occupy the resource timeline
ACTIVE_STATUSES = frozenset({ReservationStatus.PENDING, ReservationStatus.APPROVED})

TRANSITIONS = {
    ReservationStatus.PENDING: frozenset({
        ReservationStatus.APPROVED,
        ReservationStatus.REJECTED,
        ReservationStatus.CANCELLED,
    }),
    ReservationStatus.APPROVED: frozenset({
        ReservationStatus.RETURNED,
        ReservationStatus.CANCELLED,
    }),
}


@dataclass(eq=False, kw_only=True)
class Reservation(Aggregate):
    """
    Reservation Aggregate Root

    One booked interval of one resource. A recurring request produces one
    anchor reservation plus sibling instances pointing at it.

    Key invariants:
    - period.start <= period.end
    - organization_id is inherited from the resource and never changes
    - a recurring instance always references its anchor
    - distance_traveled is only set when both odometer readings are known
    """

    # References
    organization_id: UUID
    resource_kind: ResourceKind
    resource_id: UUID
    borrower_id: int

    period: TimeRange
    status: ReservationStatus = ReservationStatus.PENDING
    note: str = ''

    # Recurrence linkage
    recurrence: RecurrenceRule = field(default_factory=RecurrenceRule)
    parent_reservation_id: UUID | None = None
    is_recurring_instance: bool = False

    # Vehicle return
    start_odometer_reading: Decimal | None = None
    odometer_reading: Decimal | None = None
    distance_traveled: Decimal | None = None
    return_status: ReturnStatus | None = None
    return_verified_by: int | None = None
    return_verified_at: datetime | None = None
    return_note: str = ''
    return_condition: str = ''
    odometer_image: str = ''
    exterior_image: str = ''

    def __post_init__(self):
        if self.is_recurring_instance and self.parent_reservation_id is None:
            raise ValueError("A recurring instance must reference its anchor reservation")

    # --- lifecycle ---------------------------------------------------------

    def can_transition_to(self, target: ReservationStatus) -> bool:
        return ReservationStatus(target) in TRANSITIONS.get(self.status, frozenset())

    def transition_to(self, target: ReservationStatus, actor_id: int):
        """
        Move to ``target`` if the FSM allows it

        Events: ReservationStatusChanged
        Raises:
            LifecycleError: the transition is not allowed from the current status
        """
        target = ReservationStatus(target)
        if not self.can_transition_to(target):
            raise LifecycleError(
                f"Cannot change reservation {self.id} from {self.status.value} to {target.value}"
            )

        from apps.bookings.domain.events import ReservationStatusChanged

        previous = self.status
        self.status = target
        self.updated_at = utcnow()

        self.add_event(ReservationStatusChanged(
            aggregate_id=self.id,
            reservation_id=self.id,
            organization_id=self.organization_id,
            resource_kind=self.resource_kind.value,
            resource_id=self.resource_id,
            borrower_id=self.borrower_id,
            actor_id=actor_id,
            previous_status=previous.value,
            status=target.value,
        ))

    def mark_returned(self, actor_id: int):
        self.transition_to(ReservationStatus.RETURNED, actor_id)

    # --- vehicle return ----------------------------------------------------

    def record_vehicle_return(
        self,
        *,
        actor_id: int,
        odometer_reading: Decimal,
        distance_traveled: Decimal | None,
        odometer_image: str,
        exterior_image: str,
        note: str,
        verification_required: bool,
    ):
        """
        Store the return readings of a vehicle reservation (APPROVED only)

        Without verification the reservation closes at once
        (APPROVED -> RETURNED, return verified by the actor). With
        verification the status stays APPROVED until verify_return().

        Events: VehicleReturnRecorded (+ ReservationStatusChanged when closed)
        """
        if self.resource_kind != ResourceKind.VEHICLE:
            raise LifecycleError(f"Reservation {self.id} is not a vehicle reservation")
        if self.status != ReservationStatus.APPROVED:
            raise LifecycleError(
                f"Cannot return reservation {self.id} in status {self.status.value}. "
                f"Reservation must be APPROVED."
            )
        if self.return_status is not None:
            raise LifecycleError(f"Return of reservation {self.id} was already recorded")

        from apps.bookings.domain.events import VehicleReturnRecorded

        self.odometer_reading = odometer_reading
        self.distance_traveled = distance_traveled
        self.odometer_image = odometer_image or ''
        self.exterior_image = exterior_image or ''
        self.return_note = note or ''

        if verification_required:
            self.return_status = ReturnStatus.RETURNED
            self.updated_at = utcnow()
        else:
            self.return_status = ReturnStatus.VERIFIED
            self.return_verified_by = actor_id
            self.return_verified_at = utcnow()
            self.mark_returned(actor_id)

        self.add_event(VehicleReturnRecorded(
            aggregate_id=self.id,
            reservation_id=self.id,
            organization_id=self.organization_id,
            resource_id=self.resource_id,
            borrower_id=self.borrower_id,
            actor_id=actor_id,
            odometer_reading=odometer_reading,
            distance_traveled=distance_traveled,
            verification_pending=verification_required,
        ))

    def verify_return(self, *, actor_id: int, approved: bool, condition: str = '', note: str = ''):
        """
        Confirm or reject a vehicle return waiting for verification

        Confirming closes the reservation (APPROVED -> RETURNED). Rejecting
        leaves the status APPROVED so the borrower can be contacted.

        Events: VehicleReturnVerified (+ ReservationStatusChanged when confirmed)
        """
        if self.return_status != ReturnStatus.RETURNED:
            raise LifecycleError(f"Reservation {self.id} has no return waiting for verification")

        from apps.bookings.domain.events import VehicleReturnVerified

        self.return_status = ReturnStatus.VERIFIED if approved else ReturnStatus.REJECTED
        self.return_condition = condition or ''
        if note:
            self.return_note = note
        self.return_verified_by = actor_id
        self.return_verified_at = utcnow()
        self.updated_at = self.return_verified_at

        if approved:
            self.mark_returned(actor_id)

        self.add_event(VehicleReturnVerified(
            aggregate_id=self.id,
            reservation_id=self.id,
            organization_id=self.organization_id,
            resource_id=self.resource_id,
            borrower_id=self.borrower_id,
            actor_id=actor_id,
            approved=approved,
            condition=self.return_condition,
        ))

    # --- queries -----------------------------------------------------------

    @property
    def is_active(self) -> bool:
        """Active reservations block the resource timeline"""
        return self.status in ACTIVE_STATUSES

    def __str__(self):
        return f"Reservation {self.id} ({self.resource_kind.value}, {self.status.value})"

    def __repr__(self):
        return (
            f"Reservation(id={self.id}, resource={self.resource_kind.value}:{self.resource_id}, "
            f"status={self.status.value}, period={self.period!r})"
        )
