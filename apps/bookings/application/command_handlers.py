"""
Reservation Command Handlers

These are the use cases for the reservation domain.
They orchestrate domain operations within transactions.

Commands:
- CreateReservationCommand: book a resource once or as a recurring group
- TransitionStatusCommand: approve / reject / cancel / mark returned
- RecordVehicleReturnCommand: hand a vehicle back with odometer readings
- VerifyVehicleReturnCommand: confirm or reject a pending vehicle return
"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import List, Mapping
from uuid import UUID

import structlog
from django.utils import timezone

from shared.application.uow import DjangoUnitOfWork
from shared.domain.value_objects import TimeRange
from apps.bookings.application.ports import (
    RESOURCE_AVAILABLE,
    RESOURCE_RENTED,
    ApprovalPolicySource,
    ProfileDirectory,
    ProfileSnapshot,
    ReservationRepository,
    ResourceDirectory,
    ResourceSnapshot,
    ReturnPolicySource,
)
from apps.bookings.domain.approval import Ownership, Role, resolve_required_role, role_satisfies
from apps.bookings.domain.entities import Reservation, ReservationStatus, ResourceKind
from apps.bookings.domain.events import ReservationCreated
from apps.bookings.domain.exceptions import (
    AuthorizationMismatch,
    ReservationNotFound,
    SchedulingConflict,
    ValidationError,
)
from apps.bookings.domain.recurrence import RecurrenceRule, describe_recurrence, expand_recurrence
from apps.bookings.domain.returns import (
    ReturnOutcome,
    ReturnPhotos,
    check_evidence,
    compute_distance,
    parse_odometer,
)

logger = structlog.get_logger(__name__)

# Only these kinds are blocked by a non-available resource status
STATUS_CHECKED_KINDS = frozenset({ResourceKind.ASSET, ResourceKind.VEHICLE})


# ===== Commands =====

@dataclass
class CreateReservationCommand:
    """
    Command to reserve a resource

    resource_id accepts the internal UUID or the short public alias.
    A recurrence rule with a type but no end date books a single reservation.
    """
    resource_kind: str
    resource_id: str
    borrower_id: int
    start: datetime
    end: datetime
    note: str = ''
    recurrence: RecurrenceRule | Mapping | None = None
    start_odometer_reading: Decimal | None = None


@dataclass
class TransitionStatusCommand:
    reservation_id: UUID
    actor_id: int
    target_status: str


@dataclass
class RecordVehicleReturnCommand:
    reservation_id: UUID
    actor_id: int
    odometer_reading: Decimal
    photos: ReturnPhotos
    note: str = ''


@dataclass
class VerifyVehicleReturnCommand:
    reservation_id: UUID
    actor_id: int
    approved: bool
    condition: str = ''
    note: str = ''


@dataclass(frozen=True)
class ReservationResult:
    """Anchor id of the stored reservation(s) and how many were stored"""
    id: UUID
    instance_count: int


# ===== Helpers =====

def parse_resource_kind(value) -> ResourceKind:
    try:
        return ResourceKind(value)
    except ValueError:
        raise ValidationError(f"Unknown resource kind: {value!r}")


def parse_recurrence(payload) -> RecurrenceRule | None:
    """
    Recurrence rule from a request payload (mapping) or an existing rule

    Raises:
        ValidationError: malformed end date or weekday list
        ConfigurationError: unknown recurrence type
    """
    if payload is None or isinstance(payload, RecurrenceRule):
        return payload
    if not isinstance(payload, Mapping):
        raise ValidationError("Recurrence must be an object")

    end_date = payload.get("end_date")
    if isinstance(end_date, datetime):
        end_date = end_date.date()
    elif isinstance(end_date, str) and end_date:
        try:
            end_date = date.fromisoformat(end_date)
        except ValueError:
            raise ValidationError(f"Invalid recurrence end date: {end_date!r}")
    elif end_date == "":
        end_date = None
    elif end_date is not None and not isinstance(end_date, date):
        raise ValidationError(f"Invalid recurrence end date: {end_date!r}")

    days = payload.get("days_of_week") or ()
    if isinstance(days, (str, bytes)) or not all(
        isinstance(day, int) and not isinstance(day, bool) for day in days
    ):
        raise ValidationError("days_of_week must be a list of weekday indices")

    return RecurrenceRule.build(
        type=payload.get("type") or "none",
        interval=payload.get("interval", 1),
        end_date=end_date,
        days_of_week=days,
        day_of_month=payload.get("day_of_month"),
    )


def to_local(moment: datetime) -> datetime:
    if timezone.is_aware(moment):
        return timezone.localtime(moment)
    return moment


def local_date(moment: datetime):
    return to_local(moment).date()


def is_beyond_usable_until(end: datetime, usable_until) -> bool:
    """
    The usable-until bound covers its whole day: a reservation ending any
    time on that day is fine, ending on a later day is not.
    """
    return local_date(end) > usable_until


class ApproverCheck:
    """Whether an actor may approve reservations of a resource"""

    def __init__(self, policies: ApprovalPolicySource):
        self.policies = policies

    def required_role(self, organization_id: UUID, kind: ResourceKind, ownership: Ownership) -> Role:
        return resolve_required_role(
            self.policies.policies_for(organization_id, kind),
            organization_id,
            kind,
            ownership,
        )

    def is_approver(
        self,
        actor: ProfileSnapshot | None,
        reservation: Reservation,
        resource: ResourceSnapshot | None,
    ) -> bool:
        ownership = resource.ownership if resource else Ownership.organization_wide()
        return self.may_approve(actor, reservation.organization_id, reservation.resource_kind, ownership)

    def may_approve(
        self,
        actor: ProfileSnapshot | None,
        organization_id: UUID,
        kind: ResourceKind,
        ownership: Ownership,
    ) -> bool:
        if actor is None or actor.organization_id != organization_id:
            return False

        required = self.required_role(organization_id, kind, ownership)
        if not role_satisfies(actor.role, required):
            return False

        # Department-owned resources are approved inside the department
        department = ownership.policy_department
        if department is not None and actor.role != Role.ADMIN:
            return actor.department == department
        return True


# ===== Command Handlers =====

class CreateReservationHandler:
    """
    Handler for CreateReservation command

    This implements the critical business logic for creating reservations
    with double booking prevention.

    Strategy (Defense in Depth):
    1. Validate the request and the recurrence rule (no database access)
    2. Start database transaction (atomic)
    3. Resolve the resource with SELECT FOR UPDATE (serializes writers of
       the same resource across processes)
    4. Check borrower organization and resource loanability
    5. Expand the recurrence rule into candidate intervals
    6. Check EVERY candidate against a fresh timeline snapshot
    7. Insert anchor, then siblings (storage guard re-checks each insert)
    8. Commit transaction; publish ReservationCreated after commit
    """

    def __init__(
        self,
        reservations: ReservationRepository,
        resources: ResourceDirectory,
        profiles: ProfileDirectory,
        bus=None,
    ):
        self.reservations = reservations
        self.resources = resources
        self.profiles = profiles
        self.bus = bus

    def handle(self, command: CreateReservationCommand) -> ReservationResult:
        """
        Handle reservation creation

        Raises:
            ValidationError: missing fields, start after end, unknown resource
            ConfigurationError: invalid recurrence rule
            AuthorizationMismatch: organization mismatch or resource not loanable
            SchedulingConflict: a candidate overlaps an active reservation
        """
        kind = parse_resource_kind(command.resource_kind)
        if not command.resource_id or command.borrower_id is None:
            raise ValidationError("Resource and borrower are required")
        if command.start is None or command.end is None:
            raise ValidationError("Start and end are required")
        if command.start > command.end:
            raise ValidationError("End must not be before start")

        # Weekdays and date bounds are read in the configured time zone
        period = TimeRange(to_local(command.start), to_local(command.end))
        rule = parse_recurrence(command.recurrence) or RecurrenceRule()
        rule.validate(period.start.date())

        logger.info(
            "reservation.create.requested",
            resource_kind=kind.value,
            resource=str(command.resource_id),
            borrower_id=command.borrower_id,
            start=command.start.isoformat(),
            end=command.end.isoformat(),
            recurrence=rule.type.value,
        )

        with DjangoUnitOfWork(self.bus) as uow:
            resource = self.resources.resolve(kind, command.resource_id, lock=True)
            if resource is None:
                raise ValidationError(f"{kind.value.capitalize()} {command.resource_id} not found")

            self._authorize(resource, command.borrower_id, period)
            start_odometer = self._start_odometer(resource, command.start_odometer_reading)

            candidates = expand_recurrence(period, rule) if rule.is_recurring else [period]
            self._ensure_available(resource, candidates, recurring=rule.is_recurring)

            group = self._build_group(resource, command, rule, candidates, start_odometer)
            for reservation in group:
                self.reservations.add(reservation)

            anchor = group[0]
            anchor.add_event(ReservationCreated(
                aggregate_id=anchor.id,
                reservation_id=anchor.id,
                organization_id=resource.organization_id,
                resource_kind=kind.value,
                resource_id=resource.id,
                resource_name=resource.name,
                owner_department=resource.ownership.policy_department,
                borrower_id=command.borrower_id,
                first_start=candidates[0].start,
                last_end=candidates[-1].end,
                instance_count=len(group),
                recurrence_type=anchor.recurrence.type.value,
                recurrence_description=describe_recurrence(anchor.recurrence),
            ))
            uow.collect_events(anchor)

        logger.info(
            "reservation.created",
            reservation_id=str(anchor.id),
            resource_kind=kind.value,
            resource_id=str(resource.id),
            instance_count=len(group),
        )
        return ReservationResult(id=anchor.id, instance_count=len(group))

    def _authorize(self, resource: ResourceSnapshot, borrower_id: int, period: TimeRange):
        if resource.organization_id is None:
            raise AuthorizationMismatch("The resource does not belong to an organization")

        borrower = self.profiles.get(borrower_id)
        if borrower is None or borrower.organization_id != resource.organization_id:
            raise AuthorizationMismatch("Reservations are only allowed within the same organization")

        if resource.loanable is False:
            raise AuthorizationMismatch(f"{resource.name} is marked as not loanable")
        if resource.kind in STATUS_CHECKED_KINDS and resource.status != RESOURCE_AVAILABLE:
            raise AuthorizationMismatch(f"{resource.name} is currently {resource.status}")
        if (
            resource.kind == ResourceKind.ASSET
            and resource.usable_until is not None
            and is_beyond_usable_until(period.end, resource.usable_until)
        ):
            raise AuthorizationMismatch(
                f"{resource.name} is only usable until {resource.usable_until.isoformat()}"
            )

    def _start_odometer(self, resource: ResourceSnapshot, value) -> Decimal | None:
        if resource.kind != ResourceKind.VEHICLE:
            return None
        if value is None or value == '':
            return resource.current_odometer
        return parse_odometer(value)

    def _ensure_available(self, resource: ResourceSnapshot, candidates: List[TimeRange], *, recurring: bool):
        # Snapshot is re-read per candidate; nothing is cached across the batch
        for candidate in candidates:
            timeline = self.reservations.timeline_for(resource.kind, resource.id)
            if timeline.can_reserve(candidate):
                continue

            conflict_date = local_date(candidate.start)
            logger.info(
                "reservation.create.conflict",
                resource_id=str(resource.id),
                conflict_date=conflict_date.isoformat(),
                overlapping=len(timeline.get_conflicts(candidate)),
            )
            if recurring:
                message = f"A reservation already exists on {conflict_date.isoformat()}"
            else:
                message = "The resource is already reserved for this period"
            raise SchedulingConflict(message, conflict_date=conflict_date)

    def _build_group(
        self,
        resource: ResourceSnapshot,
        command: CreateReservationCommand,
        rule: RecurrenceRule,
        candidates: List[TimeRange],
        start_odometer: Decimal | None,
    ) -> List[Reservation]:
        stored_rule = rule if rule.is_recurring else RecurrenceRule()

        def build(candidate: TimeRange, parent_id: UUID | None) -> Reservation:
            return Reservation(
                organization_id=resource.organization_id,
                resource_kind=resource.kind,
                resource_id=resource.id,
                borrower_id=command.borrower_id,
                period=candidate,
                status=ReservationStatus.PENDING,
                note=command.note or '',
                recurrence=stored_rule,
                parent_reservation_id=parent_id,
                is_recurring_instance=parent_id is not None,
                start_odometer_reading=start_odometer,
            )

        anchor = build(candidates[0], None)
        return [anchor] + [build(candidate, anchor.id) for candidate in candidates[1:]]


class _LifecycleHandler:
    """Shared loading and authorization for handlers acting on one reservation"""

    def __init__(
        self,
        reservations: ReservationRepository,
        resources: ResourceDirectory,
        profiles: ProfileDirectory,
        policies: ApprovalPolicySource,
        bus=None,
    ):
        self.reservations = reservations
        self.resources = resources
        self.profiles = profiles
        self.approvers = ApproverCheck(policies)
        self.bus = bus

    def _load(self, reservation_id: UUID) -> Reservation:
        reservation = self.reservations.get(reservation_id, lock=True)
        if reservation is None:
            raise ReservationNotFound(f"Reservation {reservation_id} not found")
        return reservation

    def _is_approver(self, actor_id: int, reservation: Reservation, resource: ResourceSnapshot | None) -> bool:
        return self.approvers.is_approver(self.profiles.get(actor_id), reservation, resource)


class TransitionStatusHandler(_LifecycleHandler):
    """
    Handler for TransitionStatus command

    Who may do what:
    - the borrower may cancel their own PENDING reservation
    - an approver (policy role, same organization, same department for
      department-owned resources) may approve, reject, cancel and mark
      returned
    """

    def handle(self, command: TransitionStatusCommand) -> None:
        try:
            target = ReservationStatus(command.target_status)
        except ValueError:
            raise ValidationError(f"Unknown reservation status: {command.target_status!r}")

        logger.info(
            "reservation.transition.requested",
            reservation_id=str(command.reservation_id),
            actor_id=command.actor_id,
            target=target.value,
        )

        with DjangoUnitOfWork(self.bus) as uow:
            reservation = self._load(command.reservation_id)
            resource = self.resources.resolve(reservation.resource_kind, reservation.resource_id, lock=True)

            if not self._may_transition(command.actor_id, reservation, resource, target):
                raise AuthorizationMismatch(
                    f"User {command.actor_id} may not set reservation {reservation.id} to {target.value}"
                )

            previous = reservation.status
            reservation.transition_to(target, command.actor_id)

            if target == ReservationStatus.APPROVED:
                self.resources.mark_status(reservation.resource_kind, reservation.resource_id, RESOURCE_RENTED)
            elif target == ReservationStatus.RETURNED or (
                target == ReservationStatus.CANCELLED and previous == ReservationStatus.APPROVED
            ):
                self.resources.mark_status(reservation.resource_kind, reservation.resource_id, RESOURCE_AVAILABLE)

            uow.collect_events(reservation)
            self.reservations.save(reservation)

        logger.info(
            "reservation.transitioned",
            reservation_id=str(reservation.id),
            previous=previous.value,
            status=reservation.status.value,
        )

    def _may_transition(self, actor_id, reservation, resource, target) -> bool:
        if (
            target == ReservationStatus.CANCELLED
            and reservation.status == ReservationStatus.PENDING
            and actor_id == reservation.borrower_id
        ):
            return True
        return self._is_approver(actor_id, reservation, resource)


class RecordVehicleReturnHandler(_LifecycleHandler):
    """
    Handler for RecordVehicleReturn command

    Validates readings and photos against the organization's return policy
    before any write. Without required verification the reservation is
    closed and the vehicle released in the same transaction.
    """

    def __init__(
        self,
        reservations: ReservationRepository,
        resources: ResourceDirectory,
        profiles: ProfileDirectory,
        policies: ApprovalPolicySource,
        return_policies: ReturnPolicySource,
        bus=None,
    ):
        super().__init__(reservations, resources, profiles, policies, bus)
        self.return_policies = return_policies

    def handle(self, command: RecordVehicleReturnCommand) -> ReturnOutcome:
        reading = parse_odometer(command.odometer_reading)

        with DjangoUnitOfWork(self.bus) as uow:
            reservation = self._load(command.reservation_id)
            resource = self.resources.resolve(reservation.resource_kind, reservation.resource_id, lock=True)

            if command.actor_id != reservation.borrower_id and not self._is_approver(
                command.actor_id, reservation, resource
            ):
                raise AuthorizationMismatch(
                    f"User {command.actor_id} may not return reservation {reservation.id}"
                )

            policy = self.return_policies.return_policy_for(reservation.organization_id)
            # Entity re-checks kind and status; check here so bad readings
            # on a wrong reservation report the lifecycle problem first
            if reservation.resource_kind == ResourceKind.VEHICLE and reservation.status == ReservationStatus.APPROVED:
                distance = compute_distance(reservation.start_odometer_reading, reading)
                check_evidence(command.photos, policy)
            else:
                distance = None

            reservation.record_vehicle_return(
                actor_id=command.actor_id,
                odometer_reading=reading,
                distance_traveled=distance,
                odometer_image=command.photos.odometer_image,
                exterior_image=command.photos.exterior_image,
                note=command.note,
                verification_required=policy.verification_required,
            )

            if not policy.verification_required:
                self.resources.mark_status(
                    ResourceKind.VEHICLE,
                    reservation.resource_id,
                    RESOURCE_AVAILABLE,
                    current_odometer=reading,
                )

            uow.collect_events(reservation)
            self.reservations.save(reservation)

        logger.info(
            "reservation.vehicle_returned",
            reservation_id=str(reservation.id),
            distance_traveled=str(distance) if distance is not None else None,
            verification_pending=policy.verification_required,
        )
        return ReturnOutcome(
            reservation_id=reservation.id,
            odometer_reading=reading,
            distance_traveled=distance,
            status=reservation.status.value,
            return_status=reservation.return_status.value,
            verification_pending=policy.verification_required,
        )


class VerifyVehicleReturnHandler(_LifecycleHandler):
    """Handler for VerifyVehicleReturn command (approvers only)"""

    def handle(self, command: VerifyVehicleReturnCommand) -> None:
        with DjangoUnitOfWork(self.bus) as uow:
            reservation = self._load(command.reservation_id)
            resource = self.resources.resolve(reservation.resource_kind, reservation.resource_id, lock=True)

            if not self._is_approver(command.actor_id, reservation, resource):
                raise AuthorizationMismatch(
                    f"User {command.actor_id} may not verify the return of reservation {reservation.id}"
                )

            reservation.verify_return(
                actor_id=command.actor_id,
                approved=command.approved,
                condition=command.condition,
                note=command.note,
            )

            if command.approved:
                self.resources.mark_status(
                    ResourceKind.VEHICLE,
                    reservation.resource_id,
                    RESOURCE_AVAILABLE,
                    current_odometer=reservation.odometer_reading,
                )

            uow.collect_events(reservation)
            self.reservations.save(reservation)

        logger.info(
            "reservation.return_verified",
            reservation_id=str(reservation.id),
            approved=command.approved,
        )
