"""Reservation event subscribers with in-memory collaborators."""

from __future__ import annotations

from datetime import datetime
from uuid import uuid4

from apps.bookings.application.command_handlers import ApproverCheck
from apps.bookings.application.ports import ProfileSnapshot
from apps.bookings.domain.approval import ApprovalPolicy, Role
from apps.bookings.domain.entities import ResourceKind
from apps.bookings.domain.events import ReservationCreated, ReservationStatusChanged
from apps.bookings.handlers import ReservationAuditTrail, ReservationNotifications, register_event_handlers
from shared.application.message_bus import MessageBus

ORGANIZATION = uuid4()
BORROWER = 1


class RecordingNotifier:
    def __init__(self):
        self.sent = []

    def emit(self, *, user_id, organization_id, type, payload):
        self.sent.append((user_id, type))


class BrokenNotifier:
    def emit(self, **kwargs):
        raise ConnectionError("broker unreachable")


class RecordingAuditLog:
    def __init__(self):
        self.actions = []

    def record(self, *, organization_id, actor_id, action, target_type, target_id, metadata):
        self.actions.append(action)


class StaticProfiles:
    def __init__(self, *members: ProfileSnapshot):
        self.members = list(members)

    def get(self, user_id):
        return next((m for m in self.members if m.user_id == user_id), None)

    def members_of(self, organization_id):
        return [m for m in self.members if m.organization_id == organization_id]


class StaticPolicies:
    def __init__(self, *policies: ApprovalPolicy):
        self.policies = list(policies)

    def policies_for(self, organization_id, scope):
        return [p for p in self.policies if p.organization_id == organization_id and p.scope == scope]


def member(user_id, role, department=None, organization_id=ORGANIZATION) -> ProfileSnapshot:
    return ProfileSnapshot(user_id=user_id, organization_id=organization_id, department=department, role=role)


MEMBERS = StaticProfiles(
    member(BORROWER, Role.USER, "dept-A"),
    member(2, Role.ADMIN),
    member(3, Role.MANAGER, "dept-A"),
    member(4, Role.MANAGER, "dept-B"),
    member(5, Role.ADMIN, organization_id=uuid4()),
)


def created_event(kind="asset", owner_department=None) -> ReservationCreated:
    reservation_id = uuid4()
    return ReservationCreated(
        aggregate_id=reservation_id,
        reservation_id=reservation_id,
        organization_id=ORGANIZATION,
        resource_kind=kind,
        resource_id=uuid4(),
        resource_name="Projector",
        owner_department=owner_department,
        borrower_id=BORROWER,
        first_start=datetime(2025, 3, 1, 9),
        last_end=datetime(2025, 3, 1, 18),
        instance_count=1,
    )


def notifications(notifier, policies=None) -> ReservationNotifications:
    return ReservationNotifications(notifier, MEMBERS, ApproverCheck(policies or StaticPolicies()))


def test_approvers_follow_organization_policy() -> None:
    policies = StaticPolicies(ApprovalPolicy(ORGANIZATION, ResourceKind.ASSET, None, Role.ADMIN))
    notifier = RecordingNotifier()

    notifications(notifier, policies).on_reservation_created(created_event())

    assert notifier.sent == [(BORROWER, "reservation_created"), (2, "reservation_requested")]


def test_without_policy_rows_managers_are_approvers() -> None:
    notifier = RecordingNotifier()

    notifications(notifier).on_reservation_created(created_event(kind="vehicle"))

    assert sorted(user_id for user_id, kind in notifier.sent if kind == "vehicle_reservation_requested") == [2, 3, 4]


def test_department_owned_resource_notifies_its_department() -> None:
    notifier = RecordingNotifier()

    notifications(notifier).on_reservation_created(created_event(kind="space", owner_department="dept-A"))

    requested = [user_id for user_id, kind in notifier.sent if kind == "space_reservation_requested"]
    assert sorted(requested) == [2, 3]


def test_borrower_is_not_notified_as_approver() -> None:
    profiles = StaticProfiles(member(BORROWER, Role.ADMIN))
    notifier = RecordingNotifier()

    ReservationNotifications(notifier, profiles, ApproverCheck(StaticPolicies())).on_reservation_created(
        created_event()
    )

    assert notifier.sent == [(BORROWER, "reservation_created")]


def test_audit_entry_survives_notification_failure() -> None:
    bus = MessageBus()
    audit_log = RecordingAuditLog()
    register_event_handlers(bus, notifications(BrokenNotifier()), ReservationAuditTrail(audit_log))
    reservation_id = uuid4()

    bus.publish_events([
        created_event(),
        ReservationStatusChanged(
            aggregate_id=reservation_id,
            reservation_id=reservation_id,
            organization_id=ORGANIZATION,
            resource_kind="asset",
            resource_id=uuid4(),
            borrower_id=BORROWER,
            actor_id=2,
            previous_status="pending",
            status="approved",
        ),
    ])

    assert audit_log.actions == ["asset_reservation_create", "asset_reservation_status_update"]
