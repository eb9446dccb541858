"""Vehicle return recording and verification."""

from __future__ import annotations

from decimal import Decimal

from django.test import TestCase  # type: ignore

from apps.audit.models import AuditLog
from apps.bookings import services
from apps.bookings.domain.exceptions import (
    AuthorizationMismatch,
    LifecycleError,
    MissingEvidence,
    ValidationError,
)
from apps.bookings.domain.returns import ReturnPhotos
from apps.bookings.models import Reservation
from apps.notifications.models import Notification
from apps.organizations.models import Organization
from apps.resources.models import Resource

from .helpers import ReservationFixtures, aware

PHOTOS = ReturnPhotos(odometer_image="returns/odo.jpg", exterior_image="returns/car.jpg")


class VehicleReturnTests(ReservationFixtures, TestCase):
    def setUp(self) -> None:
        super().setUp()
        self.reservation_id = services.create_reservation(
            "vehicle", str(self.vehicle.pk), self.borrower.pk, aware(2025, 1, 10, 9), aware(2025, 1, 10, 18)
        ).id
        services.transition_status(self.reservation_id, self.admin.pk, "approved")

    def require_verification(self) -> None:
        Organization.objects.filter(pk=self.organization.pk).update(
            return_verification_policy={"enabled": True, "require_photo": True, "require_verification": True}
        )

    def reservation(self) -> Reservation:
        return Reservation.objects.get(pk=self.reservation_id)

    def test_return_without_policy_closes_reservation(self) -> None:
        outcome = services.record_vehicle_return(self.reservation_id, self.borrower.pk, "1120.5", note="Full tank")

        self.assertEqual(outcome.distance_traveled, Decimal("120.5"))
        self.assertFalse(outcome.verification_pending)
        row = self.reservation()
        self.assertEqual(row.status, Reservation.Status.RETURNED)
        self.assertEqual(row.return_status, Reservation.ReturnStatus.VERIFIED)
        self.assertEqual(row.odometer_reading, Decimal("1120.5"))
        self.assertEqual(row.distance_traveled, Decimal("120.5"))
        self.assertEqual(row.return_verified_by_id, self.borrower.pk)
        self.assertEqual(row.return_note, "Full tank")

        self.vehicle.refresh_from_db()
        self.assertEqual(self.vehicle.status, Resource.Status.AVAILABLE)
        self.assertEqual(self.vehicle.current_odometer, Decimal("1120.5"))

    def test_reading_below_start_is_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            services.record_vehicle_return(self.reservation_id, self.borrower.pk, "999.9")

        row = self.reservation()
        self.assertEqual(row.status, Reservation.Status.APPROVED)
        self.assertIsNone(row.odometer_reading)

    def test_non_numeric_reading_is_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            services.record_vehicle_return(self.reservation_id, self.borrower.pk, "lots")

    def test_photos_required_by_policy(self) -> None:
        self.require_verification()

        with self.assertRaises(MissingEvidence):
            services.record_vehicle_return(
                self.reservation_id,
                self.borrower.pk,
                "1100",
                {"odometer_image": "returns/odo.jpg"},
            )

        self.assertEqual(self.reservation().return_status, "")

    def test_verified_return_flow(self) -> None:
        self.require_verification()

        outcome = services.record_vehicle_return(self.reservation_id, self.borrower.pk, "1100", PHOTOS)

        self.assertTrue(outcome.verification_pending)
        row = self.reservation()
        self.assertEqual(row.status, Reservation.Status.APPROVED)
        self.assertEqual(row.return_status, Reservation.ReturnStatus.RETURNED)
        self.assertEqual(row.odometer_image, "returns/odo.jpg")
        self.vehicle.refresh_from_db()
        self.assertEqual(self.vehicle.status, Resource.Status.RENTED)

        with self.assertRaises(AuthorizationMismatch):
            services.verify_vehicle_return(self.reservation_id, self.borrower.pk, approved=True)

        services.verify_vehicle_return(self.reservation_id, self.admin.pk, approved=True, condition="good")

        row = self.reservation()
        self.assertEqual(row.status, Reservation.Status.RETURNED)
        self.assertEqual(row.return_status, Reservation.ReturnStatus.VERIFIED)
        self.assertEqual(row.return_verified_by_id, self.admin.pk)
        self.assertEqual(row.return_condition, "good")
        self.vehicle.refresh_from_db()
        self.assertEqual(self.vehicle.status, Resource.Status.AVAILABLE)
        self.assertEqual(self.vehicle.current_odometer, Decimal("1100.0"))

    def test_verification_applies_when_photo_rule_is_off(self) -> None:
        Organization.objects.filter(pk=self.organization.pk).update(
            return_verification_policy={"enabled": False, "require_verification": True}
        )

        outcome = services.record_vehicle_return(self.reservation_id, self.borrower.pk, "1100")

        self.assertTrue(outcome.verification_pending)
        row = self.reservation()
        self.assertEqual(row.status, Reservation.Status.APPROVED)
        self.assertEqual(row.return_status, Reservation.ReturnStatus.RETURNED)
        self.vehicle.refresh_from_db()
        self.assertEqual(self.vehicle.status, Resource.Status.RENTED)

    def test_outcome_matches_stored_reading(self) -> None:
        outcome = services.record_vehicle_return(self.reservation_id, self.borrower.pk, "1100.26")

        row = self.reservation()
        self.assertEqual(outcome.odometer_reading, Decimal("1100.3"))
        self.assertEqual(outcome.distance_traveled, Decimal("100.3"))
        self.assertEqual(row.odometer_reading, outcome.odometer_reading)
        self.assertEqual(row.distance_traveled, outcome.distance_traveled)

    def test_rejected_return_keeps_vehicle_rented(self) -> None:
        self.require_verification()
        services.record_vehicle_return(self.reservation_id, self.borrower.pk, "1100", PHOTOS)

        services.verify_vehicle_return(self.reservation_id, self.admin.pk, approved=False, note="Dent on the door")

        row = self.reservation()
        self.assertEqual(row.status, Reservation.Status.APPROVED)
        self.assertEqual(row.return_status, Reservation.ReturnStatus.REJECTED)
        self.assertEqual(row.return_note, "Dent on the door")
        self.vehicle.refresh_from_db()
        self.assertEqual(self.vehicle.status, Resource.Status.RENTED)

    def test_return_twice_is_lifecycle_error(self) -> None:
        services.record_vehicle_return(self.reservation_id, self.borrower.pk, "1100")

        with self.assertRaises(LifecycleError):
            services.record_vehicle_return(self.reservation_id, self.borrower.pk, "1200")

    def test_only_vehicle_reservations_can_be_returned(self) -> None:
        asset_reservation = services.create_reservation(
            "asset", str(self.asset.pk), self.borrower.pk, aware(2025, 1, 10), aware(2025, 1, 11)
        ).id
        services.transition_status(asset_reservation, self.admin.pk, "approved")

        with self.assertRaises(LifecycleError):
            services.record_vehicle_return(asset_reservation, self.borrower.pk, "10")

    def test_other_members_cannot_return(self) -> None:
        with self.assertRaises(AuthorizationMismatch):
            services.record_vehicle_return(self.reservation_id, self.outsider.pk, "1100")
        with self.assertRaises(AuthorizationMismatch):
            services.record_vehicle_return(self.reservation_id, self.manager.pk, "1100")

    def test_return_by_approver_notifies_borrower(self) -> None:
        with self.captureOnCommitCallbacks(execute=True):
            services.record_vehicle_return(self.reservation_id, self.admin.pk, "1100")

        self.assertTrue(Notification.objects.filter(user=self.borrower, type="vehicle_return_recorded").exists())
        entry = AuditLog.objects.get(action="vehicle_return")
        self.assertEqual(entry.actor_id, self.admin.pk)
        self.assertEqual(entry.metadata["distance_traveled"], "100.0")

    def test_return_by_borrower_is_audited_without_return_notice(self) -> None:
        with self.captureOnCommitCallbacks(execute=True):
            services.record_vehicle_return(self.reservation_id, self.borrower.pk, "1100")

        self.assertFalse(Notification.objects.filter(type="vehicle_return_recorded").exists())
        self.assertTrue(AuditLog.objects.filter(action="vehicle_return", actor=self.borrower).exists())

    def test_verification_is_notified_and_audited(self) -> None:
        self.require_verification()
        services.record_vehicle_return(self.reservation_id, self.borrower.pk, "1100", PHOTOS)

        with self.captureOnCommitCallbacks(execute=True):
            services.verify_vehicle_return(self.reservation_id, self.admin.pk, approved=True)

        notification = Notification.objects.get(type="vehicle_return_verified")
        self.assertTrue(notification.payload["approved"])
        self.assertTrue(AuditLog.objects.filter(action="vehicle_return_verify").exists())
