"""Notification task and delivery tests."""

from __future__ import annotations

from django.contrib.auth import get_user_model  # type: ignore
from django.core import mail  # type: ignore
from django.test import TestCase, override_settings  # type: ignore

from apps.notifications.models import Notification
from apps.notifications.services import CeleryNotifier, render_message
from apps.notifications.tasks import emit_notification
from apps.organizations.models import Organization


class EmitNotificationTests(TestCase):
    def setUp(self) -> None:
        self.organization = Organization.objects.create(name="Acme")
        self.user = get_user_model().objects.create_user(
            username="park", email="park@example.com", password="pass12345"
        )

    def test_task_stores_and_emails(self) -> None:
        pk = emit_notification(
            user_id=self.user.pk,
            organization_id=str(self.organization.pk),
            type="reservation_created",
            payload={"resource_name": "Projector", "start": "2025-01-10", "end": "2025-01-12"},
        )

        notification = Notification.objects.get(pk=pk)
        self.assertEqual(notification.status, Notification.Status.SENT)
        self.assertEqual(notification.channel, Notification.Channel.EMAIL)
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].subject, "Reservation request received")
        self.assertIn("Projector", mail.outbox[0].body)

    def test_user_without_email_is_marked_failed(self) -> None:
        silent = get_user_model().objects.create_user(username="quiet", password="pass12345")

        pk = emit_notification(user_id=silent.pk, organization_id=None, type="reservation_created", payload={})

        self.assertEqual(Notification.objects.get(pk=pk).status, Notification.Status.FAILED)
        self.assertEqual(mail.outbox, [])

    @override_settings(NOTIFICATION_DEFAULT_CHANNEL="kakao")
    def test_kakao_messages_wait_for_gateway(self) -> None:
        pk = emit_notification(user_id=self.user.pk, organization_id=None, type="reservation_created", payload={})

        self.assertEqual(Notification.objects.get(pk=pk).status, Notification.Status.PENDING)
        self.assertEqual(mail.outbox, [])

    def test_notifier_runs_task(self) -> None:
        CeleryNotifier().emit(
            user_id=self.user.pk,
            organization_id=self.organization.pk,
            type="vehicle_reservation_status_changed",
            payload={"previous_status": "pending", "status": "approved"},
        )

        notification = Notification.objects.get()
        self.assertEqual(notification.organization_id, self.organization.pk)
        self.assertIn("pending -> approved", render_message(notification))
