"""Notification delivery."""

from __future__ import annotations

import logging
from typing import Any, Mapping
from uuid import UUID

from django.conf import settings  # type: ignore
from django.core.mail import send_mail  # type: ignore

from .models import Notification

logger = logging.getLogger(__name__)

SUBJECTS = {
    "reservation_created": "Reservation request received",
    "space_reservation_created": "Room reservation request received",
    "vehicle_reservation_created": "Vehicle reservation request received",
    "reservation_requested": "New reservation request to approve",
    "space_reservation_requested": "New room reservation request to approve",
    "vehicle_reservation_requested": "New vehicle reservation request to approve",
    "reservation_status_changed": "Reservation status changed",
    "space_reservation_status_changed": "Room reservation status changed",
    "vehicle_reservation_status_changed": "Vehicle reservation status changed",
    "vehicle_return_recorded": "Vehicle return recorded",
    "vehicle_return_verified": "Vehicle return verified",
}


def render_message(notification: Notification) -> str:
    payload = notification.payload or {}
    lines = [SUBJECTS.get(notification.type, notification.type)]
    if payload.get("resource_name"):
        lines.append(f"Resource: {payload['resource_name']}")
    if payload.get("start") and payload.get("end"):
        lines.append(f"Period: {payload['start']} - {payload['end']}")
    if payload.get("instance_count", 1) > 1:
        lines.append(f"Occurrences: {payload['instance_count']} ({payload.get('recurrence', '')})")
    if payload.get("status"):
        lines.append(f"Status: {payload.get('previous_status', '?')} -> {payload['status']}")
    return "\n".join(lines)


def send_email_notification(notification: Notification) -> bool:
    """
    Send a notification by email.

    Returns:
        bool: True if the message was sent
    """
    recipient = getattr(notification.user, "email", "")
    if not recipient:
        logger.warning("User %s has no email, notification %s not sent", notification.user_id, notification.pk)
        return False

    try:
        send_mail(
            subject=SUBJECTS.get(notification.type, notification.type),
            message=render_message(notification),
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[recipient],
            fail_silently=False,
        )
        logger.info("Email sent to %s: %s", recipient, notification.type)
        return True
    except Exception as e:
        logger.error("Failed to send email to %s: %s", recipient, e, exc_info=True)
        return False


def deliver(notification: Notification) -> Notification:
    """Deliver over the notification's channel and store the outcome."""

    if notification.channel == Notification.Channel.EMAIL:
        sent = send_email_notification(notification)
        notification.status = Notification.Status.SENT if sent else Notification.Status.FAILED
        notification.save(update_fields=["status"])
    # Kakao messages stay pending for the messaging gateway to pick up
    return notification


class CeleryNotifier:
    """Fire-and-forget notification emission through Celery."""

    def emit(
        self,
        *,
        user_id: int,
        organization_id: UUID | None,
        type: str,
        payload: Mapping[str, Any],
    ) -> None:
        from .tasks import emit_notification

        emit_notification.delay(
            user_id=user_id,
            organization_id=str(organization_id) if organization_id else None,
            type=type,
            payload=dict(payload),
        )
