"""Celery tasks for notifications."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore
from django.conf import settings  # type: ignore

from .models import Notification
from .services import deliver

logger = logging.getLogger(__name__)


@shared_task(name="notifications.emit_notification")
def emit_notification(user_id: int, organization_id: str | None, type: str, payload: dict) -> int:
    """Store a notification for the user and deliver it."""

    notification = Notification.objects.create(
        user_id=user_id,
        organization_id=organization_id,
        type=type,
        channel=getattr(settings, "NOTIFICATION_DEFAULT_CHANNEL", Notification.Channel.EMAIL),
        payload=payload,
    )
    logger.info("Notification %s (%s) created for user %s", notification.pk, type, user_id)
    deliver(notification)
    return notification.pk
