"""Celery tasks for the audit log."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore

from .models import AuditLog

logger = logging.getLogger(__name__)


@shared_task(name="audit.record_audit_event")
def record_audit_event(
    organization_id: str | None,
    actor_id: int | None,
    action: str,
    target_type: str,
    target_id: str,
    metadata: dict,
) -> int:
    entry = AuditLog.objects.create(
        organization_id=organization_id,
        actor_id=actor_id,
        action=action,
        target_type=target_type,
        target_id=target_id,
        metadata=metadata,
    )
    logger.info("Audit %s on %s:%s by %s", action, target_type, target_id, actor_id)
    return entry.pk
