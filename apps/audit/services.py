"""Audit log recording."""

from __future__ import annotations

from typing import Any, Mapping
from uuid import UUID


class CeleryAuditLog:
    """Fire-and-forget audit entries through Celery."""

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
        from .tasks import record_audit_event

        record_audit_event.delay(
            organization_id=str(organization_id) if organization_id else None,
            actor_id=actor_id,
            action=action,
            target_type=target_type,
            target_id=target_id or "",
            metadata=dict(metadata),
        )
