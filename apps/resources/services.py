"""Resource lookup and status updates used by the reservation engine."""

from __future__ import annotations

from decimal import Decimal
from typing import Type
from uuid import UUID

import structlog
from django.db import transaction  # type: ignore
from django.db.models import Q  # type: ignore
from django.db.utils import NotSupportedError  # type: ignore
from django.utils import timezone  # type: ignore

from apps.bookings.application.ports import RESOURCE_RENTED, ResourceSnapshot
from apps.bookings.domain.approval import Ownership
from apps.bookings.domain.entities import ResourceKind

from .models import Asset, Resource, Space, Vehicle

logger = structlog.get_logger(__name__)

RESOURCE_MODELS: dict[ResourceKind, Type[Resource]] = {
    ResourceKind.ASSET: Asset,
    ResourceKind.SPACE: Space,
    ResourceKind.VEHICLE: Vehicle,
}


def model_for(kind: ResourceKind | str) -> Type[Resource]:
    return RESOURCE_MODELS[ResourceKind(kind)]


def _lock_queryset_if_possible(queryset):
    """Apply select_for_update when inside transaction.atomic()."""

    if not transaction.get_connection().in_atomic_block:
        return queryset

    try:
        return queryset.select_for_update()
    except NotSupportedError:
        return queryset


def _identity_filter(identity: str | UUID) -> Q:
    """UUID and short alias resolve to the same row."""

    if isinstance(identity, UUID):
        return Q(pk=identity)
    text = str(identity).strip()
    try:
        return Q(pk=UUID(text)) | Q(short_id=text)
    except ValueError:
        return Q(short_id=text)


def to_snapshot(kind: ResourceKind, resource: Resource) -> ResourceSnapshot:
    if resource.owner_scope == Resource.OwnerScope.DEPARTMENT and resource.owner_department:
        ownership = Ownership.of_department(resource.owner_department)
    else:
        ownership = Ownership.organization_wide()

    return ResourceSnapshot(
        kind=kind,
        id=resource.pk,
        organization_id=resource.organization_id,
        name=resource.name,
        status=resource.status,
        loanable=getattr(resource, "loanable", None),
        usable_until=getattr(resource, "usable_until", None),
        ownership=ownership,
        current_odometer=getattr(resource, "current_odometer", None),
    )


class DjangoResourceDirectory:
    def resolve(self, kind: ResourceKind, identity: str | UUID, *, lock: bool = False) -> ResourceSnapshot | None:
        kind = ResourceKind(kind)
        if identity is None or str(identity).strip() == "":
            return None

        queryset = model_for(kind).objects.filter(_identity_filter(identity))
        if lock:
            queryset = _lock_queryset_if_possible(queryset)

        resource = queryset.first()
        if resource is None:
            return None
        return to_snapshot(kind, resource)

    def mark_status(
        self,
        kind: ResourceKind,
        resource_id: UUID,
        status: str,
        *,
        current_odometer: Decimal | None = None,
    ) -> None:
        kind = ResourceKind(kind)
        now = timezone.now()
        updates = {"status": status, "updated_at": now}
        if kind == ResourceKind.ASSET and status == RESOURCE_RENTED:
            updates["last_used_at"] = now
        if kind == ResourceKind.VEHICLE and current_odometer is not None:
            updates["current_odometer"] = current_odometer

        updated = model_for(kind).objects.filter(pk=resource_id).update(**updates)
        logger.info(
            "resource.status_changed",
            resource_kind=kind.value,
            resource_id=str(resource_id),
            status=status,
            updated=updated,
        )
