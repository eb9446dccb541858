"""Django-backed profile and policy lookups for the reservation engine."""

from __future__ import annotations

from typing import List
from uuid import UUID

import structlog

from apps.bookings.application.ports import ProfileSnapshot
from apps.bookings.domain.approval import DEFAULT_ORGANIZATION_POLICIES, ApprovalPolicy, Role
from apps.bookings.domain.entities import ResourceKind
from apps.bookings.domain.returns import ReturnVerificationPolicy

from .models import ApprovalPolicy as ApprovalPolicyModel
from .models import Organization, Profile

logger = structlog.get_logger(__name__)


def ensure_default_approval_policies(organization: Organization) -> int:
    """Create the missing organization-wide policy rows; returns how many were added."""

    created_count = 0
    for scope, role in DEFAULT_ORGANIZATION_POLICIES:
        _, created = ApprovalPolicyModel.objects.get_or_create(
            organization=organization,
            scope=scope.value,
            department=None,
            defaults={"required_role": role.value},
        )
        created_count += int(created)

    if created_count:
        logger.info(
            "organization.default_policies_created",
            organization_id=str(organization.pk),
            created=created_count,
        )
    return created_count


def _snapshot(profile: Profile) -> ProfileSnapshot:
    return ProfileSnapshot(
        user_id=profile.user_id,
        organization_id=profile.organization_id,
        department=profile.department or None,
        role=Role(profile.role),
    )


class DjangoProfileDirectory:
    def get(self, user_id: int) -> ProfileSnapshot | None:
        profile = Profile.objects.filter(user_id=user_id).first()
        if profile is None:
            return None
        return _snapshot(profile)

    def members_of(self, organization_id: UUID) -> List[ProfileSnapshot]:
        profiles = Profile.objects.filter(organization_id=organization_id).order_by("user_id")
        return [_snapshot(profile) for profile in profiles]


class DjangoApprovalPolicySource:
    def policies_for(self, organization_id: UUID, scope: ResourceKind) -> List[ApprovalPolicy]:
        rows = ApprovalPolicyModel.objects.filter(
            organization_id=organization_id,
            scope=ResourceKind(scope).value,
        )
        return [
            ApprovalPolicy(
                organization_id=row.organization_id,
                scope=ResourceKind(row.scope),
                department=row.department,
                required_role=Role(row.required_role),
            )
            for row in rows
        ]


class DjangoReturnPolicySource:
    def return_policy_for(self, organization_id: UUID) -> ReturnVerificationPolicy:
        settings = (
            Organization.objects.filter(pk=organization_id)
            .values_list("return_verification_policy", flat=True)
            .first()
        )
        return ReturnVerificationPolicy.from_settings(settings)
