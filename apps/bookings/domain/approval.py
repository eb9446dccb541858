"""
Approval Policy Resolution

Decides which role must approve a reservation. Policies are rows of
(organization, scope, department) -> required role, where a row with
department=None is the organization-wide default for that scope.

Lookup order:
1. the policy of the resource's own department
2. the organization-wide policy of the scope
3. DEFAULT_REQUIRED_ROLE
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable
from uuid import UUID

from apps.bookings.domain.entities import ResourceKind


class Role(str, Enum):
    ADMIN = 'admin'
    MANAGER = 'manager'
    USER = 'user'

    @property
    def rank(self) -> int:
        return _ROLE_RANK[self]


_ROLE_RANK = {Role.USER: 0, Role.MANAGER: 1, Role.ADMIN: 2}

DEFAULT_REQUIRED_ROLE = Role.MANAGER

# Rows seeded for every new organization
DEFAULT_ORGANIZATION_POLICIES = (
    (ResourceKind.ASSET, Role.ADMIN),
    (ResourceKind.SPACE, Role.ADMIN),
    (ResourceKind.VEHICLE, Role.ADMIN),
)


class OwnerScope(str, Enum):
    ORGANIZATION = 'organization'
    DEPARTMENT = 'department'


@dataclass(frozen=True)
class Ownership:
    """Who owns a resource: the whole organization or one department"""
    scope: OwnerScope = OwnerScope.ORGANIZATION
    department: str | None = None

    @classmethod
    def organization_wide(cls) -> Ownership:
        return cls(OwnerScope.ORGANIZATION, None)

    @classmethod
    def of_department(cls, department: str) -> Ownership:
        return cls(OwnerScope.DEPARTMENT, department)

    @property
    def policy_department(self) -> str | None:
        """Department key used for the policy lookup"""
        if self.scope == OwnerScope.ORGANIZATION:
            return None
        return self.department


@dataclass(frozen=True)
class ApprovalPolicy:
    organization_id: UUID
    scope: ResourceKind
    department: str | None
    required_role: Role


def resolve_required_role(
    policies: Iterable[ApprovalPolicy],
    organization_id: UUID,
    scope: ResourceKind,
    ownership: Ownership,
) -> Role:
    """
    Required approver role for a resource of ``scope`` owned as ``ownership``

    Policies of other organizations or scopes are ignored, so callers may
    pass a wider table than needed.
    """
    candidates = [
        policy for policy in policies
        if policy.organization_id == organization_id and policy.scope == scope
    ]
    department = ownership.policy_department

    exact = next((p for p in candidates if p.department == department), None)
    if exact is not None:
        return exact.required_role

    fallback = next((p for p in candidates if p.department is None), None)
    if fallback is not None:
        return fallback.required_role

    return DEFAULT_REQUIRED_ROLE


def role_satisfies(actor_role: Role | str, required_role: Role | str) -> bool:
    """admin covers manager, manager covers user"""
    return Role(actor_role).rank >= Role(required_role).rank
