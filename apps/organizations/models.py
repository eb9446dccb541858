"""Organization, member profile and approval policy models."""

from __future__ import annotations

import uuid

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


def default_return_verification_policy() -> dict:
    return {"enabled": False, "require_photo": True, "require_verification": True}


class Role(models.TextChoices):
    ADMIN = "admin", _("Administrator")
    MANAGER = "manager", _("Manager")
    USER = "user", _("User")


class Scope(models.TextChoices):
    ASSET = "asset", _("Asset")
    SPACE = "space", _("Space")
    VEHICLE = "vehicle", _("Vehicle")


class Organization(models.Model):
    """A tenant owning resources and members."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255)
    return_verification_policy = models.JSONField(
        default=default_return_verification_policy,
        blank=True,
        help_text=_("Vehicle return rules: enabled, require_photo, require_verification."),
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Organization")
        verbose_name_plural = _("Organizations")
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name


class Profile(models.Model):
    """Organization membership of a user."""

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="profile",
    )
    organization = models.ForeignKey(
        Organization,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="profiles",
    )
    department = models.CharField(max_length=100, blank=True)
    role = models.CharField(max_length=20, choices=Role.choices, default=Role.USER)
    name = models.CharField(max_length=150, blank=True)
    phone = models.CharField(max_length=32, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Profile")
        verbose_name_plural = _("Profiles")
        indexes = [
            models.Index(fields=["organization", "department"], name="profile_org_department_idx"),
        ]

    def __str__(self) -> str:
        return self.name or str(self.user)


class ApprovalPolicy(models.Model):
    """Role required to approve reservations of one scope.

    ``department`` empty (NULL) is the organization-wide default of the scope.
    """

    organization = models.ForeignKey(
        Organization,
        on_delete=models.CASCADE,
        related_name="approval_policies",
    )
    scope = models.CharField(max_length=20, choices=Scope.choices)
    department = models.CharField(max_length=100, null=True, blank=True)
    required_role = models.CharField(max_length=20, choices=Role.choices, default=Role.MANAGER)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Approval policy")
        verbose_name_plural = _("Approval policies")
        ordering = ["organization", "scope", "department"]
        constraints = [
            # NULLs are distinct in unique indexes, so the default row needs its own
            models.UniqueConstraint(
                fields=["organization", "scope", "department"],
                condition=models.Q(department__isnull=False),
                name="approval_policy_unique_department",
            ),
            models.UniqueConstraint(
                fields=["organization", "scope"],
                condition=models.Q(department__isnull=True),
                name="approval_policy_unique_default",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.organization_id} {self.scope}/{self.department or '*'} -> {self.required_role}"
