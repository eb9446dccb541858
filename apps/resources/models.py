"""Reservable resources: equipment, rooms and vehicles.

All three kinds share one abstract base so the reservation engine can treat
them alike; each keeps its own table. A resource is addressed either by its
UUID or by ``short_id``, a short URL-safe alias printed on labels and QR
codes.
"""

from __future__ import annotations

import secrets
import uuid

from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


def generate_short_id() -> str:
    return secrets.token_urlsafe(6)


class Resource(models.Model):
    class Status(models.TextChoices):
        AVAILABLE = "available", _("Available")
        RENTED = "rented", _("Rented")
        REPAIR = "repair", _("In repair")
        LOST = "lost", _("Lost")
        RETIRED = "retired", _("Retired")

    class OwnerScope(models.TextChoices):
        ORGANIZATION = "organization", _("Organization")
        DEPARTMENT = "department", _("Department")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    short_id = models.CharField(max_length=16, unique=True, default=generate_short_id, editable=False)
    organization = models.ForeignKey(
        "organizations.Organization",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="%(class)ss",
    )
    name = models.CharField(max_length=255)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.AVAILABLE)
    owner_scope = models.CharField(
        max_length=20,
        choices=OwnerScope.choices,
        default=OwnerScope.ORGANIZATION,
    )
    owner_department = models.CharField(
        max_length=100,
        blank=True,
        help_text=_("Owning department when owner_scope is 'department'."),
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True
        ordering = ["name"]

    def __str__(self) -> str:
        return f"{self.name} ({self.short_id})"


class Asset(Resource):
    """Equipment that can be borrowed."""

    loanable = models.BooleanField(default=True)
    usable_until = models.DateField(
        null=True,
        blank=True,
        help_text=_("Last day the asset may be reserved for."),
    )
    quantity = models.PositiveIntegerField(default=1)
    last_used_at = models.DateTimeField(null=True, blank=True)

    class Meta(Resource.Meta):
        verbose_name = _("Asset")
        verbose_name_plural = _("Assets")


class Space(Resource):
    """Meeting room or other bookable place."""

    class Meta(Resource.Meta):
        verbose_name = _("Space")
        verbose_name_plural = _("Spaces")


class Vehicle(Resource):
    license_plate = models.CharField(max_length=32, blank=True)
    current_odometer = models.DecimalField(max_digits=10, decimal_places=1, null=True, blank=True)

    class Meta(Resource.Meta):
        verbose_name = _("Vehicle")
        verbose_name_plural = _("Vehicles")
