"""Reservation model.

One table for every resource kind; ``resource_kind`` + ``resource_id`` point
at the reserved asset, space or vehicle. Overlapping active reservations of
one resource are rejected by the engine and, on PostgreSQL, by an exclusion
constraint (see migration 0002).
"""

from __future__ import annotations

import uuid

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class Reservation(models.Model):
    """A borrower's claim on a resource for a time interval."""

    class ResourceKind(models.TextChoices):
        ASSET = "asset", _("Asset")
        SPACE = "space", _("Space")
        VEHICLE = "vehicle", _("Vehicle")

    class Status(models.TextChoices):
        PENDING = "pending", _("Pending")
        APPROVED = "approved", _("Approved")
        REJECTED = "rejected", _("Rejected")
        RETURNED = "returned", _("Returned")
        CANCELLED = "cancelled", _("Cancelled")

    class RecurrenceType(models.TextChoices):
        NONE = "none", _("Does not repeat")
        WEEKLY = "weekly", _("Weekly")
        MONTHLY = "monthly", _("Monthly")

    class ReturnStatus(models.TextChoices):
        RETURNED = "returned", _("Returned, awaiting verification")
        VERIFIED = "verified", _("Verified")
        REJECTED = "rejected", _("Rejected")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    organization = models.ForeignKey(
        "organizations.Organization",
        on_delete=models.CASCADE,
        related_name="reservations",
    )
    resource_kind = models.CharField(max_length=20, choices=ResourceKind.choices)
    resource_id = models.UUIDField()
    borrower = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="reservations",
    )
    start = models.DateTimeField()
    end = models.DateTimeField()
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    note = models.TextField(blank=True)

    # Recurrence
    recurrence_type = models.CharField(
        max_length=20,
        choices=RecurrenceType.choices,
        default=RecurrenceType.NONE,
    )
    recurrence_interval = models.PositiveSmallIntegerField(default=1)
    recurrence_end_date = models.DateField(null=True, blank=True)
    recurrence_days_of_week = models.JSONField(
        default=list,
        blank=True,
        help_text=_("Weekday indices, 0=Sunday ... 6=Saturday."),
    )
    recurrence_day_of_month = models.PositiveSmallIntegerField(null=True, blank=True)
    parent_reservation = models.ForeignKey(
        "self",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="instances",
    )
    is_recurring_instance = models.BooleanField(default=False)

    # Vehicle return
    start_odometer_reading = models.DecimalField(max_digits=10, decimal_places=1, null=True, blank=True)
    odometer_reading = models.DecimalField(max_digits=10, decimal_places=1, null=True, blank=True)
    distance_traveled = models.DecimalField(max_digits=10, decimal_places=1, null=True, blank=True)
    return_status = models.CharField(max_length=20, choices=ReturnStatus.choices, blank=True)
    return_verified_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="verified_returns",
    )
    return_verified_at = models.DateTimeField(null=True, blank=True)
    return_note = models.TextField(blank=True)
    return_condition = models.CharField(max_length=100, blank=True)
    odometer_image = models.CharField(max_length=500, blank=True)
    exterior_image = models.CharField(max_length=500, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Reservation")
        verbose_name_plural = _("Reservations")
        ordering = ["start"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(start__lte=models.F("end")),
                name="reservation_start_before_end",
            ),
        ]
        indexes = [
            models.Index(fields=["resource_kind", "resource_id", "start", "end"], name="reservation_resource_idx"),
            models.Index(fields=["organization", "status"], name="reservation_org_status_idx"),
            models.Index(fields=["borrower", "status"], name="reservation_borrower_idx"),
        ]

    def __str__(self) -> str:
        return f"Reservation {self.id} ({self.resource_kind}, {self.status})"
