"""Admin registration for reservations."""

from __future__ import annotations

from django.contrib import admin

from .models import Reservation


@admin.register(Reservation)
class ReservationAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "resource_kind",
        "resource_id",
        "borrower",
        "organization",
        "status",
        "start",
        "end",
        "recurrence_type",
        "is_recurring_instance",
        "return_status",
    )
    list_filter = ("status", "resource_kind", "recurrence_type", "return_status", "organization")
    search_fields = ("id", "resource_id", "borrower__username", "borrower__email", "note")
    raw_id_fields = ("borrower", "parent_reservation", "return_verified_by")
    readonly_fields = (
        "id",
        "organization",
        "resource_kind",
        "resource_id",
        "created_at",
        "updated_at",
        "distance_traveled",
    )
    date_hierarchy = "start"
