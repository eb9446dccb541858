"""Admin registrations for resources."""

from __future__ import annotations

from django.contrib import admin

from .models import Asset, Space, Vehicle

RESOURCE_LIST_DISPLAY = ("name", "short_id", "organization", "status", "owner_scope", "owner_department")


@admin.register(Asset)
class AssetAdmin(admin.ModelAdmin):
    list_display = RESOURCE_LIST_DISPLAY + ("loanable", "usable_until", "last_used_at")
    list_filter = ("status", "loanable", "owner_scope", "organization")
    search_fields = ("name", "short_id", "owner_department")
    readonly_fields = ("id", "short_id", "created_at", "updated_at", "last_used_at")


@admin.register(Space)
class SpaceAdmin(admin.ModelAdmin):
    list_display = RESOURCE_LIST_DISPLAY
    list_filter = ("status", "owner_scope", "organization")
    search_fields = ("name", "short_id", "owner_department")
    readonly_fields = ("id", "short_id", "created_at", "updated_at")


@admin.register(Vehicle)
class VehicleAdmin(admin.ModelAdmin):
    list_display = RESOURCE_LIST_DISPLAY + ("license_plate", "current_odometer")
    list_filter = ("status", "owner_scope", "organization")
    search_fields = ("name", "short_id", "license_plate")
    readonly_fields = ("id", "short_id", "created_at", "updated_at")
