"""Admin registration for the audit log."""

from __future__ import annotations

from django.contrib import admin

from .models import AuditLog


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ("action", "target_type", "target_id", "actor", "organization", "created_at")
    list_filter = ("action", "target_type")
    search_fields = ("action", "target_id")
    readonly_fields = ("organization", "actor", "action", "target_type", "target_id", "metadata", "created_at")

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
