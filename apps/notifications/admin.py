"""Admin registration for notifications."""

from __future__ import annotations

from django.contrib import admin

from .models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ("user", "type", "channel", "status", "organization", "read_at", "created_at")
    list_filter = ("type", "channel", "status")
    search_fields = ("user__username", "user__email", "type")
    readonly_fields = ("created_at",)
