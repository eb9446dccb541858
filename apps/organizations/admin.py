"""Admin registrations for organizations."""

from __future__ import annotations

from django.contrib import admin

from .models import ApprovalPolicy, Organization, Profile


class ApprovalPolicyInline(admin.TabularInline):
    model = ApprovalPolicy
    extra = 0


@admin.register(Organization)
class OrganizationAdmin(admin.ModelAdmin):
    list_display = ("name", "id", "created_at")
    search_fields = ("name",)
    readonly_fields = ("id", "created_at", "updated_at")
    inlines = [ApprovalPolicyInline]


@admin.register(Profile)
class ProfileAdmin(admin.ModelAdmin):
    list_display = ("user", "name", "organization", "department", "role")
    list_filter = ("role", "organization")
    search_fields = ("name", "user__username", "user__email", "department")
    raw_id_fields = ("user",)


@admin.register(ApprovalPolicy)
class ApprovalPolicyAdmin(admin.ModelAdmin):
    list_display = ("organization", "scope", "department", "required_role", "updated_at")
    list_filter = ("scope", "required_role", "organization")
    search_fields = ("department", "organization__name")
