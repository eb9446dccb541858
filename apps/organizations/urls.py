"""URL routing for organizations."""

from __future__ import annotations

from django.urls import path  # type: ignore

from .views import ApprovalRoleView

urlpatterns = [
    path("approval-role/", ApprovalRoleView.as_view(), name="approval-role"),
]
