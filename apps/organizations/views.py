"""API views for organizations."""

from __future__ import annotations

from rest_framework import permissions, status  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from apps.bookings import services as reservation_services
from apps.bookings.views import ReservationErrorMixin


class ApprovalRoleView(ReservationErrorMixin, APIView):
    """Role required to approve reservations of a scope in the caller's organization."""

    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):  # type: ignore
        profile = getattr(request.user, "profile", None)
        if profile is None or profile.organization_id is None:
            return Response(
                {"detail": "You do not belong to an organization."},
                status=status.HTTP_403_FORBIDDEN,
            )

        scope = request.query_params.get("scope", "")
        department = request.query_params.get("department") or None
        role = reservation_services.resolve_approval_role(profile.organization_id, scope, department)
        return Response(
            {
                "organization_id": str(profile.organization_id),
                "scope": scope,
                "department": department,
                "required_role": role.value,
            }
        )
