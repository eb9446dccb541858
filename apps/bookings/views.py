"""API views for reservations."""

from __future__ import annotations

from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from . import services
from .domain.exceptions import (
    AuthorizationMismatch,
    ConfigurationError,
    LifecycleError,
    MissingEvidence,
    ReservationError,
    ReservationNotFound,
    SchedulingConflict,
    ValidationError,
)
from .domain.returns import ReturnPhotos
from .filters import ReservationFilter
from .models import Reservation
from .serializers import (
    ReservationCreateSerializer,
    ReservationSerializer,
    TransitionSerializer,
    VehicleReturnSerializer,
    VerifyReturnSerializer,
)

ERROR_STATUS = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    ConfigurationError: status.HTTP_400_BAD_REQUEST,
    MissingEvidence: status.HTTP_400_BAD_REQUEST,
    AuthorizationMismatch: status.HTTP_403_FORBIDDEN,
    ReservationNotFound: status.HTTP_404_NOT_FOUND,
    SchedulingConflict: status.HTTP_409_CONFLICT,
    LifecycleError: status.HTTP_409_CONFLICT,
}


def reservation_error_response(exc: ReservationError) -> Response:
    body = {"detail": exc.message, "code": type(exc).__name__}
    conflict_date = getattr(exc, "conflict_date", None)
    if conflict_date is not None:
        body["conflict_date"] = conflict_date.isoformat()
    return Response(body, status=ERROR_STATUS.get(type(exc), status.HTTP_400_BAD_REQUEST))


class ReservationErrorMixin:
    """Turns engine errors into HTTP responses."""

    def handle_exception(self, exc):  # type: ignore
        if isinstance(exc, ReservationError):
            return reservation_error_response(exc)
        return super().handle_exception(exc)


class ReservationViewSet(
    ReservationErrorMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """Reservations of the requesting user's organization."""

    queryset = Reservation.objects.all()
    serializer_class = ReservationSerializer
    permission_classes = [permissions.IsAuthenticated]
    filterset_class = ReservationFilter

    def get_queryset(self):  # type: ignore
        user = self.request.user
        qs = super().get_queryset()
        if user.is_superuser:
            return qs
        profile = getattr(user, "profile", None)
        if profile is None or profile.organization_id is None:
            return qs.none()
        return qs.filter(organization_id=profile.organization_id)

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = ReservationCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = services.create_reservation(
            resource_kind=data["resource_kind"],
            resource_id=data["resource_id"],
            borrower_id=request.user.id,
            start=data["start"],
            end=data["end"],
            note=data.get("note"),
            recurrence=data.get("recurrence"),
            start_odometer_reading=data.get("start_odometer_reading"),
        )

        anchor = Reservation.objects.get(pk=result.id)
        body = dict(ReservationSerializer(anchor).data)
        body["instance_count"] = result.instance_count
        return Response(body, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"])
    def transition(self, request, pk=None):  # type: ignore
        reservation = self.get_object()
        serializer = TransitionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        services.transition_status(reservation.pk, request.user.id, serializer.validated_data["status"])
        return self._refreshed(reservation)

    @action(detail=True, methods=["post"], url_path="vehicle-return")
    def vehicle_return(self, request, pk=None):  # type: ignore
        reservation = self.get_object()
        serializer = VehicleReturnSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        outcome = services.record_vehicle_return(
            reservation.pk,
            request.user.id,
            data["odometer_reading"],
            ReturnPhotos(
                odometer_image=data.get("odometer_image") or None,
                exterior_image=data.get("exterior_image") or None,
            ),
            data.get("note", ""),
        )
        return Response(
            {
                "reservation_id": str(outcome.reservation_id),
                "odometer_reading": str(outcome.odometer_reading),
                "distance_traveled": (
                    str(outcome.distance_traveled) if outcome.distance_traveled is not None else None
                ),
                "status": outcome.status,
                "return_status": outcome.return_status,
                "verification_pending": outcome.verification_pending,
            }
        )

    @action(detail=True, methods=["post"], url_path="verify-return")
    def verify_return(self, request, pk=None):  # type: ignore
        reservation = self.get_object()
        serializer = VerifyReturnSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        services.verify_vehicle_return(
            reservation.pk,
            request.user.id,
            data["approved"],
            condition=data.get("condition", ""),
            note=data.get("note", ""),
        )
        return self._refreshed(reservation)

    def _refreshed(self, reservation: Reservation) -> Response:
        reservation.refresh_from_db()
        return Response(ReservationSerializer(reservation).data)
