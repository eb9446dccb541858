"""Serializers for the reservation API."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Reservation


class ReservationSerializer(serializers.ModelSerializer):
    """Read representation of a reservation."""

    organization_id = serializers.ReadOnlyField()
    borrower_id = serializers.ReadOnlyField()
    parent_reservation_id = serializers.ReadOnlyField()

    class Meta:
        model = Reservation
        fields = [
            "id",
            "organization_id",
            "resource_kind",
            "resource_id",
            "borrower_id",
            "start",
            "end",
            "status",
            "note",
            "recurrence_type",
            "recurrence_interval",
            "recurrence_end_date",
            "recurrence_days_of_week",
            "recurrence_day_of_month",
            "parent_reservation_id",
            "is_recurring_instance",
            "start_odometer_reading",
            "odometer_reading",
            "distance_traveled",
            "return_status",
            "return_verified_by",
            "return_verified_at",
            "return_note",
            "return_condition",
            "odometer_image",
            "exterior_image",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class RecurrenceSerializer(serializers.Serializer):
    type = serializers.CharField(default="none")
    interval = serializers.IntegerField(default=1)
    end_date = serializers.DateField(required=False, allow_null=True)
    days_of_week = serializers.ListField(child=serializers.IntegerField(), required=False)
    day_of_month = serializers.IntegerField(required=False, allow_null=True)


class ReservationCreateSerializer(serializers.Serializer):
    """Reservation request; the borrower is the requesting user."""

    resource_kind = serializers.ChoiceField(choices=Reservation.ResourceKind.choices)
    resource_id = serializers.CharField(help_text="Resource UUID or short id.")
    start = serializers.DateTimeField()
    end = serializers.DateTimeField()
    note = serializers.CharField(required=False, allow_blank=True, default="")
    recurrence = RecurrenceSerializer(required=False, allow_null=True)
    start_odometer_reading = serializers.DecimalField(
        max_digits=10,
        decimal_places=1,
        required=False,
        allow_null=True,
    )


class TransitionSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Reservation.Status.choices)


class VehicleReturnSerializer(serializers.Serializer):
    # Parsed by the engine so non-numeric readings get the engine's message
    odometer_reading = serializers.CharField()
    odometer_image = serializers.CharField(required=False, allow_blank=True, default="")
    exterior_image = serializers.CharField(required=False, allow_blank=True, default="")
    note = serializers.CharField(required=False, allow_blank=True, default="")


class VerifyReturnSerializer(serializers.Serializer):
    approved = serializers.BooleanField()
    condition = serializers.CharField(required=False, allow_blank=True, default="")
    note = serializers.CharField(required=False, allow_blank=True, default="")
