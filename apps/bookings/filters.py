"""Filters for the reservation list."""

from __future__ import annotations

import django_filters  # type: ignore

from .models import Reservation


class ReservationFilter(django_filters.FilterSet):
    resource_kind = django_filters.ChoiceFilter(choices=Reservation.ResourceKind.choices)
    resource_id = django_filters.UUIDFilter()
    status = django_filters.MultipleChoiceFilter(choices=Reservation.Status.choices)
    borrower = django_filters.NumberFilter(field_name="borrower_id")
    start_after = django_filters.IsoDateTimeFilter(field_name="end", lookup_expr="gte")
    end_before = django_filters.IsoDateTimeFilter(field_name="start", lookup_expr="lte")

    class Meta:
        model = Reservation
        fields = ["resource_kind", "resource_id", "status", "borrower"]
