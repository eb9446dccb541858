"""Shared setup for reservation tests that hit the database."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from django.contrib.auth import get_user_model  # type: ignore
from django.utils import timezone  # type: ignore

from apps.organizations.models import Organization, Profile, Role
from apps.resources.models import Asset, Space, Vehicle

User = get_user_model()


def aware(year: int, month: int, day: int, hour: int = 0, minute: int = 0, second: int = 0) -> datetime:
    """Datetime in the project's local time zone."""

    return timezone.make_aware(datetime(year, month, day, hour, minute, second))


def make_member(organization, username: str, role: str = Role.USER, department: str = ""):
    user = User.objects.create_user(username=username, email=f"{username}@example.com", password="pass12345")
    Profile.objects.create(
        user=user,
        organization=organization,
        role=role,
        department=department,
        name=username.title(),
    )
    return user


class ReservationFixtures:
    """Mixin for TestCase classes: one organization with members and resources."""

    def setUp(self) -> None:
        super().setUp()
        self.organization = Organization.objects.create(name="Acme")
        self.other_organization = Organization.objects.create(name="Globex")

        self.borrower = make_member(self.organization, "borrower", department="dept-A")
        self.admin = make_member(self.organization, "admin", role=Role.ADMIN)
        self.manager = make_member(self.organization, "manager", role=Role.MANAGER, department="dept-A")
        self.outsider = make_member(self.other_organization, "outsider")

        self.asset = Asset.objects.create(organization=self.organization, name="Projector")
        self.space = Space.objects.create(organization=self.organization, name="Room 101")
        self.vehicle = Vehicle.objects.create(
            organization=self.organization,
            name="Van",
            license_plate="12가3456",
            current_odometer=Decimal("1000.0"),
        )
