"""Resource lookup by id or short alias, and status updates."""

from __future__ import annotations

from decimal import Decimal
from uuid import uuid4

from django.test import TestCase  # type: ignore

from apps.bookings.domain.approval import Ownership
from apps.bookings.domain.entities import ResourceKind
from apps.organizations.models import Organization
from apps.resources.models import Asset, Resource, Space, Vehicle
from apps.resources.services import DjangoResourceDirectory


class ResourceDirectoryTests(TestCase):
    def setUp(self) -> None:
        self.organization = Organization.objects.create(name="Acme")
        self.directory = DjangoResourceDirectory()

    def test_uuid_and_short_id_resolve_to_same_row(self) -> None:
        asset = Asset.objects.create(organization=self.organization, name="Drill")

        by_uuid = self.directory.resolve(ResourceKind.ASSET, asset.pk)
        by_text = self.directory.resolve(ResourceKind.ASSET, str(asset.pk))
        by_alias = self.directory.resolve(ResourceKind.ASSET, asset.short_id)

        self.assertEqual(by_uuid.id, asset.pk)
        self.assertEqual(by_text, by_uuid)
        self.assertEqual(by_alias, by_uuid)

    def test_kind_selects_the_table(self) -> None:
        space = Space.objects.create(organization=self.organization, name="Room 1")

        self.assertIsNone(self.directory.resolve(ResourceKind.ASSET, space.pk))
        self.assertEqual(self.directory.resolve("space", space.short_id).name, "Room 1")

    def test_unknown_identity(self) -> None:
        self.assertIsNone(self.directory.resolve(ResourceKind.ASSET, uuid4()))
        self.assertIsNone(self.directory.resolve(ResourceKind.ASSET, "nope"))
        self.assertIsNone(self.directory.resolve(ResourceKind.ASSET, ""))

    def test_snapshot_carries_ownership(self) -> None:
        owned = Asset.objects.create(
            organization=self.organization,
            name="Camera",
            owner_scope=Resource.OwnerScope.DEPARTMENT,
            owner_department="media",
        )
        shared = Asset.objects.create(organization=self.organization, name="Tripod", owner_department="media")

        self.assertEqual(self.directory.resolve(ResourceKind.ASSET, owned.pk).ownership, Ownership.of_department("media"))
        self.assertEqual(self.directory.resolve(ResourceKind.ASSET, shared.pk).ownership, Ownership.organization_wide())

    def test_short_ids_are_unique_per_row(self) -> None:
        first = Asset.objects.create(organization=self.organization, name="A")
        second = Asset.objects.create(organization=self.organization, name="B")

        self.assertNotEqual(first.short_id, second.short_id)

    def test_mark_rented_stamps_last_use(self) -> None:
        asset = Asset.objects.create(organization=self.organization, name="Drill")

        self.directory.mark_status(ResourceKind.ASSET, asset.pk, "rented")

        asset.refresh_from_db()
        self.assertEqual(asset.status, Resource.Status.RENTED)
        self.assertIsNotNone(asset.last_used_at)

    def test_mark_available_updates_odometer(self) -> None:
        vehicle = Vehicle.objects.create(organization=self.organization, name="Van", status=Resource.Status.RENTED)

        self.directory.mark_status(ResourceKind.VEHICLE, vehicle.pk, "available", current_odometer=Decimal("2500.5"))

        vehicle.refresh_from_db()
        self.assertEqual(vehicle.status, Resource.Status.AVAILABLE)
        self.assertEqual(vehicle.current_odometer, Decimal("2500.5"))
