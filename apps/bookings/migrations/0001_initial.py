import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("organizations", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Reservation",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "resource_kind",
                    models.CharField(
                        choices=[("asset", "Asset"), ("space", "Space"), ("vehicle", "Vehicle")],
                        max_length=20,
                    ),
                ),
                ("resource_id", models.UUIDField()),
                ("start", models.DateTimeField()),
                ("end", models.DateTimeField()),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("approved", "Approved"),
                            ("rejected", "Rejected"),
                            ("returned", "Returned"),
                            ("cancelled", "Cancelled"),
                        ],
                        default="pending",
                        max_length=20,
                    ),
                ),
                ("note", models.TextField(blank=True)),
                (
                    "recurrence_type",
                    models.CharField(
                        choices=[("none", "Does not repeat"), ("weekly", "Weekly"), ("monthly", "Monthly")],
                        default="none",
                        max_length=20,
                    ),
                ),
                ("recurrence_interval", models.PositiveSmallIntegerField(default=1)),
                ("recurrence_end_date", models.DateField(blank=True, null=True)),
                (
                    "recurrence_days_of_week",
                    models.JSONField(blank=True, default=list, help_text="Weekday indices, 0=Sunday ... 6=Saturday."),
                ),
                ("recurrence_day_of_month", models.PositiveSmallIntegerField(blank=True, null=True)),
                ("is_recurring_instance", models.BooleanField(default=False)),
                (
                    "start_odometer_reading",
                    models.DecimalField(blank=True, decimal_places=1, max_digits=10, null=True),
                ),
                ("odometer_reading", models.DecimalField(blank=True, decimal_places=1, max_digits=10, null=True)),
                ("distance_traveled", models.DecimalField(blank=True, decimal_places=1, max_digits=10, null=True)),
                (
                    "return_status",
                    models.CharField(
                        blank=True,
                        choices=[
                            ("returned", "Returned, awaiting verification"),
                            ("verified", "Verified"),
                            ("rejected", "Rejected"),
                        ],
                        max_length=20,
                    ),
                ),
                ("return_verified_at", models.DateTimeField(blank=True, null=True)),
                ("return_note", models.TextField(blank=True)),
                ("return_condition", models.CharField(blank=True, max_length=100)),
                ("odometer_image", models.CharField(blank=True, max_length=500)),
                ("exterior_image", models.CharField(blank=True, max_length=500)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "borrower",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="reservations",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "organization",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="reservations",
                        to="organizations.organization",
                    ),
                ),
                (
                    "parent_reservation",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="instances",
                        to="bookings.reservation",
                    ),
                ),
                (
                    "return_verified_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="verified_returns",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Reservation",
                "verbose_name_plural": "Reservations",
                "ordering": ["start"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(start__lte=models.F("end")),
                        name="reservation_start_before_end",
                    ),
                ],
                "indexes": [
                    models.Index(
                        fields=["resource_kind", "resource_id", "start", "end"],
                        name="reservation_resource_idx",
                    ),
                    models.Index(fields=["organization", "status"], name="reservation_org_status_idx"),
                    models.Index(fields=["borrower", "status"], name="reservation_borrower_idx"),
                ],
            },
        ),
    ]
