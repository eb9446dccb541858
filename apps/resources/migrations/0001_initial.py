import uuid

import django.db.models.deletion
from django.db import migrations, models

import apps.resources.models

STATUS_CHOICES = [
    ("available", "Available"),
    ("rented", "Rented"),
    ("repair", "In repair"),
    ("lost", "Lost"),
    ("retired", "Retired"),
]
OWNER_SCOPE_CHOICES = [("organization", "Organization"), ("department", "Department")]


def resource_fields(related_name):
    return [
        ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
        (
            "short_id",
            models.CharField(
                default=apps.resources.models.generate_short_id,
                editable=False,
                max_length=16,
                unique=True,
            ),
        ),
        ("name", models.CharField(max_length=255)),
        ("status", models.CharField(choices=STATUS_CHOICES, default="available", max_length=20)),
        ("owner_scope", models.CharField(choices=OWNER_SCOPE_CHOICES, default="organization", max_length=20)),
        (
            "owner_department",
            models.CharField(
                blank=True,
                help_text="Owning department when owner_scope is 'department'.",
                max_length=100,
            ),
        ),
        ("created_at", models.DateTimeField(auto_now_add=True)),
        ("updated_at", models.DateTimeField(auto_now=True)),
        (
            "organization",
            models.ForeignKey(
                blank=True,
                null=True,
                on_delete=django.db.models.deletion.CASCADE,
                related_name=related_name,
                to="organizations.organization",
            ),
        ),
    ]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("organizations", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Asset",
            fields=resource_fields("assets") + [
                ("loanable", models.BooleanField(default=True)),
                (
                    "usable_until",
                    models.DateField(
                        blank=True,
                        help_text="Last day the asset may be reserved for.",
                        null=True,
                    ),
                ),
                ("quantity", models.PositiveIntegerField(default=1)),
                ("last_used_at", models.DateTimeField(blank=True, null=True)),
            ],
            options={
                "verbose_name": "Asset",
                "verbose_name_plural": "Assets",
                "ordering": ["name"],
                "abstract": False,
            },
        ),
        migrations.CreateModel(
            name="Space",
            fields=resource_fields("spaces"),
            options={
                "verbose_name": "Space",
                "verbose_name_plural": "Spaces",
                "ordering": ["name"],
                "abstract": False,
            },
        ),
        migrations.CreateModel(
            name="Vehicle",
            fields=resource_fields("vehicles") + [
                ("license_plate", models.CharField(blank=True, max_length=32)),
                (
                    "current_odometer",
                    models.DecimalField(blank=True, decimal_places=1, max_digits=10, null=True),
                ),
            ],
            options={
                "verbose_name": "Vehicle",
                "verbose_name_plural": "Vehicles",
                "ordering": ["name"],
                "abstract": False,
            },
        ),
    ]
