import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

import apps.organizations.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Organization",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=255)),
                (
                    "return_verification_policy",
                    models.JSONField(
                        blank=True,
                        default=apps.organizations.models.default_return_verification_policy,
                        help_text="Vehicle return rules: enabled, require_photo, require_verification.",
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Organization",
                "verbose_name_plural": "Organizations",
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Profile",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("department", models.CharField(blank=True, max_length=100)),
                (
                    "role",
                    models.CharField(
                        choices=[("admin", "Administrator"), ("manager", "Manager"), ("user", "User")],
                        default="user",
                        max_length=20,
                    ),
                ),
                ("name", models.CharField(blank=True, max_length=150)),
                ("phone", models.CharField(blank=True, max_length=32)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "organization",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="profiles",
                        to="organizations.organization",
                    ),
                ),
                (
                    "user",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="profile",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Profile",
                "verbose_name_plural": "Profiles",
                "indexes": [
                    models.Index(fields=["organization", "department"], name="profile_org_department_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="ApprovalPolicy",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "scope",
                    models.CharField(
                        choices=[("asset", "Asset"), ("space", "Space"), ("vehicle", "Vehicle")],
                        max_length=20,
                    ),
                ),
                ("department", models.CharField(blank=True, max_length=100, null=True)),
                (
                    "required_role",
                    models.CharField(
                        choices=[("admin", "Administrator"), ("manager", "Manager"), ("user", "User")],
                        default="manager",
                        max_length=20,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "organization",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="approval_policies",
                        to="organizations.organization",
                    ),
                ),
            ],
            options={
                "verbose_name": "Approval policy",
                "verbose_name_plural": "Approval policies",
                "ordering": ["organization", "scope", "department"],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(department__isnull=False),
                        fields=("organization", "scope", "department"),
                        name="approval_policy_unique_department",
                    ),
                    models.UniqueConstraint(
                        condition=models.Q(department__isnull=True),
                        fields=("organization", "scope"),
                        name="approval_policy_unique_default",
                    ),
                ],
            },
        ),
    ]
