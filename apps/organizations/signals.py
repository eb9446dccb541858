"""Signal receivers for organizations."""

from __future__ import annotations

from django.db.models.signals import post_save  # type: ignore
from django.dispatch import receiver  # type: ignore

from .models import Organization
from .services import ensure_default_approval_policies


@receiver(post_save, sender=Organization)
def seed_approval_policies(sender, instance: Organization, created: bool, raw: bool = False, **kwargs):
    if created and not raw:
        ensure_default_approval_policies(instance)
