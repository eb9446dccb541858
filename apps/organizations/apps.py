from django.apps import AppConfig  # type: ignore


class OrganizationsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.organizations"
    label = "organizations"

    def ready(self) -> None:
        from . import signals  # noqa: F401
