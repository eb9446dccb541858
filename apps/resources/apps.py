from django.apps import AppConfig  # type: ignore


class ResourcesConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.resources"
    label = "resources"
