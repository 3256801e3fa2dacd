"""App configuration for the access_control Django application."""

from django.apps import AppConfig


class AccessControlConfig(AppConfig):
    """Level permissions and field whitelists; registers system checks on startup."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "access_control"

    def ready(self) -> None:
        from . import checks  # noqa: F401
