"""App configuration for articles."""

from django.apps import AppConfig


class ArticlesConfig(AppConfig):
    """Articles app; connects lifecycle event subscribers on startup."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "articles"

    def ready(self) -> None:
        from . import subscribers  # noqa: F401
