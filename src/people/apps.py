"""App configuration for people (users, authors, editors)."""

from django.apps import AppConfig


class PeopleConfig(AppConfig):
    """People app holds the custom User model, author profiles, and auth utilities."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "people"
