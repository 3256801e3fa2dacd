"""Level-based permission class mapping DRF actions to allowed user levels."""

from django.conf import settings
from rest_framework import permissions

from core.response import FORBIDDEN_MESSAGE


class LevelPermission(permissions.BasePermission):
    """Allow an action when the caller's ``level`` is listed for it.

    Views declare ``level_rules``: a mapping of DRF action name (``list``,
    ``create``, custom ``@action`` names, ...) to the levels allowed to call
    it. Actions missing from the mapping are denied.

    If ``settings.ALLOW_SUPERUSER_BYPASS`` is True, authenticated superusers
    skip the check entirely.
    """

    message = FORBIDDEN_MESSAGE

    def has_permission(self, request, view) -> bool:
        user = getattr(request, "user", None)
        if not user or not getattr(user, "is_authenticated", False):
            return False

        if self._has_superuser_bypass(user):
            return True

        rules = getattr(view, "level_rules", None)
        if not rules:
            return False

        allowed = rules.get(getattr(view, "action", None))
        if not allowed:
            return False
        return getattr(user, "level", None) in allowed

    @staticmethod
    def _has_superuser_bypass(user) -> bool:
        return bool(
            getattr(settings, "ALLOW_SUPERUSER_BYPASS", False)
            and getattr(user, "is_superuser", False)
        )


__all__ = ["LevelPermission"]
