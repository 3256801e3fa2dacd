"""Level-gated field whitelist for article updates.

Each level may change only the fields listed for it. ``folder_id`` and
``doc_id`` appear nowhere: they are fixed when the article is created.
"""

from typing import Any, Iterable, Mapping

from rest_framework.exceptions import ValidationError

from people.choices import Level

ARTICLE_UPDATE_RULES: dict[str, frozenset[str]] = {
    Level.AUTHOR: frozenset({"title"}),
    Level.EDITOR: frozenset({"title", "marking_grid_id"}),
    Level.ADMIN: frozenset({"title", "marking_grid_id", "wordpress_id"}),
}


class FieldUpdateDenied(ValidationError):
    """Raised in strict mode when an update names fields the level may not touch."""

    def __init__(self, fields: Iterable[str], level: str):
        self.fields = sorted(fields)
        self.level = level
        super().__init__({name: [f"Level '{level}' may not update this field."] for name in self.fields})


def permitted_fields(level: str | None) -> frozenset[str]:
    return ARTICLE_UPDATE_RULES.get(level, frozenset())


def filter_updates(updates: Mapping[str, Any], level: str | None, *, fail: bool = False) -> dict[str, Any]:
    """Return the subset of ``updates`` that ``level`` may apply.

    With ``fail=True`` any disallowed key aborts the whole update instead of
    being dropped.
    """
    allowed = permitted_fields(level)
    rejected = [name for name in updates if name not in allowed]
    if rejected and fail:
        raise FieldUpdateDenied(rejected, level or "anonymous")
    return {name: value for name, value in updates.items() if name in allowed}


__all__ = [
    "ARTICLE_UPDATE_RULES",
    "FieldUpdateDenied",
    "permitted_fields",
    "filter_updates",
]
