"""Article aggregate: Drive-backed manuscript with its authors and editors."""

import uuid

from django.conf import settings
from django.db import models

IMMUTABLE_FIELDS = ("folder_id", "doc_id")


class ArticleStatus(models.TextChoices):
    DRAFT = "draft", "Draft"
    ASSIGNED = "assigned", "Assigned"
    PUBLISHED = "published", "Published"


class ArticleQuerySet(models.QuerySet):
    def with_people(self):
        return self.prefetch_related("authors", "editors")

    def published(self):
        return self.filter(wordpress_id__isnull=False)

    def assigned_to(self, editor):
        return self.filter(editors=editor)

    def by_author(self, author):
        return self.filter(authors=author)


class Article(models.Model):
    """An article submission.

    ``folder_id`` and ``doc_id`` are written once, when the Drive resources
    are created; saving a loaded article with different values raises
    ``ValueError``.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    title = models.CharField(max_length=255)
    folder_id = models.CharField(max_length=128, editable=False)
    doc_id = models.CharField(max_length=128, editable=False)
    marking_grid_id = models.CharField(max_length=128, blank=True)
    wordpress_id = models.PositiveBigIntegerField(null=True, blank=True)
    authors = models.ManyToManyField(settings.AUTH_USER_MODEL, related_name="authored_articles")
    editors = models.ManyToManyField(settings.AUTH_USER_MODEL, related_name="assigned_articles", blank=True)
    copyright_score = models.FloatField(null=True, blank=True)
    copyright_report = models.JSONField(default=dict, blank=True)
    copyright_checked_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ArticleQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.title

    @classmethod
    def from_db(cls, db, field_names, values):
        instance = super().from_db(db, field_names, values)
        instance._remember_immutables()
        return instance

    def _remember_immutables(self) -> None:
        self._immutable_values = {
            name: self.__dict__[name] for name in IMMUTABLE_FIELDS if name in self.__dict__
        }

    def save(self, *args, **kwargs):
        for name, original in getattr(self, "_immutable_values", {}).items():
            if original and getattr(self, name) != original:
                raise ValueError(f"Article.{name} cannot change once set")
        super().save(*args, **kwargs)
        self._remember_immutables()

    @property
    def status(self) -> str:
        if self.wordpress_id is not None:
            return ArticleStatus.PUBLISHED
        if self.pk and not self._state.adding and self.editors.exists():
            return ArticleStatus.ASSIGNED
        return ArticleStatus.DRAFT


__all__ = ["Article", "ArticleQuerySet", "ArticleStatus", "IMMUTABLE_FIELDS"]
