"""Article DTOs (input validation) and response serializers."""

from typing import Any

from django.conf import settings
from rest_framework import serializers

from people.models import Editor
from people.serializers import AuthorDTOSerializer, PersonSummarySerializer
from .models import Article


class ArticleDTOSerializer(serializers.Serializer):
    """Submission payload: a title and at least one fully described author."""

    title = serializers.CharField(max_length=255)
    authors = AuthorDTOSerializer(many=True, allow_empty=False)


def validate_upload(file) -> dict[str, Any]:
    """Return upload violations keyed like serializer errors (empty when acceptable)."""
    if file is None:
        return {"file": ["A manuscript file is required."]}
    allowed = settings.ARTICLE_ALLOWED_FORMATS
    content_type = getattr(file, "content_type", None)
    if content_type not in allowed:
        return {"file": [f"MimeType must be one of [{', '.join(allowed)}]"]}
    return {}


def validate_submission(article_data: Any, file) -> dict[str, Any]:
    """Run every submission check and return all violations together.

    Raises ``serializers.ValidationError`` carrying the aggregate when
    anything fails; returns the validated article data otherwise.
    """
    dto = ArticleDTOSerializer(data=article_data)
    errors: dict[str, Any] = {}
    if not dto.is_valid():
        errors.update(dto.errors)
    errors.update(validate_upload(file))
    if errors:
        raise serializers.ValidationError(errors)
    return dto.validated_data


class ArticleUpdateSerializer(serializers.ModelSerializer):
    """Type checks for the mutable article fields."""

    class Meta:
        model = Article
        fields = ["title", "marking_grid_id", "wordpress_id"]
        extra_kwargs = {field: {"required": False} for field in fields}


class ArticleSerializer(serializers.ModelSerializer):
    authors = PersonSummarySerializer(many=True, read_only=True)
    editors = PersonSummarySerializer(many=True, read_only=True)
    status = serializers.CharField(read_only=True)

    class Meta:
        model = Article
        fields = [
            "id",
            "title",
            "status",
            "folder_id",
            "doc_id",
            "marking_grid_id",
            "wordpress_id",
            "authors",
            "editors",
            "copyright_score",
            "copyright_checked_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class AssignSerializer(serializers.Serializer):
    """Editors to attach, in the order their notifications should go out."""

    editors = serializers.PrimaryKeyRelatedField(
        queryset=Editor.objects.all(), many=True, allow_empty=False
    )
    remove = serializers.BooleanField(default=False)


class PublishedArticleSerializer(serializers.Serializer):
    article = ArticleSerializer(read_only=True)
    wordpress = serializers.JSONField(read_only=True)


__all__ = [
    "ArticleDTOSerializer",
    "validate_upload",
    "validate_submission",
    "ArticleUpdateSerializer",
    "ArticleSerializer",
    "AssignSerializer",
    "PublishedArticleSerializer",
]
