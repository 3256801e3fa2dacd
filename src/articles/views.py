"""Article endpoints; every operation is delegated to ``ArticleService``."""

import json

from django.core.exceptions import ValidationError as DjangoValidationError
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound, ValidationError
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.response import Response

from access_control.permissions import LevelPermission
from core.response import BaseViewSet, api_response
from people.choices import ALL_LEVELS, EDITORIAL_LEVELS, Level
from .serializers import (
    ArticleSerializer,
    AssignSerializer,
    ArticleUpdateSerializer,
    PublishedArticleSerializer,
)
from .services import get_article_service

FILTERABLE_FIELDS = ("title", "wordpress_id")
SCOPE_PARAMS = ("editor", "author")
TRUTHY = ("1", "true", "yes")


class ArticleViewSet(BaseViewSet):
    serializer_class = ArticleSerializer
    lookup_value_regex = "[0-9a-fA-F-]{32,36}"
    permission_classes = [LevelPermission]
    parser_classes = [JSONParser, MultiPartParser, FormParser]
    level_rules = {
        "list": ALL_LEVELS,
        "retrieve": ALL_LEVELS,
        "create": ALL_LEVELS,
        "partial_update": ALL_LEVELS,
        "destroy": (Level.ADMIN,),
        "publish": EDITORIAL_LEVELS,
        "published": ALL_LEVELS,
        "assign": EDITORIAL_LEVELS,
        "text": EDITORIAL_LEVELS,
    }

    @property
    def service(self):
        return get_article_service()

    def list(self, request):
        """Filter by ``title``/``wordpress_id``; narrow with ``published``, ``editor`` or ``author``."""
        params = request.query_params
        criteria = {name: value for name, value in params.items() if name in FILTERABLE_FIELDS}
        scopes = {name: params[name] for name in SCOPE_PARAMS if params.get(name)}
        published = params.get("published", "").lower() in TRUTHY
        try:
            articles = self.service.find(published=published, **scopes, **criteria)
        except (ValueError, DjangoValidationError) as exc:
            raise ValidationError({"filters": [str(exc)]}) from exc
        return api_response(ArticleSerializer(articles, many=True).data)

    def retrieve(self, request, pk=None):
        return api_response(ArticleSerializer(self._get_article(pk)).data)

    def create(self, request):
        """Accept a multipart submission: ``title``, ``authors`` (JSON list) and ``file``."""
        submitted = {name: request.data.get(name) for name in ("title", "authors")}
        payload = {name: value for name, value in submitted.items() if value is not None}
        if "authors" in payload:
            payload["authors"] = _decode_json(payload["authors"])
        article = self.service.create(payload, request.FILES.get("file"))
        return api_response(ArticleSerializer(article).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=ArticleUpdateSerializer)
    def partial_update(self, request, pk=None):
        updates = request.data.dict() if hasattr(request.data, "dict") else dict(request.data)
        article = self.service.update(pk, updates, request.user, fail=True)
        return api_response(ArticleSerializer(article).data)

    def destroy(self, request, pk=None):
        self._get_article(pk)
        self.service.delete(pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(responses=PublishedArticleSerializer)
    @action(detail=True, methods=["post"])
    def publish(self, request, pk=None):
        result = self.service.publish(pk)
        return api_response(PublishedArticleSerializer(result).data)

    @extend_schema(responses=PublishedArticleSerializer)
    @publish.mapping.get
    def published(self, request, pk=None):
        result = self.service.get_published(pk)
        if result is None:
            raise NotFound("Article not found.")
        return api_response(PublishedArticleSerializer(result).data)

    @extend_schema(request=AssignSerializer)
    @action(detail=True, methods=["post"])
    def assign(self, request, pk=None):
        serializer = AssignSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        article = self.service.assign(
            pk, serializer.validated_data["editors"], remove=serializer.validated_data["remove"]
        )
        if article is None:
            raise NotFound("Article not found.")
        return api_response(ArticleSerializer(article).data)

    @action(detail=True, methods=["get"])
    def text(self, request, pk=None):
        return api_response({"text": self.service.get_text(self._get_article(pk))})

    def _get_article(self, pk):
        article = self.service.find_one(pk)
        if article is None:
            raise NotFound("Article not found.")
        return article


def _decode_json(raw):
    """Multipart forms carry nested lists as JSON strings.

    Undecodable input is returned unchanged so the submission serializer
    reports it alongside every other violation.
    """
    if not isinstance(raw, str):
        return raw
    try:
        return json.loads(raw)
    except ValueError:
        return raw


__all__ = ["ArticleViewSet"]
