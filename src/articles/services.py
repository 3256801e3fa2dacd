"""Article orchestration: Drive documents, relational records, events, WordPress.

The database and the two remote systems share no transaction. A failure
part-way through ``create`` leaves whatever Drive resources were already
made (folder, document, marking grid) in place; nothing compensates for
them. Deleting an article likewise leaves its Drive folder untouched.
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from access_control.rules import filter_updates
from integrations.copyright import AnalysisResult
from integrations.drive import GOOGLE_DOC_MIME_TYPE, Drive
from integrations.wordpress import WordPressClient
from people.services import AuthorService
from .events import ARTICLE_ASSIGNED, ARTICLE_CREATED, build_dispatcher
from .models import Article
from .serializers import ArticleUpdateSerializer, validate_submission
from .sharing import PermissionSharer

logger = logging.getLogger(__name__)

TEXT_MIME_TYPE = "text/plain"


@dataclass(frozen=True)
class PublishResult:
    article: Article
    wordpress: Any


class ArticleService:
    def __init__(self, drive=None, wordpress=None, dispatcher=None, sharer=None):
        self.drive = drive if drive is not None else Drive()
        self.wordpress = wordpress if wordpress is not None else WordPressClient()
        self.dispatcher = dispatcher if dispatcher is not None else build_dispatcher()
        self.sharer = sharer if sharer is not None else PermissionSharer(self.drive)

    def find(self, *, published: bool = False, editor=None, author=None, **criteria) -> list[Article]:
        """Articles matching ``criteria``, optionally narrowed to published ones or to one editor/author."""
        logger.info("Find all articles")
        articles = Article.objects.with_people()
        if published:
            articles = articles.published()
        if editor is not None:
            articles = articles.assigned_to(editor)
        if author is not None:
            articles = articles.by_author(author)
        return list(articles.filter(**criteria))

    def find_one(self, article_id) -> Article | None:
        logger.info("Find one article")
        return Article.objects.with_people().filter(pk=article_id).first()

    def create(self, article_data: Mapping[str, Any], file) -> Article:
        """Create the Drive folder/document/marking grid, then persist the article.

        All input violations are raised together before any remote call.
        Author permission grants are submitted in the background; their
        futures are left on ``article.share_tasks`` and never awaited here.
        """
        data = validate_submission(article_data, file)

        authors = AuthorService.resolve(data["authors"])
        article = Article(title=data["title"])
        logger.info("Create a new article => %s", article.title)

        article.folder_id = self.drive.create_folder(article.title, settings.GOOGLE_DRIVE_PARENT_FOLDER)
        article.doc_id = self.drive.create_file(article.title, file, GOOGLE_DOC_MIME_TYPE, article.folder_id)
        article.marking_grid_id = self.drive.copy(
            settings.GOOGLE_MARKING_GRID_TEMPLATE,
            article.folder_id,
            f"Marking Grid for {article.title}",
        )

        share_tasks = self.sharer.share(article.doc_id, [author.email for author in authors])
        logger.info("Dispatched %d permission grant(s) for document %s", len(share_tasks), article.doc_id)

        article.id = uuid.uuid4()
        with transaction.atomic():
            for author in authors:
                AuthorService.persist(author)
            article.save(force_insert=True)
            article.authors.set(authors)

        article.share_tasks = share_tasks
        self.dispatcher.dispatch(ARTICLE_CREATED, article, service=self)
        return article

    def update(self, article_id, updates: Mapping[str, Any], acting_user, fail: bool = False) -> Article:
        """Apply the fields ``acting_user``'s level may change.

        Disallowed fields are dropped, or with ``fail=True`` reject the whole
        update. Raises ``Article.DoesNotExist`` for an unknown id.
        """
        logger.info("Update an article")
        article = Article.objects.get(pk=article_id)
        permitted = filter_updates(updates, getattr(acting_user, "level", None), fail=fail)

        checked = ArticleUpdateSerializer(article, data=permitted, partial=True)
        checked.is_valid(raise_exception=True)
        return checked.save()

    def delete(self, article_id) -> None:
        """Remove the relational row if there is one; the Drive folder and files stay."""
        logger.info("Delete an article")
        Article.objects.filter(pk=article_id).delete()

    def publish(self, article_id) -> PublishResult:
        """Create a WordPress post for the article. Calling it again creates another post."""
        article = Article.objects.get(pk=article_id)
        post = self.wordpress.publish_article(article, self.get_text(article))

        article.wordpress_id = post["id"]
        article.save(update_fields=["wordpress_id", "updated_at"])
        return PublishResult(article=article, wordpress=post)

    def get_published(self, article_id) -> PublishResult | None:
        """Return the article with its WordPress post, or None when the article is unknown."""
        article = Article.objects.filter(pk=article_id).first()
        if article is None:
            return None

        post = self.wordpress.get_article(article)
        return PublishResult(article=article, wordpress=post)

    def update_copyright(self, result: AnalysisResult) -> None:
        """Record a copyright analysis against its article."""
        article = Article.objects.filter(pk=result.article_id).first()
        if article is None:
            logger.warning("Copyright result for unknown article %s ignored", result.article_id)
            return

        article.copyright_score = result.score
        article.copyright_report = result.as_report()
        article.copyright_checked_at = timezone.now()
        article.save(update_fields=["copyright_score", "copyright_report", "copyright_checked_at", "updated_at"])
        logger.info("Stored copyright score %.3f for %s", result.score, article.title)

    def assign(self, article_id, editors: Iterable, remove: bool = False) -> Article | None:
        """Attach editors not already on the article; one event per newly attached editor.

        Unknown ids return None. ``remove`` is accepted but removal is not
        supported: the call only ever adds.
        """
        article = self.find_one(article_id)
        if article is None:
            return None

        if remove:
            logger.warning("Editor removal requested for %s but is not supported; adding only", article_id)

        seen = {editor.pk for editor in article.editors.all()}
        added = []
        for editor in editors:
            if editor.pk in seen:
                continue
            seen.add(editor.pk)
            added.append(editor)

        if added:
            article.editors.add(*added)
            article.save(update_fields=["updated_at"])

        for editor in added:
            self.dispatcher.dispatch(ARTICLE_ASSIGNED, {"article": article, "editor": editor}, service=self)

        return article

    def get_text(self, article: Article) -> str:
        """Export the backing Google Doc as plain UTF-8 text."""
        exported = self.drive.export_file(article.doc_id, TEXT_MIME_TYPE)
        return bytes(exported).decode("utf-8")


_service: ArticleService | None = None


def get_article_service() -> ArticleService:
    """Return the process-wide service built from settings."""

    global _service
    if _service is None:
        _service = ArticleService()
    return _service


__all__ = ["ArticleService", "PublishResult", "get_article_service"]
