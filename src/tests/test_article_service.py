"""Behaviour of ArticleService against stub Drive/WordPress adapters."""

from __future__ import annotations

import uuid
from concurrent.futures import ThreadPoolExecutor, wait
from unittest import mock

from django.db import IntegrityError
from django.test import TestCase, override_settings
from rest_framework.exceptions import ValidationError

from access_control.rules import FieldUpdateDenied
from articles.events import ARTICLE_ASSIGNED, ARTICLE_CREATED
from articles.models import Article, ArticleStatus
from articles.services import ArticleService
from articles.sharing import PermissionSharer
from integrations.copyright import AnalysisResult
from people.choices import Level
from people.models import AuthorProfile, User
from people.services import AuthorService
from tests.utils import (
    ImmediateExecutor,
    RecordingDispatcher,
    StubDrive,
    StubWordPress,
    author_data,
    create_author,
    create_user,
    upload,
)


@override_settings(GOOGLE_DRIVE_PARENT_FOLDER="parent-folder", GOOGLE_MARKING_GRID_TEMPLATE="grid-template")
class ArticleServiceTestCase(TestCase):
    """Builds a service whose collaborators all record what they were asked to do."""

    def setUp(self):
        self.drive = StubDrive()
        self.wordpress = StubWordPress()
        self.dispatcher = RecordingDispatcher()
        self.service = ArticleService(
            drive=self.drive,
            wordpress=self.wordpress,
            dispatcher=self.dispatcher,
            sharer=PermissionSharer(self.drive, executor=ImmediateExecutor()),
        )

    def make_article(self, title="Existing article", **fields) -> Article:
        article = Article.objects.create(title=title, folder_id="folder-x", doc_id="doc-x", **fields)
        article.authors.add(create_author(f"{uuid.uuid4().hex[:8]}@example.com"))
        return article


class CreateValidationTests(ArticleServiceTestCase):
    def test_zero_authors_fails_before_any_drive_call(self):
        with self.assertRaises(ValidationError) as ctx:
            self.service.create({"title": "Empty", "authors": []}, upload())

        self.assertIn("authors", ctx.exception.detail)
        self.assertEqual(self.drive.calls, [])
        self.assertFalse(Article.objects.exists())

    def test_author_missing_required_field_fails_before_any_drive_call(self):
        incomplete = author_data()
        del incomplete["school"]

        with self.assertRaises(ValidationError) as ctx:
            self.service.create({"title": "Incomplete", "authors": [incomplete]}, upload())

        self.assertIn("authors", ctx.exception.detail)
        self.assertEqual(self.drive.calls, [])

    def test_unsupported_mime_type_fails_without_external_calls(self):
        with self.assertRaises(ValidationError) as ctx:
            self.service.create(
                {"title": "Picture", "authors": [author_data()]},
                upload(content_type="image/png", name="cover.png"),
            )

        self.assertIn("file", ctx.exception.detail)
        self.assertEqual(self.drive.calls, [])
        self.assertEqual(self.drive.shared, [])
        self.assertEqual(self.dispatcher.events, [])

    def test_violations_are_reported_together(self):
        with self.assertRaises(ValidationError) as ctx:
            self.service.create({"authors": []}, None)

        self.assertEqual(set(ctx.exception.detail), {"title", "authors", "file"})

    def test_editor_email_cannot_be_an_author(self):
        editor = create_user("editor@example.com", level=Level.EDITOR, name="Eve")

        with self.assertRaises(ValidationError) as ctx:
            self.service.create(
                {
                    "title": "Spring",
                    "authors": [author_data("Editor@Example.com"), author_data("new@example.com")],
                },
                upload(),
            )

        self.assertEqual(list(ctx.exception.detail), ["authors"])
        self.assertIn("editor@example.com", str(ctx.exception.detail["authors"][0]))
        self.assertEqual(self.drive.calls, [])
        self.assertFalse(Article.objects.exists())
        self.assertFalse(User.objects.filter(email="new@example.com").exists())
        editor.refresh_from_db()
        self.assertEqual(editor.level, Level.EDITOR)
        self.assertFalse(AuthorProfile.objects.filter(user=editor).exists())

    def test_every_staff_email_is_reported(self):
        create_user("editor@example.com", level=Level.EDITOR)
        create_user("admin@example.com", level=Level.ADMIN)

        with self.assertRaises(ValidationError) as ctx:
            self.service.create(
                {
                    "title": "Spring",
                    "authors": [author_data("editor@example.com"), author_data("admin@example.com")],
                },
                upload(),
            )

        self.assertEqual(len(ctx.exception.detail["authors"]), 2)
        self.assertEqual(self.drive.calls, [])
        self.assertEqual(self.dispatcher.events, [])


class CreateTests(ArticleServiceTestCase):
    def test_persists_drive_identifiers_as_returned(self):
        article = self.service.create({"title": "Spring", "authors": [author_data()]}, upload())

        stored = Article.objects.get(pk=article.pk)
        self.assertEqual(stored.folder_id, "folder-1")
        self.assertEqual(stored.doc_id, "doc-1")
        self.assertEqual(stored.marking_grid_id, "grid-1")

    def test_drive_calls_follow_creation_order(self):
        self.service.create({"title": "Spring", "authors": [author_data()]}, upload())

        self.assertEqual(
            [call[0] for call in self.drive.calls], ["create_folder", "create_file", "copy"]
        )
        self.assertEqual(self.drive.calls[0], ("create_folder", "Spring", "parent-folder"))
        self.assertEqual(
            self.drive.calls[1], ("create_file", "Spring", "application/vnd.google-apps.document", "folder-1")
        )
        self.assertEqual(self.drive.calls[2], ("copy", "grid-template", "folder-1", "Marking Grid for Spring"))

    def test_article_gets_a_fresh_identifier(self):
        supplied = uuid.uuid4()

        article = self.service.create(
            {"id": str(supplied), "title": "Spring", "authors": [author_data()]}, upload()
        )

        self.assertIsInstance(article.id, uuid.UUID)
        self.assertNotEqual(article.id, supplied)
        self.assertTrue(Article.objects.filter(pk=article.id).exists())

    def test_existing_author_is_reused(self):
        existing = create_author("ada@example.com")

        article = self.service.create(
            {"title": "Spring", "authors": [author_data("ada@example.com")]}, upload()
        )

        self.assertEqual([author.pk for author in article.authors.all()], [existing.pk])
        self.assertEqual(User.objects.filter(email__iexact="ada@example.com").count(), 1)
        # the stored profile is not overwritten by the submission
        existing.author_profile.refresh_from_db()
        self.assertEqual(existing.author_profile.school, "Old School")

    def test_existing_author_lookup_ignores_case(self):
        existing = create_author("ada@example.com")

        article = self.service.create(
            {"title": "Spring", "authors": [author_data("ADA@example.com")]}, upload()
        )

        self.assertEqual([author.pk for author in article.authors.all()], [existing.pk])

    def test_new_author_is_persisted_with_profile(self):
        article = self.service.create(
            {"title": "Spring", "authors": [author_data("new@example.com", teacher="Mr. Lee")]}, upload()
        )

        author = User.objects.get(email="new@example.com")
        self.assertEqual(author.level, Level.AUTHOR)
        self.assertEqual(author.author_profile.school, "Riverside High")
        self.assertEqual(author.author_profile.teacher, "Mr. Lee")
        self.assertEqual(author.author_profile.profile, "")
        self.assertEqual(list(article.authors.all()), [author])

    def test_duplicate_author_entries_collapse_to_one(self):
        article = self.service.create(
            {"title": "Spring", "authors": [author_data(), author_data(name="Ada Again")]}, upload()
        )

        self.assertEqual(article.authors.count(), 1)
        self.assertEqual(self.drive.shared, [("doc-1", "writer", "ada@example.com")])

    def test_created_event_carries_persisted_article(self):
        article = self.service.create({"title": "Spring", "authors": [author_data()]}, upload())

        self.assertEqual(self.dispatcher.events, [(ARTICLE_CREATED, article)])
        self.assertFalse(article._state.adding)
        self.assertEqual(self.dispatcher.contexts, [{"service": self.service}])

    def test_writer_permission_granted_to_every_author(self):
        existing = create_author("old@example.com")

        article = self.service.create(
            {"title": "Spring", "authors": [author_data("old@example.com"), author_data("new@example.com")]},
            upload(),
        )

        self.assertEqual(
            self.drive.shared,
            [("doc-1", "writer", existing.email), ("doc-1", "writer", "new@example.com")],
        )
        self.assertEqual(len(article.share_tasks), 2)

    def test_failed_share_does_not_fail_create(self):
        self.drive.share_file = mock.Mock(side_effect=RuntimeError("quota exceeded"))

        with self.assertLogs("articles.sharing", level="ERROR"):
            article = self.service.create({"title": "Spring", "authors": [author_data()]}, upload())

        self.assertTrue(Article.objects.filter(pk=article.pk).exists())
        self.assertIsInstance(article.share_tasks[0].exception(), RuntimeError)

    def test_shares_run_in_the_background_pool(self):
        with ThreadPoolExecutor(max_workers=2) as executor:
            self.service.sharer = PermissionSharer(self.drive, executor=executor)
            article = self.service.create({"title": "Spring", "authors": [author_data()]}, upload())

            # completion is not guaranteed when create returns; wait explicitly
            done, not_done = wait(article.share_tasks, timeout=5)

        self.assertEqual(len(done), 1)
        self.assertFalse(not_done)
        self.assertEqual(self.drive.shared, [("doc-1", "writer", "ada@example.com")])

    def test_drive_failure_propagates_and_nothing_is_persisted(self):
        self.drive.copy = mock.Mock(side_effect=RuntimeError("drive down"))

        with self.assertRaises(RuntimeError):
            self.service.create({"title": "Spring", "authors": [author_data()]}, upload())

        # folder and document were created and are left behind
        self.assertEqual([call[0] for call in self.drive.calls], ["create_folder", "create_file"])
        self.assertFalse(Article.objects.exists())
        self.assertFalse(User.objects.filter(email="ada@example.com").exists())
        self.assertEqual(self.dispatcher.events, [])

    def test_concurrent_new_author_race_fails_on_unique_email(self):
        """Two submissions that both miss the author lookup cannot insert the same email twice.

        The request that loses fails at the database write, after its Drive
        resources were created.
        """
        create_author("ada@example.com")

        with mock.patch.object(AuthorService, "find_by_email", return_value=None):
            with self.assertRaises(IntegrityError):
                self.service.create({"title": "Spring", "authors": [author_data("ada@example.com")]}, upload())

        self.assertEqual(User.objects.filter(email="ada@example.com").count(), 1)
        self.assertEqual(len(self.drive.calls), 3)
        self.assertFalse(Article.objects.exists())


class UpdateTests(ArticleServiceTestCase):
    def setUp(self):
        super().setUp()
        self.article = self.make_article(marking_grid_id="grid-x")
        self.author = create_user("author@example.com", level=Level.AUTHOR)
        self.editor = create_user("editor@example.com", level=Level.EDITOR)
        self.admin = create_user("admin@example.com", level=Level.ADMIN)

    def test_author_can_only_change_title(self):
        updated = self.service.update(
            self.article.pk, {"title": "Renamed", "marking_grid_id": "grid-y"}, self.author
        )

        self.assertEqual(updated.title, "Renamed")
        self.article.refresh_from_db()
        self.assertEqual(self.article.title, "Renamed")
        self.assertEqual(self.article.marking_grid_id, "grid-x")

    def test_editor_changes_marking_grid_but_not_wordpress_id(self):
        self.service.update(self.article.pk, {"marking_grid_id": "grid-y", "wordpress_id": 7}, self.editor)

        self.article.refresh_from_db()
        self.assertEqual(self.article.marking_grid_id, "grid-y")
        self.assertIsNone(self.article.wordpress_id)

    def test_admin_can_set_wordpress_id(self):
        self.service.update(self.article.pk, {"wordpress_id": 7}, self.admin)

        self.article.refresh_from_db()
        self.assertEqual(self.article.wordpress_id, 7)

    def test_drive_identifiers_are_never_updatable(self):
        self.service.update(self.article.pk, {"folder_id": "other", "doc_id": "other"}, self.admin)

        self.article.refresh_from_db()
        self.assertEqual(self.article.folder_id, "folder-x")
        self.assertEqual(self.article.doc_id, "doc-x")

    def test_fail_mode_rejects_whole_update(self):
        with self.assertRaises(FieldUpdateDenied) as ctx:
            self.service.update(
                self.article.pk, {"title": "Renamed", "wordpress_id": 7}, self.editor, fail=True
            )

        self.assertEqual(ctx.exception.fields, ["wordpress_id"])
        self.article.refresh_from_db()
        self.assertEqual(self.article.title, "Existing article")

    def test_invalid_value_is_rejected(self):
        with self.assertRaises(ValidationError):
            self.service.update(self.article.pk, {"wordpress_id": "not-a-number"}, self.admin)

    def test_missing_article_raises_does_not_exist(self):
        with self.assertRaises(Article.DoesNotExist):
            self.service.update(uuid.uuid4(), {"title": "Renamed"}, self.admin)

    def test_changing_drive_identifier_on_save_raises(self):
        article = Article.objects.get(pk=self.article.pk)
        article.folder_id = "hijacked"

        with self.assertRaises(ValueError):
            article.save()


class DeleteTests(ArticleServiceTestCase):
    def test_removes_record_without_touching_drive(self):
        article = self.make_article()

        self.service.delete(article.pk)

        self.assertFalse(Article.objects.filter(pk=article.pk).exists())
        self.assertEqual(self.drive.calls, [])
        self.assertEqual(self.drive.shared, [])

    def test_authors_survive_article_deletion(self):
        article = self.make_article()
        author = article.authors.get()

        self.service.delete(article.pk)

        self.assertTrue(User.objects.filter(pk=author.pk).exists())

    def test_missing_article_is_a_noop(self):
        self.make_article()

        self.assertIsNone(self.service.delete(uuid.uuid4()))

        self.assertEqual(Article.objects.count(), 1)
        self.assertEqual(self.drive.calls, [])


class PublishTests(ArticleServiceTestCase):
    def test_publish_stores_post_id_and_returns_both(self):
        article = self.make_article()

        result = self.service.publish(article.pk)

        self.assertEqual(result.wordpress["id"], 101)
        self.assertEqual(result.article.wordpress_id, 101)
        self.assertEqual(self.wordpress.published, [(article.pk, "Manuscript body")])
        article.refresh_from_db()
        self.assertEqual(article.wordpress_id, 101)
        self.assertEqual(article.status, ArticleStatus.PUBLISHED)

    def test_publish_twice_creates_two_posts_and_keeps_the_last_id(self):
        article = self.make_article()

        self.service.publish(article.pk)
        self.service.publish(article.pk)

        self.assertEqual(len(self.wordpress.published), 2)
        article.refresh_from_db()
        self.assertEqual(article.wordpress_id, 102)

    def test_publish_missing_article_raises(self):
        with self.assertRaises(Article.DoesNotExist):
            self.service.publish(uuid.uuid4())
        self.assertEqual(self.wordpress.published, [])

    def test_get_published_missing_article_skips_adapter(self):
        self.assertIsNone(self.service.get_published(uuid.uuid4()))
        self.assertEqual(self.wordpress.fetched, [])

    def test_get_published_returns_article_and_post(self):
        article = self.make_article(wordpress_id=55)

        result = self.service.get_published(article.pk)

        self.assertEqual(result.article, article)
        self.assertEqual(result.wordpress, {"id": 55})

    def test_get_published_passes_through_adapter_answer_for_unpublished(self):
        article = self.make_article()

        result = self.service.get_published(article.pk)

        self.assertIsNone(result.wordpress)
        self.assertEqual(self.wordpress.fetched, [article.pk])


class AssignTests(ArticleServiceTestCase):
    def setUp(self):
        super().setUp()
        self.article = self.make_article()
        self.editor_a = create_user("a@example.com", level=Level.EDITOR)
        self.editor_b = create_user("b@example.com", level=Level.ADMIN)

    def test_duplicate_editor_in_input_is_added_once(self):
        article = self.service.assign(self.article.pk, [self.editor_a, self.editor_a])

        self.assertEqual(list(article.editors.all()), [self.editor_a])
        self.assertEqual(
            self.dispatcher.events,
            [(ARTICLE_ASSIGNED, {"article": article, "editor": self.editor_a})],
        )

    def test_reassigning_is_idempotent(self):
        self.service.assign(self.article.pk, [self.editor_a, self.editor_b])
        self.dispatcher.events.clear()

        article = self.service.assign(self.article.pk, [self.editor_b, self.editor_a])

        self.assertEqual(self.dispatcher.events, [])
        self.assertEqual(
            {editor.pk for editor in article.editors.all()}, {self.editor_a.pk, self.editor_b.pk}
        )
        self.assertEqual(self.article.editors.count(), 2)

    def test_events_follow_input_order(self):
        self.service.assign(self.article.pk, [self.editor_b, self.editor_a])

        self.assertEqual(
            [payload["editor"] for _, payload in self.dispatcher.events], [self.editor_b, self.editor_a]
        )

    def test_only_new_editors_get_events(self):
        self.service.assign(self.article.pk, [self.editor_a])
        self.dispatcher.events.clear()

        self.service.assign(self.article.pk, [self.editor_a, self.editor_b])

        self.assertEqual([payload["editor"] for _, payload in self.dispatcher.events], [self.editor_b])

    def test_assign_moves_article_to_assigned(self):
        self.assertEqual(self.article.status, ArticleStatus.DRAFT)

        self.service.assign(self.article.pk, [self.editor_a])

        self.assertEqual(Article.objects.get(pk=self.article.pk).status, ArticleStatus.ASSIGNED)

    def test_remove_flag_does_not_remove(self):
        self.service.assign(self.article.pk, [self.editor_a])

        with self.assertLogs("articles.services", level="WARNING"):
            article = self.service.assign(self.article.pk, [self.editor_a], remove=True)

        self.assertEqual(list(article.editors.all()), [self.editor_a])

    def test_missing_article_returns_none(self):
        self.assertIsNone(self.service.assign(uuid.uuid4(), [self.editor_a]))
        self.assertEqual(self.dispatcher.events, [])


class TextAndCopyrightTests(ArticleServiceTestCase):
    def test_get_text_decodes_export_as_utf8(self):
        self.drive.text = "Blåbærsyltetøy".encode("utf-8")
        article = self.make_article()

        self.assertEqual(self.service.get_text(article), "Blåbærsyltetøy")
        self.assertEqual(self.drive.calls, [("export_file", "doc-x", "text/plain")])

    def test_update_copyright_stores_analysis(self):
        article = self.make_article()
        result = AnalysisResult(article_id=str(article.pk), score=0.42, matches=[{"source": "example.org"}])

        self.service.update_copyright(result)

        article.refresh_from_db()
        self.assertEqual(article.copyright_score, 0.42)
        self.assertEqual(article.copyright_report, {"score": 0.42, "matches": [{"source": "example.org"}]})
        self.assertIsNotNone(article.copyright_checked_at)

    def test_update_copyright_for_missing_article_is_logged(self):
        with self.assertLogs("articles.services", level="WARNING"):
            self.service.update_copyright(AnalysisResult(article_id=str(uuid.uuid4()), score=0.1))


class FindTests(ArticleServiceTestCase):
    def test_find_filters_by_criteria(self):
        wanted = self.make_article(title="Wanted")
        self.make_article(title="Other")

        self.assertEqual(self.service.find(title="Wanted"), [wanted])
        self.assertEqual(len(self.service.find()), 2)

    def test_find_one_missing_returns_none(self):
        self.assertIsNone(self.service.find_one(uuid.uuid4()))

    def test_find_published_only(self):
        published = self.make_article(title="Out", wordpress_id=9)
        self.make_article(title="Draft")

        self.assertEqual(self.service.find(published=True), [published])

    def test_find_assigned_to_editor(self):
        editor = create_user("editor@example.com", level=Level.EDITOR)
        assigned = self.make_article(title="Assigned")
        assigned.editors.add(editor)
        self.make_article(title="Unassigned")

        self.assertEqual(self.service.find(editor=editor), [assigned])
        self.assertEqual(self.service.find(editor=str(editor.pk)), [assigned])

    def test_find_by_author_combines_with_criteria(self):
        mine = self.make_article(title="Mine")
        author = mine.authors.get()
        other = self.make_article(title="Also mine")
        other.authors.add(author)
        self.make_article(title="Theirs")

        self.assertEqual({a.title for a in self.service.find(author=author)}, {"Mine", "Also mine"})
        self.assertEqual(self.service.find(author=author, title="Mine"), [mine])
