"""Shared helpers for tests (user creation, fake Redis, stub adapters)."""

from __future__ import annotations

from concurrent.futures import Future
from typing import Dict

from django.core.files.uploadedfile import SimpleUploadedFile

from people.choices import Level
from people.managers import UserManager
from people.models import AuthorProfile, User

DOCX = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


class FakeRedis:
    """Minimal Redis stub supporting the commands used by TokenService."""

    def __init__(self):
        self._store: Dict[str, str] = {}

    def setex(self, key: str, ttl_seconds: int, value: str) -> None:
        """Mimic Redis SETEX; TTL is ignored in tests, value stored in-memory."""
        self._store[key] = value

    def get(self, key: str):
        """Return stored value for key or None, matching Redis GET semantics."""
        return self._store.get(key)


class StubDrive:
    """Records every call and hands back fixed identifiers."""

    def __init__(self, text: bytes = b"Manuscript body"):
        self.calls: list[tuple] = []
        self.shared: list[tuple] = []
        self.text = text

    def create_folder(self, name, parent_id):
        self.calls.append(("create_folder", name, parent_id))
        return "folder-1"

    def create_file(self, name, file, mime_type, parent_id):
        self.calls.append(("create_file", name, mime_type, parent_id))
        return "doc-1"

    def copy(self, source_id, dest_id, name):
        self.calls.append(("copy", source_id, dest_id, name))
        return "grid-1"

    def share_file(self, file_id, role, email):
        self.shared.append((file_id, role, email))

    def export_file(self, file_id, mime_type):
        self.calls.append(("export_file", file_id, mime_type))
        return self.text


class StubWordPress:
    """Counts post creations and returns increasing post ids."""

    def __init__(self):
        self.published: list[tuple] = []
        self.fetched: list = []
        self._next_id = 100

    def publish_article(self, article, content=""):
        self._next_id += 1
        self.published.append((article.pk, content))
        return {"id": self._next_id, "title": {"rendered": article.title}}

    def get_article(self, article):
        self.fetched.append(article.pk)
        if article.wordpress_id is None:
            return None
        return {"id": article.wordpress_id}


class RecordingDispatcher:
    def __init__(self):
        self.events: list[tuple] = []
        self.contexts: list[dict] = []

    def dispatch(self, name, payload, **context):
        self.events.append((name, payload))
        self.contexts.append(context)


class ImmediateExecutor:
    """Runs submitted work inline so share results are visible straight away."""

    def submit(self, fn, *args, **kwargs):
        future: Future = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as exc:
            future.set_exception(exc)
        return future


def create_user(email: str, password: str = "StrongPass123", level: str = Level.EDITOR, **extra) -> User:
    """Create a user with a bcrypt-hashed password for tests."""

    extra.setdefault("name", email.split("@")[0].title())
    return User.objects.create(
        email=email,
        password_hash=UserManager.hash_password(password),
        level=level,
        **extra,
    )


def create_author(email: str, **profile) -> User:
    """Create an author-level user together with a complete profile."""

    user = User.objects.create(email=email, name=profile.pop("name", "Existing Author"), level=Level.AUTHOR)
    AuthorProfile.objects.create(
        user=user,
        school=profile.get("school", "Old School"),
        biography=profile.get("biography", "Already on file."),
        country=profile.get("country", "Norway"),
    )
    return user


def author_data(email: str = "ada@example.com", **overrides) -> dict:
    data = {
        "name": "Ada Writer",
        "email": email,
        "school": "Riverside High",
        "biography": "Writes short fiction.",
        "country": "Norway",
    }
    data.update(overrides)
    return data


def upload(content_type: str = DOCX, name: str = "manuscript.docx") -> SimpleUploadedFile:
    return SimpleUploadedFile(name, b"PK\x03\x04 manuscript", content_type=content_type)
