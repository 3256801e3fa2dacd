"""People on the editorial side: one ``User`` table discriminated by ``level``.

Authors carry their submission details in ``AuthorProfile``; editors carry
no extra payload. ``Author`` and ``Editor`` are proxies whose default
managers only see their own levels.
"""

import uuid
from typing import ClassVar, Optional

from django.contrib.auth.models import AbstractBaseUser
from django.db import models

from .choices import Level
from .managers import AuthorManager, EditorManager, UserManager


class User(AbstractBaseUser):
    """Anyone known to the system, identified by email."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    email = models.EmailField(unique=True)
    name = models.CharField(max_length=255)
    level = models.CharField(max_length=16, choices=Level.choices, default=Level.AUTHOR)
    password_hash = models.CharField(max_length=128, blank=True)
    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)
    is_superuser = models.BooleanField(default=False)
    token_version = models.PositiveIntegerField(default=1)
    date_joined = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS: ClassVar[list[str]] = ["name"]

    objects = UserManager()

    class Meta:
        """Default ordering shows newest users first."""
        ordering = ["-date_joined"]

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"{self.name} <{self.email}>"

    def set_password(self, raw_password: Optional[str]) -> None:  # type: ignore[override]
        """Override to ensure bcrypt hashing via manager utility."""

        if raw_password is None:
            self.password_hash = ""
        else:
            self.password_hash = UserManager.hash_password(raw_password)

    def check_password(self, raw_password: Optional[str]) -> bool:  # type: ignore[override]
        """Delegate to bcrypt verification helper."""

        if raw_password is None:
            return False
        return UserManager.verify_password(self, raw_password)


class AuthorProfile(models.Model):
    """Submission details every author must provide."""

    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name="author_profile")
    school = models.CharField(max_length=255)
    biography = models.TextField()
    country = models.CharField(max_length=100)
    teacher = models.CharField(max_length=255, blank=True)
    profile = models.CharField(max_length=500, blank=True)

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"{self.user.email} ({self.school})"


class Author(User):
    objects = AuthorManager()

    class Meta:
        proxy = True


class Editor(User):
    objects = EditorManager()

    class Meta:
        proxy = True


__all__ = ["User", "AuthorProfile", "Author", "Editor"]
