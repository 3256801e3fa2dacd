"""User managers: bcrypt hashing plus level-scoped managers for the proxies."""

import uuid

import bcrypt
from django.contrib.auth.base_user import BaseUserManager
from django.db import models

from .choices import EDITORIAL_LEVELS, Level


class UserManager(BaseUserManager):
    """Manager to create users with bcrypt password hashes."""

    use_in_migrations = True

    def _create_user(self, email: str, password: str | None, **extra_fields):
        if not email:
            raise ValueError("The Email must be set")
        email = self.normalize_email(email)
        user = self.model(id=uuid.uuid4(), email=email, **extra_fields)
        user.password_hash = self.hash_password(password) if password else ""
        user.save(using=self._db)
        return user

    def create_user(self, email: str, password: str | None = None, **extra_fields):
        """Create a staff-facing user (editor by default) with a bcrypt-hashed password."""
        extra_fields.setdefault("level", Level.EDITOR)
        extra_fields.setdefault("is_staff", False)
        extra_fields.setdefault("is_superuser", False)
        if password is None:
            raise ValueError("Password must be provided")
        return self._create_user(email, password, **extra_fields)

    def create_superuser(self, email: str, password: str, **extra_fields):
        """Create an admin-level superuser."""
        extra_fields.setdefault("level", Level.ADMIN)
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        extra_fields.setdefault("is_active", True)
        if not extra_fields.get("is_staff"):
            raise ValueError("Superuser must have is_staff=True.")
        if not extra_fields.get("is_superuser"):
            raise ValueError("Superuser must have is_superuser=True.")
        return self._create_user(email, password, **extra_fields)

    @staticmethod
    def hash_password(raw_password: str) -> str:
        """Hash a raw password using bcrypt and return the utf-8 string."""
        salt = bcrypt.gensalt()
        hashed = bcrypt.hashpw(raw_password.encode(), salt)
        return hashed.decode()

    @staticmethod
    def verify_password(user, raw_password: str) -> bool:
        """Verify raw password against stored bcrypt hash."""

        if not user.password_hash:
            return False
        return bcrypt.checkpw(raw_password.encode(), user.password_hash.encode("utf-8"))


class AuthorManager(models.Manager):
    def get_queryset(self):
        return super().get_queryset().filter(level=Level.AUTHOR).select_related("author_profile")


class EditorManager(models.Manager):
    def get_queryset(self):
        return super().get_queryset().filter(level__in=EDITORIAL_LEVELS)


__all__ = ["UserManager", "AuthorManager", "EditorManager"]
