"""Token issuance/blocklisting and author lookup helpers."""

import logging
import time
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable, Tuple

import jwt
from django.conf import settings
from rest_framework.exceptions import AuthenticationFailed, ValidationError

from core.redis_client import get_redis_client
from .choices import Level
from .models import Author, AuthorProfile, User

logger = logging.getLogger(__name__)


class BlocklistUnavailable(Exception):
    """Raised when Redis blocklist cannot be checked (fail-closed)."""


class TokenService:
    """Handle JWT issuance, decoding, and blocklist operations."""

    ACCESS_TTL = timedelta(minutes=15)
    REFRESH_TTL = timedelta(hours=24)
    ALGORITHM = "HS256"
    BLOCKLIST_PREFIX = "blocklist:token:"

    @classmethod
    def generate_tokens(cls, user) -> Tuple[str, str]:
        """Generate signed access and refresh tokens for the given user."""

        now = datetime.now(timezone.utc)
        access_payload = cls._build_payload(user, "access", now, cls.ACCESS_TTL)
        refresh_payload = cls._build_payload(user, "refresh", now, cls.REFRESH_TTL)

        access_token = jwt.encode(access_payload, settings.SECRET_KEY, algorithm=cls.ALGORITHM)
        refresh_token = jwt.encode(refresh_payload, settings.SECRET_KEY, algorithm=cls.ALGORITHM)
        return access_token, refresh_token

    @classmethod
    def _build_payload(cls, user, token_type: str, issued_at: datetime, ttl: timedelta) -> dict[str, Any]:
        exp = issued_at + ttl
        return {
            "sub": str(user.id),
            "jti": str(uuid.uuid4()),
            "exp": int(exp.timestamp()),
            "iat": int(issued_at.timestamp()),
            "level": user.level,
            "ver": user.token_version,
            "type": token_type,
        }

    @classmethod
    def decode_token(cls, token: str, expected_type: str | None = None) -> dict[str, Any]:
        """Decode and validate a JWT; optionally enforce token type."""

        try:
            payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[cls.ALGORITHM])
        except jwt.ExpiredSignatureError as exc:  # pragma: no cover - simple mapping
            raise AuthenticationFailed("Token has expired") from exc
        except jwt.InvalidTokenError as exc:  # pragma: no cover - simple mapping
            raise AuthenticationFailed("Invalid token") from exc

        if expected_type and payload.get("type") != expected_type:
            raise AuthenticationFailed("Invalid token type")

        return payload

    @classmethod
    def block_token(cls, jti: str, exp: int) -> None:
        """Add token jti to blocklist until its expiration timestamp."""

        client = get_redis_client()
        ttl_seconds = max(0, exp - int(time.time()))
        try:
            client.setex(f"{cls.BLOCKLIST_PREFIX}{jti}", ttl_seconds, "1")
        except Exception as exc:  # pragma: no cover - network failure
            raise BlocklistUnavailable("Redis unavailable while blocklisting") from exc

    @classmethod
    def is_token_blocked(cls, jti: str) -> bool:
        """Check if a token jti is present in the blocklist."""

        client = get_redis_client()
        try:
            return client.get(f"{cls.BLOCKLIST_PREFIX}{jti}") is not None
        except Exception as exc:  # pragma: no cover - network failure
            raise BlocklistUnavailable("Redis unavailable while checking blocklist") from exc


class AuthorService:
    """Resolve submitted author details against people already on file."""

    PROFILE_FIELDS = ("school", "biography", "country", "teacher", "profile")

    @staticmethod
    def find_by_email(email: str) -> Author | None:
        return Author.objects.filter(email__iexact=email).first()

    @staticmethod
    def is_claimed_by_staff(email: str) -> bool:
        return User.objects.filter(email__iexact=email).exclude(level=Level.AUTHOR).exists()

    @classmethod
    def build_author(cls, data: dict[str, Any]) -> User:
        """Return an unsaved author-level user with its unsaved profile attached."""
        user = User(
            email=User.objects.normalize_email(data["email"]),
            name=data["name"],
            level=Level.AUTHOR,
        )
        user.author_profile = AuthorProfile(
            user=user, **{name: data.get(name) or "" for name in cls.PROFILE_FIELDS}
        )
        return user

    @classmethod
    def resolve(cls, authors: Iterable[dict[str, Any]]) -> list[User]:
        """Reuse existing authors by email; build new (unsaved) authors for the rest.

        An email that belongs to an editor or admin account cannot be used
        for an author; every such email is reported in one ``ValidationError``
        under ``authors``.

        Two concurrent submissions naming the same new email both miss here;
        the unique email constraint makes the second one fail on save.
        """
        resolved: dict[str, User] = {}
        conflicts: list[str] = []
        for data in authors:
            key = data["email"].strip().lower()
            if key in resolved or key in conflicts:
                continue
            existing = cls.find_by_email(data["email"])
            if existing is not None:
                logger.debug("Reusing existing author %s", existing.email)
                resolved[key] = existing
            elif cls.is_claimed_by_staff(data["email"]):
                conflicts.append(key)
            else:
                resolved[key] = cls.build_author(data)
        if conflicts:
            message = "{} belongs to an editorial account and cannot be an author."
            raise ValidationError({"authors": [message.format(email) for email in conflicts]})
        return list(resolved.values())

    @staticmethod
    def persist(author: User) -> User:
        """Save a newly built author and its profile; existing rows are left alone."""
        if not author._state.adding:
            return author
        profile = author.author_profile
        author.save()
        profile.user = author
        profile.save()
        return author


__all__ = ["TokenService", "BlocklistUnavailable", "AuthorService"]
