"""Serializers for login, profiles, and the author submission DTO."""

from rest_framework import serializers
from rest_framework.exceptions import AuthenticationFailed

from .managers import UserManager
from .models import AuthorProfile, User


class LoginSerializer(serializers.Serializer):
    """Authenticate a user via email/password using bcrypt verification."""

    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)

    def validate(self, attrs):
        """Authenticate credentials and attach the user to validated_data."""
        email = attrs.get("email")
        password = attrs.get("password")
        user = User.objects.filter(email__iexact=email).first()
        if user is None:
            raise AuthenticationFailed("Invalid credentials")

        if not user.is_active:
            raise AuthenticationFailed("User is inactive")

        if not UserManager.verify_password(user, password):
            raise AuthenticationFailed("Invalid credentials")

        attrs["user"] = user
        return attrs


class AuthorDTOSerializer(serializers.Serializer):
    """Author details submitted alongside an article.

    Every field but ``teacher``/``profile`` must be present and non-blank.
    """

    name = serializers.CharField(max_length=255)
    email = serializers.EmailField()
    school = serializers.CharField(max_length=255)
    biography = serializers.CharField()
    country = serializers.CharField(max_length=100)
    teacher = serializers.CharField(max_length=255, required=False, allow_blank=True)
    profile = serializers.CharField(max_length=500, required=False, allow_blank=True)


class AuthorProfileSerializer(serializers.ModelSerializer):
    class Meta:
        model = AuthorProfile
        fields = ["school", "biography", "country", "teacher", "profile"]
        read_only_fields = fields


class PersonSummarySerializer(serializers.ModelSerializer):
    """Compact identity used when nesting people inside articles."""

    class Meta:
        model = User
        fields = ["id", "name", "email", "level"]
        read_only_fields = fields


class UserDetailSerializer(serializers.ModelSerializer):
    """Read-only user profile payload for responses."""

    author_profile = serializers.SerializerMethodField()

    class Meta:
        """Expose identity fields, level, and the author payload when present."""
        model = User
        fields = ["id", "email", "name", "level", "author_profile"]
        read_only_fields = fields

    @staticmethod
    def get_author_profile(user):
        profile = getattr(user, "author_profile", None)
        return AuthorProfileSerializer(profile).data if profile else None


__all__ = [
    "LoginSerializer",
    "AuthorDTOSerializer",
    "AuthorProfileSerializer",
    "PersonSummarySerializer",
    "UserDetailSerializer",
]
