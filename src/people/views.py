"""Authentication endpoints (login, refresh, logout, profile) and the editor directory."""

from typing import Any

from django.core.exceptions import ValidationError
from rest_framework import mixins, status
from rest_framework.exceptions import AuthenticationFailed
from rest_framework.response import Response
from rest_framework.views import APIView

from access_control.permissions import LevelPermission
from core.middleware import bearer_token
from core.response import BaseAPIView, BaseViewSet, api_error, api_response
from .choices import EDITORIAL_LEVELS
from .models import Editor, User
from .serializers import LoginSerializer, PersonSummarySerializer, UserDetailSerializer
from .services import TokenService


class LoginView(BaseAPIView):
    permission_classes: list[Any] = []

    # noinspection PyMethodMayBeStatic
    def post(self, request):
        """Authenticate and issue access + refresh tokens."""
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.validated_data["user"]
        access, refresh = TokenService.generate_tokens(user)
        return api_response({"access": access, "refresh": refresh})


class RefreshView(BaseAPIView):
    permission_classes: list[Any] = []

    # noinspection PyMethodMayBeStatic
    def post(self, request):
        """Exchange a valid refresh token for new access/refresh tokens."""
        refresh_token = request.data.get("refresh")
        if not refresh_token:
            raise AuthenticationFailed("Refresh token required")

        payload = TokenService.decode_token(refresh_token, expected_type="refresh")
        user = _get_active_user(payload.get("sub"))
        if not user:
            raise AuthenticationFailed("User not found or inactive")

        if payload.get("ver") != user.token_version:
            raise AuthenticationFailed("Invalid or revoked refresh token")

        access, new_refresh = TokenService.generate_tokens(user)
        return api_response({"access": access, "refresh": new_refresh})


class LogoutView(APIView):
    """Invalidate the current access token by blocklisting its jti."""

    # noinspection PyMethodMayBeStatic
    def post(self, request):
        """Blocklist the bearer access token and return 204 No Content."""
        token = bearer_token(request)
        if not token:
            return api_error(status.HTTP_401_UNAUTHORIZED, "Missing token.")

        payload = TokenService.decode_token(token, expected_type="access")
        TokenService.block_token(payload["jti"], payload["exp"])
        # 204 responses must not include a body.
        return Response(status=status.HTTP_204_NO_CONTENT)


class MeView(BaseAPIView):
    permission_classes: list[Any] = []

    # noinspection PyMethodMayBeStatic
    def get(self, request):
        """Return the current user's profile."""
        if not request.user.is_authenticated:
            raise AuthenticationFailed("Authentication required")
        return api_response(UserDetailSerializer(request.user).data)


class EditorViewSet(mixins.ListModelMixin, BaseViewSet):
    """Directory of people articles can be assigned to."""

    serializer_class = PersonSummarySerializer
    permission_classes = [LevelPermission]
    level_rules = {"list": EDITORIAL_LEVELS}
    queryset = Editor.objects.filter(is_active=True).order_by("name")


def _get_active_user(user_id) -> User | None:
    """Retrieve an active user by id, or None if missing/inactive."""
    if not user_id:
        return None
    try:
        user = User.objects.get(id=user_id)
    except (User.DoesNotExist, ValidationError):
        return None
    if not user.is_active:
        return None
    return user


__all__ = ["LoginView", "RefreshView", "LogoutView", "MeView", "EditorViewSet"]
