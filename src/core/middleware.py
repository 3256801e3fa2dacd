"""Attach the bearer-token user to every request before views run."""

from typing import Optional

from django.contrib.auth.models import AnonymousUser
from django.core.exceptions import ValidationError
from django.http import JsonResponse
from django.utils.deprecation import MiddlewareMixin
from rest_framework import status
from rest_framework.exceptions import AuthenticationFailed

from people.models import User
from people.services import BlocklistUnavailable, TokenService
from .response import UNAUTHORIZED_MESSAGE, envelope


class JWTAuthMiddleware(MiddlewareMixin):
    """Resolve ``Authorization: Bearer <access>`` into ``request.user``.

    Requests without a bearer header continue anonymously. A header that
    does not resolve to an active user is answered with 401 right here; a
    blocklist outage is answered with 503 (fail closed).
    """

    def process_request(self, request):  # type: ignore[override]
        token = bearer_token(request)
        if token is None:
            request.user = AnonymousUser()
            return None

        try:
            request.user = self._authenticate(token)
        except AuthenticationFailed:
            return JsonResponse(envelope(None, [UNAUTHORIZED_MESSAGE]), status=status.HTTP_401_UNAUTHORIZED)
        except BlocklistUnavailable:
            return JsonResponse(
                envelope(None, ["Authentication service unavailable (blocklist)."]),
                status=status.HTTP_503_SERVICE_UNAVAILABLE,
            )
        return None

    def _authenticate(self, token: str) -> User:
        payload = TokenService.decode_token(token, expected_type="access")
        jti = payload.get("jti")
        if not jti or TokenService.is_token_blocked(jti):
            raise AuthenticationFailed("Token revoked")

        user = self._get_user(payload.get("sub"))
        if user is None or not user.is_active:
            raise AuthenticationFailed("User not found or inactive")

        # tokens minted before a token_version bump are stale
        if payload.get("ver") != user.token_version:
            raise AuthenticationFailed("Token revoked")
        return user

    @staticmethod
    def _get_user(user_id: Optional[str]) -> Optional[User]:
        if not user_id:
            return None
        try:
            return User.objects.get(id=user_id)
        except (User.DoesNotExist, ValidationError):
            return None


def bearer_token(request) -> Optional[str]:
    header = request.META.get("HTTP_AUTHORIZATION", "")
    if not header.startswith("Bearer "):
        return None
    return header.split(" ", 1)[1]


__all__ = ["JWTAuthMiddleware", "bearer_token"]
