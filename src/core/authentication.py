"""DRF authenticator that trusts the user attached by ``JWTAuthMiddleware``."""

from typing import Any, Optional, Tuple

from rest_framework.authentication import BaseAuthentication


class MiddlewareUserAuthentication(BaseAuthentication):
    """Surface ``request._request.user`` to DRF without re-parsing credentials."""

    def authenticate(self, request) -> Optional[Tuple[Any, None]]:
        user = getattr(getattr(request, "_request", None), "user", None)
        if user is None or not getattr(user, "is_authenticated", False):
            return None
        return user, None

    def authenticate_header(self, request) -> str:
        # A non-empty header makes DRF answer NotAuthenticated with 401, not 403.
        return 'Bearer realm="api"'


__all__ = ["MiddlewareUserAuthentication"]
