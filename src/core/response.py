"""The ``{"data": ..., "errors": [...]}`` envelope shared by every endpoint."""

from typing import Any

from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework.viewsets import GenericViewSet

UNAUTHORIZED_MESSAGE = (
    "Authentication credentials were not provided or are invalid, token revoked, or user is inactive."
)
FORBIDDEN_MESSAGE = "You do not have permission to perform this action on this resource."


def envelope(data: Any = None, errors: list[Any] | None = None) -> dict[str, Any]:
    return {"data": data, "errors": list(errors or [])}


def api_response(data: Any, status: int = 200) -> Response:
    """Successful payload inside the envelope."""
    return Response(envelope(data), status=status)


def api_error(status: int, *errors: Any) -> Response:
    """Failure inside the envelope; ``data`` is always null."""
    return Response(envelope(None, errors), status=status)


def is_enveloped(payload: Any) -> bool:
    return isinstance(payload, dict) and payload.keys() == {"data", "errors"}


class EnvelopeMixin:
    """Wrap bare successful responses (e.g. from DRF list mixins) in the envelope."""

    def finalize_response(self, request, response, *args, **kwargs):  # type: ignore[override]
        wrap = (
            hasattr(response, "data")
            and 200 <= (response.status_code or 0) < 400
            and response.status_code != 204
            and not is_enveloped(response.data)
        )
        if wrap:
            response.data = envelope(response.data)
        return super().finalize_response(request, response, *args, **kwargs)  # type: ignore[attr-defined]


class BaseAPIView(EnvelopeMixin, APIView):
    pass


class BaseViewSet(EnvelopeMixin, GenericViewSet):
    """GenericViewSet variant; subclasses pick the mixins or actions they expose."""


__all__ = [
    "UNAUTHORIZED_MESSAGE",
    "FORBIDDEN_MESSAGE",
    "envelope",
    "api_response",
    "api_error",
    "is_enveloped",
    "EnvelopeMixin",
    "BaseAPIView",
    "BaseViewSet",
]
