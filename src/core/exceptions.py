"""DRF exception handler that keeps every failure inside the API envelope."""

import logging
from typing import Any

import requests
from django.conf import settings
from django.core.exceptions import ObjectDoesNotExist
from django.db import DatabaseError
from google.auth.exceptions import GoogleAuthError
from googleapiclient.errors import HttpError
from rest_framework import status
from rest_framework.exceptions import AuthenticationFailed, NotAuthenticated
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

from people.services import BlocklistUnavailable
from .response import FORBIDDEN_MESSAGE, UNAUTHORIZED_MESSAGE, api_error, envelope

logger = logging.getLogger(__name__)

# failures of Drive, WordPress and the copyright service
UPSTREAM_ERRORS = (HttpError, GoogleAuthError, requests.RequestException)


def _as_error_list(payload: Any) -> list[Any]:
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict) and "detail" in payload:
        return [payload["detail"]]
    return [payload]


def custom_exception_handler(exc: Exception, context: dict[str, Any]) -> Response | None:
    """Map exceptions to enveloped responses.

    - Blocklist and database outages become 503.
    - Drive/WordPress/copyright adapter failures become an opaque 502; the
      interrupted operation is not retried or rolled back.
    - ``DoesNotExist`` raised by the article service becomes 404.
    - Everything else goes through DRF's default handler first.
    """

    if isinstance(exc, BlocklistUnavailable):
        return api_error(status.HTTP_503_SERVICE_UNAVAILABLE, "Authentication service unavailable (blocklist).")

    if isinstance(exc, DatabaseError):
        logger.error("Database error: %s", exc)
        return api_error(status.HTTP_503_SERVICE_UNAVAILABLE, "Service temporarily unavailable.")

    if isinstance(exc, UPSTREAM_ERRORS):
        logger.error("Upstream service call failed: %s", exc, exc_info=exc)
        return api_error(status.HTTP_502_BAD_GATEWAY, "An external service failed to complete the request.")

    if isinstance(exc, ObjectDoesNotExist):
        return api_error(status.HTTP_404_NOT_FOUND, "Not found.")

    response = drf_exception_handler(exc, context)
    if response is None:
        return None

    if isinstance(exc, (AuthenticationFailed, NotAuthenticated)):
        response.status_code = status.HTTP_401_UNAUTHORIZED

    if response.status_code == status.HTTP_401_UNAUTHORIZED and not settings.DEBUG_AUTH_ERRORS:
        errors = [UNAUTHORIZED_MESSAGE]
    elif response.status_code == status.HTTP_403_FORBIDDEN:
        errors = [FORBIDDEN_MESSAGE]
    else:
        errors = _as_error_list(response.data)

    response.data = envelope(None, errors)
    return response
