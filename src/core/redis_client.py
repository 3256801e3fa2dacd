"""Lazily created Redis connection backing the token blocklist."""

import redis
from django.conf import settings

_client: redis.Redis | None = None


def get_redis_client() -> redis.Redis:
    """Return the process-wide client for ``settings.REDIS_URL``.

    Socket timeouts are bounded so a stalled Redis surfaces as
    ``BlocklistUnavailable`` instead of hanging the request.
    """

    global _client
    if _client is None:
        _client = redis.Redis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_timeout=settings.REDIS_SOCKET_TIMEOUT,
            socket_connect_timeout=settings.REDIS_SOCKET_TIMEOUT,
        )
    return _client


__all__ = ["get_redis_client"]
