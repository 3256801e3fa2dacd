"""In-process event dispatch over Django signals.

Delivery is best-effort and at-most-once: receivers run synchronously via
``Signal.send_robust``, a failing receiver is logged and skipped, nothing is
redelivered, and no ordering is promised across receivers.
"""

import logging
from typing import Any

from django.dispatch import Signal

logger = logging.getLogger(__name__)


class EventDispatcher:
    """Registry of named events, each backed by a Django ``Signal``."""

    def __init__(self):
        self._signals: dict[str, Signal] = {}

    def register(self, name: str, signal: Signal) -> None:
        self._signals[name] = signal

    @property
    def events(self) -> list[str]:
        return sorted(self._signals)

    def dispatch(self, name: str, payload: Any, **context: Any) -> None:
        """Notify every receiver of ``name``; receiver errors never reach the caller.

        ``context`` is passed to receivers as extra keyword arguments.
        """
        signal = self._signals.get(name)
        if signal is None:
            logger.warning("Dropping unregistered event %s (registered: %s)", name, ", ".join(self.events))
            return

        for receiver, result in signal.send_robust(sender=name, payload=payload, **context):
            if isinstance(result, Exception):
                logger.error(
                    "Receiver %r failed handling %s",
                    getattr(receiver, "__qualname__", receiver),
                    name,
                    exc_info=result,
                )


__all__ = ["EventDispatcher"]
