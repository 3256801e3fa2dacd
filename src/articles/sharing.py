"""Fire-and-forget Drive permission grants for article authors."""

import logging
from concurrent.futures import Executor, Future, ThreadPoolExecutor

from django.conf import settings

logger = logging.getLogger(__name__)

_executor: ThreadPoolExecutor | None = None


def get_share_executor() -> ThreadPoolExecutor:
    """Return the process-wide pool used for permission grants."""

    global _executor
    if _executor is None:
        _executor = ThreadPoolExecutor(
            max_workers=settings.DRIVE_SHARE_WORKERS, thread_name_prefix="drive-share"
        )
    return _executor


class PermissionSharer:
    """Submit one ``drive.share_file`` call per email and hand back the futures.

    Nothing waits on the futures, nothing retries them, and a failed grant
    is only logged.
    """

    def __init__(self, drive, executor: Executor | None = None):
        self.drive = drive
        self._executor = executor

    @property
    def executor(self) -> Executor:
        return self._executor or get_share_executor()

    def share(self, file_id: str, emails, role: str = "writer") -> list[Future]:
        tasks = []
        for email in emails:
            future = self.executor.submit(self.drive.share_file, file_id, role, email)
            future.add_done_callback(_log_failure(file_id, email))
            tasks.append(future)
        return tasks


def _log_failure(file_id: str, email: str):
    def callback(future: Future) -> None:
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            logger.error("Sharing %s with %s failed: %s", file_id, email, exc, exc_info=exc)

    return callback


__all__ = ["PermissionSharer", "get_share_executor"]
