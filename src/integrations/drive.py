"""Google Drive v3 adapter used to hold article manuscripts and marking grids."""

import io
import logging
import threading

from django.conf import settings
from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.http import MediaIoBaseUpload

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/drive"]
FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"
GOOGLE_DOC_MIME_TYPE = "application/vnd.google-apps.document"


class Drive:
    """Thin wrapper over the Drive files/permissions resources.

    The underlying httplib2 transport is not thread-safe, so each thread
    builds its own API client lazily.
    """

    def __init__(self, credentials=None, service_account_file: str | None = None):
        self._credentials = credentials
        self._service_account_file = service_account_file or settings.GOOGLE_SERVICE_ACCOUNT_FILE
        self._local = threading.local()

    def _get_credentials(self):
        if self._credentials is None:
            self._credentials = service_account.Credentials.from_service_account_file(
                self._service_account_file, scopes=SCOPES
            )
        return self._credentials

    @property
    def service(self):
        service = getattr(self._local, "service", None)
        if service is None:
            service = build("drive", "v3", credentials=self._get_credentials(), cache_discovery=False)
            self._local.service = service
        return service

    def create_folder(self, name: str, parent_id: str) -> str:
        body = {"name": name, "mimeType": FOLDER_MIME_TYPE, "parents": [parent_id]}
        folder = self.service.files().create(body=body, fields="id", supportsAllDrives=True).execute()
        logger.info("Created Drive folder %s (%s)", folder["id"], name)
        return folder["id"]

    def create_file(self, name: str, file, mime_type: str, parent_id: str) -> str:
        """Upload ``file`` (an uploaded-file object) into ``parent_id``, converting it to ``mime_type``."""
        media = MediaIoBaseUpload(
            io.BytesIO(file.read()),
            mimetype=getattr(file, "content_type", None) or "application/octet-stream",
            resumable=False,
        )
        body = {"name": name, "mimeType": mime_type, "parents": [parent_id]}
        created = (
            self.service.files()
            .create(body=body, media_body=media, fields="id", supportsAllDrives=True)
            .execute()
        )
        logger.info("Uploaded Drive file %s into %s", created["id"], parent_id)
        return created["id"]

    def copy(self, source_id: str, dest_id: str, name: str) -> str:
        body = {"name": name, "parents": [dest_id]}
        copied = (
            self.service.files()
            .copy(fileId=source_id, body=body, fields="id", supportsAllDrives=True)
            .execute()
        )
        logger.info("Copied Drive file %s to %s as %r", source_id, copied["id"], name)
        return copied["id"]

    def share_file(self, file_id: str, role: str, email: str) -> None:
        body = {"type": "user", "role": role, "emailAddress": email}
        self.service.permissions().create(
            fileId=file_id, body=body, sendNotificationEmail=False, supportsAllDrives=True
        ).execute()
        logger.info("Granted %s on %s to %s", role, file_id, email)

    def export_file(self, file_id: str, mime_type: str) -> bytes:
        return self.service.files().export(fileId=file_id, mimeType=mime_type).execute()


__all__ = ["Drive", "FOLDER_MIME_TYPE", "GOOGLE_DOC_MIME_TYPE"]
