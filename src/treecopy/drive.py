"""Google Drive v3 storage client.

Requires the ``drive`` extra (``pip install treecopy[drive]``).  The client
wraps an already-built ``googleapiclient`` Drive service; obtaining the
OAuth token is left to the caller (``from_token_file`` only loads an
existing authorized-user token).
"""

from __future__ import annotations

import asyncio
import logging

from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from .client import FOLDER_MIME_TYPE, Entry, EntryPage
from .exceptions import ConfigurationError, RemoteOperationError

log = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/drive"]


def _quote(value: str) -> str:
    return value.replace("\\", "\\\\").replace("'", "\\'")


class GoogleDriveClient:
    """:class:`~treecopy.client.StorageClient` backed by the Drive v3 API.

    Blocking ``execute()`` calls run in a worker thread so the event loop
    stays free; treecopy still awaits each one before issuing the next.
    """

    def __init__(self, service, *, page_size: int = 1000, all_drives: bool = True) -> None:
        self.service = service
        self.page_size = page_size
        self.all_drives = all_drives

    @classmethod
    def from_token_file(cls, path: str, **kwargs) -> GoogleDriveClient:
        """Build a client from an authorized-user token JSON file."""
        try:
            creds = Credentials.from_authorized_user_file(path, SCOPES)
        except (OSError, ValueError) as exc:
            raise ConfigurationError(f"Cannot load Google token from {path}: {exc}") from exc
        service = build("drive", "v3", credentials=creds, cache_discovery=False)
        return cls(service, **kwargs)

    async def _execute(self, request, what: str):
        try:
            return await asyncio.to_thread(request.execute)
        except HttpError as exc:
            raise RemoteOperationError(f"{what}: {exc}") from exc

    async def list_children(self, folder_id: str, page_token: str | None = None) -> EntryPage:
        params = {
            "q": f"'{_quote(folder_id)}' in parents and trashed=false",
            "fields": "nextPageToken,files(id,name,mimeType)",
            "pageSize": self.page_size,
        }
        if page_token:
            params["pageToken"] = page_token
        if self.all_drives:
            params["supportsAllDrives"] = True
            params["includeItemsFromAllDrives"] = True
        log.debug("files.list %s (page %s)", folder_id, page_token)
        resp = await self._execute(self.service.files().list(**params),
                                   f"Failed to list folder {folder_id}")
        entries = [Entry(f["id"], f["name"], f["mimeType"]) for f in resp.get("files", [])]
        return EntryPage(entries, resp.get("nextPageToken"))

    def is_folder_kind(self, mime_type: str) -> bool:
        return mime_type == FOLDER_MIME_TYPE

    async def create_folder(self, name: str, parent_id: str) -> str:
        body = {"name": name, "mimeType": FOLDER_MIME_TYPE, "parents": [parent_id]}
        log.debug("files.create %r in %s", name, parent_id)
        resp = await self._execute(
            self.service.files().create(body=body, fields="id",
                                        supportsAllDrives=self.all_drives),
            f"Failed to create folder {name!r}",
        )
        return resp["id"]

    async def copy_file(self, file_id: str, parent_id: str, new_name: str | None = None) -> str:
        body: dict = {"parents": [parent_id]}
        if new_name is not None:
            body["name"] = new_name
        log.debug("files.copy %s to %s as %r", file_id, parent_id, new_name)
        resp = await self._execute(
            self.service.files().copy(fileId=file_id, body=body, fields="id",
                                      supportsAllDrives=self.all_drives),
            f"Failed to copy file {file_id}",
        )
        return resp["id"]
