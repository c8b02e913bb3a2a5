"""The storage-service contract consumed by treecopy.

Any object with these four methods can act as the remote side: the
in-memory :class:`~treecopy.memory.MemoryClient`, the Google Drive adapter
:class:`~treecopy.drive.GoogleDriveClient`, or a caller's own wrapper.
"""

from __future__ import annotations

from typing import NamedTuple, Protocol, runtime_checkable

FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"


class Entry(NamedTuple):
    """One child returned by :meth:`StorageClient.list_children`."""

    id: str
    name: str
    mime_type: str


class EntryPage(NamedTuple):
    """A page of children plus the token for the next page (``None`` when last)."""

    entries: list[Entry]
    next_page_token: str | None = None


@runtime_checkable
class StorageClient(Protocol):
    """Remote folder store: list, create-folder, copy.

    All remote calls are coroutines.  treecopy awaits each call before
    issuing the next one.
    """

    async def list_children(self, folder_id: str, page_token: str | None = None) -> EntryPage:
        """Return one page of the direct children of *folder_id*."""
        ...

    def is_folder_kind(self, mime_type: str) -> bool:
        """Return ``True`` if *mime_type* denotes a folder."""
        ...

    async def create_folder(self, name: str, parent_id: str) -> str:
        """Create folder *name* under *parent_id* and return its id."""
        ...

    async def copy_file(self, file_id: str, parent_id: str, new_name: str | None = None) -> str:
        """Copy *file_id* into *parent_id* and return the new file's id.

        When *new_name* is ``None`` the service applies its own default
        copy-naming convention.
        """
        ...
