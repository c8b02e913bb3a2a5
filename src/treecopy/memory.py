"""In-memory storage service.

:class:`MemoryClient` implements the :class:`~treecopy.client.StorageClient`
contract against a dict, with the same behaviors treecopy relies on from a
real cloud store: paginated listing, non-idempotent folder creation (two
creates give two folders) and a default ``Copy of <name>`` naming when a
copy is made without a new name.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import Any, Mapping

from .client import FOLDER_MIME_TYPE, Entry, EntryPage
from .exceptions import RemoteOperationError
from .tree import join_path


@dataclass
class _Item:
    id: str
    name: str
    mime_type: str
    parent_id: str | None
    children: list[str] = field(default_factory=list)
    source_id: str | None = None


class MemoryClient:
    """A complete storage service held in memory.

    Args:
        page_size: Entries per :meth:`list_children` page.
        root_id: Id of the pre-created root folder.

    Attributes:
        calls: Log of every remote call as ``(method, *args)`` tuples.
    """

    def __init__(self, *, page_size: int = 100, root_id: str = "root") -> None:
        if page_size < 1:
            raise ValueError("page_size must be at least 1")
        self.page_size = page_size
        self.root_id = root_id
        self.calls: list[tuple] = []
        self._ids = itertools.count(1)
        self._items: dict[str, _Item] = {
            root_id: _Item(root_id, "", FOLDER_MIME_TYPE, None),
        }

    # ------------------------------------------------------------------
    # Population helpers
    # ------------------------------------------------------------------

    def _new_id(self) -> str:
        return f"id{next(self._ids)}"

    def _add(self, name: str, mime_type: str, parent_id: str | None,
             source_id: str | None = None) -> str:
        parent = self._folder(parent_id or self.root_id)
        item = _Item(self._new_id(), name, mime_type, parent.id, source_id=source_id)
        self._items[item.id] = item
        parent.children.append(item.id)
        return item.id

    def add_folder(self, name: str, parent_id: str | None = None) -> str:
        """Create a folder without logging a call; returns its id."""
        return self._add(name, FOLDER_MIME_TYPE, parent_id)

    def add_file(self, name: str, parent_id: str | None = None,
                 mime_type: str = "text/plain") -> str:
        """Create a file without logging a call; returns its id."""
        return self._add(name, mime_type, parent_id)

    def add_tree(self, layout: Mapping[str, Any], parent_id: str | None = None) -> dict[str, str]:
        """Populate from a nested ``{name: None | {...}}`` layout.

        ``None`` values are files, mappings are folders.  Returns
        ``{path: id}`` for everything created (paths in ``/A/a1`` form,
        relative to *parent_id*).
        """
        ids: dict[str, str] = {}
        stack = [(layout, parent_id or self.root_id, "")]
        while stack:
            level, pid, base = stack.pop()
            for name, sub in level.items():
                path = join_path(base, name)
                if sub is None:
                    ids[path] = self.add_file(name, pid)
                else:
                    ids[path] = self.add_folder(name, pid)
                    stack.append((sub, ids[path], path))
        return ids

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    def name_of(self, item_id: str) -> str:
        return self._items[item_id].name

    def source_of(self, item_id: str) -> str | None:
        """For a copied file, the id it was copied from."""
        return self._items[item_id].source_id

    def paths(self, folder_id: str | None = None) -> list[str]:
        """Every path under *folder_id* in pre-order, children in creation order."""
        result: list[str] = []
        root = self._folder(folder_id or self.root_id)
        stack = [(cid, "") for cid in reversed(root.children)]
        while stack:
            item_id, base = stack.pop()
            item = self._items[item_id]
            path = join_path(base, item.name)
            result.append(path)
            stack.extend((cid, path) for cid in reversed(item.children))
        return result

    def _folder(self, folder_id: str) -> _Item:
        item = self._items.get(folder_id)
        if item is None:
            raise RemoteOperationError(f"File not found: {folder_id}")
        if item.mime_type != FOLDER_MIME_TYPE:
            raise RemoteOperationError(f"Not a folder: {folder_id}")
        return item

    # ------------------------------------------------------------------
    # StorageClient
    # ------------------------------------------------------------------

    async def list_children(self, folder_id: str, page_token: str | None = None) -> EntryPage:
        self.calls.append(("list_children", folder_id, page_token))
        folder = self._folder(folder_id)
        start = int(page_token) if page_token else 0
        end = start + self.page_size
        entries = [
            Entry(c.id, c.name, c.mime_type)
            for c in (self._items[cid] for cid in folder.children[start:end])
        ]
        next_token = str(end) if end < len(folder.children) else None
        return EntryPage(entries, next_token)

    def is_folder_kind(self, mime_type: str) -> bool:
        return mime_type == FOLDER_MIME_TYPE

    async def create_folder(self, name: str, parent_id: str) -> str:
        self.calls.append(("create_folder", name, parent_id))
        return self._add(name, FOLDER_MIME_TYPE, parent_id)

    async def copy_file(self, file_id: str, parent_id: str, new_name: str | None = None) -> str:
        self.calls.append(("copy_file", file_id, parent_id, new_name))
        source = self._items.get(file_id)
        if source is None:
            raise RemoteOperationError(f"File not found: {file_id}")
        if source.mime_type == FOLDER_MIME_TYPE:
            raise RemoteOperationError(f"Cannot copy a folder: {file_id}")
        name = new_name if new_name is not None else f"Copy of {source.name}"
        return self._add(name, source.mime_type, parent_id, source_id=file_id)
