"""Destination-folder bookkeeping and source-parent lookup."""

from __future__ import annotations

from typing import TYPE_CHECKING, Union

from ..tree import join_path

if TYPE_CHECKING:
    from ..tree import Node, Tree


class _VirtualRoot:
    """Key for the destination root in :class:`DestinationFolders`.

    A distinct object rather than a string, so no real node id can
    collide with it.
    """
    __slots__ = ()

    def __repr__(self) -> str:
        return "VIRTUAL_ROOT"


VIRTUAL_ROOT = _VirtualRoot()

FolderKey = Union[str, _VirtualRoot]


class DestinationFolders:
    """Map from source folder id (or :data:`VIRTUAL_ROOT`) to destination folder.

    Each entry keeps the destination id and the renamed path relative to
    the destination root.  Written only by the orchestrator; an entry is
    recorded before any child of that folder is processed.
    """

    def __init__(self, root_id: str) -> None:
        self._ids: dict[FolderKey, str] = {VIRTUAL_ROOT: root_id}
        self._paths: dict[FolderKey, str] = {VIRTUAL_ROOT: ""}

    @property
    def root_id(self) -> str:
        return self._ids[VIRTUAL_ROOT]

    def __contains__(self, key: object) -> bool:
        return key in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    def get(self, key: FolderKey) -> str | None:
        return self._ids.get(key)

    def dest_path(self, key: FolderKey) -> str:
        return self._paths[key]

    def record(self, node_id: str, dest_id: str, parent: FolderKey, name: str) -> str:
        """Record a created folder and return its destination path."""
        path = join_path(self._paths[parent], name)
        self._ids[node_id] = dest_id
        self._paths[node_id] = path
        return path

    def as_dict(self) -> dict[str, str]:
        """Return ``{source_id: dest_id}`` for real folders (root excluded)."""
        return {k: v for k, v in self._ids.items() if k is not VIRTUAL_ROOT}


def _locate_parent(tree: Tree, node: Node) -> Node | _VirtualRoot | None:
    """Find the source folder containing *node*.

    Returns :data:`VIRTUAL_ROOT` for a top-level node, the parent
    :class:`~treecopy.tree.Node`, or ``None`` if the parent cannot be found.
    Nodes the tree indexes are answered from its parent index, so names
    containing ``/`` and same-named sibling folders resolve correctly; other
    nodes fall back to a lookup by parent path.
    """
    if tree.get(node.id) is node:
        parent = tree.parent(node)
        return VIRTUAL_ROOT if parent is None else parent
    if not node.parent_path:
        return VIRTUAL_ROOT
    return tree.find_path(node.parent_path)
