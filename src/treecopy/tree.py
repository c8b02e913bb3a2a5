"""Source tree model.

A :class:`Tree` is fetched once per load (see :func:`load_tree`) and is
read-only afterwards.  Selection state lives elsewhere
(:class:`~treecopy.selection.SelectionMap`); nothing here mutates it.

Paths use a leading slash: a top-level node ``A`` has path ``/A`` and its
child ``a1`` has ``/A/a1``.  The source folder itself is not a node; its
path is the empty string.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Iterable, Iterator

from .exceptions import RemoteOperationError, UnknownNodeError

if TYPE_CHECKING:
    from .client import Entry, StorageClient

log = logging.getLogger(__name__)


class NodeKind(str, Enum):
    """Node kind: ``FILE`` or ``FOLDER``."""
    FILE = "file"
    FOLDER = "folder"

    def __str__(self) -> str:          # noqa: D105
        return self.value


@dataclass(frozen=True, eq=False)
class Node:
    """One file or folder in the source hierarchy.

    Attributes:
        id: Opaque id, unique within the tree.
        name: Display name.
        kind: :class:`NodeKind`.
        path: Slash-joined ancestor names (``/A/a1``).
        children: Ordered children; always empty for files.
    """
    id: str
    name: str
    kind: NodeKind
    path: str
    children: tuple[Node, ...] = ()

    @property
    def is_folder(self) -> bool:
        return self.kind == NodeKind.FOLDER

    @property
    def parent_path(self) -> str:
        """Path of the containing folder (``""`` at top level)."""
        return parent_path(self.path)

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-ready nested dict of this node and its subtree."""
        top: dict[str, Any] = {}
        stack = [(self, top)]
        while stack:
            node, d = stack.pop()
            d.update(id=node.id, name=node.name, type=str(node.kind),
                     path=node.path, children=[{} for _ in node.children])
            stack.extend(zip(node.children, d["children"]))
        return top

    def __repr__(self) -> str:
        return f"Node({self.id!r}, {self.path!r}, {self.kind.value})"


def join_path(parent: str, name: str) -> str:
    """Return the path of child *name* inside folder path *parent*."""
    return f"{parent}/{name}"


def parent_path(path: str) -> str:
    """Strip the last segment of *path* (``/A/a1`` → ``/A``, ``/A`` → ``""``)."""
    return path.rsplit("/", 1)[0] if "/" in path else ""


def _sort_key(item: tuple[Entry, NodeKind]) -> tuple[bool, str]:
    entry, kind = item
    return (kind != NodeKind.FOLDER, entry.name)


class Tree:
    """Immutable-shape index over the top-level nodes of a source folder.

    Iterating a tree yields every node in pre-order.  Lookups by id, by
    path and of a node's parent are O(1).

    Raises:
        ValueError: If ids repeat, a path does not match its ancestry, or
            a file has children.
    """

    def __init__(self, roots: Iterable[Node], *, warnings: list[str] | None = None) -> None:
        self.roots: tuple[Node, ...] = tuple(roots)
        self.warnings: list[str] = list(warnings or [])
        self._nodes: dict[str, Node] = {}
        self._parents: dict[str, Node | None] = {}
        self._paths: dict[str, Node] = {}
        self._index()

    def _index(self) -> None:
        stack: list[tuple[Node, Node | None]] = [(n, None) for n in reversed(self.roots)]
        while stack:
            node, parent = stack.pop()
            if node.id in self._nodes:
                raise ValueError(f"Duplicate node id: {node.id!r}")
            expected = join_path(parent.path if parent else "", node.name)
            if node.path != expected:
                raise ValueError(
                    f"Path {node.path!r} of node {node.id!r} does not match "
                    f"its ancestry (expected {expected!r})"
                )
            if node.children and not node.is_folder:
                raise ValueError(f"File node {node.id!r} has children")
            self._nodes[node.id] = node
            self._parents[node.id] = parent
            # Same-named siblings share a path; the first in pre-order wins.
            self._paths.setdefault(node.path, node)
            for child in reversed(node.children):
                stack.append((child, node))

    # ------------------------------------------------------------------
    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[Node]:
        return self.walk()

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def __getitem__(self, node_id: str) -> Node:
        try:
            return self._nodes[node_id]
        except KeyError:
            raise UnknownNodeError(node_id) from None

    def get(self, node_id: str, default: Node | None = None) -> Node | None:
        return self._nodes.get(node_id, default)

    def parent(self, node: Node) -> Node | None:
        """Return the parent folder of *node*, or ``None`` at top level."""
        return self._parents.get(node.id)

    def find_path(self, path: str) -> Node | None:
        """Return the node at *path*, or ``None`` if no node has that path."""
        return self._paths.get(path)

    def walk(self, nodes: Iterable[Node] | None = None) -> Iterator[Node]:
        """Yield *nodes* (default: the roots) and their descendants in pre-order."""
        stack = list(reversed(tuple(self.roots if nodes is None else nodes)))
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def subtree_size(self, node: Node) -> int:
        """Number of nodes in *node*'s subtree, *node* included."""
        return sum(1 for _ in self.walk((node,)))

    # ------------------------------------------------------------------
    def to_dicts(self) -> list[dict[str, Any]]:
        return [n.to_dict() for n in self.roots]

    @classmethod
    def from_dicts(cls, items: Iterable[dict[str, Any]]) -> Tree:
        """Build a tree from nested ``{"id", "name", "type", "children"}`` dicts.

        ``type`` defaults to ``"folder"`` when ``children`` is present and
        ``"file"`` otherwise.  Paths are computed, any ``path`` key is ignored.
        """
        return cls(_nodes_from_dicts(list(items), ""))


def _nodes_from_dicts(items: list[dict[str, Any]], base: str) -> tuple[Node, ...]:
    # Post-order with an explicit stack so deep trees don't hit the
    # recursion limit.
    built: dict[int, Node] = {}
    stack: list[tuple[dict[str, Any], str, bool]] = [
        (d, join_path(base, d["name"]), False) for d in reversed(items)
    ]
    while stack:
        d, path, expanded = stack.pop()
        kids = d.get("children") or []
        if kids and not expanded:
            stack.append((d, path, True))
            for k in reversed(kids):
                stack.append((k, join_path(path, k["name"]), False))
            continue
        kind = NodeKind(d.get("type") or ("folder" if "children" in d else "file"))
        built[id(d)] = Node(
            id=str(d["id"]), name=d["name"], kind=kind, path=path,
            children=tuple(built[id(k)] for k in kids),
        )
    return tuple(built[id(d)] for d in items)


# ---------------------------------------------------------------------------
# Loading from a storage client
# ---------------------------------------------------------------------------

async def _list_all(client: StorageClient, folder_id: str) -> list[tuple[Entry, NodeKind]]:
    """Concatenate every page of *folder_id*'s children, folders first, by name."""
    items: list[tuple[Entry, NodeKind]] = []
    token: str | None = None
    while True:
        page = await client.list_children(folder_id, token)
        for entry in page.entries:
            kind = NodeKind.FOLDER if client.is_folder_kind(entry.mime_type) else NodeKind.FILE
            items.append((entry, kind))
        token = page.next_page_token
        if not token:
            break
    items.sort(key=_sort_key)
    return items


async def load_tree(client: StorageClient, folder_id: str) -> Tree:
    """Fetch the full hierarchy under *folder_id* and return it as a :class:`Tree`.

    Folders are listed depth-first, one call at a time.  If listing a
    nested folder fails, the folder is kept with no children and a warning
    is recorded on :attr:`Tree.warnings`.

    Raises:
        RemoteOperationError: If the top-level folder cannot be listed.
    """
    try:
        top = await _list_all(client, folder_id)
    except RemoteOperationError:
        raise
    except Exception as exc:
        raise RemoteOperationError(
            f"Failed to list folder {folder_id}: {exc}", path="",
        ) from exc

    listings: dict[str, list[tuple[Entry, NodeKind]]] = {}
    warnings: list[str] = []
    stack = [(entry, "/" + entry.name) for entry, kind in reversed(top)
             if kind == NodeKind.FOLDER]
    while stack:
        entry, path = stack.pop()
        try:
            children = await _list_all(client, entry.id)
        except Exception as exc:
            msg = f"Failed to load contents of folder {path}: {exc}"
            log.warning(msg)
            warnings.append(msg)
            children = []
        listings[entry.id] = children
        for child, kind in reversed(children):
            if kind == NodeKind.FOLDER:
                stack.append((child, join_path(path, child.name)))

    return Tree(_freeze(top, listings), warnings=warnings)


def _freeze(top: list[tuple[Entry, NodeKind]],
            listings: dict[str, list[tuple[Entry, NodeKind]]]) -> tuple[Node, ...]:
    """Turn fetched listings into :class:`Node` objects, bottom-up."""
    built: dict[int, Node] = {}
    stack: list[tuple[tuple[Entry, NodeKind], str, bool]] = [
        (item, "/" + item[0].name, False) for item in reversed(top)
    ]
    while stack:
        item, path, expanded = stack.pop()
        entry, kind = item
        kids = listings.get(entry.id, []) if kind == NodeKind.FOLDER else []
        if kids and not expanded:
            stack.append((item, path, True))
            for k in reversed(kids):
                stack.append((k, join_path(path, k[0].name), False))
            continue
        built[id(item)] = Node(
            id=entry.id, name=entry.name, kind=kind, path=path,
            children=tuple(built[id(k)] for k in kids),
        )
    return tuple(built[id(item)] for item in top)
