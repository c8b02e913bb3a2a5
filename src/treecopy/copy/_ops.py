"""The copy orchestrator and its entry points."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable, Sequence

from ..exceptions import ConfigurationError, RemoteOperationError
from ..rename import RenameMapping, apply_mappings
from ..tree import join_path
from ._io import _DryRunClient
from ._resolve import VIRTUAL_ROOT, DestinationFolders, FolderKey, _locate_parent
from ._types import (
    ActionKind,
    CopyAction,
    CopyEvent,
    CopyReport,
    EventKind,
    Observer,
    ProgressCallback,
)

if TYPE_CHECKING:
    from ..client import StorageClient
    from ..collapse import WorkItem
    from ..selection import SelectionMap
    from ..tree import Node, Tree

log = logging.getLogger(__name__)


def _count_work(tree: Tree, work_items: Iterable[WorkItem]) -> int:
    """Progress denominator implied by *work_items* alone."""
    return sum(tree.subtree_size(w.node) if w.include_children else 1
               for w in work_items)


class CopyOrchestrator:
    """Replays a collapsed selection against a storage client.

    Work is strictly sequential: each remote call is awaited before the
    next is issued, and a folder's destination id is recorded before any
    of its children are processed.  The first failed call aborts the run
    with :class:`~treecopy.exceptions.RemoteOperationError`; nothing
    already created is removed.

    Args:
        client: The storage client.
        tree: The source tree the work items were collected from; used to
            find and lazily create ancestors of selected items.
        observer: Called with a :class:`CopyEvent` for every folder
            created, file copied, missing parent and error.
        progress: Called with ``(processed, total)`` after every counted
            unit of work.
    """

    def __init__(self, client: StorageClient, tree: Tree, *,
                 observer: Observer | None = None,
                 progress: ProgressCallback | None = None) -> None:
        self.client = client
        self.tree = tree
        self.observer = observer
        self.progress = progress
        self.folders: DestinationFolders | None = None
        self._mappings: tuple[RenameMapping, ...] = ()
        self._report: CopyReport | None = None

    async def run(self, work_items: Sequence[WorkItem], destination_id: str,
                  mappings: Iterable[RenameMapping] = (), *,
                  total: int | None = None) -> CopyReport:
        """Process *work_items* in order and return a :class:`CopyReport`.

        A folder item with ``include_children`` brings its whole subtree,
        regardless of the children's own recorded states.

        Args:
            work_items: Pre-ordered items from
                :func:`~treecopy.collapse.collect_work_items`.
            destination_id: Destination root folder id.
            mappings: Rename rules applied to every name written.
            total: Progress denominator; defaults to the count implied by
                *work_items* (equal to :func:`~treecopy.collapse.count_items`
                for collapser output).

        Raises:
            ConfigurationError: If *destination_id* is empty.
            RemoteOperationError: On the first failed create or copy.
        """
        if not destination_id:
            raise ConfigurationError("No destination folder id given")
        self.folders = DestinationFolders(destination_id)
        self._mappings = tuple(mappings)
        if total is None:
            total = _count_work(self.tree, work_items)
        report = self._report = CopyReport(total=total)

        log.debug("copy run: %d work items, %d units, destination %s",
                  len(work_items), total, destination_id)
        for item in work_items:
            nodes = self.tree.walk((item.node,)) if item.include_children else (item.node,)
            for node in nodes:
                await self._process(node)
                report.processed += 1
                if self.progress is not None:
                    self.progress(report.processed, total)
        return report

    # ------------------------------------------------------------------
    async def _process(self, node: Node) -> None:
        if node.is_folder and node.id in self.folders:
            # Already materialized as the ancestor of an earlier item.
            log.debug("folder %s already created, not creating again", node.path)
            return
        key, parent_id = await self._resolve_parent(node)
        if node.is_folder:
            await self._create_folder(node, key, parent_id)
        else:
            await self._copy_file(node, key, parent_id)

    async def _resolve_parent(self, node: Node) -> tuple[FolderKey, str]:
        """Return the destination folder *node* goes into, creating it if needed.

        Missing ancestors are created top-down and memoized.  When the
        source parent cannot be located the destination root is used and a
        ``PARENT_MISSING`` event is emitted.
        """
        pending: list[Node] = []
        current = node
        while True:
            parent = _locate_parent(self.tree, current)
            if parent is VIRTUAL_ROOT:
                key: FolderKey = VIRTUAL_ROOT
                break
            if parent is None:
                key = VIRTUAL_ROOT
                self._parent_missing(current)
                break
            if parent.id in self.folders:
                key = parent.id
                break
            pending.append(parent)
            current = parent

        parent_id = self.folders.get(key)
        for ancestor in reversed(pending):
            parent_id = await self._create_folder(ancestor, key, parent_id)
            key = ancestor.id
        return key, parent_id

    def _parent_missing(self, node: Node) -> None:
        msg = (f"Parent folder {node.parent_path!r} of {node.path!r} not found "
               f"in source tree; placing it in the destination root")
        log.warning(msg)
        self._report.warnings.append(msg)
        self._emit(CopyEvent(EventKind.PARENT_MISSING, node, dest_id=self.folders.root_id))

    async def _create_folder(self, node: Node, parent_key: FolderKey, parent_id: str) -> str:
        name = apply_mappings(node.name, self._mappings)
        log.debug("create folder %r in %s (source %s)", name, parent_id, node.path)
        try:
            new_id = await self.client.create_folder(name, parent_id)
        except Exception as exc:
            raise self._failed(node, name, "Failed to create folder", exc) from exc
        dest_path = self.folders.record(node.id, new_id, parent_key, name)
        self._report.actions.append(
            CopyAction(ActionKind.MKDIR, node.id, node.path, dest_path, new_id))
        self._emit(CopyEvent(EventKind.FOLDER_CREATED, node, dest_id=new_id, name=name))
        return new_id

    async def _copy_file(self, node: Node, parent_key: FolderKey, parent_id: str) -> str:
        name = apply_mappings(node.name, self._mappings)
        log.debug("copy %s to %r in %s", node.path, name, parent_id)
        try:
            new_id = await self.client.copy_file(node.id, parent_id, name)
        except Exception as exc:
            raise self._failed(node, name, "Failed to copy file", exc) from exc
        dest_path = join_path(self.folders.dest_path(parent_key), name)
        self._report.actions.append(
            CopyAction(ActionKind.COPY, node.id, node.path, dest_path, new_id))
        self._emit(CopyEvent(EventKind.FILE_COPIED, node, dest_id=new_id, name=name))
        return new_id

    def _failed(self, node: Node, name: str, what: str, exc: Exception) -> RemoteOperationError:
        log.error("%s %s: %s; aborting copy run", what, node.path, exc)
        self._emit(CopyEvent(EventKind.ERROR, node, name=name, error=exc))
        return RemoteOperationError(f"{what}: {exc}", item_name=node.name,
                                    path=node.path, report=self._report)

    def _emit(self, event: CopyEvent) -> None:
        if self.observer is not None:
            self.observer(event)


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------

async def copy_selection(
    client: StorageClient,
    selection: SelectionMap,
    destination_id: str,
    mappings: Iterable[RenameMapping] = (),
    *,
    observer: Observer | None = None,
    progress: ProgressCallback | None = None,
    dry_run: bool = False,
) -> CopyReport:
    """Copy everything selected in *selection* under *destination_id*.

    Collects the work items and the item count from *selection*, then runs
    a :class:`CopyOrchestrator`.  With *dry_run* no remote call is made
    and the returned report carries synthetic destination ids.
    """
    if not destination_id:
        raise ConfigurationError("No destination folder id given")
    work_items = selection.work_items()
    total = selection.item_count()
    if dry_run:
        client = _DryRunClient()
    orchestrator = CopyOrchestrator(client, selection.tree,
                                    observer=observer, progress=progress)
    report = await orchestrator.run(work_items, destination_id, mappings, total=total)
    report.dry_run = dry_run
    return report


async def plan_copy(
    tree: Tree,
    work_items: Sequence[WorkItem],
    destination_id: str,
    mappings: Iterable[RenameMapping] = (),
    *,
    total: int | None = None,
) -> CopyReport:
    """Dry run of :meth:`CopyOrchestrator.run`: same traversal, no remote calls."""
    orchestrator = CopyOrchestrator(_DryRunClient(), tree)
    report = await orchestrator.run(work_items, destination_id, mappings, total=total)
    report.dry_run = True
    return report
