"""Reduce a selection map to the work a copy run has to do."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from .selection import SelectionState

if TYPE_CHECKING:
    from .selection import SelectionMap
    from .tree import Node, Tree


@dataclass(frozen=True)
class WorkItem:
    """One unit the copy orchestrator consumes.

    Attributes:
        node: The source node.
        selection: State the item was collected in (``ALL`` or ``FOLDER_ONLY``).
        include_children: ``True`` when the whole subtree comes along.
    """
    node: Node
    selection: SelectionState
    include_children: bool


def collect_work_items(tree: Tree, selection: SelectionMap) -> list[WorkItem]:
    """Return the minimal covering list of work items, in pre-order.

    * ``all``: emit with ``include_children=True``; the subtree is implied
      and not visited.
    * ``folder-only``: emit with ``include_children=False`` and keep going
      into the children, some of which may be selected on their own.
    * ``partial``: emit nothing for the node, visit the children.
    * ``none``: skip the subtree.
    """
    items: list[WorkItem] = []
    stack = list(reversed(tree.roots))
    while stack:
        node = stack.pop()
        state = selection.get(node.id)
        if state == SelectionState.ALL:
            items.append(WorkItem(node, state, True))
        elif state == SelectionState.FOLDER_ONLY:
            items.append(WorkItem(node, state, False))
            stack.extend(reversed(node.children))
        elif state == SelectionState.PARTIAL:
            stack.extend(reversed(node.children))
    return items


def count_items(tree: Tree, selection: SelectionMap) -> int:
    """Return how many nodes a copy run will touch.

    An ``all`` node counts itself plus every descendant, ``folder-only``
    counts one (plus whatever its children contribute), ``partial`` counts
    only what its children contribute, ``none`` counts zero.  This is the
    progress denominator, not ``len(collect_work_items(...))``.
    """
    total = 0
    stack = list(tree.roots)
    while stack:
        node = stack.pop()
        state = selection.get(node.id)
        if state == SelectionState.ALL:
            total += tree.subtree_size(node)
        elif state == SelectionState.FOLDER_ONLY:
            total += 1
            stack.extend(node.children)
        elif state == SelectionState.PARTIAL:
            stack.extend(node.children)
    return total
