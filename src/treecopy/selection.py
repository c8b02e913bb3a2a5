"""Hierarchical selection state.

A :class:`SelectionMap` owns the mapping from node id to
:class:`SelectionState` for one loaded :class:`~treecopy.tree.Tree`.  The
caller (a UI, the CLI) holds the only reference, changes it through
:meth:`~SelectionMap.cycle`, :meth:`~SelectionMap.set_state` and
:meth:`~SelectionMap.set_all`, and re-renders from :meth:`~SelectionMap.get`.

Every explicit change is propagated down (a folder set to ``all`` forces
its whole subtree to ``all``; ``none`` and ``folder-only`` force it to
``none``) and then recomputed up to the top level:

* every child covered (``all``, or ``partial`` with every descendant
  selected) → parent ``all``;
* every child ``none`` → parent ``none``, or ``folder-only`` if the user
  pinned the parent as ``folder-only``;
* anything else → parent ``partial``.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, Any, Iterator, Mapping

from .tree import Node, Tree

if TYPE_CHECKING:
    from ._exclude import PatternFilter
    from .collapse import WorkItem

log = logging.getLogger(__name__)


class SelectionState(str, Enum):
    """Per-node selection state.

    Members: ``NONE``, ``ALL``, ``FOLDER_ONLY``, ``PARTIAL``.  ``PARTIAL``
    is derived and never set by a user action.
    """
    NONE = "none"
    ALL = "all"
    FOLDER_ONLY = "folder-only"
    PARTIAL = "partial"

    def __str__(self) -> str:          # noqa: D105
        return self.value


_NONE = SelectionState.NONE
_ALL = SelectionState.ALL
_FOLDER_ONLY = SelectionState.FOLDER_ONLY
_PARTIAL = SelectionState.PARTIAL


def _next_state(node: Node, current: SelectionState) -> SelectionState:
    """Transition table for :meth:`SelectionMap.cycle`."""
    if node.is_folder and node.children:
        if current == _ALL:
            return _FOLDER_ONLY
        if current == _FOLDER_ONLY:
            return _NONE
        return _ALL
    return _NONE if current == _ALL else _ALL


class SelectionMap:
    """Mutable selection state for every node of *tree*.

    Unknown node ids are absorbed: :meth:`get` returns ``NONE`` and the
    mutating operations leave the map untouched.
    """

    def __init__(self, tree: Tree) -> None:
        self.initialize(tree)

    def initialize(self, tree: Tree) -> None:
        """Bind to *tree* and set every node to ``NONE``."""
        self.tree = tree
        self._states: dict[str, SelectionState] = {n.id: _NONE for n in tree}
        self._pinned: set[str] = set()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get(self, node_id: str) -> SelectionState:
        return self._states.get(node_id, _NONE)

    def items(self) -> Iterator[tuple[Node, SelectionState]]:
        """Yield ``(node, state)`` for every node in pre-order."""
        for node in self.tree:
            yield node, self._states[node.id]

    def to_dict(self) -> dict[str, str]:
        """Return ``{node_id: state}`` with plain string values."""
        return {node_id: state.value for node_id, state in self._states.items()}

    def work_items(self) -> list[WorkItem]:
        """See :func:`~treecopy.collapse.collect_work_items`."""
        from .collapse import collect_work_items
        return collect_work_items(self.tree, self)

    def item_count(self) -> int:
        """See :func:`~treecopy.collapse.count_items`."""
        from .collapse import count_items
        return count_items(self.tree, self)

    # ------------------------------------------------------------------
    # User actions
    # ------------------------------------------------------------------

    def cycle(self, node_id: str) -> SelectionState:
        """Advance *node_id* to its next state and return the new state.

        Folders with children go none → all → folder-only → none; files and
        empty folders go none → all → none.  A ``partial`` node goes to
        ``all``.
        """
        node = self.tree.get(node_id)
        if node is None:
            log.debug("cycle: unknown node id %r", node_id)
            return self.get(node_id)
        return self._apply(node, _next_state(node, self.get(node_id)))

    def set_state(self, node_id: str, state: SelectionState | str) -> SelectionState:
        """Explicitly set *node_id* to ``all``, ``none`` or ``folder-only``.

        Raises:
            ValueError: For ``partial``, an unrecognized state, or
                ``folder-only`` on a file.
        """
        state = SelectionState(state)
        if state == _PARTIAL:
            raise ValueError("'partial' is derived and cannot be set directly")
        node = self.tree.get(node_id)
        if node is None:
            log.debug("set_state: unknown node id %r", node_id)
            return self.get(node_id)
        if state == _FOLDER_ONLY and not node.is_folder:
            raise ValueError(f"'folder-only' applies to folders, not {node.path}")
        return self._apply(node, state)

    def set_all(self, state: SelectionState | str) -> None:
        """Set every node to ``all`` or ``none`` (select/deselect all).

        No propagation runs; a uniform map is already consistent.
        """
        state = SelectionState(state)
        if state not in (_ALL, _NONE):
            raise ValueError(f"set_all accepts 'all' or 'none', not {state.value!r}")
        for node_id in self._states:
            self._states[node_id] = state
        self._pinned.clear()

    def select_matching(self, patterns: PatternFilter, state: SelectionState | str) -> int:
        """Apply :meth:`set_state` to every node matching *patterns*.

        Nodes are visited in pre-order.  Once a folder is set to ``all`` or
        ``none`` its subtree is skipped.  ``folder-only`` only applies to
        matching folders.  Returns the number of nodes set.
        """
        state = SelectionState(state)
        count = 0
        stack = list(reversed(self.tree.roots))
        while stack:
            node = stack.pop()
            if patterns.matches_node(node) and (state != _FOLDER_ONLY or node.is_folder):
                self.set_state(node.id, state)
                count += 1
                if state != _FOLDER_ONLY:
                    continue
            stack.extend(reversed(node.children))
        return count

    def load(self, mapping: Mapping[str, Any]) -> int:
        """Replace the map with an externally produced ``{node_id: state}``.

        Ids not in the tree and unrecognized states are dropped; nodes not
        mentioned become ``none``.  Nothing is propagated down; ancestors of
        every loaded node are recomputed so ``partial`` and covered folders
        stay derived.  Returns the number of entries accepted.
        """
        accepted = 0
        self._pinned.clear()
        for node in self.tree:
            raw = mapping.get(node.id)
            try:
                state = SelectionState(raw)
            except ValueError:
                state = _NONE
            else:
                accepted += 1
            self._states[node.id] = state
            if state == _FOLDER_ONLY and node.is_folder:
                self._pinned.add(node.id)
        # Descendants before ancestors, so each folder is recomputed last
        # from final child states.
        for node in reversed(list(self.tree)):
            if self._states[node.id] != _NONE:
                self._recompute_up(node)
        dropped = len(mapping) - accepted
        if dropped:
            log.debug("load: dropped %d unknown or invalid entries", dropped)
        return accepted

    # ------------------------------------------------------------------
    # Propagation
    # ------------------------------------------------------------------

    def _apply(self, node: Node, state: SelectionState) -> SelectionState:
        self._states[node.id] = state
        if state == _FOLDER_ONLY:
            self._pinned.add(node.id)
        else:
            self._pinned.discard(node.id)
        self._propagate_down(node, state)
        self._recompute_up(node)
        return state

    def _propagate_down(self, node: Node, state: SelectionState) -> None:
        forced = _ALL if state == _ALL else _NONE
        stack = list(node.children)
        while stack:
            child = stack.pop()
            self._states[child.id] = forced
            self._pinned.discard(child.id)
            stack.extend(child.children)

    def _recompute_up(self, node: Node) -> None:
        parent = self.tree.parent(node)
        while parent is not None:
            if all(self._covered(c) for c in parent.children):
                new = _ALL
            elif all(self._states[c.id] == _NONE for c in parent.children):
                new = _FOLDER_ONLY if parent.id in self._pinned else _NONE
            else:
                new = _PARTIAL
            self._states[parent.id] = new
            parent = self.tree.parent(parent)

    def _covered(self, node: Node) -> bool:
        """True if *node* and everything below it is selected."""
        stack = [node]
        while stack:
            n = stack.pop()
            state = self._states[n.id]
            if state == _ALL:
                continue
            if state == _PARTIAL and n.children:
                stack.extend(n.children)
                continue
            return False
        return True
