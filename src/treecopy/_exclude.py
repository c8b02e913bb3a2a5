"""Pattern matching for selecting or excluding tree nodes by path.

Combines patterns given on the command line with patterns read from a
file into a single predicate used by
:meth:`~treecopy.selection.SelectionMap.select_matching`.

Pattern syntax follows gitignore rules (implemented by
``dulwich.ignore.IgnoreFilter``): ``*.tmp`` matches at any depth,
``/Reports`` only at the top level, ``drafts/`` only folders, and ``!``
negates an earlier pattern.
"""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

from dulwich.ignore import IgnoreFilter

from .tree import Node


class PatternFilter:
    """Combines ``--select``/``--exclude`` style patterns and a pattern file."""

    def __init__(
        self,
        *,
        patterns: Sequence[str] | None = None,
        patterns_from: str | None = None,
    ) -> None:
        lines: list[bytes] = []
        for p in patterns or ():
            lines.append(p.encode("utf-8"))
        if patterns_from is not None:
            for raw in Path(patterns_from).read_bytes().splitlines():
                line = raw.strip()
                if line and not line.startswith(b"#"):
                    lines.append(line)
        self._filter: IgnoreFilter | None = IgnoreFilter(lines) if lines else None

    # ------------------------------------------------------------------
    @property
    def active(self) -> bool:
        """True if any pattern is configured."""
        return self._filter is not None

    # ------------------------------------------------------------------
    def matches(self, path: str, *, is_dir: bool = False) -> bool:
        """Check a tree path (``/A/a1`` form) against the patterns."""
        if self._filter is None:
            return False
        check = path.lstrip("/")
        if not check:
            return False
        if is_dir:
            check += "/"
        return self._filter.is_ignored(check) is True

    def matches_node(self, node: Node) -> bool:
        return self.matches(node.path, is_dir=node.is_folder)
