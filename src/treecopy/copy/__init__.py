"""Replicate a collapsed selection into a destination folder.

:class:`CopyOrchestrator` walks the work items produced by
:func:`~treecopy.collapse.collect_work_items`, creates destination folders
on demand (memoized per source folder), renames every item with the given
:class:`~treecopy.rename.RenameMapping` list, and copies files.  Calls are
issued one at a time; the first failure aborts the run.

``plan_copy`` and ``copy_selection(..., dry_run=True)`` walk the same
path without touching the storage service.
"""

from ._types import (
    ActionKind,
    CopyAction,
    CopyEvent,
    CopyReport,
    EventKind,
    Observer,
    ProgressCallback,
)
from ._resolve import VIRTUAL_ROOT, DestinationFolders
from ._ops import CopyOrchestrator, copy_selection, plan_copy

__all__ = [
    "ActionKind", "CopyAction", "CopyEvent", "CopyReport", "EventKind",
    "Observer", "ProgressCallback",
    "VIRTUAL_ROOT", "DestinationFolders",
    "CopyOrchestrator", "copy_selection", "plan_copy",
]
