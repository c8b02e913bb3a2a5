from .tree import Node, NodeKind, Tree, load_tree
from .selection import SelectionMap, SelectionState
from .collapse import WorkItem, collect_work_items, count_items
from .rename import RenameMapping, apply_mappings, parse_mapping
from .client import FOLDER_MIME_TYPE, Entry, EntryPage, StorageClient
from .memory import MemoryClient
from .exceptions import ConfigurationError, RemoteOperationError, TreeCopyError, UnknownNodeError
from .copy import CopyAction, CopyEvent, CopyOrchestrator, CopyReport, EventKind, copy_selection, plan_copy
from ._exclude import PatternFilter

__all__ = [
    "Node", "NodeKind", "Tree", "load_tree",
    "SelectionMap", "SelectionState",
    "WorkItem", "collect_work_items", "count_items",
    "RenameMapping", "apply_mappings", "parse_mapping",
    "FOLDER_MIME_TYPE", "Entry", "EntryPage", "StorageClient", "MemoryClient",
    "ConfigurationError", "RemoteOperationError", "TreeCopyError", "UnknownNodeError",
    "CopyAction", "CopyEvent", "CopyOrchestrator", "CopyReport", "EventKind",
    "copy_selection", "plan_copy",
    "PatternFilter",
]
