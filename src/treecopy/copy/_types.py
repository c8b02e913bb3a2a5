"""Data structures for copy runs."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from ..tree import Node


class ActionKind(str, Enum):
    """Kind of remote action: ``MKDIR`` or ``COPY``."""
    MKDIR = "mkdir"
    COPY = "copy"

    def __str__(self) -> str:          # noqa: D105
        return self.value


class EventKind(str, Enum):
    """Kind of :class:`CopyEvent` emitted to observers."""
    FOLDER_CREATED = "folder-created"
    FILE_COPIED = "file-copied"
    PARENT_MISSING = "parent-missing"
    ERROR = "error"

    def __str__(self) -> str:          # noqa: D105
        return self.value


@dataclass
class CopyAction:
    """A folder created or a file copied at the destination.

    Attributes:
        kind: :class:`ActionKind` value.
        source_id: Id of the source node.
        source_path: Path of the source node (``/A/a1``).
        dest_path: Renamed path relative to the destination root.
        dest_id: Id returned by the storage service.
    """
    kind: ActionKind
    source_id: str
    source_path: str
    dest_path: str
    dest_id: str

    def to_dict(self) -> dict[str, str]:
        return {
            "action": str(self.kind),
            "source_id": self.source_id,
            "source_path": self.source_path,
            "dest_path": self.dest_path,
            "dest_id": self.dest_id,
        }


@dataclass
class CopyEvent:
    """Structured notification emitted during a run.

    Attributes:
        kind: :class:`EventKind` value.
        node: The source node concerned.
        dest_id: Destination id (created folder, copied file, or the
            fallback parent for ``PARENT_MISSING``).
        name: Name written at the destination.
        error: The exception for ``ERROR`` events.
    """
    kind: EventKind
    node: Node
    dest_id: str | None = None
    name: str | None = None
    error: BaseException | None = None


Observer = Callable[[CopyEvent], None]
ProgressCallback = Callable[[int, int], None]


@dataclass
class CopyReport:
    """Result of a copy run (or of a dry run via :func:`plan_copy`).

    Attributes:
        actions: Folders created and files copied, in the order they happened.
        processed: Counted units of work completed.
        total: Progress denominator (from :func:`~treecopy.collapse.count_items`).
        warnings: Non-fatal problems (e.g. a parent that could not be
            located and fell back to the destination root).
        dry_run: ``True`` if no remote call was made.
    """
    actions: list[CopyAction] = field(default_factory=list)
    processed: int = 0
    total: int = 0
    warnings: list[str] = field(default_factory=list)
    dry_run: bool = False

    @property
    def folders(self) -> list[CopyAction]:
        """Folders created, in creation order."""
        return [a for a in self.actions if a.kind == ActionKind.MKDIR]

    @property
    def files(self) -> list[CopyAction]:
        """Files copied, in copy order."""
        return [a for a in self.actions if a.kind == ActionKind.COPY]

    def to_dict(self) -> dict:
        return {
            "dry_run": self.dry_run,
            "processed": self.processed,
            "total": self.total,
            "actions": [a.to_dict() for a in self.actions],
            "warnings": list(self.warnings),
        }
