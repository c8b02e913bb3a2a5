"""Exceptions for treecopy."""

from __future__ import annotations


class TreeCopyError(Exception):
    """Base class for all treecopy errors."""


class UnknownNodeError(TreeCopyError, LookupError):
    """Raised when a node id is not part of the loaded tree.

    Selection operations absorb unknown ids silently; only direct lookups
    such as ``tree[node_id]`` raise this.
    """


class ConfigurationError(TreeCopyError, ValueError):
    """Raised when a required source or destination identifier is missing."""


class RemoteOperationError(TreeCopyError):
    """Raised when a list, create-folder or copy call fails.

    A copy run stops at the first such failure.  Folders and files created
    before the failure are left in place; the partial result is available
    on :attr:`report`.

    Attributes:
        item_name: Name of the source item being processed, if any.
        path: Source path of that item, if any.
        report: The :class:`~treecopy.copy.CopyReport` accumulated up to the
            failure (``None`` outside a copy run).
    """

    def __init__(self, message: str, *, item_name: str | None = None,
                 path: str | None = None, report=None) -> None:
        super().__init__(message)
        self.item_name = item_name
        self.path = path
        self.report = report

    def __str__(self) -> str:
        msg = super().__str__()
        if self.item_name is not None:
            return f"{self.item_name}: {msg}"
        return msg
