"""Storage client used for dry runs."""

from __future__ import annotations

import itertools


class _DryRunClient:
    """Storage client that performs no remote calls.

    Only the calls a copy run makes are provided.  Create and copy return
    synthetic ids (``dry-run-1``, ``dry-run-2``, ...) so a dry run walks
    exactly the path a real run would.
    """

    def __init__(self) -> None:
        self._ids = itertools.count(1)
        self.calls: list[tuple] = []

    def _next_id(self) -> str:
        return f"dry-run-{next(self._ids)}"

    async def create_folder(self, name: str, parent_id: str) -> str:
        self.calls.append(("create_folder", name, parent_id))
        return self._next_id()

    async def copy_file(self, file_id: str, parent_id: str, new_name: str | None = None) -> str:
        self.calls.append(("copy_file", file_id, parent_id, new_name))
        return self._next_id()
