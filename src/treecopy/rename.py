"""Literal find/replace renaming applied to names written at the destination."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable


@dataclass(frozen=True)
class RenameMapping:
    """One rename rule.

    An empty *find* means "prepend *replace*"; otherwise every literal,
    non-overlapping occurrence of *find* is replaced, left to right.
    """
    find: str
    replace: str

    def apply(self, name: str) -> str:
        if not self.find:
            return self.replace + name
        return name.replace(self.find, self.replace)


def apply_mappings(name: str, mappings: Iterable[RenameMapping]) -> str:
    """Apply *mappings* in order, each one to the previous one's output.

    Returns *name* unchanged when *mappings* is empty.
    """
    for mapping in mappings:
        name = mapping.apply(name)
    return name


def parse_mapping(text: str) -> RenameMapping:
    """Parse the ``FROM=TO`` command-line form (``=TO`` prepends ``TO``).

    Only the first ``=`` separates; ``TO`` may itself contain ``=``.
    """
    find, sep, replace = text.partition("=")
    if not sep:
        raise ValueError(f"Invalid rename mapping {text!r} (expected FROM=TO)")
    return RenameMapping(find, replace)
