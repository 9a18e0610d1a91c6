"""Export liveness state tracked per file during the sweep."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Set


@dataclass
class ExportLiveness:
    """Either a specific set of used export names, or every export used.

    ``all_used`` is set by wildcard (namespace) imports. It is kept apart from
    ``names`` so that an export literally called ``*`` is never confused with it.
    """

    names: Set[str] = field(default_factory=set)
    all_used: bool = False

    def mark(self, name: str) -> None:
        self.names.add(name)

    def mark_all(self) -> None:
        self.all_used = True

    def is_used(self, name: str) -> bool:
        return self.all_used or name in self.names


__all__ = ["ExportLiveness"]
